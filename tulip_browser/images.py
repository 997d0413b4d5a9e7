"""
Image proxy loading.

Boards hot-link images from hosts that refuse requests without a matching
referrer. Sources on those hosts are re-fetched through the backend and
replaced by a ``data:`` URI. Every image is an independent task: a failure
only marks that image's alt text and never reaches its siblings.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

from bs4 import BeautifulSoup

from .config import DEFAULT_IMAGE_PREFIXES, IMAGE_FAILED_ALT_TEXT

if TYPE_CHECKING:
    from .backend import Backend

logger = logging.getLogger("tulip_browser.images")


@dataclass(frozen=True)
class ImageRef:
    """An ``<img>`` inside one entry's markup, addressed by its position."""

    index: int
    src: str


@dataclass(frozen=True)
class ImageOutcome:
    """Result of one proxy fetch. On failure ``src`` keeps the original."""

    image: ImageRef
    ok: bool
    src: str
    alt: str | None = None
    error: str | None = None


def find_images(markup: str) -> list[ImageRef]:
    """Every ``<img>`` with a ``src`` in document order."""
    soup = BeautifulSoup(markup or "", "html.parser")
    refs = []
    for index, tag in enumerate(soup.find_all("img")):
        src = tag.get("src")
        if src:
            refs.append(ImageRef(index=index, src=str(src)))
    return refs


def apply_outcome(markup: str, outcome: ImageOutcome) -> str:
    """Rewrite the addressed ``<img>`` in ``markup`` with the outcome."""
    soup = BeautifulSoup(markup or "", "html.parser")
    tags = soup.find_all("img")
    if outcome.image.index >= len(tags):
        return markup
    tag = tags[outcome.image.index]
    tag["src"] = outcome.src
    if outcome.alt is not None:
        tag["alt"] = outcome.alt
    return str(soup)


class ImageProxyLoader:
    """Rewrites qualifying image sources to proxied data URIs."""

    def __init__(self, backend: Backend, prefixes: Iterable[str] = DEFAULT_IMAGE_PREFIXES) -> None:
        self.backend = backend
        self.prefixes = tuple(prefixes)
        self._tasks: set[asyncio.Task] = set()

    def qualifies(self, src: str) -> bool:
        return any(src.startswith(prefix) for prefix in self.prefixes)

    def candidates(self, markup: str) -> list[ImageRef]:
        return [ref for ref in find_images(markup) if self.qualifies(ref.src)]

    async def load(self, image: ImageRef) -> ImageOutcome:
        """Proxy one image. Never raises; failures become alt text."""
        try:
            data_uri = await self.backend.fetch_image_as_data_uri(image.src)
        except Exception as exc:
            logger.warning("[TulipBrowser Images] Proxy fetch failed for %s: %s", image.src, exc)
            return ImageOutcome(
                image=image,
                ok=False,
                src=image.src,
                alt=IMAGE_FAILED_ALT_TEXT.format(src=image.src),
                error=str(exc),
            )
        return ImageOutcome(image=image, ok=True, src=data_uri)

    def schedule(
        self,
        images: Iterable[ImageRef],
        on_outcome: Callable[[ImageOutcome], None],
    ) -> list[asyncio.Task]:
        """Start one task per image; each reports to ``on_outcome`` when done.

        Completion order is unspecified.
        """
        tasks = []
        for image in images:
            task = asyncio.create_task(self._run(image, on_outcome))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        return tasks

    async def _run(self, image: ImageRef, on_outcome: Callable[[ImageOutcome], None]) -> ImageOutcome:
        outcome = await self.load(image)
        try:
            on_outcome(outcome)
        except Exception:
            logger.exception("[TulipBrowser Images] Applying image outcome for %s failed.", image.src)
        return outcome

    async def drain(self) -> None:
        """Wait for every scheduled image task (used on shutdown and in tests)."""
        while self._tasks:
            pending = list(self._tasks)
            await asyncio.gather(*pending, return_exceptions=True)
            self._tasks.difference_update(pending)
