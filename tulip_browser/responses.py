"""
Response rendering for the selected thread.

``display`` updates the heading synchronously and fetches in the background.
Fetches are never cancelled; instead every call bumps a generation number and
results that belong to an older generation are dropped, so a slow response
for a previously selected thread cannot overwrite the current one.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .config import NO_RESPONSES_TEXT, RESPONSES_ERROR_TEXT
from .viewmodels import error_message, response_entry

if TYPE_CHECKING:
    from .backend import Backend
    from .images import ImageOutcome, ImageProxyLoader
    from .views import ResponseListView

logger = logging.getLogger("tulip_browser.responses")


class ResponseRenderer:
    """Fetches one thread's responses and renders them into a ``ResponseListView``."""

    def __init__(self, backend: Backend, view: ResponseListView, image_loader: ImageProxyLoader) -> None:
        self.backend = backend
        self.view = view
        self.image_loader = image_loader
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

    def display(self, thread_id: str, title: str) -> asyncio.Task:
        """Show ``title`` immediately and start fetching ``thread_id``.

        Returns the fetch task; callers may ignore it.
        """
        self._generation += 1
        generation = self._generation

        self.view.clear()
        self.view.hide_placeholder()
        self.view.show_heading(title)

        task = asyncio.create_task(self._fetch_and_render(thread_id, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    async def _fetch_and_render(self, thread_id: str, generation: int) -> None:
        logger.debug("[TulipBrowser Responses] Fetching thread %s (generation %d).", thread_id, generation)
        try:
            responses = await self.backend.fetch_thread_content(thread_id)
        except Exception as exc:
            if self._is_stale(generation):
                logger.info("[TulipBrowser Responses] Dropping stale failure for thread %s: %s", thread_id, exc)
                return
            logger.warning("[TulipBrowser Responses] Loading thread %s failed: %s", thread_id, exc)
            self.view.show_message(error_message(RESPONSES_ERROR_TEXT, exc))
            return

        if self._is_stale(generation):
            logger.info(
                "[TulipBrowser Responses] Dropping stale result for thread %s (%d responses).",
                thread_id,
                len(responses),
            )
            return

        if not responses:
            self.view.show_message(NO_RESPONSES_TEXT)
            return

        for item in responses:
            entry = response_entry(item)
            handle = self.view.append_entry(entry)
            self._proxy_images(handle, entry.content, generation)
        logger.debug("[TulipBrowser Responses] Rendered %d responses for thread %s.", len(responses), thread_id)

    def _proxy_images(self, handle: int, markup: str, generation: int) -> None:
        images = self.image_loader.candidates(markup)
        if not images:
            return

        def apply(outcome: ImageOutcome) -> None:
            if self._is_stale(generation):
                return
            self.view.update_image(handle, outcome)

        self.image_loader.schedule(images, apply)

    async def settle(self) -> None:
        """Wait until pending fetches and their image rewrites have finished."""
        while self._tasks:
            pending = list(self._tasks)
            await asyncio.gather(*pending, return_exceptions=True)
            self._tasks.difference_update(pending)
        await self.image_loader.drain()
