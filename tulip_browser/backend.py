"""Backend commands: thread index, thread content, image proxy and settings.

``Backend`` is the contract the UI controllers depend on. ``HttpBackend``
implements it against a 2ch-style board (``subject.json`` + ``.dat`` files)
with a JSON file for settings. Every failure is raised as ``BackendError``;
nothing here retries.
"""

from __future__ import annotations

import asyncio
import base64
import html
import json
import logging
import re
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import httpx

from .config import (
    SETTINGS_FILENAME,
    SETTINGS_KEY,
    UNKNOWN_DATE_TEXT,
    USER_AGENT,
    BoardConfig,
)
from .exceptions import BackendError
from .models import ResponseItem, Settings, Thread

logger = logging.getLogger("tulip_browser.backend")

JST = timezone(timedelta(hours=9), "JST")
DAT_FIELD_SEPARATOR = "<>"
ID_MARKER = " ID:"
_ID_TOKEN_RE = re.compile(r"ID:([A-Za-z0-9_\-]+)")
FALLBACK_IMAGE_CONTENT_TYPE = "image/jpeg"


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Backend(Protocol):
    """Asynchronous request/response commands used by the controllers."""

    async def fetch_threads(self) -> list[Thread]: ...

    async def fetch_thread_content(self, thread_id: str) -> list[ResponseItem]: ...

    async def fetch_image_as_data_uri(self, url: str) -> str: ...

    async def get_settings(self) -> Settings: ...

    async def save_settings(self, settings: Settings) -> None: ...


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def format_timestamp(timestamp_secs: Any) -> str:
    """Render a Unix timestamp as ``YYYY/MM/DD HH:MM`` in Japan time."""
    try:
        moment = datetime.fromtimestamp(int(timestamp_secs), tz=JST)
    except (TypeError, ValueError, OverflowError, OSError):
        return UNKNOWN_DATE_TEXT
    return moment.strftime("%Y/%m/%d %H:%M")


def parse_subject_entry(entry: dict[str, Any]) -> Thread:
    """Convert one ``subject.json`` record into a ``Thread``.

    The ``thread`` key arrives as either a number or a string.
    """
    try:
        raw_id = entry["thread"]
        title = entry["title"]
        response_count = int(entry["number"])
    except (KeyError, TypeError, ValueError) as exc:
        raise BackendError(f"Malformed thread entry: {entry!r}") from exc
    return Thread(
        id=str(raw_id),
        title=html.unescape(str(title)),
        created_at=format_timestamp(entry.get("date")),
        response_count=response_count,
    )


def parse_user_id(user_id_info: str) -> str | None:
    """Extract the bare poster ID from text such as ``"ID:R780OCsAQ(1/3)"``."""
    match = _ID_TOKEN_RE.search(user_id_info)
    return match.group(1) if match else None


def split_date_and_id(field: str) -> tuple[str, str]:
    """Split ``"2024/01/01(Mon) 12:00:00.00 ID:abc"`` into date and ID parts."""
    position = field.rfind(ID_MARKER)
    if position == -1:
        return field.strip(), ""
    return field[:position].strip(), field[position:].strip()


@dataclass(frozen=True)
class _DatLine:
    name: str
    mail: str
    date: str
    user_id_info: str
    parsed_user_id: str | None
    body: str


def parse_dat(text: str) -> list[ResponseItem]:
    """Parse a ``.dat`` thread file into ordered ``ResponseItem`` records.

    Each non-blank line is ``name<>mail<>date-and-id<>body[<>title]``. ID
    totals are counted over the whole thread first, then occurrences are
    numbered in file order.
    """
    lines: list[_DatLine] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        parts = line.split(DAT_FIELD_SEPARATOR, 4)
        if len(parts) < 4:
            logger.warning("[TulipBrowser Backend] Skipping malformed dat line %d: %r", line_no, line[:80])
            continue
        date, user_id_info = split_date_and_id(parts[2])
        lines.append(
            _DatLine(
                name=parts[0],
                mail=parts[1],
                date=date,
                user_id_info=user_id_info,
                parsed_user_id=parse_user_id(user_id_info),
                body=parts[3],
            )
        )

    totals = Counter(line.parsed_user_id for line in lines if line.parsed_user_id)
    seen: Counter[str] = Counter()
    responses: list[ResponseItem] = []
    for index, line in enumerate(lines, start=1):
        occurrence = total = 0
        if line.parsed_user_id:
            seen[line.parsed_user_id] += 1
            occurrence = seen[line.parsed_user_id]
            total = totals[line.parsed_user_id]
        responses.append(
            ResponseItem(
                number=index,
                author=line.name,
                mail=line.mail or None,
                created_at=line.date,
                user_id_info=line.user_id_info or None,
                parsed_user_id=line.parsed_user_id,
                id_occurrence_count=occurrence,
                id_total_count=total,
                content=line.body,
            )
        )
    return responses


def validate_thread_id(thread_id: str) -> str:
    """Reject identifiers that cannot address a ``.dat`` file."""
    thread_id = (thread_id or "").strip()
    if not thread_id:
        raise BackendError("No thread id was given.")
    if len(thread_id) < 4:
        raise BackendError(f"Thread id is too short: '{thread_id}'.")
    return thread_id


# ---------------------------------------------------------------------------
# Settings persistence
# ---------------------------------------------------------------------------


class SettingsStore:
    """JSON file holding ``{"app_settings": {...}}``.

    A missing file, or a file without the settings key, is initialised with
    the defaults. An unreadable or corrupt file is an error.
    """

    def __init__(self, config_dir: str | Path, filename: str = SETTINGS_FILENAME) -> None:
        self.path = Path(config_dir) / filename

    def load(self) -> Settings:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("[TulipBrowser Settings] %s not found; writing defaults.", self.path)
            return self._save_defaults({})
        except OSError as exc:
            raise BackendError(f"Could not read settings file '{self.path}': {exc}") from exc

        try:
            document = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as exc:
            raise BackendError(f"Settings file '{self.path}' is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise BackendError(f"Settings file '{self.path}' must hold a JSON object.")

        stored = document.get(SETTINGS_KEY)
        if stored is None:
            return self._save_defaults(document)
        if not isinstance(stored, dict):
            raise BackendError(f"Settings key '{SETTINGS_KEY}' in '{self.path}' is not an object.")
        return Settings.from_dict(stored)

    def save(self, settings: Settings) -> None:
        document: dict[str, Any] = {}
        if self.path.exists():
            try:
                existing = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            except (OSError, json.JSONDecodeError):
                existing = {}
            if isinstance(existing, dict):
                document = existing
        document[SETTINGS_KEY] = settings.to_dict()
        self._write(document)

    def _save_defaults(self, document: dict[str, Any]) -> Settings:
        defaults = Settings()
        document[SETTINGS_KEY] = defaults.to_dict()
        self._write(document)
        return defaults

    def _write(self, document: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise BackendError(f"Could not save settings to '{self.path}': {exc}") from exc


# ---------------------------------------------------------------------------
# HTTP backend
# ---------------------------------------------------------------------------


class HttpBackend:
    """``Backend`` implementation over httpx.

    Requests are single-shot: a failed call is reported, never retried.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        cfg: BoardConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.cfg = cfg or BoardConfig()
        self.settings_store = settings_store
        self._client = client or httpx.AsyncClient(
            timeout=self.cfg.timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    async def _get(self, url: str) -> httpx.Response:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise BackendError(f"Request failed (URL: {url}): {exc}", url=url) from exc
        if not response.is_success:
            raise BackendError(f"HTTP error {response.status_code} (URL: {url})", url=url)
        return response

    async def fetch_threads(self) -> list[Thread]:
        url = self.cfg.subject_url
        logger.debug("[TulipBrowser Backend] Fetching thread index: %s", url)
        response = await self._get(url)
        try:
            entries = response.json()
        except ValueError as exc:
            raise BackendError(f"Thread index is not valid JSON (URL: {url}): {exc}", url=url) from exc
        if not isinstance(entries, list):
            raise BackendError(f"Thread index must be a JSON array (URL: {url})", url=url)
        threads = [parse_subject_entry(entry) for entry in entries]
        logger.info("[TulipBrowser Backend] Loaded %d threads.", len(threads))
        return threads

    async def fetch_thread_content(self, thread_id: str) -> list[ResponseItem]:
        thread_id = validate_thread_id(thread_id)
        url = self.cfg.dat_url(thread_id)
        logger.debug("[TulipBrowser Backend] Fetching thread %s: %s", thread_id, url)
        response = await self._get(url)
        responses = parse_dat(response.text)
        logger.info("[TulipBrowser Backend] Parsed %d responses for thread %s.", len(responses), thread_id)
        return responses

    async def fetch_image_as_data_uri(self, url: str) -> str:
        logger.debug("[TulipBrowser Backend] Proxying image: %s", url)
        response = await self._get(url)
        content_type = response.headers.get("content-type") or FALLBACK_IMAGE_CONTENT_TYPE
        encoded = base64.b64encode(response.content).decode("ascii")
        return f"data:{content_type};base64,{encoded}"

    async def get_settings(self) -> Settings:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.settings_store.load)

    async def save_settings(self, settings: Settings) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.settings_store.save, settings)
        logger.info("[TulipBrowser Backend] Saved settings to %s.", self.settings_store.path)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpBackend:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
