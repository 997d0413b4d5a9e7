"""Shared fakes for controller tests: an in-memory backend and views."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from tulip_browser.models import ResponseItem, Settings, Thread


def make_thread(thread_id: str = "1700000000", title: str = "Thread", count: int = 1) -> Thread:
    return Thread(id=thread_id, title=title, created_at="2024/01/01 12:00", response_count=count)


def make_response(
    number: int = 1,
    *,
    author: str = "poster",
    mail: str | None = None,
    user_id: str | None = None,
    occurrence: int = 0,
    total: int = 0,
    content: str = "hello",
) -> ResponseItem:
    return ResponseItem(
        number=number,
        author=author,
        mail=mail,
        created_at="2024/01/01(Mon) 12:00:00.00",
        user_id_info=f"ID:{user_id}" if user_id else None,
        parsed_user_id=user_id,
        id_occurrence_count=occurrence,
        id_total_count=total,
        content=content,
    )


class FakeBackend:
    """Backend double. Values may be results or exceptions to raise.

    ``gates`` maps thread ids / image urls to events the call waits on, so
    tests can control completion order.
    """

    def __init__(self) -> None:
        self.threads: list[Thread] | Exception = []
        self.responses: dict[str, list[ResponseItem] | Exception] = {}
        self.images: dict[str, str | Exception] = {}
        self.settings: Settings | Exception = Settings()
        self.save_error: Exception | None = None
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, Any]] = []
        self.saved: list[Settings] = []

    async def _wait(self, key: str) -> None:
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()

    @staticmethod
    def _resolve(value: Any) -> Any:
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_threads(self) -> list[Thread]:
        self.calls.append(("fetch_threads", None))
        await self._wait("threads")
        return self._resolve(self.threads)

    async def fetch_thread_content(self, thread_id: str) -> list[ResponseItem]:
        self.calls.append(("fetch_thread_content", thread_id))
        await self._wait(thread_id)
        return self._resolve(self.responses.get(thread_id, []))

    async def fetch_image_as_data_uri(self, url: str) -> str:
        self.calls.append(("fetch_image_as_data_uri", url))
        await self._wait(url)
        return self._resolve(self.images.get(url, f"data:image/png;base64,{len(url)}"))

    async def get_settings(self) -> Settings:
        self.calls.append(("get_settings", None))
        return self._resolve(self.settings)

    async def save_settings(self, settings: Settings) -> None:
        self.calls.append(("save_settings", settings))
        if self.save_error is not None:
            raise self.save_error
        self.saved.append(settings)

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


class FakeThreadListView:
    def __init__(self) -> None:
        self.rows: list[Any] = []
        self.message: str | None = None
        self.active: set[str] = set()
        self.indicator: str | None = None
        self.indicator_history: list[str] = []

    def replace_rows(self, rows: Any) -> None:
        self.rows = list(rows)
        self.message = None
        self.active = set()

    def show_message(self, text: str) -> None:
        self.rows = []
        self.message = text
        self.active = set()

    def set_active(self, thread_id: str | None) -> None:
        self.active = {thread_id} if thread_id is not None else set()

    def show_refresh_indicator(self, text: str) -> None:
        self.indicator = text
        self.indicator_history.append("show")

    def hide_refresh_indicator(self) -> None:
        self.indicator = None
        self.indicator_history.append("hide")


class FakeResponseView:
    def __init__(self) -> None:
        self.heading: str | None = None
        self.placeholder_visible = True
        self.entries: list[Any] = []
        self.images: dict[int, list[Any]] = {}
        self.message: str | None = None
        self.clears = 0

    def clear(self) -> None:
        self.clears += 1
        self.entries = []
        self.images = {}
        self.message = None

    def hide_placeholder(self) -> None:
        self.placeholder_visible = False

    def show_heading(self, title: str) -> None:
        self.heading = title

    def append_entry(self, entry: Any) -> int:
        self.entries.append(entry)
        return len(self.entries) - 1

    def show_message(self, text: str) -> None:
        self.entries = []
        self.message = text

    def update_image(self, handle: int, outcome: Any) -> None:
        self.images.setdefault(handle, []).append(outcome)


class FakePanelView:
    def __init__(self, width: float = 300, container: float = 1000) -> None:
        self.width = width
        self.container = container
        self.suppressed = False
        self.captured: tuple[Any, Any] | None = None
        self.bases: list[float] = []

    def panel_width(self) -> float:
        return self.width

    def container_width(self) -> float:
        return self.container

    def set_panel_basis(self, width: float) -> None:
        self.width = width
        self.bases.append(width)

    def set_interaction_suppressed(self, suppressed: bool) -> None:
        self.suppressed = suppressed

    def capture_pointer(self, on_move: Any, on_release: Any) -> None:
        self.captured = (on_move, on_release)

    def release_pointer(self) -> None:
        self.captured = None


class FakeSettingsView:
    def __init__(self) -> None:
        self.theme: Any = None
        self.font_size: Any = None
        self.closed = False
        self.notifications: list[tuple[str, str]] = []

    def show_settings(self, settings: Settings) -> None:
        self.theme = settings.theme
        self.font_size = settings.font_size

    def read_theme(self) -> Any:
        return self.theme

    def read_font_size(self) -> Any:
        return self.font_size

    def close(self) -> None:
        self.closed = True

    async def notify_error(self, title: str, message: str) -> None:
        self.notifications.append((title, message))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def thread_view() -> FakeThreadListView:
    return FakeThreadListView()


@pytest.fixture
def response_view() -> FakeResponseView:
    return FakeResponseView()


@pytest.fixture
def panel_view() -> FakePanelView:
    return FakePanelView()


@pytest.fixture
def settings_view() -> FakeSettingsView:
    return FakeSettingsView()
