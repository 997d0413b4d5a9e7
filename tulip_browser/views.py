"""
View protocols.

Each controller mutates the visible tree only through one of these narrow
surfaces. The desktop shell implements them with toga widgets; the tests use
in-memory fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence

if TYPE_CHECKING:
    from .images import ImageOutcome
    from .models import Settings
    from .viewmodels import ResponseEntryViewModel, ThreadRowViewModel


class ThreadListView(Protocol):
    def replace_rows(self, rows: Sequence[ThreadRowViewModel]) -> None:
        """Discard every row and render ``rows`` in order."""
        ...

    def show_message(self, text: str) -> None:
        """Discard every row and render a single text node."""
        ...

    def set_active(self, thread_id: str | None) -> None:
        """Mark ``thread_id`` active and clear the marker from all other rows."""
        ...

    def show_refresh_indicator(self, text: str) -> None: ...

    def hide_refresh_indicator(self) -> None: ...


class ResponseListView(Protocol):
    def clear(self) -> None: ...

    def hide_placeholder(self) -> None: ...

    def show_heading(self, title: str) -> None: ...

    def append_entry(self, entry: ResponseEntryViewModel) -> int:
        """Attach one entry and return a handle for later image updates."""
        ...

    def show_message(self, text: str) -> None:
        """Replace the entries with a single text entry."""
        ...

    def update_image(self, handle: int, outcome: ImageOutcome) -> None: ...


PointerCallback = Callable[[float], None]


class PanelView(Protocol):
    def panel_width(self) -> float: ...

    def container_width(self) -> float: ...

    def set_panel_basis(self, width: float) -> None: ...

    def set_interaction_suppressed(self, suppressed: bool) -> None:
        """Block pointer interaction and text selection outside the handle."""
        ...

    def capture_pointer(self, on_move: PointerCallback, on_release: PointerCallback) -> None: ...

    def release_pointer(self) -> None: ...


class SettingsView(Protocol):
    def show_settings(self, settings: Settings) -> None: ...

    def read_theme(self) -> Any: ...

    def read_font_size(self) -> Any: ...

    def close(self) -> None: ...

    async def notify_error(self, title: str, message: str) -> None:
        """Blocking notification; returns once the user dismisses it."""
        ...
