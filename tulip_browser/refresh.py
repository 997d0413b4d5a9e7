"""Scroll-to-refresh for the thread list."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator

from .config import REFRESHING_TEXT

if TYPE_CHECKING:
    from .thread_list import ThreadListController
    from .views import ThreadListView

logger = logging.getLogger("tulip_browser.refresh")


class LockState(Enum):
    UNLOCKED = "unlocked"
    LOCKED = "locked"


class RefreshLock:
    """Single in-flight guard for thread list reloads."""

    def __init__(self) -> None:
        self.state = LockState.UNLOCKED

    @property
    def locked(self) -> bool:
        return self.state is LockState.LOCKED

    def try_acquire(self) -> bool:
        if self.state is LockState.LOCKED:
            return False
        self.state = LockState.LOCKED
        return True

    def release(self) -> None:
        self.state = LockState.UNLOCKED

    @contextlib.contextmanager
    def hold(self) -> Iterator[bool]:
        """Yield whether the lock was acquired; release on every exit path if so."""
        if not self.try_acquire():
            yield False
            return
        try:
            yield True
        finally:
            self.release()


@dataclass
class ScrollEvent:
    """A wheel/scroll notification from the thread list container.

    ``delta_y`` is negative when the user scrolls up.
    """

    scroll_top: float
    delta_y: float
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


def is_refresh_trigger(event: ScrollEvent) -> bool:
    """At the top of the list and still pushing upward."""
    return event.scroll_top <= 0 and event.delta_y < 0


class ScrollRefreshGesture:
    def __init__(self, controller: ThreadListController, view: ThreadListView) -> None:
        self.controller = controller
        self.view = view
        self.lock = RefreshLock()
        self._tasks: set[asyncio.Task] = set()

    async def handle(self, event: ScrollEvent) -> bool:
        """Process one scroll event; returns True when it ran a reload."""
        if not is_refresh_trigger(event):
            return False
        event.prevent_default()
        with self.lock.hold() as acquired:
            if not acquired:
                logger.debug("[TulipBrowser Refresh] Reload already in flight; ignoring trigger.")
                return False
            logger.info("[TulipBrowser Refresh] Pull-to-refresh triggered.")
            self.view.show_refresh_indicator(REFRESHING_TEXT)
            try:
                await self.controller.load()
            finally:
                self.view.hide_refresh_indicator()
        return True

    def on_scroll(self, event: ScrollEvent) -> asyncio.Task | None:
        """Synchronous entry point for widget callbacks.

        The default is suppressed before returning, even when the reload
        itself is rejected because one is already running.
        """
        if not is_refresh_trigger(event):
            return None
        event.prevent_default()
        if self.lock.locked:
            return None
        task = asyncio.create_task(self.handle(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
