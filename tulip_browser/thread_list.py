"""Thread list loading and row selection."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import TYPE_CHECKING, Callable

from .config import NO_THREADS_TEXT, THREADS_ERROR_TEXT
from .viewmodels import error_message, thread_row

if TYPE_CHECKING:
    from .backend import Backend
    from .models import Thread
    from .responses import ResponseRenderer
    from .views import ThreadListView

logger = logging.getLogger("tulip_browser.thread_list")


class ThreadListController:
    """Replaces the rendered thread list wholesale on every ``load``.

    Row clicks are routed through a subscription table keyed by thread id.
    The table is rebuilt each time the list is replaced, so a click on a row
    from an earlier list does nothing.
    """

    def __init__(self, backend: Backend, view: ThreadListView, renderer: ResponseRenderer) -> None:
        self.backend = backend
        self.view = view
        self.renderer = renderer
        self.threads: list[Thread] = []
        self.active_id: str | None = None
        self._subscriptions: dict[str, Callable[[], asyncio.Task]] = {}

    @property
    def subscribed_ids(self) -> list[str]:
        return list(self._subscriptions)

    async def load(self) -> None:
        """Fetch the thread index and render it, or an inline error on failure."""
        logger.debug("[TulipBrowser Threads] Loading thread list.")
        try:
            threads = await self.backend.fetch_threads()
        except Exception as exc:
            logger.warning("[TulipBrowser Threads] Loading thread list failed: %s", exc)
            self._replace([])
            self.view.show_message(error_message(THREADS_ERROR_TEXT, exc))
            return

        self._replace(threads)
        if not threads:
            self.view.show_message(NO_THREADS_TEXT)
            return
        self.view.replace_rows([thread_row(thread) for thread in threads])
        logger.info("[TulipBrowser Threads] Rendered %d threads.", len(threads))

    def _replace(self, threads: list[Thread]) -> None:
        self._subscriptions.clear()
        self.threads = list(threads)
        self.active_id = None
        for thread in self.threads:
            self._subscriptions[thread.id] = functools.partial(self._select, thread.id, thread.title)

    def click(self, thread_id: str) -> asyncio.Task | None:
        """Handle a click on the row for ``thread_id``."""
        handler = self._subscriptions.get(thread_id)
        if handler is None:
            logger.debug("[TulipBrowser Threads] Ignoring click on unknown thread %s.", thread_id)
            return None
        return handler()

    def _select(self, thread_id: str, title: str) -> asyncio.Task:
        logger.debug("[TulipBrowser Threads] Thread clicked: %s - %s", thread_id, title)
        task = self.renderer.display(thread_id, title)
        self.active_id = thread_id
        self.view.set_active(thread_id)
        return task
