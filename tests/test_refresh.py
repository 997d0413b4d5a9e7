"""
Tests for tulip_browser.refresh.

Covers:
  - RefreshLock state transitions and hold()
  - trigger detection (top of list, scrolling up)
  - at most one reload in flight; lock released on success and failure
  - indicator shown then hidden around each reload
  - default scroll suppressed even when the reload is rejected
"""

import asyncio

import pytest

from tulip_browser.exceptions import BackendError
from tulip_browser.images import ImageProxyLoader
from tulip_browser.refresh import LockState, RefreshLock, ScrollEvent, ScrollRefreshGesture, is_refresh_trigger
from tulip_browser.responses import ResponseRenderer
from tulip_browser.thread_list import ThreadListController

from .conftest import make_thread


@pytest.fixture
def gesture(backend, thread_view, response_view):
    renderer = ResponseRenderer(backend, response_view, ImageProxyLoader(backend))
    controller = ThreadListController(backend, thread_view, renderer)
    return ScrollRefreshGesture(controller, thread_view)


def pull() -> ScrollEvent:
    return ScrollEvent(scroll_top=0, delta_y=-40)


# ========================================================================
# RefreshLock
# ========================================================================


class TestRefreshLock:
    def test_acquire_and_release(self):
        lock = RefreshLock()
        assert lock.state is LockState.UNLOCKED
        assert lock.try_acquire() is True
        assert lock.locked
        assert lock.try_acquire() is False
        lock.release()
        assert lock.state is LockState.UNLOCKED

    def test_hold_releases_on_error(self):
        lock = RefreshLock()
        with pytest.raises(RuntimeError):
            with lock.hold() as acquired:
                assert acquired
                raise RuntimeError("boom")
        assert not lock.locked

    def test_hold_when_locked_yields_false(self):
        lock = RefreshLock()
        lock.try_acquire()
        with lock.hold() as acquired:
            assert acquired is False
        assert lock.locked


# ========================================================================
# Trigger detection
# ========================================================================


class TestTrigger:
    @pytest.mark.parametrize(
        "scroll_top, delta_y, expected",
        [
            (0, -1, True),
            (0, -120, True),
            (0, 0, False),
            (0, 30, False),
            (1, -30, False),
            (250, -30, False),
        ],
    )
    def test_is_refresh_trigger(self, scroll_top, delta_y, expected):
        assert is_refresh_trigger(ScrollEvent(scroll_top=scroll_top, delta_y=delta_y)) is expected

    async def test_non_trigger_is_left_alone(self, backend, gesture):
        event = ScrollEvent(scroll_top=120, delta_y=-40)
        assert await gesture.handle(event) is False
        assert gesture.on_scroll(event) is None
        assert event.default_prevented is False
        assert backend.count("fetch_threads") == 0


# ========================================================================
# Reloading
# ========================================================================


class TestReload:
    async def test_trigger_reloads_list(self, backend, thread_view, gesture):
        backend.threads = [make_thread("1700000001", "A")]
        event = pull()
        assert await gesture.handle(event) is True
        assert event.default_prevented
        assert [row.thread_id for row in thread_view.rows] == ["1700000001"]
        assert thread_view.indicator_history == ["show", "hide"]
        assert thread_view.indicator is None
        assert not gesture.lock.locked

    async def test_indicator_text_while_loading(self, backend, thread_view, gesture):
        backend.gates["threads"] = asyncio.Event()
        task = gesture.on_scroll(pull())
        await asyncio.sleep(0)
        assert thread_view.indicator == "Refreshing..."
        backend.gates["threads"].set()
        await task
        assert thread_view.indicator is None

    async def test_repeated_triggers_run_one_load(self, backend, gesture):
        backend.gates["threads"] = asyncio.Event()
        first = gesture.on_scroll(pull())
        await asyncio.sleep(0)

        rejected = [pull() for _ in range(5)]
        for event in rejected:
            assert gesture.on_scroll(event) is None
            assert event.default_prevented
        assert await gesture.handle(pull()) is False

        backend.gates["threads"].set()
        assert await first is True
        assert backend.count("fetch_threads") == 1

    async def test_lock_released_after_failed_load(self, backend, thread_view, gesture):
        backend.threads = BackendError("HTTP error 503")
        assert await gesture.handle(pull()) is True
        assert not gesture.lock.locked
        assert thread_view.indicator_history == ["show", "hide"]
        assert thread_view.message.startswith("Failed to load threads.")

        backend.threads = [make_thread()]
        assert await gesture.handle(pull()) is True
        assert backend.count("fetch_threads") == 2

    async def test_lock_released_when_load_raises(self, thread_view, gesture):
        async def explode():
            raise RuntimeError("unexpected")

        gesture.controller.load = explode
        with pytest.raises(RuntimeError):
            await gesture.handle(pull())
        assert not gesture.lock.locked
        assert thread_view.indicator_history == ["show", "hide"]
