"""
Tests for tulip_browser.resizer.

Covers:
  - compute_width clamps to [min, max] for any pointer delta
  - percentage max resolved against the container at move time
  - press/move/release lifecycle, pointer capture and interaction suppression
"""

import pytest

from tulip_browser.config import PanelConfig
from tulip_browser.resizer import (
    IDLE,
    DragState,
    PanelResizer,
    WidthBounds,
    clamp,
    compute_width,
    resolve_bounds,
    resolve_max_width,
)

from .conftest import FakePanelView


# ========================================================================
# Pure width math
# ========================================================================


class TestComputeWidth:
    @pytest.mark.parametrize("delta", [-10_000, -500, -121, -1, 0, 1, 299, 300, 10_000])
    def test_result_always_within_bounds(self, delta):
        bounds = WidthBounds(min_width=180, max_width=600)
        state = DragState(dragging=True, start_pointer_x=300, initial_width=300)
        width = compute_width(state, 300 + delta, bounds)
        assert 180 <= width <= 600

    def test_follows_pointer_inside_bounds(self):
        state = DragState(dragging=True, start_pointer_x=300, initial_width=300)
        assert compute_width(state, 350, WidthBounds(180, 600)) == 350
        assert compute_width(state, 250, WidthBounds(180, 600)) == 250

    def test_clamps_at_both_ends(self):
        state = DragState(dragging=True, start_pointer_x=300, initial_width=300)
        assert compute_width(state, 10, WidthBounds(180, 600)) == 180
        assert compute_width(state, 2000, WidthBounds(180, 600)) == 600

    def test_clamp(self):
        assert clamp(100, WidthBounds(180, 600)) == 180
        assert clamp(700, WidthBounds(180, 600)) == 600
        assert clamp(400, WidthBounds(180, 600)) == 400


class TestBounds:
    def test_percentage_of_container(self):
        assert resolve_max_width("60%", 1000) == 600
        assert resolve_max_width(" 50% ", 800) == 400

    def test_pixel_max(self):
        assert resolve_max_width(450, 1000) == 450

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError):
            resolve_max_width("600px", 1000)

    def test_max_below_min_collapses_to_min(self):
        bounds = resolve_bounds(PanelConfig(min_width=180, max_width="10%"), 1000)
        assert bounds == WidthBounds(180, 180)

    def test_panel_config_rejects_bad_max(self):
        with pytest.raises(ValueError):
            PanelConfig(max_width="wide")


# ========================================================================
# Drag lifecycle
# ========================================================================


class TestPanelResizer:
    def test_press_captures_and_suppresses(self, panel_view):
        resizer = PanelResizer(panel_view)
        resizer.press(300)
        assert resizer.dragging
        assert resizer.state.initial_width == 300
        assert panel_view.suppressed is True
        assert panel_view.captured == (resizer.move, resizer.release)

    def test_move_applies_clamped_width(self, panel_view):
        resizer = PanelResizer(panel_view)
        resizer.press(300)
        assert resizer.move(420) == 420
        assert resizer.move(5000) == 600
        assert resizer.move(-5000) == 180
        assert panel_view.bases == [420, 600, 180]

    def test_move_while_idle_is_ignored(self, panel_view):
        resizer = PanelResizer(panel_view)
        assert resizer.move(500) is None
        assert panel_view.bases == []

    def test_release_restores_interaction(self, panel_view):
        resizer = PanelResizer(panel_view)
        resizer.press(300)
        resizer.move(350)
        resizer.release(350)
        assert resizer.state == IDLE
        assert panel_view.suppressed is False
        assert panel_view.captured is None
        assert resizer.move(400) is None
        assert panel_view.width == 350

    def test_release_while_idle_is_noop(self, panel_view):
        resizer = PanelResizer(panel_view)
        resizer.release()
        assert panel_view.suppressed is False

    def test_second_press_does_not_restart_drag(self, panel_view):
        resizer = PanelResizer(panel_view)
        resizer.press(300)
        resizer.move(400)
        resizer.press(400)
        assert resizer.state.start_pointer_x == 300
        assert resizer.state.initial_width == 300

    def test_percentage_max_tracks_container_resize(self):
        view = FakePanelView(width=300, container=1000)
        resizer = PanelResizer(view, PanelConfig(min_width=180, max_width="60%"))
        resizer.press(300)
        assert resizer.move(2000) == 600
        view.container = 500
        assert resizer.move(2000) == 300

    def test_new_drag_starts_from_current_width(self, panel_view):
        resizer = PanelResizer(panel_view)
        resizer.press(300)
        resizer.move(400)
        resizer.release()
        resizer.press(100)
        assert resizer.state.initial_width == 400
        assert resizer.move(150) == 450
