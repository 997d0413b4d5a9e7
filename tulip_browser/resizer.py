"""
Thread list panel resizing.

The drag math is a pure function of the drag state, the pointer position and
the width bounds; ``PanelResizer`` only owns the press/move/release lifecycle
around it. Nothing here awaits: every transition runs inside the pointer
callback that triggered it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import PanelConfig

if TYPE_CHECKING:
    from .views import PanelView

logger = logging.getLogger("tulip_browser.resizer")


@dataclass(frozen=True)
class DragState:
    dragging: bool = False
    start_pointer_x: float = 0.0
    initial_width: float = 0.0


IDLE = DragState()


@dataclass(frozen=True)
class WidthBounds:
    min_width: float
    max_width: float


def resolve_max_width(max_width: int | float | str, container_width: float) -> float:
    """Absolute pixels, or ``"NN%"`` of the container's current width."""
    if isinstance(max_width, str):
        text = max_width.strip()
        if not text.endswith("%"):
            raise ValueError(f"max_width must be pixels or a percentage; got '{max_width}'.")
        return container_width * float(text[:-1]) / 100.0
    return float(max_width)


def resolve_bounds(cfg: PanelConfig, container_width: float) -> WidthBounds:
    """Bounds for the current container; a max below the min collapses to the min."""
    min_width = float(cfg.min_width)
    max_width = resolve_max_width(cfg.max_width, container_width)
    return WidthBounds(min_width=min_width, max_width=max(min_width, max_width))


def clamp(width: float, bounds: WidthBounds) -> float:
    return min(max(width, bounds.min_width), bounds.max_width)


def compute_width(state: DragState, pointer_x: float, bounds: WidthBounds) -> float:
    """New panel width for a pointer at ``pointer_x`` during a drag."""
    return clamp(state.initial_width + (pointer_x - state.start_pointer_x), bounds)


class PanelResizer:
    """Idle -> Dragging -> Idle state machine for the resize handle."""

    def __init__(self, view: PanelView, cfg: PanelConfig | None = None) -> None:
        self.view = view
        self.cfg = cfg or PanelConfig()
        self.state = IDLE
        self.width: float | None = None

    @property
    def dragging(self) -> bool:
        return self.state.dragging

    def press(self, pointer_x: float) -> None:
        """Pointer pressed on the handle."""
        if self.state.dragging:
            return
        self.state = DragState(
            dragging=True,
            start_pointer_x=pointer_x,
            initial_width=self.view.panel_width(),
        )
        self.view.set_interaction_suppressed(True)
        self.view.capture_pointer(self.move, self.release)
        logger.debug(
            "[TulipBrowser Resize] Drag started at x=%.1f, width=%.1f.",
            pointer_x,
            self.state.initial_width,
        )

    def move(self, pointer_x: float) -> float | None:
        """Pointer moved; returns the applied width, or None when idle."""
        if not self.state.dragging:
            return None
        bounds = resolve_bounds(self.cfg, self.view.container_width())
        width = compute_width(self.state, pointer_x, bounds)
        self.view.set_panel_basis(width)
        self.width = width
        return width

    def release(self, pointer_x: float | None = None) -> None:
        """Pointer released anywhere; ends the drag."""
        del pointer_x
        if not self.state.dragging:
            return
        self.view.release_pointer()
        self.view.set_interaction_suppressed(False)
        self.state = IDLE
        logger.debug("[TulipBrowser Resize] Drag ended, width=%s.", self.width)
