"""Toga desktop shell for the board reader.

Highlights:
- two-pane layout: resizable thread list + response web view
- pull-to-refresh on the thread list
- hot-linked images rewritten through the image proxy
- single settings window (theme, font size) reachable from the app menu
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable

import toga
from toga.style import Pack
from toga.style.pack import COLUMN, HIDDEN, ROW, VISIBLE

from .backend import HttpBackend, SettingsStore
from .config import APP_NAME, VALID_THEMES, BoardConfig, PanelConfig
from .document import palette_for, render_document, render_entry, render_message
from .images import ImageOutcome, ImageProxyLoader, apply_outcome
from .models import Settings
from .refresh import ScrollEvent, ScrollRefreshGesture
from .resizer import PanelResizer
from .responses import ResponseRenderer
from .settings import SettingsPanelController
from .thread_list import ThreadListController
from .viewmodels import ResponseEntryViewModel, ThreadRowViewModel
from .views import PointerCallback

logger = logging.getLogger("tulip_browser.app")

FONT_SIZE_TITLE = 14
FONT_SIZE_BODY = 11
FONT_SIZE_META = 9
RESIZE_HANDLE_WIDTH = 6
PLACEHOLDER_TEXT = "Select a thread from the list."


class ThreadListPane:
    """``ThreadListView`` over a scrolling column of buttons."""

    def __init__(
        self,
        on_select: Callable[[str], Any],
        on_scroll: Callable[[ScrollEvent], Any],
        width: int,
    ) -> None:
        self._on_select = on_select
        self._on_scroll = on_scroll
        self._row_buttons: dict[str, toga.Button] = {}
        self._button_ids: dict[int, str] = {}
        self._indicator: toga.Label | None = None
        self._last_position = 0.0
        self._palette = palette_for("light")

        self.rows_box = toga.Box(style=Pack(direction=COLUMN))
        self.scroll = toga.ScrollContainer(
            horizontal=False,
            vertical=True,
            content=self.rows_box,
            on_scroll=self._handle_scroll,
            style=Pack(flex=1),
        )
        self.container = toga.Box(style=Pack(direction=COLUMN, width=width))
        self.container.add(self.scroll)

    def apply_palette(self, theme: str) -> None:
        self._palette = palette_for(theme)
        self.container.style.background_color = self._palette.panel

    def _clear(self) -> None:
        while self.rows_box.children:
            self.rows_box.remove(self.rows_box.children[0])
        self._row_buttons = {}
        self._button_ids = {}
        self._indicator = None

    def replace_rows(self, rows: list[ThreadRowViewModel]) -> None:
        self._clear()
        for row in rows:
            header = toga.Label(
                row.header,
                style=Pack(font_size=FONT_SIZE_META, color=self._palette.muted, margin=(6, 8, 0, 8)),
            )
            button = toga.Button(
                f"{row.title}  ({row.response_count_label})",
                on_press=self._handle_press,
                style=Pack(margin=(2, 8, 4, 8), text_align="left", font_size=FONT_SIZE_BODY),
            )
            self._row_buttons[row.thread_id] = button
            self._button_ids[id(button)] = row.thread_id
            self.rows_box.add(header)
            self.rows_box.add(button)

    def show_message(self, text: str) -> None:
        self._clear()
        self.rows_box.add(toga.Label(text, style=Pack(margin=(12, 8), font_size=FONT_SIZE_BODY)))

    def set_active(self, thread_id: str | None) -> None:
        for row_id, button in self._row_buttons.items():
            active = row_id == thread_id
            button.style.font_weight = "bold" if active else "normal"
            button.style.background_color = self._palette.active if active else self._palette.panel

    def show_refresh_indicator(self, text: str) -> None:
        self.hide_refresh_indicator()
        self._indicator = toga.Label(
            text,
            style=Pack(margin=(6, 8), font_size=FONT_SIZE_META, color=self._palette.accent),
        )
        self.rows_box.insert(0, self._indicator)

    def hide_refresh_indicator(self) -> None:
        if self._indicator is not None and self._indicator in self.rows_box.children:
            self.rows_box.remove(self._indicator)
        self._indicator = None

    def set_enabled(self, enabled: bool) -> None:
        self.scroll.enabled = enabled
        for button in self._row_buttons.values():
            button.enabled = enabled

    def _handle_press(self, widget: toga.Widget) -> None:
        thread_id = self._button_ids.get(id(widget))
        if thread_id is not None:
            self._on_select(thread_id)

    def _handle_scroll(self, widget: toga.ScrollContainer) -> None:
        position = float(widget.vertical_position or 0)
        delta = position - self._last_position
        self._last_position = position
        self._on_scroll(ScrollEvent(scroll_top=position, delta_y=delta))


class ResponsePane:
    """``ResponseListView`` that re-renders one web view document."""

    def __init__(self) -> None:
        self._entries: list[ResponseEntryViewModel] = []
        self._contents: list[str] = []
        self._message: str | None = None
        self._render_pending = False
        self.settings = Settings()

        self.heading = toga.Label(
            "",
            style=Pack(font_size=FONT_SIZE_TITLE, font_weight="bold", margin=(10, 12, 6, 12), visibility=HIDDEN),
        )
        self.placeholder = toga.Label(
            PLACEHOLDER_TEXT,
            style=Pack(font_size=FONT_SIZE_BODY, margin=(16, 12)),
        )
        self.webview = toga.WebView(style=Pack(flex=1))
        self.container = toga.Box(style=Pack(direction=COLUMN, flex=1))
        self.container.add(self.heading)
        self.container.add(self.placeholder)
        self.container.add(self.webview)

    def apply_settings(self, settings: Settings) -> None:
        self.settings = settings
        self.container.style.background_color = palette_for(settings.theme).background
        self._render()

    def clear(self) -> None:
        self._entries = []
        self._contents = []
        self._message = None
        self._render()

    def hide_placeholder(self) -> None:
        self.placeholder.style.visibility = HIDDEN

    def show_heading(self, title: str) -> None:
        self.heading.text = title
        self.heading.style.visibility = VISIBLE

    def append_entry(self, entry: ResponseEntryViewModel) -> int:
        self._message = None
        self._entries.append(entry)
        self._contents.append(entry.content)
        self._schedule_render()
        return len(self._entries) - 1

    def show_message(self, text: str) -> None:
        self._entries = []
        self._contents = []
        self._message = text
        self._render()

    def update_image(self, handle: int, outcome: ImageOutcome) -> None:
        if handle >= len(self._contents):
            return
        self._contents[handle] = apply_outcome(self._contents[handle], outcome)
        self._schedule_render()

    def _schedule_render(self) -> None:
        """Coalesce bursts of appends and image rewrites into one document update."""
        if self._render_pending:
            return
        self._render_pending = True
        asyncio.get_running_loop().call_soon(self._render)

    def _render(self) -> None:
        self._render_pending = False
        if self._message is not None:
            items = [render_message(self._message)]
        else:
            items = [render_entry(entry, content) for entry, content in zip(self._entries, self._contents)]
        self.webview.set_content("about:blank", render_document(items, self.settings))


class SidebarPanel:
    """``PanelView`` for the thread list column and its resize handle."""

    def __init__(self, app: TulipBrowserApp, pane: ThreadListPane, width: int) -> None:
        self.app = app
        self.pane = pane
        self._width = float(width)
        self._on_move: PointerCallback | None = None
        self._on_release: PointerCallback | None = None

    def panel_width(self) -> float:
        return self._width

    def container_width(self) -> float:
        size = self.app.main_window.size
        return float(getattr(size, "width", size[0]))

    def set_panel_basis(self, width: float) -> None:
        self._width = width
        self.pane.container.style.width = int(width)

    def set_interaction_suppressed(self, suppressed: bool) -> None:
        self.pane.set_enabled(not suppressed)
        self.app.response_pane.webview.enabled = not suppressed

    def capture_pointer(self, on_move: PointerCallback, on_release: PointerCallback) -> None:
        self._on_move = on_move
        self._on_release = on_release

    def release_pointer(self) -> None:
        self._on_move = None
        self._on_release = None

    # Canvas coordinates are relative to the handle, which sits right after the panel.
    def _absolute_x(self, x: float) -> float:
        return self._width + float(x)

    def on_handle_press(self, widget: toga.Widget, x: float, y: float, **kwargs: Any) -> None:
        self.app.resizer.press(self._absolute_x(x))

    def on_handle_drag(self, widget: toga.Widget, x: float, y: float, **kwargs: Any) -> None:
        if self._on_move is not None:
            self._on_move(self._absolute_x(x))

    def on_handle_release(self, widget: toga.Widget, x: float, y: float, **kwargs: Any) -> None:
        if self._on_release is not None:
            self._on_release(self._absolute_x(x))


class SettingsWindow:
    """``SettingsView`` backed by a small toga window."""

    def __init__(self, app: TulipBrowserApp) -> None:
        self.app = app
        self.theme_select = toga.Selection(items=VALID_THEMES, style=Pack(flex=1))
        self.font_size_input = toga.NumberInput(min=1, max=72, step=1, style=Pack(flex=1))
        self.save_button = toga.Button("Save", on_press=self.on_save, style=Pack(flex=1, margin_top=8))
        self.controller = SettingsPanelController(app.backend, self)
        self.controller.add_listener(app.apply_settings)

        form = toga.Box(style=Pack(direction=COLUMN, margin=14))
        form.add(self._row("Theme", self.theme_select))
        form.add(self._row("Font size", self.font_size_input))
        form.add(self.save_button)

        self.window = toga.Window(title="Settings", size=(380, 180), resizable=True, on_close=self.on_close)
        self.window.content = form

    def _row(self, label: str, control: toga.Widget) -> toga.Box:
        row = toga.Box(style=Pack(direction=ROW, margin=(0, 0, 10, 0)))
        row.add(toga.Label(label, style=Pack(width=96, margin_top=6, font_size=FONT_SIZE_BODY)))
        row.add(control)
        return row

    def show_settings(self, settings: Settings) -> None:
        self.theme_select.value = settings.theme
        self.font_size_input.value = settings.font_size

    def read_theme(self) -> Any:
        return self.theme_select.value

    def read_font_size(self) -> Any:
        return self.font_size_input.value

    def close(self) -> None:
        self.window.close()
        self.app.settings_window = None

    async def notify_error(self, title: str, message: str) -> None:
        await self.window.dialog(toga.ErrorDialog(title, message))

    async def on_save(self, widget: toga.Widget) -> None:
        del widget
        await self.controller.save_settings()

    def on_close(self, window: toga.Window) -> bool:
        del window
        self.app.settings_window = None
        return True


class TulipBrowserApp(toga.App):
    """Toga desktop app for reading board threads."""

    def startup(self) -> None:
        """Build UI, wire controllers and start the first thread list load."""
        self.board_config = BoardConfig.from_env()
        self.panel_config = PanelConfig()
        self.backend = HttpBackend(SettingsStore(self._config_dir()), self.board_config)
        self.settings_window: SettingsWindow | None = None
        self._startup_task: asyncio.Task | None = None

        self.response_pane = ResponsePane()
        self.image_loader = ImageProxyLoader(self.backend, self.board_config.image_prefixes)
        self.renderer = ResponseRenderer(self.backend, self.response_pane, self.image_loader)
        self.thread_pane = ThreadListPane(
            on_select=self.on_thread_selected,
            on_scroll=self.on_thread_list_scroll,
            width=self.panel_config.default_width,
        )
        self.thread_list = ThreadListController(self.backend, self.thread_pane, self.renderer)
        self.refresh_gesture = ScrollRefreshGesture(self.thread_list, self.thread_pane)
        self.sidebar = SidebarPanel(self, self.thread_pane, self.panel_config.default_width)
        self.resizer = PanelResizer(self.sidebar, self.panel_config)

        self._build_ui()
        self._install_app_commands()
        self.main_window.show()
        self._startup_task = asyncio.create_task(self._initial_load())

    def _config_dir(self) -> Path:
        """Resolve app-local config directory."""
        try:
            config_dir = Path(self.paths.config)
        except Exception:
            config_dir = Path.home() / f".{APP_NAME}"
        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir

    def _build_ui(self) -> None:
        """Construct application widgets and layout."""
        handle = toga.Canvas(
            on_press=self.sidebar.on_handle_press,
            on_drag=self.sidebar.on_handle_drag,
            on_release=self.sidebar.on_handle_release,
            style=Pack(width=RESIZE_HANDLE_WIDTH),
        )
        self.root_box = toga.Box(style=Pack(direction=ROW, flex=1))
        self.root_box.add(self.thread_pane.container)
        self.root_box.add(handle)
        self.root_box.add(self.response_pane.container)

        self.main_window = toga.MainWindow(title=self.formal_name, size=(1100, 720), resizable=True)
        self.main_window.content = self.root_box
        self.apply_settings(Settings())

    def _install_app_commands(self) -> None:
        self.settings_command = toga.Command(
            self.on_open_settings,
            text="Settings...",
            tooltip="Edit theme and font size",
            group=toga.Group.APP,
            section=1,
            id="open-settings",
        )
        self.refresh_command = toga.Command(
            self.on_refresh,
            text="Reload Threads",
            shortcut=toga.Key.MOD_1 + toga.Key.R,
            group=toga.Group.VIEW,
            id="reload-threads",
        )
        self.commands.add(self.settings_command, self.refresh_command)

    async def _initial_load(self) -> None:
        try:
            self.apply_settings(await self.backend.get_settings())
        except Exception as exc:
            logger.warning("[TulipBrowser App] Could not load saved settings: %s", exc)
        await self.thread_list.load()

    def apply_settings(self, settings: Settings) -> None:
        """Apply theme and font size to the main window."""
        self.thread_pane.apply_palette(settings.theme)
        self.response_pane.apply_settings(settings)

    def on_thread_selected(self, thread_id: str) -> None:
        self.thread_list.click(thread_id)

    def on_thread_list_scroll(self, event: ScrollEvent) -> None:
        self.refresh_gesture.on_scroll(event)

    async def on_refresh(self, widget: object | None = None, **kwargs: Any) -> None:
        del widget
        await self.refresh_gesture.handle(ScrollEvent(scroll_top=0, delta_y=-1))

    async def on_open_settings(self, widget: object | None = None, **kwargs: Any) -> None:
        """Open the settings window, or bring the existing one forward."""
        del widget
        if self.settings_window is not None:
            self.settings_window.window.show()
            return
        self.settings_window = SettingsWindow(self)
        self.settings_window.window.show()
        await self.settings_window.controller.load_settings()

    async def on_exit(self) -> bool:
        """Stop the initial load and close the HTTP client before the loop ends."""
        if self._startup_task is not None and not self._startup_task.done():
            self._startup_task.cancel()
        await self.backend.aclose()
        return True


def main() -> TulipBrowserApp:
    """Briefcase entrypoint."""
    return TulipBrowserApp(formal_name="Tulip Browser", app_id="com.tulipbrowser.reader")


def run() -> None:
    main().main_loop()
