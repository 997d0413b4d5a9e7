"""Settings dialog controller."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from .config import DEFAULT_THEME, VALID_THEMES
from .models import Settings, coerce_font_size, normalize_choice

if TYPE_CHECKING:
    from .backend import Backend
    from .views import SettingsView

logger = logging.getLogger("tulip_browser.settings")

SAVE_FAILED_TITLE = "Settings"
SAVE_FAILED_MESSAGE = "Failed to save settings: {error}"

SettingsListener = Callable[[Settings], None]


class SettingsPanelController:
    """Loads the form from the backend and saves it back."""

    def __init__(self, backend: Backend, view: SettingsView) -> None:
        self.backend = backend
        self.view = view
        self._listeners: list[SettingsListener] = []

    def add_listener(self, listener: SettingsListener) -> None:
        """Called with the saved settings after every successful save."""
        self._listeners.append(listener)

    async def load_settings(self) -> Settings:
        """Populate the form; any failure falls back to the defaults."""
        try:
            settings = await self.backend.get_settings()
        except Exception as exc:
            logger.warning("[TulipBrowser Settings] Loading settings failed; using defaults: %s", exc)
            settings = Settings()
        if settings is None:
            settings = Settings()
        self.view.show_settings(settings)
        return settings

    def read_form(self) -> Settings:
        theme = normalize_choice(str(self.view.read_theme() or DEFAULT_THEME), VALID_THEMES, DEFAULT_THEME)
        return Settings(theme=theme, font_size=coerce_font_size(self.view.read_font_size()))

    async def save_settings(self) -> bool:
        """Save the form; close on success, report and stay open on failure."""
        settings = self.read_form()
        logger.debug("[TulipBrowser Settings] Saving %s.", settings)
        try:
            await self.backend.save_settings(settings)
        except Exception as exc:
            logger.warning("[TulipBrowser Settings] Saving settings failed: %s", exc)
            await self.view.notify_error(SAVE_FAILED_TITLE, SAVE_FAILED_MESSAGE.format(error=exc))
            return False

        for listener in self._listeners:
            try:
                listener(settings)
            except Exception:
                logger.exception("[TulipBrowser Settings] Settings listener %r failed.", listener)
        self.view.close()
        return True
