"""Constants and configuration for the board reader."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

APP_NAME = "tulip-browser"

DEFAULT_BOARD_URL = "https://tulipplantation.com/tulipplantation"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
USER_AGENT = "tulip-browser/0.1 (+https://tulipplantation.com)"

# Hosts known to refuse hot-linked images; their sources go through the proxy.
DEFAULT_IMAGE_PREFIXES = ("https://i.imgur.com/", "http://i.imgur.com/")

# Placeholder and message text shown in the UI
ANONYMOUS_AUTHOR = "anonymous"
NO_THREADS_TEXT = "No threads to display."
NO_RESPONSES_TEXT = "This thread has no responses."
THREADS_ERROR_TEXT = "Failed to load threads."
RESPONSES_ERROR_TEXT = "Failed to load responses."
REFRESHING_TEXT = "Refreshing..."
UNKNOWN_DATE_TEXT = "unknown date"
IMAGE_FAILED_ALT_TEXT = "Image could not be loaded: {src}"

# Settings
VALID_THEMES = ["light", "dark"]
DEFAULT_THEME = "light"
DEFAULT_FONT_SIZE = 14
SETTINGS_FILENAME = "setting.json"
SETTINGS_KEY = "app_settings"

# Thread list panel
PANEL_DEFAULT_WIDTH = 300
PANEL_MIN_WIDTH = 180
PANEL_MAX_WIDTH = "60%"


@dataclass(frozen=True)
class BoardConfig:
    """Where threads, thread files and images come from."""

    board_url: str = DEFAULT_BOARD_URL
    timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    image_prefixes: tuple[str, ...] = DEFAULT_IMAGE_PREFIXES

    @property
    def subject_url(self) -> str:
        return f"{self.board_url.rstrip('/')}/subject.json"

    def dat_url(self, thread_id: str) -> str:
        return f"{self.board_url.rstrip('/')}/thread/{thread_id[:4]}/{thread_id}.dat"

    @classmethod
    def from_env(cls) -> BoardConfig:
        prefixes = os.getenv("TULIP_IMAGE_PREFIXES")
        return cls(
            board_url=os.getenv("TULIP_BOARD_URL", DEFAULT_BOARD_URL),
            timeout=float(os.getenv("TULIP_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT_SECONDS))),
            image_prefixes=(
                tuple(p.strip() for p in prefixes.split(",") if p.strip())
                if prefixes
                else DEFAULT_IMAGE_PREFIXES
            ),
        )


@dataclass(frozen=True)
class PanelConfig:
    """Thread list panel sizing. ``max_width`` is pixels or a ``"NN%"`` string."""

    default_width: int = PANEL_DEFAULT_WIDTH
    min_width: int = PANEL_MIN_WIDTH
    max_width: int | str = field(default=PANEL_MAX_WIDTH)

    def __post_init__(self) -> None:
        if self.min_width < 0:
            raise ValueError("min_width must be >= 0")
        if isinstance(self.max_width, str) and not self.max_width.strip().endswith("%"):
            raise ValueError(f"max_width must be pixels or a percentage; got '{self.max_width}'.")
