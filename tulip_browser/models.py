"""Value objects received from the backend.

All records are immutable; a reload produces fresh instances rather than
mutating what is already on screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .config import ANONYMOUS_AUTHOR, DEFAULT_FONT_SIZE, DEFAULT_THEME, VALID_THEMES


def normalize_choice(value: str, allowed: list[str], fallback: str) -> str:
    """Normalize value by case-insensitive exact match against allowed values."""
    needle = value.strip().lower()
    for option in allowed:
        if option.lower() == needle:
            return option
    return fallback


def coerce_font_size(value: Any, fallback: int = DEFAULT_FONT_SIZE) -> int:
    """Parse a positive integer font size, falling back on anything else."""
    try:
        size = int(str(value).strip())
    except (TypeError, ValueError):
        return fallback
    return size if size > 0 else fallback


@dataclass(frozen=True)
class Thread:
    """One discussion topic in the thread index."""

    id: str
    title: str
    created_at: str
    response_count: int


@dataclass(frozen=True)
class ResponseItem:
    """One post within a thread.

    ``id_occurrence_count`` is the 1-based index of this post among the posts
    sharing ``parsed_user_id``; ``id_total_count`` is how many such posts the
    thread holds. Both are 0 when the post carries no ID.
    """

    number: int
    author: str
    mail: str | None
    created_at: str
    user_id_info: str | None
    parsed_user_id: str | None
    id_occurrence_count: int
    id_total_count: int
    content: str

    def __post_init__(self) -> None:
        if not 0 <= self.id_occurrence_count <= self.id_total_count:
            raise ValueError(
                "id_occurrence_count must be within [0, id_total_count]; got "
                f"{self.id_occurrence_count}/{self.id_total_count}."
            )

    @property
    def display_author(self) -> str:
        return self.author or ANONYMOUS_AUTHOR

    @property
    def has_id_badge(self) -> bool:
        return bool(self.parsed_user_id) and self.id_total_count > 1


@dataclass(frozen=True)
class Settings:
    """User display preferences."""

    theme: str = DEFAULT_THEME
    font_size: int = DEFAULT_FONT_SIZE

    def to_dict(self) -> dict[str, Any]:
        """Persistable settings representation."""
        return {"theme": self.theme, "font_size": self.font_size}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Settings:
        """Load settings with safe defaults for missing or invalid fields."""
        data = data or {}
        return cls(
            theme=normalize_choice(str(data.get("theme") or DEFAULT_THEME), VALID_THEMES, DEFAULT_THEME),
            font_size=coerce_font_size(data.get("font_size")),
        )
