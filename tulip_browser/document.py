"""HTML for the response pane.

The response area is a single web view. Headers are escaped; the response
bodies are board markup and are inserted as-is.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Iterable

from .config import DEFAULT_FONT_SIZE
from .models import Settings
from .viewmodels import ResponseEntryViewModel


@dataclass(frozen=True)
class Palette:
    background: str
    panel: str
    text: str
    muted: str
    accent: str
    active: str
    badge: str


LIGHT_PALETTE = Palette(
    background="#FFFFFF",
    panel="#F3F5F8",
    text="#1B1F24",
    muted="#5B6673",
    accent="#2F6FDB",
    active="#D6E4FB",
    badge="#B3261E",
)

DARK_PALETTE = Palette(
    background="#0E1218",
    panel="#151C26",
    text="#F6FAFF",
    muted="#9AA8BC",
    accent="#5E9BFF",
    active="#29445F",
    badge="#FF8A80",
)


def palette_for(theme: str) -> Palette:
    return DARK_PALETTE if theme == "dark" else LIGHT_PALETTE


def render_entry(entry: ResponseEntryViewModel, content: str | None = None) -> str:
    """One ``<li>``; ``content`` overrides the entry body after image rewrites."""
    author = html.escape(entry.author)
    if entry.mail_href:
        author += (
            f' <a class="response-mail" href="{html.escape(entry.mail_href, quote=True)}">'
            f"{html.escape(entry.mail_label or '')}</a>"
        )
    badge = f' <span class="id-badge">{html.escape(entry.badge)}</span>' if entry.badge else ""
    body = entry.content if content is None else content
    return (
        '<li class="response-item">'
        '<div class="response-header">'
        f'<span class="response-number">{entry.number}</span> '
        f'<span class="response-author">{author}</span> '
        f'<span class="response-created-at">{html.escape(entry.date_line)}</span>{badge}'
        "</div>"
        f'<div class="response-content">{body}</div>'
        "</li>"
    )


def render_message(text: str) -> str:
    return '<li class="response-message">' + html.escape(text).replace("\n", "<br>") + "</li>"


def render_document(items: Iterable[str], settings: Settings | None = None) -> str:
    """Wrap pre-rendered ``<li>`` items in a themed page."""
    settings = settings or Settings()
    palette = palette_for(settings.theme)
    font_size = settings.font_size or DEFAULT_FONT_SIZE
    return f"""<!DOCTYPE html>
<html><head><meta charset="utf-8"><style>
body {{ background: {palette.background}; color: {palette.text}; font-size: {font_size}px;
       font-family: sans-serif; margin: 0; padding: 8px 12px; }}
ul {{ list-style: none; margin: 0; padding: 0; }}
.response-item {{ padding: 6px 0; border-bottom: 1px solid {palette.panel}; }}
.response-header {{ color: {palette.muted}; font-size: 0.85em; margin-bottom: 4px; }}
.response-author {{ color: {palette.accent}; font-weight: bold; }}
.response-mail {{ margin-left: 5px; color: {palette.accent}; }}
.id-badge {{ color: {palette.badge}; margin-left: 4px; }}
.response-content img {{ max-width: 100%; }}
.response-message {{ color: {palette.muted}; padding: 12px 0; }}
</style></head>
<body><ul id="response-list">{"".join(items)}</ul></body></html>"""
