"""
Presentation view models.

Pure Thread/ResponseItem -> display transforms. Nothing here touches a widget,
so every string the UI shows can be checked without a rendering environment.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import ResponseItem, Thread


@dataclass(frozen=True)
class ThreadRowViewModel:
    """One row of the thread list."""

    thread_id: str
    title: str
    header: str
    response_count_label: str


@dataclass(frozen=True)
class ResponseEntryViewModel:
    """One entry of the response list. ``content`` is trusted board markup."""

    number: int
    author: str
    mail_href: str | None
    mail_label: str | None
    date_line: str
    badge: str | None
    content: str


def id_badge(item: ResponseItem) -> str | None:
    """``"[occurrence/total]"`` when the poster ID repeats in the thread."""
    if not item.has_id_badge:
        return None
    return f"[{item.id_occurrence_count}/{item.id_total_count}]"


def thread_row(thread: Thread) -> ThreadRowViewModel:
    return ThreadRowViewModel(
        thread_id=thread.id,
        title=thread.title,
        header=thread.created_at,
        response_count_label=f"{thread.response_count} res",
    )


def response_entry(item: ResponseItem) -> ResponseEntryViewModel:
    return ResponseEntryViewModel(
        number=item.number,
        author=item.display_author,
        mail_href=f"mailto:{item.mail}" if item.mail else None,
        mail_label=f"[{item.mail}]" if item.mail else None,
        date_line=f"{item.created_at} {item.user_id_info or ''}".strip(),
        badge=id_badge(item),
        content=item.content,
    )


def error_message(summary: str, error: BaseException | str) -> str:
    """Inline error text carrying the failure detail."""
    detail = str(error).strip()
    return f"{summary}\n{detail}" if detail else summary
