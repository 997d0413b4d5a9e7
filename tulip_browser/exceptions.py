"""Exception types raised by tulip_browser collaborators."""

from __future__ import annotations


class TulipBrowserError(Exception):
    """Base class for all tulip_browser errors."""


class BackendError(TulipBrowserError):
    """A backend command failed (network, HTTP status, parse or storage error).

    Controllers never let this cross their boundary: they render the message
    inline or fall back to defaults.
    """

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url
