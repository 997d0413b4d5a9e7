"""
Tulip Browser: a desktop reader for 2ch-style threaded discussion boards.

The controllers in this package are independent of any GUI toolkit; the toga
shell lives in ``tulip_browser.app`` and is imported only when the reader is
started.
"""

from .backend import Backend, HttpBackend, SettingsStore
from .exceptions import BackendError, TulipBrowserError
from .images import ImageProxyLoader
from .models import ResponseItem, Settings, Thread
from .refresh import ScrollRefreshGesture
from .resizer import PanelResizer
from .responses import ResponseRenderer
from .settings import SettingsPanelController
from .thread_list import ThreadListController

__all__ = [
    "Backend",
    "HttpBackend",
    "SettingsStore",
    "BackendError",
    "TulipBrowserError",
    "ImageProxyLoader",
    "ResponseItem",
    "Settings",
    "Thread",
    "ScrollRefreshGesture",
    "PanelResizer",
    "ResponseRenderer",
    "SettingsPanelController",
    "ThreadListController",
]
