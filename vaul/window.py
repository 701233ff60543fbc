"""
Main window reference shared between the GUI host and auxiliary services.

This module is the API a GUI host (window, tray) calls; nothing in the
CLI uses it.

The host sets the reference once the window exists; services read it from
other threads (tray callbacks), so access goes through a lock. The window
object only needs show(), focus() and unminimise().
"""
import logging
import threading
from typing import Any, Optional

logger = logging.getLogger(__name__)


class WindowRef:
    """Lock-guarded holder for the active main window."""

    def __init__(self, window: Any = None):
        self._lock = threading.Lock()
        self._window = window

    def set(self, window: Any) -> None:
        with self._lock:
            self._window = window

    def get(self) -> Optional[Any]:
        with self._lock:
            return self._window


class WindowService:
    """Window operations exposed to the frontend (e.g. "open main window" from the tray)."""

    def __init__(self, ref: WindowRef):
        self.ref = ref

    def open_main_window(self) -> bool:
        """Show, focus and restore the main window. Returns False if none is set."""
        window = self.ref.get()
        if window is None:
            logger.warning("WindowService: main window reference is not set")
            return False

        window.show()
        window.focus()
        window.unminimise()
        return True
