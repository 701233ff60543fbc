"""
Reloads a CommandStore when its backing files change on disk.

Lets a long-running view (tray, `vaul --watch`) pick up edits made by
another `vaul` invocation or by hand. The store's own writes also fire
events; reload() ignores them because the data is unchanged.
"""
import logging
import threading
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .store import CommandStore

logger = logging.getLogger(__name__)


class StoreFileHandler(FileSystemEventHandler):
    """Routes filesystem events on the backing files to store.reload()."""

    def __init__(self, store: CommandStore, debounce_ms: int = 200):
        self.store = store
        self.debounce_ms = debounce_ms
        self.paths = {
            Path(store.commands_path).resolve(),
            Path(store.categories_path).resolve(),
        }
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def on_any_event(self, fs_event):
        if fs_event.is_directory:
            return
        # Atomic saves arrive as a move from the temp file onto the target
        touched = [fs_event.src_path, getattr(fs_event, "dest_path", "")]
        if any(p and Path(p).resolve() in self.paths for p in touched):
            self._schedule_reload()

    def _schedule_reload(self):
        """Reload once the burst of events has settled (trailing debounce)."""
        if self.debounce_ms <= 0:
            self._reload()
            return
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_ms / 1000, self._reload)
            self._timer.daemon = True
            self._timer.start()

    def _reload(self):
        try:
            self.store.reload()
        except Exception:
            logger.exception("Reload after file change failed")

    def cancel(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class StoreWatcher:
    """Watches the store's data directory. Usable as a context manager."""

    def __init__(self, store: CommandStore, debounce_ms: int = 200):
        self.store = store
        self.handler = StoreFileHandler(store, debounce_ms)
        self.directory = Path(store.commands_path).resolve().parent
        self._observer = None

    def start(self) -> None:
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(self.handler, str(self.directory), recursive=False)
        self._observer.start()
        logger.info(f"Watching {self.directory} for changes")

    def stop(self) -> None:
        if self._observer is None:
            return
        self.handler.cancel()
        self._observer.stop()
        self._observer.join()
        self._observer = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def __enter__(self) -> "StoreWatcher":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
