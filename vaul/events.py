"""
Update notification: tells listeners (UI views, CLI watch loop, webhook)
that the store changed so they can refresh.

A single callback slot is kept for the primary listener (last registration
wins); additional listeners subscribe to a list.
"""
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[], None]


class UpdateNotifier:
    """Routes store updates to the registered callback and subscribers."""

    def __init__(self):
        self.callback: Optional[UpdateCallback] = None
        self.subscribers: List[UpdateCallback] = []

    def set_callback(self, callback: Optional[UpdateCallback]) -> None:
        """Replace the primary callback. None clears it."""
        self.callback = callback

    def subscribe(self, callback: UpdateCallback) -> UpdateCallback:
        """Register an additional listener. Returns it for later unsubscribe()."""
        if callback not in self.subscribers:
            self.subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: UpdateCallback) -> None:
        if callback in self.subscribers:
            self.subscribers.remove(callback)

    def emit(self) -> None:
        """Call every listener. A failing listener is logged and skipped."""
        listeners = [self.callback] if self.callback else []
        listeners.extend(self.subscribers)
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception(f"Update listener {listener!r} failed")
