# Vaul webhook emitter
#
# Posts a "commands-updated" event to an HTTP endpoint after each store
# update, so an external UI can refresh. Failed posts are queued and
# retried in a background thread after the next successful post. Never raises.

import json
import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Optional

import requests

logger = logging.getLogger(__name__)

EVENT_NAME = "commands-updated"


class WebhookEmitter:
    """Zero-argument store listener that forwards updates to a URL."""

    def __init__(self, url: str, timeout: float = 2, max_queue: int = 100):
        self.url = url
        self.timeout = timeout
        self._retry_queue = deque(maxlen=max_queue)  # oldest dropped first
        self._lock = threading.Lock()
        self._retry_thread: Optional[threading.Thread] = None

    def __call__(self) -> None:
        payload = json.dumps({
            "event": EVENT_NAME,
            "data": "updated",
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        })
        if self._post(payload):
            self._flush_retry_queue()
            return
        with self._lock:
            self._retry_queue.append(payload)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._retry_queue)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for a running retry flush to finish."""
        thread = self._retry_thread
        if thread is not None:
            thread.join(timeout)

    def _post(self, payload: str) -> bool:
        try:
            r = requests.post(
                self.url,
                data=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Webhook {self.url} unreachable: {e}")
            return False
        if not r.ok:
            logger.warning(f"Webhook {self.url} returned HTTP {r.status_code}")
        return r.ok

    def _flush_retry_queue(self) -> None:
        """Start a daemon thread resending queued events, unless one is running."""
        with self._lock:
            if not self._retry_queue:
                return
            if self._retry_thread is not None and self._retry_thread.is_alive():
                return
            self._retry_thread = threading.Thread(target=self._retry_worker, daemon=True)
            self._retry_thread.start()

    def _retry_worker(self) -> None:
        """Resend queued events in order; stop at the first failure."""
        while True:
            with self._lock:
                if not self._retry_queue:
                    return
                payload = self._retry_queue[0]
            if not self._post(payload):
                return
            with self._lock:
                if self._retry_queue and self._retry_queue[0] is payload:
                    self._retry_queue.popleft()
