from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Iterator, Optional

from ..core.constants import DEFAULT_STREAM_QUEUE_SIZE

logger = logging.getLogger(__name__)


class Subscription:
    """One connected live stream. Receives snapshots until closed."""

    def __init__(self, hub: "NotificationHub", maxsize: int):
        self._hub = hub
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=maxsize)
        self.closed = False

    def offer(self, payload: Any) -> bool:
        try:
            self._queue.put_nowait(payload)
            return True
        except queue.Full:
            # Slow consumer: drop the oldest snapshot, the newest one supersedes it.
            try:
                self._queue.get_nowait()
            except queue.Empty:
                pass
            try:
                self._queue.put_nowait(payload)
                return True
            except queue.Full:
                return False

    def get(self, timeout: Optional[float] = None) -> Optional[Any]:
        """Next payload, or None when nothing arrived within ``timeout``."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._hub.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class NotificationHub:
    """Fire-and-forget publish/subscribe for connected dashboard streams.

    Nothing is kept for subscribers that are not connected; a reconnecting
    client resyncs from the pull endpoint.
    """

    def __init__(self, *, queue_size: int = DEFAULT_STREAM_QUEUE_SIZE):
        self._queue_size = int(queue_size)
        self._lock = threading.Lock()
        self._subscribers: set[Subscription] = set()

    def subscribe(self) -> Subscription:
        sub = Subscription(self, self._queue_size)
        with self._lock:
            self._subscribers.add(sub)
        logger.debug("Live subscriber connected (%d total)", self.subscriber_count)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            self._subscribers.discard(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, payload: Any) -> int:
        with self._lock:
            targets = list(self._subscribers)
        delivered = sum(1 for sub in targets if sub.offer(payload))
        return delivered

    def listen(self, sub: Subscription, *, heartbeat_seconds: float) -> Iterator[Optional[Any]]:
        """Yield payloads as they arrive, and None on every idle heartbeat."""
        while not sub.closed:
            yield sub.get(timeout=heartbeat_seconds)
