from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ..core.constants import DEFAULT_COOLDOWN_MINUTES, DEFAULT_SWEEP_INTERVAL_SECONDS
from ..core.enums import ActionKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionCacheEntry:
    child_id: int
    day: date
    action: ActionKind
    at: datetime


class ActionCache:
    """Short-lived memory of the last committed action per (child, day).

    Suppresses accidental double scans inside the cooldown window. It is a
    safety net only: per-child serialization and conditional ledger writes
    are what keep the ledger free of duplicates.
    """

    def __init__(self, *, cooldown: timedelta = timedelta(minutes=DEFAULT_COOLDOWN_MINUTES)):
        self._cooldown = cooldown
        self._lock = threading.Lock()
        self._entries: dict[tuple[int, date], ActionCacheEntry] = {}

    @property
    def cooldown(self) -> timedelta:
        return self._cooldown

    def should_reject(self, child_id: int, day: date, now: datetime) -> bool:
        with self._lock:
            entry = self._entries.get((int(child_id), day))
        return entry is not None and now - entry.at < self._cooldown

    def record(self, child_id: int, day: date, action: ActionKind, now: datetime) -> None:
        # Overwrite, never merge: only the latest action inside the window counts.
        with self._lock:
            self._entries[(int(child_id), day)] = ActionCacheEntry(
                child_id=int(child_id),
                day=day,
                action=action,
                at=now,
            )

    def sweep(self, now: datetime) -> int:
        with self._lock:
            stale = [key for key, entry in self._entries.items() if now - entry.at > self._cooldown]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Action cache sweep removed %d entries", len(stale))
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CacheSweeper:
    """Background thread that sweeps an ActionCache at a fixed interval."""

    def __init__(
        self,
        cache: ActionCache,
        now: Callable[[], datetime],
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ):
        self._cache = cache
        self._now = now
        self._interval = float(interval_seconds)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="action-cache-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self._cache.sweep(self._now())
            except Exception:
                logger.exception("Action cache sweep failed")
