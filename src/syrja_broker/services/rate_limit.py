"""Fixed-window admission control keyed by network origin."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from syrja_broker.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class RateRecord:
    """Request count for one origin within its current window."""

    window_start: float
    count: int


class RateLimiter:
    """Bound how many relay operations one origin may perform per window.

    The window is fixed, not sliding: once ``now - window_start`` exceeds the
    window length the record restarts at one. The table holds at most
    ``max_origins`` records and evicts the least recently seen origin first.
    """

    def __init__(
        self,
        limit: int | None = None,
        window_seconds: float | None = None,
        *,
        max_origins: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = settings.rate_limit_count if limit is None else limit
        self.window_seconds = (
            settings.rate_limit_window_seconds if window_seconds is None else window_seconds
        )
        self.max_origins = (
            settings.rate_limit_max_origins if max_origins is None else max_origins
        )
        self._clock = clock
        self._records: OrderedDict[str, RateRecord] = OrderedDict()
        self._lock = Lock()

    def admit(self, origin: str) -> bool:
        """Return True if ``origin`` may perform one more operation now."""
        now = self._clock()
        with self._lock:
            record = self._records.get(origin)
            if record is None or now - record.window_start > self.window_seconds:
                self._records[origin] = RateRecord(window_start=now, count=1)
                self._records.move_to_end(origin)
                self._evict_overflow()
                return True

            self._records.move_to_end(origin)
            if record.count >= self.limit:
                return False
            record.count += 1
            return True

    def sweep(self) -> int:
        """Drop records whose window has elapsed and return how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [
                origin
                for origin, record in self._records.items()
                if now - record.window_start > self.window_seconds
            ]
            for origin in stale:
                del self._records[origin]
        if stale:
            logger.debug("Swept %d stale rate-limit records", len(stale))
        return len(stale)

    def reset(self) -> None:
        """Forget every origin."""
        with self._lock:
            self._records.clear()

    @property
    def tracked_origins(self) -> int:
        """Return the number of origins currently tracked."""
        return len(self._records)

    def _evict_overflow(self) -> None:
        while len(self._records) > self.max_origins:
            origin, _ = self._records.popitem(last=False)
            logger.debug("Evicted rate-limit record for %s", origin)
