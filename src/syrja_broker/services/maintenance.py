"""Background housekeeping for the broker.

This module provides the MaintenanceWorker class, which periodically removes
expired directory entries from durable storage and drops rate-limit records
whose window has elapsed, so neither table grows without bound.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from syrja_broker.core.settings import settings
from syrja_broker.db.session import SessionLocal
from syrja_broker.services.directory import DirectoryStore
from syrja_broker.services.rate_limit import RateLimiter

# Configure logger for this module
logger = logging.getLogger(__name__)


@dataclass
class MaintenanceReport:
    """What a single maintenance pass removed."""

    expired_ids: int = 0
    stale_rate_records: int = 0


class MaintenanceWorker:
    """Periodically purges expired ids and stale rate-limit windows."""

    def __init__(
        self,
        limiter: RateLimiter,
        session_factory: Callable[[], Session] = SessionLocal,
        interval_seconds: float | None = None,
    ) -> None:
        """Initialize the maintenance worker.

        Args:
            limiter: Rate limiter whose stale records should be swept.
            session_factory: Factory producing database sessions for purges.
            interval_seconds: Delay between passes; 0 or less disables the loop.
        """
        self.limiter = limiter
        self._session_factory = session_factory
        self.interval = (
            settings.maintenance_interval_seconds
            if interval_seconds is None
            else interval_seconds
        )
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background loop."""
        if self.interval <= 0:
            return

        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def run_once(self) -> MaintenanceReport:
        """Run a single maintenance pass."""
        report = MaintenanceReport()
        report.stale_rate_records = self.limiter.sweep()
        try:
            report.expired_ids = await asyncio.to_thread(self._purge_directory)
        except SQLAlchemyError as e:
            logger.warning("Directory purge failed: %s", e)
        return report

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
                return
            except TimeoutError:
                pass
            report = await self.run_once()
            logger.debug(
                "Maintenance pass removed %d expired id(s) and %d rate record(s)",
                report.expired_ids,
                report.stale_rate_records,
            )

    def _purge_directory(self) -> int:
        db = self._session_factory()
        try:
            return DirectoryStore(db).purge_expired()
        finally:
            db.close()
