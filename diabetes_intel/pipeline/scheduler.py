"""Auto-refresh loop: one APScheduler interval job plus an immediate first cycle."""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..ingestion.interfaces import utcnow

logger = structlog.get_logger()

JOB_ID = "auto_refresh"


@dataclass
class AutoRefreshState:
    """Observable state of the auto-refresh loop."""
    is_active: bool = False
    interval_minutes: int = 0
    last_auto_refresh: Optional[datetime] = None
    next_scheduled_refresh: Optional[datetime] = None
    total_auto_refreshes: int = 0
    last_error: Optional[str] = None
    last_duration_ms: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "is_active": self.is_active,
            "interval_minutes": self.interval_minutes,
            "last_auto_refresh": self.last_auto_refresh.isoformat() if self.last_auto_refresh else None,
            "next_scheduled_refresh": (
                self.next_scheduled_refresh.isoformat() if self.next_scheduled_refresh else None
            ),
            "total_auto_refreshes": self.total_auto_refreshes,
            "last_error": self.last_error,
            "last_duration_ms": self.last_duration_ms,
        }


class AutoRefreshScheduler:
    """Periodically awaits a refresh coroutine; a failing cycle never stops the loop."""

    def __init__(self, refresh: Callable[[], Awaitable]):
        self._refresh = refresh
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._initial_task: Optional[asyncio.Task] = None
        self.state = AutoRefreshState()

    def start(self, interval_minutes: int) -> bool:
        """Start the loop. Must run inside an event loop; returns False if already active."""
        if self.state.is_active:
            logger.info("auto_refresh_already_active", interval_minutes=self.state.interval_minutes)
            return False
        if interval_minutes <= 0:
            raise ValueError(f"Refresh interval must be positive: {interval_minutes}")

        loop = asyncio.get_running_loop()

        self.state.interval_minutes = interval_minutes
        self.state.is_active = True
        self.state.next_scheduled_refresh = utcnow() + timedelta(minutes=interval_minutes)

        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(event_loop=loop)
        self._scheduler.add_job(
            self.run_cycle,
            IntervalTrigger(minutes=interval_minutes),
            id=JOB_ID,
            name="Refresh all feeds",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        else:
            self._scheduler.resume()

        # First data without waiting a full interval
        self._initial_task = loop.create_task(self.run_cycle())

        logger.info("auto_refresh_started", interval_minutes=interval_minutes)
        return True

    def stop(self) -> None:
        """Clear the timer. In-flight cycles are left to finish."""
        if self._scheduler is not None and self._scheduler.get_job(JOB_ID):
            self._scheduler.remove_job(JOB_ID)
            # Pause rather than shut down: shutdown cancels running coroutine jobs
            self._scheduler.pause()
            logger.info("auto_refresh_stopped", total_auto_refreshes=self.state.total_auto_refreshes)

        self.state.is_active = False
        self.state.next_scheduled_refresh = None

    def shutdown(self) -> None:
        """Stop and release the underlying scheduler (process teardown)."""
        self.stop()
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._scheduler = None

    async def run_cycle(self) -> None:
        """Run one refresh and record its outcome."""
        start_time = time.monotonic()
        try:
            await self._refresh()
        except Exception as e:
            self.state.last_error = str(e) or type(e).__name__
            logger.error("auto_refresh_failed", error=self.state.last_error)
        else:
            self.state.total_auto_refreshes += 1
            self.state.last_error = None
        finally:
            self.state.last_duration_ms = int((time.monotonic() - start_time) * 1000)
            self.state.last_auto_refresh = utcnow()
            if self.state.is_active:
                self.state.next_scheduled_refresh = utcnow() + timedelta(
                    minutes=self.state.interval_minutes
                )

        logger.info(
            "auto_refresh_cycle_complete",
            duration_ms=self.state.last_duration_ms,
            total=self.state.total_auto_refreshes,
            error=self.state.last_error,
        )

    @property
    def job_count(self) -> int:
        """Number of scheduled timer jobs (0 or 1)."""
        if self._scheduler is None:
            return 0
        return len(self._scheduler.get_jobs())

    def status(self) -> dict:
        return self.state.to_dict()
