"""Long-running worker that keeps the feed cache fresh.

Runs one refresh immediately, then every DI_AUTO_REFRESH_INTERVAL_MINUTES.

Usage:
    python scripts/worker.py [interval_minutes]
"""

import os
import sys
import asyncio
import signal

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import structlog

from diabetes_intel.config.log_setup import configure_logging
from diabetes_intel.config.settings import settings
from diabetes_intel.pipeline.manager import FeedManager

logger = structlog.get_logger()


class RefreshWorker:
    """Owns a FeedManager and its auto-refresh loop."""

    def __init__(self, interval_minutes: int = None):
        self.manager = FeedManager()
        self.interval_minutes = interval_minutes or settings.auto_refresh_interval_minutes
        self.running = True

    def start(self):
        self.manager.start_auto_refresh(self.interval_minutes)
        logger.info("worker_started", interval_minutes=self.interval_minutes, feeds=len(self.manager.feeds))

    def stop(self):
        """Stop scheduling; the event loop exits on the next tick."""
        self.running = False
        self.manager.stop_auto_refresh()

    async def health_check(self):
        health = self.manager.get_feed_health()
        if health["recommendations"]:
            logger.warning(
                "feed_health_degraded",
                error_rate=health["error_rate"],
                recommendations=health["recommendations"],
            )
        else:
            logger.debug("feed_health_ok", active=health["active"])
        return health


async def main():
    """Main entry point."""
    configure_logging()
    interval = int(sys.argv[1]) if len(sys.argv) > 1 else None
    worker = RefreshWorker(interval)

    # Handle graceful shutdown
    def signal_handler(signum, frame):
        logger.info("shutdown_signal_received", signal=signum)
        worker.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    worker.start()

    ticks = 0
    try:
        while worker.running:
            await asyncio.sleep(1)
            ticks += 1
            if ticks % 3600 == 0:
                await worker.health_check()
    finally:
        await worker.manager.close()
        logger.info("worker_stopped", **worker.manager.get_auto_refresh_status())


if __name__ == "__main__":
    asyncio.run(main())
