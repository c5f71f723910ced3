"""Feed manager - owns the registry, fetcher, cache, queries and auto-refresh loop."""

from datetime import datetime
from typing import Dict, List, Optional

import structlog

from ..config.feeds import load_feeds
from ..config.settings import settings
from ..ingestion.fetcher import FeedFetcher
from ..ingestion.http import HttpClient
from ..ingestion.interfaces import (
    FeedDescriptor, ContentItem, FeedCategory, FeedPriority, FeedStatus
)
from ..storage.cache import ContentCache
from ..storage.queries import ContentQueries
from .scheduler import AutoRefreshScheduler

logger = structlog.get_logger()


class FeedManager:
    """Composition root for the RSS side of the service.

    Construct one per process; call close() on shutdown.
    """

    def __init__(
        self,
        feeds: List[FeedDescriptor] = None,
        cache: ContentCache = None,
        http: HttpClient = None,
        fetcher: FeedFetcher = None,
    ):
        self.feeds = feeds if feeds is not None else load_feeds()
        self.cache = cache or ContentCache()
        self.queries = ContentQueries(self.cache)
        self.fetcher = fetcher or FeedFetcher(http=http)
        self.scheduler = AutoRefreshScheduler(self.fetch_all_feeds)

    async def close(self):
        self.scheduler.shutdown()
        await self.fetcher.close()

    # ===== FETCHING =====

    async def fetch_all_feeds(self) -> List[ContentItem]:
        """Fetch every enabled feed by priority tier and cache the non-empty results."""
        results = await self.fetcher.fetch_all(self.feeds)

        all_content: List[ContentItem] = []
        for feed_name, items in results.items():
            if items:
                self.cache.store(feed_name, items)
                all_content.extend(items)

        logger.info(
            "all_feeds_fetched",
            feeds=len(results),
            items=len(all_content),
            cached_feeds=len(self.cache.feed_names()),
        )
        return all_content

    async def refresh_feed(self, feed_name: str) -> List[ContentItem]:
        """Fetch a single feed now and cache the result when non-empty.

        Inactive feeds are never fetched and yield an empty list.
        """
        feed = self.get_feed(feed_name)
        if feed is None:
            raise ValueError(f"Feed not found: {feed_name}")

        items = await self.fetcher.fetch_feed(feed)
        if items:
            self.cache.store(feed.name, items)
        return items

    # ===== REGISTRY =====

    def get_feed(self, feed_name: str) -> Optional[FeedDescriptor]:
        for feed in self.feeds:
            if feed.name == feed_name:
                return feed
        return None

    def get_feeds_by_category(self, category: FeedCategory) -> List[FeedDescriptor]:
        return [f for f in self.feeds if f.category == category]

    def get_feeds_by_priority(self, priority: FeedPriority) -> List[FeedDescriptor]:
        return [f for f in self.feeds if f.priority == priority]

    def get_feed_status(self) -> dict:
        """Counts by status and the most recent successful fetch."""
        fetched = [f.last_fetched for f in self.feeds if f.last_fetched]
        last_updated: Optional[datetime] = max(fetched) if fetched else None
        return {
            "total": len(self.feeds),
            "active": self._count(FeedStatus.ACTIVE),
            "error": self._count(FeedStatus.ERROR),
            "inactive": self._count(FeedStatus.INACTIVE),
            "last_updated": last_updated.isoformat() if last_updated else None,
        }

    def get_feed_health(self) -> dict:
        """Error rate over enabled feeds with advisory recommendations."""
        enabled = [f for f in self.feeds if f.enabled]
        failing = [f for f in enabled if f.status == FeedStatus.ERROR]
        error_rate = round(len(failing) / len(enabled) * 100, 1) if enabled else 0.0

        recommendations: List[str] = []
        if error_rate > settings.health_error_rate_threshold:
            recommendations.append(
                f"High error rate ({error_rate}%): review failing feed URLs and upstream availability"
            )
        for feed in sorted(failing, key=lambda f: f.consecutive_failures, reverse=True)[:5]:
            recommendations.append(
                f"Feed '{feed.name}' is failing ({feed.consecutive_failures} consecutive): {feed.last_error}"
            )
        if len(failing) > 5:
            recommendations.append(f"{len(failing) - 5} more feeds are failing")
        if not self.cache.feed_names():
            recommendations.append("No cached content yet: run a refresh")

        return {
            "total": len(self.feeds),
            "active": self._count(FeedStatus.ACTIVE),
            "error": len(failing),
            "inactive": self._count(FeedStatus.INACTIVE),
            "error_rate": error_rate,
            "failing_feeds": [
                {"name": f.name, "last_error": f.last_error, "consecutive_failures": f.consecutive_failures}
                for f in failing
            ],
            "recommendations": recommendations,
        }

    def _count(self, status: FeedStatus) -> int:
        return sum(1 for f in self.feeds if f.status == status)

    # ===== CACHE =====

    def get_cached_content(self, feed_name: str) -> List[ContentItem]:
        return self.cache.get(feed_name)

    def get_all_cached_content(self) -> List[ContentItem]:
        return self.cache.all_content()

    def clear_cache(self) -> None:
        self.cache.clear()

    # ===== LIFECYCLE =====

    def start_auto_refresh(self, interval_minutes: int = None) -> bool:
        """Start periodic refresh (no-op if already running). Needs a running event loop."""
        if interval_minutes is None:
            interval_minutes = settings.auto_refresh_interval_minutes
        return self.scheduler.start(interval_minutes)

    def stop_auto_refresh(self) -> None:
        self.scheduler.stop()

    def get_auto_refresh_status(self) -> dict:
        return self.scheduler.status()

    def get_comprehensive_status(self) -> Dict[str, dict]:
        return {
            "feeds": self.get_feed_status(),
            "auto_refresh": self.get_auto_refresh_status(),
            "cache": self.cache.stats(),
            "health": self.get_feed_health(),
        }
