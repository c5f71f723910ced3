"""Feed fetcher with format fallback, priority tiers and retries."""

import asyncio
import time
from typing import Callable, Dict, List
from urllib.parse import urlparse

import structlog

from .http import HttpClient
from .interfaces import (
    FeedDescriptor, ContentItem, FeedPriority, FeedStatus, FetcherInterface, utcnow
)
from .parser import FeedParser
from .retry import retry_async
from ..config.settings import settings

logger = structlog.get_logger()


def is_valid_feed_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not url or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class FeedFetcher(FetcherInterface):
    """Async feed fetcher: structured endpoint first, XML fallback, tiered fan-out."""

    def __init__(
        self,
        http: HttpClient = None,
        parser: FeedParser = None,
        on_fetch_complete: Callable = None,
        max_attempts: int = None,
        base_delay: float = None,
    ):
        self.http = http or HttpClient()
        self.parser = parser or FeedParser()
        self.semaphore = asyncio.Semaphore(settings.max_concurrent_fetches)
        self.on_fetch_complete = on_fetch_complete  # Callback for stats
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        await self.http.close()

    async def fetch_feed(self, feed: FeedDescriptor) -> List[ContentItem]:
        """Fetch one feed, updating its status as a side effect. Never raises."""
        if not feed.enabled:
            logger.info("feed_inactive_skipped", feed=feed.name)
            return []
        if not is_valid_feed_url(feed.url):
            logger.error("feed_config_invalid", feed=feed.name, url=feed.url)
            return []

        start_time = time.monotonic()
        try:
            items = await retry_async(
                lambda: self._fetch_once(feed),
                name=f"feed:{feed.name}",
                attempts=self.max_attempts,
                base_delay=self.base_delay,
            )
        except Exception as e:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            feed.status = FeedStatus.ERROR
            feed.last_error = str(e) or type(e).__name__
            feed.consecutive_failures += 1
            logger.error("feed_fetch_failed", feed=feed.name, error=feed.last_error)
            self._notify(feed.name, error=feed.last_error, fetch_time_ms=elapsed_ms)
            return []

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        if items:
            feed.status = FeedStatus.ACTIVE
            feed.last_fetched = utcnow()
            feed.last_error = None
            feed.consecutive_failures = 0

        logger.info("feed_fetched", feed=feed.name, items=len(items), time_ms=elapsed_ms)
        self._notify(feed.name, items=len(items), fetch_time_ms=elapsed_ms)
        return items

    async def _fetch_once(self, feed: FeedDescriptor) -> List[ContentItem]:
        """One attempt: structured JSON endpoint, then the XML primary URL.

        The concurrency slot is held per attempt, never across backoff sleeps.
        """
        async with self.semaphore:
            if feed.json_url and feed.json_url.strip():
                try:
                    data = await self.http.get_json(feed.json_url)
                    return self.parser.parse_listing(data, feed)
                except Exception as e:
                    logger.warning("feed_json_fallback", feed=feed.name, error=str(e))

            text = await self.http.get_text(feed.url)
            return self.parser.parse_xml(text, feed)

    async def fetch_all(self, feeds: List[FeedDescriptor]) -> Dict[str, List[ContentItem]]:
        """Fetch enabled feeds tier by tier; each tier settles before the next starts."""
        results: Dict[str, List[ContentItem]] = {}

        for priority in FeedPriority:
            tier = [f for f in feeds if f.priority == priority and f.enabled]
            if not tier:
                continue

            tier_results = await asyncio.gather(*(self.fetch_feed(f) for f in tier))
            for feed, items in zip(tier, tier_results):
                results[feed.name] = items

            logger.info(
                "feed_tier_fetched",
                tier=priority.name.lower(),
                feeds=len(tier),
                items=sum(len(items) for items in tier_results),
            )

        return results

    def _notify(self, feed_name: str, items: int = 0, error: str = None, fetch_time_ms: int = 0):
        if self.on_fetch_complete:
            self.on_fetch_complete(
                feed_name=feed_name,
                items=items,
                error=error,
                fetch_time_ms=fetch_time_ms
            )
