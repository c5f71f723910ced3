"""External API aggregation - fetch, cache, validate, score and merge."""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

import structlog

from .interfaces import AggregatedItem, ExternalSource
from .relevance import RelevanceScorer
from .sources import default_sources
from ..config.settings import settings
from ..ingestion.http import HttpClient
from ..ingestion.interfaces import utcnow
from ..ingestion.retry import retry_async
from ..storage.cache import ContentCache
from ..validation.data_quality import DataQualityReport, DataQualityTracker, is_valid_item

logger = structlog.get_logger()

RSS_SOURCE = "rss"


@dataclass
class SourceSnapshot:
    """Validated items of one source and the raw count they came from."""
    items: List[AggregatedItem]
    total: int
    stored_at: float = 0.0


@dataclass
class AggregationResult:
    """Merged items, per-source lists and the data-quality report of one run."""
    items: List[AggregatedItem]
    by_source: Dict[str, List[AggregatedItem]]
    quality: DataQualityReport
    fetched_at: datetime = field(default_factory=utcnow)

    def source_summary(self) -> List[dict]:
        return [
            {
                "source": name,
                "count": len(items),
                "mean_relevance": _mean_relevance(items),
            }
            for name, items in self.by_source.items()
        ]

    def to_dict(self) -> dict:
        return {
            "fetched_at": self.fetched_at.isoformat(),
            "total": len(self.items),
            "items": [item.to_dict() for item in self.items],
            "sources": self.source_summary(),
            "quality": self.quality.to_dict(),
        }


class ExternalAPIAggregator:
    """Calls every external source concurrently and merges the results.

    Each source has its own TTL cache entry. A source that fails after
    retries falls back to its last entry, however old, or contributes
    nothing. Cached feed content, when a ContentCache is given, is merged
    in as platform RSS.
    """

    def __init__(
        self,
        sources: List[ExternalSource] = None,
        http: HttpClient = None,
        content_cache: ContentCache = None,
        scorer: RelevanceScorer = None,
        ttl_seconds: float = None,
        max_items: int = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.sources = sources if sources is not None else default_sources()
        self.http = http or HttpClient()
        self.content_cache = content_cache
        self.scorer = scorer or RelevanceScorer()
        self.ttl_seconds = settings.api_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_items = max_items or settings.aggregate_max_items
        self._clock = clock
        self._snapshots: Dict[str, SourceSnapshot] = {}
        self.last_result: Optional[AggregationResult] = None

    async def close(self):
        await self.http.close()

    def get_source(self, name: str) -> Optional[ExternalSource]:
        for source in self.sources:
            if source.name == name:
                return source
        return None

    async def fetch_all(self) -> AggregationResult:
        """One batch over all sources plus cached feed content."""
        snapshots = await asyncio.gather(*(self._load(source) for source in self.sources))

        tracker = DataQualityTracker()
        by_source: Dict[str, List[AggregatedItem]] = {}
        for source, snapshot in zip(self.sources, snapshots):
            by_source[source.name] = snapshot.items
            tracker.record(source.name, snapshot.total, len(snapshot.items))

        if self.content_cache is not None:
            feed_items = [AggregatedItem.from_content_item(c) for c in self.content_cache.all_content()]
            if feed_items:
                valid = self._score_valid(feed_items)
                by_source[RSS_SOURCE] = valid
                tracker.record(RSS_SOURCE, len(feed_items), len(valid))

        merged = _dedupe(item for items in by_source.values() for item in items)
        merged.sort(key=lambda item: (item.relevance_score, item.timestamp), reverse=True)

        ordered_sources = dict(sorted(
            by_source.items(),
            key=lambda entry: _mean_relevance(entry[1]),
            reverse=True,
        ))

        result = AggregationResult(
            items=merged[:self.max_items],
            by_source=ordered_sources,
            quality=tracker.report(),
        )
        self.last_result = result

        logger.info(
            "aggregation_complete",
            sources=len(by_source),
            items=len(result.items),
            quality=result.quality.overall_score,
        )
        return result

    async def fetch_source(self, name: str) -> List[AggregatedItem]:
        """Validated, scored items of one source, most relevant first."""
        source = self.get_source(name)
        if source is None:
            raise ValueError(f"Unknown source: {name}")

        snapshot = await self._load(source)
        return sorted(
            snapshot.items,
            key=lambda item: (item.relevance_score, item.timestamp),
            reverse=True,
        )

    async def quality_report(self) -> DataQualityReport:
        result = await self.fetch_all()
        return result.quality

    async def _load(self, source: ExternalSource) -> SourceSnapshot:
        cached = self._snapshots.get(source.name)
        if cached is not None and self._clock() - cached.stored_at < self.ttl_seconds:
            logger.debug("source_cache_hit", source=source.name)
            return cached

        start_time = time.monotonic()
        try:
            records = await retry_async(lambda: source.fetch_raw(self.http), name=source.name)
        except Exception as e:
            if cached is not None:
                logger.warning("source_serving_stale", source=source.name, error=str(e))
                return cached
            logger.error("source_fetch_failed", source=source.name, error=str(e))
            return SourceSnapshot(items=[], total=0)

        items = self._score_valid(self._map(source, records))
        snapshot = SourceSnapshot(items=items, total=len(records), stored_at=self._clock())
        self._snapshots[source.name] = snapshot

        logger.info(
            "source_fetched",
            source=source.name,
            raw=len(records),
            valid=len(items),
            elapsed_ms=int((time.monotonic() - start_time) * 1000),
        )
        return snapshot

    def _map(self, source: ExternalSource, records: List[dict]) -> List[AggregatedItem]:
        items = []
        for record in records:
            try:
                items.append(source.to_item(record))
            except (KeyError, TypeError, ValueError, AttributeError, IndexError) as e:
                logger.debug("source_record_skipped", source=source.name, error=str(e))
        return items

    def _score_valid(self, items: List[AggregatedItem]) -> List[AggregatedItem]:
        valid = [item for item in items if is_valid_item(item)]
        for item in valid:
            item.relevance_score = self.scorer.score(item)
        return valid


def _dedupe(items) -> List[AggregatedItem]:
    """Keep the first item per id, then the first per URL."""
    seen_ids = set()
    seen_urls = set()
    unique = []
    for item in items:
        if item.id in seen_ids:
            continue
        if item.url and item.url in seen_urls:
            continue
        seen_ids.add(item.id)
        if item.url:
            seen_urls.add(item.url)
        unique.append(item)
    return unique


def _mean_relevance(items: List[AggregatedItem]) -> float:
    if not items:
        return 0.0
    return round(sum(item.relevance_score for item in items) / len(items), 2)
