"""HTTP API over the feed manager and the external API aggregator."""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, HTTPException, Query

from .aggregation.aggregator import ExternalAPIAggregator
from .config.settings import settings
from .ingestion.http import HttpClient
from .ingestion.interfaces import FeedCategory, FeedPriority, utcnow
from .pipeline.manager import FeedManager

logger = structlog.get_logger()


def _parse_category(value: Optional[str]) -> Optional[FeedCategory]:
    if not value:
        return None
    try:
        return FeedCategory(value.lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown category: {value}")


def _parse_priority(value: Optional[str]) -> Optional[FeedPriority]:
    if not value:
        return None
    try:
        return FeedPriority[value.upper()]
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown priority: {value}")


def create_app(
    manager: FeedManager = None,
    aggregator: ExternalAPIAggregator = None,
) -> FastAPI:
    """Build the API. Components not given share one HTTP client."""
    if manager is None or aggregator is None:
        http = HttpClient()
        manager = manager or FeedManager(http=http)
        aggregator = aggregator or ExternalAPIAggregator(http=http, content_cache=manager.cache)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_refresh_on_start:
            manager.start_auto_refresh()
        yield
        await manager.close()
        await aggregator.close()
        logger.info("api_shutdown")

    app = FastAPI(title="Diabetes Intel", lifespan=lifespan)
    app.state.manager = manager
    app.state.aggregator = aggregator

    # ===== HEALTH =====

    @app.get("/health")
    async def health_check():
        """Liveness plus a short feed summary."""
        status = manager.get_feed_status()
        return {
            "status": "healthy",
            "timestamp": utcnow().isoformat(),
            "feeds": status["total"],
            "feeds_in_error": status["error"],
            "cached_items": len(manager.cache),
        }

    # ===== FEEDS =====

    @app.get("/feeds")
    async def list_feeds(category: Optional[str] = None, priority: Optional[str] = None):
        feeds = manager.feeds
        parsed_category = _parse_category(category)
        parsed_priority = _parse_priority(priority)
        if parsed_category is not None:
            feeds = [f for f in feeds if f.category == parsed_category]
        if parsed_priority is not None:
            feeds = [f for f in feeds if f.priority == parsed_priority]

        return {
            "feeds": [f.to_dict() for f in feeds],
            "count": len(feeds),
            "status": manager.get_feed_status(),
        }

    @app.get("/feeds/status")
    async def feeds_status():
        return manager.get_comprehensive_status()

    @app.post("/feeds/refresh")
    async def refresh_all():
        items = await manager.fetch_all_feeds()
        return {"items": len(items), "status": manager.get_feed_status()}

    @app.post("/feeds/{feed_name}/refresh")
    async def refresh_one(feed_name: str):
        try:
            items = await manager.refresh_feed(feed_name)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))

        feed = manager.get_feed(feed_name)
        return {
            "feed": feed.to_dict(),
            "items": [item.to_dict() for item in items],
        }

    # ===== AUTO-REFRESH =====

    @app.post("/auto-refresh/start")
    async def start_auto_refresh(interval: Optional[int] = None):
        try:
            started = manager.start_auto_refresh(interval)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"started": started, **manager.get_auto_refresh_status()}

    @app.post("/auto-refresh/stop")
    async def stop_auto_refresh():
        manager.stop_auto_refresh()
        return manager.get_auto_refresh_status()

    @app.get("/auto-refresh")
    async def auto_refresh_status():
        return manager.get_auto_refresh_status()

    # ===== CONTENT =====

    @app.get("/content/search")
    async def search_content(q: str = "", category: Optional[str] = None):
        items = manager.queries.search(q, _parse_category(category))
        return {"query": q, "count": len(items), "items": [item.to_dict() for item in items]}

    @app.get("/content/category/{category}")
    async def content_by_category(category: str, limit: Optional[int] = Query(None, ge=1)):
        items = manager.queries.by_category(_parse_category(category), limit)
        return {"category": category.lower(), "count": len(items), "items": [item.to_dict() for item in items]}

    @app.get("/content/trending")
    async def trending(limit: int = Query(10, ge=1, le=100)):
        return {"topics": [topic.to_dict() for topic in manager.queries.trending_topics(limit)]}

    @app.get("/content/stats")
    async def content_stats(days: int = Query(7, ge=1, le=90)):
        return manager.queries.stats(days)

    # ===== AGGREGATION =====

    @app.get("/aggregate")
    async def aggregate():
        result = await aggregator.fetch_all()
        return result.to_dict()

    @app.get("/aggregate/quality")
    async def aggregate_quality():
        report = await aggregator.quality_report()
        return report.to_dict()

    @app.get("/aggregate/{source}")
    async def aggregate_source(source: str):
        try:
            items = await aggregator.fetch_source(source)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"source": source, "count": len(items), "items": [item.to_dict() for item in items]}

    return app
