#!/usr/bin/env python3
"""Refresh every feed and every external source once and print a summary."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from diabetes_intel.aggregation.aggregator import ExternalAPIAggregator
from diabetes_intel.config.log_setup import configure_logging
from diabetes_intel.ingestion.http import HttpClient
from diabetes_intel.pipeline.manager import FeedManager


async def run_refresh() -> dict:
    async with HttpClient() as http:
        manager = FeedManager(http=http)
        aggregator = ExternalAPIAggregator(http=http, content_cache=manager.cache)

        items = await manager.fetch_all_feeds()
        result = await aggregator.fetch_all()

        return {
            "items": len(items),
            "feeds": manager.get_feed_status(),
            "health": manager.get_feed_health(),
            "trending": manager.queries.trending_topics(5),
            "aggregate": result,
        }


def main():
    configure_logging()

    print("\n" + "=" * 50)
    print("DIABETES INTEL REFRESH")
    print("=" * 50 + "\n")

    stats = asyncio.run(run_refresh())

    feeds = stats["feeds"]
    print("FEEDS:")
    print(f"  Items: {stats['items']} from {feeds['active']} active feeds")
    print(f"  Errors: {feeds['error']}, inactive: {feeds['inactive']}, total: {feeds['total']}")
    print(f"  Error rate: {stats['health']['error_rate']}%")

    print("\nTRENDING:")
    for topic in stats["trending"]:
        print(f"  {topic.keyword}: {topic.count} ({topic.sentiment.value})")

    result = stats["aggregate"]
    print(f"\nAGGREGATE: {len(result.items)} items")
    for summary in result.source_summary():
        print(f"  {summary['source']}: {summary['count']} items, mean relevance {summary['mean_relevance']}")

    quality = result.quality
    print(f"\nDATA QUALITY: {quality.overall_score}%")
    for rec in quality.recommendations() + stats["health"]["recommendations"]:
        print(f"  - {rec}")
    print()


if __name__ == "__main__":
    main()
