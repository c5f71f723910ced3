"""Read-side queries over the content cache."""

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional

from .cache import ContentCache
from ..classification.interfaces import Sentiment
from ..ingestion.interfaces import ContentItem, FeedCategory, utcnow


@dataclass
class TrendingTopic:
    """A keyword with its item count and majority sentiment."""
    keyword: str
    count: int
    sentiment: Sentiment

    def to_dict(self) -> dict:
        return {"keyword": self.keyword, "count": self.count, "sentiment": self.sentiment.value}


class ContentQueries:
    """Search, filters, trending topics and statistics on cached content.

    Every query works on the flattened view of all cached items sorted
    newest first.
    """

    def __init__(self, cache: ContentCache):
        self.cache = cache

    def recent(self) -> List[ContentItem]:
        """All cached items, newest first."""
        return sorted(self.cache.all_content(), key=lambda item: item.timestamp, reverse=True)

    def search(self, query: str, category: Optional[FeedCategory] = None) -> List[ContentItem]:
        """Case-insensitive substring match on title, content and keywords."""
        needle = (query or "").lower()
        items = self.recent()
        if category is not None:
            items = [item for item in items if item.category == category]

        return [
            item for item in items
            if needle in f"{item.title} {item.content} {' '.join(item.keywords)}".lower()
        ]

    def by_category(self, category: FeedCategory, limit: int = None) -> List[ContentItem]:
        items = [item for item in self.recent() if item.category == category]
        return items[:limit] if limit is not None else items

    def trending_topics(self, limit: int = 10) -> List[TrendingTopic]:
        """Most frequent keywords; sentiment is the majority label, ties go to neutral."""
        counts: Counter = Counter()
        tallies: Dict[str, Counter] = defaultdict(Counter)

        for item in self.recent():
            for keyword in item.keywords:
                counts[keyword] += 1
                tallies[keyword][item.sentiment] += 1

        topics = [
            TrendingTopic(keyword=keyword, count=count, sentiment=_majority(tallies[keyword]))
            for keyword, count in counts.items()
        ]
        topics.sort(key=lambda topic: topic.count, reverse=True)
        return topics[:limit]

    def stats(self, days: int = 7) -> dict:
        """Totals by category, source and sentiment plus a trailing daily histogram."""
        items = self.recent()

        by_category = Counter(item.category.value for item in items)
        by_source = Counter(item.source for item in items)
        by_sentiment = Counter(item.sentiment.value for item in items)

        today = utcnow().date()
        window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
        per_day = Counter(item.timestamp.date() for item in items)

        return {
            "total_items": len(items),
            "by_category": dict(by_category),
            "by_source": dict(by_source),
            "by_sentiment": {s.value: by_sentiment.get(s.value, 0) for s in Sentiment},
            "daily": [{"date": day.isoformat(), "count": per_day.get(day, 0)} for day in window],
        }


def _majority(tally: Counter) -> Sentiment:
    positive = tally[Sentiment.POSITIVE]
    negative = tally[Sentiment.NEGATIVE]
    neutral = tally[Sentiment.NEUTRAL]

    if positive > negative and positive > neutral:
        return Sentiment.POSITIVE
    if negative > positive and negative > neutral:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
