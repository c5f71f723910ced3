"""Unit tests for the content cache and query layer."""

from datetime import datetime, timedelta, timezone

from diabetes_intel.classification.interfaces import Sentiment
from diabetes_intel.ingestion.interfaces import FeedCategory
from diabetes_intel.storage.cache import ContentCache
from diabetes_intel.storage.queries import ContentQueries


class TestContentCache:
    """Tests for ContentCache."""

    def test_store_replaces_entry(self, make_item):
        cache = ContentCache()
        cache.store("feed", [make_item("1"), make_item("2")])
        cache.store("feed", [make_item("3")])

        assert [item.id for item in cache.get("feed")] == ["3"]
        assert len(cache) == 1

    def test_get_returns_copy(self, make_item):
        cache = ContentCache()
        cache.store("feed", [make_item("1")])

        cache.get("feed").clear()

        assert len(cache.get("feed")) == 1

    def test_unknown_feed(self):
        assert ContentCache().get("missing") == []

    def test_stats_and_clear(self, make_item):
        cache = ContentCache()
        cache.store("a", [make_item("1"), make_item("2")])
        cache.store("b", [make_item("3")])

        assert cache.stats() == {"total_feeds": 2, "total_items": 3}
        assert cache.feed_names() == ["a", "b"]

        cache.clear()

        assert cache.stats() == {"total_feeds": 0, "total_items": 0}


class TestContentQueries:
    """Tests for ContentQueries."""

    def _queries(self, items_by_feed):
        cache = ContentCache()
        for feed_name, items in items_by_feed.items():
            cache.store(feed_name, items)
        return ContentQueries(cache)

    def test_recent_is_newest_first(self, make_item):
        now = datetime.now(timezone.utc)
        queries = self._queries({
            "a": [make_item("old", timestamp=now - timedelta(days=2))],
            "b": [make_item("new", timestamp=now)],
        })

        assert [item.id for item in queries.recent()] == ["new", "old"]

    def test_search_title_content_keywords(self, make_item):
        queries = self._queries({"feed": [
            make_item("1", title="Dexcom G7 review"),
            make_item("2", title="Morning run", content="Kept my GLUCOSE steady"),
            make_item("3", title="Weekend", keywords=["dexcom"]),
            make_item("4", title="Unrelated"),
        ]})

        assert {item.id for item in queries.search("dexcom")} == {"1", "3"}
        assert [item.id for item in queries.search("glucose")] == ["2"]

    def test_search_is_idempotent(self, make_item):
        queries = self._queries({"feed": [make_item("1", title="Insulin pricing")]})

        first = queries.search("insulin")
        second = queries.search("insulin")

        assert first == second

    def test_search_category_filter(self, make_item):
        queries = self._queries({
            "a": [make_item("1", title="Insulin study", category=FeedCategory.RESEARCH)],
            "b": [make_item("2", title="Insulin recipe", category=FeedCategory.LIFESTYLE)],
        })

        results = queries.search("insulin", FeedCategory.RESEARCH)

        assert [item.id for item in results] == ["1"]

    def test_by_category_limit(self, make_item):
        now = datetime.now(timezone.utc)
        queries = self._queries({"feed": [
            make_item(str(i), category=FeedCategory.MEDICAL, timestamp=now - timedelta(hours=i))
            for i in range(5)
        ]})

        results = queries.by_category(FeedCategory.MEDICAL, limit=2)

        assert [item.id for item in results] == ["0", "1"]
        assert queries.by_category(FeedCategory.REGIONAL) == []
        assert queries.by_category(FeedCategory.MEDICAL, limit=0) == []

    def test_trending_topics_ranked_by_count(self, make_item):
        queries = self._queries({"feed": [
            make_item("1", keywords=["cgm", "pump"], sentiment=Sentiment.POSITIVE),
            make_item("2", keywords=["cgm"], sentiment=Sentiment.POSITIVE),
            make_item("3", keywords=["cgm", "pump"], sentiment=Sentiment.NEGATIVE),
            make_item("4", keywords=["exercise"]),
        ]})

        topics = queries.trending_topics()

        assert [t.keyword for t in topics] == ["cgm", "pump", "exercise"]
        assert topics[0].count == 3
        assert topics[0].sentiment == Sentiment.POSITIVE

    def test_trending_sentiment_tie_is_neutral(self, make_item):
        queries = self._queries({"feed": [
            make_item("1", keywords=["pump"], sentiment=Sentiment.POSITIVE),
            make_item("2", keywords=["pump"], sentiment=Sentiment.NEGATIVE),
        ]})

        assert queries.trending_topics()[0].sentiment == Sentiment.NEUTRAL

    def test_trending_limit(self, make_item):
        queries = self._queries({"feed": [make_item("1", keywords=["a", "b", "c"])]})

        assert len(queries.trending_topics(limit=2)) == 2

    def test_stats(self, make_item):
        now = datetime.now(timezone.utc)
        queries = self._queries({
            "a": [
                make_item("1", sentiment=Sentiment.POSITIVE, timestamp=now),
                make_item("2", timestamp=now - timedelta(days=1)),
            ],
            "b": [make_item("3", category=FeedCategory.RESEARCH, source="b", timestamp=now - timedelta(days=30))],
        })

        stats = queries.stats(days=7)

        assert stats["total_items"] == 3
        assert stats["by_category"] == {"diabetes": 2, "research": 1}
        assert stats["by_source"] == {"Test Feed": 2, "b": 1}
        assert stats["by_sentiment"] == {"positive": 1, "negative": 0, "neutral": 2}
        assert len(stats["daily"]) == 7
        assert stats["daily"][-1] == {"date": now.date().isoformat(), "count": 1}
        assert sum(day["count"] for day in stats["daily"]) == 2

    def test_empty_stats(self):
        stats = ContentQueries(ContentCache()).stats()

        assert stats["total_items"] == 0
        assert all(day["count"] == 0 for day in stats["daily"])
