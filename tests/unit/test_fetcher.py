"""Unit tests for the feed fetcher."""

from unittest.mock import MagicMock, AsyncMock

import aiohttp
import pytest

from diabetes_intel.ingestion.fetcher import FeedFetcher, is_valid_feed_url
from diabetes_intel.ingestion.interfaces import (
    FeedCategory, FeedDescriptor, FeedPriority, FeedStatus
)


class TestFeedUrlValidation:
    """Tests for is_valid_feed_url."""

    @pytest.mark.parametrize("url", [
        "https://example.com/feed.xml",
        "http://example.com/rss",
    ])
    def test_valid(self, url):
        assert is_valid_feed_url(url)

    @pytest.mark.parametrize("url", ["", "   ", "not a url", "ftp://example.com/feed", "https://"])
    def test_invalid(self, url):
        assert not is_valid_feed_url(url)


@pytest.mark.asyncio
class TestFetchFeed:
    """Tests for FeedFetcher.fetch_feed with a mocked HTTP client."""

    async def test_invalid_url_makes_no_call(self, mock_http):
        """A malformed URL is a configuration error: no request, no status change."""
        feed = FeedDescriptor(
            name="Broken", url="not a url",
            category=FeedCategory.GENERAL, priority=FeedPriority.LOW,
        )
        fetcher = FeedFetcher(http=mock_http)

        items = await fetcher.fetch_feed(feed)

        assert items == []
        mock_http.get_text.assert_not_awaited()
        mock_http.get_json.assert_not_awaited()
        assert feed.status == FeedStatus.ACTIVE
        assert feed.last_fetched is None

    async def test_inactive_feed_is_not_fetched(self, mock_http, sample_feed):
        sample_feed.status = FeedStatus.INACTIVE
        fetcher = FeedFetcher(http=mock_http)

        items = await fetcher.fetch_feed(sample_feed)

        assert items == []
        mock_http.get_text.assert_not_awaited()
        assert sample_feed.status == FeedStatus.INACTIVE

    async def test_success_after_two_failures(self, mock_http, sample_feed, rss_sample):
        """Two transient failures then success should leave the feed active."""
        mock_http.get_text = AsyncMock(side_effect=[
            aiohttp.ClientError("reset"),
            aiohttp.ClientError("reset"),
            rss_sample,
        ])
        fetcher = FeedFetcher(http=mock_http)

        items = await fetcher.fetch_feed(sample_feed)

        assert len(items) == 3
        assert mock_http.get_text.await_count == 3
        assert sample_feed.status == FeedStatus.ACTIVE
        assert sample_feed.last_fetched is not None
        assert sample_feed.consecutive_failures == 0

    async def test_exhausted_retries(self, mock_http, sample_feed):
        """Three failures should return nothing and mark the feed in error."""
        mock_http.get_text = AsyncMock(side_effect=aiohttp.ClientError("unreachable"))
        fetcher = FeedFetcher(http=mock_http)

        items = await fetcher.fetch_feed(sample_feed)

        assert items == []
        assert mock_http.get_text.await_count == 3
        assert sample_feed.status == FeedStatus.ERROR
        assert sample_feed.last_error == "unreachable"
        assert sample_feed.consecutive_failures == 1

    async def test_recovers_from_error(self, mock_http, sample_feed):
        """An errored feed returns to active on the next successful fetch."""
        sample_feed.status = FeedStatus.ERROR
        sample_feed.last_error = "old"
        sample_feed.consecutive_failures = 4

        await FeedFetcher(http=mock_http).fetch_feed(sample_feed)

        assert sample_feed.status == FeedStatus.ACTIVE
        assert sample_feed.last_error is None
        assert sample_feed.consecutive_failures == 0

    async def test_json_endpoint_preferred(self, mock_http, sample_feed):
        """The structured endpoint is used when it works."""
        sample_feed.json_url = "https://example.com/feed.json"
        fetcher = FeedFetcher(http=mock_http)

        items = await fetcher.fetch_feed(sample_feed)

        assert [item.id for item in items] == ["abc1", "abc2"]
        mock_http.get_json.assert_awaited_once_with("https://example.com/feed.json")
        mock_http.get_text.assert_not_awaited()

    async def test_json_failure_falls_back_to_xml(self, mock_http, sample_feed):
        """A failing JSON endpoint falls through to the XML URL in the same attempt."""
        sample_feed.json_url = "https://example.com/feed.json"
        mock_http.get_json = AsyncMock(side_effect=ValueError("invalid json"))
        fetcher = FeedFetcher(http=mock_http)

        items = await fetcher.fetch_feed(sample_feed)

        assert len(items) == 3
        assert mock_http.get_json.await_count == 1
        mock_http.get_text.assert_awaited_once_with(sample_feed.url)

    async def test_fetch_complete_callback(self, mock_http, sample_feed):
        callback = MagicMock()
        fetcher = FeedFetcher(http=mock_http, on_fetch_complete=callback)

        await fetcher.fetch_feed(sample_feed)

        callback.assert_called_once()
        assert callback.call_args.kwargs["feed_name"] == "Test Feed"
        assert callback.call_args.kwargs["items"] == 3
        assert callback.call_args.kwargs["error"] is None


@pytest.mark.asyncio
class TestFetchAll:
    """Tests for tiered fetching."""

    async def test_tiers_in_priority_order(self, mock_http, rss_sample):
        """High tier settles before medium, medium before low; inactive feeds are skipped."""
        calls = []

        async def get_text(url):
            calls.append(url)
            return rss_sample

        mock_http.get_text = AsyncMock(side_effect=get_text)
        feeds = [
            FeedDescriptor("low", "https://example.com/low", FeedCategory.GENERAL, FeedPriority.LOW),
            FeedDescriptor("high", "https://example.com/high", FeedCategory.DIABETES, FeedPriority.HIGH),
            FeedDescriptor("medium", "https://example.com/medium", FeedCategory.LIFESTYLE, FeedPriority.MEDIUM),
            FeedDescriptor(
                "off", "https://example.com/off", FeedCategory.GENERAL, FeedPriority.HIGH,
                status=FeedStatus.INACTIVE,
            ),
        ]
        fetcher = FeedFetcher(http=mock_http)

        results = await fetcher.fetch_all(feeds)

        assert calls == [
            "https://example.com/high",
            "https://example.com/medium",
            "https://example.com/low",
        ]
        assert set(results) == {"high", "medium", "low"}
        assert all(len(items) == 3 for items in results.values())

    async def test_one_failing_feed_does_not_abort(self, mock_http, rss_sample):
        async def get_text(url):
            if "bad" in url:
                raise aiohttp.ClientError("down")
            return rss_sample

        mock_http.get_text = AsyncMock(side_effect=get_text)
        good = FeedDescriptor("good", "https://example.com/good", FeedCategory.DIABETES, FeedPriority.HIGH)
        bad = FeedDescriptor("bad", "https://example.com/bad", FeedCategory.DIABETES, FeedPriority.HIGH)

        results = await FeedFetcher(http=mock_http).fetch_all([good, bad])

        assert len(results["good"]) == 3
        assert results["bad"] == []
        assert bad.status == FeedStatus.ERROR
        assert good.status == FeedStatus.ACTIVE
