"""Pytest configuration and shared fixtures."""

import pytest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from diabetes_intel.classification.interfaces import Sentiment
from diabetes_intel.config.settings import settings
from diabetes_intel.ingestion.interfaces import (
    ContentItem, Engagement, FeedCategory, FeedDescriptor, FeedPriority
)


RSS_SAMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <description>Diabetes news</description>
    <item>
      <title>New Dexcom CGM approved</title>
      <link>https://example.com/dexcom</link>
      <description>&lt;p&gt;The new &lt;b&gt;CGM&lt;/b&gt; sensor is a great improvement.&lt;/p&gt;</description>
      <pubDate>Tue, 05 Mar 2024 10:00:00 GMT</pubDate>
      <guid>item-1</guid>
    </item>
    <item>
      <title>Insulin pump recall</title>
      <link>https://example.com/pump</link>
      <description>A terrible problem with the pump battery.</description>
      <pubDate>Wed, 06 Mar 2024 10:00:00 GMT</pubDate>
      <guid>item-2</guid>
    </item>
    <item>
      <title>Exercise and glucose</title>
      <link>https://example.com/exercise</link>
      <description>How exercise changes glucose levels.</description>
      <pubDate>Thu, 07 Mar 2024 10:00:00 GMT</pubDate>
      <guid>item-3</guid>
    </item>
    <item>
      <link>https://example.com/untitled</link>
      <description>An item without a title.</description>
      <guid>item-4</guid>
    </item>
  </channel>
</rss>
"""

LISTING_SAMPLE = {
    "kind": "Listing",
    "data": {
        "children": [
            {"data": {
                "id": "abc1",
                "title": "My first week on Omnipod",
                "selftext": "The pump has been a great help so far.",
                "author": "t1d_runner",
                "created_utc": 1709632800,
                "permalink": "/r/Type1Diabetes/comments/abc1/omnipod/",
                "ups": 42,
                "num_comments": 7,
                "score": 40,
            }},
            {"data": {
                "id": "abc2",
                "title": "Low at night",
                "selftext": "",
                "created_utc": 1709636400,
                "permalink": "/r/Type1Diabetes/comments/abc2/low/",
            }},
            {"data": {"id": "abc3", "selftext": "No title here"}},
        ]
    },
}


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    """Retries run back to back in tests."""
    monkeypatch.setattr(settings, "retry_base_delay_seconds", 0.0)


@pytest.fixture
def sample_feed():
    """Provide a sample FeedDescriptor."""
    return FeedDescriptor(
        name="Test Feed",
        url="https://example.com/feed.xml",
        category=FeedCategory.DIABETES,
        priority=FeedPriority.HIGH,
    )


@pytest.fixture
def mock_http():
    """HttpClient stand-in with awaitable get_text/get_json/close."""
    http = MagicMock()
    http.get_text = AsyncMock(return_value=RSS_SAMPLE)
    http.get_json = AsyncMock(return_value=LISTING_SAMPLE)
    http.close = AsyncMock()
    return http


@pytest.fixture
def make_item():
    """Factory for ContentItems."""
    def _make(
        item_id,
        title="Untitled",
        content="",
        keywords=None,
        sentiment=Sentiment.NEUTRAL,
        timestamp=None,
        source="Test Feed",
        category=FeedCategory.DIABETES,
        url="",
    ):
        return ContentItem(
            id=item_id,
            title=title,
            content=content or title,
            author="tester",
            timestamp=timestamp or datetime.now(timezone.utc),
            source=source,
            category=category,
            url=url,
            engagement=Engagement(upvotes=1, comments=2, score=3),
            keywords=list(keywords or []),
            sentiment=sentiment,
        )
    return _make


@pytest.fixture
def rss_sample():
    return RSS_SAMPLE


@pytest.fixture
def listing_sample():
    return LISTING_SAMPLE
