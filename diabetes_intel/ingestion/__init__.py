"""Feed ingestion - fetching and parsing community and RSS/Atom feeds."""

from .interfaces import (
    FeedDescriptor, FeedCategory, FeedPriority, FeedStatus,
    ContentItem, Engagement, FetcherInterface
)
from .http import HttpClient
from .parser import FeedParser, parse_timestamp
from .fetcher import FeedFetcher, is_valid_feed_url
from .retry import retry_async

__all__ = [
    "FeedDescriptor", "FeedCategory", "FeedPriority", "FeedStatus",
    "ContentItem", "Engagement", "FetcherInterface", "HttpClient",
    "FeedParser", "parse_timestamp", "FeedFetcher", "is_valid_feed_url",
    "retry_async"
]
