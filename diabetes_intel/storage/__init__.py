"""In-memory content cache and read-side queries."""

from .cache import ContentCache
from .queries import ContentQueries, TrendingTopic

__all__ = ["ContentCache", "ContentQueries", "TrendingTopic"]
