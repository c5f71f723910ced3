"""Interface definitions for external API aggregation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from ..ingestion.http import HttpClient
from ..ingestion.interfaces import ContentItem

RSS_PLATFORM = "RSS"


@dataclass(frozen=True)
class AuthorInfo:
    """Author block of an aggregated record."""
    id: str = "anonymous"
    username: str = "Anonymous"
    reputation: int = 0


@dataclass(frozen=True)
class EngagementMetrics:
    """Engagement counters; zero when the upstream API has no such field."""
    views: int = 0
    likes: int = 0
    shares: int = 0
    comments: int = 0


@dataclass
class AggregatedItem:
    """A record from any external source, normalized to one shape."""
    id: str
    title: str
    url: str
    platform: str
    category: str
    timestamp: datetime
    description: str = ""
    body: str = ""
    author: AuthorInfo = field(default_factory=AuthorInfo)
    engagement: EngagementMetrics = field(default_factory=EngagementMetrics)
    tags: List[str] = field(default_factory=list)
    relevance_score: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_content_item(cls, item: ContentItem) -> "AggregatedItem":
        """Wrap a cached feed item so it merges with external records."""
        return cls(
            id=f"rss_{item.source}_{item.id}",
            title=item.title,
            url=item.url,
            platform=RSS_PLATFORM,
            category=item.category.value,
            timestamp=item.timestamp,
            description=item.content[:200],
            body=item.content,
            author=AuthorInfo(id=item.author, username=item.author),
            engagement=EngagementMetrics(
                likes=item.engagement.upvotes,
                comments=item.engagement.comments,
            ),
            tags=list(item.keywords),
            extra={"feed": item.source, "sentiment": item.sentiment.value},
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "body": self.body,
            "url": self.url,
            "platform": self.platform,
            "category": self.category,
            "author": {
                "id": self.author.id,
                "username": self.author.username,
                "reputation": self.author.reputation,
            },
            "timestamp": self.timestamp.isoformat(),
            "engagement": {
                "views": self.engagement.views,
                "likes": self.engagement.likes,
                "shares": self.engagement.shares,
                "comments": self.engagement.comments,
            },
            "tags": list(self.tags),
            "relevance_score": self.relevance_score,
            "extra": dict(self.extra),
        }


class ExternalSource:
    """Adapter for one public API.

    fetch_raw returns the upstream records; to_item maps one record. A
    record that cannot be mapped raises and is counted as invalid.
    """

    name: str = ""
    platform: str = ""
    category: str = ""

    async def fetch_raw(self, http: HttpClient) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def to_item(self, record: Dict[str, Any]) -> AggregatedItem:
        raise NotImplementedError
