"""Interface definitions for feed ingestion."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict
from enum import Enum

from ..classification.interfaces import Sentiment


class FeedPriority(Enum):
    """Priority tiers - fetched in this order within one refresh cycle."""
    HIGH = 0      # Core communities, manufacturers, journals
    MEDIUM = 1    # Forums, blogs, regional communities
    LOW = 2       # General science, news searches


class FeedCategory(Enum):
    """Topic category inherited by every item of a feed."""
    DIABETES = "diabetes"
    MEDICAL = "medical"
    RESEARCH = "research"
    LIFESTYLE = "lifestyle"
    TECHNOLOGY = "technology"
    REGIONAL = "regional"
    GENERAL = "general"


class FeedStatus(Enum):
    """Fetch state of a feed. INACTIVE is only ever set at registration."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FeedDescriptor:
    """Configuration and fetch state for a single feed."""
    name: str
    url: str
    category: FeedCategory
    priority: FeedPriority
    json_url: str = ""
    status: FeedStatus = FeedStatus.ACTIVE
    last_fetched: Optional[datetime] = None
    last_error: Optional[str] = None
    consecutive_failures: int = 0

    @property
    def enabled(self) -> bool:
        return self.status != FeedStatus.INACTIVE

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "url": self.url,
            "json_url": self.json_url or None,
            "category": self.category.value,
            "priority": self.priority.name.lower(),
            "status": self.status.value,
            "last_fetched": self.last_fetched.isoformat() if self.last_fetched else None,
            "last_error": self.last_error,
            "consecutive_failures": self.consecutive_failures,
        }


@dataclass(frozen=True)
class Engagement:
    """Community engagement counters (zero when the source has none)."""
    upvotes: int = 0
    comments: int = 0
    score: int = 0


@dataclass(frozen=True)
class ContentItem:
    """A normalized item fetched from a feed."""
    id: str
    title: str
    content: str
    author: str
    timestamp: datetime
    source: str
    category: FeedCategory
    url: str = ""
    engagement: Engagement = field(default_factory=Engagement)
    keywords: List[str] = field(default_factory=list)
    sentiment: Sentiment = Sentiment.NEUTRAL

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
            "category": self.category.value,
            "url": self.url,
            "engagement": {
                "upvotes": self.engagement.upvotes,
                "comments": self.engagement.comments,
                "score": self.engagement.score,
            },
            "keywords": list(self.keywords),
            "sentiment": self.sentiment.value,
        }


class FetcherInterface:
    """Interface for feed fetching."""

    async def fetch_feed(self, feed: FeedDescriptor) -> List[ContentItem]:
        """Fetch items from a single feed."""
        raise NotImplementedError

    async def fetch_all(self, feeds: List[FeedDescriptor]) -> Dict[str, List[ContentItem]]:
        """Fetch every enabled feed, tier by tier."""
        raise NotImplementedError
