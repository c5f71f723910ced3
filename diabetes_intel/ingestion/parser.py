"""Normalize community JSON listings and RSS/Atom documents into ContentItems."""

import hashlib
import time
from datetime import datetime, timezone
from typing import Any, List, Optional

import feedparser
import structlog
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from .interfaces import FeedDescriptor, ContentItem, Engagement, utcnow
from ..classification.classifier import KeywordExtractor, SentimentAnalyzer
from ..config.settings import settings

logger = structlog.get_logger()

ANONYMOUS = "anonymous"

# RFC 822 zone names; dateutil leaves them naive otherwise.
RFC822_ZONES = {
    "UT": 0, "GMT": 0,
    "EST": -5 * 3600, "EDT": -4 * 3600,
    "CST": -6 * 3600, "CDT": -5 * 3600,
    "MST": -7 * 3600, "MDT": -6 * 3600,
    "PST": -8 * 3600, "PDT": -7 * 3600,
}


def clean_text(value: Optional[str]) -> str:
    """Strip HTML tags and entities and collapse whitespace."""
    if not value:
        return ""
    if "<" in value or "&" in value:
        value = BeautifulSoup(value, "html.parser").get_text(separator=" ")
    return " ".join(value.split())


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO 8601 / RFC 822 string or epoch seconds into an aware UTC datetime.

    Anything unparseable yields the current time.
    """
    if value is None or value == "":
        return utcnow()

    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(float(value), tz=timezone.utc)
        else:
            parsed = date_parser.parse(str(value), tzinfos=RFC822_ZONES)
    except (ValueError, TypeError, OverflowError, OSError):
        return utcnow()

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def struct_to_datetime(value: Optional[time.struct_time]) -> Optional[datetime]:
    """feedparser's *_parsed fields are UTC struct_time tuples."""
    if not value:
        return None
    try:
        return datetime(*value[:6], tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def synthesize_id(*parts: str) -> str:
    """Stable id for records without a native identifier."""
    return hashlib.sha256("|".join(p or "" for p in parts).encode()).hexdigest()[:16]


class FeedParser:
    """Turns raw feed payloads into ContentItems for one FeedDescriptor."""

    def __init__(
        self,
        keyword_extractor: KeywordExtractor = None,
        sentiment_analyzer: SentimentAnalyzer = None,
        max_items: int = None,
    ):
        self.keywords = keyword_extractor or KeywordExtractor()
        self.sentiment = sentiment_analyzer or SentimentAnalyzer()
        self.max_items = max_items or settings.max_items_per_feed

    def parse_listing(self, data: Any, feed: FeedDescriptor) -> List[ContentItem]:
        """Parse a community JSON listing: {data: {children: [{data: {...}}]}}."""
        if not isinstance(data, dict):
            return []
        children = (data.get("data") or {}).get("children") or []

        items: List[ContentItem] = []
        seen_ids = set()
        for child in children:
            if len(items) >= self.max_items:
                break
            post = child.get("data") if isinstance(child, dict) else None
            if not isinstance(post, dict):
                continue

            title = clean_text(post.get("title"))
            if not title:
                continue

            body = clean_text(post.get("selftext")) or title
            permalink = post.get("permalink") or ""
            url = f"https://www.reddit.com{permalink}" if permalink else (post.get("url") or "")
            item_id = str(post.get("id") or synthesize_id(title, url))
            if item_id in seen_ids:
                continue
            seen_ids.add(item_id)

            items.append(self._build_item(
                feed,
                item_id=item_id,
                title=title,
                content=body,
                author=post.get("author") or ANONYMOUS,
                timestamp=parse_timestamp(post.get("created_utc")),
                url=url,
                engagement=Engagement(
                    upvotes=as_int(post.get("ups")),
                    comments=as_int(post.get("num_comments")),
                    score=as_int(post.get("score")),
                ),
            ))

        return items

    def parse_xml(self, text: str, feed: FeedDescriptor) -> List[ContentItem]:
        """Parse an RSS 2.0 or Atom document; entries without a title are skipped."""
        parsed = feedparser.parse(text)
        if parsed.bozo and not parsed.entries:
            logger.debug(
                "feed_not_parseable",
                feed=feed.name,
                error=str(getattr(parsed, "bozo_exception", "")),
            )
            return []

        items: List[ContentItem] = []
        seen_ids = set()
        for entry in parsed.entries:
            if len(items) >= self.max_items:
                break
            try:
                item = self._parse_entry(entry, feed)
            except Exception as e:
                logger.debug("feed_entry_skipped", feed=feed.name, error=str(e))
                continue
            if item is None or item.id in seen_ids:
                continue
            seen_ids.add(item.id)
            items.append(item)

        logger.debug("feed_parsed", feed=feed.name, format=parsed.get("version", ""), items=len(items))
        return items

    def _parse_entry(self, entry, feed: FeedDescriptor) -> Optional[ContentItem]:
        """Parse a single RSS item or Atom entry."""
        title = clean_text(entry.get("title"))
        if not title:
            return None

        link = entry.get("link") or ""
        body = entry.get("summary") or entry.get("description") or ""
        if not body and entry.get("content"):
            body = entry.content[0].get("value", "")
        body = clean_text(body) or title

        timestamp = (
            struct_to_datetime(entry.get("published_parsed") or entry.get("updated_parsed"))
            or parse_timestamp(entry.get("published") or entry.get("updated") or entry.get("created"))
        )
        item_id = entry.get("id") or entry.get("guid") or synthesize_id(title, link)

        return self._build_item(
            feed,
            item_id=str(item_id),
            title=title,
            content=body,
            author=entry.get("author") or ANONYMOUS,
            timestamp=timestamp,
            url=link,
            engagement=Engagement(),
        )

    def _build_item(
        self,
        feed: FeedDescriptor,
        item_id: str,
        title: str,
        content: str,
        author: str,
        timestamp: datetime,
        url: str,
        engagement: Engagement,
    ) -> ContentItem:
        text = f"{title} {content}"
        return ContentItem(
            id=item_id,
            title=title,
            content=content,
            author=author,
            timestamp=timestamp,
            source=feed.name,
            category=feed.category,
            url=url,
            engagement=engagement,
            keywords=self.keywords.extract(text),
            sentiment=self.sentiment.analyze(text),
        )


def as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0
