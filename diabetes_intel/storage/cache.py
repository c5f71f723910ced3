"""In-memory per-feed content cache."""

from typing import Dict, List

import structlog

from ..ingestion.interfaces import ContentItem

logger = structlog.get_logger()


class ContentCache:
    """Latest item list per feed name. Entries are replaced, never merged."""

    def __init__(self):
        self._entries: Dict[str, List[ContentItem]] = {}

    def store(self, feed_name: str, items: List[ContentItem]) -> None:
        """Replace the entry for feed_name with a fully built list."""
        self._entries[feed_name] = list(items)
        logger.debug("cache_entry_replaced", feed=feed_name, items=len(items))

    def get(self, feed_name: str) -> List[ContentItem]:
        return list(self._entries.get(feed_name, []))

    def all_content(self) -> List[ContentItem]:
        """Every cached item, in feed insertion order."""
        content: List[ContentItem] = []
        for items in self._entries.values():
            content.extend(items)
        return content

    def feed_names(self) -> List[str]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        logger.info("cache_cleared")

    def __len__(self) -> int:
        return sum(len(items) for items in self._entries.values())

    def stats(self) -> dict:
        return {
            "total_feeds": len(self._entries),
            "total_items": len(self),
        }
