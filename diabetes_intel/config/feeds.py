"""Feed registry loader."""

import json
from pathlib import Path
from typing import List

from ..ingestion.interfaces import FeedDescriptor, FeedCategory, FeedPriority, FeedStatus
from .settings import settings


def load_feeds(config_path: str = None) -> List[FeedDescriptor]:
    """Load feed descriptors from the JSON registry."""
    path = Path(config_path) if config_path else settings.feeds_path

    with open(path) as f:
        data = json.load(f)

    defaults = data.get("settings", {})
    feeds = []
    seen_names = set()
    for feed_data in data.get("feeds", []):
        name = feed_data["name"]
        if name in seen_names:
            raise ValueError(f"Duplicate feed name in registry: {name}")
        seen_names.add(name)

        enabled = feed_data.get("enabled", True)
        feeds.append(FeedDescriptor(
            name=name,
            url=feed_data.get("url", ""),
            json_url=feed_data.get("json_url", ""),
            category=FeedCategory(feed_data.get("category", defaults.get("default_category", "general"))),
            priority=FeedPriority(feed_data.get("priority", defaults.get("default_priority", 1))),
            status=FeedStatus.ACTIVE if enabled else FeedStatus.INACTIVE,
        ))

    return feeds
