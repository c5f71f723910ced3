"""Pipeline orchestration - feed manager and auto-refresh loop."""

from .scheduler import AutoRefreshScheduler, AutoRefreshState
from .manager import FeedManager

__all__ = ["AutoRefreshScheduler", "AutoRefreshState", "FeedManager"]
