"""External API aggregation - public sources merged with cached feed content."""

from .interfaces import AggregatedItem, AuthorInfo, EngagementMetrics, ExternalSource
from .relevance import RelevanceScorer
from .sources import (
    HackerNewsSource, GitHubSource, PubMedSource, ClinicalTrialsSource,
    RedditSource, FDADeviceEventSource, OpenFDADrugLabelSource, default_sources
)
from .aggregator import ExternalAPIAggregator, AggregationResult

__all__ = [
    "AggregatedItem", "AuthorInfo", "EngagementMetrics", "ExternalSource",
    "RelevanceScorer", "HackerNewsSource", "GitHubSource", "PubMedSource",
    "ClinicalTrialsSource", "RedditSource", "FDADeviceEventSource",
    "OpenFDADrugLabelSource", "default_sources", "ExternalAPIAggregator",
    "AggregationResult",
]
