"""Data-quality accounting for aggregated sources."""

from dataclasses import dataclass, field
from typing import Dict, List

import structlog

from ..config.settings import settings
from ..ingestion.parser import clean_text

logger = structlog.get_logger()

MIN_TITLE_LENGTH = 3


def is_valid_item(item) -> bool:
    """Minimal validity: non-empty id and a cleaned title of at least three characters."""
    if not item.id or not item.title:
        return False
    return len(clean_text(item.title)) >= MIN_TITLE_LENGTH


@dataclass
class SourceQuality:
    """Raw vs. surviving item counts for one source."""
    source: str
    total: int = 0
    valid: int = 0

    @property
    def invalid(self) -> int:
        return self.total - self.valid

    @property
    def score(self) -> float:
        """Pass rate in percent; a source that returned nothing scores 0."""
        if self.total == 0:
            return 0.0
        return round(self.valid / self.total * 100, 1)

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "total": self.total,
            "valid": self.valid,
            "invalid": self.invalid,
            "score": self.score,
        }


@dataclass
class DataQualityReport:
    """Per-source pass rates with an overall score and flagged sources."""
    sources: Dict[str, SourceQuality] = field(default_factory=dict)
    threshold: float = 70.0

    @property
    def total(self) -> int:
        return sum(q.total for q in self.sources.values())

    @property
    def valid(self) -> int:
        return sum(q.valid for q in self.sources.values())

    @property
    def overall_score(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.valid / self.total * 100, 1)

    @property
    def flagged_sources(self) -> List[SourceQuality]:
        return [q for q in self.sources.values() if q.score < self.threshold]

    def recommendations(self) -> List[str]:
        recs = []
        for quality in self.flagged_sources:
            if quality.total == 0:
                recs.append(f"{quality.source}: no items returned, check upstream availability")
            else:
                recs.append(
                    f"{quality.source}: {quality.score}% of items passed validation "
                    f"({quality.invalid} of {quality.total} dropped), review the source mapping"
                )
        if self.sources and self.overall_score < self.threshold:
            recs.append(f"Overall data quality {self.overall_score}% is below {self.threshold}%")
        return recs

    def to_dict(self) -> dict:
        return {
            "overall_score": self.overall_score,
            "total": self.total,
            "valid": self.valid,
            "threshold": self.threshold,
            "sources": [q.to_dict() for q in self.sources.values()],
            "flagged_sources": [q.source for q in self.flagged_sources],
            "recommendations": self.recommendations(),
        }


class DataQualityTracker:
    """Accumulates validation counts while a batch is processed."""

    def __init__(self, threshold: float = None):
        self.threshold = settings.quality_threshold if threshold is None else threshold
        self._sources: Dict[str, SourceQuality] = {}

    def record(self, source: str, total: int, valid: int) -> SourceQuality:
        """Record one source's counts, replacing any earlier entry for it."""
        quality = SourceQuality(source=source, total=total, valid=valid)
        self._sources[source] = quality

        if quality.score < self.threshold:
            logger.warning(
                "source_quality_low",
                source=source,
                total=total,
                valid=valid,
                score=quality.score,
            )
        return quality

    def report(self) -> DataQualityReport:
        return DataQualityReport(sources=dict(self._sources), threshold=self.threshold)
