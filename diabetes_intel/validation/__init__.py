"""Validation of aggregated data."""

from .data_quality import DataQualityReport, DataQualityTracker, SourceQuality, is_valid_item

__all__ = ["DataQualityReport", "DataQualityTracker", "SourceQuality", "is_valid_item"]
