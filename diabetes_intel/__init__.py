"""Diabetes community feed ingestion and public API aggregation."""

__version__ = "0.1.0"
