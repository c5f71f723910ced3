"""Keyword extraction and lexicon sentiment for content items."""

from .interfaces import Sentiment, KeywordExtractorInterface, SentimentAnalyzerInterface
from .classifier import KeywordExtractor, SentimentAnalyzer

__all__ = [
    "Sentiment", "KeywordExtractorInterface", "SentimentAnalyzerInterface",
    "KeywordExtractor", "SentimentAnalyzer"
]
