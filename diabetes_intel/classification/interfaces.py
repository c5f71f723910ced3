"""Interface definitions for keyword and sentiment tagging."""

from typing import List
from enum import Enum


class Sentiment(Enum):
    """Lexicon sentiment label attached to every content item."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class KeywordExtractorInterface:
    """Interface for keyword extraction."""

    def extract(self, text: str) -> List[str]:
        """Return the vocabulary terms present in text."""
        raise NotImplementedError


class SentimentAnalyzerInterface:
    """Interface for sentiment tagging."""

    def analyze(self, text: str) -> Sentiment:
        """Label text as positive, negative or neutral."""
        raise NotImplementedError
