"""Unit tests for classification module."""

import pytest

from diabetes_intel.classification.classifier import KeywordExtractor, SentimentAnalyzer
from diabetes_intel.classification.interfaces import Sentiment


class TestKeywordExtractor:
    """Tests for KeywordExtractor."""

    def test_extracts_vocabulary_terms(self):
        """Should return only vocabulary terms present in the text."""
        extractor = KeywordExtractor()

        keywords = extractor.extract("New Dexcom CGM approved for kids with Type 1")

        assert "cgm" in keywords
        assert "dexcom" in keywords
        assert "type 1" in keywords
        assert "insulin" not in keywords

    def test_case_insensitive_substring(self):
        """Should match regardless of case, including inside longer words."""
        extractor = KeywordExtractor()

        assert "carb" in extractor.extract("CARBOHYDRATE counting tips")

    def test_vocabulary_order(self):
        """Should list terms in vocabulary order, not text order."""
        extractor = KeywordExtractor()

        keywords = extractor.extract("pump settings and glucose trends")

        assert keywords.index("glucose") < keywords.index("pump")

    def test_empty_text(self):
        """Should return nothing for empty text."""
        assert KeywordExtractor().extract("") == []
        assert KeywordExtractor().extract(None) == []


class TestSentimentAnalyzer:
    """Tests for SentimentAnalyzer."""

    @pytest.mark.parametrize("text,expected", [
        ("This new sensor is great and really helps", Sentiment.POSITIVE),
        ("A terrible problem with the pump", Sentiment.NEGATIVE),
        ("A great pump with one problem", Sentiment.NEUTRAL),
        ("Pump settings for the weekend", Sentiment.NEUTRAL),
    ])
    def test_lexicon_counts(self, text, expected):
        """Should compare positive and negative lexicon hits."""
        assert SentimentAnalyzer().analyze(text) == expected

    def test_each_word_counts_once(self):
        """Repeating a word should not outweigh two distinct words."""
        analyzer = SentimentAnalyzer()

        assert analyzer.analyze("good good good, but bad and awful") == Sentiment.NEGATIVE

    def test_empty_text_is_neutral(self):
        assert SentimentAnalyzer().analyze("") == Sentiment.NEUTRAL
