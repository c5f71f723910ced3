"""Vocabulary keyword extraction and lexicon sentiment tagging."""

from typing import List

from .interfaces import (
    KeywordExtractorInterface, SentimentAnalyzerInterface, Sentiment
)


class KeywordExtractor(KeywordExtractorInterface):
    """Matches text against a fixed diabetes vocabulary."""

    VOCABULARY: List[str] = [
        # Conditions
        "type 1", "type 2", "t1d", "t2d", "diabetes", "prediabetes",
        "hypoglycemia", "hyperglycemia", "dka", "ketoacidosis",
        # Measurements
        "glucose", "blood sugar", "a1c", "hba1c", "time in range",
        # Treatment
        "insulin", "basal", "bolus", "metformin", "glp-1", "ozempic",
        "carb", "keto", "low carb",
        # Devices and software
        "cgm", "pump", "dexcom", "libre", "freestyle", "omnipod", "tandem",
        "medtronic", "control-iq", "loop", "openaps", "nightscout",
        "closed loop", "artificial pancreas", "sensor",
        # Research
        "clinical trial", "study", "research", "beta cell", "islet",
        "immunotherapy", "teplizumab",
        # Lifestyle
        "exercise", "diet", "nutrition", "sleep", "stress",
    ]

    def extract(self, text: str) -> List[str]:
        """Return vocabulary terms found in text, in vocabulary order."""
        if not text:
            return []
        lowered = text.lower()
        return [term for term in self.VOCABULARY if term in lowered]


class SentimentAnalyzer(SentimentAnalyzerInterface):
    """Counts positive and negative lexicon words present in text.

    No negation handling and no weighting: each lexicon word counts once
    when it appears anywhere in the text.
    """

    POSITIVE_WORDS = [
        "help", "improve", "better", "good", "great", "amazing",
        "wonderful", "effective", "success", "positive",
    ]
    NEGATIVE_WORDS = [
        "problem", "issue", "bad", "terrible", "awful", "difficult",
        "struggle", "pain", "negative", "worse",
    ]

    def analyze(self, text: str) -> Sentiment:
        lowered = (text or "").lower()
        positive = sum(1 for word in self.POSITIVE_WORDS if word in lowered)
        negative = sum(1 for word in self.NEGATIVE_WORDS if word in lowered)

        if positive > negative:
            return Sentiment.POSITIVE
        if negative > positive:
            return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL
