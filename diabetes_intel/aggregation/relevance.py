"""Keyword relevance scoring for aggregated items."""

from typing import Dict, List

from .interfaces import AggregatedItem


class RelevanceScorer:
    """Weighted keyword matching against a fixed diabetes keyword list.

    Each keyword adds its field weight once per field it appears in, so a
    keyword found in the title and the body scores title + body.
    """

    KEYWORDS: List[str] = [
        "diabetes", "type 1", "t1d", "insulin", "glucose", "blood sugar",
        "a1c", "cgm", "continuous glucose", "insulin pump", "closed loop",
        "artificial pancreas", "hypoglycemia", "hyperglycemia", "ketoacidosis",
        "dexcom", "libre", "omnipod", "tandem", "islet", "beta cell",
    ]

    WEIGHTS: Dict[str, int] = {
        "title": 4,
        "tags": 3,
        "description": 2,
        "body": 1,
    }

    def __init__(self, keywords: List[str] = None):
        self.keywords = [k.lower() for k in (keywords or self.KEYWORDS)]

    def score(self, item: AggregatedItem) -> int:
        fields = {
            "title": item.title.lower(),
            "tags": " ".join(item.tags).lower(),
            "description": item.description.lower(),
            "body": item.body.lower(),
        }

        total = 0
        for keyword in self.keywords:
            for field_name, text in fields.items():
                if keyword in text:
                    total += self.WEIGHTS[field_name]
        return total
