from __future__ import annotations

import re
from typing import Dict, List, Sequence

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

# Lowercased text is split on anything outside [a-z0-9_]; "don't" -> ["don", "t"].
TOKEN_PATTERN = re.compile(r"[a-z0-9_]+")

AGGREGATIONS = ("mean", "sum")


def tokenize(text: str) -> List[str]:
    return TOKEN_PATTERN.findall(text.lower())


class LexiconSentiment:
    """Base polarity score from the VADER word-valence lexicon.

    Unknown tokens contribute zero. With ``mean`` aggregation the valence
    total is divided by the number of tokens, recognized or not.
    """

    def __init__(self, aggregation: str = "mean") -> None:
        if aggregation not in AGGREGATIONS:
            raise ValueError(
                f"Unsupported lexicon aggregation {aggregation!r}; "
                f"expected one of {', '.join(AGGREGATIONS)}."
            )
        self.aggregation = aggregation
        self._valences: Dict[str, float] = dict(SentimentIntensityAnalyzer().lexicon)

    def valence(self, token: str) -> float:
        return self._valences.get(token, 0.0)

    def score(self, tokens: Sequence[str]) -> float:
        if not tokens:
            return 0.0
        total = sum(self.valence(token) for token in tokens)
        if self.aggregation == "sum":
            return total
        return total / len(tokens)
