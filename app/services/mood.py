from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Protocol, Sequence, Tuple

from ..schemas import Mood
from .lexicon import LexiconSentiment, tokenize

KEYWORD_WEIGHT = 0.5

EMOTIONAL_KEYWORDS: Mapping[str, frozenset[str]] = {
    "positive": frozenset(
        {"happy", "joy", "excited", "wonderful", "love", "great", "amazing"}
    ),
    "negative": frozenset(
        {"sad", "depressed", "anxious", "worried", "stressed", "angry", "upset"}
    ),
}

# Checked top-down with a strict ">"; the first threshold the score exceeds wins.
MOOD_THRESHOLDS: Tuple[Tuple[float, Mood], ...] = (
    (4.0, Mood.ecstatic),
    (2.0, Mood.happy),
    (0.5, Mood.content),
    (-0.5, Mood.neutral),
    (-2.0, Mood.sad),
    (-4.0, Mood.depressed),
)
FLOOR_MOOD = Mood.very_depressed


class BaseScorer(Protocol):
    def score(self, tokens: Sequence[str]) -> float: ...


@dataclass(frozen=True)
class MoodResult:
    score: float
    mood: Mood


def determine_mood(score: float) -> Mood:
    for threshold, mood in MOOD_THRESHOLDS:
        if score > threshold:
            return mood
    return FLOOR_MOOD


def keyword_adjustment(tokens: Iterable[str]) -> float:
    adjustment = 0.0
    for token in tokens:
        if token in EMOTIONAL_KEYWORDS["positive"]:
            adjustment += KEYWORD_WEIGHT
        elif token in EMOTIONAL_KEYWORDS["negative"]:
            adjustment -= KEYWORD_WEIGHT
    return adjustment


class MoodAnalyzer:
    """Scores journal text and maps the score onto a mood label.

    The final score is the lexicon base score plus a fixed keyword
    adjustment. It is never clamped or rounded.
    """

    def __init__(self, base_scorer: Optional[BaseScorer] = None) -> None:
        self.base_scorer = base_scorer or LexiconSentiment()

    def analyze(self, text: str) -> MoodResult:
        tokens = tokenize(text)
        score = self.base_scorer.score(tokens) + keyword_adjustment(tokens)
        return MoodResult(score=score, mood=determine_mood(score))
