from .insights import InsightEngine
from .lexicon import LexiconSentiment, tokenize
from .mood import MoodAnalyzer, MoodResult, determine_mood, keyword_adjustment

__all__ = [
    "InsightEngine",
    "LexiconSentiment",
    "MoodAnalyzer",
    "MoodResult",
    "determine_mood",
    "keyword_adjustment",
    "tokenize",
]
