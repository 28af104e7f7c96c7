from __future__ import annotations

import calendar
import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from ..schemas import (
    JournalEntry,
    MoodCount,
    MoodInsights,
    MoodTrendPoint,
    TagCount,
    Timeframe,
)

logger = logging.getLogger(__name__)


def to_fixed(value: float, places: int) -> float:
    # Exact binary value, ties away from zero; matches JavaScript toFixed.
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


class InsightEngine:
    """Builds dashboard aggregates from a user's journal entries."""

    def __init__(self, top_emotions_limit: int = 5) -> None:
        self.top_emotions_limit = top_emotions_limit

    def build_insights(
        self,
        entries: Sequence[JournalEntry],
        timeframe: Timeframe = Timeframe.week,
        now: Optional[datetime] = None,
    ) -> MoodInsights:
        now = now or datetime.now(timezone.utc)
        cutoff = self.timeframe_start(timeframe, now)
        recent = [entry for entry in entries if entry.created_at >= cutoff]
        week_start = self.timeframe_start(Timeframe.week, now)
        logger.debug(
            "Building %s insights over %d entries (%d in range)",
            timeframe.value,
            len(entries),
            len(recent),
        )

        return MoodInsights(
            timeframe=timeframe,
            total_entries=len(entries),
            entries_this_week=sum(1 for entry in entries if entry.created_at >= week_start),
            average_score=self._average_score(entries),
            trend=self._daily_trend(recent),
            mood_distribution=self._mood_distribution(entries),
            top_emotions=self._top_emotions(entries),
            latest_entry=max(entries, key=lambda entry: entry.created_at, default=None),
        )

    @staticmethod
    def timeframe_start(timeframe: Timeframe, now: datetime) -> datetime:
        if timeframe is Timeframe.week:
            return now - timedelta(days=7)
        # One calendar month back, clamped to the shorter month's last day.
        year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
        day = min(now.day, calendar.monthrange(year, month)[1])
        return now.replace(year=year, month=month, day=day)

    @staticmethod
    def _average_score(entries: Sequence[JournalEntry]) -> float:
        if not entries:
            return 0.0
        total = sum(entry.sentiment_score for entry in entries)
        return to_fixed(total / len(entries), 1)

    @staticmethod
    def _daily_trend(entries: Sequence[JournalEntry]) -> List[MoodTrendPoint]:
        by_day: Dict[str, List[float]] = defaultdict(list)
        for entry in entries:
            day = entry.created_at.astimezone(timezone.utc).date().isoformat()
            by_day[day].append(entry.sentiment_score)
        return [
            MoodTrendPoint(date=day, score=to_fixed(sum(scores) / len(scores), 2), count=len(scores))
            for day, scores in sorted(by_day.items())
        ]

    @staticmethod
    def _mood_distribution(entries: Sequence[JournalEntry]) -> List[MoodCount]:
        counts = Counter(entry.mood for entry in entries)
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [MoodCount(mood=mood, count=count) for mood, count in ordered]

    def _top_emotions(self, entries: Sequence[JournalEntry]) -> List[TagCount]:
        counts: Counter[str] = Counter()
        for entry in entries:
            counts.update(entry.tags.emotions)
        # most_common keeps first-seen order among equal counts.
        return [
            TagCount(tag=tag, count=count)
            for tag, count in counts.most_common(self.top_emotions_limit)
        ]
