import asyncio
import logging
import os
import sys
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from app.schemas import JournalEntry, JournalEntryUpdate, JournalTags, Timeframe  # noqa: E402
from app.services.insights import InsightEngine, to_fixed  # noqa: E402
from app.store import (  # noqa: E402
    EntryAccessError,
    EntryFilters,
    EntryNotFoundError,
    JournalStore,
)


class SteppingClock:
    """Returns queued timestamps in order, repeating the last one."""

    def __init__(self, *moments: datetime) -> None:
        self.moments = list(moments)

    def __call__(self) -> datetime:
        if len(self.moments) > 1:
            return self.moments.pop(0)
        return self.moments[0]


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def seed(store: JournalStore, user: str = "u1"):
    async def _seed():
        first = await store.create_entry(
            user, "Rainy day", "Felt low", -1.5, "Sad",
            JournalTags(emotions=["tired", "lonely"]),
        )
        second = await store.create_entry(
            user, "Picnic", "Lunch with Ana", 2.5, "Happy",
            JournalTags(emotions=["joyful", "tired"], people=["Ana"]),
        )
        third = await store.create_entry(
            user, "Quiet evening", "Reading", 0.2, "Neutral",
            JournalTags(emotions=["tired"], activities=["reading"]),
        )
        return first, second, third

    return asyncio.run(_seed())


def test_list_entries_newest_first_and_date_bounds():
    store = JournalStore(
        clock=SteppingClock(
            utc(2024, 3, 1, 9, 0), utc(2024, 3, 2, 23, 59, 59), utc(2024, 3, 3, 0, 0)
        )
    )
    first, second, third = seed(store)

    entries = asyncio.run(store.list_entries("u1"))
    assert [entry.id for entry in entries] == [third.id, second.id, first.id]

    bounded = asyncio.run(
        store.list_entries("u1", EntryFilters(start=date(2024, 3, 2), end=date(2024, 3, 2)))
    )
    assert [entry.id for entry in bounded] == [second.id]

    assert asyncio.run(store.list_entries("someone-else")) == []


def test_filters_match_title_content_and_any_tag_group():
    store = JournalStore()
    first, second, third = seed(store)

    def ids(**filters):
        return {entry.id for entry in asyncio.run(store.list_entries("u1", EntryFilters(**filters)))}

    assert ids(search="ana") == {second.id}
    assert ids(search="QUIET") == {third.id}
    assert ids(tag="reading") == {third.id}
    assert ids(tag="tired") == {first.id, second.id, third.id}
    assert ids(tag="tired", mood="Sad") == {first.id}


def test_update_refreshes_timestamp_and_keeps_blank_fields():
    store = JournalStore(clock=SteppingClock(utc(2024, 1, 1), utc(2024, 1, 5)))
    entry = asyncio.run(store.create_entry("u1", "Title", "Body", 1.0, "Content"))

    updated = asyncio.run(
        store.update_entry(
            "u1", entry.id, JournalEntryUpdate(content="", mood="Happy", sentimentScore=2.5)
        )
    )
    assert updated.content == "Body"
    assert updated.mood == "Happy"
    assert updated.sentiment_score == 2.5
    assert updated.created_at == utc(2024, 1, 1)
    assert updated.updated_at == utc(2024, 1, 5)


def test_ownership_and_missing_entries_raise():
    store = JournalStore()
    first, _, _ = seed(store)

    with pytest.raises(EntryAccessError):
        asyncio.run(store.get_entry("intruder", first.id))
    with pytest.raises(EntryAccessError):
        asyncio.run(store.delete_entry("intruder", first.id))
    with pytest.raises(EntryNotFoundError):
        asyncio.run(store.get_entry("u1", "missing"))

    asyncio.run(store.delete_entry("u1", first.id))
    with pytest.raises(EntryNotFoundError):
        asyncio.run(store.update_entry("u1", first.id, JournalEntryUpdate(title="x")))


def test_insights_week_trend_groups_by_day():
    store = JournalStore(
        clock=SteppingClock(utc(2024, 3, 1, 9), utc(2024, 3, 9, 8), utc(2024, 3, 9, 20))
    )
    seed(store)
    entries = asyncio.run(store.list_entries("u1"))

    insights = InsightEngine().build_insights(
        entries, timeframe=Timeframe.week, now=utc(2024, 3, 10, 12)
    )

    assert insights.total_entries == 3
    assert insights.entries_this_week == 2
    assert insights.average_score == 0.4
    assert [(point.date, point.score, point.count) for point in insights.trend] == [
        ("2024-03-09", 1.35, 2)
    ]
    assert [(item.mood, item.count) for item in insights.mood_distribution] == [
        ("Happy", 1),
        ("Neutral", 1),
        ("Sad", 1),
    ]
    assert insights.top_emotions[0].tag == "tired"
    assert insights.top_emotions[0].count == 3
    assert insights.latest_entry is not None
    assert insights.latest_entry.title == "Quiet evening"


def test_insights_top_emotions_respects_limit():
    store = JournalStore()
    seed(store)
    entries = asyncio.run(store.list_entries("u1"))

    insights = InsightEngine(top_emotions_limit=2).build_insights(entries)
    assert len(insights.top_emotions) == 2


@pytest.mark.parametrize(
    "now, expected",
    [
        (utc(2024, 3, 31, 10), utc(2024, 2, 29, 10)),
        (utc(2024, 1, 15), utc(2023, 12, 15)),
        (utc(2023, 7, 4), utc(2023, 6, 4)),
    ],
)
def test_month_timeframe_start(now, expected):
    assert InsightEngine.timeframe_start(Timeframe.month, now) == expected


def test_week_timeframe_start():
    now = utc(2024, 3, 10, 12)
    assert InsightEngine.timeframe_start(Timeframe.week, now) == now - timedelta(days=7)


def entry_at(score: float, created_at: datetime) -> JournalEntry:
    return JournalEntry(
        id=uuid4().hex,
        user="u1",
        title="Note",
        content="Body",
        sentiment_score=score,
        mood="Neutral",
        tags=JournalTags(),
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.mark.parametrize(
    "scores, average, day_score",
    [
        ([0.0, 0.5], 0.3, 0.25),
        ([0.0, 0.25], 0.1, 0.13),
        ([-0.5, 0.0], -0.3, -0.25),
        ([-0.25, 0.0], -0.1, -0.13),
    ],
)
def test_insights_round_ties_away_from_zero(scores, average, day_score):
    now = utc(2024, 5, 10, 12)
    entries = [entry_at(score, utc(2024, 5, 9, 8 + i)) for i, score in enumerate(scores)]

    insights = InsightEngine().build_insights(entries, now=now)

    assert insights.average_score == average
    assert [point.score for point in insights.trend] == [day_score]


def test_to_fixed_uses_exact_binary_value():
    # 1.005 is stored just below the tie, so it rounds down.
    assert to_fixed(1.005, 2) == 1.0
    assert to_fixed(2.675, 2) == 2.67
    assert to_fixed(0.125, 2) == 0.13


def test_entries_this_week_ignores_selected_timeframe():
    now = utc(2024, 5, 20, 12)
    entries = [
        entry_at(1.0, now - timedelta(days=1)),
        entry_at(1.0, now - timedelta(days=3)),
        entry_at(1.0, now - timedelta(days=10)),
        entry_at(1.0, now - timedelta(days=45)),
    ]

    insights = InsightEngine().build_insights(entries, timeframe=Timeframe.month, now=now)

    assert insights.entries_this_week == 2
    assert sum(point.count for point in insights.trend) == 3
    assert insights.total_entries == 4


def test_null_tag_groups_become_empty_lists():
    tags = JournalTags(emotions=None, people=["Ana"], activities=None)
    assert tags.model_dump() == {"emotions": [], "people": ["Ana"], "activities": []}


def test_store_logs_entry_lifecycle(caplog):
    caplog.set_level(logging.DEBUG, logger="app.store")
    store = JournalStore()
    entry = asyncio.run(store.create_entry("u1", "Title", "Body", 0.0, "Neutral"))
    asyncio.run(store.delete_entry("u1", entry.id))

    messages = [record.getMessage() for record in caplog.records if record.name == "app.store"]
    assert f"Stored entry {entry.id} for user=u1" in messages
    assert f"Removed entry {entry.id} for user=u1" in messages
