from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from .schemas import JournalEntry, JournalEntryUpdate, JournalTags

logger = logging.getLogger(__name__)


class EntryNotFoundError(KeyError):
    """Raised when the requested entry id is unknown."""


class EntryAccessError(PermissionError):
    """Raised when an entry belongs to a different user."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EntryFilters:
    search: Optional[str] = None
    mood: Optional[str] = None
    tag: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None

    def matches(self, entry: Dict[str, Any]) -> bool:
        if self.search:
            needle = self.search.lower()
            if (
                needle not in entry["title"].lower()
                and needle not in entry["content"].lower()
            ):
                return False
        if self.mood and entry["mood"] != self.mood:
            return False
        if self.tag:
            tags = entry["tags"]
            if not any(self.tag in tags[group] for group in ("emotions", "people", "activities")):
                return False
        if self.start and entry["created_at"] < datetime.combine(
            self.start, time.min, tzinfo=timezone.utc
        ):
            return False
        if self.end and entry["created_at"] > datetime.combine(
            self.end, time.max, tzinfo=timezone.utc
        ):
            return False
        return True


class JournalStore:
    """In-memory journal storage keyed by entry id."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def create_entry(
        self,
        user: str,
        title: str,
        content: str,
        sentiment_score: float,
        mood: str,
        tags: Optional[JournalTags] = None,
    ) -> JournalEntry:
        now = self._clock()
        payload = {
            "id": uuid4().hex,
            "user": user,
            "title": title.strip(),
            "content": content,
            "sentiment_score": sentiment_score,
            "mood": mood,
            "tags": (tags or JournalTags()).model_dump(),
            "created_at": now,
            "updated_at": now,
        }
        async with self._lock:
            self._entries[payload["id"]] = payload
        logger.debug("Stored entry %s for user=%s", payload["id"], user)
        return JournalEntry(**payload)

    async def _get_owned(self, user: str, entry_id: str) -> Dict[str, Any]:
        async with self._lock:
            entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        if entry["user"] != user:
            raise EntryAccessError(entry_id)
        return entry

    async def list_entries(
        self, user: str, filters: Optional[EntryFilters] = None
    ) -> List[JournalEntry]:
        filters = filters or EntryFilters()
        async with self._lock:
            owned = [dict(entry) for entry in self._entries.values() if entry["user"] == user]
        owned.sort(key=lambda entry: entry["created_at"], reverse=True)
        return [JournalEntry(**entry) for entry in owned if filters.matches(entry)]

    async def get_entry(self, user: str, entry_id: str) -> JournalEntry:
        entry = await self._get_owned(user, entry_id)
        return JournalEntry(**entry)

    async def update_entry(
        self, user: str, entry_id: str, changes: JournalEntryUpdate
    ) -> JournalEntry:
        entry = await self._get_owned(user, entry_id)
        # Empty strings keep the stored value; a score of 0 still overwrites.
        updated = dict(entry)
        if changes.title:
            updated["title"] = changes.title.strip()
        if changes.content:
            updated["content"] = changes.content
        if changes.sentiment_score is not None:
            updated["sentiment_score"] = changes.sentiment_score
        if changes.mood:
            updated["mood"] = changes.mood
        if changes.tags is not None:
            tags = dict(entry["tags"])
            for group, values in changes.tags.model_dump(exclude_none=True).items():
                tags[group] = values
            updated["tags"] = tags
        updated["updated_at"] = self._clock()
        async with self._lock:
            self._entries[entry_id] = updated
        logger.debug("Updated entry %s for user=%s", entry_id, user)
        return JournalEntry(**updated)

    async def delete_entry(self, user: str, entry_id: str) -> None:
        await self._get_owned(user, entry_id)
        async with self._lock:
            self._entries.pop(entry_id, None)
        logger.debug("Removed entry %s for user=%s", entry_id, user)
