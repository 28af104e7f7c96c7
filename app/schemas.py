from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Mood(str, Enum):
    ecstatic = "Ecstatic"
    happy = "Happy"
    content = "Content"
    neutral = "Neutral"
    sad = "Sad"
    depressed = "Depressed"
    very_depressed = "Very Depressed"


class Timeframe(str, Enum):
    week = "week"
    month = "month"


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AnalyzeRequest(BaseModel):
    # Optional so a missing field reaches the handler and gets the 400 message.
    text: Optional[str] = Field(default=None, description="Journal text to score.")


class AnalyzeResponse(BaseModel):
    score: float
    mood: str


class MessageResponse(BaseModel):
    message: str


class JournalTags(BaseModel):
    emotions: List[str] = Field(default_factory=list)
    people: List[str] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)

    @field_validator("emotions", "people", "activities", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value


class JournalTagsUpdate(BaseModel):
    emotions: Optional[List[str]] = None
    people: Optional[List[str]] = None
    activities: Optional[List[str]] = None


class JournalEntryCreate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    sentiment_score: Optional[float] = Field(default=None, alias="sentimentScore")
    mood: Optional[str] = None
    tags: Optional[JournalTags] = None


class JournalEntryUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    sentiment_score: Optional[float] = Field(default=None, alias="sentimentScore")
    mood: Optional[str] = None
    tags: Optional[JournalTagsUpdate] = None


class JournalEntry(CamelModel):
    id: str
    user: str
    title: str
    content: str
    sentiment_score: float = Field(alias="sentimentScore")
    mood: str
    tags: JournalTags
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class MoodTrendPoint(BaseModel):
    date: str
    score: float
    count: int


class MoodCount(BaseModel):
    mood: str
    count: int


class TagCount(BaseModel):
    tag: str
    count: int


class MoodInsights(CamelModel):
    timeframe: Timeframe
    total_entries: int = Field(alias="totalEntries")
    entries_this_week: int = Field(alias="entriesThisWeek")
    average_score: float = Field(alias="averageScore")
    trend: List[MoodTrendPoint]
    mood_distribution: List[MoodCount] = Field(alias="moodDistribution")
    top_emotions: List[TagCount] = Field(alias="topEmotions")
    latest_entry: Optional[JournalEntry] = Field(alias="latestEntry")
