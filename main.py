from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    JournalEntry,
    JournalEntryCreate,
    JournalEntryUpdate,
    MessageResponse,
    Mood,
    MoodInsights,
    Timeframe,
)
from app.services import InsightEngine, LexiconSentiment, MoodAnalyzer
from app.store import EntryAccessError, EntryFilters, EntryNotFoundError, JournalStore

settings = get_settings()

app = FastAPI(
    title="Mood Journal",
    version="0.1.0",
    description="Journal entries scored for mood, with dashboard insights.",
)

logger = logging.getLogger("uvicorn.error")
logger.setLevel(settings.log_level)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

journal_store = JournalStore()
mood_analyzer = MoodAnalyzer(
    base_scorer=LexiconSentiment(aggregation=settings.lexicon_aggregation)
)
insight_engine = InsightEngine(top_emotions_limit=settings.top_emotions_limit)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"message": "Invalid request"})


async def current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    # Identity is established upstream; the header carries the caller's user id.
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authorization required")
    return x_user_id.strip()


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/journal/analyze",
    response_model=AnalyzeResponse,
    summary="Score text and map it to a mood label.",
)
async def analyze_text(payload: Optional[AnalyzeRequest] = None) -> AnalyzeResponse:
    if payload is None or not payload.text:
        raise HTTPException(status_code=400, detail="Text is required")
    result = mood_analyzer.analyze(payload.text)
    return AnalyzeResponse(score=result.score, mood=result.mood.value)


@app.post("/journal", response_model=JournalEntry, status_code=201)
async def create_entry(
    payload: JournalEntryCreate, user: str = Depends(current_user)
) -> JournalEntry:
    title = (payload.title or "").strip()
    if not title or not payload.content:
        raise HTTPException(status_code=400, detail="Title and content are required")

    if payload.sentiment_score is None and payload.mood is None:
        result = mood_analyzer.analyze(payload.content)
        sentiment_score, mood = result.score, result.mood.value
    else:
        sentiment_score = payload.sentiment_score or 0.0
        mood = payload.mood or Mood.neutral.value

    entry = await journal_store.create_entry(
        user=user,
        title=title,
        content=payload.content,
        sentiment_score=sentiment_score,
        mood=mood,
        tags=payload.tags,
    )
    logger.info("Created journal entry %s for user=%s mood=%s", entry.id, user, entry.mood)
    return entry


@app.get("/journal", response_model=List[JournalEntry])
async def list_entries(
    search: Optional[str] = None,
    mood: Optional[str] = None,
    tag: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: str = Depends(current_user),
) -> List[JournalEntry]:
    filters = EntryFilters(search=search, mood=mood, tag=tag, start=start, end=end)
    return await journal_store.list_entries(user, filters)


@app.get("/journal/insights", response_model=MoodInsights)
async def get_insights(
    timeframe: Timeframe = Timeframe.week, user: str = Depends(current_user)
) -> MoodInsights:
    entries = await journal_store.list_entries(user)
    return insight_engine.build_insights(entries, timeframe=timeframe)


@app.get("/journal/{entry_id}", response_model=JournalEntry)
async def get_entry(entry_id: str, user: str = Depends(current_user)) -> JournalEntry:
    try:
        return await journal_store.get_entry(user, entry_id)
    except EntryNotFoundError:
        raise HTTPException(status_code=404, detail="Entry not found")
    except EntryAccessError:
        raise HTTPException(status_code=403, detail="Not authorized")


@app.put("/journal/{entry_id}", response_model=JournalEntry)
async def update_entry(
    entry_id: str, payload: JournalEntryUpdate, user: str = Depends(current_user)
) -> JournalEntry:
    try:
        entry = await journal_store.update_entry(user, entry_id, payload)
    except EntryNotFoundError:
        raise HTTPException(status_code=404, detail="Entry not found")
    except EntryAccessError:
        raise HTTPException(status_code=403, detail="Not authorized")
    logger.info("Updated journal entry %s for user=%s", entry_id, user)
    return entry


@app.delete("/journal/{entry_id}", response_model=MessageResponse)
async def delete_entry(entry_id: str, user: str = Depends(current_user)) -> MessageResponse:
    try:
        await journal_store.delete_entry(user, entry_id)
    except EntryNotFoundError:
        raise HTTPException(status_code=404, detail="Entry not found")
    except EntryAccessError:
        raise HTTPException(status_code=403, detail="Not authorized")
    logger.info("Deleted journal entry %s for user=%s", entry_id, user)
    return MessageResponse(message="Entry removed")
