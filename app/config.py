from __future__ import annotations

import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    """Runtime configuration with sensible defaults for local development."""

    cors_allow_origins: List[str] = Field(
        default_factory=lambda: [
            origin.strip()
            for origin in os.getenv(
                "CORS_ALLOW_ORIGINS", "http://localhost:5173"
            ).split(",")
            if origin.strip()
        ],
        description="Comma separated list of allowed origins.",
    )
    lexicon_aggregation: str = Field(
        default=os.getenv("LEXICON_AGGREGATION", "mean").lower(),
        description="How lexicon valences combine into the base score: 'mean' or 'sum'.",
    )
    top_emotions_limit: int = Field(
        default=int(os.getenv("TOP_EMOTIONS_LIMIT", "5")),
        description="Number of emotion tags reported by the insights endpoint.",
    )
    log_level: str = Field(
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        description="Level applied to the application logger.",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
