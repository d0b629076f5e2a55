from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import RoundKind


DEFAULT_CATEGORIES = [
    "History",
    "Science",
    "Geography",
    "Literature",
    "Pop Culture",
    "Sports",
    "Mythology",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ANSWER_WINDOW_SEC: float = Field(default=10.0, gt=0)
    TARGET_SCORE: float = Field(default=10.0, gt=0)
    MAX_ROUNDS: int = Field(default=20, ge=1)
    BONUS_ROUND_INTERVAL: int = Field(default=5, ge=2)
    # index 0 is used when (round // interval) is even
    BONUS_ROUND_KINDS: List[RoundKind] = Field(
        default_factory=lambda: [RoundKind.SOCIAL_PROMPT, RoundKind.MINGLE_TASK],
        min_length=2,
        max_length=2,
    )
    CATEGORIES: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES), min_length=1)
    QUESTIONS_PATH: Optional[str] = None

    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:8080"
    CORS_ORIGIN_REGEX: Optional[str] = None
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
