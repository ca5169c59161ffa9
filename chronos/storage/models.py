import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_TITLE_LENGTH = 100
MAX_SOURCES = 4
GLOBAL_LOCATION = "Global"
INTERVAL_OPTIONS = (1, 15, 60, 240)  # minutos


class Sentiment(str, Enum):
    bullish = "bullish"
    bearish = "bearish"
    neutral = "neutral"


class NewsTopic(str, Enum):
    general = "General News"
    tech = "Technology"
    business = "Business"
    sports = "Sports"
    science = "Science"
    entertainment = "Entertainment"
    crypto = "Crypto & Web3"


class Coordinates(BaseModel):
    lat: float
    lng: float


class Source(BaseModel):
    title: str = "Source"
    url: str


def _new_id() -> str:
    return uuid.uuid4().hex[:9]


def truncate_title(title: str) -> str:
    if len(title) > MAX_TITLE_LENGTH:
        return title[:MAX_TITLE_LENGTH - 3] + "..."
    return title


def unique_sources(sources: List[Source]) -> List[Source]:
    """Remove URLs repetidas (mantém a primeira ocorrência) e limita a MAX_SOURCES."""
    seen = set()
    out: List[Source] = []
    for s in sources:
        if s.url in seen:
            continue
        seen.add(s.url)
        out.append(s)
    return out[:MAX_SOURCES]


class NewsItem(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    summary: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sources: List[Source] = []
    topic: str
    sentiment: Sentiment = Sentiment.neutral
    location: str = GLOBAL_LOCATION
    image_url: str = ""
    is_posted_to_x: bool = False

    @field_validator("title")
    @classmethod
    def _truncate(cls, v: str) -> str:
        return truncate_title(v)

    @field_validator("sources")
    @classmethod
    def _dedupe_sources(cls, v: List[Source]) -> List[Source]:
        return unique_sources(v)

    def mark_posted(self) -> None:
        # só vai de False -> True
        self.is_posted_to_x = True


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    topic: NewsTopic = NewsTopic.tech
    update_interval_minutes: int = 60
    auto_post_to_x: bool = True
    local_mode: bool = False
    is_x_connected: bool = False

    @field_validator("update_interval_minutes")
    @classmethod
    def _validate_interval(cls, v: int) -> int:
        if v not in INTERVAL_OPTIONS:
            raise ValueError(f"update_interval_minutes must be one of {INTERVAL_OPTIONS}")
        return v

    @property
    def interval_seconds(self) -> int:
        return self.update_interval_minutes * 60


class ControllerSnapshot(BaseModel):
    state: str
    history: List[NewsItem]
    config: AppConfig
    logs: List[str]
    is_loading: bool
    error: Optional[str] = None
    countdown_seconds: int
    countdown_display: str
    location_acquired: bool
