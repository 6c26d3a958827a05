"""Canonical data contracts for the trend scoring and clustering engine."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Platform(str, Enum):
    """Source platform category of an item."""

    VIDEO = "video"
    ARTICLE = "article"
    UNKNOWN = "unknown"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime; None if unusable."""
    if isinstance(value, datetime):
        dt = value
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    text = str(value or "").strip()
    if not text:
        return None
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Item(_CamelModel):
    """One normalized content record; derived score fields are filled by the scorer."""

    platform: Platform = Platform.UNKNOWN
    title: str = ""
    summary: str = ""
    url: str
    published_at: Optional[datetime] = None
    author: str = ""
    metrics: Dict[str, Any] = Field(default_factory=dict)
    external_trend_signal: float = 0.0

    raw_score: float = 0.0
    platform_percentile: float = 0.0
    comparable_score: int = 0

    @field_validator("platform", mode="before")
    @classmethod
    def _coerce_platform(cls, value: Any) -> Platform:
        if isinstance(value, Platform):
            return value
        token = str(value or "").strip().lower()
        try:
            return Platform(token)
        except ValueError:
            return Platform.UNKNOWN

    @field_validator("title", "summary", "author", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("url", mode="before")
    @classmethod
    def _non_empty_url(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("url is required")
        return text

    @field_validator("published_at", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("metrics", mode="before")
    @classmethod
    def _metrics_mapping(cls, value: Any) -> Dict[str, Any]:
        return dict(value) if isinstance(value, dict) else {}

    @field_validator("external_trend_signal", mode="before")
    @classmethod
    def _unit_signal(cls, value: Any) -> float:
        try:
            number = float(value or 0.0)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(number):
            return 0.0
        return max(0.0, min(1.0, number))


class EvidenceItem(_CamelModel):
    """One top-scoring member of a topic, as shown next to the topic."""

    title: str = ""
    url: str
    published_at: Optional[datetime] = None
    source: str = ""
    platform: Platform = Platform.UNKNOWN
    score: int = 0


class TopicEvidence(_CamelModel):
    """Best members per platform, highest comparable score first."""

    video_top: List[EvidenceItem] = Field(default_factory=list)
    article_top: List[EvidenceItem] = Field(default_factory=list)

    def urls(self) -> List[str]:
        """Video evidence URLs first, then article evidence URLs."""
        return [row.url for row in [*self.video_top, *self.article_top] if row.url]


class TopicRecord(_CamelModel):
    """Scored topic produced from one cluster of items."""

    topic_id: str
    canonical_title: str
    summary: str = ""
    keywords: List[str] = Field(default_factory=list)
    top_source_urls: List[str] = Field(default_factory=list)
    platform_counts: Dict[str, int] = Field(default_factory=dict)
    source_diversity: int = 0
    cluster_size: int = 0
    freshness_score: float = 0.0
    saturation_48h: int = Field(default=0, alias="saturation48h")
    saturation_penalty: float = 0.0
    per_platform_signals: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    confirmation_score: float = 0.0
    topic_score: int = 0
    score_breakdown: Dict[str, float] = Field(default_factory=dict)
    evidence: TopicEvidence = Field(default_factory=TopicEvidence)
    trend_run_id: Optional[str] = None
    project_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """camelCase JSON-ready record for the hosting service."""
        return self.model_dump(mode="json", by_alias=True)


class TrendSignal(_CamelModel):
    """Display-oriented summary of one topic record."""

    topic_id: str
    canonical_title: str
    summary: str = ""
    primary_platform: str
    platforms: List[str] = Field(default_factory=list)
    platform_counts: Dict[str, int] = Field(default_factory=dict)
    score_composite: int = 0
    score_emerging: int = 0
    topic_score: int = 0
    freshness_score: float = 0.0
    saturation_level: str = "low"
    saturation_penalty: float = 0.0
    cluster_size: int = 0
    source_diversity: int = 0
    keywords: List[str] = Field(default_factory=list)
    top_source_urls: List[str] = Field(default_factory=list)
    video_metrics: Dict[str, float] = Field(default_factory=dict)
    article_metrics: Dict[str, float] = Field(default_factory=dict)
    badges: List[str] = Field(default_factory=list)
    evidence: TopicEvidence = Field(default_factory=TopicEvidence)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
