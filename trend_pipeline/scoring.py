"""Platform raw scoring and cross-platform comparable scoring for items."""

from __future__ import annotations

from datetime import datetime, timezone
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core import Item, Platform, parse_timestamp
from utils.stats import midrank_percentiles


VIDEO_HALF_LIFE_HOURS = 24.0
VIDEO_MAX_HOURS = 72.0
ARTICLE_HALF_LIFE_HOURS = 36.0
ARTICLE_MAX_HOURS = 96.0

# log1p normalization ceilings
VELOCITY_CEILING = 50_000.0
ENGAGEMENT_CEILING = 200_000.0
VIEWS_CEILING = 5_000_000.0

_VIDEO_WEIGHTS = {"velocity": 0.55, "engagement": 0.30, "views": 0.15}
_VIDEO_FRESHNESS_BLEND = 0.15
_ARTICLE_WEIGHTS = {"freshness": 0.75, "source_rank": 0.15, "relevance": 0.10}
_COMPARABLE_WEIGHTS = {"percentile": 0.60, "freshness": 0.25, "external": 0.15}


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def to_finite_float(value: object, default: float = 0.0) -> float:
    """Coerce a metric value to a finite float; anything unusable becomes ``default``."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float(default)
    if not math.isfinite(number):
        return float(default)
    return number


def read_metric(metrics: Optional[Mapping[str, Any]], *path: str) -> float:
    """Read a numeric metric, following nested maps for multi-part paths."""
    node: Any = metrics or {}
    for key in path:
        if not isinstance(node, Mapping):
            return 0.0
        node = node.get(key)
    if isinstance(node, Mapping):
        return 0.0
    return to_finite_float(node, 0.0)


def log_scaled(value: float, ceiling: float) -> float:
    """log1p compression of a non-negative quantity onto [0, 1]."""
    return clamp01(math.log1p(max(0.0, value)) / math.log1p(ceiling))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def age_hours(published_at: Optional[datetime], now: Optional[datetime] = None) -> Optional[float]:
    """Hours from ``published_at`` to ``now``; naive datetimes are read as UTC."""
    published_at = parse_timestamp(published_at)
    if published_at is None:
        return None
    now = parse_timestamp(now) or _utcnow()
    return (now - published_at).total_seconds() / 3600.0


def freshness(
    published_at: Optional[datetime],
    half_life_hours: float = VIDEO_HALF_LIFE_HOURS,
    max_hours: float = VIDEO_MAX_HOURS,
    now: Optional[datetime] = None,
) -> float:
    """Exponential recency decay with a hard cutoff; 0 when the timestamp is unknown."""
    age = age_hours(published_at, now)
    if age is None:
        return 0.0
    if age <= 0:
        return 1.0
    if age >= max_hours:
        return 0.0
    return clamp01(math.exp(-math.log(2) * (age / max(half_life_hours, 1e-9))))


def video_velocity(item: Item, now: Optional[datetime] = None) -> float:
    """Views per hour since publish, with the age floor-clamped to one hour."""
    metrics = item.metrics
    views = max(0.0, read_metric(metrics, "views"))
    hours: Optional[float] = None
    if "ageHours" in metrics:
        candidate = to_finite_float(metrics.get("ageHours"), math.nan)
        if math.isfinite(candidate):
            hours = candidate
    if hours is None:
        hours = age_hours(item.published_at, now)
    if hours is None:
        return 0.0
    return views / max(1.0, hours)


def _score_video(item: Item, now: Optional[datetime]) -> float:
    metrics = item.metrics
    views = max(0.0, read_metric(metrics, "views"))
    likes = max(0.0, read_metric(metrics, "likes"))
    comments = max(0.0, read_metric(metrics, "comments"))

    velocity01 = log_scaled(video_velocity(item, now), VELOCITY_CEILING)
    engagement01 = log_scaled(likes + 2.0 * comments, ENGAGEMENT_CEILING)
    views01 = log_scaled(views, VIEWS_CEILING)

    raw = (
        _VIDEO_WEIGHTS["velocity"] * velocity01
        + _VIDEO_WEIGHTS["engagement"] * engagement01
        + _VIDEO_WEIGHTS["views"] * views01
    )
    fresh = freshness(item.published_at, VIDEO_HALF_LIFE_HOURS, VIDEO_MAX_HOURS, now)
    return clamp01((1.0 - _VIDEO_FRESHNESS_BLEND) * raw + _VIDEO_FRESHNESS_BLEND * fresh)


def _score_article(item: Item, now: Optional[datetime]) -> float:
    fresh = freshness(item.published_at, ARTICLE_HALF_LIFE_HOURS, ARTICLE_MAX_HOURS, now)
    source_rank = clamp01(read_metric(item.metrics, "sourceRank"))
    relevance = clamp01(read_metric(item.metrics, "relevance"))
    return clamp01(
        _ARTICLE_WEIGHTS["freshness"] * fresh
        + _ARTICLE_WEIGHTS["source_rank"] * source_rank
        + _ARTICLE_WEIGHTS["relevance"] * relevance
    )


def score_raw(item: Item, now: Optional[datetime] = None) -> float:
    """Platform-local desirability in [0, 1]; monotonic within a platform, not comparable across."""
    if item.platform == Platform.VIDEO:
        return _score_video(item, now)
    if item.platform == Platform.ARTICLE:
        return _score_article(item, now)
    return freshness(item.published_at, VIDEO_HALF_LIFE_HOURS, VIDEO_MAX_HOURS, now)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_comparable(
    items: Sequence[Item],
    now: Optional[datetime] = None,
    *,
    freshness_half_life_hours: float = VIDEO_HALF_LIFE_HOURS,
    freshness_max_hours: float = VIDEO_MAX_HOURS,
) -> None:
    """Fill raw_score, platform_percentile and comparable_score on every item in place."""
    if not items:
        return
    now = parse_timestamp(now) or _utcnow()

    for item in items:
        item.raw_score = score_raw(item, now)

    by_platform: Dict[Platform, List[Item]] = {}
    for item in items:
        by_platform.setdefault(item.platform, []).append(item)

    for group in by_platform.values():
        percentiles = midrank_percentiles([item.raw_score for item in group])
        for item, pct in zip(group, percentiles):
            item.platform_percentile = pct

    for item in items:
        fresh = freshness(item.published_at, freshness_half_life_hours, freshness_max_hours, now)
        final01 = clamp01(
            _COMPARABLE_WEIGHTS["percentile"] * item.platform_percentile
            + _COMPARABLE_WEIGHTS["freshness"] * fresh
            + _COMPARABLE_WEIGHTS["external"] * clamp01(item.external_trend_signal)
        )
        item.comparable_score = round_half_up(1000.0 * final01)
