"""Mapping stage from heterogeneous collector records to canonical items."""

from __future__ import annotations

import html as html_lib
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from core import Item, Platform, parse_timestamp
from trend_pipeline.scoring import to_finite_float

logger = logging.getLogger(__name__)


_PLATFORM_ALIASES: Dict[str, Platform] = {
    "youtube": Platform.VIDEO,
    "video": Platform.VIDEO,
    "shorts": Platform.VIDEO,
    "news": Platform.ARTICLE,
    "article": Platform.ARTICLE,
    "gdelt": Platform.ARTICLE,
    "rss": Platform.ARTICLE,
    # legacy social sources were always ingested as news coverage
    "reddit": Platform.ARTICLE,
    "tiktok": Platform.ARTICLE,
    "instagram": Platform.ARTICLE,
    "facebook": Platform.ARTICLE,
    "x": Platform.ARTICLE,
    "quora": Platform.ARTICLE,
    "pinterest": Platform.ARTICLE,
    "truthsocial": Platform.ARTICLE,
}

_METRIC_ALIASES: Dict[str, str] = {
    "viewCount": "views",
    "likeCount": "likes",
    "commentCount": "comments",
    "source_rank": "sourceRank",
    "age_hours": "ageHours",
}

_YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
_TAG_RE = re.compile(r"<[^>]+>")


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _clean_text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    text = html_lib.unescape(str(value))
    text = _TAG_RE.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()


def resolve_platform(raw: Mapping[str, Any]) -> Platform:
    token = str(_first(raw, "platform", "source", "provider") or "").strip().lower()
    return _PLATFORM_ALIASES.get(token, Platform.UNKNOWN)


def resolve_url(raw: Mapping[str, Any]) -> str:
    url = str(_first(raw, "url", "sourceUrl", "link") or "").strip()
    if url:
        return url
    video_id = str(raw.get("videoId") or "").strip()
    if video_id:
        return _YOUTUBE_WATCH_URL.format(video_id=video_id)
    return ""


def canonical_metrics(metrics: Any) -> Dict[str, Any]:
    """Rename collector metric keys to the canonical ones the scorer reads."""
    if not isinstance(metrics, Mapping):
        return {}
    canonical: Dict[str, Any] = {}
    for key, value in metrics.items():
        name = _METRIC_ALIASES.get(str(key), str(key))
        if isinstance(value, Mapping):
            canonical[name] = dict(value)
        elif name not in canonical or key == name:
            canonical[name] = value
    return canonical


def _external_signal(raw: Mapping[str, Any]) -> float:
    trends = raw.get("googleTrends")
    if isinstance(trends, Mapping) and "score01" in trends:
        return to_finite_float(trends.get("score01"), 0.0)
    return to_finite_float(raw.get("externalTrendSignal"), 0.0)


def normalize_record(raw: Mapping[str, Any]) -> Optional[Item]:
    """Map one collector record to an Item; None when it has no usable URL."""
    if not isinstance(raw, Mapping):
        return None
    url = resolve_url(raw)
    if not url:
        return None

    try:
        return Item(
            platform=resolve_platform(raw),
            title=_clean_text(_first(raw, "title", "topicTitle")),
            summary=_clean_text(_first(raw, "summary", "topicSummary", "description")),
            url=url,
            published_at=parse_timestamp(_first(raw, "publishedAt", "published_at", "pubDate")),
            author=_clean_text(_first(raw, "author", "channelTitle", "source_name")),
            metrics=canonical_metrics(raw.get("metrics")),
            external_trend_signal=_external_signal(raw),
        )
    except ValidationError as exc:
        logger.warning("record_rejected url=%s errors=%d", url, exc.error_count())
        return None


def normalize_items(records: Iterable[Mapping[str, Any]]) -> List[Item]:
    """Map a batch of collector records, dropping records without a usable URL."""
    items: List[Item] = []
    dropped = 0
    for raw in records:
        item = normalize_record(raw)
        if item is None:
            dropped += 1
            continue
        items.append(item)
    if dropped:
        logger.info("normalize_dropped count=%d kept=%d", dropped, len(items))
    return items


def dedupe_items(items: Sequence[Item]) -> List[Item]:
    """Keep the first item per (platform, url)."""
    unique: List[Item] = []
    seen: set[Tuple[str, str]] = set()
    for item in items:
        key = (item.platform.value, item.url.strip())
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique
