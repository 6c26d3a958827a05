"""Display-oriented trend signals derived from topic records."""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Sequence

from core import Platform, TopicRecord, TrendSignal
from trend_pipeline.scoring import clamp01, round_half_up, to_finite_float


MAX_BADGES = 8
MAX_SIGNAL_URLS = 8
BREADTH_CEILING = 12.0


def saturation_level(penalty: float) -> str:
    value = to_finite_float(penalty, 0.0)
    if value >= 0.75:
        return "oversaturated"
    if value >= 0.5:
        return "high"
    if value >= 0.25:
        return "medium"
    return "low"


def primary_platform(platform_counts: Mapping[str, int]) -> str:
    has_video = int(platform_counts.get(Platform.VIDEO.value, 0) or 0) > 0
    has_article = int(platform_counts.get(Platform.ARTICLE.value, 0) or 0) > 0
    if has_video and not has_article:
        return Platform.VIDEO.value
    if has_article and not has_video:
        return Platform.ARTICLE.value
    return "mixed"


def engagement_rate(views_sum: float, engagement_sum: float) -> float:
    views = to_finite_float(views_sum, 0.0)
    if views <= 0:
        return 0.0
    return clamp01(to_finite_float(engagement_sum, 0.0) / views)


def _breadth(source_diversity: int) -> float:
    return clamp01(math.log1p(max(0, source_diversity)) / math.log1p(BREADTH_CEILING))


def composite_score(topic: TopicRecord, platform_diversity: int) -> float:
    """Blend of topic strength, freshness and breadth, minus saturation.

    Momentum inputs are absent within a single run, so their weight is left unused.
    """
    topic01 = clamp01(topic.topic_score / 1000.0)
    platforms01 = clamp01((max(1, platform_diversity) - 1) / 2.0)
    value = (
        0.40 * topic01
        + 0.20 * clamp01(topic.freshness_score)
        + 0.10 * _breadth(topic.source_diversity)
        + 0.05 * platforms01
        - 0.20 * clamp01(topic.saturation_penalty)
    )
    return clamp01(value)


def emerging_score(topic: TopicRecord) -> float:
    value = (
        0.50 * clamp01(topic.freshness_score)
        + 0.15 * _breadth(topic.source_diversity)
        - 0.20 * clamp01(topic.saturation_penalty)
    )
    return clamp01(value)


def build_badges(
    *,
    platform: str,
    level: str,
    freshness_score: float,
    video_metrics: Mapping[str, float],
    article_metrics: Mapping[str, float],
) -> List[str]:
    badges = [platform, f"{level} saturation"]
    if freshness_score >= 0.75:
        badges.append("very fresh")
    if to_finite_float(video_metrics.get("velocitySum"), 0.0) > 0:
        badges.append("video velocity")
    if to_finite_float(article_metrics.get("articleCount"), 0.0) >= 5:
        badges.append("news coverage")
    return badges[:MAX_BADGES]


def signal_source_urls(topic: TopicRecord) -> List[str]:
    """Evidence URLs balanced across platforms; the topic URLs when no evidence exists."""
    urls = topic.evidence.urls() or list(topic.top_source_urls)
    return urls[:MAX_SIGNAL_URLS]


def build_trend_signal(topic: TopicRecord) -> TrendSignal:
    counts = dict(topic.platform_counts)
    platforms = [name for name, count in counts.items() if int(count or 0) > 0]
    platform = primary_platform(counts)
    level = saturation_level(topic.saturation_penalty)

    video_signals = dict(topic.per_platform_signals.get(Platform.VIDEO.value) or {})
    article_signals = dict(topic.per_platform_signals.get(Platform.ARTICLE.value) or {})

    video_metrics: Dict[str, float] = {
        "velocitySum": to_finite_float(video_signals.get("velocitySum"), 0.0),
        "viewsSum": to_finite_float(video_signals.get("viewsSum"), 0.0),
        "engagementSum": to_finite_float(video_signals.get("engagementSum"), 0.0),
        "relatedVideosCount": float(counts.get(Platform.VIDEO.value, 0)),
    }
    video_metrics["engagementRate"] = engagement_rate(video_metrics["viewsSum"], video_metrics["engagementSum"])
    article_metrics: Dict[str, float] = {
        "articleCount": to_finite_float(article_signals.get("articleCount"), 0.0),
        "sourceCount": to_finite_float(article_signals.get("sourceCount"), 0.0),
        "relatedArticlesCount": float(counts.get(Platform.ARTICLE.value, 0)),
    }

    return TrendSignal(
        topic_id=topic.topic_id,
        canonical_title=topic.canonical_title,
        summary=topic.summary,
        primary_platform=platform,
        platforms=platforms,
        platform_counts=counts,
        score_composite=round_half_up(100 * composite_score(topic, len(platforms))),
        score_emerging=round_half_up(100 * emerging_score(topic)),
        topic_score=topic.topic_score,
        freshness_score=topic.freshness_score,
        saturation_level=level,
        saturation_penalty=topic.saturation_penalty,
        cluster_size=topic.cluster_size,
        source_diversity=topic.source_diversity,
        keywords=list(topic.keywords),
        top_source_urls=signal_source_urls(topic),
        video_metrics=video_metrics,
        article_metrics=article_metrics,
        badges=build_badges(
            platform=platform,
            level=level,
            freshness_score=topic.freshness_score,
            video_metrics=video_metrics,
            article_metrics=article_metrics,
        ),
        evidence=topic.evidence.model_copy(deep=True),
    )


def build_trend_signals(topics: Sequence[TopicRecord]) -> List[TrendSignal]:
    return [build_trend_signal(topic) for topic in topics]
