"""Fold clusters of scored items into ranked topic records."""

from __future__ import annotations

from datetime import datetime
import hashlib
from typing import Dict, List, Optional, Sequence, Set

from core import EvidenceItem, Item, Platform, TopicEvidence, TopicRecord
from trend_pipeline.clustering import TopicCluster
from trend_pipeline.saturation import ClusterSizeSaturation, SaturationStrategy, saturation_penalty
from trend_pipeline.scoring import (
    ENGAGEMENT_CEILING,
    VELOCITY_CEILING,
    clamp01,
    freshness,
    log_scaled,
    read_metric,
    round_half_up,
    video_velocity,
)
from trend_pipeline.text import SIGNATURE_SIZE


MAX_KEYWORDS = SIGNATURE_SIZE
MAX_SOURCE_URLS = 8
MAX_EVIDENCE_PER_PLATFORM = 3
UNTITLED_TOPIC = "Untitled topic"

ARTICLE_COUNT_CEILING = 30.0
ARTICLE_SOURCE_CEILING = 12.0

_TOPIC_WEIGHTS = {
    "video": 0.40,
    "article": 0.25,
    "freshness": 0.20,
    "confirmation": 0.15,
    "saturation": 0.25,
}
_CONFIRMING_PLATFORMS = (Platform.VIDEO, Platform.ARTICLE)


def topic_id_for(keywords: Sequence[str]) -> str:
    """Order-independent identity of a keyword set."""
    key = "|".join(sorted(keywords))
    return hashlib.sha1(key.encode("utf-8")).hexdigest()[:16]


def cluster_keywords(cluster: TopicCluster, k: int = MAX_KEYWORDS) -> List[str]:
    """Union-signature tokens ranked by how many members carry them."""
    support: Dict[str, int] = {token: 0 for token in cluster.signature}
    for member_signature in cluster.member_signatures:
        for token in set(member_signature):
            if token in support:
                support[token] += 1
    ranked = sorted(support.items(), key=lambda pair: pair[1], reverse=True)
    return [token for token, _ in ranked[:k]]


def _normalized_author(item: Item) -> str:
    return str(item.author or "").strip().lower()


def _best_item(items: Sequence[Item]) -> Optional[Item]:
    best: Optional[Item] = None
    for item in items:
        if best is None or item.comparable_score > best.comparable_score:
            best = item
    return best


def _top_evidence(items: Sequence[Item], platform: Platform) -> List[EvidenceItem]:
    members = [item for item in items if item.platform == platform]
    ranked = sorted(members, key=lambda item: item.comparable_score, reverse=True)
    return [
        EvidenceItem(
            title=item.title,
            url=item.url,
            published_at=item.published_at,
            source=item.author,
            platform=item.platform,
            score=item.comparable_score,
        )
        for item in ranked[:MAX_EVIDENCE_PER_PLATFORM]
    ]


def build_evidence(items: Sequence[Item]) -> TopicEvidence:
    """Top members per platform by comparable score."""
    return TopicEvidence(
        video_top=_top_evidence(items, Platform.VIDEO),
        article_top=_top_evidence(items, Platform.ARTICLE),
    )


def _confirmation_score(platform_counts: Dict[str, int]) -> float:
    present = sum(1 for platform in _CONFIRMING_PLATFORMS if platform_counts.get(platform.value, 0) > 0)
    return clamp01(0.5 * present)


def aggregate(
    cluster: TopicCluster,
    *,
    now: Optional[datetime] = None,
    freshness_half_life_hours: float = 24.0,
    freshness_max_hours: float = 72.0,
    saturation: Optional[SaturationStrategy] = None,
    trend_run_id: Optional[str] = None,
    project_id: Optional[str] = None,
) -> TopicRecord:
    """Score one cluster as a topic."""
    items = list(cluster.items)
    strategy = saturation or ClusterSizeSaturation()

    platform_counts: Dict[str, int] = {}
    authors: Set[str] = set()
    newest: Optional[datetime] = None

    velocity_sum = 0.0
    views_sum = 0.0
    engagement_sum = 0.0
    article_count = 0
    article_authors: Set[str] = set()

    for item in items:
        key = item.platform.value
        platform_counts[key] = platform_counts.get(key, 0) + 1

        author = _normalized_author(item)
        if author:
            authors.add(author)

        if item.published_at is not None and (newest is None or item.published_at > newest):
            newest = item.published_at

        if item.platform == Platform.VIDEO:
            velocity_sum += video_velocity(item, now)
            views_sum += max(0.0, read_metric(item.metrics, "views"))
            engagement_sum += max(0.0, read_metric(item.metrics, "likes")) + max(
                0.0, read_metric(item.metrics, "comments")
            )
        elif item.platform == Platform.ARTICLE:
            article_count += 1
            if author:
                article_authors.add(author)

    best = _best_item(items)
    cluster_size = len(items)

    freshness_score = freshness(newest, freshness_half_life_hours, freshness_max_hours, now)

    keywords = cluster_keywords(cluster)
    topic_id = topic_id_for(keywords)

    saturation_48h = int(strategy.count(cluster, topic_id))
    penalty = saturation_penalty(saturation_48h)

    video_strength = clamp01(
        0.6 * log_scaled(velocity_sum, VELOCITY_CEILING) + 0.4 * log_scaled(engagement_sum, ENGAGEMENT_CEILING)
    )
    article_sources = max(1, len(article_authors)) if article_count else 0
    article_strength = clamp01(
        0.6 * log_scaled(article_count, ARTICLE_COUNT_CEILING)
        + 0.4 * log_scaled(article_sources, ARTICLE_SOURCE_CEILING)
    )
    confirmation = _confirmation_score(platform_counts)

    final01 = (
        _TOPIC_WEIGHTS["video"] * video_strength
        + _TOPIC_WEIGHTS["article"] * article_strength
        + _TOPIC_WEIGHTS["freshness"] * freshness_score
        + _TOPIC_WEIGHTS["confirmation"] * confirmation
        - _TOPIC_WEIGHTS["saturation"] * penalty
    )
    topic_score = round_half_up(1000.0 * clamp01(final01))

    ranked_members = sorted(items, key=lambda item: item.comparable_score, reverse=True)
    top_source_urls = [item.url for item in ranked_members[:MAX_SOURCE_URLS] if item.url]

    canonical_title = (best.title if best else "") or (items[0].title if items else "") or UNTITLED_TOPIC
    summary = (best.summary if best else "") or next((item.summary for item in items if item.summary), "")

    return TopicRecord(
        topic_id=topic_id,
        canonical_title=canonical_title,
        summary=summary,
        keywords=keywords,
        top_source_urls=top_source_urls,
        platform_counts=platform_counts,
        source_diversity=len(authors),
        cluster_size=cluster_size,
        freshness_score=freshness_score,
        saturation_48h=saturation_48h,
        saturation_penalty=penalty,
        per_platform_signals={
            Platform.VIDEO.value: {
                "velocitySum": velocity_sum,
                "viewsSum": views_sum,
                "engagementSum": engagement_sum,
            },
            Platform.ARTICLE.value: {
                "articleCount": float(article_count),
                "sourceCount": float(len(article_authors)),
            },
        },
        confirmation_score=confirmation,
        topic_score=topic_score,
        score_breakdown={
            "videoStrength": video_strength,
            "articleStrength": article_strength,
            "freshnessScore": freshness_score,
            "confirmationScore": confirmation,
            "saturationPenalty": penalty,
            "final01": final01,
        },
        evidence=build_evidence(items),
        trend_run_id=trend_run_id,
        project_id=project_id,
    )


def rank_topics(topics: Sequence[TopicRecord], max_topics: Optional[int] = None) -> List[TopicRecord]:
    ranked = sorted(topics, key=lambda topic: topic.topic_score, reverse=True)
    if max_topics is None:
        return ranked
    return ranked[: max(0, int(max_topics))]


def aggregate_clusters(
    clusters: Sequence[TopicCluster],
    *,
    max_topics: Optional[int] = None,
    now: Optional[datetime] = None,
    freshness_half_life_hours: float = 24.0,
    freshness_max_hours: float = 72.0,
    saturation: Optional[SaturationStrategy] = None,
    trend_run_id: Optional[str] = None,
    project_id: Optional[str] = None,
) -> List[TopicRecord]:
    """Aggregate every cluster, then sort by topic score and truncate."""
    topics = [
        aggregate(
            item_cluster,
            now=now,
            freshness_half_life_hours=freshness_half_life_hours,
            freshness_max_hours=freshness_max_hours,
            saturation=saturation,
            trend_run_id=trend_run_id,
            project_id=project_id,
        )
        for item_cluster in clusters
        if item_cluster.items
    ]
    return rank_topics(topics, max_topics)
