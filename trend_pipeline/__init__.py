"""Trend pipeline stages: normalize, score, cluster, aggregate, signals."""

from .aggregate import aggregate, aggregate_clusters, cluster_keywords, rank_topics, topic_id_for
from .clustering import ClusterSignature, TopicCluster, cluster
from .normalize import dedupe_items, normalize_items, normalize_record
from .runtime import build_trend_topics, select_items
from .saturation import ClusterSizeSaturation, HistoricalSaturation, SaturationStrategy, saturation_penalty
from .scoring import freshness, normalize_comparable, score_raw
from .signals import build_trend_signals
from .text import jaccard, signature_for, tokenize

__all__ = [
    "aggregate",
    "aggregate_clusters",
    "build_trend_signals",
    "build_trend_topics",
    "cluster",
    "cluster_keywords",
    "ClusterSignature",
    "ClusterSizeSaturation",
    "dedupe_items",
    "freshness",
    "HistoricalSaturation",
    "jaccard",
    "normalize_comparable",
    "normalize_items",
    "normalize_record",
    "rank_topics",
    "saturation_penalty",
    "SaturationStrategy",
    "score_raw",
    "select_items",
    "signature_for",
    "tokenize",
    "topic_id_for",
    "TopicCluster",
]
