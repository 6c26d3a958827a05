"""Core contracts and shared types for the trend engine."""

from .contracts import (
    EvidenceItem,
    Item,
    Platform,
    TopicEvidence,
    TopicRecord,
    TrendSignal,
    parse_timestamp,
)

__all__ = [
    "EvidenceItem",
    "Item",
    "Platform",
    "TopicEvidence",
    "TopicRecord",
    "TrendSignal",
    "parse_timestamp",
]
