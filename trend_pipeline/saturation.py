"""Saturation strategies: how many recent items already cover a topic."""

from __future__ import annotations

import math
from typing import Callable, Mapping, Optional, Protocol, Union

from trend_pipeline.clustering import TopicCluster


SATURATION_CEILING = 20


class SaturationStrategy(Protocol):
    def count(self, cluster: TopicCluster, topic_id: str) -> int:
        ...


class ClusterSizeSaturation:
    """Same-run stand-in: saturation equals the cluster size."""

    def count(self, cluster: TopicCluster, topic_id: str) -> int:
        return cluster.size


class HistoricalSaturation:
    """Rolling-window item counts per topic id supplied by the host.

    ``history`` is either a mapping of topic id to count or a callable returning a
    count (or None). The current cluster is added on top of the historical count;
    topics without history fall back to the cluster size.
    """

    def __init__(self, history: Union[Mapping[str, int], Callable[[str], Optional[int]]]) -> None:
        self._history = history

    def _lookup(self, topic_id: str) -> Optional[int]:
        if callable(self._history):
            return self._history(topic_id)
        return self._history.get(topic_id)

    def count(self, cluster: TopicCluster, topic_id: str) -> int:
        previous = self._lookup(topic_id)
        if previous is None:
            return cluster.size
        return max(0, int(previous)) + cluster.size


def saturation_penalty(saturation: int) -> float:
    """log curve: 0 for one item, ~0.53 at 5, ~0.82 at 12, 1.0 from 21 on."""
    value = math.log1p(max(0, int(saturation) - 1)) / math.log1p(SATURATION_CEILING)
    return max(0.0, min(1.0, value))
