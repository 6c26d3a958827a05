"""Rank statistics shared by the scoring stages."""

from __future__ import annotations

from typing import List, Sequence


def midrank_percentiles(values: Sequence[float]) -> List[float]:
    """Tie-aware descending percentile rank for each value, in input order.

    Values are ranked from highest (position 0) to lowest (position n-1). A block
    of k tied values occupying positions [i, i+k) shares the average rank
    ``(i + i+k-1) / 2`` and maps to ``1 - rank / (n - 1)``, so the best value gets
    1.0 and an untied worst value gets 0.0. A single value gets 1.0.
    """
    n = len(values)
    if n == 0:
        return []
    if n == 1:
        return [1.0]

    order = sorted(range(n), key=lambda idx: float(values[idx]), reverse=True)
    percentiles = [0.0] * n

    i = 0
    while i < n:
        j = i
        current = float(values[order[i]])
        while j < n and float(values[order[j]]) == current:
            j += 1
        mid_rank = (i + (j - 1)) / 2.0
        pct = 1.0 - mid_rank / (n - 1)
        for pos in range(i, j):
            percentiles[order[pos]] = pct
        i = j

    return percentiles
