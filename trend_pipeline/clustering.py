"""Online greedy clustering of items by keyword-signature similarity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Sequence

from core import Item
from trend_pipeline.text import jaccard, signature_for


@dataclass
class ClusterSignature:
    """Insertion-ordered token set that only grows."""

    _tokens: Dict[str, None] = field(default_factory=dict)

    @classmethod
    def of(cls, tokens: Iterable[str]) -> "ClusterSignature":
        signature = cls()
        signature.absorb(tokens)
        return signature

    def absorb(self, tokens: Iterable[str]) -> None:
        for token in tokens:
            self._tokens.setdefault(token, None)

    @property
    def tokens(self) -> List[str]:
        return list(self._tokens)

    def as_set(self) -> set:
        return set(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._tokens))


@dataclass
class TopicCluster:
    items: List[Item] = field(default_factory=list)
    signature: ClusterSignature = field(default_factory=ClusterSignature)
    member_signatures: List[List[str]] = field(default_factory=list)

    def add(self, item: Item, item_signature: Sequence[str]) -> None:
        self.items.append(item)
        self.member_signatures.append(list(item_signature))
        self.signature.absorb(item_signature)

    @property
    def size(self) -> int:
        return len(self.items)


def cluster(items: Sequence[Item], similarity_threshold: float = 0.55) -> List[TopicCluster]:
    """Greedy single-pass Jaccard clustering in input order.

    Each item joins the most similar existing cluster when that similarity reaches
    the threshold; exact ties go to the earliest-created cluster. Otherwise the item
    starts a new cluster. A threshold above 1 never merges.
    """
    threshold = float(similarity_threshold)
    clusters: List[TopicCluster] = []
    signature_sets: List[set] = []

    for item in items:
        item_signature = signature_for(item.title, item.summary)
        item_set = set(item_signature)
        best_idx = -1
        best_score = 0.0

        for idx, existing in enumerate(signature_sets):
            score = jaccard(item_set, existing)
            if score > best_score:
                best_idx = idx
                best_score = score

        if best_idx >= 0 and best_score >= threshold:
            clusters[best_idx].add(item, item_signature)
            signature_sets[best_idx].update(item_signature)
        else:
            created = TopicCluster()
            created.add(item, item_signature)
            clusters.append(created)
            signature_sets.append(set(item_signature))

    return clusters
