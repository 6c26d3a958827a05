"""Run entry points: items in, ranked topic records out."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from time import perf_counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from config import EngineSettings, get_settings
from core import Item, Platform, TopicRecord, parse_timestamp
from trend_pipeline.aggregate import aggregate_clusters
from trend_pipeline.clustering import cluster
from trend_pipeline.saturation import SaturationStrategy
from trend_pipeline.scoring import normalize_comparable
from utils.exceptions import InputValidationError

logger = logging.getLogger(__name__)


STORE_LIMIT = 120
SHOW_LIMIT = 20
DEFAULT_SHOW_QUOTAS: Dict[str, int] = {Platform.VIDEO.value: 8, Platform.ARTICLE.value: 12}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_id(value: Any, field: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise InputValidationError(f"{field} is required", field=field)
    return text


def _coerce_items(items: Any) -> List[Item]:
    if not isinstance(items, (list, tuple)):
        raise InputValidationError(
            "items must be a list",
            field="items",
            received=type(items).__name__,
        )
    coerced: List[Item] = []
    for index, entry in enumerate(items):
        if isinstance(entry, Item):
            coerced.append(entry)
            continue
        if not isinstance(entry, Mapping):
            raise InputValidationError("item must be an object", field="items", index=index)
        try:
            coerced.append(Item.model_validate(dict(entry)))
        except ValidationError as exc:
            raise InputValidationError(
                "item failed validation",
                field="items",
                index=index,
                errors=[err.get("msg", "") for err in exc.errors()],
            ) from exc
    return coerced


def build_trend_topics(
    run_id: str,
    project_id: str,
    items: Sequence[Any],
    *,
    settings: Optional[EngineSettings] = None,
    now: Optional[datetime] = None,
    saturation: Optional[SaturationStrategy] = None,
    max_topics: Optional[int] = None,
    similarity_threshold: Optional[float] = None,
) -> List[TopicRecord]:
    """Score, cluster and aggregate one batch of items into ranked topic records.

    Items are scored in place. Explicit ``max_topics`` / ``similarity_threshold``
    override the settings values. Raises InputValidationError before any work when
    the identifiers or the item list are unusable.
    """
    run_id = _require_id(run_id, "run_id")
    project_id = _require_id(project_id, "project_id")
    batch = _coerce_items(items)

    settings = settings or get_settings()
    now = parse_timestamp(now) or _utcnow()
    limit = settings.max_topics if max_topics is None else max(0, int(max_topics))
    threshold = settings.similarity_threshold if similarity_threshold is None else float(similarity_threshold)

    started = perf_counter()
    logger.info("run_start run_id=%s project_id=%s items=%d", run_id, project_id, len(batch))
    if not batch:
        logger.info("run_complete run_id=%s topics=0 elapsed_ms=0", run_id)
        return []

    normalize_comparable(
        batch,
        now,
        freshness_half_life_hours=settings.freshness_half_life_hours,
        freshness_max_hours=settings.freshness_max_hours,
    )
    ordered = sorted(batch, key=lambda item: item.comparable_score, reverse=True)

    clusters = cluster(ordered, similarity_threshold=threshold)
    logger.info("clustered run_id=%s items=%d clusters=%d", run_id, len(ordered), len(clusters))

    topics = aggregate_clusters(
        clusters,
        max_topics=limit,
        now=now,
        freshness_half_life_hours=settings.freshness_half_life_hours,
        freshness_max_hours=settings.freshness_max_hours,
        saturation=saturation,
        trend_run_id=run_id,
        project_id=project_id,
    )
    elapsed_ms = int((perf_counter() - started) * 1000)
    logger.info("run_complete run_id=%s topics=%d elapsed_ms=%d", run_id, len(topics), elapsed_ms)
    return topics


def select_items(
    items: Sequence[Item],
    store_limit: int = STORE_LIMIT,
    show_limit: int = SHOW_LIMIT,
    quotas: Optional[Mapping[str, int]] = None,
) -> Tuple[List[Item], List[Item]]:
    """Split scored items into the persisted set and the displayed set.

    The store set is the top ``store_limit`` items by comparable score. The show
    set is drawn from the store set: per-platform quotas first, then the best
    remaining items until ``show_limit`` is reached, re-sorted by score.
    """
    quotas = DEFAULT_SHOW_QUOTAS if quotas is None else quotas
    ranked = sorted(items, key=lambda item: item.comparable_score, reverse=True)
    store = ranked[: max(0, int(store_limit))]
    limit = max(0, int(show_limit))

    chosen: List[Item] = []
    chosen_ids = set()
    for platform, quota in quotas.items():
        taken = 0
        for item in store:
            if len(chosen) >= limit or taken >= quota:
                break
            if item.platform.value != platform or id(item) in chosen_ids:
                continue
            chosen.append(item)
            chosen_ids.add(id(item))
            taken += 1

    for item in store:
        if len(chosen) >= limit:
            break
        if id(item) in chosen_ids:
            continue
        chosen.append(item)
        chosen_ids.add(id(item))

    show = sorted(chosen, key=lambda item: item.comparable_score, reverse=True)
    return store, show
