from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging

import pytest

from config import EngineSettings
from core import Item
from trend_pipeline.runtime import build_trend_topics, select_items
from utils.exceptions import InputValidationError

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _settings(**overrides) -> EngineSettings:
    values = {
        "similarity_threshold": 0.55,
        "max_topics": 30,
        "freshness_half_life_hours": 24.0,
        "freshness_max_hours": 72.0,
    }
    values.update(overrides)
    return EngineSettings(**values)


def _item(
    url: str,
    title: str,
    *,
    platform: str = "article",
    hours_ago: float = 2.0,
    author: str = "Wire",
    metrics: dict | None = None,
) -> Item:
    return Item(
        platform=platform,
        title=title,
        url=f"https://example.com/{url}",
        published_at=NOW - timedelta(hours=hours_ago),
        author=author,
        metrics=dict(metrics or {}),
    )


def _scored(url: str, platform: str, score: int) -> Item:
    item = Item(platform=platform, title=url, url=f"https://example.com/{url}")
    item.comparable_score = score
    return item


def test_build_trend_topics_end_to_end(caplog) -> None:
    items = [
        _item("a1", "Central Bank Raises Interest Rates", author="Reuters"),
        _item("a2", "Central bank hikes interest rate again", author="AP", hours_ago=1.5),
        _item(
            "v1",
            "Volcano eruption forces evacuations",
            platform="video",
            metrics={"views": 80_000, "likes": 3_000, "comments": 200, "ageHours": 3},
        ),
        _item("a3", "Volcano eruption forces evacuations island", author="BBC"),
    ]

    with caplog.at_level(logging.INFO, logger="trend_pipeline.runtime"):
        topics = build_trend_topics("run_1", "proj_1", items, settings=_settings(), now=NOW)

    assert len(topics) == 2
    assert sorted(topic.cluster_size for topic in topics) == [2, 2]
    scores = [topic.topic_score for topic in topics]
    assert scores == sorted(scores, reverse=True)
    for topic in topics:
        assert topic.trend_run_id == "run_1"
        assert topic.project_id == "proj_1"
        assert 0 <= topic.topic_score <= 1000

    for item in items:
        assert 0 <= item.comparable_score <= 1000

    assert "run_start run_id=run_1" in caplog.text
    assert "run_complete run_id=run_1 topics=2" in caplog.text


def test_build_trend_topics_accepts_camel_case_dicts() -> None:
    records = [
        {
            "platform": "article",
            "title": "Central Bank Raises Interest Rates",
            "url": "https://example.com/d1",
            "publishedAt": "2026-03-02T10:00:00Z",
            "author": "Reuters",
        },
        {
            "platform": "video",
            "title": "Championship final draws record crowd",
            "url": "https://example.com/d2",
            "publishedAt": None,
            "metrics": {"views": 1000, "ageHours": 2},
        },
    ]
    topics = build_trend_topics("run_2", "proj_2", records, settings=_settings(), now=NOW)
    assert len(topics) == 2


def test_max_topics_and_threshold_overrides() -> None:
    items = [
        _item("t1", "Central Bank Raises Interest Rates"),
        _item("t2", "Championship final draws record crowd"),
        _item("t3", "Volcano eruption forces evacuations"),
    ]
    assert len(build_trend_topics("r", "p", items, settings=_settings(), now=NOW, max_topics=2)) == 2
    assert len(build_trend_topics("r", "p", items, settings=_settings(max_topics=1), now=NOW)) == 1

    separate = build_trend_topics("r", "p", items, settings=_settings(), now=NOW, similarity_threshold=0.0)
    assert len(separate) == 3


def test_empty_batch_returns_no_topics() -> None:
    assert build_trend_topics("run", "proj", [], settings=_settings(), now=NOW) == []


@pytest.mark.parametrize(
    "run_id, project_id, items, field",
    [
        ("", "proj", [], "run_id"),
        ("run", "  ", [], "project_id"),
        ("run", "proj", None, "items"),
        ("run", "proj", "not-a-list", "items"),
        ("run", "proj", [42], "items"),
        ("run", "proj", [{"title": "no url"}], "items"),
    ],
)
def test_fatal_input_errors(run_id, project_id, items, field) -> None:
    with pytest.raises(InputValidationError) as exc_info:
        build_trend_topics(run_id, project_id, items, settings=_settings(), now=NOW)
    assert exc_info.value.field == field


def test_select_items_fills_platform_quotas() -> None:
    items = [_scored(f"v{i}", "video", 900 - i) for i in range(15)]
    items += [_scored(f"a{i}", "article", 800 - i) for i in range(15)]

    store, show = select_items(items)

    assert len(store) == 30
    assert len(show) == 20
    assert sum(1 for item in show if item.platform.value == "video") == 8
    assert sum(1 for item in show if item.platform.value == "article") == 12
    assert [item.comparable_score for item in show] == sorted((item.comparable_score for item in show), reverse=True)


def test_select_items_backfills_unused_quota() -> None:
    items = [_scored(f"v{i}", "video", 500 + i) for i in range(5)]
    items += [_scored(f"a{i}", "article", 400 + i) for i in range(30)]
    items.append(_scored("u0", "unknown", 999))

    store, show = select_items(items, store_limit=120, show_limit=20)

    assert len(show) == 20
    assert sum(1 for item in show if item.platform.value == "video") == 5
    assert show[0].url == "https://example.com/u0"


def test_select_items_store_limit_bounds_show() -> None:
    items = [_scored(f"a{i}", "article", i) for i in range(50)]
    store, show = select_items(items, store_limit=10, show_limit=20)

    assert [item.comparable_score for item in store] == list(range(49, 39, -1))
    assert len(show) == 10
    assert {item.url for item in show} <= {item.url for item in store}


def _rate_batch() -> list[Item]:
    return [
        _item("i1", "Central Bank Raises Interest Rates", author="Reuters"),
        _item("i2", "Central bank hikes interest rate again", author="AP", hours_ago=1.0),
        _item("i3", "Volcano eruption forces evacuations", platform="video", metrics={"views": 9_000, "ageHours": 2}),
    ]


def test_naive_now_is_read_as_utc() -> None:
    naive_now = datetime(2026, 3, 2, 12, 0)

    naive = build_trend_topics("r", "p", _rate_batch(), settings=_settings(), now=naive_now)
    aware = build_trend_topics("r", "p", _rate_batch(), settings=_settings(), now=NOW)

    assert [topic.to_payload() for topic in naive] == [topic.to_payload() for topic in aware]


def test_identical_runs_produce_identical_payloads() -> None:
    first = build_trend_topics("run_9", "proj_9", _rate_batch(), settings=_settings(), now=NOW)
    second = build_trend_topics("run_9", "proj_9", _rate_batch(), settings=_settings(), now=NOW)

    assert [topic.topic_id for topic in first] == [topic.topic_id for topic in second]
    assert [topic.to_payload() for topic in first] == [topic.to_payload() for topic in second]
