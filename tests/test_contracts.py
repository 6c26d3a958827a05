from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from core import Item, Platform, TopicRecord, parse_timestamp


def test_item_contract_defaults_and_coercion() -> None:
    item = Item(
        platform="YouTube",
        title=None,
        url="  https://example.com/a  ",
        publishedAt="2026-03-01T08:30:00+02:00",
        metrics=["not", "a", "map"],
        externalTrendSignal="nan",
    )
    assert item.platform == Platform.UNKNOWN
    assert item.title == ""
    assert item.url == "https://example.com/a"
    assert item.published_at == datetime(2026, 3, 1, 6, 30, tzinfo=timezone.utc)
    assert item.metrics == {}
    assert item.external_trend_signal == 0.0
    assert item.comparable_score == 0


def test_item_requires_url() -> None:
    with pytest.raises(ValidationError):
        Item(platform="article", title="No link", url="   ")


def test_parse_timestamp_is_lenient() -> None:
    assert parse_timestamp("2026-03-01T00:00:00Z") == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert parse_timestamp("2026-03-01T00:00:00") == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert parse_timestamp(datetime(2026, 3, 1)) == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_topic_record_payload_uses_camel_case() -> None:
    topic = TopicRecord(
        topic_id="abc",
        canonical_title="Rates",
        saturation_48h=4,
        top_source_urls=["https://example.com/a"],
        trend_run_id="run_1",
        project_id="proj_1",
    )
    payload = topic.to_payload()

    assert payload["topicId"] == "abc"
    assert payload["canonicalTitle"] == "Rates"
    assert payload["saturation48h"] == 4
    assert payload["topSourceUrls"] == ["https://example.com/a"]
    assert payload["trendRunId"] == "run_1"
    assert payload["projectId"] == "proj_1"
    assert "saturation_48h" not in payload


def test_topic_record_accepts_payload_keys() -> None:
    topic = TopicRecord.model_validate({"topicId": "x", "canonicalTitle": "T", "saturation48h": 9})
    assert topic.saturation_48h == 9
