from __future__ import annotations

from datetime import datetime, timezone
import logging

from core import Platform
from trend_pipeline.normalize import (
    canonical_metrics,
    dedupe_items,
    normalize_items,
    normalize_record,
    resolve_platform,
)


def test_youtube_record_maps_to_video_item() -> None:
    item = normalize_record(
        {
            "source": "youtube",
            "videoId": "abc123",
            "title": "Rate decision &amp; what it means",
            "description": "  Full   breakdown ",
            "channelTitle": "Macro Channel",
            "publishedAt": "2026-03-01T10:00:00Z",
            "metrics": {"viewCount": "12000", "likeCount": 400, "commentCount": 35, "viewsPerHour": 500},
        }
    )

    assert item is not None
    assert item.platform == Platform.VIDEO
    assert item.url == "https://www.youtube.com/watch?v=abc123"
    assert item.title == "Rate decision & what it means"
    assert item.summary == "Full breakdown"
    assert item.author == "Macro Channel"
    assert item.published_at == datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert item.metrics == {"views": "12000", "likes": 400, "comments": 35, "viewsPerHour": 500}


def test_news_record_maps_to_article_item() -> None:
    item = normalize_record(
        {
            "platform": "news",
            "topicTitle": "Fed &amp; ECB <b>cut</b>  rates",
            "topicSummary": "Coordinated move",
            "sourceUrl": "https://news.example.com/story",
            "source_name": "Example Wire",
            "pubDate": "not a date",
            "googleTrends": {"score01": 0.8},
        }
    )

    assert item is not None
    assert item.platform == Platform.ARTICLE
    assert item.title == "Fed & ECB cut rates"
    assert item.url == "https://news.example.com/story"
    assert item.author == "Example Wire"
    assert item.published_at is None
    assert item.external_trend_signal == 0.8


def test_platform_aliases() -> None:
    assert resolve_platform({"platform": "Shorts"}) == Platform.VIDEO
    assert resolve_platform({"source": "gdelt"}) == Platform.ARTICLE
    assert resolve_platform({"provider": "reddit"}) == Platform.ARTICLE
    assert resolve_platform({"platform": "podcast"}) == Platform.UNKNOWN
    assert resolve_platform({}) == Platform.UNKNOWN


def test_canonical_metrics_keeps_canonical_key_over_alias() -> None:
    metrics = canonical_metrics({"views": 10, "viewCount": 99, "age_hours": 3, "stats": {"x": 1}})
    assert metrics == {"views": 10, "ageHours": 3, "stats": {"x": 1}}
    assert canonical_metrics(None) == {}
    assert canonical_metrics(["views", 1]) == {}


def test_records_without_url_are_dropped(caplog) -> None:
    records = [
        {"platform": "news", "title": "Has link", "link": "https://a.example.com/1"},
        {"platform": "news", "title": "No link"},
        "not a mapping",
    ]
    with caplog.at_level(logging.INFO, logger="trend_pipeline.normalize"):
        items = normalize_items(records)

    assert [item.title for item in items] == ["Has link"]
    assert "normalize_dropped count=2 kept=1" in caplog.text


def test_external_signal_is_clamped() -> None:
    item = normalize_record({"platform": "news", "url": "https://a.example.com/x", "externalTrendSignal": 7})
    assert item is not None
    assert item.external_trend_signal == 1.0


def test_dedupe_keeps_first_item_per_platform_and_url() -> None:
    records = [
        {"platform": "news", "title": "first", "url": "https://a.example.com/1"},
        {"platform": "news", "title": "second", "url": "https://a.example.com/1"},
        {"platform": "youtube", "title": "video", "url": "https://a.example.com/1"},
    ]
    unique = dedupe_items(normalize_items(records))
    assert [item.title for item in unique] == ["first", "video"]
