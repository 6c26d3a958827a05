from __future__ import annotations

import json

import main


def _write(tmp_path, records) -> str:
    path = tmp_path / "items.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return str(path)


def _records() -> list[dict]:
    return [
        {
            "platform": "article",
            "title": "Central Bank Raises Interest Rates",
            "url": "https://example.com/a1",
            "publishedAt": "2026-03-02T10:00:00Z",
            "author": "Reuters",
        },
        {
            "platform": "article",
            "title": "Central bank hikes interest rate again",
            "url": "https://example.com/a2",
            "publishedAt": "2026-03-02T11:00:00Z",
            "author": "AP",
        },
    ]


def test_topics_command_prints_topic_records(tmp_path, capsys) -> None:
    path = _write(tmp_path, _records())
    code = main.main(
        ["topics", "--run-id", "r1", "--project-id", "p1", "--input", path, "--now", "2026-03-02T12:00:00Z"]
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload) == 1
    assert payload[0]["clusterSize"] == 2
    assert payload[0]["trendRunId"] == "r1"


def test_signals_command_with_raw_records(tmp_path, capsys) -> None:
    raw = [
        {"source": "youtube", "videoId": "vid1", "title": "Volcano eruption forces evacuations",
         "metrics": {"viewCount": 5000, "ageHours": 2}},
        {"source": "youtube", "videoId": "vid1", "title": "Volcano eruption forces evacuations"},
        {"source": "gdelt", "title": "No link here"},
    ]
    path = _write(tmp_path, raw)
    code = main.main(["signals", "--run-id", "r2", "--project-id", "p2", "--input", path, "--raw"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload) == 1
    assert payload[0]["primaryPlatform"] == "video"
    assert payload[0]["topSourceUrls"] == ["https://www.youtube.com/watch?v=vid1"]


def test_invalid_input_returns_error_code(tmp_path, capsys) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    assert main.main(["topics", "--run-id", "r", "--project-id", "p", "--input", str(path)]) == 2
    assert main.main(["topics", "--run-id", "r", "--project-id", "p", "--input", str(tmp_path / "missing.json")]) == 2
    assert capsys.readouterr().out == ""
