"""CLI entrypoint for trend topic runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Any, List, Optional, Sequence

from config import build_settings
from core import Item, parse_timestamp
from trend_pipeline import build_trend_signals, build_trend_topics, dedupe_items, normalize_items
from utils.exceptions import InputValidationError, TrendForgeError
from utils.logger import get_logger, setup_logger


def _read_records(path: str) -> Any:
    if path == "-":
        text = sys.stdin.read()
    else:
        text = Path(path).read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputValidationError("input is not valid JSON", field="input", error=str(exc)) from exc


def _load_items(path: str, raw: bool) -> List[Any]:
    records = _read_records(path)
    if isinstance(records, dict):
        records = records.get("items", records)
    if not raw:
        return records
    if not isinstance(records, list):
        raise InputValidationError("items must be a list", field="items")
    items: List[Item] = normalize_items(records)
    return dedupe_items(items)


def _add_run_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--run-id", required=True)
    parser.add_argument("--project-id", required=True)
    parser.add_argument("--input", required=True, help="JSON file of items, or - for stdin")
    parser.add_argument("--raw", action="store_true", help="input holds collector records to map first")
    parser.add_argument("--max-topics", type=int, default=None)
    parser.add_argument("--threshold", type=float, default=None)
    parser.add_argument("--now", default="", help="ISO-8601 reference time (default: current UTC time)")
    parser.add_argument("--log-level", default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TrendForge topic engine CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    topics = sub.add_parser("topics", help="print ranked topic records")
    _add_run_arguments(topics)

    signals = sub.add_parser("signals", help="print trend signals derived from topic records")
    _add_run_arguments(signals)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = get_logger("trendforge.cli")

    try:
        settings = build_settings(
            max_topics=args.max_topics,
            similarity_threshold=args.threshold,
            log_level=args.log_level,
        )
        setup_logger("trend_pipeline", level=settings.log_level)

        now = None
        if str(args.now).strip():
            now = parse_timestamp(args.now)
            if now is None:
                raise InputValidationError("--now is not an ISO-8601 timestamp", field="now")

        items = _load_items(args.input, args.raw)
        topics = build_trend_topics(args.run_id, args.project_id, items, settings=settings, now=now)
    except (TrendForgeError, OSError) as exc:
        logger.error("run_failed error=%s", exc)
        return 2

    if args.command == "signals":
        payload = [signal.to_payload() for signal in build_trend_signals(topics)]
    else:
        payload = [topic.to_payload() for topic in topics]
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
