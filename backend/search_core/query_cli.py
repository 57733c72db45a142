#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.search_core.logging_config import configure_structlog, get_logger  # noqa: E402
from backend.search_core.pipeline import QueryPipeline  # noqa: E402

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show how a search prompt is understood.")
    parser.add_argument("prompt", help="Free-text search prompt, comma-separated phrases")
    parser.add_argument("--lat", type=float, help="Device latitude")
    parser.add_argument("--lng", type=float, help="Device longitude")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if (args.lat is None) != (args.lng is None):
        parser.error("--lat and --lng must be given together")

    configure_structlog()
    user_location = None
    if args.lat is not None:
        user_location = {"latitude": args.lat, "longitude": args.lng}

    pipeline = QueryPipeline()
    try:
        understanding = pipeline.understand(args.prompt, user_location)
    finally:
        pipeline.close()
    logger.info("query_understood", degraded=understanding.degraded)

    payload = understanding.as_dict()
    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    filters = {key: ids for key, ids in payload["filters"].items() if ids}
    print(f"filters:     {filters or '-'}")
    print(f"free text:   {', '.join(understanding.free_text_terms) or '-'}")
    print(f"terms:       {', '.join(understanding.search_terms) or '-'}")
    print(f"location:    {payload['location'] or '-'}")
    if understanding.degraded:
        print("note:        taxonomy unavailable, free-text search only")
    return 0


if __name__ == "__main__":
    sys.exit(main())
