#!/usr/bin/env python3
"""Fuzzy search over indexed step definitions.

Reads step-definition records (JSONL, one per definition site) and prints
ranked matches as JSON to stdout with summary messages to stderr.

Usage:
    python3 scripts/step_search.py --definitions steps.jsonl --query "log in"
    python3 scripts/step_search.py --definitions steps.jsonl --query userLogin \
      --group com.example.LoginSteps --screen Login --max-results 20
    python3 scripts/step_search.py --definitions steps.jsonl --list-groups
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from stepscout.io_utils import dump_json
from stepscout.service import StepScoutService
from stepscout.symbol_source import JsonlSymbolSource

log = logging.getLogger("step_search")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fuzzy search over indexed step definitions."
    )
    parser.add_argument(
        "--definitions", required=True, type=Path,
        help="JSONL file of step-definition records",
    )
    parser.add_argument(
        "--query", default="",
        help="Search text (blank lists every definition alphabetically)",
    )
    parser.add_argument(
        "--group", action="append", default=None,
        help="Only definitions from this class/file group (repeatable)",
    )
    parser.add_argument(
        "--screen", default=None,
        help="Only definitions tagged with this screen name",
    )
    parser.add_argument(
        "--max-results", type=int, default=50,
        help="Maximum number of results (default: 50, 0 = all)",
    )
    parser.add_argument(
        "--list-groups", action="store_true",
        help="Print definition counts per group instead of searching",
    )
    parser.add_argument(
        "--list-screens", action="store_true",
        help="Print definition counts per screen tag instead of searching",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if not args.definitions.exists():
        print(f"Error: definitions file not found: {args.definitions}", file=sys.stderr)
        return 1

    source = JsonlSymbolSource(args.definitions)
    try:
        raw_definitions = source.list_step_definitions()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    service = StepScoutService(source)
    service.rebuild_index(raw_definitions)

    total = service.count_step_definitions()
    dropped = len(service.compile_failures())
    log.debug("Indexed %d step definitions (%d dropped)", total, dropped)

    if args.list_groups:
        dump_json(dict(sorted(service.group_counts().items())))
        return 0
    if args.list_screens:
        dump_json(dict(sorted(service.screen_counts().items())))
        return 0

    group_filter = set(args.group) if args.group else None
    results = service.search(
        args.query, group_filter=group_filter, screen_filter=args.screen,
    )
    print(
        f"Found {len(results)} of {total} step definitions for {args.query!r}",
        file=sys.stderr,
    )
    if args.max_results > 0:
        results = results[: args.max_results]
    dump_json(results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
