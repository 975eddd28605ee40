#!/usr/bin/env python3
"""Report scenario steps that have no matching step definition.

Reads step-definition records and parsed feature-file records (both JSONL),
prints the unmatched steps as JSON to stdout and a count summary to stderr.
Paths containing any excluded fragment (from the settings file or
``--exclude``) are ignored.

Usage:
    python3 scripts/missing_steps.py --definitions steps.jsonl \
      --scenarios features.jsonl --settings stepscout.json
    python3 scripts/missing_steps.py --definitions steps.jsonl \
      --scenarios features.jsonl --exclude build/ --fail-on-missing
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from stepscout.io_utils import dump_json
from stepscout.service import StepScoutService
from stepscout.settings import SETTINGS_FILENAME, load_settings
from stepscout.symbol_source import JsonlSymbolSource

log = logging.getLogger("missing_steps")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Report scenario steps with no matching step definition."
    )
    parser.add_argument(
        "--definitions", required=True, type=Path,
        help="JSONL file of step-definition records",
    )
    parser.add_argument(
        "--scenarios", required=True, type=Path,
        help="JSONL file of parsed feature-file records",
    )
    parser.add_argument(
        "--settings", type=Path, default=Path(SETTINGS_FILENAME),
        help=f"Settings JSON with exclude_paths (default: {SETTINGS_FILENAME})",
    )
    parser.add_argument(
        "--exclude", action="append", default=[],
        help="Extra excluded path fragment (repeatable)",
    )
    parser.add_argument(
        "--fail-on-missing", action="store_true",
        help="Exit with status 2 when any step is missing",
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

    for path in (args.definitions, args.scenarios):
        if not path.exists():
            print(f"Error: file not found: {path}", file=sys.stderr)
            return 1

    source = JsonlSymbolSource(args.definitions, args.scenarios)
    try:
        settings = load_settings(args.settings)
        raw_definitions = source.list_step_definitions()
        source.list_scenario_files()  # surface malformed records before reporting
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    for fragment in args.exclude:
        settings.add_exclude(fragment)
    log.debug("Excluded path fragments: %s", settings.excluded_path_fragments())

    service = StepScoutService(source, settings)
    service.rebuild_index(raw_definitions)

    missing = service.find_missing()
    print(
        f"{service.count_feature_files()} feature files, "
        f"{service.count_scenarios()} scenarios, "
        f"{service.count_step_definitions()} step definitions, "
        f"{len(missing)} missing steps",
        file=sys.stderr,
    )
    dump_json(missing)

    if missing and args.fail_on_missing:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
