"""JSON / JSONL helpers for settings, symbol-source records and CLI output.

orjson when available, stdlib ``json`` otherwise.
"""
from __future__ import annotations

import json
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

_orjson: Any
try:
    import orjson
    _orjson = orjson
except ImportError:
    _orjson = None


def _decode(raw: bytes | str) -> Any:
    if _orjson is not None:
        return _orjson.loads(raw)
    return json.loads(raw)


def to_jsonable(obj: Any) -> Any:
    """Convert result dataclasses (and containers of them) to plain JSON types."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


def load_json(path: Path) -> Any:
    """Load one JSON document. Raises ``ValueError`` on malformed content."""
    try:
        return _decode(path.read_bytes())
    except ValueError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def save_json(obj: Any, path: Path) -> None:
    """Write *obj* as indented, key-sorted JSON, creating parent dirs."""
    obj = to_jsonable(obj)
    path.parent.mkdir(parents=True, exist_ok=True)
    if _orjson is not None:
        path.write_bytes(
            _orjson.dumps(obj, option=_orjson.OPT_INDENT_2 | _orjson.OPT_SORT_KEYS)
        )
    else:
        with open(path, "w") as f:
            json.dump(obj, f, indent=2, sort_keys=True)


def load_jsonl(path: Path) -> list[dict[str, Any]]:
    """Load a JSON Lines file of objects. Blank lines are skipped.

    Raises:
        ValueError: a line is not valid JSON or not a JSON object; the
            message carries the 1-based line number.
    """
    records: list[dict[str, Any]] = []
    for lineno, line in enumerate(path.read_bytes().split(b"\n"), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            record = _decode(line)
        except ValueError as exc:
            raise ValueError(f"Invalid JSON at {path}:{lineno}: {exc}") from exc
        if not isinstance(record, dict):
            raise ValueError(f"Expected a JSON object at {path}:{lineno}")
        records.append(record)
    return records


def dump_json(obj: Any) -> None:
    """Pretty-print *obj* as JSON on stdout."""
    obj = to_jsonable(obj)
    if _orjson is not None:
        sys.stdout.buffer.write(_orjson.dumps(obj, option=_orjson.OPT_INDENT_2))
        sys.stdout.buffer.write(b"\n")
    else:
        json.dump(obj, sys.stdout, indent=2, default=str)
        print()
