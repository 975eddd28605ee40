"""Symbol Source boundary: where raw step definitions and feature files come from.

Discovering definition sites (annotations, ``Given(...)`` calls) and parsing
feature files happens outside this package. Whatever does that work hands
over normalized records through the ``SymbolSource`` protocol.

``JsonlSymbolSource`` reads the records an external extractor wrote to disk.
Definition records::

    {"text": "User: I log in with {string}", "source_path": "src/LoginSteps.java",
     "line": 12, "group_label": "com.example.LoginSteps"}

``text`` may be empty when the extractor only found the method; in that case
``method_name`` is used as the step text. Feature-file records::

    {"path": "features/login.feature",
     "scenarios": [{"name": "Plain login", "line": 3}],
     "outlines": [{"name": "Login as", "line": 9, "examples": [{"row_count": 3}]}],
     "steps": [{"text": "I log in with \\"bob\\"", "line": 4}]}
"""
from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from stepscout.io_utils import load_jsonl
from stepscout.reconcile import (
    ExamplesBlock,
    OutlineNode,
    ScenarioFile,
    ScenarioNode,
    StepNode,
)
from stepscout.step_index import RawStepDefinition


class SymbolSource(Protocol):
    def list_step_definitions(self) -> Sequence[RawStepDefinition]: ...

    def list_scenario_files(self) -> Sequence[ScenarioFile]: ...


class StaticSymbolSource:
    """In-memory source; handy for embedding and tests."""

    def __init__(
        self,
        definitions: Sequence[RawStepDefinition] = (),
        scenario_files: Sequence[ScenarioFile] = (),
    ) -> None:
        self.definitions = list(definitions)
        self.scenario_files = list(scenario_files)

    def list_step_definitions(self) -> Sequence[RawStepDefinition]:
        return list(self.definitions)

    def list_scenario_files(self) -> Sequence[ScenarioFile]:
        return list(self.scenario_files)


# ---------------------------------------------------------------------------
# Record decoding
# ---------------------------------------------------------------------------

def _line(value: Any) -> int:
    """Coerce a line number; anything unusable becomes line 1."""
    try:
        line = int(value)
    except (TypeError, ValueError):
        return 1
    return line if line >= 1 else 1


def definition_from_record(record: dict[str, Any]) -> RawStepDefinition | None:
    """Decode one definition record, or ``None`` if it carries no step text."""
    text = str(record.get("text") or "")
    if not text.strip():
        text = str(record.get("method_name") or "")
    if not text.strip():
        return None
    source_path = str(record.get("source_path") or "")
    group_label = str(record.get("group_label") or "") or Path(source_path).stem
    return RawStepDefinition(
        text=text,
        source_path=source_path,
        line=_line(record.get("line")),
        group_label=group_label,
    )


def scenario_file_from_record(record: dict[str, Any]) -> ScenarioFile:
    """Decode one feature-file record. Raises ``ValueError`` without a path."""
    path = record.get("path")
    if not isinstance(path, str) or not path:
        raise ValueError("Feature-file record is missing 'path'")
    scenarios = tuple(
        ScenarioNode(str(s.get("name", "")), _line(s.get("line")))
        for s in record.get("scenarios", [])
    )
    outlines = tuple(
        OutlineNode(
            str(o.get("name", "")),
            _line(o.get("line")),
            tuple(
                ExamplesBlock(max(0, int(b.get("row_count", 0) or 0)))
                for b in o.get("examples", [])
            ),
        )
        for o in record.get("outlines", [])
    )
    steps = tuple(
        StepNode(str(s.get("text", "")), _line(s.get("line")))
        for s in record.get("steps", [])
    )
    return ScenarioFile(path=path, scenarios=scenarios, outlines=outlines, steps=steps)


class JsonlSymbolSource:
    """Reads definition and feature-file records from JSONL files.

    Files are re-read on every call, so an invalidated index picks up
    whatever the extractor wrote since. A missing scenarios path means the
    project has no feature files.
    """

    def __init__(self, definitions_path: Path, scenarios_path: Path | None = None) -> None:
        self.definitions_path = definitions_path
        self.scenarios_path = scenarios_path

    def list_step_definitions(self) -> Sequence[RawStepDefinition]:
        out: list[RawStepDefinition] = []
        for record in load_jsonl(self.definitions_path):
            definition = definition_from_record(record)
            if definition is not None:
                out.append(definition)
        return out

    def list_scenario_files(self) -> Sequence[ScenarioFile]:
        if self.scenarios_path is None:
            return []
        out: list[ScenarioFile] = []
        for index, record in enumerate(load_jsonl(self.scenarios_path), start=1):
            try:
                out.append(scenario_file_from_record(record))
            except (TypeError, ValueError, AttributeError) as exc:
                raise ValueError(
                    f"Bad feature-file record #{index} in {self.scenarios_path}: {exc}"
                ) from exc
        return out
