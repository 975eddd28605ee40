"""Reconcile scenario step references against compiled step definitions.

Also counts feature files and scenarios, expanding scenario outlines by the
number of example rows. Every operation here takes the excluded-path
fragments into account the same way: a file or reference whose path contains
a fragment (both spelled with ``/`` separators) is ignored.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from stepscout.pattern_compiler import CompiledPattern

# ---------------------------------------------------------------------------
# Parsed scenario containers (supplied by the symbol source)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ScenarioStepReference:
    """A step line in a scenario file that should match some definition."""

    text: str
    source_path: str
    line: int


@dataclass(frozen=True, slots=True)
class StepNode:
    text: str
    line: int


@dataclass(frozen=True, slots=True)
class ScenarioNode:
    name: str
    line: int


@dataclass(frozen=True, slots=True)
class ExamplesBlock:
    row_count: int  # data rows only, header excluded


@dataclass(frozen=True, slots=True)
class OutlineNode:
    name: str
    line: int
    examples: tuple[ExamplesBlock, ...] = ()

    @property
    def expanded_count(self) -> int:
        """Scenarios this outline runs as; at least 1 even without rows."""
        rows = sum(block.row_count for block in self.examples)
        return rows if rows > 0 else 1


@dataclass(frozen=True, slots=True)
class ScenarioFile:
    """One parsed feature file."""

    path: str
    scenarios: tuple[ScenarioNode, ...] = ()
    outlines: tuple[OutlineNode, ...] = ()
    steps: tuple[StepNode, ...] = ()

    def references(self) -> list[ScenarioStepReference]:
        return [ScenarioStepReference(s.text, self.path, s.line) for s in self.steps]


@dataclass(frozen=True, slots=True)
class MissingStep:
    """A reference with no matching step definition."""

    text: str
    source_path: str
    line: int


# ---------------------------------------------------------------------------
# Exclusion
# ---------------------------------------------------------------------------

def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def is_excluded(path: str, fragments: Iterable[str]) -> bool:
    """True if *path* contains any non-blank excluded fragment."""
    normalized = normalize_path(path)
    return any(
        normalize_path(fragment) in normalized
        for fragment in fragments
        if fragment.strip()
    )


def filter_files(
    files: Iterable[ScenarioFile], fragments: Sequence[str] = (),
) -> list[ScenarioFile]:
    return [f for f in files if not is_excluded(f.path, fragments)]


def filter_references(
    references: Iterable[ScenarioStepReference], fragments: Sequence[str] = (),
) -> list[ScenarioStepReference]:
    return [r for r in references if not is_excluded(r.source_path, fragments)]


# ---------------------------------------------------------------------------
# Reconciliation and counting
# ---------------------------------------------------------------------------

def has_match(text: str, patterns: Iterable[CompiledPattern]) -> bool:
    """True if any pattern fully matches the trimmed *text*."""
    stripped = text.strip()
    return any(p.matches(stripped) for p in patterns)


def find_missing(
    references: Iterable[ScenarioStepReference],
    patterns: Sequence[CompiledPattern],
) -> list[MissingStep]:
    """Return the references that no pattern matches, in input order."""
    missing: list[MissingStep] = []
    for ref in references:
        if not has_match(ref.text, patterns):
            missing.append(MissingStep(ref.text.strip(), ref.source_path, ref.line))
    return missing


def collect_references(files: Iterable[ScenarioFile]) -> list[ScenarioStepReference]:
    return [ref for f in files for ref in f.references()]


def count_feature_files(
    files: Iterable[ScenarioFile], fragments: Sequence[str] = (),
) -> int:
    return len(filter_files(files, fragments))


def count_scenarios(
    files: Iterable[ScenarioFile], fragments: Sequence[str] = (),
) -> int:
    """Plain scenarios count once; outlines count once per example row."""
    total = 0
    for f in filter_files(files, fragments):
        total += len(f.scenarios)
        total += sum(outline.expanded_count for outline in f.outlines)
    return total
