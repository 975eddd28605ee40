"""Compiled step-definition index with snapshot caching.

The index is a single slot holding an immutable ``IndexSnapshot``. A build
compiles the whole raw corpus and swaps the new snapshot in with one
reference assignment; ``invalidate()`` empties the slot. Readers take the
snapshot reference once per operation, so they see either the previous or
the next complete snapshot and never a partially built one. There is no lock.
"""
from __future__ import annotations

import itertools
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from stepscout.pattern_compiler import (
    CompiledPattern,
    PatternCompileError,
    compile_pattern,
    extract_screen_tag,
)

_GENERATION = itertools.count(1)


class IndexUnavailable(RuntimeError):
    """Raised when no snapshot exists and none can be built right now."""


@dataclass(frozen=True, slots=True)
class RawStepDefinition:
    """One discovered definition site, before compilation."""

    text: str
    source_path: str
    line: int
    group_label: str


@dataclass(frozen=True, slots=True)
class StepDefinition:
    """A compiled step definition with its provenance."""

    pattern: CompiledPattern
    source_path: str
    line: int
    group_label: str
    screen_tag: str = ""

    @property
    def display_text(self) -> str:
        return self.pattern.display


@dataclass(frozen=True, slots=True)
class IndexSnapshot:
    """Fully built, read-only view of the compiled corpus."""

    definitions: tuple[StepDefinition, ...]
    failures: tuple[PatternCompileError, ...]
    built_at: str
    generation: int

    def patterns(self) -> list[CompiledPattern]:
        return [d.pattern for d in self.definitions]

    def group_counts(self) -> dict[str, int]:
        """Definition count per group label (class or file name)."""
        return dict(Counter(d.group_label for d in self.definitions))

    def screen_counts(self) -> dict[str, int]:
        """Definition count per screen tag; untagged definitions are skipped."""
        return dict(Counter(
            d.screen_tag for d in self.definitions if d.screen_tag.strip()
        ))


def compile_definition(raw: RawStepDefinition) -> StepDefinition:
    """Compile one raw definition. Raises ``PatternCompileError``."""
    return StepDefinition(
        pattern=compile_pattern(raw.text),
        source_path=raw.source_path,
        line=raw.line,
        group_label=raw.group_label,
        screen_tag=extract_screen_tag(raw.text),
    )


def build_snapshot(raw_definitions: Iterable[RawStepDefinition]) -> IndexSnapshot:
    """Compile a raw corpus into a snapshot.

    Definitions that fail to compile are left out of ``definitions`` and
    recorded in ``failures``; the rest of the corpus is unaffected.
    """
    definitions: list[StepDefinition] = []
    failures: list[PatternCompileError] = []
    for raw in raw_definitions:
        try:
            definitions.append(compile_definition(raw))
        except PatternCompileError as exc:
            failures.append(exc)
    return IndexSnapshot(
        definitions=tuple(definitions),
        failures=tuple(failures),
        built_at=datetime.now(UTC).isoformat(),
        generation=next(_GENERATION),
    )


RawDefinitionLoader = Callable[[], Iterable[RawStepDefinition]]


class StepIndex:
    """Lazily built, wholesale-invalidated step-definition index.

    Args:
        loader: Zero-argument callable returning the current raw corpus.
            When set, the first read after construction or ``invalidate()``
            builds a snapshot from it. Without a loader the index must be
            fed through ``rebuild()``.
    """

    def __init__(self, loader: RawDefinitionLoader | None = None) -> None:
        self._loader = loader
        self._snapshot: IndexSnapshot | None = None

    @property
    def is_built(self) -> bool:
        return self._snapshot is not None

    def rebuild(self, raw_definitions: Iterable[RawStepDefinition]) -> IndexSnapshot:
        """Build a new snapshot from *raw_definitions* and swap it in."""
        snapshot = build_snapshot(raw_definitions)
        self._snapshot = snapshot
        return snapshot

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next read rebuilds from the loader."""
        self._snapshot = None

    def snapshot(self) -> IndexSnapshot:
        """Return the current snapshot, building it from the loader if needed.

        Raises:
            IndexUnavailable: nothing cached and no loader, or the loader
                failed. The slot stays empty so a later read can retry.
        """
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        if self._loader is None:
            raise IndexUnavailable("Step index has not been built")
        try:
            raw_definitions = list(self._loader())
        except Exception as exc:
            raise IndexUnavailable(f"Step definitions unavailable: {exc}") from exc
        return self.rebuild(raw_definitions)

    # Read projections over one snapshot

    def definitions(self) -> tuple[StepDefinition, ...]:
        return self.snapshot().definitions

    def patterns(self) -> list[CompiledPattern]:
        return self.snapshot().patterns()

    def group_counts(self) -> dict[str, int]:
        return self.snapshot().group_counts()

    def screen_counts(self) -> dict[str, int]:
        return self.snapshot().screen_counts()

    def failures(self) -> tuple[PatternCompileError, ...]:
        return self.snapshot().failures
