"""Presentation-facing facade over the step index, search and reconciliation.

Every public operation is a bulk-operation boundary: if the index is not
available, or anything unexpected goes wrong, the failure is logged and the
caller gets an empty result (``[]``, ``{}`` or ``0``) instead of an
exception.
"""
from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence

from stepscout.pattern_compiler import PatternCompileError
from stepscout.reconcile import (
    MissingStep,
    ScenarioFile,
    ScenarioStepReference,
    collect_references,
    count_feature_files,
    count_scenarios,
    filter_files,
    filter_references,
    find_missing,
    has_match,
)
from stepscout.search import SearchResult, find_steps
from stepscout.settings import StepScoutSettings
from stepscout.step_index import (
    IndexSnapshot,
    IndexUnavailable,
    RawStepDefinition,
    StepIndex,
)
from stepscout.symbol_source import SymbolSource

log = logging.getLogger(__name__)


class StepScoutService:
    def __init__(
        self,
        source: SymbolSource,
        settings: StepScoutSettings | None = None,
    ) -> None:
        self.source = source
        self.settings = settings or StepScoutSettings()
        self.index = StepIndex(loader=self._load_definitions)

    # -- index lifecycle ----------------------------------------------------

    def _load_definitions(self) -> Sequence[RawStepDefinition]:
        return self.source.list_step_definitions()

    def _report(self, snapshot: IndexSnapshot) -> None:
        for failure in snapshot.failures:
            log.warning("Dropped step definition: %s", failure)
        log.debug(
            "Step index generation %d: %d definitions, %d dropped",
            snapshot.generation, len(snapshot.definitions), len(snapshot.failures),
        )

    def rebuild_index(
        self, raw_definitions: Iterable[RawStepDefinition] | None = None,
    ) -> None:
        """Rebuild now, from *raw_definitions* or from the symbol source."""
        try:
            if raw_definitions is None:
                raw_definitions = self._load_definitions()
            snapshot = self.index.rebuild(raw_definitions)
        except Exception:
            log.exception("Step index rebuild failed")
            return
        self._report(snapshot)

    def invalidate_index(self) -> None:
        self.index.invalidate()

    def _snapshot(self) -> IndexSnapshot | None:
        was_built = self.index.is_built
        try:
            snapshot = self.index.snapshot()
        except IndexUnavailable as exc:
            log.info("Step index unavailable: %s", exc)
            return None
        except Exception:
            log.exception("Step index build failed")
            return None
        if not was_built:
            self._report(snapshot)
        return snapshot

    def _scenario_files(self) -> list[ScenarioFile]:
        return filter_files(
            self.source.list_scenario_files(),
            self.settings.excluded_path_fragments(),
        )

    # -- search ---------------------------------------------------------------

    def search(
        self,
        query: str,
        group_filter: Collection[str] | None = None,
        screen_filter: str | None = None,
    ) -> list[SearchResult]:
        try:
            snapshot = self._snapshot()
            if snapshot is None:
                return []
            return find_steps(
                snapshot.definitions,
                query,
                group_filter=group_filter,
                screen_filter=screen_filter,
            )
        except Exception:
            log.exception("Step search failed for query %r", query)
            return []

    def has_step_definition(self, step_text: str) -> bool:
        try:
            snapshot = self._snapshot()
            return snapshot is not None and has_match(step_text, snapshot.patterns())
        except Exception:
            log.exception("Step lookup failed for %r", step_text)
            return False

    # -- reconciliation -----------------------------------------------------

    def find_missing(
        self, references: Iterable[ScenarioStepReference] | None = None,
    ) -> list[MissingStep]:
        """Unmatched references; read from the symbol source when not given."""
        try:
            snapshot = self._snapshot()
            if snapshot is None:
                return []
            if references is None:
                refs = collect_references(self._scenario_files())
            else:
                refs = filter_references(
                    references, self.settings.excluded_path_fragments(),
                )
            return find_missing(refs, snapshot.patterns())
        except Exception:
            log.exception("Missing-step reconciliation failed")
            return []

    def count_missing_steps(self) -> int:
        return len(self.find_missing())

    def count_feature_files(self) -> int:
        try:
            return count_feature_files(
                self.source.list_scenario_files(),
                self.settings.excluded_path_fragments(),
            )
        except Exception:
            log.exception("Counting feature files failed")
            return 0

    def count_scenarios(self) -> int:
        try:
            return count_scenarios(
                self.source.list_scenario_files(),
                self.settings.excluded_path_fragments(),
            )
        except Exception:
            log.exception("Counting scenarios failed")
            return 0

    # -- index statistics ---------------------------------------------------

    def count_step_definitions(self) -> int:
        snapshot = self._snapshot()
        return len(snapshot.definitions) if snapshot is not None else 0

    def group_counts(self) -> dict[str, int]:
        snapshot = self._snapshot()
        return snapshot.group_counts() if snapshot is not None else {}

    def screen_counts(self) -> dict[str, int]:
        snapshot = self._snapshot()
        return snapshot.screen_counts() if snapshot is not None else {}

    def compile_failures(self) -> list[PatternCompileError]:
        snapshot = self._snapshot()
        return list(snapshot.failures) if snapshot is not None else []
