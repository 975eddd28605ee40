"""Ranked fuzzy search over compiled step definitions."""
from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from stepscout.step_index import StepDefinition
from stepscout.textmatch import match_score


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One search hit: display text plus where the definition lives."""

    text: str
    source_path: str
    line: int


def filter_definitions(
    definitions: Iterable[StepDefinition],
    *,
    group_filter: Collection[str] | None = None,
    screen_filter: str | None = None,
) -> list[StepDefinition]:
    """Keep definitions whose group is in *group_filter* and tag equals *screen_filter*.

    ``None`` disables a filter. An empty ``group_filter`` keeps nothing.
    """
    return [
        d for d in definitions
        if (group_filter is None or d.group_label in group_filter)
        and (screen_filter is None or d.screen_tag == screen_filter)
    ]


def find_steps(
    definitions: Iterable[StepDefinition],
    query: str,
    *,
    group_filter: Collection[str] | None = None,
    screen_filter: str | None = None,
) -> list[SearchResult]:
    """Filter, score and rank definitions for *query*.

    A blank query lists every surviving definition by display text. Otherwise
    non-matching definitions are dropped and the rest are ordered by
    descending score, then display text.
    """
    results = [
        SearchResult(d.display_text, d.source_path, d.line)
        for d in filter_definitions(
            definitions, group_filter=group_filter, screen_filter=screen_filter,
        )
    ]

    if not query.strip():
        return sorted(results, key=lambda r: r.text)

    scored: list[tuple[int, SearchResult]] = []
    for result in results:
        score = match_score(result.text, query)
        if score is not None:
            scored.append((score, result))
    scored.sort(key=lambda pair: (-pair[0], pair[1].text))
    return [result for _, result in scored]
