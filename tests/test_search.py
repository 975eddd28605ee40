"""Tests for stepscout.search: filtering and ranking."""
from __future__ import annotations

from stepscout.search import SearchResult, filter_definitions, find_steps
from stepscout.step_index import RawStepDefinition, StepDefinition, compile_definition


def _defs(*items: tuple[str, str]) -> list[StepDefinition]:
    return [
        compile_definition(RawStepDefinition(text, f"/src/{group}.kt", i + 1, group))
        for i, (text, group) in enumerate(items)
    ]


class TestFilterDefinitions:
    def test_group_filter(self) -> None:
        defs = _defs(("I login", "LoginSteps"), ("I logout", "AuthSteps"))
        kept = filter_definitions(defs, group_filter={"LoginSteps"})
        assert [d.display_text for d in kept] == ["I login"]

    def test_screen_filter(self) -> None:
        defs = _defs(("Login: I submit", "A"), ("Cart: I submit", "A"), ("I submit", "A"))
        kept = filter_definitions(defs, screen_filter="Cart")
        assert [d.display_text for d in kept] == ["Cart: I submit"]

    def test_empty_group_filter_keeps_nothing(self) -> None:
        defs = _defs(("I login", "LoginSteps"))
        assert filter_definitions(defs, group_filter=set()) == []


class TestFindSteps:
    def test_filters_and_scores(self) -> None:
        defs = _defs(("I login", "LoginSteps"), ("I logout", "AuthSteps"))
        results = find_steps(defs, "login", group_filter={"LoginSteps"})
        assert len(results) == 1
        assert results[0].text == "I login"

    def test_blank_query_sorted_alphabetically(self) -> None:
        defs = _defs(("I log out", "A"), ("Cart: I add {string}", "B"), ("I log in", "A"))
        results = find_steps(defs, "")
        assert [r.text for r in results] == ["Cart: I add {string}", "I log in", "I log out"]

    def test_ranked_by_score(self) -> None:
        defs = _defs(
            ("User logs in", "A"),
            ("I log in", "A"),
            ("log in again", "A"),
            ("Logout now", "A"),
        )
        results = find_steps(defs, "log in")
        # 300 (index 0), 298 (index 2), 99 (subsequence); "Logout now" lacks "in"
        assert [r.text for r in results] == ["log in again", "I log in", "User logs in"]

    def test_ties_broken_by_text(self) -> None:
        defs = _defs(("log in b", "A"), ("log in a", "A"))
        assert [r.text for r in find_steps(defs, "log in")] == ["log in a", "log in b"]

    def test_result_carries_location(self) -> None:
        defs = _defs(("I log in", "LoginSteps"))
        assert find_steps(defs, "log") == [SearchResult("I log in", "/src/LoginSteps.kt", 1)]

    def test_searches_display_text(self) -> None:
        defs = _defs(("I add {int} items", "CartSteps"))
        results = find_steps(defs, "string")
        assert [r.text for r in results] == ["I add {string} items"]

    def test_idempotent(self) -> None:
        defs = _defs(("I log in", "A"), ("I log out", "A"), ("User logs in", "A"))
        assert find_steps(defs, "log") == find_steps(defs, "log")
