"""Tests for stepscout.step_index."""
from __future__ import annotations

import pytest

from stepscout.step_index import (
    IndexUnavailable,
    RawStepDefinition,
    StepIndex,
    build_snapshot,
    compile_definition,
)


def _raw(text: str, group: str = "LoginSteps", line: int = 1) -> RawStepDefinition:
    return RawStepDefinition(text, f"/src/{group}.java", line, group)


class TestCompileDefinition:
    def test_carries_provenance_and_tag(self) -> None:
        d = compile_definition(_raw("Login: I log in with {string}", line=12))
        assert d.source_path == "/src/LoginSteps.java"
        assert d.line == 12
        assert d.group_label == "LoginSteps"
        assert d.screen_tag == "Login"
        assert d.display_text == "Login: I log in with {string}"


class TestBuildSnapshot:
    def test_bad_definitions_are_dropped(self) -> None:
        snapshot = build_snapshot([
            _raw("I log in"),
            _raw("^broken (regex$"),
            _raw("I log out"),
        ])
        assert [d.display_text for d in snapshot.definitions] == ["I log in", "I log out"]
        assert len(snapshot.failures) == 1
        assert snapshot.failures[0].raw == "^broken (regex$"

    def test_empty_corpus(self) -> None:
        snapshot = build_snapshot([])
        assert snapshot.definitions == ()
        assert snapshot.group_counts() == {}

    def test_group_counts(self) -> None:
        snapshot = build_snapshot([
            _raw("I log in", "LoginSteps"),
            _raw("I log out", "LoginSteps"),
            _raw("I add {string}", "CartSteps"),
        ])
        assert snapshot.group_counts() == {"LoginSteps": 2, "CartSteps": 1}

    def test_screen_counts_skip_untagged(self) -> None:
        snapshot = build_snapshot([
            _raw("Login: I log in"),
            _raw("Login: I log out"),
            _raw("Cart: I add {string}"),
            _raw("I wait 12:00 minutes"),
        ])
        assert snapshot.screen_counts() == {"Login": 2, "Cart": 1}

    def test_generation_increases(self) -> None:
        first = build_snapshot([])
        second = build_snapshot([])
        assert second.generation > first.generation
        assert first.built_at


class TestStepIndex:
    def test_unbuilt_without_loader(self) -> None:
        index = StepIndex()
        assert not index.is_built
        with pytest.raises(IndexUnavailable):
            index.definitions()

    def test_lazy_build_from_loader(self) -> None:
        calls: list[int] = []

        def loader() -> list[RawStepDefinition]:
            calls.append(1)
            return [_raw("I log in")]

        index = StepIndex(loader=loader)
        assert calls == []
        assert len(index.definitions()) == 1
        assert len(index.patterns()) == 1
        assert calls == [1]

    def test_invalidate_triggers_fresh_load(self) -> None:
        corpus = [_raw("I log in")]
        index = StepIndex(loader=lambda: list(corpus))
        assert len(index.definitions()) == 1

        corpus.append(_raw("I log out"))
        assert len(index.definitions()) == 1  # still cached

        index.invalidate()
        assert not index.is_built
        assert len(index.definitions()) == 2

    def test_loader_failure_is_unavailable(self) -> None:
        def loader() -> list[RawStepDefinition]:
            raise OSError("disk gone")

        index = StepIndex(loader=loader)
        with pytest.raises(IndexUnavailable):
            index.snapshot()
        assert not index.is_built

    def test_rebuild_swaps_whole_snapshot(self) -> None:
        index = StepIndex()
        old = index.rebuild([_raw("I log in")])
        new = index.rebuild([_raw("I log out"), _raw("I sign up")])
        assert index.snapshot() is new
        assert [d.display_text for d in old.definitions] == ["I log in"]
        assert len(new.definitions) == 2

    def test_failures_exposed(self) -> None:
        index = StepIndex()
        index.rebuild([_raw("^bad (regex$")])
        assert index.definitions() == ()
        assert len(index.failures()) == 1
