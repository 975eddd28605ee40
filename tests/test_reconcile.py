"""Tests for stepscout.reconcile: missing steps, counting, exclusion."""
from __future__ import annotations

from stepscout.pattern_compiler import compile_pattern
from stepscout.reconcile import (
    ExamplesBlock,
    MissingStep,
    OutlineNode,
    ScenarioFile,
    ScenarioNode,
    ScenarioStepReference,
    StepNode,
    collect_references,
    count_feature_files,
    count_scenarios,
    filter_references,
    find_missing,
    has_match,
    is_excluded,
)

PATTERNS = [
    compile_pattern("I log in"),
    compile_pattern("I add {int} items to the cart"),
    compile_pattern(r"^I wait (\d+) seconds$"),
]


def _ref(text: str, path: str = "/p/features/login.feature", line: int = 3) -> ScenarioStepReference:
    return ScenarioStepReference(text, path, line)


class TestFindMissing:
    def test_literal_match_is_not_missing(self) -> None:
        assert find_missing([_ref("I log in")], PATTERNS) == []

    def test_mutated_literal_is_missing(self) -> None:
        assert find_missing([_ref("I log on")], PATTERNS) == [
            MissingStep("I log on", "/p/features/login.feature", 3)
        ]

    def test_text_is_trimmed(self) -> None:
        assert find_missing([_ref("   I log in  ")], PATTERNS) == []
        missing = find_missing([_ref("  I log off ")], PATTERNS)
        assert missing[0].text == "I log off"

    def test_placeholder_and_regex(self) -> None:
        refs = [
            _ref('I add "three" items to the cart'),
            _ref("I wait 10 seconds"),
            _ref("I wait ten seconds"),
        ]
        assert [m.text for m in find_missing(refs, PATTERNS)] == ["I wait ten seconds"]

    def test_no_patterns_everything_missing(self) -> None:
        assert len(find_missing([_ref("I log in"), _ref("x")], [])) == 2

    def test_has_match(self) -> None:
        assert has_match(" i LOG in ", PATTERNS)
        assert not has_match("I log in twice", PATTERNS)


def _feature(
    path: str,
    scenarios: int = 0,
    outline_rows: tuple[tuple[int, ...], ...] = (),
    steps: tuple[str, ...] = (),
) -> ScenarioFile:
    return ScenarioFile(
        path=path,
        scenarios=tuple(ScenarioNode(f"s{i}", i + 1) for i in range(scenarios)),
        outlines=tuple(
            OutlineNode(f"o{i}", 50 + i, tuple(ExamplesBlock(n) for n in blocks))
            for i, blocks in enumerate(outline_rows)
        ),
        steps=tuple(StepNode(text, 10 + i) for i, text in enumerate(steps)),
    )


class TestCountScenarios:
    def test_plain_plus_outline_rows(self) -> None:
        assert count_scenarios([_feature("a.feature", scenarios=2, outline_rows=((3,),))]) == 5

    def test_outline_without_rows_counts_once(self) -> None:
        assert count_scenarios([_feature("a.feature", outline_rows=((),))]) == 1
        assert count_scenarios([_feature("a.feature", outline_rows=((0, 0),))]) == 1

    def test_rows_summed_across_blocks(self) -> None:
        assert count_scenarios([_feature("a.feature", outline_rows=((2, 4),))]) == 6

    def test_across_files(self) -> None:
        files = [_feature("a.feature", scenarios=1), _feature("b.feature", scenarios=3)]
        assert count_scenarios(files) == 4


class TestExclusion:
    def test_forward_slash_fragment(self) -> None:
        assert is_excluded("/p/build/generated/a.feature", ["build/generated"])

    def test_backslash_fragment(self) -> None:
        assert is_excluded("/p/build/generated/a.feature", ["build\\generated"])

    def test_windows_path(self) -> None:
        assert is_excluded("C:\\p\\build\\generated\\a.feature", ["build/generated"])

    def test_blank_fragment_ignored(self) -> None:
        assert not is_excluded("/p/a.feature", ["", "  "])

    def test_not_excluded(self) -> None:
        assert not is_excluded("/p/features/a.feature", ["build/"])

    def test_applies_to_counts(self) -> None:
        files = [
            _feature("/p/features/a.feature", scenarios=2),
            _feature("/p/build/generated/b.feature", scenarios=7),
        ]
        for fragments in (["build/generated"], ["build\\generated"]):
            assert count_feature_files(files, fragments) == 1
            assert count_scenarios(files, fragments) == 2
        assert count_feature_files(files) == 2

    def test_applies_to_references(self) -> None:
        files = [
            _feature("/p/features/a.feature", steps=("I log out",)),
            _feature("/p/build/generated/b.feature", steps=("I jump",)),
        ]
        refs = filter_references(collect_references(files), ["build\\generated"])
        assert [m.text for m in find_missing(refs, PATTERNS)] == ["I log out"]
        assert find_missing(refs, PATTERNS)[0].line == 10
