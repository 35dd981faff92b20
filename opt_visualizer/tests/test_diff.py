"""Tests for the word-level diff."""

import pytest

from opt_visualizer.models.diff import (
    DiffSpan,
    SpanKind,
    reconstruct_after,
    reconstruct_before,
)
from opt_visualizer.models.stage import StageResult
from opt_visualizer.services.diff import (
    DiffStats,
    diff_stats,
    diff_words,
    pairwise_diffs,
    tokenize,
)


A = SpanKind.ADDED
R = SpanKind.REMOVED
U = SpanKind.UNCHANGED


def kinds(spans: list[DiffSpan]) -> list[SpanKind]:
    return [s.kind for s in spans]


def assert_reconstructs(before: str, after: str) -> list[DiffSpan]:
    spans = diff_words(before, after)
    assert reconstruct_before(spans) == before
    assert reconstruct_after(spans) == after
    for left, right in zip(spans, spans[1:]):
        assert left.kind != right.kind
    assert all(s.value for s in spans)
    return spans


class TestTokenize:
    """Tests for word tokenization."""

    def test_words_keep_trailing_whitespace(self):
        assert tokenize("func f() {") == ["func ", "f() ", "{"]

    def test_leading_whitespace_is_own_token(self):
        assert tokenize("  a  b\n") == ["  ", "a  ", "b\n"]

    def test_empty(self):
        assert tokenize("") == []

    def test_whitespace_only(self):
        assert tokenize(" \n\t") == [" \n\t"]

    @pytest.mark.parametrize("text", [
        "",
        "x",
        "  leading",
        "trailing  \n",
        "%0 = arith.addi %a, %b : i32\n  return %0 : i32\n",
        "\n\n\tmixed \r\n whitespace",
    ])
    def test_join_gives_back_text(self, text: str):
        assert "".join(tokenize(text)) == text


class TestDiffWords:
    """Tests for diff_words."""

    def test_single_word_change(self):
        spans = diff_words("func f() { return 1 }", "func f() { return 2 }")
        assert spans == [
            DiffSpan(U, "func f() { return "),
            DiffSpan(R, "1"),
            DiffSpan(A, "2"),
            DiffSpan(U, " }"),
        ]

    def test_identical_text_is_one_unchanged_span(self):
        text = "module {\n  func.func @f() {\n    return\n  }\n}\n"
        assert diff_words(text, text) == [DiffSpan(U, text)]

    def test_both_empty(self):
        assert diff_words("", "") == []

    def test_from_empty(self):
        assert diff_words("", "a b") == [DiffSpan(A, "a b")]

    def test_to_empty(self):
        assert diff_words("a b", "") == [DiffSpan(R, "a b")]

    def test_fully_disjoint_removal_first(self):
        spans = assert_reconstructs("a b c", "x y")
        assert kinds(spans) == [R, A]

    def test_pure_insertion(self):
        spans = assert_reconstructs("a c", "a b c")
        assert spans == [DiffSpan(U, "a "), DiffSpan(A, "b "), DiffSpan(U, "c")]

    def test_pure_deletion(self):
        spans = assert_reconstructs("a b c", "a c")
        assert spans == [DiffSpan(U, "a "), DiffSpan(R, "b "), DiffSpan(U, "c")]

    def test_removal_reported_before_addition(self):
        spans = assert_reconstructs("x old y", "x new y")
        assert kinds(spans) == [U, R, A, U]
        assert spans[1].value == "old"
        assert spans[2].value == "new"

    def test_whitespace_only_difference(self):
        spans = assert_reconstructs("a b", "a  b")
        assert any(s.is_change for s in spans)

    def test_newline_change_detected(self):
        assert_reconstructs("a b\n", "a b")

    def test_changed_line_inside_ir(self):
        before = (
            "func.func @f(%a: i32) -> i32 {\n"
            "  %0 = arith.addi %a, %a : i32\n"
            "  %1 = arith.addi %a, %a : i32\n"
            "  return %1 : i32\n"
            "}\n"
        )
        after = (
            "func.func @f(%a: i32) -> i32 {\n"
            "  %0 = arith.addi %a, %a : i32\n"
            "  return %0 : i32\n"
            "}\n"
        )
        spans = assert_reconstructs(before, after)
        removed = "".join(s.value for s in spans if s.kind == R)
        added = "".join(s.value for s in spans if s.kind == A)
        assert "%1" in removed
        assert "%0" in added

    def test_repeated_tokens(self):
        assert_reconstructs("a a a b", "a b a b")

    def test_coalesces_adjacent_changes(self):
        spans = assert_reconstructs("one two three", "four five six")
        assert len(spans) == 2

    def test_deterministic(self):
        first = diff_words("p q r s", "q p s r")
        second = diff_words("p q r s", "q p s r")
        assert first == second

    @pytest.mark.parametrize("before,after", [
        ("", ""),
        ("same", "same"),
        ("a b c", "d e f"),
        ("a b", "a\tb"),
        ("  indented", "indented"),
        ("x\n", "x\n\n"),
        ("a b c d e", "a c e g"),
        ("the cat sat", "the cat sat on the mat"),
    ])
    def test_reconstruction_invariant(self, before: str, after: str):
        assert_reconstructs(before, after)


class TestPairwiseDiffs:
    """Tests for diffing a whole history."""

    def test_one_diff_per_stage(self):
        history = [
            StageResult(-1, "ab"),
            StageResult(0, "AB"),
            StageResult(1, "BA"),
        ]
        diffs = pairwise_diffs(history)

        assert len(diffs) == 2
        assert diffs[0] == [DiffSpan(R, "ab"), DiffSpan(A, "AB")]
        assert diffs[1] == [DiffSpan(R, "AB"), DiffSpan(A, "BA")]

    def test_original_only(self):
        assert pairwise_diffs([StageResult(-1, "x")]) == []


class TestDiffStats:
    """Tests for word counts."""

    def test_counts_words(self):
        spans = diff_words("a b c", "a x y c")
        assert diff_stats(spans) == DiffStats(added=2, removed=1)

    def test_unchanged(self):
        stats = diff_stats(diff_words("a", "a"))
        assert stats == DiffStats()
        assert stats.changed is False


class TestLargeInputs:
    """The edit search stays proportional to the amount of change."""

    def test_sparse_changes_in_long_ir(self):
        lines = [f"  %{i} = arith.addi %a, %b : i32\n" for i in range(4000)]
        changed = list(lines)
        for i in range(0, 4000, 50):
            changed[i] = f"  %{i} = arith.muli %a, %b : i32\n"

        spans = assert_reconstructs("".join(lines), "".join(changed))

        assert diff_stats(spans) == DiffStats(added=80, removed=80)

    def test_edit_distance_cap_reports_full_rewrite(self, monkeypatch):
        monkeypatch.setattr("opt_visualizer.services.diff.MAX_EDIT_DISTANCE", 2)
        spans = assert_reconstructs("a b c d", "a x y z d")

        assert kinds(spans) == [U, R, A, U]
        assert spans[1].value == "b c"
        assert spans[2].value == "x y z"

    @pytest.mark.parametrize("before,after", [
        ("p q r s", "q p s r"),
        ("a b a b a", "b a b a b"),
        ("x1 y1 x2 y2 x3", "y1 z x2 z x3 z"),
    ])
    def test_additions_never_precede_removals_in_a_gap(self, before: str, after: str):
        spans = assert_reconstructs(before, after)
        for left, right in zip(spans, spans[1:]):
            assert not (left.kind == A and right.kind == R)
