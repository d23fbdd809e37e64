"""Tests for priority annotation parsing and rewriting."""

from __future__ import annotations

import pytest

from priosort.domain.priority import (
    UNSET_RANK,
    Direction,
    PriorityToken,
    apply_priority_step,
    find_priority,
    leading_priority,
    next_rank,
    priority_rank,
    split_annotation,
    strip_priority,
)

F = Direction.FORWARD
B = Direction.BACKWARD


def _with_rank(rank: int, body: str = "task") -> str:
    return f"{PriorityToken.from_rank(rank).marker} {body}"


class TestSplitAnnotation:
    def test_plain_text(self) -> None:
        ann = split_annotation("buy milk")
        assert ann.prefix == ""
        assert ann.token is None
        assert ann.body == "buy milk"

    def test_status_and_priority(self) -> None:
        ann = split_annotation("TODO [#B] write report")
        assert ann.prefix == "TODO "
        assert ann.token is PriorityToken.B
        assert ann.body == "write report"

    def test_status_is_case_insensitive(self) -> None:
        assert split_annotation("later call").prefix == "later "

    def test_status_needs_whitespace(self) -> None:
        """A keyword glued to the next word is body text."""
        ann = split_annotation("TODOS are fun")
        assert ann.prefix == ""
        assert ann.body == "TODOS are fun"

    def test_waiting_beats_wait(self) -> None:
        assert split_annotation("WAITING on Bob").prefix == "WAITING "

    @pytest.mark.parametrize("keyword", ["IN-PROGRESS", "in_progress", "InProgress"])
    def test_in_progress_variants(self, keyword: str) -> None:
        assert split_annotation(f"{keyword} thing").prefix == f"{keyword} "

    def test_prefix_keeps_original_whitespace(self) -> None:
        assert split_annotation("DOING\t\tstuff").prefix == "DOING\t\t"

    def test_lowercase_token(self) -> None:
        assert split_annotation("[#c] x").token is PriorityToken.C

    def test_token_not_at_head_is_not_leading(self) -> None:
        ann = split_annotation("x [#A]")
        assert ann.token is None
        assert ann.body == "x [#A]"

    def test_unknown_letter_is_not_a_token(self) -> None:
        assert split_annotation("[#D] x").token is None


class TestFindPriority:
    def test_first_anywhere(self) -> None:
        assert find_priority("call [#C] then [#A]") is PriorityToken.C

    def test_none(self) -> None:
        assert find_priority("nothing here") is None
        assert find_priority("") is None
        assert find_priority(None) is None

    def test_rank(self) -> None:
        assert priority_rank("[#A] x") == 0
        assert priority_rank("x [#B]") == 1
        assert priority_rank("TODO [#C] x") == 2
        assert priority_rank("x") == UNSET_RANK == 3

    def test_leading_priority(self) -> None:
        assert leading_priority("NOW [#B] x") is PriorityToken.B
        assert leading_priority("x [#B]") is None


class TestNextRank:
    @pytest.mark.parametrize(
        ("current", "direction", "expected"),
        [
            (0, F, 1),
            (1, F, 2),
            (2, F, 0),
            (0, B, 2),
            (1, B, 0),
            (2, B, 1),
            (-1, F, 0),
            (-1, B, 1),
        ],
    )
    def test_table(self, current: int, direction: Direction, expected: int) -> None:
        assert next_rank(current, direction) == expected


class TestApplyPriorityStep:
    @pytest.mark.parametrize("rank", [0, 1, 2])
    def test_forward_advances_rank(self, rank: int) -> None:
        out = apply_priority_step(_with_rank(rank), F)
        assert leading_priority(out) is PriorityToken.from_rank((rank + 1) % 3)

    @pytest.mark.parametrize("rank", [0, 1, 2])
    def test_backward_reverses_rank(self, rank: int) -> None:
        out = apply_priority_step(_with_rank(rank), B)
        assert leading_priority(out) is PriorityToken.from_rank((rank - 1 + 3) % 3)

    @pytest.mark.parametrize("rank", [0, 1, 2])
    def test_three_forwards_is_identity(self, rank: int) -> None:
        text = _with_rank(rank)
        for _ in range(3):
            text = apply_priority_step(text, F)
        assert text == _with_rank(rank)

    @pytest.mark.parametrize("rank", [0, 1, 2])
    def test_forward_then_backward_is_identity(self, rank: int) -> None:
        text = apply_priority_step(apply_priority_step(_with_rank(rank), F), B)
        assert leading_priority(text) is PriorityToken.from_rank(rank)

    def test_unset_forward_is_a(self) -> None:
        assert apply_priority_step("buy milk", F) == "[#A] buy milk"

    def test_unset_backward_is_b(self) -> None:
        assert apply_priority_step("buy milk", B) == "[#B] buy milk"

    def test_empty_text(self) -> None:
        assert apply_priority_step("", F) == "[#A]"

    def test_token_only(self) -> None:
        assert apply_priority_step("[#B]", F) == "[#C]"

    @pytest.mark.parametrize("direction", [F, B])
    @pytest.mark.parametrize(
        "text",
        ["TODO buy milk", "TODO [#A] buy milk", "TODO [#C] buy [#B] milk", "TODO "],
    )
    def test_status_keyword_stays_first(self, text: str, direction: Direction) -> None:
        assert apply_priority_step(text, direction).startswith("TODO [#")

    def test_status_keyword_verbatim(self) -> None:
        assert apply_priority_step("later  [#A] call", F) == "later  [#B] call"

    def test_stray_tokens_removed(self) -> None:
        out = apply_priority_step("[#A] fix [#C] the [#b] bug", F)
        assert out == "[#B] fix the bug"
        assert out.count("[#") == 1

    def test_non_leading_token_counts_as_unset(self) -> None:
        """Only a leading token sets the current rank; others are stripped."""
        assert apply_priority_step("fix [#C] bug", F) == "[#A] fix bug"

    def test_whitespace_collapsed(self) -> None:
        assert apply_priority_step("[#A]    spaced    out", F) == "[#B] spaced out"

    def test_trailing_stray_leaves_space(self) -> None:
        assert apply_priority_step("ship it [#A]", F) == "[#A] ship it "

    def test_multiline_body_kept(self) -> None:
        out = apply_priority_step("[#A] title\nsecond line", F)
        assert out == "[#B] title\nsecond line"

    def test_lowercase_leading_token(self) -> None:
        assert apply_priority_step("[#a] x", F) == "[#B] x"


class TestStripPriority:
    def test_strips_all(self) -> None:
        assert strip_priority("[#A] a [#B] b") == "a b"
