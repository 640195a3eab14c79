import random

import pytest

from match3.systems.board_ops import detect_matches, generate_board
from match3.systems.swap import SwapRejection, try_swap, validate_move

from helpers import make_board, pattern_rows, near_match_rows


def test_swap_lining_up_three_is_accepted():
    board = make_board(near_match_rows())
    assert not detect_matches(board)
    result = try_swap(board, (3, 4), (4, 4), random.Random(5))
    assert result.accepted
    assert result.reason is None
    assert result.clear_events[0].cells_cleared >= 3
    assert {(1, 4), (2, 4), (3, 4)} <= set(result.clear_events[0].positions)
    assert not detect_matches(board)


def test_non_adjacent_swap_is_rejected_without_change():
    board = make_board(pattern_rows())
    before = board.snapshot()
    result = try_swap(board, (0, 0), (2, 0), random.Random(0))
    assert not result.accepted
    assert result.reason == SwapRejection.NOT_ADJACENT
    assert result.cells_cleared == 0
    assert board.snapshot() == before


@pytest.mark.parametrize(
    "a,b,reason",
    [
        ((3, 3), (3, 3), SwapRejection.SAME_POSITION),
        ((7, 0), (8, 0), SwapRejection.OUT_OF_BOUNDS),
        ((0, -1), (0, 0), SwapRejection.OUT_OF_BOUNDS),
        ((2, 2), (3, 3), SwapRejection.NOT_ADJACENT),
    ],
)
def test_malformed_moves_are_rejected(a, b, reason):
    board = make_board(pattern_rows())
    before = board.snapshot()
    assert validate_move(board, a, b) == reason
    result = try_swap(board, a, b, random.Random(0))
    assert not result.accepted
    assert result.reason == reason
    assert board.snapshot() == before


def test_swap_without_match_is_reverted():
    board = make_board(pattern_rows())
    before = board.snapshot()
    result = try_swap(board, (0, 0), (1, 0), random.Random(0))
    assert not result.accepted
    assert result.reason == SwapRejection.NO_MATCH
    assert result.cascade is None
    assert board.snapshot() == before


def test_every_non_matching_swap_leaves_board_identical():
    rng = random.Random(42)
    board = generate_board(8, 6, rng)
    for row in range(8):
        for col in range(8):
            for dst in ((col + 1, row), (col, row + 1)):
                if not board.in_bounds(dst):
                    continue
                trial = board.copy()
                before = trial.snapshot()
                result = try_swap(trial, (col, row), dst, random.Random(0))
                if result.accepted:
                    assert not detect_matches(trial)
                else:
                    assert trial.snapshot() == before


def test_positions_given_as_lists_are_accepted():
    board = make_board(near_match_rows())
    result = try_swap(board, [3, 4], [4, 4], random.Random(1))
    assert result.accepted
