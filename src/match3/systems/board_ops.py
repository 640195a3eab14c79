from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import FrozenSet, List, Sequence, Set, Tuple

from match3.components.board import Board, Position
from match3.constants import EMPTY, GENERATION_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

AXIS_ROW = "row"
AXIS_COL = "col"


class BoardInvariantError(RuntimeError):
    """The board reached a state the engine guarantees can never happen."""


class BoardGenerationError(BoardInvariantError):
    """No match-free layout with a valid move was found within the attempt budget."""


@dataclass(slots=True, frozen=True)
class MatchRun:
    """Maximal same-typed run of length >= 3.

    For a row run ``fixed`` is the row and start/end are columns; for a column
    run ``fixed`` is the column and start/end are rows. Both ends are inclusive.
    """
    axis: str
    fixed: int
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def positions(self) -> List[Position]:
        if self.axis == AXIS_ROW:
            return [(col, self.fixed) for col in range(self.start, self.end + 1)]
        return [(self.fixed, row) for row in range(self.start, self.end + 1)]


@dataclass(slots=True, frozen=True)
class GravityMove:
    source: Position
    target: Position
    token: int


def is_adjacent(a: Position, b: Position) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


# --------------------------------------------------------------------------
# Generation
# --------------------------------------------------------------------------

def _available_types(board: Board, col: int, row: int, choices: Sequence[int]) -> List[int]:
    available = list(choices)
    # Two equal cells to the left would complete a horizontal triple.
    if col >= 2:
        left1 = board.cells[row][col - 1]
        left2 = board.cells[row][col - 2]
        if left1 == left2 and left1 in available:
            available = [t for t in available if t != left1]
    # Two equal cells above would complete a vertical triple.
    if row >= 2:
        up1 = board.cells[row - 1][col]
        up2 = board.cells[row - 2][col]
        if up1 == up2 and up1 in available:
            available = [t for t in available if t != up1]
    return available


def fill_match_free(board: Board, rng: random.Random) -> None:
    """Overwrite every cell in row-major order without completing any triple."""
    choices = list(range(board.token_types))
    for row in range(board.size):
        for col in range(board.size):
            available = _available_types(board, col, row, choices)
            if not available:
                raise BoardGenerationError(
                    f"No token type available at {(col, row)} with {board.token_types} types"
                )
            board.cells[row][col] = rng.choice(available)


def generate_board(
    size: int,
    token_types: int,
    rng: random.Random | None = None,
    *,
    max_attempts: int = GENERATION_MAX_ATTEMPTS,
) -> Board:
    """Return a match-free board that offers at least one scoring swap."""
    if size < 3:
        raise ValueError(f"Board size must be at least 3, got {size}")
    if token_types < 3:
        raise ValueError(f"At least 3 token types are required, got {token_types}")
    rng = rng or random.Random()
    board = Board(size=size, token_types=token_types)
    reshuffle_board(board, rng, max_attempts=max_attempts)
    return board


def reshuffle_board(
    board: Board,
    rng: random.Random,
    *,
    max_attempts: int = GENERATION_MAX_ATTEMPTS,
) -> int:
    """Regenerate the layout of ``board`` in place; returns the attempts used."""
    for attempt in range(1, max_attempts + 1):
        fill_match_free(board, rng)
        if detect_matches(board):
            raise BoardInvariantError("Generated layout contains a match")
        if find_valid_swaps(board):
            return attempt
        logger.debug("Layout attempt %d has no valid swap, retrying", attempt)
    raise BoardGenerationError(
        f"Unable to generate a {board.size}x{board.size} board with a valid swap "
        f"after {max_attempts} attempts"
    )


# --------------------------------------------------------------------------
# Detection
# --------------------------------------------------------------------------

def _scan_line(values: Sequence[int], axis: str, fixed: int) -> List[MatchRun]:
    runs: List[MatchRun] = []
    run = 1
    for idx in range(1, len(values)):
        if values[idx] != EMPTY and values[idx] == values[idx - 1]:
            run += 1
        else:
            if run >= 3:
                runs.append(MatchRun(axis, fixed, idx - run, idx - 1))
            run = 1
    if run >= 3 and values[-1] != EMPTY:
        runs.append(MatchRun(axis, fixed, len(values) - run, len(values) - 1))
    return runs


def find_runs(board: Board) -> List[MatchRun]:
    """All maximal horizontal then vertical runs of length >= 3."""
    runs: List[MatchRun] = []
    for row in range(board.size):
        runs.extend(_scan_line(board.cells[row], AXIS_ROW, row))
    for col in range(board.size):
        column = [board.cells[row][col] for row in range(board.size)]
        runs.extend(_scan_line(column, AXIS_COL, col))
    return runs


def detect_matches(board: Board) -> FrozenSet[Position]:
    """Union of the positions covered by every run; crossings count once."""
    matched: Set[Position] = set()
    for run in find_runs(board):
        matched.update(run.positions())
    return frozenset(matched)


def _has_line_match(board: Board, pos: Position) -> bool:
    """Return True if a run of >= 3 passes through pos."""
    col, row = pos
    tval = board.cells[row][col]
    if tval == EMPTY:
        return False
    # Horizontal sweep
    left = col
    while left - 1 >= 0 and board.cells[row][left - 1] == tval:
        left -= 1
    right = col
    while right + 1 < board.size and board.cells[row][right + 1] == tval:
        right += 1
    if right - left + 1 >= 3:
        return True
    # Vertical sweep
    top = row
    while top - 1 >= 0 and board.cells[top - 1][col] == tval:
        top -= 1
    bottom = row
    while bottom + 1 < board.size and board.cells[bottom + 1][col] == tval:
        bottom += 1
    return bottom - top + 1 >= 3


def predict_swap_creates_match(board: Board, a: Position, b: Position) -> bool:
    """Return True if swapping a/b would create a run through either cell."""
    if not (board.in_bounds(a) and board.in_bounds(b)):
        return False
    if board.get(a) == board.get(b):
        return False
    board.exchange(a, b)
    try:
        return _has_line_match(board, a) or _has_line_match(board, b)
    finally:
        board.exchange(a, b)


def find_valid_swaps(board: Board) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps that would produce a match."""
    swaps: List[Tuple[Position, Position]] = []
    for row in range(board.size):
        for col in range(board.size):
            pos = (col, row)
            right = (col + 1, row)
            if col + 1 < board.size and predict_swap_creates_match(board, pos, right):
                swaps.append((pos, right))
            down = (col, row + 1)
            if row + 1 < board.size and predict_swap_creates_match(board, pos, down):
                swaps.append((pos, down))
    return swaps


# --------------------------------------------------------------------------
# Clear / gravity / refill
# --------------------------------------------------------------------------

def clear_positions(board: Board, positions) -> List[Position]:
    cleared: List[Position] = []
    for pos in sorted(positions):
        if board.get(pos) == EMPTY:
            continue
        board.set(pos, EMPTY)
        cleared.append(pos)
    return cleared


def compute_gravity_moves(board: Board) -> List[GravityMove]:
    """Per column, where every surviving token lands when it falls down."""
    moves: List[GravityMove] = []
    for col in range(board.size):
        write_row = board.size - 1
        for row in range(board.size - 1, -1, -1):
            token = board.cells[row][col]
            if token == EMPTY:
                continue
            if row != write_row:
                moves.append(GravityMove(source=(col, row), target=(col, write_row), token=token))
            write_row -= 1
    return moves


def apply_gravity(board: Board) -> List[GravityMove]:
    moves = compute_gravity_moves(board)
    # Bottom-up order per column means a target is always free when written.
    for move in moves:
        board.set(move.target, move.token)
        board.set(move.source, EMPTY)
    return moves


def refill_empty(board: Board, rng: random.Random) -> List[Position]:
    """Draw fresh tokens for every empty cell; new matches are allowed."""
    spawned: List[Position] = []
    for col in range(board.size):
        for row in range(board.size):
            if board.cells[row][col] != EMPTY:
                continue
            board.cells[row][col] = rng.randrange(board.token_types)
            spawned.append((col, row))
    return spawned


def compact_and_refill(board: Board, rng: random.Random) -> Tuple[List[GravityMove], List[Position]]:
    moves = apply_gravity(board)
    new_tiles = refill_empty(board, rng)
    return moves, new_tiles
