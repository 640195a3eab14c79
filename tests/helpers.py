from __future__ import annotations

import random
from typing import List, Sequence

from match3.components.board import Board
from match3.config import GameConfig


def pattern_rows(size: int = 8, types: int = 6) -> List[List[int]]:
    """Diagonal pattern with no equal neighbours on either axis (so no matches)."""
    return [[(col + 2 * row) % types for col in range(size)] for row in range(size)]


def make_board(rows: Sequence[Sequence[int]], token_types: int = 6) -> Board:
    return Board.from_rows(rows, token_types)


def near_match_rows() -> List[List[int]]:
    """8x8 board where swapping (3,4) and (4,4) lines up three 0s on row 4."""
    rows = pattern_rows(8, 6)
    rows[4][1] = 0
    rows[4][2] = 0
    # row 4 is now [2, 0, 0, 5, 0, 1, 2, 3]
    return rows


def chain_rows() -> List[List[int]]:
    """5x5 board; swapping (2,0) and (2,1) clears the top-left three cells."""
    return [
        [5, 5, 1, 3, 4],
        [2, 3, 5, 5, 0],
        [4, 5, 0, 1, 2],
        [0, 1, 2, 3, 4],
        [2, 3, 4, 5, 0],
    ]


def stalemate_rows(size: int = 5) -> List[List[int]]:
    """Three-type diagonal stripes: no matches and no swap can make one."""
    return [[(col + row) % 3 for col in range(size)] for row in range(size)]


class ScriptedRandom(random.Random):
    """Random whose randrange replays a script before falling back to the seed."""

    def randrange(self, start, stop=None, step=1):
        script = getattr(self, "script", None)
        if script:
            return script.pop(0)
        return super().randrange(start, stop, step)


def scripted_random(values: Sequence[int], seed: int = 0) -> ScriptedRandom:
    rng = ScriptedRandom(seed)
    rng.script = list(values)
    return rng


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def short_round_config(**overrides) -> GameConfig:
    values = dict(round_duration=1.0, token_ttl=5.0)
    values.update(overrides)
    return GameConfig(**values)
