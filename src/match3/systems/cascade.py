"""Cascade resolution: DETECT -> CLEAR -> COMPACT_REFILL -> DETECT ... -> STABLE.

The resolver is a plain state machine over a Board. It can be stepped one
phase at a time (a presentation layer may pace the phases) or run to
completion. Every phase transition is reported through ``on_phase`` before
the next mutation happens.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, FrozenSet, Iterable, List, Optional

from match3.components.board import Board, Position
from match3.constants import CASCADE_SAFETY_CAP
from match3.systems.board_ops import (
    BoardInvariantError,
    GravityMove,
    clear_positions,
    compact_and_refill,
    detect_matches,
)

logger = logging.getLogger(__name__)


class CascadeLimitExceeded(BoardInvariantError):
    """More cascade iterations than the safety cap; the alphabet is too small for the board."""


class CascadePhase(Enum):
    DETECT = auto()
    CLEAR = auto()
    COMPACT_REFILL = auto()
    STABLE = auto()


@dataclass(slots=True, frozen=True)
class ClearEvent:
    """Cells removed by one detection pass; scored once by the round controller."""
    depth: int
    positions: tuple

    @property
    def cells_cleared(self) -> int:
        return len(self.positions)


@dataclass(slots=True)
class CascadeStep:
    depth: int
    matched: FrozenSet[Position]
    clear: Optional[ClearEvent] = None
    moves: List[GravityMove] = field(default_factory=list)
    new_tiles: List[Position] = field(default_factory=list)


@dataclass(slots=True)
class CascadeResult:
    steps: List[CascadeStep] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.steps)

    @property
    def clear_events(self) -> List[ClearEvent]:
        return [step.clear for step in self.steps if step.clear is not None]

    @property
    def total_cleared(self) -> int:
        return sum(event.cells_cleared for event in self.clear_events)


PhaseListener = Callable[[CascadePhase, CascadeStep], None]


class CascadeResolver:
    def __init__(
        self,
        board: Board,
        rng: random.Random,
        *,
        seed_matches: Optional[Iterable[Position]] = None,
        cap: int = CASCADE_SAFETY_CAP,
        on_phase: Optional[PhaseListener] = None,
    ):
        self.board = board
        self.rng = rng
        self.cap = cap
        self.on_phase = on_phase
        self.phase = CascadePhase.DETECT
        self.result = CascadeResult()
        self._seed = frozenset(seed_matches) if seed_matches else None
        self._current: Optional[CascadeStep] = None

    @property
    def done(self) -> bool:
        return self.phase == CascadePhase.STABLE

    def step(self) -> CascadePhase:
        """Execute the current phase and advance; returns the phase now pending."""
        if self.phase == CascadePhase.DETECT:
            self._detect()
        elif self.phase == CascadePhase.CLEAR:
            self._clear()
        elif self.phase == CascadePhase.COMPACT_REFILL:
            self._compact_refill()
        return self.phase

    def run(self) -> CascadeResult:
        while not self.done:
            self.step()
        return self.result

    def _detect(self) -> None:
        if self._seed is not None:
            matched, self._seed = self._seed, None
        else:
            matched = detect_matches(self.board)
        if not matched:
            self.phase = CascadePhase.STABLE
            self._current = None
            logger.debug(
                "Cascade stable after %d step(s), %d cell(s) cleared",
                self.result.depth, self.result.total_cleared,
            )
            self._notify(CascadePhase.STABLE, CascadeStep(depth=self.result.depth, matched=frozenset()))
            return
        depth = self.result.depth + 1
        if depth > self.cap:
            logger.error(
                "Cascade exceeded %d iterations on a %dx%d board with %d token types",
                self.cap, self.board.size, self.board.size, self.board.token_types,
            )
            raise CascadeLimitExceeded(f"Cascade did not settle within {self.cap} iterations")
        self._current = CascadeStep(depth=depth, matched=frozenset(matched))
        self.result.steps.append(self._current)
        self.phase = CascadePhase.CLEAR
        self._notify(CascadePhase.DETECT, self._current)

    def _clear(self) -> None:
        step = self._current
        cleared = clear_positions(self.board, step.matched)
        step.clear = ClearEvent(depth=step.depth, positions=tuple(cleared))
        self.phase = CascadePhase.COMPACT_REFILL
        self._notify(CascadePhase.CLEAR, step)

    def _compact_refill(self) -> None:
        step = self._current
        step.moves, step.new_tiles = compact_and_refill(self.board, self.rng)
        self.phase = CascadePhase.DETECT
        self._notify(CascadePhase.COMPACT_REFILL, step)

    def _notify(self, phase: CascadePhase, step: CascadeStep) -> None:
        if self.on_phase is not None:
            self.on_phase(phase, step)


def resolve_cascade(
    board: Board,
    rng: random.Random,
    *,
    seed_matches: Optional[Iterable[Position]] = None,
    cap: int = CASCADE_SAFETY_CAP,
    on_phase: Optional[PhaseListener] = None,
) -> CascadeResult:
    return CascadeResolver(board, rng, seed_matches=seed_matches, cap=cap, on_phase=on_phase).run()
