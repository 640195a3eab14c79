from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from match3.components.board import Board, Position
from match3.constants import CASCADE_SAFETY_CAP
from match3.systems.board_ops import detect_matches, is_adjacent
from match3.systems.cascade import CascadeResult, ClearEvent, PhaseListener, resolve_cascade

logger = logging.getLogger(__name__)


class SwapRejection(Enum):
    SAME_POSITION = "same_position"
    OUT_OF_BOUNDS = "out_of_bounds"
    NOT_ADJACENT = "not_adjacent"
    NO_MATCH = "no_match"


@dataclass(slots=True)
class SwapResult:
    accepted: bool
    reason: Optional[SwapRejection] = None
    cascade: Optional[CascadeResult] = None

    @property
    def cells_cleared(self) -> int:
        return self.cascade.total_cleared if self.cascade else 0

    @property
    def clear_events(self) -> List[ClearEvent]:
        return self.cascade.clear_events if self.cascade else []


def validate_move(board: Board, a: Position, b: Position) -> Optional[SwapRejection]:
    if a == b:
        return SwapRejection.SAME_POSITION
    if not (board.in_bounds(a) and board.in_bounds(b)):
        return SwapRejection.OUT_OF_BOUNDS
    if not is_adjacent(a, b):
        return SwapRejection.NOT_ADJACENT
    return None


def try_swap(
    board: Board,
    a: Position,
    b: Position,
    rng: random.Random,
    *,
    cascade_cap: int = CASCADE_SAFETY_CAP,
    on_phase: Optional[PhaseListener] = None,
) -> SwapResult:
    """Swap a and b, keeping the move only if it creates a match.

    An accepted swap resolves its whole cascade before returning, so callers
    only ever see the pre-move board or the settled post-cascade board.
    """
    a, b = tuple(a), tuple(b)
    rejection = validate_move(board, a, b)
    if rejection is not None:
        logger.debug("Rejected swap %s <-> %s: %s", a, b, rejection.value)
        return SwapResult(accepted=False, reason=rejection)
    board.exchange(a, b)
    matched = detect_matches(board)
    if not matched:
        board.exchange(a, b)
        logger.debug("Reverted swap %s <-> %s: no match", a, b)
        return SwapResult(accepted=False, reason=SwapRejection.NO_MATCH)
    cascade = resolve_cascade(board, rng, seed_matches=matched, cap=cascade_cap, on_phase=on_phase)
    logger.debug("Accepted swap %s <-> %s: %d cell(s) over %d step(s)", a, b, cascade.total_cleared, cascade.depth)
    return SwapResult(accepted=True, cascade=cascade)
