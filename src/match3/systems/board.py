import logging
import random
from typing import Optional

from esper import World

from match3.components.board import Board, Position
from match3.config import GameConfig
from match3.events.bus import (
    EventBus,
    EVENT_BOARD_CHANGED,
    EVENT_BOARD_RESET_REQUEST,
    EVENT_BOARD_RESHUFFLED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
)
from match3.systems.board_ops import find_valid_swaps, generate_board, reshuffle_board
from match3.systems.cascade import CascadePhase, CascadeStep
from match3.systems.state_utils import get_or_create_round_state, get_pacing_state
from match3.systems.swap import SwapResult, try_swap

logger = logging.getLogger(__name__)

ROUND_CLOSED = "round_closed"
BOARD_BUSY = "board_busy"


class BoardSystem:
    """Owns the board entity and turns swap requests into engine calls.

    Every cascade phase is published on the bus as it happens, so score
    accumulation and presentation never reach into the engine.
    """
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        size: Optional[int] = None,
        token_types: Optional[int] = None,
        *,
        rng: Optional[random.Random] = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.config: GameConfig = getattr(world, "config", None) or GameConfig()
        self.random = rng or getattr(world, "random", None) or random.Random()
        size = size or self.config.grid_size
        token_types = token_types or self.config.token_types
        board = generate_board(size, token_types, self.random, max_attempts=self.config.generation_attempts)
        self.board_entity = self.world.create_entity(board)
        self._accepted_announced = False
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)
        self.event_bus.subscribe(EVENT_BOARD_RESET_REQUEST, self.on_reset_request)

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if src is None or dst is None:
            return
        self.request_swap(tuple(src), tuple(dst))

    def request_swap(self, src: Position, dst: Position) -> SwapResult | None:
        state = get_or_create_round_state(self.world)
        if state.locks_board:
            logger.debug("Swap %s <-> %s refused: round is %s", src, dst, state.status.name)
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=ROUND_CLOSED)
            return None
        if get_pacing_state(self.world).busy:
            # The previous cascade is still on screen.
            logger.debug("Swap %s <-> %s refused: board is still animating", src, dst)
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=BOARD_BUSY)
            return None
        self._accepted_announced = False
        result = try_swap(
            self.board,
            src,
            dst,
            self.random,
            cascade_cap=self.config.cascade_cap,
            on_phase=lambda phase, step: self._on_phase(phase, step, src, dst),
        )
        if not result.accepted:
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=result.reason.value)
            return result
        self.event_bus.emit(
            EVENT_CASCADE_COMPLETE,
            depth=result.cascade.depth,
            total_cleared=result.cells_cleared,
        )
        self.ensure_playable()
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason='swap', snapshot=self.board.snapshot())
        return result

    def _on_phase(self, phase: CascadePhase, step: CascadeStep, src: Position, dst: Position) -> None:
        if phase == CascadePhase.DETECT:
            if not self._accepted_announced:
                # The seed detection is what accepts the swap; announce it before its clears.
                self._accepted_announced = True
                self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst)
            positions = sorted(step.matched)
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=step.depth, positions=positions)
            self.event_bus.emit(EVENT_MATCH_FOUND, positions=positions, size=len(positions), depth=step.depth)
        elif phase == CascadePhase.CLEAR:
            self.event_bus.emit(
                EVENT_MATCH_CLEARED,
                positions=list(step.clear.positions),
                cells_cleared=step.clear.cells_cleared,
                depth=step.depth,
            )
        elif phase == CascadePhase.COMPACT_REFILL:
            self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=list(step.moves), depth=step.depth)
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=list(step.new_tiles), depth=step.depth)

    def ensure_playable(self) -> bool:
        """Reshuffle when no swap can make a match; returns True if it did."""
        if find_valid_swaps(self.board):
            return False
        attempts = reshuffle_board(self.board, self.random, max_attempts=self.config.generation_attempts)
        logger.warning("Board had no valid swap; reshuffled after %d attempt(s)", attempts)
        self.event_bus.emit(EVENT_BOARD_RESHUFFLED, reason='stalemate')
        return True

    def on_reset_request(self, sender, **kwargs):
        reason = kwargs.get('reason', 'reset')
        reshuffle_board(self.board, self.random, max_attempts=self.config.generation_attempts)
        self.event_bus.emit(EVENT_BOARD_RESHUFFLED, reason=reason)
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason=reason, snapshot=self.board.snapshot())
