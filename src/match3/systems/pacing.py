from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from esper import World

from match3.config import GameConfig
from match3.events.bus import (
    EventBus,
    EVENT_ANIMATION_COMPLETE,
    EVENT_ANIMATION_START,
    EVENT_BOARD_RESHUFFLED,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_PACING_IDLE,
    EVENT_REFILL_COMPLETED,
    EVENT_TICK,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_VALID,
)
from match3.systems.state_utils import get_pacing_state


@dataclass(slots=True)
class PacedPhase:
    kind: str
    items: List = field(default_factory=list)
    duration: float = 0.0
    elapsed: float = 0.0


class PacingSystem:
    """Replays logical cascade phases with real-time delays for display.

    The engine has already settled by the time phases are queued here; this
    layer only spaces out animation_start/animation_complete pairs on ticks.
    """
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.config: GameConfig = getattr(world, "config", None) or GameConfig()
        self.queue: Deque[PacedPhase] = deque()
        self.current: Optional[PacedPhase] = None
        event_bus.subscribe(EVENT_TICK, self.on_tick)
        event_bus.subscribe(EVENT_TILE_SWAP_VALID, self.on_swap_valid)
        event_bus.subscribe(EVENT_TILE_SWAP_INVALID, self.on_swap_invalid)
        event_bus.subscribe(EVENT_MATCH_CLEARED, self.on_match_cleared)
        event_bus.subscribe(EVENT_GRAVITY_APPLIED, self.on_gravity_applied)
        event_bus.subscribe(EVENT_REFILL_COMPLETED, self.on_refill_completed)
        event_bus.subscribe(EVENT_BOARD_RESHUFFLED, self.on_board_reshuffled)

    @property
    def busy(self) -> bool:
        return self.current is not None or bool(self.queue)

    def on_swap_valid(self, sender, **kwargs):
        self._enqueue('swap', [kwargs.get('src'), kwargs.get('dst')], self.config.swap_anim)

    def on_swap_invalid(self, sender, **kwargs):
        # Only a real attempted swap animates out and back; malformed moves never moved anything.
        if kwargs.get('reason') != 'no_match':
            return
        self._enqueue('swap_back', [kwargs.get('src'), kwargs.get('dst')], self.config.swap_anim * 2)

    def on_match_cleared(self, sender, **kwargs):
        self._enqueue('fade', list(kwargs.get('positions', [])), self.config.clear_anim)

    def on_gravity_applied(self, sender, **kwargs):
        moves = kwargs.get('moves') or []
        if moves:
            self._enqueue('fall', list(moves), self.config.fall_anim)

    def on_refill_completed(self, sender, **kwargs):
        new_tiles = kwargs.get('new_tiles') or []
        if new_tiles:
            self._enqueue('refill', list(new_tiles), self.config.refill_anim)

    def on_board_reshuffled(self, sender, **kwargs):
        self._enqueue('reshuffle', [], self.config.refill_anim)

    def _enqueue(self, kind: str, items: List, duration: float) -> None:
        self.queue.append(PacedPhase(kind=kind, items=items, duration=max(0.0, duration)))
        self._sync_state()

    def on_tick(self, sender, **kwargs):
        dt = float(kwargs.get('dt', 1 / 60))
        was_busy = self.busy
        while dt >= 0.0 and self.busy:
            if self.current is None:
                self.current = self.queue.popleft()
                self.event_bus.emit(
                    EVENT_ANIMATION_START,
                    kind=self.current.kind,
                    items=self.current.items,
                    duration=self.current.duration,
                )
            remaining = self.current.duration - self.current.elapsed
            if dt < remaining:
                self.current.elapsed += dt
                break
            dt -= remaining
            finished, self.current = self.current, None
            self.event_bus.emit(EVENT_ANIMATION_COMPLETE, kind=finished.kind, items=finished.items)
            if dt == 0.0:
                break
        self._sync_state()
        if was_busy and not self.busy:
            self.event_bus.emit(EVENT_PACING_IDLE)

    def _sync_state(self) -> None:
        state = get_pacing_state(self.world)
        state.busy = self.busy
        state.queued = len(self.queue) + (1 if self.current is not None else 0)
