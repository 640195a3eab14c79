from __future__ import annotations

import random
from typing import Optional

from esper import World

from match3.components.random_agent import RandomAgent
from match3.events.bus import EventBus, EVENT_TICK, EVENT_TILE_SWAP_REQUEST
from match3.systems.board_ops import find_valid_swaps
from match3.systems.state_utils import get_board, get_or_create_round_state, get_pacing_state


class AutoPlayerSystem:
    """Issues random valid swaps for a player marked with RandomAgent.

    Waits for the pacing layer to drain between moves, the way a human waits
    for the board to stop animating.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        agent = self._agent()
        seed = agent.seed if agent is not None else None
        self.random = rng or (random.Random(seed) if seed is not None else random.Random())
        self.delay_remaining: float = agent.decision_delay if agent is not None else 0.0
        self.moves_made = 0
        event_bus.subscribe(EVENT_TICK, self.on_tick)

    def on_tick(self, sender, **payload) -> None:
        agent = self._agent()
        if agent is None:
            return
        if not get_or_create_round_state(self.world).accepting_moves:
            return
        if get_pacing_state(self.world).busy:
            return
        dt = float(payload.get("dt", 0.0))
        if self.delay_remaining > 0.0:
            self.delay_remaining = max(0.0, self.delay_remaining - dt)
            if self.delay_remaining > 0.0:
                return
        board = get_board(self.world)
        if board is None:
            return
        swaps = find_valid_swaps(board)
        if not swaps:
            return
        src, dst = self.random.choice(swaps)
        self.delay_remaining = max(0.0, agent.decision_delay)
        self.moves_made += 1
        self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=src, dst=dst)

    def _agent(self) -> RandomAgent | None:
        for _, agent in self.world.get_component(RandomAgent):
            return agent
        return None
