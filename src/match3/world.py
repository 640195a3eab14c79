import random
import uuid

from esper import World

from match3.components.pacing_state import PacingState
from match3.components.player import Player
from match3.components.random_agent import RandomAgent
from match3.components.round_score import RoundScore
from match3.components.round_state import RoundState
from match3.config import GameConfig
from match3.constants import DEFAULT_NICKNAME
from match3.events.bus import EventBus


def create_world(
    event_bus: EventBus,
    config: GameConfig | None = None,
    *,
    uid: str | None = None,
    nickname: str = DEFAULT_NICKNAME,
    auto_player: bool = False,
    move_delay: float = 0.0,
    agent_seed: int | None = None,
    rng: random.Random | None = None,
) -> World:
    """Build the world for one player's board.

    Each world owns its board, round state and score; nothing mutable is shared
    between worlds, so concurrent rounds just use separate worlds.
    """
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "config", config or GameConfig())

    # Round lifecycle, score accumulator and pacing flag live on one state entity.
    world.create_entity(RoundState(), RoundScore(), PacingState())

    player_components = [Player(uid=uid or uuid.uuid4().hex, nickname=nickname)]
    if auto_player:
        player_components.append(RandomAgent(seed=agent_seed, decision_delay=move_delay))
    world.create_entity(*player_components)
    return world
