from esper import World

from match3.components.board import Board
from match3.components.pacing_state import PacingState
from match3.components.player import Player
from match3.components.round_score import RoundScore
from match3.components.round_state import RoundState


def _state_entity(world: World) -> int:
    existing = list(world.get_component(RoundState))
    if existing:
        return existing[0][0]
    return world.create_entity(RoundState(), RoundScore(), PacingState())


def get_or_create_round_state(world: World) -> RoundState:
    """Return the shared RoundState component, creating the state entity if absent."""
    return world.component_for_entity(_state_entity(world), RoundState)


def get_round_score(world: World) -> RoundScore:
    entity = _state_entity(world)
    if not world.has_component(entity, RoundScore):
        world.add_component(entity, RoundScore())
    return world.component_for_entity(entity, RoundScore)


def get_pacing_state(world: World) -> PacingState:
    entity = _state_entity(world)
    if not world.has_component(entity, PacingState):
        world.add_component(entity, PacingState())
    return world.component_for_entity(entity, PacingState)


def get_player(world: World) -> tuple[int, Player] | None:
    for entity, player in world.get_component(Player):
        return entity, player
    return None


def get_board(world: World) -> Board | None:
    for _, board in world.get_component(Board):
        return board
    return None
