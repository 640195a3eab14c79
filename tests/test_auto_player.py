import random

from match3.components.random_agent import RandomAgent
from match3.components.round_state import RoundStatus
from match3.events.bus import EventBus, EVENT_TICK, EVENT_TILE_SWAP_REQUEST
from match3.systems.auto_player_system import AutoPlayerSystem
from match3.systems.board import BoardSystem
from match3.systems.board_ops import find_valid_swaps
from match3.systems.state_utils import get_or_create_round_state, get_pacing_state
from match3.world import create_world


def setup_agent(move_delay=0.0):
    bus = EventBus()
    world = create_world(bus, auto_player=True, move_delay=move_delay, rng=random.Random(4))
    board_system = BoardSystem(world, bus)
    agent = AutoPlayerSystem(world, bus, rng=random.Random(4))
    requests = []
    bus.subscribe(EVENT_TILE_SWAP_REQUEST, lambda sender, **p: requests.append((p["src"], p["dst"])))
    return bus, world, board_system, agent, requests


def test_agent_waits_for_a_live_round():
    bus, _, _, agent, requests = setup_agent()
    bus.emit(EVENT_TICK, dt=0.1)
    assert requests == []
    assert agent.moves_made == 0


def test_agent_plays_a_valid_swap():
    bus, world, board_system, agent, requests = setup_agent()
    get_or_create_round_state(world).status = RoundStatus.PLAYING
    valid = find_valid_swaps(board_system.board)

    bus.emit(EVENT_TICK, dt=0.1)

    assert len(requests) == 1
    assert requests[0] in valid
    assert agent.moves_made == 1


def test_agent_holds_while_pacing_is_busy():
    bus, world, _, _, requests = setup_agent()
    get_or_create_round_state(world).status = RoundStatus.PLAYING
    get_pacing_state(world).busy = True
    bus.emit(EVENT_TICK, dt=0.1)
    assert requests == []


def test_agent_waits_out_decision_delay():
    bus, world, _, _, requests = setup_agent(move_delay=0.3)
    get_or_create_round_state(world).status = RoundStatus.PLAYING
    bus.emit(EVENT_TICK, dt=0.1)
    bus.emit(EVENT_TICK, dt=0.1)
    assert requests == []
    bus.emit(EVENT_TICK, dt=0.1)
    bus.emit(EVENT_TICK, dt=0.1)
    assert len(requests) == 1


def test_agent_seed_from_world_drives_move_choice():
    def first_moves(seed):
        bus = EventBus()
        world = create_world(bus, auto_player=True, agent_seed=seed, rng=random.Random(8))
        BoardSystem(world, bus)
        AutoPlayerSystem(world, bus)
        get_or_create_round_state(world).status = RoundStatus.PLAYING
        requests = []
        bus.subscribe(EVENT_TILE_SWAP_REQUEST, lambda sender, **p: requests.append((p["src"], p["dst"])))
        for _ in range(5):
            bus.emit(EVENT_TICK, dt=0.1)
        return world, requests

    world, moves = first_moves(21)
    _, again = first_moves(21)
    assert len(moves) == 5
    assert moves == again
    agents = [agent for _, agent in world.get_component(RandomAgent)]
    assert agents[0].seed == 21
