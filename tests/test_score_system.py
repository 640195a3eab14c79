import random

from esper import World

from match3.components.round_state import RoundStatus
from match3.constants import POINTS_PER_CELL
from match3.events.bus import EventBus, EVENT_MATCH_CLEARED, EVENT_SCORE_CHANGED
from match3.systems.board import BoardSystem
from match3.systems.score_system import ScoreSystem
from match3.systems.state_utils import get_or_create_round_state, get_round_score
from match3.world import create_world

from helpers import near_match_rows


def setup_scoring():
    bus = EventBus()
    world = create_world(bus, rng=random.Random(2))
    ScoreSystem(world, bus)
    changes = []
    bus.subscribe(EVENT_SCORE_CHANGED, lambda sender, **payload: changes.append(payload))
    return bus, world, changes


def test_clear_scores_ten_points_per_cell_while_playing():
    bus, world, changes = setup_scoring()
    get_or_create_round_state(world).status = RoundStatus.PLAYING

    bus.emit(EVENT_MATCH_CLEARED, positions=[(0, 0), (1, 0), (2, 0), (3, 0)], cells_cleared=4, depth=1)
    bus.emit(EVENT_MATCH_CLEARED, positions=[(0, 1), (0, 2), (0, 3)], cells_cleared=3, depth=2)

    score = get_round_score(world)
    assert score.points == 70
    assert score.cells_cleared == 7
    assert score.clear_events == 2
    assert changes == [
        {"score": 40, "delta": 40, "cells_cleared": 4},
        {"score": 70, "delta": 30, "cells_cleared": 3},
    ]


def test_clears_outside_live_round_are_not_scored():
    bus, world, changes = setup_scoring()
    state = get_or_create_round_state(world)

    bus.emit(EVENT_MATCH_CLEARED, positions=[(0, 0), (1, 0), (2, 0)], cells_cleared=3, depth=1)
    state.status = RoundStatus.FINISHED
    bus.emit(EVENT_MATCH_CLEARED, positions=[(0, 0), (1, 0), (2, 0)], cells_cleared=3, depth=1)

    assert get_round_score(world).points == 0
    assert changes == []


def test_sealing_round_still_scores_in_flight_clears():
    bus, world, _ = setup_scoring()
    get_or_create_round_state(world).status = RoundStatus.SEALING
    bus.emit(EVENT_MATCH_CLEARED, positions=[(0, 0), (1, 0), (2, 0)], cells_cleared=3, depth=1)
    assert get_round_score(world).points == 30


def test_swap_score_equals_cascade_cells_times_ten():
    bus = EventBus()
    world = create_world(bus, rng=random.Random(9))
    board_system = BoardSystem(world, bus)
    ScoreSystem(world, bus)
    get_or_create_round_state(world).status = RoundStatus.PLAYING
    board_system.board.load(near_match_rows())

    result = board_system.request_swap((3, 4), (4, 4))

    assert result.accepted
    assert get_round_score(world).points == result.cells_cleared * 10
    assert get_round_score(world).clear_events == len(result.clear_events)


def test_custom_points_per_cell():
    bus = EventBus()
    world = create_world(bus)
    ScoreSystem(world, bus, points_per_cell=25)
    get_or_create_round_state(world).status = RoundStatus.PLAYING
    bus.emit(EVENT_MATCH_CLEARED, positions=[(0, 0), (1, 0), (2, 0)], cells_cleared=3, depth=1)
    assert get_round_score(world).points == 75


def test_world_without_config_uses_default_points():
    bus = EventBus()
    assert ScoreSystem(World(), bus).points_per_cell == POINTS_PER_CELL
