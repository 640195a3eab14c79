import pytest

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
from match3.systems.board_ops import GravityMove
from match3.systems.pacing import PacingSystem
from match3.systems.state_utils import get_pacing_state
from match3.world import create_world


@pytest.fixture
def paced():
    bus = EventBus()
    world = create_world(bus)
    pacing = PacingSystem(world, bus)
    log: list[tuple[str, str | None]] = []
    bus.subscribe(EVENT_ANIMATION_START, lambda sender, **p: log.append(("start", p["kind"])))
    bus.subscribe(EVENT_ANIMATION_COMPLETE, lambda sender, **p: log.append(("complete", p["kind"])))
    bus.subscribe(EVENT_PACING_IDLE, lambda sender, **p: log.append(("idle", None)))
    return bus, world, pacing, log


def queue_cascade(bus):
    bus.emit(EVENT_TILE_SWAP_VALID, src=(0, 0), dst=(1, 0))
    bus.emit(EVENT_MATCH_CLEARED, positions=[(0, 0), (1, 0), (2, 0)], cells_cleared=3, depth=1)
    bus.emit(EVENT_GRAVITY_APPLIED, moves=[], depth=1)
    bus.emit(EVENT_REFILL_COMPLETED, new_tiles=[(0, 0), (1, 0), (2, 0)], depth=1)


def test_phases_replay_in_order_with_delays(paced):
    bus, world, pacing, log = paced
    queue_cascade(bus)
    assert pacing.busy
    assert get_pacing_state(world).busy
    assert get_pacing_state(world).queued == 3

    bus.emit(EVENT_TICK, dt=0.05)
    assert log == [("start", "swap")]

    bus.emit(EVENT_TICK, dt=0.1)
    assert log == [("start", "swap"), ("complete", "swap"), ("start", "fade")]

    bus.emit(EVENT_TICK, dt=1.0)
    assert log[3:] == [
        ("complete", "fade"),
        ("start", "refill"),
        ("complete", "refill"),
        ("idle", None),
    ]
    assert not pacing.busy
    assert not get_pacing_state(world).busy
    assert get_pacing_state(world).queued == 0


def test_idle_is_announced_once(paced):
    bus, _, _, log = paced
    queue_cascade(bus)
    for _ in range(10):
        bus.emit(EVENT_TICK, dt=0.5)
    assert log.count(("idle", None)) == 1


def test_gravity_with_moves_gets_a_fall_phase(paced):
    bus, _, pacing, log = paced
    bus.emit(EVENT_GRAVITY_APPLIED, moves=[GravityMove(source=(0, 0), target=(0, 1), token=2)], depth=1)
    bus.emit(EVENT_TICK, dt=1.0)
    assert ("start", "fall") in log


def test_rejected_swap_animates_out_and_back(paced):
    bus, _, pacing, log = paced
    bus.emit(EVENT_TILE_SWAP_INVALID, src=(0, 0), dst=(1, 0), reason="no_match")
    assert pacing.queue[0].kind == "swap_back"
    assert pacing.queue[0].duration == pytest.approx(0.24)


@pytest.mark.parametrize("reason", ["not_adjacent", "out_of_bounds", "round_closed"])
def test_malformed_or_refused_swaps_do_not_animate(paced, reason):
    bus, _, pacing, _ = paced
    bus.emit(EVENT_TILE_SWAP_INVALID, src=(0, 0), dst=(3, 0), reason=reason)
    assert not pacing.busy


def test_reshuffle_is_paced(paced):
    bus, _, pacing, log = paced
    bus.emit(EVENT_BOARD_RESHUFFLED, reason="stalemate")
    assert pacing.busy
    bus.emit(EVENT_TICK, dt=0.2)
    assert log == [("start", "reshuffle"), ("complete", "reshuffle"), ("idle", None)]
