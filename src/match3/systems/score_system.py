from esper import World

from match3.components.round_state import RoundStatus
from match3.constants import POINTS_PER_CELL
from match3.events.bus import EventBus, EVENT_MATCH_CLEARED, EVENT_SCORE_CHANGED
from match3.systems.state_utils import get_or_create_round_state, get_round_score


class ScoreSystem:
    """Accumulates round score from clear events.

    Logic:
      - On EVENT_MATCH_CLEARED: points += cells_cleared * points_per_cell, once per event.
      - Clears outside a live round (idle practice, finished round) are not scored.
        A round that is sealing still scores cascades that were already in flight.
    """
    def __init__(self, world: World, event_bus: EventBus, points_per_cell: int | None = None):
        self.world = world
        self.event_bus = event_bus
        config = getattr(world, "config", None)
        if points_per_cell is None:
            points_per_cell = config.points_per_cell if config is not None else POINTS_PER_CELL
        self.points_per_cell = points_per_cell
        self.event_bus.subscribe(EVENT_MATCH_CLEARED, self.on_match_cleared)

    def on_match_cleared(self, sender, **kwargs):
        cells = int(kwargs.get('cells_cleared') or len(kwargs.get('positions', [])))
        if cells <= 0:
            return
        state = get_or_create_round_state(self.world)
        if state.status not in (RoundStatus.PLAYING, RoundStatus.SEALING):
            return
        score = get_round_score(self.world)
        delta = cells * self.points_per_cell
        score.points += delta
        score.cells_cleared += cells
        score.clear_events += 1
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=score.points, delta=delta, cells_cleared=cells)
