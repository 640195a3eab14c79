from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems alive even when nobody holds the system.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(c,r), dst=(c,r)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(c,r), dst=(c,r)
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(c,r), dst=(c,r), reason=str
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(c,r),...], size=int, depth=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(c,r),...], cells_cleared=int, depth=int
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[GravityMove,...], depth=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(c,r),...], depth=int
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(c,r),...]
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int, total_cleared=int
EVENT_BOARD_CHANGED = "board_changed"              # payload: reason=str, snapshot=tuple[tuple[int,...],...]
EVENT_BOARD_RESHUFFLED = "board_reshuffled"        # payload: reason=str
EVENT_BOARD_RESET_REQUEST = "board_reset_request"  # payload: reason=str


# ============================================================================
# ANIMATION / PACING
# ============================================================================
EVENT_ANIMATION_START = "animation_start"          # payload: kind=str, items=list, duration=float
EVENT_ANIMATION_COMPLETE = "animation_complete"    # payload: kind=str, items=list
EVENT_PACING_IDLE = "pacing_idle"                  # payload: None


# ============================================================================
# ROUND & SCORE
# ============================================================================
EVENT_ROUND_START_REQUEST = "round_start_request"      # payload: None
EVENT_ROUND_STARTED = "round_started"                  # payload: duration=float, token=str
EVENT_ROUND_START_FAILED = "round_start_failed"        # payload: message=str, code=str
EVENT_ROUND_TIMER = "round_timer"                      # payload: remaining=int
EVENT_ROUND_EXPIRED = "round_expired"                  # payload: None
EVENT_ROUND_END_REQUEST = "round_end_request"          # payload: reason=str
EVENT_ROUND_ENDED = "round_ended"                      # payload: score=int, submitted=bool
EVENT_SCORE_CHANGED = "score_changed"                  # payload: score=int, delta=int, cells_cleared=int


# ============================================================================
# LEADERBOARD
# ============================================================================
EVENT_SCORE_SUBMITTED = "score_submitted"              # payload: uid=str, points=int, day=str
EVENT_SCORE_SUBMISSION_FAILED = "score_submission_failed"  # payload: message=str, code=str
EVENT_LEADERBOARD_UPDATED = "leaderboard_updated"      # payload: day=str, board=list[LeaderboardRow]
