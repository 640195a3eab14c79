from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

from esper import World

from match3.components.round_state import RoundStatus
from match3.constants import ROUND_DURATION_SEC
from match3.events.bus import (
    EventBus,
    EVENT_BOARD_RESET_REQUEST,
    EVENT_PACING_IDLE,
    EVENT_ROUND_END_REQUEST,
    EVENT_ROUND_ENDED,
    EVENT_ROUND_EXPIRED,
    EVENT_ROUND_START_FAILED,
    EVENT_ROUND_START_REQUEST,
    EVENT_ROUND_STARTED,
    EVENT_ROUND_TIMER,
    EVENT_SCORE_SUBMISSION_FAILED,
    EVENT_TICK,
)
from match3.services.scoring import ScoringError, ScoringService
from match3.systems.state_utils import (
    get_or_create_round_state,
    get_pacing_state,
    get_player,
    get_round_score,
)

logger = logging.getLogger(__name__)

SUBMISSION_FAILED = "submission failed"


class RoundSystem:
    """Round controller: token, countdown, sealing and score submission.

    Expiry is cooperative. When the countdown lapses no further swaps are
    accepted, but the round is only sealed once the presentation layer has
    drained whatever cascade it was still replaying.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        scoring: ScoringService,
        *,
        duration: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.world = world
        self.event_bus = event_bus
        self.scoring = scoring
        config = getattr(world, "config", None)
        if duration is None:
            duration = config.round_duration if config is not None else float(ROUND_DURATION_SEC)
        self.duration = duration
        self.clock = clock
        event_bus.subscribe(EVENT_ROUND_START_REQUEST, self.on_start_request)
        event_bus.subscribe(EVENT_ROUND_END_REQUEST, self.on_end_request)
        event_bus.subscribe(EVENT_TICK, self.on_tick)
        event_bus.subscribe(EVENT_PACING_IDLE, self.on_pacing_idle)

    # --- Event handlers -------------------------------------------------
    def on_start_request(self, sender, **payload) -> None:
        self.start_round()

    def on_end_request(self, sender, **payload) -> None:
        self.end_round(reason=payload.get("reason", "player"))

    def on_tick(self, sender, **payload) -> None:
        state = get_or_create_round_state(self.world)
        if state.status != RoundStatus.PLAYING:
            return
        dt = float(payload.get("dt", 0.0))
        state.remaining = max(0.0, state.remaining - dt)
        whole = math.ceil(state.remaining)
        if whole != state.last_announced:
            state.last_announced = whole
            self.event_bus.emit(EVENT_ROUND_TIMER, remaining=whole)
        if state.remaining <= 0.0:
            logger.info("Round timer lapsed")
            self.event_bus.emit(EVENT_ROUND_EXPIRED)
            self._seal()

    def on_pacing_idle(self, sender, **payload) -> None:
        state = get_or_create_round_state(self.world)
        if state.status == RoundStatus.SEALING:
            self._finalize()

    # --- Lifecycle ------------------------------------------------------
    def start_round(self) -> bool:
        state = get_or_create_round_state(self.world)
        if state.status in (RoundStatus.PLAYING, RoundStatus.SEALING):
            return False
        found = get_player(self.world)
        if found is None:
            self.event_bus.emit(EVENT_ROUND_START_FAILED, message="Start failed", code="no_player")
            return False
        _, player = found
        try:
            token = self.scoring.issue_round_token(player.uid)
        except ScoringError as exc:
            logger.warning("Round start refused for %s: %s", player.uid, exc.code)
            self.event_bus.emit(EVENT_ROUND_START_FAILED, message="Start failed", code=exc.code)
            return False

        get_round_score(self.world).reset()
        state.status = RoundStatus.PLAYING
        state.token = token
        state.duration = self.duration
        state.remaining = self.duration
        state.started_at = self.clock()
        state.last_announced = math.ceil(self.duration)
        self.event_bus.emit(EVENT_BOARD_RESET_REQUEST, reason='round_start')
        logger.info("Round started for %s (%.0fs)", player.uid, self.duration)
        self.event_bus.emit(EVENT_ROUND_STARTED, duration=self.duration, token=token)
        return True

    def end_round(self, reason: str = "player") -> bool:
        state = get_or_create_round_state(self.world)
        if state.status != RoundStatus.PLAYING:
            return False
        logger.info("Round ended early: %s", reason)
        self._seal()
        return True

    def _seal(self) -> None:
        state = get_or_create_round_state(self.world)
        state.status = RoundStatus.SEALING
        if get_pacing_state(self.world).busy:
            # on_pacing_idle finishes the job once the replay drains.
            return
        self._finalize()

    def _finalize(self) -> None:
        state = get_or_create_round_state(self.world)
        score = get_round_score(self.world)
        token, state.token = state.token, None
        state.status = RoundStatus.FINISHED
        state.remaining = 0.0
        found = get_player(self.world)
        submitted = False
        if token and found is not None:
            _, player = found
            try:
                self.scoring.submit_score(player.uid, token, score.points)
                submitted = True
            except ScoringError as exc:
                logger.warning("Score submission for %s failed: %s", player.uid, exc.code)
                self.event_bus.emit(EVENT_SCORE_SUBMISSION_FAILED, message=SUBMISSION_FAILED, code=exc.code)
        self.event_bus.emit(EVENT_ROUND_ENDED, score=score.points, submitted=submitted)
