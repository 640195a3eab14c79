"""In-process scoring and daily leaderboard service.

The service checks the round token but not the gameplay behind the reported
total: any score that passes the token and magnitude checks is stored as-is.
There is no server-side recomputation of a plausible maximum.
"""
from __future__ import annotations

import logging
import math
import re
import secrets
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from match3.config import GameConfig
from match3.constants import DEFAULT_NICKNAME, NICKNAME_MAX_LEN
from match3.events.bus import EventBus, EVENT_LEADERBOARD_UPDATED, EVENT_SCORE_SUBMITTED

logger = logging.getLogger(__name__)

# Leading integer of a string score: "12abc" -> 12, "3.7" -> 3.
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ScoringError(Exception):
    code = "scoring_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)


class NoSessionError(ScoringError):
    code = "no_session"


class MissingTokenError(ScoringError):
    code = "missing_token"


class InvalidTokenError(ScoringError):
    code = "invalid_token"


class SessionMismatchError(ScoringError):
    code = "session_mismatch"


class TokenConsumedError(ScoringError):
    code = "token_consumed"


class BadScoreError(ScoringError):
    code = "bad_score"


class ScoreTooLargeError(ScoringError):
    code = "score_too_large"


class ForbiddenError(ScoringError):
    code = "forbidden"


@dataclass(slots=True)
class PlayerRecord:
    uid: str
    nickname: str = DEFAULT_NICKNAME


@dataclass(slots=True)
class RoundToken:
    uid: str
    issued_at: float
    expires_at: float
    consumed: bool = False


@dataclass(slots=True, frozen=True)
class ScoreEntry:
    uid: str
    nickname: str
    points: int
    day: str
    created_at: float
    seq: int


@dataclass(slots=True, frozen=True)
class LeaderboardRow:
    uid: str
    nickname: str
    points: int


@dataclass(slots=True)
class DayWinners:
    day: str
    winners: List[LeaderboardRow] = field(default_factory=list)


class ScoringService:
    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        *,
        config: Optional[GameConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.event_bus = event_bus
        self.config = config or GameConfig()
        self.clock = clock
        self.tz = ZoneInfo(self.config.timezone)
        self._players: Dict[str, PlayerRecord] = {}
        self._tokens: Dict[str, RoundToken] = {}
        self._scores: List[ScoreEntry] = []
        self._winners: Dict[str, DayWinners] = {}
        self._seq = 0

    # --- Sessions -------------------------------------------------------
    def create_session(self, uid: Optional[str] = None, nickname: Optional[str] = None) -> PlayerRecord:
        """Create the player on first visit; later calls only rename."""
        uid = uid or uuid.uuid4().hex
        cleaned = nickname.strip()[:NICKNAME_MAX_LEN] if nickname else ""
        player = self._players.get(uid)
        if player is None:
            player = PlayerRecord(uid=uid, nickname=cleaned or DEFAULT_NICKNAME)
            self._players[uid] = player
            logger.info("Created session %s (%s)", uid, player.nickname)
        elif cleaned:
            player.nickname = cleaned
        return player

    def get_player(self, uid: str) -> Optional[PlayerRecord]:
        return self._players.get(uid)

    # --- Rounds ---------------------------------------------------------
    def issue_round_token(self, uid: str) -> str:
        if uid not in self._players:
            raise NoSessionError("No session")
        now = self.clock()
        self._purge_expired(now)
        token = secrets.token_urlsafe(24)
        self._tokens[token] = RoundToken(uid=uid, issued_at=now, expires_at=now + self.config.token_ttl)
        return token

    def _purge_expired(self, now: float) -> None:
        expired = [token for token, record in self._tokens.items() if now >= record.expires_at]
        for token in expired:
            del self._tokens[token]
        if expired:
            logger.debug("Dropped %d expired round token(s)", len(expired))

    def submit_score(self, uid: str, token: Optional[str], score) -> ScoreEntry:
        if not token:
            raise MissingTokenError("Missing token")
        record = self._tokens.get(token)
        if record is None or self.clock() >= record.expires_at:
            raise InvalidTokenError("Token invalid/expired")
        if record.uid != uid:
            raise SessionMismatchError("Session mismatch")
        if record.consumed:
            raise TokenConsumedError("Token already used")
        player = self._players.get(uid)
        if player is None:
            raise NoSessionError("No user")
        points = self._parse_points(score)

        record.consumed = True
        now = self.clock()
        self._seq += 1
        entry = ScoreEntry(
            uid=uid,
            nickname=player.nickname,
            points=points,
            day=self.day_stamp(now),
            created_at=now,
            seq=self._seq,
        )
        self._scores.append(entry)
        logger.info("Saved %d point(s) for %s on %s", points, uid, entry.day)
        if self.event_bus is not None:
            self.event_bus.emit(EVENT_SCORE_SUBMITTED, uid=uid, points=points, day=entry.day)
            self.event_bus.emit(EVENT_LEADERBOARD_UPDATED, day=entry.day, board=self.top_today())
        return entry

    def _parse_points(self, score) -> int:
        """Read the reported total the way a lenient form field would.

        Strings contribute their leading integer, floats are truncated and
        negatives clamp to zero. Anything without a leading integer is a bad score.
        """
        if isinstance(score, bool):
            raise BadScoreError("Bad score")
        if not score:
            points = 0
        elif isinstance(score, int):
            points = score
        elif isinstance(score, float):
            if not math.isfinite(score):
                raise BadScoreError("Bad score")
            points = int(score)
        elif isinstance(score, str):
            match = _LEADING_INT.match(score)
            if match is None:
                raise BadScoreError("Bad score")
            points = int(match.group(1))
        else:
            raise BadScoreError("Bad score")
        points = max(0, points)
        if points > self.config.max_score:
            raise ScoreTooLargeError("Score too large")
        return points

    # --- Leaderboard ----------------------------------------------------
    def day_stamp(self, at: Optional[float] = None) -> str:
        moment = datetime.fromtimestamp(self.clock() if at is None else at, tz=self.tz)
        return moment.strftime("%Y-%m-%d")

    def top_for_day(self, day: str, limit: Optional[int] = None) -> List[LeaderboardRow]:
        limit = self.config.leaderboard_limit if limit is None else limit
        entries = sorted(
            (entry for entry in self._scores if entry.day == day),
            key=lambda entry: (-entry.points, entry.created_at, entry.seq),
        )
        return [LeaderboardRow(uid=e.uid, nickname=e.nickname, points=e.points) for e in entries[:limit]]

    def top_today(self, limit: Optional[int] = None) -> List[LeaderboardRow]:
        return self.top_for_day(self.day_stamp(), limit)

    def winners_today(self) -> List[LeaderboardRow]:
        stored = self._winners.get(self.day_stamp())
        return list(stored.winners) if stored else []

    def close_day(self, secret: Optional[str]) -> DayWinners:
        """Snapshot today's top entries as the day's winners, replacing any earlier snapshot."""
        if not secret or not secrets.compare_digest(str(secret), self.config.admin_secret):
            raise ForbiddenError("Forbidden")
        day = self.day_stamp()
        stored = DayWinners(day=day, winners=self.top_for_day(day, self.config.winner_count))
        self._winners[day] = stored
        logger.info("Closed %s with %d winner(s)", day, len(stored.winners))
        return stored
