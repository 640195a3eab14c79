"""Runtime configuration for the board engine, round controller and leaderboard."""
import os
from dataclasses import dataclass

from match3.constants import (
    CASCADE_SAFETY_CAP,
    CLEAR_ANIM_SEC,
    FALL_ANIM_SEC,
    GENERATION_MAX_ATTEMPTS,
    GRID_SIZE,
    LEADERBOARD_LIMIT,
    LEADERBOARD_TIMEZONE,
    MAX_SCORE,
    POINTS_PER_CELL,
    REFILL_ANIM_SEC,
    ROUND_DURATION_SEC,
    ROUND_TOKEN_TTL_SEC,
    SWAP_ANIM_SEC,
    TOKEN_TYPES,
    WINNER_COUNT,
)


@dataclass(slots=True)
class GameConfig:
    grid_size: int = GRID_SIZE
    token_types: int = TOKEN_TYPES
    points_per_cell: int = POINTS_PER_CELL
    round_duration: float = float(ROUND_DURATION_SEC)
    token_ttl: float = float(ROUND_TOKEN_TTL_SEC)
    max_score: int = MAX_SCORE
    leaderboard_limit: int = LEADERBOARD_LIMIT
    winner_count: int = WINNER_COUNT
    timezone: str = LEADERBOARD_TIMEZONE
    cascade_cap: int = CASCADE_SAFETY_CAP
    generation_attempts: int = GENERATION_MAX_ATTEMPTS
    admin_secret: str = "admin"
    swap_anim: float = SWAP_ANIM_SEC
    clear_anim: float = CLEAR_ANIM_SEC
    fall_anim: float = FALL_ANIM_SEC
    refill_anim: float = REFILL_ANIM_SEC

    def __post_init__(self) -> None:
        if self.grid_size < 3:
            raise ValueError(f"grid_size must be at least 3, got {self.grid_size}")
        if self.token_types < 3:
            raise ValueError(f"token_types must be at least 3, got {self.token_types}")
        if self.points_per_cell < 0:
            raise ValueError("points_per_cell cannot be negative")
        if self.round_duration <= 0:
            raise ValueError("round_duration must be positive")
        if self.token_ttl < self.round_duration:
            raise ValueError("token_ttl must cover the round duration")
        if self.cascade_cap < 1:
            raise ValueError("cascade_cap must be at least 1")

    @classmethod
    def from_env(cls, environ=None) -> "GameConfig":
        env = os.environ if environ is None else environ
        return cls(
            grid_size=int(env.get('MATCH3_GRID_SIZE', str(GRID_SIZE))),
            token_types=int(env.get('MATCH3_TOKEN_TYPES', str(TOKEN_TYPES))),
            points_per_cell=int(env.get('MATCH3_POINTS_PER_CELL', str(POINTS_PER_CELL))),
            round_duration=float(env.get('MATCH3_ROUND_DURATION_SEC', str(ROUND_DURATION_SEC))),
            token_ttl=float(env.get('MATCH3_TOKEN_TTL_SEC', str(ROUND_TOKEN_TTL_SEC))),
            max_score=int(env.get('MATCH3_MAX_SCORE', str(MAX_SCORE))),
            leaderboard_limit=int(env.get('MATCH3_LEADERBOARD_LIMIT', str(LEADERBOARD_LIMIT))),
            winner_count=int(env.get('MATCH3_WINNER_COUNT', str(WINNER_COUNT))),
            timezone=env.get('MATCH3_TIMEZONE', LEADERBOARD_TIMEZONE),
            cascade_cap=int(env.get('MATCH3_CASCADE_CAP', str(CASCADE_SAFETY_CAP))),
            generation_attempts=int(env.get('MATCH3_GENERATION_ATTEMPTS', str(GENERATION_MAX_ATTEMPTS))),
            admin_secret=env.get('MATCH3_ADMIN_SECRET') or 'admin',
        )
