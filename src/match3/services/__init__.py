from match3.services.scoring import (
    LeaderboardRow,
    ScoreEntry,
    ScoringError,
    ScoringService,
)

__all__ = [
    "LeaderboardRow",
    "ScoreEntry",
    "ScoringError",
    "ScoringService",
]
