"""Round lifecycle resource owned by the round controller."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class RoundStatus(Enum):
    IDLE = auto()
    PLAYING = auto()
    SEALING = auto()    # timer lapsed; waiting for in-flight presentation to drain
    FINISHED = auto()


@dataclass(slots=True)
class RoundState:
    """Singleton component describing the round bound to this world's board."""
    status: RoundStatus = RoundStatus.IDLE
    token: Optional[str] = None
    duration: float = 0.0
    remaining: float = 0.0
    started_at: Optional[float] = None
    last_announced: Optional[int] = None

    @property
    def accepting_moves(self) -> bool:
        return self.status == RoundStatus.PLAYING

    @property
    def locks_board(self) -> bool:
        return self.status in (RoundStatus.SEALING, RoundStatus.FINISHED)
