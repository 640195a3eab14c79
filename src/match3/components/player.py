from dataclasses import dataclass

from match3.constants import DEFAULT_NICKNAME


@dataclass(slots=True)
class Player:
    """The human (or simulated) player who owns this world's rounds."""
    uid: str
    nickname: str = DEFAULT_NICKNAME
