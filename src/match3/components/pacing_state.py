from dataclasses import dataclass


@dataclass(slots=True)
class PacingState:
    """Whether the presentation layer is still replaying cascade phases.

    busy stays False when no PacingSystem is installed; the engine itself never waits.
    """
    busy: bool = False
    queued: int = 0
