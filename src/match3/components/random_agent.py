from dataclasses import dataclass


@dataclass(slots=True)
class RandomAgent:
    """Marker component for the auto-player that issues random valid swaps."""

    seed: int | None = None
    decision_delay: float = 0.0
