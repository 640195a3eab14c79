from dataclasses import dataclass


@dataclass(slots=True)
class RoundScore:
    """Accumulated score for the active round.

    points grows by cells_cleared * points_per_cell for every clear event.
    """
    points: int = 0
    cells_cleared: int = 0
    clear_events: int = 0

    def reset(self) -> None:
        self.points = 0
        self.cells_cleared = 0
        self.clear_events = 0
