from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from match3.constants import EMPTY

# (column, row); row 0 is the top of the board and gravity pulls toward row size-1.
Position = Tuple[int, int]
Snapshot = Tuple[Tuple[int, ...], ...]


@dataclass(slots=True)
class Board:
    """Square grid of token type ids.

    cells is indexed cells[row][col]. A cell holds a type id in [0, token_types)
    or EMPTY while a cascade is between its clear and refill phases.
    """
    size: int
    token_types: int
    cells: List[List[int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[EMPTY] * self.size for _ in range(self.size)]
        elif len(self.cells) != self.size or any(len(row) != self.size for row in self.cells):
            raise ValueError(f"Board cells must be {self.size}x{self.size}")

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], token_types: int) -> "Board":
        return cls(size=len(rows), token_types=token_types, cells=[list(row) for row in rows])

    def in_bounds(self, pos: Position) -> bool:
        col, row = pos
        return 0 <= col < self.size and 0 <= row < self.size

    def get(self, pos: Position) -> int:
        col, row = pos
        return self.cells[row][col]

    def set(self, pos: Position, value: int) -> None:
        col, row = pos
        self.cells[row][col] = value

    def exchange(self, a: Position, b: Position) -> None:
        va = self.get(a)
        self.set(a, self.get(b))
        self.set(b, va)

    def positions(self):
        for row in range(self.size):
            for col in range(self.size):
                yield (col, row)

    def empty_positions(self) -> List[Position]:
        return [pos for pos in self.positions() if self.get(pos) == EMPTY]

    def snapshot(self) -> Snapshot:
        return tuple(tuple(row) for row in self.cells)

    def load(self, snapshot: Sequence[Sequence[int]]) -> None:
        """Overwrite cells in place (the entity keeps its Board instance)."""
        if len(snapshot) != self.size or any(len(row) != self.size for row in snapshot):
            raise ValueError(f"Snapshot must be {self.size}x{self.size}")
        self.cells = [list(row) for row in snapshot]

    def copy(self) -> "Board":
        return Board(size=self.size, token_types=self.token_types, cells=[list(row) for row in self.cells])
