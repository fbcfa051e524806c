"""Grid coordinates and unit directions for the beacon simulation."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Direction(Enum):
    """Unit step on the grid as a (row delta, column delta) pair."""
    UP = (-1, 0)
    DOWN = (1, 0)
    LEFT = (0, -1)
    RIGHT = (0, 1)

    @property
    def row_delta(self) -> int:
        return self.value[0]

    @property
    def col_delta(self) -> int:
        return self.value[1]


@dataclass(frozen=True, order=True)
class Location:
    """
    Immutable cell coordinate.

    Coordinate convention: row grows downwards, col grows to the right,
    so Direction.UP decreases the row index.
    """
    row: int
    col: int

    def move_in_direction(self, direction: Direction) -> "Location":
        """Return the neighbouring location one step in `direction`."""
        return Location(self.row + direction.row_delta,
                        self.col + direction.col_delta)

    def distance_to(self, other: "Location") -> int:
        """Manhattan distance between two locations."""
        return abs(self.row - other.row) + abs(self.col - other.col)

    def as_tuple(self) -> Tuple[int, int]:
        return (self.row, self.col)

    def __repr__(self) -> str:
        return f"Location({self.row}, {self.col})"
