"""Board management for the beacon localization simulation."""

import numpy as np
from typing import Dict, FrozenSet, List, Optional, Set

from ..errors import InvalidLocationError, NullAgentError
from .agent import Agent, Beacon
from .location import Location


class Board:
    """
    Dense rows x cols grid holding, per cell, the set of agents located there.

    Two data layers are kept in step:
    - cells: list-of-lists of agent sets (positional truth)
    - occupancy: numpy int32 count array, used for rendering and density
    """

    kind = "Board"

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        self.cells: List[List[Set[Agent]]] = [
            [set() for _ in range(cols)] for _ in range(rows)
        ]
        self.occupancy = np.zeros((rows, cols), dtype=np.int32)

    def is_location_valid(self, location: Optional[Location]) -> bool:
        """Check if location is non-null and within the board boundaries."""
        if location is None:
            return False
        return 0 <= location.row < self.rows and 0 <= location.col < self.cols

    def validate_location(self, location: Optional[Location]) -> None:
        """Raise InvalidLocationError unless the location is on the board."""
        if location is None:
            raise InvalidLocationError("Location must not be None")
        if not self.is_location_valid(location):
            raise InvalidLocationError(
                f"Invalid location {location} for a {self.rows}x{self.cols} board"
            )

    def place_agent(self, location: Location, agent: Agent) -> None:
        """Add agent to the cell at location."""
        if agent is None:
            raise NullAgentError("Agent must not be None")
        self.validate_location(location)
        cell = self.cells[location.row][location.col]
        if agent not in cell:
            cell.add(agent)
            self.occupancy[location.row, location.col] += 1

    def move_agent(self, old_location: Location, new_location: Location,
                   agent: Agent) -> None:
        """Remove agent from old_location and place it on new_location."""
        if agent is None:
            raise NullAgentError("Agent must not be None")
        self.validate_location(old_location)
        self.validate_location(new_location)
        old_cell = self.cells[old_location.row][old_location.col]
        if agent in old_cell:
            old_cell.remove(agent)
            self.occupancy[old_location.row, old_location.col] -= 1
        self.place_agent(new_location, agent)

    def agents_at(self, location: Location) -> FrozenSet[Agent]:
        self.validate_location(location)
        return frozenset(self.cells[location.row][location.col])

    def agents_on_board(self) -> Dict[Location, FrozenSet[Agent]]:
        """Return a snapshot mapping each populated location to its agents."""
        populated = {}
        rows, cols = np.nonzero(self.occupancy)
        for row, col in zip(rows, cols):
            populated[Location(int(row), int(col))] = frozenset(self.cells[row][col])
        return populated

    def occupancy_grid(self) -> np.ndarray:
        """Return a copy of the per-cell agent count array."""
        return self.occupancy.copy()

    def agent_count(self) -> int:
        return int(self.occupancy.sum())

    def __repr__(self) -> str:
        return f"{self.kind}(rows={self.rows}, cols={self.cols}, agents={self.agent_count()})"


class RealBoard(Board):
    """Ground-truth board owned by the simulation."""

    kind = "RealBoard"


class EstimatedBoard(Board):
    """Resolver's board. Holds beacons at their estimated locations only."""

    kind = "EstimatedBoard"

    def place_agent(self, location: Location, agent: Agent) -> None:
        if agent is not None and not isinstance(agent, Beacon):
            raise TypeError(f"EstimatedBoard holds beacons only, got {agent!r}")
        super().place_agent(location, agent)
