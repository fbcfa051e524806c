"""Movement strategies deciding where an agent steps each round."""

from enum import Enum
from typing import List, Optional, TYPE_CHECKING

import numpy as np

from .location import Direction, Location

if TYPE_CHECKING:
    from .board import Board


class MovementStrategyType(Enum):
    """Closed set of movement strategies; UP exists for tests only."""
    STATIONARY = "stationary"
    RANDOM = "random"
    UP = "up"

    @property
    def is_for_test(self) -> bool:
        return self is MovementStrategyType.UP


class MovementStrategy:
    """Maps (board, current location) to the agent's next location."""

    strategy_type: MovementStrategyType

    def move_to(self, board: "Board", current_location: Location) -> Location:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StationaryMovementStrategy(MovementStrategy):
    """Agent never leaves its cell."""

    strategy_type = MovementStrategyType.STATIONARY

    def move_to(self, board: "Board", current_location: Location) -> Location:
        return current_location


class RandomMovementStrategy(MovementStrategy):
    """
    Random walk: one step in a uniformly chosen direction among those that
    stay on the board. An agent with no valid direction stays in place.
    """

    strategy_type = MovementStrategyType.RANDOM

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def valid_neighbors(self, board: "Board",
                        current_location: Location) -> List[Location]:
        neighbors = []
        for direction in Direction:
            candidate = current_location.move_in_direction(direction)
            if board.is_location_valid(candidate):
                neighbors.append(candidate)
        return neighbors

    def move_to(self, board: "Board", current_location: Location) -> Location:
        neighbors = self.valid_neighbors(board, current_location)
        if not neighbors:
            return current_location
        # Uniform over the valid subset, not over all four directions
        idx = self.rng.integers(len(neighbors))
        return neighbors[idx]


class UpMovementStrategy(MovementStrategy):
    """Deterministic strategy for tests: step up when possible, else stay."""

    strategy_type = MovementStrategyType.UP

    def move_to(self, board: "Board", current_location: Location) -> Location:
        candidate = current_location.move_in_direction(Direction.UP)
        if board.is_location_valid(candidate):
            return candidate
        return current_location


def create_movement_strategy(
    strategy_type: MovementStrategyType,
    rng: Optional[np.random.Generator] = None
) -> MovementStrategy:
    """Build the strategy for `strategy_type`."""
    if strategy_type is MovementStrategyType.STATIONARY:
        return StationaryMovementStrategy()
    if strategy_type is MovementStrategyType.RANDOM:
        return RandomMovementStrategy(rng)
    if strategy_type is MovementStrategyType.UP:
        return UpMovementStrategy()
    raise ValueError(f"Unknown movement strategy type: {strategy_type!r}")
