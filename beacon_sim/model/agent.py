"""Beacon and observer agents living on the real board."""

from dataclasses import dataclass
from typing import List, TYPE_CHECKING

from .awakeness import AwakenessStrategy
from .location import Location
from .movement import MovementStrategy

if TYPE_CHECKING:
    from .board import Board
    from .resolver import GlobalResolver


@dataclass(frozen=True)
class Transmission:
    """Broadcast unit; carries the transmitting beacon's id."""
    beacon_id: int


class Agent:
    """
    Entity placed on a board and moved by a movement strategy.

    The agent's own `location` and the board cell that holds it are kept in
    step by `move()`; no other copy of positional truth exists.
    """

    type_name = "Agent"

    def __init__(self, agent_id: int, location: Location,
                 movement_strategy: MovementStrategy, board: "Board"):
        self.id = agent_id
        self.location = location
        self.movement_strategy = movement_strategy
        self.board = board

    @property
    def tag(self) -> str:
        """Type-tagged identifier used in board snapshots, e.g. 'Beacon3'."""
        return f"{self.type_name}{self.id}"

    def move(self) -> None:
        """Step according to the movement strategy and update the board."""
        new_location = self.movement_strategy.move_to(self.board, self.location)
        self.board.move_agent(self.location, new_location, self)
        self.location = new_location

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, location={self.location})"


class Beacon(Agent):
    """Transmits the same identifying transmission every round."""

    type_name = "Beacon"

    def __init__(self, agent_id: int, location: Location,
                 movement_strategy: MovementStrategy, board: "Board"):
        super().__init__(agent_id, location, movement_strategy, board)
        self._transmission = Transmission(agent_id)

    def transmit(self) -> Transmission:
        return self._transmission


class Observer(Agent):
    """
    Moves on the board, collects beacon transmissions while awake and passes
    them to its resolver once per round.
    """

    type_name = "Observer"

    def __init__(self, agent_id: int, location: Location,
                 movement_strategy: MovementStrategy,
                 resolver: "GlobalResolver", board: "Board",
                 awakeness_strategy: AwakenessStrategy):
        super().__init__(agent_id, location, movement_strategy, board)
        self.resolver = resolver
        self.awakeness_strategy = awakeness_strategy
        self.transmissions: List[Transmission] = []  # observed this round

    def is_awake(self) -> bool:
        return self.awakeness_strategy.is_awake()

    def update_awakeness_state(self, current_round: int) -> None:
        self.awakeness_strategy.update_awakeness_state(current_round)

    def observe(self, transmission: Transmission) -> None:
        """Buffer a transmission; callers only deliver while awake."""
        self.transmissions.append(transmission)

    def pass_information_to_resolver(self) -> None:
        self.resolver.receive_information(self.location, list(self.transmissions))
        self.transmissions.clear()


class BeaconFactory:
    """Creates beacons with consecutive ids and places them on the board."""

    def __init__(self, first_id: int = 0):
        self.next_id = first_id

    def create_beacon(self, location: Location,
                      movement_strategy: MovementStrategy,
                      board: "Board") -> Beacon:
        beacon = Beacon(self.next_id, location, movement_strategy, board)
        board.place_agent(location, beacon)
        self.next_id += 1
        return beacon


class ObserverFactory:
    """Creates observers with consecutive ids and places them on the board."""

    def __init__(self, first_id: int = 0):
        self.next_id = first_id

    def create_observer(self, location: Location,
                        movement_strategy: MovementStrategy,
                        resolver: "GlobalResolver", board: "Board",
                        awakeness_strategy: AwakenessStrategy) -> Observer:
        observer = Observer(self.next_id, location, movement_strategy,
                            resolver, board, awakeness_strategy)
        board.place_agent(location, observer)
        self.next_id += 1
        return observer
