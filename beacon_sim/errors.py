"""Exception types raised by the beacon localization simulator."""


class SimulationError(Exception):
    """Base class for all simulator errors."""


class InvalidLocationError(SimulationError, ValueError):
    """Location is missing or outside the board boundaries."""


class NullAgentError(SimulationError, ValueError):
    """An agent argument was None."""


class InvalidConfigurationError(SimulationError, ValueError):
    """Simulation parameters violate a construction invariant."""


class UnknownTransmissionError(SimulationError, KeyError):
    """Resolver received a transmission that maps to no known beacon."""


class ExceedingRoundError(SimulationError):
    """Requested round index is not below the simulation's round count."""

    def __init__(self, simulation_id: str, round_index: int, max_rounds: int):
        self.simulation_id = simulation_id
        self.round_index = round_index
        self.max_rounds = max_rounds
        super().__init__(
            f"Provided round {round_index} exceeds maximum number of rounds "
            f"({max_rounds}) of simulation {simulation_id}"
        )


class NegativeRoundError(SimulationError, ValueError):
    """Requested round index is below zero."""

    def __init__(self, simulation_id: str, round_index: int):
        self.simulation_id = simulation_id
        self.round_index = round_index
        super().__init__(
            f"Provided round {round_index} of simulation {simulation_id} is negative"
        )


class DuplicateSnapshotError(SimulationError):
    """A board snapshot for this (simulation, round, board kind) already exists."""

    def __init__(self, simulation_id: str, round_index: int, is_real: bool):
        self.simulation_id = simulation_id
        self.round_index = round_index
        self.is_real = is_real
        kind = "real" if is_real else "estimated"
        super().__init__(
            f"A {kind} board state for round {round_index} of simulation "
            f"{simulation_id} already exists"
        )


class DuplicateStatisticsError(SimulationError):
    """Final statistics for this simulation were already written."""

    def __init__(self, simulation_id: str):
        self.simulation_id = simulation_id
        super().__init__(f"Statistics of simulation {simulation_id} already exist")


class SnapshotNotFoundError(SimulationError, LookupError):
    """No board snapshot stored for the requested key."""


class SimulationNotFoundError(SimulationError, LookupError):
    """No simulation metadata stored under the requested id."""
