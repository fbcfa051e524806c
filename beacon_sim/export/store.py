"""Persistence boundary for simulation metadata, board snapshots and statistics."""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Tuple, TYPE_CHECKING

from ..errors import (
    DuplicateSnapshotError,
    DuplicateStatisticsError,
    ExceedingRoundError,
    NegativeRoundError,
    SimulationNotFoundError,
    SnapshotNotFoundError,
)
from ..model.state import BoardContents
from ..model.statistics import SimulationStatistics

if TYPE_CHECKING:
    from ..config import SimulationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationMetadata:
    """Configuration values recorded for a simulation run."""
    description: str
    max_rounds: int
    beacons_count: int
    observers_count: int
    rows: int
    cols: int
    beacon_movement_strategy: str
    observer_movement_strategy: str
    awakeness_strategy: str
    threshold_radius: float
    awakeness_cycle: int
    awakeness_duration: int

    @classmethod
    def from_config(cls, config: "SimulationConfig") -> "SimulationMetadata":
        return cls(
            description=config.description,
            max_rounds=config.max_rounds,
            beacons_count=config.beacons.count,
            observers_count=config.observers.count,
            rows=config.grid.rows,
            cols=config.grid.cols,
            beacon_movement_strategy=config.beacons.movement.name,
            observer_movement_strategy=config.observers.movement.name,
            awakeness_strategy=config.awakeness.strategy.name,
            threshold_radius=config.transmission.threshold_radius,
            awakeness_cycle=config.awakeness.cycle,
            awakeness_duration=config.awakeness.duration,
        )

    @property
    def observers_density(self) -> float:
        return self.observers_count / (self.rows * self.cols)

    @property
    def awakeness_ratio(self) -> float:
        return self.awakeness_duration / self.awakeness_cycle

    def is_round_in_range(self, round_index: int) -> bool:
        return 0 <= round_index < self.max_rounds


class SnapshotStore(ABC):
    """
    Storage collaborator called by the simulation engine.

    Implementations must reject a second snapshot for the same
    (simulation, round, board kind), a second statistics write, and any
    round index at or beyond the simulation's round count.
    """

    @abstractmethod
    def write_simulation_metadata(self, metadata: SimulationMetadata) -> str:
        """Store metadata and return the new simulation id."""

    @abstractmethod
    def read_simulation_metadata(self, simulation_id: str) -> SimulationMetadata:
        ...

    @abstractmethod
    def write_round_snapshot(self, simulation_id: str, round_index: int,
                             is_real: bool, contents: BoardContents) -> None:
        ...

    @abstractmethod
    def read_round_snapshot(self, simulation_id: str, round_index: int,
                            is_real: bool) -> BoardContents:
        ...

    @abstractmethod
    def write_final_statistics(self, simulation_id: str,
                               statistics: SimulationStatistics) -> None:
        ...

    @abstractmethod
    def read_final_statistics(self, simulation_id: str) -> SimulationStatistics:
        ...

    @abstractmethod
    def list_simulations(self) -> Dict[str, SimulationMetadata]:
        ...

    @abstractmethod
    def delete_simulation(self, simulation_id: str) -> None:
        ...

    def check_round(self, simulation_id: str, round_index: int) -> None:
        """
        Raise NegativeRoundError for round_index < 0 and ExceedingRoundError
        for round_index >= the simulation's round count.
        """
        metadata = self.read_simulation_metadata(simulation_id)
        if round_index < 0:
            raise NegativeRoundError(simulation_id, round_index)
        if not metadata.is_round_in_range(round_index):
            raise ExceedingRoundError(simulation_id, round_index, metadata.max_rounds)


class MemoryStore(SnapshotStore):
    """In-process SnapshotStore backed by dictionaries."""

    def __init__(self):
        self.metadata: Dict[str, SimulationMetadata] = {}
        self.snapshots: Dict[Tuple[str, int, bool], BoardContents] = {}
        self.statistics: Dict[str, SimulationStatistics] = {}

    def write_simulation_metadata(self, metadata: SimulationMetadata) -> str:
        simulation_id = uuid.uuid4().hex
        self.metadata[simulation_id] = metadata
        logger.debug("Stored metadata for simulation %s", simulation_id)
        return simulation_id

    def read_simulation_metadata(self, simulation_id: str) -> SimulationMetadata:
        try:
            return self.metadata[simulation_id]
        except KeyError:
            raise SimulationNotFoundError(simulation_id) from None

    def write_round_snapshot(self, simulation_id: str, round_index: int,
                             is_real: bool, contents: BoardContents) -> None:
        self.check_round(simulation_id, round_index)
        key = (simulation_id, round_index, is_real)
        if key in self.snapshots:
            raise DuplicateSnapshotError(simulation_id, round_index, is_real)
        self.snapshots[key] = {cell: tuple(tags) for cell, tags in contents.items()}
        logger.debug("Stored %s snapshot of round %d for simulation %s",
                     "real" if is_real else "estimated", round_index, simulation_id)

    def read_round_snapshot(self, simulation_id: str, round_index: int,
                            is_real: bool) -> BoardContents:
        self.check_round(simulation_id, round_index)
        try:
            return dict(self.snapshots[(simulation_id, round_index, is_real)])
        except KeyError:
            raise SnapshotNotFoundError(
                f"No {'real' if is_real else 'estimated'} snapshot for round "
                f"{round_index} of simulation {simulation_id}") from None

    def write_final_statistics(self, simulation_id: str,
                               statistics: SimulationStatistics) -> None:
        self.read_simulation_metadata(simulation_id)
        if simulation_id in self.statistics:
            raise DuplicateStatisticsError(simulation_id)
        self.statistics[simulation_id] = statistics

    def read_final_statistics(self, simulation_id: str) -> SimulationStatistics:
        try:
            return self.statistics[simulation_id]
        except KeyError:
            raise SimulationNotFoundError(
                f"No statistics for simulation {simulation_id}") from None

    def list_simulations(self) -> Dict[str, SimulationMetadata]:
        return dict(self.metadata)

    def delete_simulation(self, simulation_id: str) -> None:
        self.read_simulation_metadata(simulation_id)
        del self.metadata[simulation_id]
        self.statistics.pop(simulation_id, None)
        for key in [k for k in self.snapshots if k[0] == simulation_id]:
            del self.snapshots[key]
        logger.debug("Deleted simulation %s", simulation_id)

    def rounds_written(self, simulation_id: str) -> List[int]:
        return sorted({r for (sid, r, _) in self.snapshots if sid == simulation_id})
