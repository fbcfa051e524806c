"""Simulation engine for beacon localization."""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..config import SimulationConfig, check_config
from ..export.store import MemoryStore, SimulationMetadata, SnapshotStore
from .agent import Beacon, BeaconFactory, Observer, ObserverFactory
from .awakeness import create_awakeness_strategy
from .board import RealBoard
from .location import Location
from .movement import create_movement_strategy
from .resolver import GlobalResolver
from .state import BoardContents, BoardState, RoundState
from .statistics import (
    DistanceStats,
    ObservedInterval,
    SimulationStatistics,
    extend_intervals,
    observation_stats,
    update_distance_stats,
)

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Orchestrates the discrete-time tracing simulation.

    Round 0 is the initial placement. Every later round runs:
    1. Move beacons, then observers
    2. Update observers' awakeness
    3. Deliver transmissions to awake observers within the threshold radius
    4. Observers pass their transmissions to the resolver
    5. Resolver re-estimates beacon locations
    6. Snapshot real and estimated boards to the store
    7. Update distance statistics
    """

    def __init__(self, config: SimulationConfig,
                 store: Optional[SnapshotStore] = None,
                 rng: Optional[np.random.Generator] = None,
                 beacon_locations: Optional[Sequence[Location]] = None,
                 observer_locations: Optional[Sequence[Location]] = None):
        check_config(config)
        self.config = config
        self.store = store if store is not None else MemoryStore()
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.max_rounds = config.max_rounds
        self.threshold_radius = config.transmission.threshold_radius
        self.current_round = 0
        self._started = False
        self._complete = False

        self.board = RealBoard(config.grid.rows, config.grid.cols)
        self.beacons: List[Beacon] = []
        self.observers: List[Observer] = []
        self._spawn_beacons(beacon_locations)
        self.resolver = GlobalResolver(config.grid.rows, config.grid.cols, self.beacons)
        self._spawn_observers(observer_locations)

        self.simulation_id = self.store.write_simulation_metadata(
            SimulationMetadata.from_config(config))

        # Statistics accumulators
        self.distance_stats = DistanceStats()
        self.observed_rounds: Dict[int, int] = {b.id: 0 for b in self.beacons}
        self.observed_intervals: Dict[int, Tuple[ObservedInterval, ...]] = {
            b.id: () for b in self.beacons
        }
        self.statistics: Optional[SimulationStatistics] = None

    def _initial_locations(self, count: int,
                           locations: Optional[Sequence[Location]]) -> List[Location]:
        if locations is not None:
            if len(locations) != count:
                raise ValueError(
                    f"Expected {count} initial locations, got {len(locations)}")
            return list(locations)
        rows = self.rng.integers(0, self.config.grid.rows, size=count)
        cols = self.rng.integers(0, self.config.grid.cols, size=count)
        return [Location(int(r), int(c)) for r, c in zip(rows, cols)]

    def _spawn_beacons(self, locations: Optional[Sequence[Location]]) -> None:
        """Create beacons at random (or given) locations on the real board."""
        factory = BeaconFactory()
        for location in self._initial_locations(self.config.beacons.count, locations):
            movement = create_movement_strategy(self.config.beacons.movement, self.rng)
            self.beacons.append(factory.create_beacon(location, movement, self.board))

    def _spawn_observers(self, locations: Optional[Sequence[Location]]) -> None:
        """Create observers, each with its own awakeness strategy."""
        factory = ObserverFactory()
        awakeness = self.config.awakeness
        for location in self._initial_locations(self.config.observers.count, locations):
            movement = create_movement_strategy(self.config.observers.movement, self.rng)
            strategy = create_awakeness_strategy(
                awakeness.strategy, awakeness.cycle, awakeness.duration, self.rng)
            self.observers.append(factory.create_observer(
                location, movement, self.resolver, self.board, strategy))

    def start(self) -> RoundState:
        """Record round 0, the initial placement before any movement."""
        if self._started:
            raise RuntimeError(f"Simulation {self.simulation_id} already started")
        self._started = True
        logger.info("Simulation %s started: %dx%d board, %d beacons, %d observers, %d rounds",
                    self.simulation_id, self.config.grid.rows, self.config.grid.cols,
                    len(self.beacons), len(self.observers), self.max_rounds)
        return self._write_round_state({})

    def step(self) -> RoundState:
        """Execute one round and return its snapshot."""
        if not self._started:
            raise RuntimeError("Call start() before step()")
        if self.is_finished():
            raise RuntimeError(f"Simulation {self.simulation_id} has no rounds left")
        self.current_round += 1

        self.move_agents()
        self.update_observers_awakeness_state()
        observed = self.beacons_to_observers()
        self.observers_to_resolver()
        self.resolver.estimate()

        metrics = {
            'observed_beacons': sum(observed.values()),
            'awake_observers': sum(o.is_awake() for o in self.observers),
        }
        state = self._write_round_state(metrics)
        round_distances = self.update_distance_stats()
        state.distance = self.distance_stats
        state.metrics['located_beacons'] = len(round_distances)
        if round_distances:
            state.metrics['round_avg_distance'] = float(np.mean(round_distances))

        logger.debug("Round %d: %d/%d beacons observed, %d observers awake",
                     self.current_round, metrics['observed_beacons'],
                     len(self.beacons), metrics['awake_observers'])
        return state

    def move_agents(self) -> None:
        for beacon in self.beacons:
            beacon.move()
        for observer in self.observers:
            observer.move()

    def update_observers_awakeness_state(self) -> None:
        for observer in self.observers:
            observer.update_awakeness_state(self.current_round)

    def beacons_to_observers(self) -> Dict[int, bool]:
        """
        Deliver each beacon's transmission to every awake observer within
        the threshold radius. Returns beacon id -> observed this round.
        """
        observed_by_beacon = {}
        for beacon in self.beacons:
            transmission = beacon.transmit()
            observed = False
            for observer in self.observers:
                if not observer.is_awake():
                    continue
                if beacon.location.distance_to(observer.location) <= self.threshold_radius:
                    observer.observe(transmission)
                    observed = True
            self._record_observation(beacon, observed)
            observed_by_beacon[beacon.id] = observed
        return observed_by_beacon

    def observers_to_resolver(self) -> None:
        for observer in self.observers:
            observer.pass_information_to_resolver()

    def _record_observation(self, beacon: Beacon, observed: bool) -> None:
        if observed:
            self.observed_rounds[beacon.id] += 1
        self.observed_intervals[beacon.id] = extend_intervals(
            self.observed_intervals[beacon.id], self.current_round, observed)

    def update_distance_stats(self) -> List[float]:
        """Fold this round's estimate errors into the running statistics."""
        estimates = self.resolver.beacons_to_estimated_locations()
        distances = [float(estimate.distance_to(beacon.location))
                     for beacon, estimate in estimates.items()]
        self.distance_stats = update_distance_stats(self.distance_stats, distances)
        return distances

    def _write_round_state(self, metrics: Dict[str, float]) -> RoundState:
        real = BoardState.capture(self.board, self.simulation_id, self.current_round)
        estimated = BoardState.capture(self.resolver.board, self.simulation_id,
                                       self.current_round)
        self.store.write_round_snapshot(self.simulation_id, self.current_round,
                                        True, real.contents)
        self.store.write_round_snapshot(self.simulation_id, self.current_round,
                                        False, estimated.contents)
        return RoundState(
            round=self.current_round,
            real=real,
            estimated=estimated,
            distance=self.distance_stats,
            metrics=dict(metrics),
        )

    def is_finished(self) -> bool:
        """Check if all rounds have been executed."""
        return self._started and self.current_round >= self.max_rounds - 1

    def finish(self) -> SimulationStatistics:
        """Compute and store final statistics once the last round has run."""
        if not self.is_finished():
            raise RuntimeError(
                f"Simulation {self.simulation_id} stopped at round {self.current_round}")
        if self._complete:
            return self.statistics

        elapsed = self.current_round  # non-initial rounds
        self.statistics = SimulationStatistics(
            distance=self.distance_stats,
            beacons={
                b.id: observation_stats(b.id, self.observed_rounds[b.id], elapsed,
                                        self.observed_intervals[b.id])
                for b in self.beacons
            },
            intervals=dict(self.observed_intervals),
        )
        self.store.write_final_statistics(self.simulation_id, self.statistics)
        self._complete = True
        logger.info("Simulation %s complete after %d rounds", self.simulation_id,
                    self.current_round)
        return self.statistics

    def run(self) -> SimulationStatistics:
        """Run the entire simulation, writing every round to the store."""
        self.start()
        while not self.is_finished():
            self.step()
        return self.finish()

    def board_state(self, is_real: bool = True) -> BoardState:
        """Snapshot of the current round (the final round once finished)."""
        board = self.board if is_real else self.resolver.board
        return BoardState.capture(board, self.simulation_id,
                                  min(self.current_round, self.max_rounds - 1))

    def read_board_state(self, round_index: int, is_real: bool = True) -> BoardContents:
        """Read a stored snapshot; rounds >= max_rounds raise ExceedingRoundError."""
        return self.store.read_round_snapshot(self.simulation_id, round_index, is_real)

    def get_summary(self) -> Dict:
        """Get summary statistics for the simulation."""
        return {
            'simulation_id': self.simulation_id,
            'total_rounds': self.current_round,
            'beacons': len(self.beacons),
            'observers': len(self.observers),
            'located_beacons': len(self.resolver.beacons_to_estimated_locations()),
            **self.distance_stats.as_dict(),
        }
