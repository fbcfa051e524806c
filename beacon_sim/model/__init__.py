"""Model package for the beacon localization simulation."""

from .location import Direction, Location
from .agent import Agent, Beacon, BeaconFactory, Observer, ObserverFactory, Transmission
from .board import Board, EstimatedBoard, RealBoard
from .movement import (
    MovementStrategy,
    MovementStrategyType,
    RandomMovementStrategy,
    StationaryMovementStrategy,
    UpMovementStrategy,
    create_movement_strategy,
)
from .awakeness import (
    AwakenessStrategy,
    AwakenessStrategyType,
    FixedAwakenessStrategy,
    RandomAwakenessStrategy,
    create_awakeness_strategy,
)
from .resolver import GlobalResolver
from .statistics import (
    BeaconObservationStats,
    DistanceStats,
    ObservedInterval,
    SimulationStatistics,
)
from .state import BoardState, RoundState, parse_agent_tag

# SimulationEngine: import from .engine (beacon_sim.config imports this package)

__all__ = [
    'Direction',
    'Location',
    'Agent',
    'Beacon',
    'BeaconFactory',
    'Observer',
    'ObserverFactory',
    'Transmission',
    'Board',
    'EstimatedBoard',
    'RealBoard',
    'MovementStrategy',
    'MovementStrategyType',
    'RandomMovementStrategy',
    'StationaryMovementStrategy',
    'UpMovementStrategy',
    'create_movement_strategy',
    'AwakenessStrategy',
    'AwakenessStrategyType',
    'FixedAwakenessStrategy',
    'RandomAwakenessStrategy',
    'create_awakeness_strategy',
    'GlobalResolver',
    'BeaconObservationStats',
    'DistanceStats',
    'ObservedInterval',
    'SimulationStatistics',
    'BoardState',
    'RoundState',
    'parse_agent_tag',
]
