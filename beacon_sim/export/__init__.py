"""I/O package for the beacon simulation."""

from .store import MemoryStore, SimulationMetadata, SnapshotStore
from .csv_writer import CSVWriter
from .visualizer import Visualizer
from .reporter import Reporter

__all__ = [
    'MemoryStore',
    'SimulationMetadata',
    'SnapshotStore',
    'CSVWriter',
    'Visualizer',
    'Reporter',
]
