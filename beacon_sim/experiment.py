"""Parameter sweeps running one simulation per valid configuration."""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from .config import ParameterRange, SimulationConfig, validate_config, with_parameters
from .export.store import MemoryStore, SimulationMetadata, SnapshotStore
from .model.engine import SimulationEngine
from .model.statistics import SimulationStatistics

logger = logging.getLogger(__name__)


@dataclass
class ExperimentResult:
    """Simulations run by an experiment with their metadata and statistics."""
    title: str
    simulation_ids: List[str] = field(default_factory=list)
    metadata: Dict[str, SimulationMetadata] = field(default_factory=dict)
    statistics: Dict[str, SimulationStatistics] = field(default_factory=dict)

    def average_distance(self) -> Optional[float]:
        """Mean of the per-simulation average distances (located runs only)."""
        averages = [s.distance.avg for s in self.statistics.values()
                    if s.distance.avg is not None]
        return float(np.mean(averages)) if averages else None

    def rows(self) -> List[Dict]:
        """One flat record per simulation, for tabular export."""
        records = []
        for simulation_id in self.simulation_ids:
            meta = self.metadata[simulation_id]
            stats = self.statistics[simulation_id]
            percents = list(stats.observed_percent.values())
            records.append({
                'simulation_id': simulation_id,
                'max_rounds': meta.max_rounds,
                'rows': meta.rows,
                'cols': meta.cols,
                'observers_count': meta.observers_count,
                'awakeness_cycle': meta.awakeness_cycle,
                'awakeness_duration': meta.awakeness_duration,
                'threshold_radius': meta.threshold_radius,
                'observers_density': meta.observers_density,
                'awakeness_ratio': meta.awakeness_ratio,
                'avg_distance': stats.distance.avg,
                'mean_observed_percent': float(np.mean(percents)) if percents else 0.0,
            })
        return records


def expand_configurations(base: SimulationConfig,
                          ranges: Dict[str, ParameterRange]) -> List[SimulationConfig]:
    """
    Cartesian product of the parameter ranges applied to `base`.
    Combinations violating a configuration invariant are dropped.
    """
    names = sorted(ranges)
    value_lists = [ranges[name].values() for name in names]

    configs = []
    for combination in itertools.product(*value_lists):
        config = with_parameters(base, dict(zip(names, combination)))
        problems = validate_config(config)
        if problems:
            logger.debug("Skipping configuration %s: %s",
                         dict(zip(names, combination)), " ".join(problems))
            continue
        configs.append(config)
    return configs


def run_experiment(title: str, configs: List[SimulationConfig],
                   store: Optional[SnapshotStore] = None,
                   seed: Optional[int] = None) -> ExperimentResult:
    """Run every configuration in turn with a shared, seeded generator."""
    store = store if store is not None else MemoryStore()
    rng = np.random.default_rng(seed)
    result = ExperimentResult(title=title)

    logger.info("Experiment '%s': %d simulations", title, len(configs))
    for config in configs:
        engine = SimulationEngine(config, store=store, rng=rng)
        statistics = engine.run()
        result.simulation_ids.append(engine.simulation_id)
        result.metadata[engine.simulation_id] = store.read_simulation_metadata(
            engine.simulation_id)
        result.statistics[engine.simulation_id] = statistics
    return result
