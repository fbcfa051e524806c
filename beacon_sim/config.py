"""Configuration dataclasses and YAML loader for the beacon simulation."""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar
import numpy as np
import yaml

from .errors import InvalidConfigurationError
from .model.awakeness import AwakenessStrategyType
from .model.movement import MovementStrategyType

E = TypeVar('E', bound=Enum)


@dataclass
class GridConfig:
    rows: int
    cols: int


@dataclass
class BeaconConfig:
    count: int
    movement: Optional[MovementStrategyType]


@dataclass
class ObserverConfig:
    count: int
    movement: Optional[MovementStrategyType]


@dataclass
class AwakenessConfig:
    strategy: Optional[AwakenessStrategyType]
    cycle: int     # rounds per duty cycle
    duration: int  # awake rounds per cycle


@dataclass
class TransmissionConfig:
    threshold_radius: float  # max Manhattan distance for a sighting


@dataclass
class ParameterRange:
    """Inclusive arithmetic range of values for an experiment sweep."""
    lower: float
    upper: float
    step: float

    def values(self) -> List[float]:
        """Values lower + i * step up to upper, inclusive within float tolerance."""
        if self.step <= 0:
            raise InvalidConfigurationError(
                f"Range step must be positive, got {self.step}")
        count = int(np.floor((self.upper - self.lower) / self.step + 1e-9)) + 1
        return [self.lower + i * self.step for i in range(max(count, 0))]


@dataclass
class ExperimentConfig:
    title: str
    ranges: Dict[str, ParameterRange] = field(default_factory=dict)


@dataclass
class SimulationConfig:
    grid: GridConfig
    max_rounds: int
    beacons: BeaconConfig
    observers: ObserverConfig
    awakeness: AwakenessConfig
    transmission: TransmissionConfig
    description: str = ""

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))
    experiment: Optional[ExperimentConfig] = None


# Sweepable parameter name -> (config section, attribute)
PARAMETERS = {
    'max_rounds': (None, 'max_rounds'),
    'rows': ('grid', 'rows'),
    'cols': ('grid', 'cols'),
    'beacons_count': ('beacons', 'count'),
    'observers_count': ('observers', 'count'),
    'awakeness_cycle': ('awakeness', 'cycle'),
    'awakeness_duration': ('awakeness', 'duration'),
    'threshold_radius': ('transmission', 'threshold_radius'),
}


def validate_config(config: SimulationConfig) -> List[str]:
    """Return every violated construction invariant (empty if valid)."""
    problems = []
    if config.grid.rows <= 0 or config.grid.cols <= 0:
        problems.append("Board dimensions must be positive.")
    if config.beacons.count <= 0 or config.observers.count <= 0:
        problems.append("Number of beacons and number of observers must be positive.")
    if config.awakeness.cycle <= 0 or config.awakeness.duration <= 0:
        problems.append("Both awakeness cycle and duration must be positive.")
    if config.awakeness.cycle < config.awakeness.duration:
        problems.append("Awakeness cycle must be greater or equal to duration.")
    if config.transmission.threshold_radius <= 0:
        problems.append("Transmission threshold radius must be positive.")
    if config.max_rounds <= 0:
        problems.append("Maximum number of rounds must be positive.")
    if config.beacons.movement is None:
        problems.append("No beacon movement strategy has been set.")
    if config.observers.movement is None:
        problems.append("No observer movement strategy has been set.")
    if config.awakeness.strategy is None:
        problems.append("No awakeness strategy type has been set.")
    return problems


def check_config(config: SimulationConfig) -> SimulationConfig:
    """Raise InvalidConfigurationError listing all problems, else return config."""
    problems = validate_config(config)
    if problems:
        raise InvalidConfigurationError(" ".join(problems))
    return config


def with_parameters(config: SimulationConfig, values: Dict[str, Any]) -> SimulationConfig:
    """Return a copy of config with sweepable parameters replaced."""
    updated = replace(config)
    for name, value in values.items():
        if name not in PARAMETERS:
            raise InvalidConfigurationError(f"Unknown parameter: {name}")
        section, attribute = PARAMETERS[name]
        if attribute != 'threshold_radius':
            value = int(value)
        if section is None:
            updated = replace(updated, **{attribute: value})
        else:
            sub = replace(getattr(updated, section), **{attribute: value})
            updated = replace(updated, **{section: sub})
    return updated


def parse_strategy(enum_type: Type[E], name: Optional[str]) -> Optional[E]:
    """Parse a strategy name case-insensitively; None stays None."""
    if name is None:
        return None
    for member in enum_type:
        if member.name.lower() == str(name).lower():
            return member
    known = ", ".join(m.name for m in enum_type)
    raise InvalidConfigurationError(
        f"Unknown {enum_type.__name__} '{name}' (expected one of: {known})")


def list_strategies() -> Dict[str, List[str]]:
    """Strategy names selectable from configuration (test-only ones hidden)."""
    return {
        'movement': [m.name for m in MovementStrategyType if not m.is_for_test],
        'awakeness': [a.name for a in AwakenessStrategyType if not a.is_for_test],
    }


def _parse_ranges(ranges_raw: Dict[str, Dict]) -> Dict[str, ParameterRange]:
    """Parse experiment parameter ranges from raw YAML data."""
    ranges = {}
    for name, r in ranges_raw.items():
        if name not in PARAMETERS:
            raise InvalidConfigurationError(f"Unknown experiment parameter: {name}")
        ranges[name] = ParameterRange(
            lower=r['lower'],
            upper=r.get('upper', r['lower']),
            step=r.get('step', 1)
        )
    return ranges


def load_config(config_path: Path) -> SimulationConfig:
    """Load YAML configuration file and validate it."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)

    grid = GridConfig(
        rows=raw['grid']['rows'],
        cols=raw['grid']['cols']
    )

    beacons_raw = raw['beacons']
    beacons = BeaconConfig(
        count=beacons_raw['count'],
        movement=parse_strategy(MovementStrategyType,
                                beacons_raw.get('movement', 'stationary'))
    )

    observers_raw = raw['observers']
    observers = ObserverConfig(
        count=observers_raw['count'],
        movement=parse_strategy(MovementStrategyType,
                                observers_raw.get('movement', 'random'))
    )

    awake_raw = raw['awakeness']
    awakeness = AwakenessConfig(
        strategy=parse_strategy(AwakenessStrategyType,
                                awake_raw.get('strategy', 'random')),
        cycle=awake_raw['cycle'],
        duration=awake_raw['duration']
    )

    transmission = TransmissionConfig(
        threshold_radius=float(raw['transmission']['threshold_radius'])
    )

    sim_raw = raw['simulation']

    # Parse export config (optional)
    export_raw = raw.get('export', {})

    experiment = None
    if 'experiment' in raw:
        exp_raw = raw['experiment']
        experiment = ExperimentConfig(
            title=exp_raw.get('title', 'experiment'),
            ranges=_parse_ranges(exp_raw.get('ranges', {}))
        )

    config = SimulationConfig(
        grid=grid,
        max_rounds=sim_raw['max_rounds'],
        beacons=beacons,
        observers=observers,
        awakeness=awakeness,
        transmission=transmission,
        description=sim_raw.get('description', ''),
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False),
        seed=sim_raw.get('seed'),
        experiment=experiment
    )
    return check_config(config)
