"""Shared fixtures for beacon_sim tests."""

from __future__ import annotations

from typing import Callable

import pytest

from beacon_sim.config import (
    AwakenessConfig,
    BeaconConfig,
    GridConfig,
    ObserverConfig,
    SimulationConfig,
    TransmissionConfig,
)
from beacon_sim.model.awakeness import AwakenessStrategyType
from beacon_sim.model.movement import MovementStrategyType


def build_config(rows: int = 5, cols: int = 5, max_rounds: int = 10,
                 beacons: int = 1, observers: int = 1,
                 beacon_movement: MovementStrategyType = MovementStrategyType.STATIONARY,
                 observer_movement: MovementStrategyType = MovementStrategyType.STATIONARY,
                 awakeness: AwakenessStrategyType = AwakenessStrategyType.FIXED,
                 cycle: int = 1, duration: int = 1,
                 radius: float = 1.0, seed: int = 0) -> SimulationConfig:
    return SimulationConfig(
        grid=GridConfig(rows=rows, cols=cols),
        max_rounds=max_rounds,
        beacons=BeaconConfig(count=beacons, movement=beacon_movement),
        observers=ObserverConfig(count=observers, movement=observer_movement),
        awakeness=AwakenessConfig(strategy=awakeness, cycle=cycle, duration=duration),
        transmission=TransmissionConfig(threshold_radius=radius),
        description="test",
        seed=seed,
    )


@pytest.fixture
def make_config() -> Callable[..., SimulationConfig]:
    return build_config
