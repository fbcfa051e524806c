"""Tests for beacon_sim.model.engine module."""

from __future__ import annotations

import pytest

from beacon_sim.errors import (
    DuplicateSnapshotError,
    DuplicateStatisticsError,
    ExceedingRoundError,
    InvalidConfigurationError,
)
from beacon_sim.export.store import MemoryStore
from beacon_sim.model.awakeness import FixedAwakenessStrategy
from beacon_sim.model.engine import SimulationEngine
from beacon_sim.model.location import Location
from beacon_sim.model.movement import MovementStrategyType

from conftest import build_config


def single_cell_engine(max_rounds: int = 5) -> SimulationEngine:
    config = build_config(rows=1, cols=1, max_rounds=max_rounds)
    return SimulationEngine(config, beacon_locations=[Location(0, 0)],
                            observer_locations=[Location(0, 0)])


class TestConstruction:
    @pytest.mark.parametrize("overrides", [
        {'rows': 0},
        {'cols': -1},
        {'beacons': 0},
        {'observers': 0},
        {'cycle': 2, 'duration': 3},
        {'duration': 0},
        {'radius': 0.0},
        {'max_rounds': 0},
    ])
    def test_invalid_configuration_rejected(self, overrides: dict) -> None:
        with pytest.raises(InvalidConfigurationError):
            SimulationEngine(build_config(**overrides))

    def test_missing_strategy_rejected(self) -> None:
        config = build_config()
        config.beacons.movement = None
        with pytest.raises(InvalidConfigurationError):
            SimulationEngine(config)

    def test_agents_spawned_on_board(self) -> None:
        engine = SimulationEngine(build_config(beacons=3, observers=4))
        assert len(engine.beacons) == 3
        assert len(engine.observers) == 4
        assert engine.board.agent_count() == 7

    def test_metadata_written(self) -> None:
        store = MemoryStore()
        engine = SimulationEngine(build_config(rows=4, cols=6, observers=3), store=store)
        metadata = store.read_simulation_metadata(engine.simulation_id)
        assert metadata.rows == 4
        assert metadata.cols == 6
        assert metadata.observers_count == 3
        assert metadata.beacon_movement_strategy == "STATIONARY"


class TestLifecycle:
    def test_step_before_start_raises(self) -> None:
        with pytest.raises(RuntimeError):
            single_cell_engine().step()

    def test_start_twice_raises(self) -> None:
        engine = single_cell_engine()
        engine.start()
        with pytest.raises(RuntimeError):
            engine.start()

    def test_step_after_finish_raises(self) -> None:
        engine = single_cell_engine(max_rounds=2)
        engine.run()
        with pytest.raises(RuntimeError):
            engine.step()

    def test_finish_before_last_round_raises(self) -> None:
        engine = single_cell_engine(max_rounds=3)
        engine.start()
        with pytest.raises(RuntimeError):
            engine.finish()

    def test_finish_is_idempotent(self) -> None:
        engine = single_cell_engine(max_rounds=3)
        first = engine.run()
        assert engine.finish() is first

    def test_runs_max_rounds_minus_one_steps(self) -> None:
        engine = single_cell_engine(max_rounds=7)
        engine.run()
        assert engine.current_round == 6
        assert engine.store.rounds_written(engine.simulation_id) == list(range(7))

    def test_single_round_simulation(self) -> None:
        engine = single_cell_engine(max_rounds=1)
        statistics = engine.run()
        assert engine.current_round == 0
        assert statistics.observed_percent == {0: 0.0}
        assert statistics.distance.avg is None


class TestSnapshots:
    def test_round_zero_contents(self) -> None:
        engine = single_cell_engine()
        engine.start()
        assert engine.read_board_state(0, is_real=True) == {(0, 0): ('Beacon0', 'Observer0')}
        assert engine.read_board_state(0, is_real=False) == {}

    def test_estimate_appears_after_first_round(self) -> None:
        engine = single_cell_engine()
        engine.start()
        engine.step()
        assert engine.read_board_state(1, is_real=False) == {(0, 0): ('Beacon0',)}

    def test_reading_beyond_last_round_raises(self) -> None:
        engine = single_cell_engine(max_rounds=3)
        engine.run()
        with pytest.raises(ExceedingRoundError):
            engine.read_board_state(3)

    def test_duplicate_snapshot_rejected(self) -> None:
        engine = single_cell_engine()
        engine.start()
        with pytest.raises(DuplicateSnapshotError):
            engine.store.write_round_snapshot(engine.simulation_id, 0, True, {})

    def test_duplicate_statistics_rejected(self) -> None:
        engine = single_cell_engine(max_rounds=2)
        statistics = engine.run()
        with pytest.raises(DuplicateStatisticsError):
            engine.store.write_final_statistics(engine.simulation_id, statistics)

    def test_board_state_clamped_to_final_round(self) -> None:
        engine = single_cell_engine(max_rounds=4)
        engine.run()
        state = engine.board_state(is_real=True)
        assert state.round == 3
        assert state.contents == {(0, 0): ('Beacon0', 'Observer0')}

    def test_dense_grid_view(self) -> None:
        config = build_config(rows=2, cols=3)
        engine = SimulationEngine(config, beacon_locations=[Location(1, 2)],
                                  observer_locations=[Location(0, 0)])
        state = engine.start()
        assert state.real.to_grid() == [[['Observer0'], [], []],
                                        [[], [], ['Beacon0']]]
        assert state.estimated.to_grid() == [[[], [], []], [[], [], []]]
        assert state.boards == (state.real, state.estimated)

    def test_step_returns_both_boards(self) -> None:
        engine = single_cell_engine()
        engine.start()
        state = engine.step()
        assert state.round == 1
        assert state.real.is_real
        assert not state.estimated.is_real
        assert state.metrics['observed_beacons'] == 1
        assert state.metrics['located_beacons'] == 1


class TestStatistics:
    def test_always_observed_on_single_cell(self) -> None:
        engine = single_cell_engine(max_rounds=20)
        statistics = engine.run()
        assert statistics.observed_percent == {0: 100.0}
        assert statistics.distance.avg == 0.0
        assert statistics.distance.max == 0.0
        assert statistics.signed_intervals() == {0: [19]}

    def test_out_of_range_beacon_never_observed(self) -> None:
        config = build_config(rows=1, cols=10, max_rounds=8, radius=1.0)
        engine = SimulationEngine(config, beacon_locations=[Location(0, 0)],
                                  observer_locations=[Location(0, 9)])
        statistics = engine.run()
        assert statistics.observed_percent == {0: 0.0}
        assert statistics.distance.rounds_counted == 0
        assert statistics.distance.avg is None
        assert engine.read_board_state(7, is_real=False) == {}

    def test_beacon_at_exactly_threshold_radius_observed(self) -> None:
        config = build_config(rows=1, cols=3, max_rounds=5, radius=2.0)
        engine = SimulationEngine(config, beacon_locations=[Location(0, 0)],
                                  observer_locations=[Location(0, 2)])
        statistics = engine.run()
        assert statistics.observed_percent == {0: 100.0}
        assert statistics.distance.avg == 2.0

    def test_beacon_just_beyond_threshold_radius_unobserved(self) -> None:
        config = build_config(rows=1, cols=3, max_rounds=5, radius=1.5)
        engine = SimulationEngine(config, beacon_locations=[Location(0, 0)],
                                  observer_locations=[Location(0, 2)])
        assert engine.run().observed_percent == {0: 0.0}

    def test_approaching_observer_distances(self) -> None:
        config = build_config(rows=5, cols=1, max_rounds=6, radius=10.0,
                              observer_movement=MovementStrategyType.UP)
        engine = SimulationEngine(config, beacon_locations=[Location(0, 0)],
                                  observer_locations=[Location(4, 0)])
        statistics = engine.run()
        # per-round distances: 3, 3, 2, 1, 1
        assert statistics.distance.min == 1.0
        assert statistics.distance.max == 3.0
        assert statistics.distance.avg == pytest.approx(2.0)
        assert statistics.distance.rounds_counted == 5
        assert engine.resolver.estimated_location(engine.beacons[0]) == Location(1, 0)

    def test_asleep_observer_sees_nothing(self) -> None:
        engine = single_cell_engine(max_rounds=3)
        engine.observers[0].awakeness_strategy = FixedAwakenessStrategy(5, 1, 3)
        statistics = engine.run()
        assert statistics.observed_percent == {0: 0.0}
        assert statistics.signed_intervals() == {0: [-2]}

    def test_statistics_stored(self) -> None:
        engine = single_cell_engine(max_rounds=3)
        statistics = engine.run()
        assert engine.store.read_final_statistics(engine.simulation_id) is statistics

    def test_seed_makes_runs_reproducible(self) -> None:
        def contents(seed: int) -> list:
            config = build_config(rows=8, cols=8, max_rounds=15, beacons=3, observers=4,
                                  observer_movement=MovementStrategyType.RANDOM,
                                  cycle=4, duration=2, radius=2.0, seed=seed)
            engine = SimulationEngine(config)
            engine.run()
            return [engine.read_board_state(r, is_real) for r in range(15)
                    for is_real in (True, False)]

        assert contents(3) == contents(3)

    def test_summary(self) -> None:
        engine = single_cell_engine(max_rounds=4)
        engine.run()
        summary = engine.get_summary()
        assert summary['total_rounds'] == 3
        assert summary['located_beacons'] == 1
        assert summary['avg'] == 0.0
