"""Tests for beacon_sim.export.store module."""

from __future__ import annotations

import pytest

from beacon_sim.errors import (
    DuplicateSnapshotError,
    DuplicateStatisticsError,
    ExceedingRoundError,
    NegativeRoundError,
    SimulationNotFoundError,
    SnapshotNotFoundError,
)
from beacon_sim.export.store import MemoryStore, SimulationMetadata
from beacon_sim.model.statistics import DistanceStats, SimulationStatistics

from conftest import build_config


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def metadata() -> SimulationMetadata:
    return SimulationMetadata.from_config(
        build_config(rows=4, cols=5, max_rounds=3, observers=2, cycle=4, duration=1))


def empty_statistics() -> SimulationStatistics:
    return SimulationStatistics(distance=DistanceStats(), beacons={})


class TestSimulationMetadata:
    def test_from_config(self, metadata: SimulationMetadata) -> None:
        assert metadata.max_rounds == 3
        assert metadata.awakeness_strategy == "FIXED"
        assert metadata.observer_movement_strategy == "STATIONARY"
        assert metadata.threshold_radius == 1.0

    def test_derived_ratios(self, metadata: SimulationMetadata) -> None:
        assert metadata.observers_density == pytest.approx(2 / 20)
        assert metadata.awakeness_ratio == pytest.approx(0.25)

    @pytest.mark.parametrize("round_index,expected", [
        (-1, False), (0, True), (2, True), (3, False),
    ])
    def test_round_range(self, metadata: SimulationMetadata, round_index: int,
                         expected: bool) -> None:
        assert metadata.is_round_in_range(round_index) is expected


class TestMemoryStore:
    def test_ids_are_unique(self, store: MemoryStore, metadata: SimulationMetadata) -> None:
        ids = {store.write_simulation_metadata(metadata) for _ in range(10)}
        assert len(ids) == 10
        assert set(store.list_simulations()) == ids

    def test_snapshot_round_trip(self, store: MemoryStore,
                                 metadata: SimulationMetadata) -> None:
        sid = store.write_simulation_metadata(metadata)
        store.write_round_snapshot(sid, 1, True, {(0, 0): ('Beacon0',)})
        store.write_round_snapshot(sid, 1, False, {(1, 2): ('Beacon0',)})
        assert store.read_round_snapshot(sid, 1, True) == {(0, 0): ('Beacon0',)}
        assert store.read_round_snapshot(sid, 1, False) == {(1, 2): ('Beacon0',)}

    def test_duplicate_snapshot(self, store: MemoryStore,
                                metadata: SimulationMetadata) -> None:
        sid = store.write_simulation_metadata(metadata)
        store.write_round_snapshot(sid, 0, True, {})
        with pytest.raises(DuplicateSnapshotError) as exc_info:
            store.write_round_snapshot(sid, 0, True, {})
        assert exc_info.value.round_index == 0

    @pytest.mark.parametrize("round_index", [3, 4])
    def test_write_outside_rounds(self, store: MemoryStore, metadata: SimulationMetadata,
                                  round_index: int) -> None:
        sid = store.write_simulation_metadata(metadata)
        with pytest.raises(ExceedingRoundError):
            store.write_round_snapshot(sid, round_index, True, {})

    @pytest.mark.parametrize("round_index", [-1, -5])
    def test_negative_round_rejected(self, store: MemoryStore, metadata: SimulationMetadata,
                                     round_index: int) -> None:
        sid = store.write_simulation_metadata(metadata)
        with pytest.raises(NegativeRoundError, match="negative"):
            store.write_round_snapshot(sid, round_index, True, {})
        with pytest.raises(NegativeRoundError):
            store.read_round_snapshot(sid, round_index, False)

    def test_read_outside_rounds(self, store: MemoryStore,
                                 metadata: SimulationMetadata) -> None:
        sid = store.write_simulation_metadata(metadata)
        with pytest.raises(ExceedingRoundError) as exc_info:
            store.read_round_snapshot(sid, 3, True)
        assert exc_info.value.max_rounds == 3

    def test_missing_snapshot(self, store: MemoryStore,
                              metadata: SimulationMetadata) -> None:
        sid = store.write_simulation_metadata(metadata)
        with pytest.raises(SnapshotNotFoundError):
            store.read_round_snapshot(sid, 2, False)

    def test_unknown_simulation(self, store: MemoryStore) -> None:
        with pytest.raises(SimulationNotFoundError):
            store.read_round_snapshot("missing", 0, True)

    def test_statistics_written_once(self, store: MemoryStore,
                                     metadata: SimulationMetadata) -> None:
        sid = store.write_simulation_metadata(metadata)
        statistics = empty_statistics()
        store.write_final_statistics(sid, statistics)
        assert store.read_final_statistics(sid) is statistics
        with pytest.raises(DuplicateStatisticsError):
            store.write_final_statistics(sid, empty_statistics())

    def test_delete_simulation(self, store: MemoryStore,
                               metadata: SimulationMetadata) -> None:
        keep = store.write_simulation_metadata(metadata)
        drop = store.write_simulation_metadata(metadata)
        for sid in (keep, drop):
            store.write_round_snapshot(sid, 0, True, {})
        store.write_final_statistics(drop, empty_statistics())

        store.delete_simulation(drop)

        assert list(store.list_simulations()) == [keep]
        assert store.rounds_written(drop) == []
        assert store.rounds_written(keep) == [0]
        with pytest.raises(SimulationNotFoundError):
            store.read_final_statistics(drop)

    def test_delete_unknown_simulation(self, store: MemoryStore) -> None:
        with pytest.raises(SimulationNotFoundError):
            store.delete_simulation("missing")
