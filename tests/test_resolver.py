"""Tests for beacon_sim.model.resolver module."""

from __future__ import annotations

import pytest

from beacon_sim.errors import UnknownTransmissionError
from beacon_sim.model.agent import Beacon, BeaconFactory, Transmission
from beacon_sim.model.board import RealBoard
from beacon_sim.model.location import Location
from beacon_sim.model.movement import StationaryMovementStrategy
from beacon_sim.model.resolver import GlobalResolver, mean_location


def make_beacons(count: int, rows: int = 5, cols: int = 5) -> list:
    board = RealBoard(rows, cols)
    factory = BeaconFactory()
    return [factory.create_beacon(Location(0, 0), StationaryMovementStrategy(), board)
            for _ in range(count)]


class TestMeanLocation:
    def test_exact_mean(self) -> None:
        assert mean_location([Location(0, 0), Location(2, 2)]) == Location(1, 1)

    def test_half_rounds_up(self) -> None:
        assert mean_location([Location(0, 0), Location(1, 3)]) == Location(1, 2)

    def test_below_half_rounds_down(self) -> None:
        assert mean_location([Location(0, 0), Location(0, 0), Location(1, 1)]) == Location(0, 0)

    def test_above_half_rounds_up(self) -> None:
        assert mean_location([Location(0, 0), Location(1, 1), Location(1, 1)]) == Location(1, 1)


class TestGlobalResolver:
    def test_single_report_places_beacon_at_reporter(self) -> None:
        [beacon] = make_beacons(1)
        resolver = GlobalResolver(5, 5, [beacon])
        resolver.receive_information(Location(3, 4), [beacon.transmit()])
        resolver.estimate()
        assert resolver.board.agents_on_board() == {Location(3, 4): frozenset({beacon})}
        assert resolver.estimated_location(beacon) == Location(3, 4)

    def test_two_reports_same_round_averaged(self) -> None:
        [beacon] = make_beacons(1)
        resolver = GlobalResolver(5, 5, [beacon])
        resolver.receive_information(Location(0, 0), [beacon.transmit()])
        resolver.receive_information(Location(2, 2), [beacon.transmit()])
        resolver.estimate()
        assert resolver.estimated_location(beacon) == Location(1, 1)

    def test_estimate_is_sticky_without_new_reports(self) -> None:
        [beacon] = make_beacons(1)
        resolver = GlobalResolver(5, 5, [beacon])
        resolver.receive_information(Location(2, 3), [beacon.transmit()])
        resolver.estimate()
        resolver.estimate()
        assert resolver.estimated_location(beacon) == Location(2, 3)
        assert resolver.board.agents_on_board() == {Location(2, 3): frozenset({beacon})}

    def test_previous_estimate_counts_as_one_vote(self) -> None:
        [beacon] = make_beacons(1)
        resolver = GlobalResolver(5, 5, [beacon])
        resolver.receive_information(Location(0, 0), [beacon.transmit()])
        resolver.estimate()
        resolver.receive_information(Location(3, 3), [beacon.transmit()])
        resolver.estimate()
        # mean of (0,0) and (3,3) is (1.5, 1.5), rounded half-up
        assert resolver.estimated_location(beacon) == Location(2, 2)
        assert resolver.board.agent_count() == 1

    def test_unobserved_beacon_not_on_estimated_board(self) -> None:
        seen, unseen = make_beacons(2)
        resolver = GlobalResolver(5, 5, [seen, unseen])
        resolver.receive_information(Location(1, 1), [seen.transmit()])
        resolver.estimate()
        assert resolver.beacons_to_estimated_locations() == {seen: Location(1, 1)}
        assert resolver.estimated_location(unseen) is None

    def test_reports_cleared_after_estimate(self) -> None:
        [beacon] = make_beacons(1)
        resolver = GlobalResolver(5, 5, [beacon])
        resolver.receive_information(Location(1, 1), [beacon.transmit()])
        resolver.estimate()
        assert resolver.pending_reports() == {}

    def test_one_observer_reporting_several_beacons(self) -> None:
        a, b = make_beacons(2)
        resolver = GlobalResolver(5, 5, [a, b])
        resolver.receive_information(Location(4, 0), [a.transmit(), b.transmit()])
        resolver.estimate()
        assert resolver.beacons_to_estimated_locations() == {a: Location(4, 0), b: Location(4, 0)}

    def test_empty_report_changes_nothing(self) -> None:
        [beacon] = make_beacons(1)
        resolver = GlobalResolver(5, 5, [beacon])
        resolver.receive_information(Location(1, 1), [])
        resolver.estimate()
        assert resolver.board.agents_on_board() == {}

    def test_unknown_transmission_raises(self) -> None:
        [beacon] = make_beacons(1)
        resolver = GlobalResolver(5, 5, [beacon])
        resolver.receive_information(Location(1, 1), [Transmission(99)])
        with pytest.raises(UnknownTransmissionError):
            resolver.estimate()

    def test_null_beacon_list_rejected_at_construction(self) -> None:
        with pytest.raises(TypeError):
            GlobalResolver(5, 5, None)

    def test_estimated_board_holds_only_beacons(self) -> None:
        beacons = make_beacons(3)
        resolver = GlobalResolver(5, 5, beacons)
        for i, beacon in enumerate(beacons):
            resolver.receive_information(Location(i, i), [beacon.transmit()])
        resolver.estimate()
        agents = {a for cell in resolver.board.agents_on_board().values() for a in cell}
        assert agents == set(beacons)
        assert all(isinstance(a, Beacon) for a in agents)
