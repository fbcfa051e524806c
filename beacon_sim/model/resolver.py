"""Global resolver estimating beacon locations from observer reports."""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..errors import UnknownTransmissionError
from .agent import Beacon, Transmission
from .board import EstimatedBoard
from .location import Location

logger = logging.getLogger(__name__)


def mean_location(locations: Sequence[Location]) -> Location:
    """
    Component-wise arithmetic mean, each coordinate rounded half-up.

    Integer arithmetic keeps the tie-break exact: round_half_up(s / n)
    == floor((2s + n) / 2n).
    """
    points = np.array([loc.as_tuple() for loc in locations], dtype=np.int64)
    n = len(points)
    row_sum, col_sum = points.sum(axis=0)
    return Location(int((2 * row_sum + n) // (2 * n)),
                    int((2 * col_sum + n) // (2 * n)))


class GlobalResolver:
    """
    Maintains an estimated board from per-round (observer location,
    transmissions) reports.

    Each `estimate()` call moves every reported beacon to the mean of this
    round's reporter locations plus its previous estimate (counted as one
    vote). Beacons not reported keep their estimate unchanged.
    """

    def __init__(self, rows: int, cols: int, beacons: Sequence[Beacon]):
        if beacons is None:
            raise TypeError("Resolver requires a beacon list, got None")
        self.board = EstimatedBoard(rows, cols)
        self._beacons_by_transmission: Dict[Transmission, Beacon] = {
            beacon.transmit(): beacon for beacon in beacons
        }
        self._estimates: Dict[Beacon, Location] = {}
        self._reports: Dict[Transmission, List[Location]] = defaultdict(list)

    def receive_information(self, observer_location: Location,
                            transmissions: Sequence[Transmission]) -> None:
        """Record observer_location as a reporter of every transmission."""
        for transmission in transmissions:
            self._reports[transmission].append(observer_location)

    def estimate(self) -> None:
        """Fold this round's reports into the estimated board."""
        for transmission, reporters in self._reports.items():
            beacon = self._beacons_by_transmission.get(transmission)
            if beacon is None:
                self._reports.clear()
                raise UnknownTransmissionError(transmission)

            previous = self._estimates.get(beacon)
            votes = list(reporters)
            if previous is not None:
                votes.append(previous)
            new_location = mean_location(votes)

            if previous is None:
                self.board.place_agent(new_location, beacon)
            else:
                self.board.move_agent(previous, new_location, beacon)
            self._estimates[beacon] = new_location
            logger.debug("Beacon %d estimated at %s from %d vote(s)",
                         beacon.id, new_location, len(votes))

        self._reports.clear()

    def estimated_location(self, beacon: Beacon) -> Optional[Location]:
        return self._estimates.get(beacon)

    def beacons_to_estimated_locations(self) -> Dict[Beacon, Location]:
        """Return a copy of the estimate map (located beacons only)."""
        return dict(self._estimates)

    def pending_reports(self) -> Dict[Transmission, List[Location]]:
        return {t: list(locs) for t, locs in self._reports.items()}
