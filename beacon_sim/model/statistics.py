"""
Accuracy and observation statistics accumulated over simulation rounds.

Accumulators are immutable values; each update function takes the previous
accumulator plus the current round's inputs and returns a new accumulator.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class DistanceStats:
    """Running min/max/average of the estimate-to-truth distance."""
    min: Optional[float] = None
    max: Optional[float] = None
    avg: Optional[float] = None
    rounds_counted: int = 0  # rounds with at least one located beacon

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {'min': self.min, 'max': self.max, 'avg': self.avg}


def update_distance_stats(stats: DistanceStats,
                          distances: Sequence[float]) -> DistanceStats:
    """
    Fold one round's distances into the running statistics.

    The average is the mean of per-round averages, maintained incrementally:
    new_avg = (old_avg * count + round_avg) / (count + 1).
    A round without distances leaves the accumulator unchanged.
    """
    if len(distances) == 0:
        return stats

    values = np.asarray(distances, dtype=float)
    round_min = float(values.min())
    round_max = float(values.max())
    round_avg = float(values.mean())

    if stats.rounds_counted == 0:
        return DistanceStats(round_min, round_max, round_avg, 1)

    count = stats.rounds_counted
    return DistanceStats(
        min=min(stats.min, round_min),
        max=max(stats.max, round_max),
        avg=(stats.avg * count + round_avg) / (count + 1),
        rounds_counted=count + 1,
    )


@dataclass(frozen=True)
class ObservedInterval:
    """Run of consecutive rounds in which a beacon was (or wasn't) observed."""
    start: int
    end: int
    observed: bool

    @property
    def duration(self) -> int:
        return self.end - self.start + 1

    @property
    def signed_duration(self) -> int:
        """Positive for observed intervals, negative for unobserved ones."""
        return self.duration if self.observed else -self.duration


def extend_intervals(intervals: Tuple[ObservedInterval, ...], current_round: int,
                     observed: bool) -> Tuple[ObservedInterval, ...]:
    """Append one round's observation result to a beacon's interval history."""
    if intervals and intervals[-1].observed == observed:
        last = intervals[-1]
        return intervals[:-1] + (ObservedInterval(last.start, current_round, observed),)
    return intervals + (ObservedInterval(current_round, current_round, observed),)


def _summary(durations: List[int]) -> Tuple[float, float, float]:
    if not durations:
        return (math.nan, math.nan, math.nan)
    return (float(min(durations)), float(max(durations)),
            float(sum(durations)) / len(durations))


@dataclass(frozen=True)
class BeaconObservationStats:
    """Per-beacon observation summary for a finished simulation."""
    beacon_id: int
    observed_rounds: int
    observed_percent: float
    min_observed_interval: float = math.nan
    max_observed_interval: float = math.nan
    avg_observed_interval: float = math.nan
    min_unobserved_interval: float = math.nan
    max_unobserved_interval: float = math.nan
    avg_unobserved_interval: float = math.nan


def observation_stats(beacon_id: int, observed_rounds: int, elapsed_rounds: int,
                      intervals: Sequence[ObservedInterval]) -> BeaconObservationStats:
    """Summarise a beacon's observation history over `elapsed_rounds` rounds."""
    percent = 100.0 * observed_rounds / elapsed_rounds if elapsed_rounds > 0 else 0.0
    seen = _summary([i.duration for i in intervals if i.observed])
    unseen = _summary([i.duration for i in intervals if not i.observed])
    return BeaconObservationStats(
        beacon_id=beacon_id,
        observed_rounds=observed_rounds,
        observed_percent=percent,
        min_observed_interval=seen[0],
        max_observed_interval=seen[1],
        avg_observed_interval=seen[2],
        min_unobserved_interval=unseen[0],
        max_unobserved_interval=unseen[1],
        avg_unobserved_interval=unseen[2],
    )


@dataclass(frozen=True)
class SimulationStatistics:
    """Final statistics written once a simulation completes."""
    distance: DistanceStats
    beacons: Dict[int, BeaconObservationStats]
    intervals: Dict[int, Tuple[ObservedInterval, ...]] = field(default_factory=dict)

    @property
    def observed_percent(self) -> Dict[int, float]:
        return {bid: s.observed_percent for bid, s in self.beacons.items()}

    def signed_intervals(self) -> Dict[int, List[int]]:
        return {bid: [i.signed_duration for i in ivs]
                for bid, ivs in self.intervals.items()}
