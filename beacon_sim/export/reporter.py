"""Summary report generation for the beacon simulation."""

import math
from pathlib import Path
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.state import RoundState
    from ..model.statistics import SimulationStatistics


def _fmt(value: Optional[float], spec: str = ".2f") -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "-"
    return format(value, spec)


class Reporter:
    """Accumulates per-round metrics and generates a formatted text report."""

    def __init__(self, config_path: str, seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed
        self.round_metrics: List[Dict] = []
        self.first_located_round: Optional[int] = None
        self.peak_awake_observers = 0

    def update(self, state: "RoundState") -> None:
        """Accumulate metrics per round."""
        self.round_metrics.append(dict(state.metrics, round=state.round))

        if self.first_located_round is None and state.metrics.get('located_beacons', 0) > 0:
            self.first_located_round = state.round

        awake = state.metrics.get('awake_observers', 0)
        if awake > self.peak_awake_observers:
            self.peak_awake_observers = awake

    def mean_awake_observers(self) -> float:
        counts = [m['awake_observers'] for m in self.round_metrics if 'awake_observers' in m]
        return sum(counts) / len(counts) if counts else 0.0

    def generate_summary(self, simulation_id: str,
                         statistics: "SimulationStatistics",
                         total_rounds: int,
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        distance = statistics.distance

        lines = [
            "",
            "=" * 80,
            "                  BEACON LOCALIZATION SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Simulation Id: {simulation_id}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "ESTIMATION ACCURACY (Manhattan distance)",
            "-" * 40,
            f"Total Rounds:          {total_rounds}",
            f"First Located Round:   {self.first_located_round if self.first_located_round is not None else 'never'}",
            f"Rounds With Estimates: {distance.rounds_counted}",
            f"Minimum Distance:      {_fmt(distance.min)}",
            f"Maximum Distance:      {_fmt(distance.max)}",
            f"Average Distance:      {_fmt(distance.avg, '.4f')}",
            f"Avg Awake Observers:   {self.mean_awake_observers():.2f} (peak {self.peak_awake_observers})",
            "",
            "BEACON OBSERVATION",
            "-" * 40,
            f"{'Beacon':>8} {'Observed %':>11} {'Obs. int (min/avg/max)':>24} {'Unobs. int (min/avg/max)':>26}",
        ]

        for beacon_id, stats in sorted(statistics.beacons.items()):
            observed = (f"{_fmt(stats.min_observed_interval, '.0f')}/"
                        f"{_fmt(stats.avg_observed_interval, '.1f')}/"
                        f"{_fmt(stats.max_observed_interval, '.0f')}")
            unobserved = (f"{_fmt(stats.min_unobserved_interval, '.0f')}/"
                          f"{_fmt(stats.avg_unobserved_interval, '.1f')}/"
                          f"{_fmt(stats.max_unobserved_interval, '.0f')}")
            lines.append(f"{beacon_id:>8} {stats.observed_percent:>10.1f}% "
                         f"{observed:>24} {unobserved:>26}")

        lines += [
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        # Output file paths
        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
