#!/usr/bin/env python3
"""
Beacon Localization Simulation

Simulates duty-cycled observers relaying beacon sightings to a global
resolver that estimates beacon positions round by round.

Usage:
    beacon-sim --config configs/example.yaml [options]

Examples:
    beacon-sim --config configs/example.yaml
    beacon-sim --config configs/example.yaml --gif --out-dir results/
    beacon-sim --config configs/example.yaml --no-csv --no-snapshot --quiet
    beacon-sim --config configs/example.yaml --seed 42
    beacon-sim --config configs/example.yaml --experiment
"""

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import List, Optional

from beacon_sim.config import SimulationConfig, check_config, load_config
from beacon_sim.errors import SimulationError
from beacon_sim.experiment import expand_configurations, run_experiment
from beacon_sim.export.csv_writer import CSVWriter
from beacon_sim.export.reporter import Reporter
from beacon_sim.export.store import MemoryStore
from beacon_sim.export.visualizer import Visualizer
from beacon_sim.model.engine import SimulationEngine


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Beacon Localization Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    beacon-sim --config configs/example.yaml
    beacon-sim --config configs/example.yaml --gif --out-dir results/
    beacon-sim --config configs/example.yaml --no-csv --no-snapshot --quiet
    beacon-sim --config configs/example.yaml --seed 42
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--rounds', type=int, default=None,
                        help='Override number of simulation rounds')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--experiment', action='store_true', default=False,
                        help="Run the config's experiment parameter sweep")

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', action='store_true', default=False,
                        help='Enable debug logging')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    return parser.parse_args(argv)


def run_single(config: SimulationConfig, config_path: Path) -> int:
    """Run one simulation with the configured exporters."""
    if not config.quiet:
        print("Initializing simulation...")
        print(f"  Grid: {config.grid.rows}x{config.grid.cols}")
        print(f"  Beacons: {config.beacons.count} ({config.beacons.movement.name})")
        print(f"  Observers: {config.observers.count} ({config.observers.movement.name}, "
              f"{config.awakeness.strategy.name} {config.awakeness.duration}/{config.awakeness.cycle})")
        print(f"  Threshold radius: {config.transmission.threshold_radius}")
        print(f"  Rounds: {config.max_rounds}")

    engine = SimulationEngine(config, store=MemoryStore())

    if not config.quiet:
        print(f"  Simulation id: {engine.simulation_id}")

    # Initialize exporters
    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'simulation_log.csv')
        csv_writer.open()

    visualizer = Visualizer(config.grid.rows, config.grid.cols)
    reporter = Reporter(str(config_path), config.seed)

    if not config.quiet:
        print("\nRunning simulation...")

    try:
        state = engine.start()
        while True:
            if csv_writer:
                csv_writer.append(state)

            # Buffer GIF frame (every N rounds to reduce memory)
            if config.gif_enabled:
                if state.round % 5 == 0 or engine.is_finished():
                    visualizer.buffer_frame(state)

            reporter.update(state)

            if not config.quiet and state.round > 0 and state.round % 100 == 0:
                located = int(state.metrics.get('located_beacons', 0))
                print(f"  Round {state.round}: {located}/{len(engine.beacons)} beacons located")

            final_state = state
            if engine.is_finished():
                break
            state = engine.step()
        statistics = engine.finish()
    finally:
        if csv_writer:
            csv_writer.close()

    if csv_writer and not config.quiet:
        print(f"\nCSV saved: {config.out_dir / 'simulation_log.csv'}")

    if config.snapshot_enabled:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    if not config.quiet:
        report = reporter.generate_summary(
            engine.simulation_id,
            statistics,
            engine.current_round,
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


def run_sweep(config: SimulationConfig) -> int:
    """Run the experiment sweep declared in the configuration."""
    if config.experiment is None:
        print("Error: configuration has no 'experiment' section", file=sys.stderr)
        return 1

    configs = expand_configurations(config, config.experiment.ranges)
    if not config.quiet:
        print(f"Experiment '{config.experiment.title}': {len(configs)} valid configurations")

    result = run_experiment(config.experiment.title, configs, seed=config.seed)

    rows = result.rows()
    if config.csv_enabled and rows:
        out_path = config.out_dir / 'experiment.csv'
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)
        if not config.quiet:
            print(f"Experiment results saved: {out_path}")

    if not config.quiet:
        avg = result.average_distance()
        print(f"Simulations run: {len(result.simulation_ids)}")
        print(f"Mean average distance: {avg:.4f}" if avg is not None
              else "Mean average distance: - (no beacon located)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.rounds is not None:
        config.max_rounds = args.rounds
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    config.quiet = args.quiet
    if args.seed is not None:
        config.seed = args.seed
    config.out_dir = args.out_dir

    try:
        check_config(config)
        if args.experiment:
            return run_sweep(config)
        return run_single(config, args.config)
    except SimulationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")
        return 130


if __name__ == '__main__':
    sys.exit(main())
