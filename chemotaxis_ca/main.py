#!/usr/bin/env python3
"""
Chemotaxis Cellular Automaton Simulation

Chemical diffusion over a tile map of walls, open cells, sources and sinks,
with robots that steer up the gradient using two sensors.

Usage:
    python -m chemotaxis_ca.main --config configs/corridor.yaml [options]

Examples:
    python -m chemotaxis_ca.main --config configs/corridor.yaml
    python -m chemotaxis_ca.main --config configs/maze.yaml --gif --out-dir results/
    python -m chemotaxis_ca.main --config configs/maze.yaml --no-csv --no-snapshot --quiet
    python -m chemotaxis_ca.main --config configs/corridor.yaml --seed 42 -v
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from chemotaxis_ca.config import load_config
from chemotaxis_ca.model.engine import SimulationEngine
from chemotaxis_ca.export.csv_writer import CSVWriter
from chemotaxis_ca.export.visualizer import Visualizer
from chemotaxis_ca.export.reporter import Reporter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Chemotaxis Cellular Automaton Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m chemotaxis_ca.main --config configs/corridor.yaml
    python -m chemotaxis_ca.main --config configs/maze.yaml --gif --out-dir results/
    python -m chemotaxis_ca.main --config configs/maze.yaml --no-csv --no-snapshot --quiet
    python -m chemotaxis_ca.main --config configs/corridor.yaml --seed 42 -v
        """
    )

    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--steps', type=int, default=None,
                        help='Override number of ticks')
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

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase log verbosity (-v info, -vv debug)')

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except (KeyError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.steps is not None:
        config.max_steps = args.steps
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

    if not config.quiet:
        print("Initializing simulation...")
        print(f"  Grid: {config.layout.width}x{config.layout.height}")
        print(f"  Diffusion: rate {config.diffusion.diffusion_rate}, "
              f"{config.diffusion.num_diffusion_steps} steps/tick")
        print(f"  Ticks: {config.max_steps}")

    try:
        engine = SimulationEngine(config)
    except ValueError as e:
        print(f"Error initializing simulation: {e}", file=sys.stderr)
        return 1

    if not config.quiet:
        print(f"  Robots: {len(engine.agents)}")

    # Initialize exporters
    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'simulation_log.csv')
        csv_writer.open()

    visualizer = Visualizer(engine.grid, config.robots.sensor_distance)

    reporter = Reporter(str(args.config), config.seed)

    if not config.quiet:
        print("\nRunning simulation...")

    final_state = None
    try:
        while not engine.is_finished():
            state = engine.step()
            final_state = state

            if csv_writer:
                csv_writer.append(state)

            # Buffer GIF frame (every N steps to reduce memory)
            if config.gif_enabled:
                if state.step % 5 == 0 or engine.is_finished():
                    visualizer.buffer_frame(state)

            reporter.update(state)

            if not config.quiet and state.step % 100 == 0:
                mean_c = state.metrics.get('mean_concentration', 0)
                robot_c = state.metrics.get('mean_robot_concentration', 0)
                print(f"  Step {state.step}: mean {mean_c:.4f}, at robots {robot_c:.4f}")

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")
    finally:
        if csv_writer:
            csv_writer.close()

    if csv_writer and not config.quiet:
        print(f"\nCSV saved: {csv_writer.output_path} ({csv_writer.rows_written} rows)")

    if config.snapshot_enabled and final_state:
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

    if not config.quiet and final_state:
        report = reporter.generate_summary(
            final_state,
            engine.get_summary(),
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
