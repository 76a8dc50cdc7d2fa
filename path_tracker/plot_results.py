#!/usr/bin/env python3
"""
Standalone script to visualize recorded path tracker runs.

Loads the odometry, path and command CSV files from a run directory and plots
the driven trajectory and the command history.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import TERM_BLUE, TERM_RESET
from .visualization import plot_run_summary


def find_run_dirs(results_dir: Path) -> list:
    """Return run directories sorted oldest first.

    Raises:
        FileNotFoundError: If the results directory does not exist.
    """
    if not results_dir.exists():
        raise FileNotFoundError(f"Results directory not found: {results_dir}")

    return sorted(d for d in results_dir.iterdir() if d.is_dir() and d.name.startswith("run_"))


def find_latest_run(results_dir: Path) -> Path:
    """Find the most recent run directory.

    Raises:
        FileNotFoundError: If no run directories are found.
    """
    run_dirs = find_run_dirs(results_dir)
    if not run_dirs:
        raise FileNotFoundError(f"No run directories found in {results_dir}")
    return run_dirs[-1]


def list_available_runs(results_dir: Path) -> None:
    """Log all available run directories."""
    try:
        run_dirs = find_run_dirs(results_dir)
    except FileNotFoundError as e:
        logging.error(str(e))
        return

    if not run_dirs:
        logging.info(f"No run directories found in {results_dir}")
        return

    logging.info("Available runs:")
    for i, run_dir in enumerate(run_dirs, 1):
        logging.info(f"  {i}. {run_dir.name}")


def main(argv=None) -> None:
    """Main entry point for the plotting script."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    parser = argparse.ArgumentParser(
        description="Visualize recorded path tracker runs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plot the most recent run
  python -m path_tracker.plot_results

  # Plot a specific run and save PNGs without showing them
  python -m path_tracker.plot_results --run run_20261016_101500 --save --no-show
        """,
    )
    parser.add_argument(
        "--run",
        type=str,
        default=None,
        help="Name of the run directory to plot. Defaults to the most recent run.",
    )
    parser.add_argument(
        "--results-dir",
        type=str,
        default="results",
        help="Path to the results directory (default: results)",
    )
    parser.add_argument(
        "--save", action="store_true", help="Save plots as PNG files in the run directory"
    )
    parser.add_argument(
        "--no-show",
        action="store_true",
        help="Do not display plots interactively (useful with --save)",
    )
    parser.add_argument("--list", action="store_true", help="List all available runs and exit")

    args = parser.parse_args(argv)
    results_dir = Path(args.results_dir)

    if args.list:
        list_available_runs(results_dir)
        return

    if args.run:
        run_dir = results_dir / args.run
        if not run_dir.exists():
            logging.error(f"Error: Run directory not found: {run_dir}")
            list_available_runs(results_dir)
            sys.exit(1)
    else:
        try:
            run_dir = find_latest_run(results_dir)
        except FileNotFoundError as e:
            logging.error(f"Error: {e}")
            sys.exit(1)
        logging.info(f"{TERM_BLUE}Plotting most recent run: {run_dir.name}{TERM_RESET}")

    try:
        plot_run_summary(run_dir=run_dir, save_plots=args.save, show_plots=not args.no_show)
    except (FileNotFoundError, ValueError) as e:
        logging.error(f"Error: {e}")
        sys.exit(1)

    if args.save:
        logging.info(f"{TERM_BLUE}✓ Saved plots to {run_dir}{TERM_RESET}")


if __name__ == "__main__":
    main()
