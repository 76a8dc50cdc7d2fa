"""
Visualization utilities for recorded path tracker runs.

This module loads the CSV files written by DataCollector and plots the driven
trajectory against the selected target points, and the command history.
"""

from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from .data_collector import COMMAND_HEADER, ODOMETRY_HEADER, PATH_HEADER
from .plot_styles import (
    PLOT_BLUE,
    PLOT_CREAM,
    PLOT_DARK_BLUE,
    PLOT_ORANGE,
    TRACK_CMAP,
    load_csv_columns,
    style_axis,
)


def load_run(run_dir: Path) -> Dict[str, Dict[str, np.ndarray]]:
    """Load every CSV of a run directory.

    Args:
        run_dir: Directory written by DataCollector.

    Returns:
        Dictionary with keys 'odometry', 'path', 'command'.

    Raises:
        FileNotFoundError: If a CSV file is missing.
        ValueError: If a CSV file has unexpected headers.
    """
    return {
        "odometry": load_csv_columns(run_dir / "odometry_data.csv", ODOMETRY_HEADER),
        "path": load_csv_columns(run_dir / "path_data.csv", PATH_HEADER),
        "command": load_csv_columns(run_dir / "command_data.csv", COMMAND_HEADER),
    }


def plot_trajectory(
    odometry: Dict[str, np.ndarray],
    path: Dict[str, np.ndarray],
    title: str = "Trajectory",
    save_path: Optional[Path] = None,
) -> Figure:
    """Plot driven trajectory (x vs y) with the selected target points.

    Args:
        odometry: Odometry columns ('timestamp', 'x', 'y', ...).
        path: Path columns ('target_x', 'target_y', ...).
        title: Plot title.
        save_path: Optional path to save the figure.

    Returns:
        Matplotlib figure object.
    """
    fig, ax = plt.subplots(figsize=(10, 8), facecolor=PLOT_DARK_BLUE)

    x = odometry["x"]
    y = odometry["y"]
    valid = ~(np.isnan(x) | np.isnan(y))

    if np.any(valid):
        # Color by progress through the run
        progress = np.linspace(0.0, 1.0, int(np.sum(valid)))
        ax.scatter(x[valid], y[valid], c=progress, cmap=TRACK_CMAP, s=6, label="Odometry")
        ax.plot(x[valid][0], y[valid][0], "o", color=PLOT_ORANGE, markersize=10, label="Start")

    tx = path["target_x"]
    ty = path["target_y"]
    targets = ~(np.isnan(tx) | np.isnan(ty))
    if np.any(targets):
        ax.plot(tx[targets], ty[targets], "x", color=PLOT_CREAM, markersize=5, label="Targets")

    ax.set_aspect("equal", adjustable="datalim")
    style_axis(ax, title, "x (m)", "y (m)")
    ax.legend(facecolor=PLOT_DARK_BLUE, labelcolor=PLOT_CREAM)
    fig.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())

    return fig


def plot_commands(
    command: Dict[str, np.ndarray],
    odometry: Dict[str, np.ndarray],
    title: str = "Velocity Commands",
    save_path: Optional[Path] = None,
) -> Figure:
    """Plot commanded speed against measured speed, and the yaw rate command.

    Args:
        command: Command columns ('timestamp', 'linear', 'angular', ...).
        odometry: Odometry columns ('timestamp', 'speed', ...).
        title: Plot title.
        save_path: Optional path to save the figure.

    Returns:
        Matplotlib figure object.
    """
    fig, (ax_speed, ax_rate) = plt.subplots(
        2, 1, figsize=(12, 8), sharex=True, facecolor=PLOT_DARK_BLUE
    )

    t0_candidates = [a[0] for a in (command["timestamp"], odometry["timestamp"]) if a.size]
    t0 = min(t0_candidates) if t0_candidates else 0.0

    ax_speed.plot(command["timestamp"] - t0, command["linear"], color=PLOT_ORANGE, label="Command")
    ax_speed.plot(odometry["timestamp"] - t0, odometry["speed"], color=PLOT_BLUE, label="Measured")
    if np.any(~np.isnan(command["speed_target"])):
        ax_speed.plot(
            command["timestamp"] - t0,
            command["speed_target"],
            "--",
            color=PLOT_CREAM,
            label="Target",
        )
    style_axis(ax_speed, title, "", "Speed (m/s)")
    ax_speed.legend(facecolor=PLOT_DARK_BLUE, labelcolor=PLOT_CREAM)

    ax_rate.plot(command["timestamp"] - t0, command["angular"], color=PLOT_ORANGE)
    style_axis(ax_rate, "", "Time (s)", "Yaw rate (rad/s)")

    fig.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())

    return fig


def plot_run_summary(run_dir: Path, save_plots: bool = False, show_plots: bool = True) -> None:
    """Generate all plots for one run.

    Args:
        run_dir: Directory written by DataCollector.
        save_plots: If True, save PNG files next to the CSV files.
        show_plots: If True, display the figures interactively.
    """
    data = load_run(run_dir)

    plot_trajectory(
        data["odometry"],
        data["path"],
        title=f"Trajectory - {run_dir.name}",
        save_path=run_dir / "trajectory.png" if save_plots else None,
    )
    plot_commands(
        data["command"],
        data["odometry"],
        title=f"Velocity Commands - {run_dir.name}",
        save_path=run_dir / "commands.png" if save_plots else None,
    )

    if show_plots:
        plt.show()
    else:
        plt.close("all")
