"""Shared plotting utilities and styles for path tracker visualizations.

This module provides:
- Color scheme and colormap
- CSV data loading functions
- Common axis styling
"""

import csv
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np
from matplotlib.axes import Axes
from matplotlib.colors import LinearSegmentedColormap

from .config import PLOT_BLUE, PLOT_CREAM, PLOT_DARK_BLUE, PLOT_ORANGE, PLOT_TAUPE

__all__ = [
    "PLOT_ORANGE",
    "PLOT_BLUE",
    "PLOT_CREAM",
    "PLOT_TAUPE",
    "PLOT_DARK_BLUE",
    "TRACK_CMAP",
    "load_csv_data",
    "load_csv_columns",
    "style_axis",
]

TRACK_CMAP = LinearSegmentedColormap.from_list("track", [PLOT_ORANGE, PLOT_BLUE])
"""Colormap from orange (start of run) to blue (end of run)."""


def load_csv_data(filepath: Path) -> Tuple[List[str], List[List[str]]]:
    """Load CSV file and return headers and data rows.

    Args:
        filepath: Path to the CSV file.

    Returns:
        Tuple containing (headers, data_rows).

    Raises:
        FileNotFoundError: If the CSV file does not exist.
    """
    if not filepath.exists():
        raise FileNotFoundError(f"CSV file not found: {filepath}")

    with open(filepath, newline="") as f:
        reader = csv.reader(f)
        headers = next(reader)
        data_rows = list(reader)

    return headers, data_rows


def load_csv_columns(filepath: Path, expected_headers: List[str]) -> Dict[str, np.ndarray]:
    """Load a CSV file into one float array per column.

    Empty cells become NaN. Rows with the wrong number of cells or
    non-numeric values are skipped.

    Args:
        filepath: Path to the CSV file.
        expected_headers: Column names the file must start with.

    Returns:
        Dictionary mapping column name to a numpy array.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If the headers do not match.
    """
    headers, rows = load_csv_data(filepath)
    if headers != expected_headers:
        raise ValueError(f"Unexpected CSV headers in {filepath.name}: {headers}")

    columns: Dict[str, list] = {name: [] for name in headers}
    for row in rows:
        if len(row) != len(headers):
            continue
        try:
            values = [float(cell) if cell else np.nan for cell in row]
        except ValueError:
            continue
        for name, value in zip(headers, values):
            columns[name].append(value)

    return {name: np.array(values, dtype=np.float64) for name, values in columns.items()}


def style_axis(ax: Axes, title: str, xlabel: str, ylabel: str) -> None:
    """Apply the dark theme to an axis."""
    ax.set_facecolor(PLOT_DARK_BLUE)
    ax.set_title(title, color=PLOT_CREAM, fontsize=12, fontweight="bold")
    ax.set_xlabel(xlabel, color=PLOT_CREAM)
    ax.set_ylabel(ylabel, color=PLOT_CREAM)
    ax.tick_params(colors=PLOT_CREAM)
    ax.grid(True, alpha=0.2, color=PLOT_TAUPE)
    for spine in ax.spines.values():
        spine.set_color(PLOT_TAUPE)
