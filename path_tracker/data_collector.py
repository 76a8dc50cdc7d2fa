"""Data collection and CSV logging for path tracker runs.

This module provides CSV data logging for:
- Odometry (pose, heading, speed)
- Path updates (length and selected target point)
- Velocity commands (with heading error and active speed target)
"""

import csv
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from .config import TERM_BLUE, TERM_RESET

ODOMETRY_HEADER = ["timestamp", "x", "y", "z", "yaw", "speed"]
PATH_HEADER = ["timestamp", "num_waypoints", "target_x", "target_y", "target_z"]
COMMAND_HEADER = ["timestamp", "linear", "angular", "yaw_error", "speed_target"]


class DataCollector:
    """Manages CSV file creation and logging for path tracker data.

    Attributes:
        run_dir: Directory path for this run's output files.
        odometry_output_path: CSV of odometry updates.
        path_output_path: CSV of path updates and selected targets.
        command_output_path: CSV of emitted velocity commands.
    """

    def __init__(self, output_dir: str = ".", run_dir: Optional[str] = None) -> None:
        """Initialize the data collector.

        Args:
            output_dir: Base directory for output files (default: current directory).
            run_dir: Optional specific run directory. If None, uses RUN_DIR from
                the environment or creates a timestamped directory.

        Raises:
            ValueError: If output_dir exists but is not a directory.
        """
        output_path = Path(output_dir)
        if output_path.exists() and not output_path.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_dir}")

        self.odometry_csv_file: Optional[TextIO] = None
        self.odometry_csv_writer: Any = None
        self.path_csv_file: Optional[TextIO] = None
        self.path_csv_writer: Any = None
        self.command_csv_file: Optional[TextIO] = None
        self.command_csv_writer: Any = None

        if run_dir:
            self.run_dir: Path = Path(run_dir)
        elif env_run_dir := os.environ.get("RUN_DIR"):
            self.run_dir = Path(env_run_dir)
        else:
            # results/run_YYYYMMDD_HHMMSS/
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.run_dir = output_path / "results" / f"run_{timestamp}"

        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.odometry_output_path: Path = self.run_dir / "odometry_data.csv"
        self.path_output_path: Path = self.run_dir / "path_data.csv"
        self.command_output_path: Path = self.run_dir / "command_data.csv"

    def _open(self, path: Path, header: list):
        csv_file = open(path, "w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(header)
        csv_file.flush()
        return csv_file, writer

    def setup(self) -> None:
        """Create all CSV files and write their headers.

        Must be called before writing data.
        """
        self.odometry_csv_file, self.odometry_csv_writer = self._open(
            self.odometry_output_path, ODOMETRY_HEADER
        )
        self.path_csv_file, self.path_csv_writer = self._open(self.path_output_path, PATH_HEADER)
        self.command_csv_file, self.command_csv_writer = self._open(
            self.command_output_path, COMMAND_HEADER
        )

        logging.info(f"{TERM_BLUE}✓ Initialized data collection to {self.run_dir}{TERM_RESET}")

    def log_odometry(
        self, timestamp: float, x: float, y: float, z: float, yaw: float, speed: float
    ) -> None:
        """Log an odometry update to CSV.

        Args:
            timestamp: Receive time (seconds).
            x, y, z: Position (meters).
            yaw: Heading (radians).
            speed: Linear speed magnitude (m/s).
        """
        self.odometry_csv_writer.writerow([timestamp, x, y, z, yaw, speed])
        if self.odometry_csv_file:
            self.odometry_csv_file.flush()

    def log_path(self, timestamp: float, num_waypoints: int, diagnostics: Dict[str, float]) -> None:
        """Log a path update and the target selected from it.

        Args:
            timestamp: Receive time (seconds).
            num_waypoints: Number of waypoints in the path.
            diagnostics: Tracker diagnostics with 'target_x', 'target_y',
                'target_z'. Missing keys are written as empty cells.
        """
        self.path_csv_writer.writerow(
            [
                timestamp,
                num_waypoints,
                diagnostics.get("target_x", ""),
                diagnostics.get("target_y", ""),
                diagnostics.get("target_z", ""),
            ]
        )
        if self.path_csv_file:
            self.path_csv_file.flush()

    def log_command(
        self,
        timestamp: float,
        linear: float,
        angular: float,
        yaw_error: Optional[float] = None,
        speed_target: Optional[float] = None,
    ) -> None:
        """Log an emitted velocity command.

        Args:
            timestamp: Send time (seconds).
            linear: Forward speed command (m/s).
            angular: Yaw rate command (rad/s).
            yaw_error: Heading error that produced the command (radians), optional.
            speed_target: Active target speed (m/s), optional.
        """
        self.command_csv_writer.writerow(
            [
                timestamp,
                linear,
                angular,
                yaw_error if yaw_error is not None else "",
                speed_target if speed_target is not None else "",
            ]
        )
        if self.command_csv_file:
            self.command_csv_file.flush()

    def cleanup(self) -> None:
        """Close all CSV files and log final output location."""
        for csv_file in (self.odometry_csv_file, self.path_csv_file, self.command_csv_file):
            if csv_file:
                csv_file.close()

        logging.info(f"{TERM_BLUE}✓ Saved run data to {self.run_dir}{TERM_RESET}")

    def __enter__(self) -> "DataCollector":
        self.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.cleanup()
