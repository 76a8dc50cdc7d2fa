"""Path tracking control law.

Combines the PID speed regulator with pure pursuit steering:
- Caches the latest odometry
- Applies pending parameter updates at the start of each computation
- Produces exactly one velocity command per path update
"""

import logging
import math
import threading
from typing import Dict, Optional

from .config import STEERING_GAIN
from .follower import EmptyPathError, calculate_target_point, normalize_angle, yaw_from_quaternion
from .messages import HOLD_COMMAND, Odometry, Path, VelocityCommand
from .parameters import ParameterGate, default_parameters
from .pid import PID


class PathTracker:
    """Velocity command generator for following a reference path.

    Odometry updates only refresh the cached state. Each path update runs one
    control computation against whatever odometry is cached at that moment.

    Attributes:
        gate: Source of runtime parameter updates.
        pid: Longitudinal speed regulator.
        steering_gain: Heading error to yaw rate gain (fixed).
        active: Parameter bundle used by the current computation.
        world_frame: Frame id from the latest odometry.
        robot_frame: Body frame id from the latest odometry.
        last_diagnostics: Values from the most recent computation. Empty if
            it was skipped or held.
    """

    def __init__(
        self,
        gate: Optional[ParameterGate] = None,
        pid: Optional[PID] = None,
        steering_gain: float = STEERING_GAIN,
    ):
        """Initialize the tracker.

        Args:
            gate: Parameter gate shared with the parameter source. A private
                gate is created if None.
            pid: Speed regulator. Built from the default gains if None.
            steering_gain: Heading error to yaw rate gain.
        """
        self.gate = gate if gate is not None else ParameterGate()
        self.active = default_parameters()
        if pid is None:
            pid = PID(kp=self.active.kp, ki=self.active.ki, kd=self.active.kd)
        self.pid = pid
        self.steering_gain = steering_gain

        self._odom_lock = threading.Lock()
        self._odometry = Odometry()

        self.last_diagnostics: Dict[str, float] = {}

    @property
    def world_frame(self) -> str:
        return self.odometry.frame_id

    @property
    def robot_frame(self) -> str:
        return self.odometry.child_frame_id

    @property
    def odometry(self) -> Odometry:
        """Latest cached odometry snapshot."""
        with self._odom_lock:
            return self._odometry

    def on_odometry(self, odometry: Odometry) -> None:
        """Replace the cached odometry. Never triggers a computation."""
        with self._odom_lock:
            self._odometry = odometry

    def on_path(self, path: Path) -> Optional[VelocityCommand]:
        """Run one control computation for a new path.

        Args:
            path: Reference path from the planner.

        Returns:
            The velocity command to publish, or None if the path is empty.
        """
        try:
            return self.compute_control_outputs(self.odometry, path)
        except EmptyPathError as e:
            logging.warning(f"Skipping command: {e}")
            return None

    def apply_pending_parameters(self) -> bool:
        """Apply the latest parameter bundle if one is pending.

        Returns:
            True if a bundle was applied.
        """
        bundle = self.gate.consume()
        if bundle is None:
            return False

        self.pid.update_settings(bundle.kp, bundle.ki, bundle.kd)
        self.active = bundle
        logging.debug(
            f"Applied parameters: speed={bundle.speed_target:.2f} "
            f"Kp={bundle.kp:.3f} Ki={bundle.ki:.3f} Kd={bundle.kd:.3f} "
            f"lookahead={bundle.ahead_distance:.2f}"
        )
        return True

    def compute_control_outputs(self, odometry: Odometry, path: Path) -> VelocityCommand:
        """Compute the velocity command for one odometry/path pair.

        Args:
            odometry: Vehicle pose and velocity snapshot.
            path: Reference path snapshot.

        Returns:
            Velocity command. A zero command if any input or output is not
            finite.

        Raises:
            EmptyPathError: If the path has no waypoints.
        """
        self.last_diagnostics = {}

        if len(path) == 0:
            raise EmptyPathError("Cannot track an empty path")

        self.apply_pending_parameters()

        if not odometry.is_finite() or not path.is_finite():
            logging.warning("Non-finite odometry or path values, holding position")
            return HOLD_COMMAND

        x, y, _ = odometry.position
        yaw_robot = yaw_from_quaternion(*odometry.orientation)

        # Linear speed from the PID regulator
        linear = self.pid.calculate(self.active.speed_target, odometry.speed)

        # Steer toward the lookahead point
        goal = calculate_target_point(odometry.position, path, self.active.ahead_distance)
        yaw_goal = math.atan2(goal[1] - y, goal[0] - x)
        yaw_error = normalize_angle(yaw_goal - yaw_robot)
        angular = self.steering_gain * yaw_error

        command = VelocityCommand(linear=linear, angular=angular)

        self.last_diagnostics = {
            "target_x": float(goal[0]),
            "target_y": float(goal[1]),
            "target_z": float(goal[2]),
            "yaw": yaw_robot,
            "yaw_error": yaw_error,
            "speed": odometry.speed,
            "speed_target": self.active.speed_target,
            "linear": linear,
            "angular": angular,
        }

        logging.debug(f"PID state: {self.pid.get_diagnostics()}")

        if not command.is_finite():
            logging.warning(f"Non-finite command {command}, holding position")
            self.last_diagnostics = {}
            return HOLD_COMMAND

        return command
