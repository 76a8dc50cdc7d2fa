"""PID speed regulator for the path tracker.

This module provides the longitudinal feedback controller that turns the
difference between the target speed and the measured speed into a forward
velocity command.
"""

import logging
import math
from typing import Dict

from .config import PID_DT, PID_OUTPUT_MAX, PID_OUTPUT_MIN


class PID:
    """Fixed-step PID regulator with a clamped output.

    Control law:
        error = target - measured
        integral += error * dt
        derivative = (error - prev_error) / dt
        output = clamp(kp * error + ki * integral + kd * derivative, [min, max])

    The sample period is fixed at construction and is not measured from the
    wall clock, so callers must invoke ``calculate`` at roughly that cadence.

    Attributes:
        dt: Sample period (seconds).
        output_max: Upper output bound.
        output_min: Lower output bound.
        kp: Proportional gain.
        ki: Integral gain.
        kd: Derivative gain.
        integral: Accumulated error integral.
        prev_error: Error seen by the previous ``calculate`` call.
    """

    def __init__(
        self,
        dt: float = PID_DT,
        output_max: float = PID_OUTPUT_MAX,
        output_min: float = PID_OUTPUT_MIN,
        kp: float = 0.0,
        ki: float = 0.0,
        kd: float = 0.0,
    ):
        """Initialize the PID controller.

        Args:
            dt: Sample period in seconds. Must be positive.
            output_max: Upper bound of the output.
            output_min: Lower bound of the output.
            kp: Proportional gain.
            ki: Integral gain.
            kd: Derivative gain.

        Raises:
            ValueError: If dt is not positive or the bounds are inverted.
        """
        if dt <= 0:
            raise ValueError(f"PID sample period must be positive, got {dt}")
        if output_min > output_max:
            raise ValueError(f"Invalid PID output bounds: [{output_min}, {output_max}]")

        self.dt = dt
        self.output_max = output_max
        self.output_min = output_min

        self.kp = kp
        self.ki = ki
        self.kd = kd

        self.integral: float = 0.0
        self.prev_error: float = 0.0

    @property
    def hold_value(self) -> float:
        """Output used when a step cannot be computed."""
        return max(self.output_min, min(self.output_max, 0.0))

    def calculate(self, target: float, measured: float) -> float:
        """Compute the clamped correction for one sample.

        Args:
            target: Desired value (setpoint).
            measured: Current measured value.

        Returns:
            Correction clamped to [output_min, output_max]. If the inputs or
            the unclamped output are not finite, the state is left untouched
            and the hold value (zero, clamped to the bounds) is returned.
        """
        error = target - measured

        integral = self.integral + error * self.dt
        derivative = (error - self.prev_error) / self.dt

        output = self.kp * error + self.ki * integral + self.kd * derivative

        if not (math.isfinite(error) and math.isfinite(output)):
            logging.warning(
                f"Non-finite PID step (target={target}, measured={measured}, "
                f"output={output}), holding"
            )
            return self.hold_value

        # Clamp to actuator limits
        output = max(self.output_min, min(self.output_max, output))

        self.integral = integral
        self.prev_error = error

        return output

    def update_settings(self, kp: float, ki: float, kd: float) -> None:
        """Replace the gains in place.

        The integral and previous error carry over so the output does not jump
        when gains are retuned mid-run. Call ``reset`` for a clean restart.

        Args:
            kp: Proportional gain.
            ki: Integral gain.
            kd: Derivative gain.
        """
        self.kp = kp
        self.ki = ki
        self.kd = kd

    def reset(self) -> None:
        """Clear the integral and previous error."""
        self.integral = 0.0
        self.prev_error = 0.0

    def get_diagnostics(self) -> Dict[str, float]:
        """Get gains and internal state for logging and debugging.

        Returns:
            Dictionary with keys 'kp', 'ki', 'kd', 'integral', 'prev_error'.
        """
        return {
            "kp": self.kp,
            "ki": self.ki,
            "kd": self.kd,
            "integral": self.integral,
            "prev_error": self.prev_error,
        }
