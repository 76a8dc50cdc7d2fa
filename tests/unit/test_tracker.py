# tests/unit/test_tracker.py
"""
Unit tests for the path tracking control law.

Tests:
- End-to-end command for a simple scenario
- Steering toward the lookahead point with heading wrap-around
- Parameter updates applied only at computation start, coalesced
- Odometry caching and one command per path
- Empty and non-finite input handling
"""

import logging
import math

import pytest

from path_tracker.config import STEERING_GAIN
from path_tracker.messages import HOLD_COMMAND, Path
from path_tracker.tracker import PathTracker


# =============================================================================
# Test: Control Law
# =============================================================================

class TestComputeControlOutputs:
    """Test the combined speed and steering law."""

    def test_end_to_end_single_waypoint(self, tracker, gate, make_odometry, make_bundle):
        """Robot at origin facing the only waypoint drives straight at full speed."""
        gate.update(make_bundle(speed_target=1.0, kp=1.0, ki=0.0, kd=0.0))
        path = Path.from_points([(1.0, 0.0, 0.0)])

        command = tracker.compute_control_outputs(make_odometry(), path)

        assert command.linear == pytest.approx(1.0)
        assert command.angular == pytest.approx(0.0)
        assert tracker.last_diagnostics["target_x"] == pytest.approx(1.0)

    def test_linear_speed_clamped(self, tracker, gate, make_odometry, make_bundle):
        gate.update(make_bundle(speed_target=1.0, kp=5.0))
        command = tracker.compute_control_outputs(
            make_odometry(), Path.from_points([(1.0, 0.0, 0.0)])
        )
        assert command.linear == pytest.approx(1.0)

    def test_speed_is_velocity_magnitude(self, tracker, gate, make_odometry, make_bundle):
        """Measured speed uses the norm of the velocity vector."""
        gate.update(make_bundle(speed_target=0.5, kp=1.0))
        odom = make_odometry(velocity=(0.3, 0.4, 0.0))
        command = tracker.compute_control_outputs(odom, Path.from_points([(1.0, 0.0, 0.0)]))
        assert command.linear == pytest.approx(0.0)

    def test_steers_toward_target(self, tracker, gate, make_odometry, make_bundle):
        """Target straight to the left gives a positive yaw rate."""
        gate.update(make_bundle())
        command = tracker.compute_control_outputs(
            make_odometry(), Path.from_points([(0.0, 2.0, 0.0)])
        )
        assert command.angular == pytest.approx(STEERING_GAIN * math.pi / 2)

    def test_heading_error_wraps(self, tracker, gate, make_odometry, make_bundle):
        """A 270 degree raw error becomes a -90 degree turn."""
        gate.update(make_bundle())
        odom = make_odometry(yaw=-3 * math.pi / 4)
        command = tracker.compute_control_outputs(odom, Path.from_points([(-2.0, 2.0, 0.0)]))
        assert command.angular == pytest.approx(-STEERING_GAIN * math.pi / 2)

    def test_uses_lookahead_point(self, tracker, gate, make_odometry, make_bundle):
        """Steering aims at the first waypoint 1.5m away, not the nearest one."""
        gate.update(make_bundle())
        path = Path.from_points([(1.0, 0.0, 0.0), (1.0, 1.5, 0.0), (1.0, 3.0, 0.0)])
        tracker.compute_control_outputs(make_odometry(), path)
        assert tracker.last_diagnostics["target_y"] == pytest.approx(1.5)

    def test_default_parameters_before_any_update(self, tracker, make_odometry):
        command = tracker.compute_control_outputs(
            make_odometry(), Path.from_points([(1.0, 0.0, 0.0)])
        )
        assert command.is_finite()
        assert tracker.active.speed_target == pytest.approx(0.5)


# =============================================================================
# Test: Parameter Application
# =============================================================================

class TestParameterApplication:
    """Test when and how parameter updates take effect."""

    def test_latest_of_two_updates_is_applied(self, tracker, gate, make_odometry, make_bundle):
        """Two updates before a computation: only the second gains are used."""
        gate.update(make_bundle(speed_target=1.0, kp=0.1))
        gate.update(make_bundle(speed_target=1.0, kp=0.5))

        command = tracker.compute_control_outputs(
            make_odometry(), Path.from_points([(1.0, 0.0, 0.0)])
        )

        assert command.linear == pytest.approx(0.5)
        assert tracker.pid.kp == 0.5
        assert gate.dirty is False

    def test_update_waits_for_next_computation(self, tracker, gate, make_odometry, make_bundle):
        path = Path.from_points([(1.0, 0.0, 0.0)])
        gate.update(make_bundle(kp=0.2))
        tracker.compute_control_outputs(make_odometry(), path)

        gate.update(make_bundle(kp=0.7))
        assert tracker.pid.kp == 0.2

        tracker.compute_control_outputs(make_odometry(), path)
        assert tracker.pid.kp == 0.7

    def test_gain_update_keeps_integral(self, tracker, gate, make_odometry, make_bundle):
        path = Path.from_points([(1.0, 0.0, 0.0)])
        gate.update(make_bundle(kp=0.0, ki=1.0))
        tracker.compute_control_outputs(make_odometry(), path)
        integral = tracker.pid.integral

        gate.update(make_bundle(kp=0.0, ki=2.0))
        tracker.compute_control_outputs(make_odometry(), path)

        assert tracker.pid.integral == pytest.approx(integral + 0.1)

    def test_custom_lookahead_reaches_selector(self, tracker, gate, make_odometry, make_bundle):
        gate.update(make_bundle(ahead_distance=3.0))
        path = Path.from_points([(1.5, 0.0, 0.0), (3.0, 0.0, 0.0), (4.0, 0.0, 0.0)])
        tracker.compute_control_outputs(make_odometry(), path)
        assert tracker.last_diagnostics["target_x"] == pytest.approx(3.0)


# =============================================================================
# Test: Callbacks
# =============================================================================

class TestCallbacks:
    """Test odometry caching and path-triggered computation."""

    def test_odometry_does_not_compute(self, tracker, make_odometry):
        tracker.on_odometry(make_odometry(velocity=(0.2, 0.0, 0.0)))
        assert tracker.pid.integral == 0.0
        assert tracker.last_diagnostics == {}

    def test_path_uses_cached_odometry(self, tracker, gate, make_odometry, make_bundle):
        gate.update(make_bundle(speed_target=1.0, kp=1.0))
        tracker.on_odometry(make_odometry(x=1.0, y=0.0, velocity=(0.6, 0.0, 0.0)))

        command = tracker.on_path(Path.from_points([(1.0, 2.0, 0.0)]))

        assert command.linear == pytest.approx(0.4)
        assert command.angular == pytest.approx(STEERING_GAIN * math.pi / 2)

    def test_latest_odometry_wins(self, tracker, make_odometry):
        tracker.on_odometry(make_odometry(x=1.0))
        tracker.on_odometry(make_odometry(x=2.0, frame_id="map", child_frame_id="chassis"))
        assert tracker.odometry.position[0] == 2.0
        assert tracker.world_frame == "map"
        assert tracker.robot_frame == "chassis"

    def test_default_frames(self):
        tracker = PathTracker()
        assert tracker.world_frame == "world"
        assert tracker.robot_frame == "base_link"

    def test_empty_path_emits_nothing(self, tracker, caplog):
        with caplog.at_level(logging.WARNING):
            assert tracker.on_path(Path.from_points([])) is None
        assert "empty path" in caplog.text
        assert tracker.pid.integral == 0.0


# =============================================================================
# Test: Non-finite Inputs
# =============================================================================

class TestNonFiniteInputs:
    """Test hold behaviour for NaN/inf inputs."""

    def test_nan_odometry_holds(self, tracker, make_odometry, caplog):
        with caplog.at_level(logging.WARNING):
            command = tracker.compute_control_outputs(
                make_odometry(x=math.nan), Path.from_points([(1.0, 0.0, 0.0)])
            )
        assert command == HOLD_COMMAND
        assert "Non-finite" in caplog.text

    def test_inf_path_holds(self, tracker, make_odometry):
        command = tracker.compute_control_outputs(
            make_odometry(), Path.from_points([(math.inf, 0.0, 0.0)])
        )
        assert command == HOLD_COMMAND

    def test_bad_input_does_not_touch_pid_state(self, tracker, make_odometry):
        tracker.compute_control_outputs(
            make_odometry(velocity=(math.nan, 0.0, 0.0)), Path.from_points([(1.0, 0.0, 0.0)])
        )
        assert tracker.pid.integral == 0.0
        assert tracker.pid.prev_error == 0.0

    def test_hold_clears_diagnostics(self, tracker, make_odometry):
        tracker.compute_control_outputs(make_odometry(), Path.from_points([(3.0, 0.0, 0.0)]))
        assert tracker.last_diagnostics["target_x"] == 3.0

        tracker.compute_control_outputs(make_odometry(), Path.from_points([(math.nan, 0.0, 0.0)]))
        assert tracker.last_diagnostics == {}

    def test_skipped_path_clears_diagnostics(self, tracker):
        tracker.on_path(Path.from_points([(3.0, 0.0, 0.0)]))
        assert tracker.on_path(Path.from_points([])) is None
        assert tracker.last_diagnostics == {}

    def test_nan_speed_target_is_never_applied(self, tracker, gate, make_odometry, make_bundle):
        """A NaN bundle is dropped, so the speed loop keeps working on the last good one."""
        gate.update(make_bundle(speed_target=math.nan, kp=1.0, ki=0.1))
        command = tracker.compute_control_outputs(
            make_odometry(velocity=(5.0, 0.0, 0.0)), Path.from_points([(1.0, 0.0, 0.0)])
        )
        assert command.is_finite()
        assert command.linear == -1.0
        assert math.isfinite(tracker.pid.integral)
