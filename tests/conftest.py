# tests/conftest.py
"""
Root pytest configuration and shared fixtures for path tracker tests.
"""

import math

import matplotlib

matplotlib.use("Agg")

import pytest

from path_tracker.messages import Odometry, ParameterBundle, Path
from path_tracker.parameters import ParameterGate
from path_tracker.tracker import PathTracker


def quaternion_from_yaw(yaw):
    """Quaternion (x, y, z, w) for a pure rotation about z."""
    return (0.0, 0.0, math.sin(yaw / 2.0), math.cos(yaw / 2.0))


@pytest.fixture
def make_odometry():
    """
    Factory for odometry snapshots.

    Usage:
        def test_something(make_odometry):
            odom = make_odometry(x=1.0, yaw=math.pi / 2, velocity=(0.5, 0.0, 0.0))
    """

    def _make(x=0.0, y=0.0, z=0.0, yaw=0.0, velocity=(0.0, 0.0, 0.0),
              frame_id="world", child_frame_id="base_link"):
        return Odometry(
            frame_id=frame_id,
            child_frame_id=child_frame_id,
            position=(x, y, z),
            orientation=quaternion_from_yaw(yaw),
            linear_velocity=tuple(velocity),
        )

    return _make


@pytest.fixture
def make_bundle():
    """Factory for parameter bundles with pure-proportional defaults."""

    def _make(speed_target=1.0, kp=1.0, ki=0.0, kd=0.0, ahead_distance=None):
        return ParameterBundle(
            speed_target=speed_target, kp=kp, ki=ki, kd=kd, ahead_distance=ahead_distance
        )

    return _make


@pytest.fixture
def gate():
    return ParameterGate()


@pytest.fixture
def tracker(gate):
    """PathTracker wired to the shared gate fixture."""
    return PathTracker(gate=gate)


@pytest.fixture
def straight_path():
    """Waypoints every 0.5m along +x, from 0.5m to 5m."""
    return Path.from_points([(0.5 * i, 0.0, 0.0) for i in range(1, 11)])
