"""Pure pursuit target selection and heading geometry.

This module implements the lateral half of the tracker:
- Picks the first waypoint at or beyond the lookahead distance
- Extracts yaw from an orientation quaternion
- Wraps heading errors into [-pi, pi)
"""

import math
from typing import Sequence

import numpy as np
import numpy.typing as npt

from .messages import Path


class EmptyPathError(ValueError):
    """Raised when a target is requested from a path with no waypoints."""


def calculate_target_point(
    current_position: Sequence[float], path: Path, lookahead_distance: float
) -> npt.NDArray[np.float64]:
    """Find the waypoint to steer toward.

    Scans waypoints in path order and returns the first one whose 3D distance
    from the current position is at least the lookahead distance. Ties at
    exactly the lookahead count as a match. If every waypoint is closer, the
    final waypoint is returned. The result is always an actual waypoint, never
    an interpolated point.

    Args:
        current_position: Vehicle position (x, y, z) in meters.
        path: Reference path.
        lookahead_distance: Minimum distance to the target (meters).

    Returns:
        Selected waypoint as an array (x, y, z).

    Raises:
        EmptyPathError: If the path has no waypoints.
    """
    if len(path) == 0:
        raise EmptyPathError("Cannot select a target point from an empty path")

    positions = path.positions
    distances = np.linalg.norm(positions - np.asarray(current_position, dtype=np.float64), axis=1)

    candidates = np.flatnonzero(distances >= lookahead_distance)
    if candidates.size > 0:
        return positions[candidates[0]]

    # Use the final point if no suitable lookahead point is found
    return positions[-1]


def normalize_angle(angle: float) -> float:
    """Wrap an angle into [-pi, pi).

    Args:
        angle: Angle in radians.

    Returns:
        Equivalent angle in [-pi, pi).
    """
    wrapped = (angle + math.pi) % (2.0 * math.pi) - math.pi
    # Rounding in the modulo can land exactly on +pi
    if wrapped >= math.pi:
        wrapped -= 2.0 * math.pi
    return wrapped


def yaw_from_quaternion(x: float, y: float, z: float, w: float) -> float:
    """Yaw (rotation about z) of a quaternion, in radians."""
    siny_cosp = 2.0 * (w * z + x * y)
    cosy_cosp = 1.0 - 2.0 * (y * y + z * z)
    return math.atan2(siny_cosp, cosy_cosp)
