"""Message types exchanged with the path tracker.

Odometry and path updates come in, velocity commands go out. Each type can be
built from and turned into the JSON dictionaries used on the wire.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np
import numpy.typing as npt

from .config import DEFAULT_ROBOT_FRAME, DEFAULT_WORLD_FRAME

Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]


def _vector_from_dict(data: Dict[str, Any]) -> Vector3:
    return (float(data["x"]), float(data["y"]), float(data["z"]))


def _vector_to_dict(vector: Vector3) -> Dict[str, float]:
    return {"x": vector[0], "y": vector[1], "z": vector[2]}


@dataclass(frozen=True)
class Odometry:
    """Latest pose and velocity of the vehicle.

    Attributes:
        frame_id: World frame the pose is expressed in.
        child_frame_id: Body frame of the vehicle.
        position: (x, y, z) in meters.
        orientation: Quaternion (x, y, z, w).
        linear_velocity: Linear velocity vector (m/s).
    """

    frame_id: str = DEFAULT_WORLD_FRAME
    child_frame_id: str = DEFAULT_ROBOT_FRAME
    position: Vector3 = (0.0, 0.0, 0.0)
    orientation: Quaternion = (0.0, 0.0, 0.0, 1.0)
    linear_velocity: Vector3 = (0.0, 0.0, 0.0)

    @property
    def speed(self) -> float:
        """Magnitude of the linear velocity (m/s)."""
        return math.hypot(*self.linear_velocity)

    def is_finite(self) -> bool:
        """Return True if every numeric field is finite."""
        values = self.position + self.orientation + self.linear_velocity
        return all(math.isfinite(v) for v in values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Odometry":
        """Build odometry from an ``odometry`` wire message.

        Raises:
            KeyError: If a required field is missing.
            TypeError, ValueError: If a field is not numeric.
        """
        pose = data["pose"]
        q = pose["orientation"]
        return cls(
            frame_id=data.get("header", {}).get("frame_id", DEFAULT_WORLD_FRAME),
            child_frame_id=data.get("child_frame_id", DEFAULT_ROBOT_FRAME),
            position=_vector_from_dict(pose["position"]),
            orientation=(float(q["x"]), float(q["y"]), float(q["z"]), float(q["w"])),
            linear_velocity=_vector_from_dict(data["twist"]["linear"]),
        )


@dataclass(frozen=True, eq=False)
class Path:
    """Ordered, immutable sequence of waypoints.

    Attributes:
        positions: Read-only array of shape (N, 3) holding waypoint positions.
        frame_id: Frame the waypoints are expressed in.
    """

    positions: npt.NDArray[np.float64]
    frame_id: str = DEFAULT_WORLD_FRAME

    def __post_init__(self) -> None:
        positions = np.array(self.positions, dtype=np.float64)
        if positions.size == 0:
            positions = positions.reshape(0, 3)
        elif positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(f"Path positions must have shape (N, 3), got {positions.shape}")
        positions.flags.writeable = False
        object.__setattr__(self, "positions", positions)

    def __len__(self) -> int:
        return int(self.positions.shape[0])

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.positions)))

    @classmethod
    def from_points(cls, points, frame_id: str = DEFAULT_WORLD_FRAME) -> "Path":
        """Build a path from an iterable of (x, y, z) tuples."""
        return cls(positions=np.array(list(points), dtype=np.float64), frame_id=frame_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Path":
        """Build a path from a ``path`` wire message.

        Each entry of ``poses`` may be a stamped pose ``{"pose": {"position": ...}}``
        or a bare ``{"position": ...}``.

        Raises:
            KeyError: If a pose has no position.
            TypeError, ValueError: If a coordinate is not numeric.
        """
        points = []
        for entry in data.get("poses", []):
            pose = entry.get("pose", entry)
            points.append(_vector_from_dict(pose["position"]))
        return cls.from_points(
            points, frame_id=data.get("header", {}).get("frame_id", DEFAULT_WORLD_FRAME)
        )


@dataclass(frozen=True)
class ParameterBundle:
    """Tunable controller parameters.

    Attributes:
        speed_target: Target forward speed (m/s).
        kp: Proportional gain.
        ki: Integral gain.
        kd: Derivative gain.
        ahead_distance: Pure pursuit lookahead (meters). None means use the
            configured constant.
    """

    speed_target: float
    kp: float
    ki: float
    kd: float
    ahead_distance: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterBundle":
        """Build a bundle from a ``parameters`` wire message."""
        ahead = data.get("ahead_distance")
        return cls(
            speed_target=float(data["speed_target"]),
            kp=float(data["PID_Kp"]),
            ki=float(data["PID_Ki"]),
            kd=float(data["PID_Kd"]),
            ahead_distance=float(ahead) if ahead is not None else None,
        )


@dataclass(frozen=True)
class VelocityCommand:
    """Velocity command sent to the base.

    Attributes:
        linear: Forward speed (m/s), published as linear.x.
        angular: Yaw rate (rad/s), published as angular.z.
    """

    linear: float = 0.0
    angular: float = 0.0

    def is_finite(self) -> bool:
        return math.isfinite(self.linear) and math.isfinite(self.angular)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as a ``cmd_vel`` wire message with all other fields zero."""
        return {
            "message_type": "cmd_vel",
            "linear": _vector_to_dict((self.linear, 0.0, 0.0)),
            "angular": _vector_to_dict((0.0, 0.0, self.angular)),
        }


HOLD_COMMAND = VelocityCommand()
"""Zero command sent when inputs are unusable."""
