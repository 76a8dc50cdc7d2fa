"""Configuration parameters for the path tracker.

This module centralizes all configuration parameters including:
- Longitudinal speed controller (PID) settings
- Pure pursuit steering settings
- Default tunable parameter bundle
- WebSocket connection parameters
- Visualization settings

All parameters are documented with their purpose and valid ranges.
"""

# ============================================================================
# Speed Controller Parameters (PID)
# ============================================================================

PID_DT = 0.1
"""Fixed PID sample period (seconds).

The integral and derivative terms always assume this step, regardless of the
real time between two path updates. Path updates should arrive at ~10 Hz for
the gains to mean what they say.
"""

PID_OUTPUT_MAX = 1.0
"""Upper bound of the linear speed command (m/s). Not tunable at runtime."""

PID_OUTPUT_MIN = -1.0
"""Lower bound of the linear speed command (m/s). Not tunable at runtime."""


# ============================================================================
# Steering Parameters (Pure Pursuit)
# ============================================================================

STEERING_GAIN = 1.9
"""Proportional gain from heading error (rad) to angular rate (rad/s).

Fixed constant, not part of the tunable parameter set.
"""

AHEAD_DISTANCE = 1.5
"""Pure pursuit lookahead distance (meters).

Applied on every parameter update that does not carry its own lookahead.
"""

MIN_LOOKAHEAD_DISTANCE = 0.1
"""Smallest accepted lookahead distance (meters).

Non-positive values collapse the steering target onto the nearest waypoint,
so they are clamped up to this value at the parameter boundary.
"""


# ============================================================================
# Default Tunable Parameters
# ============================================================================

DEFAULT_SPEED_TARGET = 0.5
"""Target forward speed before the first parameter update arrives (m/s)."""

DEFAULT_PID_KP = 0.5
"""Default proportional gain. Range [0, 10]."""

DEFAULT_PID_KI = 0.2
"""Default integral gain. Range [0, 10]."""

DEFAULT_PID_KD = 0.2
"""Default derivative gain. Range [0, 10]."""


# ============================================================================
# Frames
# ============================================================================

DEFAULT_WORLD_FRAME = "world"
"""Frame id assumed for odometry until the first update names one."""

DEFAULT_ROBOT_FRAME = "base_link"
"""Body frame id assumed until the first odometry update names one."""


# ============================================================================
# Visualization Colors
# ============================================================================

PLOT_ORANGE = "#f74823"
PLOT_BLUE = "#2374f7"
PLOT_CREAM = "#fffdee"
PLOT_TAUPE = "#686a5f"
PLOT_DARK_BLUE = "#0d1b2a"

# Terminal color codes
TERM_ORANGE = "\033[38;2;247;72;35m"
"""Orange for warnings highlighted on the console."""

TERM_BLUE = "\033[38;2;35;116;247m"
"""Blue for status messages on the console."""

TERM_RESET = "\033[0m"


# ============================================================================
# WebSocket Connection Parameters
# ============================================================================

WS_URI = "ws://localhost:8765"
"""Address of the message bridge that carries odometry, path and cmd_vel."""

WS_RETRY_DELAY_SECONDS = 1
"""Initial delay before reconnecting (seconds). Doubles after each failure."""

WS_MAX_RETRY_DELAY_SECONDS = 60
"""Upper bound on the reconnect delay (seconds)."""

WS_TIMEOUT_SECONDS = 5.0
"""Receive timeout before polling the stop flag again (seconds)."""
