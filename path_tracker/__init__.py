"""Path Tracker - Pure Pursuit Path Tracking for Wheeled Ground Vehicles

A closed-loop controller that turns a continuously updated reference path and
the vehicle's odometry into velocity commands (forward speed + yaw rate).

## Architecture Overview

### Speed Control (pid.py)
Fixed-step PID regulator from measured speed to target speed.
- Sample period fixed at 0.1s
- Output clamped to [-1.0, 1.0] m/s
- Gains retunable at runtime without resetting accumulated state

### Steering (follower.py)
Pure pursuit target selection.
- First waypoint at or beyond the lookahead distance (1.5m)
- Falls back to the final waypoint
- Yaw rate = 1.9 * heading error to the target

### Control Law (tracker.py)
Caches odometry, runs one computation per path update and applies pending
parameter updates at the start of each computation.

### Parameters (parameters.py)
Thread-safe holder for the latest tunable bundle (target speed, PID gains,
lookahead). Updates between two computations are coalesced.

## Modules

- `config.py` - Centralized configuration parameters
- `messages.py` - Odometry, path, parameter and command message types
- `pid.py` - PID speed regulator
- `follower.py` - Target point selection and heading geometry
- `parameters.py` - Parameter update gate
- `tracker.py` - Control law
- `client.py` - WebSocket node and logging setup
- `data_collector.py` - CSV recording of runs
- `visualization.py`, `plot_results.py`, `plot_styles.py` - Post-run plots

## Quick Start

```bash
python -m path_tracker --uri ws://localhost:8765 --record .
python -m path_tracker.plot_results --save
```
"""

__version__ = "0.1.0"

from .follower import EmptyPathError, calculate_target_point, normalize_angle
from .messages import Odometry, ParameterBundle, Path, VelocityCommand
from .parameters import ParameterGate
from .pid import PID
from .tracker import PathTracker

__all__ = [
    "PID",
    "PathTracker",
    "ParameterGate",
    "ParameterBundle",
    "Odometry",
    "Path",
    "VelocityCommand",
    "EmptyPathError",
    "calculate_target_point",
    "normalize_angle",
]
