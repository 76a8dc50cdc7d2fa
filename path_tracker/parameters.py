"""Runtime-tunable parameters for the path tracker.

Parameter updates may arrive at any time, from any thread. They are held here
until the tracker picks them up at the start of its next control computation,
so a computation never sees a half-applied bundle.
"""

import logging
import math
import threading
from dataclasses import replace
from typing import Optional

from .config import (
    AHEAD_DISTANCE,
    DEFAULT_PID_KD,
    DEFAULT_PID_KI,
    DEFAULT_PID_KP,
    DEFAULT_SPEED_TARGET,
    MIN_LOOKAHEAD_DISTANCE,
)
from .messages import ParameterBundle


def default_parameters() -> ParameterBundle:
    """Bundle used before any update arrives."""
    return ParameterBundle(
        speed_target=DEFAULT_SPEED_TARGET,
        kp=DEFAULT_PID_KP,
        ki=DEFAULT_PID_KI,
        kd=DEFAULT_PID_KD,
        ahead_distance=AHEAD_DISTANCE,
    )


def sanitize_lookahead(ahead_distance: Optional[float]) -> float:
    """Resolve the lookahead distance for a bundle.

    Args:
        ahead_distance: Requested lookahead (meters), or None.

    Returns:
        AHEAD_DISTANCE when nothing was requested, otherwise the requested
        value clamped up to MIN_LOOKAHEAD_DISTANCE.
    """
    if ahead_distance is None:
        return AHEAD_DISTANCE
    if not math.isfinite(ahead_distance) or ahead_distance < MIN_LOOKAHEAD_DISTANCE:
        logging.warning(
            f"Rejected lookahead distance {ahead_distance}, clamping to {MIN_LOOKAHEAD_DISTANCE}m"
        )
        return MIN_LOOKAHEAD_DISTANCE
    return ahead_distance


class ParameterGate:
    """Holds the latest desired parameter bundle and a dirty flag.

    Writers call ``update``; the tracker calls ``consume`` once per
    computation. Updates that arrive between two computations are coalesced
    and only the last one is ever applied.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: Optional[ParameterBundle] = None
        self._dirty: bool = False

    @property
    def dirty(self) -> bool:
        """True while a bundle is waiting to be applied."""
        with self._lock:
            return self._dirty

    def update(self, bundle: ParameterBundle) -> bool:
        """Store a new desired bundle, replacing any pending one.

        A bundle whose speed target or gains are not finite is dropped with a
        warning, and whatever was pending before stays pending.

        Args:
            bundle: Desired parameters. The lookahead is resolved here.

        Returns:
            True if the bundle was accepted.
        """
        values = (bundle.speed_target, bundle.kp, bundle.ki, bundle.kd)
        if not all(math.isfinite(v) for v in values):
            logging.warning(
                f"Rejecting parameters with non-finite values: speed={bundle.speed_target} "
                f"Kp={bundle.kp} Ki={bundle.ki} Kd={bundle.kd}"
            )
            return False

        bundle = replace(bundle, ahead_distance=sanitize_lookahead(bundle.ahead_distance))
        with self._lock:
            if self._dirty:
                logging.debug("Coalescing pending parameter update")
            self._pending = bundle
            self._dirty = True
        return True

    def consume(self) -> Optional[ParameterBundle]:
        """Take the pending bundle and clear the dirty flag.

        Returns:
            The latest bundle if one is pending, otherwise None.
        """
        with self._lock:
            if not self._dirty:
                return None
            bundle = self._pending
            self._pending = None
            self._dirty = False
        return bundle
