"""
Rate-limited joint stepping.

Each tick moves every joint toward its target by at most ``max_step``
radians.  The step saturates at the remaining delta, so convergence takes a
fixed number of ticks with no overshoot.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from armsort_sim.utils.constants import ANGLE_TOLERANCE


def step_joint_angles(
    current: Sequence[float],
    target: Sequence[float],
    max_step: float,
    tolerance: float = ANGLE_TOLERANCE,
) -> Tuple[np.ndarray, bool]:
    """Advance *current* joint angles toward *target* by one bounded step.

    ``reached`` is evaluated on the delta before the move, so the tick that
    reports it also lands the joints exactly on *target* (any remaining delta
    is already below ``max_step``).

    Args:
        current: Present joint angles.
        target: Desired joint angles.
        max_step: Largest per-joint change allowed this tick (radians).
        tolerance: Per-joint delta below which the target counts as reached.

    Returns:
        Tuple of (new joint angles, reached flag for all joints).
    """
    cur = np.asarray(current, dtype=np.float64)
    tgt = np.asarray(target, dtype=np.float64)
    delta = tgt - cur
    magnitude = np.abs(delta)
    stepped = cur + np.sign(delta) * np.minimum(magnitude, max_step)
    # snap within one step so the joint lands exactly on target
    new = np.where(magnitude <= max_step, tgt, stepped)
    reached = bool(np.all(magnitude < tolerance))
    return new, reached
