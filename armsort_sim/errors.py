"""
Exception hierarchy for the sorting simulation.

Only ``UnreachableTargetError`` is an expected, recoverable condition; the
task state machine catches it and applies its unreachable policy.  The
others signal programming or configuration mistakes and propagate.
"""

from __future__ import annotations


class SortingSimError(Exception):
    """Base class for every error raised by armsort_sim."""


class UnreachableTargetError(SortingSimError, ValueError):
    """Raised when an IK target lies outside the arm's annulus of reach.

    Attributes:
        target: The requested (x, y) point.
        distance: Distance from the arm base to *target*.
        min_reach: Inner radius of the reachable annulus.
        max_reach: Outer radius of the reachable annulus.
    """

    def __init__(
        self,
        target: tuple,
        distance: float,
        min_reach: float,
        max_reach: float,
    ) -> None:
        self.target = target
        self.distance = distance
        self.min_reach = min_reach
        self.max_reach = max_reach
        super().__init__(
            f"Target ({target[0]:.2f}, {target[1]:.2f}) at distance {distance:.2f} "
            f"is outside reach [{min_reach:.2f}, {max_reach:.2f}]"
        )


class StaleTargetError(SortingSimError, LookupError):
    """Raised when a task target refers to a box table replaced by reset."""


class GripperStateError(SortingSimError, RuntimeError):
    """Raised when a gripper or sorted-flag invariant would be violated."""


class ConfigError(SortingSimError, ValueError):
    """Raised for invalid configuration values."""
