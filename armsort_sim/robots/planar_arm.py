"""
Simulated two-link planar arm with forward and inverse kinematics.

The arm is a fixed base with two revolute joints.  ``angle1`` is measured
in the base frame and ``angle2`` relative to the direction of segment 1.
Screen coordinates are used throughout (y grows downward), so negative
angles point the arm up the canvas.

Classes:
    PlanarArm: Mutable arm state (joint angles, gripper, held box).
    ArmPose: Frozen snapshot of joint positions for presentation.

Functions:
    forward_kinematics: Joint angles to elbow and end-effector points.
    inverse_kinematics: Target point to elbow-down joint angles.
    reach_limits: Inner and outer radius of the reachable annulus.
    is_reachable: Whether a point lies inside the annulus.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from armsort_sim.errors import UnreachableTargetError
from armsort_sim.utils.constants import (
    ARM_BASE,
    ARM_HOME_ANGLES,
    ARM_SEGMENT1_LENGTH,
    ARM_SEGMENT2_LENGTH,
    Point,
)
from armsort_sim.utils.helpers import clamp


@dataclass
class PlanarArm:
    """A simulated two-segment planar arm.

    Attributes:
        base: Fixed (x, y) position of the shoulder joint.
        segment1_length: Length of the upper segment.
        segment2_length: Length of the forearm segment.
        home_angles: Joint angles restored by ``reset``.
        joint_positions: Current ``[angle1, angle2]`` in radians.
        gripper_open: Whether the gripper is currently open.
        held_index: Index of the box currently held, or *None*.
    """

    base: Point = ARM_BASE
    segment1_length: float = ARM_SEGMENT1_LENGTH
    segment2_length: float = ARM_SEGMENT2_LENGTH
    home_angles: Tuple[float, float] = ARM_HOME_ANGLES
    joint_positions: np.ndarray = field(
        default_factory=lambda: np.array(ARM_HOME_ANGLES, dtype=np.float64)
    )
    gripper_open: bool = True
    held_index: Optional[int] = None

    def reset(self) -> np.ndarray:
        """Return to the home pose with an open, empty gripper.

        Returns:
            A copy of the post-reset joint positions.
        """
        self.joint_positions = np.array(self.home_angles, dtype=np.float64)
        self.gripper_open = True
        self.held_index = None
        return self.joint_positions.copy()

    @property
    def angle1(self) -> float:
        """Shoulder angle in radians."""
        return float(self.joint_positions[0])

    @property
    def angle2(self) -> float:
        """Elbow angle in radians, relative to segment 1."""
        return float(self.joint_positions[1])


@dataclass(frozen=True)
class ArmPose:
    """Read-only view of the arm for rendering.

    Attributes:
        base: Shoulder joint position.
        elbow: Elbow joint position.
        end_effector: Gripper position.
        angles: ``(angle1, angle2)`` in radians.
        gripper_open: Gripper state.
    """

    base: Point
    elbow: Point
    end_effector: Point
    angles: Tuple[float, float]
    gripper_open: bool


def forward_kinematics(arm: PlanarArm) -> ArmPose:
    """Compute elbow and end-effector points from the arm's joint angles.

    Args:
        arm: Arm whose current joint positions are used.

    Returns:
        An ``ArmPose`` with base, elbow, and end-effector points.
    """
    bx, by = arm.base
    a1, a2 = arm.angle1, arm.angle2
    ex = bx + arm.segment1_length * math.cos(a1)
    ey = by + arm.segment1_length * math.sin(a1)
    tx = ex + arm.segment2_length * math.cos(a1 + a2)
    ty = ey + arm.segment2_length * math.sin(a1 + a2)
    return ArmPose(
        base=(bx, by),
        elbow=(ex, ey),
        end_effector=(tx, ty),
        angles=(a1, a2),
        gripper_open=arm.gripper_open,
    )


def reach_limits(arm: PlanarArm) -> Tuple[float, float]:
    """Return ``(min_reach, max_reach)`` of the arm's annulus."""
    l1, l2 = arm.segment1_length, arm.segment2_length
    return abs(l1 - l2), l1 + l2


def is_reachable(target: Point, arm: PlanarArm) -> bool:
    """Whether *target* lies inside the closed reachable annulus."""
    min_reach, max_reach = reach_limits(arm)
    distance = math.hypot(target[0] - arm.base[0], target[1] - arm.base[1])
    return min_reach <= distance <= max_reach


def inverse_kinematics(target: Point, arm: PlanarArm) -> Tuple[float, float]:
    """Solve elbow-down joint angles that put the end effector at *target*.

    Only the elbow-down branch (``angle2 <= 0``) is returned.  The law of
    cosines argument is clamped to [-1, 1] so that targets on the reach
    boundary survive floating-point overshoot.

    Args:
        target: Desired end-effector (x, y).
        arm: Arm supplying base position and segment lengths.

    Returns:
        Tuple ``(angle1, angle2)`` in radians.

    Raises:
        UnreachableTargetError: If the distance to *target* exceeds
            ``l1 + l2`` or falls below ``|l1 - l2|``.
    """
    l1, l2 = arm.segment1_length, arm.segment2_length
    dx = target[0] - arm.base[0]
    dy = target[1] - arm.base[1]
    distance = math.sqrt(dx * dx + dy * dy)
    min_reach, max_reach = reach_limits(arm)
    if distance > max_reach or distance < min_reach:
        raise UnreachableTargetError(tuple(target), distance, min_reach, max_reach)

    cos_angle2 = (distance * distance - l1 * l1 - l2 * l2) / (2.0 * l1 * l2)
    angle2 = -math.acos(clamp(cos_angle2, -1.0, 1.0))
    k1 = l1 + l2 * math.cos(angle2)
    k2 = l2 * math.sin(angle2)
    angle1 = math.atan2(dy, dx) - math.atan2(k2, k1)
    return angle1, angle2
