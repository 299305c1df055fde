"""
Two-link planar arm kinematics and bounded joint stepping.

Provides the arm state container, forward and inverse kinematics, and the
rate-limited motion integrator used by the sorting state machine.
"""

from armsort_sim.robots.motion import step_joint_angles
from armsort_sim.robots.planar_arm import (
    ArmPose,
    PlanarArm,
    forward_kinematics,
    inverse_kinematics,
    is_reachable,
    reach_limits,
)

__all__ = [
    "ArmPose",
    "PlanarArm",
    "forward_kinematics",
    "inverse_kinematics",
    "is_reachable",
    "reach_limits",
    "step_joint_angles",
]
