"""
Robotic Arm Sorting Simulation.

A two-link planar manipulator that picks colored boxes from a staging area
and places them into color-matched zones.  The control core (kinematics,
motion integration, world model, and task state machine) is pure and
tick-driven; rendering, input handling, and the host loop are thin
collaborators layered on top.

Modules:
    robots: Two-link planar arm kinematics and bounded joint stepping.
    world: World model owning the arm, boxes, zones, and sorted counts.
    tasks: Pick-and-place task state machine.
    envs: Gymnasium-compatible environment wrapping the core.
    runtime: Fixed-timestep host loop with start/stop/reset signals.
    controls: Keyboard start/stop/reset controls.
    visualization: Pygame live rendering with HUD.
    utils: Shared constants and small helpers.
"""

from armsort_sim.errors import (
    ConfigError,
    GripperStateError,
    SortingSimError,
    StaleTargetError,
    UnreachableTargetError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "GripperStateError",
    "SortingSimError",
    "StaleTargetError",
    "UnreachableTargetError",
]
