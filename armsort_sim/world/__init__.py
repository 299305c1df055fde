"""
World model: the arm, the boxes, the color zones, and sorted counts.
"""

from armsort_sim.world.model import (
    Box,
    Rect,
    StagingLayout,
    WorldModel,
    WorldSnapshot,
    Zone,
    build_world,
)

__all__ = [
    "Box",
    "Rect",
    "StagingLayout",
    "WorldModel",
    "WorldSnapshot",
    "Zone",
    "build_world",
]
