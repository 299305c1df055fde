"""
Shared constants and type aliases for the armsort_sim package.

Scene defaults come from the original sorting demo: an 800x600 canvas, four
color zones along the bottom-left, and a 150x130 staging area on the right.
Observation key names follow the LeRobot conventions so that the Gymnasium
environment can be consumed by LeRobot-style tooling.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

Point = Tuple[float, float]

# ---------------------------------------------------------------------------
# Observation / action key names (match upstream LeRobot constants)
# ---------------------------------------------------------------------------
ACTION: str = "action"
OBS_STATE: str = "observation.state"
OBS_IMAGE: str = "observation.image"

# ---------------------------------------------------------------------------
# Default rendering dimensions
# ---------------------------------------------------------------------------
DEFAULT_RENDER_WIDTH: int = 800
DEFAULT_RENDER_HEIGHT: int = 600
DEFAULT_FPS: int = 30

# ---------------------------------------------------------------------------
# Arm geometry defaults (scene units, radians)
# ---------------------------------------------------------------------------
ARM_BASE: Point = (400.0, 500.0)
ARM_SEGMENT1_LENGTH: float = 180.0
ARM_SEGMENT2_LENGTH: float = 160.0
ARM_HOME_ANGLES: Tuple[float, float] = (-math.pi / 4, -math.pi / 3)

# ---------------------------------------------------------------------------
# Motion defaults
# ---------------------------------------------------------------------------
MAX_STEP_PER_TICK: float = 0.05
ANGLE_TOLERANCE: float = 0.01
HOVER_HEIGHT: float = 40.0
STALL_LIMIT: int = 120

# ---------------------------------------------------------------------------
# Scene layout defaults
# ---------------------------------------------------------------------------
PALETTE: Tuple[str, ...] = ("red", "blue", "green", "yellow")
ZONE_ORIGINS_X: Tuple[float, ...] = (50.0, 150.0, 250.0, 350.0)
ZONE_Y: float = 450.0
ZONE_SIZE: float = 80.0
STAGING_AREA: Tuple[float, float, float, float] = (600.0, 400.0, 150.0, 130.0)
OBJECT_COUNT: int = 12
BOX_SIZE: float = 30.0
GRID_COLUMNS: int = 3
GRID_SPACING: Point = (45.0, 35.0)
GRID_INSET: float = 10.0
SLOT_MARGIN: float = 10.0
SLOT_SPACING: float = 35.0

# ---------------------------------------------------------------------------
# Color palette (RGB 0-255) used by the 2-D renderer
# ---------------------------------------------------------------------------
COLOR_BACKGROUND: Tuple[int, int, int] = (26, 26, 46)
COLOR_STAGING: Tuple[int, int, int] = (136, 136, 136)
COLOR_BASE: Tuple[int, int, int] = (85, 85, 85)
COLOR_JOINT: Tuple[int, int, int] = (102, 102, 102)
COLOR_SEGMENT1: Tuple[int, int, int] = (255, 107, 107)
COLOR_SEGMENT2: Tuple[int, int, int] = (78, 205, 196)
COLOR_GRIPPER: Tuple[int, int, int] = (255, 230, 109)
COLOR_OUTLINE: Tuple[int, int, int] = (0, 0, 0)
COLOR_TEXT: Tuple[int, int, int] = (240, 240, 240)

NAMED_COLORS: Dict[str, Tuple[int, int, int]] = {
    "red": (255, 0, 0),
    "blue": (0, 0, 255),
    "green": (0, 128, 0),
    "yellow": (255, 255, 0),
}


class FeatureType(Enum):
    """Enumeration of observation feature types, matching LeRobot upstream."""

    ACTION = "action"
    STATE = "state"
    VISUAL = "visual"


@dataclass(frozen=True)
class PolicyFeature:
    """Describes a single feature produced or consumed by the environment.

    Attributes:
        type: The semantic category of the feature.
        shape: Tuple of integers describing the array shape (excluding batch).
    """

    type: FeatureType
    shape: Tuple[int, ...]
