"""
Dataclass configurations for the sorting core.

Scene and motion defaults reproduce the original sorting demo.  Segment
lengths are longer than the demo's drawing so that every staging slot and
every zone hover point sits inside the arm's reach.

Classes:
    UnreachablePolicy: What the state machine does when IK keeps failing.
    ArmGeometry: Base position, segment lengths, and home pose.
    SceneLayout: Palette, zones, staging area, and box packing parameters.
    MotionConfig: Joint speed, tolerance, hover height, stall handling.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from armsort_sim.errors import ConfigError
from armsort_sim.utils.constants import (
    ANGLE_TOLERANCE,
    ARM_BASE,
    ARM_HOME_ANGLES,
    ARM_SEGMENT1_LENGTH,
    ARM_SEGMENT2_LENGTH,
    BOX_SIZE,
    GRID_COLUMNS,
    GRID_INSET,
    GRID_SPACING,
    HOVER_HEIGHT,
    MAX_STEP_PER_TICK,
    PALETTE,
    SLOT_MARGIN,
    SLOT_SPACING,
    STAGING_AREA,
    STALL_LIMIT,
    ZONE_ORIGINS_X,
    ZONE_SIZE,
    ZONE_Y,
    Point,
)


class UnreachablePolicy(Enum):
    """Reaction to an IK target outside the reachable annulus.

    STALL keeps retrying every tick forever.  FAULT gives up after
    ``MotionConfig.stall_limit`` consecutive failures and parks the machine
    in the Faulted phase until reset.
    """

    STALL = "stall"
    FAULT = "fault"


@dataclass(frozen=True)
class ArmGeometry:
    """Fixed geometry of the two-link arm.

    Attributes:
        base: Shoulder position in scene coordinates.
        segment1_length: Upper segment length.
        segment2_length: Forearm length.
        home_angles: Joint angles at start and after reset.
    """

    base: Point = ARM_BASE
    segment1_length: float = ARM_SEGMENT1_LENGTH
    segment2_length: float = ARM_SEGMENT2_LENGTH
    home_angles: Tuple[float, float] = ARM_HOME_ANGLES

    def validate(self) -> None:
        """Raise ``ConfigError`` for non-positive segment lengths."""
        if self.segment1_length <= 0 or self.segment2_length <= 0:
            raise ConfigError(
                "Segment lengths must be positive, got "
                f"{self.segment1_length} and {self.segment2_length}"
            )


@dataclass(frozen=True)
class SceneLayout:
    """Static scene geometry and box packing rules.

    Attributes:
        palette: Box colors; one zone per color.
        zone_origins_x: Left edge of each zone, in palette order.
        zone_y: Top edge shared by all zones.
        zone_size: Width and height of every zone.
        staging_area: ``(x, y, width, height)`` of the unsorted area.
        box_size: Width and height of every box.
        grid_columns: Boxes per row in the staging grid.
        grid_spacing: ``(dx, dy)`` between staging grid cells.
        grid_inset: Offset of the first grid cell from the staging corner.
        slot_margin: Offset of the first zone slot from the zone corner.
        slot_spacing: Distance between zone slots on both axes.
    """

    palette: Tuple[str, ...] = PALETTE
    zone_origins_x: Tuple[float, ...] = ZONE_ORIGINS_X
    zone_y: float = ZONE_Y
    zone_size: float = ZONE_SIZE
    staging_area: Tuple[float, float, float, float] = STAGING_AREA
    box_size: float = BOX_SIZE
    grid_columns: int = GRID_COLUMNS
    grid_spacing: Point = GRID_SPACING
    grid_inset: float = GRID_INSET
    slot_margin: float = SLOT_MARGIN
    slot_spacing: float = SLOT_SPACING

    def validate(self) -> None:
        """Raise ``ConfigError`` for an inconsistent layout."""
        if not self.palette:
            raise ConfigError("Palette must contain at least one color")
        if len(set(self.palette)) != len(self.palette):
            raise ConfigError(f"Palette colors must be unique: {self.palette}")
        if len(self.zone_origins_x) != len(self.palette):
            raise ConfigError(
                f"Expected {len(self.palette)} zone origins, "
                f"got {len(self.zone_origins_x)}"
            )
        if self.grid_columns < 1:
            raise ConfigError("grid_columns must be at least 1")
        if self.box_size <= 0 or self.zone_size <= 0:
            raise ConfigError("Box and zone sizes must be positive")


@dataclass(frozen=True)
class MotionConfig:
    """Arm motion and scheduling parameters.

    Attributes:
        max_step: Largest joint change per tick (radians).
        tolerance: Per-joint delta counted as "reached" (radians).
        hover_height: Height above the zone centre for the place approach.
        unreachable_policy: Stall forever or fault after ``stall_limit``.
        stall_limit: Consecutive unreachable ticks before faulting.
    """

    max_step: float = MAX_STEP_PER_TICK
    tolerance: float = ANGLE_TOLERANCE
    hover_height: float = HOVER_HEIGHT
    unreachable_policy: UnreachablePolicy = UnreachablePolicy.STALL
    stall_limit: int = STALL_LIMIT

    def validate(self) -> None:
        """Raise ``ConfigError`` for non-positive speeds or limits."""
        if self.max_step <= 0:
            raise ConfigError(f"max_step must be positive, got {self.max_step}")
        if self.tolerance <= 0:
            raise ConfigError(f"tolerance must be positive, got {self.tolerance}")
        if self.stall_limit < 1:
            raise ConfigError(f"stall_limit must be at least 1, got {self.stall_limit}")


def parse_unreachable_policy(value: str | UnreachablePolicy) -> UnreachablePolicy:
    """Convert a policy name such as ``'fault'`` to ``UnreachablePolicy``.

    Raises:
        ConfigError: If *value* names no policy.
    """
    if isinstance(value, UnreachablePolicy):
        return value
    try:
        return UnreachablePolicy(value.lower())
    except ValueError as exc:
        choices = [p.value for p in UnreachablePolicy]
        raise ConfigError(
            f"Unknown unreachable policy '{value}'. Choose from {choices}"
        ) from exc
