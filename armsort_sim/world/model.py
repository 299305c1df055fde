"""
World model for the sorting simulation.

The world exclusively owns the arm, the box table, the zones, and the
sorted counters.  Boxes are frozen records replaced in place by the
mutators below, so snapshots handed to presentation code can share them
without copying.  Every reset bumps ``generation``; task targets carry the
generation they were issued under and are rejected once it changes.

Classes:
    Rect: Axis-aligned rectangle.
    Box: A movable colored object.
    Zone: A color-matched destination rectangle.
    StagingLayout: Grid packing rule for the staging area.
    WorldModel: Mutable world state and its mutators.
    WorldSnapshot: Frozen read-only view for presentation.

Functions:
    build_world: Create a world from the scene and arm configurations.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from armsort_sim.configs import ArmGeometry, SceneLayout
from armsort_sim.errors import GripperStateError, StaleTargetError
from armsort_sim.robots.planar_arm import (
    ArmPose,
    PlanarArm,
    forward_kinematics,
    is_reachable,
)
from armsort_sim.utils.constants import (
    BOX_SIZE,
    GRID_COLUMNS,
    GRID_INSET,
    GRID_SPACING,
    OBJECT_COUNT,
    SLOT_MARGIN,
    SLOT_SPACING,
    Point,
)
from armsort_sim.utils.helpers import seed_rngs

logger = logging.getLogger(__name__)

# Zone slots are packed two per row.
SLOT_COLUMNS: int = 2


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle given by its top-left corner and size."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        """Midpoint of the rectangle."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point) -> bool:
        """Half-open containment: left/top edges inside, right/bottom outside."""
        px, py = point
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height


@dataclass(frozen=True)
class Box:
    """A movable box.

    Attributes:
        id: Creation index, stable until the next reset.
        color: Palette color name.
        x: Left edge.
        y: Top edge.
        width: Box width.
        height: Box height.
        sorted: Set once when the box is picked; never cleared before reset.
    """

    id: int
    color: str
    x: float
    y: float
    width: float = BOX_SIZE
    height: float = BOX_SIZE
    sorted: bool = False

    @property
    def center(self) -> Point:
        """Midpoint of the box, where the gripper grabs it."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def rect(self) -> Rect:
        """Footprint of the box as a ``Rect``."""
        return Rect(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Zone:
    """Destination bucket for one color."""

    color: str
    rect: Rect

    @property
    def center(self) -> Point:
        """Centre of the zone rectangle."""
        return self.rect.center


@dataclass(frozen=True)
class StagingLayout:
    """Grid placement of freshly created boxes inside the staging area.

    Box *i* sits at column ``i % columns`` and row ``i // columns``.
    """

    columns: int = GRID_COLUMNS
    spacing: Point = GRID_SPACING
    inset: float = GRID_INSET
    box_size: float = BOX_SIZE

    def position(self, index: int, area: Rect) -> Point:
        """Top-left corner of box *index* inside the staging *area*."""
        col, row = index % self.columns, index // self.columns
        return (
            area.x + self.inset + col * self.spacing[0],
            area.y + self.inset + row * self.spacing[1],
        )


@dataclass(frozen=True)
class WorldSnapshot:
    """Read-only view of the world between ticks.

    Attributes:
        arm: Arm pose including elbow and end-effector points.
        boxes: All boxes in creation order.
        zones: All zones in palette order.
        staging_area: The unsorted area rectangle.
        sorted_counts: Placements per color.
        held_index: Index of the held box, or *None*.
        generation: Reset counter of the world that produced this snapshot.
    """

    arm: ArmPose
    boxes: Tuple[Box, ...]
    zones: Tuple[Zone, ...]
    staging_area: Rect
    sorted_counts: Mapping[str, int]
    held_index: Optional[int]
    generation: int


@dataclass
class WorldModel:
    """Mutable world state.

    Only the task state machine should call the mutators; presentation code
    reads ``snapshot()``.

    Attributes:
        arm: The two-link arm.
        zones: Destination zones, one per palette color.
        staging_area: Rectangle the box batch is laid out in.
        palette: Colors boxes are drawn from.
        layout: Grid rule for the staging area.
        object_count: Boxes created per batch.
        slot_margin: Offset of the first slot from a zone's corner.
        slot_spacing: Distance between neighbouring zone slots.
        boxes: Box table, indexed by creation order.
        sorted_counts: Placements per color.
        generation: Incremented by every regeneration of the box table.
    """

    arm: PlanarArm
    zones: Tuple[Zone, ...]
    staging_area: Rect
    palette: Tuple[str, ...]
    layout: StagingLayout = field(default_factory=StagingLayout)
    object_count: int = OBJECT_COUNT
    slot_margin: float = SLOT_MARGIN
    slot_spacing: float = SLOT_SPACING
    boxes: List[Box] = field(default_factory=list)
    sorted_counts: Dict[str, int] = field(default_factory=dict)
    generation: int = 0
    rng: np.random.Generator = field(default_factory=lambda: seed_rngs(None))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def initialize(
        cls,
        object_count: int,
        palette: Sequence[str],
        layout: StagingLayout,
        *,
        arm: PlanarArm,
        zones: Sequence[Zone],
        staging_area: Rect,
        rng: Optional[np.random.Generator] = None,
        slot_margin: float = SLOT_MARGIN,
        slot_spacing: float = SLOT_SPACING,
    ) -> "WorldModel":
        """Create a world with a fresh batch of randomly colored boxes.

        Args:
            object_count: Number of boxes to create.
            palette: Colors to draw box colors from.
            layout: Grid rule placing boxes in the staging area.
            arm: The arm; it is reset to its home pose.
            zones: Destination zones.
            staging_area: Area the boxes are laid out in.
            rng: Random generator for box colors.
            slot_margin: Offset of the first zone slot.
            slot_spacing: Distance between zone slots.

        Returns:
            A ready-to-run ``WorldModel``.
        """
        world = cls(
            arm=arm,
            zones=tuple(zones),
            staging_area=staging_area,
            palette=tuple(palette),
            layout=layout,
            object_count=object_count,
            slot_margin=slot_margin,
            slot_spacing=slot_spacing,
            rng=rng if rng is not None else seed_rngs(None),
        )
        world._populate()
        return world

    def _populate(self) -> None:
        """Fill the box table and zero the counters."""
        colors = self.rng.integers(0, len(self.palette), size=self.object_count)
        self.boxes = [self._make_box(i, self.palette[int(c)]) for i, c in enumerate(colors)]
        self.sorted_counts = {color: 0 for color in self.palette}
        self.arm.reset()

    def _make_box(self, index: int, color: str) -> Box:
        """Create box *index* at its staging grid position."""
        x, y = self.layout.position(index, self.staging_area)
        size = self.layout.box_size
        return Box(id=index, color=color, x=x, y=y, width=size, height=size)

    def regenerate_objects(self) -> Dict[str, int]:
        """Replace the box table with a fresh batch and invalidate targets.

        The arm returns home with an open, empty gripper.

        Returns:
            A copy of the zeroed sorted counts.
        """
        self.generation += 1
        self._populate()
        logger.info(
            "Regenerated %d boxes (generation %d)", len(self.boxes), self.generation
        )
        return dict(self.sorted_counts)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def box(self, index: int, generation: Optional[int] = None) -> Box:
        """Return box *index*, checking it belongs to *generation* if given.

        Raises:
            StaleTargetError: If *generation* differs from the current one.
        """
        if generation is not None and generation != self.generation:
            raise StaleTargetError(
                f"Box {index} belongs to generation {generation}, "
                f"world is at generation {self.generation}"
            )
        return self.boxes[index]

    def find_next_unsorted_object(self) -> Optional[int]:
        """Index of the first unsorted box in creation order, or *None*."""
        for index, box in enumerate(self.boxes):
            if not box.sorted:
                return index
        return None

    def zone_for(self, color: str) -> Zone:
        """Return the zone collecting *color*.

        Raises:
            KeyError: If no zone has that color.
        """
        for zone in self.zones:
            if zone.color == color:
                return zone
        raise KeyError(f"No zone for color '{color}'")

    def residents(self, zone: Zone, exclude: Optional[int] = None) -> List[int]:
        """Indices of boxes of the zone's color resident in the zone.

        Boxes placed past the zone's capacity stack below its bottom edge, so
        residency is tested against the zone's column extended downward.
        """
        column = Rect(zone.rect.x, zone.rect.y, zone.rect.width, math.inf)
        return [
            i
            for i, box in enumerate(self.boxes)
            if i != exclude and box.color == zone.color and column.contains((box.x, box.y))
        ]

    def zone_capacity(self, zone: Zone) -> int:
        """Number of slots whose box lies fully inside *zone*."""
        size = self.layout.box_size

        def fit(extent: float) -> int:
            if extent < self.slot_margin + size:
                return 0
            return int((extent - self.slot_margin - size) // self.slot_spacing) + 1

        return min(SLOT_COLUMNS, fit(zone.rect.width)) * fit(zone.rect.height)

    def slot_position(self, zone: Zone, slot: Tuple[int, int]) -> Point:
        """Top-left corner of *slot* ``(column, row)`` inside *zone*."""
        col, row = slot
        return (
            zone.rect.x + self.slot_margin + col * self.slot_spacing,
            zone.rect.y + self.slot_margin + row * self.slot_spacing,
        )

    def all_sorted(self) -> bool:
        """True when every box in the current batch has been sorted."""
        return all(box.sorted for box in self.boxes)

    def unreachable_points(self, hover_height: float) -> List[Tuple[str, Point]]:
        """Pickup and drop points the arm cannot reach.

        Checks the centre of every box in the current batch and the hover
        point above every zone.

        Args:
            hover_height: Height above a zone centre at which boxes are released.

        Returns:
            (label, point) pairs, empty when the whole scene is in reach.
        """
        points = [(f"box {box.id}", box.center) for box in self.boxes]
        for zone in self.zones:
            cx, cy = zone.center
            points.append((f"{zone.color} zone", (cx, cy - hover_height)))
        return [(label, p) for label, p in points if not is_reachable(p, self.arm)]

    # ------------------------------------------------------------------
    # Mutators (task state machine only)
    # ------------------------------------------------------------------

    def set_joint_angles(self, angles: np.ndarray) -> None:
        """Overwrite both joint angles (radians)."""
        self.arm.joint_positions = np.asarray(angles, dtype=np.float64)

    def open_gripper(self) -> None:
        """Open the gripper. A held box stays attached until detached."""
        self.arm.gripper_open = True

    def close_gripper(self) -> None:
        """Close the gripper."""
        self.arm.gripper_open = False

    def mark_object_sorted(self, index: int) -> None:
        """Flip a box's sorted flag to true.

        Raises:
            GripperStateError: If the box is already sorted.
        """
        box = self.boxes[index]
        if box.sorted:
            raise GripperStateError(f"Box {box.id} is already sorted")
        self.boxes[index] = replace(box, sorted=True)

    def attach_to_gripper(self, index: int) -> None:
        """Hold box *index*; the gripper must be closed and empty.

        Raises:
            GripperStateError: If the gripper is open or already holding.
        """
        if self.arm.gripper_open:
            raise GripperStateError("Cannot attach a box to an open gripper")
        if self.arm.held_index is not None:
            raise GripperStateError(
                f"Gripper already holds box {self.arm.held_index}"
            )
        self.arm.held_index = index

    def detach_from_gripper(self) -> Optional[int]:
        """Release the held box and return its index (or *None*)."""
        index, self.arm.held_index = self.arm.held_index, None
        return index

    def follow_end_effector(self, index: int) -> None:
        """Centre box *index* on the end effector."""
        ex, ey = forward_kinematics(self.arm).end_effector
        box = self.boxes[index]
        self.boxes[index] = replace(box, x=ex - box.width / 2, y=ey - box.height / 2)

    def place_object_in_zone(self, index: int, zone: Zone) -> Tuple[int, int]:
        """Drop box *index* into the next free slot of *zone*.

        Slots fill left to right, then top to bottom, counting only boxes of
        the zone's color already resident (the placed box excluded).

        Returns:
            The assigned ``(column, row)`` slot.
        """
        count = len(self.residents(zone, exclude=index))
        slot = (count % SLOT_COLUMNS, count // SLOT_COLUMNS)
        x, y = self.slot_position(zone, slot)
        self.boxes[index] = replace(self.boxes[index], x=x, y=y)
        if count >= self.zone_capacity(zone):
            logger.warning(
                "Zone %s is over capacity (%d boxes)", zone.color, count + 1
            )
        return slot

    def increment_sorted_count(self, color: str) -> int:
        """Count one more box placed in the *color* zone.

        Returns:
            The new count for *color*.
        """
        self.sorted_counts[color] = self.sorted_counts.get(color, 0) + 1
        return self.sorted_counts[color]

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    def arm_pose(self) -> ArmPose:
        """Current forward-kinematics pose of the arm."""
        return forward_kinematics(self.arm)

    def snapshot(self) -> WorldSnapshot:
        """Freeze the current state for presentation."""
        return WorldSnapshot(
            arm=self.arm_pose(),
            boxes=tuple(self.boxes),
            zones=self.zones,
            staging_area=self.staging_area,
            sorted_counts=MappingProxyType(dict(self.sorted_counts)),
            held_index=self.arm.held_index,
            generation=self.generation,
        )


def build_zones(scene: SceneLayout) -> Tuple[Zone, ...]:
    """One square zone per palette color, left to right."""
    return tuple(
        Zone(color, Rect(x, scene.zone_y, scene.zone_size, scene.zone_size))
        for color, x in zip(scene.palette, scene.zone_origins_x)
    )


def build_world(
    scene: Optional[SceneLayout] = None,
    geometry: Optional[ArmGeometry] = None,
    object_count: int = OBJECT_COUNT,
    seed: Optional[int] = None,
) -> WorldModel:
    """Create a world from configuration objects.

    Args:
        scene: Scene layout; defaults reproduce the original demo.
        geometry: Arm geometry.
        object_count: Number of boxes in each batch.
        seed: Seed for box colors.

    Returns:
        A freshly initialised ``WorldModel``.
    """
    scene = scene or SceneLayout()
    geometry = geometry or ArmGeometry()
    scene.validate()
    geometry.validate()
    arm = PlanarArm(
        base=geometry.base,
        segment1_length=geometry.segment1_length,
        segment2_length=geometry.segment2_length,
        home_angles=geometry.home_angles,
    )
    layout = StagingLayout(
        columns=scene.grid_columns,
        spacing=scene.grid_spacing,
        inset=scene.grid_inset,
        box_size=scene.box_size,
    )
    return WorldModel.initialize(
        object_count,
        scene.palette,
        layout,
        arm=arm,
        zones=build_zones(scene),
        staging_area=Rect(*scene.staging_area),
        rng=seed_rngs(seed),
        slot_margin=scene.slot_margin,
        slot_spacing=scene.slot_spacing,
    )
