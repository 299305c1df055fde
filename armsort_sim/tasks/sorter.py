"""
Task state machine driving the sort cycle.

One ``tick`` performs a single read-decide-mutate step over the world::

    Idle -> MovingToPickup -> Picking -> MovingToZone -> Placing -> Idle

Idle is both the initial state and the resting state once every box is
sorted.  The machine only stores ``TaskTarget`` values (box index, zone
color, world generation), never references into the box table.

Classes:
    TaskPhase: Phase tag of the task state.
    TaskTarget: Payload carried by every non-Idle phase.
    TaskState: Tagged union of phase and payload.
    TaskEvent: Notification emitted on pick, place, and fault.
    SortingStateMachine: The scheduler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from armsort_sim.configs import MotionConfig, UnreachablePolicy
from armsort_sim.errors import UnreachableTargetError
from armsort_sim.robots.motion import step_joint_angles
from armsort_sim.robots.planar_arm import inverse_kinematics
from armsort_sim.utils.constants import Point
from armsort_sim.world.model import WorldModel

logger = logging.getLogger(__name__)


class TaskPhase(Enum):
    """What the arm is currently doing."""

    IDLE = "idle"
    MOVING_TO_PICKUP = "moving_to_pickup"
    PICKING = "picking_up"
    MOVING_TO_ZONE = "moving_to_zone"
    PLACING = "placing"
    FAULTED = "faulted"


PHASE_INDEX: Dict[TaskPhase, int] = {phase: i for i, phase in enumerate(TaskPhase)}


@dataclass(frozen=True)
class TaskTarget:
    """The box being serviced and the zone it is headed for.

    Attributes:
        box_index: Index into the world's box table.
        zone_color: Color of the destination zone.
        generation: World generation the index was issued under.
    """

    box_index: int
    zone_color: str
    generation: int


@dataclass(frozen=True)
class TaskState:
    """Phase tag plus target payload.

    Idle never carries a target; every other phase always does.
    """

    phase: TaskPhase = TaskPhase.IDLE
    target: Optional[TaskTarget] = None

    def __post_init__(self) -> None:
        if (self.phase is TaskPhase.IDLE) != (self.target is None):
            raise ValueError(
                f"Phase {self.phase.value} is incompatible with target {self.target}"
            )

    def to(self, phase: TaskPhase) -> "TaskState":
        """Same target, new phase."""
        return TaskState(phase, self.target)


@dataclass(frozen=True)
class TaskEvent:
    """Completion notification.

    Attributes:
        kind: ``'picked'``, ``'placed'``, or ``'faulted'``.
        box_id: Id of the box involved.
        color: Color of the box.
        tick: Machine tick on which the event happened.
    """

    kind: str
    box_id: int
    color: str
    tick: int


class SortingStateMachine:
    """Scheduler sequencing pickup, transport, and placement.

    Args:
        world: World model the machine mutates.
        motion: Joint speed, tolerance, hover height, and unreachable policy.
    """

    def __init__(self, world: WorldModel, motion: Optional[MotionConfig] = None) -> None:
        self.world = world
        self.motion = motion or MotionConfig()
        self.motion.validate()
        self.state = TaskState()
        self.tick_count = 0
        self.stalled_ticks = 0
        self._events: List[TaskEvent] = []
        self._handlers: Dict[TaskPhase, Callable[[], None]] = {
            TaskPhase.IDLE: self._tick_idle,
            TaskPhase.MOVING_TO_PICKUP: self._tick_moving_to_pickup,
            TaskPhase.PICKING: self._tick_picking,
            TaskPhase.MOVING_TO_ZONE: self._tick_moving_to_zone,
            TaskPhase.PLACING: self._tick_placing,
            TaskPhase.FAULTED: lambda: None,
        }
        out_of_reach = world.unreachable_points(self.motion.hover_height)
        if out_of_reach:
            logger.warning(
                "%d of the scene's points are out of reach (policy %s): %s",
                len(out_of_reach),
                self.motion.unreachable_policy.value,
                ", ".join(label for label, _ in out_of_reach),
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def phase(self) -> TaskPhase:
        """Phase tag of the current state."""
        return self.state.phase

    @property
    def is_done(self) -> bool:
        """True when idle with nothing left to sort."""
        return self.state.phase is TaskPhase.IDLE and self.world.all_sorted()

    def tick(self, running: bool = True) -> List[TaskEvent]:
        """Advance the machine by one step.

        Args:
            running: When *False* nothing at all changes.

        Returns:
            Events emitted during this step.
        """
        if not running:
            return []
        self.tick_count += 1
        self._events = []
        self._handlers[self.state.phase]()
        return self._events

    def reset(self) -> Dict[str, int]:
        """Cold restart: new box batch, arm home, Idle with no target.

        Returns:
            The zeroed sorted counts.
        """
        counts = self.world.regenerate_objects()
        self.state = TaskState()
        self.tick_count = 0
        self.stalled_ticks = 0
        self._events = []
        return counts

    # ------------------------------------------------------------------
    # Phase handlers
    # ------------------------------------------------------------------

    def _tick_idle(self) -> None:
        """Target the first unsorted box and open the gripper."""
        index = self.world.find_next_unsorted_object()
        if index is None:
            return
        box = self.world.box(index)
        zone = self.world.zone_for(box.color)
        target = TaskTarget(index, zone.color, self.world.generation)
        self.world.open_gripper()
        self._transition(TaskState(TaskPhase.MOVING_TO_PICKUP, target))

    def _tick_moving_to_pickup(self) -> None:
        """Drive to the box centre; on arrival grip it and mark it sorted."""
        target = self.state.target
        box = self.world.box(target.box_index, target.generation)
        if not self._drive_to(box.center):
            return
        self.world.close_gripper()
        self.world.attach_to_gripper(target.box_index)
        self.world.mark_object_sorted(target.box_index)
        self._emit("picked", target.box_index)
        self._transition(self.state.to(TaskPhase.PICKING))

    def _tick_picking(self) -> None:
        """Leave for the zone once the gripper has closed."""
        if not self.world.arm.gripper_open:
            self._transition(self.state.to(TaskPhase.MOVING_TO_ZONE))

    def _tick_moving_to_zone(self) -> None:
        """Carry the box to the hover point above its zone, then open the gripper."""
        held = self.world.arm.held_index
        if held is not None:
            self.world.follow_end_effector(held)
        zone = self.world.zone_for(self.state.target.zone_color)
        cx, cy = zone.center
        if not self._drive_to((cx, cy - self.motion.hover_height)):
            return
        self.world.open_gripper()
        self._transition(self.state.to(TaskPhase.PLACING))

    def _tick_placing(self) -> None:
        """Drop the held box into its zone slot and count it."""
        held = self.world.arm.held_index
        if held is None:
            return
        target = self.state.target
        zone = self.world.zone_for(target.zone_color)
        slot = self.world.place_object_in_zone(held, zone)
        count = self.world.increment_sorted_count(zone.color)
        self.world.detach_from_gripper()
        logger.info(
            "Placed box %d in %s zone slot %s (%d sorted)", held, zone.color, slot, count
        )
        self._emit("placed", held)
        self._transition(TaskState())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _drive_to(self, point: Point) -> bool:
        """Step the arm toward *point*; True once the joints have arrived."""
        try:
            angles = inverse_kinematics(point, self.world.arm)
        except UnreachableTargetError as exc:
            self._on_unreachable(exc)
            return False
        self.stalled_ticks = 0
        new_angles, reached = step_joint_angles(
            self.world.arm.joint_positions,
            angles,
            self.motion.max_step,
            self.motion.tolerance,
        )
        self.world.set_joint_angles(new_angles)
        return reached

    def _on_unreachable(self, exc: UnreachableTargetError) -> None:
        """Count a stalled tick and fault once the policy's limit is hit.

        Args:
            exc: The error raised by the kinematics solver.
        """
        self.stalled_ticks += 1
        logger.debug("Stalled in %s: %s", self.state.phase.value, exc)
        if self.motion.unreachable_policy is not UnreachablePolicy.FAULT:
            return
        if self.stalled_ticks < self.motion.stall_limit:
            return
        logger.warning(
            "Faulted after %d unreachable ticks in %s: %s",
            self.stalled_ticks,
            self.state.phase.value,
            exc,
        )
        self._emit("faulted", self.state.target.box_index)
        self._transition(self.state.to(TaskPhase.FAULTED))

    def _transition(self, new_state: TaskState) -> None:
        """Replace the task state, logging the phase change."""
        logger.debug(
            "Tick %d: %s -> %s", self.tick_count, self.state.phase.value, new_state.phase.value
        )
        self.state = new_state

    def _emit(self, kind: str, index: int) -> None:
        """Record a *kind* event for box *index* on the current tick."""
        box = self.world.box(index)
        self._events.append(TaskEvent(kind, box.id, box.color, self.tick_count))
