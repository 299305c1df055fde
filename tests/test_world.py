"""World model layout, mutators, and packing."""

from __future__ import annotations

import dataclasses
import itertools

import numpy as np
import pytest

from armsort_sim.configs import ArmGeometry, SceneLayout
from armsort_sim.errors import ConfigError, GripperStateError, StaleTargetError
from armsort_sim.world.model import Rect, build_world


def test_initial_layout_is_packed_grid(world):
    assert len(world.boxes) == 12
    for i, box in enumerate(world.boxes):
        assert box.id == i
        assert (box.x, box.y) == (610.0 + (i % 3) * 45.0, 410.0 + (i // 3) * 35.0)
        assert (box.width, box.height) == (30.0, 30.0)
        assert box.color in world.palette
        assert not box.sorted


def test_colors_are_reproducible_per_seed():
    first = [b.color for b in build_world(seed=5).boxes]
    second = [b.color for b in build_world(seed=5).boxes]
    assert first == second


def test_counts_start_at_zero(world):
    assert world.sorted_counts == {"red": 0, "blue": 0, "green": 0, "yellow": 0}


def test_find_next_unsorted_is_fifo(world):
    assert world.find_next_unsorted_object() == 0
    world.mark_object_sorted(0)
    world.mark_object_sorted(2)
    assert world.find_next_unsorted_object() == 1
    for i in range(len(world.boxes)):
        if not world.boxes[i].sorted:
            world.mark_object_sorted(i)
    assert world.find_next_unsorted_object() is None


def test_mark_sorted_twice_is_rejected(world):
    world.mark_object_sorted(3)
    with pytest.raises(GripperStateError):
        world.mark_object_sorted(3)


def test_attach_requires_closed_empty_gripper(world):
    with pytest.raises(GripperStateError):
        world.attach_to_gripper(0)
    world.close_gripper()
    world.attach_to_gripper(0)
    with pytest.raises(GripperStateError):
        world.attach_to_gripper(1)
    assert world.detach_from_gripper() == 0
    assert world.arm.held_index is None
    assert world.detach_from_gripper() is None


def test_zone_for_matches_color(world):
    for color in world.palette:
        assert world.zone_for(color).color == color
    with pytest.raises(KeyError):
        world.zone_for("purple")


def test_zone_capacity_defaults_to_four(world):
    assert world.zone_capacity(world.zone_for("red")) == 4


def test_placement_slots_are_distinct_and_inside_zone(red_world):
    world = red_world(4)
    zone = world.zone_for("red")
    slots = [world.place_object_in_zone(i, zone) for i in range(4)]
    assert slots == [(0, 0), (1, 0), (0, 1), (1, 1)]
    rects = [world.boxes[i].rect for i in range(4)]
    for rect in rects:
        assert zone.rect.x <= rect.x and rect.x + rect.width <= zone.rect.x + zone.rect.width
        assert zone.rect.y <= rect.y and rect.y + rect.height <= zone.rect.y + zone.rect.height
    for a, b in itertools.combinations(rects, 2):
        overlap_x = a.x < b.x + b.width and b.x < a.x + a.width
        overlap_y = a.y < b.y + b.height and b.y < a.y + a.height
        assert not (overlap_x and overlap_y)


def test_first_placement_uses_zone_corner_slot(red_world):
    world = red_world(1)
    zone = world.zone_for("red")
    assert world.place_object_in_zone(0, zone) == (0, 0)
    assert (world.boxes[0].x, world.boxes[0].y) == (60.0, 460.0)


def test_placing_is_order_stable_and_ignores_self(red_world):
    world = red_world(2)
    zone = world.zone_for("red")
    world.place_object_in_zone(0, zone)
    assert world.place_object_in_zone(0, zone) == (0, 0)
    assert world.place_object_in_zone(1, zone) == (1, 0)


def test_overflow_keeps_stacking_below_zone(red_world):
    world = red_world(6)
    zone = world.zone_for("red")
    slots = [world.place_object_in_zone(i, zone) for i in range(6)]
    assert len(set(slots)) == 6
    assert slots[4:] == [(0, 2), (1, 2)]


def test_regenerate_resets_everything(world):
    world.close_gripper()
    world.attach_to_gripper(0)
    world.mark_object_sorted(0)
    world.increment_sorted_count(world.boxes[0].color)
    world.set_joint_angles(np.array([0.3, -0.2]))
    old_generation = world.generation

    counts = world.regenerate_objects()

    assert counts == {c: 0 for c in world.palette}
    assert world.generation == old_generation + 1
    assert all(not b.sorted for b in world.boxes)
    assert world.arm.gripper_open
    assert world.arm.held_index is None
    np.testing.assert_allclose(world.arm.joint_positions, world.arm.home_angles)
    with pytest.raises(StaleTargetError):
        world.box(0, old_generation)
    assert world.box(0, world.generation) is world.boxes[0]


def test_snapshot_is_read_only(world):
    snap = world.snapshot()
    with pytest.raises(TypeError):
        snap.sorted_counts["red"] = 5
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.boxes[0].x = 0.0
    world.increment_sorted_count("red")
    assert snap.sorted_counts["red"] == 0


def test_snapshot_reports_arm_pose(world):
    snap = world.snapshot()
    assert snap.arm.base == world.arm.base
    assert snap.arm.gripper_open is True
    assert snap.staging_area == Rect(600.0, 400.0, 150.0, 130.0)


def test_rect_containment_is_half_open():
    rect = Rect(0.0, 0.0, 10.0, 10.0)
    assert rect.contains((0.0, 0.0))
    assert not rect.contains((10.0, 5.0))
    assert rect.center == (5.0, 5.0)


def test_invalid_layout_is_rejected():
    with pytest.raises(ConfigError):
        build_world(scene=SceneLayout(palette=("red", "blue"), zone_origins_x=(50.0,)))


def test_no_unreachable_points_with_default_arm(world):
    assert world.unreachable_points(hover_height=40.0) == []


def test_short_arm_reports_unreachable_points():
    geometry = ArmGeometry(segment1_length=120.0, segment2_length=100.0)
    world = build_world(geometry=geometry, seed=0)
    labels = [label for label, _ in world.unreachable_points(hover_height=40.0)]
    assert "box 0" in labels
    assert "red zone" in labels
