"""Forward/inverse kinematics of the two-link arm."""

from __future__ import annotations

import math

import numpy as np
import pytest

from armsort_sim.errors import UnreachableTargetError
from armsort_sim.robots.planar_arm import (
    PlanarArm,
    forward_kinematics,
    inverse_kinematics,
    is_reachable,
    reach_limits,
)


def _pose_at(arm: PlanarArm, angles) -> tuple:
    arm.joint_positions = np.array(angles, dtype=np.float64)
    return forward_kinematics(arm).end_effector


def test_forward_kinematics_straight_arm(arm):
    arm.joint_positions = np.array([0.0, 0.0])
    pose = forward_kinematics(arm)
    assert pose.base == (400.0, 500.0)
    assert pose.elbow == pytest.approx((580.0, 500.0))
    assert pose.end_effector == pytest.approx((740.0, 500.0))


def test_forward_kinematics_elbow_relative_angle(arm):
    arm.joint_positions = np.array([-math.pi / 2, math.pi / 2])
    pose = forward_kinematics(arm)
    assert pose.elbow == pytest.approx((400.0, 320.0))
    assert pose.end_effector == pytest.approx((560.0, 320.0))


def test_forward_kinematics_has_no_side_effects(arm):
    before = arm.joint_positions.copy()
    forward_kinematics(arm)
    np.testing.assert_array_equal(arm.joint_positions, before)


def test_round_trip_inside_annulus(arm):
    rng = np.random.default_rng(1234)
    min_reach, max_reach = reach_limits(arm)
    for _ in range(500):
        radius = rng.uniform(min_reach + 1.0, max_reach - 1.0)
        theta = rng.uniform(-math.pi, math.pi)
        target = (arm.base[0] + radius * math.cos(theta), arm.base[1] + radius * math.sin(theta))
        angles = inverse_kinematics(target, arm)
        assert _pose_at(arm, angles) == pytest.approx(target, abs=1e-6)


def test_elbow_down_branch(arm):
    _, angle2 = inverse_kinematics((600.0, 400.0), arm)
    assert angle2 <= 0.0


@pytest.mark.parametrize("dx", [340.0, 20.0])
def test_exact_boundaries_are_reachable(arm, dx):
    target = (arm.base[0] + dx, arm.base[1])
    angles = inverse_kinematics(target, arm)
    assert is_reachable(target, arm)
    assert _pose_at(arm, angles) == pytest.approx(target, abs=1e-6)


@pytest.mark.parametrize("dx", [340.001, 19.999, 0.0])
def test_outside_annulus_is_unreachable(arm, dx):
    target = (arm.base[0] + dx, arm.base[1])
    assert not is_reachable(target, arm)
    with pytest.raises(UnreachableTargetError) as excinfo:
        inverse_kinematics(target, arm)
    assert excinfo.value.max_reach == 340.0
    assert excinfo.value.min_reach == 20.0


def test_unreachable_is_a_value_error(arm):
    with pytest.raises(ValueError):
        inverse_kinematics((2000.0, 2000.0), arm)


def test_default_scene_is_within_reach(world):
    for box in world.boxes:
        assert is_reachable(box.center, world.arm)
    for zone in world.zones:
        cx, cy = zone.center
        assert is_reachable((cx, cy - 40.0), world.arm)
