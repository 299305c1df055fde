"""Shared fixtures for the armsort_sim test suite."""

from __future__ import annotations

from typing import Callable

import pytest

from armsort_sim.configs import ArmGeometry, MotionConfig, SceneLayout
from armsort_sim.robots.planar_arm import PlanarArm
from armsort_sim.tasks.sorter import SortingStateMachine
from armsort_sim.world.model import WorldModel, build_world

RED_ONLY = SceneLayout(palette=("red",), zone_origins_x=(50.0,))


@pytest.fixture
def arm() -> PlanarArm:
    return PlanarArm()


@pytest.fixture
def world() -> WorldModel:
    return build_world(seed=0)


@pytest.fixture
def machine(world: WorldModel) -> SortingStateMachine:
    return SortingStateMachine(world)


@pytest.fixture
def red_world() -> Callable[[int], WorldModel]:
    """Factory for worlds whose boxes are all red with a single red zone.

    The first box lands at (610, 410); the red zone is (50, 450, 80, 80).
    """

    def make(count: int = 1) -> WorldModel:
        return build_world(scene=RED_ONLY, object_count=count, seed=0)

    return make


@pytest.fixture
def short_arm_machine() -> Callable[[MotionConfig], SortingStateMachine]:
    """Machine whose arm is too short to reach the staging area."""

    def make(motion: MotionConfig) -> SortingStateMachine:
        geometry = ArmGeometry(segment1_length=120.0, segment2_length=100.0)
        return SortingStateMachine(build_world(geometry=geometry, seed=0), motion)

    return make


def run_until_done(machine: SortingStateMachine, limit: int = 20000) -> list:
    """Tick until the machine is idle with nothing left to sort."""
    events = []
    for _ in range(limit):
        if machine.is_done:
            return events
        events.extend(machine.tick())
    raise AssertionError(f"Machine not done after {limit} ticks (phase {machine.phase})")
