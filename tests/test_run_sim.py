"""Headless command-line runner."""

from __future__ import annotations

from argparse import Namespace

import pytest

import run_sim
from armsort_sim.configs import ArmGeometry, MotionConfig, UnreachablePolicy
from armsort_sim.envs.configs import SortingSimConfig


def _fault_config() -> SortingSimConfig:
    return SortingSimConfig(
        geometry=ArmGeometry(segment1_length=120.0, segment2_length=100.0),
        motion=MotionConfig(unreachable_policy=UnreachablePolicy.FAULT, stall_limit=5),
        seed=0,
    )


@pytest.mark.parametrize("verbose", [False, True])
def test_headless_run_stops_on_fault(verbose, capsys):
    args = Namespace(verbose=verbose, max_ticks=20000)

    run_sim._run_headless(_fault_config(), args)

    out = capsys.readouterr().out
    assert "Ticks: 6 | Phase: faulted" in out
    assert ("faulted box 0" in out) is verbose


def test_headless_run_sorts_default_batch(capsys):
    args = Namespace(verbose=False, max_ticks=20000)

    run_sim._run_headless(SortingSimConfig(object_count=3, seed=0), args)

    out = capsys.readouterr().out
    assert "Total: 3/3" in out
    assert "[tick" not in out
