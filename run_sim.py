#!/usr/bin/env python3
"""
Main entry point for the Robotic Arm Sorting Simulation.

Builds the world and state machine from a ``SortingSimConfig``, then drives
them through one of three hosts: a headless fixed-timestep run, a live
Pygame window with keyboard controls, or an interactive terminal session.

Usage examples::

    # Sort a fresh batch without a window and print the tallies
    python run_sim.py --mode headless --boxes 12 --seed 7

    # Live window: space starts/pauses, r resets, q quits
    python run_sim.py --mode visualize

    # Terminal commands: s(tart), p(ause), r(eset), q(uit)
    python run_sim.py --mode interactive
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List

from armsort_sim.configs import MotionConfig, parse_unreachable_policy
from armsort_sim.controls.keyboard_controls import KeyboardControls
from armsort_sim.envs.configs import SortingSimConfig
from armsort_sim.envs.sorting import SortingSimEnv
from armsort_sim.errors import ConfigError
from armsort_sim.runtime.host import FrameCallback, SimulationHost
from armsort_sim.tasks.sorter import SortingStateMachine, TaskEvent
from armsort_sim.visualization.visualizer import SimVisualizer
from armsort_sim.world.model import WorldSnapshot, build_world

# ======================================================================
# Configuration builders
# ======================================================================


def _build_env_config(args: argparse.Namespace, with_pixels: bool) -> SortingSimConfig:
    """Translate CLI arguments into a ``SortingSimConfig``.

    Raises:
        ConfigError: If any argument is out of range.
    """
    motion = MotionConfig(
        max_step=args.speed,
        unreachable_policy=parse_unreachable_policy(args.unreachable_policy),
        stall_limit=args.stall_limit,
    )
    return SortingSimConfig(
        fps=args.fps,
        object_count=args.boxes,
        seed=args.seed,
        obs_type="pixels_agent_pos" if with_pixels else "agent_pos",
        motion=motion,
    )


def _print_summary(machine: SortingStateMachine) -> None:
    """Print tick count, phase, and per-color tallies."""
    counts = machine.world.sorted_counts
    print("-" * 60)
    print(f"Ticks: {machine.tick_count} | Phase: {machine.phase.value}")
    print("Sorted: " + ", ".join(f"{c}={n}" for c, n in counts.items()))
    print(f"Total: {sum(counts.values())}/{len(machine.world.boxes)}")


# ======================================================================
# Mode runners
# ======================================================================


def _event_reporter(verbose: bool) -> FrameCallback:
    """Build the headless frame callback.

    The callback stops the loop on a ``faulted`` event, since a faulted
    machine never becomes done.  Events are printed only when *verbose*.

    Args:
        verbose: Print each task event as it happens.

    Returns:
        A ``SimulationHost`` frame callback.
    """

    def report(host: SimulationHost, snap: WorldSnapshot, events: List[TaskEvent]) -> bool:
        for event in events:
            if verbose:
                print(f"[tick {event.tick:5d}] {event.kind:7s} box {event.box_id} ({event.color})")
        return not any(e.kind == "faulted" for e in events)

    return report


def _run_headless(cfg: SortingSimConfig, args: argparse.Namespace) -> None:
    """Sort one batch as fast as possible and print the tallies."""
    world = build_world(cfg.scene, cfg.geometry, cfg.object_count, cfg.seed)
    machine = SortingStateMachine(world, cfg.motion)
    host = SimulationHost(machine, fps=cfg.fps, on_frame=_event_reporter(args.verbose))
    host.start()
    host.run(max_frames=args.max_ticks)
    _print_summary(machine)


def _run_visualize(cfg: SortingSimConfig, args: argparse.Namespace) -> None:
    """Open a Pygame window driven by the keyboard."""
    env = SortingSimEnv(cfg)
    viz = SimVisualizer(width=cfg.observation_width, height=cfg.observation_height)
    controls = KeyboardControls()

    def draw(host: SimulationHost, snap: WorldSnapshot, events: List[TaskEvent]) -> bool:
        viz.render_frame(
            env.render(),
            tick=host.machine.tick_count,
            running=host.running,
            phase=host.machine.phase.value,
            sorted_counts=snap.sorted_counts,
            scene=snap,
        )
        return all(host.apply(cmd) for cmd in controls.process_pygame_events())

    host = SimulationHost(env.machine, fps=cfg.fps, realtime=True, on_frame=draw)
    if not args.paused:
        host.start()
    print("Visualize mode: space = start/stop, r = reset, q = quit.")
    try:
        host.run(max_frames=args.max_ticks, until_done=False)
    finally:
        viz.close()
    _print_summary(env.machine)


def _run_interactive(cfg: SortingSimConfig, args: argparse.Namespace) -> None:
    """Read commands from stdin; each line pumps ``--frames-per-command`` frames."""
    world = build_world(cfg.scene, cfg.geometry, cfg.object_count, cfg.seed)
    host = SimulationHost(SortingStateMachine(world, cfg.motion), fps=cfg.fps)
    controls = KeyboardControls()
    print("Interactive mode: s = start, p = pause, r = reset, q = quit, Enter = step.")
    for line in sys.stdin:
        command = controls.process_terminal_input(line)
        if command is not None and not host.apply(command):
            break
        host.run(max_frames=args.frames_per_command, until_done=False)
        _print_summary(host.machine)


# ======================================================================
# CLI
# ======================================================================


def _parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Robotic Arm Sorting Simulation")
    parser.add_argument(
        "--mode", choices=["headless", "visualize", "interactive"], default="headless"
    )
    parser.add_argument("--boxes", type=int, default=12)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--speed", type=float, default=0.05, help="rad per tick")
    parser.add_argument("--max-ticks", type=int, default=20000)
    parser.add_argument("--frames-per-command", type=int, default=100)
    parser.add_argument(
        "--unreachable-policy", choices=["stall", "fault"], default="stall"
    )
    parser.add_argument("--stall-limit", type=int, default=120)
    parser.add_argument("--paused", action="store_true", help="start paused")
    parser.add_argument("--verbose", action="store_true", help="print task events")
    parser.add_argument(
        "--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    return parser.parse_args()


# Mapping from mode name to runner function
_MODE_DISPATCH = {
    "headless": _run_headless,
    "visualize": _run_visualize,
    "interactive": _run_interactive,
}


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------
if __name__ == "__main__":
    args = _parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        env_cfg = _build_env_config(args, with_pixels=args.mode == "visualize")
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)
    print(f"Mode: {args.mode} | Boxes: {args.boxes} | Seed: {args.seed}")
    print(f"Motion: {env_cfg.motion.max_step} rad/tick, policy={env_cfg.motion.unreachable_policy.value}")
    print("-" * 60)

    _MODE_DISPATCH[args.mode](env_cfg, args)
