"""Host loop and keyboard controls."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from armsort_sim.controls.keyboard_controls import KeyboardControls
from armsort_sim.runtime.host import HostCommand, SimulationHost
from armsort_sim.tasks.sorter import SortingStateMachine, TaskPhase
from armsort_sim.visualization.visualizer import SimVisualizer, format_hud, scene_labels


def test_paused_host_pumps_frames_without_ticking(machine):
    host = SimulationHost(machine)
    assert host.run(max_frames=10) == 10
    assert host.frame_count == 10
    assert machine.tick_count == 0


def test_running_host_sorts_until_done(red_world):
    host = SimulationHost(SortingStateMachine(red_world(2)))
    host.start()
    frames = host.run(max_frames=5000)
    assert frames < 5000
    assert host.machine.is_done
    assert host.machine.world.sorted_counts["red"] == 2
    assert host.run(max_frames=10) == 0


def test_commands_map_onto_run_flag(machine):
    host = SimulationHost(machine)
    assert host.apply(HostCommand.START) and host.running
    assert host.apply(HostCommand.STOP) and not host.running
    host.apply(HostCommand.TOGGLE)
    assert host.running
    host.apply(HostCommand.TOGGLE)
    assert not host.running
    assert host.apply(HostCommand.QUIT) is False


def test_reset_pauses_and_restarts(machine):
    host = SimulationHost(machine)
    host.start()
    host.run(max_frames=50)
    counts = host.reset()
    assert not host.running
    assert all(v == 0 for v in counts.values())
    assert machine.phase is TaskPhase.IDLE
    assert machine.tick_count == 0


def test_frame_callback_can_stop_loop(machine):
    seen = []

    def on_frame(host, snap, events):
        seen.append(snap.generation)
        return len(seen) < 3

    host = SimulationHost(machine, on_frame=on_frame)
    host.start()
    assert host.run() == 3
    assert seen == [0, 0, 0]


def test_realtime_pacing_sleeps_for_remaining_period(machine):
    sleeps = []
    host = SimulationHost(
        machine, fps=20, realtime=True, clock=lambda: 0.0, sleep=sleeps.append
    )
    host.run(max_frames=3, until_done=False)
    assert sleeps == pytest.approx([0.05, 0.10, 0.15])


def test_run_without_stop_condition_is_rejected(machine):
    with pytest.raises(ValueError):
        SimulationHost(machine).run(until_done=False)


def test_terminal_input_maps_to_commands():
    controls = KeyboardControls()
    assert controls.process_terminal_input("s\n") is HostCommand.START
    assert controls.process_terminal_input("  P") is HostCommand.STOP
    assert controls.process_terminal_input("reset") is HostCommand.RESET
    assert controls.process_terminal_input("q") is HostCommand.QUIT
    assert controls.process_terminal_input("\n") is None
    assert controls.process_terminal_input("x") is None


def test_pygame_events_map_to_commands():
    pg = SimpleNamespace(
        QUIT=1, KEYDOWN=2, KEYUP=3, K_SPACE=32, K_r=114, K_q=113, K_ESCAPE=27
    )
    events = [
        SimpleNamespace(type=pg.KEYDOWN, key=pg.K_SPACE),
        SimpleNamespace(type=pg.KEYUP, key=pg.K_SPACE),
        SimpleNamespace(type=pg.KEYDOWN, key=pg.K_r),
        SimpleNamespace(type=pg.KEYDOWN, key=999),
        SimpleNamespace(type=pg.QUIT),
    ]
    commands = KeyboardControls().translate_events(events, pg)
    assert commands == [HostCommand.TOGGLE, HostCommand.RESET, HostCommand.QUIT]


def test_hud_lists_counts():
    lines = format_hud(12, True, "placing", {"red": 2, "blue": 0})
    assert lines == ["Tick: 12", "Status: running", "Phase: placing", "Red: 2", "Blue: 0"]


def test_scene_labels_caption_zones_and_staging_area(world):
    labels = scene_labels(world.snapshot())
    assert [text for text, _ in labels] == ["RED", "BLUE", "GREEN", "YELLOW", "UNSORTED"]
    assert labels[0][1] == (90.0, 445.0)
    assert labels[-1][1] == (675.0, 395.0)


def test_labels_are_scaled_onto_the_window(world):
    blits = []

    class _Text:
        def __init__(self, text):
            self.text = text

        def get_rect(self, midbottom):
            return midbottom

    viz = SimVisualizer(width=400, height=300)
    viz._font = SimpleNamespace(render=lambda text, aa, colour: _Text(text))
    viz._screen = SimpleNamespace(blit=lambda surface, pos: blits.append((surface.text, pos)))

    viz._draw_labels(scene_labels(world.snapshot()))

    assert blits[0] == ("RED", (45.0, 222.5))
    assert blits[-1] == ("UNSORTED", (337.5, 197.5))
