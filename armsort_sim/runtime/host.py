"""
Fixed-timestep host for the sorting state machine.

The core never assumes a particular loop; this host is one such loop.  It
owns the run flag, maps start/stop/reset signals onto the machine, and
calls ``tick`` exactly once per frame, strictly serialised.  An optional
frame callback observes a snapshot after every frame (rendering, input
polling) and can end the loop by returning *False*.

Classes:
    HostCommand: Signals a user or controller can send to the host.
    SimulationHost: The loop itself.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from armsort_sim.tasks.sorter import SortingStateMachine, TaskEvent
from armsort_sim.utils.constants import DEFAULT_FPS
from armsort_sim.world.model import WorldSnapshot

logger = logging.getLogger(__name__)

FrameCallback = Callable[["SimulationHost", WorldSnapshot, List[TaskEvent]], bool]


class HostCommand(Enum):
    """Signals accepted by ``SimulationHost.apply``."""

    START = "start"
    STOP = "stop"
    TOGGLE = "toggle"
    RESET = "reset"
    QUIT = "quit"


@dataclass
class SimulationHost:
    """Owns the run flag and pumps ``tick`` at a fixed cadence.

    Attributes:
        machine: The state machine being driven.
        fps: Target frames per second when ``realtime`` is set.
        realtime: Sleep between frames to hold ``fps``.
        running: Whether ticks currently advance the machine.
        on_frame: Optional callback invoked after every frame.
        frame_count: Frames pumped since construction, paused ones included.
        clock: Monotonic time source.
        sleep: Sleep function used for pacing.
    """

    machine: SortingStateMachine
    fps: int = DEFAULT_FPS
    realtime: bool = False
    running: bool = False
    on_frame: Optional[FrameCallback] = None
    frame_count: int = 0
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Let ticks advance the machine."""
        self.running = True
        logger.info("Simulation started")

    def stop(self) -> None:
        """Pause; frames keep pumping but the machine is frozen."""
        self.running = False
        logger.info("Simulation paused at tick %d", self.machine.tick_count)

    def reset(self) -> Dict[str, int]:
        """Pause and cold-restart the machine.

        Returns:
            The zeroed sorted counts.
        """
        self.running = False
        counts = self.machine.reset()
        logger.info("Simulation reset")
        return counts

    def apply(self, command: HostCommand) -> bool:
        """Apply *command*; return *False* when it asks the loop to quit."""
        if command is HostCommand.START:
            self.start()
        elif command is HostCommand.STOP:
            self.stop()
        elif command is HostCommand.TOGGLE:
            if self.running:
                self.stop()
            else:
                self.start()
        elif command is HostCommand.RESET:
            self.reset()
        elif command is HostCommand.QUIT:
            return False
        return True

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def advance(self) -> List[TaskEvent]:
        """Pump one frame: a tick gated by the run flag."""
        events = self.machine.tick(self.running)
        self.frame_count += 1
        return events

    def run(self, max_frames: Optional[int] = None, until_done: bool = True) -> int:
        """Pump frames until a stop condition is met.

        The loop ends when *max_frames* frames have been pumped, when
        *until_done* is set and the machine has sorted every box, or when
        the frame callback returns *False*.  At least one of these must be
        able to fire.

        Args:
            max_frames: Upper bound on frames for this call.
            until_done: Stop as soon as ``machine.is_done`` holds.

        Returns:
            Number of frames pumped by this call.
        """
        if max_frames is None and self.on_frame is None and not until_done:
            raise ValueError("run() needs max_frames, until_done, or a frame callback")
        period = 1.0 / self.fps if self.fps > 0 else 0.0
        started = self.clock()
        frames = 0
        while max_frames is None or frames < max_frames:
            if until_done and self.machine.is_done:
                break
            events = self.advance()
            frames += 1
            if self.on_frame is not None:
                if not self.on_frame(self, self.machine.world.snapshot(), events):
                    break
            if self.realtime and period > 0.0:
                remaining = started + frames * period - self.clock()
                if remaining > 0.0:
                    self.sleep(remaining)
        return frames
