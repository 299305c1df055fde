"""
Arm sorting simulation environment (Gymnasium-compatible).

Wraps the world model and the sorting state machine.  The agent only
chooses whether the simulation runs this step; the state machine decides
everything else.  Rendering rasterises a ``WorldSnapshot`` into an RGB
array with plain NumPy masks.

Classes:
    SortingSimEnv: Gymnasium environment for the sorting task.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from armsort_sim.envs.configs import SortingSimConfig
from armsort_sim.tasks.sorter import PHASE_INDEX, SortingStateMachine, TaskEvent
from armsort_sim.utils.constants import (
    COLOR_BACKGROUND,
    COLOR_BASE,
    COLOR_GRIPPER,
    COLOR_JOINT,
    COLOR_OUTLINE,
    COLOR_SEGMENT1,
    COLOR_SEGMENT2,
    COLOR_STAGING,
    DEFAULT_RENDER_HEIGHT,
    DEFAULT_RENDER_WIDTH,
    Point,
)
from armsort_sim.utils.helpers import color_to_rgb, seed_rngs
from armsort_sim.world.model import Box, Rect, WorldSnapshot, build_world

Colour = Tuple[int, int, int]


class SortingSimEnv(gym.Env):
    """Gymnasium environment for the two-link sorting arm.

    Attributes:
        metadata: Gymnasium metadata with supported render modes.
        cfg: ``SortingSimConfig`` controlling scene, motion, and rendering.
        world: The world model.
        machine: The sorting state machine.
    """

    metadata: Dict[str, Any] = {"render_modes": ["rgb_array"]}

    def __init__(self, cfg: SortingSimConfig | None = None) -> None:
        super().__init__()
        self.cfg = cfg or SortingSimConfig()
        self.render_mode = self.cfg.render_mode
        self.world = build_world(
            self.cfg.scene, self.cfg.geometry, self.cfg.object_count, self.cfg.seed
        )
        self.machine = SortingStateMachine(self.world, self.cfg.motion)
        self._step_count = 0
        self._init_spaces()

    def _init_spaces(self) -> None:
        """Define action and observation spaces from the config features."""
        self.action_space = spaces.Discrete(self.cfg.action_dim)
        obs_dict: Dict[str, spaces.Space] = {
            "agent_pos": spaces.Box(
                low=-np.inf, high=np.inf, shape=(self.cfg.state_dim,), dtype=np.float32
            )
        }
        if "pixels" in self.cfg.features:
            obs_dict["pixels"] = spaces.Box(
                low=0, high=255, shape=self.cfg.features["pixels"].shape, dtype=np.uint8
            )
        self.observation_space = spaces.Dict(obs_dict)

    # ------------------------------------------------------------------
    # Gymnasium API
    # ------------------------------------------------------------------

    def reset(
        self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """Regenerate the boxes and return the initial observation.

        Args:
            seed: Optional seed for the new box colors.
            options: Unused; for Gymnasium compatibility.

        Returns:
            Tuple of (observation dict, info dict).
        """
        super().reset(seed=seed)
        if seed is not None:
            self.world.rng = seed_rngs(seed)
        self.machine.reset()
        self._step_count = 0
        return self._build_observation(), self._build_info([])

    def step(
        self, action: Any
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """Advance the simulation by one tick if *action* is 1.

        Args:
            action: 0 to stay paused, 1 to run.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
            The reward is the number of boxes placed on this step.
        """
        running = bool(int(np.asarray(action).item()))
        events = self.machine.tick(running)
        self._step_count += 1
        reward = float(sum(1 for e in events if e.kind == "placed"))
        terminated = self.machine.is_done
        truncated = self._step_count >= self.cfg.episode_length
        return (
            self._build_observation(),
            reward,
            terminated,
            truncated,
            self._build_info(events),
        )

    # ------------------------------------------------------------------
    # Observation builder
    # ------------------------------------------------------------------

    def _build_state_vector(self) -> np.ndarray:
        """Joint angles, end effector, gripper flag, and phase index."""
        pose = self.world.arm_pose()
        return np.array(
            [
                pose.angles[0],
                pose.angles[1],
                pose.end_effector[0],
                pose.end_effector[1],
                1.0 if pose.gripper_open else 0.0,
                float(PHASE_INDEX[self.machine.phase]),
            ],
            dtype=np.float32,
        )

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """Assemble the observation dict declared by the observation space."""
        obs: Dict[str, np.ndarray] = {"agent_pos": self._build_state_vector()}
        if "pixels" in self.observation_space.spaces:
            obs["pixels"] = self.render()
        return obs

    def _build_info(self, events: list[TaskEvent]) -> Dict[str, Any]:
        """Per-step info: success flag, phase, counts, and this step's events."""
        return {
            "is_success": self.machine.is_done,
            "phase": self.machine.phase.value,
            "sorted_counts": dict(self.world.sorted_counts),
            "events": list(events),
        }

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _scale(self, h: int, w: int) -> Tuple[float, float]:
        """Scene-to-pixel scale factors for a canvas of size (*h*, *w*)."""
        return w / DEFAULT_RENDER_WIDTH, h / DEFAULT_RENDER_HEIGHT

    def _rect_slices(self, canvas: np.ndarray, rect: Rect) -> Tuple[slice, slice]:
        """Pixel row/column slices covered by a scene rectangle."""
        h, w = canvas.shape[:2]
        sx, sy = self._scale(h, w)
        x0 = int(np.clip(round(rect.x * sx), 0, w))
        x1 = int(np.clip(round((rect.x + rect.width) * sx), 0, w))
        y0 = int(np.clip(round(rect.y * sy), 0, h))
        y1 = int(np.clip(round((rect.y + rect.height) * sy), 0, h))
        return slice(y0, y1), slice(x0, x1)

    def _fill_rect(
        self, canvas: np.ndarray, rect: Rect, colour: Colour, alpha: float = 1.0
    ) -> None:
        """Fill *rect* with *colour*, blended over the canvas by *alpha*.

        Args:
            canvas: (H, W, 3) uint8 image, modified in place.
            rect: Rectangle in scene coordinates.
            colour: RGB fill colour.
            alpha: Opacity of the fill, 1.0 for solid.
        """
        rows, cols = self._rect_slices(canvas, rect)
        region = canvas[rows, cols].astype(np.float32)
        blended = (1.0 - alpha) * region + alpha * np.asarray(colour, dtype=np.float32)
        canvas[rows, cols] = blended.astype(np.uint8)

    def _stroke_rect(
        self, canvas: np.ndarray, rect: Rect, colour: Colour, thickness: int = 2
    ) -> None:
        """Draw the outline of *rect*, *thickness* pixels wide, inside its bounds."""
        rows, cols = self._rect_slices(canvas, rect)
        region = canvas[rows, cols]
        region[:thickness, :] = colour
        region[-thickness:, :] = colour
        region[:, :thickness] = colour
        region[:, -thickness:] = colour

    def _draw_circle(
        self, canvas: np.ndarray, centre: Point, colour: Colour, radius: float
    ) -> None:
        """Draw a filled disc of *radius* scene units centred on *centre*.

        Args:
            canvas: (H, W, 3) uint8 image, modified in place.
            centre: Centre in scene coordinates.
            colour: RGB colour.
            radius: Radius in scene units.
        """
        h, w = canvas.shape[:2]
        sx, sy = self._scale(h, w)
        rr, cc = np.ogrid[:h, :w]
        cx, cy = centre[0] * sx, centre[1] * sy
        mask = (rr - cy) ** 2 + (cc - cx) ** 2 < (radius * sx) ** 2
        canvas[mask] = colour

    def _draw_segment(
        self, canvas: np.ndarray, start: Point, end: Point, colour: Colour, width: float
    ) -> None:
        """Draw a thick line as the set of pixels near the segment."""
        h, w = canvas.shape[:2]
        sx, sy = self._scale(h, w)
        rr, cc = np.ogrid[:h, :w]
        ax, ay = start[0] * sx, start[1] * sy
        bx, by = end[0] * sx, end[1] * sy
        dx, dy = bx - ax, by - ay
        length_sq = dx * dx + dy * dy
        if length_sq == 0.0:
            self._draw_circle(canvas, start, colour, width / 2)
            return
        t = np.clip(((cc - ax) * dx + (rr - ay) * dy) / length_sq, 0.0, 1.0)
        dist_sq = (cc - (ax + t * dx)) ** 2 + (rr - (ay + t * dy)) ** 2
        canvas[dist_sq <= (width * sx / 2) ** 2] = colour

    def _draw_box(self, canvas: np.ndarray, box: Box) -> None:
        """Filled box with a dark outline."""
        self._fill_rect(canvas, box.rect, color_to_rgb(box.color))
        self._stroke_rect(canvas, box.rect, COLOR_OUTLINE)

    def _draw_scene(self, canvas: np.ndarray, snap: WorldSnapshot) -> None:
        """Zones, staging outline, and every box not in the gripper."""
        for zone in snap.zones:
            rgb = color_to_rgb(zone.color)
            self._fill_rect(canvas, zone.rect, rgb, alpha=0.2)
            self._stroke_rect(canvas, zone.rect, rgb, thickness=3)
        self._stroke_rect(canvas, snap.staging_area, COLOR_STAGING)
        for index, box in enumerate(snap.boxes):
            if index != snap.held_index:
                self._draw_box(canvas, box)

    def _draw_arm(self, canvas: np.ndarray, snap: WorldSnapshot) -> None:
        """Base, both segments, elbow joint, gripper, and any held box."""
        arm = snap.arm
        self._draw_circle(canvas, arm.base, COLOR_BASE, 15)
        self._draw_segment(canvas, arm.base, arm.elbow, COLOR_SEGMENT1, 8)
        self._draw_circle(canvas, arm.elbow, COLOR_JOINT, 10)
        self._draw_segment(canvas, arm.elbow, arm.end_effector, COLOR_SEGMENT2, 6)
        ex, ey = arm.end_effector
        spread = 15 if arm.gripper_open else 8
        apex = (ex, ey - 10)
        self._draw_segment(canvas, (ex - spread, ey), apex, COLOR_GRIPPER, 4)
        self._draw_segment(canvas, apex, (ex + spread, ey), COLOR_GRIPPER, 4)
        if snap.held_index is not None:
            self._draw_box(canvas, snap.boxes[snap.held_index])

    def render(self) -> np.ndarray:
        """Render the current scene as an RGB image.

        Returns:
            (H, W, 3) uint8 NumPy array.
        """
        h, w = self.cfg.observation_height, self.cfg.observation_width
        canvas = np.zeros((h, w, 3), dtype=np.uint8)
        canvas[:] = COLOR_BACKGROUND
        snap = self.world.snapshot()
        self._draw_scene(canvas, snap)
        self._draw_arm(canvas, snap)
        return canvas
