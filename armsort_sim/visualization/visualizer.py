"""
Real-time Pygame visualizer for the sorting simulation.

Blits RGB frames produced by ``SortingSimEnv.render`` and overlays a HUD
with tick count, run state, task phase, and per-color sorted counts.  Zone
colors and the staging area are captioned above their outlines.

Classes:
    SimVisualizer: Live rendering window.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

import numpy as np

from armsort_sim.utils.constants import (
    COLOR_TEXT,
    DEFAULT_RENDER_HEIGHT,
    DEFAULT_RENDER_WIDTH,
    Point,
)
from armsort_sim.utils.helpers import color_to_rgb
from armsort_sim.world.model import WorldSnapshot

# Gap between a caption's baseline and the top of the area it names
LABEL_OFFSET = 5.0


def format_hud(
    tick: int, running: bool, phase: str, sorted_counts: Mapping[str, int]
) -> List[str]:
    """Build the HUD text lines shown in the window corner."""
    status = "running" if running else "paused"
    lines = [f"Tick: {tick}", f"Status: {status}", f"Phase: {phase}"]
    lines.extend(f"{color.capitalize()}: {count}" for color, count in sorted_counts.items())
    return lines


def scene_labels(snap: WorldSnapshot) -> List[Tuple[str, Point]]:
    """Captions drawn above each zone and above the staging area.

    Args:
        snap: World snapshot to label.

    Returns:
        ``(text, anchor)`` pairs; the anchor is the bottom centre of the
        text in scene coordinates.
    """
    labels = [
        (zone.color.upper(), (zone.center[0], zone.rect.y - LABEL_OFFSET))
        for zone in snap.zones
    ]
    area = snap.staging_area
    labels.append(("UNSORTED", (area.center[0], area.y - LABEL_OFFSET)))
    return labels


@dataclass
class SimVisualizer:
    """Pygame-based visualizer.

    Call ``render_frame`` once per host frame with the current image and
    HUD state.  The window is created lazily on the first frame.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        fps: Target frames per second (0 leaves pacing to the host).
        window_title: Caption displayed in the title bar.
    """

    width: int = 800
    height: int = 600
    fps: int = 0
    window_title: str = "Robotic Arm Sorting Simulation"
    _screen: Optional[Any] = None
    _clock: Optional[Any] = None
    _font: Optional[Any] = None

    # ------------------------------------------------------------------
    # Initialisation / teardown
    # ------------------------------------------------------------------

    def init_display(self) -> None:
        """Create the Pygame window, clock, and HUD font.

        Raises:
            ImportError: If Pygame is not installed.
        """
        try:
            import pygame
        except ImportError as exc:
            raise ImportError("Pygame required: pip install pygame") from exc
        pygame.init()
        self._screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption(self.window_title)
        self._clock = pygame.time.Clock()
        self._font = pygame.font.SysFont("monospace", 16)

    def close(self) -> None:
        """Destroy the Pygame window if one was opened."""
        if self._screen is None:
            return
        import pygame

        pygame.quit()
        self._screen = None

    # ------------------------------------------------------------------
    # Live rendering
    # ------------------------------------------------------------------

    def _image_to_surface(self, image: np.ndarray) -> Any:
        """Convert an (H, W, 3) image into a surface scaled to the window."""
        import pygame

        surface = pygame.surfarray.make_surface(np.transpose(image, (1, 0, 2)))
        return pygame.transform.scale(surface, (self.width, self.height))

    def _draw_hud(self, lines: List[str]) -> None:
        """Blit HUD lines top-left; count lines take their color's hue."""
        for i, text in enumerate(lines):
            colour = COLOR_TEXT
            label = text.split(":", 1)[0].lower()
            if label in ("red", "blue", "green", "yellow"):
                colour = color_to_rgb(label)
            rendered = self._font.render(text, True, colour)
            self._screen.blit(rendered, (8, 4 + 18 * i))

    def _draw_labels(self, labels: List[Tuple[str, Point]]) -> None:
        """Blit scene captions, mapping scene coordinates onto the window."""
        sx = self.width / DEFAULT_RENDER_WIDTH
        sy = self.height / DEFAULT_RENDER_HEIGHT
        for text, (x, y) in labels:
            rendered = self._font.render(text, True, COLOR_TEXT)
            self._screen.blit(rendered, rendered.get_rect(midbottom=(x * sx, y * sy)))

    def render_frame(
        self,
        image: np.ndarray,
        tick: int = 0,
        running: bool = False,
        phase: str = "idle",
        sorted_counts: Optional[Mapping[str, int]] = None,
        scene: Optional[WorldSnapshot] = None,
    ) -> None:
        """Blit one frame to the window with HUD overlay.

        Args:
            image: (H, W, 3) uint8 RGB image.
            tick: Machine tick count.
            running: Host run flag.
            phase: Task phase name.
            sorted_counts: Per-color placement counts.
            scene: Snapshot whose zones and staging area get captions.
        """
        if self._screen is None:
            self.init_display()
        import pygame

        self._screen.blit(self._image_to_surface(image), (0, 0))
        if scene is not None:
            self._draw_labels(scene_labels(scene))
        self._draw_hud(format_hud(tick, running, phase, sorted_counts or {}))
        pygame.display.flip()
        if self._clock is not None and self.fps > 0:
            self._clock.tick(self.fps)
