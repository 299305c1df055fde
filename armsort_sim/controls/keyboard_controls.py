"""
Keyboard controls mapping key presses to host commands.

With Pygame available, KEYDOWN events are translated in real time.  A
terminal fallback reads single-character commands from stdin, which is
useful in headless or SSH sessions.

Classes:
    KeyboardControls: Maps keyboard input to ``HostCommand`` values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from armsort_sim.runtime.host import HostCommand


@dataclass
class KeyboardControls:
    """Maps keyboard input to start/stop/reset/quit commands.

    Pygame bindings: space toggles run/pause, ``r`` resets, ``q`` or
    escape quits.  Terminal bindings: ``s`` start, ``p`` pause, ``r``
    reset, ``q`` quit; an empty line advances without a command.

    Attributes:
        terminal_bindings: Character to command mapping for stdin input.
    """

    terminal_bindings: Dict[str, HostCommand] = field(
        default_factory=lambda: {
            "s": HostCommand.START,
            "p": HostCommand.STOP,
            "r": HostCommand.RESET,
            "q": HostCommand.QUIT,
        }
    )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process_pygame_events(self) -> List[HostCommand]:
        """Pump Pygame events and return the commands they encode.

        Raises:
            ImportError: If Pygame is not installed.
        """
        try:
            import pygame
        except ImportError as exc:
            raise ImportError(
                "Pygame required for keyboard controls: pip install pygame"
            ) from exc
        return self.translate_events(pygame.event.get(), pygame)

    def translate_events(
        self, events: Iterable[object], pygame_module: object
    ) -> List[HostCommand]:
        """Convert a batch of Pygame events into host commands.

        Args:
            events: Events as returned by ``pygame.event.get()``.
            pygame_module: The ``pygame`` module (passed to avoid re-import).

        Returns:
            Commands in event order; unbound keys are ignored.
        """
        commands: List[HostCommand] = []
        for event in events:
            command = self._handle_pygame_event(event, pygame_module)
            if command is not None:
                commands.append(command)
        return commands

    def process_terminal_input(self, line: str) -> Optional[HostCommand]:
        """Map one line of terminal input to a command.

        Only the first non-blank character counts; case is ignored.

        Returns:
            The bound command, or *None* for blank or unbound input.
        """
        stripped = line.strip().lower()
        if not stripped:
            return None
        return self.terminal_bindings.get(stripped[0])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _handle_pygame_event(
        self, event: object, pygame_module: object
    ) -> Optional[HostCommand]:
        """Map a quit event or a bound key press to a command, else *None*."""
        pg = pygame_module
        if event.type == pg.QUIT:
            return HostCommand.QUIT
        if event.type != pg.KEYDOWN:
            return None
        key_map = {
            pg.K_SPACE: HostCommand.TOGGLE,
            pg.K_r: HostCommand.RESET,
            pg.K_q: HostCommand.QUIT,
            pg.K_ESCAPE: HostCommand.QUIT,
        }
        return key_map.get(getattr(event, "key", None))
