"""
Keyboard start/stop/reset controls for the simulation host.
"""

from armsort_sim.controls.keyboard_controls import KeyboardControls

__all__ = ["KeyboardControls"]
