"""
Real-time rendering of the sorting simulation.

Provides a Pygame-based window that blits frames rendered by the
environment and overlays the host's telemetry.
"""

from armsort_sim.visualization.visualizer import SimVisualizer

__all__ = ["SimVisualizer"]
