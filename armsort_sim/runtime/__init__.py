"""
Host loop owning the sorting state machine and its run/pause/reset signals.
"""

from armsort_sim.runtime.host import HostCommand, SimulationHost

__all__ = ["HostCommand", "SimulationHost"]
