"""
Gymnasium-compatible environment wrapping the sorting core.
"""

from armsort_sim.envs.configs import SimEnvConfig, SortingSimConfig
from armsort_sim.envs.factory import make_sim_env
from armsort_sim.envs.sorting import SortingSimEnv

__all__ = [
    "SimEnvConfig",
    "SortingSimConfig",
    "SortingSimEnv",
    "make_sim_env",
]
