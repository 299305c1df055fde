"""
EnvHub entry point for loading armsort_sim via the HF Hub.

Follows the LeRobot EnvHub convention so that this project can be loaded
remotely with::

    from lerobot.envs.factory import make_env
    envs = make_env("your-user/armsort-sim", trust_remote_code=True)

Functions:
    make_env: Create vectorised sorting environments.
"""

from __future__ import annotations

from typing import Dict, Optional

import gymnasium as gym

from armsort_sim.envs.configs import SimEnvConfig, SortingSimConfig
from armsort_sim.envs.factory import make_sim_env


def make_env(
    n_envs: int = 1,
    use_async_envs: bool = False,
    cfg: Optional[SimEnvConfig] = None,
) -> Dict[str, Dict[int, gym.vector.VectorEnv]]:
    """Create vectorised sorting environments (EnvHub API).

    Args:
        n_envs: Number of parallel environments.
        use_async_envs: Use ``AsyncVectorEnv`` if True.
        cfg: Optional config; defaults to ``SortingSimConfig()``.

    Returns:
        ``{suite_name: {0: VectorEnv}}`` matching LeRobot convention.
    """
    return make_sim_env(cfg or SortingSimConfig(), n_envs, use_async_envs)
