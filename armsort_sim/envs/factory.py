"""
Factory function for creating sorting simulation environments.

Mirrors the upstream ``lerobot.envs.factory.make_env`` API: callers pass a
config or a registered name and receive a Gymnasium ``VectorEnv`` wrapped in
the standard ``{suite: {task_id: VectorEnv}}`` mapping.

Functions:
    make_sim_env: Create one or more vectorised sorting environments.
"""

from __future__ import annotations

from typing import Dict

import gymnasium as gym

from armsort_sim.envs.configs import SimEnvConfig, SortingSimConfig
from armsort_sim.errors import ConfigError

# ---------------------------------------------------------------------------
# Config look-up table (name -> default config constructor)
# ---------------------------------------------------------------------------
_ENV_REGISTRY: Dict[str, type] = {
    "sorting": SortingSimConfig,
}


def _resolve_config(cfg: SimEnvConfig | str) -> SimEnvConfig:
    """Convert a registered name to its default config, or pass a config through.

    Raises:
        ConfigError: If the name is not in the registry.
    """
    if isinstance(cfg, SimEnvConfig):
        return cfg
    if cfg not in _ENV_REGISTRY:
        raise ConfigError(f"Unknown env '{cfg}'. Choose from {list(_ENV_REGISTRY)}")
    return _ENV_REGISTRY[cfg]()


def _env_class_for_config(cfg: SimEnvConfig) -> type:
    """Return the Gymnasium env class matching *cfg*.

    Raises:
        ConfigError: If the config type is not recognised.
    """
    from armsort_sim.envs.sorting import SortingSimEnv

    dispatch = {SortingSimConfig: SortingSimEnv}
    env_cls = dispatch.get(type(cfg))
    if env_cls is None:
        raise ConfigError(
            f"No env class registered for config type {type(cfg).__name__}"
        )
    return env_cls


def _validate_n_envs(n_envs: int) -> None:
    """Reject a non-positive number of environments.

    Raises:
        ConfigError: If *n_envs* is less than 1.
    """
    if n_envs < 1:
        raise ConfigError("`n_envs` must be at least 1")


def _build_vector_env(
    env_cls: type, cfg: SimEnvConfig, n_envs: int, use_async: bool
) -> gym.vector.VectorEnv:
    """Construct a Gymnasium vector environment of *n_envs* copies."""
    wrapper_cls = gym.vector.AsyncVectorEnv if use_async else gym.vector.SyncVectorEnv
    fns = [lambda c=cfg: env_cls(c) for _ in range(n_envs)]
    return wrapper_cls(fns)


def make_sim_env(
    cfg: SimEnvConfig | str = "sorting",
    n_envs: int = 1,
    use_async_envs: bool = False,
) -> Dict[str, Dict[int, gym.vector.VectorEnv]]:
    """Create vectorised sorting environments matching the LeRobot API.

    Args:
        cfg: A ``SimEnvConfig`` instance or a registered name (``'sorting'``).
        n_envs: Number of parallel environments (default 1).
        use_async_envs: Whether to use ``AsyncVectorEnv`` (default *False*).

    Returns:
        ``{suite_name: {0: VectorEnv}}`` mapping.
    """
    resolved_cfg = _resolve_config(cfg)
    _validate_n_envs(n_envs)
    env_cls = _env_class_for_config(resolved_cfg)
    vec = _build_vector_env(env_cls, resolved_cfg, n_envs, use_async_envs)
    return {resolved_cfg.env_type: {0: vec}}
