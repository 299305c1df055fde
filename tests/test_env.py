"""Gymnasium environment and factory."""

from __future__ import annotations

import numpy as np
import pytest

from armsort_sim.envs.configs import SortingSimConfig
from armsort_sim.envs.factory import make_sim_env
from armsort_sim.envs.sorting import SortingSimEnv
from armsort_sim.errors import ConfigError
from armsort_sim.utils.constants import COLOR_BACKGROUND, OBS_IMAGE, OBS_STATE


@pytest.fixture
def small_cfg() -> SortingSimConfig:
    return SortingSimConfig(
        object_count=3, observation_height=120, observation_width=160, seed=3
    )


def test_config_registers_features(small_cfg):
    assert small_cfg.features["agent_pos"].shape == (6,)
    assert small_cfg.features["pixels"].shape == (120, 160, 3)
    assert small_cfg.features_map["agent_pos"] == OBS_STATE
    assert small_cfg.features_map["pixels"] == OBS_IMAGE
    assert small_cfg.gym_kwargs["max_episode_steps"] == small_cfg.episode_length


def test_state_only_config_has_no_pixels():
    cfg = SortingSimConfig(obs_type="agent_pos")
    assert "pixels" not in cfg.features
    env = SortingSimEnv(cfg)
    obs, _ = env.reset()
    assert set(obs) == {"agent_pos"}


@pytest.mark.parametrize(
    "kwargs", [{"object_count": -1}, {"episode_length": 0}, {"observation_width": 0}]
)
def test_invalid_config_is_rejected(kwargs):
    with pytest.raises(ConfigError):
        SortingSimConfig(**kwargs)


def test_reset_returns_observation(small_cfg):
    env = SortingSimEnv(small_cfg)
    obs, info = env.reset(seed=11)
    assert obs["agent_pos"].shape == (6,)
    assert obs["agent_pos"].dtype == np.float32
    assert obs["pixels"].shape == (120, 160, 3)
    assert env.observation_space.contains(obs)
    assert info["phase"] == "idle"
    assert info["sorted_counts"] == {"red": 0, "blue": 0, "green": 0, "yellow": 0}


def test_paused_action_keeps_state(small_cfg):
    env = SortingSimEnv(small_cfg)
    obs, _ = env.reset()
    for _ in range(5):
        new_obs, reward, terminated, truncated, _ = env.step(0)
        assert reward == 0.0
        assert not terminated and not truncated
    np.testing.assert_array_equal(new_obs["agent_pos"], obs["agent_pos"])
    assert env.machine.tick_count == 0


def test_running_episode_places_every_box():
    cfg = SortingSimConfig(object_count=3, obs_type="agent_pos", seed=3)
    env = SortingSimEnv(cfg)
    env.reset()
    total = 0.0
    for _ in range(cfg.episode_length):
        _, reward, terminated, truncated, info = env.step(1)
        total += reward
        if terminated or truncated:
            break
    assert terminated
    assert info["is_success"]
    assert total == 3.0
    assert sum(info["sorted_counts"].values()) == 3


def test_truncates_at_episode_length():
    cfg = SortingSimConfig(obs_type="agent_pos", episode_length=10)
    env = SortingSimEnv(cfg)
    env.reset()
    for _ in range(9):
        assert not env.step(1)[3]
    assert env.step(1)[3]


def test_reset_seed_is_reproducible(small_cfg):
    env = SortingSimEnv(small_cfg)
    env.reset(seed=21)
    first = [b.color for b in env.world.boxes]
    env.reset(seed=21)
    assert [b.color for b in env.world.boxes] == first


def test_render_draws_scene():
    env = SortingSimEnv(SortingSimConfig(obs_type="agent_pos"))
    env.reset()
    frame = env.render()
    assert frame.shape == (600, 800, 3)
    assert frame.dtype == np.uint8
    assert tuple(frame[0, 0]) == COLOR_BACKGROUND
    # staging area outline
    assert tuple(frame[400, 675]) != COLOR_BACKGROUND
    # arm base
    assert tuple(frame[500, 400]) != COLOR_BACKGROUND


def test_make_sim_env_by_name():
    envs = make_sim_env("sorting", n_envs=2)
    vec = envs["Sorting-Sim-v0"][0]
    assert vec.num_envs == 2
    vec.close()


def test_make_sim_env_rejects_bad_arguments():
    with pytest.raises(ConfigError):
        make_sim_env("pusht")
    with pytest.raises(ConfigError):
        make_sim_env("sorting", n_envs=0)
