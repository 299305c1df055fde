"""
Dataclass configuration for the sorting simulation environment.

Mirrors the pattern of upstream LeRobot ``EnvConfig`` subclasses: a base
config carrying rendering and episode settings, and a task config that
registers its observation features in ``__post_init__``.

Classes:
    SimEnvConfig: Abstract base configuration.
    SortingSimConfig: Configuration for the arm sorting task.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Dict

from armsort_sim.configs import ArmGeometry, MotionConfig, SceneLayout
from armsort_sim.errors import ConfigError
from armsort_sim.utils.constants import (
    ACTION,
    DEFAULT_FPS,
    DEFAULT_RENDER_HEIGHT,
    DEFAULT_RENDER_WIDTH,
    OBJECT_COUNT,
    OBS_IMAGE,
    OBS_STATE,
    FeatureType,
    PolicyFeature,
)


@dataclass
class SimEnvConfig(abc.ABC):
    """Base configuration shared by armsort_sim environments.

    Attributes:
        task: Human-readable task identifier.
        fps: Simulation ticks per second when paced in real time.
        episode_length: Maximum steps per episode.
        obs_type: Observation mode (``'pixels_agent_pos'`` or ``'agent_pos'``).
        render_mode: Gymnasium render mode (``'rgb_array'``, ``'human'``).
        observation_height: Pixel height of rendered observations.
        observation_width: Pixel width of rendered observations.
        seed: Random seed for box colors.
        features: Mapping of feature key to ``PolicyFeature`` metadata.
        features_map: Mapping of raw env keys to LeRobot-standard keys.
    """

    task: str = "base"
    fps: int = DEFAULT_FPS
    episode_length: int = 3000
    obs_type: str = "pixels_agent_pos"
    render_mode: str = "rgb_array"
    observation_height: int = DEFAULT_RENDER_HEIGHT
    observation_width: int = DEFAULT_RENDER_WIDTH
    seed: int = 42
    features: Dict[str, PolicyFeature] = field(default_factory=dict)
    features_map: Dict[str, str] = field(default_factory=dict)

    @property
    def env_type(self) -> str:
        """Environment family name, taken from the task id."""
        return self.task

    @property
    @abc.abstractmethod
    def gym_kwargs(self) -> dict:
        """Return keyword arguments forwarded to ``gymnasium.make()``."""
        raise NotImplementedError


@dataclass
class SortingSimConfig(SimEnvConfig):
    """Configuration for the two-link arm sorting environment.

    The action is a run flag (0 = paused, 1 = running).  The state vector
    holds both joint angles, the end-effector point, the gripper flag, and
    the task phase index.

    Attributes:
        task: Fixed to ``'Sorting-Sim-v0'``.
        object_count: Boxes created per episode.
        action_dim: Number of discrete actions.
        state_dim: Length of the ``agent_pos`` vector.
        geometry: Arm geometry.
        scene: Zones, staging area, and packing rules.
        motion: Joint speed, tolerance, and unreachable policy.
    """

    task: str = "Sorting-Sim-v0"
    object_count: int = OBJECT_COUNT
    action_dim: int = 2
    state_dim: int = 6
    geometry: ArmGeometry = field(default_factory=ArmGeometry)
    scene: SceneLayout = field(default_factory=SceneLayout)
    motion: MotionConfig = field(default_factory=MotionConfig)

    def __post_init__(self) -> None:
        """Validate and populate ``features`` / ``features_map``."""
        self.validate()
        self.features[ACTION] = PolicyFeature(type=FeatureType.ACTION, shape=(1,))
        self.features_map[ACTION] = ACTION
        self.features_map["agent_pos"] = OBS_STATE
        self.features["agent_pos"] = PolicyFeature(
            type=FeatureType.STATE, shape=(self.state_dim,)
        )
        if "pixels" in self.obs_type:
            self.features_map["pixels"] = OBS_IMAGE
            self.features["pixels"] = PolicyFeature(
                type=FeatureType.VISUAL,
                shape=(self.observation_height, self.observation_width, 3),
            )

    def validate(self) -> None:
        """Raise ``ConfigError`` if any setting is out of range."""
        if self.object_count < 0:
            raise ConfigError(f"object_count must be >= 0, got {self.object_count}")
        if self.episode_length < 1:
            raise ConfigError("episode_length must be at least 1")
        if self.observation_height < 1 or self.observation_width < 1:
            raise ConfigError("Observation size must be positive")
        self.geometry.validate()
        self.scene.validate()
        self.motion.validate()

    @property
    def gym_kwargs(self) -> dict:
        """Episode settings forwarded to ``gymnasium.make()``."""
        return {
            "obs_type": self.obs_type,
            "render_mode": self.render_mode,
            "max_episode_steps": self.episode_length,
        }
