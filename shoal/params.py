"""Live simulation tunables and tank geometry."""

import math
import numpy as np
from dataclasses import dataclass, field

from config import school as config


@dataclass
class ForceWeights:
    """Multipliers applied to each steering rule before summing."""
    separation: float = config.FORCES["separation_weight"]
    alignment: float = config.FORCES["alignment_weight"]
    cohesion: float = config.FORCES["cohesion_weight"]
    wall: float = config.FORCES["wall_weight"]


@dataclass(frozen=True)
class TankBounds:
    """Axis-aligned box the fish are confined to."""
    limit_x: float = config.TANK["limit_x"]
    limit_y_min: float = config.TANK["limit_y_min"]
    limit_y_max: float = config.TANK["limit_y_max"]
    limit_z: float = config.TANK["limit_z"]
    wall_margin: float = config.TANK["wall_margin"]
    wall_strength: float = config.TANK["wall_strength"]

    @property
    def lower(self) -> np.ndarray:
        return np.array([-self.limit_x, self.limit_y_min, -self.limit_z], dtype=np.float64)

    @property
    def upper(self) -> np.ndarray:
        return np.array([self.limit_x, self.limit_y_max, self.limit_z], dtype=np.float64)

    def contains(self, position: np.ndarray, eps: float = 1e-9) -> bool:
        return bool(np.all(position >= self.lower - eps) and np.all(position <= self.upper + eps))


@dataclass
class SimulationParameters:
    """
    Tunables shared between the UI layer and the simulation.

    The UI writes these between ticks; `Flock.tick` only reads them.
    The orientation offsets are the two model-alignment knobs added to
    every fish's computed yaw and pitch.
    """
    separation_radius: float = config.SCHOOL["separation_radius"]
    alignment_radius: float = config.SCHOOL["alignment_radius"]
    cohesion_radius: float = config.SCHOOL["cohesion_radius"]
    weights: ForceWeights = field(default_factory=ForceWeights)
    min_speed: float = config.FISH["min_speed"]
    max_speed: float = config.FISH["max_speed"]
    target_population: int = config.SCHOOL["count"]
    forward_offset: float = 0.0
    up_offset: float = 0.0

    @classmethod
    def from_config(cls, **overrides) -> "SimulationParameters":
        """Defaults from config/school.py with selected fields replaced."""
        params = cls()
        for name, value in overrides.items():
            if value is None:
                continue
            if not hasattr(params, name):
                raise AttributeError(f"Unknown simulation parameter: {name}")
            setattr(params, name, value)
        return params

    def rotate_forward(self, steps: int = 1):
        """Turn the model's yaw offset by `steps` increments of 45 degrees."""
        self.forward_offset += steps * config.ORIENTATION["offset_step"]

    def rotate_up(self, steps: int = 1):
        """Turn the model's pitch offset by `steps` increments of 45 degrees."""
        self.up_offset += steps * config.ORIENTATION["offset_step"]

    def reset_orientation(self):
        self.forward_offset = 0.0
        self.up_offset = 0.0

    @property
    def offsets_degrees(self) -> tuple:
        return math.degrees(self.forward_offset), math.degrees(self.up_offset)
