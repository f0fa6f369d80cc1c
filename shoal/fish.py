"""Individual fish with position, velocity, idle swimming and facing."""

import math
import numpy as np
from dataclasses import dataclass, field
from typing import Any, Optional

from config import school as config
from .params import SimulationParameters, TankBounds
from .steering import separation, alignment, cohesion, wall_avoidance, idle_motion
from .vector import vec3, clamp_length, clamp_to_box, length


@dataclass
class Fish:
    """
    A single fish in the school.

    Attributes:
        position: 3D position vector
        velocity: 3D velocity vector
        acceleration: 3D acceleration vector (recomputed every step)
        max_speed: Per-fish speed cap; None follows SimulationParameters
        max_force: Maximum steering force magnitude per rule
        idle_phase: Phase offset of the idle bobbing
        idle_rate: Angular rate of the idle bobbing
        yaw, pitch: Facing angles derived from velocity
        rotation_x, rotation_y: Facing plus model offsets, handed to the renderer
        handle: Opaque visual handle from the asset layer
    """
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))
    max_speed: Optional[float] = None
    max_force: float = config.FISH["max_force"]
    idle_phase: float = 0.0
    idle_rate: float = config.IDLE["rate_min"]
    yaw: float = 0.0
    pitch: float = 0.0
    rotation_x: float = 0.0
    rotation_y: float = config.ORIENTATION["model_yaw"]
    handle: Any = None

    @classmethod
    def spawn(cls, position: np.ndarray, rng: np.random.Generator, handle: Any = None) -> "Fish":
        """Create a fish at `position` with a random velocity and idle phase."""
        span = np.asarray(config.FISH["initial_velocity_span"], dtype=np.float64)
        rate_min, rate_max = config.IDLE["rate_min"], config.IDLE["rate_max"]
        return cls(
            position=np.array(position, dtype=np.float64),
            velocity=(rng.random(3) - 0.5) * span,
            idle_phase=float(rng.random() * 2.0 * math.pi),
            idle_rate=float(rate_min + rng.random() * (rate_max - rate_min)),
            handle=handle,
        )

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def heading(self) -> np.ndarray:
        """Unit vector of the current facing, used when velocity vanishes."""
        return vec3(
            math.sin(self.yaw) * math.cos(self.pitch),
            -math.sin(self.pitch),
            math.cos(self.yaw) * math.cos(self.pitch),
        )

    def speed_limit(self, params: SimulationParameters) -> float:
        return float(params.max_speed if self.max_speed is None else self.max_speed)

    def steer(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        self_index: int,
        params: SimulationParameters,
        bounds: TankBounds,
        time: float,
        rng: np.random.Generator
    ) -> np.ndarray:
        """Sum the weighted steering forces against a school snapshot into acceleration."""
        weights = params.weights
        max_speed = self.speed_limit(params)
        max_force = float(self.max_force)

        sep = separation(
            self.position, self.velocity, positions, self_index,
            float(params.separation_radius), max_speed, max_force
        )
        ali = alignment(
            self.position, self.velocity, positions, velocities, self_index,
            float(params.alignment_radius), max_speed, max_force
        )
        coh = cohesion(
            self.position, self.velocity, positions, self_index,
            float(params.cohesion_radius), max_speed, max_force
        )
        avoid = wall_avoidance(
            self.position, bounds.lower, bounds.upper,
            float(bounds.wall_margin), float(bounds.wall_strength)
        )
        swim = idle_motion(self.idle_phase, self.idle_rate, time, rng)

        self.acceleration = (
            sep * weights.separation
            + ali * weights.alignment
            + coh * weights.cohesion
            + avoid * weights.wall
            + swim
        )
        return self.acceleration

    def integrate(self, dt: float, params: SimulationParameters, bounds: TankBounds):
        """Apply acceleration, clamp speed and position, then reorient."""
        velocity = self.velocity + self.acceleration * dt
        self.velocity = clamp_length(
            velocity, float(params.min_speed), self.speed_limit(params), self.heading
        )

        position = self.position + self.velocity * dt
        self.position = clamp_to_box(position, bounds.lower, bounds.upper)

        self.orient(params)

    def orient(self, params: SimulationParameters):
        """Face along the velocity; keep the previous facing when nearly still."""
        speed = length(self.velocity)
        if speed <= config.ORIENTATION["min_speed"]:
            return

        direction = self.velocity / speed
        self.yaw = math.atan2(direction[0], direction[2])
        self.pitch = math.asin(-min(max(direction[1], -1.0), 1.0))

        self.rotation_y = self.yaw + params.forward_offset + config.ORIENTATION["model_yaw"]
        self.rotation_x = self.pitch + params.up_offset

    def step(
        self,
        dt: float,
        positions: np.ndarray,
        velocities: np.ndarray,
        self_index: int,
        params: SimulationParameters,
        bounds: TankBounds,
        time: float,
        rng: np.random.Generator
    ):
        """Run the full force pipeline against a snapshot and integrate one step."""
        self.steer(positions, velocities, self_index, params, bounds, time, rng)
        self.integrate(dt, params, bounds)
