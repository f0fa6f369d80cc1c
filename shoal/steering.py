"""Steering rules: separation, alignment, cohesion, wall avoidance and idle motion.

The three flocking rules read a read-only snapshot of the whole school
(positions and velocities as (N, 3) arrays). `self_index` is the acting
fish's row in that snapshot, or -1 when it is not part of it.
"""

import math
import numpy as np
from numba import njit

from config import school as config
from .vector import normalize, clamp_length, distance


# ============================================================================
# NUMBA JIT-COMPILED FLOCKING RULES
# ============================================================================

@njit(cache=True)
def _steer_toward(desired: np.ndarray, velocity: np.ndarray, max_speed: float, max_force: float) -> np.ndarray:
    """Reynolds steering: desired direction at max_speed minus velocity, capped at max_force."""
    steer = normalize(desired) * max_speed - velocity
    return clamp_length(steer, 0.0, max_force, steer)


@njit(cache=True)
def separation(
    position: np.ndarray,
    velocity: np.ndarray,
    positions: np.ndarray,
    self_index: int,
    radius: float,
    max_speed: float,
    max_force: float
) -> np.ndarray:
    """Steer away from close neighbors, weighting each by inverse distance."""
    total = np.zeros(3)
    count = 0

    for j in range(positions.shape[0]):
        if j == self_index:
            continue

        dist = distance(position, positions[j])
        if dist > 0 and dist < radius:
            away = normalize(position - positions[j])
            total += away / dist
            count += 1

    if count == 0:
        return np.zeros(3)
    return _steer_toward(total / count, velocity, max_speed, max_force)


@njit(cache=True)
def alignment(
    position: np.ndarray,
    velocity: np.ndarray,
    positions: np.ndarray,
    velocities: np.ndarray,
    self_index: int,
    radius: float,
    max_speed: float,
    max_force: float
) -> np.ndarray:
    """Steer toward the average heading of neighbors."""
    total = np.zeros(3)
    count = 0

    for j in range(positions.shape[0]):
        if j == self_index:
            continue

        dist = distance(position, positions[j])
        if dist > 0 and dist < radius:
            total += velocities[j]
            count += 1

    if count == 0:
        return np.zeros(3)
    return _steer_toward(total / count, velocity, max_speed, max_force)


@njit(cache=True)
def cohesion(
    position: np.ndarray,
    velocity: np.ndarray,
    positions: np.ndarray,
    self_index: int,
    radius: float,
    max_speed: float,
    max_force: float
) -> np.ndarray:
    """Steer toward the center of mass of neighbors."""
    total = np.zeros(3)
    count = 0

    for j in range(positions.shape[0]):
        if j == self_index:
            continue

        dist = distance(position, positions[j])
        if dist > 0 and dist < radius:
            total += positions[j]
            count += 1

    if count == 0:
        return np.zeros(3)
    center = total / count
    return _steer_toward(center - position, velocity, max_speed, max_force)


@njit(cache=True)
def wall_avoidance(
    position: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    margin: float,
    strength: float
) -> np.ndarray:
    """
    Soft per-axis push away from the tank walls.

    Inside the margin the push grows linearly with penetration depth,
    reaching `strength` at the wall itself. Axes are independent.
    """
    steer = np.zeros(3)

    for i in range(3):
        inner_upper = upper[i] - margin
        inner_lower = lower[i] + margin

        if position[i] > inner_upper:
            steer[i] = -((position[i] - inner_upper) / margin) * strength
        if position[i] < inner_lower:
            steer[i] = ((inner_lower - position[i]) / margin) * strength

    return steer


# ============================================================================
# IDLE MOTION
# ============================================================================

def idle_motion(
    phase: float,
    rate: float,
    time: float,
    rng: np.random.Generator,
    amplitude: float = config.IDLE["amplitude"],
    impulse_chance: float = config.IDLE["impulse_chance"],
    impulse_span=config.IDLE["impulse_span"]
) -> np.ndarray:
    """
    Gentle vertical bobbing plus an occasional random nudge.

    The bobbing is a sine of the shared simulation time, shifted by the
    fish's own phase. With probability `impulse_chance` a uniform impulse
    in [-span/2, span/2) per axis is added on top.
    """
    swim = np.zeros(3)
    swim[1] = math.sin(time * rate + phase) * amplitude

    if rng.random() < impulse_chance:
        swim += (rng.random(3) - 0.5) * np.asarray(impulse_span, dtype=np.float64)

    return swim
