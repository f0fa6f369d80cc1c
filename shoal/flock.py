"""Flock management - population resizing and the per-tick update of every fish."""

import numpy as np
from concurrent.futures import Future
from dataclasses import dataclass
from typing import List, Optional

from config import school as config
from .fish import Fish
from .params import SimulationParameters, TankBounds
from .visuals import VisualLayer, NullVisualLayer


@dataclass
class PendingSpawn:
    """A requested fish whose visual has not resolved yet."""
    position: np.ndarray
    future: Future
    discarded: bool = False


class Flock:
    """
    Ordered school of live fish plus the spawns still waiting on the visual layer.

    Fish are kept in creation order. Growing requests new visuals;
    shrinking drops the most recent fish first, so the oldest members
    of the school stay put.
    """

    def __init__(
        self,
        params: Optional[SimulationParameters] = None,
        bounds: Optional[TankBounds] = None,
        visuals: Optional[VisualLayer] = None,
        seed: Optional[int] = None
    ):
        self.params = params if params is not None else SimulationParameters.from_config()
        self.bounds = bounds if bounds is not None else TankBounds()
        self.visuals = visuals if visuals is not None else NullVisualLayer()
        self.rng = np.random.default_rng(seed)

        self.fish: List[Fish] = []
        self.pending: List[PendingSpawn] = []
        self.failed_spawns: List[BaseException] = []

        self.time = 0.0
        self.frame = 0
        self.target = 0
        self._applied_target = self.params.target_population

        self.resize_to(self._applied_target)

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    @property
    def num_fish(self) -> int:
        return len(self.fish)

    @property
    def num_pending(self) -> int:
        return sum(1 for spawn in self.pending if not spawn.discarded)

    @property
    def logical_count(self) -> int:
        """Live fish plus spawns that will join once their visual resolves."""
        return self.num_fish + self.num_pending

    def generate_spawn_positions(self, count: int) -> np.ndarray:
        """Uniform positions across the spawn region, one row per fish."""
        half = config.SPAWN["half_width"]
        y_min, y_max = self.bounds.limit_y_min, self.bounds.limit_y_max

        positions = np.empty((count, 3), dtype=np.float64)
        for i in range(count):
            positions[i, 0] = (self.rng.random() - 0.5) * 2.0 * half
            positions[i, 1] = y_min + self.rng.random() * (y_max - y_min)
            positions[i, 2] = (self.rng.random() - 0.5) * 2.0 * half
        return positions

    def resize_to(self, n: int):
        """Grow or shrink the school to `n` fish; negative targets count as 0."""
        n = max(0, int(n))
        self.target = n
        diff = n - self.logical_count

        if diff > 0:
            for position in self.generate_spawn_positions(diff):
                future = self.visuals.spawn_visual(position)
                self.pending.append(PendingSpawn(position=position, future=future))
            print(f"[Flock] Requested {diff} fish (target {n})")
        elif diff < 0:
            self._remove_newest(-diff)
            print(f"[Flock] Removed {-diff} fish (target {n})")

        self._collect_spawns()

    resize_population = resize_to

    def _remove_newest(self, count: int):
        """Drop `count` fish, pending spawns first, then the live suffix."""
        for spawn in reversed(self.pending):
            if count == 0:
                return
            if not spawn.discarded:
                spawn.discarded = True
                count -= 1

        if count == 0:
            return

        removed = self.fish[-count:]
        del self.fish[-count:]
        for fish in reversed(removed):
            self.visuals.despawn_visual(fish.handle)

    def _collect_spawns(self):
        """Move resolved spawns into the live list, in request order."""
        still_pending = []

        for spawn in self.pending:
            if not spawn.future.done():
                still_pending.append(spawn)
                continue

            error = spawn.future.exception()
            if error is not None:
                print(f"[Flock] Spawn failed: {error}")
                self.failed_spawns.append(error)
                continue

            handle = spawn.future.result()
            if spawn.discarded:
                self.visuals.despawn_visual(handle)
            else:
                self.fish.append(Fish.spawn(spawn.position, self.rng, handle=handle))

        self.pending = still_pending

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    @property
    def positions(self) -> np.ndarray:
        if not self.fish:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([fish.position for fish in self.fish], dtype=np.float64)

    @property
    def velocities(self) -> np.ndarray:
        if not self.fish:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([fish.velocity for fish in self.fish], dtype=np.float64)

    def tick(self, dt: float, params: Optional[SimulationParameters] = None):
        """
        Advance the school by one frame.

        A changed `target_population` is applied first and resolved spawns
        join the school. Every fish then steers against the same snapshot
        of last frame's positions and velocities before any of them moves.
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        if params is None:
            params = self.params

        if params.target_population != self._applied_target:
            self._applied_target = params.target_population
            self.resize_to(params.target_population)
        else:
            self._collect_spawns()

        positions = self.positions
        velocities = self.velocities

        for i, fish in enumerate(self.fish):
            fish.steer(positions, velocities, i, params, self.bounds, self.time, self.rng)

        for fish in self.fish:
            fish.integrate(dt, params, self.bounds)

        self.time += dt
        self.frame += 1

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def average_speed(self) -> float:
        if not self.fish:
            return 0.0
        return float(np.mean(np.linalg.norm(self.velocities, axis=1)))

    def render_states(self) -> list:
        """(handle, position, (rotation_x, rotation_y)) for every live fish."""
        return [
            (fish.handle, fish.position.copy(), (fish.rotation_x, fish.rotation_y))
            for fish in self.fish
        ]

    def stats(self, params: Optional[SimulationParameters] = None) -> dict:
        if params is None:
            params = self.params
        forward_deg, up_deg = params.offsets_degrees
        return {
            "fish": self.num_fish,
            "target": self.target,
            "pending": self.num_pending,
            "average_speed": self.average_speed(),
            "forward_offset_deg": forward_deg,
            "up_offset_deg": up_deg,
            "separation_radius": params.separation_radius,
            "alignment_radius": params.alignment_radius,
            "cohesion_radius": params.cohesion_radius,
            "time": self.time,
        }

    def debug_info(self, params: Optional[SimulationParameters] = None) -> str:
        s = self.stats(params)
        return (
            f"Fish: {s['fish']}/{s['target']}  |  Avg speed: {s['average_speed']:.2f}\n"
            f"Offset: Y={s['forward_offset_deg']:.1f}°, X={s['up_offset_deg']:.1f}°\n"
            f"Separation: {s['separation_radius']}u  "
            f"Alignment: {s['alignment_radius']}u  "
            f"Cohesion: {s['cohesion_radius']}u"
        )

    def close(self):
        """Release every visual, including spawns still in flight."""
        for spawn in self.pending:
            spawn.discarded = True
        self._remove_newest(self.num_fish)
        self.visuals.shutdown()
        self._collect_spawns()
