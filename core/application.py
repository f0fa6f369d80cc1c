"""Headless application driving the fish school frame by frame."""

import time
from typing import Optional

from config import school as config
from shoal import Flock, SimulationParameters
from shoal.visuals import VisualLayer


class Application:
    """Main loop: feeds a time delta to the flock each frame and reports status."""

    def __init__(
        self,
        params: Optional[SimulationParameters] = None,
        visuals: Optional[VisualLayer] = None,
        seed: Optional[int] = None,
        fixed_dt: Optional[float] = config.SIMULATION["fixed_dt"],
        status_every: int = config.SIMULATION["status_every"]
    ):
        self.params = params if params is not None else SimulationParameters.from_config()
        self.flock = Flock(params=self.params, visuals=visuals, seed=seed)

        # None means wall-clock time between frames
        self.fixed_dt = fixed_dt
        self.status_every = status_every
        self.running = True
        self._last_time = None

    def _next_dt(self) -> float:
        if self.fixed_dt is not None:
            return self.fixed_dt

        now = time.perf_counter()
        dt = 0.0 if self._last_time is None else now - self._last_time
        self._last_time = now
        return dt

    def _update(self, dt: float):
        """Update simulation state."""
        # Cap dt to prevent physics explosion on lag
        dt = min(dt, config.SIMULATION["max_dt"])
        self.flock.tick(dt, self.params)

    def _report(self):
        stats = self.flock.stats(self.params)
        print(
            f"[App] Frame {self.flock.frame}  |  t={stats['time']:.2f}s  |  "
            f"Fish: {stats['fish']}/{stats['target']}  |  "
            f"Avg speed: {stats['average_speed']:.2f}"
        )

    def run(self, frames: Optional[int] = None):
        """Run until `frames` frames have elapsed or `running` is cleared."""
        print(f"[App] Starting school of {self.flock.logical_count} fish")
        try:
            while self.running and (frames is None or self.flock.frame < frames):
                self._update(self._next_dt())
                if self.status_every and self.flock.frame % self.status_every == 0:
                    self._report()
        finally:
            self._report()
            self.flock.close()
        return self.flock
