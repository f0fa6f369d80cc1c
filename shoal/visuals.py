"""Seam between the simulation and whatever draws the fish.

Spawning a visual may be slow (model loading), so `spawn_visual` hands
back a `concurrent.futures.Future` resolving to an opaque handle. The
flock only appends a fish once that future has resolved.
"""

import itertools
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

import numpy as np


class VisualLayer:
    """Interface the flock uses to attach and release visual representations."""

    def spawn_visual(self, position: np.ndarray) -> Future:
        raise NotImplementedError

    def despawn_visual(self, handle: Any):
        raise NotImplementedError

    def shutdown(self):
        """Release any resources held by the layer."""


class NullVisualLayer(VisualLayer):
    """Headless layer: every spawn resolves immediately to an integer handle."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.live = set()

    def spawn_visual(self, position: np.ndarray) -> Future:
        handle = next(self._ids)
        self.live.add(handle)
        future = Future()
        future.set_result(handle)
        return future

    def despawn_visual(self, handle: Any):
        self.live.discard(handle)


class ThreadedVisualLayer(VisualLayer):
    """
    Runs a (possibly slow) loader on a worker pool.

    Args:
        loader: Called with the spawn position, returns a handle
        unloader: Called with a handle when the fish is removed
        max_workers: Size of the loading pool
    """

    def __init__(
        self,
        loader: Callable[[np.ndarray], Any],
        unloader: Optional[Callable[[Any], None]] = None,
        max_workers: int = 4
    ):
        self.loader = loader
        self.unloader = unloader
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="visual")

    def spawn_visual(self, position: np.ndarray) -> Future:
        return self._executor.submit(self.loader, np.array(position, dtype=np.float64))

    def despawn_visual(self, handle: Any):
        if self.unloader is not None:
            self.unloader(handle)

    def shutdown(self):
        self._executor.shutdown(wait=True)
