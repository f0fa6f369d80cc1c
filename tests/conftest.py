import numpy as np
import pytest

from shoal import Flock, NullVisualLayer, SimulationParameters


class FixedRng:
    """Stand-in for numpy's Generator that always draws the same value."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def random(self, size=None):
        if size is None:
            return self.value
        return np.full(size, self.value)


class CountingVisualLayer(NullVisualLayer):
    def __init__(self):
        super().__init__()
        self.spawned = 0
        self.despawned = []

    def spawn_visual(self, position):
        self.spawned += 1
        return super().spawn_visual(position)

    def despawn_visual(self, handle):
        self.despawned.append(handle)
        super().despawn_visual(handle)


@pytest.fixture
def params():
    return SimulationParameters.from_config()


@pytest.fixture
def fixed_rng():
    return FixedRng()


@pytest.fixture
def visuals():
    return CountingVisualLayer()


@pytest.fixture
def empty_flock(visuals):
    """A flock that starts with no fish."""
    return Flock(params=SimulationParameters(target_population=0), visuals=visuals, seed=7)
