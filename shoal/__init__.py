"""Fish school flocking simulation."""

from .fish import Fish
from .flock import Flock, PendingSpawn
from .params import ForceWeights, SimulationParameters, TankBounds
from .visuals import NullVisualLayer, ThreadedVisualLayer, VisualLayer

__all__ = [
    "Fish",
    "Flock",
    "PendingSpawn",
    "ForceWeights",
    "SimulationParameters",
    "TankBounds",
    "NullVisualLayer",
    "ThreadedVisualLayer",
    "VisualLayer",
]
