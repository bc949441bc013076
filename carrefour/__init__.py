"""Semaphore-driven simulation of a two-approach road intersection."""

from .config import SimulationConfig, load_config
from .errors import Cancelled, CarrefourError, InternalError, InvalidArgument
from .models import Approach, LightState, SimulationSnapshot, Stage, StatisticsSnapshot
from .semaphore import Semaphore
from .simulator import Simulation, start_simulation

__all__ = [
    "Approach",
    "Cancelled",
    "CarrefourError",
    "InternalError",
    "InvalidArgument",
    "LightState",
    "Semaphore",
    "Simulation",
    "SimulationConfig",
    "SimulationSnapshot",
    "Stage",
    "StatisticsSnapshot",
    "load_config",
    "start_simulation",
]
