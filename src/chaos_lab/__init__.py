"""Chaos Lab: real-time Lorenz, Rossler and double pendulum simulation with live chaos diagnostics."""

__version__ = "0.1.0"

from chaos_lab.simulation.base import ChaosSystem
from chaos_lab.simulation.double_pendulum import DoublePendulumSystem
from chaos_lab.simulation.lorenz import LorenzSystem
from chaos_lab.simulation.registry import SystemRegistry, create_system
from chaos_lab.simulation.rossler import RosslerSystem

__all__ = [
    "ChaosSystem",
    "LorenzSystem",
    "RosslerSystem",
    "DoublePendulumSystem",
    "SystemRegistry",
    "create_system",
    "__version__",
]
