"""Core data types for the chaos lab engine."""

from chaos_lab.types.parameters import (
    DoublePendulumParams,
    LorenzParams,
    RosslerParams,
    SystemParams,
)
from chaos_lab.types.simulation import SystemConfig, SystemKind

__all__ = [
    # parameters
    "SystemParams",
    "LorenzParams",
    "RosslerParams",
    "DoublePendulumParams",
    # simulation
    "SystemKind",
    "SystemConfig",
]
