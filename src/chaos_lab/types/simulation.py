"""System identification and per-instance engine configuration."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SystemKind(str, Enum):
    LORENZ = "lorenz"
    ROSSLER = "rossler"
    DOUBLE_PENDULUM = "double_pendulum"


class SystemConfig(BaseModel):
    """Configuration for instantiating a chaos system.

    Fields left as None fall back to the defaults of the concrete system
    (base time step, renormalization interval, initial state).
    """

    kind: SystemKind
    dt: float | None = None
    renorm_interval: int | None = None
    divergence_threshold: float = 1e6
    poincare_warmup: int = 100
    max_poincare_points: int = 5000
    max_trail_length: int | None = None
    parameters: dict[str, float] = Field(default_factory=dict)
    initial_state: list[float] | None = None
    seed: int | None = None
