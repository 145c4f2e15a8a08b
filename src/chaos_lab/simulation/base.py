"""Abstract base class for real-time chaos systems."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

import numpy as np

from chaos_lab.simulation.diagnostics import (
    LyapunovEstimator,
    PoincareSampler,
    StabilityGuard,
    Trail,
)
from chaos_lab.simulation.integrators import rk4_step
from chaos_lab.types.parameters import SystemParams
from chaos_lab.types.simulation import SystemConfig, SystemKind

logger = logging.getLogger(__name__)


class ChaosSystem(ABC):
    """Base class for all chaos systems.

    Subclasses provide the physics (derivatives, tangent map, position
    projection, Poincare section). The base class owns the per-tick
    scaffolding: RK4 integration, divergence recovery, trail bookkeeping,
    Lyapunov estimation and section sampling. No public method raises for
    numerical reasons.
    """

    kind: SystemKind
    params_model: type[SystemParams]
    base_dt: float = 0.01
    renorm_interval: int = 10
    default_state: tuple[float, ...] = (1.0, 1.0, 1.0)
    perturb_scale: tuple[float, ...] = (1.0, 1.0, 1.0)

    def __init__(
        self,
        initial_state: Sequence[float] | None = None,
        params: SystemParams | dict[str, float] | None = None,
        config: SystemConfig | None = None,
    ) -> None:
        if config is None:
            config = SystemConfig(kind=self.kind)
        self.config = config

        if config.dt is not None:
            self.base_dt = config.dt
        if config.renorm_interval is not None:
            self.renorm_interval = config.renorm_interval

        if params is None:
            params = self.params_model().merge(config.parameters)
        elif isinstance(params, dict):
            params = self.params_model().merge(params)
        self._params = params

        if initial_state is None and config.initial_state is not None:
            initial_state = config.initial_state

        self._rng = np.random.default_rng(config.seed)
        self._trail = Trail(max_length=config.max_trail_length)
        self._guard = StabilityGuard(self.default_state, config.divergence_threshold)
        self._lyapunov = LyapunovEstimator(
            self.tangent,
            dim=len(self.default_state),
            renorm_interval=self.renorm_interval,
            base_dt=self.base_dt,
        )
        self._poincare = self._make_section_sampler(
            max_points=config.max_poincare_points,
            warmup=config.poincare_warmup,
        )
        self.reset(initial_state)

    # --- physics, supplied by subclasses ---

    @abstractmethod
    def derivatives(self, state: np.ndarray) -> np.ndarray:
        """Right-hand side of the ODE at ``state`` under the current parameters."""

    @abstractmethod
    def tangent(self, state: np.ndarray, vector: np.ndarray) -> np.ndarray:
        """Jacobian of the flow at ``state`` applied to ``vector``."""

    @abstractmethod
    def position(self, state: np.ndarray) -> np.ndarray:
        """Cartesian 3-D position derived from ``state``."""

    @abstractmethod
    def _make_section_sampler(self, max_points: int, warmup: int) -> PoincareSampler:
        """Build the Poincare section detector for this system."""

    # --- shared per-tick scaffolding ---

    def step(self, speed: float = 1.0) -> np.ndarray:
        """Advance one integration step of ``base_dt * speed``.

        Returns the new position.
        """
        dt = self.base_dt * speed
        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            state = rk4_step(self.derivatives, self._state, dt)
            self._state = self._guard.check(state)
            self._record_position()
            self._lyapunov.advance(self._state, dt)
            self._poincare.observe(self._state, self._trail.n_appended)
        return self.get_position()

    def _record_position(self) -> None:
        self._trail.append(self.position(self._state))

    def reset(self, initial_state: Sequence[float] | None = None) -> None:
        """Reinitialize the state and every accumulator."""
        if initial_state is None:
            initial_state = self.default_state
        self._guard.recoveries = 0
        with np.errstate(invalid="ignore"):
            self._state = self._guard.check(np.array(initial_state, dtype=np.float64))
        self._trail.clear()
        self._record_position()
        self._lyapunov.reset()
        self._poincare.reset(self._state)

    def update_params(self, partial: dict[str, Any] | None = None, **kwargs: Any) -> None:
        """Merge new coefficient values; they take effect on the next step."""
        update = dict(partial or {})
        update.update(kwargs)
        self._params = self._params.merge(update)

    def trim_trail(self, max_length: int) -> None:
        """Drop the oldest trail points so that at most ``max_length`` remain."""
        self._trail.trim(max_length)

    def perturb(self, amount: float) -> None:
        """Kick the state with uniform noise in [-amount, amount) per component.

        Accumulators are left untouched.
        """
        if amount == 0:
            return
        scale = np.array(self.perturb_scale, dtype=np.float64)
        noise = np.zeros_like(self._state)
        while not np.any(noise):
            noise = self._rng.uniform(-1.0, 1.0, size=self._state.shape) * amount * scale
        with np.errstate(over="ignore", invalid="ignore"):
            kicked = self._state + noise
            if np.array_equal(kicked, self._state):
                # Noise below the float spacing: nudge the largest kick by one ulp
                i = int(np.argmax(np.abs(noise)))
                kicked[i] = np.nextafter(kicked[i], np.copysign(np.inf, noise[i]))
            self._state = self._guard.check(kicked)

    def get_speed(self) -> float:
        """Distance covered by the last step, 0 with fewer than two trail points."""
        return self._trail.step_length()

    def get_params(self) -> SystemParams:
        return self._params

    def get_state(self) -> np.ndarray:
        return self._state.copy()

    def get_position(self) -> np.ndarray:
        return self.position(self._state)

    # --- read-only diagnostics ---

    @property
    def params(self) -> SystemParams:
        return self._params

    @property
    def trail(self) -> Trail:
        return self._trail

    @property
    def lyapunov_exponent(self) -> float:
        return self._lyapunov.exponent

    @property
    def lyapunov_samples(self) -> int:
        """Number of renormalizations behind the current exponent estimate."""
        return self._lyapunov.n_renorm

    @property
    def poincare_points(self) -> list[tuple[float, float]]:
        return self._poincare.points

    @property
    def recoveries(self) -> int:
        """Number of divergence recoveries since the last reset."""
        return self._guard.recoveries
