"""Per-step accumulators composed by every chaos system.

- Trail: bounded, front-trimmed history of Cartesian positions
- LyapunovEstimator: tangent-vector co-evolution with periodic renormalization
- PoincareSampler: crossing detector base class, specialized per system
- StabilityGuard: divergence detection with silent in-place recovery
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterator, Sequence

import numpy as np

from chaos_lab.simulation.integrators import TangentMap

logger = logging.getLogger(__name__)


class Trail:
    """Insertion-ordered sequence of 3-D positions.

    Points are only ever removed from the front, so the retained points are
    always the most recently appended ones.
    """

    def __init__(self, max_length: int | None = None) -> None:
        self.max_length = max_length
        self._points: list[np.ndarray] = []
        self.n_appended = 0

    def append(self, point: np.ndarray) -> None:
        self._points.append(np.array(point, dtype=np.float64))
        self.n_appended += 1
        if self.max_length is not None:
            self.trim(self.max_length)

    def trim(self, max_length: int) -> None:
        """Drop the oldest points so that at most ``max_length`` remain."""
        excess = len(self._points) - max(int(max_length), 0)
        if excess > 0:
            del self._points[:excess]

    def clear(self) -> None:
        self._points.clear()
        self.n_appended = 0

    def step_length(self) -> float:
        """Distance between the last two points, 0 with fewer than two."""
        if len(self._points) < 2:
            return 0.0
        return float(np.linalg.norm(self._points[-1] - self._points[-2]))

    def as_array(self) -> np.ndarray:
        if not self._points:
            return np.empty((0, 3), dtype=np.float64)
        return np.array(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._points)

    def __getitem__(self, index):
        return self._points[index]


class LyapunovEstimator:
    """Largest Lyapunov exponent from a co-evolved tangent vector.

    The tangent is advanced by one Euler step of the linearized flow after
    every integration step. Every ``renorm_interval`` steps its log-norm is
    accumulated and it is rescaled to unit length:

        lambda = sum(log |v|) / (n_renorm * renorm_interval * base_dt)
    """

    def __init__(
        self,
        tangent_map: TangentMap,
        dim: int,
        renorm_interval: int,
        base_dt: float,
    ) -> None:
        self.tangent_map = tangent_map
        self.renorm_interval = renorm_interval
        self.base_dt = base_dt
        self._initial_tangent = np.zeros(dim, dtype=np.float64)
        self._initial_tangent[0] = 1.0
        self.reset()

    def reset(self) -> None:
        self._tangent = self._initial_tangent.copy()
        self._log_sum = 0.0
        self._n_renorm = 0
        self._steps_since_renorm = 0
        self.exponent = 0.0

    @property
    def n_renorm(self) -> int:
        return self._n_renorm

    def advance(self, state: np.ndarray, dt: float) -> None:
        """Evolve the tangent at ``state`` and renormalize when due."""
        self._tangent = self._tangent + self.tangent_map(state, self._tangent) * dt
        if not np.all(np.isfinite(self._tangent)):
            self._tangent = self._initial_tangent.copy()

        self._steps_since_renorm += 1
        if self._steps_since_renorm < self.renorm_interval:
            return
        self._steps_since_renorm = 0

        norm = float(np.linalg.norm(self._tangent))
        if norm > 0 and np.isfinite(norm):
            self._log_sum += np.log(norm)
            self._n_renorm += 1
            self._tangent = self._tangent / norm
            total_time = self._n_renorm * self.renorm_interval * self.base_dt
            self.exponent = float(self._log_sum / total_time)


class PoincareSampler(ABC):
    """Records a 2-D projection of the state each time a section is crossed.

    Subclasses define the section via ``prime`` (seed the detector from a
    fresh state), ``crossed`` (compare against the previous state and update
    it) and ``project`` (the recorded pair).
    """

    def __init__(self, max_points: int = 5000, warmup: int = 100) -> None:
        self.max_points = max_points
        self.warmup = warmup
        self.points: list[tuple[float, float]] = []

    @abstractmethod
    def prime(self, state: np.ndarray) -> None:
        """Seed the crossing detector from a freshly set state."""

    @abstractmethod
    def crossed(self, state: np.ndarray) -> bool:
        """Return True if the move to ``state`` crosses the section."""

    @abstractmethod
    def project(self, state: np.ndarray) -> tuple[float, float]:
        """The pair recorded for a crossing at ``state``."""

    def reset(self, state: np.ndarray) -> None:
        self.points = []
        self.prime(state)

    def observe(self, state: np.ndarray, n_trail_points: int) -> bool:
        """Test ``state`` for a crossing and record it once warmed up."""
        if not self.crossed(state) or n_trail_points <= self.warmup:
            return False
        self.points.append(self.project(state))
        excess = len(self.points) - self.max_points
        if excess > 0:
            del self.points[:excess]
        return True


class StabilityGuard:
    """Replaces diverged states with a canonical safe state.

    A state is diverged if any component is non-finite or its magnitude
    exceeds ``threshold``. Recoveries are counted, never raised.
    """

    def __init__(self, safe_state: Sequence[float], threshold: float = 1e6) -> None:
        self.safe_state = np.array(safe_state, dtype=np.float64)
        self.threshold = threshold
        self.recoveries = 0

    def is_diverged(self, state: np.ndarray) -> bool:
        return not np.all(np.isfinite(state)) or bool(np.any(np.abs(state) > self.threshold))

    def check(self, state: np.ndarray) -> np.ndarray:
        """Return ``state`` unchanged, or a copy of the safe state if diverged."""
        if not self.is_diverged(state):
            return state
        self.recoveries += 1
        logger.debug(f"State diverged ({state}); recovered to {self.safe_state}")
        return self.safe_state.copy()
