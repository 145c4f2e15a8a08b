"""Fixed-step integration and linearization helpers shared by every system."""

from __future__ import annotations

from typing import Callable

import numpy as np

Derivative = Callable[[np.ndarray], np.ndarray]
TangentMap = Callable[[np.ndarray, np.ndarray], np.ndarray]


def rk4_step(derivatives: Derivative, state: np.ndarray, dt: float) -> np.ndarray:
    """Advance ``state`` by one classic fourth-order Runge-Kutta step."""
    k1 = derivatives(state)
    k2 = derivatives(state + 0.5 * dt * k1)
    k3 = derivatives(state + 0.5 * dt * k2)
    k4 = derivatives(state + dt * k3)
    return state + (dt / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


def finite_difference_jvp(derivatives: Derivative, eps: float = 1e-7) -> TangentMap:
    """Build a Jacobian-vector product from a forward difference of ``derivatives``.

    J(s) v ~ (f(s + eps*v) - f(s)) / eps
    """

    def jvp(state: np.ndarray, tangent: np.ndarray) -> np.ndarray:
        base = derivatives(state)
        shifted = derivatives(state + eps * tangent)
        return (shifted - base) / eps

    return jvp
