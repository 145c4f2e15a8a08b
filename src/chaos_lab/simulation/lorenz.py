"""Lorenz system -- the canonical strange attractor.

ODEs:
    dx/dt = sigma*(y - x)
    dy/dt = x*(rho - z) - y
    dz/dt = x*y - beta*z

Poincare section: local maxima of z, recorded as (x, y).
"""
from __future__ import annotations

import numpy as np

from chaos_lab.simulation.base import ChaosSystem
from chaos_lab.simulation.diagnostics import PoincareSampler
from chaos_lab.types.parameters import LorenzParams
from chaos_lab.types.simulation import SystemKind


class LorenzSectionSampler(PoincareSampler):
    """Fires when successive z differences flip from positive to non-positive."""

    def prime(self, state: np.ndarray) -> None:
        self._prev_z = state[2]
        self._prev_dz = 0.0

    def crossed(self, state: np.ndarray) -> bool:
        dz = state[2] - self._prev_z
        hit = self._prev_dz > 0 and dz <= 0
        self._prev_dz = dz
        self._prev_z = state[2]
        return bool(hit)

    def project(self, state: np.ndarray) -> tuple[float, float]:
        return float(state[0]), float(state[1])


class LorenzSystem(ChaosSystem):
    """Lorenz system with live Lyapunov and Poincare diagnostics.

    State vector: [x, y, z]

    Parameters:
        sigma: Prandtl number (classic value: 10)
        rho: Rayleigh number (classic value: 28 for chaos)
        beta: geometric factor (classic value: 8/3)
    """

    kind = SystemKind.LORENZ
    params_model = LorenzParams
    base_dt = 0.01
    renorm_interval = 10
    default_state = (1.0, 1.0, 1.0)
    perturb_scale = (1.0, 1.0, 1.0)

    def derivatives(self, state: np.ndarray) -> np.ndarray:
        """Lorenz equations: dx = sigma*(y-x), dy = x*(rho-z)-y, dz = x*y - beta*z."""
        p = self._params
        x, y, z = state
        dx = p.sigma * (y - x)
        dy = x * (p.rho - z) - y
        dz = x * y - p.beta * z
        return np.array([dx, dy, dz])

    def tangent(self, state: np.ndarray, vector: np.ndarray) -> np.ndarray:
        p = self._params
        x, y, z = state
        dx, dy, dz = vector
        return np.array([
            p.sigma * (dy - dx),
            (p.rho - z) * dx - dy - x * dz,
            y * dx + x * dy - p.beta * dz,
        ])

    def position(self, state: np.ndarray) -> np.ndarray:
        return state.copy()

    def _make_section_sampler(self, max_points: int, warmup: int) -> PoincareSampler:
        return LorenzSectionSampler(max_points=max_points, warmup=warmup)

    @property
    def fixed_points(self) -> list[np.ndarray]:
        """Compute the fixed points of the Lorenz system.

        For rho > 1, there are three: origin and two symmetric points.
        """
        p = self._params
        points = [np.array([0.0, 0.0, 0.0])]
        if p.rho > 1:
            c = np.sqrt(p.beta * (p.rho - 1))
            points.append(np.array([c, c, p.rho - 1]))
            points.append(np.array([-c, -c, p.rho - 1]))
        return points
