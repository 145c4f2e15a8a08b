"""Rossler system -- a simpler 3D chaotic attractor.

ODEs:
    dx/dt = -y - z
    dy/dt = x + a*y
    dz/dt = b + z*(x - c)

Poincare section: y = 0 crossed in the ascending direction, recorded as (x, z).
"""
from __future__ import annotations

import numpy as np

from chaos_lab.simulation.base import ChaosSystem
from chaos_lab.simulation.diagnostics import PoincareSampler
from chaos_lab.types.parameters import RosslerParams
from chaos_lab.types.simulation import SystemKind


class RosslerSectionSampler(PoincareSampler):
    def prime(self, state: np.ndarray) -> None:
        self._prev_y = state[1]

    def crossed(self, state: np.ndarray) -> bool:
        hit = self._prev_y < 0 <= state[1]
        self._prev_y = state[1]
        return bool(hit)

    def project(self, state: np.ndarray) -> tuple[float, float]:
        return float(state[0]), float(state[2])


class RosslerSystem(ChaosSystem):
    """Rossler attractor with live Lyapunov and Poincare diagnostics.

    State vector: [x, y, z]

    Parameters:
        a: controls the frequency and shape of oscillation (classic: 0.2)
        b: controls the z-dynamics (classic: 0.2)
        c: controls chaos onset (classic: 5.7 for chaos, 3.5 is periodic)
    """

    kind = SystemKind.ROSSLER
    params_model = RosslerParams
    base_dt = 0.01
    renorm_interval = 10
    default_state = (1.0, 1.0, 1.0)
    perturb_scale = (1.0, 1.0, 1.0)

    def derivatives(self, state: np.ndarray) -> np.ndarray:
        """Rossler equations: dx=-y-z, dy=x+a*y, dz=b+z*(x-c)."""
        p = self._params
        x, y, z = state
        dx = -y - z
        dy = x + p.a * y
        dz = p.b + z * (x - p.c)
        return np.array([dx, dy, dz])

    def tangent(self, state: np.ndarray, vector: np.ndarray) -> np.ndarray:
        p = self._params
        x, _, z = state
        dx, dy, dz = vector
        return np.array([
            -dy - dz,
            dx + p.a * dy,
            z * dx + (x - p.c) * dz,
        ])

    def position(self, state: np.ndarray) -> np.ndarray:
        return state.copy()

    def _make_section_sampler(self, max_points: int, warmup: int) -> PoincareSampler:
        return RosslerSectionSampler(max_points=max_points, warmup=warmup)

    @property
    def fixed_points(self) -> list[np.ndarray]:
        """Compute the fixed points of the Rossler system.

        Setting derivatives to zero gives z = -y, x = -a*y and
        a*y^2 + c*y + b = 0, so fixed points exist when c^2 >= 4*a*b.
        """
        p = self._params
        discriminant = p.c**2 - 4.0 * p.a * p.b
        if discriminant < 0 or p.a == 0:
            return []

        sqrt_disc = np.sqrt(discriminant)
        points = []
        for y in ((-p.c + sqrt_disc) / (2.0 * p.a), (-p.c - sqrt_disc) / (2.0 * p.a)):
            points.append(np.array([-p.a * y, y, -y], dtype=np.float64))
        return points
