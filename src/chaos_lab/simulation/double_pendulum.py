"""Damped double pendulum -- a planar 4-state chaotic mechanism.

State vector: [theta1, theta2, omega1, omega2] with angles measured from the
downward vertical. The trail follows the second bob in the plane (z = 0).

Poincare section: theta2 (wrapped to [0, 2*pi)) passing from the upper half
(pi, 2*pi) into [0, 1), recorded as (theta1, omega1).
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from chaos_lab.simulation.base import ChaosSystem
from chaos_lab.simulation.diagnostics import PoincareSampler
from chaos_lab.simulation.integrators import finite_difference_jvp
from chaos_lab.types.parameters import DoublePendulumParams, SystemParams
from chaos_lab.types.simulation import SystemConfig, SystemKind

TWO_PI = 2.0 * np.pi


class PendulumSectionSampler(PoincareSampler):
    def prime(self, state: np.ndarray) -> None:
        self._prev_theta2 = state[1]

    def crossed(self, state: np.ndarray) -> bool:
        prev = self._prev_theta2 % TWO_PI
        curr = state[1] % TWO_PI
        self._prev_theta2 = state[1]
        return bool(prev > np.pi and curr < 1.0)

    def project(self, state: np.ndarray) -> tuple[float, float]:
        return float(state[0]), float(state[2])


class DoublePendulumSystem(ChaosSystem):
    """Double pendulum driven by the closed-form Lagrangian accelerations.

    The tangent map is a forward finite difference of the derivatives rather
    than an analytic Jacobian.

    Parameters:
        mass1, mass2: bob masses
        length1, length2: rod lengths
        gravity: gravitational acceleration (default 9.81)
        damping: linear damping on each angular velocity (default 0)
    """

    kind = SystemKind.DOUBLE_PENDULUM
    params_model = DoublePendulumParams
    base_dt = 0.005
    renorm_interval = 20
    default_state = (np.pi / 2, np.pi / 2, 0.0, 0.0)
    perturb_scale = (0.15, 0.15, 1.5, 1.5)
    fd_eps = 1e-7

    def __init__(
        self,
        initial_state: Sequence[float] | None = None,
        params: SystemParams | dict[str, float] | None = None,
        config: SystemConfig | None = None,
    ) -> None:
        self._positions: list[tuple[np.ndarray, np.ndarray]] = []
        self._jvp = finite_difference_jvp(self.derivatives, eps=self.fd_eps)
        super().__init__(initial_state, params, config)

    def derivatives(self, state: np.ndarray) -> np.ndarray:
        """Compute [omega1, omega2, alpha1, alpha2] for the damped double pendulum."""
        p = self._params
        m1, m2, l1, l2, g = p.mass1, p.mass2, p.length1, p.length2, p.gravity
        theta1, theta2, omega1, omega2 = state

        delta = theta1 - theta2
        cos12 = np.cos(delta)
        sin12 = np.sin(delta)
        sin1 = np.sin(theta1)
        sin2 = np.sin(theta2)

        den1 = (m1 + m2) * l1 - m2 * l1 * cos12 * cos12
        den2 = l2 * ((m1 + m2) - m2 * cos12 * cos12)

        num1 = (
            -m2 * l1 * omega1**2 * sin12 * cos12
            + m2 * g * sin2 * cos12
            - m2 * l2 * omega2**2 * sin12
            - (m1 + m2) * g * sin1
        )
        num2 = (
            m2 * l2 * omega2**2 * sin12 * cos12
            + (m1 + m2) * g * sin1 * cos12
            + (m1 + m2) * l1 * omega1**2 * sin12
            - (m1 + m2) * g * sin2
        )

        alpha1 = num1 / den1 - p.damping * omega1
        alpha2 = num2 / den2 - p.damping * omega2
        return np.array([omega1, omega2, alpha1, alpha2])

    def tangent(self, state: np.ndarray, vector: np.ndarray) -> np.ndarray:
        return self._jvp(state, vector)

    def joint_positions(self, state: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Planar positions of the two bobs (pivot at the origin)."""
        p = self._params
        theta1, theta2 = state[0], state[1]
        p1 = np.array([p.length1 * np.sin(theta1), -p.length1 * np.cos(theta1)])
        p2 = p1 + np.array([p.length2 * np.sin(theta2), -p.length2 * np.cos(theta2)])
        return p1, p2

    def position(self, state: np.ndarray) -> np.ndarray:
        _, p2 = self.joint_positions(state)
        return np.array([p2[0], p2[1], 0.0])

    def _make_section_sampler(self, max_points: int, warmup: int) -> PoincareSampler:
        return PendulumSectionSampler(max_points=max_points, warmup=warmup)

    def _record_position(self) -> None:
        self._positions.append(self.joint_positions(self._state))
        super()._record_position()
        excess = len(self._positions) - len(self._trail)
        if excess > 0:
            del self._positions[:excess]

    def reset(self, initial_state: Sequence[float] | None = None) -> None:
        self._positions = []
        super().reset(initial_state)

    def trim_trail(self, max_length: int) -> None:
        super().trim_trail(max_length)
        excess = len(self._positions) - len(self._trail)
        if excess > 0:
            del self._positions[:excess]

    @property
    def positions(self) -> list[tuple[np.ndarray, np.ndarray]]:
        """(p1, p2) bob positions, one per trail point."""
        return self._positions

    def get_current_positions(self) -> tuple[np.ndarray, np.ndarray]:
        return self.joint_positions(self._state)

    @property
    def energy(self) -> float:
        """Mechanical energy T + V with the pivot as the potential reference."""
        p = self._params
        m1, m2, l1, l2, g = p.mass1, p.mass2, p.length1, p.length2, p.gravity
        theta1, theta2, omega1, omega2 = self._state
        kinetic = (
            0.5 * (m1 + m2) * l1**2 * omega1**2
            + 0.5 * m2 * l2**2 * omega2**2
            + m2 * l1 * l2 * omega1 * omega2 * np.cos(theta1 - theta2)
        )
        potential = -(m1 + m2) * g * l1 * np.cos(theta1) - m2 * g * l2 * np.cos(theta2)
        return float(kinetic + potential)
