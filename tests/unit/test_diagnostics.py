"""Tests for the shared per-step accumulators."""
from __future__ import annotations

import numpy as np
import pytest

from chaos_lab.simulation.diagnostics import (
    LyapunovEstimator,
    PoincareSampler,
    StabilityGuard,
    Trail,
)


class ThresholdSampler(PoincareSampler):
    """Fires when the first component rises through 0."""

    def prime(self, state):
        self._prev = state[0]

    def crossed(self, state):
        hit = self._prev < 0 <= state[0]
        self._prev = state[0]
        return hit

    def project(self, state):
        return float(state[0]), float(state[1])


class TestTrail:
    def _filled(self, n: int, max_length: int | None = None) -> Trail:
        trail = Trail(max_length=max_length)
        for i in range(n):
            trail.append(np.array([i, 0.0, 0.0]))
        return trail

    def test_append_copies(self):
        trail = Trail()
        point = np.array([1.0, 2.0, 3.0])
        trail.append(point)
        point[0] = 99.0
        assert trail[0][0] == 1.0

    @pytest.mark.parametrize("n, k", [(10, 3), (10, 10), (3, 10), (10, 0)])
    def test_trim_length(self, n, k):
        trail = self._filled(n)
        trail.trim(k)
        assert len(trail) == min(n, k)

    def test_trim_keeps_most_recent_in_order(self):
        trail = self._filled(10)
        trail.trim(4)
        assert [p[0] for p in trail] == [6.0, 7.0, 8.0, 9.0]

    def test_trim_negative_empties(self):
        trail = self._filled(5)
        trail.trim(-3)
        assert len(trail) == 0
        assert trail.as_array().shape == (0, 3)

    def test_max_length_caps_appends(self):
        trail = self._filled(50, max_length=8)
        assert len(trail) == 8
        assert trail.n_appended == 50
        assert trail[-1][0] == 49.0

    def test_step_length(self):
        trail = Trail()
        assert trail.step_length() == 0.0
        trail.append(np.zeros(3))
        assert trail.step_length() == 0.0
        trail.append(np.array([3.0, 4.0, 0.0]))
        assert trail.step_length() == pytest.approx(5.0)

    def test_clear_resets_count(self):
        trail = self._filled(5)
        trail.clear()
        assert len(trail) == 0
        assert trail.n_appended == 0
        assert trail.as_array().shape == (0, 3)


class TestLyapunovEstimator:
    def test_linear_growth_rate(self):
        """For dv/dt = lam*v the estimate approaches log(1 + lam*dt)/dt."""
        lam, dt = 0.5, 0.01
        est = LyapunovEstimator(lambda s, v: lam * v, dim=2, renorm_interval=10, base_dt=dt)
        state = np.zeros(2)
        for _ in range(1000):
            est.advance(state, dt)
        assert est.n_renorm == 100
        assert est.exponent == pytest.approx(np.log1p(lam * dt) / dt)

    def test_contracting_flow_negative(self):
        est = LyapunovEstimator(lambda s, v: -2.0 * v, dim=3, renorm_interval=10, base_dt=0.01)
        for _ in range(200):
            est.advance(np.zeros(3), 0.01)
        assert est.exponent < 0

    def test_no_update_before_interval(self):
        est = LyapunovEstimator(lambda s, v: v, dim=3, renorm_interval=10, base_dt=0.01)
        for _ in range(9):
            est.advance(np.zeros(3), 0.01)
        assert est.exponent == 0.0
        assert est.n_renorm == 0

    def test_non_finite_tangent_reseeded(self):
        est = LyapunovEstimator(lambda s, v: v * np.inf, dim=3, renorm_interval=1, base_dt=0.01)
        with np.errstate(invalid="ignore", over="ignore"):
            est.advance(np.zeros(3), 0.01)
        assert est.n_renorm == 1
        assert est.exponent == 0.0

    def test_reset(self):
        est = LyapunovEstimator(lambda s, v: v, dim=3, renorm_interval=1, base_dt=0.01)
        est.advance(np.zeros(3), 0.01)
        assert est.exponent != 0.0
        est.reset()
        assert est.exponent == 0.0
        assert est.n_renorm == 0


class TestPoincareSampler:
    def test_warmup_suppresses_early_crossings(self):
        sampler = ThresholdSampler(warmup=5)
        sampler.prime(np.array([-1.0, 0.0]))
        assert not sampler.observe(np.array([1.0, 2.0]), n_trail_points=5)
        sampler.prime(np.array([-1.0, 0.0]))
        assert sampler.observe(np.array([1.0, 2.0]), n_trail_points=6)
        assert sampler.points == [(1.0, 2.0)]

    def test_cap_trims_front(self):
        sampler = ThresholdSampler(max_points=3, warmup=0)
        sampler.prime(np.array([-1.0, 0.0]))
        for i in range(6):
            sampler.observe(np.array([1.0, float(i)]), n_trail_points=1)
            sampler.observe(np.array([-1.0, 0.0]), n_trail_points=1)
        assert [p[1] for p in sampler.points] == [3.0, 4.0, 5.0]

    def test_reset_empties(self):
        sampler = ThresholdSampler(warmup=0)
        sampler.prime(np.array([-1.0, 0.0]))
        sampler.observe(np.array([1.0, 0.0]), n_trail_points=1)
        sampler.reset(np.array([1.0, 0.0]))
        assert sampler.points == []


class TestStabilityGuard:
    def test_passes_finite_state(self):
        guard = StabilityGuard((1.0, 1.0, 1.0))
        state = np.array([5.0, -3.0, 20.0])
        assert guard.check(state) is state
        assert guard.recoveries == 0

    @pytest.mark.parametrize("bad", [
        [np.nan, 0.0, 0.0],
        [0.0, np.inf, 0.0],
        [0.0, 0.0, -np.inf],
        [2e6, 0.0, 0.0],
        [0.0, 0.0, -1.5e6],
    ])
    def test_recovers_diverged_state(self, bad):
        guard = StabilityGuard((1.0, 1.0, 1.0))
        out = guard.check(np.array(bad))
        np.testing.assert_array_equal(out, [1.0, 1.0, 1.0])
        assert guard.recoveries == 1

    def test_safe_state_not_aliased(self):
        guard = StabilityGuard((1.0, 1.0, 1.0))
        out = guard.check(np.array([np.nan, 0.0, 0.0]))
        out[0] = 42.0
        np.testing.assert_array_equal(guard.safe_state, [1.0, 1.0, 1.0])

    def test_custom_threshold(self):
        guard = StabilityGuard((0.0, 0.0), threshold=10.0)
        assert guard.is_diverged(np.array([11.0, 0.0]))
        assert not guard.is_diverged(np.array([10.0, 0.0]))
