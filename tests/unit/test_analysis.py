"""Tests for the divergence, parameter-space and bifurcation experiments."""
from __future__ import annotations

import json

import numpy as np
import pytest

from chaos_lab.analysis.bifurcation import compute_bifurcation, run_bifurcation_analysis, z_maxima
from chaos_lab.analysis.divergence import (
    estimate_growth_rate,
    run_divergence_analysis,
    run_divergence_experiment,
)
from chaos_lab.analysis.parameter_space import (
    classify_exponent,
    compute_parameter_space,
    measure_lyapunov,
    run_parameter_space_analysis,
)
from chaos_lab.types.simulation import SystemKind


class TestDivergence:
    def test_lorenz_twins_separate(self):
        data = run_divergence_experiment("lorenz", offset=1e-6, n_steps=5000)
        assert data["final_distance"] > 1.0
        assert data["first_divergent_step"] > 0
        assert data["separation"].shape == (5000,)
        assert data["time"][-1] == pytest.approx(50.0)

    def test_rossler_twins_eventually_separate(self):
        data = run_divergence_experiment("rossler", offset=1e-6, n_steps=40000)
        assert data["first_divergent_step"] != -1

    def test_identical_twins_never_separate(self):
        data = run_divergence_experiment("lorenz", offset=0.0, n_steps=500)
        assert data["final_distance"] == 0.0
        assert data["first_divergent_step"] == -1

    def test_growth_rate_of_exponential(self):
        time = np.linspace(0, 10, 200)
        separation = 1e-6 * np.exp(0.9 * time)
        assert estimate_growth_rate(separation, time) == pytest.approx(0.9, rel=1e-6)

    def test_growth_rate_without_data(self):
        assert estimate_growth_rate(np.array([5.0, 6.0]), np.array([0.1, 0.2])) == 0.0

    def test_lorenz_growth_rate_positive(self):
        data = run_divergence_experiment("lorenz", n_steps=3000)
        assert estimate_growth_rate(data["separation"], data["time"]) > 0.3

    def test_run_writes_outputs(self, tmp_output_dir):
        results = run_divergence_analysis(tmp_output_dir, kind="double_pendulum", n_steps=100)
        saved = json.loads((tmp_output_dir / "results.json").read_text())
        assert saved["system"] == "double_pendulum"
        assert saved["final_distance"] == pytest.approx(results["final_distance"])
        series = np.load(tmp_output_dir / "separation.npz")
        assert series["separation"].shape == (100,)


class TestParameterSpace:
    @pytest.mark.parametrize("lam, regime", [
        (0.9, "chaotic"),
        (0.1, "edge"),
        (0.0, "edge"),
        (-0.05, "stable"),
        (-1.0, "stable"),
    ])
    def test_classify(self, lam, regime):
        assert classify_exponent(lam) == regime

    def test_lorenz_low_rho_stable(self):
        assert measure_lyapunov("lorenz", {"rho": 10.0}, n_transient=1000, n_measure=1000) < 0

    def test_lorenz_classic_chaotic(self):
        assert measure_lyapunov("lorenz", {"rho": 28.0}, n_transient=1000, n_measure=3000) > 0.1

    def test_grid_shape(self):
        data = compute_parameter_space(
            SystemKind.ROSSLER, [0.1, 0.2, 0.3], [4.0, 6.0], n_transient=50, n_measure=50
        )
        assert data["lyapunov_exponent"].shape == (2, 3)
        assert data["regime"].shape == (2, 3)
        np.testing.assert_array_equal(data["a"], [0.1, 0.2, 0.3])
        np.testing.assert_array_equal(data["c"], [4.0, 6.0])
        assert np.all(np.isfinite(data["lyapunov_exponent"]))

    def test_pendulum_has_no_plane(self):
        with pytest.raises(ValueError):
            compute_parameter_space("double_pendulum", [1.0], [1.0])

    def test_run_writes_outputs(self, tmp_output_dir):
        results = run_parameter_space_analysis(tmp_output_dir, kind="lorenz", n_x=2, n_y=2)
        assert results["grid_shape"] == [2, 2]
        assert sum(results["regime_counts"].values()) == 4
        assert (tmp_output_dir / "results.json").exists()
        saved = np.load(tmp_output_dir / "parameter_space.npz")
        assert saved["lyapunov_exponent"].shape == (2, 2)


class TestBifurcation:
    def test_fixed_point_has_no_maxima(self):
        assert len(z_maxima(0.5, n_transient=2000, n_sample=1000)) == 0

    def test_chaotic_regime_has_many_maxima(self):
        maxima = z_maxima(28.0)
        assert len(maxima) > 10
        assert len(np.unique(np.round(maxima, 2))) > 5
        assert np.all(maxima > 0)

    def test_compute_pairs_rho_with_maxima(self):
        data = compute_bifurcation(np.array([0.5, 28.0]), n_transient=500, n_sample=1000)
        assert data["rho"].shape == data["z_max"].shape
        assert set(np.unique(data["rho"])) <= {0.5, 28.0}

    def test_run_writes_outputs(self, tmp_output_dir):
        results = run_bifurcation_analysis(tmp_output_dir, rho_min=20.0, rho_max=28.0, n_rho=3)
        assert results["n_rho"] == 3
        assert len(results["distinct_maxima_per_rho"]) == 3
        assert (tmp_output_dir / "bifurcation.npz").exists()
