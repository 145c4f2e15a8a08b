"""Lorenz bifurcation diagram: local maxima of z as rho is swept.

A fixed point leaves no maxima, a limit cycle a handful of repeated values,
and the chaotic attractor a continuous band.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

import numpy as np

from chaos_lab.simulation.lorenz import LorenzSectionSampler, LorenzSystem

logger = logging.getLogger(__name__)


def z_maxima(
    rho: float,
    sigma: float = 10.0,
    beta: float = 8.0 / 3.0,
    n_transient: int = 2000,
    n_sample: int = 3000,
) -> np.ndarray:
    """Local maxima of z on the settled Lorenz trajectory at ``rho``."""
    system = LorenzSystem(params={"sigma": sigma, "rho": rho, "beta": beta})
    for _ in range(n_transient):
        system.step()

    detector = LorenzSectionSampler()
    detector.prime(system.get_state())
    maxima = []
    for _ in range(n_sample):
        state = system.step()
        if detector.crossed(state):
            maxima.append(state[2])
    return np.array(maxima)


def compute_bifurcation(
    rho_values: np.ndarray,
    n_transient: int = 2000,
    n_sample: int = 3000,
) -> dict[str, np.ndarray]:
    """Sweep ``rho_values`` and collect (rho, z_max) pairs."""
    rho_out = []
    z_out = []
    for i, rho in enumerate(rho_values):
        maxima = z_maxima(float(rho), n_transient=n_transient, n_sample=n_sample)
        rho_out.extend([rho] * len(maxima))
        z_out.extend(maxima)
        if (i + 1) % 10 == 0:
            logger.info(f"  rho={rho:.1f}: {len(maxima)} maxima")
    return {
        "rho": np.array(rho_out, dtype=np.float64),
        "z_max": np.array(z_out, dtype=np.float64),
    }


def run_bifurcation_analysis(
    output_dir: str | Path = "output/bifurcation",
    rho_min: float = 0.5,
    rho_max: float = 50.0,
    n_rho: int = 100,
) -> dict:
    """Compute the Lorenz bifurcation diagram and save the point cloud."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    rho_values = np.linspace(rho_min, rho_max, n_rho)
    logger.info(f"Sweeping rho over [{rho_min}, {rho_max}] ({n_rho} values)...")
    data = compute_bifurcation(rho_values)

    distinct = [
        len(np.unique(np.round(data["z_max"][data["rho"] == rho], 2))) for rho in rho_values
    ]
    results = {
        "system": "lorenz",
        "rho_range": [rho_min, rho_max],
        "n_rho": n_rho,
        "n_points": int(len(data["z_max"])),
        "distinct_maxima_per_rho": distinct,
    }

    results_file = output_path / "results.json"
    with open(results_file, "w") as f:
        json.dump(results, f, indent=2, default=str)
    logger.info(f"Results saved to {results_file}")

    np.savez(output_path / "bifurcation.npz", **data)
    return results
