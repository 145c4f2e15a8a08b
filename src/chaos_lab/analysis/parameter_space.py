"""Lyapunov exponent maps over two-parameter planes.

For Lorenz the plane is (sigma, rho) with beta fixed; for Rossler it is
(a, c) with b fixed. Each grid cell runs a fresh system through a transient,
then restarts the accumulators from the settled state and measures the
largest Lyapunov exponent.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

import numpy as np

from chaos_lab.simulation.registry import create_system
from chaos_lab.types.simulation import SystemKind

logger = logging.getLogger(__name__)

PARAMETER_AXES: dict[SystemKind, tuple[str, str]] = {
    SystemKind.LORENZ: ("sigma", "rho"),
    SystemKind.ROSSLER: ("a", "c"),
}

DEFAULT_RANGES: dict[SystemKind, tuple[tuple[float, float], tuple[float, float]]] = {
    SystemKind.LORENZ: ((1.0, 30.0), (1.0, 50.0)),
    SystemKind.ROSSLER: ((0.05, 0.5), (1.0, 20.0)),
}


def classify_exponent(lam: float) -> str:
    """Label a Lyapunov exponent as chaotic, edge (of chaos) or stable."""
    if lam > 0.1:
        return "chaotic"
    if lam > -0.05:
        return "edge"
    return "stable"


def measure_lyapunov(
    kind: SystemKind | str,
    params: dict[str, float],
    n_transient: int = 500,
    n_measure: int = 300,
) -> float:
    """Largest Lyapunov exponent after discarding ``n_transient`` steps."""
    system = create_system(kind, params=params)
    for _ in range(n_transient):
        system.step()
    system.reset(system.get_state())
    for _ in range(n_measure):
        system.step()
    return system.lyapunov_exponent


def compute_parameter_space(
    kind: SystemKind | str,
    x_values: np.ndarray,
    y_values: np.ndarray,
    n_transient: int = 500,
    n_measure: int = 300,
    base_params: dict[str, float] | None = None,
) -> dict[str, np.ndarray]:
    """Lyapunov exponent on the grid ``x_values`` x ``y_values``.

    Returns ``lyapunov_exponent`` and ``regime`` arrays of shape
    (len(y_values), len(x_values)).
    """
    kind = SystemKind(kind)
    if kind not in PARAMETER_AXES:
        raise ValueError(f"No parameter plane defined for {kind.value}")
    x_name, y_name = PARAMETER_AXES[kind]

    x_values = np.asarray(x_values, dtype=np.float64)
    y_values = np.asarray(y_values, dtype=np.float64)
    lam = np.zeros((len(y_values), len(x_values)))

    for j, y_val in enumerate(y_values):
        for i, x_val in enumerate(x_values):
            params = dict(base_params or {})
            params[x_name] = float(x_val)
            params[y_name] = float(y_val)
            lam[j, i] = measure_lyapunov(kind, params, n_transient, n_measure)
        logger.debug(f"  {y_name}={y_val:.3f}: max lambda={lam[j].max():.3f}")

    regime = np.vectorize(classify_exponent, otypes=[object])(lam).astype(str)
    return {
        x_name: x_values,
        y_name: y_values,
        "lyapunov_exponent": lam,
        "regime": regime,
    }


def run_parameter_space_analysis(
    output_dir: str | Path = "output/parameter_space",
    kind: SystemKind | str = SystemKind.LORENZ,
    n_x: int = 20,
    n_y: int = 20,
) -> dict:
    """Map the default parameter plane of ``kind`` and save the results."""
    kind = SystemKind(kind)
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    (x_min, x_max), (y_min, y_max) = DEFAULT_RANGES[kind]
    x_name, y_name = PARAMETER_AXES[kind]
    logger.info(f"Mapping {kind.value} Lyapunov exponent over ({x_name}, {y_name})...")

    data = compute_parameter_space(
        kind,
        np.linspace(x_min, x_max, n_x),
        np.linspace(y_min, y_max, n_y),
    )
    lam = data["lyapunov_exponent"]
    regimes, counts = np.unique(data["regime"], return_counts=True)

    results = {
        "system": kind.value,
        "axes": [x_name, y_name],
        "x_range": [x_min, x_max],
        "y_range": [y_min, y_max],
        "grid_shape": list(lam.shape),
        "max_lyapunov": float(np.max(lam)),
        "min_lyapunov": float(np.min(lam)),
        "regime_counts": {str(r): int(c) for r, c in zip(regimes, counts)},
    }
    for name, count in results["regime_counts"].items():
        logger.info(f"  {name}: {count} cells")

    results_file = output_path / "results.json"
    with open(results_file, "w") as f:
        json.dump(results, f, indent=2, default=str)
    logger.info(f"Results saved to {results_file}")

    np.savez(output_path / "parameter_space.npz", **data)
    return results
