"""CLI entry point for chaos-lab.

Usage:
    chaos-lab simulate <system>         Step a system and report its diagnostics
    chaos-lab divergence <system>       Run the twin-trajectory divergence experiment
    chaos-lab parameter-space <system>  Map the Lyapunov exponent over a parameter plane
    chaos-lab bifurcation               Compute the Lorenz z-maxima bifurcation diagram
    chaos-lab presets                   List parameter presets
    chaos-lab version                   Show version

Systems: lorenz, rossler, double_pendulum
"""
from __future__ import annotations

import argparse
import logging
import sys

SYSTEM_CHOICES = ["lorenz", "rossler", "double_pendulum"]


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(0)

    command = sys.argv[1].lower()
    args = sys.argv[2:]

    if command == "simulate":
        _run_simulate(args)
    elif command == "divergence":
        _run_divergence(args)
    elif command == "parameter-space":
        _run_parameter_space(args)
    elif command == "bifurcation":
        _run_bifurcation(args)
    elif command == "presets":
        _run_presets()
    elif command in ("version", "--version", "-v"):
        from chaos_lab import __version__
        print(f"chaos-lab {__version__}")
    elif command in ("help", "--help", "-h"):
        print(__doc__)
    else:
        print(f"Unknown command: {command}")
        print(__doc__)
        sys.exit(1)


def _load_app_config(level: str | None = None):
    """Load the global config and configure logging from it."""
    from chaos_lab.utils.config import load_config

    config = load_config()
    _setup_logging(level or config.log_level)
    return config


def _setup_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s [%(levelname)s] %(message)s")


def _run_simulate(argv: list[str]) -> None:
    """Step one system and print its final diagnostics."""
    parser = argparse.ArgumentParser(prog="chaos-lab simulate")
    parser.add_argument("system", choices=SYSTEM_CHOICES)
    parser.add_argument("--steps", type=int, default=5000)
    parser.add_argument("--speed", type=float, default=1.0)
    parser.add_argument("--trail", type=int, default=None, help="Trail length kept per tick")
    parser.add_argument("--preset", default=None)
    parser.add_argument("--config", default=None, help="System YAML config")
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--seed", type=int, default=None, help="Seed for perturbations")
    parser.add_argument("--perturb", type=float, default=0.0, help="Kick the initial state")
    ns = parser.parse_args(argv)
    app_config = _load_app_config(ns.log_level)

    from chaos_lab.simulation.presets import get_preset
    from chaos_lab.simulation.registry import create_system
    from chaos_lab.utils.config import load_system_config

    if ns.config:
        config = load_system_config(ns.system, ns.config)
    else:
        config = app_config.system(ns.system)
    if ns.seed is not None:
        config = config.model_copy(update={"seed": ns.seed})
    params = None
    if ns.preset:
        try:
            params = get_preset(ns.system, ns.preset).params
        except KeyError as e:
            print(f"Unknown preset: {e}")
            sys.exit(1)
    system = create_system(ns.system, params=params, config=config)
    system.perturb(ns.perturb)

    for _ in range(ns.steps):
        system.step(ns.speed)
        if ns.trail is not None:
            system.trim_trail(ns.trail)

    state = system.get_state()
    print(f"\nSystem: {ns.system}")
    print(f"Parameters: {system.get_params().model_dump()}")
    print(f"Steps: {ns.steps} (speed x{ns.speed})")
    print(f"Final state: {[round(float(v), 6) for v in state]}")
    print(f"Trail points: {len(system.trail)}")
    print(f"Lyapunov exponent: {system.lyapunov_exponent:.4f} "
          f"({system.lyapunov_samples} renormalizations)")
    print(f"Poincare points: {len(system.poincare_points)}")
    print(f"Divergence recoveries: {system.recoveries}")


def _run_divergence(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="chaos-lab divergence")
    parser.add_argument("system", choices=SYSTEM_CHOICES)
    parser.add_argument("--offset", type=float, default=1e-6)
    parser.add_argument("--steps", type=int, default=5000)
    parser.add_argument("--output", default=None, help="Defaults to <output_dir>/divergence")
    ns = parser.parse_args(argv)
    app_config = _load_app_config()
    output = ns.output or app_config.output_path("divergence")

    from chaos_lab.analysis.divergence import run_divergence_analysis

    results = run_divergence_analysis(
        output_dir=output, kind=ns.system, offset=ns.offset, n_steps=ns.steps
    )
    print(f"\nFinal distance: {results['final_distance']:.4f}")
    print(f"First step with separation > 1: {results['first_divergent_step']}")
    print(f"Separation growth rate: {results['growth_rate']:.4f}")


def _run_parameter_space(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="chaos-lab parameter-space")
    parser.add_argument("system", choices=["lorenz", "rossler"])
    parser.add_argument("--nx", type=int, default=20)
    parser.add_argument("--ny", type=int, default=20)
    parser.add_argument("--output", default=None, help="Defaults to <output_dir>/parameter_space")
    ns = parser.parse_args(argv)
    app_config = _load_app_config()
    output = ns.output or app_config.output_path("parameter_space")

    from chaos_lab.analysis.parameter_space import run_parameter_space_analysis

    results = run_parameter_space_analysis(
        output_dir=output, kind=ns.system, n_x=ns.nx, n_y=ns.ny
    )
    print(f"\nLyapunov range: [{results['min_lyapunov']:.3f}, {results['max_lyapunov']:.3f}]")
    for regime, count in results["regime_counts"].items():
        print(f"  {regime}: {count}")


def _run_bifurcation(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="chaos-lab bifurcation")
    parser.add_argument("--rho-min", type=float, default=0.5)
    parser.add_argument("--rho-max", type=float, default=50.0)
    parser.add_argument("--n-rho", type=int, default=100)
    parser.add_argument("--output", default=None, help="Defaults to <output_dir>/bifurcation")
    ns = parser.parse_args(argv)
    app_config = _load_app_config()
    output = ns.output or app_config.output_path("bifurcation")

    from chaos_lab.analysis.bifurcation import run_bifurcation_analysis

    results = run_bifurcation_analysis(
        output_dir=output, rho_min=ns.rho_min, rho_max=ns.rho_max, n_rho=ns.n_rho
    )
    print(f"\nCollected {results['n_points']} z maxima over {results['n_rho']} rho values")


def _run_presets() -> None:
    from chaos_lab.simulation.presets import PRESETS, STORY_PRESETS

    for kind, presets in PRESETS.items():
        print(f"\n{kind.value}:")
        for preset in presets:
            print(f"  {preset.name}: {preset.description}")
            print(f"    {preset.params}")

    print("\nStories:")
    for story in STORY_PRESETS:
        twin = f", twin offset {story.offset:g}" if story.side_by_side else ""
        print(f"  {story.name} [{story.kind.value}]: {story.description}{twin}")


if __name__ == "__main__":
    main()
