"""Shared test fixtures for Chaos Lab."""

import pytest

from chaos_lab.simulation.double_pendulum import DoublePendulumSystem
from chaos_lab.simulation.lorenz import LorenzSystem
from chaos_lab.simulation.rossler import RosslerSystem


@pytest.fixture
def tmp_output_dir(tmp_path):
    """Temporary directory for test outputs."""
    out = tmp_path / "output"
    out.mkdir()
    return out


@pytest.fixture
def lorenz():
    return LorenzSystem((1.0, 1.0, 1.0), {"sigma": 10.0, "rho": 28.0, "beta": 8.0 / 3.0})


@pytest.fixture
def rossler():
    return RosslerSystem((1.0, 1.0, 1.0), {"a": 0.2, "b": 0.2, "c": 5.7})


@pytest.fixture
def pendulum():
    return DoublePendulumSystem()


@pytest.fixture(params=["lorenz", "rossler", "pendulum"])
def any_system(request):
    """Each of the three systems in its default configuration."""
    return request.getfixturevalue(request.param)
