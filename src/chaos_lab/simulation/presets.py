"""Named parameter presets and guided story scenarios."""

from __future__ import annotations

from pydantic import BaseModel, Field

from chaos_lab.simulation.base import ChaosSystem
from chaos_lab.simulation.registry import create_system
from chaos_lab.types.simulation import SystemKind


class SystemPreset(BaseModel):
    """A known-interesting parameter set for one system."""

    name: str
    description: str = ""
    kind: SystemKind
    params: dict[str, float] = Field(default_factory=dict)

    def build(self) -> ChaosSystem:
        return create_system(self.kind, params=self.params)


class StoryPreset(SystemPreset):
    """A guided scenario: parameters plus playback settings.

    ``side_by_side`` scenarios run a twin instance whose first state
    component is shifted by ``offset``.
    """

    trail_length: int = 2000
    speed: float = 1.0
    side_by_side: bool = False
    offset: float = 0.001


_LORENZ_CLASSIC = {"sigma": 10.0, "rho": 28.0, "beta": 8.0 / 3.0}
_PENDULUM_EQUAL = {
    "mass1": 1.0, "mass2": 1.0, "length1": 1.0, "length2": 1.0,
    "gravity": 9.81, "damping": 0.0,
}

PRESETS: dict[SystemKind, list[SystemPreset]] = {
    SystemKind.LORENZ: [
        SystemPreset(name="Classic Lorenz", description="The original butterfly attractor",
                     kind=SystemKind.LORENZ, params=_LORENZ_CLASSIC),
        SystemPreset(name="Edge of Chaos",
                     description="Parameters at the edge between order and chaos",
                     kind=SystemKind.LORENZ, params={"sigma": 10.0, "rho": 24.0, "beta": 8.0 / 3.0}),
        SystemPreset(name="Strange Attractor",
                     description="Different parameter set creating unique patterns",
                     kind=SystemKind.LORENZ, params={"sigma": 12.0, "rho": 30.0, "beta": 2.5}),
    ],
    SystemKind.ROSSLER: [
        SystemPreset(name="Classic Rossler",
                     description="The standard Rossler attractor parameters",
                     kind=SystemKind.ROSSLER, params={"a": 0.2, "b": 0.2, "c": 5.7}),
        SystemPreset(name="Spiral Focus", description="Creates tighter spiral patterns",
                     kind=SystemKind.ROSSLER, params={"a": 0.1, "b": 0.1, "c": 4.0}),
        SystemPreset(name="Period Doubling",
                     description="Shows period-doubling route to chaos",
                     kind=SystemKind.ROSSLER, params={"a": 0.15, "b": 0.2, "c": 10.0}),
    ],
    SystemKind.DOUBLE_PENDULUM: [
        SystemPreset(name="Equal Masses",
                     description="Two pendulums with equal mass and length",
                     kind=SystemKind.DOUBLE_PENDULUM, params=_PENDULUM_EQUAL),
        SystemPreset(name="Heavy Bottom", description="Bottom pendulum twice as heavy",
                     kind=SystemKind.DOUBLE_PENDULUM, params={**_PENDULUM_EQUAL, "mass2": 2.0}),
        SystemPreset(name="With Damping",
                     description="Small damping showing energy dissipation",
                     kind=SystemKind.DOUBLE_PENDULUM, params={**_PENDULUM_EQUAL, "damping": 0.05}),
    ],
}

STORY_PRESETS: list[StoryPreset] = [
    StoryPreset(
        name="The Butterfly Effect",
        description="Two nearly identical universes diverge into completely different futures",
        kind=SystemKind.LORENZ, params=_LORENZ_CLASSIC,
        trail_length=2000, speed=1.0, side_by_side=True, offset=1e-6,
    ),
    StoryPreset(
        name="The Strange Attractor",
        description="The Lorenz butterfly: a shape that never repeats, yet never escapes",
        kind=SystemKind.LORENZ, params=_LORENZ_CLASSIC,
        trail_length=4000, speed=1.5,
    ),
    StoryPreset(
        name="Edge of Order",
        description="Right at the boundary where predictable behavior gives way to chaos",
        kind=SystemKind.LORENZ, params={"sigma": 10.0, "rho": 24.5, "beta": 8.0 / 3.0},
        trail_length=3000, speed=0.8,
    ),
    StoryPreset(
        name="The Spiral",
        description="The Rossler attractor: simplicity breeds complexity",
        kind=SystemKind.ROSSLER, params={"a": 0.2, "b": 0.2, "c": 5.7},
        trail_length=3500, speed=1.2,
    ),
    StoryPreset(
        name="Period Doubling",
        description="The Rossler system traces a period-2 orbit on the route to chaos",
        kind=SystemKind.ROSSLER, params={"a": 0.2, "b": 0.2, "c": 3.5},
        trail_length=3000, speed=1.0,
    ),
    StoryPreset(
        name="The Pendulum",
        description="Deterministic laws, unpredictable motion",
        kind=SystemKind.DOUBLE_PENDULUM, params=_PENDULUM_EQUAL,
        trail_length=2000, speed=1.0,
    ),
    StoryPreset(
        name="Dual Pendulums",
        description="Two pendulums, almost identical, dance apart",
        kind=SystemKind.DOUBLE_PENDULUM, params=_PENDULUM_EQUAL,
        trail_length=1500, speed=1.0, side_by_side=True, offset=1e-4,
    ),
]


def get_preset(kind: SystemKind | str, name: str) -> SystemPreset:
    """Look up a preset by system and name (case-insensitive).

    Raises KeyError if no preset matches.
    """
    kind = SystemKind(kind)
    for preset in PRESETS[kind]:
        if preset.name.lower() == name.lower():
            return preset
    raise KeyError(f"No preset named '{name}' for {kind.value}")
