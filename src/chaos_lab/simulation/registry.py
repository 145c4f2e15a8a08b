"""System construction and the explicit active-system handle.

The control layer owns a ``SystemRegistry`` and passes it to whichever
consumers need "the system currently on screen". There is no module-level
active instance.
"""
from __future__ import annotations

import logging
from typing import Sequence

from chaos_lab.simulation.base import ChaosSystem
from chaos_lab.simulation.double_pendulum import DoublePendulumSystem
from chaos_lab.simulation.lorenz import LorenzSystem
from chaos_lab.simulation.rossler import RosslerSystem
from chaos_lab.types.parameters import SystemParams
from chaos_lab.types.simulation import SystemConfig, SystemKind

logger = logging.getLogger(__name__)

SYSTEM_CLASSES: dict[SystemKind, type[ChaosSystem]] = {
    SystemKind.LORENZ: LorenzSystem,
    SystemKind.ROSSLER: RosslerSystem,
    SystemKind.DOUBLE_PENDULUM: DoublePendulumSystem,
}


def create_system(
    kind: SystemKind | str,
    initial_state: Sequence[float] | None = None,
    params: SystemParams | dict[str, float] | None = None,
    config: SystemConfig | None = None,
) -> ChaosSystem:
    """Instantiate the system class registered for ``kind``.

    Raises ValueError for an unknown system name.
    """
    kind = SystemKind(kind)
    if config is None:
        config = SystemConfig(kind=kind)
    return SYSTEM_CLASSES[kind](initial_state=initial_state, params=params, config=config)


class SystemRegistry:
    """Holds the currently active system instance, keyed by identity."""

    def __init__(self) -> None:
        self._system: ChaosSystem | None = None

    @property
    def active(self) -> ChaosSystem | None:
        return self._system

    @property
    def kind(self) -> SystemKind | None:
        if self._system is None:
            return None
        return self._system.kind

    def set_active(self, system: ChaosSystem) -> None:
        self._system = system
        logger.debug(f"Active system set to {system.kind.value} ({id(system):#x})")

    def clear_active(self, system: ChaosSystem) -> bool:
        """Clear the handle only if ``system`` is the active instance."""
        if self._system is not system:
            return False
        self._system = None
        return True

    def perturb_active(self, amount: float) -> bool:
        """Perturb the active system, if any. Returns whether one was perturbed."""
        if self._system is None:
            return False
        self._system.perturb(amount)
        return True
