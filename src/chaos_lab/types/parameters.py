"""Parameter sets for the chaotic systems.

Each model is frozen: a running system never sees its coefficients change
mid-step. Updates go through ``merge`` which returns a new instance.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class SystemParams(BaseModel):
    """Base class for immutable named coefficients."""

    model_config = ConfigDict(frozen=True)

    def merge(self, partial: dict[str, Any]) -> SystemParams:
        """Return a copy with the known fields of ``partial`` replaced.

        Unknown names and values that cannot be read as a float are dropped
        (and logged); everything else is coerced to float.
        """
        fields = type(self).model_fields
        update = {}
        for name, value in partial.items():
            if name not in fields:
                logger.warning(f"Ignoring unknown parameter '{name}' for {type(self).__name__}")
                continue
            try:
                update[name] = float(value)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric value {value!r} for parameter '{name}'")
        return self.model_copy(update=update)


class LorenzParams(SystemParams):
    """sigma: Prandtl number, rho: Rayleigh number, beta: geometric factor."""

    sigma: float = 10.0
    rho: float = 28.0
    beta: float = 8.0 / 3.0


class RosslerParams(SystemParams):
    a: float = 0.2
    b: float = 0.2
    c: float = 5.7


class DoublePendulumParams(SystemParams):
    """Masses, rod lengths, gravitational acceleration and linear damping."""

    mass1: float = 1.0
    mass2: float = 1.0
    length1: float = 1.0
    length2: float = 1.0
    gravity: float = 9.81
    damping: float = 0.0
