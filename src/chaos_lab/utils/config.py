"""Configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from chaos_lab.types.simulation import SystemConfig, SystemKind

# Default config directory relative to package root
_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_CONFIGS_DIR = _PACKAGE_ROOT / "configs"


class ChaosLabConfig(BaseModel):
    """Top-level configuration for the engine and its experiments.

    ``systems`` holds per-system overrides layered over
    configs/systems/{kind}.yaml: only the fields an entry sets replace the
    file values, and ``parameters`` are merged name by name.
    """

    output_dir: str = "output"
    log_level: str = "INFO"
    seed: int | None = None
    systems: dict[str, SystemConfig] = Field(default_factory=dict)

    def system(self, kind: SystemKind | str) -> SystemConfig:
        """Config for ``kind``, with the global seed filled in when it sets none."""
        kind = SystemKind(kind)
        config = load_system_config(kind)
        override = self.systems.get(kind.value)
        if override is not None:
            update = override.model_dump(exclude_unset=True)
            update["parameters"] = {**config.parameters, **override.parameters}
            config = config.model_copy(update=update)
        if config.seed is None and self.seed is not None:
            config = config.model_copy(update={"seed": self.seed})
        return config

    def output_path(self, experiment: str) -> Path:
        return Path(self.output_dir) / experiment


def load_config(path: str | Path | None = None) -> ChaosLabConfig:
    """Load global config from a YAML file.

    Falls back to configs/default.yaml if no path is given. Entries under
    ``systems`` are keyed by system name; an explicit ``kind`` must agree
    with the key.
    """
    if path is None:
        path = _CONFIGS_DIR / "default.yaml"
    path = Path(path)

    if not path.exists():
        return ChaosLabConfig()

    with open(path) as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}

    for name, system_raw in (raw.get("systems") or {}).items():
        kind = SystemKind(name)
        if isinstance(system_raw, dict):
            _check_kind(system_raw, kind, path)

    return ChaosLabConfig(**raw)


def load_system_config(kind: SystemKind | str, path: str | Path | None = None) -> SystemConfig:
    """Load one system's engine settings from a YAML file.

    Falls back to configs/systems/{kind}.yaml if no path is given, and to
    the built-in defaults if that file does not exist. Raises ValueError
    if the file configures a different system.
    """
    kind = SystemKind(kind)
    if path is None:
        path = _CONFIGS_DIR / "systems" / f"{kind.value}.yaml"
    path = Path(path)

    if not path.exists():
        return SystemConfig(kind=kind)

    with open(path) as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}

    _check_kind(raw, kind, path)
    return SystemConfig(**raw)


def _check_kind(raw: dict[str, Any], kind: SystemKind, path: Path) -> None:
    """Fill in ``kind`` if missing, reject it if it names another system."""
    declared = raw.setdefault("kind", kind.value)
    if SystemKind(declared) != kind:
        raise ValueError(f"{path} configures '{declared}', expected '{kind.value}'")
