from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError

DEFAULT_CONFIG_NAME = ".dotnet-packaging.yaml"


@dataclass(frozen=True)
class PackagingConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def defaults(self) -> Dict[str, Any]:
        return dict(self.raw.get("defaults") or {})

    def default(self, name: str) -> Optional[str]:
        value = self.defaults.get(name)
        return None if value is None else str(value)

    @property
    def dotnet(self) -> Optional[str]:
        value = self.raw.get("dotnet")
        return str(value) if value else None

    @property
    def log_file(self) -> Optional[str]:
        value = self.raw.get("log_file")
        return str(value) if value else None


def load_packaging_config(path: str, *, required: bool = False) -> PackagingConfig:
    """Load the YAML defaults file.

    A missing file yields an empty config unless ``required`` is set.
    """

    p = Path(path)
    if not p.exists():
        if required:
            raise ConfigError(f"Could not find the config file '{path}'.")
        return PackagingConfig()

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError(f"PyYAML is required to read {p.name}") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse '{path}': {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must contain a mapping/object")
    if not isinstance(raw.get("defaults") or {}, dict):
        raise ConfigError(f"'defaults' in '{path}' must be a mapping/object")

    return PackagingConfig(raw=raw)
