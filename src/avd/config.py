"""YAML config loader — reads avd-config.yml into DebugConfig."""

from pathlib import Path

import yaml

from avd.schemas.config import DebugConfig


def load_config(path: str | Path | None = None) -> DebugConfig:
    """Load and validate a config file.

    With no path, returns the defaults. Raises ``FileNotFoundError`` if the
    path doesn't exist and ``pydantic.ValidationError`` if the YAML content
    is invalid.
    """
    if path is None:
        return DebugConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text())
    if raw is None:
        return DebugConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    # Keys present with no value (e.g. everything commented out) fall back to defaults
    raw = {key: value for key, value in raw.items() if value is not None}

    return DebugConfig(**raw)
