"""Locate and read the YAML engine configuration."""

import os
from pathlib import Path

import yaml

from truthtrollers_evidence.config.models import TruthTrollersConfig

CONFIG_ENV_VAR = "TRUTHTROLLERS_CONFIG"

_CONFIGS_DIR = Path(__file__).parents[3] / "configs"


def load_config(path: Path | str) -> TruthTrollersConfig:
    """Read a YAML file into a validated TruthTrollersConfig.

    An empty file yields the defaults. ``~`` in ``path`` is expanded.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a mapping of sections.
        pydantic.ValidationError: If a section is invalid.
    """
    path = Path(path).expanduser()
    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(
            f"Config {path} must be a mapping of sections, got {type(raw).__name__}"
        )
    return TruthTrollersConfig.model_validate(raw)


def get_default_config_path() -> Path:
    """Config named by $TRUTHTROLLERS_CONFIG, else the bundled configs/default.yaml."""
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return _CONFIGS_DIR / "default.yaml"
