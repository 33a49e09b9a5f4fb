"""Runtime settings for the registration manager.

Settings come from three layers, later ones winning: built-in defaults, an
optional YAML file, and environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

CONFIG_ENV = "UPDATER_REGISTRY_CONFIG"
STORE_ROOT_ENV = "UPDATER_REGISTRY_STORE_ROOT"
REGISTRY_KEY_ENV = "UPDATER_REGISTRY_KEY"
LOG_LEVEL_ENV = "UPDATER_REGISTRY_LOG_LEVEL"

DEFAULT_HOME = Path.home() / ".updater_registry"
DEFAULT_REGISTRY_KEY = r"SOFTWARE\Microsoft\WindowsUpdate\Orchestrator\UpdaterRegistrations"


@dataclass
class Settings:
    store_root: Path = DEFAULT_HOME / "registrations"
    registry_key: str = DEFAULT_REGISTRY_KEY
    reserved_names: list[str] = field(default_factory=list)
    restricted_editions: list[str] = field(default_factory=list)
    log_level: str = "WARNING"


def load_settings(config_path: Optional[str | Path] = None) -> Settings:
    """Load settings from the config file and the environment.

    The config file is ``config_path``, else ``$UPDATER_REGISTRY_CONFIG``,
    else ``~/.updater_registry/config.yaml``; a missing default file is
    not an error. Unknown keys in the file are ignored.
    """
    settings = Settings()

    explicit = config_path or os.environ.get(CONFIG_ENV)
    path = Path(explicit) if explicit else DEFAULT_HOME / "config.yaml"
    if explicit or path.exists():
        _apply_file(settings, path)

    if os.environ.get(STORE_ROOT_ENV):
        settings.store_root = Path(os.environ[STORE_ROOT_ENV])
    if os.environ.get(REGISTRY_KEY_ENV):
        settings.registry_key = os.environ[REGISTRY_KEY_ENV]
    if os.environ.get(LOG_LEVEL_ENV):
        settings.log_level = os.environ[LOG_LEVEL_ENV].upper()

    return settings


def _apply_file(settings: Settings, path: Path) -> None:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    if "store_root" in data:
        settings.store_root = Path(data["store_root"]).expanduser()
    if "registry_key" in data:
        settings.registry_key = str(data["registry_key"])
    if "reserved_names" in data:
        settings.reserved_names = [str(n) for n in data["reserved_names"] or []]
    if "restricted_editions" in data:
        settings.restricted_editions = [str(e) for e in data["restricted_editions"] or []]
    if "log_level" in data:
        settings.log_level = str(data["log_level"]).upper()
