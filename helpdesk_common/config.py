"""Configuration helpers for the helpdesk suggestion tools.

Configuration is a YAML mapping with the sections ``record_store``,
``suggestions``, ``logging`` and ``reporting``. The record store credentials
can be supplied through the environment instead of the file:

``HELPDESK_BASE_URL``  overrides ``record_store.base_url``
``HELPDESK_API_KEY``   overrides ``record_store.api_key``

``HELPDESK_CONFIG`` names the file to load when no explicit path is given.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


PACKAGE_ROOT = Path(__file__).resolve().parents[1]
CONFIG_PATH_ENV = "HELPDESK_CONFIG"

DEFAULT_CONFIG_LOCATIONS = (
    PACKAGE_ROOT / "config" / "config.yaml",
    PACKAGE_ROOT / "config" / "config.yml",
    Path("config") / "config.yaml",
    Path("config") / "config.yml",
    Path.home() / ".helpdesk" / "config.yaml",
)

ENVIRONMENT_OVERRIDES: Tuple[Tuple[str, str, str], ...] = (
    ("HELPDESK_BASE_URL", "record_store", "base_url"),
    ("HELPDESK_API_KEY", "record_store", "api_key"),
)


def resolve_path(path_str: str | None, *, base: Path | None = None) -> Path:
    """Resolve a path string that may be relative to an optional base directory."""
    base_path = base or Path.cwd()
    if not path_str:
        return base_path
    path = Path(path_str).expanduser()
    return path if path.is_absolute() else base_path / path


def config_search_paths(environ: Optional[Mapping[str, str]] = None) -> List[Path]:
    """Return the files ``load_config`` tries, in order, when given no path."""
    environ = os.environ if environ is None else environ
    paths = list(DEFAULT_CONFIG_LOCATIONS)
    env_path = environ.get(CONFIG_PATH_ENV)
    if env_path:
        paths.insert(0, Path(env_path).expanduser())
    return paths


def _read_mapping(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse configuration file {path}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping, not {type(data).__name__}")
    return data


def apply_environment_overrides(
    config: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """Copy credentials set in the environment into ``config`` (in place)."""
    environ = os.environ if environ is None else environ
    for variable, section_name, key in ENVIRONMENT_OVERRIDES:
        value = environ.get(variable)
        if not value:
            continue
        target = config.get(section_name)
        if target is None:
            target = config[section_name] = {}
        elif not isinstance(target, dict):
            raise ConfigError(f"Configuration section '{section_name}' must be a mapping")
        target[key] = value
    return config


def load_config(
    path: str | os.PathLike[str] | None = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Load the YAML configuration and apply environment overrides.

    An explicit ``path`` must exist. Without one, the first existing file of
    ``config_search_paths()`` is used.
    """
    if path:
        explicit = Path(path).expanduser()
        if not explicit.exists():
            raise ConfigError(f"Configuration file {explicit} does not exist")
        return apply_environment_overrides(_read_mapping(explicit), environ)

    for candidate in config_search_paths(environ):
        if candidate.exists():
            return apply_environment_overrides(_read_mapping(candidate), environ)
    raise ConfigError(
        "No configuration file could be located. Provide --config, set "
        f"{CONFIG_PATH_ENV} or create config/config.yaml (see config/config.example.yaml)."
    )


def section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return a configuration section, treating a null section as empty."""
    value = config.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Configuration section '{name}' must be a mapping")
    return value
