"""Configuration helpers describing which exported sheet tabs feed the reports."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable

import yaml

from .models import ORIGINAL_SOURCES

LOGGER = logging.getLogger(__name__)

DEFAULT_DAYS = 30
DEFAULT_RECENT_ACTIVITY_LIMIT = 50
DEFAULT_TOP_LEADS_LIMIT = 10


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file.

    Relative tab paths are resolved against the directory holding the
    configuration file and the optional settings receive their defaults.
    """

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    return _validate(data or {}, base_dir=file_path.parent)


def _validate(config: Any, *, base_dir: Path) -> Dict[str, Any]:
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration must be a mapping at the top level")

    tabs = config.get("tabs", [])
    if not isinstance(tabs, list):
        raise ConfigurationError("'tabs' must be a list of tab definitions")

    for tab in tabs:
        if not isinstance(tab, dict):
            raise ConfigurationError("Every tab definition must be a mapping")
        if not tab.get("path"):
            raise ConfigurationError(f"Tab '{tab.get('name', '?')}' is missing required 'path' field")
        if tab.get("source") not in ORIGINAL_SOURCES:
            raise ConfigurationError(
                f"Tab '{tab.get('name', tab['path'])}' has unknown source '{tab.get('source')}'. "
                f"Expected one of {list(ORIGINAL_SOURCES)}"
            )
        tab_path = Path(tab["path"])
        if not tab_path.is_absolute():
            tab["path"] = str(base_dir / tab_path)

    config["tabs"] = tabs
    config["days"] = _positive_int(config, "days", DEFAULT_DAYS)
    config["recent_activity_limit"] = _positive_int(config, "recent_activity_limit", DEFAULT_RECENT_ACTIVITY_LIMIT)
    config["top_leads_limit"] = _positive_int(config, "top_leads_limit", DEFAULT_TOP_LEADS_LIMIT)
    return config


def _positive_int(config: Dict[str, Any], key: str, default: int) -> int:
    value = config.get(key, default)
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"'{key}' must be a positive integer, got {value!r}") from exc
    if number <= 0:
        raise ConfigurationError(f"'{key}' must be a positive integer, got {value!r}")
    return number


def iter_enabled_tab_configs(config: Dict[str, Any]) -> Iterable[Dict[str, Any]]:
    tabs = config.get("tabs", [])
    for tab in tabs:
        if tab.get("enabled", True):
            yield tab
        else:
            LOGGER.debug("Skipping disabled tab %s", tab.get("name"))
