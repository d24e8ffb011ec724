"""Application configuration backed by a YAML file."""

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from session_journal.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIRNAME = "session-journal"
CONFIG_FILENAME = "config.yaml"
STATE_DIRNAME = ".session-journal"
SESSIONS_DIRNAME = "Sessions"

# Default values
DEFAULTS = {
    "vault/path": "~/obsidian/session-journal",
    "domains/work": "~/work",
    "domains/personal": "~/personal",
    "domains/opensource": "~/opensource",
    "friction/recurringMinOverlap": 2,
    "related/minScore": 5,
    "related/maxResults": 3,
    "related/fileScoreCap": 15,
    "related/threadOverlap": 2,
    "trends/displayWeeks": 12,
}

# Domain names in the order their directory prefixes are checked
DOMAINS = ("work", "personal", "opensource")
DEFAULT_DOMAIN = "personal"


def default_config_path() -> Path:
    """$XDG_CONFIG_HOME/session-journal/config.yaml, else under ~/.config."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / CONFIG_DIRNAME / CONFIG_FILENAME


def expand_home(path: str) -> str:
    return os.path.expanduser(path) if path else path


class ConfigManager:
    """Settings keyed by "section/name", falling back to DEFAULTS.

    Typed getters never raise: a missing or malformed value yields the default.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None, path: Optional[str | Path] = None):
        self._values: dict[str, Any] = dict(values or {})
        self._path = Path(path) if path else None

    @classmethod
    def from_file(cls, path: Optional[str | Path] = None) -> "ConfigManager":
        """Load settings from a YAML file; a missing file yields the defaults.

        Nested mappings are flattened, so `domains: {work: ~/w}` becomes
        "domains/work". Raises ConfigError for unreadable or invalid YAML.
        """
        config_path = Path(path) if path else default_config_path()
        if not config_path.exists():
            logger.debug("No config at %s, using defaults", config_path)
            return cls(path=config_path)

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError("read config", config_path, str(e)) from e
        except yaml.YAMLError as e:
            raise ConfigError("parse config", config_path, str(e)) from e

        if not isinstance(data, dict):
            raise ConfigError("parse config", config_path, "top level is not a mapping")
        return cls(_flatten(data), path=config_path)

    def save(self, path: Optional[str | Path] = None) -> Path:
        """Write explicitly set values back as nested YAML."""
        target = Path(path) if path else (self._path or default_config_path())
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                yaml.dump(_nest(self._values), f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigError("write config", target, str(e)) from e
        return target

    def get_string(self, key: str) -> str:
        val = self._values.get(key, DEFAULTS.get(key, ""))
        return "" if val is None else str(val)

    def get_int(self, key: str) -> int:
        val = self._values.get(key, DEFAULTS.get(key, 0))
        if isinstance(val, bool):
            return DEFAULTS.get(key, 0)
        try:
            return int(val)
        except (ValueError, TypeError):
            return DEFAULTS.get(key, 0)

    def get_bool(self, key: str) -> bool:
        val = self._values.get(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    def set_string(self, key: str, value: str):
        self._values[key] = value

    def set_int(self, key: str, value: int):
        self._values[key] = value

    def set_bool(self, key: str, value: bool):
        self._values[key] = value

    # Derived paths

    @property
    def vault_path(self) -> Path:
        return Path(expand_home(self.get_string("vault/path")))

    @property
    def sessions_dir(self) -> Path:
        return self.vault_path / SESSIONS_DIRNAME

    @property
    def state_dir(self) -> Path:
        return self.vault_path / STATE_DIRNAME

    def domain_paths(self) -> dict[str, str]:
        """Domain name to expanded directory prefix, unset domains left out."""
        paths = {}
        for name in DOMAINS:
            value = self.get_string(f"domains/{name}")
            if value:
                paths[name] = expand_home(value)
        return paths


def _flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}/{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, name))
        else:
            flat[name] = value
    return flat


def _nest(values: Mapping[str, Any]) -> dict[str, Any]:
    nested: dict[str, Any] = {}
    for key, value in values.items():
        node = nested
        *parents, leaf = key.split("/")
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
    return nested
