"""
Configuration Manager
---------------------
Loads palette configuration from YAML with environment variable overrides.

Rules:
- Environment wins over file: PALETTE_SERVER_PORT overrides server.port,
  PALETTE_MAX_RESULTS overrides the top-level max_results
- Missing file is not an error; defaults apply
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import os

import yaml

from .logging import get_logger

ENV_PREFIX = "PALETTE_"

DEFAULT_COMMAND_MAP = str(Path(__file__).resolve().parent.parent / "commands" / "command_map.yaml")


class ConfigManager:
    """
    Centralized configuration management.
    Loads configuration from YAML with environment variable overrides.
    """

    def __init__(self, config_path: Optional[str] = "config.yaml"):
        self._config_path = Path(config_path) if config_path else None
        self._config: Dict[str, Any] = {}
        self._logger = get_logger("infra.config")

        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file."""
        if self._config_path is None:
            self._config = {}
            return

        if self._config_path.exists():
            with open(self._config_path, 'r') as f:
                self._config = yaml.safe_load(f) or {}
            self._logger.info(f"Loaded config from {self._config_path}")
        else:
            self._config = {}
            self._logger.debug(f"Config file not found: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Supports dot notation: 'section.key'
        Environment variables override file config.
        """
        env_key = f"{ENV_PREFIX}{key.upper().replace('.', '_')}"
        env_value = os.getenv(env_key)
        if env_value is not None:
            return env_value

        value: Any = self._config
        for part in key.split('.'):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (runtime only, not persisted)."""
        parts = key.split('.')
        config = self._config

        for part in parts[:-1]:
            config = config.setdefault(part, {})

        config[parts[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire configuration section."""
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()


@dataclass
class PaletteConfig:
    """Resolved palette settings."""
    command_map: str = DEFAULT_COMMAND_MAP
    max_results: Optional[int] = None
    options_url: str = "about:preferences"
    address_book_url: str = "about:addressbook"
    search_url: str = "about:3pane?folderPaneVisible=false&messagePaneVisible=false"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @classmethod
    def from_manager(cls, manager: ConfigManager) -> "PaletteConfig":
        """Build settings from a ConfigManager, falling back to defaults."""
        defaults = cls()
        max_results = manager.get("max_results", defaults.max_results)

        return cls(
            command_map=manager.get("command_map", defaults.command_map),
            max_results=int(max_results) if max_results is not None else None,
            options_url=manager.get("navigator.options_url", defaults.options_url),
            address_book_url=manager.get("navigator.address_book_url", defaults.address_book_url),
            search_url=manager.get("navigator.search_url", defaults.search_url),
            host=manager.get("server.host", defaults.host),
            port=int(manager.get("server.port", defaults.port)),
            log_level=str(manager.get("logging.level", defaults.log_level)).upper(),
            log_dir=manager.get("logging.dir", defaults.log_dir),
        )

    @property
    def url_variables(self) -> Dict[str, str]:
        """Values substituted into `{name}` placeholders of command map URLs."""
        return {
            "options_url": self.options_url,
            "address_book_url": self.address_book_url,
            "search_url": self.search_url,
        }


def load_config(config_path: Optional[str] = "config.yaml") -> PaletteConfig:
    """Load palette settings from a YAML file plus environment."""
    return PaletteConfig.from_manager(ConfigManager(config_path))
