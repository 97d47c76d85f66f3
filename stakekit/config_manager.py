"""
config_manager.py: module for managing multiple configuration sources
"""
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import dotenv_values

from .config import DEFAULT_DEPLOYMENT_FILE

logger = logging.getLogger("stakekit.config")

ENV_PREFIX = "STAKEKIT_"


class ConfigSource(Enum):
    """Enumeration of configuration sources"""
    DEFAULTS = "defaults"
    GLOBAL_CONFIG = "global_config"  # ~/.config/stakekit/config.yaml
    PROJECT_CONFIG = "project_config"  # ./.stakekit.yaml in the project
    DOTENV = "dotenv"  # .env file in current directory
    ENVIRONMENT = "environment"  # STAKEKIT_* environment variables
    COMMAND_LINE = "command_line"  # Command line arguments


def global_config_path() -> Path:
    return Path.home() / ".config" / "stakekit" / "config.yaml"


def project_config_path() -> Path:
    return Path.cwd() / ".stakekit.yaml"


class ConfigManager:
    """
    ConfigManager: class that manages multiple configuration sources with priority order
    """

    ENV_MAPPING = {
        f"{ENV_PREFIX}DEPLOYMENT_FILE": "deployment_file",
        f"{ENV_PREFIX}OUTPUT_DIR": "output_dir",
        f"{ENV_PREFIX}DEFAULT_NETWORK": "default_network",
        f"{ENV_PREFIX}PLUGINS_DIR": "plugins_dir",
    }

    def __init__(self, command_line: Optional[Dict[str, Any]] = None):
        self.config_data: Dict[str, Any] = {}
        self.command_line = {k: v for k, v in (command_line or {}).items() if v is not None}
        self.priority_order = [
            ConfigSource.DEFAULTS,
            ConfigSource.GLOBAL_CONFIG,
            ConfigSource.PROJECT_CONFIG,
            ConfigSource.DOTENV,
            ConfigSource.ENVIRONMENT,
            ConfigSource.COMMAND_LINE,
        ]

    def load_config(self, config_source: ConfigSource = None):
        """
        Load configuration from specified source or use default priority order
        """
        if config_source is not None:
            return self._load_single_source(config_source)
        return self._load_with_priority()

    def _load_with_priority(self):
        """Load configuration following priority order"""
        self.config_data = {}
        for source in self.priority_order:
            source_config = self._load_single_source(source)
            if source_config:
                logger.debug(f"Loaded {source.value}: {sorted(source_config)}")
                self._merge_config(self.config_data, source_config)
        return self.config_data

    def _load_single_source(self, source: ConfigSource) -> Dict[str, Any]:
        """Load configuration from a single source"""
        if source == ConfigSource.DEFAULTS:
            return self._get_defaults()
        elif source == ConfigSource.GLOBAL_CONFIG:
            return self._load_yaml(global_config_path())
        elif source == ConfigSource.PROJECT_CONFIG:
            return self._load_yaml(project_config_path())
        elif source == ConfigSource.DOTENV:
            return self._load_dotenv_config()
        elif source == ConfigSource.ENVIRONMENT:
            return self._map_environment(os.environ)
        elif source == ConfigSource.COMMAND_LINE:
            return dict(self.command_line)
        return {}

    def _get_defaults(self):
        """Get default configuration values"""
        return {
            "deployment_file": DEFAULT_DEPLOYMENT_FILE,
            "output_dir": "manifests",
            "default_network": "mainnet",
            "plugins_dir": str(Path.home() / ".config" / "stakekit" / "plugins"),
        }

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Ignoring unreadable config file {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {path}: expected a mapping")
            return {}
        return data

    def _load_dotenv_config(self):
        """Load STAKEKIT_* settings from a .env file without touching os.environ"""
        dotenv_path = Path.cwd() / ".env"
        if not dotenv_path.exists():
            return {}
        return self._map_environment(dotenv_values(dotenv_path))

    def _map_environment(self, env) -> Dict[str, Any]:
        """Convert STAKEKIT_DEPLOYMENT_FILE to deployment_file"""
        env_config = {}
        for env_key, config_key in self.ENV_MAPPING.items():
            value = env.get(env_key)
            if value is not None:
                env_config[config_key] = value
        return env_config

    def _merge_config(self, base: Dict[str, Any], update: Dict[str, Any]):
        """Merge update config into base config (nested merge)"""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get_config(self, key: str, default: Any = None):
        """Get a specific configuration value"""
        current = self.config_data
        for k in key.split('.'):
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default
        return current

    def set_config(self, key: str, value: Any):
        """Set a specific configuration value"""
        keys = key.split('.')
        current = self.config_data
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    def save_config(self, source: ConfigSource, config_data: Dict[str, Any] = None) -> Path:
        """Save configuration to a specific source"""
        if config_data is None:
            config_data = self.config_data

        if source == ConfigSource.GLOBAL_CONFIG:
            path = global_config_path()
        elif source == ConfigSource.PROJECT_CONFIG:
            path = project_config_path()
        else:
            raise ValueError(f"Cannot save configuration to {source.value}")

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(config_data, f, indent=2, default_flow_style=False)
        return path
