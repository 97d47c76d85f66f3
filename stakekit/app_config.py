"""
app_config.py: module for handling main stakekit application configuration
"""
from pathlib import Path
from typing import Any, Dict, Optional

from .config_manager import ConfigManager, ConfigSource


class StakekitAppConfig:
    """
    StakekitAppConfig: class that encapsulates data and actions for configuring
    the main stakekit application
    """
    def __init__(self, command_line: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = {}
        self.config_manager = ConfigManager(command_line)

    def load(self):
        """Load app config following priority order"""
        self.data = self.config_manager.load_config()
        return self

    def save(self, source: ConfigSource = ConfigSource.GLOBAL_CONFIG) -> Path:
        """Save current config back to a config file"""
        return self.config_manager.save_config(source, self.data)

    @property
    def deployment_file(self) -> Path:
        return Path(self.data["deployment_file"]).expanduser()

    @property
    def output_dir(self) -> Path:
        return Path(self.data["output_dir"]).expanduser()

    @property
    def default_network(self) -> str:
        return self.data["default_network"]

    @property
    def plugins_dir(self) -> Path:
        return Path(self.data["plugins_dir"]).expanduser()

    def get_config_value(self, key: str, default: Any = None):
        """Get a specific configuration value"""
        return self.config_manager.get_config(key, default)

    def set_config_value(self, key: str, value: Any):
        """Set a specific configuration value"""
        self.config_manager.set_config(key, value)
        self.data = self.config_manager.config_data
