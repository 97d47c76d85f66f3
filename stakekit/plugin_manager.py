"""
plugin_manager.py: loads client implementations contributed from a plugins directory

Each plugin lives in its own directory with a manifest:

    # plugins/besu/plugin.yaml
    name: besu
    kind: execution
    entry_point: plugin.py
    defaults:
      image: hyperledger/besu
      tag: 22.1.0
      ...

The entry point defines one class implementing ExecutionClient or
ConsensusClient; it is registered under the manifest's name together with its
default table.
"""
import importlib.util
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import yaml

from .defaults import register_defaults
from .interfaces import LayerClient
from .models import ClientKind
from .registry import REGISTRIES, ClientRegistry


class PluginError(Exception):
    """Raised when a plugin directory cannot be turned into a client"""


class PluginManager:
    """
    PluginManager: discovers plugin directories and registers the client
    classes they define into the layer registries
    """

    def __init__(self, plugins_dir: Optional[Path] = None, registries: Optional[Dict[ClientKind, ClientRegistry]] = None):
        self.plugins_dir = plugins_dir or Path.home() / ".config" / "stakekit" / "plugins"
        self.registries = registries or REGISTRIES
        self.loaded: Dict[str, Type[LayerClient]] = {}
        self.failed: Dict[str, str] = {}
        self.logger = logging.getLogger("stakekit.plugins")

    def discover_plugins(self) -> List[Path]:
        """
        Discover all available plugins in the plugins directory
        :return: List of plugin directory paths, sorted by name
        """
        if not self.plugins_dir.exists():
            self.logger.debug(f"Plugins directory does not exist: {self.plugins_dir}")
            return []

        plugin_dirs = [
            item for item in sorted(self.plugins_dir.iterdir())
            if item.is_dir() and not item.name.startswith('.') and (item / "plugin.yaml").exists()
        ]
        self.logger.info(f"Discovered {len(plugin_dirs)} plugins in {self.plugins_dir}")
        return plugin_dirs

    def read_manifest(self, plugin_dir: Path) -> Dict[str, Any]:
        manifest_path = plugin_dir / "plugin.yaml"
        try:
            with open(manifest_path, 'r') as f:
                manifest = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise PluginError(f"Invalid manifest {manifest_path}: {e}") from e
        if not isinstance(manifest, dict):
            raise PluginError(f"Manifest {manifest_path} must be a mapping")

        try:
            manifest["kind"] = ClientKind(manifest.get("kind"))
        except ValueError:
            raise PluginError(f"Plugin {plugin_dir.name}: kind must be 'execution' or 'consensus'") from None
        if manifest["kind"] not in self.registries:
            raise PluginError(f"Plugin {plugin_dir.name}: no registry for kind '{manifest['kind'].value}'")
        manifest.setdefault("name", plugin_dir.name)
        manifest.setdefault("entry_point", "plugin.py")
        defaults = manifest.setdefault("defaults", {})
        if not isinstance(defaults, dict):
            raise PluginError(f"Plugin {plugin_dir.name}: defaults must be a mapping")
        return manifest

    def _import(self, plugin_dir: Path, entry_point: str):
        plugin_py_path = plugin_dir / entry_point
        if not plugin_py_path.exists():
            raise PluginError(f"Plugin entry point not found: {plugin_py_path}")

        module_name = f"stakekit_plugin_{plugin_dir.name.replace('-', '_')}"
        spec = importlib.util.spec_from_file_location(module_name, plugin_py_path)
        if spec is None or spec.loader is None:
            raise PluginError(f"Could not create module spec for {plugin_py_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        return module

    def load_plugin(self, plugin_dir: Path) -> Type[LayerClient]:
        """
        Load a single plugin from the given directory and register its client
        :param plugin_dir: Directory containing plugin.yaml and the entry point
        :return: The registered client class
        :raises PluginError: when the manifest or module is unusable
        """
        manifest = self.read_manifest(plugin_dir)
        registry = self.registries[manifest["kind"]]
        module = self._import(plugin_dir, manifest["entry_point"])

        # Find the client class defined by the plugin module itself
        candidates = [
            attr for attr in vars(module).values()
            if isinstance(attr, type)
            and issubclass(attr, registry.interface)
            and attr.__module__ == module.__name__
            and not getattr(attr, "__abstractmethods__", None)
        ]
        if len(candidates) != 1:
            raise PluginError(
                f"{plugin_dir / manifest['entry_point']} must define exactly one "
                f"{registry.interface.__name__} (found {len(candidates)})"
            )

        client_id = manifest["name"]
        registry.register(client_id, candidates[0])
        register_defaults(manifest["kind"], client_id, manifest["defaults"])
        self.loaded[client_id] = candidates[0]
        self.logger.info(f"Successfully loaded plugin: {client_id} ({manifest['kind'].value})")
        return candidates[0]

    def load_all_plugins(self) -> Dict[str, Type[LayerClient]]:
        """
        Load all available plugins; a broken plugin is reported and skipped
        :return: Dictionary of client id to registered class
        """
        for plugin_dir in self.discover_plugins():
            try:
                self.load_plugin(plugin_dir)
            except Exception as e:
                self.logger.error(f"Error loading plugin from {plugin_dir}: {e}")
                self.failed[plugin_dir.name] = str(e)
        return dict(self.loaded)
