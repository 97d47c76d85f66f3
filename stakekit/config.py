"""
config.py: module for handling the deployment document

The document is keyed by network; each section lists the requested clients
in order and carries per-client overrides and global flags:

    mainnet:
      execution: [erigon]
      consensus: [lighthouse, teku]
      metrics: true
      clients:
        erigon: {external: true}
      rocketpool: {node_password: ...}
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError

DEFAULT_DEPLOYMENT_FILE = "stakekit.yaml"

# Define non-direct user-needs here, sections override them
DEFAULT_NETWORK_SECTION = {
    "execution": [],
    "consensus": [],
    "clients": {},
    "rocketpool": {},
    "metrics": False,
    "alerting": False,
    "notification_channels": [],
}


@dataclass
class NetworkDeployment:
    """Everything requested for one network, before resolution"""
    network: str
    execution: List[str] = field(default_factory=list)
    consensus: List[str] = field(default_factory=list)
    clients: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    rocketpool: Dict[str, Any] = field(default_factory=dict)
    metrics: bool = False
    alerting: bool = False
    notification_channels: List[str] = field(default_factory=list)

    def overrides_for(self, client_id: str) -> Optional[Dict[str, Any]]:
        return self.clients.get(client_id)

    @classmethod
    def from_section(cls, network: str, section: Any) -> "NetworkDeployment":
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Section '{network}' must be a mapping")

        unknown = sorted(set(section) - set(DEFAULT_NETWORK_SECTION))
        if unknown:
            raise ConfigurationError(f"Section '{network}' has unknown keys: {', '.join(unknown)}")

        data = {**DEFAULT_NETWORK_SECTION, **section}
        for key in ("execution", "consensus", "notification_channels"):
            value = data[key] or []
            if isinstance(value, str) or not isinstance(value, list):
                raise ConfigurationError(f"'{network}.{key}' must be a list")
            data[key] = list(value)
        for key in ("clients", "rocketpool"):
            value = data[key] or {}
            if not isinstance(value, dict):
                raise ConfigurationError(f"'{network}.{key}' must be a mapping")
            data[key] = dict(value)
        for key in ("metrics", "alerting"):
            if data[key] is None:
                data[key] = False
            if not isinstance(data[key], bool):
                raise ConfigurationError(f"'{network}.{key}' must be true or false")

        return cls(
            network=network,
            execution=data["execution"],
            consensus=data["consensus"],
            clients=data["clients"],
            rocketpool=data["rocketpool"],
            metrics=data["metrics"],
            alerting=data["alerting"],
            notification_channels=data["notification_channels"],
        )


class DeploymentConfig:
    """
    DeploymentConfig: class that encapsulate all the data and action for the
    per-network deployment document
    """
    def __init__(self, path: Path):
        self.path = Path(path)
        self.data: Dict[str, Any] = {}

    def load(self):
        """
        load: loads the deployment document
        """
        if not self.path.exists():
            raise ConfigurationError(f"Deployment file not found: {self.path}")
        try:
            data = yaml.safe_load(self.path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{self.path} must map network names to sections")
        self.data = data
        return self

    def networks(self) -> List[str]:
        return list(self.data)

    def for_network(self, network: str) -> NetworkDeployment:
        if network not in self.data:
            known = ", ".join(self.data) or "none"
            raise ConfigurationError(f"No section for network '{network}' in {self.path} (found: {known})")
        return NetworkDeployment.from_section(network, self.data[network])

    def save(self):
        """
        save: saves the deployment document
        """
        self.path.write_text(
            yaml.dump(self.data, default_flow_style=False, indent=2)
        )
