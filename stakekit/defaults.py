"""
defaults.py: default configuration tables per (client kind, client id, field)

Values wrapped in by_network() differ between mainnet and testnets; every
other value is the same for all networks. REQUIRED marks fields that have no
default and must come from the deployment document.
"""
from typing import Any, Dict

from .manifests import canonical_claim_name
from .models import ClientKind
from .networks import is_mainnet


class _Required:
    def __repr__(self):
        return "<required>"


REQUIRED = _Required()


class ByNetwork:
    """A default that depends on whether the deployment targets mainnet"""

    def __init__(self, mainnet: Any, testnet: Any):
        self.mainnet = mainnet
        self.testnet = testnet

    def for_network(self, network: str) -> Any:
        return self.mainnet if is_mainnet(network) else self.testnet

    def __repr__(self):
        return f"by_network(mainnet={self.mainnet!r}, testnet={self.testnet!r})"


def by_network(mainnet: Any, testnet: Any) -> ByNetwork:
    return ByNetwork(mainnet, testnet)


def volume(workload: str, storage: Any, storage_class: Any) -> Dict[str, Any]:
    return {
        "snapshot": False,
        "source": canonical_claim_name(workload),
        "storage": storage,
        "storage_class": storage_class,
    }


EXECUTION_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "erigon": {
        "image": "thorax/erigon",
        "tag": "v2022.02.03",
        "cpu": "4000m",
        "memory": "10Gi",
        "replicas": 1,
        "command": [],
        "target_peers": 33,
        "external": False,
        "volume": volume("erigon", by_network("1024Gi", "64Gi"), by_network("cheap", "fast")),
    },
    "nethermind": {
        "image": "nethermind/nethermind",
        "tag": "1.12.4",
        "cpu": "2",
        "memory": "4Gi",
        "replicas": 1,
        "command": [],
        "target_peers": 50,
        "external": False,
        "volume": volume("nethermind", by_network("512Gi", "72Gi"), "fast"),
    },
    "infura": {
        "replicas": 1,
        "endpoint": REQUIRED,
    },
}

CONSENSUS_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "lighthouse": {
        "image": "sigp/lighthouse",
        "tag": "v2.1.3-modern",
        "cpu": "750m",
        "memory": "3Gi",
        "replicas": 1,
        "command": [],
        "target_peers": 50,
        "external": False,
        "metrics": False,
        "checkpoint_url": None,
        "volume": volume("lighthouse-beacon", "72Gi", "fast"),
    },
    "lodestar": {
        "image": "chainsafe/lodestar",
        "tag": "v0.33.0",
        "cpu": "3",
        "memory": "3Gi",
        "replicas": 1,
        "command": [],
        "target_peers": 30,
        "external": False,
        "metrics": False,
        "volume": volume("lodestar", "16Gi", "fast"),
    },
    "nimbus": {
        "image": "statusim/nimbus-eth2",
        "tag": "multiarch-v1.6.0",
        "cpu": "3",
        "memory": "3Gi",
        "replicas": 1,
        "command": [],
        "target_peers": 160,
        "external": False,
        "metrics": False,
        "volume": volume("nimbus", "64Gi", "fast"),
    },
    "teku": {
        "image": "consensys/teku",
        "tag": "22.1.1-jdk17",
        "cpu": "4",
        "memory": "3Gi",
        "replicas": 1,
        "command": [],
        "target_peers": 74,
        "external": False,
        "metrics": False,
        "checkpoint_url": None,
        "volume": volume("teku", by_network("48Gi", "40Gi"), "fast"),
    },
}

OPERATOR_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "rocketpool": {
        "tag": "v1.1.2",
        "validator_tag": "v2.2.1-modern",
        "cpu": "50m",
        "memory": "128Mi",
        "node_password": REQUIRED,
        "graffiti": "",
        "volume": {
            "snapshot": False,
            "source": None,
            "storage": "1Gi",
            "storage_class": "cheap",
        },
    },
}

DEFAULT_TABLES = {
    ClientKind.EXECUTION: EXECUTION_DEFAULTS,
    ClientKind.CONSENSUS: CONSENSUS_DEFAULTS,
    ClientKind.OPERATOR: OPERATOR_DEFAULTS,
}


def register_defaults(kind: ClientKind, client_id: str, table: Dict[str, Any]) -> None:
    """Add the default table of a client implementation contributed at runtime"""
    DEFAULT_TABLES[kind][client_id] = table


def default_value(kind: ClientKind, client_id: str, network: str, path: str) -> Any:
    """
    Look up one default, evaluated for a network.
    :param path: Field name, dotted for volume fields ("volume.storage")
    """
    current: Any = DEFAULT_TABLES[kind][client_id]
    for part in path.split("."):
        current = current[part]
    return evaluate(current, network)


def evaluate(value: Any, network: str) -> Any:
    if isinstance(value, ByNetwork):
        return value.for_network(network)
    if isinstance(value, dict):
        return {k: evaluate(v, network) for k, v in value.items()}
    if isinstance(value, list):
        return list(value)
    return value
