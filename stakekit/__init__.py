"""
stakekit: composes staking node topologies into Kubernetes manifests
"""
from .composer import compose_topology
from .config import DeploymentConfig, NetworkDeployment
from .errors import (
    ConfigurationError,
    DuplicateResource,
    InvalidTopology,
    MissingRequiredField,
    StakekitError,
    UnknownClientKind,
    UnresolvedReference,
)
from .registry import consensus_clients, execution_clients

__version__ = "0.1.0"

__all__ = [
    'compose_topology', 'DeploymentConfig', 'NetworkDeployment',
    'ConfigurationError', 'DuplicateResource', 'InvalidTopology', 'MissingRequiredField',
    'StakekitError', 'UnknownClientKind', 'UnresolvedReference',
    'consensus_clients', 'execution_clients',
]
