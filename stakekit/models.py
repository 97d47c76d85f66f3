from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, TYPE_CHECKING

from .deferred import Deferred
from .errors import ConfigurationError

if TYPE_CHECKING:
    from .descriptors import Descriptor, ResourcePlan


class ClientKind(Enum):
    EXECUTION = "execution"
    CONSENSUS = "consensus"
    OPERATOR = "operator"


@dataclass(frozen=True)
class VolumeSpec:
    """
    Persistent data volume of a client.
    source=None provisions an empty volume; otherwise the volume is restored
    from the VolumeSnapshot with that name. snapshot=True captures a new
    snapshot named `source` from the claim of the same name.
    """
    storage: str
    storage_class: str
    snapshot: bool = False
    source: Optional[str] = None

    def __post_init__(self):
        if not self.storage or not self.storage_class:
            raise ConfigurationError("Volume storage size and storage class are required.")
        if not isinstance(self.snapshot, bool):
            raise ConfigurationError("Volume snapshot must be true or false.")
        if self.snapshot and not self.source:
            raise ConfigurationError("Volume snapshots need a source name to capture into.")


@dataclass(frozen=True)
class ClientConfig:
    """
    Fully resolved configuration of one execution or consensus client.
    Produced by the resolver; never mutated afterwards.
    """
    client_id: str
    kind: ClientKind
    image: Optional[str] = None
    tag: Optional[str] = None
    cpu: Optional[str] = None
    memory: Optional[str] = None
    replicas: int = 1
    command: Tuple[str, ...] = ()
    target_peers: int = 0
    external: bool = False
    metrics: bool = False
    volume: Optional[VolumeSpec] = None
    checkpoint_url: Optional[str] = None
    endpoint: Optional[str] = None     # hosted providers only, secret

    def __post_init__(self):
        if isinstance(self.replicas, bool) or not isinstance(self.replicas, int) or self.replicas < 0:
            raise ConfigurationError(f"{self.client_id}: replicas must be a non-negative integer.")
        if isinstance(self.command, str):
            raise ConfigurationError(f"{self.client_id}: command must be a list of arguments.")
        object.__setattr__(self, "command", tuple(self.command or ()))
        if isinstance(self.target_peers, bool) or not isinstance(self.target_peers, int) or self.target_peers < 0:
            raise ConfigurationError(f"{self.client_id}: target_peers must be a non-negative integer.")
        for flag in ("external", "metrics"):
            if not isinstance(getattr(self, flag), bool):
                raise ConfigurationError(f"{self.client_id}: {flag} must be true or false.")

    @property
    def enabled(self) -> bool:
        return self.replicas > 0

    @property
    def image_ref(self) -> str:
        return f"{self.image}:{self.tag}"


@dataclass(frozen=True)
class OperatorConfig:
    """Resolved configuration of the node operator (smartnode + validator)"""
    node_password: str
    tag: str
    validator_tag: str
    cpu: str = "50m"
    memory: str = "128Mi"
    graffiti: str = ""
    volume: Optional[VolumeSpec] = None

    def __post_init__(self):
        if not self.node_password:
            raise ConfigurationError("rocketpool: node_password must not be empty.")


@dataclass(frozen=True)
class ClientHandle:
    """
    Result of instantiating a client. Only enabled handles are ever passed
    to downstream composers.
    """
    name: str
    kind: ClientKind
    enabled: bool
    endpoint: Deferred
    secondary_endpoint: Optional[Deferred] = None
    workload: Optional["Descriptor"] = None


@dataclass
class Topology:
    """The assembled deployment: enabled clients by layer plus the declared resources"""
    network: str
    execution: List[ClientHandle]
    consensus: List[ClientHandle]
    operator: Optional[ClientHandle]
    plan: "ResourcePlan"
    disabled: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AutoscalingBounds:
    """Hand-tuned vertical autoscaling limits of one client implementation"""
    min_cpu: str
    min_memory: str
    max_cpu: str
    max_memory: str
