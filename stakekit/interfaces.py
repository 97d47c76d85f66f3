"""
interfaces.py: the contract every client implementation fulfils
"""
import abc
from typing import Any, Dict, List, Optional

from .descriptors import ResourcePlan
from .models import AutoscalingBounds, ClientConfig, ClientHandle, ClientKind


class LayerClient(abc.ABC):
    """
    LayerClient: common surface of execution and consensus clients.
    Class attributes describe the workload so attachment rules can act on
    any implementation without knowing which one it is.
    """
    kind: ClientKind
    client_id: str = ""
    # Name of the StatefulSet/Service; None for hosted clients without a workload
    workload_name: Optional[str] = None
    metrics_port: Optional[str] = None
    discovery_ports: List[Dict[str, Any]] = []
    autoscaler_name: Optional[str] = None
    autoscaling: Optional[AutoscalingBounds] = None


class ExecutionClient(LayerClient):
    """
    ExecutionClient: transaction execution / JSON-RPC node.
    Handles must carry an endpoint and may carry a websocket secondary endpoint.
    """
    kind = ClientKind.EXECUTION

    @abc.abstractmethod
    def instantiate(self, plan: ResourcePlan, network: str, config: ClientConfig) -> ClientHandle:
        """
        Declare the client's resources
        :param plan: Plan to declare resources into
        :param network: Deployment target
        :param config: Resolved configuration
        :return: Handle exposing the client's endpoints
        """
        pass


class ConsensusClient(LayerClient):
    """
    ConsensusClient: beacon node. Receives every enabled execution handle and
    decides itself how to use several upstream endpoints; must also accept an
    empty list.
    """
    kind = ClientKind.CONSENSUS

    @abc.abstractmethod
    def instantiate(
        self,
        plan: ResourcePlan,
        network: str,
        execution_clients: List[ClientHandle],
        config: ClientConfig,
    ) -> ClientHandle:
        """
        Declare the client's resources
        :param execution_clients: Enabled execution handles, in request order
        :return: Handle exposing the beacon API endpoint
        """
        pass
