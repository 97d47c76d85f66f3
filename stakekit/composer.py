"""
composer.py: wires execution, consensus and operator clients into a topology

Order is a data dependency: the execution layer's enabled endpoints feed the
consensus layer, and both feed the node operator. Every identifier and
override is resolved before the first resource is declared, so configuration
mistakes never leave a half-built plan behind.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from . import clients  # noqa: F401  registers the built-in implementations
from . import manifests
from .alerts import declare_alerts
from .attachments import AttachmentRule, attach_resources
from .config import NetworkDeployment
from .descriptors import ResourcePlan
from .errors import ConfigurationError, InvalidTopology
from .interfaces import LayerClient
from .models import ClientConfig, ClientHandle, ClientKind, OperatorConfig, Topology
from .operator import NodeOperator
from .registry import ClientRegistry, consensus_clients, execution_clients
from .resolver import check_mapping, resolve_client_config, resolve_operator_config

logger = logging.getLogger("stakekit.composer")


@dataclass(frozen=True)
class ClientRequest:
    """A requested client whose identifier and configuration are already resolved"""
    client_id: str
    factory: Type[LayerClient]
    config: ClientConfig

    @property
    def enabled(self) -> bool:
        return self.config.enabled


class LayerComposer:
    """
    LayerComposer: resolves and instantiates the requested clients of one layer
    """
    kind: ClientKind

    def __init__(self, registry: ClientRegistry, rules: Optional[List[AttachmentRule]] = None):
        self.registry = registry
        self.rules = rules

    def prepare(
        self,
        requested: List[str],
        network: str,
        overrides: Dict[str, Dict[str, Any]],
        metrics_default: bool = False,
    ) -> List[ClientRequest]:
        """
        Resolve every requested identifier and its configuration, in order
        :raises UnknownClientKind: for identifiers missing from the registry
        :raises ConfigurationError: for invalid or incomplete overrides and repeated identifiers
        """
        requests = []
        for client_id in requested:
            if any(r.client_id == client_id for r in requests):
                raise ConfigurationError(f"{self.kind.value} client '{client_id}' is requested more than once")
            factory = self.registry.resolve(client_id)
            config = resolve_client_config(
                overrides.get(client_id), network, self.kind, client_id, metrics_default
            )
            requests.append(ClientRequest(client_id, factory, config))
        return requests

    def _finish(self, plan: ResourcePlan, request: ClientRequest, client: LayerClient,
                handle: ClientHandle, enabled: List[ClientHandle], disabled: List[str]) -> None:
        attach_resources(plan, client, request.config, handle, self.rules)
        if handle.enabled:
            enabled.append(handle)
        else:
            logger.info(f"{self.kind.value} client '{request.client_id}' is disabled (replicas=0)")
            disabled.append(request.client_id)


class ExecutionLayerComposer(LayerComposer):
    kind = ClientKind.EXECUTION

    def __init__(self, registry: ClientRegistry = execution_clients, rules: Optional[List[AttachmentRule]] = None):
        super().__init__(registry, rules)

    def compose(self, plan: ResourcePlan, network: str,
                requests: List[ClientRequest]) -> Tuple[List[ClientHandle], List[str]]:
        """
        Instantiate execution clients
        :return: (enabled handles in request order, identifiers of disabled clients)
        """
        enabled: List[ClientHandle] = []
        disabled: List[str] = []
        for request in requests:
            client = request.factory()
            handle = client.instantiate(plan, network, request.config)
            self._finish(plan, request, client, handle, enabled, disabled)
        return enabled, disabled


class ConsensusLayerComposer(LayerComposer):
    kind = ClientKind.CONSENSUS

    def __init__(self, registry: ClientRegistry = consensus_clients, rules: Optional[List[AttachmentRule]] = None):
        super().__init__(registry, rules)

    def compose(self, plan: ResourcePlan, network: str, requests: List[ClientRequest],
                execution: List[ClientHandle]) -> Tuple[List[ClientHandle], List[str]]:
        """
        Instantiate consensus clients, handing each one every enabled execution handle
        :return: (enabled handles in request order, identifiers of disabled clients)
        """
        if not execution:
            logger.warning("No execution client is enabled; consensus clients will run without one")
        enabled: List[ClientHandle] = []
        disabled: List[str] = []
        for request in requests:
            client = request.factory()
            handle = client.instantiate(plan, network, list(execution), request.config)
            self._finish(plan, request, client, handle, enabled, disabled)
        return enabled, disabled


class NodeOperatorComposer:
    """
    NodeOperatorComposer: attaches the node operator to the first execution
    client and to all consensus clients
    """

    def __init__(self, operator: Optional[NodeOperator] = None):
        self.operator = operator or NodeOperator()

    @staticmethod
    def check(execution_enabled: bool, consensus_enabled: bool) -> None:
        if execution_enabled and not consensus_enabled:
            raise InvalidTopology(
                "At least one consensus client must be enabled when execution clients are, "
                "validators have no beacon node to connect to"
            )

    def compose(self, plan: ResourcePlan, network: str, config: OperatorConfig,
                execution: List[ClientHandle], consensus: List[ClientHandle]) -> Optional[ClientHandle]:
        if not execution:
            logger.info("No execution client is enabled; skipping the node operator")
            return None
        self.check(bool(execution), bool(consensus))
        return self.operator.instantiate(plan, network, config, execution, consensus)


def compose_topology(
    deployment: NetworkDeployment,
    execution_registry: ClientRegistry = execution_clients,
    consensus_registry: ClientRegistry = consensus_clients,
    rules: Optional[List[AttachmentRule]] = None,
) -> Topology:
    """
    Build the complete topology of one network
    :param deployment: Requested clients, overrides and flags
    :return: Topology whose plan holds every declared resource
    """
    network = deployment.network
    execution_composer = ExecutionLayerComposer(execution_registry, rules)
    consensus_composer = ConsensusLayerComposer(consensus_registry, rules)
    operator_composer = NodeOperatorComposer()

    execution_requests = execution_composer.prepare(
        deployment.execution, network, deployment.clients, deployment.metrics
    )
    consensus_requests = consensus_composer.prepare(
        deployment.consensus, network, deployment.clients, deployment.metrics
    )
    lighthouse_tag = check_mapping("lighthouse", deployment.overrides_for("lighthouse")).get("tag")
    operator_config = resolve_operator_config(deployment.rocketpool, network, lighthouse_tag)
    NodeOperatorComposer.check(
        any(r.enabled for r in execution_requests),
        any(r.enabled for r in consensus_requests),
    )

    plan = ResourcePlan(network)
    plan.declare(manifests.namespace(network))

    execution, disabled = execution_composer.compose(plan, network, execution_requests)
    consensus, disabled_consensus = consensus_composer.compose(plan, network, consensus_requests, execution)
    operator = operator_composer.compose(plan, network, operator_config, execution, consensus)

    if deployment.alerting:
        declare_alerts(plan, network, deployment.notification_channels)

    logger.info(
        f"Composed {network}: {len(execution)} execution, {len(consensus)} consensus client(s), "
        f"{len(plan)} resources"
    )
    return Topology(
        network=network,
        execution=execution,
        consensus=consensus,
        operator=operator,
        plan=plan,
        disabled=disabled + disabled_consensus,
    )
