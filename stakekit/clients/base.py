"""
base.py: shared StatefulSet + Service declaration for self-hosted clients
"""
from typing import Any, Dict, List, Optional, Tuple

from .. import manifests
from ..deferred import Deferred
from ..descriptors import Descriptor, ResourcePlan
from ..interfaces import ConsensusClient, ExecutionClient
from ..models import ClientConfig, ClientHandle

DATA_MOUNT = "/data"


def join_endpoints(handles: List[ClientHandle], secondary: bool = False) -> Deferred:
    """Comma separated endpoint list, in handle order"""
    endpoints = [
        (h.secondary_endpoint or h.endpoint) if secondary else h.endpoint
        for h in handles
    ]
    return Deferred.gather(endpoints).apply(",".join)


class StatefulWorkload:
    """
    StatefulWorkload: a client running as a single-container (by default)
    StatefulSet with a persistent data volume and a ClusterIP Service whose
    first port is the client's endpoint.
    """
    container_ports: List[Dict[str, Any]] = []
    service_ports: List[Dict[str, Any]] = []
    readiness_path: Optional[str] = None
    env: List[Dict[str, str]] = []
    pod_spec: Dict[str, Any] = {}

    def default_command(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Any]:
        raise NotImplementedError

    def command(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Any]:
        """User supplied command wins over the implementation's own"""
        if config.command:
            return list(config.command)
        return self.default_command(network, config, upstream)

    def readiness_probe(self) -> Optional[Dict[str, Any]]:
        if self.readiness_path is None:
            return None
        return manifests.http_readiness("http", self.readiness_path)

    def main_container(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> Dict[str, Any]:
        container: Dict[str, Any] = {
            "name": self.workload_name,
            "image": config.image_ref,
            "command": self.command(network, config, upstream),
        }
        if self.env:
            container["env"] = [dict(e) for e in self.env]
        container["resources"] = manifests.resources(config.cpu, config.memory)
        container["volumeMounts"] = [{"name": manifests.DATA_VOLUME, "mountPath": DATA_MOUNT}]
        container["ports"] = [dict(p) for p in self.container_ports]
        probe = self.readiness_probe()
        if probe:
            container["readinessProbe"] = probe
        return container

    def containers(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Dict[str, Any]]:
        return [self.main_container(network, config, upstream)]

    def declare_workload(
        self,
        plan: ResourcePlan,
        network: str,
        config: ClientConfig,
        upstream: List[ClientHandle],
    ) -> Tuple[Descriptor, Descriptor]:
        workload = plan.declare(manifests.stateful_set(
            self.workload_name,
            config.replicas,
            self.containers(network, config, upstream),
            volume=config.volume,
            pod_spec=self.pod_spec,
        ))
        service = plan.declare(
            manifests.cluster_service(self.workload_name, [dict(p) for p in self.service_ports]),
            depends_on=[workload],
        )
        return workload, service

    @staticmethod
    def service_endpoint(service: Descriptor, scheme: str = "http") -> Deferred:
        return Deferred.format(
            "{}://{}:{}", scheme, service.ref("metadata.name"), service.ref("spec.ports.0.port")
        )


class StatefulExecutionClient(StatefulWorkload, ExecutionClient):
    """Self-hosted execution client; serves HTTP and websocket JSON-RPC on the same port"""

    def instantiate(self, plan: ResourcePlan, network: str, config: ClientConfig) -> ClientHandle:
        workload, service = self.declare_workload(plan, network, config, [])
        return ClientHandle(
            name=self.client_id,
            kind=self.kind,
            enabled=config.enabled,
            endpoint=self.service_endpoint(service),
            secondary_endpoint=self.service_endpoint(service, "ws"),
            workload=workload,
        )


class StatefulConsensusClient(StatefulWorkload, ConsensusClient):
    """Self-hosted beacon node exposing the beacon API"""
    readiness_path = "/eth/v1/node/health?syncing_status=501"
    metrics_port = "metrics"

    def instantiate(
        self,
        plan: ResourcePlan,
        network: str,
        execution_clients: List[ClientHandle],
        config: ClientConfig,
    ) -> ClientHandle:
        workload, service = self.declare_workload(plan, network, config, list(execution_clients))
        return ClientHandle(
            name=self.client_id,
            kind=self.kind,
            enabled=config.enabled,
            endpoint=self.service_endpoint(service),
            workload=workload,
        )
