from typing import Any, List

from ...models import AutoscalingBounds, ClientConfig, ClientHandle
from ...networks import is_mainnet
from ...registry import consensus_clients
from ..base import StatefulConsensusClient


@consensus_clients.register("lodestar")
class LodestarClient(StatefulConsensusClient):
    client_id = "lodestar"
    workload_name = "lodestar"
    autoscaler_name = "lodestar"
    autoscaling = AutoscalingBounds(min_cpu="50m", min_memory="64Mi", max_cpu="3", max_memory="8Gi")
    container_ports = [
        {"name": "http", "containerPort": 9596},
        {"name": "metrics", "containerPort": 8008},
        {"name": "discovery", "containerPort": 9000},
    ]
    service_ports = [
        {"name": "http", "port": 9596},
        {"name": "metrics", "port": 8008},
    ]
    discovery_ports = [{"name": "discovery-tcp", "port": 9000}]
    pod_spec = {
        "enableServiceLinks": False,
        "securityContext": {"runAsUser": 0},
    }

    def default_command(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Any]:
        command: List[Any] = [
            "./node_modules/.bin/lodestar",
            "beacon",
            f"--network={network}",
            "--metrics.enabled=true",
            "--metrics.serverPort=8008",
            "--rootDir=/data",
            f"--network.maxPeers={config.target_peers}",
        ]
        if is_mainnet(network):
            command.append("--weakSubjectivitySyncLatest=true")
        if upstream:
            # one argument per provider
            command.append("--eth1.providerUrls")
            command.extend(h.endpoint for h in upstream)
        return command
