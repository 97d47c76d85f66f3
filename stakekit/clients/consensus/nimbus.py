from typing import Any, List

from ...deferred import Deferred
from ...models import AutoscalingBounds, ClientConfig, ClientHandle
from ...registry import consensus_clients
from ..base import StatefulConsensusClient


@consensus_clients.register("nimbus")
class NimbusClient(StatefulConsensusClient):
    """Nimbus follows the execution layer over websockets where one is offered"""
    client_id = "nimbus"
    workload_name = "nimbus"
    autoscaler_name = "nimbus"
    autoscaling = AutoscalingBounds(min_cpu="50m", min_memory="64Mi", max_cpu="3", max_memory="8Gi")
    container_ports = [
        {"name": "http", "containerPort": 5052},
        {"name": "metrics", "containerPort": 5054},
        {"name": "discovery", "containerPort": 9000},
    ]
    service_ports = [
        {"name": "http", "port": 5052},
        {"name": "metrics", "port": 5054},
    ]
    discovery_ports = [{"name": "discovery-tcp", "port": 9000}]
    pod_spec = {"securityContext": {"runAsUser": 0}}

    def default_command(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Any]:
        command: List[Any] = [
            f"./run-{network}-beacon-node.sh",
            "--non-interactive",
            "--num-threads=0",
            "--enr-auto-update",
            "--data-dir=/data",
            "--rest",
            "--rest-address=0.0.0.0",
            f"--max-peers={config.target_peers}",
        ]
        command.extend(
            Deferred.format("--web3-url={}", h.secondary_endpoint or h.endpoint)
            for h in upstream
        )
        return command
