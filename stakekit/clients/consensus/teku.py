from typing import Any, List

from ...deferred import Deferred
from ...models import AutoscalingBounds, ClientConfig, ClientHandle
from ...registry import consensus_clients
from ..base import StatefulConsensusClient, join_endpoints


@consensus_clients.register("teku")
class TekuClient(StatefulConsensusClient):
    client_id = "teku"
    workload_name = "teku"
    autoscaler_name = "teku"
    autoscaling = AutoscalingBounds(min_cpu="50m", min_memory="64Mi", max_cpu="8", max_memory="8Gi")
    container_ports = [
        {"name": "http", "containerPort": 5051},
        {"name": "metrics", "containerPort": 8008},
        {"name": "discovery", "containerPort": 9000},
    ]
    service_ports = [
        {"name": "http", "port": 5051},
        {"name": "metrics", "port": 8008},
        {"name": "discovery", "port": 9000},
    ]
    discovery_ports = [{"name": "discovery-tcp", "port": 9000}]
    env = [
        {"name": "TEKU_OPTS", "value": "-XX:-HeapDumpOnOutOfMemoryError"},
        {"name": "JAVA_OPTS", "value": "-Xmx2g"},
    ]
    pod_spec = {"securityContext": {"runAsUser": 0}}

    def default_command(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Any]:
        command: List[Any] = [
            "./bin/teku",
            "--metrics-enabled",
            "--metrics-port=8008",
            "--metrics-host-allowlist=*",
            "--log-destination=CONSOLE",
            "--data-base-path=/data",
            f"--network={network}",
            "--rest-api-enabled",
            "--rest-api-interface=0.0.0.0",
            "--rest-api-host-allowlist=*",
            f"--p2p-peer-upper-bound={config.target_peers}",
        ]
        if upstream:
            command.append(Deferred.format("--eth1-endpoints={}", join_endpoints(upstream)))
        if config.checkpoint_url:
            # e.g. https://<provider>/eth/v2/debug/beacon/states/finalized
            command.append(f"--initial-state={config.checkpoint_url}")
        return command
