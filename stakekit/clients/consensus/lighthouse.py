from typing import Any, List

from ...deferred import Deferred
from ...models import AutoscalingBounds, ClientConfig, ClientHandle
from ...registry import consensus_clients
from ..base import StatefulConsensusClient, join_endpoints


@consensus_clients.register("lighthouse")
class LighthouseBeacon(StatefulConsensusClient):
    client_id = "lighthouse"
    workload_name = "lighthouse-beacon"
    autoscaler_name = "lighthouse"
    autoscaling = AutoscalingBounds(min_cpu="250m", min_memory="512Mi", max_cpu="3", max_memory="8Gi")
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

    def default_command(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Any]:
        command: List[Any] = [
            "lighthouse",
            "beacon",
            "--datadir=/data",
            "--debug-level=info",
            f"--network={network}",
            "--staking",
            "--http-address=0.0.0.0",
            "--validator-monitor-auto",
            "--metrics",
            "--metrics-address=0.0.0.0",
            "--private",
            # Only validating, so restore points can be sparse
            "--slots-per-restore-point=8192",
            "--eth1-blocks-per-log-query=150",
        ]
        if upstream:
            command.append(Deferred.format("--eth1-endpoints={}", join_endpoints(upstream)))
        if config.checkpoint_url:
            command.append(f"--checkpoint-sync-url={config.checkpoint_url}")
        if config.target_peers:
            command.append(f"--target-peers={config.target_peers}")
        return command
