from typing import Any, List

from ...models import AutoscalingBounds, ClientConfig, ClientHandle
from ...networks import is_mainnet, network_profile
from ...registry import execution_clients
from ..base import StatefulExecutionClient

# First blocks whose bodies/receipts a validator still needs on mainnet
ANCIENT_BARRIER = 11052984


@execution_clients.register("nethermind")
class NethermindClient(StatefulExecutionClient):
    client_id = "nethermind"
    workload_name = "nethermind"
    autoscaler_name = "nethermind"
    autoscaling = AutoscalingBounds(min_cpu="50m", min_memory="64Mi", max_cpu="4", max_memory="10Gi")
    container_ports = [
        {"name": "http", "containerPort": 8545},
        {"name": "discovery-udp", "containerPort": 30303, "protocol": "UDP"},
    ]
    service_ports = [{"name": "http", "port": 8545}]
    discovery_ports = [
        {"name": "discovery-udp", "port": 30303, "protocol": "UDP"},
        {"name": "discovery-tcp", "port": 30303, "protocol": "TCP"},
    ]
    readiness_path = "/health"
    pod_spec = {"terminationGracePeriodSeconds": 60}

    def default_command(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Any]:
        command = [
            "./Nethermind.Runner",
            f"--config={network_profile(network).execution_chain}",
            "--JsonRpc.Enabled=true",
            "--JsonRpc.Host=0.0.0.0",
            "--Pruning.Enabled=true",
            "--Init.BaseDbPath=/data",
            "--KeyStore.EnodeKeyFile=/data/node.key.plain",
            "--Init.MemoryHint=1500000000",
            f"--Network.MaxActivePeers={config.target_peers}",
            "--HealthChecks.Enabled=true",
            "--Init.WebSocketsEnabled=true",
            "--Sync.DownloadBodiesInFastSync=true",
            "--Sync.DownloadReceiptsInFastSync=true",
        ]
        if is_mainnet(network):
            command += [
                f"--Sync.AncientBodiesBarrier={ANCIENT_BARRIER}",
                f"--Sync.AncientReceiptsBarrier={ANCIENT_BARRIER}",
            ]
        return command
