from typing import Any, Dict, List

from ... import manifests
from ...models import AutoscalingBounds, ClientConfig, ClientHandle
from ...networks import network_profile
from ...registry import execution_clients
from ..base import StatefulExecutionClient

RPC_PORT = 8545
PRIVATE_API_PORT = 9090


@execution_clients.register("erigon")
class ErigonClient(StatefulExecutionClient):
    """
    Erigon node plus an rpcdaemon sidecar that serves JSON-RPC from the
    node's private API. State caching is left to the daemon.
    """
    client_id = "erigon"
    workload_name = "erigon"
    autoscaler_name = "erigon"
    autoscaling = AutoscalingBounds(min_cpu="50m", min_memory="64Mi", max_cpu="4", max_memory="10Gi")
    container_ports = [
        {"name": "private-rpc", "containerPort": PRIVATE_API_PORT, "protocol": "TCP"},
        {"name": "discovery-udp", "containerPort": 30303, "protocol": "UDP"},
    ]
    service_ports = [{"name": "http", "port": RPC_PORT}]
    discovery_ports = [
        {"name": "discovery-udp", "port": 30303, "protocol": "UDP"},
        {"name": "discovery-tcp", "port": 30303, "protocol": "TCP"},
    ]
    pod_spec = {
        "securityContext": {
            "runAsUser": 1000,
            "runAsGroup": 1000,
            "fsGroup": 1000,
            "fsGroupChangePolicy": "OnRootMismatch",
        },
        "terminationGracePeriodSeconds": 600,
    }

    def default_command(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Any]:
        command = [
            "erigon",
            "--prune.r.before=11184524",
            "--prune=htc",
            "--datadir=/data",
            f"--chain={network_profile(network).execution_chain}",
            "--state.stream.disable",
        ]
        if config.target_peers:
            command.append(f"--maxpeers={config.target_peers}")
        return command

    def rpc_daemon(self, config: ClientConfig) -> Dict[str, Any]:
        return {
            "name": "rpcdaemon",
            "image": config.image_ref,
            "command": [
                "rpcdaemon",
                f"--private.api.addr=127.0.0.1:{PRIVATE_API_PORT}",
                "--state.cache=0",
                "--http.addr=0.0.0.0",
                "--ws",
                "--http.api=eth,net,erigon",
                "--http.vhosts=*",
            ],
            "ports": [{"name": "http", "containerPort": RPC_PORT}],
            "readinessProbe": manifests.exec_readiness(
                ["sh", "-c", f"wget -q localhost:{RPC_PORT}/health -O - --post-data '{{}}'"]
            ),
        }

    def containers(self, network: str, config: ClientConfig, upstream: List[ClientHandle]) -> List[Dict[str, Any]]:
        return [self.main_container(network, config, upstream), self.rpc_daemon(config)]
