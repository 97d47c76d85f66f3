from ...deferred import Deferred
from ...descriptors import ResourcePlan
from ...interfaces import ExecutionClient
from ...models import ClientConfig, ClientHandle
from ...registry import execution_clients


def websocket_url(url: str) -> str:
    """Infura serves websockets on a parallel /ws/ path"""
    return url.replace("https://", "wss://").replace("infura.io/v3/", "infura.io/ws/v3/")


@execution_clients.register("infura")
class InfuraExecutionClient(ExecutionClient):
    """
    Hosted JSON-RPC provider. Declares no workload; the endpoint (which
    embeds the project key) is treated as a secret.
    """
    client_id = "infura"

    def instantiate(self, plan: ResourcePlan, network: str, config: ClientConfig) -> ClientHandle:
        endpoint = Deferred.of(config.endpoint, secret=True)
        return ClientHandle(
            name=self.client_id,
            kind=self.kind,
            enabled=config.enabled,
            endpoint=endpoint,
            secondary_endpoint=endpoint.apply(websocket_url),
        )
