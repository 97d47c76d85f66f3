import pytest

from stakekit.clients import (
    ErigonClient,
    InfuraExecutionClient,
    LighthouseBeacon,
    LodestarClient,
    NethermindClient,
    NimbusClient,
    TekuClient,
)
from stakekit.deferred import resolve_value
from stakekit.models import ClientKind
from stakekit.resolver import resolve_client_config


def render_statefulset(plan, name):
    return resolve_value(plan.get(f"StatefulSet/{name}").manifest, plan)


def command_of(plan, name, container=0):
    return render_statefulset(plan, name)["spec"]["template"]["spec"]["containers"][container]["command"]


def consensus(plan, cls, upstream, network="prater", overrides=None):
    config = resolve_client_config(overrides, network, ClientKind.CONSENSUS, cls.client_id)
    return cls().instantiate(plan, network, upstream, config)


def test_erigon_declares_workload_service_and_endpoints(plan):
    config = resolve_client_config(None, "prater", ClientKind.EXECUTION, "erigon")
    handle = ErigonClient().instantiate(plan, "prater", config)

    assert plan.keys() == ["StatefulSet/erigon", "Service/erigon"]
    assert handle.enabled
    assert handle.endpoint.resolve(plan) == "http://erigon:8545"
    assert handle.secondary_endpoint.resolve(plan) == "ws://erigon:8545"

    statefulset = render_statefulset(plan, "erigon")
    pod = statefulset["spec"]["template"]["spec"]
    assert [c["name"] for c in pod["containers"]] == ["erigon", "rpcdaemon"]
    assert "--chain=goerli" in pod["containers"][0]["command"]
    assert "--maxpeers=33" in pod["containers"][0]["command"]
    assert pod["nodeSelector"] == {"cloud.google.com/gke-spot": "true"}
    claim = statefulset["spec"]["volumeClaimTemplates"][0]["spec"]
    assert claim["dataSource"]["name"] == "data-erigon-0"
    assert claim["resources"]["requests"]["storage"] == "64Gi"


def test_disabled_client_still_declares_an_empty_workload(plan):
    config = resolve_client_config({"replicas": 0}, "prater", ClientKind.EXECUTION, "nethermind")
    handle = NethermindClient().instantiate(plan, "prater", config)
    assert not handle.enabled
    assert render_statefulset(plan, "nethermind")["spec"]["replicas"] == 0


@pytest.mark.parametrize("network,expected", [("mainnet", True), ("prater", False)])
def test_nethermind_ancient_barriers_only_on_mainnet(plan, network, expected):
    config = resolve_client_config(None, network, ClientKind.EXECUTION, "nethermind")
    NethermindClient().instantiate(plan, network, config)
    command = command_of(plan, "nethermind")
    assert any(arg.startswith("--Sync.AncientBodiesBarrier") for arg in command) == expected


def test_user_command_replaces_the_default(plan):
    config = resolve_client_config({"command": ["erigon", "--version"]}, "prater", ClientKind.EXECUTION, "erigon")
    ErigonClient().instantiate(plan, "prater", config)
    assert command_of(plan, "erigon") == ["erigon", "--version"]


def test_infura_has_no_workload_and_a_secret_endpoint(plan):
    url = "https://goerli.infura.io/v3/abc"
    config = resolve_client_config({"endpoint": url}, "prater", ClientKind.EXECUTION, "infura")
    handle = InfuraExecutionClient().instantiate(plan, "prater", config)

    assert len(plan) == 0
    assert handle.workload is None
    assert "abc" not in repr(handle.endpoint)
    assert handle.endpoint.resolve(plan) == url
    assert handle.secondary_endpoint.resolve(plan) == "wss://goerli.infura.io/ws/v3/abc"


def test_lighthouse_joins_execution_endpoints(plan, make_handle):
    upstream = [make_handle("erigon", "http://erigon:8545"), make_handle("nethermind", "http://nethermind:8545")]
    handle = consensus(plan, LighthouseBeacon, upstream, overrides={"checkpoint_url": "https://cp.example"})

    command = command_of(plan, "lighthouse-beacon")
    assert "--eth1-endpoints=http://erigon:8545,http://nethermind:8545" in command
    assert "--checkpoint-sync-url=https://cp.example" in command
    assert "--target-peers=50" in command
    assert handle.endpoint.resolve(plan) == "http://lighthouse-beacon:5052"


def test_consensus_clients_accept_no_execution_clients(plan):
    for cls in (LighthouseBeacon, LodestarClient, NimbusClient, TekuClient):
        consensus(plan, cls, [])
    assert not any(arg.startswith("--eth1-endpoints") for arg in command_of(plan, "lighthouse-beacon"))
    assert "--eth1.providerUrls" not in command_of(plan, "lodestar")
    assert not any(arg.startswith("--web3-url") for arg in command_of(plan, "nimbus"))


def test_lodestar_passes_one_argument_per_endpoint(plan, make_handle):
    upstream = [make_handle("a", "http://a:8545"), make_handle("b", "http://b:8545")]
    consensus(plan, LodestarClient, upstream, network="mainnet")
    command = command_of(plan, "lodestar")
    index = command.index("--eth1.providerUrls")
    assert command[index + 1:index + 3] == ["http://a:8545", "http://b:8545"]
    assert "--weakSubjectivitySyncLatest=true" in command


def test_nimbus_prefers_websocket_endpoints(plan, make_handle):
    upstream = [make_handle("a", "http://a:8545", ws="ws://a:8545"), make_handle("b", "http://b:8545")]
    consensus(plan, NimbusClient, upstream)
    command = command_of(plan, "nimbus")
    assert "--web3-url=ws://a:8545" in command
    assert "--web3-url=http://b:8545" in command
    assert command[0] == "./run-prater-beacon-node.sh"


def test_teku_checkpoint_and_environment(plan, make_handle):
    consensus(plan, TekuClient, [make_handle("a", "http://a:8545")], overrides={"checkpoint_url": "https://cp/state"})
    container = render_statefulset(plan, "teku")["spec"]["template"]["spec"]["containers"][0]
    assert "--initial-state=https://cp/state" in container["command"]
    assert "--eth1-endpoints=http://a:8545" in container["command"]
    assert {e["name"] for e in container["env"]} == {"TEKU_OPTS", "JAVA_OPTS"}
    assert container["readinessProbe"]["httpGet"]["path"] == "/eth/v1/node/health?syncing_status=501"
