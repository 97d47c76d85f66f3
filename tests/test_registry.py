import pytest

from stakekit import clients  # noqa: F401
from stakekit.errors import UnknownClientKind
from stakekit.interfaces import ConsensusClient, ExecutionClient
from stakekit.models import ClientHandle, ClientKind
from stakekit.deferred import Deferred
from stakekit.registry import ClientRegistry, consensus_clients, execution_clients, registry_for


class FakeExecution(ExecutionClient):
    client_id = "fake"

    def instantiate(self, plan, network, config):
        return ClientHandle("fake", self.kind, True, Deferred.of("http://fake:8545"))


class FakeConsensus(ConsensusClient):
    def instantiate(self, plan, network, execution_clients, config):
        return ClientHandle("fake", self.kind, True, Deferred.of("http://fake:5052"))


class Incomplete(ExecutionClient):
    pass


def test_builtin_clients_are_registered():
    assert execution_clients.names() == ["erigon", "nethermind", "infura"]
    assert consensus_clients.names() == ["lighthouse", "lodestar", "nimbus", "teku"]
    assert registry_for(ClientKind.CONSENSUS) is consensus_clients


def test_register_as_decorator_and_resolve():
    registry = ClientRegistry(ClientKind.EXECUTION, ExecutionClient)
    decorated = registry.register("fake")(FakeExecution)
    assert decorated is FakeExecution
    assert registry.resolve("fake") is FakeExecution
    assert "fake" in registry
    assert len(registry) == 1
    registry.unregister("fake")
    assert "fake" not in registry


def test_resolve_unknown_lists_known_ids():
    registry = ClientRegistry(ClientKind.EXECUTION, ExecutionClient)
    registry.register("fake", FakeExecution)
    with pytest.raises(UnknownClientKind, match="known: fake"):
        registry.resolve("geth")


def test_wrong_interface_is_rejected():
    registry = ClientRegistry(ClientKind.EXECUTION, ExecutionClient)
    with pytest.raises(TypeError):
        registry.register("fake", FakeConsensus)
    with pytest.raises(TypeError):
        registry.register("fake", object)
    with pytest.raises(TypeError):
        registry.register("incomplete", Incomplete)
