"""
registry.py: named client factories, one registry per layer

Adding a client implementation only needs a registry entry (and a default
table); the composers never change.
"""
import logging
from typing import Dict, List, Optional, Type

from .errors import UnknownClientKind
from .interfaces import ConsensusClient, ExecutionClient, LayerClient
from .models import ClientKind


class ClientRegistry:
    """
    ClientRegistry: maps client identifiers to implementation classes of a
    single layer interface
    """

    def __init__(self, kind: ClientKind, interface: Type[LayerClient]):
        self.kind = kind
        self.interface = interface
        self._factories: Dict[str, Type[LayerClient]] = {}
        self.logger = logging.getLogger(f"stakekit.registry.{kind.value}")

    def register(self, client_id: str, factory: Optional[Type[LayerClient]] = None):
        """
        Register a factory; usable directly or as a class decorator
        :param client_id: Identifier used in deployment documents
        :param factory: Class implementing this registry's interface
        """
        def _register(cls: Type[LayerClient]) -> Type[LayerClient]:
            if not (isinstance(cls, type) and issubclass(cls, self.interface)):
                raise TypeError(f"{cls!r} does not implement {self.interface.__name__}")
            if getattr(cls, "__abstractmethods__", None):
                raise TypeError(f"{cls.__name__} leaves {', '.join(sorted(cls.__abstractmethods__))} unimplemented")
            if client_id in self._factories and self._factories[client_id] is not cls:
                self.logger.warning(f"Replacing {self.kind.value} client '{client_id}' with {cls.__name__}")
            self._factories[client_id] = cls
            return cls

        if factory is not None:
            return _register(factory)
        return _register

    def unregister(self, client_id: str) -> None:
        self._factories.pop(client_id, None)

    def resolve(self, client_id: str) -> Type[LayerClient]:
        try:
            return self._factories[client_id]
        except KeyError:
            raise UnknownClientKind(self.kind.value, client_id, self._factories) from None

    def names(self) -> List[str]:
        return list(self._factories)

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._factories

    def __len__(self) -> int:
        return len(self._factories)


execution_clients = ClientRegistry(ClientKind.EXECUTION, ExecutionClient)
consensus_clients = ClientRegistry(ClientKind.CONSENSUS, ConsensusClient)

REGISTRIES = {
    ClientKind.EXECUTION: execution_clients,
    ClientKind.CONSENSUS: consensus_clients,
}


def registry_for(kind: ClientKind) -> ClientRegistry:
    return REGISTRIES[kind]
