from .erigon import ErigonClient
from .nethermind import NethermindClient
from .infura import InfuraExecutionClient

__all__ = ['ErigonClient', 'NethermindClient', 'InfuraExecutionClient']
