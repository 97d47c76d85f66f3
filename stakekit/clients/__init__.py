"""
Built-in client implementations. Importing this package registers them.
"""
from .execution import ErigonClient, NethermindClient, InfuraExecutionClient
from .consensus import LighthouseBeacon, LodestarClient, NimbusClient, TekuClient

__all__ = [
    'ErigonClient', 'NethermindClient', 'InfuraExecutionClient',
    'LighthouseBeacon', 'LodestarClient', 'NimbusClient', 'TekuClient',
]
