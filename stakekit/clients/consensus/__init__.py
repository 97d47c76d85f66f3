from .lighthouse import LighthouseBeacon
from .lodestar import LodestarClient
from .nimbus import NimbusClient
from .teku import TekuClient

__all__ = ['LighthouseBeacon', 'LodestarClient', 'NimbusClient', 'TekuClient']
