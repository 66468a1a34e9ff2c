"""Discovery package initialization."""
from .prober import Prober
from .concurrency_manager import ConcurrencyManager
from .network_interfaces import derive_subnets, list_ipv4_addresses
from .discovery_engine import DiscoveryEngine

__all__ = [
    'Prober',
    'ConcurrencyManager',
    'derive_subnets',
    'list_ipv4_addresses',
    'DiscoveryEngine',
]
