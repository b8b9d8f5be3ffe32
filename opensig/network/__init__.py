# opensig/network/__init__.py
"""
Ledger access: client interface, known networks, local ledger and confirmation polling.
"""

from .client import LedgerClient, create_ledger
from .networks import LOCAL_NETWORK, Network, get_network, list_networks, load_networks, register_network
from .confirm import wait_for_confirmation
from .sqlite import SQLiteLedger

__all__ = [
    "LedgerClient",
    "create_ledger",
    "LOCAL_NETWORK",
    "Network",
    "get_network",
    "list_networks",
    "load_networks",
    "register_network",
    "wait_for_confirmation",
    "SQLiteLedger",
]
