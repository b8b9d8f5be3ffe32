# opensig/network/networks.py
"""
Registry of ledger networks that host an OpenSig registry contract.
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, List, Optional

from opensig.core.errors import BlockchainNotSupportedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Network:
    chain_id: int
    name: str
    contract_address: str
    creation_block: Optional[int] = None    # None → query from "earliest"
    block_time: float = 0.0                 # seconds; initial confirmation delay

    @property
    def from_block(self):
        return self.creation_block if self.creation_block is not None else "earliest"

    def to_dict(self) -> dict:
        return asdict(self)


LOCAL_CHAIN_ID = 1337
LOCAL_REGISTRY_ADDRESS = "0x00000000000000000000000000000000000051c9"

LOCAL_NETWORK = Network(
    chain_id=LOCAL_CHAIN_ID,
    name="local",
    contract_address=LOCAL_REGISTRY_ADDRESS,
    creation_block=0,
    block_time=0.0,
)

_networks: Dict[int, Network] = {LOCAL_NETWORK.chain_id: LOCAL_NETWORK}


def register_network(network: Network) -> None:
    if network.chain_id in _networks:
        logger.debug("replacing network definition for chain %s", network.chain_id)
    _networks[network.chain_id] = network


def get_network(chain_id: int) -> Network:
    try:
        return _networks[int(chain_id)]
    except KeyError:
        raise BlockchainNotSupportedError(chain_id) from None


def list_networks() -> List[Network]:
    return sorted(_networks.values(), key=lambda n: n.chain_id)


def load_networks(path: str | Path) -> List[Network]:
    """
    Register networks from a JSON file: a list of objects with the Network fields.
    """
    with open(path, "r", encoding="utf-8") as f:
        entries = json.load(f)
    if not isinstance(entries, list):
        raise ValueError(f"{path}: expected a JSON list of networks")

    loaded = []
    for entry in entries:
        try:
            network = Network(
                chain_id=int(entry["chain_id"]),
                name=entry["name"],
                contract_address=entry["contract_address"],
                creation_block=entry.get("creation_block"),
                block_time=float(entry.get("block_time", 0.0)),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"{path}: invalid network entry {entry!r}: {e}") from e
        register_network(network)
        loaded.append(network)
    return loaded
