# opensig/network/client.py
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from opensig.core.types import BlockTag, LogEntry, RegistrationTransaction, TransactionReceipt

TopicFilter = Sequence[Union[None, str, Sequence[str]]]


class LedgerClient(ABC):
    """
    Abstract access to a ledger hosting the OpenSig registry contract.
    Concrete clients own transport, account selection and ABI encoding of calls.
    """

    @abstractmethod
    async def chain_id(self) -> int:
        pass

    @abstractmethod
    async def selected_identity(self) -> str:
        """Address that will sign submitted transactions."""

    @abstractmethod
    async def send_transaction(self, transaction: RegistrationTransaction) -> str:
        """Submit a registerSignature call and return the transaction hash."""

    @abstractmethod
    async def get_transaction_receipt(self, transaction_hash: str) -> Optional[TransactionReceipt]:
        """Receipt once mined, None while pending."""

    @abstractmethod
    async def get_past_logs(self, address: str, from_block: BlockTag, topics: TopicFilter) -> List[LogEntry]:
        """
        Logs emitted by `address` since `from_block` matching `topics`:
        one entry per position, None = wildcard, a list = any of.
        """

    def close(self) -> None:
        pass


def create_ledger(uri: str, **kwargs) -> LedgerClient:
    if uri.startswith("sqlite://"):
        from .sqlite import SQLiteLedger
        raw_path = uri[len("sqlite://"):]
        return SQLiteLedger(Path(raw_path).resolve(), **kwargs)

    elif uri.startswith("memory://"):
        from .sqlite import SQLiteLedger
        return SQLiteLedger(":memory:", **kwargs)
    else:
        raise ValueError(f"Unsupported ledger URI: {uri}")
