# tests/conftest.py
import hashlib
from typing import List, Optional

import pytest

from opensig.core.abi import address_to_topic, encode_log_data
from opensig.core.encoding import hex2buf, strip_0x
from opensig.core.errors import TransactionError
from opensig.core.types import LogEntry, RegistrationTransaction, TransactionReceipt
from opensig.network.client import LedgerClient
from opensig.network.networks import LOCAL_NETWORK

SIGNER = "0x00000000000000000000000000000000000000aa"


class FakeLedger(LedgerClient):
    """In-memory registry contract that records every call made to it."""

    def __init__(self, chain_id: int = LOCAL_NETWORK.chain_id, signer: str = SIGNER):
        self._chain_id = chain_id
        self.signer = signer
        self.logs: List[LogEntry] = []
        self.receipts = {}
        self.log_queries: List[list] = []
        self.sent: List[RegistrationTransaction] = []
        self.fail_sends = 0
        self.pending = set()
        self.time = 1_700_000_000

    async def chain_id(self) -> int:
        return self._chain_id

    async def selected_identity(self) -> str:
        return self.signer

    async def send_transaction(self, transaction: RegistrationTransaction) -> str:
        if self.fail_sends:
            self.fail_sends -= 1
            raise TransactionError("user rejected transaction")
        self.sent.append(transaction)
        block = len(self.sent)
        tx_hash = "0x" + hashlib.sha256(f"{block}{transaction.signature}".encode()).hexdigest()
        duplicate = any(log.topics[2] == transaction.signature for log in self.logs)
        if not duplicate:
            payload = hex2buf(transaction.data) if strip_0x(transaction.data) else b""
            self.add_log(transaction.signature, payload, signer=transaction.from_, tx_hash=tx_hash)
        self.receipts[tx_hash] = TransactionReceipt(tx_hash, block, not duplicate, transaction.from_, transaction.to)
        return tx_hash

    def add_log(self, signature: str, payload: bytes = b"", signer: str = SIGNER,
                tx_hash: Optional[str] = None, data: Optional[str] = None) -> LogEntry:
        self.time += 1
        log = LogEntry(
            address=LOCAL_NETWORK.contract_address,
            topics=["0x" + "ee" * 32, address_to_topic(signer), signature],
            data=data if data is not None else encode_log_data(self.time, payload),
            block_number=len(self.logs) + 1,
            transaction_hash=tx_hash,
            log_index=0,
        )
        self.logs.append(log)
        return log

    async def get_transaction_receipt(self, transaction_hash: str) -> Optional[TransactionReceipt]:
        if transaction_hash in self.pending:
            return None
        return self.receipts.get(transaction_hash)

    async def get_past_logs(self, address, from_block, topics) -> List[LogEntry]:
        wanted = set(topics[2])
        self.log_queries.append(list(topics[2]))
        return [log for log in self.logs if log.address == address and log.topics[2] in wanted]


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def document_hash() -> bytes:
    return hashlib.sha256(b"The quick brown fox jumps over the lazy dog").digest()
