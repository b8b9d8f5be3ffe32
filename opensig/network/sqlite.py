# opensig/network/sqlite.py
import hashlib
import logging
import os
import sqlite3
import time
from pathlib import Path
from typing import Callable, List, Optional

from opensig.core.abi import address_to_topic, encode_log_data
from opensig.core.encoding import hex2buf, is_hex, strip_0x
from opensig.core.errors import TransactionError
from opensig.core.types import BlockTag, LogEntry, RegistrationTransaction, TransactionReceipt
from opensig.config import DEFAULT_SIGNER, SIGNER_ENV, get_ledger_path
from opensig.network.networks import LOCAL_CHAIN_ID
from .client import LedgerClient, TopicFilter

logger = logging.getLogger(__name__)

# Stable topic0 for the local ledger's Signature event.
LOCAL_EVENT_TOPIC = "0x" + hashlib.sha256(b"Signature(uint256,address,bytes32,bytes)").hexdigest()


class SQLiteLedger(LedgerClient):
    """
    Single-node ledger backed by SQLite that behaves like the OpenSig registry
    contract: every transaction is mined into its own block, and registering a
    signature hash that already exists reverts.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        chain_id: int = LOCAL_CHAIN_ID,
        signer: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        if db_path is None:
            db_path = get_ledger_path()

        if str(db_path) == ":memory:":
            self.db_path = ":memory:"
        else:
            path = Path(db_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            self.db_path = path.resolve()

        self._chain_id = chain_id
        self.signer = signer or os.environ.get(SIGNER_ENV) or DEFAULT_SIGNER
        self.clock = clock

        self._conn: Optional[sqlite3.Connection] = None
        self._connect()

    def _connect(self):
        self._conn = sqlite3.connect(str(self.db_path), isolation_level=None)
        if self.db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._create_schema()

    def _create_schema(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS transactions (
                tx_hash         TEXT    PRIMARY KEY,
                block_number    INTEGER NOT NULL,
                from_address    TEXT    NOT NULL,
                to_address      TEXT    NOT NULL,
                status          INTEGER NOT NULL
            )
        """)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS logs (
                block_number    INTEGER NOT NULL,
                log_index       INTEGER NOT NULL,
                tx_hash         TEXT    NOT NULL,
                address         TEXT    NOT NULL,
                topic0          TEXT    NOT NULL,
                topic1          TEXT    NOT NULL,
                topic2          TEXT    NOT NULL,
                data            TEXT    NOT NULL,
                PRIMARY KEY (block_number, log_index)
            )
        """)
        self.conn.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_signature ON logs(address, topic2)")

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Ledger connection is closed")
        return self._conn

    def _latest_block(self) -> int:
        row = self.conn.execute("SELECT MAX(block_number) FROM transactions").fetchone()
        return row[0] if row and row[0] is not None else 0

    async def chain_id(self) -> int:
        return self._chain_id

    async def selected_identity(self) -> str:
        return self.signer

    async def send_transaction(self, transaction: RegistrationTransaction) -> str:
        signature = transaction.signature.lower()
        if len(strip_0x(signature)) != 64 or not is_hex(signature):
            raise TransactionError(f"signature must be a 32-byte hex value: {transaction.signature}")
        if not is_hex(transaction.data):
            raise TransactionError("signature data must be hex")

        block = self._latest_block() + 1
        tx_hash = "0x" + hashlib.sha256(
            f"{transaction.from_}|{transaction.to}|{signature}|{transaction.data}|{block}".lower().encode()
        ).hexdigest()
        address = transaction.to.lower()

        exists = self.conn.execute(
            "SELECT 1 FROM logs WHERE address = ? AND topic2 = ?", (address, signature)
        ).fetchone()
        status = 0 if exists else 1

        self.conn.execute(
            "INSERT INTO transactions (tx_hash, block_number, from_address, to_address, status) VALUES (?, ?, ?, ?, ?)",
            (tx_hash, block, transaction.from_.lower(), address, status),
        )
        if status:
            payload = hex2buf(transaction.data) if strip_0x(transaction.data) else b""
            self.conn.execute("""
                INSERT INTO logs
                (block_number, log_index, tx_hash, address, topic0, topic1, topic2, data)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                block, 0, tx_hash, address, LOCAL_EVENT_TOPIC,
                address_to_topic(transaction.from_), signature,
                encode_log_data(int(self.clock()), payload),
            ))
        else:
            logger.debug("signature %s already registered; transaction %s reverted", signature, tx_hash)
        return tx_hash

    async def get_transaction_receipt(self, transaction_hash: str) -> Optional[TransactionReceipt]:
        row = self.conn.execute(
            "SELECT block_number, from_address, to_address, status FROM transactions WHERE tx_hash = ?",
            (transaction_hash.lower(),),
        ).fetchone()
        if row is None:
            return None
        block, from_, to, status = row
        return TransactionReceipt(transaction_hash.lower(), block, bool(status), from_, to)

    async def get_past_logs(self, address: str, from_block: BlockTag, topics: TopicFilter) -> List[LogEntry]:
        if from_block == "earliest":
            start = 0
        elif from_block == "latest":
            start = self._latest_block()
        else:
            start = int(from_block)

        cursor = self.conn.execute("""
            SELECT block_number, log_index, tx_hash, address, topic0, topic1, topic2, data
            FROM logs WHERE address = ? AND block_number >= ?
            ORDER BY block_number ASC, log_index ASC
        """, (address.lower(), start))

        matched = []
        for block, index, tx_hash, addr, *log_topics, data in cursor:
            if _topics_match(log_topics, topics):
                matched.append(LogEntry(addr, log_topics, data, block, tx_hash, index))
        return matched

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_signature_count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM logs").fetchone()[0]


def _topics_match(log_topics: List[str], topics: TopicFilter) -> bool:
    for position, wanted in enumerate(topics):
        if wanted is None:
            continue
        if position >= len(log_topics):
            return False
        actual = log_topics[position].lower()
        if isinstance(wanted, str):
            if actual != wanted.lower():
                return False
        elif actual not in {w.lower() for w in wanted}:
            return False
    return True
