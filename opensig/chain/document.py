# opensig/chain/document.py
import asyncio
import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from opensig.chain.hashchain import HashChain
from opensig.core.codec import encode_data_hex
from opensig.core.encoding import buf2hex, hex2buf
from opensig.core.errors import DocumentNotIdentifiedError, NotVerifiedError
from opensig.core.types import RegistrationTransaction, SignatureData, SignatureEvent
from opensig.crypto.encryption import derive_key
from opensig.crypto.hashing import FileReader, hash_file
from opensig.crypto.provider import CryptoProvider, default_provider, require_crypto
from opensig.network.client import LedgerClient
from opensig.network.confirm import DEFAULT_POLL_INTERVAL, wait_for_confirmation
from opensig.network.networks import Network, get_network
from opensig.verify.discovery import discover_signatures

logger = logging.getLogger(__name__)

_DEFAULT = object()


class DocumentState(enum.Enum):
    UNIDENTIFIED = "unidentified"
    IDENTIFIED = "identified"
    VERIFIED = "verified"


@dataclass(frozen=True)
class HashSource:
    """Identity given directly as a 32-byte document hash (bytes or hex)."""
    document_hash: Union[bytes, str]

    def resolve(self, crypto: Optional[CryptoProvider] = None) -> bytes:
        if isinstance(self.document_hash, str):
            return hex2buf(self.document_hash)
        return bytes(self.document_hash)


@dataclass(frozen=True)
class FileSource:
    """Identity computed by hashing a file's contents."""
    path: Path
    reader: Optional[FileReader] = None

    def resolve(self, crypto: CryptoProvider) -> bytes:
        logger.debug("hashing file %s", self.path)
        return hash_file(self.path, self.reader, crypto)


IdentitySource = Union[HashSource, FileSource]


@dataclass
class SignResult:
    transaction_hash: str
    signatory: str
    signature: str
    confirmation: "asyncio.Future"     # resolves to the TransactionReceipt


class Document:
    """
    A document that can be verified and signed on a ledger.
    Verify first: it discovers existing signatures and positions the hash chain
    so the next sign() uses the first unused signature hash.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        source: Optional[IdentitySource] = None,
        crypto: Optional[CryptoProvider] = _DEFAULT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        confirmation_timeout: Optional[float] = None,
    ):
        self.ledger = ledger
        self.source = source
        self.crypto = default_provider() if crypto is _DEFAULT else crypto
        self.poll_interval = poll_interval
        self.confirmation_timeout = confirmation_timeout

        self._document_hash: Optional[bytes] = None
        self._encryption_key: Optional[bytes] = None
        self._hashes: Optional[HashChain] = None
        self._signatures: List[SignatureEvent] = []
        self._lock = asyncio.Lock()

        if isinstance(source, HashSource):
            self.set_document_hash(source.resolve(self.crypto))

    @classmethod
    def from_hash(cls, document_hash: Union[bytes, str], ledger: LedgerClient, **kwargs) -> "Document":
        return cls(ledger, HashSource(document_hash), **kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path], ledger: LedgerClient, reader: Optional[FileReader] = None, **kwargs) -> "Document":
        return cls(ledger, FileSource(Path(path), reader), **kwargs)

    @property
    def state(self) -> DocumentState:
        if self._document_hash is None:
            return DocumentState.UNIDENTIFIED
        if self._hashes is None:
            return DocumentState.IDENTIFIED
        return DocumentState.VERIFIED

    @property
    def document_hash(self) -> Optional[bytes]:
        return self._document_hash

    @property
    def hashes(self) -> Optional[HashChain]:
        return self._hashes

    @property
    def signatures(self) -> List[SignatureEvent]:
        return list(self._signatures)

    def set_document_hash(self, document_hash: Union[bytes, str]) -> None:
        if isinstance(document_hash, str):
            document_hash = hex2buf(document_hash)
        key = derive_key(document_hash)
        if self._document_hash is not None:
            if self._document_hash != document_hash:
                raise ValueError("Document hash is already set")
            return
        self._document_hash = bytes(document_hash)
        self._encryption_key = key

    def identify(self) -> bytes:
        """Resolve the identity source to a document hash, if not already done."""
        crypto = require_crypto(self.crypto)
        if self._document_hash is None:
            if self.source is None:
                raise DocumentNotIdentifiedError()
            self.set_document_hash(self.source.resolve(crypto))
        return self._document_hash

    async def _network(self) -> Network:
        return get_network(await self.ledger.chain_id())

    async def verify(self) -> List[SignatureEvent]:
        """Retrieve every signature of this document on the ledger's network."""
        crypto = require_crypto(self.crypto)
        document_hash = self.identify()
        logger.debug("verifying hash %s", buf2hex(document_hash))

        network = await self._network()
        result = await discover_signatures(document_hash, self._encryption_key, self.ledger, network, crypto)
        async with self._lock:
            self._hashes = result.hashes
            self._signatures = result.signatures
        return list(result.signatures)

    async def sign(self, data: Optional[SignatureData] = None) -> SignResult:
        """
        Publish the next signature hash with optional data. If publishing fails the
        signature hash is released so the next call retries it.
        """
        crypto = require_crypto(self.crypto)
        if self._hashes is None:
            raise NotVerifiedError()

        async with self._lock:
            hashes = self._hashes
            signature = buf2hex(hashes.next(1)[0])
            try:
                return await self._publish(signature, data, crypto)
            except BaseException:
                hashes.reset(hashes.current_index() - 1)
                raise

    async def _publish(self, signature: str, data: Optional[SignatureData], crypto: CryptoProvider) -> SignResult:
        network = await self._network()
        signatory = await self.ledger.selected_identity()
        encoded = encode_data_hex(data, self._encryption_key, crypto)

        logger.debug("publishing signature %s with data %s", signature, encoded)
        tx_hash = await self.ledger.send_transaction(RegistrationTransaction(
            to=network.contract_address,
            from_=signatory,
            signature=signature,
            data=encoded,
        ))

        confirmation = asyncio.ensure_future(wait_for_confirmation(
            self.ledger,
            tx_hash,
            initial_delay=network.block_time,
            interval=self.poll_interval,
            timeout=self.confirmation_timeout,
        ))
        return SignResult(tx_hash, signatory, signature, confirmation)
