# opensig/verify/discovery.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from opensig.chain.hashchain import HashChain
from opensig.core.abi import decode_log_data, topic_to_address
from opensig.core.codec import decode_data
from opensig.core.encoding import buf2hex
from opensig.core.types import LogEntry, SignatureData, SignatureEvent
from opensig.crypto.hashing import chain_seed as derive_chain_seed
from opensig.crypto.provider import CryptoProvider, default_provider
from opensig.network.client import LedgerClient
from opensig.network.networks import Network

logger = logging.getLogger(__name__)

MAX_SIGS_PER_DISCOVERY_ITERATION = 10


@dataclass
class DiscoveryResult:
    signatures: List[SignatureEvent] = field(default_factory=list)
    hashes: Optional[HashChain] = None
    batches: int = 0

    @property
    def last_index(self) -> int:
        return self.hashes.current_index() if self.hashes else -1


async def discover_signatures(
    document_hash: bytes,
    encryption_key: Optional[bytes],
    ledger: LedgerClient,
    network: Network,
    crypto: Optional[CryptoProvider] = None,
    batch_size: int = MAX_SIGS_PER_DISCOVERY_ITERATION,
) -> DiscoveryResult:
    """Find every signature published for a document on the given network."""
    crypto = crypto or default_provider()
    seed = derive_chain_seed(network.chain_id, document_hash, crypto)
    return await discover(seed, encryption_key, ledger, network, crypto, batch_size)


async def discover(
    chain_seed: bytes,
    encryption_key: Optional[bytes],
    ledger: LedgerClient,
    network: Network,
    crypto: Optional[CryptoProvider] = None,
    batch_size: int = MAX_SIGS_PER_DISCOVERY_ITERATION,
) -> DiscoveryResult:
    """
    Query the ledger batch by batch for the chain's signature hashes. Hashes are
    consumed in order, so the first batch with fewer than `batch_size` hits marks
    the end of the used prefix. The returned chain's cursor sits on the last used hash.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    hashes = HashChain(chain_seed, crypto)
    result = DiscoveryResult(hashes=hashes)
    seen: Set[str] = set()
    last_index = -1

    while True:
        batch = [buf2hex(h) for h in hashes.next(batch_size)]
        result.batches += 1
        logger.debug("querying the ledger for signatures: %s", batch)

        logs = await ledger.get_past_logs(network.contract_address, network.from_block, [None, None, batch])
        logger.debug("found %d event(s)", len(logs))

        hits = 0
        for log in logs:
            event = decode_signature_event(log, encryption_key, crypto)
            if event is None:
                continue
            if event.signature in seen:
                logger.warning("duplicate signature event for %s ignored", event.signature)
                continue
            index = hashes.index_of(event.signature)
            if index is None:
                logger.warning("ledger returned signature %s outside the queried chain", event.signature)
                continue
            seen.add(event.signature)
            result.signatures.append(event)
            hits += 1
            last_index = max(last_index, index)

        if hits < batch_size:
            break

    hashes.reset(last_index)
    return result


def decode_signature_event(
    log: LogEntry,
    encryption_key: Optional[bytes],
    crypto: Optional[CryptoProvider] = None,
) -> Optional[SignatureEvent]:
    """Decode a registry log. Malformed data yields an 'invalid' payload; None if unusable."""
    if len(log.topics) < 3:
        logger.warning("skipping log without signature topic: %s", log)
        return None

    signature = log.topics[2].lower()
    signatory = ""
    try:
        signatory = topic_to_address(log.topics[1])
        time, raw = decode_log_data(log.data)
    except ValueError as e:
        logger.warning("malformed signature log %s: %s", signature, e)
        return SignatureEvent(0, signatory, signature, SignatureData.invalid(f"malformed log data: {e}"),
                              log.block_number, log.transaction_hash, log.log_index)

    return SignatureEvent(
        time=time,
        signatory=signatory,
        signature=signature,
        data=decode_data(raw, encryption_key, crypto),
        block_number=log.block_number,
        transaction_hash=log.transaction_hash,
        log_index=log.log_index,
    )
