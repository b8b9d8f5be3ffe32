# tests/test_discovery.py
import pytest

from opensig.chain.hashchain import HashChain
from opensig.core.codec import encode_data
from opensig.core.encoding import buf2hex
from opensig.core.types import SignatureData
from opensig.crypto.hashing import chain_seed
from opensig.network.networks import LOCAL_NETWORK
from opensig.verify.discovery import decode_signature_event, discover, discover_signatures
from conftest import FakeLedger


def publish(ledger, document_hash, count, data=None, start=0):
    """Register the first `count` signature hashes of a document directly on the fake ledger."""
    chain = HashChain(chain_seed(LOCAL_NETWORK.chain_id, document_hash))
    hashes = [buf2hex(h) for h in chain.next(start + count)]
    for h in hashes[start:]:
        ledger.add_log(h, encode_data(data, document_hash))
    return hashes


@pytest.mark.asyncio
async def test_unsigned_document(fake_ledger, document_hash):
    result = await discover_signatures(document_hash, document_hash, fake_ledger, LOCAL_NETWORK)
    assert result.signatures == []
    assert result.last_index == -1
    assert result.batches == 1


@pytest.mark.asyncio
async def test_thirteen_signatures_take_two_batches(fake_ledger, document_hash):
    hashes = publish(fake_ledger, document_hash, 13)
    result = await discover_signatures(document_hash, document_hash, fake_ledger, LOCAL_NETWORK)

    assert len(fake_ledger.log_queries) == 2
    assert fake_ledger.log_queries[0] == hashes[:10]
    assert len(fake_ledger.log_queries[1]) == 10
    assert [e.signature for e in result.signatures] == hashes
    assert result.last_index == 12


@pytest.mark.asyncio
async def test_full_batch_triggers_another_query(fake_ledger, document_hash):
    publish(fake_ledger, document_hash, 10)
    result = await discover_signatures(document_hash, document_hash, fake_ledger, LOCAL_NETWORK)
    assert result.batches == 2
    assert result.last_index == 9


@pytest.mark.asyncio
async def test_cursor_positions_next_signature(fake_ledger, document_hash):
    hashes = publish(fake_ledger, document_hash, 3)
    result = await discover_signatures(document_hash, document_hash, fake_ledger, LOCAL_NETWORK)
    assert result.hashes.current_index() == 2
    assert buf2hex(result.hashes.next(1)[0]) not in hashes


@pytest.mark.asyncio
async def test_events_in_ledger_order(fake_ledger, document_hash):
    chain = HashChain(chain_seed(LOCAL_NETWORK.chain_id, document_hash))
    h0, h1, h2 = [buf2hex(h) for h in chain.next(3)]
    for h in (h2, h0, h1):
        fake_ledger.add_log(h)

    result = await discover_signatures(document_hash, document_hash, fake_ledger, LOCAL_NETWORK)
    assert [e.signature for e in result.signatures] == [h2, h0, h1]
    assert result.last_index == 2


@pytest.mark.asyncio
async def test_duplicate_signature_reported_once(fake_ledger, document_hash):
    hashes = publish(fake_ledger, document_hash, 2)
    fake_ledger.add_log(hashes[1])

    result = await discover_signatures(document_hash, document_hash, fake_ledger, LOCAL_NETWORK)
    assert [e.signature for e in result.signatures] == hashes


@pytest.mark.asyncio
async def test_decodes_payloads(fake_ledger, document_hash):
    publish(fake_ledger, document_hash, 1, SignatureData.string("v1"))
    publish(fake_ledger, document_hash, 1, SignatureData.hex("0xdeadbeef", encrypted=True), start=1)

    result = await discover_signatures(document_hash, document_hash, fake_ledger, LOCAL_NETWORK)
    assert result.signatures[0].data == SignatureData.string("v1")
    assert result.signatures[1].data == SignatureData.hex("0xdeadbeef", encrypted=True)
    assert result.signatures[0].signatory == "0x00000000000000000000000000000000000000aa"


@pytest.mark.asyncio
async def test_unreadable_without_key(fake_ledger, document_hash):
    publish(fake_ledger, document_hash, 1, SignatureData.string("secret", encrypted=True))
    result = await discover_signatures(document_hash, None, fake_ledger, LOCAL_NETWORK)
    assert result.signatures[0].data.content == ""
    assert result.signatures[0].data.undecryptable


@pytest.mark.asyncio
async def test_malformed_log_does_not_raise(fake_ledger, document_hash):
    hashes = publish(fake_ledger, document_hash, 1)
    chain = HashChain(chain_seed(LOCAL_NETWORK.chain_id, document_hash))
    second = buf2hex(chain.next(2)[1])
    fake_ledger.add_log(second, data="0x1234")

    result = await discover_signatures(document_hash, document_hash, fake_ledger, LOCAL_NETWORK)
    assert [e.signature for e in result.signatures] == [hashes[0], second]
    assert result.signatures[1].data.type == "invalid"
    assert result.last_index == 1


def test_log_without_signature_topic_skipped(fake_ledger):
    log = fake_ledger.add_log("0x" + "11" * 32)
    truncated = type(log)(log.address, log.topics[:2], log.data)
    assert decode_signature_event(truncated, None) is None


@pytest.mark.asyncio
async def test_other_networks_see_nothing(fake_ledger, document_hash):
    publish(fake_ledger, document_hash, 3)
    other = type(LOCAL_NETWORK)(chain_id=137, name="other", contract_address=LOCAL_NETWORK.contract_address)

    result = await discover_signatures(document_hash, document_hash, fake_ledger, other)
    assert result.signatures == []


@pytest.mark.asyncio
async def test_discover_with_explicit_seed(fake_ledger, document_hash):
    publish(fake_ledger, document_hash, 4)
    seed = chain_seed(LOCAL_NETWORK.chain_id, document_hash)
    result = await discover(seed, document_hash, fake_ledger, LOCAL_NETWORK, batch_size=3)
    assert result.batches == 2
    assert result.last_index == 3


@pytest.mark.asyncio
async def test_batch_size_must_be_positive(fake_ledger, document_hash):
    with pytest.raises(ValueError):
        await discover(document_hash, None, fake_ledger, LOCAL_NETWORK, batch_size=0)


class UnfilteredLedger(FakeLedger):
    """Returns every registry log regardless of the requested signature topics."""

    async def get_past_logs(self, address, from_block, topics):
        self.log_queries.append(list(topics[2]))
        return [log for log in self.logs if log.address == address]


@pytest.mark.asyncio
async def test_foreign_logs_are_not_reported(document_hash):
    ledger = UnfilteredLedger()
    ledger.add_log("0x" + "ab" * 32)
    hashes = publish(ledger, document_hash, 2)

    result = await discover_signatures(document_hash, document_hash, ledger, LOCAL_NETWORK)
    assert [e.signature for e in result.signatures] == hashes
    assert result.last_index == 1
