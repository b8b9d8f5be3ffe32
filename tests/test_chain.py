# tests/test_chain.py
import hashlib
import pytest

from opensig.chain.hashchain import HashChain
from opensig.core.encoding import buf2hex


class CountingProvider:
    """Wraps sha256 to count how many hashes get computed."""

    def __init__(self):
        self.calls = 0

    def sha256(self, data: bytes) -> bytes:
        self.calls += 1
        return hashlib.sha256(data).digest()


@pytest.fixture
def seed():
    return hashlib.sha256(b"seed").digest()


def test_chain_definition(seed):
    h0, h1, h2 = HashChain(seed).next(3)
    assert h0 == hashlib.sha256(seed).digest()
    assert h1 == hashlib.sha256(seed + h0).digest()
    assert h2 == hashlib.sha256(seed + h1).digest()


def test_deterministic(seed):
    assert HashChain(seed).next(25) == HashChain(seed).next(25)


def test_next_continues_after_cursor(seed):
    chain = HashChain(seed)
    first = chain.next(2)
    second = chain.next(3)
    assert chain.current_index() == 4
    assert first + second == HashChain(seed).next(5)


def test_starts_before_first_hash(seed):
    chain = HashChain(seed)
    assert chain.current_index() == -1
    assert chain.current() is None
    assert len(chain) == 0


def test_lazy_and_cached(seed):
    counter = CountingProvider()
    chain = HashChain(seed, counter)
    assert counter.calls == 0
    chain.next(10)
    assert counter.calls == 10
    chain.reset(-1)
    chain.next(10)
    assert counter.calls == 10
    chain.next(1)
    assert counter.calls == 11


def test_reset_keeps_cache(seed):
    chain = HashChain(seed)
    hashes = chain.next(10)
    chain.reset(3)
    assert len(chain) == 10
    assert chain.current() == hashes[3]
    assert chain.next(1) == [hashes[4]]


def test_reset_beyond_cache_extends(seed):
    chain = HashChain(seed)
    chain.reset(4)
    assert len(chain) == 5
    assert chain.next(1) == [HashChain(seed).next(6)[5]]


def test_reset_below_minus_one(seed):
    with pytest.raises(ValueError):
        HashChain(seed).reset(-2)


def test_next_requires_positive_count(seed):
    with pytest.raises(ValueError):
        HashChain(seed).next(0)


def test_index_of(seed):
    chain = HashChain(seed)
    hashes = chain.next(5)
    assert chain.index_of(buf2hex(hashes[3])) == 3
    assert chain.index_of(hashes[3].hex().upper()) == 3
    assert chain.index_of("0x" + "00" * 32) is None
    assert chain.index_at(2) == hashes[2]
    assert chain.index_at(5) is None


def test_serialise_and_resume(seed):
    chain = HashChain(seed)
    chain.next(7)
    chain.reset(4)

    restored = HashChain.from_dict(chain.to_dict())
    assert restored == chain
    assert restored.next(1) == chain.next(1)


def test_resume_rejects_tampered_cache(seed):
    chain = HashChain(seed)
    chain.next(3)
    state = chain.to_dict()
    state["hashes"][1] = "0x" + "00" * 32
    with pytest.raises(ValueError, match="broken at index 1"):
        HashChain.from_dict(state)
