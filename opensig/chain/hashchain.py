# opensig/chain/hashchain.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from opensig.core.encoding import buf2hex, hex2buf, strip_0x
from opensig.crypto.provider import CryptoProvider, default_provider


@dataclass
class HashChain:
    """
    Deterministic sequence of signature hashes (pseudonyms) for a chain seed.

        hash[0] = sha256(seed)
        hash[i] = sha256(seed || hash[i-1])

    Hashes are computed only when requested and cached forever. The cursor
    points at the last consumed hash (-1 before any), independent of the cache.
    """
    seed: bytes
    crypto: Optional[CryptoProvider] = field(default=None, compare=False, repr=False)
    hashes: List[bytes] = field(default_factory=list)
    cursor: int = -1
    _index: Dict[str, int] = field(default_factory=dict, init=False, compare=False, repr=False)

    def __post_init__(self):
        if self.crypto is None:
            self.crypto = default_provider()
        self._index = {h.hex(): i for i, h in enumerate(self.hashes)}

    def __len__(self) -> int:
        return len(self.hashes)

    def _extend_to(self, index: int) -> None:
        while len(self.hashes) <= index:
            if self.hashes:
                h = self.crypto.sha256(self.seed + self.hashes[-1])
            else:
                h = self.crypto.sha256(self.seed)
            self._index[h.hex()] = len(self.hashes)
            self.hashes.append(h)

    def next(self, n: int = 1) -> List[bytes]:
        """Returns the next n hashes after the cursor and advances the cursor past them."""
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        start = self.cursor + 1
        self._extend_to(self.cursor + n)
        self.cursor += n
        return self.hashes[start:self.cursor + 1]

    def reset(self, index: int = 0) -> None:
        if index < -1:
            raise ValueError(f"cursor cannot move below -1, got {index}")
        self._extend_to(index)
        self.cursor = index

    def current_index(self) -> int:
        return self.cursor

    def current(self) -> Optional[bytes]:
        return self.hashes[self.cursor] if self.cursor >= 0 else None

    def index_at(self, i: int) -> Optional[bytes]:
        return self.hashes[i] if 0 <= i < len(self.hashes) else None

    def index_of(self, signature: str) -> Optional[int]:
        """Position of a hex-encoded hash in the cache, or None."""
        return self._index.get(strip_0x(signature).lower())

    def to_dict(self) -> dict:
        return {
            "seed": buf2hex(self.seed),
            "hashes": [buf2hex(h) for h in self.hashes],
            "cursor": self.cursor,
        }

    @classmethod
    def from_dict(cls, d: dict, crypto: Optional[CryptoProvider] = None) -> "HashChain":
        """Rebuild a chain from to_dict() output, rejecting any tampered cache entry."""
        chain = cls(hex2buf(d["seed"]), crypto)
        stored = [hex2buf(h) for h in d.get("hashes", [])]
        if stored:
            chain._extend_to(len(stored) - 1)
            for i, (computed, saved) in enumerate(zip(chain.hashes, stored)):
                if computed != saved:
                    raise ValueError(f"Hash chain broken at index {i}")
        chain.reset(d.get("cursor", -1))
        return chain
