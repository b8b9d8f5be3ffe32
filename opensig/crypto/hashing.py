# opensig/crypto/hashing.py
from pathlib import Path
from typing import Callable, Optional

from opensig.crypto.provider import CryptoProvider, default_provider

FileReader = Callable[[Path], bytes]


def hash_bytes(data: bytes, crypto: Optional[CryptoProvider] = None) -> bytes:
    """32-byte SHA-256 digest."""
    return (crypto or default_provider()).sha256(data)


def hash_file(
    path: str | Path,
    reader: Optional[FileReader] = None,
    crypto: Optional[CryptoProvider] = None,
) -> bytes:
    """Document hash of a file's contents."""
    read = reader or Path.read_bytes
    return hash_bytes(read(Path(path)), crypto)


def chain_id_bytes(chain_id: int) -> bytes:
    """
    One byte per decimal digit of the chain id, e.g. 137 -> b"\\x01\\x03\\x07".
    Matches the byte form existing OpenSig signatures were published with.
    """
    return bytes(int(c) for c in str(int(chain_id)))


def chain_seed(chain_id: int, document_hash: bytes, crypto: Optional[CryptoProvider] = None) -> bytes:
    """Network-specific root of a document's signature hash chain."""
    return hash_bytes(chain_id_bytes(chain_id) + document_hash, crypto)
