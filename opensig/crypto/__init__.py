# opensig/crypto/__init__.py
"""
Hashing, key derivation and authenticated encryption for signature data.
"""

from .provider import CryptoProvider, DefaultCryptoProvider, default_provider, require_crypto
from .hashing import chain_seed, hash_bytes, hash_file
from .encryption import decrypt, derive_key, encrypt

__all__ = [
    "CryptoProvider",
    "DefaultCryptoProvider",
    "default_provider",
    "require_crypto",
    "chain_seed",
    "hash_bytes",
    "hash_file",
    "decrypt",
    "derive_key",
    "encrypt",
]
