# opensig/crypto/encryption.py
from typing import Optional

from opensig.core.errors import DecryptionError
from opensig.crypto.provider import CryptoProvider, default_provider

IV_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32


def derive_key(document_hash: bytes) -> bytes:
    """The document hash is used directly as the AES-256-GCM key."""
    if len(document_hash) != KEY_LENGTH:
        raise ValueError(f"document hash must be {KEY_LENGTH} bytes, got {len(document_hash)}")
    return bytes(document_hash)


def encrypt(plaintext: bytes, key: bytes, crypto: Optional[CryptoProvider] = None) -> bytes:
    """Returns iv || ciphertext || tag with a fresh random 96-bit iv."""
    crypto = crypto or default_provider()
    iv = crypto.random_bytes(IV_LENGTH)
    return iv + crypto.aead_encrypt(key, iv, plaintext)


def decrypt(blob: bytes, key: bytes, crypto: Optional[CryptoProvider] = None) -> bytes:
    if len(blob) < IV_LENGTH + TAG_LENGTH:
        raise DecryptionError(f"ciphertext too short ({len(blob)} bytes)")
    crypto = crypto or default_provider()
    return crypto.aead_decrypt(key, blob[:IV_LENGTH], blob[IV_LENGTH:])
