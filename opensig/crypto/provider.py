# opensig/crypto/provider.py
"""
Crypto Provider capability: SHA-256, AES-GCM and secure random bytes.
"""

import hashlib
import os
from abc import ABC, abstractmethod
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from opensig.core.errors import CryptoUnavailableError, DecryptionError


class CryptoProvider(ABC):
    """Abstract base for the primitives the signature protocol relies on."""

    @abstractmethod
    def sha256(self, data: bytes) -> bytes:
        pass

    @abstractmethod
    def aead_encrypt(self, key: bytes, iv: bytes, plaintext: bytes) -> bytes:
        pass

    @abstractmethod
    def aead_decrypt(self, key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
        """Must raise DecryptionError if the authentication tag does not match."""

    @abstractmethod
    def random_bytes(self, n: int) -> bytes:
        pass


class DefaultCryptoProvider(CryptoProvider):
    """hashlib for digests, the `cryptography` package for AES-GCM."""

    def sha256(self, data: bytes) -> bytes:
        return hashlib.sha256(data).digest()

    def aead_encrypt(self, key: bytes, iv: bytes, plaintext: bytes) -> bytes:
        return AESGCM(key).encrypt(iv, plaintext, None)

    def aead_decrypt(self, key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
        try:
            return AESGCM(key).decrypt(iv, ciphertext, None)
        except InvalidTag as e:
            raise DecryptionError("authentication tag mismatch") from e
        except ValueError as e:
            raise DecryptionError(str(e)) from e

    def random_bytes(self, n: int) -> bytes:
        return os.urandom(n)


_default_provider = DefaultCryptoProvider()


def default_provider() -> CryptoProvider:
    return _default_provider


def require_crypto(crypto: Optional[CryptoProvider]) -> CryptoProvider:
    """Fail fast when no crypto capability has been supplied."""
    if crypto is None:
        raise CryptoUnavailableError()
    return crypto
