# opensig/core/codec.py
"""
Signature data codec (OpenSig data standard v0.1).

    byte 0     version (0x00)
    byte 1     bit 7 = encrypted flag, low bits = type (0 = UTF-16 string, 1 = raw bytes)
    bytes 2..  content, or iv || ciphertext || tag when encrypted

An absent payload encodes to no bytes at all.
"""

import logging
from typing import Optional

from opensig.core.encoding import buf2hex, hex2buf, is_hex, str_to_utf16, utf16_to_str, strip_0x
from opensig.core.errors import DecryptionError
from opensig.core.types import SIG_DATA_VERSION, SignatureData
from opensig.crypto.encryption import decrypt, encrypt
from opensig.crypto.provider import CryptoProvider

logger = logging.getLogger(__name__)

SIG_DATA_ENCRYPTED_FLAG = 0x80
SIG_DATA_TYPE_STRING = 0
SIG_DATA_TYPE_BYTES = 1

MIN_ENCODED_LENGTH = 3


def encode_data(
    data: Optional[SignatureData],
    key: Optional[bytes],
    crypto: Optional[CryptoProvider] = None,
) -> bytes:
    if data is None or data.is_empty:
        return b""

    if data.type == "string":
        type_field = SIG_DATA_TYPE_STRING
        content = str_to_utf16(data.content)
    elif data.type == "hex":
        if not is_hex(data.content):
            raise ValueError(f"encode_data: content is not hex: {data.content!r}")
        if len(strip_0x(data.content)) % 2:
            raise ValueError(f"encode_data: odd-length hex content: {data.content!r}")
        type_field = SIG_DATA_TYPE_BYTES
        content = hex2buf(data.content)
    else:
        raise ValueError(f"encode_data: invalid type '{data.type}'")

    if data.encrypted:
        if key is None:
            raise ValueError("encode_data: encryption requested but no key available")
        type_field |= SIG_DATA_ENCRYPTED_FLAG
        content = encrypt(content, key, crypto)

    return bytes.fromhex(SIG_DATA_VERSION) + bytes([type_field]) + content


def decode_data(
    raw: bytes,
    key: Optional[bytes],
    crypto: Optional[CryptoProvider] = None,
) -> SignatureData:
    """Never raises: malformed or unreadable data is returned as data."""
    if not raw:
        return SignatureData.none()
    if len(raw) < MIN_ENCODED_LENGTH:
        return SignatureData.invalid(f"data is < {MIN_ENCODED_LENGTH} bytes")

    version = f"{raw[0]:02x}"
    type_field = raw[1]
    encrypted = bool(type_field & SIG_DATA_ENCRYPTED_FLAG)
    data_type = type_field & ~SIG_DATA_ENCRYPTED_FLAG
    content = raw[2:]
    undecryptable = False

    if encrypted:
        try:
            if key is None:
                raise DecryptionError("no encryption key")
            content = decrypt(content, key, crypto)
        except DecryptionError as e:
            logger.debug("failed to decrypt signature data: %s", e)
            content = b""
            undecryptable = True

    if data_type == SIG_DATA_TYPE_STRING:
        return SignatureData("string", utf16_to_str(content), encrypted, version, undecryptable)
    if data_type == SIG_DATA_TYPE_BYTES:
        return SignatureData("hex", buf2hex(content), encrypted, version, undecryptable)
    return SignatureData.invalid(f"unrecognised type: {data_type} (version={version})", version)


def encode_data_hex(data: Optional[SignatureData], key: Optional[bytes], crypto: Optional[CryptoProvider] = None) -> str:
    return buf2hex(encode_data(data, key, crypto))


def decode_data_hex(encoded: str, key: Optional[bytes], crypto: Optional[CryptoProvider] = None) -> SignatureData:
    if not is_hex(encoded):
        return SignatureData.invalid("data is not hex")
    return decode_data(hex2buf(encoded) if strip_0x(encoded) else b"", key, crypto)
