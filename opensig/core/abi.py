# opensig/core/abi.py
"""
Minimal ABI helpers for the registry contract's signature event:

    event Signature(uint256 time, address indexed signer, bytes32 indexed signature, bytes data)

Indexed fields travel as topics, the rest as ABI-encoded log data.
"""

from typing import Tuple

from opensig.core.encoding import buf2hex, hex2buf

WORD = 32


def _word(value: int) -> bytes:
    return value.to_bytes(WORD, "big")


def encode_log_data(time: int, data: bytes) -> str:
    """ABI-encode (uint256 time, bytes data) as 0x-prefixed hex."""
    padding = (-len(data)) % WORD
    encoded = _word(time) + _word(2 * WORD) + _word(len(data)) + data + b"\x00" * padding
    return buf2hex(encoded)


def decode_log_data(log_data: str) -> Tuple[int, bytes]:
    """Decode (uint256 time, bytes data). Raises ValueError on malformed input."""
    raw = hex2buf(log_data)
    if len(raw) < 3 * WORD:
        raise ValueError(f"log data too short ({len(raw)} bytes)")
    time = int.from_bytes(raw[:WORD], "big")
    offset = int.from_bytes(raw[WORD:2 * WORD], "big")
    if offset + WORD > len(raw):
        raise ValueError(f"bytes offset {offset} out of range")
    length = int.from_bytes(raw[offset:offset + WORD], "big")
    start = offset + WORD
    if start + length > len(raw):
        raise ValueError(f"bytes length {length} out of range")
    return time, raw[start:start + length]


def address_to_topic(address: str) -> str:
    return buf2hex(hex2buf(address).rjust(WORD, b"\x00"))


def topic_to_address(topic: str) -> str:
    return buf2hex(hex2buf(topic)[-20:])
