# opensig/core/encoding.py
import string

_HEX_DIGITS = set(string.hexdigits)


def buf2hex(data: bytes, prefix: bool = True) -> str:
    """Encode bytes to lowercase hex, 0x-prefixed by default."""
    return ("0x" if prefix else "") + data.hex()


def strip_0x(s: str) -> str:
    return s[2:] if s[:2] in ("0x", "0X") else s


def is_hex(s: str) -> bool:
    return all(c in _HEX_DIGITS for c in strip_0x(s))


def hex2buf(s: str) -> bytes:
    """Decode a hex string (with or without 0x) to bytes."""
    digits = strip_0x(s)
    if len(digits) % 2:
        digits = "0" + digits
    return bytes.fromhex(digits)


def str_to_utf16(s: str) -> bytes:
    """One 2-byte big-endian code unit per UTF-16 character."""
    return s.encode("utf-16-be", errors="surrogatepass")


def utf16_to_str(data: bytes) -> str:
    """Inverse of str_to_utf16. A trailing odd byte becomes its own character."""
    even = len(data) - (len(data) % 2)
    try:
        text = data[:even].decode("utf-16-be", errors="surrogatepass")
    except UnicodeDecodeError:
        text = "".join(chr(int.from_bytes(data[i:i + 2], "big")) for i in range(0, even, 2))
    if even != len(data):
        text += chr(data[-1])
    return text
