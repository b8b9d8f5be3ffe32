# opensig/core/types.py
from dataclasses import dataclass, field, asdict
from typing import List, Literal, Optional, Union
from opensig.core.encoding import strip_0x

SIG_DATA_VERSION = "00"

DataType = Literal["none", "string", "hex", "invalid"]


@dataclass(frozen=True)
class SignatureData:
    """Optional payload attached to a signature (OpenSig data standard v0.1)."""
    type: DataType = "none"
    content: Optional[str] = None
    encrypted: bool = False
    version: Optional[str] = None           # "00" once encoded or decoded
    undecryptable: bool = False             # encrypted flag set but decryption failed

    @classmethod
    def none(cls) -> "SignatureData":
        return cls()

    @classmethod
    def string(cls, content: str, encrypted: bool = False) -> "SignatureData":
        return cls("string", content, encrypted, SIG_DATA_VERSION)

    @classmethod
    def hex(cls, content: str, encrypted: bool = False) -> "SignatureData":
        return cls("hex", "0x" + strip_0x(content).lower(), encrypted, SIG_DATA_VERSION)

    @classmethod
    def invalid(cls, reason: str, version: Optional[str] = None) -> "SignatureData":
        return cls("invalid", reason, False, version)

    @property
    def is_empty(self) -> bool:
        return self.type == "none" or not self.content or (self.type == "hex" and self.content == "0x")

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SignatureEvent:
    """A signature decoded from a registry contract log entry."""
    time: int                       # block timestamp, seconds since epoch
    signatory: str                  # 0x-prefixed address of the signer
    signature: str                  # 0x-prefixed pseudonym (hash chain entry)
    data: SignatureData = field(default_factory=SignatureData)
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    log_index: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LogEntry:
    """Raw event log as returned by a ledger client."""
    address: str
    topics: List[str]
    data: str                       # 0x-prefixed ABI-encoded non-indexed fields
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    log_index: Optional[int] = None


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: str
    block_number: int
    status: bool
    from_: str = ""
    to: str = ""


@dataclass(frozen=True)
class RegistrationTransaction:
    """A call to the registry contract's registerSignature(bytes32, bytes)."""
    to: str
    from_: str
    signature: str                  # 0x-prefixed 32-byte pseudonym
    data: str                       # 0x-prefixed encoded signature data


BlockTag = Union[int, Literal["earliest", "latest"]]
