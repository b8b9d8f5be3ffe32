# opensig/__init__.py
"""
OpenSig: private, timestamped document signatures on a public ledger.
Each signature is published under a one-time pseudonym drawn from a
deterministic hash chain, so only holders of the document can find it.
"""

from opensig.chain.document import Document, FileSource, HashSource, SignResult
from opensig.chain.hashchain import HashChain
from opensig.core.types import SignatureData, SignatureEvent
from opensig.verify.discovery import discover_signatures

__version__ = "0.1.0-dev"

__all__ = [
    "Document",
    "FileSource",
    "HashSource",
    "SignResult",
    "HashChain",
    "SignatureData",
    "SignatureEvent",
    "discover_signatures",
]
