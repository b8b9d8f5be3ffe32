# opensig/core/canon.py
from typing import Any, Iterable

try:
    import jcs
except ImportError:
    raise ImportError("Please install jcs: pip install jcs")

from opensig.core.types import SignatureEvent


def canonical_json(obj: Any) -> bytes:
    """
    Produce deterministic UTF-8 bytes according to RFC 8785 (JSON Canonicalization Scheme).
    Used for exported signature lists and persisted hash chain state.
    """
    return jcs.canonicalize(obj)


def canonical_json_str(obj: Any) -> str:
    return canonical_json(obj).decode("utf-8")


def signatures_json(events: Iterable[SignatureEvent], document_hash: str) -> str:
    """Canonical JSON document describing every signature found for a document."""
    return canonical_json_str({
        "document": document_hash,
        "signatures": [e.to_dict() for e in events],
    })
