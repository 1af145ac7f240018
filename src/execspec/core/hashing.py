"""
Deterministic hashing for stored execution specs.

The recurring-run bookkeeping compares the template it stored last time with
the one it is about to submit. Comparing a short content hash of the
canonical JSON form is cheaper to store and index than the full document.

Examples:
    >>> compute_hash("a", "b") == compute_hash("a", "b")
    True
    >>> compute_hash("a", "b") != compute_hash("b", "a")
    True

Tags:
    hashing, deduplication, execspec
"""

import hashlib
from typing import Any


def compute_hash(*values: Any, length: int = 32) -> str:
    """
    Compute a deterministic hash from values.

    Values are stringified and joined with ``|`` before SHA-256, so the
    result depends on order.

    Args:
        *values: Values to hash (converted to strings)
        length: Hex digest length (default 32 = 128 bits)

    Returns:
        Hex string of the requested length
    """
    content = "|".join(str(v) for v in values)
    return hashlib.sha256(content.encode()).hexdigest()[:length]


def compute_document_hash(canonical: str, length: int = 32) -> str:
    """Hash a canonical serialized document (already deterministic)."""
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:length]
