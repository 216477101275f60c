# src/cache/hasher.py — v1
"""Video identity from file attributes (name, size, last-modified).

File content is never read: a content change that leaves all three
attributes untouched is not detected. The digest is a dedup heuristic for
cache keys, not an integrity check.
"""

from __future__ import annotations

import hashlib
import logging

from clipsight.core.errors import HashError
from clipsight.core.models import FileDescriptor, VideoIdentity

logger = logging.getLogger(__name__)


def identity_string(descriptor: FileDescriptor) -> str:
    """Canonical string hashed into the identity."""
    return f"{descriptor.name}-{descriptor.size}-{descriptor.last_modified}"


def hash_video(descriptor: FileDescriptor) -> VideoIdentity:
    """Derive a deterministic VideoIdentity from a file descriptor.

    Uses SHA-256 over the UTF-8 identity string. Names that cannot be
    encoded (e.g. lone surrogates from a foreign filesystem) fall back to a
    32-bit string hash over code points.

    Raises:
        HashError: If neither digest can be computed.
    """
    data = identity_string(descriptor)
    try:
        return VideoIdentity(digest=_sha256_digest(data), algorithm="sha256")
    except ValueError as e:
        logger.warning("SHA-256 digest unavailable, using fallback hash: %s", e)

    try:
        return VideoIdentity(digest=_string_hash(data), algorithm="string32")
    except (TypeError, ValueError) as e:
        raise HashError(f"Cannot hash video identity for {descriptor.name!r}") from e


def _sha256_digest(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _string_hash(data: str) -> str:
    """Shift-add string hash (h * 31 + c) wrapped to a signed 32-bit int."""
    h = 0
    for ch in data:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return format(abs(h), "x")
