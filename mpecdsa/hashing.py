"""SHA-256 based hashing of integers and points, and hash commitments."""

from __future__ import annotations

import hashlib

from .arith import int_from_bytes, int_to_bytes
from .curve import Point


def hash_ints(*values: int) -> int:
    """SHA-256 over the big-endian encodings of ``values``, as an integer."""
    digest = hashlib.sha256()
    for value in values:
        digest.update(int_to_bytes(value))
    return int_from_bytes(digest.digest())


def hash_points(*points: Point) -> int:
    """SHA-256 over the uncompressed encodings of ``points``, as an integer."""
    digest = hashlib.sha256()
    for point in points:
        digest.update(point.to_bytes(False))
    return int_from_bytes(digest.digest())


def create_commitment(message: int, blinding: int) -> int:
    """Hash commitment to ``message`` with the given blinding factor."""
    return hash_ints(message, blinding)