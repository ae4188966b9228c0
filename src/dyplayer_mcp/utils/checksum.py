"""8-bit additive checksum used by DY-series player frames.

The module calls it a "CRC" in its manual but it is a plain sum of every
byte in the frame, truncated to 8 bits.
"""

from __future__ import annotations

from collections.abc import Iterable


def checksum(data: Iterable[int]) -> int:
    """Return the sum of *data* modulo 256."""
    return sum(data) & 0xFF


def validate_checksum(frame: bytes) -> bool:
    """Check that the last byte of *frame* is the checksum of the rest."""
    if len(frame) < 2:
        return False
    return checksum(frame[:-1]) == frame[-1]
