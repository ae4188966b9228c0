"""Response parsing for query commands.

Each parser takes a valid ``Response`` and the opcode it answers, and
returns a typed value or raises ``ProtocolViolation``.
"""

from __future__ import annotations

from ..errors import ProtocolViolation
from ..models.player import Device, PlayState
from .framing import Response


def _check(response: Response, opcode: int, width: int) -> bytes:
    if response.opcode != opcode:
        raise ProtocolViolation(
            f"Expected response to opcode 0x{opcode:02X}, "
            f"got 0x{response.opcode:02X}"
        )
    if len(response.payload) != width:
        raise ProtocolViolation(
            f"Expected {width}-byte payload for opcode 0x{opcode:02X}, "
            f"got {len(response.payload)}"
        )
    return response.payload


def parse_device(response: Response, opcode: int) -> Device:
    """Parse a device query response."""
    value = _check(response, opcode, 1)[0]
    if value not in Device.selectable():
        raise ProtocolViolation(f"Unknown device byte 0x{value:02X}")
    return Device(value)


def parse_play_state(response: Response, opcode: int) -> PlayState:
    """Parse a play state response (0 stopped, 1 playing, 2 paused)."""
    value = _check(response, opcode, 1)[0]
    try:
        return PlayState(value)
    except ValueError:
        raise ProtocolViolation(f"Unknown play state byte 0x{value:02X}") from None


def parse_number(response: Response, opcode: int) -> int:
    """Parse a big-endian 16-bit count or sound number."""
    return int.from_bytes(_check(response, opcode, 2), "big")
