"""Frame builder, parser and single-exchange helpers.

Frame layout::

    +--------+--------+--------+------------------+----------+
    | Marker | Opcode | Length |     Payload      | Checksum |
    | 0xAA   | 1 byte | 1 byte |  ``Length`` bytes |  1 byte  |
    +--------+--------+--------+------------------+----------+

- Multi-byte payload integers are big-endian.
- Checksum: sum of every preceding byte (marker included), modulo 256.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import (
    ChecksumMismatch,
    PayloadTooLarge,
    TransportReadFailed,
    TransportWriteFailed,
)
from ..utils.checksum import checksum, validate_checksum

if TYPE_CHECKING:
    from ..transport.base import Transport

logger = logging.getLogger(__name__)

MARKER = 0xAA
HEADER_SIZE = 3  # marker + opcode + length
MIN_FRAME_SIZE = HEADER_SIZE + 1
MAX_PAYLOAD = 0xFF


@dataclass(frozen=True)
class Command:
    """An opcode and its encoded payload, ready to be framed."""

    opcode: int
    payload: bytes = b""

    def __repr__(self) -> str:
        return (
            f"Command(opcode=0x{self.opcode:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


@dataclass(frozen=True)
class Response:
    """A parsed response frame.

    When ``valid`` is false the payload is empty and carries no meaning.
    """

    opcode: int
    payload: bytes
    valid: bool

    @classmethod
    def invalid(cls) -> Response:
        return cls(opcode=0, payload=b"", valid=False)

    def __repr__(self) -> str:
        if not self.valid:
            return "Response(invalid)"
        return (
            f"Response(opcode=0x{self.opcode:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def _header(opcode: int, payload: bytes) -> bytes:
    if len(payload) > MAX_PAYLOAD:
        raise PayloadTooLarge(
            f"Payload must be at most {MAX_PAYLOAD} bytes, got {len(payload)}"
        )
    return bytes([MARKER, opcode, len(payload)]) + payload


def build_frame(opcode: int, payload: bytes = b"") -> bytes:
    """Build a complete frame for *opcode* with *payload*.

    Raises:
        PayloadTooLarge: If the payload does not fit the length byte.
    """
    body = _header(opcode, payload)
    return body + bytes([checksum(body)])


def build_frame_with_checksum(
    opcode: int, payload: bytes, precomputed: int
) -> bytes:
    """Build a frame using a checksum computed ahead of time.

    Only meant for constant commands; the checksum is not verified.
    """
    return _header(opcode, payload) + bytes([precomputed & 0xFF])


def parse_frame(data: bytes) -> Response:
    """Parse a response frame.

    Returns:
        A valid ``Response``, or ``Response.invalid()`` if the data is
        too short, lacks the marker, has an inconsistent length byte, or
        fails the checksum.
    """
    if len(data) < MIN_FRAME_SIZE:
        return Response.invalid()
    if data[0] != MARKER:
        return Response.invalid()

    length = data[2]
    if len(data) != HEADER_SIZE + length + 1:
        return Response.invalid()

    if not validate_checksum(data):
        return Response.invalid()

    return Response(
        opcode=data[1],
        payload=bytes(data[HEADER_SIZE:HEADER_SIZE + length]),
        valid=True,
    )


def send_command(transport: Transport, frame: bytes) -> None:
    """Write *frame* to *transport*.

    Raises:
        TransportWriteFailed: If the transport raises ``OSError`` or
            reports failure by returning ``False``.
    """
    logger.debug("TX %s", frame.hex(" "))
    try:
        result = transport.write(frame)
    except OSError as e:
        raise TransportWriteFailed(f"Write failed: {e}") from e
    if result is False:
        raise TransportWriteFailed("Transport rejected the write")


def send_and_receive(
    transport: Transport, frame: bytes, expected_length: int
) -> Response:
    """Write *frame* and read back a response of *expected_length* bytes.

    Each failure is reported separately; nothing is retried.

    Raises:
        TransportWriteFailed: The write failed.
        TransportReadFailed: The transport did not fill the buffer.
        ChecksumMismatch: The response did not validate.
    """
    send_command(transport, frame)

    buffer = bytearray(expected_length)
    try:
        ok = transport.read(buffer, expected_length)
    except OSError as e:
        raise TransportReadFailed(f"Read failed: {e}") from e
    if not ok:
        raise TransportReadFailed(
            f"Expected {expected_length} response bytes, read incomplete"
        )

    logger.debug("RX %s", buffer.hex(" "))
    response = parse_frame(bytes(buffer))
    if not response.valid:
        raise ChecksumMismatch(f"Invalid response frame: {buffer.hex(' ')}")
    return response
