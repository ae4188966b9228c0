"""Exceptions raised by the protocol layer and the player session."""

from __future__ import annotations


class PlayerError(Exception):
    """Base class for all player protocol errors."""


class InvalidArgument(PlayerError, ValueError):
    """A caller-supplied value is outside the protocol's range.

    Raised before any byte is written to the transport.
    """


class OutOfRange(InvalidArgument):
    """An encoded path does not fit the module's path budget."""


class PayloadTooLarge(InvalidArgument):
    """A frame payload does not fit the one-byte length field."""


class TransportError(PlayerError):
    """The transport reported a failure."""


class TransportWriteFailed(TransportError):
    """Writing a command frame to the transport failed."""


class TransportReadFailed(TransportError):
    """The transport did not deliver a complete response."""


class ChecksumMismatch(PlayerError):
    """A response frame failed validation."""


class ProtocolViolation(PlayerError):
    """A response is well-formed but its content is outside the protocol."""
