"""Host-side driver and MCP server for DY-series serial MP3 player modules."""

from .errors import (
    PlayerError,
    InvalidArgument,
    OutOfRange,
    PayloadTooLarge,
    TransportError,
    TransportWriteFailed,
    TransportReadFailed,
    ChecksumMismatch,
    ProtocolViolation,
)
from .models.player import Device, PlayMode, EqMode, PlayState, PlayDirSound
from .session import PlayerSession

__version__ = "0.1.0"
