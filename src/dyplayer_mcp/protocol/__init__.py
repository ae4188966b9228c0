"""Protocol layer: framing, checksum, path encoding, commands and responses."""

from .framing import Command, Response, build_frame, parse_frame
from .commands import Opcode, build_command, command_frame
from .paths import encode_path
