"""Opcode catalog and command builders.

Every operation is described by a ``CommandSpec``: the opcode, the shape of
its payload and the shape of the response the module sends back (if any).
Payload-less commands never change, so their frames are precomputed in
``STATIC_FRAMES``.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum, IntEnum

from ..errors import InvalidArgument
from ..models.player import Device
from .framing import (
    HEADER_SIZE,
    Command,
    build_frame,
    build_frame_with_checksum,
)
from .paths import encode_path


class Opcode(IntEnum):
    """Command identifiers, echoed by the module in its responses."""

    CHECK_PLAY_STATE = 0x01
    PLAY = 0x02
    PAUSE = 0x03
    STOP = 0x04
    PREVIOUS = 0x05
    NEXT = 0x06
    PLAY_SPECIFIED = 0x07
    PLAY_SPECIFIED_DEVICE_PATH = 0x08
    GET_DEVICE = 0x09
    SET_DEVICE = 0x0B
    SOUND_COUNT = 0x0C
    GET_PLAYING_SOUND = 0x0D
    PREVIOUS_DIR_LAST_SOUND = 0x0E
    PREVIOUS_DIR_FIRST_SOUND = 0x0F
    STOP_INTERLUDE = 0x10
    FIRST_IN_DIR = 0x11
    SOUND_COUNT_DIR = 0x12
    SET_VOLUME = 0x13
    VOLUME_INCREASE = 0x14
    VOLUME_DECREASE = 0x15
    INTERLUDE_SPECIFIED = 0x16
    INTERLUDE_SPECIFIED_DEVICE_PATH = 0x17
    SET_CYCLE_MODE = 0x18
    SET_CYCLE_TIMES = 0x19
    SET_EQ = 0x1A
    SELECT = 0x1F


class PayloadShape(Enum):
    """How the arguments of an operation are laid out in the payload."""

    NONE = "none"
    BYTE = "byte"                      # one unsigned byte
    WORD = "word"                      # u16 big-endian, 0-65535
    NUMBER = "number"                  # sound number, u16 big-endian, 1-65535
    DEVICE = "device"                  # device byte
    DEVICE_NUMBER = "device_number"    # device byte + sound number
    DEVICE_PATH = "device_path"        # device byte + encoded path

    @property
    def arity(self) -> int:
        if self is PayloadShape.NONE:
            return 0
        if self in (PayloadShape.DEVICE_NUMBER, PayloadShape.DEVICE_PATH):
            return 2
        return 1


class ResponseShape(Enum):
    """Payload width of the module's reply."""

    NONE = 0
    BYTE = 1
    WORD = 2

    @property
    def response_length(self) -> int:
        """Full frame length to read, or 0 if the module does not reply."""
        if self is ResponseShape.NONE:
            return 0
        return HEADER_SIZE + self.value + 1


@dataclass(frozen=True)
class CommandSpec:
    """Static description of one operation."""

    opcode: Opcode
    payload: PayloadShape = PayloadShape.NONE
    response: ResponseShape = ResponseShape.NONE


COMMANDS: dict[str, CommandSpec] = {
    # playback
    "play": CommandSpec(Opcode.PLAY),
    "pause": CommandSpec(Opcode.PAUSE),
    "stop": CommandSpec(Opcode.STOP),
    "previous": CommandSpec(Opcode.PREVIOUS),
    "next": CommandSpec(Opcode.NEXT),
    "play_specified": CommandSpec(Opcode.PLAY_SPECIFIED, PayloadShape.NUMBER),
    "play_specified_device_path": CommandSpec(
        Opcode.PLAY_SPECIFIED_DEVICE_PATH, PayloadShape.DEVICE_PATH
    ),
    "select": CommandSpec(Opcode.SELECT, PayloadShape.NUMBER),
    # device
    "get_device": CommandSpec(Opcode.GET_DEVICE, response=ResponseShape.BYTE),
    "check_device_online": CommandSpec(
        Opcode.GET_DEVICE, response=ResponseShape.BYTE
    ),
    "set_device": CommandSpec(Opcode.SET_DEVICE, PayloadShape.DEVICE),
    # volume, equalizer, cycle mode
    "set_volume": CommandSpec(Opcode.SET_VOLUME, PayloadShape.BYTE),
    "volume_increase": CommandSpec(Opcode.VOLUME_INCREASE),
    "volume_decrease": CommandSpec(Opcode.VOLUME_DECREASE),
    "set_eq": CommandSpec(Opcode.SET_EQ, PayloadShape.BYTE),
    "set_cycle_mode": CommandSpec(Opcode.SET_CYCLE_MODE, PayloadShape.BYTE),
    "set_cycle_times": CommandSpec(Opcode.SET_CYCLE_TIMES, PayloadShape.WORD),
    # directories and interludes
    "previous_dir_first_sound": CommandSpec(Opcode.PREVIOUS_DIR_FIRST_SOUND),
    "previous_dir_last_sound": CommandSpec(Opcode.PREVIOUS_DIR_LAST_SOUND),
    "first_in_dir": CommandSpec(
        Opcode.FIRST_IN_DIR, response=ResponseShape.WORD
    ),
    "sound_count_dir": CommandSpec(
        Opcode.SOUND_COUNT_DIR, response=ResponseShape.WORD
    ),
    "interlude_specified": CommandSpec(
        Opcode.INTERLUDE_SPECIFIED, PayloadShape.DEVICE_NUMBER
    ),
    "interlude_specified_device_path": CommandSpec(
        Opcode.INTERLUDE_SPECIFIED_DEVICE_PATH, PayloadShape.DEVICE_PATH
    ),
    "stop_interlude": CommandSpec(Opcode.STOP_INTERLUDE),
    # queries
    "sound_count": CommandSpec(Opcode.SOUND_COUNT, response=ResponseShape.WORD),
    "get_playing_sound": CommandSpec(
        Opcode.GET_PLAYING_SOUND, response=ResponseShape.WORD
    ),
    "check_play_state": CommandSpec(
        Opcode.CHECK_PLAY_STATE, response=ResponseShape.BYTE
    ),
}


def _static(opcode: Opcode, precomputed: int) -> bytes:
    return build_frame_with_checksum(opcode, b"", precomputed)


# Frames for payload-less commands: AA <op> 00 <0xAA + op>.
STATIC_FRAMES: dict[Opcode, bytes] = {
    Opcode.CHECK_PLAY_STATE: _static(Opcode.CHECK_PLAY_STATE, 0xAB),
    Opcode.PLAY: _static(Opcode.PLAY, 0xAC),
    Opcode.PAUSE: _static(Opcode.PAUSE, 0xAD),
    Opcode.STOP: _static(Opcode.STOP, 0xAE),
    Opcode.PREVIOUS: _static(Opcode.PREVIOUS, 0xAF),
    Opcode.NEXT: _static(Opcode.NEXT, 0xB0),
    Opcode.GET_DEVICE: _static(Opcode.GET_DEVICE, 0xB3),
    Opcode.SOUND_COUNT: _static(Opcode.SOUND_COUNT, 0xB6),
    Opcode.GET_PLAYING_SOUND: _static(Opcode.GET_PLAYING_SOUND, 0xB7),
    Opcode.PREVIOUS_DIR_LAST_SOUND: _static(Opcode.PREVIOUS_DIR_LAST_SOUND, 0xB8),
    Opcode.PREVIOUS_DIR_FIRST_SOUND: _static(Opcode.PREVIOUS_DIR_FIRST_SOUND, 0xB9),
    Opcode.STOP_INTERLUDE: _static(Opcode.STOP_INTERLUDE, 0xBA),
    Opcode.FIRST_IN_DIR: _static(Opcode.FIRST_IN_DIR, 0xBB),
    Opcode.SOUND_COUNT_DIR: _static(Opcode.SOUND_COUNT_DIR, 0xBC),
    Opcode.VOLUME_INCREASE: _static(Opcode.VOLUME_INCREASE, 0xBE),
    Opcode.VOLUME_DECREASE: _static(Opcode.VOLUME_DECREASE, 0xBF),
}


def as_integer(value, what: str = "Value") -> int:
    """Return *value* as an int, rejecting floats, strings and other non-integers."""
    try:
        return operator.index(value)
    except TypeError:
        raise InvalidArgument(f"{what} must be an integer, got {value!r}") from None


def encode_byte(value: int) -> bytes:
    """Encode a single unsigned byte."""
    value = as_integer(value)
    if not 0 <= value <= 0xFF:
        raise InvalidArgument(f"Byte value must be 0-255, got {value}")
    return bytes([value])


def encode_word(value: int) -> bytes:
    """Encode an unsigned 16-bit value, big-endian."""
    value = as_integer(value)
    if not 0 <= value <= 0xFFFF:
        raise InvalidArgument(f"Value must be 0-65535, got {value}")
    return value.to_bytes(2, "big")


def encode_number(number: int) -> bytes:
    """Encode a sound number (``1`` for ``00001.mp3``), big-endian.

    Zero is reserved by the module.
    """
    number = as_integer(number, "Sound number")
    if not 1 <= number <= 0xFFFF:
        raise InvalidArgument(f"Sound number must be 1-65535, got {number}")
    return number.to_bytes(2, "big")


def encode_device(device: Device | int) -> bytes:
    """Encode a selectable storage device."""
    if device not in Device.selectable():
        raise InvalidArgument(
            f"Device must be one of USB, SD, FLASH, got {device!r}"
        )
    return bytes([int(device)])


def _encode_payload(shape: PayloadShape, args: tuple) -> bytes:
    if shape is PayloadShape.NONE:
        return b""
    if shape is PayloadShape.BYTE:
        return encode_byte(args[0])
    if shape is PayloadShape.WORD:
        return encode_word(args[0])
    if shape is PayloadShape.NUMBER:
        return encode_number(args[0])
    if shape is PayloadShape.DEVICE:
        return encode_device(args[0])
    if shape is PayloadShape.DEVICE_NUMBER:
        return encode_device(args[0]) + encode_number(args[1])
    if shape is PayloadShape.DEVICE_PATH:
        return encode_device(args[0]) + encode_path(args[1])
    raise ValueError(f"Unhandled payload shape {shape}")


def get_spec(name: str) -> CommandSpec:
    """Look up the ``CommandSpec`` for an operation name."""
    try:
        return COMMANDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown operation '{name}'. Valid: {list(COMMANDS)}"
        ) from None


def build_command(name: str, *args) -> Command:
    """Build the ``Command`` for operation *name* with its arguments.

    Raises:
        ValueError: If the operation is unknown.
        TypeError: If the wrong number of arguments is given.
        InvalidArgument: If an argument cannot be encoded.
    """
    spec = get_spec(name)
    if len(args) != spec.payload.arity:
        raise TypeError(
            f"{name} takes {spec.payload.arity} argument(s), got {len(args)}"
        )
    return Command(opcode=spec.opcode, payload=_encode_payload(spec.payload, args))


def command_frame(command: Command) -> bytes:
    """Return the wire frame for *command*, using the static table if possible."""
    if not command.payload and command.opcode in STATIC_FRAMES:
        return STATIC_FRAMES[command.opcode]
    return build_frame(command.opcode, command.payload)
