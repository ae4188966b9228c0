"""Tests for the opcode catalog and command builders."""

import pytest

from dyplayer_mcp.errors import InvalidArgument, OutOfRange
from dyplayer_mcp.models.player import Device
from dyplayer_mcp.protocol.commands import (
    COMMANDS,
    STATIC_FRAMES,
    Opcode,
    PayloadShape,
    ResponseShape,
    build_command,
    command_frame,
    encode_byte,
    encode_device,
    encode_number,
    encode_word,
    get_spec,
)
from dyplayer_mcp.protocol.framing import Command, build_frame, parse_frame


def test_opcode_values():
    """Key opcodes match the module manual."""
    assert Opcode.CHECK_PLAY_STATE == 0x01
    assert Opcode.PLAY == 0x02
    assert Opcode.PLAY_SPECIFIED == 0x07
    assert Opcode.PLAY_SPECIFIED_DEVICE_PATH == 0x08
    assert Opcode.SET_VOLUME == 0x13
    assert Opcode.SET_EQ == 0x1A
    assert Opcode.SELECT == 0x1F


def test_static_frames_match_computed_frames():
    for opcode, frame in STATIC_FRAMES.items():
        assert frame == build_frame(opcode), opcode.name


def test_every_payloadless_command_has_a_static_frame():
    for name, spec in COMMANDS.items():
        if spec.payload is PayloadShape.NONE:
            assert spec.opcode in STATIC_FRAMES, name


def test_response_lengths():
    assert ResponseShape.NONE.response_length == 0
    assert ResponseShape.BYTE.response_length == 5
    assert ResponseShape.WORD.response_length == 6


def test_query_commands_have_empty_payload():
    for name in (
        "check_device_online",
        "get_device",
        "sound_count",
        "get_playing_sound",
        "first_in_dir",
        "sound_count_dir",
        "check_play_state",
    ):
        spec = get_spec(name)
        assert spec.payload is PayloadShape.NONE
        assert spec.response is not ResponseShape.NONE


def test_encode_number_big_endian():
    assert encode_number(1) == b"\x00\x01"
    assert encode_number(0x1234) == b"\x12\x34"
    assert encode_number(65535) == b"\xFF\xFF"


def test_encode_number_bounds():
    with pytest.raises(InvalidArgument):
        encode_number(0)
    with pytest.raises(InvalidArgument):
        encode_number(65536)


def test_encode_word_allows_zero():
    assert encode_word(0) == b"\x00\x00"
    with pytest.raises(InvalidArgument):
        encode_word(-1)


def test_encode_device():
    assert encode_device(Device.SD) == b"\x01"
    assert encode_device(2) == b"\x02"
    with pytest.raises(InvalidArgument):
        encode_device(Device.FAIL)
    with pytest.raises(InvalidArgument):
        encode_device(3)


def test_build_play_specified():
    command = build_command("play_specified", 1)
    assert command == Command(opcode=Opcode.PLAY_SPECIFIED, payload=b"\x00\x01")
    assert command_frame(command) == bytes.fromhex("AA 07 02 00 01 B4")


def test_build_play_by_path_prepends_device():
    command = build_command("play_specified_device_path", Device.SD, "/SONGS1/FILE1.MP3")
    assert command.opcode == Opcode.PLAY_SPECIFIED_DEVICE_PATH
    assert command.payload == b"\x01/SONGS1*/FILE1*MP3"
    parsed = parse_frame(command_frame(command))
    assert parsed.valid
    assert parsed.payload == command.payload


def test_build_interlude_by_number():
    command = build_command("interlude_specified", Device.FLASH, 0x0102)
    assert command.payload == b"\x02\x01\x02"


def test_build_path_too_long():
    with pytest.raises(OutOfRange):
        build_command("interlude_specified_device_path", Device.USB, "/" + "A" * 40)


def test_build_set_volume_payload():
    assert build_command("set_volume", 30).payload == b"\x1E"


def test_build_command_wrong_arity():
    with pytest.raises(TypeError):
        build_command("play", 1)
    with pytest.raises(TypeError):
        build_command("play_specified")


def test_build_command_unknown_operation():
    with pytest.raises(ValueError):
        build_command("rewind")


def test_command_frame_uses_static_table():
    command = build_command("play")
    assert command_frame(command) is STATIC_FRAMES[Opcode.PLAY]


@pytest.mark.parametrize("value", [1.5, 29.0, "3", None])
def test_encoders_reject_non_integers(value):
    """Floats and strings are refused rather than truncated."""
    for encode in (encode_byte, encode_word, encode_number):
        with pytest.raises(InvalidArgument):
            encode(value)


def test_encoders_accept_int_enums():
    assert encode_byte(Device.FLASH) == b"\x02"
