"""Tests for frame building, parsing and single exchanges."""

import pytest

from dyplayer_mcp.errors import (
    ChecksumMismatch,
    PayloadTooLarge,
    TransportReadFailed,
    TransportWriteFailed,
)
from dyplayer_mcp.protocol.framing import (
    MARKER,
    Command,
    Response,
    build_frame,
    build_frame_with_checksum,
    parse_frame,
    send_and_receive,
    send_command,
)
from dyplayer_mcp.transport.base import Transport
from dyplayer_mcp.utils.checksum import checksum


def test_build_frame_layout():
    """Structure: AA [op] [len] [payload] [sum]"""
    frame = build_frame(0x13, b"\x1E")
    assert frame[0] == MARKER
    assert frame[1] == 0x13
    assert frame[2] == 0x01
    assert frame[3] == 0x1E
    assert frame[4] == checksum(frame[:4])
    assert frame == bytes.fromhex("AA 13 01 1E DC")


def test_build_frame_empty_payload():
    assert build_frame(0x02) == bytes.fromhex("AA 02 00 AC")


def test_build_frame_max_payload():
    frame = build_frame(0x08, bytes(255))
    assert len(frame) == 255 + 4
    assert frame[2] == 0xFF


def test_build_frame_payload_too_large():
    with pytest.raises(PayloadTooLarge):
        build_frame(0x08, bytes(256))


def test_build_frame_with_checksum_matches_computed():
    assert build_frame_with_checksum(0x02, b"", 0xAC) == build_frame(0x02)


def test_build_frame_with_checksum_does_not_verify():
    assert build_frame_with_checksum(0x02, b"", 0x00)[-1] == 0x00


def test_roundtrip_parse():
    parsed = parse_frame(build_frame(0x0C, b"\x01\x2C"))
    assert parsed.valid
    assert parsed.opcode == 0x0C
    assert parsed.payload == b"\x01\x2C"


def test_roundtrip_empty_payload():
    parsed = parse_frame(build_frame(0x02))
    assert parsed == Response(opcode=0x02, payload=b"", valid=True)


def test_every_single_byte_corruption_is_detected():
    frame = build_frame(0x07, b"\x00\x01")
    for index in range(len(frame)):
        for delta in (1, 0x80):
            corrupted = bytearray(frame)
            corrupted[index] = (corrupted[index] + delta) & 0xFF
            assert not parse_frame(bytes(corrupted)).valid, (index, delta)


def test_parse_short_frame():
    assert not parse_frame(b"\xAA\x01\x00").valid
    assert not parse_frame(b"").valid


def test_parse_truncated_payload():
    frame = build_frame(0x0C, b"\x00\x05")
    assert not parse_frame(frame[:-1]).valid


def test_parse_wrong_marker():
    frame = bytearray(build_frame(0x01, b"\x01"))
    frame[0] = 0xAB
    frame[-1] = checksum(frame[:-1])
    assert not parse_frame(bytes(frame)).valid


def test_invalid_response_has_empty_payload():
    assert Response.invalid().payload == b""
    assert repr(Response.invalid()) == "Response(invalid)"


def test_command_repr():
    r = repr(Command(opcode=0x13, payload=b"\x1E"))
    assert "0x13" in r
    assert "1e" in r


def test_send_command_writes_frame(make_transport):
    transport = make_transport()
    send_command(transport, build_frame(0x02))
    assert transport.written == [bytes.fromhex("AA 02 00 AC")]


def test_send_command_write_error(make_transport):
    with pytest.raises(TransportWriteFailed):
        send_command(make_transport(fail_write=True), build_frame(0x02))


def test_send_command_write_returning_false():
    class Refusing:
        def write(self, data):
            return False

    with pytest.raises(TransportWriteFailed):
        send_command(Refusing(), build_frame(0x02))


def test_send_and_receive(make_transport):
    reply = build_frame(0x01, b"\x01")
    transport = make_transport([reply])
    response = send_and_receive(transport, build_frame(0x01), len(reply))
    assert response.valid
    assert response.payload == b"\x01"
    assert transport.read_lengths == [5]


def test_send_and_receive_read_failure(make_transport):
    transport = make_transport(fail_read=True)
    with pytest.raises(TransportReadFailed):
        send_and_receive(transport, build_frame(0x01), 5)
    assert transport.written  # the command still went out


def test_send_and_receive_short_read(make_transport):
    transport = make_transport([b"\xAA\x01"])
    with pytest.raises(TransportReadFailed):
        send_and_receive(transport, build_frame(0x01), 5)


def test_send_and_receive_read_oserror():
    class Broken:
        def write(self, data):
            pass

        def read(self, buffer, length):
            raise OSError("device unplugged")

    with pytest.raises(TransportReadFailed):
        send_and_receive(Broken(), build_frame(0x01), 5)


def test_send_and_receive_bad_checksum(make_transport):
    reply = bytearray(build_frame(0x01, b"\x01"))
    reply[-1] ^= 0xFF
    transport = make_transport([bytes(reply)])
    with pytest.raises(ChecksumMismatch):
        send_and_receive(transport, build_frame(0x01), len(reply))


def test_exchange_helpers_take_a_transport(make_transport):
    """The exchange helpers are typed against the Transport capability."""
    assert send_command.__annotations__["transport"] == "Transport"
    assert send_and_receive.__annotations__["transport"] == "Transport"
    assert isinstance(make_transport(), Transport)
