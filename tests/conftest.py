"""Shared fixtures: an in-memory transport standing in for the UART."""

from __future__ import annotations

import pytest


class FakeTransport:
    """Records written frames and replays canned response frames."""

    def __init__(self, responses=(), fail_write=False, fail_read=False):
        self.responses = [bytes(r) for r in responses]
        self.fail_write = fail_write
        self.fail_read = fail_read
        self.written: list[bytes] = []
        self.read_lengths: list[int] = []

    def write(self, data: bytes) -> None:
        if self.fail_write:
            raise OSError("write failed")
        self.written.append(bytes(data))

    def read(self, buffer: bytearray, length: int) -> bool:
        self.read_lengths.append(length)
        if self.fail_read or not self.responses:
            return False
        data = self.responses.pop(0)
        if len(data) < length:
            buffer[: len(data)] = data
            return False
        buffer[:length] = data[:length]
        return True


@pytest.fixture
def make_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport
