"""Transport capability consumed by the player session."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Anything that can write frames to and read frames from the module.

    ``write`` signals failure by raising ``OSError`` (or returning
    ``False``). ``read`` fills the first *length* bytes of *buffer* and
    returns ``True`` only if all of them arrived.
    """

    def write(self, data: bytes) -> None:
        ...

    def read(self, buffer: bytearray, length: int) -> bool:
        ...
