"""Host path to module path conversion.

The module addresses files by an escaped form of their absolute path:

- every ``.`` becomes ``*``;
- every ``/`` that closes a directory gets a ``*`` prefix, except the
  leading root slash.

So ``/SONGS1/FILE1.MP3`` is sent as ``/SONGS1*/FILE1*MP3``.

Paths may consist of up to two nested directories of 8 characters and a
file name of 8 characters plus a 4 character extension. Shorter names leave
room for deeper nesting; the encoded form must fit in 36 bytes.
"""

from __future__ import annotations

from ..errors import InvalidArgument, OutOfRange

MAX_PATH_LENGTH = 36


def encode_path(path: str) -> bytes:
    """Encode *path* for the play/interlude-by-path commands.

    Raises:
        InvalidArgument: If the path is empty or not ASCII.
        OutOfRange: If the encoded path is longer than 36 bytes.
    """
    if not path:
        raise InvalidArgument("Path must not be empty")
    if not path.isascii():
        raise InvalidArgument(f"Path must be ASCII, got {path!r}")

    encoded = []
    last = len(path) - 1
    for i, char in enumerate(path):
        if char == ".":
            encoded.append("*")
        elif char == "/" and 0 < i < last and path[i + 1] != "/":
            encoded.append("*/")
        else:
            encoded.append(char)

    result = "".join(encoded).encode("ascii")
    if len(result) > MAX_PATH_LENGTH:
        raise OutOfRange(
            f"Encoded path must be at most {MAX_PATH_LENGTH} bytes, "
            f"got {len(result)} for {path!r}"
        )
    return result
