"""Player enumerations.

Values are the raw bytes the module sends and expects on the wire.
"""

from __future__ import annotations

from enum import IntEnum


class Device(IntEnum):
    """Storage device the module plays from."""

    USB = 0
    SD = 1
    FLASH = 2
    FAIL = -1  # returned by get_device() when the module cannot be queried

    @classmethod
    def selectable(cls) -> tuple[Device, ...]:
        return (cls.USB, cls.SD, cls.FLASH)


class PlayMode(IntEnum):
    """Cycle (loop) modes."""

    REPEAT = 0          # play all sounds in sequence and repeat
    REPEAT_ONE = 1      # repeat the current sound
    ONE_OFF = 2         # play the sound and stop
    RANDOM = 3          # random sound from the device
    REPEAT_DIR = 4      # repeat the current directory
    RANDOM_DIR = 5      # random sound from the current directory
    SEQUENCE_DIR = 6    # current directory in sequence, then stop
    SEQUENCE = 7        # whole device in sequence, then stop


class EqMode(IntEnum):
    """Equalizer presets."""

    NORMAL = 0
    POP = 1
    ROCK = 2
    JAZZ = 3
    CLASSIC = 4


class PlayState(IntEnum):
    """Play state as reported by the check-play-state query."""

    STOPPED = 0
    PLAYING = 1
    PAUSED = 2


class PlayDirSound(IntEnum):
    """Which sound to start on when jumping to the previous directory."""

    FIRST_SOUND = 0
    LAST_SOUND = 1
