"""Player session: the public operation surface of the module.

Each operation validates its arguments, builds the command, performs one
exchange over the injected transport and maps the reply to a typed result.
Sessions do not lock; callers sharing a transport across threads must
serialize calls themselves.
"""

from __future__ import annotations

import logging

from .errors import InvalidArgument, PlayerError
from .models.player import Device, EqMode, PlayDirSound, PlayMode, PlayState
from .protocol.commands import (
    ResponseShape,
    as_integer,
    build_command,
    command_frame,
    get_spec,
)
from .protocol.framing import Response, send_and_receive, send_command
from .protocol.parser import parse_device, parse_number, parse_play_state
from .transport.base import Transport

logger = logging.getLogger(__name__)

MIN_VOLUME = 0
MAX_VOLUME = 30
DEFAULT_VOLUME = 20  # module power-on volume
MAX_CYCLE_TIMES = 0xFFFF


def _as_enum(enum_cls, value, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(m.name for m in enum_cls)
        raise InvalidArgument(f"{what} must be one of {valid}, got {value!r}") from None


class PlayerSession:
    """Synchronous command/response session with a player module.

    The transport is borrowed, not owned: the session never opens or
    closes it.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    @property
    def transport(self) -> Transport:
        return self._transport

    # ─── exchange helpers ────────────────────────────────────────────

    def _send(self, name: str, *args) -> None:
        command = build_command(name, *args)
        logger.debug("%s -> %r", name, command)
        send_command(self._transport, command_frame(command))

    def _query(self, name: str) -> Response:
        spec = get_spec(name)
        command = build_command(name)
        logger.debug("%s -> %r", name, command)
        return send_and_receive(
            self._transport,
            command_frame(command),
            spec.response.response_length,
        )

    def _query_number(self, name: str) -> int:
        spec = get_spec(name)
        if spec.response is not ResponseShape.WORD:
            raise ValueError(f"{name} does not return a number")
        return parse_number(self._query(name), spec.opcode)

    # ─── playback ────────────────────────────────────────────────────

    def play(self) -> None:
        """Play the currently selected sound from the start."""
        self._send("play")

    def pause(self) -> None:
        self._send("pause")

    def stop(self) -> None:
        self._send("stop")

    def next(self) -> None:
        self._send("next")

    def previous(self) -> None:
        self._send("previous")

    def play_specified(self, number: int) -> None:
        """Play a sound by number, e.g. ``1`` for ``00001.mp3``."""
        self._send("play_specified", number)

    def play_specified_device_path(self, device: Device, path: str) -> None:
        """Play a sound by device and absolute path, e.g. ``/SONGS/01.MP3``."""
        self._send("play_specified_device_path", device, path)

    def select(self, number: int) -> None:
        """Select a sound by number without playing it."""
        self._send("select", number)

    # ─── device ──────────────────────────────────────────────────────

    def get_device(self) -> Device:
        """Return the storage device the module is using.

        Never raises for module or transport failures: any failed exchange
        yields ``Device.FAIL``.
        """
        spec = get_spec("get_device")
        try:
            return parse_device(self._query("get_device"), spec.opcode)
        except PlayerError as e:
            logger.warning("Device query failed: %s", e)
            return Device.FAIL

    def check_device_online(self) -> bool:
        """Return True if the module answers the device query."""
        return self.get_device() != Device.FAIL

    def set_device(self, device: Device) -> None:
        """Switch storage device.

        The module gives no acknowledgement; use ``get_device()`` to check.
        """
        self._send("set_device", device)

    # ─── volume, equalizer, cycle mode ───────────────────────────────

    def set_volume(self, volume: int) -> None:
        """Set the volume, 0-30."""
        volume = as_integer(volume, "Volume")
        if not MIN_VOLUME <= volume <= MAX_VOLUME:
            raise InvalidArgument(
                f"Volume must be {MIN_VOLUME}-{MAX_VOLUME}, got {volume}"
            )
        self._send("set_volume", volume)

    def volume_increase(self) -> None:
        self._send("volume_increase")

    def volume_decrease(self) -> None:
        self._send("volume_decrease")

    def set_eq(self, eq: EqMode) -> None:
        self._send("set_eq", _as_enum(EqMode, eq, "EQ"))

    def set_cycle_mode(self, mode: PlayMode) -> None:
        self._send("set_cycle_mode", _as_enum(PlayMode, mode, "Cycle mode"))

    def set_cycle_times(self, cycles: int) -> None:
        """Set how many times to cycle in the repeat modes (REPEAT,
        REPEAT_ONE, REPEAT_DIR)."""
        cycles = as_integer(cycles, "Cycle times")
        if not 0 <= cycles <= MAX_CYCLE_TIMES:
            raise InvalidArgument(
                f"Cycle times must be 0-{MAX_CYCLE_TIMES}, got {cycles}"
            )
        self._send("set_cycle_times", cycles)

    # ─── directories ─────────────────────────────────────────────────

    def previous_dir(self, song: PlayDirSound = PlayDirSound.FIRST_SOUND) -> None:
        """Select the previous directory and play its first or last sound."""
        song = _as_enum(PlayDirSound, song, "Directory sound")
        if song is PlayDirSound.FIRST_SOUND:
            self._send("previous_dir_first_sound")
        else:
            self._send("previous_dir_last_sound")

    def first_in_dir(self) -> int:
        """Return the number of the first sound in the current directory."""
        return self._query_number("first_in_dir")

    def sound_count_dir(self) -> int:
        """Return the number of sounds in the current directory,
        excluding subdirectories."""
        return self._query_number("sound_count_dir")

    # ─── interludes ──────────────────────────────────────────────────

    def interlude_specified(self, device: Device, number: int) -> None:
        """Interrupt playback with a sound by device and number.

        Interludes do not nest: a new one replaces the current one, and
        playback resumes where the first interlude broke in.
        """
        self._send("interlude_specified", device, number)

    def interlude_specified_device_path(self, device: Device, path: str) -> None:
        """Interrupt playback with a sound by device and path."""
        self._send("interlude_specified_device_path", device, path)

    def stop_interlude(self) -> None:
        """Stop the interlude and resume playback."""
        self._send("stop_interlude")

    # ─── queries ─────────────────────────────────────────────────────

    def sound_count(self) -> int:
        """Return the number of sounds on the current device."""
        return self._query_number("sound_count")

    def get_playing_sound(self) -> int:
        """Return the number of the sound currently playing."""
        return self._query_number("get_playing_sound")

    def check_play_state(self) -> PlayState:
        spec = get_spec("check_play_state")
        return parse_play_state(self._query("check_play_state"), spec.opcode)
