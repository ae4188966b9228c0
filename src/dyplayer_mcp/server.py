"""MCP server entry point for DY-series serial MP3 player modules.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import InvalidArgument, PlayerError
from .models.player import Device, EqMode, PlayDirSound, PlayMode, PlayState
from .protocol.commands import build_command
from .session import MAX_VOLUME, PlayerSession
from .transport.serial_connection import (
    DEFAULT_BAUDRATE,
    SerialConnection,
    find_serial_ports,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "dyplayer",
    instructions="MCP server for DY-SV17F and compatible serial MP3 player modules",
)

# Global connection state
_connection: SerialConnection | None = None
_session: PlayerSession | None = None


def _get_session() -> PlayerSession:
    """Get the active player session, raising if not connected."""
    if _session is None or _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return _session


def _parse_member(enum_cls, name: str):
    """Look up an enum member by case-insensitive name."""
    try:
        return enum_cls[name.strip().upper()]
    except KeyError:
        return None


def _run(fn, /, **result: Any) -> dict[str, Any]:
    """Run *fn* against the session, reporting protocol failures as an error dict."""
    try:
        value = fn(_get_session())
    except PlayerError as e:
        logger.warning("%s: %s", type(e).__name__, e)
        return {"error": str(e), "kind": type(e).__name__}
    if value is not None:
        result["value"] = value
    result.setdefault("ok", True)
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def list_ports() -> dict[str, Any]:
    """List serial ports the player module may be attached to."""
    return {
        "ports": [
            {"device": p.device, "description": p.description, "hwid": p.hwid}
            for p in find_serial_ports()
        ]
    }


@mcp.tool()
def connect(port: str | None = None, baudrate: int = DEFAULT_BAUDRATE) -> dict[str, Any]:
    """Open the serial connection to the player module.

    Probes the module with a device query to confirm it is responding.

    Args:
        port: Serial device (e.g. /dev/ttyUSB0, COM3). Auto-selects the
              first available port if omitted.
        baudrate: UART speed (default 9600).
    """
    global _connection, _session
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _connection.port,
        }

    _connection = SerialConnection(port, baudrate)
    opened = _connection.open()
    _session = PlayerSession(_connection)

    device = _session.get_device()
    return {
        "connected": True,
        "port": opened,
        "online": device != Device.FAIL,
        "device": device.name,
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial connection to the module."""
    global _connection, _session
    if _connection is not None:
        _connection.close()
    _connection = None
    _session = None
    return {"disconnected": True}


# ─── PLAYBACK TOOLS ──────────────────────────────────────────────────

@mcp.tool()
def play() -> dict[str, Any]:
    """Play the currently selected sound from the start."""
    return _run(lambda s: s.play(), action="play")


@mcp.tool()
def pause() -> dict[str, Any]:
    """Pause playback."""
    return _run(lambda s: s.pause(), action="pause")


@mcp.tool()
def stop() -> dict[str, Any]:
    """Stop playback."""
    return _run(lambda s: s.stop(), action="stop")


@mcp.tool()
def next_sound() -> dict[str, Any]:
    """Play the next sound."""
    return _run(lambda s: s.next(), action="next")


@mcp.tool()
def previous_sound() -> dict[str, Any]:
    """Play the previous sound."""
    return _run(lambda s: s.previous(), action="previous")


@mcp.tool()
def play_sound(number: int) -> dict[str, Any]:
    """Play a sound by number.

    Args:
        number: Sound number 1-65535, e.g. 1 for 00001.mp3.
    """
    return _run(lambda s: s.play_specified(number), number=number)


@mcp.tool()
def play_path(device: str, path: str) -> dict[str, Any]:
    """Play a sound by storage device and absolute path.

    Args:
        device: USB, SD or FLASH.
        path: Absolute path such as /SONGS1/FILE1.MP3 (8.3 names, at most
              36 bytes once encoded).
    """
    dev = _parse_member(Device, device)
    if dev is None or dev == Device.FAIL:
        return {"error": f"Unknown device '{device}'. Valid: USB, SD, FLASH"}
    return _run(
        lambda s: s.play_specified_device_path(dev, path),
        device=dev.name,
        path=path,
    )


@mcp.tool()
def select_sound(number: int) -> dict[str, Any]:
    """Select a sound by number without playing it.

    Args:
        number: Sound number 1-65535.
    """
    return _run(lambda s: s.select(number), selected=number)


@mcp.tool()
def get_play_state() -> dict[str, Any]:
    """Report whether the module is stopped, playing or paused."""
    return _run(lambda s: s.check_play_state().name)


# ─── DEVICE TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def get_device() -> dict[str, Any]:
    """Report the storage device in use (USB, SD, FLASH, or FAIL)."""
    device = _get_session().get_device()
    return {"device": device.name, "online": device != Device.FAIL}


@mcp.tool()
def set_device(device: str) -> dict[str, Any]:
    """Switch the storage device. The module does not confirm the switch.

    Args:
        device: USB, SD or FLASH.
    """
    dev = _parse_member(Device, device)
    if dev is None or dev == Device.FAIL:
        return {"error": f"Unknown device '{device}'. Valid: USB, SD, FLASH"}
    return _run(lambda s: s.set_device(dev), device=dev.name)


# ─── VOLUME / EQ / MODE TOOLS ────────────────────────────────────────

@mcp.tool()
def set_volume(volume: int) -> dict[str, Any]:
    """Set the playback volume.

    Args:
        volume: Volume level 0-30.
    """
    return _run(lambda s: s.set_volume(volume), volume=volume)


@mcp.tool()
def change_volume(up: bool) -> dict[str, Any]:
    """Step the volume up or down by one.

    Args:
        up: True to increase, False to decrease.
    """
    if up:
        return _run(lambda s: s.volume_increase(), action="volume_increase")
    return _run(lambda s: s.volume_decrease(), action="volume_decrease")


@mcp.tool()
def set_eq(eq: str) -> dict[str, Any]:
    """Set the equalizer preset.

    Args:
        eq: NORMAL, POP, ROCK, JAZZ or CLASSIC.
    """
    mode = _parse_member(EqMode, eq)
    if mode is None:
        return {"error": f"Unknown EQ '{eq}'. Valid: {[m.name for m in EqMode]}"}
    return _run(lambda s: s.set_eq(mode), eq=mode.name)


@mcp.tool()
def set_cycle_mode(mode: str, times: int | None = None) -> dict[str, Any]:
    """Set the cycle (loop) mode and optionally the repeat count.

    Args:
        mode: One of REPEAT, REPEAT_ONE, ONE_OFF, RANDOM, REPEAT_DIR,
              RANDOM_DIR, SEQUENCE_DIR, SEQUENCE.
        times: Cycle count for the repeat modes (0-65535).
    """
    play_mode = _parse_member(PlayMode, mode)
    if play_mode is None:
        return {
            "error": f"Unknown mode '{mode}'. Valid: {[m.name for m in PlayMode]}"
        }
    if times is not None:
        # Reject a bad count before the mode frame goes out.
        try:
            build_command("set_cycle_times", times)
        except InvalidArgument as e:
            return {"error": str(e), "kind": type(e).__name__}

    def apply(session: PlayerSession) -> None:
        session.set_cycle_mode(play_mode)
        if times is not None:
            session.set_cycle_times(times)

    result = _run(apply, mode=play_mode.name)
    if times is not None and "error" not in result:
        result["times"] = times
    return result


# ─── DIRECTORY / INTERLUDE TOOLS ─────────────────────────────────────

@mcp.tool()
def previous_dir(last: bool = False) -> dict[str, Any]:
    """Jump to the previous directory.

    Args:
        last: Start on the directory's last sound instead of its first.
    """
    song = PlayDirSound.LAST_SOUND if last else PlayDirSound.FIRST_SOUND
    return _run(lambda s: s.previous_dir(song), start=song.name)


@mcp.tool()
def directory_info() -> dict[str, Any]:
    """Report the first sound number and sound count of the current directory."""
    return _run(
        lambda s: {"first": s.first_in_dir(), "count": s.sound_count_dir()}
    )


@mcp.tool()
def interlude(
    device: str, number: int | None = None, path: str | None = None
) -> dict[str, Any]:
    """Interrupt playback with another sound; playback resumes afterwards.

    Args:
        device: USB, SD or FLASH.
        number: Sound number 1-65535. Either number or path is required.
        path: Absolute path of the sound.
    """
    dev = _parse_member(Device, device)
    if dev is None or dev == Device.FAIL:
        return {"error": f"Unknown device '{device}'. Valid: USB, SD, FLASH"}
    if (number is None) == (path is None):
        return {"error": "Give exactly one of 'number' or 'path'"}
    if number is not None:
        return _run(
            lambda s: s.interlude_specified(dev, number),
            device=dev.name,
            number=number,
        )
    return _run(
        lambda s: s.interlude_specified_device_path(dev, path),
        device=dev.name,
        path=path,
    )


@mcp.tool()
def stop_interlude() -> dict[str, Any]:
    """Stop the interlude and resume normal playback."""
    return _run(lambda s: s.stop_interlude(), action="stop_interlude")


# ─── QUERY TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def get_status() -> dict[str, Any]:
    """Report play state, current sound and total sound count."""
    return _run(
        lambda s: {
            "state": s.check_play_state().name,
            "playing_sound": s.get_playing_sound(),
            "sound_count": s.sound_count(),
        }
    )


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("dyplayer://catalog/play-modes")
def resource_play_modes() -> str:
    """Cycle modes accepted by set_cycle_mode."""
    return json.dumps({"play_modes": [m.name for m in PlayMode]})


@mcp.resource("dyplayer://catalog/eq-modes")
def resource_eq_modes() -> str:
    """Equalizer presets accepted by set_eq."""
    return json.dumps({"eq_modes": [m.name for m in EqMode]})


@mcp.resource("dyplayer://catalog/devices")
def resource_devices() -> str:
    """Storage devices and value ranges."""
    return json.dumps({
        "devices": [d.name for d in Device.selectable()],
        "play_states": [s.name for s in PlayState],
        "volume_range": [0, MAX_VOLUME],
    })


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def playlist(description: str) -> str:
    """Guide the AI to play a sequence of sounds for an occasion.

    Args:
        description: What should be played, e.g. "doorbell then chime".
    """
    return f"""Play sounds for: {description}

Steps:
- Call connect, then get_device to see which storage device is active
- Use get_status to learn how many sounds are available
- Use play_sound or play_path to start playback
- Use set_cycle_mode and set_volume (0-{MAX_VOLUME}) to shape playback
- Use interlude for one-off announcements that should not stop the music"""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
