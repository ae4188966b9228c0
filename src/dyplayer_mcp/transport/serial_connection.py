"""UART connection to a DY-series player module via pyserial.

The module talks 9600 baud, 8 data bits, no parity, one stop bit. Reads
block until the requested number of bytes arrive or the timeout expires.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import serial
from serial.tools import list_ports

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 9600
READ_TIMEOUT_S = 1.0
WRITE_TIMEOUT_S = 1.0


@dataclass
class PortInfo:
    """A serial port candidate as reported by the OS."""

    device: str
    description: str = ""
    hwid: str = ""


def find_serial_ports() -> list[PortInfo]:
    """Return the serial ports present on this host, sorted by device name."""
    return sorted(
        (
            PortInfo(device=p.device, description=p.description or "", hwid=p.hwid or "")
            for p in list_ports.comports()
        ),
        key=lambda p: p.device,
    )


class SerialConnection:
    """Manages the serial connection to the player module.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        session = PlayerSession(conn)
        session.play()
        conn.close()
    """

    def __init__(
        self,
        port: str | None = None,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = READ_TIMEOUT_S,
    ) -> None:
        self._port = port
        self._baudrate = baudrate
        self._timeout = timeout
        self._serial: serial.Serial | None = None

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    @property
    def port(self) -> str | None:
        return self._port

    @property
    def baudrate(self) -> int:
        return self._baudrate

    def open(self) -> str:
        """Open the serial port, auto-selecting the first one if none was given.

        Returns:
            The device name of the opened port.

        Raises:
            ConnectionError: If no port is available or it cannot be opened.
        """
        if self.connected:
            return self._port

        if self._port is None:
            ports = find_serial_ports()
            if not ports:
                raise ConnectionError(
                    "No serial ports found. Connect the player module or "
                    "pass the port explicitly."
                )
            if len(ports) > 1:
                logger.info(
                    "Found %d serial ports, using %s", len(ports), ports[0].device
                )
            self._port = ports[0].device

        try:
            self._serial = serial.Serial(
                self._port,
                self._baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._timeout,
                write_timeout=WRITE_TIMEOUT_S,
            )
        except serial.SerialException as e:
            raise ConnectionError(
                f"Could not open {self._port} at {self._baudrate} baud: {e}"
            ) from e

        logger.info("Connected to %s at %d baud", self._port, self._baudrate)
        return self._port

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is None:
            return

        try:
            self._serial.close()
        except serial.SerialException as e:
            logger.warning("Error closing %s: %s", self._port, e)
        finally:
            self._serial = None
            logger.info("Disconnected")

    def write(self, data: bytes) -> None:
        """Write a frame to the module.

        Raises:
            ConnectionError: If not connected.
            serial.SerialException: If the write fails or times out.
        """
        if not self.connected:
            raise ConnectionError("Not connected to device")
        # Drop stale bytes so the next read lines up with this command's reply.
        self._serial.reset_input_buffer()
        self._serial.write(data)
        self._serial.flush()

    def read(self, buffer: bytearray, length: int) -> bool:
        """Read exactly *length* bytes into *buffer*.

        Returns:
            True if the buffer was filled, False on timeout or short read.

        Raises:
            ConnectionError: If not connected.
        """
        if not self.connected:
            raise ConnectionError("Not connected to device")

        data = self._serial.read(length)
        if len(data) != length:
            logger.debug("Short read: wanted %d bytes, got %d", length, len(data))
            return False
        buffer[:length] = data
        return True

    def __enter__(self) -> SerialConnection:
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
