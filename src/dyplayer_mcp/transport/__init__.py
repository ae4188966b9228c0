"""Byte transports the player session can talk through."""

from .base import Transport
from .serial_connection import SerialConnection, find_serial_ports
