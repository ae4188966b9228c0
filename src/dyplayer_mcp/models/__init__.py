"""Enumerations describing player devices, modes and states."""

from .player import Device, PlayMode, EqMode, PlayState, PlayDirSound
