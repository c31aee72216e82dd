"""
Machine creation factory for chip8emu.

Creates ready-to-run :class:`~chip8emu.core.machine.Chip8` instances from a
ROM file path or an in-memory image.

Typical usage::

    machine = MachineFactory.create("pong.ch8")
    machine = MachineFactory.create("pong.ch8", seed=1234)
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from chip8emu.core.machine import Chip8, default_random_source
from chip8emu.shell.services.rom_bytes_service import RomBytesService

logger = logging.getLogger(__name__)


class MachineFactory:
    """Create an emulated CHIP-8 machine from a ROM."""

    @staticmethod
    def create(rom_path: str, seed: Optional[int] = None) -> Chip8:
        """Build a machine and load the ROM at *rom_path* into it.

        Parameters
        ----------
        rom_path:
            Filesystem path to the ROM image.
        seed:
            Seed for the ``Cxkk`` random source.  ``None`` seeds from the OS.

        Raises
        ------
        FileNotFoundError
            If *rom_path* does not exist.
        LoadError
            If the image does not fit in memory.
        """
        rom_path = os.path.expanduser(rom_path)
        if not os.path.isfile(rom_path):
            raise FileNotFoundError(f"ROM file not found: {rom_path}")

        data = RomBytesService.read(rom_path)
        machine = MachineFactory.from_bytes(data, seed=seed)
        logger.info("Created %r from %s", machine, os.path.basename(rom_path))
        return machine

    @staticmethod
    def from_bytes(data: bytes, seed: Optional[int] = None) -> Chip8:
        """Build a machine with *data* already loaded at 0x200."""
        machine = Chip8(random_source=default_random_source(seed))
        machine.load_program(data)
        return machine

    @staticmethod
    def describe(rom_path: str) -> dict:
        """Return ROM metadata without building a machine."""
        return RomBytesService.describe(os.path.expanduser(rom_path))
