"""
ROM loading and inspection service for chip8emu.

Responsibilities:
  - Read ROM files from disk.  A CHIP-8 ROM is a flat image with no header.
  - Describe a ROM (size, fit, first instruction) for the ``--info`` option.
  - Walk a ROM image as a sequence of decoded instructions for ``--disassemble``.
"""

from __future__ import annotations

import logging
import os
from typing import Iterator

from chip8emu.core.decoder import Instruction, decode
from chip8emu.core.types import MAX_PROGRAM_SIZE, PROGRAM_START

logger = logging.getLogger(__name__)

# Extensions commonly used for CHIP-8 images.  Anything else still loads.
_ROM_EXTENSIONS: frozenset[str] = frozenset({".ch8", ".c8", ".rom", ".bin"})


class RomBytesService:
    """Static utility for loading ROM files and inspecting their contents."""

    # -- reading -----------------------------------------------------------

    @staticmethod
    def read(path: str) -> bytes:
        """Read a ROM file from *path*.

        Raises:
            FileNotFoundError: If *path* does not exist.
            OSError: On general I/O failure.
        """
        with open(path, "rb") as fh:
            data = fh.read()

        ext = os.path.splitext(path)[1].lower()
        if ext and ext not in _ROM_EXTENSIONS:
            logger.info("Unusual ROM extension %r for %s", ext, path)
        if len(data) % 2:
            logger.warning("ROM %s has odd length %d", path, len(data))
        return data

    # -- inspection --------------------------------------------------------

    @staticmethod
    def describe(path: str) -> dict:
        """Return human-readable metadata for the ROM at *path*."""
        data = RomBytesService.read(path)
        fits = len(data) <= MAX_PROGRAM_SIZE
        if not fits:
            logger.warning(
                "ROM %s is %d bytes, larger than the %d bytes available",
                path, len(data), MAX_PROGRAM_SIZE,
            )

        if len(data) >= 2:
            first = decode((data[0] << 8) | data[1])
            first_instruction = f"{first.raw:04X}  {first}"
        else:
            first_instruction = "-"

        return {
            "path": os.path.abspath(path),
            "size": len(data),
            "capacity": MAX_PROGRAM_SIZE,
            "fits": fits,
            "free_bytes": max(0, MAX_PROGRAM_SIZE - len(data)),
            "end_address": f"${PROGRAM_START + max(len(data), 1) - 1:03X}",
            "first_instruction": first_instruction,
        }

    @staticmethod
    def disassemble(data: bytes, base: int = PROGRAM_START) -> Iterator[tuple[int, int, Instruction]]:
        """Yield ``(address, raw_opcode, instruction)`` for each word of *data*.

        The image is decoded linearly two bytes at a time; data tables inside
        the program decode as whatever instruction their bytes spell.  A
        trailing odd byte is yielded as the high half of a word.
        """
        for offset in range(0, len(data), 2):
            hi = data[offset]
            lo = data[offset + 1] if offset + 1 < len(data) else 0
            raw = (hi << 8) | lo
            yield base + offset, raw, decode(raw)
