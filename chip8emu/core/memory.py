"""
Main memory for chip8emu.

4 KB of byte-addressable RAM.  Single-byte reads and writes behave like a
plain ``bytearray``; every variable-length access that starts at the
address register goes through :meth:`Memory.read_span` /
:meth:`Memory.write_span`, which reject spans running past the last byte
with :class:`~chip8emu.core.errors.OutOfBoundsAccess`.
"""

from __future__ import annotations

from chip8emu.core.errors import OutOfBoundsAccess
from chip8emu.core.font_tables import FONT_SET
from chip8emu.core.types import FONT_BASE, MEMORY_SIZE


class Memory:
    """The 4096-byte address space, font preloaded at :data:`FONT_BASE`."""

    SIZE: int = MEMORY_SIZE

    def __init__(self) -> None:
        self._data: bytearray = bytearray(self.SIZE)
        self._load_font()

    def reset(self) -> None:
        """Zero all memory and restore the font table."""
        self._data[:] = bytes(self.SIZE)
        self._load_font()

    def _load_font(self) -> None:
        self._data[FONT_BASE:FONT_BASE + len(FONT_SET)] = FONT_SET

    # ------------------------------------------------------------------
    # Byte access
    # ------------------------------------------------------------------

    def __getitem__(self, addr: int) -> int:
        return self._data[addr]

    def __setitem__(self, addr: int, value: int) -> None:
        self._data[addr] = value & 0xFF

    def __len__(self) -> int:
        return self.SIZE

    # ------------------------------------------------------------------
    # Bounds-checked spans
    # ------------------------------------------------------------------

    def check_span(self, addr: int, length: int) -> None:
        """Raise :class:`OutOfBoundsAccess` unless ``[addr, addr+length)`` fits."""
        if addr < 0 or length < 0 or addr + length > self.SIZE:
            raise OutOfBoundsAccess(addr, length)

    def read_span(self, addr: int, length: int) -> bytes:
        self.check_span(addr, length)
        return bytes(self._data[addr:addr + length])

    def write_span(self, addr: int, data: bytes) -> None:
        """Copy *data* to ``addr``; nothing is written if the span is out of range."""
        self.check_span(addr, len(data))
        self._data[addr:addr + len(data)] = data

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word."""
        self.check_span(addr, 2)
        return (self._data[addr] << 8) | self._data[addr + 1]

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return f"Memory(size={self.SIZE})"
