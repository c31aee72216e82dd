"""
Built-in hexadecimal font for chip8emu.

Sixteen 4x5 glyphs (digits 0-F), five bytes each, only the high nibble of
every byte is lit.  The table is copied to :data:`~chip8emu.core.types.FONT_BASE`
when a machine is constructed; ``Fx29`` points ``I`` at ``FONT_BASE + 5 * digit``.
"""

# fmt: off
FONT_SET: bytes = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
# fmt: on

assert len(FONT_SET) == 80, f"Font table must have 80 bytes, got {len(FONT_SET)}"


def glyph(digit: int) -> bytes:
    """Return the five font bytes for hexadecimal *digit* (0..15)."""
    if not 0 <= digit < 16:
        raise ValueError(f"digit must be in [0, 16), got {digit}")
    start = digit * 5
    return FONT_SET[start:start + 5]
