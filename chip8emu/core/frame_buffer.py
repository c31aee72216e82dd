"""
FrameBuffer -- the 64x32 monochrome display of the CHIP-8.

Pixels are stored one byte each (0 or 1) in row-major order:
``pixels[y * width + x]``.  Only the CLS and DRW instructions mutate the
buffer; presentation code reads an immutable :class:`FrameSnapshot`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from chip8emu.core.types import SCREEN_HEIGHT, SCREEN_WIDTH


@dataclass(frozen=True)
class FrameSnapshot:
    """Read-only copy of the framebuffer taken between instruction batches."""

    width: int
    height: int
    pixels: bytes

    def pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        return self.pixels[y * self.width + x]

    def rows(self) -> Iterator[bytes]:
        """Yield each row of pixels, top to bottom."""
        for y in range(self.height):
            start = y * self.width
            yield self.pixels[start:start + self.width]

    @property
    def lit_count(self) -> int:
        """Number of pixels currently on."""
        return sum(self.pixels)

    def to_text(self, on: str = "#", off: str = ".") -> str:
        """Render the frame as lines of text, one line per row."""
        return "\n".join(
            "".join(on if p else off for p in row) for row in self.rows()
        )


class FrameBuffer:
    """Holds the emulated display.

    Parameters
    ----------
    width:
        Horizontal pixel count.  64 on the CHIP-8.
    height:
        Vertical pixel count.  32 on the CHIP-8.
    """

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT) -> None:
        if width <= 0:
            raise ValueError(f"width must be positive, got {width}")
        if height <= 0:
            raise ValueError(f"height must be positive, got {height}")

        self.width: int = width
        self.height: int = height
        self.pixels: bytearray = bytearray(width * height)

    # ------------------------------------------------------------------
    # Pixel helpers
    # ------------------------------------------------------------------

    def read_pixel(self, x: int, y: int) -> int:
        return self.pixels[y * self.width + x]

    def xor_pixel(self, x: int, y: int) -> bool:
        """Flip the pixel at (*x*, *y*), wrapping both coordinates.

        Returns:
            ``True`` if the pixel was lit before the flip (a collision).
        """
        offset = (y % self.height) * self.width + (x % self.width)
        old = self.pixels[offset]
        self.pixels[offset] = old ^ 1
        return old == 1

    # ------------------------------------------------------------------
    # Buffer management
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Turn every pixel off."""
        self.pixels[:] = bytes(len(self.pixels))

    def snapshot(self) -> FrameSnapshot:
        return FrameSnapshot(self.width, self.height, bytes(self.pixels))

    def __repr__(self) -> str:
        return f"FrameBuffer(width={self.width}, height={self.height})"
