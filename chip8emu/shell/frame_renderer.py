"""
Frame renderer for chip8emu.
Converts the machine's 1-bit framebuffer into an RGB pygame Surface.

The core produces one byte per pixel (0 = off, 1 = on).  This module maps
those values through a two-entry colour table with **numpy** fancy
indexing and blits the result with ``pygame.surfarray``.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
import pygame

from chip8emu.core.frame_buffer import FrameSnapshot

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

DEFAULT_ON_COLOR: Color = (0xFF, 0xFF, 0xFF)
DEFAULT_OFF_COLOR: Color = (0x00, 0x00, 0x00)


def snapshot_to_rgb(snapshot: FrameSnapshot, lut: np.ndarray) -> np.ndarray:
    """Map a snapshot to an ``(height, width, 3)`` uint8 RGB array."""
    frame = np.frombuffer(snapshot.pixels, dtype=np.uint8).reshape(
        (snapshot.height, snapshot.width)
    )
    return lut[frame]


class FrameRenderer:
    """Convert a machine's :class:`FrameSnapshot` into an RGB
    :class:`pygame.Surface` each frame.

    Parameters
    ----------
    machine:
        The emulated machine.  Expected interface:

        * ``framebuffer_snapshot()`` -- returns a :class:`FrameSnapshot`
        * ``frame_buffer`` -- exposes ``width`` / ``height``
    on_color, off_color:
        RGB colours for lit and unlit pixels.
    """

    def __init__(
        self,
        machine: object,
        on_color: Color = DEFAULT_ON_COLOR,
        off_color: Color = DEFAULT_OFF_COLOR,
    ) -> None:
        self._machine = machine
        fb = machine.frame_buffer  # type: ignore[attr-defined]
        self._width: int = fb.width
        self._height: int = fb.height

        self._lut: np.ndarray = np.zeros((2, 3), dtype=np.uint8)
        self.update_colors(on_color, off_color)

        self._surface: pygame.Surface = pygame.Surface((self._width, self._height))

        logger.info("FrameRenderer: %dx%d", self._width, self._height)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def surface(self) -> pygame.Surface:
        """The internal pygame Surface (updated on each :meth:`render` call)."""
        return self._surface

    def render(self) -> pygame.Surface:
        """Render the current frame and return the surface.

        The same :class:`pygame.Surface` object is reused each frame.
        """
        snapshot = self._machine.framebuffer_snapshot()  # type: ignore[attr-defined]
        rgb = snapshot_to_rgb(snapshot, self._lut)
        # surfarray expects (W, H, 3).
        pygame.surfarray.blit_array(self._surface, rgb.transpose(1, 0, 2))
        return self._surface

    def update_colors(self, on_color: Color, off_color: Color) -> None:
        """Replace the lit / unlit colours at runtime."""
        for value, color in ((0, off_color), (1, on_color)):
            if len(color) != 3 or any(not 0 <= c <= 255 for c in color):
                raise ValueError(f"Colour must be three values in 0..255, got {color!r}")
            self._lut[value] = color
