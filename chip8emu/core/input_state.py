"""
KeyboardState - the 16-key hexadecimal keypad as a bitmask.

Bit ``k`` of :attr:`KeyboardState.mask` is set while key ``k`` (0x0-0xF)
is held.  Host code writes through :meth:`KeyboardState.set_key`; the
executor only reads (SKP, SKNP and the key-wait instruction).
"""

from __future__ import annotations

from typing import Optional

from chip8emu.core.types import KEY_COUNT


class KeyboardState:
    """Press/release state of the hex keypad."""

    def __init__(self) -> None:
        self._mask: int = 0

    @property
    def mask(self) -> int:
        """The raw 16-bit key bitmask."""
        return self._mask

    # ------------------------------------------------------------------
    # Host-side input event injection
    # ------------------------------------------------------------------

    def set_key(self, index: int, pressed: bool) -> None:
        """Set or clear the bit for key *index*.

        Raises:
            ValueError: If *index* is not in ``[0, 16)``.
        """
        if not 0 <= index < KEY_COUNT:
            raise ValueError(f"key index must be in [0, {KEY_COUNT}), got {index}")
        bit = 1 << index
        if pressed:
            self._mask |= bit
        else:
            self._mask &= ~bit & 0xFFFF

    def clear_all(self) -> None:
        """Release every key."""
        self._mask = 0

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def is_pressed(self, index: int) -> bool:
        """Return ``True`` if key *index* is held.

        Indices outside the keypad read as released, so a register holding a
        value above 0xF never matches.
        """
        if not 0 <= index < KEY_COUNT:
            return False
        return (self._mask >> index) & 1 == 1

    def lowest_pressed(self) -> Optional[int]:
        """Index of the lowest held key, or ``None`` when nothing is held."""
        if self._mask == 0:
            return None
        return (self._mask & -self._mask).bit_length() - 1

    def __repr__(self) -> str:
        return f"KeyboardState(mask=0x{self._mask:04X})"
