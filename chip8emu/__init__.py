"""
chip8emu -- a CHIP-8 interpreter with a pygame front end.

The emulator core lives in :mod:`chip8emu.core`; host-side services, the
renderer and the window live in :mod:`chip8emu.shell` and
:mod:`chip8emu.platform`.
"""

from chip8emu.core.errors import (
    Chip8Error,
    LoadError,
    MachineFault,
    OutOfBoundsAccess,
    StackOverflow,
    StackUnderflow,
)
from chip8emu.core.machine import Chip8, default_random_source

__version__ = "1.0.0"

__all__ = [
    "Chip8",
    "Chip8Error",
    "LoadError",
    "MachineFault",
    "OutOfBoundsAccess",
    "StackOverflow",
    "StackUnderflow",
    "default_random_source",
]
