"""Shared fixtures for the chip8emu test-suite."""

import os

# pygame must not try to open a real display or audio device.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from chip8emu.core.machine import Chip8


def program(*words: int) -> bytes:
    """Assemble 16-bit opcodes into a big-endian byte image."""
    out = bytearray()
    for word in words:
        out += bytes(((word >> 8) & 0xFF, word & 0xFF))
    return bytes(out)


@pytest.fixture
def machine():
    """A fresh machine with a fixed random source."""
    return Chip8(random_source=lambda: 0xA5)


@pytest.fixture
def run_ops(machine):
    """Load *words* at 0x200 and execute them one step each."""

    def _run(*words: int) -> Chip8:
        machine.load_program(program(*words))
        for _ in words:
            machine.step()
        return machine

    return _run
