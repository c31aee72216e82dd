"""
Exception hierarchy for chip8emu.

``LoadError`` is raised before any execution and leaves the machine
untouched.  ``MachineFault`` and its subclasses are raised from
:meth:`Chip8.step() <chip8emu.core.machine.Chip8.step>`; the machine is
halted at the faulting instruction until :meth:`reset` is called.
"""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for every error raised by the emulator core."""


class LoadError(Chip8Error):
    """The program image does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, capacity: int) -> None:
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"program is {size} bytes, only {capacity} bytes fit at 0x200"
        )


class MachineFault(Chip8Error):
    """An instruction could not be executed.

    Attributes
    ----------
    pc:
        Address of the faulting instruction.  Filled in by the machine once
        the fault reaches :meth:`~chip8emu.core.machine.Chip8.step`.
    opcode:
        The raw 16-bit opcode, when it was fetched.
    """

    def __init__(self, message: str, pc: Optional[int] = None,
                 opcode: Optional[int] = None) -> None:
        self.message = message
        self.pc = pc
        self.opcode = opcode
        super().__init__(message)

    def __str__(self) -> str:
        where = []
        if self.pc is not None:
            where.append(f"pc=${self.pc:03X}")
        if self.opcode is not None:
            where.append(f"opcode=${self.opcode:04X}")
        if where:
            return f"{self.message} ({', '.join(where)})"
        return self.message


class StackOverflow(MachineFault):
    """CALL executed with all 16 stack slots in use."""

    def __init__(self, **kwargs) -> None:
        super().__init__("call stack overflow", **kwargs)


class StackUnderflow(MachineFault):
    """RET executed with an empty call stack."""

    def __init__(self, **kwargs) -> None:
        super().__init__("return with empty call stack", **kwargs)


class OutOfBoundsAccess(MachineFault):
    """A memory span ran past the last addressable byte."""

    def __init__(self, address: int, length: int, **kwargs) -> None:
        self.address = address
        self.length = length
        super().__init__(
            f"memory access of {length} byte(s) at ${address:04X} is out of bounds",
            **kwargs,
        )
