"""
Chip8 -- the complete CHIP-8 machine state and its step operations.

The machine holds every piece of mutable state:

* **Memory** -- 4 KB, font table at 0x000, programs at 0x200.
* **Registers** -- ``v`` (16 x 8-bit), ``i`` (16-bit), ``pc``, ``sp``.
* **Stack** -- 16 return addresses.
* **TimerUnit** -- delay and sound timers.
* **KeyboardState** -- 16-key bitmask.
* **FrameBuffer** -- 64x32 monochrome display.

An external driver calls :meth:`Chip8.step` to run one instruction and
:meth:`Chip8.advance_timers` at its own, decoupled cadence (nominally ten
steps per timer tick at 60 Hz).  The machine never blocks and owns no
threads; callers that share it across threads must lock around these calls.

Fault policy
------------
A :class:`~chip8emu.core.errors.MachineFault` raised by an instruction
leaves the machine exactly as it was before that instruction, with ``pc``
pointing at it.  The machine is then halted: further :meth:`step` calls
return immediately until :meth:`reset`.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional

from chip8emu.core.cpu import Executor
from chip8emu.core.decoder import decode
from chip8emu.core.errors import LoadError, MachineFault
from chip8emu.core.frame_buffer import FrameBuffer, FrameSnapshot
from chip8emu.core.input_state import KeyboardState
from chip8emu.core.memory import Memory
from chip8emu.core.timers import TimerUnit
from chip8emu.core.types import (
    MAX_PROGRAM_SIZE,
    PROGRAM_START,
    REGISTER_COUNT,
    STACK_SIZE,
)

logger = logging.getLogger(__name__)

# Returns one random byte (0..255) per call.
RandomSource = Callable[[], int]


def default_random_source(seed: Optional[int] = None) -> RandomSource:
    """Build a :data:`RandomSource` backed by a private ``random.Random``."""
    rng = random.Random(seed)
    return lambda: rng.getrandbits(8)


class Chip8:
    """A CHIP-8 virtual machine.

    Parameters
    ----------
    random_source:
        Callable returning a random byte, used by ``Cxkk``.  Defaults to an
        unseeded :func:`default_random_source`.
    """

    def __init__(self, random_source: Optional[RandomSource] = None) -> None:
        self.random_source: RandomSource = random_source or default_random_source()

        self.memory: Memory = Memory()
        self.v: bytearray = bytearray(REGISTER_COUNT)
        self.i: int = 0
        self.pc: int = PROGRAM_START
        self.sp: int = 0
        self.stack: List[int] = [0] * STACK_SIZE

        self.timers: TimerUnit = TimerUnit()
        self.keyboard: KeyboardState = KeyboardState()
        self.frame_buffer: FrameBuffer = FrameBuffer()

        # Run-state.
        self.cycles: int = 0
        self.waiting_for_key: bool = False
        self._fault: Optional[MachineFault] = None
        self._program: bytes = b""

        self._executor: Executor = Executor(self)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load_program(self, data: bytes) -> None:
        """Copy a program image to 0x200.

        Raises:
            LoadError: If *data* is longer than the ``4096 - 0x200`` bytes
                available.  Memory is not touched in that case.
        """
        if len(data) > MAX_PROGRAM_SIZE:
            raise LoadError(len(data), MAX_PROGRAM_SIZE)
        self._program = bytes(data)
        self.memory.write_span(PROGRAM_START, self._program)
        logger.info("Loaded %d byte program at $%03X", len(data), PROGRAM_START)

    def reset(self) -> None:
        """Return to the power-on state, keeping the loaded program.

        Registers, stack, timers, keys and screen are cleared and any fault
        is discarded.  The program bytes at 0x200 are restored from what
        :meth:`load_program` wrote, so self-modified code is undone.
        """
        self.memory.reset()
        self.memory.write_span(PROGRAM_START, self._program)

        self.v[:] = bytes(REGISTER_COUNT)
        self.i = 0
        self.pc = PROGRAM_START
        self.sp = 0
        self.stack = [0] * STACK_SIZE
        self.timers.reset()
        self.keyboard.clear_all()
        self.frame_buffer.clear()

        self.cycles = 0
        self.waiting_for_key = False
        self._fault = None

    # ------------------------------------------------------------------
    # Run-state
    # ------------------------------------------------------------------

    @property
    def halted(self) -> bool:
        """``True`` after a fault, until :meth:`reset`."""
        return self._fault is not None

    @property
    def fault(self) -> Optional[MachineFault]:
        """The fault that halted the machine, if any."""
        return self._fault

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def step(self) -> None:
        """Fetch, decode and execute one instruction.

        Raises:
            MachineFault: The instruction faulted; the machine is now halted.
        """
        if self._fault is not None:
            return

        pc = self.pc
        opcode: Optional[int] = None
        self.waiting_for_key = False
        try:
            opcode = self.memory.read_word(pc)
            self.pc = (pc + 2) & 0xFFFF
            ins = decode(opcode)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("$%03X  %04X  %s", pc, opcode, ins)
            self._executor.execute(ins)
        except MachineFault as fault:
            fault.pc = pc
            fault.opcode = opcode
            self.pc = pc
            self.waiting_for_key = False
            self._fault = fault
            logger.info("Machine halted: %s", fault)
            raise

        self.cycles += 1

    def run(self, steps: int) -> None:
        """Call :meth:`step` *steps* times, stopping early once halted."""
        for _ in range(steps):
            if self._fault is not None:
                break
            self.step()

    def advance_timers(self) -> bool:
        """Tick the delay and sound timers once.

        Returns:
            ``True`` on the tick where the sound timer expires (beep edge).
        """
        return self.timers.tick()

    # ------------------------------------------------------------------
    # Boundary I/O
    # ------------------------------------------------------------------

    def set_key(self, index: int, pressed: bool) -> None:
        """Press or release keypad key *index* (0..15)."""
        self.keyboard.set_key(index, pressed)

    def framebuffer_snapshot(self) -> FrameSnapshot:
        """Immutable copy of the current 64x32 display."""
        return self.frame_buffer.snapshot()

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"pc=${self.pc:03X}, "
            f"i=${self.i:03X}, "
            f"sp={self.sp}, "
            f"cycles={self.cycles}, "
            f"halted={self.halted})"
        )
