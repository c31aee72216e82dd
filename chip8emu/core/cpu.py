"""
CHIP-8 instruction executor for chip8emu.

The executor owns no state of its own: every handler reads and mutates the
:class:`~chip8emu.core.machine.Chip8` it was built for.  By the time a
handler runs, the opcode has been fetched and ``pc`` already points at the
next instruction, so skips add 2 to the advanced ``pc`` and CALL pushes the
advanced ``pc``.

Conventions shared by all handlers:

* 8-bit results are masked with ``0xFF``; nothing traps on overflow.
* Flag-producing instructions write ``VF`` *after* the destination
  register, so ``VF`` holds the flag even when ``x == 0xF``.
* Every precondition that can fault (stack bounds, memory spans) is checked
  before the first write, so a faulting instruction has no side effects.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict

from chip8emu.core.decoder import Instruction
from chip8emu.core.errors import StackOverflow, StackUnderflow
from chip8emu.core.types import (
    FLAG_REGISTER,
    FONT_BASE,
    FONT_GLYPH_SIZE,
    STACK_SIZE,
    Op,
)

if TYPE_CHECKING:
    from chip8emu.core.machine import Chip8

logger = logging.getLogger(__name__)


class Executor:
    """Dispatches decoded instructions to their handlers.

    Parameters
    ----------
    machine:
        The machine whose state the handlers mutate.
    """

    def __init__(self, machine: Chip8) -> None:
        self.m = machine
        self._op_table: Dict[Op, Callable[[Instruction], None]] = self._build_op_table()

    def execute(self, ins: Instruction) -> None:
        """Run one decoded instruction against the machine."""
        self._op_table[ins.op](ins)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.m.pc = (self.m.pc + 2) & 0xFFFF

    def _set_with_flag(self, x: int, value: int, flag: int) -> None:
        v = self.m.v
        v[x] = value & 0xFF
        v[FLAG_REGISTER] = flag

    # ------------------------------------------------------------------
    # 0nnn family
    # ------------------------------------------------------------------

    def i_unknown(self, ins: Instruction) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Unknown opcode $%04X ignored", ins.raw)

    def i_sys(self, ins: Instruction) -> None:
        """0nnn -- legacy machine-code call, ignored."""

    def i_cls(self, ins: Instruction) -> None:
        self.m.frame_buffer.clear()

    def i_ret(self, ins: Instruction) -> None:
        m = self.m
        if m.sp == 0:
            raise StackUnderflow()
        m.sp -= 1
        m.pc = m.stack[m.sp]

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------

    def i_jp(self, ins: Instruction) -> None:
        self.m.pc = ins.nnn

    def i_call(self, ins: Instruction) -> None:
        m = self.m
        if m.sp >= STACK_SIZE:
            raise StackOverflow()
        m.stack[m.sp] = m.pc
        m.sp += 1
        m.pc = ins.nnn

    def i_jp_v0(self, ins: Instruction) -> None:
        self.m.pc = (ins.nnn + self.m.v[0]) & 0xFFFF

    def i_se_byte(self, ins: Instruction) -> None:
        self._skip_if(self.m.v[ins.x] == ins.kk)

    def i_sne_byte(self, ins: Instruction) -> None:
        self._skip_if(self.m.v[ins.x] != ins.kk)

    def i_se_reg(self, ins: Instruction) -> None:
        self._skip_if(self.m.v[ins.x] == self.m.v[ins.y])

    def i_sne_reg(self, ins: Instruction) -> None:
        self._skip_if(self.m.v[ins.x] != self.m.v[ins.y])

    # ------------------------------------------------------------------
    # Register loads and arithmetic
    # ------------------------------------------------------------------

    def i_ld_byte(self, ins: Instruction) -> None:
        self.m.v[ins.x] = ins.kk

    def i_add_byte(self, ins: Instruction) -> None:
        v = self.m.v
        v[ins.x] = (v[ins.x] + ins.kk) & 0xFF

    def i_ld_reg(self, ins: Instruction) -> None:
        self.m.v[ins.x] = self.m.v[ins.y]

    def i_or(self, ins: Instruction) -> None:
        self.m.v[ins.x] |= self.m.v[ins.y]

    def i_and(self, ins: Instruction) -> None:
        self.m.v[ins.x] &= self.m.v[ins.y]

    def i_xor(self, ins: Instruction) -> None:
        self.m.v[ins.x] ^= self.m.v[ins.y]

    def i_add_reg(self, ins: Instruction) -> None:
        total = self.m.v[ins.x] + self.m.v[ins.y]
        self._set_with_flag(ins.x, total, 1 if total > 0xFF else 0)

    def i_sub(self, ins: Instruction) -> None:
        vx, vy = self.m.v[ins.x], self.m.v[ins.y]
        # VF = NOT borrow
        self._set_with_flag(ins.x, vx - vy, 1 if vx >= vy else 0)

    def i_subn(self, ins: Instruction) -> None:
        vx, vy = self.m.v[ins.x], self.m.v[ins.y]
        self._set_with_flag(ins.x, vy - vx, 1 if vy >= vx else 0)

    def i_shr(self, ins: Instruction) -> None:
        vx = self.m.v[ins.x]
        self._set_with_flag(ins.x, vx >> 1, vx & 0x01)

    def i_shl(self, ins: Instruction) -> None:
        vx = self.m.v[ins.x]
        self._set_with_flag(ins.x, vx << 1, (vx >> 7) & 0x01)

    def i_rnd(self, ins: Instruction) -> None:
        self.m.v[ins.x] = self.m.random_source() & ins.kk & 0xFF

    # ------------------------------------------------------------------
    # Address register
    # ------------------------------------------------------------------

    def i_ld_i(self, ins: Instruction) -> None:
        self.m.i = ins.nnn

    def i_add_i_vx(self, ins: Instruction) -> None:
        self.m.i = (self.m.i + self.m.v[ins.x]) & 0xFFFF

    def i_ld_f_vx(self, ins: Instruction) -> None:
        self.m.i = FONT_BASE + self.m.v[ins.x] * FONT_GLYPH_SIZE

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def i_drw(self, ins: Instruction) -> None:
        """Dxyn -- XOR an n-row sprite from [I] onto the screen at (Vx, Vy).

        Coordinates wrap on both axes.  VF = 1 if any lit pixel was erased.
        """
        m = self.m
        sprite = m.memory.read_span(m.i, ins.n)
        fb = m.frame_buffer
        x0 = m.v[ins.x]
        y0 = m.v[ins.y]

        collision = False
        for row, bits in enumerate(sprite):
            if bits == 0:
                continue
            y = y0 + row
            for col in range(8):
                if (bits >> (7 - col)) & 1:
                    if fb.xor_pixel(x0 + col, y):
                        collision = True

        m.v[FLAG_REGISTER] = 1 if collision else 0

    # ------------------------------------------------------------------
    # Keypad
    # ------------------------------------------------------------------

    def i_skp(self, ins: Instruction) -> None:
        self._skip_if(self.m.keyboard.is_pressed(self.m.v[ins.x]))

    def i_sknp(self, ins: Instruction) -> None:
        self._skip_if(not self.m.keyboard.is_pressed(self.m.v[ins.x]))

    def i_ld_vx_k(self, ins: Instruction) -> None:
        """Fx0A -- wait for a key.

        With no key held, ``pc`` is wound back onto this instruction so the
        next step executes it again.  The driver keeps full control of the
        cadence; nothing here blocks.
        """
        m = self.m
        key = m.keyboard.lowest_pressed()
        if key is None:
            m.pc = (m.pc - 2) & 0xFFFF
            m.waiting_for_key = True
            return
        m.v[ins.x] = key

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def i_ld_vx_dt(self, ins: Instruction) -> None:
        self.m.v[ins.x] = self.m.timers.delay

    def i_ld_dt_vx(self, ins: Instruction) -> None:
        self.m.timers.delay = self.m.v[ins.x]

    def i_ld_st_vx(self, ins: Instruction) -> None:
        self.m.timers.sound = self.m.v[ins.x]

    # ------------------------------------------------------------------
    # Memory block transfers
    # ------------------------------------------------------------------

    def i_ld_b_vx(self, ins: Instruction) -> None:
        vx = self.m.v[ins.x]
        self.m.memory.write_span(self.m.i, bytes((vx // 100, (vx // 10) % 10, vx % 10)))

    def i_ld_i_vx(self, ins: Instruction) -> None:
        m = self.m
        m.memory.write_span(m.i, bytes(m.v[:ins.x + 1]))

    def i_ld_vx_i(self, ins: Instruction) -> None:
        m = self.m
        m.v[:ins.x + 1] = m.memory.read_span(m.i, ins.x + 1)

    # ==================================================================
    # Dispatch table
    # ==================================================================

    def _build_op_table(self) -> Dict[Op, Callable[[Instruction], None]]:
        table: Dict[Op, Callable[[Instruction], None]] = {
            Op.UNKNOWN: self.i_unknown,
            Op.CLS: self.i_cls,
            Op.RET: self.i_ret,
            Op.SYS: self.i_sys,
            Op.JP: self.i_jp,
            Op.CALL: self.i_call,
            Op.SE_BYTE: self.i_se_byte,
            Op.SNE_BYTE: self.i_sne_byte,
            Op.SE_REG: self.i_se_reg,
            Op.LD_BYTE: self.i_ld_byte,
            Op.ADD_BYTE: self.i_add_byte,
            Op.LD_REG: self.i_ld_reg,
            Op.OR: self.i_or,
            Op.AND: self.i_and,
            Op.XOR: self.i_xor,
            Op.ADD_REG: self.i_add_reg,
            Op.SUB: self.i_sub,
            Op.SHR: self.i_shr,
            Op.SUBN: self.i_subn,
            Op.SHL: self.i_shl,
            Op.SNE_REG: self.i_sne_reg,
            Op.LD_I: self.i_ld_i,
            Op.JP_V0: self.i_jp_v0,
            Op.RND: self.i_rnd,
            Op.DRW: self.i_drw,
            Op.SKP: self.i_skp,
            Op.SKNP: self.i_sknp,
            Op.LD_VX_DT: self.i_ld_vx_dt,
            Op.LD_VX_K: self.i_ld_vx_k,
            Op.LD_DT_VX: self.i_ld_dt_vx,
            Op.LD_ST_VX: self.i_ld_st_vx,
            Op.ADD_I_VX: self.i_add_i_vx,
            Op.LD_F_VX: self.i_ld_f_vx,
            Op.LD_B_VX: self.i_ld_b_vx,
            Op.LD_I_VX: self.i_ld_i_vx,
            Op.LD_VX_I: self.i_ld_vx_i,
        }
        missing = set(Op) - set(table)
        if missing:
            raise RuntimeError(f"no handler for {sorted(op.name for op in missing)}")
        return table
