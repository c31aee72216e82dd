"""
Opcode decoder for chip8emu.

:func:`decode` turns a raw 16-bit big-endian opcode into an
:class:`Instruction`: the :class:`~chip8emu.core.types.Op` tag plus every
operand field the instruction format can carry.

=====  ============================  ======
Field  Meaning                       Bits
=====  ============================  ======
nnn    12-bit address                 11..0
kk     8-bit immediate                 7..0
x      register index (2nd nibble)   11..8
y      register index (3rd nibble)    7..4
n      4-bit count (4th nibble)        3..0
=====  ============================  ======

Patterns that match no defined instruction decode to ``Op.UNKNOWN``.
Decoding is pure and never raises for a 16-bit input.
"""

from __future__ import annotations

from dataclasses import dataclass

from chip8emu.core.types import Op


# Second-level tables keyed by the low nibble / low byte.
_ALU_OPS: dict[int, Op] = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_KEY_OPS: dict[int, Op] = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_MISC_OPS: dict[int, Op] = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.LD_I_VX,
    0x65: Op.LD_VX_I,
}

# Mnemonic templates for Instruction.__str__.
_FORMATS: dict[Op, str] = {
    Op.UNKNOWN: "DW    ${raw:04X}",
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.SYS: "SYS   ${nnn:03X}",
    Op.JP: "JP    ${nnn:03X}",
    Op.CALL: "CALL  ${nnn:03X}",
    Op.SE_BYTE: "SE    V{x:X}, #{kk:02X}",
    Op.SNE_BYTE: "SNE   V{x:X}, #{kk:02X}",
    Op.SE_REG: "SE    V{x:X}, V{y:X}",
    Op.LD_BYTE: "LD    V{x:X}, #{kk:02X}",
    Op.ADD_BYTE: "ADD   V{x:X}, #{kk:02X}",
    Op.LD_REG: "LD    V{x:X}, V{y:X}",
    Op.OR: "OR    V{x:X}, V{y:X}",
    Op.AND: "AND   V{x:X}, V{y:X}",
    Op.XOR: "XOR   V{x:X}, V{y:X}",
    Op.ADD_REG: "ADD   V{x:X}, V{y:X}",
    Op.SUB: "SUB   V{x:X}, V{y:X}",
    Op.SHR: "SHR   V{x:X}",
    Op.SUBN: "SUBN  V{x:X}, V{y:X}",
    Op.SHL: "SHL   V{x:X}",
    Op.SNE_REG: "SNE   V{x:X}, V{y:X}",
    Op.LD_I: "LD    I, ${nnn:03X}",
    Op.JP_V0: "JP    V0, ${nnn:03X}",
    Op.RND: "RND   V{x:X}, #{kk:02X}",
    Op.DRW: "DRW   V{x:X}, V{y:X}, {n}",
    Op.SKP: "SKP   V{x:X}",
    Op.SKNP: "SKNP  V{x:X}",
    Op.LD_VX_DT: "LD    V{x:X}, DT",
    Op.LD_VX_K: "LD    V{x:X}, K",
    Op.LD_DT_VX: "LD    DT, V{x:X}",
    Op.LD_ST_VX: "LD    ST, V{x:X}",
    Op.ADD_I_VX: "ADD   I, V{x:X}",
    Op.LD_F_VX: "LD    F, V{x:X}",
    Op.LD_B_VX: "LD    B, V{x:X}",
    Op.LD_I_VX: "LD    [I], V{x:X}",
    Op.LD_VX_I: "LD    V{x:X}, [I]",
}

assert set(_FORMATS) == set(Op), "every Op needs a mnemonic"


@dataclass(frozen=True)
class Instruction:
    """A decoded opcode."""

    op: Op
    raw: int
    x: int
    y: int
    n: int
    kk: int
    nnn: int

    @property
    def known(self) -> bool:
        return self.op != Op.UNKNOWN

    def __str__(self) -> str:
        return _FORMATS[self.op].format(
            raw=self.raw, x=self.x, y=self.y, n=self.n, kk=self.kk, nnn=self.nnn,
        )


def classify(raw: int) -> Op:
    """Return the :class:`Op` tag for *raw* without building an Instruction."""
    family = (raw >> 12) & 0xF
    n = raw & 0xF
    kk = raw & 0xFF

    if family == 0x0:
        if raw == 0x00E0:
            return Op.CLS
        if raw == 0x00EE:
            return Op.RET
        return Op.SYS
    if family == 0x1:
        return Op.JP
    if family == 0x2:
        return Op.CALL
    if family == 0x3:
        return Op.SE_BYTE
    if family == 0x4:
        return Op.SNE_BYTE
    if family == 0x5:
        return Op.SE_REG if n == 0 else Op.UNKNOWN
    if family == 0x6:
        return Op.LD_BYTE
    if family == 0x7:
        return Op.ADD_BYTE
    if family == 0x8:
        return _ALU_OPS.get(n, Op.UNKNOWN)
    if family == 0x9:
        return Op.SNE_REG if n == 0 else Op.UNKNOWN
    if family == 0xA:
        return Op.LD_I
    if family == 0xB:
        return Op.JP_V0
    if family == 0xC:
        return Op.RND
    if family == 0xD:
        return Op.DRW
    if family == 0xE:
        return _KEY_OPS.get(kk, Op.UNKNOWN)
    return _MISC_OPS.get(kk, Op.UNKNOWN)


def decode(raw: int) -> Instruction:
    """Decode a 16-bit opcode."""
    raw &= 0xFFFF
    return Instruction(
        op=classify(raw),
        raw=raw,
        x=(raw >> 8) & 0xF,
        y=(raw >> 4) & 0xF,
        n=raw & 0xF,
        kk=raw & 0xFF,
        nnn=raw & 0xFFF,
    )
