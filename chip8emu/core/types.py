"""
Core enumerations and machine constants for chip8emu.

``Op`` tags every instruction the decoder can produce.  Each member maps to
exactly one handler in :class:`~chip8emu.core.cpu.Executor`; ``UNKNOWN`` is
the explicit tag for opcode patterns that match no defined instruction.
"""

from enum import IntEnum


# ---------------------------------------------------------------------------
# Machine geometry
# ---------------------------------------------------------------------------

MEMORY_SIZE: int = 4096
PROGRAM_START: int = 0x200
MAX_PROGRAM_SIZE: int = MEMORY_SIZE - PROGRAM_START

REGISTER_COUNT: int = 16
FLAG_REGISTER: int = 0xF

STACK_SIZE: int = 16

KEY_COUNT: int = 16

SCREEN_WIDTH: int = 64
SCREEN_HEIGHT: int = 32

FONT_BASE: int = 0x000
FONT_GLYPH_SIZE: int = 5

# Nominal driver cadence.
TIMER_HZ: int = 60
TICKS_PER_FRAME: int = 10


class Op(IntEnum):
    UNKNOWN = 0
    CLS = 1         # 00E0
    RET = 2         # 00EE
    SYS = 3         # 0nnn
    JP = 4          # 1nnn
    CALL = 5        # 2nnn
    SE_BYTE = 6     # 3xkk
    SNE_BYTE = 7    # 4xkk
    SE_REG = 8      # 5xy0
    LD_BYTE = 9     # 6xkk
    ADD_BYTE = 10   # 7xkk
    LD_REG = 11     # 8xy0
    OR = 12         # 8xy1
    AND = 13        # 8xy2
    XOR = 14        # 8xy3
    ADD_REG = 15    # 8xy4
    SUB = 16        # 8xy5
    SHR = 17        # 8xy6
    SUBN = 18       # 8xy7
    SHL = 19        # 8xyE
    SNE_REG = 20    # 9xy0
    LD_I = 21       # Annn
    JP_V0 = 22      # Bnnn
    RND = 23        # Cxkk
    DRW = 24        # Dxyn
    SKP = 25        # Ex9E
    SKNP = 26       # ExA1
    LD_VX_DT = 27   # Fx07
    LD_VX_K = 28    # Fx0A
    LD_DT_VX = 29   # Fx15
    LD_ST_VX = 30   # Fx18
    ADD_I_VX = 31   # Fx1E
    LD_F_VX = 32    # Fx29
    LD_B_VX = 33    # Fx33
    LD_I_VX = 34    # Fx55
    LD_VX_I = 35    # Fx65
