"""Tests for the Chip8 machine: construction, loading, fetch and execution."""

import pytest

from conftest import program

from chip8emu.core.errors import LoadError, OutOfBoundsAccess, StackOverflow, StackUnderflow
from chip8emu.core.font_tables import FONT_SET
from chip8emu.core.machine import Chip8, default_random_source
from chip8emu.core.types import FLAG_REGISTER, MAX_PROGRAM_SIZE, MEMORY_SIZE, PROGRAM_START

VF = FLAG_REGISTER


# ---------------------------------------------------------------------------
# Construction and loading
# ---------------------------------------------------------------------------

def test_power_on_state():
    m = Chip8()
    assert m.pc == 0x200
    assert m.sp == 0
    assert m.i == 0
    assert m.timers.delay == 0
    assert m.timers.sound == 0
    assert m.keyboard.mask == 0
    assert bytes(m.v) == bytes(16)
    assert m.memory.read_span(0, 80) == FONT_SET
    assert m.memory.read_span(80, MEMORY_SIZE - 80) == bytes(MEMORY_SIZE - 80)
    assert m.framebuffer_snapshot().lit_count == 0
    assert not m.halted


def test_load_program_places_bytes_at_0x200(machine):
    machine.load_program(b"\x12\x34\x56")
    assert machine.memory[0x200] == 0x12
    assert machine.memory[0x202] == 0x56
    assert machine.memory.read_span(0, 80) == FONT_SET


def test_load_exact_capacity(machine):
    data = bytes([0xAB]) * MAX_PROGRAM_SIZE
    machine.load_program(data)
    assert machine.memory[4095] == 0xAB


def test_load_one_byte_too_many(machine):
    with pytest.raises(LoadError) as excinfo:
        machine.load_program(bytes(MAX_PROGRAM_SIZE + 1))
    assert excinfo.value.size == 4096 - 0x200 + 1
    assert machine.memory[0x200] == 0


def test_empty_program_loads(machine):
    machine.load_program(b"")
    assert machine.pc == PROGRAM_START


# ---------------------------------------------------------------------------
# Flow control
# ---------------------------------------------------------------------------

def test_return(machine):
    machine.load_program(program(0x00EE))
    machine.stack[0] = 0x333
    machine.sp = 1
    machine.step()
    assert machine.sp == 0
    assert machine.pc == 0x333


def test_jump_has_no_extra_advance(run_ops):
    m = run_ops(0x1727)
    assert m.pc == 0x727


def test_call_pushes_advanced_pc(run_ops):
    m = run_ops(0x2727)
    assert m.sp == 1
    assert m.stack[0] == 0x202
    assert m.pc == 0x727


def test_call_then_return(machine):
    # 0x200: CALL 0x206 ; 0x202: JP 0x202 ; 0x204: pad ; 0x206: RET
    machine.load_program(program(0x2206, 0x1202, 0x0000, 0x00EE))
    machine.step()
    assert machine.pc == 0x206
    machine.step()
    assert machine.pc == 0x202
    assert machine.sp == 0


def test_jump_plus_v0(machine):
    machine.load_program(program(0xB300))
    machine.v[0] = 0x21
    machine.step()
    assert machine.pc == 0x321


@pytest.mark.parametrize(
    "op, vx, expect_skip",
    [
        (0x3A42, 0x42, True),
        (0x3A42, 0x41, False),
        (0x4A42, 0x42, False),
        (0x4A42, 0x41, True),
    ],
)
def test_skip_on_immediate(machine, op, vx, expect_skip):
    machine.load_program(program(op))
    machine.v[0xA] = vx
    machine.step()
    assert machine.pc == (0x204 if expect_skip else 0x202)


def test_skip_on_registers(machine):
    machine.load_program(program(0x5120, 0x9120))
    machine.v[1] = machine.v[2] = 7
    machine.step()
    assert machine.pc == 0x204

    machine.pc = 0x202
    machine.step()
    assert machine.pc == 0x204  # equal -> no skip from 0x202


def test_sys_is_noop(run_ops):
    m = run_ops(0x0123)
    assert m.pc == 0x202
    assert m.sp == 0


def test_unknown_opcode_is_noop_that_counts(machine):
    machine.load_program(program(0x5121, 0xFFFF))
    before = bytes(machine.v), machine.i, machine.sp
    machine.step()
    machine.step()
    assert machine.pc == 0x204
    assert machine.cycles == 2
    assert (bytes(machine.v), machine.i, machine.sp) == before
    assert not machine.halted


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def test_load_and_add_immediate_wraps(run_ops):
    m = run_ops(0x63F0, 0x7320)
    assert m.v[3] == 0x10
    assert m.v[VF] == 0


def test_add_with_carry(machine):
    machine.load_program(program(0x8124))
    machine.v[1], machine.v[2] = 0xFF, 0x02
    machine.step()
    assert machine.v[1] == 0x01
    assert machine.v[VF] == 1


def test_add_without_carry(machine):
    machine.load_program(program(0x8124))
    machine.v[1], machine.v[2] = 0x10, 0x20
    machine.v[VF] = 1
    machine.step()
    assert machine.v[1] == 0x30
    assert machine.v[VF] == 0


def test_sub_with_borrow(machine):
    machine.load_program(program(0x8125))
    machine.v[1], machine.v[2] = 0x02, 0x05
    machine.step()
    assert machine.v[1] == 0xFD
    assert machine.v[VF] == 0


def test_sub_without_borrow(machine):
    machine.load_program(program(0x8125))
    machine.v[1], machine.v[2] = 0x05, 0x05
    machine.step()
    assert machine.v[1] == 0x00
    assert machine.v[VF] == 1


def test_subn(machine):
    machine.load_program(program(0x8127, 0x8127))
    machine.v[1], machine.v[2] = 0x02, 0x05
    machine.step()
    assert machine.v[1] == 0x03
    assert machine.v[VF] == 1

    machine.v[1], machine.v[2] = 0x05, 0x02
    machine.step()
    assert machine.v[1] == 0xFD
    assert machine.v[VF] == 0


def test_shifts(machine):
    machine.load_program(program(0x8106, 0x820E))
    machine.v[1] = 0b0000_0011
    machine.v[2] = 0b1000_0001
    machine.step()
    assert machine.v[1] == 0b0000_0001
    assert machine.v[VF] == 1
    machine.step()
    assert machine.v[2] == 0b0000_0010
    assert machine.v[VF] == 1


def test_bitwise_ops(machine):
    machine.load_program(program(0x8010, 0x8121, 0x8232, 0x8303))
    machine.v[0], machine.v[1] = 0x00, 0xAA
    machine.v[2], machine.v[3] = 0x0F, 0xF0
    machine.v[VF] = 0x77
    machine.run(4)
    assert machine.v[0] == 0xAA          # V0 = V1
    assert machine.v[1] == 0xAA | 0x0F   # V1 |= V2
    assert machine.v[2] == 0x0F & 0xF0   # V2 &= V3
    assert machine.v[3] == 0xF0 ^ 0xAA   # V3 ^= V0
    assert machine.v[VF] == 0x77


def test_flag_wins_when_destination_is_vf(machine):
    machine.load_program(program(0x8F14))
    machine.v[VF], machine.v[1] = 0xFF, 0x01
    machine.step()
    assert machine.v[VF] == 1


def test_random_uses_injected_source(machine):
    machine.load_program(program(0xC50F))
    machine.step()
    assert machine.v[5] == 0xA5 & 0x0F


def test_seeded_random_is_deterministic():
    a = default_random_source(42)
    b = default_random_source(42)
    assert [a() for _ in range(10)] == [b() for _ in range(10)]
    assert all(0 <= a() <= 255 for _ in range(100))


# ---------------------------------------------------------------------------
# Address register and memory transfers
# ---------------------------------------------------------------------------

def test_address_register_ops(machine):
    machine.load_program(program(0xA123, 0xF01E, 0xF129))
    machine.v[0] = 0x10
    machine.v[1] = 0xA
    machine.step()
    assert machine.i == 0x123
    machine.step()
    assert machine.i == 0x133
    machine.step()
    assert machine.i == 0xA * 5


def test_add_i_wraps_at_16_bits(machine):
    machine.load_program(program(0xF01E))
    machine.i = 0xFFFF
    machine.v[0] = 2
    machine.step()
    assert machine.i == 0x0001


def test_bcd(machine):
    machine.load_program(program(0xA300, 0xF233))
    machine.v[2] = 254
    machine.run(2)
    assert machine.memory.read_span(0x300, 3) == bytes([2, 5, 4])


def test_store_and_load_registers(machine):
    machine.load_program(program(0xA300, 0xF355, 0xA300, 0xF265))
    machine.v[0:4] = bytes([1, 2, 3, 4])
    machine.run(2)
    assert machine.memory.read_span(0x300, 5) == bytes([1, 2, 3, 4, 0])
    assert machine.i == 0x300

    machine.v[0:4] = bytes(4)
    machine.run(2)
    assert bytes(machine.v[0:4]) == bytes([1, 2, 3, 0])


def test_timer_registers(machine):
    machine.load_program(program(0xF015, 0xF118, 0xF207))
    machine.v[0], machine.v[1] = 30, 5
    machine.run(2)
    assert machine.timers.delay == 30
    assert machine.timers.sound == 5
    machine.advance_timers()
    machine.step()
    assert machine.v[2] == 29


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def _draw_ff_twice(machine):
    # 0x200: LD I, 0x20A ; DRW V0, V1, 1 ; DRW V0, V1, 1 ; JP 0x206 ; data 0xFF
    machine.load_program(program(0xA20A, 0xD011, 0xD011, 0x1206, 0x0000) + b"\xFF")


def test_draw_then_erase_sets_collision(machine):
    _draw_ff_twice(machine)
    machine.v[0], machine.v[1] = 4, 3
    machine.run(2)
    snap = machine.framebuffer_snapshot()
    assert [snap.pixel(4 + c, 3) for c in range(8)] == [1] * 8
    assert snap.lit_count == 8
    assert machine.v[VF] == 0

    machine.step()
    snap = machine.framebuffer_snapshot()
    assert snap.lit_count == 0
    assert machine.v[VF] == 1


def test_draw_wraps_horizontally(machine):
    _draw_ff_twice(machine)
    machine.v[0], machine.v[1] = 63, 0
    machine.run(2)
    snap = machine.framebuffer_snapshot()
    assert snap.pixel(63, 0) == 1
    assert [snap.pixel(c, 0) for c in range(7)] == [1] * 7
    assert snap.pixel(7, 0) == 0


def test_draw_wraps_vertically(machine):
    machine.load_program(program(0xF029, 0xD015))  # glyph "0" at (0, 30)
    machine.v[1] = 30
    machine.run(2)
    snap = machine.framebuffer_snapshot()
    assert snap.pixel(0, 30) == 1   # row 0 of glyph
    assert snap.pixel(0, 31) == 1   # row 1
    assert snap.pixel(0, 0) == 1    # row 2 wrapped to the top
    assert snap.pixel(1, 1) == 0    # row 3 is 0x90: column 1 off


def test_zero_bits_leave_pixels_alone(machine):
    machine.load_program(program(0xA206, 0xD011, 0x0000) + b"\x81")
    machine.frame_buffer.xor_pixel(3, 0)
    machine.run(2)
    snap = machine.framebuffer_snapshot()
    assert snap.pixel(0, 0) == 1
    assert snap.pixel(3, 0) == 1
    assert snap.pixel(7, 0) == 1
    assert snap.lit_count == 3
    assert machine.v[VF] == 0


def test_zero_height_sprite(machine):
    machine.load_program(program(0xD010))
    machine.v[VF] = 1
    machine.step()
    assert machine.v[VF] == 0
    assert machine.framebuffer_snapshot().lit_count == 0


def test_clear_screen(machine):
    _draw_ff_twice(machine)
    machine.run(2)
    machine.load_program(program(0x00E0))
    machine.pc = 0x200
    machine.step()
    assert machine.framebuffer_snapshot().lit_count == 0


def test_snapshot_is_immutable_copy(machine):
    snap = machine.framebuffer_snapshot()
    machine.frame_buffer.xor_pixel(0, 0)
    assert snap.pixel(0, 0) == 0
    with pytest.raises(TypeError):
        snap.pixels[0] = 1  # type: ignore[index]


# ---------------------------------------------------------------------------
# Keypad
# ---------------------------------------------------------------------------

def test_skip_if_key(machine):
    machine.load_program(program(0xE39E, 0x0000, 0xE3A1))
    machine.v[3] = 0xB
    machine.set_key(0xB, True)
    machine.step()
    assert machine.pc == 0x204
    machine.step()
    assert machine.pc == 0x206   # pressed -> SKNP does not skip


def test_skip_if_not_key(machine):
    machine.load_program(program(0xE3A1))
    machine.v[3] = 0x2
    machine.step()
    assert machine.pc == 0x204


def test_wait_for_key_rewinds_until_pressed(machine):
    machine.load_program(program(0xF50A))
    for _ in range(5):
        machine.step()
        assert machine.pc == 0x200
        assert machine.waiting_for_key

    machine.set_key(0x9, True)
    machine.set_key(0xC, True)
    machine.step()
    assert machine.pc == 0x202
    assert machine.v[5] == 0x9
    assert not machine.waiting_for_key


def test_timers_keep_running_while_waiting(machine):
    machine.load_program(program(0xF50A))
    machine.timers.delay = 3
    for _ in range(3):
        machine.run(10)
        machine.advance_timers()
    assert machine.timers.delay == 0
    assert machine.pc == 0x200


# ---------------------------------------------------------------------------
# Faults
# ---------------------------------------------------------------------------

def test_stack_overflow_faults_and_halts(machine):
    machine.load_program(program(0x2200))  # calls itself forever
    for _ in range(16):
        machine.step()
    assert machine.sp == 16

    with pytest.raises(StackOverflow) as excinfo:
        machine.step()
    assert excinfo.value.pc == 0x200
    assert excinfo.value.opcode == 0x2200
    assert machine.halted
    assert machine.fault is excinfo.value
    assert machine.sp == 16
    assert machine.pc == 0x200

    cycles = machine.cycles
    machine.step()  # halted: ignored
    assert machine.cycles == cycles


def test_stack_underflow(machine):
    machine.load_program(program(0x00EE))
    with pytest.raises(StackUnderflow):
        machine.step()
    assert machine.pc == 0x200
    assert machine.sp == 0


def test_bcd_out_of_bounds_writes_nothing(machine):
    machine.load_program(program(0xAFFE, 0xF033))
    machine.v[0] = 123
    machine.step()
    with pytest.raises(OutOfBoundsAccess) as excinfo:
        machine.step()
    assert excinfo.value.address == 0xFFE
    assert excinfo.value.length == 3
    assert machine.memory[0xFFE] == 0
    assert machine.memory[0xFFF] == 0
    assert machine.pc == 0x202


def test_sprite_out_of_bounds(machine):
    machine.load_program(program(0xAFFC, 0xD01F))
    machine.step()
    with pytest.raises(OutOfBoundsAccess):
        machine.step()
    assert machine.framebuffer_snapshot().lit_count == 0


def test_register_block_copy_out_of_bounds(machine):
    machine.load_program(program(0xAFF8, 0xFF55))
    machine.v[:] = bytes(range(1, 17))
    machine.step()
    with pytest.raises(OutOfBoundsAccess):
        machine.step()
    assert machine.memory.read_span(0xFF8, 8) == bytes(8)


def test_block_copy_ending_at_last_byte_is_allowed(machine):
    machine.load_program(program(0xAFF0, 0xFF65))
    machine.memory[0xFFF] = 0x99
    machine.run(2)
    assert machine.v[0xF] == 0x99


def test_fetch_past_end_of_memory(machine):
    machine.load_program(program(0x1FFF))
    machine.step()
    with pytest.raises(OutOfBoundsAccess):
        machine.step()
    assert machine.pc == 0xFFF


def test_reset_clears_fault_and_keeps_program(machine):
    machine.load_program(program(0x6A01, 0x00EE))
    machine.step()
    with pytest.raises(StackUnderflow):
        machine.step()

    machine.memory[0x200] = 0x00  # self-modified code is undone by reset
    machine.reset()
    assert not machine.halted
    assert machine.pc == 0x200
    assert machine.v[0xA] == 0
    assert machine.memory[0x200] == 0x6A
    machine.step()
    assert machine.v[0xA] == 1
