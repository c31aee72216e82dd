"""Tests for the leaf components: timers, keypad, framebuffer, memory, font."""

import pytest

from chip8emu.core.errors import OutOfBoundsAccess
from chip8emu.core.font_tables import FONT_SET, glyph
from chip8emu.core.frame_buffer import FrameBuffer
from chip8emu.core.input_state import KeyboardState
from chip8emu.core.memory import Memory
from chip8emu.core.timers import TimerUnit


# ---------------------------------------------------------------------------
# TimerUnit
# ---------------------------------------------------------------------------

def test_timers_count_down_independently():
    t = TimerUnit()
    t.delay, t.sound = 2, 4
    t.tick()
    assert (t.delay, t.sound) == (1, 3)
    t.tick()
    t.tick()
    assert (t.delay, t.sound) == (0, 1)


def test_timers_stop_at_zero():
    t = TimerUnit()
    assert t.tick() is False
    assert (t.delay, t.sound) == (0, 0)


def test_beep_edge_reported_once():
    t = TimerUnit()
    t.sound = 3
    edges = [t.tick() for _ in range(6)]
    assert edges == [False, False, True, False, False, False]
    assert not t.sound_active


# ---------------------------------------------------------------------------
# KeyboardState
# ---------------------------------------------------------------------------

def test_press_and_release():
    k = KeyboardState()
    k.set_key(0xF, True)
    k.set_key(0x0, True)
    assert k.mask == 0x8001
    k.set_key(0xF, False)
    assert k.mask == 0x0001
    assert k.is_pressed(0)
    assert not k.is_pressed(0xF)


def test_lowest_pressed():
    k = KeyboardState()
    assert k.lowest_pressed() is None
    k.set_key(0xA, True)
    k.set_key(0x3, True)
    assert k.lowest_pressed() == 0x3


@pytest.mark.parametrize("index", [-1, 16, 255])
def test_bad_key_index(index):
    with pytest.raises(ValueError):
        KeyboardState().set_key(index, True)


def test_register_values_above_keypad_read_released():
    k = KeyboardState()
    k.set_key(0, True)
    assert not k.is_pressed(0x10)


# ---------------------------------------------------------------------------
# FrameBuffer
# ---------------------------------------------------------------------------

def test_xor_pixel_reports_erase():
    fb = FrameBuffer()
    assert fb.xor_pixel(5, 5) is False
    assert fb.read_pixel(5, 5) == 1
    assert fb.xor_pixel(5, 5) is True
    assert fb.read_pixel(5, 5) == 0


def test_xor_pixel_wraps():
    fb = FrameBuffer()
    fb.xor_pixel(64 + 2, 32 + 1)
    assert fb.read_pixel(2, 1) == 1


def test_snapshot_text():
    fb = FrameBuffer(width=3, height=2)
    fb.xor_pixel(1, 0)
    assert fb.snapshot().to_text() == ".#.\n..."


def test_clear():
    fb = FrameBuffer()
    fb.xor_pixel(0, 0)
    fb.clear()
    assert fb.snapshot().lit_count == 0


# ---------------------------------------------------------------------------
# Memory and font
# ---------------------------------------------------------------------------

def test_font_preloaded_and_restored_by_reset():
    mem = Memory()
    assert mem.read_span(0, 80) == FONT_SET
    mem[0] = 0
    mem[0x500] = 7
    mem.reset()
    assert mem[0] == FONT_SET[0]
    assert mem[0x500] == 0


def test_span_checks():
    mem = Memory()
    mem.check_span(4095, 1)
    mem.check_span(4096, 0)
    with pytest.raises(OutOfBoundsAccess):
        mem.check_span(4095, 2)
    with pytest.raises(OutOfBoundsAccess):
        mem.write_span(4094, b"\x01\x02\x03")
    assert mem[4094] == 0


def test_read_word_is_big_endian():
    mem = Memory()
    mem.write_span(0x300, b"\xAB\xCD")
    assert mem.read_word(0x300) == 0xABCD


def test_glyph():
    assert glyph(0xF) == bytes([0xF0, 0x80, 0xF0, 0x80, 0x80])
    with pytest.raises(ValueError):
        glyph(16)
