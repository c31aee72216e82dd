"""
Main application window for chip8emu.
Uses pygame to create a display and drive the emulation main loop.

Each iteration of the loop is one timer period:

1. Poll input and forward key events to the machine.
2. Run ``ticks_per_frame`` instruction steps.
3. Tick the delay / sound timers once.
4. Render the framebuffer and throttle to ``timer_hz``.

Typical usage::

    from chip8emu.platform.window import Window

    machine = MachineFactory.create("pong.ch8")
    window = Window(machine, scale=10)
    window.run()
"""

from __future__ import annotations

import logging
import time

import pygame

from chip8emu.core.errors import MachineFault
from chip8emu.core.types import TICKS_PER_FRAME, TIMER_HZ
from chip8emu.platform.input_handler import InputHandler
from chip8emu.shell.frame_renderer import FrameRenderer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE: str = "chip8emu"

# Minimum / maximum allowed display scale factors.
_MIN_SCALE: int = 1
_MAX_SCALE: int = 20


class Window:
    """Pygame window that owns the emulation main loop.

    Parameters
    ----------
    machine:
        A :class:`~chip8emu.core.machine.Chip8` with a program loaded.
    scale:
        Integer scale factor applied to the native 64x32 resolution.
    ticks_per_frame:
        Instructions executed per timer tick.
    timer_hz:
        Timer tick (and display refresh) rate.
    """

    def __init__(
        self,
        machine: object,
        scale: int = 10,
        *,
        ticks_per_frame: int = TICKS_PER_FRAME,
        timer_hz: int = TIMER_HZ,
    ) -> None:
        # ---- basic state -------------------------------------------------
        self._machine = machine
        self._scale: int = max(_MIN_SCALE, min(_MAX_SCALE, scale))
        self._ticks_per_frame: int = max(1, ticks_per_frame)
        self._timer_hz: int = max(1, timer_hz)
        self._running: bool = False
        self._paused: bool = False
        self._beeps: int = 0

        fb = machine.frame_buffer  # type: ignore[attr-defined]
        self._native_width: int = fb.width
        self._native_height: int = fb.height

        # ---- init pygame display -----------------------------------------
        if not pygame.get_init():
            pygame.init()

        self._display_width: int = self._native_width * self._scale
        self._display_height: int = self._native_height * self._scale

        self._screen: pygame.Surface = pygame.display.set_mode(
            (self._display_width, self._display_height),
            pygame.RESIZABLE,
        )
        pygame.display.set_caption(_WINDOW_TITLE)

        self._clock: pygame.time.Clock = pygame.time.Clock()

        # ---- subsystems --------------------------------------------------
        self._frame_renderer: FrameRenderer = FrameRenderer(machine)
        self._input: InputHandler = InputHandler(machine)

        # ---- performance counters ----------------------------------------
        self._frame_count: int = 0
        self._fps_update_time: float = 0.0
        self._fps_display: float = 0.0

        logger.info(
            "Window: %dx%d native, %dx%d display (scale=%d, %d Hz, %d ticks/frame)",
            self._native_width,
            self._native_height,
            self._display_width,
            self._display_height,
            self._scale,
            self._timer_hz,
            self._ticks_per_frame,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        self._paused = value

    @property
    def scale(self) -> int:
        return self._scale

    @property
    def beeps(self) -> int:
        """Number of sound-timer expiries seen so far."""
        return self._beeps

    @property
    def fps(self) -> float:
        """The measured frames-per-second (updated once per second)."""
        return self._fps_display

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Enter the main emulation loop.

        Blocks until the user closes the window or presses Escape.
        """
        self._running = True
        self._fps_update_time = time.monotonic()
        self._frame_count = 0

        logger.info("Entering main loop (target %d fps)", self._timer_hz)

        try:
            while self._running:
                self._tick()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self._shutdown()

    # ------------------------------------------------------------------
    # Per-frame tick
    # ------------------------------------------------------------------

    def _tick(self) -> None:
        """Execute one iteration of the main loop."""
        # ---- input -------------------------------------------------------
        self._input.poll()
        if self._input.quit_requested:
            self._running = False
            return
        if self._input.take_pause_toggle():
            self._paused = not self._paused
            logger.info("Paused" if self._paused else "Resumed")

        # ---- emulation ---------------------------------------------------
        if not self._paused and not self._machine.halted:  # type: ignore[attr-defined]
            self.run_frame()

        # ---- video -------------------------------------------------------
        surface = self._frame_renderer.render()

        current_size = self._screen.get_size()
        if surface.get_size() != current_size:
            scaled = pygame.transform.scale(surface, current_size)
        else:
            scaled = surface
        self._screen.blit(scaled, (0, 0))
        pygame.display.flip()

        # ---- timing ------------------------------------------------------
        self._clock.tick(self._timer_hz)
        self._update_fps()

    def run_frame(self) -> None:
        """Run one batch of instructions followed by one timer tick.

        A machine fault stops emulation; the window stays open showing the
        last frame until the user quits.
        """
        machine = self._machine
        try:
            for _ in range(self._ticks_per_frame):
                machine.step()  # type: ignore[attr-defined]
        except MachineFault as fault:
            logger.error("Emulation stopped: %s", fault)
            pygame.display.set_caption(f"{_WINDOW_TITLE}  [halted: {fault.message}]")
            return

        if machine.advance_timers():  # type: ignore[attr-defined]
            self._beeps += 1
            logger.debug("Beep #%d", self._beeps)

    # ------------------------------------------------------------------
    # FPS tracking
    # ------------------------------------------------------------------

    def _update_fps(self) -> None:
        """Update the displayed FPS counter roughly once per second."""
        self._frame_count += 1
        now = time.monotonic()
        elapsed = now - self._fps_update_time
        if elapsed >= 1.0:
            self._fps_display = self._frame_count / elapsed
            self._frame_count = 0
            self._fps_update_time = now

            if not self._machine.halted:  # type: ignore[attr-defined]
                state = "  [paused]" if self._paused else ""
                pygame.display.set_caption(
                    f"{_WINDOW_TITLE}  [{self._fps_display:.1f} fps]{state}"
                )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        logger.info("Shutting down")
        pygame.quit()
