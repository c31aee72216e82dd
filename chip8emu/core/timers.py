"""
Delay and sound timers.

Both counters are 8 bits wide and count down by one per :meth:`TimerUnit.tick`
while nonzero.  The driver calls ``tick`` at a fixed cadence (nominally
60 Hz) independent of how many instructions it executes per tick.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class TimerUnit:
    """The two CHIP-8 countdown timers."""

    def __init__(self) -> None:
        self.delay: int = 0
        self.sound: int = 0

    def reset(self) -> None:
        self.delay = 0
        self.sound = 0

    @property
    def sound_active(self) -> bool:
        """``True`` while the sound timer is running."""
        return self.sound > 0

    def tick(self) -> bool:
        """Count both timers down once.

        Returns:
            ``True`` when the sound timer passed through 1 on this tick,
            the edge at which a host emits one beep.
        """
        if self.delay > 0:
            self.delay -= 1

        beep = self.sound == 1
        if self.sound > 0:
            self.sound -= 1

        if beep:
            logger.debug("Sound timer expired")
        return beep

    def __repr__(self) -> str:
        return f"TimerUnit(delay={self.delay}, sound={self.sound})"
