"""
chip8emu -- CHIP-8 interpreter

Command-line entry point.  Parses arguments, creates the emulated machine
from a ROM file, and launches the pygame display window.

Usage examples::

    # Run a ROM
    chip8emu roms/pong.ch8

    # Bigger window, faster CPU
    chip8emu roms/pong.ch8 --scale 15 --ticks-per-frame 20

    # Show ROM metadata / a linear disassembly without launching
    chip8emu roms/pong.ch8 --info
    chip8emu roms/pong.ch8 --disassemble

    # Run 120 frames without a window and print the screen as text
    chip8emu roms/ibm.ch8 --headless 120 --seed 1
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from chip8emu.core.errors import LoadError, MachineFault
from chip8emu.core.types import TICKS_PER_FRAME, TIMER_HZ
from chip8emu.shell.services.machine_factory import MachineFactory
from chip8emu.shell.services.rom_bytes_service import RomBytesService


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="chip8emu",
        description=(
            "CHIP-8 interpreter.  Load a ROM file and run it in a pygame window."
        ),
    )

    parser.add_argument(
        "rom",
        help="Path to the ROM file (.ch8)",
    )

    # Display
    parser.add_argument(
        "--scale", "-s",
        type=int,
        default=10,
        help="Display scale factor (1-20).  Default: 10.",
    )

    # Timing
    parser.add_argument(
        "--ticks-per-frame", "-t",
        type=int,
        default=TICKS_PER_FRAME,
        help=f"Instructions executed per timer tick.  Default: {TICKS_PER_FRAME}.",
    )
    parser.add_argument(
        "--timer-hz",
        type=int,
        default=TIMER_HZ,
        help=f"Timer and display refresh rate in Hz.  Default: {TIMER_HZ}.",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random number instruction (default: unseeded).",
    )

    # Debugging / info
    parser.add_argument(
        "--info",
        action="store_true",
        default=False,
        help="Print ROM metadata and exit without launching the emulator.",
    )
    parser.add_argument(
        "--disassemble",
        action="store_true",
        default=False,
        help="Print a linear disassembly of the ROM and exit.",
    )
    parser.add_argument(
        "--headless",
        type=int,
        default=None,
        metavar="FRAMES",
        help="Run FRAMES frames without a window, then print the screen as text.",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
    )

    return parser


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(verbosity: int) -> None:
    """Set up the root logger based on requested verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Info modes
# ---------------------------------------------------------------------------

def _print_rom_info(rom_path: str) -> None:
    """Print human-readable metadata for a ROM."""
    info = MachineFactory.describe(rom_path)

    print("chip8emu ROM Information")
    print("=" * 40)
    for key, value in info.items():
        label = key.replace("_", " ").title()
        print(f"  {label:20s}: {value}")
    print("=" * 40)


def _print_disassembly(rom_path: str) -> None:
    data = RomBytesService.read(rom_path)
    for address, raw, ins in RomBytesService.disassemble(data):
        print(f"${address:03X}  {raw:04X}  {ins}")


# ---------------------------------------------------------------------------
# Headless runner
# ---------------------------------------------------------------------------

def _run_headless(machine, frames: int, ticks_per_frame: int) -> int:
    """Drive the machine without a window and dump the final screen."""
    logger = logging.getLogger("chip8emu.main")
    beeps = 0
    for _ in range(frames):
        machine.run(ticks_per_frame)
        if machine.advance_timers():
            beeps += 1

    snapshot = machine.framebuffer_snapshot()
    print(snapshot.to_text())
    print(f"{machine!r}  beeps={beeps}  lit={snapshot.lit_count}")
    logger.info("Headless run finished after %d frames", frames)
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` to use ``sys.argv``.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger("chip8emu.main")

    # Validate the ROM path early.
    rom_path: str = os.path.expanduser(args.rom)
    if not os.path.isfile(rom_path):
        print(f"Error: ROM file not found: {rom_path}", file=sys.stderr)
        return 1

    try:
        if args.info:
            _print_rom_info(rom_path)
            return 0
        if args.disassemble:
            _print_disassembly(rom_path)
            return 0
    except OSError as exc:
        print(f"Error reading ROM: {exc}", file=sys.stderr)
        return 1

    # Create the emulated machine.
    try:
        machine = MachineFactory.create(rom_path, seed=args.seed)
    except (FileNotFoundError, LoadError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.headless is not None:
        try:
            return _run_headless(machine, args.headless, args.ticks_per_frame)
        except MachineFault as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    # Launch the window.  Imported here so --info / --headless work without
    # a display.
    from chip8emu.platform.window import Window

    logger.info("Starting emulation ...")
    try:
        window = Window(
            machine,
            scale=args.scale,
            ticks_per_frame=args.ticks_per_frame,
            timer_hz=args.timer_hz,
        )
        window.run()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        logger.exception("Fatal error during emulation")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    logger.info("Exited cleanly")
    return 0


if __name__ == "__main__":
    sys.exit(main())
