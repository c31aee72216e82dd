"""Emulator core: machine state, decoder, executor and timers."""
