"""File loading helpers for the CHIP-8 emulator."""

from chip8emu.emulator.file.program import (
    ProgramInfo,
    ProgramLoadError,
    load_program,
    load_program_bytes,
)

__all__ = [
    "ProgramInfo",
    "ProgramLoadError",
    "load_program",
    "load_program_bytes",
]
