"""Exception hierarchy for CHIP-8 machine faults."""

from __future__ import annotations

from typing import Optional


class Chip8Error(RuntimeError):
    """Base class for every fault raised by the emulator core."""

    def __init__(self, message: str, *, address: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.address = address


class InvalidInstructionError(Chip8Error):
    """Raised for unknown instruction words when the CPU runs in strict mode."""

    def __init__(self, word: int, address: int) -> None:
        super().__init__(f"invalid instruction 0x{word:04X} at 0x{address:03X}", address=address)
        self.word = word & 0xFFFF


class StackOverflowError(Chip8Error):
    """Subroutine call with every stack slot already in use."""


class StackUnderflowError(Chip8Error):
    """Subroutine return with an empty stack."""


class MemoryAccessError(Chip8Error):
    """Read or write outside the addressable range."""


__all__ = [
    "Chip8Error",
    "InvalidInstructionError",
    "StackOverflowError",
    "StackUnderflowError",
    "MemoryAccessError",
]
