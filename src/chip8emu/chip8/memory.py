"""CHIP-8 main memory with the built-in hexadecimal font."""

from __future__ import annotations

from typing import List

from chip8emu.memory import Memory

MEMORY_SIZE = 0x1000
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START
FONT_START = 0x000
FONT_GLYPH_BYTES = 5

FONT_SET: List[int] = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
]


class Chip8Memory(Memory):
    """4 KiB RAM; the font occupies the first 80 bytes of the reserved area."""

    def __init__(self) -> None:
        super().__init__(0x0000, MEMORY_SIZE)
        self.load_font()

    def load_font(self) -> None:
        self.load_block(FONT_START, FONT_SET)

    def glyph_address(self, digit: int) -> int:
        if not (0 <= digit <= 0xF):
            raise ValueError("digit out of range")
        return FONT_START + digit * FONT_GLYPH_BYTES

    def clear_program_area(self) -> None:
        self.data[PROGRAM_START:] = [0x00] * MAX_PROGRAM_SIZE
