"""Instruction word decoding and disassembly."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

# (mask, pattern, operation name, assembler template)
_PATTERNS: List[Tuple[int, int, str, str]] = [
    (0xFFFF, 0x00E0, "CLS", "CLS"),
    (0xFFFF, 0x00EE, "RET", "RET"),
    (0xF000, 0x1000, "JP", "JP 0x{nnn:03X}"),
    (0xF000, 0x2000, "CALL", "CALL 0x{nnn:03X}"),
    (0xF000, 0x3000, "SE_IMM", "SE V{x:X}, 0x{nn:02X}"),
    (0xF000, 0x4000, "SNE_IMM", "SNE V{x:X}, 0x{nn:02X}"),
    (0xF000, 0x5000, "SE_REG", "SE V{x:X}, V{y:X}"),
    (0xF000, 0x6000, "LD_IMM", "LD V{x:X}, 0x{nn:02X}"),
    (0xF000, 0x7000, "ADD_IMM", "ADD V{x:X}, 0x{nn:02X}"),
    (0xF00F, 0x8000, "LD_REG", "LD V{x:X}, V{y:X}"),
    (0xF00F, 0x8001, "OR", "OR V{x:X}, V{y:X}"),
    (0xF00F, 0x8002, "AND", "AND V{x:X}, V{y:X}"),
    (0xF00F, 0x8003, "XOR", "XOR V{x:X}, V{y:X}"),
    (0xF00F, 0x8004, "ADD_REG", "ADD V{x:X}, V{y:X}"),
    (0xF00F, 0x8005, "SUB", "SUB V{x:X}, V{y:X}"),
    (0xF00F, 0x8006, "SHR", "SHR V{x:X}"),
    (0xF00F, 0x8007, "SUBN", "SUBN V{x:X}, V{y:X}"),
    (0xF00F, 0x800E, "SHL", "SHL V{x:X}"),
    (0xF000, 0x9000, "SNE_REG", "SNE V{x:X}, V{y:X}"),
    (0xF000, 0xA000, "LD_I", "LD I, 0x{nnn:03X}"),
    (0xF000, 0xB000, "JP_V0", "JP V0, 0x{nnn:03X}"),
    (0xF000, 0xC000, "RND", "RND V{x:X}, 0x{nn:02X}"),
    (0xF000, 0xD000, "DRW", "DRW V{x:X}, V{y:X}, {n}"),
    (0xF0FF, 0xE09E, "SKP", "SKP V{x:X}"),
    (0xF0FF, 0xE0A1, "SKNP", "SKNP V{x:X}"),
    (0xF0FF, 0xF007, "LD_VX_DT", "LD V{x:X}, DT"),
    (0xF0FF, 0xF00A, "LD_VX_K", "LD V{x:X}, K"),
    (0xF0FF, 0xF015, "LD_DT_VX", "LD DT, V{x:X}"),
    (0xF0FF, 0xF018, "LD_ST_VX", "LD ST, V{x:X}"),
    (0xF0FF, 0xF01E, "ADD_I_VX", "ADD I, V{x:X}"),
    (0xF0FF, 0xF029, "LD_F_VX", "LD F, V{x:X}"),
    (0xF0FF, 0xF033, "LD_B_VX", "LD B, V{x:X}"),
    (0xF0FF, 0xF055, "LD_MEM_VX", "LD [I], V{x:X}"),
    (0xF0FF, 0xF065, "LD_VX_MEM", "LD V{x:X}, [I]"),
]


@dataclass(frozen=True)
class Instruction:
    """A 16-bit instruction word split into its operand fields.

    ``family`` is the top nibble. ``x`` and ``y`` are register indices from the
    second and third nibbles, ``n`` the low nibble, ``nn`` the low byte and
    ``nnn`` the low 12 bits.
    """

    word: int
    family: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    @property
    def name(self) -> Optional[str]:
        """Operation name, or None when the word is not a valid instruction."""

        pattern = _match(self.word)
        return pattern[2] if pattern is not None else None

    def disassemble(self) -> str:
        pattern = _match(self.word)
        if pattern is None:
            return f"DW 0x{self.word:04X}"
        return pattern[3].format(x=self.x, y=self.y, n=self.n, nn=self.nn, nnn=self.nnn)


def decode(word: int) -> Instruction:
    word &= 0xFFFF
    return Instruction(
        word=word,
        family=(word & 0xF000) >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        nn=word & 0x00FF,
        nnn=word & 0x0FFF,
    )


def disassemble(word: int) -> str:
    return decode(word).disassemble()


def _match(word: int) -> Optional[Tuple[int, int, str, str]]:
    for mask, pattern, name, template in _PATTERNS:
        if word & mask == pattern:
            return mask, pattern, name, template
    return None
