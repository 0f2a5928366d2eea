"""CHIP-8 hardware bundle shared by the CPU and the host frontend."""

from __future__ import annotations

from dataclasses import dataclass, field

from chip8emu.chip8.display import Chip8Display
from chip8emu.chip8.keypad import Chip8Keypad
from chip8emu.chip8.memory import Chip8Memory


@dataclass
class Chip8Hardware:
    memory: Chip8Memory = field(default_factory=Chip8Memory)
    display: Chip8Display = field(default_factory=Chip8Display)
    keypad: Chip8Keypad = field(default_factory=Chip8Keypad)
