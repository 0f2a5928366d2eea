"""CHIP-8 system wiring."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import random
from typing import Optional

from chip8emu.chip8.display import Chip8Display
from chip8emu.chip8.hardware import Chip8Hardware
from chip8emu.chip8.keypad import Chip8Keypad
from chip8emu.chip8.memory import Chip8Memory
from chip8emu.cpu.cpu import Chip8CPU
from chip8emu.emulator.file import ProgramInfo, ProgramLoadError, load_program, load_program_bytes
from chip8emu.system.computer import Computer

logger = logging.getLogger(__name__)


class Chip8Computer(Computer):
    """Concrete CHIP-8 machine: memory, framebuffer, keypad and CPU."""

    ENV_ROM_PATH = "CHIP8EMU_ROM"

    def __init__(self, *, strict: bool = False, seed: Optional[int] = None) -> None:
        hardware = Chip8Hardware()
        super().__init__(hardware=hardware)
        self.program_info: Optional[ProgramInfo] = None
        rng = random.Random(seed) if seed is not None else None
        self.cpu_core = Chip8CPU(self, strict=strict, rng=rng)
        self.set_cpu(self.cpu_core)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def memory(self) -> Chip8Memory:
        return self.hardware.memory

    @property
    def display(self) -> Chip8Display:
        return self.hardware.display

    @property
    def keypad(self) -> Chip8Keypad:
        return self.hardware.keypad

    def get_draw_flag(self) -> bool:
        return self.display.dirty

    def set_draw_flag(self, flag: bool) -> None:
        self.display.dirty = bool(flag)

    def set_keypad_value(self, index: int, pressed: bool) -> None:
        self.keypad.set_key(index, pressed)

    def reset(self) -> None:
        super().reset()
        self.display.clear()
        self.keypad.clear()

    # ------------------------------------------------------------------
    # Program loading
    # ------------------------------------------------------------------
    @classmethod
    def resolve_rom_path(cls, rom_path: str | os.PathLike[str] | None) -> Optional[Path]:
        if rom_path is not None and str(rom_path):
            return Path(rom_path)
        env_value = os.getenv(cls.ENV_ROM_PATH)
        if env_value:
            return Path(env_value)
        return None

    def load_user_program(self, path: str | os.PathLike[str]) -> ProgramInfo:
        self.memory.clear_program_area()
        info = load_program(self.memory, path)
        self.program_info = info
        self.cpu_core.reset()
        logger.info("Loaded %s (%d bytes)", info.name, info.length)
        return info

    def load_program_bytes(self, data: bytes, *, name: str = "") -> ProgramInfo:
        self.memory.clear_program_area()
        info = load_program_bytes(self.memory, data, name=name)
        self.program_info = info
        self.cpu_core.reset()
        return info

    def load_rom(self, path: str | os.PathLike[str]) -> bool:
        """Load a program image, reporting failure as ``False``."""

        try:
            self.load_user_program(path)
        except ProgramLoadError as exc:
            logger.error("ROM could not be loaded: %s", exc)
            return False
        return True
