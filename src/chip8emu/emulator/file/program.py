"""Raw CHIP-8 program image loading."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from chip8emu.chip8.memory import MAX_PROGRAM_SIZE, PROGRAM_START
from chip8emu.errors import Chip8Error
from chip8emu.memory import Memory


class ProgramLoadError(Chip8Error):
    """Raised when a program image cannot be read or does not fit."""


@dataclass
class ProgramInfo:
    name: str = ""
    start: int = PROGRAM_START
    length: int = 0
    path: Optional[Path] = None

    @property
    def end(self) -> int:
        """Address of the last loaded byte (``start - 1`` for an empty image)."""

        return self.start + self.length - 1


def load_program_bytes(memory: Memory, data: bytes, *, name: str = "") -> ProgramInfo:
    """Copy a headerless program image into memory at 0x200."""

    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramLoadError(
            f"program is {len(data)} bytes; at most {MAX_PROGRAM_SIZE} bytes fit above 0x{PROGRAM_START:03X}"
        )
    memory.load_block(PROGRAM_START, data)
    return ProgramInfo(name=name, start=PROGRAM_START, length=len(data))


def load_program(memory: Memory, path: str | Path) -> ProgramInfo:
    """Load a CHIP-8 binary file into memory."""

    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise ProgramLoadError(f"cannot read {file_path}: {exc.strerror or exc}") from exc
    info = load_program_bytes(memory, data, name=file_path.stem.upper())
    info.path = file_path
    return info
