"""Headless execution helpers for CHIP-8 programs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from chip8emu.chip8.computer import Chip8Computer


@dataclass(frozen=True)
class KeyEvent:
    """Represents a keypad event scheduled by instruction count."""

    step: int
    key: int
    pressed: bool


def run_program(
    program: str | Path | bytes,
    *,
    total_steps: int,
    events: Sequence[KeyEvent] | None = None,
    seed: int | None = 0,
) -> tuple[Chip8Computer, List[int]]:
    """Execute a CHIP-8 program headlessly and capture PC history."""

    computer = Chip8Computer(seed=seed)
    if isinstance(program, bytes):
        computer.load_program_bytes(program, name="INLINE")
    else:
        computer.load_user_program(program)
    computer.power_on()

    pc_history: List[int] = []
    keypad = computer.keypad
    scheduled = sorted(events or [], key=lambda evt: evt.step)
    index = 0

    while computer.instruction_count < total_steps:
        while index < len(scheduled) and scheduled[index].step <= computer.instruction_count:
            evt = scheduled[index]
            keypad.set_key(evt.key, evt.pressed)
            index += 1

        computer.tick(1)
        pc_history.append(computer.cpu_core.registers.program_counter)

    return computer, pc_history
