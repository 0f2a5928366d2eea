"""Headless end-to-end runs of small CHIP-8 programs."""

from __future__ import annotations

import importlib.util
from pathlib import Path
import sys

_HELPER_PATH = Path(__file__).resolve().parents[1] / "helpers" / "headless.py"
_SPEC = importlib.util.spec_from_file_location("headless_helper", _HELPER_PATH)
_MODULE = importlib.util.module_from_spec(_SPEC)
assert _SPEC is not None and _SPEC.loader is not None
sys.modules[_SPEC.name] = _MODULE
_SPEC.loader.exec_module(_MODULE)  # type: ignore[arg-type]

KeyEvent = _MODULE.KeyEvent
run_program = _MODULE.run_program


# Prints V0 (=137) as three decimal digits at the top left, then spins.
SCORE_PROGRAM = bytes(
    [
        0x60, 0x89,  # 200: LD V0, 0x89
        0xA3, 0x00,  # 202: LD I, 0x300
        0xF0, 0x33,  # 204: LD B, V0
        0xF2, 0x65,  # 206: LD V2, [I]
        0x63, 0x00,  # 208: LD V3, 0x00
        0x64, 0x00,  # 20A: LD V4, 0x00
        0xF0, 0x29,  # 20C: LD F, V0
        0xD3, 0x45,  # 20E: DRW V3, V4, 5
        0x73, 0x05,  # 210: ADD V3, 0x05
        0xF1, 0x29,  # 212: LD F, V1
        0xD3, 0x45,  # 214: DRW V3, V4, 5
        0x73, 0x05,  # 216: ADD V3, 0x05
        0xF2, 0x29,  # 218: LD F, V2
        0xD3, 0x45,  # 21A: DRW V3, V4, 5
        0x12, 0x1C,  # 21C: JP 0x21C
    ]
)

# Waits for a key, draws the glyph of that key, then spins.
KEY_ECHO_PROGRAM = bytes(
    [
        0xF5, 0x0A,  # 200: LD V5, K
        0xF5, 0x29,  # 202: LD F, V5
        0x60, 0x00,  # 204: LD V0, 0x00
        0xD0, 0x05,  # 206: DRW V0, V0, 5
        0x12, 0x08,  # 208: JP 0x208
    ]
)

# Counts V1 down from 3 through a subroutine, then halts on a self jump.
SUBROUTINE_PROGRAM = bytes(
    [
        0x61, 0x03,  # 200: LD V1, 0x03
        0x22, 0x0A,  # 202: CALL 0x20A
        0x31, 0x00,  # 204: SE V1, 0x00
        0x12, 0x02,  # 206: JP 0x202
        0x12, 0x08,  # 208: JP 0x208
        0x71, 0xFF,  # 20A: ADD V1, 0xFF
        0x00, 0xEE,  # 20C: RET
    ]
)


def _glyph_rows(display, left: int) -> list[str]:
    rows = display.render_text().splitlines()
    return [row[left:left + 4] for row in rows[:5]]


def test_score_digits_render_from_font() -> None:
    computer, pc_history = run_program(SCORE_PROGRAM, total_steps=40)

    assert pc_history[-1] == 0x21C
    assert computer.cpu_core.registers.v[0:3] == [1, 3, 7]
    assert computer.memory.read_block(0x300, 3) == [1, 3, 7]
    assert computer.cpu_core.registers.v[0xF] == 0
    display = computer.display
    assert _glyph_rows(display, 0) == ["..#.", ".##.", "..#.", "..#.", ".###"]
    assert _glyph_rows(display, 5) == ["####", "...#", "####", "...#", "####"]
    assert _glyph_rows(display, 10) == ["####", "...#", "..#.", ".#..", ".#.."]
    assert display.dirty is True


def test_key_wait_blocks_until_key_event(tmp_path: Path) -> None:
    rom = tmp_path / "echo.ch8"
    rom.write_bytes(KEY_ECHO_PROGRAM)

    computer, pc_history = run_program(
        rom,
        total_steps=30,
        events=[KeyEvent(step=20, key=0xE, pressed=True)],
    )

    assert pc_history[:20] == [0x200] * 20
    assert computer.cpu_core.registers.v[5] == 0xE
    assert pc_history[-1] == 0x208
    assert _glyph_rows(computer.display, 0) == ["####", "#...", "####", "#...", "####"]
    assert computer.program_info.name == "ECHO"


def test_subroutine_loop_unwinds_stack() -> None:
    computer, pc_history = run_program(SUBROUTINE_PROGRAM, total_steps=60)

    regs = computer.cpu_core.registers
    assert regs.v[1] == 0
    assert regs.stack_pointer == 0
    assert regs.program_counter == 0x208
    assert pc_history.count(0x20A) == 3
