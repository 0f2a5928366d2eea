from __future__ import annotations

from typing import List, Tuple

import pytest

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.chip8.hardware import Chip8Hardware
from chip8emu.system.computer import Computer


class StubCPU:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, int]] = []
        self.computer: Computer | None = None

    def execute(self, count: int) -> int:
        self.calls.append(("execute", count))
        return count

    def step(self) -> str:
        self.calls.append(("step", 1))
        return "effects"

    def reset(self) -> None:
        self.calls.append(("reset", 0))


def make_computer() -> Tuple[Computer, StubCPU]:
    computer = Computer(Chip8Hardware())
    cpu = StubCPU()
    computer.set_cpu(cpu)
    return computer, cpu


def test_set_cpu_binds_back_reference() -> None:
    computer, cpu = make_computer()

    assert cpu.computer is computer
    assert computer.cpu is cpu


def test_power_on_and_tick_runs_cpu() -> None:
    computer, cpu = make_computer()

    assert computer.tick(4) == 0
    computer.power_on()

    assert computer.get_running_status() == computer.STATUS_RUNNING
    assert ("reset", 0) in cpu.calls
    assert computer.tick(32) == 32
    assert ("execute", 32) in cpu.calls
    assert computer.instruction_count == 32


def test_pause_and_resume_controls_execution() -> None:
    computer, cpu = make_computer()
    computer.power_on()

    computer.pause()
    calls_before = len(cpu.calls)
    computer.tick(16)
    assert len(cpu.calls) == calls_before
    assert computer.get_running_status() == computer.STATUS_PAUSED

    computer.resume()
    computer.tick(4)
    assert ("execute", 4) in cpu.calls


def test_step_ignores_running_status() -> None:
    computer, cpu = make_computer()
    computer.power_on()
    computer.pause()

    assert computer.step() == "effects"
    assert computer.instruction_count == 1


def test_step_without_cpu_raises() -> None:
    computer = Computer(Chip8Hardware())
    with pytest.raises(RuntimeError):
        computer.step()


def test_power_off_stops_execution() -> None:
    computer, cpu = make_computer()
    computer.power_on()
    computer.power_off()

    assert computer.get_running_status() == computer.STATUS_STOPPED
    computer.tick(10)
    assert ("execute", 10) not in cpu.calls


def test_reset_invokes_cpu_and_clears_count() -> None:
    computer, cpu = make_computer()
    computer.power_on()
    computer.tick(3)
    computer.step()
    assert computer.instruction_count == 4

    computer.reset()

    assert cpu.calls.count(("reset", 0)) == 2
    assert computer.instruction_count == 0


def test_chip8_computer_runs_loaded_program() -> None:
    computer = Chip8Computer(seed=1)
    computer.load_program_bytes(bytes([0x60, 0x2A, 0x12, 0x02]), name="LOOP")
    computer.power_on()

    computer.tick(5)

    assert computer.cpu_core.registers.v[0] == 0x2A
    assert computer.cpu_core.registers.program_counter == 0x202
    assert computer.instruction_count == 5


def test_chip8_computer_reset_clears_screen_and_keys() -> None:
    computer = Chip8Computer()
    computer.display.toggle_pixel(5)
    computer.set_keypad_value(0x4, True)
    computer.set_draw_flag(False)

    computer.reset()

    assert not any(computer.display.pixels)
    assert computer.get_draw_flag() is True
    assert not computer.keypad.is_pressed(0x4)
