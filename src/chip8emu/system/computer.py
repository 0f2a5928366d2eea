"""Computer scaffold providing run control around a CPU core."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from chip8emu.chip8.hardware import Chip8Hardware
else:  # pragma: no cover - used for runtime only
    Chip8Hardware = object


class Computer:
    """Host machine tying together the hardware bundle and a CPU core."""

    STATUS_RUNNING = 0
    STATUS_PAUSED = 1
    STATUS_STOPPED = 2

    def __init__(self, hardware: Chip8Hardware) -> None:
        self.hardware = hardware
        self.instruction_count: int = 0
        self._cpu: Optional[object] = None
        self._running_status: int = self.STATUS_STOPPED

    # ------------------------------------------------------------------
    # CPU integration
    # ------------------------------------------------------------------
    @property
    def cpu(self) -> Optional[object]:
        return self._cpu

    def set_cpu(self, cpu: object) -> None:
        self._cpu = cpu
        if hasattr(cpu, "computer"):
            setattr(cpu, "computer", self)

    def tick(self, steps: int) -> int:
        """Run up to ``steps`` instructions while running; returns how many ran."""

        if steps <= 0 or self._running_status != self.STATUS_RUNNING:
            return 0
        executed = 0
        if self._cpu is not None:
            executed = self._cpu.execute(steps)
        self.instruction_count += executed
        return executed

    def step(self):
        """Execute a single instruction regardless of the running status."""

        if self._cpu is None:
            raise RuntimeError("CPU is not attached")
        effects = self._cpu.step()
        self.instruction_count += 1
        return effects

    # ------------------------------------------------------------------
    # Control lifecycle
    # ------------------------------------------------------------------
    def power_on(self) -> None:
        self.reset()
        self._running_status = self.STATUS_RUNNING

    def power_off(self) -> None:
        self._running_status = self.STATUS_STOPPED

    def reset(self) -> None:
        self.instruction_count = 0
        if self._cpu is not None and hasattr(self._cpu, "reset"):
            self._cpu.reset()

    def pause(self) -> None:
        if self._running_status == self.STATUS_RUNNING:
            self._running_status = self.STATUS_PAUSED

    def resume(self) -> None:
        if self._running_status == self.STATUS_PAUSED:
            self._running_status = self.STATUS_RUNNING

    def get_running_status(self) -> int:
        return self._running_status
