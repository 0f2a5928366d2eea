"""Debug overlay rendering for the pygame frontend."""

from __future__ import annotations

from collections import deque
from typing import Iterable

from chip8emu.cpu.decoder import disassemble
from chip8emu.errors import MemoryAccessError


class DebugOverlay:
    """Collects and renders CPU state while the frontend is paused."""

    TRACE_LENGTH = 32
    INSTRUCTIONS = [
        "F1: toggle debug",
        "N: step",
        "ESC: quit",
    ]

    def __init__(self, computer) -> None:
        self._computer = computer
        self._trace: deque[int] = deque(maxlen=self.TRACE_LENGTH)
        self._font = None
        self._line_height = 0
        self._cached_cpu_lines: list[str] = []
        self._cached_stack_lines: list[str] = []
        self._cached_program: list[str] = []
        self._status_message: str = ""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def record_execution(self, pc: int) -> None:
        """Record the latest program counter for trace display."""

        self._trace.append(pc & 0xFFFF)

    def capture_state(self) -> None:
        """Snapshot CPU, stack and program state for later rendering."""

        cpu = getattr(self._computer, "cpu_core", None)
        memory = getattr(self._computer, "memory", None)
        program_info = getattr(self._computer, "program_info", None)

        self._cached_cpu_lines = self._snapshot_cpu(cpu, memory)
        self._cached_stack_lines = self._snapshot_stack(cpu)
        self._cached_program = self._snapshot_program(program_info)

    def sections(self) -> list[tuple[str, list[str]]]:
        return [
            ("CPU", self._cached_cpu_lines),
            ("Stack", self._cached_stack_lines),
            ("Program", self._cached_program),
            ("Trace", self._format_trace_lines()),
            ("Controls", list(self.INSTRUCTIONS)),
        ]

    def render(self, screen) -> None:
        """Render the overlay onto the given pygame surface."""

        import pygame  # type: ignore

        self._ensure_font()
        self.capture_state()

        overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 196))

        x_cursor = 8
        y_cursor = 8
        if self._font is not None and self._status_message:
            status_surface = self._font.render(self._status_message, True, (173, 216, 230))
            overlay.blit(status_surface, (x_cursor, y_cursor))
            y_cursor += self._line_height + 4

        column_x = x_cursor
        column_y = y_cursor
        for title, lines in self.sections():
            bottom = column_y + self._line_height * (len(lines) + 1)
            if bottom > screen.get_height() and column_y != y_cursor:
                column_x += self._measure_sections(self.sections()) + 16
                column_y = y_cursor
            column_y = self._render_section(overlay, column_x, column_y, title, lines) + 4

        screen.blit(overlay, (0, 0))

    def get_trace(self) -> list[int]:
        """Expose a copy of the recent trace for tests."""

        return list(self._trace)

    def set_status(self, message: str) -> None:
        self._status_message = message

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_font(self) -> None:
        if self._font is not None:
            return
        import pygame  # type: ignore

        pygame.font.init()
        self._font = pygame.font.SysFont("Courier", 12)
        self._line_height = self._font.get_linesize()

    def _render_section(self, surface, x: int, y: int, title: str, lines: Iterable[str]) -> int:
        if self._font is None:
            return y
        title_surface = self._font.render(title, True, (255, 215, 0))
        surface.blit(title_surface, (x, y))
        cursor_y = y + self._line_height
        for line in lines:
            rendered = self._font.render(line, True, (230, 230, 230))
            surface.blit(rendered, (x, cursor_y))
            cursor_y += self._line_height
        return cursor_y

    def _measure_sections(self, sections: Iterable[tuple[str, Iterable[str]]]) -> int:
        if self._font is None:
            return 0
        max_width = 0
        for title, lines in sections:
            max_width = max(max_width, self._font.size(title)[0])
            for line in lines:
                max_width = max(max_width, self._font.size(line)[0])
        return max_width

    def _snapshot_cpu(self, cpu, memory) -> list[str]:
        if cpu is None:
            return ["CPU not attached"]
        regs = cpu.registers
        lines = [
            f"PC:{regs.program_counter:03X}  I:{regs.index:03X}  DT:{regs.delay_timer:02X}",
            " ".join(f"V{index:X}:{regs.v[index]:02X}" for index in range(8)),
            " ".join(f"V{index:X}:{regs.v[index]:02X}" for index in range(8, 16)),
        ]
        if memory is not None:
            try:
                word = memory.load16(regs.program_counter)
            except MemoryAccessError:
                lines.append("NEXT: <out of range>")
            else:
                lines.append(f"NEXT: {word:04X} {disassemble(word)}")
        effects = getattr(cpu, "last_effects", None)
        if effects is not None and effects.waiting_for_key:
            lines.append("STATUS: waiting for key")
        return lines

    def _snapshot_stack(self, cpu) -> list[str]:
        if cpu is None:
            return ["Stack unavailable"]
        regs = cpu.registers
        if regs.stack_pointer == 0:
            return ["<empty>"]
        return [f"{slot:X}: {regs.stack[slot]:03X}" for slot in reversed(range(regs.stack_pointer))]

    def _snapshot_program(self, info) -> list[str]:
        if info is None:
            return ["No program loaded"]
        lines = [f"Name: {info.name or '-'}"]
        if info.path is not None:
            lines.append(f"File: {info.path.name}")
        lines.append(f"Range: {info.start:03X}-{info.end:03X} ({info.length} bytes)")
        return lines

    def _format_trace_lines(self) -> list[str]:
        entries = list(self._trace)
        if not entries:
            return ["<empty>"]
        grouped: list[str] = []
        line: list[str] = []
        for pc in reversed(entries):
            line.append(f"{pc:03X}")
            if len(line) == 8:
                grouped.append(" ".join(line))
                line = []
        if line:
            grouped.append(" ".join(line))
        return grouped
