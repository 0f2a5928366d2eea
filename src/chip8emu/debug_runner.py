"""Headless runner for CHIP-8 program debugging workflows."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.cpu.decoder import disassemble
from chip8emu.emulator.file import ProgramLoadError
from chip8emu.errors import Chip8Error


DEFAULT_MAX_STEPS = 100_000
ADDRESS_MASK = 0x0FFF


@dataclass(frozen=True)
class DumpRange:
    """Inclusive memory range used for dumping."""

    start: int
    end: int

    @classmethod
    def parse(cls, text: str) -> "DumpRange":
        start_text, sep, end_text = text.partition(":")
        if not sep:
            raise ValueError("expected START:END")
        start = _parse_address(start_text)
        end = _parse_address(end_text)
        if end < start:
            raise ValueError("range end precedes start")
        return cls(start, end)


def _parse_address(text: str) -> int:
    value = int(text.strip(), 16)
    if not (0 <= value <= ADDRESS_MASK):
        raise ValueError(f"address {text.strip()} outside 000-FFF")
    return value


def _dump_addresses(dump_ranges: Sequence[DumpRange]) -> List[int]:
    if not dump_ranges:
        return list(range(ADDRESS_MASK + 1))
    selected: set[int] = set()
    for dump_range in dump_ranges:
        selected.update(range(dump_range.start, dump_range.end + 1))
    return sorted(selected)


def _format_hex_dump(memory, addresses: Iterable[int]) -> str:
    # Whole 16-byte rows around every requested address.
    lines = ["ADDR " + " ".join(f"+{offset:X}" for offset in range(16))]
    for base in sorted({address & ~0x0F for address in addresses}):
        cells = " ".join(f"{memory.load8(base + offset):02X}" for offset in range(16))
        lines.append(f"{base:04X} {cells}")
    return "\n".join(lines)


def _format_registers(cpu) -> str:
    regs = cpu.registers
    values = " ".join(f"V{index:X}={value:02X}" for index, value in enumerate(regs.v))
    stack = " ".join(f"{regs.stack[slot]:03X}" for slot in range(regs.stack_pointer)) or "-"
    return "\n".join(
        [
            f"PC={regs.program_counter:03X} I={regs.index:03X} SP={regs.stack_pointer:X} DT={regs.delay_timer:02X}",
            values,
            f"STACK {stack}",
        ]
    )


def _write_dump(memory, dump_ranges: Sequence[DumpRange], *, target: Path | None, fmt: str) -> None:
    addresses = _dump_addresses(dump_ranges)
    if fmt == "bin":
        data = bytes(memory.load8(address) for address in addresses)
        if target is None:
            sys.stdout.buffer.write(data)
        else:
            target.write_bytes(data)
        return

    text = _format_hex_dump(memory, addresses)
    if target is None:
        print(text)
    else:
        target.write_text(text + "\n")


STOP_BREAKPOINT = "breakpoint"
STOP_TIME_LIMIT = "time limit"
STOP_STEP_LIMIT = "step limit"

EXIT_CODES = {
    STOP_BREAKPOINT: 0,
    STOP_STEP_LIMIT: 2,
    STOP_TIME_LIMIT: 3,
}


def _execute_program(
    computer: Chip8Computer,
    *,
    max_steps: int | None,
    breakpoints: Iterable[int],
    max_seconds: float | None,
    trace: bool = False,
) -> Tuple[int, str]:
    """Run until a breakpoint or a limit; returns (executed, stop reason)."""

    registers = computer.cpu_core.registers
    stops = set(breakpoints)
    deadline = None if max_seconds is None or max_seconds < 0 else time.monotonic() + max_seconds
    executed = 0
    while max_steps is None or executed < max_steps:
        if trace:
            pc = registers.program_counter
            word = computer.memory.load16(pc)
            print(f"{pc:03X}: {word:04X}  {disassemble(word)}")
        computer.step()
        executed += 1
        if registers.program_counter in stops:
            return executed, STOP_BREAKPOINT
        if deadline is not None and time.monotonic() >= deadline:
            return executed, STOP_TIME_LIMIT
    return executed, STOP_STEP_LIMIT


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8-debug-runner",
        description="Headless CHIP-8 runner for program diagnostics.",
    )
    parser.add_argument("--program", type=str, required=True, help="CHIP-8 program image (raw binary)")
    parser.add_argument(
        "--steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        help="Maximum instructions to execute (0 or negative disables the limit)",
    )
    parser.add_argument(
        "--break-pc",
        action="append",
        default=[],
        help="Break when PC reaches the given hex address (repeatable)",
    )
    parser.add_argument(
        "--dump",
        type=str,
        default=None,
        help="File path for memory dump (defaults to stdout)",
    )
    parser.add_argument(
        "--dump-range",
        action="append",
        default=[],
        help="Memory range to dump in START:END hex form (inclusive). Repeat to add multiple ranges.",
    )
    parser.add_argument(
        "--dump-format",
        choices=("hex", "bin"),
        default="hex",
        help="Dump format (hex table or raw binary)",
    )
    parser.add_argument(
        "--seconds",
        type=float,
        default=None,
        help="Maximum wall-clock seconds to run before dumping memory",
    )
    parser.add_argument("--trace", action="store_true", help="Print each instruction before it executes")
    parser.add_argument("--registers", action="store_true", help="Print the register file after the run")
    parser.add_argument("--strict", action="store_true", help="Stop on unknown instructions")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random number instruction")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    breakpoints: List[int] = []
    for spec in args.break_pc:
        try:
            breakpoints.append(_parse_address(spec))
        except ValueError as exc:
            parser.error(f"invalid breakpoint address '{spec}': {exc}")

    dump_ranges: List[DumpRange] = []
    for spec in args.dump_range:
        try:
            dump_ranges.append(DumpRange.parse(spec))
        except ValueError as exc:
            parser.error(f"invalid dump range '{spec}': {exc}")

    computer = Chip8Computer(strict=args.strict, seed=args.seed)

    try:
        computer.load_user_program(args.program)
    except ProgramLoadError as exc:
        print(f"Failed to load program: {exc}", file=sys.stderr)
        return 1

    fault: Chip8Error | None = None
    reason = STOP_BREAKPOINT
    try:
        _, reason = _execute_program(
            computer,
            max_steps=args.steps if args.steps > 0 else None,
            breakpoints=breakpoints,
            max_seconds=args.seconds,
            trace=args.trace,
        )
    except Chip8Error as exc:
        fault = exc

    dump_target = Path(args.dump) if args.dump is not None else None
    _write_dump(computer.memory, dump_ranges, target=dump_target, fmt=args.dump_format)
    if args.registers:
        print(_format_registers(computer.cpu_core))

    if fault is not None:
        print(f"Execution stopped: {fault}", file=sys.stderr)
        return 1
    if reason != STOP_BREAKPOINT:
        print(f"Execution stopped: {reason} reached", file=sys.stderr)
    return EXIT_CODES[reason]


if __name__ == "__main__":
    raise SystemExit(main())
