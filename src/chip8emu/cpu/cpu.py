"""CHIP-8 CPU core: register file, fetch/decode/dispatch and instruction semantics."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
from typing import Callable, Dict, List, Optional

from chip8emu.cpu.decoder import Instruction, decode
from chip8emu.errors import InvalidInstructionError, StackOverflowError, StackUnderflowError

logger = logging.getLogger(__name__)

PROGRAM_START = 0x200
STACK_DEPTH = 16
REGISTER_COUNT = 16
FLAG_REGISTER = 0xF
SCREEN_WIDTH = 64
SCREEN_CELLS = 64 * 32
SPRITE_WIDTH = 8
GLYPH_BYTES = 5
ADDRESS_LIMIT = 0x0FFF


@dataclass
class CPURegisters:
    """Register file of the CHIP-8 virtual machine."""

    v: List[int] = field(default_factory=lambda: [0x00] * REGISTER_COUNT)
    index: int = 0
    program_counter: int = PROGRAM_START
    stack_pointer: int = 0
    stack: List[int] = field(default_factory=lambda: [0x0000] * STACK_DEPTH)
    delay_timer: int = 0


@dataclass
class CycleEffects:
    """Observable side effects of one executed instruction."""

    address: int
    instruction: Instruction
    recognized: bool = True
    redraw: bool = False
    waiting_for_key: bool = False


Handler = Callable[[Instruction], None]


class CPU:
    """Abstract CPU bound to a host computer."""

    def __init__(self, computer: object) -> None:
        self.computer = computer

    def reset(self) -> None:
        raise NotImplementedError

    def step(self) -> CycleEffects:
        raise NotImplementedError

    def execute(self, count: int) -> int:
        raise NotImplementedError


class Chip8CPU(CPU):
    """CHIP-8 interpreter core.

    Each call to :meth:`step` fetches one big-endian instruction word at the
    program counter, decodes it once and dispatches it by its top nibble.
    Families 0x0, 0x8, 0xE and 0xF select the concrete operation through a
    second table keyed by the full word, the low nibble or the low byte.

    Handlers advance the program counter themselves. Unknown words are
    logged and leave the machine untouched (the program counter included),
    unless ``strict`` is set, in which case :class:`InvalidInstructionError`
    is raised. The delay timer ticks down once after every instruction.
    """

    def __init__(
        self,
        computer: object,
        *,
        strict: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(computer)
        self.registers = CPURegisters()
        self.strict = strict
        self.rng = rng if rng is not None else random.Random()
        self.memory = self._resolve_device("memory")
        self.display = self._resolve_device("display")
        self.keypad = self._resolve_device("keypad")
        self.last_effects: Optional[CycleEffects] = None
        self._effects: Optional[CycleEffects] = None
        self._family_table: Dict[int, Handler] = {}
        self._system_table: Dict[int, Handler] = {}
        self._alu_table: Dict[int, Handler] = {}
        self._key_table: Dict[int, Handler] = {}
        self._misc_table: Dict[int, Handler] = {}
        self._init_dispatch_tables()

    def _resolve_device(self, name: str) -> Optional[object]:
        hardware = getattr(self.computer, "hardware", None)
        if hardware is None:
            return None
        return getattr(hardware, name, None)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self.registers = CPURegisters()
        self.last_effects = None

    def execute(self, count: int) -> int:
        executed = 0
        while executed < count:
            self.step()
            executed += 1
        return executed

    def step(self) -> CycleEffects:
        if self.memory is None:
            raise RuntimeError("Memory is not attached to Chip8CPU")

        address = self.registers.program_counter
        instruction = decode(self.memory.load16(address))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%03X: %04X %s", address, instruction.word, instruction.disassemble())

        self._effects = CycleEffects(address=address, instruction=instruction)
        self._family_table[instruction.family](instruction)

        if self.registers.delay_timer > 0:
            self.registers.delay_timer -= 1

        effects = self._effects
        self.last_effects = effects
        self._effects = None
        return effects

    # ------------------------------------------------------------------
    # Register and stack helpers
    # ------------------------------------------------------------------
    def _set_v(self, register: int, value: int) -> None:
        self.registers.v[register] = value & 0xFF

    def _set_flag(self, value: int) -> None:
        self.registers.v[FLAG_REGISTER] = value & 0xFF

    def _set_pc(self, address: int) -> None:
        self.registers.program_counter = address & 0xFFFF

    def _advance(self, amount: int = 2) -> None:
        self._set_pc(self.registers.program_counter + amount)

    def _skip_if(self, condition: bool) -> None:
        self._advance()
        if condition:
            self._advance()

    def _push(self, address: int) -> None:
        regs = self.registers
        if regs.stack_pointer >= STACK_DEPTH:
            raise StackOverflowError(
                f"call stack overflow at 0x{regs.program_counter:03X}",
                address=regs.program_counter,
            )
        regs.stack[regs.stack_pointer] = address & 0xFFFF
        regs.stack_pointer += 1

    def _pop(self) -> int:
        regs = self.registers
        if regs.stack_pointer <= 0:
            raise StackUnderflowError(
                f"return with empty stack at 0x{regs.program_counter:03X}",
                address=regs.program_counter,
            )
        regs.stack_pointer -= 1
        return regs.stack[regs.stack_pointer]

    def _set_index(self, value: int) -> None:
        self.registers.index = value & 0xFFFF

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def _init_dispatch_tables(self) -> None:
        self._family_table = {
            0x0: self._family_system,
            0x1: self._op_jp,
            0x2: self._op_call,
            0x3: self._op_se_imm,
            0x4: self._op_sne_imm,
            0x5: self._op_se_reg,
            0x6: self._op_ld_imm,
            0x7: self._op_add_imm,
            0x8: self._family_alu,
            0x9: self._op_sne_reg,
            0xA: self._op_ld_i,
            0xB: self._op_jp_v0,
            0xC: self._op_rnd,
            0xD: self._op_drw,
            0xE: self._family_key,
            0xF: self._family_misc,
        }
        self._system_table = {
            0x00E0: self._op_cls,
            0x00EE: self._op_ret,
        }
        self._alu_table = {
            0x0: self._op_ld_reg,
            0x1: self._op_or,
            0x2: self._op_and,
            0x3: self._op_xor,
            0x4: self._op_add_reg,
            0x5: self._op_sub,
            0x6: self._op_shr,
            0x7: self._op_subn,
            0xE: self._op_shl,
        }
        self._key_table = {
            0x9E: self._op_skp,
            0xA1: self._op_sknp,
        }
        self._misc_table = {
            0x07: self._op_ld_vx_dt,
            0x0A: self._op_ld_vx_k,
            0x15: self._op_ld_dt_vx,
            0x18: self._op_ld_st_vx,
            0x1E: self._op_add_i_vx,
            0x29: self._op_ld_f_vx,
            0x33: self._op_ld_b_vx,
            0x55: self._op_ld_mem_vx,
            0x65: self._op_ld_vx_mem,
        }

    def _dispatch(self, table: Dict[int, Handler], key: int, ins: Instruction) -> None:
        handler = table.get(key)
        if handler is None:
            self._unknown(ins)
            return
        handler(ins)

    def _family_system(self, ins: Instruction) -> None:
        self._dispatch(self._system_table, ins.word, ins)

    def _family_alu(self, ins: Instruction) -> None:
        self._dispatch(self._alu_table, ins.n, ins)

    def _family_key(self, ins: Instruction) -> None:
        self._dispatch(self._key_table, ins.nn, ins)

    def _family_misc(self, ins: Instruction) -> None:
        self._dispatch(self._misc_table, ins.nn, ins)

    def _unknown(self, ins: Instruction) -> None:
        address = self.registers.program_counter
        if self.strict:
            raise InvalidInstructionError(ins.word, address)
        logger.warning("Invalid opcode 0x%04X at 0x%03X", ins.word, address)
        if self._effects is not None:
            self._effects.recognized = False

    # ------------------------------------------------------------------
    # 0x0 family: screen and subroutine return
    # ------------------------------------------------------------------
    def _op_cls(self, ins: Instruction) -> None:
        self.display.clear()
        self._effects.redraw = True
        self._advance()

    def _op_ret(self, ins: Instruction) -> None:
        self._set_pc(self._pop())
        self._advance()

    # ------------------------------------------------------------------
    # Control flow
    # ------------------------------------------------------------------
    def _op_jp(self, ins: Instruction) -> None:
        self._set_pc(ins.nnn)

    def _op_jp_v0(self, ins: Instruction) -> None:
        self._set_pc(ins.nnn + self.registers.v[0])

    def _op_call(self, ins: Instruction) -> None:
        self._push(self.registers.program_counter)
        self._set_pc(ins.nnn)

    def _op_se_imm(self, ins: Instruction) -> None:
        self._skip_if(self.registers.v[ins.x] == ins.nn)

    def _op_sne_imm(self, ins: Instruction) -> None:
        self._skip_if(self.registers.v[ins.x] != ins.nn)

    def _op_se_reg(self, ins: Instruction) -> None:
        self._skip_if(self.registers.v[ins.x] == self.registers.v[ins.y])

    def _op_sne_reg(self, ins: Instruction) -> None:
        self._skip_if(self.registers.v[ins.x] != self.registers.v[ins.y])

    # ------------------------------------------------------------------
    # Register loads and ALU (0x6, 0x7, 0x8 families)
    # ------------------------------------------------------------------
    def _op_ld_imm(self, ins: Instruction) -> None:
        self._set_v(ins.x, ins.nn)
        self._advance()

    def _op_add_imm(self, ins: Instruction) -> None:
        self._set_v(ins.x, self.registers.v[ins.x] + ins.nn)
        self._advance()

    def _op_ld_reg(self, ins: Instruction) -> None:
        self._set_v(ins.x, self.registers.v[ins.y])
        self._advance()

    def _op_or(self, ins: Instruction) -> None:
        result = self.registers.v[ins.x] | self.registers.v[ins.y]
        self._set_v(ins.x, result)
        self._set_flag(0)
        self._advance()

    def _op_and(self, ins: Instruction) -> None:
        result = self.registers.v[ins.x] & self.registers.v[ins.y]
        self._set_v(ins.x, result)
        self._set_flag(0)
        self._advance()

    def _op_xor(self, ins: Instruction) -> None:
        result = self.registers.v[ins.x] ^ self.registers.v[ins.y]
        self._set_v(ins.x, result)
        self._set_flag(0)
        self._advance()

    # Arithmetic and shift handlers write VF first and then compute the
    # destination from the registers as they stand, so an operand of VF
    # reads the new flag value.
    def _op_add_reg(self, ins: Instruction) -> None:
        regs = self.registers
        self._set_flag(1 if regs.v[ins.x] + regs.v[ins.y] > 0xFF else 0)
        self._set_v(ins.x, regs.v[ins.x] + regs.v[ins.y])
        self._advance()

    def _op_sub(self, ins: Instruction) -> None:
        regs = self.registers
        self._set_flag(1 if regs.v[ins.x] >= regs.v[ins.y] else 0)
        self._set_v(ins.x, regs.v[ins.x] - regs.v[ins.y])
        self._advance()

    def _op_subn(self, ins: Instruction) -> None:
        regs = self.registers
        self._set_flag(1 if regs.v[ins.y] >= regs.v[ins.x] else 0)
        self._set_v(ins.x, regs.v[ins.y] - regs.v[ins.x])
        self._advance()

    def _op_shr(self, ins: Instruction) -> None:
        self._set_flag(self.registers.v[ins.x] & 0x01)
        self._set_v(ins.x, self.registers.v[ins.x] >> 1)
        self._advance()

    def _op_shl(self, ins: Instruction) -> None:
        self._set_flag((self.registers.v[ins.x] >> 7) & 0x01)
        self._set_v(ins.x, self.registers.v[ins.x] << 1)
        self._advance()

    # ------------------------------------------------------------------
    # Index register, random and drawing (0xA-0xD families)
    # ------------------------------------------------------------------
    def _op_ld_i(self, ins: Instruction) -> None:
        self._set_index(ins.nnn)
        self._advance()

    def _op_rnd(self, ins: Instruction) -> None:
        self._set_v(ins.x, self.rng.randrange(256) & ins.nn)
        self._advance()

    def _op_drw(self, ins: Instruction) -> None:
        self._set_flag(0)
        x = self.registers.v[ins.x]
        y = self.registers.v[ins.y]
        base = self.registers.index
        collided = False
        for row in range(ins.n):
            sprite = self.memory.load8(base + row)
            for col in range(SPRITE_WIDTH):
                if sprite & (0x80 >> col) == 0:
                    continue
                # Coordinates wrap linearly over the whole framebuffer.
                cell = ((x + col) + (y + row) * SCREEN_WIDTH) % SCREEN_CELLS
                if self.display.toggle_pixel(cell):
                    collided = True
        if collided:
            self._set_flag(1)
        self.display.mark_dirty()
        self._effects.redraw = True
        self._advance()

    # ------------------------------------------------------------------
    # 0xE family: keypad skips
    # ------------------------------------------------------------------
    def _op_skp(self, ins: Instruction) -> None:
        self._skip_if(self.keypad.is_pressed(self.registers.v[ins.x]))

    def _op_sknp(self, ins: Instruction) -> None:
        self._skip_if(not self.keypad.is_pressed(self.registers.v[ins.x]))

    # ------------------------------------------------------------------
    # 0xF family: timers, key wait and memory transfers
    # ------------------------------------------------------------------
    def _op_ld_vx_dt(self, ins: Instruction) -> None:
        self._set_v(ins.x, self.registers.delay_timer)
        self._advance()

    def _op_ld_vx_k(self, ins: Instruction) -> None:
        key = self.keypad.last_pressed()
        if key is None:
            self._effects.waiting_for_key = True
            return
        self._set_v(ins.x, key)
        self._advance()

    def _op_ld_dt_vx(self, ins: Instruction) -> None:
        self.registers.delay_timer = self.registers.v[ins.x] & 0xFF
        self._advance()

    def _op_ld_st_vx(self, ins: Instruction) -> None:
        # Sound is not emulated.
        self._advance()

    def _op_add_i_vx(self, ins: Instruction) -> None:
        self._set_flag(1 if self.registers.index + self.registers.v[ins.x] > ADDRESS_LIMIT else 0)
        self._set_index(self.registers.index + self.registers.v[ins.x])
        self._advance()

    def _op_ld_f_vx(self, ins: Instruction) -> None:
        self._set_index(self.registers.v[ins.x] * GLYPH_BYTES)
        self._advance()

    def _op_ld_b_vx(self, ins: Instruction) -> None:
        value = self.registers.v[ins.x]
        base = self.registers.index
        self.memory.store8(base, value // 100)
        self.memory.store8(base + 1, (value // 10) % 10)
        self.memory.store8(base + 2, value % 10)
        self._advance()

    def _op_ld_mem_vx(self, ins: Instruction) -> None:
        base = self.registers.index
        for register in range(ins.x + 1):
            self.memory.store8(base + register, self.registers.v[register])
        self._set_index(base + ins.x + 1)
        self._advance()

    def _op_ld_vx_mem(self, ins: Instruction) -> None:
        base = self.registers.index
        for register in range(ins.x + 1):
            self._set_v(register, self.memory.load8(base + register))
        self._set_index(base + ins.x + 1)
        self._advance()
