"""Memory and font tests."""

from __future__ import annotations

import pytest

from chip8emu.chip8.memory import FONT_SET, MAX_PROGRAM_SIZE, MEMORY_SIZE, PROGRAM_START, Chip8Memory
from chip8emu.errors import MemoryAccessError
from chip8emu.memory import Memory


def test_memory_size_and_program_window() -> None:
    memory = Chip8Memory()

    assert memory.get_start_address() == 0x000
    assert memory.get_end_address() == 0xFFF
    assert len(memory.data) == MEMORY_SIZE
    assert MAX_PROGRAM_SIZE == 3584
    assert PROGRAM_START == 0x200


def test_font_is_loaded_at_zero() -> None:
    memory = Chip8Memory()

    assert memory.read_block(0, 80) == FONT_SET
    assert memory.load8(80) == 0x00


@pytest.mark.parametrize(("digit", "first_row"), [(0x0, 0xF0), (0x1, 0x20), (0xB, 0xE0), (0xF, 0xF0)])
def test_glyph_address_points_at_font_rows(digit: int, first_row: int) -> None:
    memory = Chip8Memory()

    address = memory.glyph_address(digit)

    assert address == digit * 5
    assert memory.load8(address) == first_row


def test_glyph_address_rejects_non_digit() -> None:
    with pytest.raises(ValueError):
        Chip8Memory().glyph_address(0x10)


def test_word_access_is_big_endian() -> None:
    memory = Chip8Memory()

    memory.store16(0x300, 0xA2F0)

    assert memory.load8(0x300) == 0xA2
    assert memory.load8(0x301) == 0xF0
    assert memory.load16(0x300) == 0xA2F0


def test_store_masks_to_byte() -> None:
    memory = Chip8Memory()
    memory.store8(0x400, 0x1FF)
    assert memory.load8(0x400) == 0xFF


@pytest.mark.parametrize("address", [-1, 0x1000, 0x1234])
def test_byte_access_outside_memory_raises(address: int) -> None:
    memory = Chip8Memory()

    with pytest.raises(MemoryAccessError) as excinfo:
        memory.load8(address)
    assert excinfo.value.address == address

    with pytest.raises(MemoryAccessError):
        memory.store8(address, 0)


def test_word_access_straddling_end_raises() -> None:
    memory = Chip8Memory()

    with pytest.raises(MemoryAccessError):
        memory.load16(0xFFF)
    with pytest.raises(MemoryAccessError):
        memory.store16(0xFFF, 0x1234)
    assert memory.load8(0xFFF) == 0x00


def test_block_access_checks_both_ends() -> None:
    memory = Chip8Memory()

    assert memory.load_block(0xFFE, [1, 2]) == 2
    assert memory.read_block(0xFFE, 2) == [1, 2]
    with pytest.raises(MemoryAccessError):
        memory.load_block(0xFFE, [1, 2, 3])
    with pytest.raises(MemoryAccessError):
        memory.read_block(0xFFF, 2)
    assert memory.read_block(0x200, 0) == []


def test_clear_program_area_keeps_font() -> None:
    memory = Chip8Memory()
    memory.load_block(0x200, [0xFF] * 16)
    memory.store8(0xFFF, 0x55)

    memory.clear_program_area()

    assert memory.read_block(0x200, 16) == [0] * 16
    assert memory.load8(0xFFF) == 0
    assert memory.read_block(0, 80) == FONT_SET


def test_generic_memory_honours_base_address() -> None:
    memory = Memory(0x100, 0x10)

    memory.store8(0x10F, 0x42)

    assert memory.contains(0x100)
    assert not memory.contains(0x0FF)
    assert memory.load8(0x10F) == 0x42
    with pytest.raises(MemoryAccessError):
        memory.load8(0x110)


def test_generic_memory_rejects_invalid_range() -> None:
    with pytest.raises(ValueError):
        Memory(0, 0)
