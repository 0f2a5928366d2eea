"""Memory primitives shared by the CPU and the program loaders."""

from __future__ import annotations

import logging
from typing import Iterable, List, Protocol

from chip8emu.errors import MemoryAccessError

logger = logging.getLogger(__name__)


class Addressable(Protocol):
    """Protocol describing byte addressable storage seen by the CPU."""

    def load8(self, address: int) -> int:
        ...

    def store8(self, address: int, value: int) -> None:
        ...

    def load16(self, address: int) -> int:
        ...

    def store16(self, address: int, value: int) -> None:
        ...


class Memory(Addressable):
    """Flat memory block supporting bounds-checked 8/16-bit accesses.

    Unlike a wrapping address bus, any access that falls outside
    ``[start, start + length)`` raises :class:`MemoryAccessError`.
    """

    start: int
    length: int
    data: List[int]

    def __init__(self, start: int, length: int) -> None:
        if start < 0 or length <= 0:
            raise ValueError("invalid memory range")
        self.start = start
        self.length = length
        self.data = [0x00] * length
        self._debug = False

    def get_start_address(self) -> int:
        return self.start

    def get_end_address(self) -> int:
        return self.start + self.length - 1

    def contains(self, address: int) -> bool:
        return self.start <= address <= self.get_end_address()

    def _index(self, address: int) -> int:
        if not self.contains(address):
            raise MemoryAccessError(f"address 0x{address:04X} out of range", address=address)
        return address - self.start

    def load8(self, address: int) -> int:
        value = self.data[self._index(address)] & 0xFF
        if self._debug:
            logger.debug("load8: addr=%04X val=%02X", address, value)
        return value

    def store8(self, address: int, value: int) -> None:
        if self._debug:
            logger.debug("store8: addr=%04X val=%02X", address, value & 0xFF)
        self.data[self._index(address)] = value & 0xFF

    def load16(self, address: int) -> int:
        hi = self.data[self._index(address)] & 0xFF
        lo = self.data[self._index(address + 1)] & 0xFF
        return ((hi << 8) | lo) & 0xFFFF

    def store16(self, address: int, value: int) -> None:
        hi_index = self._index(address)
        lo_index = self._index(address + 1)
        self.data[hi_index] = (value >> 8) & 0xFF
        self.data[lo_index] = value & 0xFF

    def load_block(self, address: int, data: Iterable[int]) -> int:
        """Copy ``data`` starting at ``address``; returns the byte count."""

        values = [value & 0xFF for value in data]
        if values:
            self._index(address)
            self._index(address + len(values) - 1)
        begin = address - self.start
        self.data[begin:begin + len(values)] = values
        return len(values)

    def read_block(self, address: int, length: int) -> List[int]:
        if length <= 0:
            return []
        self._index(address)
        self._index(address + length - 1)
        begin = address - self.start
        return list(self.data[begin:begin + length])

    def clear(self) -> None:
        self.data = [0x00] * self.length

    def enable_debug(self, enabled: bool) -> None:
        self._debug = enabled


__all__ = [
    "Addressable",
    "Memory",
]
