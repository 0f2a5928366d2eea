"""CHIP-8 hexadecimal keypad state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

KEY_COUNT = 16


@dataclass
class Chip8Keypad:
    """Sixteen independent key states written by the host input layer."""

    _keys: List[bool] = field(default_factory=lambda: [False] * KEY_COUNT)

    def set_state(self, states: Iterable[bool]) -> None:
        values = list(states)
        if len(values) != KEY_COUNT:
            raise ValueError("keypad state must have 16 entries")
        self._keys = [bool(value) for value in values]

    def get_state(self) -> List[bool]:
        return list(self._keys)

    def press(self, key: int) -> None:
        self._check(key)
        self._keys[key] = True

    def release(self, key: int) -> None:
        self._check(key)
        self._keys[key] = False

    def set_key(self, key: int, pressed: bool) -> None:
        self._check(key)
        self._keys[key] = bool(pressed)

    def is_pressed(self, key: int) -> bool:
        # Register values may exceed 0xF; only the low nibble selects a key.
        return self._keys[key & 0x0F]

    def last_pressed(self) -> Optional[int]:
        """Highest-numbered held key, or None if nothing is held."""

        result: Optional[int] = None
        for index, pressed in enumerate(self._keys):
            if pressed:
                result = index
        return result

    def clear(self) -> None:
        self._keys = [False] * KEY_COUNT

    @staticmethod
    def _check(key: int) -> None:
        if not (0 <= key < KEY_COUNT):
            raise ValueError("key index out of range")
