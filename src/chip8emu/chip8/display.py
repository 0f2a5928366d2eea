"""CHIP-8 monochrome framebuffer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, List


@dataclass
class Chip8Display:
    WIDTH: ClassVar[int] = 64
    HEIGHT: ClassVar[int] = 32
    SIZE: ClassVar[int] = 64 * 32

    color_map: List[int] = field(default_factory=lambda: [0x000000, 0xFFFFFF])
    pixels: List[int] = field(default_factory=lambda: [0] * (64 * 32))
    dirty: bool = False

    # ------------------------------------------------------------------
    # Framebuffer mutation
    # ------------------------------------------------------------------
    def clear(self) -> None:
        self.pixels = [0] * self.SIZE
        self.dirty = True

    def toggle_pixel(self, index: int) -> bool:
        """XOR a single cell; returns True when a lit pixel was switched off."""

        if not (0 <= index < self.SIZE):
            raise ValueError("framebuffer index out of range")
        collided = self.pixels[index] == 1
        self.pixels[index] ^= 1
        return collided

    def set_pixels(self, data: Iterable[int]) -> None:
        values = list(data)
        if len(values) != self.SIZE:
            raise ValueError("framebuffer must hold 2048 cells")
        self.pixels = [1 if value else 0 for value in values]
        self.dirty = True

    def get_pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self.WIDTH and 0 <= y < self.HEIGHT):
            raise ValueError("coordinates out of range")
        return self.pixels[y * self.WIDTH + x]

    def get_display_value(self, index: int) -> int:
        return self.pixels[index]

    def mark_dirty(self) -> None:
        self.dirty = True

    def clear_dirty(self) -> None:
        self.dirty = False

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render_pixels(self) -> List[List[int]]:
        off, on = self.color_map
        return [
            [on if cell else off for cell in self.pixels[row * self.WIDTH:(row + 1) * self.WIDTH]]
            for row in range(self.HEIGHT)
        ]

    def render_text(self, on: str = "#", off: str = ".") -> str:
        rows = []
        for row in range(self.HEIGHT):
            cells = self.pixels[row * self.WIDTH:(row + 1) * self.WIDTH]
            rows.append("".join(on if cell else off for cell in cells))
        return "\n".join(rows)

    def render_pygame_surface(self, scaling: int = 1):
        """Render the framebuffer into a pygame Surface.

        Parameters
        ----------
        scaling:
            Integer scale factor applied to both axes.

        Returns
        -------
        pygame.Surface
            RGB surface of ``64 * scaling`` by ``32 * scaling`` pixels.

        Raises
        ------
        RuntimeError
            If pygame is not available.
        """

        if scaling <= 0:
            raise ValueError("scaling factor must be positive")

        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required for render_pygame_surface") from exc

        surface = pygame.Surface((self.WIDTH * scaling, self.HEIGHT * scaling))
        surface.fill(self.color_map[0])
        on_color = self.color_map[1]
        for index, cell in enumerate(self.pixels):
            if not cell:
                continue
            x = (index % self.WIDTH) * scaling
            y = (index // self.WIDTH) * scaling
            surface.fill(on_color, (x, y, scaling, scaling))
        return surface

    def set_colors(self, off: int, on: int) -> None:
        self.color_map = [off & 0xFFFFFF, on & 0xFFFFFF]
