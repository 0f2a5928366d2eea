"""pygame dependent tests for Chip8Display."""

import pytest

pygame = pytest.importorskip("pygame")

from chip8emu.chip8.display import Chip8Display


def test_render_pygame_surface_scaling_two():
    display = Chip8Display()
    display.set_colors(0x123456, 0xFEDCBA)
    display.toggle_pixel(1)

    surface = display.render_pygame_surface(scaling=2)

    assert surface.get_width() == display.WIDTH * 2
    assert surface.get_height() == display.HEIGHT * 2
    assert tuple(surface.get_at((0, 0)))[:3] == (0x12, 0x34, 0x56)
    assert tuple(surface.get_at((2, 0)))[:3] == (0xFE, 0xDC, 0xBA)
    assert tuple(surface.get_at((3, 1)))[:3] == (0xFE, 0xDC, 0xBA)
    assert tuple(surface.get_at((4, 0)))[:3] == (0x12, 0x34, 0x56)


def test_render_pygame_surface_rejects_zero_scale():
    with pytest.raises(ValueError):
        Chip8Display().render_pygame_surface(scaling=0)
