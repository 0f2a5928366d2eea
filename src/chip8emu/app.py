"""CHIP-8 emulator pygame frontend."""

from __future__ import annotations

import argparse
import logging
from typing import Dict, Iterable

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.chip8.keypad import Chip8Keypad
from chip8emu.errors import Chip8Error
from chip8emu.frontend.debug_overlay import DebugOverlay

logger = logging.getLogger(__name__)

BASE_CAPTION = "CHIP-8 Emulator"

# Host keys laid out like the COSMAC VIP hex keypad:
#   1 2 3 4      1 2 3 C
#   Q W E R  ->  4 5 6 D
#   A S D F      7 8 9 E
#   Z X C V      A 0 B F
KEYPAD_MAP: Dict[int, int] = {
    ord("x"): 0x0,
    ord("1"): 0x1,
    ord("2"): 0x2,
    ord("3"): 0x3,
    ord("q"): 0x4,
    ord("w"): 0x5,
    ord("e"): 0x6,
    ord("a"): 0x7,
    ord("s"): 0x8,
    ord("d"): 0x9,
    ord("z"): 0xA,
    ord("c"): 0xB,
    ord("4"): 0xC,
    ord("r"): 0xD,
    ord("f"): 0xE,
    ord("v"): 0xF,
}

STEPS_PER_FRAME = 10
DEFAULT_FPS = 60


def _handle_key_event(keypad: Chip8Keypad, key: int, pressed: bool) -> bool:
    index = KEYPAD_MAP.get(key)
    if index is None:
        return False
    keypad.set_key(index, pressed)
    return True


def _draw_frame(screen, computer: Chip8Computer, scale: int) -> None:
    display = computer.display
    screen.blit(display.render_pygame_surface(scale), (0, 0))
    display.clear_dirty()


def _build_caption(computer: Chip8Computer, paused: bool) -> str:
    info = computer.program_info
    caption = BASE_CAPTION if info is None else f"{BASE_CAPTION} | {info.name}"
    if paused:
        caption += " [debug]"
    return caption


def _pygame_loop(computer: Chip8Computer, scale: int, fps: int) -> None:
    import pygame  # type: ignore

    display = computer.display
    overlay = DebugOverlay(computer)

    pygame.init()
    try:
        screen = pygame.display.set_mode((display.WIDTH * scale, display.HEIGHT * scale))
        pygame.display.set_caption(_build_caption(computer, False))
        clock = pygame.time.Clock()

        computer.power_on()
        display.mark_dirty()
        running = True
        debug_mode = False

        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                    continue
                if event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                        continue
                    if event.key == pygame.K_F1:
                        debug_mode = not debug_mode
                        if debug_mode:
                            computer.pause()
                            overlay.set_status("Debug paused")
                        else:
                            computer.resume()
                            overlay.set_status("")
                            display.mark_dirty()
                        pygame.display.set_caption(_build_caption(computer, debug_mode))
                        continue
                    if debug_mode and event.key == pygame.K_n:
                        overlay.record_execution(computer.cpu_core.registers.program_counter)
                        computer.step()
                        overlay.set_status("Stepped")
                        continue
                    _handle_key_event(computer.keypad, event.key, True)
                elif event.type == pygame.KEYUP:
                    _handle_key_event(computer.keypad, event.key, False)

            if not running:
                break

            if computer.get_running_status() == computer.STATUS_RUNNING:
                for _ in range(STEPS_PER_FRAME):
                    overlay.record_execution(computer.cpu_core.registers.program_counter)
                    computer.tick(1)

            if debug_mode:
                _draw_frame(screen, computer, scale)
                overlay.render(screen)
                pygame.display.flip()
            elif display.dirty:
                _draw_frame(screen, computer, scale)
                pygame.display.flip()

            clock.tick(fps)
    finally:
        computer.power_off()
        pygame.quit()


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="CHIP-8 emulator")
    parser.add_argument(
        "rom",
        nargs="?",
        help=f"Path to the CHIP-8 program image. Defaults to ${Chip8Computer.ENV_ROM_PATH} if omitted",
    )
    parser.add_argument("--scale", type=int, default=10, help="Integer scaling factor for display (default: 10)")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Target frames per second for the host loop")
    parser.add_argument("--strict", action="store_true", help="Stop on unknown instructions instead of logging them")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random number instruction")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.scale <= 0:
        raise SystemExit("scale must be positive")
    if args.fps <= 0:
        raise SystemExit("fps must be positive")

    rom_path = Chip8Computer.resolve_rom_path(args.rom)
    if rom_path is None:
        raise SystemExit("Path to ROM to be loaded must be given as argument")

    computer = Chip8Computer(strict=args.strict, seed=args.seed)
    if not computer.load_rom(rom_path):
        raise SystemExit(1)

    try:
        _pygame_loop(computer, args.scale, args.fps)
    except Chip8Error as exc:
        logger.error("Machine fault: %s", exc)
        raise SystemExit(2)
    except RuntimeError as exc:
        raise SystemExit(str(exc))


if __name__ == "__main__":
    main()
