"""
Reference pygame host for the chipcore CHIP-8 interpreter
"""

import time

import hydra
import numpy as np
import pygame
from omegaconf import DictConfig, OmegaConf

from chipcore import (
    InterpreterConfig, KeyEvent, load_rom, step_tick, run_ticks, get_fault,
    chip8_display_to_rgb, create_color_scheme, SCREEN_WIDTH, SCREEN_HEIGHT,
)
from chipcore.logging import InterpreterLogger

# Conventional hex keypad layout on the left of a QWERTY keyboard
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def draw_overlay_text(surface, text_lines, position, font, bg_color=(0, 0, 0), text_color=(255, 255, 255), alpha=120):
    """Draw text with semi-transparent background overlay"""
    if not text_lines:
        return

    line_height = font.get_height()
    max_width = max(font.size(line)[0] for line in text_lines)
    overlay = pygame.Surface((max_width + 16, len(text_lines) * line_height + 8))
    overlay.set_alpha(alpha)
    overlay.fill(bg_color)
    surface.blit(overlay, position)

    x, y = position
    for i, line in enumerate(text_lines):
        text_surface = font.render(line, True, text_color)
        surface.blit(text_surface, (x + 8, y + 4 + i * line_height))


def render(screen, state, scale, colors):
    on_color, off_color = colors
    frame = chip8_display_to_rgb(state.display, scale=scale, on_color=on_color, off_color=off_color)
    # surfarray expects (width, height, 3)
    pygame.surfarray.blit_array(screen, np.ascontiguousarray(frame.swapaxes(0, 1)))


def run_headless(config, rom_filename, num_ticks, logger):
    """Run a ROM for a fixed number of ticks without input or a window."""
    state = load_rom(config.create_state(), rom_filename)
    state, displays = run_ticks(state, num_ticks, config.instructions_per_tick, progress=True)

    logger.info(f"Ran {num_ticks:,} ticks, {int(displays[-1].sum())} pixels lit on the last frame")
    logger.log_registers(state, level="INFO")
    fault = get_fault(state)
    if fault is not None:
        logger.log_fault(fault)


def run_emulator(config, rom_filename, logger, scale=8, color_scheme="paper"):
    """Main interactive loop: one tick per frame at `ticks_per_second`."""
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption(f"CHIP-8 - {rom_filename}")
    clock = pygame.time.Clock()
    font_small = pygame.font.Font(None, 18)
    colors = create_color_scheme(color_scheme)

    def reset():
        return load_rom(config.create_state(), rom_filename)

    state = reset()
    logger.info(f"Loaded: {rom_filename}")
    logger.info("Controls: ESC=Quit, F1=Pause, F2=Reset, F3=Debug")

    running = True
    paused = False
    show_debug = False
    halted = False
    tick_count = 0
    start_time = time.time()

    while running:
        clock.tick(config.ticks_per_second)

        events = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_F1:
                    paused = not paused
                elif event.key == pygame.K_F2:
                    state = reset()
                    halted = False
                    tick_count = 0
                    logger.info("Reset")
                elif event.key == pygame.K_F3:
                    show_debug = not show_debug
                elif event.key in KEY_MAP:
                    events.append(KeyEvent(KEY_MAP[event.key], True))
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    events.append(KeyEvent(KEY_MAP[event.key], False))

        if not paused and not halted:
            state = step_tick(state, events, config.instructions_per_tick)
            tick_count += 1

            fault = get_fault(state)
            if fault is not None:
                halted = True
                logger.log_fault(fault)
                logger.log_registers(state, level="ERROR")
                logger.info("Press F2 to reset")

        render(screen, state, scale, colors)

        if show_debug:
            runtime = time.time() - start_time
            tps = tick_count / runtime if runtime > 0 else 0
            debug_lines = [
                f"PC: 0x{int(state.pc):03X}  I: 0x{int(state.I):03X}",
                f"DT: {int(state.delay_timer)}  ST: {int(state.sound_timer)}",
                f"Ticks: {tick_count} ({tps:.1f}/s, target {config.ticks_per_second})",
            ]
            debug_lines += [
                " ".join(f"V{j:X}:{int(state.V[j]):02X}" for j in range(i, i + 4))
                for i in range(0, 16, 4)
            ]
            draw_overlay_text(screen, debug_lines, (5, 5), font_small, alpha=100)

        if paused or halted:
            draw_overlay_text(screen, ["HALTED" if halted else "PAUSED"], (5, SCREEN_HEIGHT * scale - 30),
                              font_small, text_color=(255, 255, 0), alpha=150)

        pygame.display.flip()

    pygame.quit()


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig):
    cfg = OmegaConf.to_container(cfg)

    logger = InterpreterLogger(log_level=cfg.pop("log_level", "INFO"))
    rom_filename = cfg.pop("rom")
    scale = cfg.pop("scale", 8)
    color_scheme = cfg.pop("color_scheme", "paper")
    headless_ticks = cfg.pop("headless_ticks", 0)

    config = InterpreterConfig.from_dict(cfg)
    logger.log_config({"rom": rom_filename, **config.as_dict()})

    if headless_ticks > 0:
        run_headless(config, rom_filename, headless_ticks, logger)
    else:
        run_emulator(config, rom_filename, logger, scale=scale, color_scheme=color_scheme)


if __name__ == "__main__":
    main()
