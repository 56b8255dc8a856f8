"""CHIP-8 interpreter core."""

from chipcore.state import EmulatorState, KeypadState, StackState, create_state
from chipcore.quirks import Quirks, QUIRK_PRESETS
from chipcore.emulator import (
    execute, fetch, step, run_tick, step_tick, run_ticks, load_program, load_rom
)
from chipcore.decode import Op, DecodedInstruction, decode
from chipcore.keypad import KeyEvent, is_pressed, is_released
from chipcore.errors import (
    Fault, InterpreterFault, UnknownOpcode, StackOverflow, StackUnderflow,
    AddressOutOfRange, get_fault, raise_for_fault,
)
from chipcore.config import InterpreterConfig
from chipcore.constants import *
from chipcore.rendering import display_to_rgba, chip8_display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "KeypadState",
    "StackState",
    "create_state",
    "Quirks",
    "QUIRK_PRESETS",
    "fetch",
    "execute",
    "step",
    "run_tick",
    "step_tick",
    "run_ticks",
    "load_program",
    "load_rom",
    "Op",
    "DecodedInstruction",
    "decode",
    "KeyEvent",
    "is_pressed",
    "is_released",
    "Fault",
    "InterpreterFault",
    "UnknownOpcode",
    "StackOverflow",
    "StackUnderflow",
    "AddressOutOfRange",
    "get_fault",
    "raise_for_fault",
    "InterpreterConfig",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "display_to_rgba",
    "chip8_display_to_rgb",
    "create_color_scheme",
]
