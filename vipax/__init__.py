"""CHIP-8 interpreter package."""

from vipax.state import EmulatorState, create_state, toggle_sound, press_key, release_key, set_keypad
from vipax.emulator import StepResult, execute, fetch, step, tick_timers, load_program, load_rom
from vipax.decode import DecodedInstruction, decode
from vipax.errors import (
    StepError, VipaxError, ProgramTooLargeError, ProgramReadError,
    StackOverflowError, StackUnderflowError, raise_for_error,
)
from vipax.constants import *
from vipax.machine import Chip8, run_steps

__all__ = [
    "EmulatorState",
    "create_state",
    "toggle_sound",
    "press_key",
    "release_key",
    "set_keypad",
    "StepResult",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "decode",
    "StepError",
    "VipaxError",
    "ProgramTooLargeError",
    "ProgramReadError",
    "StackOverflowError",
    "StackUnderflowError",
    "raise_for_error",
    "Chip8",
    "run_steps",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
