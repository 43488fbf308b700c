"""Main CHIP-8 emulator execution engine."""

import jax
import jax.lax
import jax.numpy as jnp
from flax.struct import dataclass

from vipax.state import EmulatorState
from vipax.decode import DecodedInstruction, decode
from vipax.constants import ADDRESS_MASK, PROGRAM_START, MAX_PROGRAM_SIZE
from vipax.errors import StepError, ProgramTooLargeError, ProgramReadError
from vipax.stack import is_empty, is_full
from vipax.instructions.system import execute_system_instruction
from vipax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from vipax.instructions.alu import execute_alu_operation
from vipax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from vipax.instructions.display import execute_display
from vipax.instructions.misc import execute_misc_instruction


@dataclass
class StepResult:
    """Outcome of one ``step``.

    Attributes:
        pc: Address the instruction was fetched from
        instruction: The 16-bit instruction word
        error: ``StepError`` code, 0 when the step completed
        beep: Sound timer ran out on this step
        audible: ``beep`` and sound is enabled
    """
    pc: jnp.ndarray
    instruction: jnp.ndarray
    error: jnp.ndarray
    beep: jnp.ndarray
    audible: jnp.ndarray


INSTRUCTION_FAMILIES = [
    execute_system_instruction,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register,
    execute_set,
    execute_add,
    execute_alu_operation,
    execute_skip_if_not_equal_register,
    execute_set_index,
    execute_jump_with_offset,
    execute_random,
    execute_display,
    execute_skip_if_key,
    execute_misc_instruction,
]


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Expects the program counter to already point at the following instruction.
    Stack faults are not reported here; see ``step``.
    """
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.family, INSTRUCTION_FAMILIES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory."""
    high = state.memory[state.pc & ADDRESS_MASK]
    low = state.memory[(state.pc + 1) & ADDRESS_MASK]
    return state.replace(pc=(state.pc + 2) & ADDRESS_MASK), _pack_u16(high, low)


def stack_fault(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Return the ``StepError`` code executing ``instruction`` would raise."""
    overflow = (instruction.family == 0x2) & is_full(state.stack)
    underflow = (instruction.raw == 0x00EE) & is_empty(state.stack)
    return jnp.select(
        [overflow, underflow],
        [int(StepError.STACK_OVERFLOW), int(StepError.STACK_UNDERFLOW)],
        int(StepError.NONE),
    ).astype(jnp.uint8)


def tick_timers(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Count both timers down by one, stopping at zero.

    Returns the new state and whether the sound timer expired on this tick.
    """
    beep = state.sound_timer == 1
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    ), beep


def step(state: EmulatorState) -> tuple[EmulatorState, StepResult]:
    """Run one fetch/decode/execute cycle, then tick the timers.

    Timers are only ticked when ``state.decay_timers`` is set; otherwise the
    caller drives ``tick_timers`` at its own rate. A step that would overflow or
    underflow the stack leaves the state untouched and reports the fault.
    """
    fetched, instruction = fetch(state)
    error = stack_fault(state, decode(instruction))

    def run(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
        state = execute(state, instruction)
        if state.decay_timers:
            return tick_timers(state)
        return state, jnp.zeros((), dtype=jnp.bool_)

    def fault(_: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
        return state, jnp.zeros((), dtype=jnp.bool_)

    new_state, beep = jax.lax.cond(error == int(StepError.NONE), run, fault, fetched)
    return new_state, StepResult(
        pc=state.pc,
        instruction=instruction,
        error=error,
        beep=beep,
        audible=beep & new_state.sound_enabled,
    )


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy program bytes into memory starting at 0x200."""
    if len(program) > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(len(program), MAX_PROGRAM_SIZE)
    if not program:
        return state
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise ProgramReadError(e.errno, f"Cannot read program {filename!r}: {e.strerror}") from e
    return load_program(state, rom_data)
