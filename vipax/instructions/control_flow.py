"""CHIP-8 control flow instructions.

The program counter already points past the current instruction when these
run, so a skip adds 2 and a jump stores its target as-is.
"""

import jax
import jax.lax
import jax.numpy as jnp
from vipax.constants import ADDRESS_MASK
from vipax.state import EmulatorState
from vipax.decode import DecodedInstruction
from vipax.stack import push
from vipax.instructions.system import no_op


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=(s.pc + 2) & ADDRESS_MASK),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def execute_skip_if_equal_register(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """5XY0 - Skip if VX == VY. 5XYN with N != 0 is ignored."""
    return jax.lax.cond(instruction.n == 0, _skip_if_equal_register, no_op, state, instruction)


def execute_skip_if_not_equal_register(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """9XY0 - Skip if VX != VY. 9XYN with N != 0 is ignored."""
    return jax.lax.cond(instruction.n == 0, _skip_if_not_equal_register, no_op, state, instruction)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = (jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[0], jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def execute_skip_if_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""

    def skip_on_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        key_index = state.V[instruction.x] & 0xF
        key_pressed = state.keypad[key_index]
        is_not_instruction = (instruction.nn == 0xA1)
        condition = key_pressed ^ is_not_instruction

        return jax.lax.cond(
            condition,
            lambda state: state.replace(pc=(state.pc + 2) & ADDRESS_MASK),
            lambda state: state,
            state
        )

    is_key_instruction = (instruction.nn == 0x9E) | (instruction.nn == 0xA1)
    return jax.lax.cond(is_key_instruction, skip_on_key, no_op, state, instruction)
