"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from vipax.state import EmulatorState
from vipax.decode import DecodedInstruction
from vipax.constants import (
    ADDRESS_MASK, FLAG_REGISTER, FONT_START, FONT_END, FONT_GLYPH_SIZE, NUM_REGISTERS,
)
from vipax.instructions.system import no_op


def write_memory(memory: jnp.ndarray, addresses: jnp.ndarray, values: jnp.ndarray,
                 enabled: jnp.ndarray) -> jnp.ndarray:
    """Store ``values`` at ``addresses`` where ``enabled``.

    Addresses wrap at 4K and the font region is read-only.
    """
    addresses = addresses & ADDRESS_MASK
    writable = enabled & (addresses >= FONT_END)
    new_values = jnp.where(writable, jnp.astype(values, jnp.uint8), memory[addresses])
    return memory.at[addresses].set(new_values)


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    With no key down the program counter is wound back so the same
    instruction is fetched again on the next step.
    """
    def key_pressed_action(state):
        pressed_key = jnp.argmax(state.keypad)
        return state.replace(V=state.V.at[instruction.x].set(jnp.astype(pressed_key, jnp.uint8)))

    def wait_action(state):
        return state.replace(pc=(state.pc - 2) & ADDRESS_MASK)

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I, VF = carry out of 16 bits."""
    total = jnp.astype(state.I, jnp.int32) + jnp.astype(state.V[instruction.x], jnp.int32)
    carry = jnp.astype(total > 0xFFFF, jnp.uint8)
    return state.replace(
        I=jnp.astype(total & 0xFFFF, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(carry)
    )


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to the glyph for the low nibble of VX."""
    digit = jnp.astype(state.V[instruction.x] & 0x0F, jnp.uint16)
    return state.replace(I=jnp.astype(FONT_START + digit * FONT_GLYPH_SIZE, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    addresses = jnp.astype(state.I, jnp.int32) + jnp.arange(3)
    new_memory = write_memory(state.memory, addresses, digits, jnp.ones(3, dtype=jnp.bool_))
    return state.replace(memory=new_memory)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    addresses = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    new_memory = write_memory(state.memory, addresses, state.V, register_mask)
    return state.replace(memory=new_memory)


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    addresses = (jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)) & ADDRESS_MASK
    new_V = jnp.where(register_mask, state.memory[addresses], state.V)
    return state.replace(V=new_V)


# Low byte of FXNN -> handler index; everything else falls through to no_op.
MISC_OPCODES = (0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65)
MISC_HANDLERS = [
    execute_get_delay_timer,
    execute_wait_for_key,
    execute_set_delay_timer,
    execute_set_sound_timer,
    execute_add_to_index,
    execute_font_character,
    execute_bcd_conversion,
    execute_store_registers,
    execute_load_registers,
    no_op,
]
_MISC_DISPATCH = jnp.full(256, len(MISC_OPCODES), dtype=jnp.int32).at[jnp.array(MISC_OPCODES)].set(
    jnp.arange(len(MISC_OPCODES), dtype=jnp.int32)
)


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch FXNN instructions on the low byte."""
    return jax.lax.switch(_MISC_DISPATCH[instruction.nn], MISC_HANDLERS, state, instruction)
