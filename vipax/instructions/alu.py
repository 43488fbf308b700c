"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy, vf)`` to ``(result, vf)``. VF is written before
VX, so for 8FYN the arithmetic result replaces the flag.
"""

import jax
import jax.lax
import jax.numpy as jnp
from vipax.constants import FLAG_REGISTER
from vipax.state import EmulatorState
from vipax.decode import DecodedInstruction


def alu_set(vx, vy, vf):
    """8XY0 - Set: VX = VY."""
    return vy, vf


def alu_or(vx, vy, vf):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, vf


def alu_and(vx, vy, vf):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, vf


def alu_xor(vx, vy, vf):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, vf


def alu_add(vx, vy, vf):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + jnp.astype(vy, jnp.int32)
    carry = jnp.astype(result > 0xFF, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy, vf):
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    return jnp.astype((vx - vy) & 0xFF, jnp.uint8), no_borrow


def alu_shift_right(vx, vy, vf):
    """8XY6 - Shift right: VX >>= 1, VF = bit shifted out."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy, vf):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.uint8)
    return jnp.astype((vy - vx) & 0xFF, jnp.uint8), no_borrow


def alu_shift_left(vx, vy, vf):
    """8XYE - Shift left: VX <<= 1, VF = bit shifted out."""
    return jnp.astype((vx << 1) & 0xFF, jnp.uint8), (vx & 0x80) >> 7


def alu_undefined(vx, vy, vf):
    """8XY8-8XYD, 8XYF - undefined, leaves registers untouched."""
    return vx, vf


ALU_OPERATIONS = [
    alu_set, alu_or, alu_and, alu_xor,
    alu_add, alu_sub_xy, alu_shift_right, alu_sub_yx,
    alu_undefined, alu_undefined, alu_undefined, alu_undefined,
    alu_undefined, alu_undefined, alu_shift_left, alu_undefined,
]


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]
    vf = state.V[FLAG_REGISTER]

    result, flag = jax.lax.switch(instruction.n, ALU_OPERATIONS, vx, vy, vf)

    new_V = state.V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
    new_V = new_V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
    return state.replace(V=new_V)
