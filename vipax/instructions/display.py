"""CHIP-8 display operations."""

import jax.numpy as jnp
from vipax.constants import SCREEN_WIDTH, SCREEN_HEIGHT, ADDRESS_MASK, FLAG_REGISTER
from vipax.state import EmulatorState
from vipax.decode import DecodedInstruction

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Screen-sized 0/1 mask of the pixels a DXYN sprite would flip.

    The origin always wraps onto the screen. Pixels running past the right or
    bottom edge wrap around when ``state.wrap_sprites`` is set and are clipped
    otherwise.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    col_offset = (xx - sprite_x) % SCREEN_WIDTH
    row_offset = (yy - sprite_y) % SCREEN_HEIGHT
    covered = (col_offset < 8) & (row_offset < instruction.n)
    if not state.wrap_sprites:
        covered = covered & (xx >= sprite_x) & (yy >= sprite_y)

    addresses = (jnp.astype(state.I, jnp.int32) + row_offset) & ADDRESS_MASK
    sprite_bytes = jnp.astype(state.memory[addresses], jnp.int32)
    bits = (sprite_bytes >> (7 - jnp.minimum(col_offset, 7))) & 1
    return jnp.astype(bits * covered, jnp.uint8)


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    VF is set when any lit pixel is switched off.
    """
    sprite = sprite_mask(state, instruction)
    collision = jnp.any((state.display & sprite) == 1)

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
