"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from vipax.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)


@dataclass(frozen=True)
class StackState:
    """Return-address stack for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 machine state.

    The display is indexed ``[x, y]`` and holds 0/1 bytes. ``wrap_sprites`` and
    ``decay_timers`` are static configuration: changing them retraces jitted code.
    Array fields are built per instance so states never share buffers.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(
        default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.uint8))
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    sound_enabled: jnp.ndarray = field(default_factory=lambda: jnp.ones((), dtype=jnp.bool_))
    wrap_sprites: bool = field(pytree_node=False, default=True)
    decay_timers: bool = field(pytree_node=False, default=True)


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    wrap_sprites: bool = True,
    decay_timers: bool = True,
) -> EmulatorState:
    """Create a zeroed machine state with the font set installed."""
    state = EmulatorState(rng, wrap_sprites=wrap_sprites, decay_timers=decay_timers)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def toggle_sound(state: EmulatorState) -> EmulatorState:
    """Flip whether beeps are audible. Timers are unaffected."""
    return state.replace(sound_enabled=~state.sound_enabled)


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    return state.replace(keypad=state.keypad.at[key].set(True))


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    return state.replace(keypad=state.keypad.at[key].set(False))


def set_keypad(state: EmulatorState, keys) -> EmulatorState:
    """Replace the whole keypad with 16 pressed/not-pressed flags."""
    keypad = jnp.asarray(keys, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Keypad must have {NUM_KEYS} entries, got shape {keypad.shape}")
    return state.replace(keypad=keypad)
