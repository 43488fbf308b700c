"""CHIP-8 stack operations."""

import jax.numpy as jnp
from vipax.constants import ADDRESS_MASK, STACK_SIZE
from vipax.state import StackState


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= STACK_SIZE


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer == 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack.

    Callers must check ``is_full`` first; a push onto a full stack is dropped.
    """
    masked_address = jnp.astype(address & ADDRESS_MASK, jnp.uint16)
    new_data = stack.data.at[stack.pointer].set(masked_address, mode="drop")
    new_pointer = jnp.minimum(stack.pointer + 1, STACK_SIZE).astype(jnp.uint8)
    return stack.replace(data=new_data, pointer=new_pointer)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack.

    Callers must check ``is_empty`` first; popping an empty stack yields 0.
    """
    new_pointer = jnp.maximum(stack.pointer.astype(jnp.int32) - 1, 0).astype(jnp.uint8)
    popped_address = jnp.where(is_empty(stack), jnp.uint16(0), stack.data[new_pointer])
    new_data = stack.data.at[new_pointer].set(0)
    new_data = jnp.where(is_empty(stack), stack.data, new_data)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
