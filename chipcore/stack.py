"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chipcore.constants import STACK_SIZE
from chipcore.state import StackState


def is_full(stack: StackState) -> jnp.ndarray:
    """Check whether another push would exceed the stack capacity."""
    return stack.pointer >= STACK_SIZE


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer <= 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack. Callers check `is_full` first."""
    address = jnp.astype(address, jnp.uint16)
    new_data = stack.data.at[stack.pointer].set(address, mode="drop")
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack. Callers check `is_empty` first."""
    new_pointer = stack.pointer - 1
    popped_address = stack.data.at[new_pointer].get(mode="clip")
    new_data = stack.data.at[new_pointer].set(0, mode="drop")
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
