"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chipvm.constants import ADDRESS_MASK
from chipvm.errors import StackOverflowError, StackUnderflowError
from chipvm.state import StackState


def push(stack: StackState, address: jnp.ndarray, origin: int = 0) -> StackState:
    """Push address onto stack.

    ``origin`` is the address of the calling instruction, reported on overflow.
    """
    limit = stack.data.shape[0]
    if int(stack.pointer) >= limit:
        raise StackOverflowError(origin, limit)
    masked_address = address & ADDRESS_MASK
    new_data = stack.data.at[stack.pointer].set(masked_address)
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState, origin: int = 0) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    if int(stack.pointer) <= 0:
        raise StackUnderflowError(origin)
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
