"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction
from chipvm.constants import ADDRESS_MASK, FLAG_REGISTER

SPRITE_WIDTH = 8
MAX_SPRITE_HEIGHT = 15

# Pre-computed sprite-local coordinate grids, indexed [column, row]
cols, rows = jnp.meshgrid(jnp.arange(SPRITE_WIDTH), jnp.arange(MAX_SPRITE_HEIGHT + 1), indexing='ij')


def sprite_plane(state: EmulatorState, origin_x, origin_y, height: int) -> jnp.ndarray:
    """Rasterise the sprite at I into a screen-sized boolean plane.

    Args:
        state: Emulator state holding memory, I and the display shape
        origin_x: Left column, already reduced modulo the screen width
        origin_y: Top row, already reduced modulo the screen height
        height: Number of sprite rows (N)

    Returns:
        Boolean array shaped like ``state.display`` with the sprite bits set
    """
    width, screen_height = state.screen_width, state.screen_height

    sprite_bytes = state.memory[(jnp.astype(state.I, jnp.int32) + rows) & ADDRESS_MASK]
    bits = ((jnp.astype(sprite_bytes, jnp.int32) >> (7 - cols)) & 1).astype(jnp.bool_)
    bits = bits & (rows < height)

    target_x = origin_x + cols
    target_y = origin_y + rows
    if state.quirks.wrap_sprites:
        target_x = target_x % width
        target_y = target_y % screen_height
    else:
        bits = bits & (target_x < width) & (target_y < screen_height)
        target_x = jnp.minimum(target_x, width - 1)
        target_y = jnp.minimum(target_y, screen_height - 1)

    plane = jnp.zeros((width, screen_height), dtype=jnp.int32)
    plane = plane.at[target_x.ravel(), target_y.ravel()].add(jnp.astype(bits.ravel(), jnp.int32))
    return plane > 0


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N."""
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % state.screen_width
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % state.screen_height

    sprite = sprite_plane(state, sprite_x, sprite_y, instruction.n)
    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
