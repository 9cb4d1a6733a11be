"""CHIP-8 emulator state structures."""

import dataclasses

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipvm.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)
from chipvm.errors import RomTooLargeError


@dataclasses.dataclass(frozen=True)
class Quirks:
    """Behavioural variants that real CHIP-8 programs disagree on.

    Attributes:
        legacy_shift: 8XY6/8XYE shift VY into VX (COSMAC VIP) instead of
            shifting VX in place.
        wrap_sprites: DXYN wraps pixels past the right/bottom edge around to
            the opposite side instead of clipping them.
        increment_index: FX55/FX65 leave I pointing past the transferred
            registers instead of unchanged.
    """
    legacy_shift: bool = True
    wrap_sprites: bool = True
    increment_index: bool = False


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: int = 0


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state."""
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(
        default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_)
    )
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    key_pressed: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    quirks: Quirks = field(pytree_node=False, default=Quirks())

    @property
    def screen_width(self) -> int:
        return self.display.shape[0]

    @property
    def screen_height(self) -> int:
        return self.display.shape[1]


def write_memory(state: EmulatorState, address: int, data: bytes) -> EmulatorState:
    """Copy raw bytes into memory starting at ``address``."""
    if address + len(data) > state.memory.shape[0]:
        raise RomTooLargeError(len(data), state.memory.shape[0] - address)
    if not data:
        return state
    values = jnp.array(list(data), dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[address:address + len(data)].set(values))


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    rom: bytes = b"",
    quirks: Quirks = Quirks(),
    stack_size: int = STACK_SIZE,
    screen_width: int = SCREEN_WIDTH,
    screen_height: int = SCREEN_HEIGHT,
) -> EmulatorState:
    """Create a freshly reset emulator state.

    Memory is cleared, the font is written at FONT_START, the ROM (if any) at
    PROGRAM_START, and PC, I, timers, stack and display all start zeroed.

    Args:
        rng: JAX random key consumed by CXNN
        rom: Program bytes copied verbatim to PROGRAM_START
        quirks: Behavioural variants for shifts, sprite edges and FX55/FX65
        stack_size: Maximum subroutine nesting depth
        screen_width: Display width in pixels
        screen_height: Display height in pixels

    Returns:
        New EmulatorState
    """
    state = EmulatorState(
        rng,
        display=jnp.zeros((screen_width, screen_height), dtype=jnp.bool_),
        stack=StackState(data=jnp.zeros(stack_size, dtype=jnp.uint16), pointer=0),
        quirks=quirks,
    )
    state = state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
    return write_memory(state, PROGRAM_START, bytes(rom))
