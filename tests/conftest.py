"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chipvm import create_state, Quirks


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def modern_state():
    """Provide a fresh state with shifts operating on VX in place."""
    return create_state(quirks=Quirks(legacy_shift=False))


@pytest.fixture
def legacy_state():
    """Provide a fresh state with shifts reading VY."""
    return create_state(quirks=Quirks(legacy_shift=True))


@pytest.fixture
def clip_state():
    """Provide a fresh state that clips sprites at the screen edges."""
    return create_state(quirks=Quirks(wrap_sprites=False))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def assemble(*words):
    """Big-endian program bytes from instruction words."""
    return b"".join(word.to_bytes(2, "big") for word in words)
