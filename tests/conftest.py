"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chipcore import create_state, load_program, Quirks


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def modern_state():
    """Provide a fresh state with the modern quirk preset."""
    return create_state(quirks=Quirks.from_preset("modern"))


@pytest.fixture
def cosmac_state():
    """Provide a fresh state with the COSMAC VIP quirk preset."""
    return create_state(quirks=Quirks.from_preset("cosmac"))


@pytest.fixture
def amiga_state():
    """Provide a fresh state with the Amiga quirk preset."""
    return create_state(quirks=Quirks.from_preset("amiga"))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def setup_registers(state, **registers):
    """Helper to set registers by name, e.g. setup_registers(state, V1=0x10)."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def load_words(state, words):
    """Helper to load a program given as 16-bit words."""
    program = b"".join(word.to_bytes(2, "big") for word in words)
    return load_program(state, program)
