"""CHIP-8 display operations."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.constants import SCREEN_WIDTH, SCREEN_HEIGHT, FLAG_REGISTER
from chipcore.errors import Fault, signal_fault
from chipcore.instructions.memory import address_range_valid

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(memory: jnp.ndarray, address, origin_x, origin_y, height) -> jnp.ndarray:
    """Boolean (width, height) mask of the screen cells a sprite sets.

    Rows past the bottom edge and columns past the right edge are clipped.
    """
    in_sprite = (xx >= origin_x) & (xx < origin_x + 8) & (yy >= origin_y) & (yy < origin_y + height)

    row_offset = jnp.clip(yy - origin_y, 0, 15)
    col_offset = jnp.clip(xx - origin_x, 0, 7)
    sprite_bytes = memory.at[jnp.astype(address, jnp.int32) + row_offset].get(mode="clip")
    bits = (sprite_bytes >> (7 - col_offset)) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    def _draw(state):
        origin_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
        origin_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT
        sprite = sprite_mask(state.memory, state.I, origin_x, origin_y, jnp.astype(instruction.n, jnp.int32))
        collision = jnp.any(state.display & sprite)
        return state.replace(
            display=state.display ^ sprite,
            V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
        )

    return jax.lax.cond(
        address_range_valid(state.I, instruction.n),
        _draw,
        lambda s: signal_fault(s, Fault.ADDRESS_OUT_OF_RANGE, instruction),
        state
    )
