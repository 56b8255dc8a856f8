"""CHIP-8 delay and sound timers."""

import jax.numpy as jnp
from chipcore.state import EmulatorState


def _decrement(timer: jnp.ndarray) -> jnp.ndarray:
    return jnp.where(timer > 0, timer - 1, timer).astype(jnp.uint8)


def decay_timers(state: EmulatorState) -> EmulatorState:
    """Decrement both timers by one tick, saturating at zero."""
    return state.replace(
        delay_timer=_decrement(state.delay_timer),
        sound_timer=_decrement(state.sound_timer),
    )
