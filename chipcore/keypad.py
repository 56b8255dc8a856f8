"""CHIP-8 keypad debounce state machine."""

from typing import Iterable, NamedTuple, Union

import jax.numpy as jnp

from chipcore.constants import NUM_KEYS, KEY_DEBOUNCE_WINDOW, KEY_AGE_LIMIT
from chipcore.state import KeypadState


class KeyEvent(NamedTuple):
    """Logical key transition supplied by the host."""
    key: int
    pressed: bool


def _age(ages: jnp.ndarray) -> jnp.ndarray:
    return jnp.astype(jnp.minimum(jnp.astype(ages, jnp.int32) + 1, KEY_AGE_LIMIT), jnp.uint8)


def age_keypad(keypad: KeypadState) -> KeypadState:
    """Advance every press/release age and the pending key age by one tick."""
    return keypad.replace(
        press_age=_age(keypad.press_age),
        release_age=_age(keypad.release_age),
        pending_age=_age(keypad.pending_age),
    )


def press_key(keypad: KeypadState, key: int) -> KeypadState:
    """Register a press; it also becomes the pending key for FX0A."""
    return keypad.replace(
        press_age=keypad.press_age.at[key].set(0),
        down=keypad.down.at[key].set(True),
        has_pending=jnp.ones((), dtype=jnp.bool_),
        pending_key=jnp.asarray(key, dtype=jnp.uint8),
        pending_age=jnp.zeros((), dtype=jnp.uint8),
    )


def release_key(keypad: KeypadState, key: int) -> KeypadState:
    """Register a release."""
    return keypad.replace(
        release_age=keypad.release_age.at[key].set(0),
        down=keypad.down.at[key].set(False),
    )


def consume_pending(keypad: KeypadState) -> KeypadState:
    return keypad.replace(has_pending=jnp.zeros((), dtype=jnp.bool_))


def apply_key_events(
    keypad: KeypadState,
    events: Iterable[Union[KeyEvent, tuple[int, bool]]] = (),
) -> KeypadState:
    """Age the keypad by one tick, then apply the tick's events in order.

    Args:
        keypad: Current keypad state
        events: (key, pressed) transitions for logical keys 0x0-0xF

    Returns:
        Updated keypad state
    """
    keypad = age_keypad(keypad)
    for key, pressed in events:
        key = int(key)
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Invalid CHIP-8 key {key}; expected 0x0-0x{NUM_KEYS - 1:X}")
        keypad = press_key(keypad, key) if pressed else release_key(keypad, key)
    return keypad


def is_pressed(keypad: KeypadState, key) -> jnp.ndarray:
    """Key was pressed within the debounce window."""
    return keypad.press_age[key] <= KEY_DEBOUNCE_WINDOW


def is_released(keypad: KeypadState, key) -> jnp.ndarray:
    """Key was released within the debounce window."""
    return keypad.release_age[key] <= KEY_DEBOUNCE_WINDOW


def is_active(keypad: KeypadState, key) -> jnp.ndarray:
    """Key is held down, or was tapped recently enough to still count."""
    return keypad.down[key] | is_pressed(keypad, key)
