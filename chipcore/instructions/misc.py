"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.constants import FONT_START, FONT_GLYPH_SIZE, FLAG_REGISTER, ADDRESS_LIMIT, MEMORY_SIZE
from chipcore.errors import Fault, signal_fault
from chipcore.keypad import consume_pending
from chipcore.instructions.memory import address_range_valid


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register.

    I is a 16-bit register and is not masked back into the address space.
    With amiga_behaviour, VF reports whether I ended up past 0x0FFF.
    """
    new_i = jnp.astype(state.I, jnp.int32) + state.V[instruction.x]
    state = state.replace(I=jnp.astype(new_i & 0xFFFF, jnp.uint16))
    if state.quirks.amiga_behaviour:
        overflow_flag = jnp.astype(new_i > ADDRESS_LIMIT, jnp.uint8)
        state = state.replace(V=state.V.at[FLAG_REGISTER].set(overflow_flag))
    return state


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for a key press that is new in the current tick."""
    keypad = state.keypad

    def key_pressed_action(state):
        return state.replace(
            V=state.V.at[instruction.x].set(keypad.pending_key),
            keypad=consume_pending(keypad)
        )

    def wait_action(state):
        return state.replace(pc=state.pc - 2)

    fresh_press = keypad.has_pending & (keypad.pending_age == 0)
    return jax.lax.cond(fresh_press, key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    def _store(state):
        value = state.V[instruction.x]

        # Vectorized BCD conversion
        digits = jnp.array([
            value // 100,
            (value // 10) % 10,
            value % 10
        ], dtype=jnp.uint8)

        indices = jnp.arange(3) + state.I
        return state.replace(memory=state.memory.at[indices].set(digits, mode="drop"))

    return jax.lax.cond(
        address_range_valid(state.I, 3),
        _store,
        lambda s: signal_fault(s, Fault.ADDRESS_OUT_OF_RANGE, instruction),
        state
    )


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Legacy FX55/FX65 leave I pointing past the last byte copied."""
    if state.quirks.modern_str_ld_behaviour:
        return state
    return state.replace(I=jnp.astype(state.I + instruction.x + 1, jnp.uint16))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    def _store(state):
        register_mask = jnp.arange(16) <= instruction.x
        indices = jnp.where(register_mask, state.I + jnp.arange(16), MEMORY_SIZE)
        new_memory = state.memory.at[indices].set(state.V, mode="drop")
        return _advance_index(state.replace(memory=new_memory), instruction)

    return jax.lax.cond(
        address_range_valid(state.I, instruction.x + 1),
        _store,
        lambda s: signal_fault(s, Fault.ADDRESS_OUT_OF_RANGE, instruction),
        state
    )


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    def _load(state):
        register_mask = jnp.arange(16) <= instruction.x
        memory_values = state.memory.at[state.I + jnp.arange(16)].get(mode="clip")
        new_V = jnp.where(register_mask, memory_values, state.V)
        return _advance_index(state.replace(V=new_V), instruction)

    return jax.lax.cond(
        address_range_valid(state.I, instruction.x + 1),
        _load,
        lambda s: signal_fault(s, Fault.ADDRESS_OUT_OF_RANGE, instruction),
        state
    )
