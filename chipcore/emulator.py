"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Iterable

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import Op, decode
from chipcore.constants import PROGRAM_START, MAX_PROGRAM_SIZE, MEMORY_SIZE, INSTRUCTIONS_PER_TICK
from chipcore.errors import Fault, signal_fault, is_running
from chipcore.keypad import KeyEvent, apply_key_events, age_keypad
from chipcore.timers import decay_timers
from chipcore.logging import scan_with_progress
from chipcore.instructions.system import no_op, execute_clear_screen, execute_return, execute_unknown
from chipcore.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chipcore.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chipcore.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipcore.instructions.display import execute_display
from chipcore.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

INSTRUCTION_HANDLERS = {
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.SYS: no_op,
    Op.JP: execute_jump,
    Op.CALL: execute_call,
    Op.SE_VX_NN: execute_skip_if_equal_immediate,
    Op.SNE_VX_NN: execute_skip_if_not_equal_immediate,
    Op.SE_VX_VY: execute_skip_if_equal_register,
    Op.LD_VX_NN: execute_set,
    Op.ADD_VX_NN: execute_add,
    Op.LD_VX_VY: execute_alu_set,
    Op.OR: execute_alu_or,
    Op.AND: execute_alu_and,
    Op.XOR: execute_alu_xor,
    Op.ADD_VX_VY: execute_alu_add,
    Op.SUB: execute_alu_sub_xy,
    Op.SHR: execute_alu_shift_right,
    Op.SUBN: execute_alu_sub_yx,
    Op.SHL: execute_alu_shift_left,
    Op.SNE_VX_VY: execute_skip_if_not_equal_register,
    Op.LD_I: execute_set_index,
    Op.JP_V0: execute_jump_with_offset,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.SKP: execute_skip_if_key,
    Op.SKNP: execute_skip_if_not_key,
    Op.LD_VX_DT: execute_get_delay_timer,
    Op.LD_VX_K: execute_wait_for_key,
    Op.LD_DT_VX: execute_set_delay_timer,
    Op.LD_ST_VX: execute_set_sound_timer,
    Op.ADD_I_VX: execute_add_to_index,
    Op.LD_F_VX: execute_font_character,
    Op.LD_B_VX: execute_bcd_conversion,
    Op.LD_I_VX: execute_store_registers,
    Op.LD_VX_I: execute_load_registers,
    Op.UNKNOWN: execute_unknown,
}


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.kind,
        [INSTRUCTION_HANDLERS[op] for op in Op],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory.

    A PC whose word would extend past 0xFFF latches ADDRESS_OUT_OF_RANGE and
    leaves the PC where it is.
    """
    in_range = state.pc <= MEMORY_SIZE - 2
    pc = jnp.minimum(state.pc, MEMORY_SIZE - 2)
    instruction = _pack_u16(state.memory[pc], state.memory[pc + 1])
    state = jax.lax.cond(
        in_range,
        lambda s: s.replace(pc=s.pc + 2),
        lambda s: signal_fault(s, Fault.ADDRESS_OUT_OF_RANGE),
        state
    )
    return state, instruction


def step(state: EmulatorState) -> EmulatorState:
    """Fetch and execute one instruction; a faulted state is left untouched."""
    def _step(state):
        state, instruction = fetch(state)
        return jax.lax.cond(
            is_running(state),
            lambda s: execute(s, instruction),
            lambda s: s,
            state
        )

    return jax.lax.cond(is_running(state), _step, lambda s: s, state)


@partial(jax.jit, static_argnames="instructions_per_tick")
def run_tick(state: EmulatorState, instructions_per_tick: int = INSTRUCTIONS_PER_TICK) -> EmulatorState:
    """Run a batch of instructions, then decay the timers exactly once."""
    state = jax.lax.fori_loop(0, instructions_per_tick, lambda _, s: step(s), state)
    return jax.lax.cond(is_running(state), decay_timers, lambda s: s, state)


def step_tick(
    state: EmulatorState,
    events: Iterable[KeyEvent] = (),
    instructions_per_tick: int = INSTRUCTIONS_PER_TICK,
) -> EmulatorState:
    """Advance the interpreter by one host tick.

    Args:
        state: Current emulator state
        events: Key transitions collected by the host since the previous tick
        instructions_per_tick: Number of instructions executed in this tick

    Returns:
        The new state. Check `state.fault` (or `get_fault`) to detect a halt.
    """
    state = state.replace(keypad=apply_key_events(state.keypad, events))
    return run_tick(state, instructions_per_tick)


def run_ticks(
    state: EmulatorState,
    num_ticks: int,
    instructions_per_tick: int = INSTRUCTIONS_PER_TICK,
    progress: bool = False,
) -> tuple[EmulatorState, jnp.ndarray]:
    """Run `num_ticks` ticks without input inside a single compiled scan.

    Returns:
        Tuple of the final state and the display after every tick, shaped
        (num_ticks, 64, 32)
    """
    return _run_ticks(state, num_ticks, instructions_per_tick, progress)


@partial(jax.jit, static_argnums=(1, 2, 3))
def _run_ticks(state, num_ticks, instructions_per_tick, progress):
    def _tick(state, _):
        state = state.replace(keypad=age_keypad(state.keypad))
        state = run_tick(state, instructions_per_tick)
        return state, state.display

    if progress:
        _tick = scan_with_progress(num_ticks, desc=f"Running {num_ticks:,} ticks")(_tick)

    return jax.lax.scan(_tick, state, jnp.arange(num_ticks))


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy a raw program image into memory starting at 0x200."""
    if len(program) > MAX_PROGRAM_SIZE:
        raise ValueError(
            f"Program is {len(program)} bytes; at most {MAX_PROGRAM_SIZE} bytes fit at 0x{PROGRAM_START:03X}"
        )
    if not program:
        return state
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
