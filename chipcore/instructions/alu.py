"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.constants import FLAG_REGISTER


def alu_or(vx: int, vy: int) -> tuple[int, int]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, 0


def alu_and(vx: int, vy: int) -> tuple[int, int]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, 0


def alu_xor(vx: int, vy: int) -> tuple[int, int]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, 0


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + vy
    carry = result > 255
    return result & 0xFF, carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when no borrow."""
    no_borrow = vx >= vy
    result = (jnp.astype(vx, jnp.int32) - vy) & 0xFF
    return result, no_borrow


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when no borrow."""
    no_borrow = vy >= vx
    result = (jnp.astype(vy, jnp.int32) - vx) & 0xFF
    return result, no_borrow


def alu_shift_right(value: int) -> tuple[int, int]:
    """8XY6 - Shift right, VF = shifted-out bit."""
    return value >> 1, value & 1


def alu_shift_left(value: int) -> tuple[int, int]:
    """8XYE - Shift left, VF = shifted-out bit."""
    return (jnp.astype(value, jnp.int32) << 1) & 0xFF, (value & 0x80) >> 7


def _write_result(state: EmulatorState, instruction: DecodedInstruction, result, flag=None) -> EmulatorState:
    """Store the result in VX, then the flag in VF (the flag wins when X is F)."""
    new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
    if flag is not None:
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
    return state.replace(V=new_V)


def execute_alu_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY0 - Set: VX = VY."""
    return _write_result(state, instruction, state.V[instruction.y])


def make_logic_instruction(alu_fn):
    """Factory for OR/AND/XOR, which clear VF only under the vf_reset quirk."""
    def logic_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        result, flag = alu_fn(state.V[instruction.x], state.V[instruction.y])
        return _write_result(state, instruction, result, flag if state.quirks.vf_reset else None)
    return logic_instruction


def make_arithmetic_instruction(alu_fn):
    """Factory for instructions that always report through VF."""
    def arithmetic_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        result, flag = alu_fn(state.V[instruction.x], state.V[instruction.y])
        return _write_result(state, instruction, result, flag)
    return arithmetic_instruction


def make_shift_instruction(shift_fn):
    """Factory for shifts; the source is VY unless modern_shift_behaviour is set."""
    def shift_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        source = instruction.x if state.quirks.modern_shift_behaviour else instruction.y
        result, flag = shift_fn(state.V[source])
        return _write_result(state, instruction, result, flag)
    return shift_instruction


execute_alu_or = make_logic_instruction(alu_or)
execute_alu_and = make_logic_instruction(alu_and)
execute_alu_xor = make_logic_instruction(alu_xor)
execute_alu_add = make_arithmetic_instruction(alu_add)
execute_alu_sub_xy = make_arithmetic_instruction(alu_sub_xy)
execute_alu_sub_yx = make_arithmetic_instruction(alu_sub_yx)
execute_alu_shift_right = make_shift_instruction(alu_shift_right)
execute_alu_shift_left = make_shift_instruction(alu_shift_left)
