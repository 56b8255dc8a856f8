"""Interpreter faults.

Faults are latched into the emulator state as plain integer codes so that the
compiled core never has to raise. Hosts turn a latched code back into an
exception value with `get_fault` or `raise_for_fault`.
"""

import enum
from typing import Optional

import jax.numpy as jnp


class Fault(enum.IntEnum):
    """Fault codes stored in `EmulatorState.fault`."""
    NONE = 0
    UNKNOWN_OPCODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3
    ADDRESS_OUT_OF_RANGE = 4


class InterpreterFault(Exception):
    """Unrecoverable fault raised by a malformed or incompatible program."""

    fault = Fault.NONE
    description = "interpreter fault"

    def __init__(self, pc: int, opcode: int):
        self.pc = pc
        self.opcode = opcode
        super().__init__(f"{self.description} at 0x{pc:03X} (opcode 0x{opcode:04X})")


class UnknownOpcode(InterpreterFault):
    fault = Fault.UNKNOWN_OPCODE
    description = "unknown opcode"


class StackOverflow(InterpreterFault):
    fault = Fault.STACK_OVERFLOW
    description = "stack overflow"


class StackUnderflow(InterpreterFault):
    fault = Fault.STACK_UNDERFLOW
    description = "stack underflow"


class AddressOutOfRange(InterpreterFault):
    fault = Fault.ADDRESS_OUT_OF_RANGE
    description = "address out of range"


FAULT_TYPES = {
    cls.fault: cls for cls in (UnknownOpcode, StackOverflow, StackUnderflow, AddressOutOfRange)
}


def is_running(state) -> jnp.ndarray:
    return state.fault == int(Fault.NONE)


def signal_fault(state, fault: Fault, instruction=None):
    """Latch `fault` on the state; the first fault recorded wins.

    When `instruction` is given, the fault is attributed to that decoded
    instruction, whose address is two bytes behind the advanced PC.
    Otherwise it is attributed to the current PC (fetch faults).
    """
    if instruction is None:
        pc, opcode = state.pc, jnp.zeros((), dtype=jnp.uint16)
    else:
        pc, opcode = state.pc - 2, jnp.astype(instruction.raw, jnp.uint16)

    first = is_running(state)
    return state.replace(
        fault=jnp.where(first, int(fault), state.fault).astype(jnp.uint8),
        fault_pc=jnp.where(first, pc, state.fault_pc).astype(jnp.uint16),
        fault_opcode=jnp.where(first, opcode, state.fault_opcode).astype(jnp.uint16),
    )


def get_fault(state) -> Optional[InterpreterFault]:
    """Return the latched fault as an exception value, or None if running."""
    code = Fault(int(state.fault))
    if code == Fault.NONE:
        return None
    return FAULT_TYPES[code](int(state.fault_pc), int(state.fault_opcode))


def raise_for_fault(state):
    """Raise the latched fault, if any."""
    fault = get_fault(state)
    if fault is not None:
        raise fault
