"""CHIP-8 instruction decoding."""

import enum

import jax.numpy as jnp
from chex import dataclass


class Op(enum.IntEnum):
    """Instruction forms, in dispatch order."""
    CLS = 0
    RET = 1
    SYS = 2
    JP = 3
    CALL = 4
    SE_VX_NN = 5
    SNE_VX_NN = 6
    SE_VX_VY = 7
    LD_VX_NN = 8
    ADD_VX_NN = 9
    LD_VX_VY = 10
    OR = 11
    AND = 12
    XOR = 13
    ADD_VX_VY = 14
    SUB = 15
    SHR = 16
    SUBN = 17
    SHL = 18
    SNE_VX_VY = 19
    LD_I = 20
    JP_V0 = 21
    RND = 22
    DRW = 23
    SKP = 24
    SKNP = 25
    LD_VX_DT = 26
    LD_VX_K = 27
    LD_DT_VX = 28
    LD_ST_VX = 29
    ADD_I_VX = 30
    LD_F_VX = 31
    LD_B_VX = 32
    LD_I_VX = 33
    LD_VX_I = 34
    UNKNOWN = 35


# (mask, pattern) per Op, same order as Op. The first match wins, so the
# exact 00E0/00EE forms must precede the 0NNN catch-all.
OPCODE_TABLE = (
    (0xFFFF, 0x00E0),  # CLS
    (0xFFFF, 0x00EE),  # RET
    (0xF000, 0x0000),  # SYS
    (0xF000, 0x1000),  # JP
    (0xF000, 0x2000),  # CALL
    (0xF000, 0x3000),  # SE_VX_NN
    (0xF000, 0x4000),  # SNE_VX_NN
    (0xF00F, 0x5000),  # SE_VX_VY
    (0xF000, 0x6000),  # LD_VX_NN
    (0xF000, 0x7000),  # ADD_VX_NN
    (0xF00F, 0x8000),  # LD_VX_VY
    (0xF00F, 0x8001),  # OR
    (0xF00F, 0x8002),  # AND
    (0xF00F, 0x8003),  # XOR
    (0xF00F, 0x8004),  # ADD_VX_VY
    (0xF00F, 0x8005),  # SUB
    (0xF00F, 0x8006),  # SHR
    (0xF00F, 0x8007),  # SUBN
    (0xF00F, 0x800E),  # SHL
    (0xF00F, 0x9000),  # SNE_VX_VY
    (0xF000, 0xA000),  # LD_I
    (0xF000, 0xB000),  # JP_V0
    (0xF000, 0xC000),  # RND
    (0xF000, 0xD000),  # DRW
    (0xF0FF, 0xE09E),  # SKP
    (0xF0FF, 0xE0A1),  # SKNP
    (0xF0FF, 0xF007),  # LD_VX_DT
    (0xF0FF, 0xF00A),  # LD_VX_K
    (0xF0FF, 0xF015),  # LD_DT_VX
    (0xF0FF, 0xF018),  # LD_ST_VX
    (0xF0FF, 0xF01E),  # ADD_I_VX
    (0xF0FF, 0xF029),  # LD_F_VX
    (0xF0FF, 0xF033),  # LD_B_VX
    (0xF0FF, 0xF055),  # LD_I_VX
    (0xF0FF, 0xF065),  # LD_VX_I
)

_MASKS = jnp.array([mask for mask, _ in OPCODE_TABLE], dtype=jnp.uint16)
_PATTERNS = jnp.array([pattern for _, pattern in OPCODE_TABLE], dtype=jnp.uint16)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    kind: int    # Op tag
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def classify(instruction) -> jnp.ndarray:
    """Map a 16-bit word to its Op tag, Op.UNKNOWN if no form matches."""
    instruction = jnp.asarray(instruction, dtype=jnp.uint16)
    matches = (instruction & _MASKS) == _PATTERNS
    return jnp.where(jnp.any(matches), jnp.argmax(matches), int(Op.UNKNOWN)).astype(jnp.int32)


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    instruction = jnp.asarray(instruction, dtype=jnp.uint16)
    return DecodedInstruction(
        raw=instruction,
        kind=classify(instruction),
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
