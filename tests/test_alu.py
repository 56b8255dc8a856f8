"""Tests for ALU operations (8xxx)."""

import pytest
from chipcore import execute, create_state, Quirks, Fault
from conftest import setup_registers


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = setup_registers(fresh_state, V1=0x42, V2=0x99, VF=0x07)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99
        assert state.V[15] == 0x07  # VF untouched

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = setup_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = setup_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = setup_registers(fresh_state, V1=0xFF, V2=0xF0)

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    def test_alu_xor_same(self, fresh_state):
        """8XY3 - XOR with same value should be 0."""
        state = setup_registers(fresh_state, V3=0xAA, V4=0xAA)

        state = execute(state, 0x8343)  # V3 ^= V4

        assert state.V[3] == 0x00


class TestVFReset:
    """Test the vf_reset quirk on logic operations."""

    @pytest.mark.parametrize("instruction", [0x8121, 0x8122, 0x8123])
    def test_logic_keeps_vf_by_default(self, fresh_state, instruction):
        state = setup_registers(fresh_state, V1=0x0F, V2=0x33, VF=0x05)

        state = execute(state, instruction)

        assert state.V[15] == 0x05

    @pytest.mark.parametrize("instruction", [0x8121, 0x8122, 0x8123])
    def test_logic_clears_vf_with_quirk(self, cosmac_state, instruction):
        state = setup_registers(cosmac_state, V1=0x0F, V2=0x33, VF=0x05)

        state = execute(state, instruction)

        assert state.V[15] == 0

    def test_set_keeps_vf_with_quirk(self, cosmac_state):
        """8XY0 is not a logic op and never touches VF."""
        state = setup_registers(cosmac_state, V1=0x0F, V2=0x33, VF=0x05)

        state = execute(state, 0x8120)

        assert state.V[15] == 0x05


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    @pytest.mark.parametrize("vx, vy, result, carry", [
        (250, 10, 4, 1),
        (10, 20, 30, 0),
        (0xFF, 0x01, 0x00, 1),
        (0x80, 0x7F, 0xFF, 0),
    ])
    def test_alu_add(self, fresh_state, vx, vy, result, carry):
        """8XY4 - Add with carry."""
        state = setup_registers(fresh_state, V1=vx, V2=vy)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == result
        assert state.V[15] == carry

    @pytest.mark.parametrize("vx, vy, result, no_borrow", [
        (5, 10, 251, 0),
        (10, 5, 5, 1),
        (0x30, 0x30, 0x00, 1),
    ])
    def test_alu_sub_xy(self, fresh_state, vx, vy, result, no_borrow):
        """8XY5 - Subtract VX - VY, VF = 1 when no borrow."""
        state = setup_registers(fresh_state, V3=vx, V4=vy)

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == result
        assert state.V[15] == no_borrow

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = setup_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, with borrow."""
        state = setup_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0
        assert state.V[15] == 0


class TestALUShifts:
    """Test shift operations with quirk differences."""

    def test_shift_right_modern_even(self, modern_state):
        """8XY6 - Shift right, modern shift, even number."""
        state = setup_registers(modern_state, V1=0x04, V2=0xFF)

        state = execute(state, 0x8126)  # V1 >>= 1

        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_shift_right_modern_odd(self, modern_state):
        """8XY6 - Shift right, modern shift, odd number."""
        state = setup_registers(modern_state, V3=0x05, V4=0xFF)

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_right_legacy(self, fresh_state):
        """8XY6 - Shift right, VY is the source by default."""
        state = setup_registers(fresh_state, V5=0x08, V6=0x03)

        state = execute(state, 0x8566)  # V5 = V6 >> 1

        assert state.V[5] == 0x01
        assert state.V[6] == 0x03  # VY unchanged
        assert state.V[15] == 1

    def test_shift_left_modern_overflow(self, modern_state):
        """8XYE - Shift left, modern shift, with overflow."""
        state = setup_registers(modern_state, V3=0x81, V4=0xFF)

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_left_legacy(self, fresh_state):
        """8XYE - Shift left uses VY by default."""
        state = setup_registers(fresh_state, V3=0x81, V4=0x41)

        state = execute(state, 0x834E)  # V3 = V4 << 1

        assert state.V[3] == 0x82
        assert state.V[15] == 0

    def test_shift_mode_comparison(self):
        """Test that modern_shift_behaviour switches the shift source."""
        modern = create_state(quirks=Quirks(modern_shift_behaviour=True))
        legacy = create_state(quirks=Quirks(modern_shift_behaviour=False))

        modern = execute(setup_registers(modern, V1=0x08, V2=0x03), 0x8126)
        legacy = execute(setup_registers(legacy, V1=0x08, V2=0x03), 0x8126)

        assert modern.V[1] == 0x04  # used V1
        assert legacy.V[1] == 0x01  # used V2


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    @pytest.mark.parametrize("op", [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF])
    def test_alu_undefined_operations(self, fresh_state, op):
        """Undefined 8XYN forms are unknown opcodes, not silent no-ops."""
        state = setup_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120 | op)

        assert int(state.fault) == Fault.UNKNOWN_OPCODE
        assert int(state.fault_opcode) == 0x8120 | op
        assert state.V[1] == 0x42

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = setup_registers(fresh_state, V5=0xAA)

        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        state = setup_registers(state, V5=0x80)
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_register_operations(self, fresh_state):
        """Test that operations on VF work correctly."""
        state = setup_registers(fresh_state, VF=0x42, V1=0x10)

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52, "Addition with VF as source failed"
        assert state.V[15] == 0, "VF should be overwritten by operation result"

    def test_flag_wins_when_destination_is_vf(self, fresh_state):
        """The flag write lands after the result when X is F."""
        state = setup_registers(fresh_state, VF=0xFF, V1=0x01)

        state = execute(state, 0x8F14)  # VF += V1 -> 0x00 with carry

        assert state.V[15] == 1
