"""End-to-end tests for fetch, step and tick scheduling."""

import jax.numpy as jnp
import pytest
from chipcore import (
    step, step_tick, run_tick, run_ticks, fetch, get_fault, raise_for_fault,
    Fault, AddressOutOfRange, UnknownOpcode, KeyEvent,
)
from conftest import load_words


class TestFetch:
    """Test instruction fetch."""

    def test_fetch_big_endian(self, fresh_state):
        state = load_words(fresh_state, [0xA2F0])
        state, instruction = fetch(state)

        assert instruction == 0xA2F0
        assert state.pc == 0x202

    def test_fetch_last_word(self, fresh_state):
        state = fresh_state.replace(
            memory=fresh_state.memory.at[0xFFE].set(0x12).at[0xFFF].set(0x34),
            pc=jnp.asarray(0xFFE, dtype=jnp.uint16),
        )
        state, instruction = fetch(state)

        assert instruction == 0x1234
        assert int(state.fault) == Fault.NONE

    def test_fetch_past_end_faults(self, fresh_state):
        state = fresh_state.replace(pc=jnp.asarray(0xFFF, dtype=jnp.uint16))

        state = step(state)

        assert int(state.fault) == Fault.ADDRESS_OUT_OF_RANGE
        assert int(state.fault_pc) == 0xFFF
        assert state.pc == 0xFFF

    def test_jump_out_of_memory_faults_on_next_fetch(self, fresh_state):
        state = load_words(fresh_state, [0x60FF, 0xBFFF])

        state = step_tick(state, instructions_per_tick=3)

        assert isinstance(get_fault(state), AddressOutOfRange)
        assert int(state.fault_pc) == 0x10FE


class TestProgram:
    """Test small programs running through ticks."""

    def test_counter_loop(self, fresh_state):
        state = load_words(fresh_state, [0x00E0, 0x6005, 0x7005, 0x1200])

        state = step_tick(state, instructions_per_tick=4)

        assert state.V[0] == 10
        assert state.pc == 0x200
        assert get_fault(state) is None

    def test_subroutine_round_trip(self, fresh_state):
        # 0x200: CALL 0x206; 0x202: V1 = 1; 0x204: spin; 0x206: V0 = 7; RET
        state = load_words(fresh_state, [0x2206, 0x6101, 0x1204, 0x6007, 0x00EE])

        state = step_tick(state, instructions_per_tick=5)

        assert state.V[0] == 7
        assert state.V[1] == 1
        assert state.pc == 0x204
        assert state.stack.pointer == 0

    def test_draw_font_glyph(self, fresh_state):
        # V0 = 0xA, I = glyph(V0), draw at (0, 0), spin
        state = load_words(fresh_state, [0x600A, 0xF029, 0x6000, 0xD005, 0x1208])

        state = step_tick(state, instructions_per_tick=5)

        # "A" is F0 90 F0 90 90
        assert state.display[:4, 0].tolist() == [True, True, True, True]
        assert state.display[:4, 1].tolist() == [True, False, False, True]
        assert int(state.display.sum()) == 4 + 2 + 4 + 2 + 2


class TestFaults:
    """Faults halt the interpreter."""

    def test_unknown_opcode_halts(self, fresh_state):
        state = load_words(fresh_state, [0x6001, 0xFFFF, 0x6002])
        state = state.replace(delay_timer=jnp.asarray(10, dtype=jnp.uint8))

        state = step_tick(state, instructions_per_tick=3)

        assert int(state.fault) == Fault.UNKNOWN_OPCODE
        assert int(state.fault_pc) == 0x202
        assert int(state.fault_opcode) == 0xFFFF
        assert state.V[0] == 1
        assert state.delay_timer == 10  # a faulted tick does not decay timers
        with pytest.raises(UnknownOpcode):
            raise_for_fault(state)

    def test_halted_state_is_unchanged(self, fresh_state):
        state = step_tick(load_words(fresh_state, [0xFFFF]), instructions_per_tick=1)
        halted = state

        state = run_tick(state, 12)

        assert state.pc == halted.pc
        assert (state.memory == halted.memory).all()
        assert (state.V == halted.V).all()
        assert state.fault == halted.fault

    def test_running_state_does_not_raise(self, fresh_state):
        raise_for_fault(fresh_state)


class TestWaitForKeyAcrossTicks:
    """FX0A blocks until a press arrives in the tick that executes it."""

    def test_blocks_until_press(self, fresh_state):
        state = load_words(fresh_state, [0xF00A, 0x1202])

        for _ in range(3):
            state = step_tick(state, instructions_per_tick=4)
            assert state.pc == 0x200

        state = step_tick(state, [KeyEvent(0x9, True)], instructions_per_tick=1)

        assert state.V[0] == 0x9
        assert state.pc == 0x202

    def test_press_in_earlier_tick_is_ignored(self, fresh_state):
        state = load_words(fresh_state, [0x6100, 0xF00A, 0x1204])

        state = step_tick(state, [KeyEvent(0x4, True)], instructions_per_tick=1)
        state = step_tick(state, instructions_per_tick=1)

        assert state.pc == 0x202
        assert state.V[0] == 0

    def test_invalid_key_event(self, fresh_state):
        with pytest.raises(ValueError):
            step_tick(fresh_state, [KeyEvent(0x10, True)])


class TestRunTicks:
    """Test headless batch execution."""

    def test_run_ticks_collects_displays(self, fresh_state):
        state = load_words(fresh_state, [0x6001, 0x7001, 0x1202])

        state, displays = run_ticks(state, 5, 2)

        assert displays.shape == (5, 64, 32)
        assert state.V[0] == 6

    def test_run_ticks_matches_step_tick(self, fresh_state):
        state = load_words(fresh_state, [0x6030, 0xF015, 0x7001, 0x1204])

        batched, _ = run_ticks(state, 4, 3)
        stepped = state
        for _ in range(4):
            stepped = step_tick(stepped, instructions_per_tick=3)

        assert batched.V[0] == stepped.V[0]
        assert batched.delay_timer == stepped.delay_timer
        assert batched.pc == stepped.pc
