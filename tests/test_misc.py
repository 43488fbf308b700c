"""Tests for miscellaneous instructions (Fxxx)."""

import pytest
import jax.numpy as jnp
from vipax import execute, FONT_DATA


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        state = execute(fresh_state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # delay = V0
        assert state.delay_timer == 48

        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # sound = V1
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay
        assert state.V[2] == 48


class TestBCD:
    """Test BCD conversion."""

    def test_misc_bcd_conversion(self, fresh_state):
        state = execute(fresh_state, 0x609C)  # V0 = 156
        state = execute(state, 0xA300)
        state = execute(state, 0xF033)

        assert state.memory[0x300] == 1
        assert state.memory[0x301] == 5
        assert state.memory[0x302] == 6
        assert state.I == 0x300

    def test_bcd_edge_cases(self, fresh_state):
        state = execute(fresh_state, 0x6000)
        state = execute(state, 0xA400)
        state = execute(state, 0xF033)

        assert state.memory[0x400] == 0
        assert state.memory[0x401] == 0
        assert state.memory[0x402] == 0

        state = execute(state, 0x60FF)
        state = execute(state, 0xA500)
        state = execute(state, 0xF033)

        assert state.memory[0x500] == 2
        assert state.memory[0x501] == 5
        assert state.memory[0x502] == 5

    def test_bcd_cannot_overwrite_font(self, fresh_state):
        state = execute(fresh_state, 0x60FF)
        state = execute(state, 0xA000)
        state = execute(state, 0xF033)

        assert (state.memory[:len(FONT_DATA)] == FONT_DATA).all()


class TestFont:
    """Test font character addressing."""

    def test_font_all_characters(self, fresh_state):
        state = fresh_state
        for digit in range(16):
            state = execute(state, 0x6000 | digit)
            state = execute(state, 0xF029)
            assert state.I == digit * 5, f"Font address wrong for digit {digit:X}"

    def test_font_uses_low_nibble(self, fresh_state):
        state = execute(fresh_state, 0x60AB)
        state = execute(state, 0xF029)
        assert state.I == 0xB * 5


class TestMemoryOperations:
    """Test store/load register operations."""

    def test_store_load_registers(self, fresh_state):
        state = execute(fresh_state, 0x6001)
        state = execute(state, 0x6102)
        state = execute(state, 0x6203)
        state = execute(state, 0x6304)  # not stored
        state = execute(state, 0xA300)

        state = execute(state, 0xF255)
        assert state.I == 0x300
        assert list(state.memory[0x300:0x304]) == [1, 2, 3, 0]

        state = state.replace(V=jnp.zeros_like(state.V))
        state = execute(state, 0xF265)

        assert state.V[0] == 1
        assert state.V[1] == 2
        assert state.V[2] == 3
        assert state.V[3] == 0
        assert state.I == 0x300

    def test_store_all_registers(self, fresh_state):
        state = fresh_state.replace(V=jnp.arange(16, dtype=jnp.uint8) + 1)
        state = execute(state, 0xA600)
        state = execute(state, 0xFF55)

        assert list(state.memory[0x600:0x610]) == list(range(1, 17))
        assert state.memory[0x610] == 0

    def test_store_registers_skips_font_region(self, fresh_state):
        """Bytes aimed below 0x050 are dropped, the rest still land."""
        state = fresh_state.replace(V=jnp.full(16, 0xEE, dtype=jnp.uint8))
        state = execute(state, 0xA048)
        state = execute(state, 0xFF55)

        assert (state.memory[:len(FONT_DATA)] == FONT_DATA).all()
        assert list(state.memory[0x50:0x58]) == [0xEE] * 8
        assert state.memory[0x58] == 0

    def test_load_single_register(self, fresh_state):
        state = fresh_state.replace(memory=fresh_state.memory.at[0x700:0x702].set(jnp.array([9, 8], dtype=jnp.uint8)))
        state = execute(state, 0xA700)
        state = execute(state, 0xF065)

        assert state.V[0] == 9
        assert state.V[1] == 0


class TestKeyWait:
    """Test FX0A."""

    def test_wait_for_key_blocking(self, fresh_state):
        """No key pressed: PC winds back so the instruction repeats."""
        initial_pc = fresh_state.pc

        state = execute(fresh_state, 0xF00A)

        assert state.pc == initial_pc - 2
        assert state.V[0] == 0

    def test_wait_for_key_pressed(self, fresh_state):
        state = fresh_state.replace(keypad=fresh_state.keypad.at[7].set(True))
        initial_pc = state.pc

        state = execute(state, 0xF30A)

        assert state.V[3] == 7
        assert state.pc == initial_pc

    def test_wait_for_key_at_start_of_memory_stays_in_range(self, fresh_state):
        """Rewinding from address 0 lands on the last instruction slot."""
        state = fresh_state.replace(pc=jnp.asarray(0x000, dtype=jnp.uint16))

        state = execute(state, 0xF00A)

        assert state.pc == 0xFFE

    def test_wait_for_key_lowest_index(self, fresh_state):
        state = fresh_state.replace(keypad=fresh_state.keypad.at[0xC].set(True).at[0x4].set(True))

        state = execute(state, 0xF10A)

        assert state.V[1] == 4


class TestAddToIndex:
    """Test FX1E."""

    def test_add_to_index(self, fresh_state):
        state = execute(fresh_state, 0x6010)
        state = execute(state, 0xA300)
        state = execute(state, 0xF01E)

        assert state.I == 0x310
        assert state.V[15] == 0

    def test_add_to_index_past_4k_keeps_16_bits(self, fresh_state):
        """Carry is only reported out of 16 bits."""
        state = execute(fresh_state, 0x60FF)
        state = execute(state, 0xAF80)
        state = execute(state, 0xF01E)

        assert state.I == 0x107F
        assert state.V[15] == 0

    def test_add_to_index_carry(self, fresh_state):
        state = fresh_state.replace(I=jnp.asarray(0xFFF0, dtype=jnp.uint16))
        state = execute(state, 0x6020)
        state = execute(state, 0xF01E)

        assert state.I == 0x0010
        assert state.V[15] == 1


def test_unknown_misc_instruction_is_ignored(fresh_state):
    state = execute(fresh_state, 0x6042)

    new_state = execute(state, 0xF0FF)

    assert new_state.pc == state.pc
    assert (new_state.V == state.V).all()
    assert (new_state.memory == state.memory).all()
    assert new_state.I == state.I
