"""Tests for display operations (DXYN)."""

import pytest
import jax.numpy as jnp
from vipax import execute, FONT_DATA
from conftest import setup_sprite_in_memory


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        sprite = [0xC0, 0xC0]  # 11000000, 11000000
        state = setup_sprite_in_memory(fresh_state, 0x300, sprite)

        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0x6105)  # V1 = 5
        state = execute(state, 0xA300)  # I = 0x300

        state = execute(state, 0xD012)

        assert state.display[10, 5] == 1
        assert state.display[11, 5] == 1
        assert state.display[10, 6] == 1
        assert state.display[11, 6] == 1
        assert state.display[12, 5] == 0
        assert jnp.sum(state.display) == 4
        assert state.V[15] == 0
        assert state.I == 0x300

    def test_collision_detection(self, fresh_state):
        """Test collision flag when sprite overlaps existing pixels."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80])

        state = execute(state, 0x6014)  # V0 = 20
        state = execute(state, 0x610A)  # V1 = 10
        state = execute(state, 0xA400)  # I = 0x400

        state = execute(state, 0xD011)
        assert state.display[20, 10] == 1
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert state.display[20, 10] == 0
        assert state.V[15] == 1

    def test_overlap_without_erasing_is_not_collision(self, fresh_state):
        """Turning pixels on next to lit ones does not set VF."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80, 0x40])
        state = execute(state, 0xA400)
        state = execute(state, 0xD011)  # single pixel at (0, 0)

        state = execute(state, 0xA401)
        state = execute(state, 0xD011)  # 0x40 lights (1, 0)

        assert state.display[0, 0] == 1
        assert state.display[1, 0] == 1
        assert state.V[15] == 0

    def test_font_glyph_drawn_twice_erases(self, fresh_state):
        """Drawing the "0" glyph twice restores a blank screen and flags collision."""
        state = execute(fresh_state, 0x6000)  # V0 = 0
        state = execute(state, 0xF029)  # I = glyph "0"

        state = execute(state, 0xD005)
        glyph = FONT_DATA[0:5]
        for row in range(5):
            for col in range(8):
                expected = (int(glyph[row]) >> (7 - col)) & 1
                assert state.display[col, row] == expected, f"pixel ({col}, {row})"
        assert state.V[15] == 0

        state = execute(state, 0xD005)
        assert jnp.sum(state.display) == 0
        assert state.V[15] == 1

    def test_zero_height_draws_nothing(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF])
        state = execute(state, 0xA300)
        state = execute(state, 0x6F01)  # VF = 1

        state = execute(state, 0xD000)

        assert jnp.sum(state.display) == 0
        assert state.V[15] == 0


class TestScreenBoundaries:
    """Test sprite clipping and wrapping."""

    def test_right_edge_wraps(self, fresh_state):
        """Pixels past x = 63 reappear at the left edge."""
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])

        state = execute(state, 0x603C)  # V0 = 60
        state = execute(state, 0x6100)  # V1 = 0
        state = execute(state, 0xA600)
        state = execute(state, 0xD011)

        for x in (60, 61, 62, 63, 0, 1, 2, 3):
            assert state.display[x, 0] == 1
        assert jnp.sum(state.display) == 8

    def test_right_edge_clips(self, clipping_state):
        """With clipping, pixels past x = 63 are dropped."""
        state = setup_sprite_in_memory(clipping_state, 0x600, [0xFF])

        state = execute(state, 0x603C)
        state = execute(state, 0x6100)
        state = execute(state, 0xA600)
        state = execute(state, 0xD011)

        for x in (60, 61, 62, 63):
            assert state.display[x, 0] == 1
        assert jnp.sum(state.display) == 4

    def test_bottom_edge_wraps(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80, 0x80])

        state = execute(state, 0x6000)  # V0 = 0
        state = execute(state, 0x611E)  # V1 = 30
        state = execute(state, 0xA700)
        state = execute(state, 0xD013)

        assert state.display[0, 30] == 1
        assert state.display[0, 31] == 1
        assert state.display[0, 0] == 1

    def test_bottom_edge_clips(self, clipping_state):
        state = setup_sprite_in_memory(clipping_state, 0x700, [0x80, 0x80, 0x80])

        state = execute(state, 0x6000)
        state = execute(state, 0x611E)
        state = execute(state, 0xA700)
        state = execute(state, 0xD013)

        assert state.display[0, 30] == 1
        assert state.display[0, 31] == 1
        assert state.display[0, 0] == 0

    def test_coordinate_wrapping(self, fresh_state):
        """Start coordinates beyond the screen wrap with modulo."""
        state = setup_sprite_in_memory(fresh_state, 0x800, [0x80])

        state = execute(state, 0x6046)  # V0 = 70 (70 % 64 = 6)
        state = execute(state, 0x6125)  # V1 = 37 (37 % 32 = 5)
        state = execute(state, 0xA800)
        state = execute(state, 0xD011)

        assert state.display[6, 5] == 1

    def test_collision_on_wrapped_pixel(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])
        state = state.replace(display=state.display.at[1, 0].set(1))

        state = execute(state, 0x603C)
        state = execute(state, 0xA600)
        state = execute(state, 0xD011)

        assert state.display[1, 0] == 0
        assert state.V[15] == 1


class TestSpriteVariations:
    """Test different sprite configurations."""

    def test_different_sprite_heights(self, fresh_state):
        """Only the first N rows are drawn."""
        sprite = [0x80, 0x40, 0x20, 0x10, 0x08]
        state = setup_sprite_in_memory(fresh_state, 0x900, sprite)

        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0x6108)  # V1 = 8
        state = execute(state, 0xA900)
        state = execute(state, 0xD013)

        assert state.display[10, 8] == 1
        assert state.display[11, 9] == 1
        assert state.display[12, 10] == 1
        assert state.display[13, 11] == 0

    def test_vf_cleared_without_collision(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0xB00, [0x80])

        state = execute(state, 0x6F01)  # VF = 1
        state = execute(state, 0x6005)
        state = execute(state, 0x6105)
        state = execute(state, 0xAB00)
        state = execute(state, 0xD011)

        assert state.V[15] == 0


def test_clear_screen_after_draw(fresh_state):
    state = execute(fresh_state, 0xD005)  # glyph "0" at (0, 0)
    assert jnp.sum(state.display) > 0

    state = execute(state, 0x00E0)
    assert jnp.sum(state.display) == 0
