"""Tests for miscellaneous instructions (Fxxx)."""

import pytest
from chipvm import execute, create_state, Quirks, UnknownOpcodeError, FONT_START


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Test timer set and get operations."""
        state = execute(fresh_state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.delay_timer == 48

        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48


class TestBCD:
    """Test BCD conversion."""

    def test_misc_bcd_conversion(self, fresh_state):
        state = execute(fresh_state, 0x609D)  # V0 = 157
        state = execute(state, 0xA300)
        state = execute(state, 0xF033)

        assert state.memory[0x300] == 1
        assert state.memory[0x301] == 5
        assert state.memory[0x302] == 7
        assert state.I == 0x300

    @pytest.mark.parametrize("value,digits", [(0, (0, 0, 0)), (9, (0, 0, 9)), (40, (0, 4, 0)), (255, (2, 5, 5))])
    def test_bcd_edge_cases(self, fresh_state, value, digits):
        state = execute(fresh_state, 0x6000 | value)
        state = execute(state, 0xA400)
        state = execute(state, 0xF033)

        assert tuple(int(d) for d in state.memory[0x400:0x403]) == digits


class TestFont:
    """Test font character addressing."""

    def test_misc_font_character(self, fresh_state):
        state = execute(fresh_state, 0x600A)  # V0 = 0xA
        state = execute(state, 0xF029)

        assert state.I == FONT_START + 0xA * 5

    def test_font_all_characters(self, fresh_state):
        state = fresh_state
        for digit in range(16):
            state = execute(state, 0x6000 | digit)
            state = execute(state, 0xF029)
            assert state.I == digit * 5, f"Font address wrong for digit {digit:X}"


class TestMemoryOperations:
    """Test store/load register operations."""

    def test_store_load_index_unchanged(self, fresh_state):
        state = execute(fresh_state, 0x6001)
        state = execute(state, 0x6102)
        state = execute(state, 0x6203)
        state = execute(state, 0x6399)  # beyond X, must not be stored
        state = execute(state, 0xA300)

        state = execute(state, 0xF255)  # Store V0-V2
        assert state.I == 0x300
        assert [int(b) for b in state.memory[0x300:0x304]] == [1, 2, 3, 0]

        state = execute(state, 0x6000)
        state = execute(state, 0x6100)
        state = execute(state, 0x6200)

        state = execute(state, 0xF165)  # Load V0-V1 only
        assert state.V[0] == 1
        assert state.V[1] == 2
        assert state.V[2] == 0
        assert state.I == 0x300

    def test_store_load_increment_index(self):
        state = create_state(quirks=Quirks(increment_index=True))
        state = execute(state, 0x6001)
        state = execute(state, 0x6102)
        state = execute(state, 0xA400)

        state = execute(state, 0xF155)
        assert state.I == 0x400 + 2

        state = execute(state, 0xA400)
        state = execute(state, 0x6000)
        state = execute(state, 0x6100)
        state = execute(state, 0xF165)
        assert state.V[0] == 1
        assert state.V[1] == 2
        assert state.I == 0x400 + 2

    def test_store_all_registers(self, fresh_state):
        state = fresh_state.replace(V=fresh_state.V.at[15].set(0xEE))
        state = execute(state, 0xA500)
        state = execute(state, 0xFF55)
        assert state.memory[0x50F] == 0xEE


class TestKeyWait:
    """FX0A blocks until a key goes down."""

    def test_wait_for_key_blocking(self, fresh_state):
        initial_pc = fresh_state.pc

        state = execute(fresh_state, 0xF00A)

        assert state.pc == initial_pc - 2

    def test_held_key_does_not_release_wait(self, fresh_state):
        """Only a newly pressed key counts."""
        state = fresh_state.replace(keypad=fresh_state.keypad.at[7].set(True))
        initial_pc = state.pc

        state = execute(state, 0xF00A)

        assert state.pc == initial_pc - 2

    def test_wait_for_key_press(self, fresh_state):
        state = fresh_state.replace(
            keypad=fresh_state.keypad.at[7].set(True),
            key_pressed=fresh_state.key_pressed.at[7].set(True),
        )
        initial_pc = state.pc

        state = execute(state, 0xF30A)

        assert state.V[3] == 7
        assert state.pc == initial_pc


class TestAddToIndex:
    """FX1E."""

    def test_add_to_index(self, fresh_state):
        state = execute(fresh_state, 0x6010)
        state = execute(state, 0xA300)
        state = execute(state, 0xF01E)

        assert state.I == 0x310
        assert state.V[15] == 0

    def test_add_beyond_address_space_is_not_overflow(self, fresh_state):
        """Crossing 0xFFF does not flag; only the 16-bit register width does."""
        state = execute(fresh_state, 0x60FF)
        state = execute(state, 0xAF80)
        state = execute(state, 0xF01E)

        assert state.I == 0x107F
        assert state.V[15] == 0

    def test_add_overflows_register(self, fresh_state):
        state = fresh_state.replace(I=fresh_state.I + 0xFFF0)
        state = execute(state, 0x6020)
        state = execute(state, 0xF01E)

        assert state.I == 0x0010
        assert state.V[15] == 1


@pytest.mark.parametrize("instruction", [0xF000, 0xF0FF, 0xF019, 0xF175])
def test_unknown_misc_instruction(fresh_state, instruction):
    with pytest.raises(UnknownOpcodeError):
        execute(fresh_state, instruction)
