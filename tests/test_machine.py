"""Tests for the host-facing machine."""

import pytest
from chipvm import Machine, Quirks, UnknownOpcodeError, MachineHaltedError, StackUnderflowError
from chipvm.interfaces import RecordingAudio, RecordingDisplay, VirtualKeypad
from chipvm.logging import EmulatorLogger
from conftest import assemble

# 0x200: V0 = 0; loop: V0 += 1; jump loop
COUNTER = assemble(0x6000, 0x7001, 0x1202)


@pytest.fixture
def quiet_logger():
    return EmulatorLogger(log_level="CRITICAL")


def make_machine(rom, logger, **kwargs):
    return Machine(rom, logger=logger, **kwargs)


class TestStepping:
    """Single-step execution."""

    def test_step_returns_decoded_instruction(self, quiet_logger):
        machine = make_machine(COUNTER, quiet_logger)

        instruction = machine.step()

        assert instruction.hex == "6000"
        assert int(machine.state.pc) == 0x202
        assert machine.steps == 1

    def test_counter_program(self, quiet_logger):
        machine = make_machine(COUNTER, quiet_logger)
        for _ in range(1 + 2 * 5):
            machine.step()

        assert int(machine.state.V[0]) == 5

    def test_subroutine_returns_after_call(self, quiet_logger):
        rom = assemble(
            0x2206,  # 0x200: call 0x206
            0x6101,  # 0x202: V1 = 1
            0x1204,  # 0x204: spin
            0x6202,  # 0x206: V2 = 2
            0x00EE,  # 0x208: return
        )
        machine = make_machine(rom, quiet_logger)
        for _ in range(4):
            machine.step()

        assert int(machine.state.pc) == 0x204
        assert int(machine.state.V[1]) == 1
        assert int(machine.state.V[2]) == 2


class TestUpdate:
    """Clock-driven execution."""

    def test_one_second_in_millisecond_updates(self, quiet_logger):
        machine = make_machine(COUNTER, quiet_logger, instruction_frequency=100)
        executed = sum(machine.update(0.001) for _ in range(1000))

        assert 99 <= executed <= 101
        assert machine.steps == executed

    def test_delay_timer_counts_down_at_60hz(self, quiet_logger):
        rom = assemble(0x603C, 0xF015, 0x1204)  # delay = 60, spin
        machine = make_machine(rom, quiet_logger, instruction_frequency=60)
        machine.update(2 / 60)
        assert int(machine.state.delay_timer) == 60

        machine.update(0.5)
        assert 29 <= int(machine.state.delay_timer) <= 31

        machine.update(1.0)
        assert int(machine.state.delay_timer) == 0

    def test_run_for(self, quiet_logger):
        machine = make_machine(COUNTER, quiet_logger, instruction_frequency=120)
        executed = machine.run_for(0.5, frame_rate=60)
        assert executed == 60


class TestKeypad:
    """Key polling through the provider."""

    def test_key_wait_stalls_then_stores_key(self, quiet_logger):
        keypad = VirtualKeypad()
        machine = make_machine(assemble(0xF50A, 0x1202), quiet_logger, keypad=keypad)

        for _ in range(3):
            machine.step()
            assert int(machine.state.pc) == 0x200

        keypad.press(0xB)
        machine.step()

        assert int(machine.state.V[5]) == 0xB
        assert int(machine.state.pc) == 0x202

    def test_key_already_held_does_not_release_wait(self, quiet_logger):
        keypad = VirtualKeypad()
        keypad.press(3)
        keypad.newly_pressed(3)  # edge consumed by an earlier poll
        machine = make_machine(assemble(0xF50A), quiet_logger, keypad=keypad)

        machine.step()

        assert int(machine.state.pc) == 0x200

    def test_skip_if_key_uses_held_state(self, quiet_logger):
        keypad = VirtualKeypad()
        rom = assemble(0x6004, 0xE09E, 0x6101, 0x6202)
        machine = make_machine(rom, quiet_logger, keypad=keypad)
        keypad.press(4)

        for _ in range(3):
            machine.step()

        assert int(machine.state.V[1]) == 0
        assert int(machine.state.V[2]) == 2

    def test_virtual_keypad_rejects_bad_keys(self):
        with pytest.raises(ValueError):
            VirtualKeypad().press(16)


class TestSinks:
    """Display and audio notifications."""

    def test_draw_reports_changed_pixels(self, quiet_logger):
        display = RecordingDisplay()
        rom = assemble(0x6002, 0xF029, 0x6A0A, 0x6B03, 0xDAB5)  # glyph "2" at (10, 3)
        machine = make_machine(rom, quiet_logger, display=display)
        for _ in range(5):
            machine.step()

        lit = {(int(x), int(y)) for x, y in zip(*machine.framebuffer.nonzero())}
        assert display.lit == lit
        assert (10, 3) in lit
        assert all(on for _, _, on in display.pixels)

    def test_clear_screen_notifies_sink(self, quiet_logger):
        display = RecordingDisplay()
        machine = make_machine(assemble(0x00E0), quiet_logger, display=display)
        clears = display.clears

        machine.step()

        assert display.clears == clears + 1

    def test_sound_instruction_plays_tone(self, quiet_logger):
        audio = RecordingAudio()
        machine = make_machine(assemble(0x631E, 0xF318), quiet_logger, audio=audio)
        machine.step()
        machine.step()

        assert audio.tones == [pytest.approx(0.5)]
        assert int(machine.state.sound_timer) == 30


class TestErrors:
    """Fatal conditions halt the machine."""

    def test_unknown_opcode_halts(self, quiet_logger):
        machine = make_machine(assemble(0x6001, 0x5121), quiet_logger)
        machine.step()

        with pytest.raises(UnknownOpcodeError) as excinfo:
            machine.step()

        assert excinfo.value.opcode == "5121"
        assert excinfo.value.address == 0x202
        assert machine.halted

        with pytest.raises(MachineHaltedError):
            machine.step()
        with pytest.raises(MachineHaltedError):
            machine.update(1.0)

    def test_stack_underflow_halts(self, quiet_logger):
        machine = make_machine(assemble(0x00EE), quiet_logger)

        with pytest.raises(StackUnderflowError):
            machine.step()
        assert machine.halted

    def test_reset_recovers(self, quiet_logger):
        machine = make_machine(assemble(0x00EE), quiet_logger)
        with pytest.raises(StackUnderflowError):
            machine.step()

        machine.reset(COUNTER)

        assert not machine.halted
        assert machine.step().hex == "6000"

    def test_reset_clears_display_sink(self, quiet_logger):
        display = RecordingDisplay()
        rom = assemble(0xF029, 0xD005)  # glyph "0" at (0, 0)
        machine = make_machine(rom, quiet_logger, display=display)
        machine.step()
        machine.step()
        assert display.lit
        clears = display.clears

        machine.reset()

        assert display.clears == clears + 1
        assert display.lit == set()
        assert not machine.framebuffer.any()


class TestIsolation:
    """Machines share no state."""

    def test_independent_instances(self, quiet_logger):
        first = make_machine(COUNTER, quiet_logger, quirks=Quirks(legacy_shift=False))
        second = make_machine(COUNTER, quiet_logger)
        for _ in range(5):
            first.step()

        assert int(second.state.pc) == 0x200
        assert int(first.state.V[0]) == 2
        assert first.quirks != second.quirks
