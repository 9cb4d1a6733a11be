"""Host-facing CHIP-8 machine.

:class:`Machine` owns one :class:`~chipvm.state.EmulatorState` and wires it
to the host: it polls the keypad, advances the instruction and timer clocks
from wall-clock deltas, and forwards screen and sound effects to the sinks.
Several machines can run side by side; nothing is shared between them.
"""

from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np

from chipvm.constants import INSTRUCTION_FREQUENCY, NUM_KEYS, STACK_SIZE, TIMER_FREQUENCY
from chipvm.decode import DecodedInstruction
from chipvm.emulator import step, tick_timers
from chipvm.errors import EmulatorError, MachineHaltedError
from chipvm.interfaces import AudioSink, DisplaySink, KeyStateProvider, NullAudio, NullDisplay, VirtualKeypad
from chipvm.logging import EmulatorLogger, progress_bar
from chipvm.state import EmulatorState, Quirks, create_state
from chipvm.timers import TimerSubsystem

CLEAR_SCREEN = 0x00E0


def _is_sound_instruction(instruction: DecodedInstruction) -> bool:
    return instruction.opcode == 0xF and instruction.nn == 0x18


class Machine:
    """A CHIP-8 virtual machine driven by host update calls.

    Example:
        >>> machine = Machine(rom_bytes, quirks=Quirks(legacy_shift=False))
        >>> machine.update(1 / 60)  # runs ~8 instructions at 500 Hz
    """

    def __init__(
        self,
        rom: bytes = b"",
        quirks: Quirks = Quirks(),
        instruction_frequency: float = INSTRUCTION_FREQUENCY,
        timer_frequency: float = TIMER_FREQUENCY,
        stack_size: int = STACK_SIZE,
        seed: int = 0,
        keypad: Optional[KeyStateProvider] = None,
        display: Optional[DisplaySink] = None,
        audio: Optional[AudioSink] = None,
        logger: Optional[EmulatorLogger] = None,
    ):
        """Initialize the machine and reset it with ``rom``.

        Args:
            rom: Program bytes loaded at 0x200
            quirks: Behavioural variants for shifts, sprite edges and FX55/FX65
            instruction_frequency: Instruction clock in Hz (default 500)
            timer_frequency: Delay/sound timer rate in Hz (default 60)
            stack_size: Maximum subroutine nesting depth
            seed: Seed for the CXNN random generator
            keypad: Key-state provider; a VirtualKeypad when omitted
            display: Display sink; pixel updates are dropped when omitted
            audio: Audio sink; tones are dropped when omitted
            logger: Logger for lifecycle events and traces
        """
        self.quirks = quirks
        self.stack_size = stack_size
        self.seed = seed
        self.keypad = keypad if keypad is not None else VirtualKeypad()
        self.display = display if display is not None else NullDisplay()
        self.audio = audio if audio is not None else NullAudio()
        self.logger = logger if logger is not None else EmulatorLogger(log_level="WARNING")
        self.timers = TimerSubsystem(instruction_frequency, timer_frequency)
        self.rom = bytes(rom)
        self.halted = False
        self.steps = 0
        self.state: EmulatorState = None
        self.reset()

    def reset(self, rom: Optional[bytes] = None):
        """Replace the whole machine state; optionally swap in a new ROM."""
        if rom is not None:
            self.rom = bytes(rom)
        self.state = create_state(
            jax.random.PRNGKey(self.seed),
            rom=self.rom,
            quirks=self.quirks,
            stack_size=self.stack_size,
        )
        self.timers.reset()
        self.display.clear()
        self.halted = False
        self.steps = 0
        self.logger.log_reset(len(self.rom), self.quirks)

    def poll_keys(self):
        """Snapshot held keys and newly pressed keys into the state."""
        held = [bool(self.keypad.is_held(key)) for key in range(NUM_KEYS)]
        pressed = [bool(self.keypad.newly_pressed(key)) for key in range(NUM_KEYS)]
        self.state = self.state.replace(
            keypad=jnp.array(held, dtype=jnp.bool_),
            key_pressed=jnp.array(pressed, dtype=jnp.bool_),
        )

    def step(self) -> DecodedInstruction:
        """Execute exactly one instruction.

        Returns:
            The decoded instruction that ran

        Raises:
            MachineHaltedError: a previous step failed and reset() was not called
            EmulatorError: the instruction itself failed; the machine halts
        """
        if self.halted:
            raise MachineHaltedError("Machine halted on a fatal error; call reset()")

        self.poll_keys()
        address = int(self.state.pc)
        before = self.state.display
        try:
            self.state, instruction = step(self.state)
        except EmulatorError as error:
            self.halted = True
            self.logger.log_fatal(error)
            raise

        self.steps += 1
        self.logger.log_instruction(address, instruction)
        self._notify_display(instruction, before)
        if _is_sound_instruction(instruction):
            self.audio.play_tone(int(self.state.V[instruction.x]) / TIMER_FREQUENCY)
        return instruction

    def _notify_display(self, instruction: DecodedInstruction, before: jnp.ndarray):
        if instruction.raw == CLEAR_SCREEN:
            self.display.clear()
            return
        if instruction.opcode != 0xD:
            return
        after = np.asarray(self.state.display)
        changed_x, changed_y = np.nonzero(np.asarray(before) ^ after)
        for x, y in zip(changed_x.tolist(), changed_y.tolist()):
            self.display.set_pixel(x, y, bool(after[x, y]))

    def update(self, delta: float) -> int:
        """Advance the machine by ``delta`` seconds of host time.

        Timers are decremented first, then every instruction tick that fell
        due is executed.

        Returns:
            Number of instructions executed
        """
        if self.halted:
            raise MachineHaltedError("Machine halted on a fatal error; call reset()")

        instruction_ticks, timer_ticks = self.timers.advance(delta)
        self.state = tick_timers(self.state, timer_ticks)
        for _ in range(instruction_ticks):
            self.step()
        return instruction_ticks

    def run_for(self, seconds: float, frame_rate: float = 60.0, progress: bool = False) -> int:
        """Run headless for ``seconds`` of emulated time at a fixed frame rate.

        Returns:
            Total number of instructions executed
        """
        frames = int(round(seconds * frame_rate))
        bar = progress_bar(frames, enabled=progress)
        executed = 0
        try:
            for _ in range(frames):
                executed += self.update(1.0 / frame_rate)
                if bar is not None:
                    bar.update(1)
        finally:
            if bar is not None:
                bar.close()
        return executed

    @property
    def framebuffer(self) -> np.ndarray:
        """Current display as a (width, height) boolean numpy array."""
        return np.asarray(self.state.display)

    def __repr__(self):
        return (
            f"Machine(pc=0x{int(self.state.pc):03X}, steps={self.steps}, "
            f"halted={self.halted}, quirks={self.quirks})"
        )
