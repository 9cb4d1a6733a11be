"""Fixed-timestep clocks that turn host frame deltas into discrete ticks.

Each clock keeps the part of the elapsed time that did not add up to a full
tick and carries it into the next update. A host that reports 7 ms, then
5 ms, against a 3 ms tick runs 2 ticks and then 2 ticks again (5 ms + 1 ms
carried), so the long-run average matches the configured frequency however
irregular the host's update intervals are.
"""

from chipvm.constants import INSTRUCTION_FREQUENCY, TIMER_FREQUENCY


class Clock:
    """Converts elapsed seconds into whole ticks at a fixed frequency."""

    def __init__(self, frequency: float):
        if frequency <= 0:
            raise ValueError(f"Clock frequency must be positive, got {frequency}")
        self.frequency = float(frequency)
        self.interval = 1.0 / self.frequency
        self.remainder = 0.0

    def advance(self, delta: float) -> int:
        """Add ``delta`` seconds and return the number of ticks now due."""
        if delta < 0:
            raise ValueError(f"Elapsed time cannot be negative, got {delta}")
        elapsed = self.remainder + delta
        ticks = int(elapsed // self.interval)
        self.remainder = elapsed - ticks * self.interval
        return ticks

    def reset(self):
        self.remainder = 0.0

    def __repr__(self):
        return f"Clock(frequency={self.frequency:g}, remainder={self.remainder:.6f})"


class TimerSubsystem:
    """Instruction clock plus the fixed 60 Hz delay/sound timer clock."""

    def __init__(
        self,
        instruction_frequency: float = INSTRUCTION_FREQUENCY,
        timer_frequency: float = TIMER_FREQUENCY,
    ):
        self.instruction_clock = Clock(instruction_frequency)
        self.timer_clock = Clock(timer_frequency)

    @property
    def instruction_frequency(self) -> float:
        return self.instruction_clock.frequency

    def advance(self, delta: float) -> tuple[int, int]:
        """Advance both clocks by ``delta`` seconds.

        Returns:
            Tuple of (instruction ticks due, timer decrements due)
        """
        return self.instruction_clock.advance(delta), self.timer_clock.advance(delta)

    def reset(self):
        self.instruction_clock.reset()
        self.timer_clock.reset()
