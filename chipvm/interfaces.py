"""Host-side collaborators the machine talks to.

The interpreter never reads a keyboard, draws a window or plays audio
itself. It polls a :class:`KeyStateProvider` once per step, reports changed
pixels to a :class:`DisplaySink` and asks an :class:`AudioSink` for tones.
The headless implementations here back tests and batch runs; the pygame
ones live in :mod:`chipvm.frontend`.
"""

from typing import Protocol

from chipvm.constants import NUM_KEYS


class KeyStateProvider(Protocol):
    """Hexadecimal keypad (keys 0x0-0xF)."""

    def is_held(self, key: int) -> bool:
        """Whether ``key`` is currently down."""
        ...

    def newly_pressed(self, key: int) -> bool:
        """Whether ``key`` went down since the previous poll."""
        ...


class DisplaySink(Protocol):
    """Receives every pixel change of the monochrome framebuffer."""

    def set_pixel(self, x: int, y: int, on: bool) -> None:
        ...

    def clear(self) -> None:
        ...


class AudioSink(Protocol):
    """Plays fire-and-forget tones."""

    def play_tone(self, duration: float) -> None:
        ...


class VirtualKeypad:
    """In-memory keypad driven by :meth:`press` and :meth:`release`.

    A press is reported by :meth:`newly_pressed` exactly once; the edge is
    consumed by that poll even if the key is still held.
    """

    def __init__(self):
        self._held = set()
        self._edges = set()

    def press(self, key: int):
        key = self._check(key)
        if key not in self._held:
            self._edges.add(key)
        self._held.add(key)

    def release(self, key: int):
        key = self._check(key)
        self._held.discard(key)
        self._edges.discard(key)

    def release_all(self):
        self._held.clear()
        self._edges.clear()

    def is_held(self, key: int) -> bool:
        return key in self._held

    def newly_pressed(self, key: int) -> bool:
        if key in self._edges:
            self._edges.discard(key)
            return True
        return False

    @staticmethod
    def _check(key: int) -> int:
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be in [0, {NUM_KEYS - 1}], got {key}")
        return key


class NullDisplay:
    """Discards pixel updates."""

    def set_pixel(self, x: int, y: int, on: bool) -> None:
        pass

    def clear(self) -> None:
        pass


class RecordingDisplay:
    """Keeps a log of pixel updates and clears, plus the resulting frame."""

    def __init__(self):
        self.pixels = []
        self.clears = 0
        self.lit = set()

    def set_pixel(self, x: int, y: int, on: bool) -> None:
        self.pixels.append((x, y, on))
        if on:
            self.lit.add((x, y))
        else:
            self.lit.discard((x, y))

    def clear(self) -> None:
        self.clears += 1
        self.lit.clear()


class NullAudio:
    def play_tone(self, duration: float) -> None:
        pass


class RecordingAudio:
    def __init__(self):
        self.tones = []

    def play_tone(self, duration: float) -> None:
        self.tones.append(duration)
