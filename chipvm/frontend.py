"""Pygame host for the CHIP-8 machine: window, keyboard and beeper."""

import time

import numpy as np
import pygame

from chipvm.constants import INSTRUCTION_FREQUENCY, NUM_KEYS, SCREEN_HEIGHT, SCREEN_WIDTH, STACK_SIZE
from chipvm.errors import EmulatorError
from chipvm.logging import EmulatorLogger
from chipvm.machine import Machine
from chipvm.rendering import lookup_color_scheme, display_to_rgb

# COSMAC VIP keypad laid over the left side of a QWERTY keyboard
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

SAMPLE_RATE = 44100
TONE_FREQUENCY = 440


class PygameKeypad:
    """Key-state provider fed from pygame KEYDOWN/KEYUP events."""

    def __init__(self):
        self.held = [False] * NUM_KEYS
        self.edges = [False] * NUM_KEYS

    def handle_event(self, event) -> bool:
        """Update key state from an event; returns True if it was a keypad key."""
        if event.type not in (pygame.KEYDOWN, pygame.KEYUP) or event.key not in KEY_MAP:
            return False
        key = KEY_MAP[event.key]
        if event.type == pygame.KEYDOWN:
            if not self.held[key]:
                self.edges[key] = True
            self.held[key] = True
        else:
            self.held[key] = False
        return True

    def is_held(self, key: int) -> bool:
        return self.held[key]

    def newly_pressed(self, key: int) -> bool:
        pressed, self.edges[key] = self.edges[key], False
        return pressed


class PygameScreen:
    """Display sink that paints scaled pixels onto a pygame surface."""

    def __init__(self, surface, scale: int = 8, color_scheme: str = "classic"):
        self.surface = surface
        self.scale = scale
        self.on_color, self.off_color = lookup_color_scheme(color_scheme)

    def set_pixel(self, x: int, y: int, on: bool) -> None:
        rect = pygame.Rect(x * self.scale, y * self.scale, self.scale, self.scale)
        self.surface.fill(self.on_color if on else self.off_color, rect)

    def clear(self) -> None:
        self.surface.fill(self.off_color)

    def redraw(self, framebuffer):
        """Repaint the whole surface from a (width, height) framebuffer."""
        frame = display_to_rgb(framebuffer, self.scale, self.on_color, self.off_color)
        pygame.surfarray.blit_array(self.surface, frame.transpose(1, 0, 2))


class PygameBeeper:
    """Audio sink playing a square wave for the requested duration."""

    def __init__(self, volume: float = 0.2):
        samples = np.arange(SAMPLE_RATE // TONE_FREQUENCY)
        wave = np.where(samples < len(samples) // 2, 1, -1) * int(32767 * volume)
        channels = pygame.mixer.get_init()[2]
        wave = np.repeat(wave[:, None], channels, axis=1) if channels > 1 else wave
        self.sound = pygame.sndarray.make_sound(wave.astype(np.int16))

    def play_tone(self, duration: float) -> None:
        if duration > 0:
            self.sound.play(loops=-1, maxtime=int(duration * 1000))


def build_machine(
    rom: bytes,
    surface,
    audio,
    quirks=None,
    instruction_frequency: float = INSTRUCTION_FREQUENCY,
    stack_size: int = STACK_SIZE,
    seed: int = 0,
    scale: int = 8,
    color_scheme: str = "classic",
    logger: EmulatorLogger = None,
):
    """Wire a Machine to pygame input and a surface.

    Returns:
        Tuple of (machine, keypad, screen)
    """
    keypad = PygameKeypad()
    screen = PygameScreen(surface, scale, color_scheme)
    machine_kwargs = {"quirks": quirks} if quirks is not None else {}
    machine = Machine(
        rom,
        instruction_frequency=instruction_frequency,
        stack_size=stack_size,
        seed=seed,
        keypad=keypad,
        display=screen,
        audio=audio,
        logger=logger,
        **machine_kwargs,
    )
    return machine, keypad, screen


def run_emulator(
    rom_filename: str,
    quirks=None,
    instruction_frequency: float = INSTRUCTION_FREQUENCY,
    stack_size: int = STACK_SIZE,
    seed: int = 0,
    scale: int = 8,
    color_scheme: str = "classic",
    logger: EmulatorLogger = None,
):
    """Windowed host loop: feed wall-clock deltas into Machine.update."""
    logger = logger or EmulatorLogger()

    with open(rom_filename, 'rb') as f:
        rom = f.read()

    pygame.init()
    pygame.mixer.init(frequency=SAMPLE_RATE, size=-16)
    surface = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption(f"chipvm - {rom_filename}")
    clock = pygame.time.Clock()

    machine, keypad, screen = build_machine(
        rom,
        surface,
        PygameBeeper(),
        quirks=quirks,
        instruction_frequency=instruction_frequency,
        stack_size=stack_size,
        seed=seed,
        scale=scale,
        color_scheme=color_scheme,
        logger=logger,
    )
    logger.info(f"Loaded {rom_filename} ({len(rom)} bytes)")
    logger.info("Controls: ESC=Quit, P=Pause, F5=Reset")

    running = True
    paused = False
    last_time = time.perf_counter()

    while running:
        clock.tick(60)
        now = time.perf_counter()
        delta, last_time = now - last_time, now

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif keypad.handle_event(event):
                continue
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                    logger.info("Paused" if paused else "Resumed")
                elif event.key == pygame.K_F5:
                    machine.reset()
                    screen.redraw(machine.framebuffer)

        if not paused and not machine.halted:
            try:
                machine.update(delta)
            except EmulatorError as e:
                logger.error(f"Stopped: {e}")

        pygame.display.flip()

    pygame.quit()
    return machine
