"""CHIP-8 virtual machine package."""

from chipvm.state import EmulatorState, Quirks, create_state
from chipvm.emulator import execute, fetch, step, tick_timers, load_rom
from chipvm.decode import DecodedInstruction, decode, decode_bytes
from chipvm.errors import (
    EmulatorError, UnknownOpcodeError, StackUnderflowError, StackOverflowError,
    RomTooLargeError, MachineHaltedError,
)
from chipvm.timers import Clock, TimerSubsystem
from chipvm.machine import Machine
from chipvm.constants import *

__all__ = [
    "EmulatorState",
    "Quirks",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "load_rom",
    "DecodedInstruction",
    "decode",
    "decode_bytes",
    "EmulatorError",
    "UnknownOpcodeError",
    "StackUnderflowError",
    "StackOverflowError",
    "RomTooLargeError",
    "MachineHaltedError",
    "Clock",
    "TimerSubsystem",
    "Machine",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
