"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction
from chipvm.errors import UnknownOpcodeError
from chipvm.stack import pop


def instruction_address(state: EmulatorState) -> int:
    """Address the current instruction was fetched from (PC is pre-advanced)."""
    return (int(state.pc) - 2) & 0xFFFF


def unknown_opcode(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Raise for a word that matches no instruction."""
    raise UnknownOpcodeError(instruction.hex, instruction_address(state))


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack, instruction_address(state))
    return state.replace(stack=stack, pc=jnp.astype(address, jnp.uint16))


SYSTEM_INSTRUCTIONS = {
    0x00E0: execute_clear_screen,
    0x00EE: execute_return,
}


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    handler = SYSTEM_INSTRUCTIONS.get(instruction.raw, unknown_opcode)
    return handler(state, instruction)
