"""CHIP-8 control flow instructions."""

import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction
from chipvm.constants import ADDRESS_MASK
from chipvm.stack import push
from chipvm.instructions.system import instruction_address, unknown_opcode


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc, instruction_address(state)))
    return execute_jump(state, instruction)


def skip_next(state: EmulatorState) -> EmulatorState:
    return state.replace(pc=jnp.astype((state.pc + 2) & ADDRESS_MASK, jnp.uint16))


def make_skip_instruction(condition_fn, requires_zero_n=False):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        if requires_zero_n and instruction.n != 0:
            return unknown_opcode(state, instruction)
        if condition_fn(state, instruction):
            return skip_next(state)
        return state
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y],
    requires_zero_n=True,
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y],
    requires_zero_n=True,
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = (instruction.nnn + jnp.astype(state.V[0], jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def _key_held(state: EmulatorState, instruction: DecodedInstruction):
    key_index = state.V[instruction.x] & 0xF
    return state.keypad[key_index]


# Level-triggered: every tick that runs while the key is held sees it.
execute_skip_if_key_pressed = make_skip_instruction(_key_held)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~_key_held(state, inst)
)

KEY_INSTRUCTIONS = {
    0x9E: execute_skip_if_key_pressed,
    0xA1: execute_skip_if_key_not_pressed,
}


def execute_skip_if_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    handler = KEY_INSTRUCTIONS.get(instruction.nn, unknown_opcode)
    return handler(state, instruction)
