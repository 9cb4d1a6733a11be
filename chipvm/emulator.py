"""Main CHIP-8 emulator execution engine."""

import jax.numpy as jnp
from chipvm.state import EmulatorState, write_memory
from chipvm.decode import DecodedInstruction, decode
from chipvm.constants import ADDRESS_MASK, PROGRAM_START
from chipvm.instructions.system import execute_system_instruction, unknown_opcode
from chipvm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chipvm.instructions.alu import execute_alu_operation, lookup_alu_operation
from chipvm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipvm.instructions.display import execute_display
from chipvm.instructions.misc import execute_misc_instruction


def execute_alu_family(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    operation = lookup_alu_operation(state, instruction.n)
    if operation is None:
        return unknown_opcode(state, instruction)
    return execute_alu_operation(state, instruction, operation)


INSTRUCTION_FAMILIES = (
    execute_system_instruction,           # 0
    execute_jump,                         # 1
    execute_call,                         # 2
    execute_skip_if_equal_immediate,      # 3
    execute_skip_if_not_equal_immediate,  # 4
    execute_skip_if_equal_register,       # 5
    execute_set,                          # 6
    execute_add,                          # 7
    execute_alu_family,                   # 8
    execute_skip_if_not_equal_register,   # 9
    execute_set_index,                    # A
    execute_jump_with_offset,             # B
    execute_random,                       # C
    execute_display,                      # D
    execute_skip_if_key,                  # E
    execute_misc_instruction,             # F
)


def execute(state: EmulatorState, instruction: int | DecodedInstruction) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    ``state.pc`` must already point past the instruction (see :func:`fetch`).

    Raises:
        UnknownOpcodeError: the word matches no instruction
        StackUnderflowError: 00EE with an empty stack
        StackOverflowError: 2NNN with a full stack
    """
    if not isinstance(instruction, DecodedInstruction):
        instruction = decode(instruction)
    return INSTRUCTION_FAMILIES[instruction.opcode](state, instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory."""
    address = jnp.astype(state.pc, jnp.int32) & ADDRESS_MASK
    instruction = _pack_u16(state.memory[address], state.memory[(address + 1) & ADDRESS_MASK])
    return state.replace(pc=jnp.astype((state.pc + 2) & ADDRESS_MASK, jnp.uint16)), instruction


def step(state: EmulatorState) -> tuple[EmulatorState, DecodedInstruction]:
    """Fetch, decode and execute one instruction."""
    state, instruction = fetch(state)
    decoded = decode(int(instruction))
    return execute(state, decoded), decoded


def tick_timers(state: EmulatorState, count: int = 1) -> EmulatorState:
    """Decrement delay and sound timers ``count`` times, clamped at zero."""
    if count <= 0:
        return state
    return state.replace(
        delay_timer=jnp.astype(jnp.maximum(jnp.astype(state.delay_timer, jnp.int32) - count, 0), jnp.uint8),
        sound_timer=jnp.astype(jnp.maximum(jnp.astype(state.sound_timer, jnp.int32) - count, 0), jnp.uint8),
    )


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return write_memory(state, PROGRAM_START, rom_data)
