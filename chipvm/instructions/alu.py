"""CHIP-8 ALU operations (8xxx)."""

from typing import Callable, Optional

import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction
from chipvm.constants import FLAG_REGISTER

# (vx, vy) -> (result, flag); a flag of None leaves VF untouched.
AluOperation = Callable[[jnp.ndarray, jnp.ndarray], tuple[jnp.ndarray, Optional[jnp.ndarray]]]


def _byte(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.uint8)


def _wide(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.int32)


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return _byte(vy), None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return _byte(_wide(vx) | _wide(vy)), None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return _byte(_wide(vx) & _wide(vy)), None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return _byte(_wide(vx) ^ _wide(vy)), None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    total = _wide(vx) + _wide(vy)
    return _byte(total & 0xFF), _byte(total > 0xFF)


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = 1 when VX > VY."""
    return _byte((_wide(vx) - _wide(vy)) & 0xFF), _byte(_wide(vx) > _wide(vy))


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when VY > VX."""
    return _byte((_wide(vy) - _wide(vx)) & 0xFF), _byte(_wide(vy) > _wide(vx))


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = shifted out bit."""
    value = _wide(vx)
    return _byte(value >> 1), _byte(value & 1)


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = shifted out bit."""
    value = _wide(vx)
    return _byte((value << 1) & 0xFF), _byte((value & 0x80) >> 7)


def _from_vy(operation: AluOperation) -> AluOperation:
    """Legacy shifts read their operand from VY."""
    def shifted(vx, vy):
        return operation(vy, vy)
    return shifted


ALU_OPERATIONS: dict[int, AluOperation] = {
    0x0: alu_set,
    0x1: alu_or,
    0x2: alu_and,
    0x3: alu_xor,
    0x4: alu_add,
    0x5: alu_sub_xy,
    0x6: alu_shift_right,
    0x7: alu_sub_yx,
    0xE: alu_shift_left,
}

SHIFT_OPERATIONS = (0x6, 0xE)


def lookup_alu_operation(state: EmulatorState, n: int) -> Optional[AluOperation]:
    """Resolve the 8XYN sub-operation, honouring the shift quirk."""
    operation = ALU_OPERATIONS.get(n)
    if operation is not None and n in SHIFT_OPERATIONS and state.quirks.legacy_shift:
        return _from_vy(operation)
    return operation


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction,
                          operation: AluOperation) -> EmulatorState:
    """Apply an ALU operation to VX/VY.

    The flag is written before the result, so an operation targeting VF keeps
    its result rather than the flag.
    """
    result, vf = operation(state.V[instruction.x], state.V[instruction.y])

    new_V = state.V
    if vf is not None:
        new_V = new_V.at[FLAG_REGISTER].set(vf)
    new_V = new_V.at[instruction.x].set(result)
    return state.replace(V=new_V)
