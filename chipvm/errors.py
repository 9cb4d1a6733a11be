"""Exceptions raised by the CHIP-8 virtual machine.

All of them derive from :class:`EmulatorError`, so a host loop can stop on
any fatal interpreter condition with a single ``except`` clause. Arithmetic
overflow is never an error: 8-bit registers wrap by definition.
"""


class EmulatorError(Exception):
    """Base class for every fatal interpreter condition."""


class UnknownOpcodeError(EmulatorError):
    """The fetched word matches no entry of the instruction table."""

    def __init__(self, opcode: str, address: int):
        self.opcode = opcode
        self.address = address
        super().__init__(f"Invalid opcode '{opcode}' at address 0x{address:03X}")


class StackUnderflowError(EmulatorError):
    """00EE executed with an empty call stack."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Return with empty call stack at address 0x{address:03X}")


class StackOverflowError(EmulatorError):
    """2NNN executed with the call stack already at its limit."""

    def __init__(self, address: int, limit: int):
        self.address = address
        self.limit = limit
        super().__init__(
            f"Call stack limit of {limit} exceeded at address 0x{address:03X}"
        )


class RomTooLargeError(EmulatorError):
    """ROM bytes do not fit between the program start and the end of memory."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(f"ROM of {size} bytes exceeds {capacity} bytes of program memory")


class MachineHaltedError(EmulatorError):
    """The machine stopped on a fatal error and must be reset before running."""
