"""
CHIP-8 VM Error Hierarchy
=========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Chip8Error, allowing callers to catch every
VM-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Chip8Error (base)
├── MachineError (fatal interpreter faults)
│   ├── DecodeError - instruction word matches no opcode
│   ├── StackOverflowError - call depth exceeds the stack capacity
│   ├── StackUnderflowError - return executed with an empty stack
│   └── MachineHaltedError - attempt to execute on a halted machine
├── RomLoadError - program image missing, unreadable or empty
└── HostError - window or renderer could not be created

Machine errors carry the program counter of the faulting instruction so
messages point at the exact location in the program image:
    decode error at $0234: unknown instruction $5AB1

Copyright (c) 2025 CHIP-8 VM Contributors
"""

from pathlib import Path
from typing import Optional, Union


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all CHIP-8 VM errors.

        try:
            emulator.run(10_000)
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Machine Exceptions
# =============================================================================

class MachineError(Chip8Error):
    """
    Base exception for faults raised while executing instructions.

    The machine is always halted before one of these is raised, so the
    caller can inspect the final state.

    Attributes:
        message: The error description
        pc: Address of the faulting instruction (optional)
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        self.message = message
        self.pc = pc
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.pc is not None:
            return f"{self.message} at ${self.pc:04X}"
        return self.message


class DecodeError(MachineError):
    """
    Instruction word matches no defined opcode.

    Attributes:
        word: The raw 16-bit instruction word
    """

    def __init__(self, word: int, pc: Optional[int] = None):
        self.word = word
        super().__init__(f"unknown instruction ${word:04X}", pc)

    @property
    def raw_bytes(self) -> bytes:
        """The two instruction bytes as they appear in memory."""
        return bytes([(self.word >> 8) & 0xFF, self.word & 0xFF])


class StackOverflowError(MachineError):
    """
    Subroutine call with a full stack.

    Attributes:
        depth: Stack depth when the call was attempted
    """

    def __init__(self, depth: int, pc: Optional[int] = None):
        self.depth = depth
        super().__init__(f"stack overflow (depth {depth})", pc)


class StackUnderflowError(MachineError):
    """Return executed with no matching call."""

    def __init__(self, pc: Optional[int] = None):
        self.depth = 0
        super().__init__("stack underflow (depth 0)", pc)


class MachineHaltedError(MachineError):
    """Execution requested on a machine that has already halted."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__("machine is halted", pc)


# =============================================================================
# I/O and Host Exceptions
# =============================================================================

class RomLoadError(Chip8Error):
    """
    Program image could not be loaded.

    Raised before the machine starts; a machine never runs with a
    partially loaded or absent program.

    Attributes:
        path: The program image path
        reason: Short description of the failure
    """

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot load ROM '{self.path}': {reason}")


class HostError(Chip8Error):
    """Failure in the host window, renderer or input layer."""
    pass
