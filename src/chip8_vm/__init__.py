"""
CHIP-8 VM - Interpreter and Tools for the CHIP-8 Virtual Machine
================================================================

CHIP-8 is a small interpreted language from the late 1970s: 35 two-byte
instructions, 4 KiB of memory, a 64x32 monochrome display and a 16-key
hexadecimal keypad. This package runs CHIP-8 program images and lists
them as assembly.

Main Components
---------------
- **emulator**: The virtual machine (chip8run)
    Memory, CPU, framebuffer, keypad and a wall-clock cycle scheduler,
    plus a pygame host window

- **disassembler**: Program listings (chip8dis)
    Converts program images to Cowgod-style mnemonics

- **cpu**: Shared architecture definitions
    Memory map constants and the instruction decoder

Quick Start
-----------
Run a program headless:
    >>> from chip8_vm import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(rom_path=Path("maze.ch8")))
    >>> emu.run(5_000)
    5000

List a program:
    >>> from chip8_vm import Chip8Disassembler
    >>> for instr in Chip8Disassembler().disassemble(rom_bytes):
    ...     print(instr)

Or use the command-line tools:
    $ chip8run pong.ch8 --scale 10
    $ chip8dis pong.ch8 -o pong.lst

Reference Documentation
-----------------------
- Cowgod's CHIP-8 Technical Reference: http://devernay.free.fr/hacks/chip8/C8TECH10.HTM

Version History
---------------
1.0.0 - Initial release with interpreter, pygame host and disassembler
"""

__version__ = "1.0.0"
__author__ = "CHIP-8 VM Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from chip8_vm.errors import (
    Chip8Error,
    MachineError,
    DecodeError,
    StackOverflowError,
    StackUnderflowError,
    MachineHaltedError,
    RomLoadError,
    HostError,
)
from chip8_vm.cpu import Instruction, decode
from chip8_vm.disassembler import Chip8Disassembler, DisassembledInstruction
from chip8_vm.emulator import Emulator, EmulatorConfig, KeyboardLayout

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Errors
    "Chip8Error",
    "MachineError",
    "DecodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "MachineHaltedError",
    "RomLoadError",
    "HostError",
    # Core
    "Instruction",
    "decode",
    "Chip8Disassembler",
    "DisassembledInstruction",
    "Emulator",
    "EmulatorConfig",
    "KeyboardLayout",
]
