"""
CHIP-8 Disassembler Package
===========================

Converts CHIP-8 program images back into readable assembly listings.
Used by the chip8dis command and by the emulator's load-time logging.
"""

from chip8_vm.disassembler.chip8 import (
    Chip8Disassembler,
    DisassembledInstruction,
    format_instruction,
)

__all__ = [
    "Chip8Disassembler",
    "DisassembledInstruction",
    "format_instruction",
]
