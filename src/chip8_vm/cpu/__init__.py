"""
CHIP-8 CPU Package
==================

Architecture definitions shared by the emulator and the disassembler,
so the instruction format and memory map are defined in exactly one place.

Modules:
    isa: Memory map constants and the instruction decoder.

Usage:
    from chip8_vm.cpu import decode, PROGRAM_START

    ins = decode(0xA1, 0x23)
    assert ins.op == 0xA and ins.nnn == 0x123
"""

# =============================================================================
# Public API Exports
# =============================================================================

from chip8_vm.cpu.isa import (
    # Memory map
    MEMORY_SIZE,
    FONT_START,
    PROGRAM_START,
    MAX_PROGRAM_SIZE,
    ADDRESS_MASK,
    INSTRUCTION_SIZE,
    # Decoder
    Instruction,
    decode,
    decode_word,
)

__all__ = [
    "MEMORY_SIZE",
    "FONT_START",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "ADDRESS_MASK",
    "INSTRUCTION_SIZE",
    "Instruction",
    "decode",
    "decode_word",
]
