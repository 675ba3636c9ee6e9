"""
CHIP-8 Instruction Set Definitions
==================================

Shared definitions of the CHIP-8 architecture: the memory map constants
and the instruction decoder. Both the emulator (which executes
instructions) and the disassembler (which lists them) build on these.

Instruction Format
------------------
Every instruction is one 16-bit word stored big-endian (high byte first).
The decoder splits the word into four nibbles:

    op  x  y  n        nnn = x:y:n (12-bit address)
    F   E  D  C        kk  = y:n   (8-bit immediate)

`op` selects the instruction family; the other nibbles are reused as
register indexes, a 4-bit immediate, or combined into the 8-bit immediate
or 12-bit address depending on the family.

Copyright (c) 2025 CHIP-8 VM Contributors
"""

from dataclasses import dataclass


# =============================================================================
# Memory Map
# =============================================================================

MEMORY_SIZE = 0x1000
FONT_START = 0x000
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START

ADDRESS_MASK = 0xFFF
INSTRUCTION_SIZE = 2


# =============================================================================
# Decoder
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    A decoded 16-bit instruction word.

    Attributes:
        op: Top nibble, selects the instruction family
        x: Second nibble (usually a register index)
        y: Third nibble (usually a register index)
        n: Low nibble (4-bit immediate)
    """
    op: int
    x: int
    y: int
    n: int

    @property
    def nnn(self) -> int:
        """12-bit address operand."""
        return (self.x << 8) | (self.y << 4) | self.n

    @property
    def kk(self) -> int:
        """8-bit immediate operand (low byte)."""
        return (self.y << 4) | self.n

    @property
    def word(self) -> int:
        """The raw instruction word."""
        return (self.op << 12) | self.nnn

    def __str__(self) -> str:
        return f"{self.word:04X}"


def decode(high: int, low: int) -> Instruction:
    """
    Split an instruction into its four nibbles.

    Args:
        high: Byte at PC
        low: Byte at PC + 1
    """
    return Instruction(
        op=(high >> 4) & 0xF,
        x=high & 0xF,
        y=(low >> 4) & 0xF,
        n=low & 0xF,
    )


def decode_word(word: int) -> Instruction:
    """Decode an instruction given as a single 16-bit integer."""
    return decode((word >> 8) & 0xFF, word & 0xFF)
