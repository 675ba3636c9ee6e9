"""
CHIP-8 Disassembler
===================

Turns CHIP-8 program images into readable assembly using the mnemonics
from Cowgod's CHIP-8 technical reference.

Every instruction is two bytes, so disassembly is a straight walk over the
image. Words that do not decode to an instruction (sprite data, padding)
are emitted as DW directives instead of raising, so a whole image can
always be listed.

Usage:
    disasm = Chip8Disassembler()

    # Disassemble a program image
    for instr in disasm.disassemble(rom_bytes, start_address=0x200):
        print(instr)

    # Disassemble a single instruction
    instr = disasm.disassemble_one(bytes([0x12, 0x00]), address=0x200)
    print(f"{instr.mnemonic} {instr.operand_str}")   # JP $200

Copyright (c) 2025 CHIP-8 VM Contributors
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..cpu import ADDRESS_MASK, PROGRAM_START, Instruction, decode


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    A single disassembled CHIP-8 instruction.

    Attributes:
        address: Memory address of the instruction
        word: The 16-bit instruction word
        mnemonic: The instruction mnemonic (e.g., "LD", "DRW"), or "DW" for data
        operand_str: Formatted operands
        raw_bytes: The instruction bytes as stored in memory
    """
    address: int
    word: int
    mnemonic: str
    operand_str: str
    raw_bytes: bytes

    @property
    def is_data(self) -> bool:
        """True if the word did not decode to an instruction."""
        return self.mnemonic == "DW"

    def __str__(self) -> str:
        """Format as listing line: ADDRESS: BYTES  MNEMONIC OPERANDS"""
        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes).ljust(5)
        if self.operand_str:
            return f"${self.address:03X}: {hex_bytes}  {self.mnemonic} {self.operand_str}"
        return f"${self.address:03X}: {hex_bytes}  {self.mnemonic}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"${self.address:03X}",
            "address_int": self.address,
            "word": f"${self.word:04X}",
            "mnemonic": self.mnemonic,
            "operand": self.operand_str,
            "bytes": [f"${b:02X}" for b in self.raw_bytes],
        }


# =============================================================================
# Mnemonic Formatting
# =============================================================================

_ALU_MNEMONICS = {
    0x0: "LD", 0x1: "OR", 0x2: "AND", 0x3: "XOR",
    0x4: "ADD", 0x5: "SUB", 0x7: "SUBN",
}

_FX_FORMS = {
    0x07: ("LD", "V{x}, DT"),
    0x0A: ("LD", "V{x}, K"),
    0x15: ("LD", "DT, V{x}"),
    0x18: ("LD", "ST, V{x}"),
    0x1E: ("ADD", "I, V{x}"),
    0x29: ("LD", "F, V{x}"),
    0x33: ("LD", "B, V{x}"),
    0x55: ("LD", "[I], V{x}"),
    0x65: ("LD", "V{x}, [I]"),
}


def format_instruction(ins: Instruction) -> Optional[Tuple[str, str]]:
    """
    Mnemonic and operand text for a decoded instruction.

    Returns:
        (mnemonic, operands), or None if the word is not an instruction
    """
    x = f"{ins.x:X}"
    y = f"{ins.y:X}"

    match ins.op:
        case 0x0:
            if ins.word == 0x00E0:
                return "CLS", ""
            if ins.word == 0x00EE:
                return "RET", ""
            return None
        case 0x1:
            return "JP", f"${ins.nnn:03X}"
        case 0x2:
            return "CALL", f"${ins.nnn:03X}"
        case 0x3:
            return "SE", f"V{x}, ${ins.kk:02X}"
        case 0x4:
            return "SNE", f"V{x}, ${ins.kk:02X}"
        case 0x5 if ins.n == 0:
            return "SE", f"V{x}, V{y}"
        case 0x6:
            return "LD", f"V{x}, ${ins.kk:02X}"
        case 0x7:
            return "ADD", f"V{x}, ${ins.kk:02X}"
        case 0x8:
            if ins.n in _ALU_MNEMONICS:
                return _ALU_MNEMONICS[ins.n], f"V{x}, V{y}"
            if ins.n == 0x6:
                return "SHR", f"V{x}"
            if ins.n == 0xE:
                return "SHL", f"V{x}"
            return None
        case 0x9 if ins.n == 0:
            return "SNE", f"V{x}, V{y}"
        case 0xA:
            return "LD", f"I, ${ins.nnn:03X}"
        case 0xB:
            return "JP", f"V0, ${ins.nnn:03X}"
        case 0xC:
            return "RND", f"V{x}, ${ins.kk:02X}"
        case 0xD:
            return "DRW", f"V{x}, V{y}, {ins.n}"
        case 0xE:
            if ins.kk == 0x9E:
                return "SKP", f"V{x}"
            if ins.kk == 0xA1:
                return "SKNP", f"V{x}"
            return None
        case 0xF:
            form = _FX_FORMS.get(ins.kk)
            if form is None:
                return None
            return form[0], form[1].format(x=x)
        case _:
            return None


# =============================================================================
# CHIP-8 Disassembler
# =============================================================================

class Chip8Disassembler:
    """
    Disassembler for CHIP-8 program images.

    The disassembler never raises on unknown words; they are listed as
    DW entries so data embedded in a program stays visible.
    """

    def disassemble_one(self, data: bytes, address: int = 0, offset: int = 0) -> DisassembledInstruction:
        """
        Disassemble the instruction at data[offset:offset + 2].

        A trailing odd byte is padded with zero.

        Args:
            data: Raw image bytes
            address: Memory address of the instruction (for display)
            offset: Offset into data
        """
        raw = bytes(data[offset:offset + 2])
        if len(raw) < 2:
            raw = raw.ljust(2, b"\x00")

        ins = decode(raw[0], raw[1])
        formatted = format_instruction(ins)
        if formatted is None:
            return DisassembledInstruction(address, ins.word, "DW", f"${ins.word:04X}", raw)
        mnemonic, operands = formatted
        return DisassembledInstruction(address, ins.word, mnemonic, operands, raw)

    def disassemble(
        self,
        data: bytes,
        start_address: int = PROGRAM_START,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble a program image.

        Args:
            data: Raw image bytes, data[0] is loaded at start_address
            start_address: Load address of the image (default $200)
            count: Maximum number of instructions (default: whole image)

        Returns:
            List of disassembled instructions in image order. Addresses
            wrap at the top of memory, as they do for the interpreter.
        """
        result: List[DisassembledInstruction] = []
        for offset in range(0, len(data), 2):
            if count is not None and len(result) >= count:
                break
            address = (start_address + offset) & ADDRESS_MASK
            result.append(self.disassemble_one(data, address, offset))
        return result
