"""
Memory Subsystem for the CHIP-8 VM
==================================

Memory Map:
    $000-$04F  Built-in hexadecimal font (16 glyphs x 5 bytes)
    $050-$1FF  Reserved (interpreter area on original hardware, zeroed here)
    $200-$FFF  Program image and program data

All addresses wrap modulo 4096, so no instruction can read or write outside
the array. Values are masked to 8 bits on write.

Copyright (c) 2025 CHIP-8 VM Contributors
"""

from typing import Iterable

from ..cpu import FONT_START, MAX_PROGRAM_SIZE, MEMORY_SIZE, PROGRAM_START

FONT_GLYPH_SIZE = 5

# 4x5 glyphs for hex digits 0-F, high nibble of each byte is the row bitmap.
FONT = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def font_address(digit: int) -> int:
    """Address of the built-in glyph for the low nibble of digit."""
    return FONT_START + (digit & 0xF) * FONT_GLYPH_SIZE


class Memory:
    """
    Flat 4 KiB byte-addressable memory.

    Created zeroed with the font installed. The program image is copied in
    at PROGRAM_START by load_program().

    Example:
        >>> mem = Memory()
        >>> mem.load_program(bytes([0x00, 0xE0]))
        2
        >>> f"{mem.read_word(0x200):04X}"
        '00E0'
    """

    def __init__(self):
        self._data = bytearray(MEMORY_SIZE)
        self._install_font()

    def _install_font(self) -> None:
        self._data[FONT_START:FONT_START + len(FONT)] = FONT

    def __len__(self) -> int:
        return MEMORY_SIZE

    def read(self, address: int) -> int:
        """
        Read byte from memory.

        Args:
            address: Address (wraps modulo 4096)

        Returns:
            Byte value at address
        """
        return self._data[address % MEMORY_SIZE]

    def write(self, address: int, value: int) -> None:
        """
        Write byte to memory.

        Args:
            address: Address (wraps modulo 4096)
            value: Byte value (masked to 8 bits)
        """
        self._data[address % MEMORY_SIZE] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read 16-bit word (big-endian, high byte at address)."""
        return (self.read(address) << 8) | self.read(address + 1)

    def load_bytes(self, data: Iterable[int], address: int) -> None:
        """Copy raw bytes starting at address, wrapping at the top of memory."""
        for offset, byte in enumerate(data):
            self.write(address + offset, byte)

    def load_program(self, data: bytes) -> int:
        """
        Copy a program image to PROGRAM_START.

        Images longer than MAX_PROGRAM_SIZE are truncated. Memory past the
        end of the image is left as it was.

        Returns:
            Number of bytes copied
        """
        image = data[:MAX_PROGRAM_SIZE]
        self._data[PROGRAM_START:PROGRAM_START + len(image)] = image
        return len(image)

    def dump(self, start: int, length: int) -> bytes:
        """Copy of length bytes from start (wrapping)."""
        return bytes(self.read(start + offset) for offset in range(length))

    def reset(self) -> None:
        """Zero every cell and reinstall the font."""
        self._data = bytearray(MEMORY_SIZE)
        self._install_font()
