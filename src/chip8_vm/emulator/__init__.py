"""
CHIP-8 Emulator
===============

A complete CHIP-8 virtual machine.

This package provides:

- **CPU**: All 35 standard instructions with per-instruction fault checks
- **Memory System**: 4 KiB with the built-in hex font and program image
- **Framebuffer**: 64x32 XOR-drawn pixel grid with dirty tracking
- **Keypad**: 16-key state with QWERTY and HEX host layouts
- **Scheduler**: Wall-clock pacing with 60 Hz timers and frame presentation
- **Host**: pygame window and keyboard (`chip8_vm.emulator.host`)

Quick Start
-----------

Headless usage::

    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(seed=1))
    >>> emu.load_rom("maze.ch8")
    >>> emu.run(10_000)
    10000
    >>> print(emu.display_text)

In a window::

    >>> from chip8_vm.emulator.host import PygameHost
    >>> PygameHost(Emulator(EmulatorConfig(rom_path=Path("pong.ch8"), scale=10))).run()

Module Structure
----------------

- `emulator.py`: Main Emulator class (high-level API)
- `cpu.py`: Machine state and instruction executor
- `memory.py`: 4 KiB memory and font
- `display.py`: Framebuffer
- `keyboard.py`: Keypad and host layouts
- `scheduler.py`: Cycle scheduler
- `host.py`: pygame display sink and input adapter (imported on demand)

Copyright (c) 2025 CHIP-8 VM Contributors
"""

# Main entry point
from .emulator import Emulator, EmulatorConfig

# CPU components
from .cpu import Chip8CPU, CPUState, NUM_REGISTERS, STACK_DEPTH

# Memory subsystem
from .memory import Memory, FONT, font_address

# I/O
from .display import Framebuffer, Snapshot, SCREEN_WIDTH, SCREEN_HEIGHT
from .keyboard import Keypad, KeyboardLayout, key_for_host

# Timing
from .scheduler import CycleScheduler, DEFAULT_CLOCK_SPEED, TIMER_HZ

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",

    # CPU
    "Chip8CPU",
    "CPUState",
    "NUM_REGISTERS",
    "STACK_DEPTH",

    # Memory
    "Memory",
    "FONT",
    "font_address",

    # Display
    "Framebuffer",
    "Snapshot",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",

    # Keyboard
    "Keypad",
    "KeyboardLayout",
    "key_for_host",

    # Scheduler
    "CycleScheduler",
    "DEFAULT_CLOCK_SPEED",
    "TIMER_HZ",
]
