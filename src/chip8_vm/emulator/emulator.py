"""
CHIP-8 Emulator - Main Orchestrator
===================================

This module provides the `Emulator` class that wires the memory, CPU,
framebuffer, keypad and cycle scheduler together behind a small API.

The Emulator class:
- Creates every component and owns them explicitly (no global state)
- Loads program images from files or raw bytes
- Supports execution control (tick, run, step, pause, single-step, quit)
- Routes presented frames to a pluggable display sink
- Offers keypad input and framebuffer inspection for tests and tools

Example usage:
    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(clock_speed=700))
    >>> emu.load_bytes(bytes([0x00, 0xE0, 0x12, 0x02]))  # CLS; loop
    4
    >>> emu.run(100)
    100
    >>> emu.cpu.pc == 0x202
    True

Copyright (c) 2025 CHIP-8 VM Contributors
"""

import logging
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from ..cpu import MAX_PROGRAM_SIZE, PROGRAM_START, Instruction
from ..disassembler import Chip8Disassembler
from ..errors import RomLoadError
from .cpu import Chip8CPU
from .display import Framebuffer
from .keyboard import Keypad, KeyboardLayout
from .memory import Memory
from .scheduler import CycleScheduler, DisplaySink, DEFAULT_CLOCK_SPEED

logger = logging.getLogger(__name__)

# Number of instructions listed in the debug log after loading a program
LOG_OPCODE_COUNT = 8


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        rom_path: Program image to load at construction (optional)
        scale: Integer window scale factor used by hosts (default 1)
        clock_speed: Target instructions per second (default 500)
        layout: Host keyboard layout (default QWERTY)
        seed: Seed for the Cxkk random number generator (default: random)

    Example:
        >>> config = EmulatorConfig(rom_path=Path("pong.ch8"), scale=10)
    """
    rom_path: Optional[Path] = None
    scale: int = 1
    clock_speed: int = DEFAULT_CLOCK_SPEED
    layout: KeyboardLayout = KeyboardLayout.QWERTY
    seed: Optional[int] = None

    def __post_init__(self):
        if self.scale < 1:
            raise ValueError(f"scale must be a positive integer, got {self.scale}")
        if self.clock_speed < 1:
            raise ValueError(f"clock_speed must be a positive integer, got {self.clock_speed}")


class Emulator:
    """
    CHIP-8 virtual machine.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        memory: 4 KiB memory with font and program image
        cpu: The Chip8CPU instance (accessible for low-level control)
        framebuffer: The 64x32 display grid
        keypad: The 16-key keypad state
        scheduler: Cycle scheduler driving the CPU against wall-clock time
        paused: True while execution is paused (single-step mode)

    Example:
        >>> emu = Emulator(EmulatorConfig(rom_path=Path("maze.ch8")))
        >>> emu.display_sink = lambda frame: print(len(frame))
        >>> while not emu.halted:
        ...     emu.tick()
    """

    def __init__(
        self,
        config: Optional[EmulatorConfig] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """
        Initialize the emulator with given configuration.

        Args:
            config: EmulatorConfig; defaults apply if None
            clock: Time source in seconds, used by the scheduler

        Raises:
            RomLoadError: If config.rom_path cannot be loaded
        """
        self.config = config or EmulatorConfig()

        self.memory = Memory()
        self.framebuffer = Framebuffer()
        self.keypad = Keypad()
        self.cpu = Chip8CPU(
            self.memory,
            self.framebuffer,
            self.keypad,
            rng=random.Random(self.config.seed),
        )
        self.scheduler = CycleScheduler(
            self.cpu,
            self.framebuffer,
            clock_speed=self.config.clock_speed,
            clock=clock,
        )

        self.paused = False
        self._step_requested = False
        self._program: Optional[bytes] = None
        self._program_name: Optional[str] = None

        if self.config.rom_path is not None:
            self.load_rom(self.config.rom_path)

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_rom(self, path: Union[str, Path]) -> int:
        """
        Load a program image file at $200.

        Args:
            path: Path to the program image

        Returns:
            Number of bytes loaded

        Raises:
            RomLoadError: If the file is missing, unreadable or empty
        """
        path = Path(path)
        logger.debug(f"ROM filename: {path}")
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise RomLoadError(path, "file not found") from None
        except IsADirectoryError:
            raise RomLoadError(path, "is a directory") from None
        except OSError as e:
            raise RomLoadError(path, e.strerror or str(e)) from e

        if not data:
            raise RomLoadError(path, "file is empty")

        return self.load_bytes(data, name=path.name)

    def load_bytes(self, data: bytes, name: str = "<bytes>") -> int:
        """
        Load a program image from bytes at $200.

        Images longer than the program region are truncated; memory past
        the end of the image is left untouched.

        Args:
            data: Program image
            name: Label used in log messages

        Returns:
            Number of bytes loaded

        Raises:
            ValueError: If data is empty
        """
        if not data:
            raise ValueError("program image is empty")
        if len(data) > MAX_PROGRAM_SIZE:
            logger.warning(
                f"{name}: {len(data)} bytes exceeds program space, "
                f"truncated to {MAX_PROGRAM_SIZE}"
            )

        loaded = self.memory.load_program(bytes(data))
        self._program = bytes(data[:loaded])
        self._program_name = name
        logger.debug(f"Read {loaded} bytes from {name}")
        self._log_first_opcodes()
        return loaded

    def _log_first_opcodes(self) -> None:
        if not logger.isEnabledFor(logging.DEBUG) or self._program is None:
            return
        listing = Chip8Disassembler().disassemble(
            self._program, PROGRAM_START, count=LOG_OPCODE_COUNT
        )
        logger.debug(f"The first {len(listing)} opcodes are:")
        for instr in listing:
            logger.debug(f"  {instr}")

    @property
    def program_size(self) -> int:
        """Size of the loaded program image (0 if none)."""
        return len(self._program) if self._program else 0

    # =========================================================================
    # Execution Control
    # =========================================================================

    def reset(self) -> None:
        """
        Reset to power-on state and reload the current program.

        Memory, registers, timers, stack, framebuffer and keypad are all
        cleared; the scheduler forgets its reference time.
        """
        self.memory.reset()
        self.cpu.reset()
        self.framebuffer.clear()
        self.keypad.release_all()
        self.scheduler.reset()
        self.paused = False
        self._step_requested = False
        if self._program is not None:
            self.memory.load_program(self._program)

    def step(self) -> Instruction:
        """
        Execute a single instruction and present the frame if it changed.

        Timers are not ticked; single-stepping freezes emulated time.

        Returns:
            The executed instruction
        """
        instruction = self.cpu.step()
        self.scheduler.present()
        return instruction

    def run(self, max_cycles: int) -> int:
        """
        Execute up to max_cycles instructions as fast as possible.

        Timers still tick once per 1/60 s of emulated time, so programs
        behave as if they ran at the configured clock speed.

        Returns:
            Number of instructions executed (fewer if the machine halted)
        """
        return self.scheduler.run_cycles(max_cycles)

    def tick(self, now: Optional[float] = None) -> int:
        """
        Run one scheduling round against the wall clock.

        While paused nothing runs, except a single instruction after
        request_step().

        Args:
            now: Current time in seconds (defaults to the scheduler clock)

        Returns:
            Number of instructions executed
        """
        if self.cpu.halted:
            return 0
        if self.paused:
            if not self._step_requested:
                return 0
            self._step_requested = False
            self.step()
            return 1
        return self.scheduler.tick(now)

    def toggle_pause(self, now: Optional[float] = None) -> bool:
        """
        Pause or resume execution.

        On resume the scheduler is re-anchored so the paused time is not
        replayed as a burst of instructions.

        Returns:
            The new paused state
        """
        self.paused = not self.paused
        self._step_requested = False
        if not self.paused:
            self.scheduler.start(now)
        logger.debug("Pause toggled" + (" (paused)" if self.paused else " (running)"))
        return self.paused

    def request_step(self) -> None:
        """Execute one instruction on the next tick() while paused."""
        if self.paused:
            logger.debug("Stepping through")
            self._step_requested = True

    def quit(self) -> None:
        """Stop the machine after the current instruction."""
        logger.debug("Quit requested")
        self.cpu.halt()

    @property
    def halted(self) -> bool:
        return self.cpu.halted

    # =========================================================================
    # Input / Output
    # =========================================================================

    @property
    def display_sink(self) -> Optional[DisplaySink]:
        """Callback receiving framebuffer snapshots when a frame is presented."""
        return self.scheduler.display_sink

    @display_sink.setter
    def display_sink(self, sink: Optional[DisplaySink]) -> None:
        self.scheduler.display_sink = sink

    def press_key(self, key: Union[int, str]) -> None:
        self.keypad.key_down(key)

    def release_key(self, key: Union[int, str]) -> None:
        self.keypad.key_up(key)

    def set_keys(self, states: Iterable[bool]) -> None:
        """Replace the whole keypad state (16 booleans)."""
        self.keypad.set_state(states)

    @property
    def display_text(self) -> str:
        """Framebuffer rendered as text (# = on, . = off)."""
        return self.framebuffer.render_text()
