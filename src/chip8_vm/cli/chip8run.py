"""
chip8run - CHIP-8 Interpreter Command-Line Interface
====================================================

Runs a CHIP-8 program image in a pygame window.

Usage Examples
--------------
Run a program:
    $ chip8run pong.ch8

Ten times larger window, faster clock:
    $ chip8run pong.ch8 --scale 10 --clock-speed 700

Keypad on the host's hex keys, debug logging:
    $ chip8run pong.ch8 --layout hex -v

Window Controls
---------------
    1-4, Q-R, A-F, Z-V   CHIP-8 keypad (QWERTY layout)
    Space                Pause / resume
    Return               Execute one instruction while paused
    Escape               Quit

Copyright (c) 2025 CHIP-8 VM Contributors
"""

import logging
from pathlib import Path
from typing import Optional

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import handle_cli_exception
from chip8_vm.emulator import DEFAULT_CLOCK_SPEED, Emulator, EmulatorConfig, KeyboardLayout
from chip8_vm.emulator.host import PygameHost

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "rom",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-s", "--scale",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Window scale factor",
)
@click.option(
    "-c", "--clock-speed",
    type=click.IntRange(min=1),
    default=DEFAULT_CLOCK_SPEED,
    show_default=True,
    help="Instructions per second",
)
@click.option(
    "-l", "--layout",
    type=click.Choice(["qwerty", "hex"], case_sensitive=False),
    default="qwerty",
    show_default=True,
    help="Host keyboard layout for the keypad",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the random number generator (default: random)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging)",
)
@click.version_option(version=__version__, prog_name="chip8run")
def main(
    rom: Path,
    scale: int,
    clock_speed: int,
    layout: str,
    seed: Optional[int],
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 program.

    ROM is the program image, loaded at address $200.

    Examples:

        # Run with a 640x320 window
        chip8run pong.ch8 -s 10

        # Reproducible random numbers
        chip8run maze.ch8 --seed 42
    """
    setup_logging(verbose)

    try:
        config = EmulatorConfig(
            rom_path=rom,
            scale=scale,
            clock_speed=clock_speed,
            layout=KeyboardLayout[layout.upper()],
            seed=seed,
        )
        emulator = Emulator(config)
        PygameHost(emulator, title=f"CHIP-8 - {rom.name}").run()
    except Exception as e:
        handle_cli_exception(e, verbose, error_type="Machine")

    logger.debug(f"Executed {emulator.scheduler.total_cycles} instructions")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
