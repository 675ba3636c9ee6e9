"""
chip8dis - CHIP-8 Disassembler Command-Line Interface
=====================================================

Lists a CHIP-8 program image as assembly.

Usage Examples
--------------
Disassemble a program:
    $ chip8dis pong.ch8

Limit number of instructions:
    $ chip8dis pong.ch8 --count 20

Output to file:
    $ chip8dis pong.ch8 -o pong.lst

Machine-readable listing:
    $ chip8dis pong.ch8 --json

Copyright (c) 2025 CHIP-8 VM Contributors
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import ExitCode, handle_cli_exception
from chip8_vm.cpu import MEMORY_SIZE, PROGRAM_START
from chip8_vm.disassembler import Chip8Disassembler


def parse_address(text: str) -> int:
    """
    Parse an address given as 0x-prefixed hex, $-prefixed hex or decimal.

    Raises:
        click.BadParameter: If the text is not a valid address
    """
    try:
        if text.lower().startswith("0x"):
            value = int(text, 16)
        elif text.startswith("$"):
            value = int(text[1:], 16)
        else:
            value = int(text)
    except ValueError:
        raise click.BadParameter(f"invalid address '{text}'") from None

    if not 0 <= value < MEMORY_SIZE:
        raise click.BadParameter(f"address must be 0-4095 (0x000-0xFFF), got '{text}'")
    return value


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=str,
    default=f"0x{PROGRAM_START:03X}",
    help="Load address of the image (hex with 0x or $ prefix, or decimal). Default: 0x200",
)
@click.option(
    "-n", "--count",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Emit the listing as JSON",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="chip8dis")
def main(
    input_file: Path,
    output: Optional[Path],
    address: str,
    count: Optional[int],
    as_json: bool,
    verbose: bool,
) -> None:
    """
    Disassemble a CHIP-8 program image.

    INPUT_FILE is the program image to list. Words that are not
    instructions (sprite data) are listed as DW.

    Examples:

        # First 20 instructions
        chip8dis pong.ch8 -n 20

        # Listing to a file
        chip8dis pong.ch8 -o pong.lst
    """
    try:
        base_address = parse_address(address)

        data = input_file.read_bytes()
        if len(data) == 0:
            click.echo(f"Error: {input_file} is empty", err=True)
            sys.exit(ExitCode.INVALID_ARGS)

        if verbose:
            click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)
            click.echo(f"Base address: ${base_address:03X}", err=True)

        instructions = Chip8Disassembler().disassemble(data, start_address=base_address, count=count)

        if as_json:
            result = json.dumps(
                {
                    "file": input_file.name,
                    "size": len(data),
                    "address": base_address,
                    "instructions": [instr.to_dict() for instr in instructions],
                },
                indent=2,
            ) + "\n"
        else:
            output_lines = [
                f"; Disassembly of {input_file.name}",
                f"; Size: {len(data)} bytes",
                f"; Base address: ${base_address:03X}",
                "",
            ]
            output_lines.extend(str(instr) for instr in instructions)
            result = "\n".join(output_lines) + "\n"

        if output:
            output.write_text(result, encoding="utf-8")
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        else:
            click.echo(result, nl=False)
    except click.BadParameter as e:
        handle_cli_exception(e, verbose)
    except OSError as e:
        handle_cli_exception(e, verbose)

    if verbose:
        click.echo(f"Instructions disassembled: {len(instructions)}", err=True)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
