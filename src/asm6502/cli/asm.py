"""
asm6502 - 6502 Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the 6502 assembler.

Usage Examples
--------------
Basic assembly (writes program.bin):
    $ asm6502 program.asm

With output file and origin:
    $ asm6502 program.asm -o program.bin --origin '$C000'

Generate all output files:
    $ asm6502 program.asm -o program.bin -l program.lst -s program.sym

Verbose mode:
    $ asm6502 -v program.asm
"""

import logging
from pathlib import Path
from typing import Optional

import click

from asm6502 import __version__
from asm6502.assembler import Assembler, DEFAULT_ORIGIN
from asm6502.cli.errors import handle_cli_exception


def parse_address(ctx: click.Context, param: click.Parameter, value: str) -> int:
    """
    Parse an address option.

    Accepts $hex, 0xhex or decimal, in the range 0-$FFFF.
    """
    text = value.strip()
    try:
        if text.startswith("$"):
            address = int(text[1:], 16)
        elif text.lower().startswith("0x"):
            address = int(text[2:], 16)
        else:
            address = int(text)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a $hex, 0xhex or decimal address")

    if not 0 <= address <= 0xFFFF:
        raise click.BadParameter(f"address {value} is outside $0000-$FFFF")
    return address


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
    help="Output binary file (default: input.bin)",
)
@click.option(
    "-a", "--origin",
    type=str,
    default=f"${DEFAULT_ORIGIN:04X}",
    callback=parse_address,
    show_default=True,
    help="Load address of the first byte ($hex, 0xhex or decimal)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Treat duplicate labels and out-of-range branches as errors",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="asm6502")
def main(
    input_file: Path,
    output: Optional[Path],
    origin: int,
    listing: Optional[Path],
    symbols: Optional[Path],
    strict: bool,
    verbose: bool,
) -> None:
    """
    Assemble MOS 6502 source code into a flat binary.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    The output holds exactly the machine code bytes; the first byte
    belongs at the origin address.

    \b
    Examples:
        asm6502 hello.asm                  # Outputs hello.bin
        asm6502 hello.asm -o out.bin       # Specify output file
        asm6502 hello.asm -a '$C000'       # Assemble for $C000
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    output_file = output if output is not None else input_file.with_suffix(".bin")
    asm = Assembler(origin=origin, strict=strict)

    try:
        if verbose:
            click.echo(f"Assembling {input_file} at ${origin:04X}...")

        asm.assemble_file(input_file)
        asm.write_binary(output_file)

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            code = asm.get_code()
            click.echo(f"Wrote {len(code)} bytes to {output_file}")
            click.echo(f"Assembly complete: {len(code)} bytes at ${origin:04X}")
            click.echo(f"Defined {len(asm.get_symbols())} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
