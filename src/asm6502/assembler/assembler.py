"""
6502 Assembler - Main Interface
===============================

This module provides the main Assembler class, which is the primary
interface for assembling 6502 source code. It coordinates the lexer,
parser, symbol indexer and code generator to produce a flat binary image.

Example Usage
-------------
>>> from asm6502.assembler import Assembler
>>>
>>> asm = Assembler(origin=0x0600)
>>> code = asm.assemble_string('''
... start:
...     LDX #$08
... loop:
...     DEX
...     BNE loop
...     JMP start
... ''')
>>> code.hex(" ")
'a2 08 ca d0 fd 4c 00 06'
>>> asm.get_symbols()
{'start': 1536, 'loop': 1538}

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ asm6502 program.asm -o program.bin -l program.lst -s program.sym

Options:
    -o, --output FILE      Output binary file
    -a, --origin ADDR      Load address of the first byte (default $0600)
    -l, --listing FILE     Generate listing file
    -s, --symbols FILE     Generate symbol file
    --strict               Reject duplicate labels and out-of-range branches
    -v, --verbose          Verbose output
"""

import logging
from pathlib import Path
from typing import Optional

from asm6502.cpu import lookup
from asm6502.errors import AssemblerError, SourceLocation
from asm6502.assembler.ast import Statement
from asm6502.assembler.codegen import CodeGenerator
from asm6502.assembler.linker import InstructionLookup, SymbolIndexer, SymbolTable
from asm6502.assembler.parser import parse_source

logger = logging.getLogger(__name__)


# Conventional load address for small 6502 programs
DEFAULT_ORIGIN = 0x0600


class Assembler:
    """
    Main 6502 assembler class.

    Each call to assemble_string() or assemble_file() runs the whole
    pipeline from scratch; the results of the latest run are available
    through the get_* and write_* methods.

    Attributes:
        origin: Address of the first emitted byte
        strict: Reject duplicate labels and out-of-range branches
    """

    def __init__(
        self,
        origin: int = DEFAULT_ORIGIN,
        strict: bool = False,
        isa: InstructionLookup = lookup,
    ):
        """
        Initialize the assembler.

        Args:
            origin: Address of the first emitted byte, 0-$FFFF
            strict: Reject duplicate labels and out-of-range branches
                    instead of overwriting and wrapping
            isa: Instruction-set lookup service
        """
        self.origin = origin
        self.strict = strict
        self._isa = isa

        self._statements: list[Statement] = []
        self._symbols: Optional[SymbolTable] = None
        self._codegen: Optional[CodeGenerator] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        The assembly pipeline is:
        1. Parse source into statements (lexer -> parser)
        2. Bind every label to an address (symbol indexer)
        3. Generate code (code generator, resolving labels via the linker)

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Generated machine code as bytes

        Raises:
            AssemblerError: If assembly fails
        """
        self._statements = []
        self._symbols = None
        self._codegen = None

        statements = parse_source(source, filename)
        logger.debug(f"Parsed {len(statements)} statements")

        try:
            indexer = SymbolIndexer(self.origin, isa=self._isa, strict=self.strict)
            symbols = indexer.index(statements)

            codegen = CodeGenerator(
                statements, symbols, self.origin, isa=self._isa, strict=self.strict
            )
            code = codegen.compile()

            self._check_lock_step(indexer, codegen, statements)
        except AssemblerError as e:
            e.add_context(source_line=_source_line(source, e.location))
            raise

        self._statements = statements
        self._symbols = symbols
        self._codegen = codegen
        logger.debug(f"Generated {len(code)} bytes of code")
        return code

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Generated machine code as bytes

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.debug(f"Assembling {filepath}")
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    def _check_lock_step(
        self,
        indexer: SymbolIndexer,
        codegen: CodeGenerator,
        statements: list[Statement],
    ) -> None:
        """Both passes must have placed every statement at the same address."""
        indexed = indexer.counter.addresses
        generated = codegen.counter.addresses

        for stmt, first, second in zip(statements, indexed, generated):
            if first != second:
                raise AssemblerError(
                    f"internal error: pass addresses diverge "
                    f"(${first:04X} while indexing, ${second:04X} while generating)",
                    stmt.location,
                )
        if len(indexed) != len(generated) or indexer.counter.value != codegen.counter.value:
            raise AssemblerError("internal error: passes visited different programs")

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _require_codegen(self) -> CodeGenerator:
        if self._codegen is None:
            raise AssemblerError("nothing has been assembled yet")
        return self._codegen

    def get_code(self) -> bytes:
        """
        Get the generated machine code.

        Returns:
            Machine code as bytes
        """
        return self._require_codegen().get_code()

    def get_origin(self) -> int:
        return self.origin

    def get_statements(self) -> list[Statement]:
        """Get the parsed statements of the latest assembly."""
        return list(self._statements)

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping label names to addresses
        """
        return self._require_codegen().get_symbols()

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Assembly listing with addresses, code bytes, and source
        """
        return self._require_codegen().get_listing()

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write raw binary output.

        The file holds exactly the machine code bytes, with no header; the
        first byte belongs at the origin address.

        Args:
            filepath: Output file path
        """
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.debug(f"Wrote {len(code)} bytes to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing file shows:
        - Addresses
        - Generated bytes
        - Source lines
        - Symbol table

        Args:
            filepath: Output file path
        """
        self._require_codegen().write_listing(filepath)
        logger.debug(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Args:
            filepath: Output file path
        """
        self._require_codegen().write_symbols(filepath)
        logger.debug(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(
    source: str,
    origin: int = DEFAULT_ORIGIN,
    strict: bool = False,
    filename: str = "<input>",
) -> bytes:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        origin: Address of the first emitted byte
        strict: Reject duplicate labels and out-of-range branches
        filename: Virtual filename for errors

    Returns:
        Generated machine code

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(origin=origin, strict=strict)
    return asm.assemble_string(source, filename)


def _source_line(source: str, location: Optional[SourceLocation]) -> Optional[str]:
    """Get source line for error reporting."""
    if location is None:
        return None
    lines = source.split("\n")
    if 0 < location.line <= len(lines):
        return lines[location.line - 1]
    return None


def assemble_file(
    filepath: str | Path,
    origin: int = DEFAULT_ORIGIN,
    strict: bool = False,
) -> bytes:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file
        origin: Address of the first emitted byte
        strict: Reject duplicate labels and out-of-range branches

    Returns:
        Generated machine code

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(origin=origin, strict=strict)
    return asm.assemble_file(filepath)
