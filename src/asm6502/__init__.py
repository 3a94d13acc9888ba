"""
asm6502 - Cross-Assembler for the MOS 6502
==========================================

This package translates MOS 6502 assembly source into a flat binary image
located at a caller-supplied origin address. Labels may be referenced
before they are declared; branch displacements and absolute addresses are
resolved in a second pass.

Main Components
---------------
- **assembler**: Lexer, parser, symbol indexer, linker and code generator
- **cpu**: The documented 6502 instruction set, keyed on
  (mnemonic, addressing mode)
- **cli**: The asm6502 command-line tool

Quick Start
-----------
Assemble a program:
    >>> from asm6502 import assemble
    >>> assemble("myLabel:\\nNOP\\nJMP myLabel", origin=0x0600).hex(" ")
    'ea 4c 00 06'

Or use the command-line tool:
    $ asm6502 program.asm -o program.bin --origin '$0600'

Reference Documentation
-----------------------
- 6502 Instruction Set: http://www.6502.org/tutorials/6502opcodes.html
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from asm6502.assembler import Assembler, assemble, assemble_file
from asm6502.cpu import AddressingMode, InstructionInfo, lookup
from asm6502.errors import (
    Asm6502Error,
    SourceLocation,
    AssemblerError,
    AssemblySyntaxError,
    LexicalError,
    AddressingModeError,
    UndefinedSymbolError,
    DuplicateSymbolError,
    BranchRangeError,
    LinkError,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Instruction set
    "AddressingMode",
    "InstructionInfo",
    "lookup",
    # Errors
    "Asm6502Error",
    "SourceLocation",
    "AssemblerError",
    "AssemblySyntaxError",
    "LexicalError",
    "AddressingModeError",
    "UndefinedSymbolError",
    "DuplicateSymbolError",
    "BranchRangeError",
    "LinkError",
]
