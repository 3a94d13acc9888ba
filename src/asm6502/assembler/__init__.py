"""
6502 Assembler
==============

This module provides a two-pass cross-assembler for the MOS 6502
microprocessor. It converts 6502 assembly source code into a flat binary
image that belongs at a chosen origin address.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **Lexer**: Tokenizes assembly source into tokens, one per request
- **Parser**: Parses tokens into statements (instructions and labels)
- **SymbolIndexer**: First pass, binds every label to an address
- **Linker**: Resolves label references to branch displacements or addresses
- **CodeGenerator**: Second pass, generates machine code

Assembly Process
----------------
1. **Parsing (Lexer + Parser)**:
   - Tokenize source into lexical tokens
   - Parse tokens into statements (instructions, labels)

2. **Indexing (SymbolIndexer)**:
   - Walk the statements with a location counter
   - Ask the instruction set for each instruction's size
   - Produce a read-only symbol table

3. **Code Generation (CodeGenerator)**:
   - Walk the statements again with a second location counter
   - Emit opcodes and operands, resolving labels through the Linker

Example Usage
-------------
>>> from asm6502.assembler import Assembler
>>> asm = Assembler(origin=0x0600)
>>> asm.assemble_string('''
... start:
...     LDA #$41    ; Load 'A'
...     JSR print
...     BRK
... print:
...     STA $0200
...     RTS
... ''')
>>> code = asm.get_code()
>>> asm.write_binary("hello.bin")

Supported Features
------------------
- All 151 documented 6502 opcodes
- All addressing modes (implicit, accumulator, immediate, zero page,
  absolute, indexed, indirect, relative)
- Labels with forward references
- Decimal, hexadecimal and binary literals
- Listing file generation
- Symbol table output
"""

from asm6502.assembler.assembler import Assembler, assemble, assemble_file, DEFAULT_ORIGIN
from asm6502.assembler.lexer import Lexer, Token, TokenType
from asm6502.assembler.ast import (
    Operand,
    Immediate,
    ZeroPage,
    ZeroPageIndexed,
    Absolute,
    AbsoluteIndexed,
    AbsoluteIndirect,
    IndirectX,
    IndirectY,
    Accumulator,
    LabelRef,
    Statement,
    LabelDef,
    Instruction,
    addressing_mode,
)
from asm6502.assembler.parser import Parser, parse_source
from asm6502.assembler.linker import LocationCounter, SymbolTable, SymbolIndexer, Linker
from asm6502.assembler.codegen import CodeGenerator
from asm6502.cpu import (
    AddressingMode,
    InstructionInfo,
    OPCODE_TABLE,
    MNEMONICS,
    BRANCH_INSTRUCTIONS,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    "DEFAULT_ORIGIN",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Syntax tree
    "Operand",
    "Immediate",
    "ZeroPage",
    "ZeroPageIndexed",
    "Absolute",
    "AbsoluteIndexed",
    "AbsoluteIndirect",
    "IndirectX",
    "IndirectY",
    "Accumulator",
    "LabelRef",
    "Statement",
    "LabelDef",
    "Instruction",
    "addressing_mode",
    # Parser
    "Parser",
    "parse_source",
    # Indexing and linking
    "LocationCounter",
    "SymbolTable",
    "SymbolIndexer",
    "Linker",
    # Code generator
    "CodeGenerator",
    # Opcodes
    "AddressingMode",
    "InstructionInfo",
    "OPCODE_TABLE",
    "MNEMONICS",
    "BRANCH_INSTRUCTIONS",
]
