"""
asm6502 CPU Package
===================

CPU architecture definitions for the MOS 6502, kept apart from the
assembler so the assembler core only consumes a lookup keyed on
(mnemonic, addressing mode) and never defines CPU semantics itself.

Modules:
    mos6502: Documented 6502 instruction set, addressing modes, and the
             lookup functions used for encoding.

Usage:
    from asm6502.cpu import AddressingMode, lookup

    info = lookup("LDA", AddressingMode.IMMEDIATE)
    assert info.opcode == 0xA9 and info.size == 2
"""

from asm6502.cpu.mos6502 import (
    # Core types
    AddressingMode,
    InstructionInfo,
    OPERAND_SIZES,
    # Master instruction database
    OPCODE_TABLE,
    # Instruction set reference lists
    MNEMONICS,
    BRANCH_INSTRUCTIONS,
    MODE_FALLBACKS,
    # Lookup functions
    lookup,
    get_instruction_info,
    get_valid_modes,
    is_valid_instruction,
    is_branch_instruction,
)

__all__ = [
    "AddressingMode",
    "InstructionInfo",
    "OPERAND_SIZES",
    "OPCODE_TABLE",
    "MNEMONICS",
    "BRANCH_INSTRUCTIONS",
    "MODE_FALLBACKS",
    "lookup",
    "get_instruction_info",
    "get_valid_modes",
    "is_valid_instruction",
    "is_branch_instruction",
]
