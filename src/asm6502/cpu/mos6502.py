"""
MOS 6502 Instruction Set Definition
===================================

This module defines the documented MOS 6502 instruction set with opcodes,
addressing modes, and instruction sizes. It is the instruction-set lookup
consumed by the assembler: the assembler never encodes CPU semantics
itself, it only asks this table for the opcode and encoded length of a
(mnemonic, addressing mode) pair.

The 6502 is little-endian: 16-bit operands are stored low byte first.

Addressing Modes
----------------
1. **IMPLICIT**: No operand (e.g., NOP, RTS, INX) - 1 byte
2. **ACCUMULATOR**: Operates on A (e.g., ASL A) - 1 byte
3. **IMMEDIATE**: Literal value (e.g., LDA #$41) - 2 bytes
4. **ZERO_PAGE**: Address $00-$FF (e.g., LDA $40) - 2 bytes
5. **ZERO_PAGE_X / ZERO_PAGE_Y**: Zero page + index (e.g., LDA $40,X) - 2 bytes
6. **ABSOLUTE**: Full 16-bit address (e.g., STA $0200) - 3 bytes
7. **ABSOLUTE_X / ABSOLUTE_Y**: Absolute + index (e.g., LDA $0200,Y) - 3 bytes
8. **INDIRECT**: Pointer at 16-bit address, JMP only (JMP ($FFFC)) - 3 bytes
9. **INDIRECT_X**: Zero page pointer indexed by X (LDA ($20,X)) - 2 bytes
10. **INDIRECT_Y**: Zero page pointer, then + Y (LDA ($20),Y) - 2 bytes
11. **RELATIVE**: Signed displacement for branches (BNE loop) - 2 bytes

Reference
---------
- MOS MCS6500 Microcomputer Family Programming Manual (1976)
- http://www.6502.org/tutorials/6502opcodes.html
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from asm6502.errors import AddressingModeError


# =============================================================================
# Addressing Mode Enumeration
# =============================================================================

class AddressingMode(Enum):
    """
    6502 addressing modes.

    Each addressing mode determines how the operand is interpreted
    and affects the instruction encoding and size.
    """
    IMPLICIT = auto()     # No operand (NOP, RTS)
    ACCUMULATOR = auto()  # A register (ASL A)
    IMMEDIATE = auto()    # #value
    ZERO_PAGE = auto()    # $00-$FF
    ZERO_PAGE_X = auto()  # $00-$FF,X
    ZERO_PAGE_Y = auto()  # $00-$FF,Y
    ABSOLUTE = auto()     # $0000-$FFFF
    ABSOLUTE_X = auto()   # $0000-$FFFF,X
    ABSOLUTE_Y = auto()   # $0000-$FFFF,Y
    INDIRECT = auto()     # ($0000)
    INDIRECT_X = auto()   # ($00,X)
    INDIRECT_Y = auto()   # ($00),Y
    RELATIVE = auto()     # Branch displacement (signed 8-bit)

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return {
            AddressingMode.IMPLICIT: "implicit",
            AddressingMode.ACCUMULATOR: "accumulator",
            AddressingMode.IMMEDIATE: "immediate",
            AddressingMode.ZERO_PAGE: "zero page",
            AddressingMode.ZERO_PAGE_X: "zero page,X",
            AddressingMode.ZERO_PAGE_Y: "zero page,Y",
            AddressingMode.ABSOLUTE: "absolute",
            AddressingMode.ABSOLUTE_X: "absolute,X",
            AddressingMode.ABSOLUTE_Y: "absolute,Y",
            AddressingMode.INDIRECT: "indirect",
            AddressingMode.INDIRECT_X: "(indirect,X)",
            AddressingMode.INDIRECT_Y: "(indirect),Y",
            AddressingMode.RELATIVE: "relative",
        }[self]


# Number of operand bytes implied by each addressing mode
OPERAND_SIZES: dict[AddressingMode, int] = {
    AddressingMode.IMPLICIT: 0,
    AddressingMode.ACCUMULATOR: 0,
    AddressingMode.IMMEDIATE: 1,
    AddressingMode.ZERO_PAGE: 1,
    AddressingMode.ZERO_PAGE_X: 1,
    AddressingMode.ZERO_PAGE_Y: 1,
    AddressingMode.ABSOLUTE: 2,
    AddressingMode.ABSOLUTE_X: 2,
    AddressingMode.ABSOLUTE_Y: 2,
    AddressingMode.INDIRECT: 2,
    AddressingMode.INDIRECT_X: 1,
    AddressingMode.INDIRECT_Y: 1,
    AddressingMode.RELATIVE: 1,
}


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Information about a specific instruction encoding.

    Frozen so the opcode table cannot be modified at runtime.

    Attributes:
        opcode: The opcode byte
        mode: The addressing mode this encoding uses. This can differ from
              the mode that was asked for (see lookup()).
        size: Total instruction size in bytes (opcode + operand)
        cycles: Base number of CPU cycles (page-crossing penalties excluded)
    """
    opcode: int
    mode: AddressingMode
    size: int
    cycles: int

    @property
    def operand_size(self) -> int:
        """Number of operand bytes following the opcode."""
        return self.size - 1

    def __repr__(self) -> str:
        return (
            f"InstructionInfo(opcode=${self.opcode:02X}, mode={self.mode.name}, "
            f"size={self.size}, cycles={self.cycles})"
        )


def _entries(mnemonic: str, *encodings: tuple[AddressingMode, int, int]) -> dict:
    """Build table entries for one mnemonic from (mode, opcode, cycles) triples."""
    return {
        (mnemonic, mode): InstructionInfo(opcode, mode, 1 + OPERAND_SIZES[mode], cycles)
        for mode, opcode, cycles in encodings
    }


_M = AddressingMode


# =============================================================================
# Opcode Table
# =============================================================================
# Master table of the 151 documented 6502 opcodes.
# Key: (mnemonic, addressing_mode)
# Value: InstructionInfo(opcode, mode, total_size, cycles)
# =============================================================================

OPCODE_TABLE: dict[tuple[str, AddressingMode], InstructionInfo] = {
    # =========================================================================
    # LOAD / STORE
    # =========================================================================
    **_entries(
        "LDA",
        (_M.IMMEDIATE, 0xA9, 2), (_M.ZERO_PAGE, 0xA5, 3), (_M.ZERO_PAGE_X, 0xB5, 4),
        (_M.ABSOLUTE, 0xAD, 4), (_M.ABSOLUTE_X, 0xBD, 4), (_M.ABSOLUTE_Y, 0xB9, 4),
        (_M.INDIRECT_X, 0xA1, 6), (_M.INDIRECT_Y, 0xB1, 5),
    ),
    **_entries(
        "LDX",
        (_M.IMMEDIATE, 0xA2, 2), (_M.ZERO_PAGE, 0xA6, 3), (_M.ZERO_PAGE_Y, 0xB6, 4),
        (_M.ABSOLUTE, 0xAE, 4), (_M.ABSOLUTE_Y, 0xBE, 4),
    ),
    **_entries(
        "LDY",
        (_M.IMMEDIATE, 0xA0, 2), (_M.ZERO_PAGE, 0xA4, 3), (_M.ZERO_PAGE_X, 0xB4, 4),
        (_M.ABSOLUTE, 0xAC, 4), (_M.ABSOLUTE_X, 0xBC, 4),
    ),
    **_entries(
        "STA",
        (_M.ZERO_PAGE, 0x85, 3), (_M.ZERO_PAGE_X, 0x95, 4),
        (_M.ABSOLUTE, 0x8D, 4), (_M.ABSOLUTE_X, 0x9D, 5), (_M.ABSOLUTE_Y, 0x99, 5),
        (_M.INDIRECT_X, 0x81, 6), (_M.INDIRECT_Y, 0x91, 6),
    ),
    **_entries(
        "STX",
        (_M.ZERO_PAGE, 0x86, 3), (_M.ZERO_PAGE_Y, 0x96, 4), (_M.ABSOLUTE, 0x8E, 4),
    ),
    **_entries(
        "STY",
        (_M.ZERO_PAGE, 0x84, 3), (_M.ZERO_PAGE_X, 0x94, 4), (_M.ABSOLUTE, 0x8C, 4),
    ),

    # =========================================================================
    # REGISTER TRANSFERS
    # =========================================================================
    **_entries("TAX", (_M.IMPLICIT, 0xAA, 2)),
    **_entries("TAY", (_M.IMPLICIT, 0xA8, 2)),
    **_entries("TXA", (_M.IMPLICIT, 0x8A, 2)),
    **_entries("TYA", (_M.IMPLICIT, 0x98, 2)),
    **_entries("TSX", (_M.IMPLICIT, 0xBA, 2)),
    **_entries("TXS", (_M.IMPLICIT, 0x9A, 2)),

    # =========================================================================
    # STACK OPERATIONS
    # =========================================================================
    **_entries("PHA", (_M.IMPLICIT, 0x48, 3)),
    **_entries("PHP", (_M.IMPLICIT, 0x08, 3)),
    **_entries("PLA", (_M.IMPLICIT, 0x68, 4)),
    **_entries("PLP", (_M.IMPLICIT, 0x28, 4)),

    # =========================================================================
    # LOGICAL
    # =========================================================================
    **_entries(
        "AND",
        (_M.IMMEDIATE, 0x29, 2), (_M.ZERO_PAGE, 0x25, 3), (_M.ZERO_PAGE_X, 0x35, 4),
        (_M.ABSOLUTE, 0x2D, 4), (_M.ABSOLUTE_X, 0x3D, 4), (_M.ABSOLUTE_Y, 0x39, 4),
        (_M.INDIRECT_X, 0x21, 6), (_M.INDIRECT_Y, 0x31, 5),
    ),
    **_entries(
        "EOR",
        (_M.IMMEDIATE, 0x49, 2), (_M.ZERO_PAGE, 0x45, 3), (_M.ZERO_PAGE_X, 0x55, 4),
        (_M.ABSOLUTE, 0x4D, 4), (_M.ABSOLUTE_X, 0x5D, 4), (_M.ABSOLUTE_Y, 0x59, 4),
        (_M.INDIRECT_X, 0x41, 6), (_M.INDIRECT_Y, 0x51, 5),
    ),
    **_entries(
        "ORA",
        (_M.IMMEDIATE, 0x09, 2), (_M.ZERO_PAGE, 0x05, 3), (_M.ZERO_PAGE_X, 0x15, 4),
        (_M.ABSOLUTE, 0x0D, 4), (_M.ABSOLUTE_X, 0x1D, 4), (_M.ABSOLUTE_Y, 0x19, 4),
        (_M.INDIRECT_X, 0x01, 6), (_M.INDIRECT_Y, 0x11, 5),
    ),
    **_entries("BIT", (_M.ZERO_PAGE, 0x24, 3), (_M.ABSOLUTE, 0x2C, 4)),

    # =========================================================================
    # ARITHMETIC
    # =========================================================================
    **_entries(
        "ADC",
        (_M.IMMEDIATE, 0x69, 2), (_M.ZERO_PAGE, 0x65, 3), (_M.ZERO_PAGE_X, 0x75, 4),
        (_M.ABSOLUTE, 0x6D, 4), (_M.ABSOLUTE_X, 0x7D, 4), (_M.ABSOLUTE_Y, 0x79, 4),
        (_M.INDIRECT_X, 0x61, 6), (_M.INDIRECT_Y, 0x71, 5),
    ),
    **_entries(
        "SBC",
        (_M.IMMEDIATE, 0xE9, 2), (_M.ZERO_PAGE, 0xE5, 3), (_M.ZERO_PAGE_X, 0xF5, 4),
        (_M.ABSOLUTE, 0xED, 4), (_M.ABSOLUTE_X, 0xFD, 4), (_M.ABSOLUTE_Y, 0xF9, 4),
        (_M.INDIRECT_X, 0xE1, 6), (_M.INDIRECT_Y, 0xF1, 5),
    ),
    **_entries(
        "CMP",
        (_M.IMMEDIATE, 0xC9, 2), (_M.ZERO_PAGE, 0xC5, 3), (_M.ZERO_PAGE_X, 0xD5, 4),
        (_M.ABSOLUTE, 0xCD, 4), (_M.ABSOLUTE_X, 0xDD, 4), (_M.ABSOLUTE_Y, 0xD9, 4),
        (_M.INDIRECT_X, 0xC1, 6), (_M.INDIRECT_Y, 0xD1, 5),
    ),
    **_entries("CPX", (_M.IMMEDIATE, 0xE0, 2), (_M.ZERO_PAGE, 0xE4, 3), (_M.ABSOLUTE, 0xEC, 4)),
    **_entries("CPY", (_M.IMMEDIATE, 0xC0, 2), (_M.ZERO_PAGE, 0xC4, 3), (_M.ABSOLUTE, 0xCC, 4)),

    # =========================================================================
    # INCREMENTS / DECREMENTS
    # =========================================================================
    **_entries(
        "INC",
        (_M.ZERO_PAGE, 0xE6, 5), (_M.ZERO_PAGE_X, 0xF6, 6),
        (_M.ABSOLUTE, 0xEE, 6), (_M.ABSOLUTE_X, 0xFE, 7),
    ),
    **_entries(
        "DEC",
        (_M.ZERO_PAGE, 0xC6, 5), (_M.ZERO_PAGE_X, 0xD6, 6),
        (_M.ABSOLUTE, 0xCE, 6), (_M.ABSOLUTE_X, 0xDE, 7),
    ),
    **_entries("INX", (_M.IMPLICIT, 0xE8, 2)),
    **_entries("INY", (_M.IMPLICIT, 0xC8, 2)),
    **_entries("DEX", (_M.IMPLICIT, 0xCA, 2)),
    **_entries("DEY", (_M.IMPLICIT, 0x88, 2)),

    # =========================================================================
    # SHIFTS AND ROTATES
    # =========================================================================
    **_entries(
        "ASL",
        (_M.ACCUMULATOR, 0x0A, 2), (_M.ZERO_PAGE, 0x06, 5), (_M.ZERO_PAGE_X, 0x16, 6),
        (_M.ABSOLUTE, 0x0E, 6), (_M.ABSOLUTE_X, 0x1E, 7),
    ),
    **_entries(
        "LSR",
        (_M.ACCUMULATOR, 0x4A, 2), (_M.ZERO_PAGE, 0x46, 5), (_M.ZERO_PAGE_X, 0x56, 6),
        (_M.ABSOLUTE, 0x4E, 6), (_M.ABSOLUTE_X, 0x5E, 7),
    ),
    **_entries(
        "ROL",
        (_M.ACCUMULATOR, 0x2A, 2), (_M.ZERO_PAGE, 0x26, 5), (_M.ZERO_PAGE_X, 0x36, 6),
        (_M.ABSOLUTE, 0x2E, 6), (_M.ABSOLUTE_X, 0x3E, 7),
    ),
    **_entries(
        "ROR",
        (_M.ACCUMULATOR, 0x6A, 2), (_M.ZERO_PAGE, 0x66, 5), (_M.ZERO_PAGE_X, 0x76, 6),
        (_M.ABSOLUTE, 0x6E, 6), (_M.ABSOLUTE_X, 0x7E, 7),
    ),

    # =========================================================================
    # JUMPS AND CALLS
    # =========================================================================
    **_entries("JMP", (_M.ABSOLUTE, 0x4C, 3), (_M.INDIRECT, 0x6C, 5)),
    **_entries("JSR", (_M.ABSOLUTE, 0x20, 6)),
    **_entries("RTS", (_M.IMPLICIT, 0x60, 6)),

    # =========================================================================
    # BRANCHES (relative addressing)
    # Displacement is relative to the byte AFTER the branch instruction
    # Range: -128 to +127 bytes
    # =========================================================================
    **_entries("BCC", (_M.RELATIVE, 0x90, 2)),   # Branch if carry clear
    **_entries("BCS", (_M.RELATIVE, 0xB0, 2)),   # Branch if carry set
    **_entries("BEQ", (_M.RELATIVE, 0xF0, 2)),   # Branch if equal (Z=1)
    **_entries("BMI", (_M.RELATIVE, 0x30, 2)),   # Branch if minus (N=1)
    **_entries("BNE", (_M.RELATIVE, 0xD0, 2)),   # Branch if not equal (Z=0)
    **_entries("BPL", (_M.RELATIVE, 0x10, 2)),   # Branch if plus (N=0)
    **_entries("BVC", (_M.RELATIVE, 0x50, 2)),   # Branch if overflow clear
    **_entries("BVS", (_M.RELATIVE, 0x70, 2)),   # Branch if overflow set

    # =========================================================================
    # STATUS FLAG CHANGES
    # =========================================================================
    **_entries("CLC", (_M.IMPLICIT, 0x18, 2)),
    **_entries("CLD", (_M.IMPLICIT, 0xD8, 2)),
    **_entries("CLI", (_M.IMPLICIT, 0x58, 2)),
    **_entries("CLV", (_M.IMPLICIT, 0xB8, 2)),
    **_entries("SEC", (_M.IMPLICIT, 0x38, 2)),
    **_entries("SED", (_M.IMPLICIT, 0xF8, 2)),
    **_entries("SEI", (_M.IMPLICIT, 0x78, 2)),

    # =========================================================================
    # SYSTEM FUNCTIONS
    # =========================================================================
    **_entries("BRK", (_M.IMPLICIT, 0x00, 7)),
    **_entries("NOP", (_M.IMPLICIT, 0xEA, 2)),
    **_entries("RTI", (_M.IMPLICIT, 0x40, 6)),
}


# =============================================================================
# Instruction Set Reference Lists
# =============================================================================

MNEMONICS: frozenset[str] = frozenset({
    mnemonic for mnemonic, _ in OPCODE_TABLE.keys()
})

BRANCH_INSTRUCTIONS: frozenset[str] = frozenset({
    mnemonic for mnemonic, mode in OPCODE_TABLE.keys()
    if mode is AddressingMode.RELATIVE
})

# When a mnemonic has no encoding for the requested mode, these modes are
# tried instead. A bare label operand is requested as RELATIVE and means an
# absolute address for anything that is not a branch (JMP label, JSR label,
# LDA table). A missing operand on a shift means the accumulator.
MODE_FALLBACKS: dict[AddressingMode, AddressingMode] = {
    AddressingMode.RELATIVE: AddressingMode.ABSOLUTE,
    AddressingMode.IMPLICIT: AddressingMode.ACCUMULATOR,
}


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(
    mnemonic: str,
    mode: AddressingMode
) -> Optional[InstructionInfo]:
    """
    Look up instruction information by mnemonic and addressing mode.

    The mnemonic is matched case-insensitively. If the exact pair is not
    in the table, the fallback mode from MODE_FALLBACKS is tried, so the
    returned info's ``mode`` may differ from the requested one.

    Args:
        mnemonic: The instruction mnemonic (e.g., "LDA")
        mode: The addressing mode derived from the operand

    Returns:
        InstructionInfo if found, None if the combination is invalid
    """
    mnemonic = mnemonic.upper()
    info = OPCODE_TABLE.get((mnemonic, mode))
    if info is None and mode in MODE_FALLBACKS:
        info = OPCODE_TABLE.get((mnemonic, MODE_FALLBACKS[mode]))
    return info


def lookup(mnemonic: str, mode: AddressingMode) -> InstructionInfo:
    """
    Resolve a (mnemonic, addressing mode) pair, failing if it is undefined.

    This is the instruction-set lookup service the assembler passes
    around; any callable with the same signature can replace it. The
    error carries no source location; the assembler passes attach the
    location of the offending instruction.

    Raises:
        AddressingModeError: If the instruction has no such encoding
    """
    info = get_instruction_info(mnemonic, mode)
    if info is None:
        raise AddressingModeError(
            mnemonic, str(mode),
            valid_modes=[str(m) for m in get_valid_modes(mnemonic)],
        )
    return info


def get_valid_modes(mnemonic: str) -> list[AddressingMode]:
    """
    Get all valid addressing modes for an instruction.

    Args:
        mnemonic: The instruction mnemonic

    Returns:
        List of valid AddressingModes for this instruction (empty if the
        mnemonic is unknown)
    """
    mnemonic = mnemonic.upper()
    return [
        mode for (m, mode) in OPCODE_TABLE.keys()
        if m == mnemonic
    ]


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a documented 6502 instruction."""
    return mnemonic.upper() in MNEMONICS


def is_branch_instruction(mnemonic: str) -> bool:
    """Check if an instruction is a branch (uses relative addressing)."""
    return mnemonic.upper() in BRANCH_INSTRUCTIONS
