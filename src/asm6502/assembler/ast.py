"""
6502 Assembly Syntax Tree
=========================

Data model produced by the parser and consumed by the symbol indexer and
the code generator.

Statements
----------
- **LabelDef**: a name bound to the address of the next emitted byte
- **Instruction**: a mnemonic plus an optional operand

A program is a plain list of statements; list order is both program order
and memory layout order.

Operands
--------
| Node             | Syntax     | Addressing mode    |
|------------------|------------|--------------------|
| Immediate        | #$41       | IMMEDIATE          |
| ZeroPage         | $40        | ZERO_PAGE          |
| ZeroPageIndexed  | $40,X      | ZERO_PAGE_X / _Y   |
| Absolute         | $0200      | ABSOLUTE           |
| AbsoluteIndexed  | $0200,Y    | ABSOLUTE_X / _Y    |
| AbsoluteIndirect | ($FFFC)    | INDIRECT           |
| IndirectX        | ($20,X)    | INDIRECT_X         |
| IndirectY        | ($20),Y    | INDIRECT_Y         |
| Accumulator      | A          | ACCUMULATOR        |
| LabelRef         | loop       | RELATIVE (*)       |

(*) A label reference is requested as RELATIVE; the instruction set decides
whether that means a branch displacement or an absolute address.

Operands never carry resolved addresses. The addressing mode is not stored
either: addressing_mode() derives it from the operand's shape every time.
"""

from dataclasses import dataclass
from typing import Optional

from asm6502.cpu import AddressingMode
from asm6502.errors import AddressingModeError, AssemblerError, SourceLocation


# =============================================================================
# Operand Nodes
# =============================================================================

class Operand:
    """Base class for instruction operands."""


@dataclass(frozen=True)
class Immediate(Operand):
    value: int

    def __str__(self) -> str:
        return f"#${self.value:02X}"


@dataclass(frozen=True)
class ZeroPage(Operand):
    address: int

    def __str__(self) -> str:
        return f"${self.address:02X}"


@dataclass(frozen=True)
class ZeroPageIndexed(Operand):
    """Zero page address indexed by a register tag ('X' or 'Y', any case)."""
    address: int
    register: str

    def __str__(self) -> str:
        return f"${self.address:02X},{self.register}"


@dataclass(frozen=True)
class Absolute(Operand):
    address: int

    def __str__(self) -> str:
        return f"${self.address:04X}"


@dataclass(frozen=True)
class AbsoluteIndexed(Operand):
    """Absolute address indexed by a register tag ('X' or 'Y', any case)."""
    address: int
    register: str

    def __str__(self) -> str:
        return f"${self.address:04X},{self.register}"


@dataclass(frozen=True)
class AbsoluteIndirect(Operand):
    address: int

    def __str__(self) -> str:
        return f"(${self.address:04X})"


@dataclass(frozen=True)
class IndirectX(Operand):
    address: int

    def __str__(self) -> str:
        return f"(${self.address:02X},X)"


@dataclass(frozen=True)
class IndirectY(Operand):
    address: int

    def __str__(self) -> str:
        return f"(${self.address:02X}),Y"


@dataclass(frozen=True)
class Accumulator(Operand):
    def __str__(self) -> str:
        return "A"


@dataclass(frozen=True)
class LabelRef(Operand):
    name: str

    def __str__(self) -> str:
        return self.name


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class Statement:
    """
    Base class for all parsed statements.

    Every statement has a source location for error reporting.
    """
    location: SourceLocation


@dataclass(frozen=True)
class LabelDef(Statement):
    """
    Label definition statement.

    Attributes:
        name: Label name, case-sensitive
    """
    name: str

    def __str__(self) -> str:
        return f"{self.name}:"


@dataclass(frozen=True)
class Instruction(Statement):
    """
    Machine instruction statement.

    Attributes:
        mnemonic: The instruction mnemonic, exactly as written
        operand: The operand (None when the instruction has none)
    """
    mnemonic: str
    operand: Optional[Operand] = None

    def addressing_mode(self) -> AddressingMode:
        """Derive this instruction's addressing mode from its operand."""
        return addressing_mode(self.operand, self.mnemonic, self.location)

    def __str__(self) -> str:
        if self.operand is None:
            return self.mnemonic
        return f"{self.mnemonic} {self.operand}"


# =============================================================================
# Addressing Mode Derivation
# =============================================================================

_FIXED_MODES: dict[type, AddressingMode] = {
    Immediate: AddressingMode.IMMEDIATE,
    ZeroPage: AddressingMode.ZERO_PAGE,
    Absolute: AddressingMode.ABSOLUTE,
    AbsoluteIndirect: AddressingMode.INDIRECT,
    IndirectX: AddressingMode.INDIRECT_X,
    IndirectY: AddressingMode.INDIRECT_Y,
    Accumulator: AddressingMode.ACCUMULATOR,
    LabelRef: AddressingMode.RELATIVE,
}

_INDEXED_MODES: dict[tuple[type, str], AddressingMode] = {
    (ZeroPageIndexed, "X"): AddressingMode.ZERO_PAGE_X,
    (ZeroPageIndexed, "Y"): AddressingMode.ZERO_PAGE_Y,
    (AbsoluteIndexed, "X"): AddressingMode.ABSOLUTE_X,
    (AbsoluteIndexed, "Y"): AddressingMode.ABSOLUTE_Y,
}


def addressing_mode(
    operand: Optional[Operand],
    mnemonic: str = "operand",
    location: Optional[SourceLocation] = None,
) -> AddressingMode:
    """
    Derive the addressing mode of an operand from its shape.

    Register tags are case-insensitive.

    Args:
        operand: The operand node, or None for an instruction without one
        mnemonic: Owning mnemonic, used in error messages
        location: Owning statement's location, used in error messages

    Returns:
        The AddressingMode (IMPLICIT when operand is None)

    Raises:
        AddressingModeError: If an indexed operand has a tag other than X/Y
    """
    if operand is None:
        return AddressingMode.IMPLICIT

    mode = _FIXED_MODES.get(type(operand))
    if mode is not None:
        return mode

    if isinstance(operand, (ZeroPageIndexed, AbsoluteIndexed)):
        mode = _INDEXED_MODES.get((type(operand), operand.register.upper()))
        if mode is None:
            raise AddressingModeError(
                mnemonic, f"'{operand.register}'-indexed", location,
                valid_modes=["X-indexed", "Y-indexed"],
            )
        return mode

    raise AssemblerError(f"unexpected operand node {operand!r}", location)
