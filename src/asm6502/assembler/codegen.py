"""
6502 Code Generator
===================

This module generates 6502 machine code from parsed assembly statements.
It is the second of the assembler's two passes; the first pass
(SymbolIndexer, in asm6502.assembler.linker) has already bound every label
by the time code generation starts.

Code Generation
---------------
- Walk the statements in order with a fresh LocationCounter
- For each instruction, derive the addressing mode from the operand and
  look up the opcode and encoded size
- Emit the opcode, then the operand bytes
- Resolve label operands through the Linker
- Check that the emitted length matches the looked-up size

Operand Encoding
----------------
| Operand                                         | Bytes               |
|-------------------------------------------------|---------------------|
| Immediate, ZeroPage(Indexed), IndirectX/Y       | 1                   |
| Absolute(Indexed), AbsoluteIndirect             | 2, little-endian    |
| LabelRef                                        | Linker.link(...)    |
| none, Accumulator                               | 0                   |

Label definitions emit nothing.

Listing
-------
Every instruction produces a listing line:
```
$0600  A9 41            3  LDA #$41
```
"""

import logging
import struct
from pathlib import Path

from asm6502.cpu import InstructionInfo, lookup
from asm6502.errors import AssemblerError
from asm6502.assembler.ast import (
    Absolute,
    AbsoluteIndexed,
    AbsoluteIndirect,
    Accumulator,
    Immediate,
    IndirectX,
    IndirectY,
    Instruction,
    LabelDef,
    LabelRef,
    Statement,
    ZeroPage,
    ZeroPageIndexed,
)
from asm6502.assembler.linker import (
    InstructionLookup,
    Linker,
    LocationCounter,
    SymbolTable,
    resolve_instruction,
)

logger = logging.getLogger(__name__)


# Operand nodes encoded as a single byte
_BYTE_OPERANDS = (Immediate, ZeroPage, ZeroPageIndexed, IndirectX, IndirectY)

# Operand nodes encoded as a little-endian word
_WORD_OPERANDS = (Absolute, AbsoluteIndexed, AbsoluteIndirect)


class CodeGenerator:
    """
    Generates 6502 machine code from statements.

    Usage:
        symbols = SymbolIndexer(origin).index(statements)
        codegen = CodeGenerator(statements, symbols, origin)
        code = codegen.compile()
    """

    def __init__(
        self,
        statements: list[Statement],
        symbols: SymbolTable,
        origin: int,
        isa: InstructionLookup = lookup,
        strict: bool = False,
    ):
        """
        Initialize the code generator.

        Args:
            statements: Parsed program
            symbols: Finished symbol table from the indexing pass
            origin: Address of the first emitted byte (same as for indexing)
            isa: Instruction-set lookup service
            strict: Reject out-of-range branches instead of wrapping them
        """
        self._statements = statements
        self._symbols = symbols
        self._origin = origin
        self._isa = isa
        self._linker = Linker(symbols, strict=strict)

        self._counter = LocationCounter(origin)
        self._code = bytearray()
        self._listing_lines: list[str] = []

    @property
    def counter(self) -> LocationCounter:
        return self._counter

    def compile(self) -> bytes:
        """
        Generate machine code for the whole program.

        Returns:
            The flat binary image, starting at the origin

        Raises:
            AddressingModeError: If an instruction has no encoding
            UndefinedSymbolError: If a referenced label was never declared
            BranchRangeError: On an out-of-range branch in strict mode
            LinkError: If a label operand resolves to an unusable mode
            AssemblerError: On an internal size mismatch
        """
        self._counter = LocationCounter(self._origin)
        self._code = bytearray()
        self._listing_lines = []

        for stmt in self._statements:
            self._counter.mark()
            if isinstance(stmt, Instruction):
                self._generate_instruction(stmt)
            elif not isinstance(stmt, LabelDef):
                raise AssemblerError(f"unexpected statement {stmt!r}", stmt.location)

        logger.debug(f"Generated {len(self._code)} bytes at ${self._origin:04X}")
        return bytes(self._code)

    # =========================================================================
    # Instruction Encoding
    # =========================================================================

    def _generate_instruction(self, inst: Instruction) -> None:
        """Generate machine code for an instruction."""
        start_pc = self._counter.value
        info = resolve_instruction(self._isa, inst)

        encoded = bytes([info.opcode]) + self._encode_operand(inst, info, start_pc)

        if len(encoded) != info.size:
            raise AssemblerError(
                f"internal error: '{inst}' encoded as {len(encoded)} bytes, "
                f"but {info.mode} addressing takes {info.size}",
                inst.location,
            )

        self._code.extend(encoded)
        self._counter.advance(info.size, inst.location)

        hex_str = " ".join(f"{b:02X}" for b in encoded)
        self._listing_lines.append(
            f"${start_pc:04X}  {hex_str:12s}  {inst.location.line:4d}  {inst}"
        )

    def _encode_operand(self, inst: Instruction, info: InstructionInfo, pc: int) -> bytes:
        """Emit the operand bytes that follow the opcode."""
        operand = inst.operand

        if operand is None or isinstance(operand, Accumulator):
            return b""
        if isinstance(operand, Immediate):
            return bytes([operand.value & 0xFF])
        if isinstance(operand, _BYTE_OPERANDS):
            return bytes([operand.address & 0xFF])
        if isinstance(operand, _WORD_OPERANDS):
            return struct.pack("<H", operand.address)
        if isinstance(operand, LabelRef):
            return self._linker.link(operand.name, info, pc, inst.location)

        raise AssemblerError(f"unexpected operand node {operand!r}", inst.location)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        return bytes(self._code)

    def get_symbols(self) -> dict[str, int]:
        return dict(self._symbols)

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, generated bytes, and source lines,
            followed by the symbol table with the line defining each label.
        """
        lines = []
        lines.append("6502 Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr  Code          Line  Source")
        lines.append("-" * 60)
        lines.extend(self._listing_lines)
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, value in sorted(self._symbols.items()):
            line = f"{name:20s} = ${value:04X}"
            location = self._symbols.location_of(name)
            if location is not None:
                line += f"  line {location.line}"
            lines.append(line)
        return "\n".join(lines)

    def write_listing(self, filepath: str | Path) -> None:
        with open(filepath, "w") as f:
            f.write(self.get_listing())

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by asm6502\n")
            for name, value in sorted(self._symbols.items()):
                f.write(f"{name} ${value:04X}\n")
