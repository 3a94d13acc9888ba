"""
Symbol Indexing and Label Linking
=================================

This module holds everything the assembler knows about addresses:

- **LocationCounter**: the 16-bit address of the next byte to be emitted
- **SymbolTable**: read-only mapping of label names to addresses
- **SymbolIndexer**: first pass, binds every label to an address
- **Linker**: resolves a label reference to operand bytes in the second pass

Two-Pass Contract
-----------------
Labels may be referenced before they are declared, so every label must be
bound before any reference is resolved. The indexer walks the whole
program first with its own LocationCounter, asking the instruction set for
each instruction's encoded size. The code generator later walks the same
program with a second LocationCounter seeded at the same origin. The two
counters must visit every statement at the same address; both record the
addresses they visit so the assembler can compare them afterwards.

Label Resolution
----------------
| Resolved mode | Operand bytes                                 |
|---------------|-----------------------------------------------|
| RELATIVE      | (target - (address + size)) & $FF, 1 byte     |
| ABSOLUTE      | target, 2 bytes little-endian                 |
| anything else | LinkError                                     |

Example:
    symbols = SymbolIndexer(origin=0x0600).index(statements)
    linker = Linker(symbols)
    operand = linker.link("loop", info, current_address)
"""

import logging
import struct
from collections.abc import Mapping
from types import MappingProxyType
from typing import Callable, Iterator, Optional

from asm6502.cpu import AddressingMode, InstructionInfo, lookup
from asm6502.errors import (
    AssemblerError,
    BranchRangeError,
    DuplicateSymbolError,
    LinkError,
    SourceLocation,
    UndefinedSymbolError,
)
from asm6502.assembler.ast import Instruction, LabelDef, Statement

logger = logging.getLogger(__name__)


# Size of the 6502 address space
ADDRESS_SPACE = 0x10000

# Signed range of a branch displacement
BRANCH_MIN = -128
BRANCH_MAX = 127

# Signature of the instruction-set lookup service
InstructionLookup = Callable[[str, AddressingMode], InstructionInfo]


def resolve_instruction(isa: InstructionLookup, inst: Instruction) -> InstructionInfo:
    """
    Look up an instruction's encoding and tag lookup errors with its location.

    Raises:
        AssemblerError: Whatever the lookup raises, located at the instruction
    """
    try:
        return isa(inst.mnemonic, inst.addressing_mode())
    except AssemblerError as e:
        e.add_context(location=inst.location)
        raise


# =============================================================================
# Location Counter
# =============================================================================

class LocationCounter:
    """
    Tracks the address of the next byte to be emitted.

    Attributes:
        origin: Address of the first byte of the program
        value: Current address
        addresses: Address of every statement visited via mark(), in order
    """

    def __init__(self, origin: int):
        if not 0 <= origin < ADDRESS_SPACE:
            raise AssemblerError(f"origin ${origin:X} is outside the 64K address space")
        self.origin = origin
        self.value = origin
        self.addresses: list[int] = []

    def mark(self) -> int:
        """Record the current address for the statement being visited."""
        self.addresses.append(self.value)
        return self.value

    def advance(self, size: int, location: Optional[SourceLocation] = None) -> None:
        """
        Move past an encoded instruction.

        The counter may come to rest exactly at $10000 (the program ends on
        the last byte of memory) but never beyond.

        Raises:
            AssemblerError: If the program runs past the end of memory
        """
        if self.value + size > ADDRESS_SPACE:
            raise AssemblerError("program exceeds 64K address space", location)
        self.value += size

    def __repr__(self) -> str:
        return f"LocationCounter(${self.value:04X})"


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable(Mapping):
    """
    Read-only mapping of label name to 16-bit address.

    Names are case-sensitive. The table is frozen once the indexer has
    built it; lookups return plain ints.
    """

    def __init__(
        self,
        addresses: dict[str, int],
        locations: Optional[dict[str, SourceLocation]] = None,
    ):
        self._addresses = MappingProxyType(dict(addresses))
        self._locations = MappingProxyType(dict(locations or {}))

    def __getitem__(self, name: str) -> int:
        return self._addresses[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self) -> str:
        entries = ", ".join(f"{name}=${addr:04X}" for name, addr in self._addresses.items())
        return f"SymbolTable({entries})"

    def location_of(self, name: str) -> Optional[SourceLocation]:
        """Where a label was (last) defined."""
        return self._locations.get(name)

    def similar(self, name: str) -> list[str]:
        """
        Find symbols with similar names for error hints.

        Uses simple edit distance heuristic.
        """
        name_lower = name.lower()
        similar = []

        for sym in self._addresses:
            sym_lower = sym.lower()
            # Check for simple typos: off by one char, case difference
            if (
                sym_lower == name_lower or
                abs(len(sym) - len(name)) <= 1 and
                _edit_distance(name_lower, sym_lower) <= 2
            ):
                similar.append(sym)

        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1]
                )))
        distances = new_distances

    return distances[-1]


# =============================================================================
# Symbol Indexer (Pass 1)
# =============================================================================

class SymbolIndexer:
    """
    First pass: assigns an address to every label.

    Usage:
        indexer = SymbolIndexer(origin=0x0600)
        symbols = indexer.index(statements)
    """

    def __init__(
        self,
        origin: int,
        isa: InstructionLookup = lookup,
        strict: bool = False,
    ):
        """
        Args:
            origin: Address of the first emitted byte
            isa: Instruction-set lookup returning encoded sizes
            strict: Reject label redefinition instead of overwriting
        """
        self._origin = origin
        self._isa = isa
        self._strict = strict
        self._counter = LocationCounter(origin)

    @property
    def counter(self) -> LocationCounter:
        return self._counter

    def index(self, statements: list[Statement]) -> SymbolTable:
        """
        Walk the program once and bind every label.

        Returns:
            The finished, read-only symbol table

        Raises:
            AddressingModeError: If an instruction has no encoding
            DuplicateSymbolError: On redefinition in strict mode
            AssemblerError: If the program exceeds the address space
        """
        self._counter = LocationCounter(self._origin)
        addresses: dict[str, int] = {}
        locations: dict[str, SourceLocation] = {}

        for stmt in statements:
            address = self._counter.mark()

            if isinstance(stmt, LabelDef):
                self._bind(stmt, address, addresses, locations)
            elif isinstance(stmt, Instruction):
                info = resolve_instruction(self._isa, stmt)
                self._counter.advance(info.size, stmt.location)

        logger.debug(
            f"Indexed {len(addresses)} labels, program spans "
            f"${self._origin:04X}-${self._counter.value:04X}"
        )
        return SymbolTable(addresses, locations)

    def _bind(
        self,
        label: LabelDef,
        address: int,
        addresses: dict[str, int],
        locations: dict[str, SourceLocation],
    ) -> None:
        """Bind a label to the current address."""
        if address >= ADDRESS_SPACE:
            raise AssemblerError(
                f"label '{label.name}' would be placed at ${address:X}, "
                f"outside the 64K address space",
                label.location,
            )

        if label.name in addresses:
            if self._strict:
                raise DuplicateSymbolError(
                    label.name,
                    location=label.location,
                    original_location=locations[label.name],
                )
            logger.warning(
                f"{label.location}: label '{label.name}' redefined "
                f"(was ${addresses[label.name]:04X} at {locations[label.name]}, "
                f"now ${address:04X})"
            )

        addresses[label.name] = address
        locations[label.name] = label.location
        logger.debug(f"Label {label.name} = ${address:04X}")


# =============================================================================
# Linker (Pass 2)
# =============================================================================

class Linker:
    """
    Resolves label references to operand bytes.

    Usage:
        linker = Linker(symbols)
        operand = linker.link("loop", info, current_address)
    """

    def __init__(self, symbols: SymbolTable, strict: bool = False):
        """
        Args:
            symbols: Finished symbol table from the indexer
            strict: Reject out-of-range branches instead of wrapping them
        """
        self._symbols = symbols
        self._strict = strict

    def link(
        self,
        label: str,
        info: InstructionInfo,
        current_address: int,
        location: Optional[SourceLocation] = None,
    ) -> bytes:
        """
        Resolve a label into the operand bytes for one instruction.

        Args:
            label: Referenced label name
            info: Looked-up encoding of the referencing instruction
            current_address: Address of the referencing instruction's opcode
            location: Source location for error messages

        Returns:
            One displacement byte (RELATIVE) or two address bytes (ABSOLUTE)

        Raises:
            UndefinedSymbolError: If the label was never declared
            BranchRangeError: On an out-of-range branch in strict mode
            LinkError: If the resolved mode is neither RELATIVE nor ABSOLUTE
        """
        if label not in self._symbols:
            raise UndefinedSymbolError(
                label, location, similar_symbols=self._symbols.similar(label)
            )
        target = self._symbols[label]

        if info.mode is AddressingMode.RELATIVE:
            offset = target - (current_address + info.size)
            if not BRANCH_MIN <= offset <= BRANCH_MAX:
                if self._strict:
                    raise BranchRangeError(label, offset, location)
                logger.warning(
                    f"{location or '<unknown>'}: branch to '{label}' is out of range "
                    f"(offset {offset}), displacement wrapped to ${offset & 0xFF:02X}"
                )
            return bytes([offset & 0xFF])

        if info.mode is AddressingMode.ABSOLUTE:
            return struct.pack("<H", target)

        raise LinkError(
            f"label '{label}' cannot be encoded in {info.mode} addressing mode",
            location,
        )
