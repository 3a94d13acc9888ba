"""
asm6502 Error Hierarchy
=======================

This module defines the exception hierarchy for the assembler.
All exceptions inherit from Asm6502Error, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Asm6502Error (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - syntax errors in source
    │   └── LexicalError - malformed literal or unknown character
    ├── AddressingModeError - unknown (mnemonic, addressing mode) pair
    ├── UndefinedSymbolError - reference to undefined label
    ├── DuplicateSymbolError - label defined twice (strict mode)
    ├── BranchRangeError - branch target too far (strict mode)
    └── LinkError - label operand used with a mode the linker cannot encode

Every assembly error is fatal: the first one raised aborts the whole
assembly and no partial output is produced.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Asm6502Error(Exception):
    """
    Base exception for all asm6502 errors.

        try:
            assemble(source)
        except Asm6502Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Asm6502Error):
    """
    Base exception for all assembler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def add_context(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        """
        Fill in a location or source line the raiser did not know.

        Fields that are already set are kept. The formatted message is
        rebuilt so str(error) shows the new context.
        """
        if self.location is None:
            self.location = location
        if self.source_line is None:
            self.source_line = source_line
        self.args = (self._format_message(),)

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            snake.asm:15:9: error: undefined symbol 'drwa'
                JSR drwa
                    ^
            hint: did you mean 'draw'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Raised by the parser when the current token does not match what the
    grammar requires at that point. The message names both the expected
    token (or token class) and the one actually found.
    """
    pass


class LexicalError(AssemblySyntaxError):
    """
    Lexical error raised while producing a token.

    Examples:
        - Unknown character ('@', '!', ...)
        - Decimal literal above 255
        - Hex literal with 5 or more digits ($12345)
        - Binary literal with more than 8 digits
    """
    pass


class AddressingModeError(AssemblerError):
    """
    The instruction set has no entry for a (mnemonic, addressing mode) pair.

    Also raised when an indexed operand carries a register tag other
    than X or Y.

    Example:
        STA #$41  ; STA has no immediate form
    """

    def __init__(
        self,
        mnemonic: str,
        mode: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        valid_modes: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.mode = mode
        self.valid_modes = valid_modes or []

        hint = None
        if self.valid_modes:
            modes_str = ", ".join(self.valid_modes)
            hint = f"{mnemonic} supports: {modes_str}"

        super().__init__(
            f"'{mnemonic}' does not support {mode} addressing mode",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a label that was never declared.

    Raised during code generation, never during indexing, because labels
    may legally be referenced before their declaration.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    Only raised in strict mode; by default a redefinition replaces the
    earlier binding and a warning is logged.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            f"duplicate symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class BranchRangeError(AssemblerError):
    """
    Branch target is out of range.

    6502 branches use a signed 8-bit displacement measured from the byte
    following the branch, limiting the range to -128..+127. Only raised in
    strict mode; otherwise the displacement wraps modulo 256.
    """

    def __init__(
        self,
        target: str,
        offset: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.target = target
        self.offset = offset

        direction = "forward" if offset > 0 else "backward"
        hint = (
            f"branch offset is {offset}, but range is -128 to +127; "
            f"consider using JMP for {direction} references"
        )

        super().__init__(
            f"branch target '{target}' is out of range (offset: {offset})",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class LinkError(AssemblerError):
    """
    A label reference reached the linker with a mode it cannot encode.

    Labels resolve either to a relative displacement or to an absolute
    address; any other resolved mode is an internal inconsistency between
    the parser and the instruction set.
    """
    pass
