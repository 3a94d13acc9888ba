"""
6502 Assembly Language Parser
=============================

This module implements a recursive-descent parser for 6502 assembly
language. It pulls tokens from the lexer one at a time, with a single
token of lookahead, and builds the list of statements defined in
asm6502.assembler.ast. It performs no semantic resolution: labels are
left as names and the addressing mode is not decided here.

Grammar
-------
```
program    = statement (NEWLINE statement)* EOF
statement  = comment | (TEXT (COLON | operand?)) comment?
comment    = SEMICOLON
operand    = absolute | zero_page | '(' indirect | '#' immediate | TEXT
indirect   = HEX16 ')' | HEX8 (',' 'X' ')' | ')' ',' 'Y')
absolute   = HEX16 (',' ('X'|'Y'))?
zero_page  = HEX8  (',' ('X'|'Y'))?
immediate  = '#' (DECIMAL | HEX8 | BINARY)
```

A TEXT token followed by a colon is a label definition, and another
statement may follow it on the same line:

```asm
loop:   DEX         ; LabelDef('loop'), Instruction('DEX')
        BNE loop    ; Instruction('BNE', LabelRef('loop'))
        ASL A       ; Instruction('ASL', Accumulator())
```

Empty lines and comment-only lines produce no statement. End of input ends
the program even in the middle of a line.

Error Policy
------------
Every grammar violation raises AssemblySyntaxError naming the expected and
the actual token. There is no error recovery and no partial result.
"""

import logging
from typing import Optional

from asm6502.errors import AssemblySyntaxError
from asm6502.assembler.lexer import Lexer, Token, TokenType
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
    Operand,
    Statement,
    ZeroPage,
    ZeroPageIndexed,
)

logger = logging.getLogger(__name__)


# Tokens that may begin an operand after a mnemonic
OPERAND_START = frozenset({
    TokenType.HEX16,
    TokenType.HEX8,
    TokenType.LPAREN,
    TokenType.HASH,
    TokenType.TEXT,
    TokenType.DECIMAL,
    TokenType.BINARY,
})

# Literal tokens accepted after '#'
IMMEDIATE_LITERALS = (TokenType.DECIMAL, TokenType.HEX8, TokenType.BINARY)

# Bare operand names meaning the accumulator instead of a label
ACCUMULATOR_NAMES = frozenset({"A", "a"})

INDEX_REGISTERS = ("X", "Y")


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses 6502 assembly source into statements.

    Usage:
        parser = Parser(Lexer(source, filename))
        statements = parser.parse()
    """

    def __init__(self, lexer: Lexer | str):
        """
        Initialize the parser and read the first lookahead token.

        Args:
            lexer: Token source, or raw source text to lex as "<input>"

        Raises:
            LexicalError: If the first token is malformed
        """
        if isinstance(lexer, str):
            lexer = Lexer(lexer)
        self._lexer = lexer
        self._current = lexer.next_token()

    def parse(self) -> list[Statement]:
        """
        Parse the whole program.

        Returns:
            List of Statement objects in source order

        Raises:
            AssemblySyntaxError: On the first grammar violation
            LexicalError: On the first malformed token
        """
        statements: list[Statement] = []

        while not self._check(TokenType.EOF):
            statement = self._statement()
            if statement is not None:
                statements.append(statement)

            if self._check(TokenType.NEWLINE):
                self._eat(TokenType.NEWLINE)
            elif self._check(TokenType.EOF):
                break
            elif isinstance(statement, LabelDef):
                # Another statement follows the label on the same line
                continue
            else:
                raise self._unexpected("end of line")

        logger.debug(f"Parsed {len(statements)} statements from {self._lexer.filename}")
        return statements

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _check(self, *types: TokenType) -> bool:
        """Check if the lookahead token is one of the given types."""
        return self._current.type in types

    def _eat(self, expected: TokenType, description: Optional[str] = None) -> Token:
        """
        Consume the lookahead token if it has the expected type.

        Raises:
            AssemblySyntaxError: If the lookahead token does not match
        """
        if self._current.type is not expected:
            raise self._unexpected(description or expected.description)
        token = self._current
        self._current = self._lexer.next_token()
        return token

    def _unexpected(self, expected: str) -> AssemblySyntaxError:
        """Build a syntax error for the lookahead token."""
        token = self._current
        return AssemblySyntaxError(
            f"unexpected {token.describe()}, expected {expected}",
            token.location,
            source_line=self._lexer.line_text(token.line),
        )

    # =========================================================================
    # Statements
    # =========================================================================

    def _statement(self) -> Optional[Statement]:
        """
        Parse one statement.

        Returns None for an empty or comment-only line.
        """
        if self._check(TokenType.SEMICOLON):
            self._comment()
            return None

        if self._check(TokenType.NEWLINE, TokenType.EOF):
            return None

        name_token = self._eat(TokenType.TEXT, "instruction or label")

        if self._check(TokenType.COLON):
            self._eat(TokenType.COLON)
            statement: Statement = LabelDef(location=name_token.location, name=name_token.value)
        else:
            operand = self._operand() if self._check(*OPERAND_START) else None
            statement = Instruction(
                location=name_token.location,
                mnemonic=name_token.value,
                operand=operand,
            )

        if self._check(TokenType.SEMICOLON):
            self._comment()

        return statement

    def _comment(self) -> None:
        self._eat(TokenType.SEMICOLON)

    # =========================================================================
    # Operands
    # =========================================================================

    def _operand(self) -> Operand:
        """Dispatch on the first operand token."""
        if self._check(TokenType.HEX16):
            return self._absolute()
        if self._check(TokenType.HEX8):
            return self._zero_page()
        if self._check(TokenType.LPAREN):
            return self._indirect()
        if self._check(TokenType.HASH):
            return self._immediate()
        if self._check(TokenType.TEXT):
            return self._label()

        # Bare decimal/binary numbers are not addresses
        raise self._unexpected("hexadecimal address, '(', '#' or label")

    def _immediate(self) -> Immediate:
        """immediate = '#' (DECIMAL | HEX8 | BINARY)"""
        self._eat(TokenType.HASH)
        if not self._check(*IMMEDIATE_LITERALS):
            raise self._unexpected("8-bit literal (decimal, hex or binary)")
        token = self._eat(self._current.type)
        return Immediate(token.value)

    def _label(self) -> Operand:
        """A bare name: the accumulator, or a reference to a label."""
        token = self._eat(TokenType.TEXT)
        if token.value in ACCUMULATOR_NAMES:
            return Accumulator()
        return LabelRef(token.value)

    def _absolute(self) -> Operand:
        """absolute = HEX16 (',' ('X'|'Y'))?"""
        address = self._eat(TokenType.HEX16).value
        if self._check(TokenType.COMMA):
            self._eat(TokenType.COMMA)
            return AbsoluteIndexed(address, self._register(*INDEX_REGISTERS))
        return Absolute(address)

    def _zero_page(self) -> Operand:
        """zero_page = HEX8 (',' ('X'|'Y'))?"""
        address = self._eat(TokenType.HEX8).value
        if self._check(TokenType.COMMA):
            self._eat(TokenType.COMMA)
            return ZeroPageIndexed(address, self._register(*INDEX_REGISTERS))
        return ZeroPage(address)

    def _indirect(self) -> Operand:
        """indirect = '(' (HEX16 ')' | HEX8 (',' 'X' ')' | ')' ',' 'Y'))"""
        self._eat(TokenType.LPAREN)

        if self._check(TokenType.HEX16):
            address = self._eat(TokenType.HEX16).value
            self._eat(TokenType.RPAREN)
            return AbsoluteIndirect(address)

        address = self._eat(TokenType.HEX8, "hexadecimal address").value

        if self._check(TokenType.COMMA):
            self._eat(TokenType.COMMA)
            self._register("X")
            self._eat(TokenType.RPAREN)
            return IndirectX(address)

        if self._check(TokenType.RPAREN):
            self._eat(TokenType.RPAREN)
            self._eat(TokenType.COMMA)
            self._register("Y")
            return IndirectY(address)

        raise self._unexpected("',' or ')'")

    def _register(self, *allowed: str) -> str:
        """
        Consume a register tag; matching is case-insensitive.

        Returns:
            The tag exactly as written
        """
        expected = "register " + " or ".join(allowed)
        if self._check(TokenType.TEXT) and self._current.value.upper() in allowed:
            return self._eat(TokenType.TEXT).value
        raise self._unexpected(expected)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> list[Statement]:
    """
    Convenience function to parse assembly source.

    Args:
        source: Assembly source text
        filename: Source filename for error messages

    Returns:
        List of parsed statements
    """
    return Parser(Lexer(source, filename)).parse()
