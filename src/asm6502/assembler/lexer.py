"""
6502 Assembly Language Lexer
============================

This module implements a pull-based lexer (tokenizer) for 6502 assembly
language. Each call to next_token() scans and returns exactly one token;
the lexer keeps no token history, only a cursor into the source text.

Token Types
-----------
- TEXT: Mnemonics, labels, register names (letters only)
- DECIMAL: Unsigned 8-bit decimal literal (123)
- HEX8 / HEX16: Hexadecimal literal, width chosen by digit count ($FF, $0200)
- BINARY: Unsigned 8-bit binary literal (%1010)
- Delimiters: ( ) , : #
- SEMICOLON: Start of a comment (the comment text is its value)
- NEWLINE: End of line
- EOF: End of input

Number Formats
--------------
| Format      | Prefix | Digits | Token  | Example |
|-------------|--------|--------|--------|---------|
| Decimal     | (none) | any    | DECIMAL| 200     |
| Hexadecimal | $      | 1-2    | HEX8   | $7F     |
| Hexadecimal | $      | 3-4    | HEX16  | $0200   |
| Binary      | %      | 1-8    | BINARY | %1010   |

Literal scanning is greedy: the maximal run of valid digits is consumed
first, then classified. A decimal above 255, a hex literal of 5+ digits,
or a binary literal of 9+ digits is a LexicalError, never a truncation.

Comments
--------
A semicolon starts a comment running to the end of the line. The comment
text is consumed, but a SEMICOLON token is still produced so the parser
sees where the statement ends.

Example
-------
>>> from asm6502.assembler.lexer import Lexer
>>> lexer = Lexer("loop: LDA ($20),Y ; fetch")
>>> for token in lexer.tokenize():
...     print(token)
Token(TEXT, 'loop', 1:1)
Token(COLON, ':', 1:5)
Token(TEXT, 'LDA', 1:7)
Token(LPAREN, '(', 1:11)
Token(HEX8, $20, 1:12)
Token(RPAREN, ')', 1:15)
Token(COMMA, ',', 1:16)
Token(TEXT, 'Y', 1:17)
Token(SEMICOLON, ' fetch', 1:19)
Token(EOF, 1:26)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from asm6502.errors import LexicalError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for 6502 assembly language."""

    # Structural tokens
    NEWLINE = auto()    # End of line (statement separator)
    SEMICOLON = auto()  # Comment start (statement terminator)
    EOF = auto()        # End of input

    # Delimiters
    LPAREN = auto()     # (
    RPAREN = auto()     # )
    COMMA = auto()      # ,
    COLON = auto()      # : (label definition)
    HASH = auto()       # # (immediate mode indicator)

    # Values
    TEXT = auto()       # Mnemonics, labels, register names
    DECIMAL = auto()    # 0-255
    HEX8 = auto()       # $0-$FF (1-2 digits)
    HEX16 = auto()      # $000-$FFFF (3-4 digits)
    BINARY = auto()     # %0-%11111111 (1-8 digits)

    @property
    def description(self) -> str:
        """Human-readable name used in parser error messages."""
        return _TOKEN_DESCRIPTIONS[self]


_TOKEN_DESCRIPTIONS = {
    TokenType.NEWLINE: "end of line",
    TokenType.SEMICOLON: "comment",
    TokenType.EOF: "end of input",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.COMMA: "','",
    TokenType.COLON: "':'",
    TokenType.HASH: "'#'",
    TokenType.TEXT: "name",
    TokenType.DECIMAL: "decimal literal",
    TokenType.HEX8: "8-bit hex literal",
    TokenType.HEX16: "16-bit hex literal",
    TokenType.BINARY: "binary literal",
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The TokenType classification
        value: Text for TEXT/delimiters/comments, int for literals, None for
               NEWLINE and EOF
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | None
    line: int = 1
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, ${self.value:X}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    def describe(self) -> str:
        """Describe the token for error messages, e.g. "name 'LDA'"."""
        if self.type is TokenType.TEXT:
            return f"name '{self.value}'"
        if self.type in (TokenType.HEX8, TokenType.HEX16):
            return f"{self.type.description} ${self.value:X}"
        if self.type in (TokenType.DECIMAL, TokenType.BINARY):
            return f"{self.type.description} {self.value}"
        return self.type.description

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes 6502 assembly source code on demand.

    Usage:
        lexer = Lexer(source_text, filename)
        token = lexer.next_token()
        while token.type is not TokenType.EOF:
            ...
            token = lexer.next_token()

    Once EOF has been produced, further calls keep returning EOF.
    """

    # Characters that make up a TEXT atom (no digits, no underscores)
    TEXT_CHARS = string.ascii_letters

    DECIMAL_DIGITS = string.digits
    HEX_DIGITS = string.hexdigits
    BINARY_DIGITS = "01"

    SINGLE_CHAR_TOKENS = {
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
        "#": TokenType.HASH,
    }

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Raises:
            LexicalError: On a malformed literal or unrecognized character
        """
        self._skip_whitespace()

        start_line = self._line
        start_column = self._column

        if self._at_end():
            return self._make_token(TokenType.EOF, None, start_line, start_column)

        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, start_line, start_column)

        if char == ";":
            self._advance()
            return self._make_token(
                TokenType.SEMICOLON, self._scan_comment(), start_line, start_column
            )

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(
                self.SINGLE_CHAR_TOKENS[char], char, start_line, start_column
            )

        if char in self.TEXT_CHARS:
            text = self._scan_run(self.TEXT_CHARS)
            return self._make_token(TokenType.TEXT, text, start_line, start_column)

        if char in self.DECIMAL_DIGITS:
            return self._scan_decimal(start_line, start_column)

        if char == "$":
            return self._scan_hex(start_line, start_column)

        if char == "%":
            return self._scan_binary(start_line, start_column)

        self._advance()
        raise self._error(f"unexpected character {char!r}", start_line, start_column)

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens until and including EOF.

        Raises:
            LexicalError: If invalid input is encountered
        """
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return

    def line_text(self, line: int) -> Optional[str]:
        """Return the text of a 1-indexed source line, for error context."""
        lines = self.source.split("\n")
        if 1 <= line <= len(lines):
            return lines[line - 1]
        return None

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or empty string past the end of source."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _scan_run(self, charset: str) -> str:
        """Consume the maximal run of characters from charset."""
        chars = []
        while self._peek() and self._peek() in charset:
            chars.append(self._advance())
        return "".join(chars)

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        line: int,
        column: int,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=line,
            column=column,
            filename=self.filename,
        )

    def _error(self, message: str, line: int, column: int) -> LexicalError:
        """Create a lexical error pointing at the start of the bad token."""
        location = SourceLocation(self.filename, line, column)
        return LexicalError(message, location, source_line=self.line_text(line))

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace(self) -> None:
        """Skip spaces and tabs, but not newlines."""
        while self._peek() and self._peek() in " \t":
            self._advance()

    def _scan_comment(self) -> str:
        """Consume comment text up to, but not including, the newline."""
        chars = []
        while not self._at_end() and self._peek() != "\n":
            chars.append(self._advance())
        return "".join(chars)

    # =========================================================================
    # Numeric Literals
    # =========================================================================

    def _scan_decimal(self, start_line: int, start_column: int) -> Token:
        digits = self._scan_run(self.DECIMAL_DIGITS)
        value = int(digits)
        if value > 0xFF:
            raise self._error(
                f"decimal literal {digits} does not fit in 8 bits",
                start_line, start_column,
            )
        return self._make_token(TokenType.DECIMAL, value, start_line, start_column)

    def _scan_hex(self, start_line: int, start_column: int) -> Token:
        self._advance()  # consume $
        digits = self._scan_run(self.HEX_DIGITS)

        if not digits:
            raise self._error("expected hexadecimal digits after '$'", start_line, start_column)

        if len(digits) <= 2:
            token_type = TokenType.HEX8
        elif len(digits) <= 4:
            token_type = TokenType.HEX16
        else:
            raise self._error(
                f"hexadecimal literal ${digits} has unexpected size "
                f"({len(digits)} digits, expected 1-2 or 3-4)",
                start_line, start_column,
            )

        return self._make_token(token_type, int(digits, 16), start_line, start_column)

    def _scan_binary(self, start_line: int, start_column: int) -> Token:
        self._advance()  # consume %
        digits = self._scan_run(self.BINARY_DIGITS)

        if not digits:
            raise self._error("expected binary digits after '%'", start_line, start_column)

        if len(digits) > 8:
            raise self._error(
                f"binary literal %{digits} has unexpected size "
                f"({len(digits)} digits, expected 1-8)",
                start_line, start_column,
            )

        return self._make_token(TokenType.BINARY, int(digits, 2), start_line, start_column)
