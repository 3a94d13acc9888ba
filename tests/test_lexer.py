# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the 6502 assembler lexer/tokenizer.
#
# Test coverage includes:
#   - Number formats: decimal, hexadecimal ($) in two widths, binary (%)
#   - Text atoms and delimiters
#   - Comments and line structure
#   - Pull-based behaviour (next_token, repeated EOF)
#   - Literal round-trips
#   - Error conditions
# =============================================================================

import pytest
from asm6502.assembler.lexer import Lexer, TokenType, Token
from asm6502.errors import AssemblySyntaxError, LexicalError


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source: str) -> list:
    """
    Helper to tokenize and drop the trailing EOF token.
    Tests are focused on meaningful tokens, not structural ones.
    """
    return [t for t in Lexer(source, "<test>").tokenize() if t.type != TokenType.EOF]


def types(source: str) -> list:
    return [t.type for t in tokenize(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source should produce no meaningful tokens."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        """Spaces and tabs are skipped."""
        assert tokenize("   \t   ") == []

    def test_text(self):
        """Letters form a TEXT token."""
        tokens = tokenize("LDA")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.TEXT
        assert tokens[0].value == "LDA"

    def test_text_keeps_case(self):
        """TEXT tokens keep their original case."""
        tokens = tokenize("myLabel")
        assert tokens[0].value == "myLabel"

    def test_text_stops_at_digit(self):
        """Text atoms are letters only; a digit starts a new token."""
        tokens = tokenize("loop1")
        assert [t.type for t in tokens] == [TokenType.TEXT, TokenType.DECIMAL]
        assert tokens[0].value == "loop"
        assert tokens[1].value == 1

    def test_delimiters(self):
        """Each delimiter is its own token."""
        assert types("(),:#") == [
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.COMMA,
            TokenType.COLON,
            TokenType.HASH,
        ]

    def test_newline(self):
        """Line breaks produce NEWLINE tokens."""
        assert types("NOP\nRTS") == [TokenType.TEXT, TokenType.NEWLINE, TokenType.TEXT]


# =============================================================================
# Number Format Tests
# =============================================================================

class TestNumberFormats:
    """Test numeric literal recognition and width classification."""

    def test_decimal(self):
        """Decimal literals produce DECIMAL tokens."""
        tokens = tokenize("123")
        assert tokens[0].type == TokenType.DECIMAL
        assert tokens[0].value == 123

    def test_decimal_limits(self):
        """Decimal literals cover 0 through 255."""
        assert tokenize("0")[0].value == 0
        assert tokenize("255")[0].value == 255

    def test_hex_one_digit_is_8_bit(self):
        """One hex digit is an 8-bit literal."""
        tokens = tokenize("$F")
        assert tokens[0].type == TokenType.HEX8
        assert tokens[0].value == 0x0F

    def test_hex_two_digits_is_8_bit(self):
        """Two hex digits are an 8-bit literal."""
        tokens = tokenize("$ff")
        assert tokens[0].type == TokenType.HEX8
        assert tokens[0].value == 0xFF

    def test_hex_three_digits_is_16_bit(self):
        """Three hex digits are a 16-bit literal."""
        tokens = tokenize("$200")
        assert tokens[0].type == TokenType.HEX16
        assert tokens[0].value == 0x200

    def test_hex_four_digits_is_16_bit(self):
        """Four hex digits are a 16-bit literal."""
        tokens = tokenize("$BEEF")
        assert tokens[0].type == TokenType.HEX16
        assert tokens[0].value == 0xBEEF

    def test_width_follows_digit_count_not_value(self):
        """$0040 is a 16-bit literal even though its value fits in 8 bits."""
        tokens = tokenize("$0040")
        assert tokens[0].type == TokenType.HEX16
        assert tokens[0].value == 0x40

    def test_binary(self):
        """Binary literals produce BINARY tokens."""
        tokens = tokenize("%1010")
        assert tokens[0].type == TokenType.BINARY
        assert tokens[0].value == 0b1010

    def test_binary_eight_digits(self):
        """Eight binary digits are accepted."""
        tokens = tokenize("%11111111")
        assert tokens[0].value == 0xFF


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test comment handling."""

    def test_comment_carries_text(self):
        """Comment tokens carry the text after the semicolon."""
        tokens = tokenize("; hello world")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.SEMICOLON
        assert tokens[0].value == " hello world"

    def test_comment_after_instruction(self):
        """A comment may follow an instruction."""
        assert types("NOP ; do nothing") == [TokenType.TEXT, TokenType.SEMICOLON]

    def test_comment_stops_at_newline(self):
        """A comment ends at the line break."""
        assert types("; first\nRTS") == [
            TokenType.SEMICOLON,
            TokenType.NEWLINE,
            TokenType.TEXT,
        ]

    def test_comment_may_contain_anything(self):
        """Characters that are errors elsewhere are fine inside comments."""
        tokens = tokenize("; @!$12345 %222")
        assert tokens[0].value == " @!$12345 %222"


# =============================================================================
# Pull Interface Tests
# =============================================================================

class TestNextToken:
    """Test the one-token-at-a-time interface."""

    def test_tokens_in_order(self):
        """next_token() returns tokens left to right."""
        lexer = Lexer("LDA #$41")
        assert lexer.next_token().type == TokenType.TEXT
        assert lexer.next_token().type == TokenType.HASH
        token = lexer.next_token()
        assert token.type == TokenType.HEX8
        assert token.value == 0x41
        assert lexer.next_token().type == TokenType.EOF

    def test_eof_repeats(self):
        """EOF is returned again once input is exhausted."""
        lexer = Lexer("NOP")
        lexer.next_token()
        assert lexer.next_token().type == TokenType.EOF
        assert lexer.next_token().type == TokenType.EOF
        assert lexer.next_token().type == TokenType.EOF

    def test_tokenize_ends_with_eof(self):
        """tokenize() stops after the EOF token."""
        tokens = list(Lexer("NOP").tokenize())
        assert tokens[-1].type == TokenType.EOF

    def test_positions(self):
        """Line and column are 1-based."""
        tokens = tokenize("NOP\n  LDA $10")
        lda = tokens[2]
        assert (lda.line, lda.column) == (2, 3)
        operand = tokens[3]
        assert (operand.line, operand.column) == (2, 7)

    def test_location(self):
        """Token locations carry the filename."""
        token = Lexer("NOP", "prog.asm").next_token()
        assert str(token.location) == "prog.asm:1:1"

    def test_token_is_immutable(self):
        """Tokens are frozen."""
        token = Token(TokenType.TEXT, "NOP")
        with pytest.raises(AttributeError):
            token.value = "RTS"


# =============================================================================
# Literal Round-Trip Tests
# =============================================================================

class TestLiteralRoundTrip:
    """Rendering a literal's value back to text and re-lexing is stable."""

    @pytest.mark.parametrize("value", [0, 1, 99, 255])
    def test_decimal(self, value):
        """Decimal values re-lex to the same token."""
        token = tokenize(str(value))[0]
        assert tokenize(str(token.value))[0] == token

    @pytest.mark.parametrize("text", ["$0", "$7F", "$FF"])
    def test_hex8(self, text):
        """8-bit hex values re-lex to the same token."""
        token = tokenize(text)[0]
        assert token.type == TokenType.HEX8
        assert tokenize(f"${token.value:02X}")[0] == token

    @pytest.mark.parametrize("text", ["$100", "$0200", "$FFFF"])
    def test_hex16(self, text):
        """16-bit hex values re-lex to the same token."""
        token = tokenize(text)[0]
        assert token.type == TokenType.HEX16
        assert tokenize(f"${token.value:04X}")[0] == token

    @pytest.mark.parametrize("text", ["%0", "%101", "%11111111"])
    def test_binary(self, text):
        """Binary values re-lex to the same token."""
        token = tokenize(text)[0]
        assert tokenize(f"%{token.value:b}")[0] == token


# =============================================================================
# Error Tests
# =============================================================================

class TestLexerErrors:
    """Test lexical error conditions."""

    def test_hex_too_long(self):
        """Five hex digits are rejected."""
        with pytest.raises(LexicalError):
            tokenize("$12345")

    def test_hex_without_digits(self):
        """A bare dollar sign is rejected."""
        with pytest.raises(LexicalError):
            tokenize("$")

    def test_decimal_overflow(self):
        """Decimal literals above 255 are rejected."""
        with pytest.raises(LexicalError):
            tokenize("256")

    def test_binary_too_long(self):
        """More than eight binary digits are rejected."""
        with pytest.raises(LexicalError):
            tokenize("%111111111")

    def test_binary_without_digits(self):
        """A bare percent sign is rejected."""
        with pytest.raises(LexicalError):
            tokenize("%")

    def test_unknown_character(self):
        """Unknown characters are rejected with their location."""
        with pytest.raises(LexicalError) as exc_info:
            tokenize("LDA @")
        assert exc_info.value.location.column == 5
        assert "'@'" in str(exc_info.value)

    def test_lexical_error_is_syntax_error(self):
        """LexicalError is a kind of syntax error."""
        with pytest.raises(AssemblySyntaxError):
            tokenize("!")

    def test_error_shows_source_line(self):
        """Lexical errors show the offending source line."""
        with pytest.raises(LexicalError) as exc_info:
            tokenize("NOP\nLDA $12345")
        message = str(exc_info.value)
        assert "<test>:2:5" in message
        assert "LDA $12345" in message
