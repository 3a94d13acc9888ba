# =============================================================================
# test_linker.py - Symbol Indexing and Linking Tests
# =============================================================================
# Tests for the first assembly pass and label resolution.
#
# Test coverage includes:
#   - Location counter bounds
#   - Label binding, forward references, redefinition
#   - Read-only symbol table and similar-name suggestions
#   - Relative displacement and absolute address encoding
#   - Branch range handling (wrap vs. strict)
#   - Undefined labels
#   - Injected instruction-set lookups
# =============================================================================

import logging

import pytest
from asm6502.assembler.parser import parse_source
from asm6502.assembler.linker import (
    LocationCounter,
    SymbolTable,
    SymbolIndexer,
    Linker,
    resolve_instruction,
)
from asm6502.cpu import AddressingMode, InstructionInfo, get_instruction_info, lookup
from asm6502.errors import (
    AssemblerError,
    AddressingModeError,
    BranchRangeError,
    DuplicateSymbolError,
    LinkError,
    SourceLocation,
    UndefinedSymbolError,
)


def index(source: str, origin: int = 0x0600, strict: bool = False) -> SymbolTable:
    return SymbolIndexer(origin, strict=strict).index(parse_source(source))


# =============================================================================
# Location Counter Tests
# =============================================================================

class TestLocationCounter:
    """Test the 16-bit location counter."""

    def test_starts_at_origin(self):
        """A fresh counter sits at the origin."""
        counter = LocationCounter(0x0600)
        assert counter.value == 0x0600

    def test_advance(self):
        """Advancing adds the instruction size."""
        counter = LocationCounter(0x0600)
        counter.advance(3)
        counter.advance(2)
        assert counter.value == 0x0605

    def test_mark_records_addresses(self):
        """mark() appends the current address."""
        counter = LocationCounter(0x10)
        counter.mark()
        counter.advance(2)
        counter.mark()
        assert counter.addresses == [0x10, 0x12]

    def test_may_end_at_top_of_memory(self):
        """A program may fill memory up to and including $FFFF."""
        counter = LocationCounter(0xFFFD)
        counter.advance(3)
        assert counter.value == 0x10000

    def test_cannot_pass_top_of_memory(self):
        """Emitting past $FFFF is an error."""
        counter = LocationCounter(0xFFFE)
        with pytest.raises(AssemblerError) as exc_info:
            counter.advance(3)
        assert "64K" in str(exc_info.value)

    @pytest.mark.parametrize("origin", [-1, 0x10000])
    def test_origin_out_of_range(self, origin):
        """Origins outside 0-$FFFF are rejected."""
        with pytest.raises(AssemblerError):
            LocationCounter(origin)


# =============================================================================
# Symbol Indexer Tests
# =============================================================================

class TestSymbolIndexer:
    """Test the first pass."""

    def test_label_at_origin(self):
        """A leading label is bound to the origin."""
        symbols = index("myLabel:\nNOP\nJMP myLabel")
        assert symbols["myLabel"] == 0x0600

    def test_forward_reference(self):
        """Labels referenced before their definition are still bound."""
        symbols = index("JMP end\nNOP\nend:\nRTS")
        assert symbols["end"] == 0x0604

    def test_sizes_follow_addressing_modes(self):
        """Each instruction advances the counter by its encoded size."""
        source = """
            LDA #$01    ; 2 bytes
            STA $0200   ; 3 bytes
            ASL A       ; 1 byte
            LDA ($20),Y ; 2 bytes
        done:
        """
        assert index(source)["done"] == 0x0608

    def test_consecutive_labels_share_address(self):
        """Adjacent labels name the same address."""
        symbols = index("first:\nsecond:\nNOP")
        assert symbols["first"] == symbols["second"] == 0x0600

    def test_labels_are_case_sensitive(self):
        """'loop' and 'Loop' are different labels."""
        symbols = index("loop:\nNOP\nLoop:\nNOP")
        assert symbols["loop"] == 0x0600
        assert symbols["Loop"] == 0x0601

    def test_redefinition_last_write_wins(self, caplog):
        """Redefinition overwrites the binding and logs a warning."""
        with caplog.at_level(logging.WARNING):
            symbols = index("dup:\nNOP\ndup:\nNOP")
        assert symbols["dup"] == 0x0601
        assert "redefined" in caplog.text

    def test_redefinition_strict(self):
        """Strict mode reports both definitions."""
        with pytest.raises(DuplicateSymbolError) as exc_info:
            index("dup:\nNOP\ndup:\nNOP", strict=True)
        assert exc_info.value.location.line == 3
        assert exc_info.value.original_location.line == 1

    def test_unknown_mode_fails_during_indexing(self):
        """An instruction with no encoding fails in the first pass."""
        with pytest.raises(AddressingModeError):
            index("STA #$41")

    def test_unknown_mode_error_is_located(self):
        """Lookup errors carry the offending instruction's location."""
        with pytest.raises(AddressingModeError) as exc_info:
            index("NOP\n  STA #$41")
        assert exc_info.value.location.line == 2
        assert exc_info.value.location.column == 3
        assert str(exc_info.value).startswith("<input>:2:3: error:")

    def test_label_beyond_address_space(self):
        """A label may not be bound at $10000."""
        with pytest.raises(AssemblerError):
            index("NOP\nend:", origin=0xFFFF)

    def test_program_beyond_address_space(self):
        """A program may not run past $FFFF."""
        with pytest.raises(AssemblerError):
            index("NOP\nNOP", origin=0xFFFF)

    def test_counter_records_every_statement(self):
        """The indexer's counter records one address per statement."""
        indexer = SymbolIndexer(0x0600)
        indexer.index(parse_source("start:\nLDA #$01\nRTS"))
        assert indexer.counter.addresses == [0x0600, 0x0600, 0x0602]
        assert indexer.counter.value == 0x0603

    def test_custom_instruction_set(self):
        """Any (mnemonic, mode) lookup can stand in for the 6502 table."""
        def everything_is_four_bytes(mnemonic, mode):
            return InstructionInfo(0xFF, mode, 4, 1)

        indexer = SymbolIndexer(0, isa=everything_is_four_bytes)
        symbols = indexer.index(parse_source("NOP\nNOP\nend:"))
        assert symbols["end"] == 8

    def test_two_argument_lookup(self):
        """A plain two-argument lookup function is accepted."""
        indexer = SymbolIndexer(0x0600, isa=lambda m, mode: lookup(m, mode))
        symbols = indexer.index(parse_source("NOP\nJMP end\nend:"))
        assert symbols["end"] == 0x0604


# =============================================================================
# Instruction Resolution Tests
# =============================================================================

class TestResolveInstruction:
    """Test looking up an instruction through an injected lookup."""

    def test_returns_lookup_result(self):
        """The lookup's answer is returned unchanged."""
        inst = parse_source("LDA #$01")[0]
        assert resolve_instruction(lookup, inst).opcode == 0xA9

    def test_lookup_called_with_two_arguments(self):
        """The lookup receives only the mnemonic and the addressing mode."""
        calls = []

        def recording(mnemonic, mode):
            calls.append((mnemonic, mode))
            return get_instruction_info(mnemonic, mode)

        inst = parse_source("ldx $10,Y")[0]
        resolve_instruction(recording, inst)
        assert calls == [("ldx", AddressingMode.ZERO_PAGE_Y)]

    def test_error_gains_location(self):
        """An unlocated lookup error is tagged with the instruction's location."""
        inst = parse_source("\n\n   BNE #$01", filename="prog.asm")[0]
        with pytest.raises(AddressingModeError) as exc_info:
            resolve_instruction(lookup, inst)
        assert exc_info.value.location == SourceLocation("prog.asm", 3, 4)

    def test_existing_location_is_kept(self):
        """A lookup that already located its error keeps that location."""
        elsewhere = SourceLocation("table.inc", 7, 1)

        def failing(mnemonic, mode):
            raise AssemblerError("no such instruction", elsewhere)

        inst = parse_source("NOP")[0]
        with pytest.raises(AssemblerError) as exc_info:
            resolve_instruction(failing, inst)
        assert exc_info.value.location == elsewhere


# =============================================================================
# Symbol Table Tests
# =============================================================================

class TestSymbolTable:
    """Test the read-only symbol table."""

    def test_is_read_only(self):
        """Item assignment is refused."""
        symbols = SymbolTable({"start": 0x0600})
        with pytest.raises(TypeError):
            symbols["start"] = 0

    def test_does_not_alias_source_dict(self):
        """Later changes to the source dict do not leak in."""
        addresses = {"start": 0x0600}
        symbols = SymbolTable(addresses)
        addresses["start"] = 0
        assert symbols["start"] == 0x0600

    def test_mapping_interface(self):
        """The table behaves as a read-only mapping."""
        symbols = SymbolTable({"a": 1, "b": 2})
        assert len(symbols) == 2
        assert "a" in symbols
        assert dict(symbols) == {"a": 1, "b": 2}

    def test_location_of(self):
        """The indexer records where each label was last defined."""
        symbols = index("NOP\nhere:\nNOP\nhere:")
        assert symbols.location_of("here").line == 4
        assert symbols.location_of("missing") is None

    def test_similar_names(self):
        """Typos and case differences are suggested."""
        symbols = SymbolTable({"draw": 0x10, "loop": 0x20})
        assert symbols.similar("drwa") == ["draw"]
        assert symbols.similar("LOOP") == ["loop"]
        assert symbols.similar("xyzzy") == []


# =============================================================================
# Linker Tests
# =============================================================================

class TestLinker:
    """Test resolving label references to operand bytes."""

    BNE = lookup("BNE", AddressingMode.RELATIVE)
    JMP = lookup("JMP", AddressingMode.RELATIVE)

    def test_backward_branch(self):
        """Backward displacements are negative two's complement."""
        linker = Linker(SymbolTable({"loop": 0x0600}))
        # Displacement is measured from the byte after the branch
        assert linker.link("loop", self.BNE, 0x0610) == bytes([0xEE])

    def test_forward_branch(self):
        """Forward displacements are positive."""
        linker = Linker(SymbolTable({"done": 0x0620}))
        assert linker.link("done", self.BNE, 0x0600) == bytes([0x1E])

    def test_branch_to_self(self):
        """A branch to itself encodes $FE."""
        linker = Linker(SymbolTable({"here": 0x0600}))
        assert linker.link("here", self.BNE, 0x0600) == bytes([0xFE])

    @pytest.mark.parametrize("target, current", [
        (0x0600, 0x0680),
        (0x0700, 0x0600),
        (0x0000, 0xFFF0),
    ])
    def test_displacement_formula(self, target, current):
        """Displacement is (target - (address + 2)) modulo 256."""
        linker = Linker(SymbolTable({"t": target}))
        expected = (target - (current + 2)) % 256
        assert linker.link("t", self.BNE, current) == bytes([expected])

    def test_out_of_range_branch_wraps(self, caplog):
        """Out-of-range branches wrap and log a warning."""
        linker = Linker(SymbolTable({"far": 0x0700}))
        with caplog.at_level(logging.WARNING):
            assert linker.link("far", self.BNE, 0x0600) == bytes([0xFE])
        assert "out of range" in caplog.text

    def test_out_of_range_branch_strict(self):
        """Strict mode rejects out-of-range branches."""
        linker = Linker(SymbolTable({"far": 0x0700}), strict=True)
        with pytest.raises(BranchRangeError) as exc_info:
            linker.link("far", self.BNE, 0x0600)
        assert exc_info.value.offset == 254

    def test_range_limits_accepted_in_strict_mode(self):
        """-128 and +127 are both in range."""
        linker = Linker(SymbolTable({"fwd": 0x0600 + 2 + 127, "back": 0x0600 + 2 - 128}), strict=True)
        assert linker.link("fwd", self.BNE, 0x0600) == bytes([0x7F])
        assert linker.link("back", self.BNE, 0x0600) == bytes([0x80])

    def test_absolute_little_endian(self):
        """Absolute targets are emitted low byte first."""
        linker = Linker(SymbolTable({"target": 0xAABB}))
        assert linker.link("target", self.JMP, 0x0600) == bytes([0xBB, 0xAA])

    def test_other_mode_is_link_error(self):
        """Only relative and absolute modes can take a label."""
        linker = Linker(SymbolTable({"value": 0x10}))
        immediate = lookup("LDA", AddressingMode.IMMEDIATE)
        with pytest.raises(LinkError):
            linker.link("value", immediate, 0x0600)

    def test_undefined_label(self):
        """Undefined labels are reported with suggestions."""
        linker = Linker(SymbolTable({"loop": 0x0600}))
        with pytest.raises(UndefinedSymbolError) as exc_info:
            linker.link("lop", self.BNE, 0x0600)
        error = exc_info.value
        assert error.symbol == "lop"
        assert error.similar_symbols == ["loop"]
        assert "did you mean 'loop'?" in str(error)
