"""
Unit Tests for the Disassembler Module
======================================

Tests for the CHIP-8 disassembler and the chip8dis command.

Test coverage includes:
- Every instruction family and its Cowgod mnemonic
- Unknown words listed as DW data
- Listing format, JSON conversion and odd-length images
- The chip8dis command-line interface
"""

import json

import pytest
from chip8_vm.cpu import decode_word
from chip8_vm.disassembler import Chip8Disassembler, DisassembledInstruction, format_instruction


# =============================================================================
# Mnemonic Tests
# =============================================================================

class TestMnemonics:
    """Each instruction family maps to the expected mnemonic and operands."""

    @pytest.mark.parametrize("word,mnemonic,operands", [
        (0x00E0, "CLS", ""),
        (0x00EE, "RET", ""),
        (0x1234, "JP", "$234"),
        (0x2ABC, "CALL", "$ABC"),
        (0x3A42, "SE", "VA, $42"),
        (0x4B07, "SNE", "VB, $07"),
        (0x5120, "SE", "V1, V2"),
        (0x6F10, "LD", "VF, $10"),
        (0x7301, "ADD", "V3, $01"),
        (0x8120, "LD", "V1, V2"),
        (0x8121, "OR", "V1, V2"),
        (0x8122, "AND", "V1, V2"),
        (0x8123, "XOR", "V1, V2"),
        (0x8124, "ADD", "V1, V2"),
        (0x8125, "SUB", "V1, V2"),
        (0x8126, "SHR", "V1"),
        (0x8127, "SUBN", "V1, V2"),
        (0x812E, "SHL", "V1"),
        (0x9120, "SNE", "V1, V2"),
        (0xA123, "LD", "I, $123"),
        (0xB200, "JP", "V0, $200"),
        (0xC3FF, "RND", "V3, $FF"),
        (0xD12F, "DRW", "V1, V2, 15"),
        (0xE59E, "SKP", "V5"),
        (0xE5A1, "SKNP", "V5"),
        (0xF207, "LD", "V2, DT"),
        (0xF20A, "LD", "V2, K"),
        (0xF215, "LD", "DT, V2"),
        (0xF218, "LD", "ST, V2"),
        (0xF21E, "ADD", "I, V2"),
        (0xF229, "LD", "F, V2"),
        (0xF233, "LD", "B, V2"),
        (0xF255, "LD", "[I], V2"),
        (0xF265, "LD", "V2, [I]"),
    ])
    def test_instruction(self, word, mnemonic, operands):
        assert format_instruction(decode_word(word)) == (mnemonic, operands)

    @pytest.mark.parametrize("word", [0x0000, 0x0123, 0x5121, 0x8128, 0x912F, 0xE000, 0xF0FF])
    def test_invalid_words(self, word):
        assert format_instruction(decode_word(word)) is None


# =============================================================================
# Disassembler Tests
# =============================================================================

class TestChip8Disassembler:
    """Tests for listing whole images."""

    def setup_method(self):
        self.disasm = Chip8Disassembler()

    def test_disassemble_one(self):
        instr = self.disasm.disassemble_one(bytes([0x12, 0x00]), address=0x200)
        assert isinstance(instr, DisassembledInstruction)
        assert instr.mnemonic == "JP"
        assert instr.operand_str == "$200"
        assert instr.word == 0x1200
        assert instr.raw_bytes == b"\x12\x00"
        assert not instr.is_data

    def test_str_format(self):
        instr = self.disasm.disassemble_one(bytes([0x12, 0x00]), address=0x200)
        assert str(instr) == "$200: 12 00  JP $200"

    def test_str_without_operands(self):
        instr = self.disasm.disassemble_one(bytes([0x00, 0xE0]), address=0x200)
        assert str(instr) == "$200: 00 E0  CLS"

    def test_unknown_word_is_data(self):
        instr = self.disasm.disassemble_one(bytes([0xFF, 0xFF]))
        assert instr.is_data
        assert instr.mnemonic == "DW"
        assert instr.operand_str == "$FFFF"

    def test_disassemble_addresses(self):
        listing = self.disasm.disassemble(bytes([0x00, 0xE0, 0x12, 0x00, 0xF0, 0x90]))
        assert [i.address for i in listing] == [0x200, 0x202, 0x204]
        assert [i.mnemonic for i in listing] == ["CLS", "JP", "DW"]

    def test_custom_start_address(self):
        listing = self.disasm.disassemble(bytes([0x00, 0xEE]), start_address=0x300)
        assert listing[0].address == 0x300

    def test_addresses_wrap_at_top_of_memory(self):
        """Listings past $FFF continue at $000, like the program counter."""
        listing = self.disasm.disassemble(bytes(8), start_address=0xFFC)
        assert [i.address for i in listing] == [0xFFC, 0xFFE, 0x000, 0x002]

    def test_count(self):
        listing = self.disasm.disassemble(bytes(20), count=3)
        assert len(listing) == 3

    def test_odd_length_padded(self):
        listing = self.disasm.disassemble(bytes([0x00, 0xE0, 0x12]))
        assert len(listing) == 2
        assert listing[1].word == 0x1200
        assert listing[1].raw_bytes == b"\x12\x00"

    def test_empty(self):
        assert self.disasm.disassemble(b"") == []

    def test_to_dict(self):
        instr = self.disasm.disassemble_one(bytes([0xA1, 0x23]), address=0x204)
        d = instr.to_dict()
        assert d["address"] == "$204"
        assert d["address_int"] == 0x204
        assert d["word"] == "$A123"
        assert d["mnemonic"] == "LD"
        assert d["operand"] == "I, $123"
        assert d["bytes"] == ["$A1", "$23"]


# =============================================================================
# CLI Tests
# =============================================================================

class TestChip8disCLI:
    """Tests for the chip8dis command."""

    def test_cli_help(self):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Disassemble a CHIP-8 program image" in result.output

    def test_cli_version(self):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_cli_basic_disassembly(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xE0, 0x12, 0x02]))

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file)])

        assert result.exit_code == 0
        assert "; Disassembly of test.ch8" in result.output
        assert "$200: 00 E0  CLS" in result.output
        assert "$202: 12 02  JP $202" in result.output

    def test_cli_with_address(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xEE]))

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "--address", "$300"])

        assert result.exit_code == 0
        assert "$300: 00 EE  RET" in result.output

    def test_cli_address_wraps(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xE0]) * 20)

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "-a", "0xFF0"])

        assert result.exit_code == 0
        assert "$FFE: 00 E0  CLS" in result.output
        assert "$004: 00 E0  CLS" in result.output
        assert "$1000" not in result.output

    @pytest.mark.parametrize("address", ["zzz", "0x1000", "5000"])
    def test_cli_invalid_address(self, tmp_path, address):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xEE]))

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "-a", address])

        assert result.exit_code == 2
        assert "address" in result.output

    def test_cli_count(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xE0]) * 10)

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "-n", "3"])

        assert result.exit_code == 0
        assert result.output.count("CLS") == 3

    def test_cli_json(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x60, 0x2A, 0xFF, 0xFF]))

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["size"] == 4
        assert data["address"] == 0x200
        assert [i["mnemonic"] for i in data["instructions"]] == ["LD", "DW"]

    def test_cli_output_file(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xE0]))
        out_file = tmp_path / "test.lst"

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "-o", str(out_file)])

        assert result.exit_code == 0
        assert "CLS" in out_file.read_text(encoding="utf-8")

    def test_cli_empty_file(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        test_file = tmp_path / "empty.ch8"
        test_file.write_bytes(b"")

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file)])

        assert result.exit_code == 2
        assert "empty" in result.output

    def test_cli_missing_file(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8dis import main

        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "missing.ch8")])

        assert result.exit_code == 2
