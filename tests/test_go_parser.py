"""Test Go Source Parser

Tests tokenization, const/type declaration extraction and expression trees.
"""

from pathlib import Path
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from constenum.errors import SourceParseError
from constenum.static_analysis.go_parser import GoSourceParser, parse_int_literal, decode_rune
from constenum.static_analysis.expressions import (
    IntegerLiteral, Literal, CounterReference, IdentifierReference,
    UnaryOperation, BinaryOperation, Conversion, Call,
)


def parse(source):
    """Helper to parse a source fragment with a package clause"""
    return GoSourceParser().parse_source("package test\n" + source)


def only_expression(source):
    """Helper returning the single initializer of `const X = <source>`"""
    parsed = parse(f"const X = {source}\n")
    return parsed.const_blocks[0].specs[0].expressions[0]


class TestTokenizer:
    """Tokenization and semicolon insertion"""

    def test_newline_after_identifier_ends_statement(self):
        tokens = GoSourceParser().tokenize("A = 1\nB\n")
        assert [t.kind for t in tokens] == ["ident", "op", "int", "semi", "ident", "semi"]

    def test_newline_after_operator_continues_expression(self):
        tokens = GoSourceParser().tokenize("A = 1 +\n2\n")
        assert [t.text for t in tokens if t.kind != "semi"] == ["A", "=", "1", "+", "2"]
        assert sum(1 for t in tokens if t.kind == "semi") == 1

    def test_comments_are_dropped(self):
        tokens = GoSourceParser().tokenize("A // one; two\nB /* inline */\n/* multi\nline */ C\n")
        assert [t.text for t in tokens if t.kind == "ident"] == ["A", "B", "C"]

    def test_line_numbers(self):
        tokens = GoSourceParser().tokenize("A\n\n/* x\ny */\nB\n")
        b = [t for t in tokens if t.text == "B"][0]
        assert b.line == 5

    def test_number_kinds(self):
        tokens = GoSourceParser().tokenize("1 0x1E 1.5 1e3 2i 'a' \"s\" `raw`")
        assert [t.kind for t in tokens[:-1]] == [
            "int", "int", "float", "float", "imag", "char", "string", "string"
        ]

    def test_unexpected_character(self):
        with pytest.raises(SourceParseError):
            GoSourceParser().tokenize("A = 1 # 2\n")


class TestDeclarations:
    """Package, type and const declarations"""

    def test_package_name(self):
        assert parse("").package_name == "test"

    def test_missing_package_clause(self):
        with pytest.raises(SourceParseError):
            GoSourceParser().parse_source("const A = 1\n")

    def test_grouped_const_block(self):
        parsed = parse("type Day int\nconst (\n\tMonday Day = iota\n\tTuesday\n\tWednesday\n)\n")
        assert len(parsed.const_blocks) == 1
        specs = parsed.const_blocks[0].specs
        assert [s.names for s in specs] == [["Monday"], ["Tuesday"], ["Wednesday"]]
        assert specs[0].type_name == "Day"
        assert isinstance(specs[0].expressions[0], CounterReference)
        assert not specs[1].has_values
        assert specs[1].type_name is None

    def test_single_const_declarations_are_separate_blocks(self):
        parsed = parse("const A = 1\nconst B = 2\n")
        assert len(parsed.const_blocks) == 2
        assert not parsed.const_blocks[0].grouped

    def test_single_line_group(self):
        parsed = parse("const ( A = 1; B = 2 )\n")
        assert [s.names[0] for s in parsed.const_blocks[0].specs] == ["A", "B"]

    def test_comments_and_blank_lines_inside_block(self):
        parsed = parse(
            "const (\n"
            "\tAnd Token = iota // &\n"
            "\tOr // |\n"
            "\n"
            "\t// not to be used\n"
            "\tSingleBefore\n"
            "\tInlineGeneral /* inline general */\n"
            ")\n"
        )
        names = [s.names[0] for s in parsed.const_blocks[0].specs]
        assert names == ["And", "Or", "SingleBefore", "InlineGeneral"]

    def test_multi_name_spec(self):
        spec = parse("const A, B = 1, 2\n").const_blocks[0].specs[0]
        assert spec.names == ["A", "B"]
        assert [e.value for e in spec.expressions] == [1, 2]

    def test_name_value_count_mismatch(self):
        with pytest.raises(SourceParseError):
            parse("const A, B = 1\n")

    def test_type_without_value(self):
        with pytest.raises(SourceParseError):
            parse("const (\n\tA Day = 1\n\tB Day\n)\n")

    def test_qualified_type(self):
        spec = parse("const A time.Duration = 1\n").const_blocks[0].specs[0]
        assert spec.type_name == "time.Duration"

    def test_type_declarations(self):
        parsed = parse("type Day int\ntype (\n\tSmall uint8\n\tAlias = Small\n\tS struct{ x int }\n)\n")
        assert parsed.type_specs["Day"] == "int"
        assert parsed.type_specs["Small"] == "uint8"
        assert parsed.type_specs["Alias"] == "Small"
        assert parsed.type_specs["S"].startswith("struct")

    def test_functions_and_imports_are_skipped(self):
        parsed = parse(
            'import (\n\t"fmt"\n)\n'
            "var x = map[int]string{1: \"a\"}\n"
            "func (d Day) String() string {\n"
            "\tconst local = 5\n"
            "\tswitch d {\n\tcase 1:\n\t\treturn fmt.Sprint(d)\n\t}\n"
            '\treturn ""\n'
            "}\n"
            "const After = 3\n"
        )
        assert len(parsed.const_blocks) == 1
        assert parsed.const_blocks[0].specs[0].names == ["After"]


class TestExpressions:
    """Expression trees and literals"""

    def test_precedence(self):
        expression = only_expression("1 + 2*3")
        assert isinstance(expression, BinaryOperation)
        assert expression.op == "+"
        assert isinstance(expression.right, BinaryOperation)
        assert str(expression) == "(1 + (2 * 3))"

    def test_left_associative(self):
        assert str(only_expression("10 - 3 - 2")) == "((10 - 3) - 2)"

    def test_shift_binds_like_multiplication(self):
        assert str(only_expression("1 << iota + 1")) == "((1 << iota) + 1)"

    def test_parentheses(self):
        assert str(only_expression("(iota + 1) * 10")) == "((iota + 1) * 10)"

    def test_unary(self):
        expression = only_expression("-2 + iota")
        assert isinstance(expression.left, UnaryOperation)
        assert expression.left.op == "-"

    def test_conversion_and_call(self):
        assert isinstance(only_expression("Day(3)"), Conversion)
        assert isinstance(only_expression('len("abc")'), Call)
        assert isinstance(only_expression("unsafe.Sizeof(x)"), Call)

    def test_identifier_and_literals(self):
        assert only_expression("Other") == IdentifierReference("Other")
        assert only_expression("1.5") == Literal("1.5", "float")
        assert only_expression("'a'") == IntegerLiteral(97, "'a'")

    def test_int_literal_forms(self):
        assert parse_int_literal("42") == 42
        assert parse_int_literal("0x1F") == 31
        assert parse_int_literal("0o17") == 15
        assert parse_int_literal("017") == 15
        assert parse_int_literal("0b101") == 5
        assert parse_int_literal("1_000") == 1000
        assert parse_int_literal("0") == 0

    def test_rune_literals(self):
        assert decode_rune("'a'") == 97
        assert decode_rune(r"'\n'") == 10
        assert decode_rune(r"'\x41'") == 65
        assert decode_rune(r"'é'") == 233
        assert decode_rune(r"'\101'") == 65
        assert decode_rune(r"'\''") == 39

    def test_invalid_octal_literal(self):
        with pytest.raises(SourceParseError):
            parse("const A = 09\n")


class TestPackages:
    """File discovery and package assembly"""

    def test_directory_expands_to_go_files(self, tmp_path):
        (tmp_path / "b.go").write_text("package p\nconst B = 2\n")
        (tmp_path / "a.go").write_text("package p\nconst A = 1\n")
        (tmp_path / "a_test.go").write_text("package p\nconst T = 9\n")
        (tmp_path / "notes.txt").write_text("ignored")

        package = GoSourceParser().parse_package([tmp_path])

        assert package.name == "p"
        names = [b.specs[0].names[0] for b in package.const_blocks]
        assert names == ["A", "B"]

    def test_files_keep_given_order(self, tmp_path):
        (tmp_path / "a.go").write_text("package p\nconst A = 1\n")
        (tmp_path / "b.go").write_text("package p\nconst B = 2\n")

        package = GoSourceParser().parse_package([tmp_path / "b.go", tmp_path / "a.go"])

        assert [b.specs[0].names[0] for b in package.const_blocks] == ["B", "A"]

    def test_mixed_packages(self, tmp_path):
        (tmp_path / "a.go").write_text("package p\n")
        (tmp_path / "b.go").write_text("package q\n")
        with pytest.raises(SourceParseError):
            GoSourceParser().parse_package([tmp_path])

    def test_empty_directory(self, tmp_path):
        with pytest.raises(SourceParseError):
            GoSourceParser().parse_package([tmp_path])
