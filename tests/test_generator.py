"""Test Enum Generator and CLI

End-to-end: Go package on disk -> generated file.
"""

from pathlib import Path
import json
import sys

import pytest
from click.testing import CliRunner

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from constenum.cli import main
from constenum.errors import MalformedExpressionError
from constenum.generator import EnumGenerator


PACKAGE_SOURCE = """package colors

import "fmt"

type Color int

const (
	Red Color = iota
	Green
	Blue
	Crimson = Red
)

type Broken int

const Bad Broken = 1.5

func (c Color) String() string {
	return fmt.Sprintf("Color(%d)", int(c))
}
"""


@pytest.fixture
def package_dir(tmp_path):
    """A one-file Go package"""
    (tmp_path / "colors.go").write_text(PACKAGE_SOURCE)
    return tmp_path


class TestEnumGenerator:
    """EnumGenerator orchestration"""

    def test_header_and_accessor(self, package_dir):
        generator = EnumGenerator({"format": False})
        generator.parse_package([package_dir])
        generator.header(["-type=Color"])
        result = generator.generate("Color")

        source = generator.source()
        assert result.identifiers == ["Red", "Green", "Blue"]
        assert source.startswith('// Code generated by "constenum -type=Color"; DO NOT EDIT.\n\npackage colors\n')
        assert "func (Color) Enum() []interface{} {" in source
        assert "Crimson" not in source

    def test_failed_type_leaves_buffer_untouched(self, package_dir):
        generator = EnumGenerator({"format": False})
        generator.parse_package([package_dir])
        generator.generate("Color")
        before = generator.source()

        with pytest.raises(MalformedExpressionError) as excinfo:
            generator.generate("Broken")

        assert excinfo.value.identifier == "Bad"
        assert generator.source() == before
        assert generator.generated_types == ["Color"]

    def test_not_found_writes_nothing(self, package_dir):
        generator = EnumGenerator({"format": False})
        generator.parse_package([package_dir])
        generator.header([])
        result = generator.generate("Missing")

        assert result.is_empty
        assert result.type_name == "Missing"
        assert not generator.has_output
        assert generator.write(package_dir / "missing_enum.go") is None
        assert not (package_dir / "missing_enum.go").exists()

    def test_default_output_path(self, package_dir):
        generator = EnumGenerator({"format": False, "output_suffix": "_enum.go"})
        generator.parse_package([package_dir])

        assert generator.default_output_path("Color") == package_dir / "color_enum.go"

    def test_generate_before_parse(self):
        with pytest.raises(RuntimeError):
            EnumGenerator({"format": False}).generate("Color")


class TestCLI:
    """constenum command line"""

    def test_generate_writes_file(self, package_dir):
        runner = CliRunner()
        result = runner.invoke(main, ["generate", "--type", "Color", "--no-format", str(package_dir)])

        assert result.exit_code == 0, result.output
        written = (package_dir / "color_enum.go").read_text()
        assert "package colors" in written
        assert "\t\tRed,\n\t\tGreen,\n\t\tBlue,\n" in written
        assert "[OK] Wrote" in result.output

    def test_generate_with_explicit_output(self, package_dir, tmp_path):
        output = tmp_path / "out.go"
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", "--type", "Color", "--no-format", "--output", str(output), str(package_dir)
        ])

        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_failing_type_does_not_stop_others(self, package_dir):
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", "--type", "Broken,Color", "--no-format", str(package_dir)
        ])

        assert result.exit_code == 1
        assert "[ERROR] Broken" in result.output
        written = (package_dir / "broken_enum.go").read_text()
        assert "func (Color) Enum()" in written
        assert "func (Broken)" not in written

    def test_inspect_json(self, package_dir):
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", "--type", "Color", "--json", str(package_dir)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output[result.output.index("{"):])
        assert [c["identifier"] for c in data["constants"]] == ["Red", "Green", "Blue"]
        assert data["dropped"] == [{"identifier": "Crimson", "value": 0, "duplicate_of": "Red"}]

    def test_inspect_table(self, package_dir):
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", "--type", "Color", str(package_dir)])

        assert result.exit_code == 0, result.output
        assert "TYPE: Color (3 value(s))" in result.output
        assert "Crimson = 0 (same as Red)" in result.output

    def test_parse_error(self, tmp_path):
        (tmp_path / "bad.go").write_text("const A = 1\n")
        runner = CliRunner()
        result = runner.invoke(main, ["generate", "--type", "A", str(tmp_path)])

        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_config_file(self, package_dir, tmp_path):
        config = tmp_path / "constenum.yaml"
        config.write_text("output_suffix: _values.go\nformat: false\n")
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", "--type", "Color", "--config", str(config), str(package_dir)
        ])

        assert result.exit_code == 0, result.output
        assert (package_dir / "color_values.go").exists()
