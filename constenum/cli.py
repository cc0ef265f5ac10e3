"""CLI interface for constenum"""

import click
import json
import sys
import yaml
from pathlib import Path
from typing import List, Optional, Tuple
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from constenum.config import VERSION, load_config
from constenum.errors import ConstantEvaluationError, SourceParseError
from constenum.generator import EnumGenerator


def _split_types(type_names: str) -> List[str]:
    types = [t.strip() for t in type_names.split(",") if t.strip()]
    if not types:
        raise click.BadParameter("at least one type name is required", param_hint="--type")
    return types


def _setup(config_path: Optional[str], verbose: bool):
    try:
        config = load_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        click.echo(f"[ERROR] Could not load config: {e}")
        sys.exit(2)

    level = "DEBUG" if verbose else config["log_level"]
    logging.getLogger().setLevel(level)
    return config


def _parse(generator: EnumGenerator, paths: Tuple[str, ...]):
    try:
        generator.parse_package(paths)
    except (SourceParseError, OSError) as e:
        click.echo(f"[ERROR] {e}")
        sys.exit(1)


@click.group()
@click.version_option(version=VERSION)
def main():
    """constenum - generate Enum() accessors for Go constant groups

    Reads a Go package, evaluates the constants declared for each named type
    (iota arithmetic included), drops values already listed, and writes a
    method returning the constants in declaration order.
    """
    pass


@main.command()
@click.option("--type", "type_names", required=True,
              help="Comma-separated list of type names (e.g. Day,Color)")
@click.option("--output", type=click.Path(),
              help="Output file (default: <dir>/<type>_enum.go)")
@click.option("--no-format", is_flag=True, default=False, help="Do not run gofmt on the output")
@click.option("--config", "config_path", type=click.Path(exists=True),
              help="YAML config file (default: ./.constenum.yaml if present)")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging")
@click.argument("paths", nargs=-1, type=click.Path(exists=True))
def generate(type_names: str, output: Optional[str], no_format: bool,
             config_path: Optional[str], verbose: bool, paths: Tuple[str, ...]):
    """Generate Enum() methods for the given types

    PATHS is a single package directory or a list of Go files
    (default: current directory).
    """
    config = _setup(config_path, verbose)
    if no_format:
        config["format"] = False

    types = _split_types(type_names)
    generator = EnumGenerator(config)
    _parse(generator, paths or (".",))

    arguments = [f"-type={type_names}"] + list(paths)
    generator.header(arguments)

    failed = []
    for type_name in types:
        try:
            result = generator.generate(type_name)
        except ConstantEvaluationError as e:
            click.echo(f"[ERROR] {type_name}: {e}")
            failed.append(type_name)
            continue

        if result.is_empty:
            click.echo(f"  {type_name}: no constants found, skipped")
        else:
            click.echo(f"  {type_name}: {len(result)} value(s)")

    output_path = Path(output) if output else generator.default_output_path(types[0])
    written = generator.write(output_path)
    if written:
        click.echo(f"\n[OK] Wrote {written}")

    if failed:
        click.echo(f"[ERROR] Generation failed for: {', '.join(failed)}")
        sys.exit(1)


@main.command()
@click.option("--type", "type_name", required=True, help="Type name to inspect")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON")
@click.option("--config", "config_path", type=click.Path(exists=True), help="YAML config file")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging")
@click.argument("paths", nargs=-1, type=click.Path(exists=True))
def inspect(type_name: str, as_json: bool, config_path: Optional[str], verbose: bool,
            paths: Tuple[str, ...]):
    """Show the resolved values for a type without writing anything"""
    config = _setup(config_path, verbose)
    generator = EnumGenerator(config)
    _parse(generator, paths or (".",))

    try:
        result = generator.generate(type_name)
    except ConstantEvaluationError as e:
        click.echo(f"[ERROR] {type_name}: {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(f"\n{'='*60}")
    click.echo(f"TYPE: {type_name} ({len(result)} value(s))")
    click.echo(f"{'='*60}")
    for constant in result:
        click.echo(f"  {constant.position_index:>4}  {constant.identifier:<24} {constant.value}")
    if result.dropped:
        click.echo("")
        click.echo("  Omitted duplicates:")
        for duplicate in result.dropped:
            click.echo(f"    {duplicate['identifier']} = {duplicate['value']} "
                       f"(same as {duplicate['duplicate_of']})")


if __name__ == "__main__":
    main()
