"""Enum Generator

Orchestrates the pipeline for a Go package:
parse -> collect(type) -> resolve -> emit -> gofmt -> write
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
import logging

from constenum.config import get_config
from constenum.static_analysis import (
    GoSourceParser, ParsedGoPackage, DeclarationCollector, ValueResolver, EnumerationResult,
)
from constenum.generation import CodeGenerator, GoFormatter

logger = logging.getLogger(__name__)


class EnumGenerator:
    """
    Generate Enum() accessors for the types of one Go package.

    Output accumulates in a buffer: header() once, then generate() per type,
    then format() or write().
    """

    def __init__(self, config: Optional[Dict] = None):
        self.config = config if config is not None else get_config()
        self.parser = GoSourceParser()
        self.collector = DeclarationCollector()
        self.code_generator = CodeGenerator()
        self.formatter = GoFormatter(self.config.get("gofmt_path"))

        self.package: Optional[ParsedGoPackage] = None
        self.input_files: List[Path] = []
        self.buffer: List[str] = []
        self.generated_types: List[str] = []

    def parse_package(self, paths: Iterable[Union[str, Path]]) -> ParsedGoPackage:
        """Parse the files (or the single directory) making up the package"""
        paths = list(paths)
        self.input_files = self.parser.discover_files(paths)
        self.package = self.parser.parse_package(self.input_files)
        logger.info(f"Package {self.package.name}: {len(self.package.const_blocks)} const block(s)")
        return self.package

    def header(self, arguments: List[str]):
        """Write the generated-code marker and package clause"""
        self._require_package()
        command = " ".join(["constenum"] + list(arguments))
        self.buffer.append(f'// Code generated by "{command}"; DO NOT EDIT.\n')
        self.buffer.append("\n")
        self.buffer.append(f"package {self.package.name}\n")

    def generate(self, type_name: str) -> EnumerationResult:
        """
        Append the accessor for type_name to the buffer.

        Returns:
            EnumerationResult for the type (empty when no constants match)

        Raises:
            ConstantEvaluationError: generation for this type failed; the
                buffer is left untouched
        """
        self._require_package()
        logger.info(f"Generating {self.code_generator.method_name}() for type {type_name}")

        blocks = self.collector.collect(self.package, type_name)
        if not blocks:
            return EnumerationResult(type_name=type_name)

        resolver = ValueResolver(
            symbols=self.collector.scope(self.package),
            types=self.collector.integer_types(self.package)
        )
        result = resolver.resolve(blocks)

        for duplicate in result.dropped:
            logger.info(
                f"  {duplicate['identifier']} has the same value as "
                f"{duplicate['duplicate_of']} ({duplicate['value']}); omitted"
            )

        text = self.code_generator.emit(result, type_name)
        if text:
            self.buffer.append(text)
            self.generated_types.append(type_name)
        return result

    @property
    def has_output(self) -> bool:
        return bool(self.generated_types)

    def source(self) -> str:
        return "".join(self.buffer)

    def format(self) -> str:
        """Buffer contents, run through gofmt when enabled"""
        source = self.source()
        if not self.config.get("format", True):
            return source
        return self.formatter.format(source)

    def default_output_path(self, type_name: str) -> Path:
        """<dir of first input>/<lowercased type><suffix>"""
        directory = self.input_files[0].parent if self.input_files else Path(".")
        suffix = self.config.get("output_suffix", "_enum.go")
        return directory / f"{type_name.lower()}{suffix}"

    def write(self, output_path: Union[str, Path]) -> Optional[Path]:
        """
        Write the formatted buffer.

        Returns:
            The path written, or None when no type produced output
        """
        if not self.has_output:
            logger.warning("No enumerated values found; no file written")
            return None

        output_path = Path(output_path)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.format())
        logger.info(f"Wrote {output_path}")
        return output_path

    def _require_package(self):
        if self.package is None:
            raise RuntimeError("parse_package() must be called first")
