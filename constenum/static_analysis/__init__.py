"""Static Analysis Module for Go Constant Groups

- GoSourceParser: package, type and const declarations from Go source
- DeclarationCollector: const blocks declaring a requested type
- ValueResolver: constant values, deduplicated in declaration order
"""

from typing import Dict, List, Optional

from .go_parser import GoSourceParser, ParsedGoPackage, ParsedGoFile, ConstBlock, ConstSpec
from .declaration_collector import DeclarationCollector, ConstantDeclarationBlock, ConstantEntry
from .value_resolver import ValueResolver, EnumerationResult, ResolvedConstant


def collect(package: ParsedGoPackage, type_name: str) -> List[ConstantDeclarationBlock]:
    """Const blocks of package that declare constants of type_name"""
    return DeclarationCollector().collect(package, type_name)


def resolve(blocks: List[ConstantDeclarationBlock],
            symbols: Optional[Dict[str, ConstantDeclarationBlock]] = None,
            types: Optional[Dict[str, str]] = None) -> EnumerationResult:
    """Resolve and deduplicate collected blocks"""
    return ValueResolver(symbols=symbols, types=types).resolve(blocks)


__all__ = [
    "GoSourceParser",
    "ParsedGoPackage",
    "ParsedGoFile",
    "ConstBlock",
    "ConstSpec",
    "DeclarationCollector",
    "ConstantDeclarationBlock",
    "ConstantEntry",
    "ValueResolver",
    "EnumerationResult",
    "ResolvedConstant",
    "collect",
    "resolve",
]
