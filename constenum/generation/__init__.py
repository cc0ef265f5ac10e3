"""
Source generation for enum accessors

- CodeGenerator: renders the Enum() method for a resolved type
- GoFormatter: runs gofmt over the generated file when available
"""

from typing import Optional

from constenum.generation.code_generator import CodeGenerator
from constenum.generation.formatter import GoFormatter
from constenum.static_analysis.value_resolver import EnumerationResult


def emit(result: EnumerationResult, type_name: Optional[str] = None) -> str:
    """Render the accessor for result; "" when it is empty"""
    return CodeGenerator().emit(result, type_name)


__all__ = [
    "CodeGenerator",
    "GoFormatter",
    "emit",
]
