"""constenum - generate Enum() accessors for Go constant groups"""

from constenum.config import VERSION as __version__
from constenum.errors import (
    ConstenumError,
    SourceParseError,
    ConstantEvaluationError,
    MalformedExpressionError,
    InvariantViolationError,
    UnsupportedTypeError,
)
from constenum.static_analysis import collect, resolve
from constenum.generation import emit
from constenum.generator import EnumGenerator

__all__ = [
    "__version__",
    "ConstenumError",
    "SourceParseError",
    "ConstantEvaluationError",
    "MalformedExpressionError",
    "InvariantViolationError",
    "UnsupportedTypeError",
    "collect",
    "resolve",
    "emit",
    "EnumGenerator",
]
