"""Exceptions raised by constenum

ConstantEvaluationError and its subclasses abort generation for a single
type; the caller reports them and moves on to the next type.
"""

from pathlib import Path
from typing import Optional, Union


class ConstenumError(Exception):
    """Base class for all constenum errors"""
    pass


class SourceParseError(ConstenumError):
    """Raised when Go source cannot be tokenized or parsed"""

    def __init__(self, message: str, file_path: Optional[Union[str, Path]] = None,
                 line_number: int = 0):
        self.file_path = file_path
        self.line_number = line_number
        location = ""
        if file_path:
            location = f"{file_path}:{line_number}: " if line_number else f"{file_path}: "
        super().__init__(f"{location}{message}")


class ConstantEvaluationError(ConstenumError):
    """Raised when a constant of the requested type cannot be resolved"""

    def __init__(self, message: str, identifier: Optional[str] = None):
        self.identifier = identifier
        self.reason = message
        if identifier:
            message = f"{identifier}: {message}"
        super().__init__(message)


class MalformedExpressionError(ConstantEvaluationError):
    """Initializer uses an operator, literal or reference that cannot be evaluated"""
    pass


class InvariantViolationError(ConstantEvaluationError):
    """A resolved value breaks a guarantee the Go type checker would give us"""
    pass


class UnsupportedTypeError(ConstantEvaluationError):
    """Requested type is not an integer type"""
    pass
