"""Expression tree for Go constant initializers

Initializers are parsed into a small tagged tree and evaluated by the value
resolver. Nodes are immutable and print back as Go source, which is what
error messages show.

Also holds the table of Go's predeclared integer types.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


# name -> (signed, width in bits); int/uint/uintptr assume a 64-bit target
INTEGER_TYPES: Dict[str, Tuple[bool, int]] = {
    "int": (True, 64),
    "int8": (True, 8),
    "int16": (True, 16),
    "int32": (True, 32),
    "int64": (True, 64),
    "rune": (True, 32),
    "uint": (False, 64),
    "uint8": (False, 8),
    "uint16": (False, 16),
    "uint32": (False, 32),
    "uint64": (False, 64),
    "uintptr": (False, 64),
    "byte": (False, 8),
}

NON_INTEGER_TYPES = frozenset({
    "float32", "float64", "complex64", "complex128", "string", "bool",
})


def integer_bounds(type_name: str) -> Optional[Tuple[int, int]]:
    """Inclusive (min, max) for a predeclared integer type, None otherwise"""
    if type_name not in INTEGER_TYPES:
        return None
    signed, bits = INTEGER_TYPES[type_name]
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def is_unsigned(type_name: Optional[str]) -> bool:
    return type_name in INTEGER_TYPES and not INTEGER_TYPES[type_name][0]


class Expression:
    """Base class for initializer expression nodes"""


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int
    text: str = ""

    def __str__(self) -> str:
        return self.text or str(self.value)


@dataclass(frozen=True)
class Literal(Expression):
    """Non-integer literal (float, imaginary or string)"""
    text: str
    kind: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class CounterReference(Expression):
    """The `iota` placeholder"""

    def __str__(self) -> str:
        return "iota"


@dataclass(frozen=True)
class IdentifierReference(Expression):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnaryOperation(Expression):
    op: str
    operand: Expression

    def __str__(self) -> str:
        return f"{self.op}{self.operand}"


@dataclass(frozen=True)
class BinaryOperation(Expression):
    op: str
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass(frozen=True)
class Conversion(Expression):
    """`T(x)` where T names a type"""
    type_name: str
    operand: Expression

    def __str__(self) -> str:
        return f"{self.type_name}({self.operand})"


@dataclass(frozen=True)
class Call(Expression):
    """Any other call, e.g. len("abc") or unsafe.Sizeof(x)"""
    name: str
    arguments: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.name}({args})"
