"""Value Resolver for Go Constants

Computes the integer value of every collected constant and reduces the
constants of the requested type to the ordered, deduplicated list the
generated accessor returns.

Evaluation rules (Go untyped constant arithmetic, unbounded integers):
- iota is the entry's block-relative counter
- an entry without an initializer repeats the last initializer of its
  block, evaluated with its own counter; with none it is the counter
- `/` truncates toward zero and `%` follows the sign of the dividend
- unary `^` on an unsigned typed operand flips only the type's bits
- references resolve to any constant in the collected blocks or the
  package scope, lazily, with cycle detection

Dedup keeps the first identifier for each value, in declaration order.
"""

from typing import Dict, Iterator, List, Optional, Set
from dataclasses import dataclass, field
import logging

from constenum.errors import MalformedExpressionError, InvariantViolationError
from .expressions import (
    Expression, IntegerLiteral, Literal, CounterReference, IdentifierReference,
    UnaryOperation, BinaryOperation, Conversion, Call,
    INTEGER_TYPES, integer_bounds, is_unsigned,
)
from .declaration_collector import ConstantDeclarationBlock, ConstantEntry

logger = logging.getLogger(__name__)

# Go rejects constant shifts this large; it also keeps the numbers bounded
MAX_SHIFT_COUNT = 10000

_BOOLEAN_OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">=", "&&", "||", "!"})


@dataclass(frozen=True)
class ResolvedConstant:
    """A constant with its computed value"""
    identifier: str
    value: int
    position_index: int
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {
            "identifier": self.identifier,
            "value": self.value,
            "position_index": self.position_index,
            "line_number": self.line_number,
        }


@dataclass
class EnumerationResult:
    """Ordered constants of one type, no two sharing a value"""
    type_name: Optional[str]
    constants: List[ResolvedConstant] = field(default_factory=list)
    dropped: List[Dict] = field(default_factory=list)  # suppressed duplicates

    @property
    def identifiers(self) -> List[str]:
        return [c.identifier for c in self.constants]

    @property
    def values(self) -> List[int]:
        return [c.value for c in self.constants]

    @property
    def is_empty(self) -> bool:
        return not self.constants

    def __len__(self) -> int:
        return len(self.constants)

    def __iter__(self) -> Iterator[ResolvedConstant]:
        return iter(self.constants)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            "type": self.type_name,
            "constants": [c.to_dict() for c in self.constants],
            "dropped": self.dropped,
            "total": len(self.constants),
        }


class ValueResolver:
    """
    Resolve collected constant blocks into an EnumerationResult.

    The resolver holds only configuration; each resolve() call starts from
    empty caches, so resolving the same blocks twice gives the same result.
    """

    def __init__(self, symbols: Optional[Dict[str, ConstantDeclarationBlock]] = None,
                 types: Optional[Dict[str, str]] = None):
        """
        Args:
            symbols: Package scope (name -> declaring block) for references
                     to constants outside the collected blocks
            types: Named integer types of the package (name -> builtin type)
        """
        self.symbols = symbols or {}
        self.types = types or {}

    def resolve(self, blocks: List[ConstantDeclarationBlock]) -> EnumerationResult:
        """
        Compute values for every entry and deduplicate the members.

        Raises:
            MalformedExpressionError: an initializer cannot be evaluated
            InvariantViolationError: a value does not fit the requested type
        """
        if not blocks:
            return EnumerationResult(type_name=None)

        type_name = blocks[0].type_name
        underlying = blocks[0].underlying_type
        # the requested type is always known, even without a package type table
        types = {type_name: underlying}
        types.update(self.types)
        evaluator = _Evaluator(blocks, self.symbols, types)

        resolved = []
        for block in blocks:
            for index, entry in enumerate(block.entries):
                value = evaluator.entry_value(block, index)
                if entry.is_blank or entry.type_name != type_name:
                    continue
                self._check_range(entry, value, type_name, underlying)
                logger.debug(f"  {entry.identifier} = {value}")
                resolved.append(ResolvedConstant(
                    identifier=entry.identifier,
                    value=value,
                    position_index=entry.position_index,
                    line_number=entry.line_number
                ))

        result = self.deduplicate(type_name, resolved)
        logger.info(
            f"Resolved {len(resolved)} constant(s) of type {type_name}, "
            f"{len(result)} distinct value(s)"
        )
        return result

    def deduplicate(self, type_name: Optional[str],
                    constants: List[ResolvedConstant]) -> EnumerationResult:
        """Keep the first-declared constant for each value"""
        seen: Dict[int, str] = {}
        result = EnumerationResult(type_name=type_name)

        for constant in sorted(constants, key=lambda c: c.position_index):
            if constant.value in seen:
                result.dropped.append({
                    "identifier": constant.identifier,
                    "value": constant.value,
                    "duplicate_of": seen[constant.value],
                })
                logger.debug(f"  {constant.identifier} duplicates {seen[constant.value]}, dropped")
                continue
            seen[constant.value] = constant.identifier
            result.constants.append(constant)

        return result

    def _check_range(self, entry: ConstantEntry, value: int,
                     type_name: Optional[str], underlying: str):
        if is_unsigned(underlying) and value < 0:
            raise InvariantViolationError(
                f"value {value} is negative for unsigned type {type_name}", entry.identifier
            )
        bounds = integer_bounds(underlying)
        if bounds and not bounds[0] <= value <= bounds[1]:
            raise InvariantViolationError(
                f"value {value} overflows {type_name} ({underlying})", entry.identifier
            )


class _Evaluator:
    """Per-call evaluation state: value cache, repetition templates, cycle guard"""

    def __init__(self, blocks: List[ConstantDeclarationBlock],
                 symbols: Dict[str, ConstantDeclarationBlock], types: Dict[str, str]):
        self.types = types
        self.values: Dict[str, int] = {}
        self.resolving: Set[str] = set()
        self.effective: Dict[int, List[Optional[Expression]]] = {}
        self.locations: Dict[str, tuple] = {}
        self.entry_types: Dict[str, Optional[str]] = {}

        for scope_block in list(symbols.values()):
            self._locate(scope_block)
        # collected blocks win over the package scope
        for block in blocks:
            self._locate(block)

    def _locate(self, block: ConstantDeclarationBlock):
        for index, entry in enumerate(block.entries):
            if not entry.is_blank:
                self.locations[entry.identifier] = (block, index)
                self.entry_types[entry.identifier] = entry.type_name

    def _templates(self, block: ConstantDeclarationBlock) -> List[Optional[Expression]]:
        """Expression each entry evaluates: its own, or the one it repeats"""
        key = id(block)
        if key in self.effective:
            return self.effective[key]

        effective: List[Optional[Expression]] = []
        template: Dict[int, Expression] = {}
        template_counter = None
        for entry in block.entries:
            if entry.has_explicit_initializer:
                if entry.counter != template_counter:
                    template = {}
                    template_counter = entry.counter
                template[entry.spec_index] = entry.initializer_expression
                effective.append(entry.initializer_expression)
            elif template and entry.spec_index not in template:
                raise MalformedExpressionError(
                    "no expression to repeat for this position", entry.identifier
                )
            else:
                effective.append(template.get(entry.spec_index))

        self.effective[key] = effective
        return effective

    def entry_value(self, block: ConstantDeclarationBlock, index: int) -> int:
        entry = block.entries[index]
        name = entry.identifier
        if not entry.is_blank and name in self.values:
            return self.values[name]
        if name in self.resolving:
            raise MalformedExpressionError("initialization cycle", name)

        expression = self._templates(block)[index]
        if expression is None:
            value = entry.counter
        else:
            if not entry.is_blank:
                self.resolving.add(name)
            try:
                value = self.evaluate(expression, entry.counter, name)
            finally:
                self.resolving.discard(name)

        if not entry.is_blank:
            self.values[name] = value
        return value

    def value_of(self, name: str, requester: str) -> int:
        if name in self.values:
            return self.values[name]
        if name in ("true", "false"):
            raise MalformedExpressionError(f"boolean constant {name} is not an integer", requester)
        location = self.locations.get(name)
        if location is None:
            raise MalformedExpressionError(f"undefined: {name}", requester)
        block, index = location
        return self.entry_value(block, index)

    def integer_type(self, type_name: Optional[str]) -> Optional[str]:
        if type_name in INTEGER_TYPES:
            return type_name
        return self.types.get(type_name)

    def static_type(self, expression: Expression) -> Optional[str]:
        """Builtin integer type of a typed expression, None when untyped"""
        if isinstance(expression, Conversion):
            return self.integer_type(expression.type_name)
        if isinstance(expression, IdentifierReference):
            return self.integer_type(self.entry_types.get(expression.name))
        if isinstance(expression, UnaryOperation):
            return self.static_type(expression.operand)
        if isinstance(expression, BinaryOperation):
            if expression.op in ("<<", ">>"):
                return self.static_type(expression.left)
            return self.static_type(expression.left) or self.static_type(expression.right)
        return None

    def evaluate(self, expression: Expression, counter: int, identifier: str) -> int:
        """Recursively evaluate an initializer with iota bound to counter"""
        if isinstance(expression, IntegerLiteral):
            return expression.value

        if isinstance(expression, CounterReference):
            return counter

        if isinstance(expression, IdentifierReference):
            return self.value_of(expression.name, identifier)

        if isinstance(expression, Literal):
            raise MalformedExpressionError(
                f"{expression.kind} constant {expression.text} is not an integer", identifier
            )

        if isinstance(expression, UnaryOperation):
            if expression.op in _BOOLEAN_OPERATORS:
                raise MalformedExpressionError(f"boolean expression {expression}", identifier)
            operand = self.evaluate(expression.operand, counter, identifier)
            if expression.op == "-":
                return -operand
            if expression.op == "^":
                operand_type = self.static_type(expression.operand)
                if is_unsigned(operand_type):
                    return operand ^ integer_bounds(operand_type)[1]
                return ~operand
            return operand

        if isinstance(expression, BinaryOperation):
            if expression.op in _BOOLEAN_OPERATORS:
                raise MalformedExpressionError(f"boolean expression {expression}", identifier)
            left = self.evaluate(expression.left, counter, identifier)
            right = self.evaluate(expression.right, counter, identifier)
            return self._binary(expression, left, right, identifier)

        if isinstance(expression, Conversion):
            return self._convert(expression, counter, identifier)

        if isinstance(expression, Call):
            if expression.name in ("min", "max") and expression.arguments:
                arguments = [self.evaluate(a, counter, identifier) for a in expression.arguments]
                return min(arguments) if expression.name == "min" else max(arguments)
            raise MalformedExpressionError(f"cannot evaluate call {expression}", identifier)

        raise MalformedExpressionError(f"unsupported expression {expression!r}", identifier)

    def _binary(self, expression: BinaryOperation, left: int, right: int, identifier: str) -> int:
        op = expression.op
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op in ("/", "%"):
            if right == 0:
                raise MalformedExpressionError(f"division by zero in {expression}", identifier)
            quotient = abs(left) // abs(right)
            if (left < 0) != (right < 0):
                quotient = -quotient
            return quotient if op == "/" else left - right * quotient
        if op == "&":
            return left & right
        if op == "|":
            return left | right
        if op == "^":
            return left ^ right
        if op == "&^":
            return left & ~right
        if op in ("<<", ">>"):
            if right < 0:
                raise MalformedExpressionError(f"negative shift count in {expression}", identifier)
            if right > MAX_SHIFT_COUNT:
                raise MalformedExpressionError(f"shift count too large in {expression}", identifier)
            return left << right if op == "<<" else left >> right
        raise MalformedExpressionError(f"unknown operator {op}", identifier)

    def _convert(self, expression: Conversion, counter: int, identifier: str) -> int:
        target = self.integer_type(expression.type_name)
        if target is None:
            raise MalformedExpressionError(
                f"cannot evaluate conversion to {expression.type_name}", identifier
            )
        value = self.evaluate(expression.operand, counter, identifier)
        low, high = integer_bounds(target)
        if not low <= value <= high:
            raise InvariantViolationError(
                f"constant {value} overflows {expression.type_name}", identifier
            )
        return value
