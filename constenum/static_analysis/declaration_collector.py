"""Declaration Collector for Go Constants

Turns the const blocks of a parsed package into ConstantEntry records and
selects the blocks that declare constants of a requested type.

- Every spec in a const group advances the counter (iota), whether or not
  it has an initializer; names of a multi-name spec share one value.
- An entry's type is its written type, the type repeated from the previous
  spec, or the type inferred from its initializer (`AnotherOne = One` has
  the type of One).
- Blocks are returned whole so the resolver sees the same counter and
  repetition template the Go compiler would.
"""

from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple
from dataclasses import dataclass, field
import logging

from constenum.errors import UnsupportedTypeError
from .expressions import (
    Expression, IdentifierReference, UnaryOperation, BinaryOperation, Conversion,
    INTEGER_TYPES,
)
from .go_parser import ParsedGoPackage

logger = logging.getLogger(__name__)

_SHIFT_OPERATORS = frozenset({"<<", ">>"})
_BOOLEAN_OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">=", "&&", "||"})


@dataclass
class ConstantEntry:
    """A single declared constant"""
    identifier: str
    has_explicit_initializer: bool
    initializer_expression: Optional[Expression]
    position_index: int
    counter: int = 0  # iota for this entry
    spec_index: int = 0  # position of the name within its spec
    declared_type: Optional[str] = None  # type written on the spec
    type_name: Optional[str] = None  # effective type, None when untyped
    line_number: int = 0
    file_path: Optional[Path] = None

    @property
    def is_blank(self) -> bool:
        return self.identifier == "_"


@dataclass
class ConstantDeclarationBlock:
    """One `const` declaration; the counter restarts at 0 for each block"""
    entries: List[ConstantEntry] = field(default_factory=list)
    type_name: Optional[str] = None
    underlying_type: str = "int"
    file_path: Optional[Path] = None
    line_number: int = 0

    def members(self) -> List[ConstantEntry]:
        """Entries whose type is the block's requested type"""
        if self.type_name is None:
            return []
        return [e for e in self.entries if e.type_name == self.type_name]


class DeclarationCollector:
    """
    Extract constant declaration blocks for a type from a parsed package.

    collect() is pure: the package is not modified and every call builds
    fresh entries.
    """

    def collect(self, package: ParsedGoPackage,
                type_name: str) -> List[ConstantDeclarationBlock]:
        """
        Collect the const blocks that declare constants of type_name.

        Args:
            package: Parsed Go package
            type_name: Name of the requested type

        Returns:
            Blocks in file/declaration order, position_index renumbered
            from 0 across them. Empty when nothing matches.
        """
        blocks = self.collect_all(package)
        selected = [b for b in blocks if any(e.type_name == type_name for e in b.entries)]

        if not selected:
            logger.info(f"No constants declared for type {type_name}")
            return []

        underlying = self.underlying_type(package, type_name)
        position = 0
        for block in selected:
            block.type_name = type_name
            block.underlying_type = underlying
            for entry in block.entries:
                entry.position_index = position
                position += 1

        member_count = sum(len(b.members()) for b in selected)
        logger.info(
            f"Collected {member_count} constant(s) of type {type_name} "
            f"from {len(selected)} block(s)"
        )
        return selected

    def collect_all(self, package: ParsedGoPackage) -> List[ConstantDeclarationBlock]:
        """Every const block of the package with typed entries"""
        blocks = []
        templates: Dict[int, Tuple[Optional[str], Optional[Expression]]] = {}
        position = 0

        for const_block in package.const_blocks:
            block = ConstantDeclarationBlock(
                file_path=const_block.file_path,
                line_number=const_block.line_number
            )
            last_type: Optional[str] = None
            last_expressions: List[Expression] = []

            for counter, spec in enumerate(const_block.specs):
                if spec.has_values:
                    last_type = spec.type_name
                    last_expressions = spec.expressions

                for spec_index, name in enumerate(spec.names):
                    entry = ConstantEntry(
                        identifier=name,
                        has_explicit_initializer=spec.has_values,
                        initializer_expression=spec.expressions[spec_index] if spec.has_values else None,
                        position_index=position,
                        counter=counter,
                        spec_index=spec_index,
                        declared_type=spec.type_name,
                        line_number=spec.line_number,
                        file_path=const_block.file_path
                    )
                    position += 1

                    # the template an implicit spec repeats: type and expression
                    template_expression = None
                    if spec_index < len(last_expressions):
                        template_expression = last_expressions[spec_index]
                    templates[id(entry)] = (last_type, template_expression)
                    block.entries.append(entry)

            blocks.append(block)

        self._assign_types(blocks, templates)
        return blocks

    def index(self, blocks: List[ConstantDeclarationBlock]) -> Dict[str, ConstantDeclarationBlock]:
        """Map each constant name to the block declaring it"""
        scope = {}
        for block in blocks:
            for entry in block.entries:
                if not entry.is_blank:
                    scope[entry.identifier] = block
        return scope

    def scope(self, package: ParsedGoPackage) -> Dict[str, ConstantDeclarationBlock]:
        """Package-level constant scope, used to resolve references"""
        return self.index(self.collect_all(package))

    def integer_types(self, package: ParsedGoPackage) -> Dict[str, str]:
        """Named types of the package whose underlying type is a builtin integer"""
        result = {}
        types = package.type_specs
        for name in types:
            underlying = self._follow(types, name)
            if underlying in INTEGER_TYPES:
                result[name] = underlying
        return result

    def underlying_type(self, package: ParsedGoPackage, type_name: str) -> str:
        """
        Builtin integer type behind type_name.

        Raises:
            UnsupportedTypeError: type_name is not an integer type
        """
        types = package.type_specs
        if type_name in INTEGER_TYPES:
            return type_name
        if type_name not in types:
            logger.warning(f"Type {type_name} is not declared in package {package.name}; assuming int")
            return "int"

        underlying = self._follow(types, type_name)
        if underlying in INTEGER_TYPES:
            return underlying
        if "." in underlying:
            logger.warning(f"Type {type_name} is defined as {underlying} in another package; assuming int")
            return "int"
        raise UnsupportedTypeError(f"underlying type {underlying} is not an integer type", type_name)

    def _follow(self, types: Dict[str, str], type_name: str) -> str:
        seen = set()
        current = type_name
        while current in types and current not in seen:
            seen.add(current)
            current = types[current]
        return current

    def _assign_types(self, blocks: List[ConstantDeclarationBlock],
                      templates: Dict[int, Tuple[Optional[str], Optional[Expression]]]):
        by_name = {}
        for block in blocks:
            for entry in block.entries:
                if not entry.is_blank:
                    by_name[entry.identifier] = entry

        resolved: Set[int] = set()

        def type_of(entry: ConstantEntry, visiting: Set[str]) -> Optional[str]:
            if id(entry) in resolved:
                return entry.type_name
            if entry.has_explicit_initializer:
                written, expression = entry.declared_type, entry.initializer_expression
            else:
                written, expression = templates[id(entry)]
            if written is None and expression is not None:
                written = infer(expression, visiting | {entry.identifier})
            entry.type_name = written
            resolved.add(id(entry))
            return written

        def infer(expression: Expression, visiting: Set[str]) -> Optional[str]:
            if isinstance(expression, Conversion):
                return expression.type_name
            if isinstance(expression, IdentifierReference):
                target = by_name.get(expression.name)
                if target is None or expression.name in visiting:
                    return None
                return type_of(target, visiting)
            if isinstance(expression, UnaryOperation):
                return infer(expression.operand, visiting)
            if isinstance(expression, BinaryOperation):
                if expression.op in _BOOLEAN_OPERATORS:
                    return None
                if expression.op in _SHIFT_OPERATORS:
                    return infer(expression.left, visiting)
                return infer(expression.left, visiting) or infer(expression.right, visiting)
            return None

        for block in blocks:
            for entry in block.entries:
                type_of(entry, set())
