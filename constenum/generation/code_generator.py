"""Enum Accessor Code Generator

Renders an EnumerationResult as a Go method returning the constants of a
type in declaration order:

    // Enum returns a list of values declared for a type.
    func (Day) Enum() []interface{} {
        return []interface{}{
            Monday,
            ...
        }
    }

Values are referenced by identifier, never re-evaluated. Output is already in
gofmt layout (tab indentation) so formatting is not needed for correctness.
"""

from typing import List, Optional
import logging

from constenum.config import METHOD_COMMENT, METHOD_NAME
from constenum.static_analysis.value_resolver import EnumerationResult

logger = logging.getLogger(__name__)


class CodeGenerator:
    """Emit the Enum() accessor for one type"""

    def __init__(self, method_name: str = METHOD_NAME, comment: str = METHOD_COMMENT):
        self.method_name = method_name
        self.comment = comment

    def emit(self, result: EnumerationResult, type_name: Optional[str] = None) -> str:
        """
        Render the accessor.

        Args:
            result: Resolved, deduplicated constants
            type_name: Receiver type; defaults to result.type_name

        Returns:
            Go source text, or "" when the result is empty
        """
        type_name = type_name or result.type_name
        if result.is_empty:
            logger.info(f"No values for type {type_name}; nothing to generate")
            return ""

        lines: List[str] = [
            "",
            f"// {self.comment}",
            f"func ({type_name}) {self.method_name}() []interface{{}} {{",
            "\treturn []interface{}{",
        ]
        for identifier in result.identifiers:
            lines.append(f"\t\t{identifier},")
        lines.append("\t}")
        lines.append("}")

        logger.debug(f"Emitted {self.method_name}() for {type_name} with {len(result)} value(s)")
        return "\n".join(lines) + "\n"
