"""
Filter evaluator.

Evaluates a parsed filter against a single record and returns whether
the record is included.

Field resolution semantics:
- Records are mappings, possibly with nested mappings.
- A path segment that is missing, or that would step into a value that
  is not a mapping, resolves to ABSENT. ABSENT is not an error.
- JSON null in the record is None and is distinct from ABSENT.
- ABSENT is unequal to every literal (so `ne` is true) and makes every
  ordering comparison false.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from .ast import (
    AstNode,
    ComparisonNode,
    ComparisonOperator,
    LiteralValue,
    LogicalBinaryNode,
    LogicalOperator,
    NotNode,
)
from .errors import EvaluationError, ExpressionError

Record = Mapping[str, Any]


class _Absent:
    """Marker for a field path that does not resolve in a record."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def resolve_field_path(record: Any, path: Sequence[str]) -> Any:
    """Walks a record by path segments, returning ABSENT when the path breaks."""
    current = record
    for segment in path:
        if not isinstance(current, Mapping) or segment not in current:
            return ABSENT
        current = current[segment]
    return current


def get_type_name(value: Any) -> str:
    """Returns the filter-language type name of a value."""
    if value is ABSENT:
        return "absent"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list | tuple):
        return "array"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def values_equal(actual: Any, expected: LiteralValue) -> bool:
    """Type-aware equality between a resolved field value and a literal."""
    if actual is ABSENT:
        return False

    # null only equals null
    if actual is None or expected is None:
        return actual is None and expected is None

    # bool is an int subclass, keep it apart from numbers
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected

    if _is_number(actual) and _is_number(expected):
        return actual == expected

    if isinstance(actual, str) and isinstance(expected, str):
        return actual == expected

    return False


@dataclass
class EvaluationContext:
    """Evaluation context for a single record."""

    record: Record
    """The candidate record."""

    source: Optional[str] = None
    """Source expression for error reporting."""


@dataclass
class EvaluationResult:
    """Result of a non-raising evaluation."""

    value: bool
    """Whether the record matched. False if evaluation failed."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[str] = None
    """Error message if evaluation failed."""


class Evaluator:
    """Evaluates an AST node against one record."""

    def __init__(self, context: EvaluationContext):
        self._context = context
        self._source = context.source

    def evaluate(self, node: AstNode) -> bool:
        """Evaluates a condition node and returns the inclusion decision."""
        if isinstance(node, ComparisonNode):
            return self._evaluate_comparison(node)

        if isinstance(node, LogicalBinaryNode):
            left = self.evaluate(node.left)
            if node.operator == LogicalOperator.AND:
                return left and self.evaluate(node.right)
            if node.operator == LogicalOperator.OR:
                return left or self.evaluate(node.right)

        if isinstance(node, NotNode):
            return not self.evaluate(node.operand)

        raise EvaluationError(
            f"Cannot evaluate {node.type} node as a condition",
            node.position,
            self._source,
        )

    def _evaluate_comparison(self, node: ComparisonNode) -> bool:
        """Evaluates a field/literal comparison."""
        actual = resolve_field_path(self._context.record, node.field.path)
        expected = node.literal.value
        operator = node.operator

        if operator == ComparisonOperator.EQ:
            return values_equal(actual, expected)

        if operator == ComparisonOperator.NE:
            return not values_equal(actual, expected)

        path = node.field.dotted

        # Checked before field resolution so the failure does not depend on the record
        if not (_is_number(expected) or isinstance(expected, str)):
            raise EvaluationError(
                f"Operator '{operator.value}' cannot be applied to "
                f"{get_type_name(expected)} literal",
                node.literal.position,
                self._source,
                path,
            )

        if actual is ABSENT:
            return False

        if (_is_number(actual) and _is_number(expected)) or (
            isinstance(actual, str) and isinstance(expected, str)
        ):
            if operator == ComparisonOperator.GT:
                return actual > expected
            if operator == ComparisonOperator.GE:
                return actual >= expected
            if operator == ComparisonOperator.LT:
                return actual < expected
            if operator == ComparisonOperator.LE:
                return actual <= expected

        raise EvaluationError(
            f"Cannot compare {get_type_name(actual)} field '{path}' with "
            f"{get_type_name(expected)} using '{operator.value}'",
            node.position,
            self._source,
            path,
        )


def evaluate(node: AstNode, record: Record, *, source: Optional[str] = None) -> bool:
    """
    Evaluates a parsed filter against a record.

    Args:
        node: The parsed filter
        record: The candidate record
        source: Optional source expression for error reporting

    Returns:
        True if the record satisfies the filter

    Raises:
        EvaluationError: If an ordering comparison meets incompatible types
    """
    evaluator = Evaluator(EvaluationContext(record=record, source=source))
    return evaluator.evaluate(node)


def evaluate_safely(
    node: AstNode, record: Record, *, source: Optional[str] = None
) -> EvaluationResult:
    """
    Evaluates a parsed filter, reporting failures instead of raising.

    Returns:
        The evaluation result. Value is False if evaluation fails.
    """
    try:
        value = evaluate(node, record, source=source)
        return EvaluationResult(value=value, success=True)
    except ExpressionError as error:
        return EvaluationResult(value=False, success=False, error=str(error))
