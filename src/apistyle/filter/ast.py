"""
Abstract Syntax Tree (AST) node types for filter expressions.

The AST is produced by the parser and consumed by the evaluator.
Nodes are immutable, so a parsed filter can be shared across threads
and reused for every record of a collection scan.
"""

from abc import ABC
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from decimal import Decimal
from enum import Enum
from typing import Literal, Tuple, Union

# Decoded value of a literal token
LiteralValue = Union[str, int, float, bool, None]


# ============================================================
# Operator Types
# ============================================================


class ComparisonOperator(str, Enum):
    """Comparison operators allowed between a field and a literal."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"

    @property
    def is_ordering(self) -> bool:
        return self not in (ComparisonOperator.EQ, ComparisonOperator.NE)


class LogicalOperator(str, Enum):
    """Binary logical operators."""

    AND = "and"
    OR = "or"


NOT_KEYWORD = "not"


# ============================================================
# AST Node Types
# ============================================================


@dataclass(frozen=True)
class AstNodeBase(ABC):
    """Base class for all AST nodes."""

    position: int = dataclass_field(compare=False)
    """Position in source expression (for error reporting). Not part of equality."""


@dataclass(frozen=True)
class LiteralNode(AstNodeBase):
    """String, number, boolean or null literal."""

    value: LiteralValue

    @property
    def type(self) -> Literal["Literal"]:
        return "Literal"


@dataclass(frozen=True)
class FieldRefNode(AstNodeBase):
    """Reference to a (possibly nested) field of the record, e.g. owner.id."""

    path: Tuple[str, ...]

    @property
    def type(self) -> Literal["FieldRef"]:
        return "FieldRef"

    @property
    def dotted(self) -> str:
        return ".".join(self.path)


@dataclass(frozen=True)
class ComparisonNode(AstNodeBase):
    """Comparison of a field against a literal."""

    operator: ComparisonOperator
    field: FieldRefNode
    literal: LiteralNode

    @property
    def type(self) -> Literal["Comparison"]:
        return "Comparison"


@dataclass(frozen=True)
class LogicalBinaryNode(AstNodeBase):
    """Logical and/or node."""

    operator: LogicalOperator
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> Literal["LogicalBinary"]:
        return "LogicalBinary"


@dataclass(frozen=True)
class NotNode(AstNodeBase):
    """Logical negation node."""

    operand: "AstNode"

    @property
    def type(self) -> Literal["Not"]:
        return "Not"


# Union type for all AST nodes
AstNode = Union[
    LiteralNode,
    FieldRefNode,
    ComparisonNode,
    LogicalBinaryNode,
    NotNode,
]


# ============================================================
# AST Utilities
# ============================================================


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in an AST."""
    if isinstance(node, (LiteralNode, FieldRefNode)):
        return 1

    if isinstance(node, ComparisonNode):
        return 3

    if isinstance(node, LogicalBinaryNode):
        return 1 + count_ast_nodes(node.left) + count_ast_nodes(node.right)

    if isinstance(node, NotNode):
        return 1 + count_ast_nodes(node.operand)

    raise ValueError(f"Unknown AST node: {node!r}")


def calculate_ast_depth(node: AstNode) -> int:
    """Calculates the maximum depth of an AST."""
    if isinstance(node, (LiteralNode, FieldRefNode)):
        return 1

    if isinstance(node, ComparisonNode):
        return 2

    if isinstance(node, LogicalBinaryNode):
        return 1 + max(calculate_ast_depth(node.left), calculate_ast_depth(node.right))

    if isinstance(node, NotNode):
        return 1 + calculate_ast_depth(node.operand)

    raise ValueError(f"Unknown AST node: {node!r}")


def format_literal(value: LiteralValue) -> str:
    """Renders a literal value back into filter syntax."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, float):
        # Plain decimal notation, the tokenizer has no exponent syntax
        text = format(Decimal(repr(value)), "f")
        return text if "." in text else f"{text}.0"
    return str(value)


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of an AST node for debugging."""
    prefix = "  " * indent

    if isinstance(node, LiteralNode):
        return f"{prefix}Literal: {format_literal(node.value)}"

    if isinstance(node, FieldRefNode):
        return f"{prefix}FieldRef: {node.dotted}"

    if isinstance(node, ComparisonNode):
        return (
            f"{prefix}Comparison: {node.operator.value}\n"
            f"{ast_to_string(node.field, indent + 1)}\n"
            f"{ast_to_string(node.literal, indent + 1)}"
        )

    if isinstance(node, LogicalBinaryNode):
        return (
            f"{prefix}LogicalBinary: {node.operator.value}\n"
            f"{ast_to_string(node.left, indent + 1)}\n"
            f"{ast_to_string(node.right, indent + 1)}"
        )

    if isinstance(node, NotNode):
        return f"{prefix}Not\n{ast_to_string(node.operand, indent + 1)}"

    return f"{prefix}Unknown: {node}"


# Binding strength used when re-serializing (higher binds tighter)
_PRECEDENCE = {
    LogicalOperator.OR: 1,
    LogicalOperator.AND: 2,
}
_NOT_PRECEDENCE = 3
_ATOM_PRECEDENCE = 4


def _precedence(node: AstNode) -> int:
    if isinstance(node, LogicalBinaryNode):
        return _PRECEDENCE[node.operator]
    if isinstance(node, NotNode):
        return _NOT_PRECEDENCE
    return _ATOM_PRECEDENCE


def to_filter_string(node: AstNode) -> str:
    """
    Serializes an AST back into filter syntax.

    Only the parentheses required by precedence and left-associativity
    are emitted, so parsing the output yields an equal tree.
    """
    if isinstance(node, LiteralNode):
        return format_literal(node.value)

    if isinstance(node, FieldRefNode):
        return node.dotted

    if isinstance(node, ComparisonNode):
        return (
            f"{node.field.dotted} {node.operator.value} "
            f"{format_literal(node.literal.value)}"
        )

    if isinstance(node, NotNode):
        operand = to_filter_string(node.operand)
        if _precedence(node.operand) < _NOT_PRECEDENCE:
            operand = f"({operand})"
        return f"{NOT_KEYWORD} {operand}"

    if isinstance(node, LogicalBinaryNode):
        own = _PRECEDENCE[node.operator]
        left = to_filter_string(node.left)
        right = to_filter_string(node.right)
        if _precedence(node.left) < own:
            left = f"({left})"
        # Right operand of equal precedence needs grouping to stay right-nested
        if _precedence(node.right) <= own:
            right = f"({right})"
        return f"{left} {node.operator.value} {right}"

    raise ValueError(f"Unknown AST node: {node!r}")
