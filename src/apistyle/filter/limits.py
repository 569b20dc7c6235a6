"""
Resource limits for filter parsing.

These limits keep pathological filter strings from exhausting the
stack or CPU before a single record is evaluated.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import LimitExceededError


@dataclass(frozen=True)
class ExpressionLimits:
    """Expression limits configuration."""

    # Maximum expression string length in characters
    max_expression_length: int = 4096

    # Maximum string literal length
    max_string_length: int = 1024

    # Maximum nesting depth of parentheses and `not`. and/or chains are
    # parsed iteratively and bounded by max_ast_nodes instead
    max_depth: int = 32

    # Maximum number of AST nodes
    max_ast_nodes: int = 256

    # Maximum number of segments in a dotted field path
    max_path_segments: int = 16


# Default expression limits.
DEFAULT_EXPRESSION_LIMITS = ExpressionLimits()


def check_expression_length(
    expression: str, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates that expression length is within limits."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length", limits.max_expression_length, len(expression)
        )


def check_string_length(
    length: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
    expression: Optional[str] = None,
) -> None:
    """Validates string literal length during tokenization."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if length > limits.max_string_length:
        raise LimitExceededError(
            "max_string_length", limits.max_string_length, length, position, expression
        )


def check_path_segments(
    count: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
    expression: Optional[str] = None,
) -> None:
    """Validates the number of segments in a field path."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_path_segments:
        raise LimitExceededError(
            "max_path_segments", limits.max_path_segments, count, position, expression
        )


def check_ast_depth(
    depth: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
    expression: Optional[str] = None,
) -> None:
    """Validates nesting depth during parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_depth:
        raise LimitExceededError(
            "max_depth", limits.max_depth, depth, position, expression
        )


def check_ast_node_count(
    count: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
    expression: Optional[str] = None,
) -> None:
    """Validates AST node count while parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_ast_nodes:
        raise LimitExceededError(
            "max_ast_nodes", limits.max_ast_nodes, count, position, expression
        )
