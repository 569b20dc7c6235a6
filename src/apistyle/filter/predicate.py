"""
Compiled filter predicates.

A Predicate pairs a filter string with its parsed AST. It holds no
mutable state, so one instance can be cached and evaluated from many
threads for a whole collection scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TypeVar

from .ast import AstNode, calculate_ast_depth, count_ast_nodes, to_filter_string
from .errors import SyntaxError as FilterSyntaxError
from .evaluator import Record, evaluate
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits
from .parser import parse

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


@dataclass(frozen=True)
class Predicate:
    """A parsed filter ready to be applied to records."""

    source: str
    ast: AstNode

    def evaluate(self, record: Record) -> bool:
        """Returns True if the record satisfies the filter."""
        return evaluate(self.ast, record, source=self.source)

    def __call__(self, record: Record) -> bool:
        return self.evaluate(record)

    def filter(self, records: Iterable[R]) -> Iterator[R]:
        """Lazily yields the records that satisfy the filter."""
        for record in records:
            if self.evaluate(record):
                yield record

    def to_filter_string(self) -> str:
        """Returns the normalized filter string for this predicate."""
        return to_filter_string(self.ast)


def compile_filter(
    source: str, limits: Optional[ExpressionLimits] = None
) -> Predicate:
    """
    Parses a filter string into a reusable Predicate.

    Args:
        source: The raw value of the `filter` query parameter
        limits: Optional expression limits

    Returns:
        The compiled predicate

    Raises:
        SyntaxError: If the filter is malformed or exceeds a limit
    """
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    try:
        ast = parse(source, limits)
    except FilterSyntaxError as e:
        logger.debug(
            "filter_rejected",
            extra={
                "expression": source[:256],
                "error": e.message,
                "position": e.position,
                "token": e.token,
            },
        )
        raise

    logger.debug(
        "filter_compiled",
        extra={
            "expression": source,
            "node_count": count_ast_nodes(ast),
            "depth": calculate_ast_depth(ast),
        },
    )
    return Predicate(source=source, ast=ast)
