"""
Filter expression engine for the `filter` collection query parameter.

Parses expressions such as

    (priority eq 1 or city eq "Redmond") and price gt 100

into an immutable AST and evaluates them against records.
"""

from .ast import (
    AstNode,
    AstNodeBase,
    ComparisonNode,
    ComparisonOperator,
    FieldRefNode,
    LiteralNode,
    LiteralValue,
    LogicalBinaryNode,
    LogicalOperator,
    NotNode,
    ast_to_string,
    calculate_ast_depth,
    count_ast_nodes,
    to_filter_string,
)
from .config import FilterConfig, load_filter_config, parse_filter_config
from .errors import (
    ErrorObject,
    EvaluationError,
    ExpressionError,
    LimitExceededError,
    ParseError,
    SyntaxError,
    TokenizerError,
)

# Evaluator
from .evaluator import (
    ABSENT,
    EvaluationContext,
    EvaluationResult,
    Evaluator,
    evaluate,
    evaluate_safely,
    resolve_field_path,
)
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits

# Parser
from .parser import Parser, parse
from .predicate import Predicate, compile_filter

# Tokenizer
from .tokenizer import Token, TokenKind, Tokenizer, tokenize

__all__ = [
    # AST types
    "AstNode",
    "AstNodeBase",
    "LiteralNode",
    "FieldRefNode",
    "ComparisonNode",
    "LogicalBinaryNode",
    "NotNode",
    "ComparisonOperator",
    "LogicalOperator",
    "LiteralValue",
    "count_ast_nodes",
    "calculate_ast_depth",
    "ast_to_string",
    "to_filter_string",
    # Errors
    "ExpressionError",
    "SyntaxError",
    "TokenizerError",
    "ParseError",
    "LimitExceededError",
    "EvaluationError",
    "ErrorObject",
    # Limits and config
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    "FilterConfig",
    "load_filter_config",
    "parse_filter_config",
    # Tokenizer
    "Token",
    "TokenKind",
    "Tokenizer",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    # Evaluator
    "ABSENT",
    "EvaluationContext",
    "EvaluationResult",
    "Evaluator",
    "evaluate",
    "evaluate_safely",
    "resolve_field_path",
    # Predicates
    "Predicate",
    "compile_filter",
]
