"""
Parser for filter expressions.

Parses a stream of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent with one token of lookahead.

Precedence (lowest to highest):
1. Logical OR: or
2. Logical AND: and
3. Negation: not
4. Primary: parenthesized expression, comparison

Comparisons always have a field path on the left and a literal on
the right. Parsing stops at the first error; no partial tree is
ever returned.
"""

from typing import Iterable, Iterator, Optional

from .ast import (
    NOT_KEYWORD,
    AstNode,
    ComparisonNode,
    ComparisonOperator,
    FieldRefNode,
    LiteralNode,
    LogicalBinaryNode,
    LogicalOperator,
    NotNode,
)
from .errors import ParseError
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
)
from .tokenizer import Token, TokenKind, Tokenizer

LITERAL_KINDS = (TokenKind.STRING, TokenKind.NUMBER, TokenKind.BOOLEAN, TokenKind.NULL)

COMPARISON_WORDS = frozenset(op.value for op in ComparisonOperator)


class Parser:
    """Parser for filter token streams."""

    def __init__(
        self,
        tokens: Iterable[Token],
        source: str,
        limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
    ):
        self._tokens: Iterator[Token] = iter(tokens)
        self._source = source
        self._limits = limits
        self._depth = 0
        self._node_count = 0
        self._previous: Optional[Token] = None
        self._current = self._next_token()

    def parse(self) -> AstNode:
        """Parses the token stream into an AST."""
        if self._is_at_end():
            raise ParseError("Empty filter expression", 0, self._source)

        ast = self._parse_or()

        if not self._is_at_end():
            token = self._peek()
            if token.kind == TokenKind.RPAREN:
                raise self._error("Unmatched ')'", token)
            raise self._error(f"Unexpected token: '{token.text}'", token)

        return ast

    # ============================================================
    # Token Helpers
    # ============================================================

    def _next_token(self) -> Token:
        token = next(self._tokens, None)
        if token is None:
            # Token sources without a trailing EOF end here
            return Token(TokenKind.EOF, "", len(self._source))
        return token

    def _is_at_end(self) -> bool:
        return self._current.kind == TokenKind.EOF

    def _peek(self) -> Token:
        return self._current

    def _advance(self) -> Token:
        self._previous = self._current
        if not self._is_at_end():
            self._current = self._next_token()
        return self._previous

    def _check(self, kind: TokenKind) -> bool:
        return self._current.kind == kind

    def _match_operator(self, word: str) -> bool:
        if self._current.is_operator(word):
            self._advance()
            return True
        return False

    def _error(self, message: str, token: Token) -> ParseError:
        return ParseError(
            message,
            token.position,
            self._source,
            token.text if token.kind != TokenKind.EOF else None,
        )

    def _enter(self, token: Token) -> None:
        self._depth += 1
        check_ast_depth(self._depth, self._limits, token.position, self._source)

    def _leave(self) -> None:
        self._depth -= 1

    def _add_nodes(self, count: int, token: Token) -> None:
        # Counted while building, before any recursive walk of the tree
        self._node_count += count
        check_ast_node_count(
            self._node_count, self._limits, token.position, self._source
        )

    # ============================================================
    # Expression Parsing (by precedence, lowest to highest)
    # ============================================================

    def _parse_or(self) -> AstNode:
        """Parses logical OR: or"""
        node = self._parse_and()

        while self._match_operator(LogicalOperator.OR.value):
            position = self._previous.position
            self._add_nodes(1, self._previous)
            right = self._parse_and()
            node = LogicalBinaryNode(
                position=position,
                operator=LogicalOperator.OR,
                left=node,
                right=right,
            )

        return node

    def _parse_and(self) -> AstNode:
        """Parses logical AND: and"""
        node = self._parse_not()

        while self._match_operator(LogicalOperator.AND.value):
            position = self._previous.position
            self._add_nodes(1, self._previous)
            right = self._parse_not()
            node = LogicalBinaryNode(
                position=position,
                operator=LogicalOperator.AND,
                left=node,
                right=right,
            )

        return node

    def _parse_not(self) -> AstNode:
        """Parses negation: not"""
        if self._match_operator(NOT_KEYWORD):
            token = self._previous
            self._enter(token)
            self._add_nodes(1, token)
            try:
                operand = self._parse_not()
            finally:
                self._leave()
            return NotNode(position=token.position, operand=operand)

        return self._parse_primary()

    def _parse_primary(self) -> AstNode:
        """Parses primary expressions: parenthesized groups and comparisons."""
        token = self._peek()

        if self._check(TokenKind.LPAREN):
            self._advance()
            self._enter(token)
            try:
                expr = self._parse_or()
            finally:
                self._leave()

            if not self._check(TokenKind.RPAREN):
                closing = self._peek()
                if closing.kind == TokenKind.EOF:
                    raise self._error(
                        f"Unmatched '(' at position {token.position}: "
                        "unexpected end of input",
                        closing,
                    )
                raise self._error(
                    f"Expected ')' to close '(' at position {token.position}, "
                    f"got '{closing.text}'",
                    closing,
                )
            self._advance()
            return expr

        return self._parse_comparison()

    def _parse_comparison(self) -> AstNode:
        """Parses a comparison: field_path comp_op literal"""
        field_token = self._peek()

        if field_token.kind == TokenKind.EOF:
            raise self._error("Unexpected end of input: expected a comparison", field_token)
        if field_token.kind in LITERAL_KINDS:
            raise self._error(
                "Expected field path on the left side of a comparison, "
                f"got literal '{field_token.text}'",
                field_token,
            )
        if field_token.kind != TokenKind.IDENTIFIER:
            raise self._error(
                f"Unexpected token: '{field_token.text}', expected a comparison",
                field_token,
            )
        self._advance()

        field = FieldRefNode(
            position=field_token.position,
            path=tuple(field_token.text.split(".")),
        )

        op_token = self._peek()
        if op_token.kind == TokenKind.EOF:
            raise self._error(
                f"Unexpected end of input: expected comparison operator "
                f"after '{field_token.text}'",
                op_token,
            )
        if op_token.kind != TokenKind.OPERATOR or op_token.text not in COMPARISON_WORDS:
            raise self._error(
                f"Expected comparison operator after '{field_token.text}', "
                f"got '{op_token.text}'",
                op_token,
            )
        self._advance()
        operator = ComparisonOperator(op_token.text)

        literal_token = self._peek()
        if literal_token.kind == TokenKind.EOF:
            raise self._error(
                f"Unexpected end of input: expected literal after '{op_token.text}'",
                literal_token,
            )
        if literal_token.kind == TokenKind.IDENTIFIER:
            raise self._error(
                "Field-to-field comparison is not supported: "
                f"'{literal_token.text}' is not a literal",
                literal_token,
            )
        if literal_token.kind not in LITERAL_KINDS:
            raise self._error(
                f"Expected literal after '{op_token.text}', got '{literal_token.text}'",
                literal_token,
            )
        self._advance()
        self._add_nodes(3, op_token)

        return ComparisonNode(
            position=op_token.position,
            operator=operator,
            field=field,
            literal=LiteralNode(position=literal_token.position, value=literal_token.value),
        )


def parse(
    source: str, limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS
) -> AstNode:
    """
    Parses a filter string into an AST.

    Args:
        source: The filter string to parse
        limits: Optional expression limits

    Returns:
        The parsed AST

    Raises:
        TokenizerError: If tokenization fails
        ParseError: If parsing fails
        LimitExceededError: If the filter exceeds a configured limit
    """
    parser = Parser(Tokenizer(source, limits), source, limits)
    return parser.parse()
