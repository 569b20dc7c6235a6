"""
Tokenizer (lexer) for filter expressions.

Converts a filter string into a lazy, single-pass stream of tokens.
The stream always ends with an EOF token.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from .ast import NOT_KEYWORD, ComparisonOperator, LiteralValue, LogicalOperator
from .errors import TokenizerError
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_expression_length,
    check_path_segments,
    check_string_length,
)


class TokenKind(Enum):
    """Token kinds produced by the tokenizer."""

    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    OPERATOR = "OPERATOR"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A token produced by the tokenizer."""

    kind: TokenKind
    text: str
    position: int
    value: LiteralValue = None
    """Decoded literal for NUMBER, STRING and BOOLEAN tokens."""

    def is_operator(self, name: str) -> bool:
        return self.kind == TokenKind.OPERATOR and self.text == name


OPERATOR_WORDS = frozenset(
    [op.value for op in ComparisonOperator]
    + [op.value for op in LogicalOperator]
    + [NOT_KEYWORD]
)

# Words that are never identifiers (case-sensitive)
KEYWORDS: Dict[str, Tuple[TokenKind, LiteralValue]] = {
    "true": (TokenKind.BOOLEAN, True),
    "false": (TokenKind.BOOLEAN, False),
    "null": (TokenKind.NULL, None),
    **{word: (TokenKind.OPERATOR, None) for word in OPERATOR_WORDS},
}


def _is_digit(ch: str) -> bool:
    """Checks if a character is a digit."""
    return "0" <= ch <= "9"


def _is_identifier_start(ch: str) -> bool:
    """Checks if a character can start an identifier."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_identifier_part(ch: str) -> bool:
    """Checks if a character can continue an identifier."""
    return _is_identifier_start(ch) or _is_digit(ch)


def _is_whitespace(ch: str) -> bool:
    """Checks if a character is whitespace."""
    return ch in (" ", "\t", "\n", "\r")


class Tokenizer(Iterator[Token]):
    """
    Single-pass tokenizer over a filter string.

    Iterating yields tokens left to right and stops after EOF. The
    iterator cannot be restarted; create a new Tokenizer instead.
    """

    def __init__(self, source: str, limits: Optional[ExpressionLimits] = None):
        self._source = source
        self._limits = limits or DEFAULT_EXPRESSION_LIMITS
        self._position = 0
        self._finished = False
        check_expression_length(source, self._limits)

    def __iter__(self) -> "Tokenizer":
        return self

    def __next__(self) -> Token:
        if self._finished:
            raise StopIteration

        while not self._is_at_end() and _is_whitespace(self._peek()):
            self._advance()

        if self._is_at_end():
            self._finished = True
            return Token(TokenKind.EOF, "", self._position)

        return self._scan_token()

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _peek(self) -> str:
        if self._is_at_end():
            return "\0"
        return self._source[self._position]

    def _peek_next(self) -> str:
        if self._position + 1 >= len(self._source):
            return "\0"
        return self._source[self._position + 1]

    def _advance(self) -> str:
        ch = self._source[self._position]
        self._position += 1
        return ch

    def _error(self, message: str, position: int, token: str) -> TokenizerError:
        self._finished = True
        return TokenizerError(message, position, self._source, token)

    def _scan_token(self) -> Token:
        start_position = self._position
        ch = self._peek()

        if ch == "(":
            self._advance()
            return Token(TokenKind.LPAREN, ch, start_position)

        if ch == ")":
            self._advance()
            return Token(TokenKind.RPAREN, ch, start_position)

        if ch == '"':
            return self._scan_string(start_position)

        if _is_digit(ch) or (ch == "-" and _is_digit(self._peek_next())):
            return self._scan_number(start_position)

        if _is_identifier_start(ch):
            return self._scan_word(start_position)

        raise self._error(f"Unexpected character: '{ch}'", start_position, ch)

    def _scan_string(self, start_position: int) -> Token:
        # Consume opening quote
        self._advance()

        while not self._is_at_end() and self._peek() != '"':
            self._advance()

        if self._is_at_end():
            raise self._error(
                "Unterminated string", start_position, self._source[start_position:]
            )

        # Consume closing quote
        self._advance()

        text = self._source[start_position : self._position]
        value = text[1:-1]
        check_string_length(len(value), self._limits, start_position, self._source)

        return Token(TokenKind.STRING, text, start_position, value)

    def _scan_number(self, start_position: int) -> Token:
        if self._peek() == "-":
            self._advance()

        # Integer part
        while _is_digit(self._peek()):
            self._advance()

        # Fractional part
        is_decimal = False
        if self._peek() == ".":
            if not _is_digit(self._peek_next()):
                raise self._error(
                    "Invalid number: expected digits after '.'",
                    start_position,
                    self._source[start_position : self._position + 1],
                )
            is_decimal = True
            self._advance()
            while _is_digit(self._peek()):
                self._advance()

        if _is_identifier_part(self._peek()) or self._peek() == ".":
            while _is_identifier_part(self._peek()) or self._peek() == ".":
                self._advance()
            text = self._source[start_position : self._position]
            raise self._error(f"Invalid number: '{text}'", start_position, text)

        text = self._source[start_position : self._position]
        try:
            value: LiteralValue = float(text) if is_decimal else int(text)
        except ValueError as e:
            # int() refuses digit strings past the interpreter's conversion limit
            raise self._error(f"Invalid number: {e}", start_position, text) from e
        if is_decimal and not math.isfinite(value):
            raise self._error("Number out of range", start_position, text)
        return Token(TokenKind.NUMBER, text, start_position, value)

    def _scan_word(self, start_position: int) -> Token:
        while _is_identifier_part(self._peek()) or self._peek() == ".":
            self._advance()

        text = self._source[start_position : self._position]

        keyword = KEYWORDS.get(text)
        if keyword is not None:
            kind, value = keyword
            return Token(kind, text, start_position, value)

        self._validate_field_path(text, start_position)
        return Token(TokenKind.IDENTIFIER, text, start_position)

    def _validate_field_path(self, text: str, start_position: int) -> None:
        segments = text.split(".")
        check_path_segments(len(segments), self._limits, start_position, self._source)

        offset = start_position
        for segment in segments:
            if not segment:
                raise self._error(
                    f"Invalid field path '{text}': empty segment", offset, text
                )
            if not _is_identifier_start(segment[0]):
                raise self._error(
                    f"Invalid field path '{text}': segment '{segment}' must start "
                    "with a letter or '_'",
                    offset,
                    text,
                )
            if segment in KEYWORDS:
                raise self._error(
                    f"Reserved word '{segment}' cannot be used as a field name",
                    offset,
                    text,
                )
            offset += len(segment) + 1


def tokenize(source: str, limits: Optional[ExpressionLimits] = None) -> List[Token]:
    """
    Tokenizes a filter string into tokens.

    Args:
        source: The filter string to tokenize
        limits: Optional expression limits

    Returns:
        List of tokens, ending with EOF

    Raises:
        TokenizerError: If the filter contains invalid tokens
        LimitExceededError: If the filter exceeds a configured limit
    """
    return list(Tokenizer(source, limits))
