"""
Error types for the filter expression engine.

All filter errors extend ExpressionError for consistent handling.
Parse-time failures extend SyntaxError so callers can reject the whole
query with a single except clause.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorObject(BaseModel):
    """Client-facing error object for a rejected filter."""

    code: str = Field(..., description="Machine-readable error code")
    title: str = Field(..., description="Short human-readable summary")
    detail: str = Field(..., description="Explanation including the offending token")


class ExpressionError(Exception):
    """
    Base error class for all filter expression errors.
    """

    code = "invalid_filter"
    title = "Invalid filter expression"

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"

    def describe(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"

    def to_error_object(self) -> ErrorObject:
        return ErrorObject(code=self.code, title=self.title, detail=self.describe())


class SyntaxError(ExpressionError):
    """
    Error raised when a filter expression is rejected before evaluation.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
        token: Optional[str] = None,
    ):
        super().__init__(message, position, expression)
        self.token = token

    def describe(self) -> str:
        detail = super().describe()
        if self.token and f"'{self.token}'" not in self.message:
            detail = f"{detail}, near '{self.token}'"
        return detail


class TokenizerError(SyntaxError):
    """
    Error raised during tokenization (lexical analysis).
    """

    pass


class ParseError(SyntaxError):
    """
    Error raised during parsing (syntax analysis).
    """

    pass


class LimitExceededError(SyntaxError):
    """
    Error raised when an expression exceeds a configured limit.
    """

    def __init__(
        self,
        limit_name: str,
        limit: int,
        actual: int,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message, position, expression)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual


class EvaluationError(ExpressionError):
    """
    Error raised during evaluation against a record.
    """

    code = "invalid_filter_type"
    title = "Filter not applicable to record"

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message, position, expression)
        self.path = path
