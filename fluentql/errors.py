"""Custom exception hierarchy for fluentQL.

All public errors inherit from FluentQLError so callers can catch the base
class for any fluentQL-specific failure.
"""
from __future__ import annotations

from typing import Any


class FluentQLError(Exception):
    """Base exception for all fluentQL errors."""


class QueryBuilderInvalidArgumentError(FluentQLError, ValueError):
    """Raised when a builder method receives an argument it cannot use.

    Args:
        message: Human-readable description.
        argument: Name of the offending argument (e.g. ``"logical"``).
    """

    def __init__(self, message: str, argument: str | None = None) -> None:
        super().__init__(message)
        self.argument = argument


class QueryGenerationError(FluentQLError):
    """Raised when the recorded structure cannot be rendered as a statement.

    Args:
        message: Human-readable description.
        statement: The statement kind being generated (``"INSERT"``, ...).
    """

    def __init__(self, message: str, statement: str | None = None) -> None:
        super().__init__(message)
        self.statement = statement


class DialectError(FluentQLError):
    """Raised when a dialect name is not registered."""


class DatabaseConnectionError(FluentQLError):
    """Raised when a database connection cannot be opened.

    Args:
        message: Human-readable description.
        driver: The configured driver name.
    """

    def __init__(self, message: str, driver: str | None = None) -> None:
        super().__init__(message)
        self.driver = driver


class SQLQueryExecuteError(FluentQLError):
    """Raised when the driver fails to prepare or execute a statement.

    Args:
        message: Human-readable description.
        sql: The statement text that failed.
        parameters: The bindings supplied with the statement.
    """

    def __init__(
        self,
        message: str,
        sql: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.sql = sql
        self.parameters: dict[str, Any] = parameters or {}
