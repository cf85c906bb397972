"""Dialect abstractions: CompiledSQL and the Dialect ABC.

The Template Method pattern (GoF) is used:
- ``Dialect`` owns the algorithm for turning builder output (``:name``
  placeholders plus a ``{":name": value}`` mapping) into what a DB-API
  driver expects.
- ``MySQLDialect``, ``SQLiteDialect`` and ``PostgresDialect`` override the
  dialect-specific steps (placeholder style, LIMIT / OFFSET syntax).
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

#: ``:name`` not preceded by another colon or a word character, so that
#: PostgreSQL ``::type`` casts and ``'10:30'`` literals are left alone.
NAMED_PLACEHOLDER_RE = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")


@dataclass
class CompiledSQL:
    """A statement ready to hand to a driver's ``cursor.execute``.

    Attributes:
        sql: Statement text in the driver's placeholder style.
        params: Bind values keyed by bare placeholder name (no colon).
        dialect: The dialect that prepared the statement.
    """

    sql: str
    params: dict[str, Any]
    dialect: str


class Dialect(ABC):
    """Abstract base for SQL dialects.

    Subclasses implement the dialect-specific methods; the query builder uses
    :meth:`limit_clause` while rendering and the database layer uses
    :meth:`prepare` before execution.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name (``'mysql'``, ``'sqlite'``...)."""

    @abstractmethod
    def param_placeholder(self, name: str) -> str:
        """Return the driver placeholder for a bare parameter name.

        Args:
            name: Parameter name without its colon (e.g. ``'status_1'``).

        Returns:
            Dialect-specific placeholder string.
        """

    @abstractmethod
    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        """Return the LIMIT / OFFSET tail, or an empty string.

        Args:
            limit: Maximum number of rows, or ``None``.
            offset: Rows to skip, or ``None``.
        """

    def escape_literal_percent(self) -> bool:
        """Whether literal ``%`` must be doubled for this driver."""
        return False

    def prepare(self, sql: str, parameters: dict[str, Any]) -> CompiledSQL:
        """Translate builder output into the driver's parameter style.

        Only placeholders that have a binding are rewritten, so stray colons
        inside trusted fragments survive untouched.  Bindings the statement
        does not reference are dropped.

        Args:
            sql: Statement text using ``:name`` placeholders.
            parameters: Registry mapping (``{":name": value}``).

        Returns:
            :class:`CompiledSQL` with translated text and bare-name params.
        """
        available = {key.lstrip(":"): value for key, value in parameters.items()}
        used: dict[str, Any] = {}
        if self.escape_literal_percent():
            sql = sql.replace("%", "%%")

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in available:
                return match.group(0)
            used[name] = available[name]
            return self.param_placeholder(name)

        translated = NAMED_PLACEHOLDER_RE.sub(_replace, sql)
        return CompiledSQL(sql=translated, params=used, dialect=self.dialect_name)
