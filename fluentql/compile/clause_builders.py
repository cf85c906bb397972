"""Clause-level SQL builders.

Each class handles exactly one SQL clause and reads only the fields of a
:class:`~fluentql.schema.structure.QueryStructure` it owns.  Values in the
structure are already rendered, so these builders never touch the parameter
registry.

Classes
-------
SelectClauseBuilder   : ``SELECT <columns>`` and the SELECT helper templates
FromClauseBuilder     : ``FROM <tables>`` and table-reference formatting
JoinClauseBuilder     : ``<type> JOIN … ON …``
WhereClauseBuilder    : ``WHERE <predicates | 1>`` and ``HAVING …``
GroupByClauseBuilder  : ``GROUP BY …``
OrderByClauseBuilder  : ``ORDER BY …``
LimitClauseBuilder    : dialect-specific ``LIMIT`` / ``OFFSET``
"""
from __future__ import annotations

import re
from typing import Any

from fluentql.compile.base import Dialect
from fluentql.errors import QueryBuilderInvalidArgumentError, QueryGenerationError
from fluentql.schema.expressions import (
    JOIN_CONDITION_RE,
    TABLE_ALIAS_RE,
    JoinType,
    is_dotted_identifier,
    is_number,
)
from fluentql.schema.raw import Raw
from fluentql.schema.structure import PredicateBuckets, QueryStructure

_NUMERIC_TEXT_RE = re.compile(r"^-?\d+(\.\d+)?$")


def expression_sql(expression: Any, argument: str = "column") -> str:
    """Return the SQL text of a column expression (string or Raw)."""
    if isinstance(expression, Raw):
        return expression.get()
    if isinstance(expression, str) and expression.strip():
        return expression.strip()
    raise QueryBuilderInvalidArgumentError(
        f"Expected a non-empty string or Raw, got {expression!r}.", argument=argument
    )


class SelectClauseBuilder:
    """Builds the ``SELECT …`` clause and the column helper templates."""

    def build(self, structure: QueryStructure) -> str:
        if not structure.select:
            return "SELECT *"
        return f"SELECT {', '.join(structure.select)}"

    @staticmethod
    def aliased(expression: str, alias: str | None) -> str:
        if alias:
            return f"{expression} AS {alias.strip()}"
        return expression

    def function(self, name: str, column: Any, alias: str | None = None) -> str:
        """``NAME(column) [AS alias]``."""
        return self.aliased(f"{name}({expression_sql(column)})", alias)

    def coalesce(self, column: Any, default: Any, alias: str | None = None) -> str:
        """``COALESCE(column, default) [AS alias]`` with ``default`` inlined.

        Numbers and dotted identifiers are written as-is, ``None`` as
        ``NULL``, Raw verbatim, and any other text single-quoted.
        """
        if default is None:
            default_sql = "NULL"
        elif isinstance(default, Raw):
            default_sql = default.get()
        elif is_number(default):
            default_sql = str(default)
        elif isinstance(default, str) and (
            _NUMERIC_TEXT_RE.match(default) or is_dotted_identifier(default)
        ):
            default_sql = default
        else:
            escaped = str(default).replace("'", "''")
            default_sql = f"'{escaped}'"
        return self.aliased(f"COALESCE({expression_sql(column)}, {default_sql})", alias)

    def substring(
        self, name: str, column: Any, *numbers: int, alias: str | None = None
    ) -> str:
        """``MID`` / ``LEFT`` / ``RIGHT`` with integer arguments."""
        for number in numbers:
            if not isinstance(number, int) or isinstance(number, bool):
                raise QueryBuilderInvalidArgumentError(
                    f"{name} expects integer arguments, got {number!r}.", argument="length"
                )
        args = ", ".join(str(n) for n in numbers)
        return self.aliased(f"{name}({expression_sql(column)}, {args})", alias)

    def concat(self, columns: Any, alias: str | None = None) -> str:
        if isinstance(columns, (str, Raw)):
            columns = [columns]
        parts = [expression_sql(column) for column in columns]
        if not parts:
            raise QueryBuilderInvalidArgumentError(
                "CONCAT needs at least one column.", argument="columns"
            )
        return self.aliased(f"CONCAT({', '.join(parts)})", alias)


class FromClauseBuilder:
    """Builds the ``FROM …`` fragment and formats table references."""

    def build(self, structure: QueryStructure) -> str:
        if not structure.tables:
            raise QueryGenerationError("No table was given to select from.", statement="SELECT")
        return f"FROM {', '.join(structure.tables)}"

    @classmethod
    def references(cls, table: Any, alias: str | None = None) -> list[str]:
        """Return the references of a comma-separated table list.

        Raises:
            QueryBuilderInvalidArgumentError: An empty list item, or an
                ``alias`` given for more than one table.
        """
        if isinstance(table, Raw) or not isinstance(table, str) or "," not in table:
            return [cls.reference(table, alias)]
        names = [name.strip() for name in table.split(",")]
        if not all(names):
            raise QueryBuilderInvalidArgumentError(
                f"Table list {table!r} has an empty item.", argument="table"
            )
        if alias:
            raise QueryBuilderInvalidArgumentError(
                "An alias can only be given for a single table.", argument="alias"
            )
        return [cls.reference(name) for name in names]

    @staticmethod
    def reference(table: Any, alias: str | None = None) -> str:
        """Return ``table`` or ``table AS alias``.

        ``"post p"`` and ``"post AS p"`` are read as a table with an alias.
        """
        if isinstance(table, Raw):
            sql = table.get()
            return f"{sql} AS {alias.strip()}" if alias else sql
        name = expression_sql(table, argument="table")
        if "," in name:
            raise QueryBuilderInvalidArgumentError(
                f"Expected a single table, got the list {name!r}.", argument="table"
            )
        if alias:
            return f"{name} AS {alias.strip()}"
        match = TABLE_ALIAS_RE.match(name)
        if match:
            return f"{match.group(1)} AS {match.group(2)}"
        return name

    @staticmethod
    def target(structure: QueryStructure, statement: str) -> str:
        """Return the last table reference without its alias.

        Raises:
            QueryGenerationError: If no table has been designated.
        """
        if not structure.tables:
            raise QueryGenerationError(
                f"No table was given for the {statement} statement.", statement=statement
            )
        return structure.tables[-1].split(" AS ", 1)[0]


class JoinClauseBuilder:
    """Builds ``<type> JOIN …`` fragments."""

    def build(self, structure: QueryStructure) -> str:
        return " ".join(structure.joins.values())

    @staticmethod
    def clause(join_type: JoinType, reference: str, condition: str | None) -> str:
        if join_type is JoinType.NATURAL:
            return f"NATURAL JOIN {reference}"
        return f"{join_type.value} JOIN {reference} ON {condition}"

    @staticmethod
    def condition(on: str) -> str:
        """Validate and normalize an ``a.b <op> c.d`` condition.

        Raises:
            QueryBuilderInvalidArgumentError: If ``on`` has another shape.
        """
        match = JOIN_CONDITION_RE.match(on)
        if match is None:
            raise QueryBuilderInvalidArgumentError(
                f"Join condition must look like 'table.column = table.column', got {on!r}.",
                argument="on",
            )
        return f"{match.group(1)} {match.group(2)} {match.group(3)}"


class WhereClauseBuilder:
    """Builds ``WHERE`` (always present) and ``HAVING`` (when populated)."""

    def build(self, buckets: PredicateBuckets) -> str:
        return f"WHERE {buckets.render() or '1'}"

    def build_having(self, buckets: PredicateBuckets) -> str:
        if buckets.is_empty():
            return ""
        return f"HAVING {buckets.render()}"


class GroupByClauseBuilder:
    """Builds ``GROUP BY …``."""

    def build(self, structure: QueryStructure) -> str:
        if not structure.group_by:
            return ""
        return f"GROUP BY {', '.join(structure.group_by)}"


class OrderByClauseBuilder:
    """Builds ``ORDER BY …``."""

    def build(self, structure: QueryStructure) -> str:
        if not structure.order_by:
            return ""
        return f"ORDER BY {', '.join(structure.order_by)}"


class LimitClauseBuilder:
    """Delegates ``LIMIT`` / ``OFFSET`` syntax to the dialect."""

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect

    def build(self, structure: QueryStructure) -> str:
        return self._dialect.limit_clause(structure.limit, structure.offset)
