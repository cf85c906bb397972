"""fluentQL – a fluent SQL query builder with named-parameter binding.

Public API
----------
``QueryBuilder``
    Accumulates clauses fluently and renders SELECT / INSERT / batch INSERT /
    UPDATE / batch UPDATE / DELETE statements with ``:name`` placeholders.

``ParameterRegistry``
    The ``{":name": value}`` bindings a builder produced.

``Raw``
    Trusted SQL emitted verbatim.

``Database``
    A ``QueryBuilder`` bound to a DB-API connection, with CRUD helpers,
    transactions and query logging.

Extensibility
-------------
New dialects can be registered via::

    from fluentql.compile.registry import DialectFactory

    @DialectFactory.register("mariadb")
    class MariaDBDialect(MySQLDialect):
        ...

After registration, ``QueryBuilder(dialect="mariadb")`` and
``ConnectionConfig(dialect="mariadb")`` pick it up.
"""

from __future__ import annotations

import logging

from fluentql.compile.base import CompiledSQL, Dialect
from fluentql.compile.builder import QueryBuilder
from fluentql.compile.mysql import MySQLDialect
from fluentql.compile.parameters import ParameterRegistry
from fluentql.compile.postgres import PostgresDialect
from fluentql.compile.registry import DialectFactory, OperatorRegistry
from fluentql.compile.sqlite import SQLiteDialect
from fluentql.dbal.config import ConnectionConfig, QueryOptions
from fluentql.dbal.connection import Connection
from fluentql.dbal.database import Database
from fluentql.dbal.result import Result
from fluentql.errors import (
    DatabaseConnectionError,
    DialectError,
    FluentQLError,
    QueryBuilderInvalidArgumentError,
    QueryGenerationError,
    SQLQueryExecuteError,
)
from fluentql.schema.expressions import JoinType, LogicalOp, Operator, SortDirection
from fluentql.schema.raw import Raw
from fluentql.schema.structure import PredicateBuckets, QueryStructure

# ---------------------------------------------------------------------------
# Register built-in dialects with DialectFactory
# ---------------------------------------------------------------------------

DialectFactory.register_class("mysql", MySQLDialect)
DialectFactory.register_class("sqlite", SQLiteDialect)
DialectFactory.register_class("postgres", PostgresDialect)

logging.getLogger("fluentql").addHandler(logging.NullHandler())

__all__ = [
    # Building
    "QueryBuilder",
    "ParameterRegistry",
    "Raw",
    "QueryStructure",
    "PredicateBuckets",
    "Operator",
    "LogicalOp",
    "JoinType",
    "SortDirection",
    # Dialects
    "CompiledSQL",
    "Dialect",
    "DialectFactory",
    "OperatorRegistry",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    # Database layer
    "Connection",
    "ConnectionConfig",
    "Database",
    "QueryOptions",
    "Result",
    # Errors
    "FluentQLError",
    "QueryBuilderInvalidArgumentError",
    "QueryGenerationError",
    "DialectError",
    "DatabaseConnectionError",
    "SQLQueryExecuteError",
]
