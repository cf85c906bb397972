"""fluentQL compilation layer: fluent calls → parameterized SQL text."""
from fluentql.compile.base import CompiledSQL, Dialect
from fluentql.compile.builder import QueryBuilder
from fluentql.compile.mysql import MySQLDialect
from fluentql.compile.parameters import ParameterRegistry
from fluentql.compile.postgres import PostgresDialect
from fluentql.compile.sqlite import SQLiteDialect

__all__ = [
    "CompiledSQL",
    "Dialect",
    "QueryBuilder",
    "MySQLDialect",
    "ParameterRegistry",
    "PostgresDialect",
    "SQLiteDialect",
]
