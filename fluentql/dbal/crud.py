"""One-call create / read / update / delete helpers.

``CRUDMixin`` is mixed into :class:`~fluentql.dbal.database.Database`.  Each
helper optionally takes the table and payload as arguments, otherwise uses
what was already recorded with the fluent API, executes the statement, and
resets the recorded structure so the next statement starts clean.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from fluentql.schema.raw import Raw

if TYPE_CHECKING:
    from fluentql.dbal.database import Database
    from fluentql.dbal.result import Result


class CRUDMixin:
    """Statement shortcuts built on the fluent builder and ``query``."""

    def create(self: Database, table: str | None = None, values: Mapping[str, Any] | None = None) -> bool:
        """Insert one row; returns True when a row was written."""
        try:
            if values:
                self.set(values)
            if table:
                self.from_(table)
            result = self.query(self.generate_insert_query())
        finally:
            self.reset_structure()
        return result.num_rows() > 0

    def create_batch(
        self: Database,
        table: str | None = None,
        rows: Iterable[Mapping[str, Any]] | None = None,
    ) -> bool:
        """Insert several rows in one statement."""
        try:
            for row in rows or []:
                if row:
                    self.set(row)
            if table:
                self.from_(table)
            result = self.query(self.generate_batch_insert_query())
        finally:
            self.reset_structure()
        return result.num_rows() > 0

    def read(
        self: Database,
        table: str | None = None,
        selector: Iterable[str | Raw] | None = None,
        conditions: Mapping[str, Any] | Iterable[str | Raw] | None = None,
        parameters: Mapping[str, Any] | None = None,
    ) -> Result:
        """Run a SELECT and return its result."""
        try:
            if parameters:
                self.set_parameters(parameters)
            if table:
                self.from_(table)
            return self.query(self.generate_select_query(selector, conditions))
        finally:
            self.reset_structure()

    def read_one(
        self: Database,
        table: str | None = None,
        selector: Iterable[str | Raw] | None = None,
        conditions: Mapping[str, Any] | Iterable[str | Raw] | None = None,
        parameters: Mapping[str, Any] | None = None,
    ) -> Result:
        """Like :meth:`read` with ``LIMIT 1``."""
        self.limit(1)
        return self.read(table, selector, conditions, parameters)

    def update(self: Database, table: str | None = None, values: Mapping[str, Any] | None = None) -> bool:
        """Update rows matching the recorded WHERE; True when any changed."""
        try:
            if values:
                self.set(values)
            if table:
                self.from_(table)
            result = self.query(self.generate_update_query())
        finally:
            self.reset_structure()
        return result.num_rows() > 0

    def update_batch(
        self: Database,
        table: str | None = None,
        rows: Iterable[Mapping[str, Any]] | None = None,
        reference_column: str = "id",
    ) -> bool:
        """Apply per-row values identified by ``reference_column``."""
        try:
            for row in rows or []:
                if row:
                    self.set(row)
            if table:
                self.from_(table)
            result = self.query(self.generate_update_batch_query(reference_column))
        finally:
            self.reset_structure()
        return result.num_rows() > 0

    def delete(
        self: Database,
        table: str | None = None,
        conditions: Mapping[str, Any] | Iterable[str | Raw] | None = None,
    ) -> bool:
        """Delete matching rows.

        ``conditions`` is a column -> value mapping of equality predicates,
        or a sequence of trusted predicate strings / Raw fragments.
        """
        try:
            if isinstance(conditions, Mapping):
                for column, value in conditions.items():
                    if isinstance(value, (list, tuple)):
                        self.where_in(column, value)
                    else:
                        self.where(column, "=", value)
            elif conditions:
                for condition in conditions:
                    self.where(condition if isinstance(condition, Raw) else Raw(condition))
            if table:
                self.from_(table)
            result = self.query(self.generate_delete_query())
        finally:
            self.reset_structure()
        return result.num_rows() > 0
