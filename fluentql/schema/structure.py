"""Pydantic models for the in-progress query state.

A :class:`QueryStructure` holds every clause a builder has accumulated, as
already-rendered SQL text.  Values that needed binding were registered in the
parameter registry before reaching the structure, so the model contains only
strings and integers and round-trips through ``model_dump`` /
``model_validate`` without loss.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt

from fluentql.schema.expressions import LogicalOp


class PredicateBuckets(BaseModel):
    """Rendered predicates of one clause, split by logical connective.

    Attributes:
        and_: Predicates attached with ``AND``, in insertion order.
        or_: Predicates attached with ``OR``, in insertion order.
    """

    model_config = ConfigDict(extra="forbid")

    and_: list[str] = Field(default_factory=list)
    or_: list[str] = Field(default_factory=list)

    def append(self, logical: LogicalOp, predicate: str) -> None:
        if logical is LogicalOp.OR:
            self.or_.append(predicate)
        else:
            self.and_.append(predicate)

    def is_empty(self) -> bool:
        return not self.and_ and not self.or_

    def render(self) -> str:
        """Join both buckets into one boolean expression.

        The OR bucket is parenthesized when it holds several predicates and
        follows a non-empty AND bucket, so ``a AND (b OR c)`` keeps its
        meaning.
        """
        and_sql = " AND ".join(self.and_)
        or_sql = " OR ".join(self.or_)
        if not self.or_:
            return and_sql
        if not self.and_:
            return or_sql
        if len(self.or_) > 1:
            or_sql = f"({or_sql})"
        return f"{and_sql} AND {or_sql}"


class QueryStructure(BaseModel):
    """Every clause recorded by a :class:`~fluentql.compile.builder.QueryBuilder`.

    Attributes:
        select: Column expressions; empty renders ``*``.
        tables: Table references; the last one is the write target.
        joins: Table reference -> rendered join clause, in insertion order.
        where: WHERE predicates.
        having: HAVING predicates.
        on: ON predicates collected inside a join callback.
        group_by: GROUP BY expressions, without duplicates.
        order_by: ``"column DIRECTION"`` items, without duplicates.
        offset: Row offset.
        limit: Row count.
        set_rows: One column -> SQL expression map per written row.
    """

    model_config = ConfigDict(extra="forbid")

    select: list[str] = Field(default_factory=list)
    tables: list[str] = Field(default_factory=list)
    joins: dict[str, str] = Field(default_factory=dict)
    where: PredicateBuckets = Field(default_factory=PredicateBuckets)
    having: PredicateBuckets = Field(default_factory=PredicateBuckets)
    on: PredicateBuckets = Field(default_factory=PredicateBuckets)
    group_by: list[str] = Field(default_factory=list)
    order_by: list[str] = Field(default_factory=list)
    offset: NonNegativeInt | None = None
    limit: PositiveInt | None = None
    set_rows: list[dict[str, str]] = Field(default_factory=list)

    def merge(self, other: QueryStructure) -> None:
        """Fold ``other`` into this structure in place.

        Lists are extended without introducing duplicates where the clause
        forbids them, joins and set rows are appended, and scalar fields are
        taken from ``other`` when it sets them.
        """
        self.select.extend(other.select)
        for table in other.tables:
            if table not in self.tables:
                self.tables.append(table)
        for key, clause in other.joins.items():
            self.joins.setdefault(key, clause)
        for name in ("where", "having", "on"):
            mine: PredicateBuckets = getattr(self, name)
            theirs: PredicateBuckets = getattr(other, name)
            mine.and_.extend(theirs.and_)
            mine.or_.extend(theirs.or_)
        for column in other.group_by:
            if column not in self.group_by:
                self.group_by.append(column)
        for item in other.order_by:
            if item not in self.order_by:
                self.order_by.append(item)
        if other.offset is not None:
            self.offset = other.offset
        if other.limit is not None:
            self.limit = other.limit
        self.set_rows.extend(dict(row) for row in other.set_rows)


#: Public section names accepted by ``reset_structure`` mapped to fields.
SECTION_ALIASES: dict[str, str] = {
    "select": "select",
    "table": "tables",
    "tables": "tables",
    "from": "tables",
    "join": "joins",
    "joins": "joins",
    "where": "where",
    "having": "having",
    "on": "on",
    "group_by": "group_by",
    "groupby": "group_by",
    "order_by": "order_by",
    "orderby": "order_by",
    "offset": "offset",
    "limit": "limit",
    "set": "set_rows",
    "set_rows": "set_rows",
}


def empty_section(name: str) -> Any:
    """Return the default value of structure field ``name``."""
    return QueryStructure.model_fields[name].get_default(call_default_factory=True)
