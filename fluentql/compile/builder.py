"""Fluent query construction and statement generation.

``QueryBuilder`` is the top-level orchestrator.  Fluent calls record
already-rendered SQL fragments in a
:class:`~fluentql.schema.structure.QueryStructure` and register bound values
in a :class:`~fluentql.compile.parameters.ParameterRegistry`; the
``generate_*_query`` methods assemble the fragments into statement text.
Clause rendering is delegated to focused sub-builders and LIMIT syntax to the
injected :class:`~fluentql.compile.base.Dialect`.

Sub-builder hierarchy
---------------------
QueryBuilder
  ├── PredicateBuilder      (expression_builder.py)
  ├── SelectClauseBuilder   (clause_builders.py)
  ├── FromClauseBuilder     (clause_builders.py)
  ├── JoinClauseBuilder     (clause_builders.py)
  ├── WhereClauseBuilder    (clause_builders.py)
  ├── GroupByClauseBuilder  (clause_builders.py)
  ├── OrderByClauseBuilder  (clause_builders.py)
  └── LimitClauseBuilder    (clause_builders.py)

Parameter registry sharing
--------------------------
Nested builders handed to ``group``, join callbacks, ``sub_query`` and
``raw`` share the outer registry, so placeholder names are unique across
the whole statement.  Only rendered text flows back into the outer
structure.  A ``Raw(callable)`` evaluated on its own builder brings its
bindings along; they are adopted, renamed on collision, when it is passed in.

Example::

    qb = QueryBuilder()
    sql = (
        qb.select("id", "title")
        .from_("post")
        .where("status", 1)
        .group(lambda g: g.where("type", 3).or_where("type", 4))
        .order_by("id", "DESC")
        .limit(10)
        .generate_select_query()
    )
    params = qb.get_parameter().all()
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from fluentql.compile.base import Dialect
from fluentql.compile.clause_builders import (
    FromClauseBuilder,
    GroupByClauseBuilder,
    JoinClauseBuilder,
    LimitClauseBuilder,
    OrderByClauseBuilder,
    SelectClauseBuilder,
    WhereClauseBuilder,
    expression_sql,
)
from fluentql.compile.expression_builder import LIKE_WILDCARDS, PredicateBuilder
from fluentql.compile.parameters import ParameterRegistry, ParameterSource
from fluentql.compile.registry import DialectFactory
from fluentql.errors import QueryBuilderInvalidArgumentError, QueryGenerationError
from fluentql.schema.expressions import (
    PARAMETER_RE,
    JoinType,
    LogicalOp,
    Operator,
    SortDirection,
    is_function_call,
    is_number,
    is_parameter,
    is_positional,
)
from fluentql.schema.raw import Raw
from fluentql.schema.structure import (
    SECTION_ALIASES,
    PredicateBuckets,
    QueryStructure,
    empty_section,
)

#: A callback that populates a nested builder; returning it is optional.
BuilderCallback = Callable[["QueryBuilder"], "QueryBuilder | None"]

_UNSET: Any = object()
_INT_TEXT_RE = re.compile(r"^-?\d+$")
_FLOAT_TEXT_RE = re.compile(r"^-?\d+\.\d+$")


def _flatten(items: Iterable[Any]) -> list[Any]:
    flat: list[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            flat.extend(_flatten(item))
        else:
            flat.append(item)
    return flat


class QueryBuilder:
    """Builds SELECT / INSERT / UPDATE / DELETE statements fluently.

    Args:
        dialect: Registered dialect name or a :class:`Dialect` instance.
            Controls LIMIT / OFFSET syntax.  Defaults to ``"mysql"``.
        allowed_fields: Optional whitelist of columns accepted by
            :meth:`set` / :meth:`add_set`.
        parameters: Registry to bind values into.  Nested builders pass
            their parent's registry here; by default a fresh one is used.
    """

    def __init__(
        self,
        dialect: str | Dialect = "mysql",
        allowed_fields: Iterable[str] | None = None,
        parameters: ParameterRegistry | None = None,
    ) -> None:
        self._dialect = DialectFactory.resolve(dialect)
        self._allowed_fields: list[str] | None = (
            list(allowed_fields) if allowed_fields is not None else None
        )
        self._params = parameters if parameters is not None else ParameterRegistry()
        self._structure = QueryStructure()
        self._make_sub_builders()

    def _make_sub_builders(self) -> None:
        self._predicates = PredicateBuilder(self._params)
        self._select_builder = SelectClauseBuilder()
        self._from_builder = FromClauseBuilder()
        self._join_builder = JoinClauseBuilder()
        self._where_builder = WhereClauseBuilder()
        self._group_by_builder = GroupByClauseBuilder()
        self._order_by_builder = OrderByClauseBuilder()
        self._limit_builder = LimitClauseBuilder(self._dialect)

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def structure(self) -> QueryStructure:
        """The live query state (mutating it bypasses validation)."""
        return self._structure

    # ------------------------------------------------------------------
    # Builder lifecycle
    # ------------------------------------------------------------------

    def new_builder(self) -> QueryBuilder:
        """Return an empty builder with the same dialect and its own registry."""
        return QueryBuilder(self._dialect, self._allowed_fields)

    def clone(self) -> QueryBuilder:
        """Return an independent builder with copies of structure and registry."""
        clone = QueryBuilder(self._dialect, self._allowed_fields, self._params.copy())
        clone._structure = self._structure.model_copy(deep=True)
        return clone

    def _nested(self, structure: QueryStructure | None = None) -> QueryBuilder:
        nested = QueryBuilder(self._dialect, self._allowed_fields, self._params)
        if structure is not None:
            nested._structure = structure
        return nested

    def _run_callback(self, fn: BuilderCallback) -> QueryBuilder:
        nested = self._nested()
        result = fn(nested)
        return result if isinstance(result, QueryBuilder) else nested

    def _adopt(self, value: Any) -> Any:
        """Take over the bindings of detached Raw fragments inside ``value``."""
        if isinstance(value, Raw):
            return self._params.adopt(value)
        if isinstance(value, tuple):
            return tuple(self._adopt(item) for item in value)
        if isinstance(value, list):
            return [self._adopt(item) for item in value]
        return value

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def get_parameter(self) -> ParameterRegistry:
        return self._params

    def set_parameter(self, key: str, value: Any) -> QueryBuilder:
        """Bind ``value`` under ``key`` for a placeholder written by hand."""
        self._params.set(key, value)
        return self

    def set_parameters(self, *sources: ParameterSource) -> QueryBuilder:
        self._params.merge(*sources)
        return self

    # ------------------------------------------------------------------
    # Raw fragments and sub-queries
    # ------------------------------------------------------------------

    def raw(self, value: str | Raw | BuilderCallback) -> Raw:
        """Wrap trusted SQL; callables receive a registry-sharing builder."""
        if callable(value) and not isinstance(value, Raw):
            return Raw(value, builder=self._nested())
        return Raw(value)

    def sub_query(
        self,
        fn: BuilderCallback,
        alias: str | None = None,
        is_interval: bool = True,
    ) -> Raw:
        """Render a nested SELECT as a Raw fragment.

        Args:
            fn: Populates the nested builder (which shares this registry).
            alias: Appended as ``AS alias`` when given.
            is_interval: Wrap the statement in parentheses.

        Returns:
            The rendered sub-query, ready for ``select``, ``from_`` or
            ``where_in``.
        """
        sql = self._run_callback(fn).generate_select_query()
        if is_interval:
            sql = f"({sql})"
        if alias:
            sql = f"{sql} AS {alias}"
        return Raw(sql)

    # ------------------------------------------------------------------
    # SELECT
    # ------------------------------------------------------------------

    def select(self, *columns: str | Raw | Iterable[str | Raw]) -> QueryBuilder:
        """Append columns to the select list, in order, duplicates kept."""
        for column in _flatten(columns):
            self._structure.select.append(expression_sql(self._adopt(column)))
        return self

    def clear_select(self) -> QueryBuilder:
        self._structure.select = []
        return self

    def select_count(self, column: str | Raw = "*", alias: str | None = None) -> QueryBuilder:
        return self._select_function("COUNT", column, alias)

    def select_count_distinct(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        column_sql = f"DISTINCT {expression_sql(self._adopt(column))}"
        return self._select_function("COUNT", column_sql, alias)

    def select_max(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        return self._select_function("MAX", column, alias)

    def select_min(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        return self._select_function("MIN", column, alias)

    def select_avg(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        return self._select_function("AVG", column, alias)

    def select_sum(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        return self._select_function("SUM", column, alias)

    def select_upper(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        return self._select_function("UPPER", column, alias)

    def select_lower(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        return self._select_function("LOWER", column, alias)

    def select_length(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        return self._select_function("LENGTH", column, alias)

    def select_distinct(self, column: str | Raw, alias: str | None = None) -> QueryBuilder:
        return self._select_function("DISTINCT", column, alias)

    def select_coalesce(
        self, column: str | Raw, default: Any = "0", alias: str | None = None
    ) -> QueryBuilder:
        self._structure.select.append(
            self._select_builder.coalesce(self._adopt(column), self._adopt(default), alias)
        )
        return self

    def select_mid(
        self, column: str | Raw, offset: int, length: int, alias: str | None = None
    ) -> QueryBuilder:
        self._structure.select.append(
            self._select_builder.substring("MID", self._adopt(column), offset, length, alias=alias)
        )
        return self

    def select_left(self, column: str | Raw, length: int, alias: str | None = None) -> QueryBuilder:
        self._structure.select.append(
            self._select_builder.substring("LEFT", self._adopt(column), length, alias=alias)
        )
        return self

    def select_right(self, column: str | Raw, length: int, alias: str | None = None) -> QueryBuilder:
        self._structure.select.append(
            self._select_builder.substring("RIGHT", self._adopt(column), length, alias=alias)
        )
        return self

    def select_concat(
        self, columns: Iterable[str | Raw] | str | Raw, alias: str | None = None
    ) -> QueryBuilder:
        self._structure.select.append(self._select_builder.concat(self._adopt(columns), alias))
        return self

    def select_as(self, column: str | Raw, alias: str) -> QueryBuilder:
        self._structure.select.append(
            self._select_builder.aliased(expression_sql(self._adopt(column)), alias)
        )
        return self

    def _select_function(self, name: str, column: str | Raw, alias: str | None) -> QueryBuilder:
        self._structure.select.append(
            self._select_builder.function(name, self._adopt(column), alias)
        )
        return self

    # ------------------------------------------------------------------
    # FROM / JOIN
    # ------------------------------------------------------------------

    def from_(self, table: str | Raw, alias: str | None = None) -> QueryBuilder:
        """Replace the table list with ``table``.

        ``"post, author a"`` lists several tables; an ``alias`` is only
        accepted for a single table.
        """
        self._structure.tables = self._from_builder.references(self._adopt(table), alias)
        return self

    def table(self, table: str | Raw, alias: str | None = None) -> QueryBuilder:
        """Designate the statement target; same as :meth:`from_`."""
        return self.from_(table, alias)

    def add_from(self, table: str | Raw, alias: str | None = None) -> QueryBuilder:
        """Append each table of ``table`` that is not already listed."""
        for reference in self._from_builder.references(self._adopt(table), alias):
            if reference not in self._structure.tables:
                self._structure.tables.append(reference)
        return self

    def join(
        self,
        table: str | Raw,
        on: str | Raw | BuilderCallback | None = None,
        type: str | JoinType = JoinType.INNER,
    ) -> QueryBuilder:
        """Join ``table``.

        Args:
            table: Table name, ``"table alias"`` or a Raw sub-query.
            on: ``"a.id = b.a_id"``, a Raw condition, or a callback that
                fills a nested builder's ``on`` predicates (its ``where`` and
                ``having`` predicates are added to this builder).  Not used
                for NATURAL joins.
            type: INNER, LEFT, RIGHT, LEFT OUTER, RIGHT OUTER, NATURAL or
                SELF.  A SELF join lists the table in FROM and adds the
                condition to WHERE.

        Raises:
            QueryBuilderInvalidArgumentError: Unknown type, missing or
                malformed condition.
        """
        join_type = JoinType.parse(type)
        reference = self._from_builder.reference(self._adopt(table))
        if reference in self._structure.tables or reference in self._structure.joins:
            return self
        if join_type is JoinType.NATURAL:
            self._structure.joins[reference] = self._join_builder.clause(join_type, reference, None)
            return self
        condition = self._join_condition(on)
        if join_type is JoinType.SELF:
            self._structure.tables.append(reference)
            self._structure.where.append(LogicalOp.AND, condition)
            return self
        self._structure.joins[reference] = self._join_builder.clause(
            join_type, reference, condition
        )
        return self

    def _join_condition(self, on: str | Raw | BuilderCallback | None) -> str:
        if isinstance(on, Raw):
            return self._adopt(on).get()
        if isinstance(on, str):
            return self._join_builder.condition(on)
        if callable(on):
            nested = self._run_callback(on)
            for clause in ("where", "having"):
                buckets: PredicateBuckets = getattr(nested._structure, clause)
                if buckets.is_empty():
                    continue
                text = buckets.render()
                if buckets.or_:
                    text = f"({text})"
                getattr(self._structure, clause).append(LogicalOp.AND, text)
            condition = nested._structure.on.render()
            if condition:
                return condition
        raise QueryBuilderInvalidArgumentError(
            "Join needs an ON condition unless it is a NATURAL join.", argument="on"
        )

    def inner_join(self, table: str | Raw, on: Any = None) -> QueryBuilder:
        return self.join(table, on, JoinType.INNER)

    def left_join(self, table: str | Raw, on: Any = None) -> QueryBuilder:
        return self.join(table, on, JoinType.LEFT)

    def right_join(self, table: str | Raw, on: Any = None) -> QueryBuilder:
        return self.join(table, on, JoinType.RIGHT)

    def left_outer_join(self, table: str | Raw, on: Any = None) -> QueryBuilder:
        return self.join(table, on, JoinType.LEFT_OUTER)

    def right_outer_join(self, table: str | Raw, on: Any = None) -> QueryBuilder:
        return self.join(table, on, JoinType.RIGHT_OUTER)

    def natural_join(self, table: str | Raw) -> QueryBuilder:
        return self.join(table, None, JoinType.NATURAL)

    def self_join(self, table: str | Raw, on: Any = None) -> QueryBuilder:
        return self.join(table, on, JoinType.SELF)

    # ------------------------------------------------------------------
    # WHERE / HAVING / ON
    # ------------------------------------------------------------------

    def where(
        self,
        column: str | Raw,
        operator: Any = None,
        value: Any = None,
        logical: str | LogicalOp = LogicalOp.AND,
    ) -> QueryBuilder:
        """Add a WHERE predicate.

        ``where("status", 1)`` is shorthand for ``where("status", "=", 1)``:
        when ``value`` is omitted and ``operator`` is not an operator keyword,
        ``operator`` is taken as the value.  ``where(Raw("a > b"))`` and
        ``where("isActive(status)")`` add the column text as the predicate.

        Args:
            column: Column name or Raw expression.
            operator: An :class:`Operator` spelling (``"="``, ``"NOT IN"``,
                ``"start like"``...) or the value itself.
            value: Right-hand side.
            logical: ``AND`` / ``OR`` (``&&`` / ``||`` accepted).

        Raises:
            QueryBuilderInvalidArgumentError: Unknown operator or connective,
                or a value the operator cannot render.
        """
        return self._add_predicate("where", column, operator, value, logical)

    def having(
        self,
        column: str | Raw,
        operator: Any = None,
        value: Any = None,
        logical: str | LogicalOp = LogicalOp.AND,
    ) -> QueryBuilder:
        """Add a HAVING predicate; arguments as for :meth:`where`."""
        return self._add_predicate("having", column, operator, value, logical)

    def on(
        self,
        column: str | Raw,
        operator: Any = None,
        value: Any = None,
        logical: str | LogicalOp = LogicalOp.AND,
    ) -> QueryBuilder:
        """Add a join ON predicate, for use inside a join callback."""
        return self._add_predicate("on", column, operator, value, logical)

    def group(
        self, fn: BuilderCallback, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        """Parenthesize the predicates a callback adds to a nested builder.

        Example::

            qb.where("status", 1).group(
                lambda g: g.where("type", 3).or_where("type", 4)
            )
            # WHERE status = :status AND (type = :type OR type = :type_1)
        """
        connective = LogicalOp.parse(logical)
        nested = self._run_callback(fn)
        for clause in ("where", "having", "on"):
            buckets: PredicateBuckets = getattr(nested._structure, clause)
            if not buckets.is_empty():
                getattr(self._structure, clause).append(connective, f"({buckets.render()})")
        return self

    def _add_predicate(
        self,
        clause: str,
        column: str | Raw,
        operator: Any,
        value: Any,
        logical: str | LogicalOp,
    ) -> QueryBuilder:
        connective = LogicalOp.parse(logical)
        sql = self._render_predicate(column, operator, value)
        getattr(self._structure, clause).append(connective, sql)
        return self

    def _render_predicate(self, column: str | Raw, operator: Any, value: Any) -> str:
        column = self._adopt(column)
        operator, value = self._adopt(operator), self._adopt(value)
        if operator is None and value is None:
            return self._predicates.build_bare(column)
        resolved = Operator.parse(operator) if operator is not None else Operator.EQ
        if resolved is None:
            if value is not None:
                raise QueryBuilderInvalidArgumentError(
                    f"Unknown operator {operator!r}.", argument="operator"
                )
            resolved, value = Operator.EQ, operator
        return self._predicates.build(column, resolved, value)

    # -- WHERE sugar ----------------------------------------------------

    def and_where(self, column: str | Raw, operator: Any = None, value: Any = None) -> QueryBuilder:
        return self.where(column, operator, value, LogicalOp.AND)

    def or_where(self, column: str | Raw, operator: Any = None, value: Any = None) -> QueryBuilder:
        return self.where(column, operator, value, LogicalOp.OR)

    def and_having(self, column: str | Raw, operator: Any = None, value: Any = None) -> QueryBuilder:
        return self.having(column, operator, value, LogicalOp.AND)

    def or_having(self, column: str | Raw, operator: Any = None, value: Any = None) -> QueryBuilder:
        return self.having(column, operator, value, LogicalOp.OR)

    def and_on(self, column: str | Raw, operator: Any = None, value: Any = None) -> QueryBuilder:
        return self.on(column, operator, value, LogicalOp.AND)

    def or_on(self, column: str | Raw, operator: Any = None, value: Any = None) -> QueryBuilder:
        return self.on(column, operator, value, LogicalOp.OR)

    def between(
        self, column: str | Raw, values: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.BETWEEN, values, logical)

    def and_between(self, column: str | Raw, values: Any) -> QueryBuilder:
        return self.between(column, values, LogicalOp.AND)

    def or_between(self, column: str | Raw, values: Any) -> QueryBuilder:
        return self.between(column, values, LogicalOp.OR)

    def not_between(
        self, column: str | Raw, values: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.NOT_BETWEEN, values, logical)

    def and_not_between(self, column: str | Raw, values: Any) -> QueryBuilder:
        return self.not_between(column, values, LogicalOp.AND)

    def or_not_between(self, column: str | Raw, values: Any) -> QueryBuilder:
        return self.not_between(column, values, LogicalOp.OR)

    def find_in_set(
        self, column: str | Raw, value: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.FIND_IN_SET, value, logical)

    def and_find_in_set(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.find_in_set(column, value, LogicalOp.AND)

    def or_find_in_set(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.find_in_set(column, value, LogicalOp.OR)

    def not_find_in_set(
        self, column: str | Raw, value: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.NOT_FIND_IN_SET, value, logical)

    def and_not_find_in_set(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.not_find_in_set(column, value, LogicalOp.AND)

    def or_not_find_in_set(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.not_find_in_set(column, value, LogicalOp.OR)

    def where_in(
        self, column: str | Raw, values: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.IN, values, logical)

    def and_where_in(self, column: str | Raw, values: Any) -> QueryBuilder:
        return self.where_in(column, values, LogicalOp.AND)

    def or_where_in(self, column: str | Raw, values: Any) -> QueryBuilder:
        return self.where_in(column, values, LogicalOp.OR)

    def where_not_in(
        self, column: str | Raw, values: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.NOT_IN, values, logical)

    def and_where_not_in(self, column: str | Raw, values: Any) -> QueryBuilder:
        return self.where_not_in(column, values, LogicalOp.AND)

    def or_where_not_in(self, column: str | Raw, values: Any) -> QueryBuilder:
        return self.where_not_in(column, values, LogicalOp.OR)

    def regexp(
        self, column: str | Raw, pattern: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.REGEXP, pattern, logical)

    def and_regexp(self, column: str | Raw, pattern: Any) -> QueryBuilder:
        return self.regexp(column, pattern, LogicalOp.AND)

    def or_regexp(self, column: str | Raw, pattern: Any) -> QueryBuilder:
        return self.regexp(column, pattern, LogicalOp.OR)

    def soundex(
        self, column: str | Raw, value: str | Raw, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.SOUNDEX, value, logical)

    def and_soundex(self, column: str | Raw, value: str | Raw) -> QueryBuilder:
        return self.soundex(column, value, LogicalOp.AND)

    def or_soundex(self, column: str | Raw, value: str | Raw) -> QueryBuilder:
        return self.soundex(column, value, LogicalOp.OR)

    def where_is_null(
        self, column: str | Raw, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.IS, "NULL", logical)

    def and_where_is_null(self, column: str | Raw) -> QueryBuilder:
        return self.where_is_null(column, LogicalOp.AND)

    def or_where_is_null(self, column: str | Raw) -> QueryBuilder:
        return self.where_is_null(column, LogicalOp.OR)

    def where_is_not_null(
        self, column: str | Raw, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.IS_NOT, "NULL", logical)

    def and_where_is_not_null(self, column: str | Raw) -> QueryBuilder:
        return self.where_is_not_null(column, LogicalOp.AND)

    def or_where_is_not_null(self, column: str | Raw) -> QueryBuilder:
        return self.where_is_not_null(column, LogicalOp.OR)

    # -- LIKE sugar -----------------------------------------------------

    def like(
        self,
        column: str | Raw,
        value: Any,
        type: str = "both",
        logical: str | LogicalOp = LogicalOp.AND,
        negated: bool = False,
    ) -> QueryBuilder:
        """Add a LIKE predicate.

        Args:
            type: Where to add ``%``: ``both`` (default), ``before``,
                ``after`` or ``none``.
        """
        wildcards = LIKE_WILDCARDS.get(str(type).lower())
        if wildcards is None:
            raise QueryBuilderInvalidArgumentError(
                f"LIKE type must be one of {sorted(LIKE_WILDCARDS)}, got {type!r}.",
                argument="type",
            )
        connective = LogicalOp.parse(logical)
        sql = self._predicates.like(
            self._adopt(column), self._adopt(value), *wildcards, negated=negated
        )
        self._structure.where.append(connective, sql)
        return self

    def and_like(self, column: str | Raw, value: Any, type: str = "both") -> QueryBuilder:
        return self.like(column, value, type, LogicalOp.AND)

    def or_like(self, column: str | Raw, value: Any, type: str = "both") -> QueryBuilder:
        return self.like(column, value, type, LogicalOp.OR)

    def not_like(
        self,
        column: str | Raw,
        value: Any,
        type: str = "both",
        logical: str | LogicalOp = LogicalOp.AND,
    ) -> QueryBuilder:
        return self.like(column, value, type, logical, negated=True)

    def and_not_like(self, column: str | Raw, value: Any, type: str = "both") -> QueryBuilder:
        return self.not_like(column, value, type, LogicalOp.AND)

    def or_not_like(self, column: str | Raw, value: Any, type: str = "both") -> QueryBuilder:
        return self.not_like(column, value, type, LogicalOp.OR)

    def start_like(
        self, column: str | Raw, value: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.START_LIKE, value, logical)

    def and_start_like(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.start_like(column, value, LogicalOp.AND)

    def or_start_like(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.start_like(column, value, LogicalOp.OR)

    def start_not_like(
        self, column: str | Raw, value: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.START_NOT_LIKE, value, logical)

    def and_start_not_like(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.start_not_like(column, value, LogicalOp.AND)

    def or_start_not_like(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.start_not_like(column, value, LogicalOp.OR)

    def end_like(
        self, column: str | Raw, value: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.END_LIKE, value, logical)

    def and_end_like(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.end_like(column, value, LogicalOp.AND)

    def or_end_like(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.end_like(column, value, LogicalOp.OR)

    def end_not_like(
        self, column: str | Raw, value: Any, logical: str | LogicalOp = LogicalOp.AND
    ) -> QueryBuilder:
        return self.where(column, Operator.END_NOT_LIKE, value, logical)

    def and_end_not_like(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.end_not_like(column, value, LogicalOp.AND)

    def or_end_not_like(self, column: str | Raw, value: Any) -> QueryBuilder:
        return self.end_not_like(column, value, LogicalOp.OR)

    # ------------------------------------------------------------------
    # GROUP BY / ORDER BY / LIMIT
    # ------------------------------------------------------------------

    def group_by(self, *columns: str | Raw | Iterable[str | Raw]) -> QueryBuilder:
        for column in _flatten(columns):
            column_sql = expression_sql(self._adopt(column))
            if column_sql not in self._structure.group_by:
                self._structure.group_by.append(column_sql)
        return self

    def order_by(
        self, column: str | Raw, direction: str | SortDirection = SortDirection.ASC
    ) -> QueryBuilder:
        item = f"{expression_sql(self._adopt(column))} {SortDirection.parse(direction).value}"
        if item not in self._structure.order_by:
            self._structure.order_by.append(item)
        return self

    def limit(self, limit: int) -> QueryBuilder:
        """Set the row count; negative numbers are taken as absolute.

        Raises:
            QueryBuilderInvalidArgumentError: Not an integer, or zero.
        """
        limit = abs(self._require_int(limit, "limit"))
        if limit < 1:
            raise QueryBuilderInvalidArgumentError(
                "Limit must be at least 1.", argument="limit"
            )
        self._structure.limit = limit
        return self

    def offset(self, offset: int = 0) -> QueryBuilder:
        self._structure.offset = abs(self._require_int(offset, "offset"))
        return self

    @staticmethod
    def _require_int(value: Any, argument: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise QueryBuilderInvalidArgumentError(
                f"{argument.capitalize()} must be an integer, got {value!r}.",
                argument=argument,
            )
        return value

    # ------------------------------------------------------------------
    # SET (INSERT / UPDATE payload)
    # ------------------------------------------------------------------

    def set(
        self,
        column: str | Mapping[str, Any],
        value: Any = _UNSET,
        strict: bool = True,
    ) -> QueryBuilder:
        """Record values to write.

        ``set({"a": 1, "b": 2})`` appends a new row; ``set("a", 1)`` merges
        into the last row.  Call ``set`` with mappings repeatedly to build a
        batch.

        Args:
            column: Column name, or a column -> value mapping.
            value: Value for a single column.  ``None`` writes ``NULL``.
            strict: With ``allowed_fields`` configured, raise on a column
                outside it (``True``) or skip it silently (``False``).
        """
        row = self._render_row(column, value, strict)
        if isinstance(column, Mapping) or not self._structure.set_rows:
            self._structure.set_rows.append(row)
        else:
            self._structure.set_rows[-1].update(row)
        return self

    def add_set(
        self,
        column: str | Mapping[str, Any],
        value: Any = _UNSET,
        strict: bool = True,
    ) -> QueryBuilder:
        """Like :meth:`set` but always starts a new row."""
        self._structure.set_rows.append(self._render_row(column, value, strict))
        return self

    def is_batch(self) -> bool:
        """Return True when more than one row has been recorded."""
        return len(self._structure.set_rows) > 1

    def _render_row(
        self, column: str | Mapping[str, Any], value: Any, strict: bool
    ) -> dict[str, str]:
        if isinstance(column, Mapping):
            if value is not _UNSET:
                raise QueryBuilderInvalidArgumentError(
                    "Pass either a mapping or a column and a value, not both.",
                    argument="value",
                )
            items = list(column.items())
        else:
            if value is _UNSET:
                raise QueryBuilderInvalidArgumentError(
                    f"Missing value for column {column!r}.", argument="value"
                )
            items = [(column, value)]

        row: dict[str, str] = {}
        for name, item in items:
            if not isinstance(name, str) or not name.strip():
                raise QueryBuilderInvalidArgumentError(
                    f"Column names must be non-empty strings, got {name!r}.",
                    argument="column",
                )
            name = name.strip()
            if self._allowed_fields is not None and name not in self._allowed_fields:
                if strict:
                    raise QueryBuilderInvalidArgumentError(
                        f"Column '{name}' is not in the allowed fields.", argument="column"
                    )
                continue
            row[name] = self._set_value_sql(name, item)
        return row

    def _set_value_sql(self, column: str, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, Raw):
            return self._adopt(value).get()
        if is_number(value):
            return str(value)
        if is_positional(value) or is_parameter(value) or is_function_call(value):
            return value
        return self._params.add(column, value)

    # ------------------------------------------------------------------
    # Statement generators
    # ------------------------------------------------------------------

    def generate_select_query(
        self,
        selector: str | Raw | Iterable[str | Raw] | None = None,
        conditions: Mapping[str, Any] | Iterable[str | Raw] | None = None,
    ) -> str:
        """Render the recorded state as a SELECT statement.

        Args:
            selector: Extra columns for this rendering only.
            conditions: Extra predicates for this rendering only: a mapping
                of column -> value (lists become ``IN``) or a sequence of
                trusted predicate strings / Raw fragments.

        Returns:
            ``SELECT … FROM … WHERE …`` text; WHERE renders ``1`` when empty.

        Raises:
            QueryGenerationError: If no table has been designated.
        """
        if selector is None and conditions is None:
            return self._render_select(self._structure)
        view = self._nested(self._structure.model_copy(deep=True))
        if selector is not None:
            view.select(selector)
        if isinstance(conditions, Mapping):
            for column, value in conditions.items():
                if isinstance(value, (list, tuple)):
                    view.where_in(column, value)
                else:
                    view.where(column, Operator.EQ, value)
        elif conditions is not None:
            items = [conditions] if isinstance(conditions, (str, Raw)) else conditions
            for condition in items:
                view.where(condition if isinstance(condition, Raw) else Raw(condition))
        return self._render_select(view._structure)

    def _render_select(self, structure: QueryStructure) -> str:
        parts = [
            self._select_builder.build(structure),
            self._from_builder.build(structure),
            self._join_builder.build(structure),
            self._where_builder.build(structure.where),
            self._group_by_builder.build(structure),
            self._where_builder.build_having(structure.having),
            self._order_by_builder.build(structure),
            self._limit_builder.build(structure),
        ]
        return " ".join(part for part in parts if part)

    def generate_insert_query(self) -> str:
        """Render ``INSERT INTO t (cols) VALUES (vals);`` for a single row.

        Raises:
            QueryGenerationError: No table, no row, or more than one row
                (use :meth:`generate_batch_insert_query`).
        """
        table = self._from_builder.target(self._structure, "INSERT")
        rows = self._structure.set_rows
        if len(rows) > 1:
            raise QueryGenerationError(
                f"{len(rows)} rows were set; use generate_batch_insert_query().",
                statement="INSERT",
            )
        if not rows or not rows[0]:
            raise QueryGenerationError("No values were set to insert.", statement="INSERT")
        row = rows[0]
        return f"INSERT INTO {table} ({', '.join(row)}) VALUES ({', '.join(row.values())});"

    def generate_batch_insert_query(self) -> str:
        """Render a multi-row INSERT over the union of all row columns.

        Columns keep first-seen order; a row lacking a column gets ``NULL``.

        Raises:
            QueryGenerationError: No table or no columns.
        """
        table = self._from_builder.target(self._structure, "INSERT")
        columns: list[str] = []
        for row in self._structure.set_rows:
            for column in row:
                if column not in columns:
                    columns.append(column)
        if not columns:
            raise QueryGenerationError("No values were set to insert.", statement="INSERT")
        tuples = [
            "(" + ", ".join(row.get(column, "NULL") for column in columns) + ")"
            for row in self._structure.set_rows
        ]
        return f"INSERT INTO {table} ({', '.join(columns)}) VALUES {', '.join(tuples)};"

    def generate_update_query(self) -> str:
        """Render ``UPDATE t SET … WHERE …`` from the last recorded row.

        Raises:
            QueryGenerationError: No table or an empty row.
        """
        table = self._from_builder.target(self._structure, "UPDATE")
        rows = self._structure.set_rows
        if not rows or not rows[-1]:
            raise QueryGenerationError("No values were set to update.", statement="UPDATE")
        assignments = [f"{column} = {value}" for column, value in rows[-1].items()]
        return self._render_update(table, assignments, self._structure.where)

    def generate_update_batch_query(self, reference_column: str) -> str:
        """Render one UPDATE applying different values per row.

        Each row must carry ``reference_column``; its value identifies the
        target row.  Every other column becomes
        ``col = CASE WHEN ref = r1 THEN v1 … ELSE col END`` and the statement
        is limited to ``ref IN (r1, r2, …)``.  Literal reference values are
        bound so the CASE and IN clauses share placeholders; a placeholder
        already holding the same value is reused, so rendering again yields
        the same statement.  The recorded
        WHERE predicates are kept and are not modified.

        Raises:
            QueryGenerationError: No table, no rows, a row without the
                reference column, or nothing to update.
        """
        table = self._from_builder.target(self._structure, "UPDATE")
        rows = [dict(row) for row in self._structure.set_rows]
        if not rows:
            raise QueryGenerationError("No rows were set to update.", statement="UPDATE")

        references: list[str] = []
        columns: list[str] = []
        for index, row in enumerate(rows):
            if reference_column not in row:
                raise QueryGenerationError(
                    f"Row {index} has no value for reference column '{reference_column}'.",
                    statement="UPDATE",
                )
            references.append(self._bind_reference(reference_column, row.pop(reference_column)))
            for column in row:
                if column not in columns:
                    columns.append(column)
        if not columns:
            raise QueryGenerationError(
                "Rows hold only the reference column; nothing to update.", statement="UPDATE"
            )

        assignments: list[str] = []
        for column in columns:
            whens = " ".join(
                f"WHEN {reference_column} = {reference} THEN {row[column]}"
                for reference, row in zip(references, rows)
                if column in row
            )
            assignments.append(f"{column} = CASE {whens} ELSE {column} END")

        where = self._structure.where.model_copy(deep=True)
        unique_references = list(dict.fromkeys(references))
        where.append(LogicalOp.AND, f"{reference_column} IN ({', '.join(unique_references)})")
        return self._render_update(table, assignments, where)

    def _bind_reference(self, column: str, expression: str) -> str:
        if PARAMETER_RE.match(expression):
            return expression
        if expression == "NULL":
            raise QueryGenerationError(
                f"Reference column '{column}' cannot be NULL.", statement="UPDATE"
            )
        if _INT_TEXT_RE.match(expression):
            return self._params.add_once(column, int(expression))
        if _FLOAT_TEXT_RE.match(expression):
            return self._params.add_once(column, float(expression))
        return expression

    def _render_update(
        self, table: str, assignments: list[str], where: PredicateBuckets
    ) -> str:
        parts = [
            f"UPDATE {table} SET {', '.join(assignments)}",
            self._where_builder.build(where),
            self._where_builder.build_having(self._structure.having),
            self._limit_builder.build(self._structure),
        ]
        return " ".join(part for part in parts if part)

    def generate_delete_query(self) -> str:
        """Render ``DELETE FROM t WHERE …``.

        Raises:
            QueryGenerationError: If no table has been designated.
        """
        table = self._from_builder.target(self._structure, "DELETE")
        parts = [
            f"DELETE FROM {table}",
            self._where_builder.build(self._structure.where),
            self._limit_builder.build(self._structure),
        ]
        return " ".join(part for part in parts if part)

    # ------------------------------------------------------------------
    # Structure management
    # ------------------------------------------------------------------

    def reset_structure(
        self,
        scope: str | Iterable[str] | None = None,
        is_ignore_list: bool = True,
    ) -> QueryBuilder:
        """Clear recorded clauses.

        Args:
            scope: Section name(s): ``select``, ``tables`` (``table``,
                ``from``), ``joins``, ``where``, ``having``, ``on``,
                ``group_by``, ``order_by``, ``limit``, ``offset``,
                ``set_rows`` (``set``).  ``None`` clears everything.
            is_ignore_list: When True the named sections are kept and all
                others cleared; when False only the named sections are
                cleared.

        Raises:
            QueryBuilderInvalidArgumentError: Unknown section name.
        """
        if scope is None:
            self._structure = QueryStructure()
            return self
        names = [scope] if isinstance(scope, str) else list(scope)
        sections: set[str] = set()
        for name in names:
            field = SECTION_ALIASES.get(str(name).lower())
            if field is None:
                raise QueryBuilderInvalidArgumentError(
                    f"Unknown structure section {name!r}.", argument="scope"
                )
            sections.add(field)
        for field in QueryStructure.model_fields:
            if (field in sections) != is_ignore_list:
                setattr(self._structure, field, empty_section(field))
        return self

    def export_qb(self) -> dict[str, Any]:
        """Return the recorded state as plain data."""
        return self._structure.model_dump()

    def import_qb(
        self, structure: QueryStructure | Mapping[str, Any], merge: bool = False
    ) -> QueryBuilder:
        """Restore state exported by :meth:`export_qb`.

        Args:
            structure: A :class:`QueryStructure` or its dumped mapping.
            merge: Fold into the current state instead of replacing it.
        """
        if isinstance(structure, QueryStructure):
            incoming = structure.model_copy(deep=True)
        else:
            incoming = QueryStructure.model_validate(dict(structure))
        if merge:
            self._structure.merge(incoming)
        else:
            self._structure = incoming
        return self

    def __str__(self) -> str:
        return self.generate_select_query()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dialect={self._dialect.dialect_name!r})"
