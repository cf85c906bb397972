"""Predicate SQL rendering for WHERE / HAVING / ON.

``PredicateBuilder`` turns one ``(column, operator, value)`` triple into a SQL
fragment, registering every value that is not already safe in the shared
:class:`~fluentql.compile.parameters.ParameterRegistry`.  Each
:class:`~fluentql.schema.expressions.Operator` member is rendered by a handler
registered in :class:`~fluentql.compile.registry.OperatorRegistry`; the
handlers live at the bottom of this module.

Safe values are inlined as written:

* a :class:`~fluentql.schema.raw.Raw` fragment,
* the positional marker ``?`` or a named placeholder ``:name``,
* a zero-argument function call such as ``NOW()``,
* in comparisons only, a dotted identifier such as ``user.id``.

Everything else, integers included, is bound.
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from fluentql.compile.parameters import ParameterRegistry
from fluentql.compile.registry import OperatorRegistry
from fluentql.errors import QueryBuilderInvalidArgumentError
from fluentql.schema.expressions import (
    FUNCTION_EXPRESSION_RE,
    Operator,
    is_dotted_identifier,
    is_function_call,
    is_number,
    is_parameter,
    is_positional,
)
from fluentql.schema.raw import Raw

#: Keywords accepted verbatim on the right-hand side of ``IS`` / ``IS NOT``.
IS_KEYWORDS = frozenset({"NULL", "NOT NULL", "TRUE", "FALSE", "UNKNOWN"})

#: ``like()`` wildcard placement names -> (leading %, trailing %).
LIKE_WILDCARDS: dict[str, tuple[bool, bool]] = {
    "both": (True, True),
    "before": (True, False),
    "after": (False, True),
    "none": (False, False),
}


class PredicateBuilder:
    """Renders single predicates against a shared parameter registry.

    Args:
        params: Registry receiving every bound value.
    """

    def __init__(self, params: ParameterRegistry) -> None:
        self._params = params

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, column: str | Raw, operator: Operator, value: Any) -> str:
        """Render ``column operator value``.

        Raises:
            QueryBuilderInvalidArgumentError: If ``value`` does not suit
                ``operator``.
        """
        handler = OperatorRegistry.get(operator)
        if handler is None:
            raise QueryBuilderInvalidArgumentError(
                f"No renderer registered for operator '{operator.value}'.",
                argument="operator",
            )
        return handler(self, self.column_sql(column), operator, value)

    def build_bare(self, column: str | Raw) -> str:
        """Render a predicate given as a column alone.

        A Raw fragment is used verbatim; ``name(args)`` is kept with its
        function name uppercased.

        Raises:
            QueryBuilderInvalidArgumentError: For any other column text.
        """
        if isinstance(column, Raw):
            return column.get()
        if isinstance(column, str):
            match = FUNCTION_EXPRESSION_RE.match(column)
            if match:
                return f"{match.group(1).upper()}({match.group(2)})"
        raise QueryBuilderInvalidArgumentError(
            f"Predicate on {column!r} needs a value; wrap trusted SQL in Raw().",
            argument="value",
        )

    def like(
        self,
        column: str | Raw,
        value: Any,
        leading: bool,
        trailing: bool,
        negated: bool = False,
    ) -> str:
        """Render a LIKE predicate with ``%`` added on the requested sides."""
        column_sql = self.column_sql(column)
        keyword = "NOT LIKE" if negated else "LIKE"
        if value is None or isinstance(value, (list, tuple, set, dict)):
            raise QueryBuilderInvalidArgumentError(
                f"LIKE on '{column_sql}' needs a scalar pattern.", argument="value"
            )
        if self._is_trusted(value):
            return f"{column_sql} {keyword} {self._trusted_sql(value)}"
        pattern = str(value)
        if leading:
            pattern = "%" + pattern
        if trailing:
            pattern += "%"
        return f"{column_sql} {keyword} {self._params.add(column_sql, pattern)}"

    # ------------------------------------------------------------------
    # Value rendering helpers used by the operator handlers
    # ------------------------------------------------------------------

    @staticmethod
    def column_sql(column: str | Raw) -> str:
        if isinstance(column, Raw):
            return column.get()
        if isinstance(column, str) and column.strip():
            return column.strip()
        raise QueryBuilderInvalidArgumentError(
            f"Column must be a non-empty string or Raw, got {column!r}.",
            argument="column",
        )

    def bind_scalar(self, key: str, value: Any) -> str:
        """Inline a safe comparison value, bind anything else."""
        if value is None:
            return "NULL"
        if self._is_trusted(value) or is_dotted_identifier(value):
            return self._trusted_sql(value)
        return self._params.add(key, value)

    def bind_pattern(self, key: str, value: Any) -> str:
        """Like :meth:`bind_scalar` but dotted identifiers are bound too."""
        if self._is_trusted(value):
            return self._trusted_sql(value)
        return self._params.add(key, value)

    def bind_list_item(self, key: str, value: Any) -> str:
        """Render one IN-list element; numbers are inlined."""
        if value is None:
            return "NULL"
        if is_number(value):
            return str(value)
        return self.bind_pattern(key, value)

    @staticmethod
    def unique(values: Iterable[Any]) -> list[Any]:
        """Drop repeated values, keeping first occurrences in order."""
        seen: list[tuple[type, Any]] = []
        result: list[Any] = []
        for value in values:
            marker = (type(value), value)
            if marker in seen:
                continue
            seen.append(marker)
            result.append(value)
        return result

    @staticmethod
    def _is_trusted(value: Any) -> bool:
        return (
            isinstance(value, Raw)
            or is_positional(value)
            or is_parameter(value)
            or is_function_call(value)
        )

    @staticmethod
    def _trusted_sql(value: Any) -> str:
        return value.get() if isinstance(value, Raw) else str(value)


# ---------------------------------------------------------------------------
# Operator handlers
# ---------------------------------------------------------------------------


def _as_list(column: str, operator: Operator, value: Any) -> list[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
    elif value is None:
        items = []
    else:
        items = [value]
    if not items:
        raise QueryBuilderInvalidArgumentError(
            f"{operator.value} on '{column}' needs at least one value.", argument="value"
        )
    return items


@OperatorRegistry.register(
    Operator.EQ,
    Operator.NE,
    Operator.NE_ANSI,
    Operator.GT,
    Operator.LT,
    Operator.GTE,
    Operator.LTE,
)
def _comparison(pred: PredicateBuilder, column: str, op: Operator, value: Any) -> str:
    if value is None:
        if op is Operator.EQ:
            return f"{column} IS NULL"
        if op in (Operator.NE, Operator.NE_ANSI):
            return f"{column} IS NOT NULL"
        raise QueryBuilderInvalidArgumentError(
            f"Cannot compare '{column}' {op.value} NULL.", argument="value"
        )
    return f"{column} {op.value} {pred.bind_scalar(column, value)}"


@OperatorRegistry.register(Operator.IS, Operator.IS_NOT)
def _is(pred: PredicateBuilder, column: str, op: Operator, value: Any) -> str:
    if isinstance(value, str) and value.strip().upper() in IS_KEYWORDS:
        return f"{column} {op.value} {value.strip().upper()}"
    return f"{column} {op.value} {pred.bind_scalar(column, value)}"


@OperatorRegistry.register(
    Operator.LIKE,
    Operator.NOT_LIKE,
    Operator.START_LIKE,
    Operator.START_NOT_LIKE,
    Operator.END_LIKE,
    Operator.END_NOT_LIKE,
)
def _like(pred: PredicateBuilder, column: str, op: Operator, value: Any) -> str:
    leading = op not in (Operator.END_LIKE, Operator.END_NOT_LIKE)
    trailing = op not in (Operator.START_LIKE, Operator.START_NOT_LIKE)
    return pred.like(column, value, leading, trailing, negated=op.negated)


@OperatorRegistry.register(Operator.BETWEEN, Operator.NOT_BETWEEN)
def _between(pred: PredicateBuilder, column: str, op: Operator, value: Any) -> str:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise QueryBuilderInvalidArgumentError(
            f"{op.value} on '{column}' needs exactly two values, got {value!r}.",
            argument="value",
        )
    if value[0] is None or value[1] is None:
        raise QueryBuilderInvalidArgumentError(
            f"{op.value} bounds on '{column}' cannot be NULL.", argument="value"
        )
    start = pred.bind_scalar(f"{column}_start", value[0])
    end = pred.bind_scalar(f"{column}_end", value[1])
    return f"{column} {op.value} {start} AND {end}"


@OperatorRegistry.register(Operator.IN, Operator.NOT_IN)
def _in(pred: PredicateBuilder, column: str, op: Operator, value: Any) -> str:
    if isinstance(value, Raw):
        inner = value.get()
        if inner.startswith("(") and inner.endswith(")"):
            return f"{column} {op.value} {inner}"
        return f"{column} {op.value} ({inner})"
    items = pred.unique(_as_list(column, op, value))
    values_sql = ", ".join(pred.bind_list_item(column, item) for item in items)
    return f"{column} {op.value} ({values_sql})"


@OperatorRegistry.register(Operator.FIND_IN_SET, Operator.NOT_FIND_IN_SET)
def _find_in_set(pred: PredicateBuilder, column: str, op: Operator, value: Any) -> str:
    items = pred.unique(_as_list(column, op, value))
    calls = [f"FIND_IN_SET({pred.bind_pattern(column, item)}, {column})" for item in items]
    sql = calls[0] if len(calls) == 1 else f"({' OR '.join(calls)})"
    return f"NOT {sql}" if op.negated else sql


@OperatorRegistry.register(Operator.REGEXP)
def _regexp(pred: PredicateBuilder, column: str, op: Operator, value: Any) -> str:
    if value is None:
        raise QueryBuilderInvalidArgumentError(
            f"REGEXP on '{column}' needs a pattern.", argument="value"
        )
    return f"{column} REGEXP {pred.bind_pattern(column, value)}"


@OperatorRegistry.register(Operator.SOUNDEX)
def _soundex(pred: PredicateBuilder, column: str, op: Operator, value: Any) -> str:
    if not isinstance(value, (str, Raw)):
        raise QueryBuilderInvalidArgumentError(
            f"SOUNDEX on '{column}' accepts only a string or Raw value, "
            f"got {type(value).__name__}.",
            argument="value",
        )
    value_sql = pred.bind_pattern(column, value)
    return (
        f"SOUNDEX({column}) LIKE CONCAT('%', TRIM(TRAILING '0' FROM SOUNDEX({value_sql})), '%')"
    )
