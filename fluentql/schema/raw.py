"""Trusted SQL fragments.

``Raw`` marks text that must reach the generated statement verbatim: function
calls with arguments, sub-queries, column arithmetic.  Renderers check for
``Raw`` explicitly and never bind or escape its contents.  Values bound by a
callable fragment evaluated on its own builder travel with it and are taken
over by the builder that receives the fragment.

Nothing passed to ``Raw`` is sanitized.  Never build one from user input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from fluentql.errors import QueryBuilderInvalidArgumentError

if TYPE_CHECKING:
    from fluentql.compile.builder import QueryBuilder


class Raw:
    """An immutable, unescaped SQL fragment.

    Args:
        value: SQL text, or a callable that receives a nested builder.  The
            callable may return a string (used as-is), a builder (its SELECT
            text is used), ``None`` (the SELECT text of the builder it was
            given is used) or any other object (converted with ``str``).
        builder: Builder handed to a callable ``value``.  Defaults to a fresh
            :class:`~fluentql.compile.builder.QueryBuilder`, whose bindings
            travel with the fragment (see :attr:`parameters`) and are bound
            into whichever builder receives it.

    Example::

        Raw("COUNT(*) > 5")
        Raw(lambda qb: qb.select("id").from_("user").where("status", 1))
    """

    __slots__ = ("_sql", "_parameters")

    def __init__(
        self,
        value: str | Raw | Callable[[QueryBuilder], Any],
        builder: QueryBuilder | None = None,
    ) -> None:
        parameters: dict[str, Any] = {}
        if isinstance(value, Raw):
            sql = value.get()
            parameters = value.parameters
        elif callable(value):
            sql, parameters = self._evaluate(value, builder)
        elif isinstance(value, str):
            sql = value
        else:
            raise QueryBuilderInvalidArgumentError(
                f"Raw expects a string or a callable, got {type(value).__name__}.",
                argument="value",
            )
        object.__setattr__(self, "_sql", sql.strip())
        object.__setattr__(self, "_parameters", parameters)

    @staticmethod
    def _evaluate(
        fn: Callable[[QueryBuilder], Any], builder: QueryBuilder | None
    ) -> tuple[str, dict[str, Any]]:
        from fluentql.compile.builder import QueryBuilder

        detached = builder is None
        if builder is None:
            builder = QueryBuilder()
        result = fn(builder)
        if result is None:
            sql = builder.generate_select_query()
        elif isinstance(result, QueryBuilder):
            sql = result.generate_select_query()
            builder = result
        elif isinstance(result, str):
            sql = result
        else:
            sql = str(result)
        return sql, (builder.get_parameter().all() if detached else {})

    def get(self) -> str:
        """Return the fragment text."""
        return self._sql

    @property
    def parameters(self) -> dict[str, Any]:
        """Values bound while evaluating a callable without a builder."""
        return dict(self._parameters)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Raw fragments are immutable.")

    def __str__(self) -> str:
        return self._sql

    def __repr__(self) -> str:
        return f"Raw({self._sql!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Raw):
            return self._sql == other._sql
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Raw, self._sql))
