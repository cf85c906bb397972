"""Dialect and operator registries (Open/Closed Principle).

These registries allow extension without modification.

``DialectFactory``
    Central registry for :class:`~fluentql.compile.base.Dialect`
    implementations.  Register a new dialect once; builders and the
    database layer look it up by name.

``OperatorRegistry``
    Per-operator SQL rendering handlers.  The predicate builder queries
    this registry, so every :class:`~fluentql.schema.expressions.Operator`
    member has exactly one renderer.

Usage::

    from fluentql.compile.registry import DialectFactory

    @DialectFactory.register("mariadb")
    class MariaDBDialect(MySQLDialect):
        ...
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar

from fluentql.compile.base import Dialect
from fluentql.errors import DialectError
from fluentql.schema.expressions import Operator

if TYPE_CHECKING:
    from fluentql.compile.expression_builder import PredicateBuilder

# ---------------------------------------------------------------------------
# Dialect factory
# ---------------------------------------------------------------------------


class DialectFactory:
    """Registry mapping dialect names to :class:`Dialect` classes.

    Example::

        @DialectFactory.register("mysql")
        class MySQLDialect(Dialect):
            ...

        dialect = DialectFactory.create("mysql")
    """

    _dialects: ClassVar[dict[str, type[Dialect]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[Dialect]], type[Dialect]]:
        """Decorator that registers a dialect class under ``name``.

        Args:
            name: The dialect name (e.g. ``"postgres"``).

        Returns:
            A decorator that registers and returns the dialect class.
        """

        def decorator(dialect_cls: type[Dialect]) -> type[Dialect]:
            cls._dialects[name] = dialect_cls
            return dialect_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, dialect_cls: type[Dialect]) -> None:
        """Register a dialect class without using the decorator form."""
        cls._dialects[name] = dialect_cls

    @classmethod
    def create(cls, name: str) -> Dialect:
        """Instantiate the dialect registered for ``name``.

        Raises:
            DialectError: If no dialect is registered for ``name``.
        """
        dialect_cls = cls._dialects.get(name.lower())
        if dialect_cls is None:
            raise DialectError(
                f"Unsupported dialect: '{name}'. Registered dialects: {cls.registered_dialects()}."
            )
        return dialect_cls()

    @classmethod
    def resolve(cls, dialect: str | Dialect) -> Dialect:
        """Return ``dialect`` itself if it is an instance, else create it by name."""
        if isinstance(dialect, Dialect):
            return dialect
        return cls.create(dialect)

    @classmethod
    def registered_dialects(cls) -> list[str]:
        """Return the sorted list of registered dialect names."""
        return sorted(cls._dialects)


# ---------------------------------------------------------------------------
# Operator registry
# ---------------------------------------------------------------------------

#: Type alias for a predicate rendering handler.
#: ``(predicate_builder, column, operator, value) -> sql_string``
OperatorHandler = Callable[["PredicateBuilder", str, Operator, Any], str]


class OperatorRegistry:
    """Registry mapping :class:`Operator` members to SQL rendering handlers.

    One handler may be registered for several members (``IN`` and ``NOT IN``
    share a renderer that reads :attr:`Operator.negated`).

    Example::

        @OperatorRegistry.register(Operator.REGEXP)
        def _regexp(pred, column, op, value):
            return f"{column} REGEXP {pred.bind_pattern(column, value)}"
    """

    _operators: ClassVar[dict[Operator, OperatorHandler]] = {}

    @classmethod
    def register(cls, *operators: Operator) -> Callable[[OperatorHandler], OperatorHandler]:
        """Decorator that registers a handler for each of ``operators``."""

        def decorator(handler: OperatorHandler) -> OperatorHandler:
            for operator in operators:
                cls._operators[operator] = handler
            return handler

        return decorator

    @classmethod
    def get(cls, operator: Operator) -> OperatorHandler | None:
        """Return the handler for ``operator``, or ``None`` if not registered."""
        return cls._operators.get(operator)

    @classmethod
    def registered_operators(cls) -> list[Operator]:
        return sorted(cls._operators, key=lambda op: op.value)
