"""Named-parameter registry shared by a builder and its nested builders.

Every caller-supplied value that is not safe to inline is stored here under a
``:name`` placeholder derived from its column.  A single registry instance is
threaded through groups, join callbacks and sub-queries so that placeholder
names stay unique across the whole statement.
"""
from __future__ import annotations

import hashlib
import re
from collections.abc import Iterator, Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Union

from fluentql.errors import QueryBuilderInvalidArgumentError
from fluentql.schema.raw import Raw

#: Scalar types a registry accepts as bound values.
BINDABLE_TYPES = (str, bool, int, float, Decimal, bytes, date, datetime, time)

ParameterSource = Union[Mapping[str, Any], "ParameterRegistry"]

_NON_WORD_RE = re.compile(r"\W+")
_PLACEHOLDER_RE = re.compile(r"(?<![:\w]):\w+")


def normalize_key(key: str | Raw) -> str:
    """Return the canonical ``:name`` form of ``key``.

    Leading colons are stripped, dots removed, and any remaining run of
    non-word characters collapses to ``_``.  A :class:`Raw` key is hashed so
    that expressions such as ``COUNT(id)`` still get a stable, valid name.

    Example::

        normalize_key("post.id")   # ":postid"
        normalize_key("::status")  # ":status"
    """
    if isinstance(key, Raw):
        return ":raw_" + hashlib.md5(key.get().encode("utf-8")).hexdigest()
    name = str(key).lstrip(":").replace(".", "")
    name = _NON_WORD_RE.sub("_", name).strip("_")
    if not name:
        name = "param"
    elif name[0].isdigit():
        name = f"p{name}"
    return f":{name}"


class ParameterRegistry:
    """Mapping of ``:placeholder`` names to bound values.

    Example::

        params = ParameterRegistry()
        params.add("status", 1)   # ":status"
        params.add("status", 2)   # ":status_1"
        params.add("note", None)  # "NULL", nothing bound
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._params: dict[str, Any] = {}
        if initial:
            self.merge(initial)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def set(self, key: str | Raw, value: Any) -> ParameterRegistry:
        """Bind ``value`` under ``key``, overwriting any existing binding."""
        self._params[normalize_key(key)] = self._check_value(key, value)
        return self

    def add(self, key: str | Raw, value: Any) -> str:
        """Bind ``value`` under a free name derived from ``key``.

        Args:
            key: Column name (or Raw expression) the value belongs to.
            value: Scalar value to bind.

        Returns:
            The placeholder including its leading colon, or the literal
            ``NULL`` when ``value`` is ``None`` (no binding is made).
        """
        if value is None:
            return "NULL"
        value = self._check_value(key, value)
        base = normalize_key(key)
        name = base
        suffix = 0
        while name in self._params:
            suffix += 1
            name = f"{base}_{suffix}"
        self._params[name] = value
        return name

    def add_once(self, key: str | Raw, value: Any) -> str:
        """Like :meth:`add`, reusing a ``key``-derived placeholder bound to an equal value.

        Values must also share their type, so ``1`` never reuses ``True``.
        """
        if value is None:
            return "NULL"
        value = self._check_value(key, value)
        base = normalize_key(key)
        pattern = re.compile(re.escape(base) + r"(?:_\d+)?$")
        for name, bound in self._params.items():
            if pattern.match(name) and type(bound) is type(value) and bound == value:
                return name
        return self.add(key, value)

    def adopt(self, raw: Raw) -> Raw:
        """Bind the values a detached :class:`Raw` carries.

        Placeholders whose names are already taken here are renamed, so the
        returned fragment (which carries no bindings of its own) stays
        consistent with this registry.
        """
        if not raw.parameters:
            return raw
        renames: dict[str, str] = {}
        for key, value in raw.parameters.items():
            name = self.add(key, value)
            if name != key:
                renames[key] = name
        sql = raw.get()
        if renames:
            sql = _PLACEHOLDER_RE.sub(lambda m: renames.get(m.group(0), m.group(0)), sql)
        return Raw(sql)

    def merge(self, *sources: ParameterSource) -> ParameterRegistry:
        """Fold mappings or other registries into this one; later sources win."""
        for source in sources:
            items = source.all() if isinstance(source, ParameterRegistry) else source
            for key, value in items.items():
                self.set(key, value)
        return self

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(
        self,
        key: str | Raw | None = None,
        default: Any | Callable[[], Any] = None,
    ) -> Any:
        """Return one bound value, or the whole mapping when ``key`` is None.

        ``default`` may be a zero-argument callable; it is only invoked when
        the key is missing.
        """
        if key is None:
            return self.all()
        name = normalize_key(key)
        if name in self._params:
            return self._params[name]
        return default() if callable(default) else default

    def all(self) -> dict[str, Any]:
        return dict(self._params)

    def reset(self) -> ParameterRegistry:
        self._params.clear()
        return self

    def copy(self) -> ParameterRegistry:
        clone = ParameterRegistry()
        clone._params = dict(self._params)
        return clone

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, Raw)):
            return False
        return normalize_key(key) in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        return f"ParameterRegistry({self._params!r})"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_value(key: str | Raw, value: Any) -> Any:
        if value is None or isinstance(value, BINDABLE_TYPES):
            return value
        raise QueryBuilderInvalidArgumentError(
            f"Parameter {str(key)!r} must be a scalar value, got {type(value).__name__}.",
            argument="value",
        )
