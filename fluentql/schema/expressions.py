"""Closed vocabularies and value recognizers used while building queries.

Operators, logical connectives, join types and sort directions arrive from
callers as loose strings (``"not like"``, ``"||"``, ``"left outer"``).  Each
vocabulary is a ``str`` enum with a ``parse`` classmethod that normalizes the
text once, so renderers only ever dispatch on enum members.

The module also holds the regular expressions that decide whether a value is
already safe to inline into SQL text (positional ``?``, named ``:param``,
zero-argument function calls, dotted identifiers).
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from enum import Enum
from typing import Any

from fluentql.errors import QueryBuilderInvalidArgumentError

_WHITESPACE_RE = re.compile(r"\s+")


def _normalize_keyword(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text.strip()).upper()


# ---------------------------------------------------------------------------
# Predicate operators
# ---------------------------------------------------------------------------


class Operator(str, Enum):
    """Predicate operators understood by ``where`` / ``having`` / ``on``."""

    EQ = "="
    NE = "!="
    NE_ANSI = "<>"
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    IS = "IS"
    IS_NOT = "IS NOT"
    LIKE = "LIKE"
    NOT_LIKE = "NOT LIKE"
    START_LIKE = "START LIKE"
    START_NOT_LIKE = "START NOT LIKE"
    END_LIKE = "END LIKE"
    END_NOT_LIKE = "END NOT LIKE"
    BETWEEN = "BETWEEN"
    NOT_BETWEEN = "NOT BETWEEN"
    IN = "IN"
    NOT_IN = "NOT IN"
    FIND_IN_SET = "FIND_IN_SET"
    NOT_FIND_IN_SET = "NOT FIND_IN_SET"
    REGEXP = "REGEXP"
    SOUNDEX = "SOUNDEX"

    @classmethod
    def parse(cls, text: Any) -> Operator | None:
        """Return the operator spelled by ``text``, or ``None``.

        Matching is case-insensitive and tolerant of repeated whitespace.
        The compact spellings ``STARTLIKE``, ``ENDLIKE``, ``NOTLIKE``,
        ``NOTBETWEEN`` and ``NOTIN`` are accepted as well.
        """
        if isinstance(text, Operator):
            return text
        if not isinstance(text, str):
            return None
        keyword = _normalize_keyword(text)
        keyword = _OPERATOR_ALIASES.get(keyword, keyword)
        try:
            return cls(keyword)
        except ValueError:
            return None

    @property
    def negated(self) -> bool:
        return "NOT" in self.value.split()


_OPERATOR_ALIASES: dict[str, str] = {
    "==": "=",
    "STARTLIKE": "START LIKE",
    "ENDLIKE": "END LIKE",
    "NOTLIKE": "NOT LIKE",
    "STARTNOTLIKE": "START NOT LIKE",
    "ENDNOTLIKE": "END NOT LIKE",
    "NOT START LIKE": "START NOT LIKE",
    "NOT END LIKE": "END NOT LIKE",
    "NOTBETWEEN": "NOT BETWEEN",
    "NOTIN": "NOT IN",
    "NOT_FIND_IN_SET": "NOT FIND_IN_SET",
    "NOTFIND_IN_SET": "NOT FIND_IN_SET",
    "FINDINSET": "FIND_IN_SET",
    "NOTFINDINSET": "NOT FIND_IN_SET",
}


# ---------------------------------------------------------------------------
# Logical connectives, join types, sort directions
# ---------------------------------------------------------------------------


class LogicalOp(str, Enum):
    """Connective used to attach a predicate to its bucket."""

    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, text: Any) -> LogicalOp:
        """Resolve ``AND`` / ``OR`` / ``&&`` / ``||`` (any case).

        Raises:
            QueryBuilderInvalidArgumentError: For any other connective.
        """
        if isinstance(text, LogicalOp):
            return text
        if isinstance(text, str):
            keyword = _normalize_keyword(text)
            keyword = {"&&": "AND", "||": "OR"}.get(keyword, keyword)
            if keyword in cls.__members__:
                return cls(keyword)
        raise QueryBuilderInvalidArgumentError(
            f"Logical operator must be AND or OR, got {text!r}.", argument="logical"
        )


class JoinType(str, Enum):
    """Supported JOIN flavours."""

    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    LEFT_OUTER = "LEFT OUTER"
    RIGHT_OUTER = "RIGHT OUTER"
    NATURAL = "NATURAL"
    SELF = "SELF"

    @classmethod
    def parse(cls, text: Any) -> JoinType:
        """Resolve a join type name such as ``"left outer"``.

        Raises:
            QueryBuilderInvalidArgumentError: For an unsupported join type.
        """
        if isinstance(text, JoinType):
            return text
        if isinstance(text, str):
            keyword = _normalize_keyword(text).replace("_", " ")
            if keyword.endswith(" JOIN"):
                keyword = keyword[: -len(" JOIN")]
            try:
                return cls(keyword)
            except ValueError:
                pass
        supported = ", ".join(member.value for member in cls)
        raise QueryBuilderInvalidArgumentError(
            f"Unsupported join type {text!r}. Supported: {supported}.", argument="type"
        )


class SortDirection(str, Enum):
    """ORDER BY direction."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, text: Any) -> SortDirection:
        if isinstance(text, SortDirection):
            return text
        if isinstance(text, str) and _normalize_keyword(text) in cls.__members__:
            return cls(_normalize_keyword(text))
        raise QueryBuilderInvalidArgumentError(
            f"Sort direction must be ASC or DESC, got {text!r}.", argument="direction"
        )


# ---------------------------------------------------------------------------
# Safe-value recognizers
# ---------------------------------------------------------------------------

#: A named placeholder that is already registered or supplied by the caller.
PARAMETER_RE = re.compile(r"^:\w+$")

#: A zero-argument SQL function call such as ``NOW()``.
FUNCTION_CALL_RE = re.compile(r"^[A-Za-z_]\w*\(\)$")

#: A function call with arguments such as ``isActive(status, 1)``;
#: captures the name and the argument text.
FUNCTION_EXPRESSION_RE = re.compile(r"^\s*([A-Za-z_]\w*)\((.+)\)\s*$", re.DOTALL)

#: ``table.column`` reference.
DOTTED_IDENTIFIER_RE = re.compile(r"^[A-Za-z_]\w*\.[A-Za-z_]\w*$")

#: ``a.b <op> c.d`` join condition.
JOIN_CONDITION_RE = re.compile(
    r"^\s*([A-Za-z_]\w*\.[A-Za-z_]\w*)\s*(=|!=|<>|<=|>=|<|>)\s*([A-Za-z_]\w*\.[A-Za-z_]\w*)\s*$"
)

#: ``table alias`` or ``table AS alias``.
TABLE_ALIAS_RE = re.compile(r"^\s*(\S+)\s+(?:AS\s+)?([A-Za-z_]\w*)\s*$", re.IGNORECASE)


def is_positional(value: Any) -> bool:
    return isinstance(value, str) and value == "?"


def is_parameter(value: Any) -> bool:
    return isinstance(value, str) and PARAMETER_RE.match(value) is not None


def is_function_call(value: Any) -> bool:
    return isinstance(value, str) and FUNCTION_CALL_RE.match(value) is not None


def is_dotted_identifier(value: Any) -> bool:
    return isinstance(value, str) and DOTTED_IDENTIFIER_RE.match(value) is not None


def is_number(value: Any) -> bool:
    """Return True for finite int/float/Decimal values, excluding ``bool``."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return isinstance(value, int) or math.isfinite(value)
