"""
Default markers and compile-time defaults.

Defines the symbolic default values (``value.now``, ``value.empty_array``) that stay
opaque inside the core and are only resolved by the collaborator that knows the
target backend, plus the defaults consumed by ``TableOptions`` and the io settings.
This module is zero-IO and uses only the Python standard library.

Notes:
    - Literal defaults are stored as the raw value; only markers are tagged.
    - ``resolve_default`` is a pure function of (value, backend); nothing here reads
      process environment.

Examples:
    >>> from schemascript.core.constants import value, resolve_default
    >>> from schemascript.core.grammar import Backend
    >>> resolve_default(value.now, Backend.SQL)
    SqlExpression(text='CURRENT_TIMESTAMP')
    >>> resolve_default(value.now, Backend.GENERIC)
    'now'
    >>> resolve_default(42, Backend.SQL)
    42
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Literal

from .grammar import Backend

__all__ = [
    "DefaultMarker",
    "SqlExpression",
    "value",
    "is_marker",
    "resolve_default",
    "DEFAULT_BACKEND",
    "DEFAULT_TIMESTAMP_UNIT",
    "DEFAULT_STRICT_ENUMS",
    "TimestampUnit",
]

TimestampUnit = Literal["s", "ms"]


class DefaultMarker(Enum):
    """Deferred default values whose concrete form depends on the backend."""

    NOW = "now"
    EMPTY_ARRAY = "empty_array"

    def __repr__(self) -> str:
        return f"value.{self.value}"


@dataclass(frozen=True)
class SqlExpression:
    """Raw SQL fragment to be emitted verbatim as a column DEFAULT."""

    text: str


@dataclass(frozen=True)
class _Values:
    now: DefaultMarker = DefaultMarker.NOW
    empty_array: DefaultMarker = DefaultMarker.EMPTY_ARRAY


# Namespace used in field declarations: field.timestamp("created_at").default(value.now)
value: Final[_Values] = _Values()

_SQL_MARKERS: Final[dict[DefaultMarker, SqlExpression]] = {
    DefaultMarker.NOW: SqlExpression("CURRENT_TIMESTAMP"),
    DefaultMarker.EMPTY_ARRAY: SqlExpression("'[]'"),
}

_GENERIC_MARKERS: Final[dict[DefaultMarker, str]] = {
    DefaultMarker.NOW: "now",
    DefaultMarker.EMPTY_ARRAY: "[]",
}

DEFAULT_BACKEND: Final[Backend] = Backend.GENERIC
DEFAULT_TIMESTAMP_UNIT: Final[TimestampUnit] = "s"
DEFAULT_STRICT_ENUMS: Final[bool] = False


def is_marker(v: Any) -> bool:
    return isinstance(v, DefaultMarker)


def resolve_default(v: Any, backend: Backend) -> Any:
    """
    Resolve a default value for a storage backend.

    Args:
        v (Any): Literal default or a ``DefaultMarker``.
        backend (Backend): Target backend family.

    Returns:
        Any: ``SqlExpression`` (sql) or plain value (generic) for markers; literals
        are returned unchanged.
    """
    if not isinstance(v, DefaultMarker):
        return v
    if backend is Backend.SQL:
        return _SQL_MARKERS[v]
    return _GENERIC_MARKERS[v]
