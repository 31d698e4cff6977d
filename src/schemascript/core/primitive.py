"""
Primitive registry: one prototype descriptor per logical kind.

Prototypes carry no name and default options. Field constructors start every chain
from one of these via ``init(name)``; since descriptors are immutable, sharing the
prototypes is safe.

Examples:
    >>> from schemascript.core.primitive import get_primitive, list_primitives
    >>> get_primitive("real").kind.value
    'real'
    >>> [p.kind.value for p in list_primitives()][:3]
    ['integer', 'real', 'text']
"""

from __future__ import annotations

from .grammar import Kind, kind_from_value
from .property import Property

__all__ = [
    "INTEGER",
    "REAL",
    "TEXT",
    "BLOB",
    "TIMESTAMP",
    "NODE",
    "ENUM",
    "get_primitive",
    "list_primitives",
]

INTEGER = Property(Kind.INTEGER)
REAL = Property(Kind.REAL)
TEXT = Property(Kind.TEXT)
BLOB = Property(Kind.BLOB)
TIMESTAMP = Property(Kind.TIMESTAMP)
NODE = Property(Kind.NODE)
ENUM = Property(Kind.ENUM)

# Registry, in Kind declaration order
_PRIMITIVES: dict[Kind, Property] = {
    INTEGER.kind: INTEGER,
    REAL.kind: REAL,
    TEXT.kind: TEXT,
    BLOB.kind: BLOB,
    TIMESTAMP.kind: TIMESTAMP,
    NODE.kind: NODE,
    ENUM.kind: ENUM,
}


def get_primitive(kind: Kind | str) -> Property:
    """
    Look up the prototype descriptor for a kind.

    Raises:
        UnsupportedType: If kind names no known kind.
    """
    return _PRIMITIVES[kind_from_value(kind)]


def list_primitives() -> list[Property]:
    """Return all prototypes in registry order."""
    return list(_PRIMITIVES.values())
