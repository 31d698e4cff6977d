"""
Field builder: the namespace handed to schema builder functions.

Exposes one constructor per logical kind. Each returns a fresh descriptor seeded
with the given physical column name. ``enum`` additionally requires its options up
front, since the codec cannot be derived later.

Examples:
    >>> from schemascript.core.field import field
    >>> field.integer("id").identifier().is_identifier
    True
    >>> field.enum("role", {"options": ["admin", "user"]}).enum_options
    ['admin', 'user']
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from . import primitive
from .property import EnumConfig, Property

__all__ = ["FieldBuilder", "field", "SchemaBuilder", "capture_fields"]


class FieldBuilder:
    """Constructors for every logical kind."""

    __slots__ = ()

    def integer(self, name: str) -> Property:
        return primitive.INTEGER.init(name)

    def real(self, name: str) -> Property:
        return primitive.REAL.init(name)

    def text(self, name: str) -> Property:
        return primitive.TEXT.init(name)

    def blob(self, name: str) -> Property:
        return primitive.BLOB.init(name)

    def timestamp(self, name: str) -> Property:
        return primitive.TIMESTAMP.init(name)

    def node(self, name: str) -> Property:
        return primitive.NODE.init(name)

    def enum(self, name: str, config: Mapping[str, Any] | EnumConfig) -> Property:
        """
        Start an enum descriptor.

        Args:
            name: Physical column name.
            config: ``{"options": [...]}`` or ``{"options": {label: code}}``.

        Raises:
            ConstraintViolation: If the options are malformed.
        """
        return primitive.ENUM.init(name).config(config)

    def __repr__(self) -> str:
        return "FieldBuilder()"


field = FieldBuilder()

SchemaBuilder = Callable[[FieldBuilder], Mapping[str, Property]]


def capture_fields(builder: SchemaBuilder) -> Mapping[str, Property]:
    """
    Invoke a builder once with the field builder and freeze its mapping.

    Raises:
        TypeError: If the builder does not return a mapping of str -> Property.
    """
    fields = builder(field)
    if not isinstance(fields, Mapping):
        raise TypeError(f"schema builder must return a mapping (got {type(fields).__name__})")
    for key, prop in fields.items():
        if not isinstance(key, str):
            raise TypeError(f"field keys must be strings (got {key!r})")
        if not isinstance(prop, Property):
            raise TypeError(f"field {key!r} is not a Property (got {type(prop).__name__})")
    return MappingProxyType(dict(fields))
