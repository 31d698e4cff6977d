"""
Core exception types raised while building descriptors and compiling tables.

Provides typed exceptions for core-domain failures:
- ConstraintViolation for illegal modifier combinations and malformed enum options.
- UnsupportedType for descriptors whose kind is outside the closed catalogue.
- CodecError for labels or codes an enum codec does not know.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - ConstraintViolation is raised synchronously at the call site of the offending
      modifier (e.g. ``enum(...).identifier()``), never deferred to compilation.
    - Every error aborts the whole schema/table compilation; there is no partial result.

Examples:
    Catch an illegal modifier on an enum descriptor.

    >>> from schemascript.core.errors import ConstraintViolation
    >>> from schemascript.core.field import field
    >>> try:
    ...     field.enum("role", {"options": ["a", "b"]}).identifier()
    ... except ConstraintViolation as e:
    ...     msg = str(e)
    >>> "identifier" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "SchemaScriptError",
    "ConstraintViolation",
    "UnsupportedType",
    "CodecError",
]


class SchemaScriptError(Exception):
    """Base class for schemascript core failures."""


class ConstraintViolation(SchemaScriptError, ValueError):
    """Illegal modifier combination or malformed configuration on a descriptor."""


class UnsupportedType(SchemaScriptError, TypeError):
    """Descriptor kind is outside the closed catalogue of logical kinds."""


class CodecError(SchemaScriptError, ValueError):
    """Value cannot be translated by an enum codec (unknown label or code)."""
