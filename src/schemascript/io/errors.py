"""
Custom exceptions for the schemascript.io module.

Purpose
- Provide io-layer error types, distinct from the core taxonomy in
  schemascript.core.errors (ConstraintViolation, UnsupportedType, CodecError).

Boundaries
- schemascript.core raises SchemaScriptError subclasses from descriptors, schemas and
  tables; those propagate through the io layer unchanged.
- schemascript.io raises Io* errors for configuration and frame-shape concerns:
  - IoConfigError: an explicitly requested config file is missing or unreadable.
  - IoSchemaError: a frame does not carry the columns a table declares.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations


class IoError(Exception):
    """
    Base class for io-layer errors in schemascript.io.

    Notes:
        Use this as a catch-all for io failures, distinct from core errors.
    """


class IoConfigError(IoError):
    """
    Raised when configuration cannot be loaded.

    Examples:
        - ``Settings.from_toml("missing.toml")``
        - A TOML file with a syntax error passed explicitly
    """


class IoSchemaError(IoError):
    """
    Raised when a DataFrame does not match a compiled table.

    Notes:
        Raised for missing columns and for values polars cannot hold in the
        column's physical dtype after the write transform.
    """
