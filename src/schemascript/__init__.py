"""
schemascript: declare a record schema once, render it as text, a Python interface,
and a physical column model.

## Public API
- field, value: field builder and default markers used inside builder functions.
- Schema: text / interface / JSON renderings over one captured field mapping.
- compile_table, Table, ColumnSpec, TableOptions: physical column model.
- SchemaScriptError and subclasses: ConstraintViolation, UnsupportedType, CodecError.

## Layers
- schemascript.core: zero-IO contracts (stdlib + pydantic).
- schemascript.io: settings loader and polars/pyarrow adapters.
- schemascript.cli: ``schemascript render`` developer command.
"""

from __future__ import annotations

from .core import (
    Backend,
    CodecError,
    ColumnSpec,
    ConstraintViolation,
    Kind,
    Property,
    Schema,
    SchemaScriptError,
    Table,
    TableOptions,
    UnsupportedType,
    compile_table,
    field,
    value,
)

__all__ = [
    "Backend",
    "CodecError",
    "ColumnSpec",
    "ConstraintViolation",
    "Kind",
    "Property",
    "Schema",
    "SchemaScriptError",
    "Table",
    "TableOptions",
    "UnsupportedType",
    "compile_table",
    "field",
    "value",
]

__version__ = "0.1.0"
