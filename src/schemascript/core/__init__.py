"""
Core package aggregator for schemascript contracts (grammar, descriptors, schemas, tables).

## Contracts (single source of truth)
- Grammar: logical kinds, physical storage kinds, column annotations, EBNF.
- Descriptors: immutable ``Property`` values built through the field builder.
- Schemas: text artifact, ``TypedDict`` interface, JSON document, fingerprint.
- Tables: physical column specifications with enum/timestamp/JSON transforms.
- Serde: canonical JSON utilities.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO, no environment reads.
- Naming policy: enum `.value` strings are lower_snake.
- Default markers (`value.now`, `value.empty_array`) stay opaque until a table is
  compiled for a backend.

## Downstream usage
- schemascript.io builds polars/pyarrow schemas from `Table` and applies column
  transforms to whole frames.
- schemascript.cli renders schemas and tables for developers.

## Examples
```python
from schemascript.core import Schema, value

posts = Schema("posts", lambda prop: {
    "id": prop.integer("id").identifier(),
    "tags": prop.text("tags").array().default(value.empty_array),
    "status": prop.enum("status", {"options": ["draft", "live"]}),
})
print(posts.to_text())
posts.table()["status"].to_storage("live")  # 1
```
"""

from __future__ import annotations

from .codec import EnumCodec
from .constants import DefaultMarker, SqlExpression, resolve_default, value
from .errors import CodecError, ConstraintViolation, SchemaScriptError, UnsupportedType
from .field import FieldBuilder, field
from .grammar import Backend, ColumnMode, Kind, PhysicalType
from .property import MISSING, EnumConfig, Property
from .schema import Schema, SchemaDocument
from .table import ColumnSpec, Table, TableOptions, compile_table

__all__ = [
    "Backend",
    "CodecError",
    "ColumnMode",
    "ColumnSpec",
    "ConstraintViolation",
    "DefaultMarker",
    "EnumCodec",
    "EnumConfig",
    "FieldBuilder",
    "Kind",
    "MISSING",
    "PhysicalType",
    "Property",
    "Schema",
    "SchemaDocument",
    "SchemaScriptError",
    "SqlExpression",
    "Table",
    "TableOptions",
    "UnsupportedType",
    "compile_table",
    "field",
    "resolve_default",
    "value",
]
