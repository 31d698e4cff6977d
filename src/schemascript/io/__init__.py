"""
schemascript.io: settings and polars/pyarrow adapters for compiled tables.

## Responsibilities
- Load compile settings with precedence env > TOML > defaults (``Settings``).
- Express a compiled ``Table`` as a polars schema and a ``pyarrow.Schema``.
- Apply column write/read transforms to whole polars frames.

## Import DAG discipline
- Depends only on stdlib, polars/pyarrow, and schemascript.core.
- schemascript.core never imports this package.

## Examples
```python
import polars as pl
from schemascript import Schema
from schemascript.io import Settings, encode_frame

users = Schema("users", lambda prop: {
    "id": prop.integer("id").identifier(),
    "role": prop.enum("role", {"options": ["admin", "user"]}),
})
table = users.table(options=Settings.load().table_options())
encode_frame(pl.DataFrame({"id": [1], "role": ["user"]}), table)
```
"""

from __future__ import annotations

from .config import Settings
from .errors import IoConfigError, IoError, IoSchemaError
from .frames import arrow_schema, decode_frame, encode_frame, polars_schema

__all__ = [
    "Settings",
    "IoError",
    "IoConfigError",
    "IoSchemaError",
    "polars_schema",
    "arrow_schema",
    "encode_frame",
    "decode_frame",
]
