"""
Polars/Arrow adapters for compiled tables.

Purpose
- Materialize the physical column model of a ``Table`` as a polars schema and as a
  ``pyarrow.Schema`` (nullability plus interpretation metadata).
- Apply every column's write/read transform to whole polars frames, so callers keep
  labels, datetimes and structured values while storage holds codes, epoch integers
  and JSON bytes.

Source of truth (core)
- schemascript.core.table.Table / ColumnSpec describe columns, physical types and
  transforms.
- schemascript.core.grammar.PhysicalType is the closed set of storage kinds.

Notes
- Logical frames are keyed by mapping key; physical frames by physical column name.
- Node columns decode into ``pl.Object`` so arbitrary JSON payloads survive.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import polars as pl
import pyarrow as pa

from schemascript.core.grammar import Kind, PhysicalType
from schemascript.core.serde import json_dumps_canonical
from schemascript.core.table import ColumnSpec, Table

from .errors import IoSchemaError

__all__ = [
    "polars_schema",
    "arrow_schema",
    "encode_frame",
    "decode_frame",
]

# Polars dtypes are singleton-like objects; keep the mapping loosely typed.
_POLARS_DTYPES: dict[PhysicalType, Any] = {
    PhysicalType.INTEGER: pl.Int64,
    PhysicalType.REAL: pl.Float64,
    PhysicalType.TEXT: pl.Utf8,
    PhysicalType.BLOB: pl.Binary,
}

_ARROW_TYPES: dict[PhysicalType, pa.DataType] = {
    PhysicalType.INTEGER: pa.int64(),
    PhysicalType.REAL: pa.float64(),
    PhysicalType.TEXT: pa.string(),
    PhysicalType.BLOB: pa.binary(),
}


def polars_schema(table: Table) -> dict[str, Any]:
    """
    Ordered ``{physical name: polars dtype}`` for a table.

    Examples:
        >>> import polars as pl
        >>> from schemascript.core.table import compile_table
        >>> t = compile_table("t", lambda prop: {"tags": prop.text("tags").array()})
        >>> polars_schema(t) == {"tags": pl.Binary}
        True
    """
    return {col.name: _POLARS_DTYPES[col.physical_type] for col in table.columns.values()}


def _field_metadata(col: ColumnSpec) -> dict[bytes, bytes]:
    meta: dict[str, str] = {"kind": col.kind.value}
    if col.mode is not None:
        meta["mode"] = col.mode.value
    if col.element_kind is not None:
        meta["element_kind"] = col.element_kind.value
    if col.codec is not None:
        meta["enum"] = json_dumps_canonical(dict(col.codec.forward))
    return {k.encode("utf-8"): v.encode("utf-8") for k, v in meta.items()}


def arrow_schema(table: Table) -> pa.Schema:
    """
    ``pyarrow.Schema`` for a table.

    Each field carries ``nullable`` from the column spec and metadata keys ``kind``,
    ``mode``, ``element_kind`` and ``enum`` (label -> code JSON) where applicable.
    The schema-level metadata records the table name.
    """
    fields = [
        pa.field(
            col.name,
            _ARROW_TYPES[col.physical_type],
            nullable=col.nullable,
            metadata=_field_metadata(col),
        )
        for col in table.columns.values()
    ]
    return pa.schema(fields, metadata={b"table": table.name.encode("utf-8")})


def _ensure_columns_present(df: pl.DataFrame, needed: Iterable[str]) -> None:
    missing = [c for c in needed if c not in df.columns]
    if missing:
        raise IoSchemaError(f"missing required columns: {missing!r}")


def _series(name: str, values: list[Any], dtype: Any | None) -> pl.Series:
    try:
        return pl.Series(name, values, dtype=dtype)
    except (TypeError, ValueError, pl.exceptions.PolarsError) as exc:
        raise IoSchemaError(f"column {name!r} cannot hold transformed values: {exc}") from exc


def encode_frame(df: pl.DataFrame, table: Table) -> pl.DataFrame:
    """
    Logical frame -> physical frame.

    Args:
        df (pl.DataFrame): Frame keyed by mapping key; extra columns are dropped.
        table (Table): Compiled table.

    Returns:
        pl.DataFrame: Frame keyed by physical name with ``polars_schema(table)`` dtypes.

    Raises:
        IoSchemaError: If a declared column is missing or a value does not fit.
        CodecError: If an enum label or timestamp cannot be encoded.
    """
    _ensure_columns_present(df, table.columns)
    columns = []
    for key, col in table.columns.items():
        values = [col.to_storage(v) for v in df.get_column(key).to_list()]
        columns.append(_series(col.name, values, _POLARS_DTYPES[col.physical_type]))
    return pl.DataFrame(columns)


def decode_frame(df: pl.DataFrame, table: Table) -> pl.DataFrame:
    """
    Physical frame -> logical frame (inverse of ``encode_frame``).

    Raises:
        IoSchemaError: If a physical column is missing.
        CodecError: If a stored enum code or timestamp cannot be decoded.
    """
    _ensure_columns_present(df, (col.name for col in table.columns.values()))
    columns = []
    for key, col in table.columns.items():
        values = [col.from_storage(v) for v in df.get_column(col.name).to_list()]
        dtype = pl.Object if col.kind is Kind.NODE else None
        columns.append(_series(key, values, dtype))
    return pl.DataFrame(columns)
