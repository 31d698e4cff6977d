from __future__ import annotations

from datetime import UTC, datetime

import polars as pl
import pyarrow as pa
import pytest

from schemascript.core.errors import CodecError
from schemascript.core.schema import Schema
from schemascript.core.table import Table, TableOptions
from schemascript.io.errors import IoSchemaError
from schemascript.io.frames import arrow_schema, decode_frame, encode_frame, polars_schema


def _table(options: TableOptions | None = None) -> Table:
    schema = Schema(
        "users",
        lambda prop: {
            "id": prop.integer("id").identifier(),
            "email": prop.text("email_address").unique(),
            "score": prop.real("score").optional(),
            "role": prop.enum("role", {"options": ["admin", "user"]}),
            "tags": prop.text("tags").array(),
            "created": prop.timestamp("created_at"),
        },
    )
    return schema.table(options=options)


def _logical_frame() -> pl.DataFrame:
    return pl.DataFrame(
        {
            "id": [1, 2],
            "email": ["a@x.io", "b@x.io"],
            "score": [0.5, None],
            "role": ["admin", "user"],
            "tags": [["a"], ["b", "c"]],
            "created": [datetime(2024, 1, 1), datetime(2024, 1, 2)],
        }
    )


def test_polars_schema_uses_physical_names_and_types() -> None:
    assert polars_schema(_table()) == {
        "id": pl.Int64,
        "email_address": pl.Utf8,
        "score": pl.Float64,
        "role": pl.Int64,
        "tags": pl.Binary,
        "created_at": pl.Int64,
    }


def test_arrow_schema_carries_nullability_and_metadata() -> None:
    schema = arrow_schema(_table())
    assert isinstance(schema, pa.Schema)
    assert schema.names == ["id", "email_address", "score", "role", "tags", "created_at"]
    assert schema.field("id").type == pa.int64()
    assert not schema.field("id").nullable
    assert schema.field("score").nullable
    assert schema.field("tags").type == pa.binary()
    assert schema.field("tags").metadata[b"mode"] == b"json"
    assert schema.field("tags").metadata[b"element_kind"] == b"text"
    assert schema.field("role").metadata[b"enum"] == b'{"admin":0,"user":1}'
    assert schema.field("created_at").metadata[b"mode"] == b"timestamp"
    assert schema.metadata[b"table"] == b"users"


def test_encode_frame_applies_write_transforms() -> None:
    out = encode_frame(_logical_frame(), _table())
    assert out.columns == ["id", "email_address", "score", "role", "tags", "created_at"]
    assert dict(out.schema) == polars_schema(_table())
    assert out["role"].to_list() == [0, 1]
    assert out["tags"].to_list() == [b'["a"]', b'["b","c"]']
    assert out["created_at"].to_list() == [1704067200, 1704153600]
    assert out["score"].to_list() == [0.5, None]


def test_encode_frame_respects_timestamp_unit() -> None:
    out = encode_frame(_logical_frame(), _table(TableOptions(timestamp_unit="ms")))
    assert out["created_at"].to_list() == [1704067200000, 1704153600000]


def test_decode_frame_inverts_encode_frame() -> None:
    table = _table()
    back = decode_frame(encode_frame(_logical_frame(), table), table)
    assert back.columns == list(table)
    assert back["role"].to_list() == ["admin", "user"]
    assert back["tags"].to_list() == [["a"], ["b", "c"]]
    assert back["created"].to_list() == [
        datetime(2024, 1, 1, tzinfo=UTC),
        datetime(2024, 1, 2, tzinfo=UTC),
    ]
    assert back["email"].to_list() == ["a@x.io", "b@x.io"]


def test_node_columns_decode_to_objects() -> None:
    table = Schema("docs", lambda prop: {"meta": prop.node("meta")}).table()
    physical = pl.DataFrame({"meta": [b'{"a":1}', b"[1,2]"]}, schema={"meta": pl.Binary})
    back = decode_frame(physical, table)
    assert back["meta"].dtype == pl.Object
    assert back["meta"].to_list() == [{"a": 1}, [1, 2]]


def test_missing_columns_raise_io_schema_error() -> None:
    with pytest.raises(IoSchemaError):
        encode_frame(_logical_frame().drop("role"), _table())
    with pytest.raises(IoSchemaError):
        decode_frame(pl.DataFrame({"id": [1]}), _table())


def test_unknown_enum_label_surfaces_codec_error() -> None:
    df = _logical_frame().with_columns(pl.Series("role", ["admin", "owner"]))
    with pytest.raises(CodecError):
        encode_frame(df, _table())
