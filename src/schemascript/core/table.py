"""
Table compiler: derive physical column specifications from field descriptors.

Every logical kind collapses onto one of four physical storage kinds. The compiler
walks the captured field mapping in declaration order and emits one frozen
``ColumnSpec`` per field; an external DDL/migration generator turns those into
dialect-specific statements. Nothing here talks to a database.

Derivation (non-array)
- integer / real / text -> same physical type
- blob      -> blob (buffer)
- timestamp -> integer (timestamp)
- node      -> blob (json)
- enum      -> integer + bidirectional codec; without options, a plain integer

Derivation (array)
- any kind  -> one blob (json) column tagged with the element kind; rows hold one
  serialized sequence each, not a child table.

Modifiers are then applied in a fixed order: identifier -> primary key,
not optional -> not null, unique, default, deferred reference.

Notes:
    - Zero-IO; logs through the module logger only.
    - ``TableOptions`` is passed at call time; the core never reads environment.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Any

from .codec import EnumCodec
from .constants import (
    DEFAULT_BACKEND,
    DEFAULT_STRICT_ENUMS,
    DEFAULT_TIMESTAMP_UNIT,
    SqlExpression,
    TimestampUnit,
    is_marker,
    resolve_default,
)
from .errors import CodecError, ConstraintViolation, UnsupportedType
from .field import SchemaBuilder, capture_fields
from .grammar import Backend, ColumnMode, Kind, PhysicalType, backend_from_value
from .property import Property
from .serde import json_dumps_canonical, json_loads, render_literal

__all__ = [
    "TableOptions",
    "ColumnSpec",
    "Table",
    "compile_table",
    "build_table",
    "derive_column",
]

logger = logging.getLogger(__name__)

_SCALAR_COLUMNS: dict[Kind, tuple[PhysicalType, ColumnMode | None]] = {
    Kind.INTEGER: (PhysicalType.INTEGER, None),
    Kind.REAL: (PhysicalType.REAL, None),
    Kind.TEXT: (PhysicalType.TEXT, None),
    Kind.BLOB: (PhysicalType.BLOB, ColumnMode.BUFFER),
    Kind.TIMESTAMP: (PhysicalType.INTEGER, ColumnMode.TIMESTAMP),
    Kind.NODE: (PhysicalType.BLOB, ColumnMode.JSON),
    Kind.ENUM: (PhysicalType.INTEGER, None),
}

_TIMESTAMP_UNITS = ("s", "ms")
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_UNIT_DELTAS: dict[str, timedelta] = {
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}


@dataclass(frozen=True)
class TableOptions:
    """
    Compile-time options.

    Attributes:
        backend (Backend): Backend default markers resolve against (``default_expr``).
        timestamp_unit ("s" | "ms"): Epoch unit used by timestamp transforms.
        strict_enums (bool): Raise instead of falling back to a plain integer column
            when an enum has no options.
    """

    backend: Backend = DEFAULT_BACKEND
    timestamp_unit: TimestampUnit = DEFAULT_TIMESTAMP_UNIT
    strict_enums: bool = DEFAULT_STRICT_ENUMS

    def __post_init__(self) -> None:
        object.__setattr__(self, "backend", backend_from_value(self.backend))
        if self.timestamp_unit not in _TIMESTAMP_UNITS:
            raise ValueError(
                f"timestamp_unit must be one of {list(_TIMESTAMP_UNITS)} "
                f"(got {self.timestamp_unit!r})"
            )


def _to_epoch(v: Any, unit: TimestampUnit) -> int:
    if isinstance(v, datetime):
        if v.tzinfo is None:
            v = v.replace(tzinfo=UTC)
        # Floors toward the earlier instant.
        return (v - _EPOCH) // _UNIT_DELTAS[unit]
    if isinstance(v, int) and not isinstance(v, bool):
        return v
    raise CodecError(f"timestamp expects a datetime or epoch integer (got {v!r})")


def _from_epoch(v: Any, unit: TimestampUnit) -> datetime:
    if isinstance(v, datetime):
        return v
    try:
        return _EPOCH + v * _UNIT_DELTAS[unit]
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise CodecError(f"cannot read {v!r} as an epoch timestamp") from exc


def _as_bytes(v: Any, key: str) -> bytes:
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v)
    raise CodecError(f"column {key!r} expects bytes (got {type(v).__name__}: {v!r})")


def _json_ready(v: Any) -> Any:
    if isinstance(v, SqlExpression):
        return {"sql": v.text}
    return json_loads(json_dumps_canonical(v))


@dataclass(frozen=True)
class ColumnSpec:
    """
    Physical column specification for one field.

    Attributes:
        key (str): Mapping key the column was declared under.
        name (str): Physical column name.
        table (str): Owning table name.
        kind (Kind): Logical kind of the field (element kind for arrays).
        physical_type (PhysicalType): One of integer / real / text / blob.
        mode (ColumnMode | None): Interpretation annotation.
        is_array (bool): Column holds one serialized sequence per row.
        nullable (bool): False unless the field is optional.
        primary_key (bool): Field is the identifier.
        unique (bool): Uniqueness constraint.
        has_default (bool): A default was declared.
        default (Any): Declared default (literal or opaque marker).
        default_expr (Any): Default resolved for ``TableOptions.backend``.
        references (Callable[[], Any] | None): Deferred foreign-key resolver.
        codec (EnumCodec | None): Label <-> code mapping for enum columns.
        timestamp_unit ("s" | "ms"): Epoch unit for timestamp transforms.

    Examples:
        >>> from schemascript.core.table import compile_table
        >>> t = compile_table("flags", lambda prop: {
        ...     "level": prop.enum("level", {"options": {"A": 1, "B": 2}}),
        ... })
        >>> t["level"].to_storage("B"), t["level"].from_storage(1)
        (2, 'A')
    """

    key: str
    name: str
    table: str
    kind: Kind
    physical_type: PhysicalType
    mode: ColumnMode | None = None
    is_array: bool = False
    nullable: bool = True
    primary_key: bool = False
    unique: bool = False
    has_default: bool = False
    default: Any = None
    default_expr: Any = None
    references: Callable[[], Any] | None = field(default=None, compare=False, repr=False)
    codec: EnumCodec | None = None
    timestamp_unit: TimestampUnit = DEFAULT_TIMESTAMP_UNIT

    @property
    def element_kind(self) -> Kind | None:
        return self.kind if self.is_array else None

    # ------------------------------------------------------------------
    # Write / read transforms
    # ------------------------------------------------------------------

    def _encode_element(self, v: Any) -> Any:
        if v is None:
            return None
        if self.codec is not None:
            return self.codec.encode(v)
        if self.kind is Kind.TIMESTAMP:
            return _to_epoch(v, self.timestamp_unit)
        if self.kind is Kind.BLOB:
            return _as_bytes(v, self.key).hex()
        return v

    def _decode_element(self, v: Any) -> Any:
        if v is None:
            return None
        if self.codec is not None:
            return self.codec.decode(v)
        if self.kind is Kind.TIMESTAMP:
            return _from_epoch(v, self.timestamp_unit)
        if self.kind is Kind.BLOB:
            try:
                return bytes.fromhex(v)
            except (TypeError, ValueError) as exc:
                raise CodecError(f"column {self.key!r} holds a non-hex blob element {v!r}") from exc
        return v

    def to_storage(self, value: Any) -> Any:
        """
        Write transform: logical value -> stored value.

        None and default markers pass through untouched.

        Raises:
            CodecError: If the value cannot be encoded for this column.
        """
        if value is None or is_marker(value):
            return value
        if self.is_array:
            if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
                raise CodecError(
                    f"column {self.key!r} holds an array; expected a sequence (got {value!r})"
                )
            payload = [self._encode_element(v) for v in value]
            return json_dumps_canonical(payload).encode("utf-8")
        if self.kind is Kind.NODE:
            return json_dumps_canonical(value).encode("utf-8")
        if self.kind is Kind.BLOB:
            return _as_bytes(value, self.key)
        return self._encode_element(value)

    def from_storage(self, value: Any) -> Any:
        """
        Read transform: stored value -> logical value.

        Raises:
            CodecError: If the stored value cannot be decoded for this column.
        """
        if value is None or is_marker(value):
            return value
        if self.is_array:
            data = json_loads(value)
            if not isinstance(data, list):
                raise CodecError(f"column {self.key!r} payload is not a JSON array")
            return [self._decode_element(v) for v in data]
        if self.kind is Kind.NODE:
            return json_loads(value)
        if self.kind is Kind.BLOB:
            return _as_bytes(value, self.key)
        return self._decode_element(value)

    # ------------------------------------------------------------------
    # References / documents
    # ------------------------------------------------------------------

    def resolve_reference(self) -> ColumnSpec | None:
        """
        Invoke the deferred foreign-key resolver.

        Returns:
            ColumnSpec | None: Referenced column, or None when no reference is attached.

        Raises:
            TypeError: If the resolver returns anything but a ``ColumnSpec``.
        """
        if self.references is None:
            return None
        target = self.references()
        if not isinstance(target, ColumnSpec):
            raise TypeError(
                f"reference resolver for {self.table}.{self.name} returned "
                f"{type(target).__name__}, expected ColumnSpec"
            )
        return target

    def to_document(self) -> dict[str, Any]:
        """JSON-able description; the resolver is shown as ``"<deferred>"``."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "physical_type": self.physical_type.value,
            "mode": self.mode.value if self.mode is not None else None,
            "element_kind": self.element_kind.value if self.element_kind is not None else None,
            "nullable": self.nullable,
            "primary_key": self.primary_key,
            "unique": self.unique,
            "has_default": self.has_default,
            "default": render_literal(self.default) if self.has_default else None,
            "default_expr": _json_ready(self.default_expr) if self.has_default else None,
            "references": "<deferred>" if self.references is not None else None,
            "enum": dict(self.codec.forward) if self.codec is not None else None,
        }


@dataclass(frozen=True)
class Table:
    """
    Named, ordered mapping of key -> ``ColumnSpec``.

    Attributes:
        name (str): Table name.
        columns (Mapping[str, ColumnSpec]): Read-only, in field declaration order.
        options (TableOptions): Options the table was compiled with.
    """

    name: str
    columns: Mapping[str, ColumnSpec]
    options: TableOptions = field(default_factory=TableOptions)

    def __getitem__(self, key: str) -> ColumnSpec:
        try:
            return self.columns[key]
        except KeyError as exc:
            raise KeyError(f"table {self.name!r} has no column {key!r}") from exc

    def __iter__(self) -> Iterator[str]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def column(self, key: str) -> ColumnSpec:
        return self[key]

    @property
    def primary_key(self) -> list[str]:
        return [key for key, col in self.columns.items() if col.primary_key]

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "columns": {key: col.to_document() for key, col in self.columns.items()},
        }


def _enum_codec(key: str, prop: Property, options: TableOptions) -> EnumCodec | None:
    enum_options = prop.enum_options
    if enum_options is not None:
        return EnumCodec.from_options(enum_options)
    if options.strict_enums:
        raise ConstraintViolation(f"enum field {key!r} has no options configured")
    logger.warning(f"Enum field {key!r} has no options; compiling a plain integer column")
    return None


def derive_column(table: str, key: str, prop: Property, options: TableOptions) -> ColumnSpec:
    """
    Derive the physical column for one descriptor.

    Args:
        table: Owning table name.
        key: Mapping key of the field.
        prop: Field descriptor.
        options: Compile options.

    Raises:
        UnsupportedType: If the descriptor's kind is outside the closed catalogue.
        ConstraintViolation: For an unconfigured enum under ``strict_enums``.
    """
    if not isinstance(prop.kind, Kind) or prop.kind not in _SCALAR_COLUMNS:
        raise UnsupportedType(f"Unsupported type: {prop.kind!r} (field {key!r})")

    codec = _enum_codec(key, prop, options) if prop.kind is Kind.ENUM else None
    if prop.is_array:
        physical_type, mode = PhysicalType.BLOB, ColumnMode.JSON
    else:
        physical_type, mode = _SCALAR_COLUMNS[prop.kind]

    default = prop.default_value
    return ColumnSpec(
        key=key,
        name=prop.name if prop.name is not None else key,
        table=table,
        kind=prop.kind,
        physical_type=physical_type,
        mode=mode,
        is_array=prop.is_array,
        primary_key=prop.is_identifier,
        nullable=prop.is_optional,
        unique=prop.is_unique,
        has_default=prop.has_default,
        default=default,
        default_expr=resolve_default(default, options.backend) if prop.has_default else None,
        references=prop.reference,
        codec=codec,
        timestamp_unit=options.timestamp_unit,
    )


def build_table(
    name: str, fields: Mapping[str, Property], options: TableOptions | None = None
) -> Table:
    """Compile an already-captured field mapping into a ``Table``."""
    opts = options or TableOptions()
    columns = {key: derive_column(name, key, prop, opts) for key, prop in fields.items()}
    logger.debug(f"Compiled table {name!r} with {len(columns)} columns ({opts.backend.value})")
    return Table(name=name, columns=MappingProxyType(columns), options=opts)


def compile_table(
    name: str, builder: SchemaBuilder, options: TableOptions | None = None
) -> Table:
    """
    Compile a table from a builder function.

    Args:
        name: Table name.
        builder: Called once with the field builder; returns key -> Property.
        options: Compile options (defaults: generic backend, seconds, permissive enums).

    Returns:
        Table: Columns in the builder mapping's declaration order.

    Examples:
        >>> from schemascript.core.table import compile_table
        >>> t = compile_table("posts", lambda prop: {
        ...     "id": prop.integer("id").identifier(),
        ...     "tags": prop.text("tags").array(),
        ... })
        >>> t["tags"].physical_type.value, t["tags"].element_kind.value
        ('blob', 'text')
    """
    return build_table(name, capture_fields(builder), options)
