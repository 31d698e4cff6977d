"""
Schema compiler: textual rendering, Python interface rendering, JSON document.

A ``Schema`` is built from a name and a builder function. The builder is invoked
exactly once, with the field builder, and its mapping is captured read-only; every
rendering is a pure function of that capture, so repeated calls are byte-identical.

Responsibilities
- Render the schema text artifact (``Schema: <name>`` + brace block).
- Render a ``TypedDict`` declaration for static tooling.
- Produce a pydantic ``SchemaDocument`` / canonical JSON / SHA-256 fingerprint.
- Compile the captured mapping into a ``Table`` without re-running the builder.

Style
- Field order always follows the mapping's declaration order.
- Modifier suffixes are emitted in a fixed order: identifier, optional, unique,
  array, default.

Examples
--------
>>> from schemascript.core.schema import Schema
>>> users = Schema("users", lambda prop: {
...     "id": prop.integer("id").identifier(),
...     "email": prop.text("email").unique(),
... })
>>> print(users.to_text())
Schema: users
{
   integer("id").identifier(),
   text("email").unique()
}
>>> print(users.to_interface())
class Users(TypedDict):
    id: int
    email: str
"""

from __future__ import annotations

import keyword
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from .field import SchemaBuilder, capture_fields
from .grammar import Kind
from .property import Property
from .serde import json_dumps_canonical, json_loads, render_literal
from .serde import fingerprint as _fingerprint
from .table import Table, TableOptions, build_table

__all__ = [
    "SchemaBuilder",
    "PropertyDocument",
    "SchemaDocument",
    "Schema",
    "render_field",
    "host_type",
]

_HOST_TYPES: dict[Kind, str] = {
    Kind.INTEGER: "int",
    Kind.REAL: "float",
    Kind.TEXT: "str",
    Kind.BLOB: "bytes",
    Kind.TIMESTAMP: "datetime",
    Kind.NODE: "dict[str, Any]",
}


class PropertyDocument(BaseModel):
    """
    JSON-able description of one descriptor.

    Attributes:
        kind (str): Logical kind value.
        name (str | None): Physical column name.
        config (Any): Kind-specific config (``{"options": ...}`` for enums).
        is_optional (bool), is_identifier (bool), is_unique (bool), is_array (bool):
            Modifier flags.
        has_default (bool): Whether a default was declared.
        default (str | None): Default as rendered in the schema text artifact.
        has_reference (bool): Whether a deferred foreign-key resolver is attached.
    """

    model_config = ConfigDict(extra="forbid")

    kind: str
    name: str | None = None
    config: Any = None
    is_optional: bool = False
    is_identifier: bool = False
    is_unique: bool = False
    is_array: bool = False
    has_default: bool = False
    default: str | None = None
    has_reference: bool = False


class SchemaDocument(BaseModel):
    """Named, ordered mapping of key -> ``PropertyDocument``."""

    model_config = ConfigDict(extra="forbid")

    name: str
    fields: dict[str, PropertyDocument]


def _kind_value(kind: Any) -> str:
    return kind.value if isinstance(kind, Kind) else str(kind)


# ============================================================================
# Text rendering
# ============================================================================


def _suffixes(prop: Property) -> str:
    parts = []
    if prop.is_identifier:
        parts.append(".identifier()")
    if prop.is_optional:
        parts.append(".optional()")
    if prop.is_unique:
        parts.append(".unique()")
    if prop.is_array:
        parts.append(".array()")
    if prop.has_default:
        parts.append(f".default({render_literal(prop.default_value)})")
    return "".join(parts)


def render_field(key: str, prop: Property) -> str:
    """
    Render one field expression (with its three-space indent).

    Args:
        key: Mapping key; used as the column name when the descriptor has none.
        prop: Descriptor to render.
    """
    col = prop.name if prop.name is not None else key
    options = prop.enum_options
    if prop.kind is Kind.ENUM and options is not None:
        if isinstance(options, dict):
            values = "\n".join(f"\t\t\t\t{label}: {code}," for label, code in options.items())
            base = f'   enum("{col}",\n    {{   options:\n\t\t\t{{\n{values}\n\t\t\t}}\n\t\t}}\n   )'
        else:
            values = ", ".join(f'"{label}"' for label in options)
            base = f'   enum("{col}",\n    {{   options:\n\t\t\t[{values}]\n\t}}\n   )'
    else:
        base = f'   {_kind_value(prop.kind)}("{col}")'
    return base + _suffixes(prop)


# ============================================================================
# Interface rendering
# ============================================================================


def host_type(prop: Property) -> str:
    """
    Resolve the Python type annotation for a descriptor.

    Examples:
        >>> from schemascript.core.field import field
        >>> host_type(field.text("tags").array().optional())
        'list[str] | None'
    """
    if prop.kind is Kind.ENUM:
        options = prop.enum_options
        labels = list(options) if options else []
        if labels:
            type_str = "Literal[" + ", ".join(json_dumps_canonical(v) for v in labels) + "]"
        else:
            type_str = "str | int"
    else:
        type_str = _HOST_TYPES.get(prop.kind, "Any")

    if prop.is_array:
        type_str = f"list[{type_str}]"
    if prop.is_optional:
        type_str = f"{type_str} | None"
    return type_str


def _interface_imports(props: list[Property]) -> list[str]:
    kinds = {prop.kind for prop in props}
    typing_names = ["TypedDict"]
    if any(k is Kind.NODE or not isinstance(k, Kind) for k in kinds):
        typing_names.append("Any")
    if any(prop.kind is Kind.ENUM and prop.enum_options for prop in props):
        typing_names.append("Literal")
    lines = []
    if Kind.TIMESTAMP in kinds:
        lines.append("from datetime import datetime")
    lines.append(f"from typing import {', '.join(sorted(typing_names))}")
    return lines


def _is_attribute_name(key: str) -> bool:
    return key.isidentifier() and not keyword.iskeyword(key)


_NON_WORD_RE = re.compile(r"\W+")


def _class_name(name: str) -> str:
    candidate = name[:1].upper() + name[1:]
    if _is_attribute_name(candidate):
        return candidate
    parts = [p for p in _NON_WORD_RE.split(name) if p]
    candidate = "".join(p[:1].upper() + p[1:] for p in parts) or "Schema"
    if candidate[0].isdigit():
        candidate = "_" + candidate
    if keyword.iskeyword(candidate):
        candidate += "_"
    return candidate


# ============================================================================
# Schema
# ============================================================================


class Schema:
    """
    Named, ordered, immutable field mapping with its renderings.

    Args:
        name (str): Schema name (the interface name capitalizes its first character).
        builder (SchemaBuilder): Called once with the field builder; must return a
            mapping of key -> Property.

    Raises:
        TypeError: If the builder returns anything but a mapping of str -> Property.
        ConstraintViolation: Propagated from descriptor modifiers inside the builder.
    """

    __slots__ = ("_name", "_fields")

    def __init__(self, name: str, builder: SchemaBuilder) -> None:
        self._name = name
        self._fields = capture_fields(builder)

    @property
    def name(self) -> str:
        return self._name

    @property
    def fields(self) -> Mapping[str, Property]:
        return self._fields

    @property
    def interface_name(self) -> str:
        """
        Class name of the rendered interface.

        The first character is capitalized. Names that are not valid Python
        identifiers are folded to PascalCase (``"user-accounts"`` -> ``"UserAccounts"``).
        """
        return _class_name(self._name)

    def __repr__(self) -> str:
        return f"Schema(name={self._name!r}, fields={list(self._fields)!r})"

    def __str__(self) -> str:
        return self.to_text()

    def to_text(self) -> str:
        """Render the schema text artifact."""
        body = ",\n".join(render_field(key, prop) for key, prop in self._fields.items())
        return f"Schema: {self._name}\n{{\n{body}\n}}"

    def to_interface(self, *, imports: bool = False) -> str:
        """
        Render a ``TypedDict`` declaration, one member per field in mapping order.

        Args:
            imports: Prefix the import lines the declaration needs.

        Notes:
            Keys that are not valid attribute names switch to the functional
            ``TypedDict("Name", {...})`` form.
        """
        cls_name = self.interface_name
        members = [(key, host_type(prop)) for key, prop in self._fields.items()]

        if all(_is_attribute_name(key) for key, _ in members):
            lines = [f"class {cls_name}(TypedDict):"]
            lines.extend(f"    {key}: {type_str}" for key, type_str in members)
            if not members:
                lines.append("    pass")
        else:
            lines = [f"{cls_name} = TypedDict(", f'    "{cls_name}",', "    {"]
            lines.extend(f"        {json_dumps_canonical(key)}: {t}," for key, t in members)
            lines.extend(["    },", ")"])
        declaration = "\n".join(lines)

        if imports:
            header = "\n".join(_interface_imports(list(self._fields.values())))
            return f"{header}\n\n\n{declaration}"
        return declaration

    def to_document(self) -> SchemaDocument:
        fields = {}
        for key, prop in self._fields.items():
            options = prop.enum_options
            if prop.kind is Kind.ENUM:
                config: Any = {"options": options}
            elif prop.configs is None:
                config = None
            else:
                config = json_loads(json_dumps_canonical(prop.configs))
            fields[key] = PropertyDocument(
                kind=_kind_value(prop.kind),
                name=prop.name,
                config=config,
                is_optional=prop.is_optional,
                is_identifier=prop.is_identifier,
                is_unique=prop.is_unique,
                is_array=prop.is_array,
                has_default=prop.has_default,
                default=render_literal(prop.default_value) if prop.has_default else None,
                has_reference=prop.reference is not None,
            )
        return SchemaDocument(name=self._name, fields=fields)

    def to_json(self) -> str:
        """Canonical JSON of ``to_document()``."""
        return json_dumps_canonical(self.to_document().model_dump(mode="json"))

    def fingerprint(self) -> str:
        """SHA-256 over the canonical JSON document."""
        return _fingerprint(self.to_document().model_dump(mode="json"))

    def table(self, name: str | None = None, options: TableOptions | None = None) -> Table:
        """
        Compile the captured mapping into a ``Table`` (the builder is not re-run).

        Args:
            name: Table name; defaults to the schema name.
            options: Compile options (backend, timestamp unit, strict enums).
        """
        return build_table(name or self._name, self._fields, options)
