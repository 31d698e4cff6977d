from pathlib import Path

import pytest

from schemascript.core import grammar
from schemascript.core.constants import DefaultMarker
from schemascript.core.errors import UnsupportedType
from schemascript.core.grammar import (
    EBNF_GRAMMAR,
    PARSED_GRAMMAR,
    Backend,
    ColumnMode,
    Kind,
    PhysicalType,
    backend_from_value,
    kind_from_value,
)
from schemascript.core.primitive import get_primitive, list_primitives


def test_core_ebnf_is_exposed_verbatim() -> None:
    file_text = Path(grammar.__file__).with_name("core.ebnf").read_text(encoding="utf-8")
    assert EBNF_GRAMMAR == file_text


@pytest.mark.parametrize(
    ("rule", "enum_cls"),
    [
        ("kind", Kind),
        ("physical_type", PhysicalType),
        ("column_mode", ColumnMode),
        ("marker_name", DefaultMarker),
    ],
)
def test_production_matches_enum(rule, enum_cls) -> None:
    assert PARSED_GRAMMAR.lower_snake_terminals(rule) == tuple(
        member.value for member in enum_cls
    )


def test_unknown_production_raises_key_error() -> None:
    with pytest.raises(KeyError):
        PARSED_GRAMMAR.production("no_such_rule")


def test_kind_from_value_normalizes_and_rejects_unknown() -> None:
    assert kind_from_value(" TEXT ") is Kind.TEXT
    assert kind_from_value(Kind.NODE) is Kind.NODE
    with pytest.raises(UnsupportedType):
        kind_from_value("float")


def test_backend_from_value() -> None:
    assert backend_from_value("SQL") is Backend.SQL
    assert backend_from_value(Backend.GENERIC) is Backend.GENERIC
    with pytest.raises(ValueError):
        backend_from_value("postgres")


def test_primitive_registry_covers_every_kind() -> None:
    assert [p.kind for p in list_primitives()] == list(Kind)
    proto = get_primitive("timestamp")
    assert proto.kind is Kind.TIMESTAMP
    assert proto.name is None
    with pytest.raises(UnsupportedType):
        get_primitive("decimal")
