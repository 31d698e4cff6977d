from schemascript.core.constants import value
from schemascript.core.schema import Schema, SchemaDocument
from schemascript.core.serde import json_loads


def _build(prop):
    return {
        "id": prop.integer("id").identifier(),
        "role": prop.enum("role", {"options": {"admin": 1, "user": 2}}).optional(),
        "created_at": prop.timestamp("created_at").default(value.now),
        "author": prop.integer("author_id").references(lambda: None),
        "bio": prop.text("bio").config({"max_length": 280}),
    }


def test_document_describes_every_field_in_order() -> None:
    doc = Schema("users", _build).to_document()
    assert isinstance(doc, SchemaDocument)
    assert doc.name == "users"
    assert list(doc.fields) == ["id", "role", "created_at", "author", "bio"]

    assert doc.fields["id"].kind == "integer"
    assert doc.fields["id"].is_identifier
    assert doc.fields["role"].config == {"options": {"admin": 1, "user": 2}}
    assert doc.fields["role"].is_optional
    assert doc.fields["created_at"].has_default
    assert doc.fields["created_at"].default == "value.now"
    assert doc.fields["author"].name == "author_id"
    assert doc.fields["author"].has_reference
    assert doc.fields["bio"].config == {"max_length": 280}
    assert doc.fields["bio"].default is None


def test_json_is_canonical_and_parses_back() -> None:
    schema = Schema("users", _build)
    text = schema.to_json()
    assert ", " not in text and ": " not in text
    assert json_loads(text)["fields"]["id"]["is_identifier"] is True
    assert SchemaDocument.model_validate_json(text) == schema.to_document()


def test_fingerprint_is_stable_and_sensitive() -> None:
    a = Schema("users", _build)
    b = Schema("users", _build)
    assert a.fingerprint() == b.fingerprint()
    renamed = Schema("people", _build)
    assert renamed.fingerprint() != a.fingerprint()
    changed = Schema("users", lambda prop: {**_build(prop), "bio": prop.text("bio")})
    assert changed.fingerprint() != a.fingerprint()


def test_repr_lists_keys() -> None:
    assert repr(Schema("users", _build)) == (
        "Schema(name='users', fields=['id', 'role', 'created_at', 'author', 'bio'])"
    )
