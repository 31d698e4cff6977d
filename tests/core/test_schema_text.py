from schemascript.core.constants import value
from schemascript.core.primitive import TEXT
from schemascript.core.schema import Schema, render_field


def _users() -> Schema:
    return Schema(
        "users",
        lambda prop: {
            "id": prop.integer("id").identifier(),
            "email": prop.text("email").unique(),
        },
    )


def test_empty_schema_renders_empty_brace_block() -> None:
    assert Schema("empty", lambda prop: {}).to_text() == "Schema: empty\n{\n\n}"


def test_fields_render_in_order_with_their_suffixes() -> None:
    assert _users().to_text() == (
        "Schema: users\n"
        "{\n"
        '   integer("id").identifier(),\n'
        '   text("email").unique()\n'
        "}"
    )


def test_suffixes_follow_fixed_order_regardless_of_call_order() -> None:
    prop = TEXT.init("t").default("x").array().unique().optional()
    assert render_field("t", prop) == '   text("t").optional().unique().array().default("x")'


def test_default_literals() -> None:
    schema = Schema(
        "prefs",
        lambda prop: {
            "retries": prop.integer("retries").default(3),
            "ratio": prop.real("ratio").default(0.5),
            "enabled": prop.integer("enabled").default(True),
            "theme": prop.text("theme").default("light"),
            "meta": prop.node("meta").default({"b": 1, "a": 2}),
            "created_at": prop.timestamp("created_at").default(value.now),
            "tags": prop.text("tags").array().default(value.empty_array),
        },
    )
    lines = schema.to_text().splitlines()[2:-1]
    assert lines == [
        '   integer("retries").default(3),',
        '   real("ratio").default(0.5),',
        '   integer("enabled").default(true),',
        '   text("theme").default("light"),',
        '   node("meta").default({"a":2,"b":1}),',
        '   timestamp("created_at").default(value.now),',
        '   text("tags").array().default(value.empty_array)',
    ]


def test_enum_list_block() -> None:
    schema = Schema("s", lambda prop: {"role": prop.enum("role", {"options": ["admin", "user"]})})
    assert schema.to_text() == (
        "Schema: s\n{\n"
        '   enum("role",\n'
        "    {   options:\n"
        '\t\t\t["admin", "user"]\n'
        "\t}\n"
        "   )\n"
        "}"
    )


def test_enum_mapping_block_keeps_suffix_chain() -> None:
    schema = Schema(
        "s",
        lambda prop: {"level": prop.enum("level", {"options": {"A": 1, "B": 2}}).optional()},
    )
    assert schema.to_text() == (
        "Schema: s\n{\n"
        '   enum("level",\n'
        "    {   options:\n"
        "\t\t\t{\n"
        "\t\t\t\tA: 1,\n"
        "\t\t\t\tB: 2,\n"
        "\t\t\t}\n"
        "\t\t}\n"
        "   ).optional()\n"
        "}"
    )


def test_enum_without_options_renders_like_a_plain_field() -> None:
    schema = Schema("s", lambda prop: {"level": prop.enum("level", {})})
    assert schema.to_text() == 'Schema: s\n{\n   enum("level")\n}'


def test_uninitialized_descriptor_falls_back_to_key() -> None:
    schema = Schema("s", lambda prop: {"title": TEXT})
    assert schema.to_text() == 'Schema: s\n{\n   text("title")\n}'


def test_physical_name_differs_from_key() -> None:
    schema = Schema("s", lambda prop: {"email": prop.text("email_address")})
    assert 'text("email_address")' in schema.to_text()


def test_rendering_is_idempotent_and_builder_runs_once() -> None:
    calls = []

    def builder(prop):
        calls.append(1)
        return {"id": prop.integer("id").identifier()}

    schema = Schema("s", builder)
    first = schema.to_text()
    assert schema.to_text() == first
    assert str(schema) == first
    schema.to_interface()
    schema.to_json()
    schema.table()
    assert calls == [1]


def test_declaration_order_is_preserved() -> None:
    schema = Schema(
        "s",
        lambda prop: {
            "zeta": prop.text("zeta"),
            "alpha": prop.integer("alpha"),
            "mid": prop.blob("mid"),
        },
    )
    assert list(schema.fields) == ["zeta", "alpha", "mid"]
    body = schema.to_text().splitlines()[2:-1]
    assert [line.split('"')[1] for line in body] == ["zeta", "alpha", "mid"]
