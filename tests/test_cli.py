from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from schemascript import cli

_TARGETS = textwrap.dedent(
    """
    from schemascript import Schema, value

    users = Schema("users", lambda prop: {
        "id": prop.integer("id").identifier(),
        "created_at": prop.timestamp("created_at").default(value.now),
        "role": prop.enum("role", {"options": ["admin", "user"]}),
    })
    users_table = users.table()
    not_a_schema = 42
    """
)

_BROKEN = textwrap.dedent(
    """
    from schemascript import field

    role = field.enum("role", {"options": ["a"]}).identifier()
    """
)


@pytest.fixture
def targets(tmp_path: Path, monkeypatch) -> str:
    (tmp_path / "cli_targets_mod.py").write_text(_TARGETS)
    (tmp_path / "cli_broken_mod.py").write_text(_BROKEN)
    (tmp_path / "cli_import_error_mod.py").write_text("from schemascript import no_such_name\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.chdir(tmp_path)
    for key in ("SCHEMASCRIPT_BACKEND", "SCHEMASCRIPT_INTERFACE_IMPORTS"):
        monkeypatch.delenv(key, raising=False)
    return "cli_targets_mod"


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    return exc.value.code


def test_render_text(targets, capsys) -> None:
    assert _run(["render", f"{targets}:users"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Schema: users\n{\n")
    assert '   integer("id").identifier(),' in out


def test_render_interface_with_imports_from_env(targets, monkeypatch, capsys) -> None:
    monkeypatch.setenv("SCHEMASCRIPT_INTERFACE_IMPORTS", "1")
    assert _run(["render", f"{targets}:users", "--format", "interface"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("from datetime import datetime\n")
    assert "class Users(TypedDict):" in out


def test_render_columns_with_backend_override(targets, capsys) -> None:
    assert _run(["render", f"{targets}:users", "--format", "columns", "--backend", "sql"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["name"] == "users"
    assert doc["columns"]["created_at"]["default_expr"] == {"sql": "CURRENT_TIMESTAMP"}
    assert doc["columns"]["role"]["enum"] == {"admin": 0, "user": 1}


def test_render_json_for_schema_and_table(targets, capsys) -> None:
    assert _run(["render", f"{targets}:users", "--format", "json"]) == 0
    assert json.loads(capsys.readouterr().out)["fields"]["id"]["is_identifier"] is True
    assert _run(["render", f"{targets}:users_table", "--format", "json"]) == 0
    assert json.loads(capsys.readouterr().out)["columns"]["id"]["primary_key"] is True


@pytest.mark.parametrize(
    "target",
    [
        "cli_targets_mod",
        "cli_targets_mod:missing",
        "no_such_mod_xyz:users",
        "cli_targets_mod:not_a_schema",
        "cli_import_error_mod:users",
    ],
)
def test_bad_target_exits_1(targets, capsys, target) -> None:
    assert _run(["render", target]) == 1
    assert capsys.readouterr().err.startswith("error:")


def test_table_target_rejects_text_format(targets) -> None:
    assert _run(["render", f"{targets}:users_table", "--format", "text"]) == 1


def test_library_error_exits_2(targets, capsys) -> None:
    assert _run(["render", "cli_broken_mod:role"]) == 2
    assert "ConstraintViolation" in capsys.readouterr().err


def test_missing_config_exits_2(targets, tmp_path, capsys) -> None:
    assert _run(["render", f"{targets}:users", "--config", str(tmp_path / "nope.toml")]) == 2
    assert "IoConfigError" in capsys.readouterr().err


def test_unknown_command_and_help(capsys) -> None:
    assert _run(["explode"]) == 2
    cli.main([])
    assert "render" in capsys.readouterr().out
