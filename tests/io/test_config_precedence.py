from __future__ import annotations

from pathlib import Path

import pytest

from schemascript.core.grammar import Backend
from schemascript.io.config import Settings
from schemascript.io.errors import IoConfigError

_ENV_KEYS = [
    "SCHEMASCRIPT_BACKEND",
    "SCHEMASCRIPT_TIMESTAMP_UNIT",
    "SCHEMASCRIPT_STRICT_ENUMS",
    "SCHEMASCRIPT_INTERFACE_IMPORTS",
]


def _write_toml(tmp: Path, name: str, content: str) -> Path:
    p = tmp / name
    p.write_text(content)
    return p


@pytest.fixture
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_settings_precedence_env_over_toml(tmp_path: Path, clean_env) -> None:
    # Arrange TOML
    _write_toml(
        tmp_path,
        "schemascript.toml",
        """
        [compile]
        backend = "generic"
        timestamp_unit = "ms"
        strict_enums = true
        """.strip(),
    )
    clean_env.chdir(tmp_path)
    # Arrange ENV that should override TOML
    clean_env.setenv("SCHEMASCRIPT_BACKEND", "sql")
    clean_env.setenv("SCHEMASCRIPT_STRICT_ENUMS", "off")

    s = Settings.load()

    assert s.backend == "sql"  # env override
    assert s.strict_enums is False  # env override
    assert s.timestamp_unit == "ms"  # TOML kept


def test_settings_from_toml_when_no_env(tmp_path: Path, clean_env) -> None:
    _write_toml(
        tmp_path,
        "schemascript.toml",
        """
        backend = "sql"
        interface_imports = true
        """.strip(),
    )
    clean_env.chdir(tmp_path)

    s = Settings.load()

    assert s.backend == "sql"
    assert s.interface_imports is True
    assert s.timestamp_unit == "s"


def test_settings_from_pyproject_tool_table(tmp_path: Path, clean_env) -> None:
    _write_toml(
        tmp_path,
        "pyproject.toml",
        """
        [project]
        name = "demo"

        [tool.schemascript]
        timestamp_unit = "ms"
        """.strip(),
    )
    clean_env.chdir(tmp_path)

    assert Settings.load().timestamp_unit == "ms"


def test_settings_defaults_when_no_config(tmp_path: Path, clean_env) -> None:
    clean_env.chdir(tmp_path)

    s = Settings.load()

    assert s == Settings()
    assert s.backend == "generic"
    assert s.timestamp_unit == "s"
    assert s.strict_enums is False
    assert s.interface_imports is False


def test_invalid_values_are_ignored(tmp_path: Path, clean_env) -> None:
    _write_toml(
        tmp_path,
        "schemascript.toml",
        """
        backend = "oracle"
        timestamp_unit = "ns"
        strict_enums = "maybe"
        """.strip(),
    )
    clean_env.chdir(tmp_path)

    assert Settings.load() == Settings()


def test_explicit_path_errors(tmp_path: Path, clean_env) -> None:
    with pytest.raises(IoConfigError):
        Settings.from_toml(tmp_path / "missing.toml")
    broken = _write_toml(tmp_path, "broken.toml", "backend = ")
    with pytest.raises(IoConfigError):
        Settings.from_toml(broken)


def test_explicit_path_is_used(tmp_path: Path, clean_env) -> None:
    cfg = _write_toml(tmp_path, "custom.toml", '[compile]\nbackend = "sql"\n')
    assert Settings.load(cfg).backend == "sql"


def test_table_options_from_settings() -> None:
    opts = Settings(backend="sql", timestamp_unit="ms", strict_enums=True).table_options()
    assert opts.backend is Backend.SQL
    assert opts.timestamp_unit == "ms"
    assert opts.strict_enums is True
