"""
Configuration for schemascript compilation.

Defines Settings, a frozen dataclass carrying the options collaborators pass into
the table compiler and the interface renderer. Defaults are sourced from
schemascript.core.constants (the single source of truth).

Source of truth
- schemascript.core.constants.DEFAULT_BACKEND, DEFAULT_TIMESTAMP_UNIT, DEFAULT_STRICT_ENUMS
- Backend values come from schemascript.core.grammar.Backend

Import DAG discipline
- Depends only on stdlib and schemascript.core.
- The core never reads these settings itself; callers hand ``table_options()`` in.

Notes
- Precedence: environment > TOML > defaults.
- Unrecognized or invalid values are ignored and the previous value is kept.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from schemascript.core.constants import (
    DEFAULT_BACKEND,
    DEFAULT_STRICT_ENUMS,
    DEFAULT_TIMESTAMP_UNIT,
    TimestampUnit,
)
from schemascript.core.grammar import Backend
from schemascript.core.table import TableOptions

from .errors import IoConfigError

logger = logging.getLogger(__name__)

BackendName = Literal["sql", "generic"]

_BACKENDS = {b.value for b in Backend}
_TIMESTAMP_UNITS = {"s", "ms"}
_TRUE = {"1", "true", "t", "yes", "y", "on"}
_FALSE = {"0", "false", "f", "no", "n", "off"}


def _bool(v: Any) -> bool | None:
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return bool(v)
    if isinstance(v, str):
        lo = v.strip().lower()
        if lo in _TRUE:
            return True
        if lo in _FALSE:
            return False
    return None


def _choice(v: Any, allowed: set[str]) -> str | None:
    if isinstance(v, str):
        lo = v.strip().lower()
        if lo in allowed:
            return lo
    return None


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for schemascript collaborators.

    Attributes:
        backend (Literal["sql","generic"]): Backend default markers resolve against.
        timestamp_unit (Literal["s","ms"]): Epoch unit of timestamp columns.
        strict_enums (bool): Fail table compilation on enums without options.
        interface_imports (bool): Prefix rendered interfaces with their import lines.

    Examples:
        >>> from schemascript.io import Settings
        >>> Settings(backend="sql").table_options().backend.value
        'sql'
    """

    backend: BackendName = DEFAULT_BACKEND.value  # type: ignore[assignment]
    timestamp_unit: TimestampUnit = DEFAULT_TIMESTAMP_UNIT
    strict_enums: bool = DEFAULT_STRICT_ENUMS
    interface_imports: bool = False

    def table_options(self) -> TableOptions:
        """Core compile options equivalent to these settings."""
        return TableOptions(
            backend=Backend(self.backend),
            timestamp_unit=self.timestamp_unit,
            strict_enums=self.strict_enums,
        )

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: Settings, cfg: dict[str, Any] | None) -> Settings:
        """Apply a loose config mapping onto Settings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "backend" in cfg:
            backend = _choice(cfg["backend"], _BACKENDS)
            if backend is not None:
                s = replace(s, backend=backend)  # type: ignore[arg-type]
            else:
                logger.warning(f"Ignoring invalid backend setting {cfg['backend']!r}")

        if "timestamp_unit" in cfg:
            unit = _choice(cfg["timestamp_unit"], _TIMESTAMP_UNITS)
            if unit is not None:
                s = replace(s, timestamp_unit=unit)  # type: ignore[arg-type]
            else:
                logger.warning(f"Ignoring invalid timestamp_unit setting {cfg['timestamp_unit']!r}")

        for flag in ("strict_enums", "interface_imports"):
            if flag in cfg:
                parsed = _bool(cfg[flag])
                if parsed is not None:
                    s = replace(s, **{flag: parsed})
                else:
                    logger.warning(f"Ignoring invalid {flag} setting {cfg[flag]!r}")

        return s

    @classmethod
    def from_env(cls, base: Settings | None = None, prefix: str = "SCHEMASCRIPT_") -> Settings:
        """
        Build Settings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - SCHEMASCRIPT_BACKEND ("sql" | "generic")
            - SCHEMASCRIPT_TIMESTAMP_UNIT ("s" | "ms")
            - SCHEMASCRIPT_STRICT_ENUMS (1/0/true/false/yes/no/on/off)
            - SCHEMASCRIPT_INTERFACE_IMPORTS (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        for key in ("backend", "timestamp_unit", "strict_enums", "interface_imports"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """
        Build Settings from a TOML file.

        Search order when `path` is None:
            1) ./schemascript.toml (with either a [compile] table or direct keys)
            2) ./pyproject.toml under [tool.schemascript]

        Returns defaults if no file is present.

        Raises:
            IoConfigError: If an explicit `path` is missing or is not valid TOML.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise IoConfigError(f"config file not found: {p}")
            cand.append(p)
        else:
            cand.append(Path.cwd() / "schemascript.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                if path is not None:
                    raise IoConfigError(f"cannot read config file {p}: {exc}") from exc
                logger.warning(f"Skipping unreadable config file {p}: {exc}")
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("schemascript") if isinstance(tool, dict) else None
            elif isinstance(data.get("compile"), dict):
                cfg = data["compile"]
            else:
                cfg = data
            if cfg:
                logger.debug(f"Loaded settings from {p}")
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """
        Load Settings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (schemascript.toml, pyproject.toml).

        Returns:
            Settings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
