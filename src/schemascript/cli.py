"""
schemascript developer CLI.

Usage:
    schemascript render myapp.schemas:users
    schemascript render myapp.schemas:users --format interface
    schemascript render myapp.schemas:users --format columns --backend sql
    python -m schemascript.cli render myapp.schemas:users --format json --verbose

``TARGET`` is ``package.module:attribute`` naming a ``Schema`` or a ``Table``.
Exit codes: 0 on success, 1 on a bad target, 2 on library errors.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from dataclasses import replace
from typing import Any

from schemascript.core.errors import SchemaScriptError
from schemascript.core.schema import Schema
from schemascript.core.serde import json_dumps_canonical
from schemascript.core.table import Table
from schemascript.io.config import Settings
from schemascript.io.errors import IoError

logger = logging.getLogger(__name__)

FORMATS = ("text", "interface", "json", "columns")


class _BadTarget(Exception):
    """TARGET does not name an importable Schema or Table."""


def _load_target(target: str) -> Schema | Table:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise _BadTarget(f"target must look like package.module:attribute (got {target!r})")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise _BadTarget(f"cannot import {module_name!r}: {exc}") from exc
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise _BadTarget(f"{module_name!r} has no attribute {attr!r}") from exc
    if not isinstance(obj, (Schema, Table)):
        raise _BadTarget(f"{target!r} is a {type(obj).__name__}, expected Schema or Table")
    return obj


def _render(obj: Schema | Table, fmt: str, settings: Settings) -> str:
    if isinstance(obj, Table):
        if fmt not in ("columns", "json"):
            raise _BadTarget(f"a Table target supports only --format columns/json (got {fmt!r})")
        return json_dumps_canonical(obj.to_document())
    if fmt == "text":
        return obj.to_text()
    if fmt == "interface":
        return obj.to_interface(imports=settings.interface_imports)
    if fmt == "json":
        return obj.to_json()
    return json_dumps_canonical(obj.table(options=settings.table_options()).to_document())


def _cmd_render(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="schemascript render", description="Render a schema or table artifact."
    )
    p.add_argument("target", help="package.module:attribute naming a Schema or Table.")
    p.add_argument("--format", choices=FORMATS, default="text", help="Artifact to print.")
    p.add_argument(
        "--backend",
        choices=("sql", "generic"),
        default=None,
        help="Backend default markers resolve against (overrides config).",
    )
    p.add_argument("--config", type=str, default=None, help="Explicit TOML config path.")
    p.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.load(args.config)
        if args.backend is not None:
            settings = replace(settings, backend=args.backend)
        obj = _load_target(args.target)
        logger.debug(f"Rendering {args.target} as {args.format} ({settings.backend})")
        out = _render(obj, args.format, settings)
    except _BadTarget as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (SchemaScriptError, IoError) as exc:
        print(f"error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 2

    print(out)
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="schemascript", description="SchemaScript developer CLI.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("render")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    if cmd == "render":
        code = _cmd_render(rest)
    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
