"""
Canonical SchemaScript grammar and enums.

Defines the closed catalogue of logical kinds, the four physical storage kinds they
collapse onto, the column annotations carried by the physical column model, and the
storage backends default markers are resolved against. Ships the authoritative EBNF
of the schema text artifact (``core.ebnf``) and checks, at import time, that its
terminal productions stay in sync with the enums below.

Responsibilities
- Define ``Kind``, ``PhysicalType``, ``ColumnMode`` and ``Backend``.
- Load and parse ``core.ebnf`` into ``PARSED_GRAMMAR``.
- Provide zero-IO parsing helpers for kind and backend strings.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE
   - Enum serialized values (schema text, JSON documents, settings): lower_snake

2) Logical vs. physical:
   - ``Kind`` is what a caller declares (seven values).
   - ``PhysicalType`` is what a storage engine holds (four values).
   - ``ColumnMode`` records how a physical column should be interpreted
     (time semantics, raw buffer, structured JSON payload).

Examples
--------
>>> from schemascript.core.grammar import Kind, kind_from_value, PARSED_GRAMMAR
>>> kind_from_value("timestamp") is Kind.TIMESTAMP
True
>>> PARSED_GRAMMAR.lower_snake_terminals("physical_type")
('integer', 'real', 'text', 'blob')
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from .errors import UnsupportedType

__all__ = [
    "Kind",
    "PhysicalType",
    "ColumnMode",
    "Backend",
    "EBNF_GRAMMAR",
    "GrammarProduction",
    "ParsedGrammar",
    "PARSED_GRAMMAR",
    "is_lower_snake",
    "kind_from_value",
    "backend_from_value",
]

_EBNF_PATH = Path(__file__).with_name("core.ebnf")


def _load_ebnf_text() -> str:
    return _EBNF_PATH.read_text(encoding="utf-8")


EBNF_GRAMMAR: Final[str] = _load_ebnf_text()


@dataclass(slots=True, frozen=True)
class GrammarProduction:
    """Parsed production with convenient accessors."""

    name: str
    expression: str
    alternatives: tuple[str, ...]
    leading_terminals: tuple[str, ...]

    def lower_snake_terminals(self) -> tuple[str, ...]:
        return tuple(token for token in self.leading_terminals if is_lower_snake(token))


@dataclass(slots=True, frozen=True)
class ParsedGrammar:
    """Container for parsed grammar productions."""

    productions: dict[str, GrammarProduction]

    def production(self, name: str) -> GrammarProduction:
        try:
            return self.productions[name]
        except KeyError as exc:
            raise KeyError(f"Unknown grammar production: {name}") from exc

    def lower_snake_terminals(self, name: str) -> tuple[str, ...]:
        return self.production(name).lower_snake_terminals()

    @classmethod
    def from_text(cls, text: str) -> ParsedGrammar:
        stripped = _COMMENT_RE.sub(" ", text)
        productions: dict[str, GrammarProduction] = {}
        for match in _RULE_RE.finditer(stripped):
            rule_name = match.group(1)
            expression = match.group(2).strip()
            alternatives = _split_alternatives(expression)
            leading = tuple(
                literal
                for literal in (_first_literal(part) for part in alternatives)
                if literal is not None
            )
            productions[rule_name] = GrammarProduction(
                name=rule_name,
                expression=expression,
                alternatives=alternatives,
                leading_terminals=_dedupe_preserving_order(leading),
            )
        return cls(productions=productions)


_COMMENT_RE = re.compile(r"\(\*.*?\*\)", re.DOTALL)
_RULE_RE = re.compile(r"(?ms)^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*;")
_LITERAL_RE = re.compile(r"[\"']([^\"']+)[\"']")


def _split_alternatives(expression: str) -> tuple[str, ...]:
    # Split on top-level "|" only; quoted terminals may contain brackets.
    parts: list[str] = []
    buffer: list[str] = []
    depth = 0
    quote: str | None = None
    for ch in expression:
        if quote is not None:
            buffer.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in ('"', "'"):
            quote = ch
            buffer.append(ch)
        elif ch in "([{":
            depth += 1
            buffer.append(ch)
        elif ch in ")]}":
            depth = max(0, depth - 1)
            buffer.append(ch)
        elif ch == "|" and depth == 0:
            part = "".join(buffer).strip()
            if part:
                parts.append(part)
            buffer = []
        else:
            buffer.append(ch)
    tail = "".join(buffer).strip()
    if tail:
        parts.append(tail)
    return tuple(parts)


def _first_literal(alt: str) -> str | None:
    match = _LITERAL_RE.search(alt)
    return match.group(1) if match else None


def _dedupe_preserving_order(items: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    ordered: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return tuple(ordered)


# ============================================================================
# KINDS
# ============================================================================


class Kind(Enum):
    """
    Logical data category of a field.

    Serialized values appear in:
      - the schema text artifact (``integer("id")``)
      - ``PropertyDocument.kind`` in JSON documents
      - ``ColumnSpec.element_kind`` for array columns

    Notes:
      Every kind collapses onto one ``PhysicalType``:
        * integer   -> integer
        * real      -> real
        * text      -> text
        * blob      -> blob (buffer)
        * timestamp -> integer (timestamp)
        * node      -> blob (json)
        * enum      -> integer (codec)
    """

    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"
    TIMESTAMP = "timestamp"
    NODE = "node"
    ENUM = "enum"


class PhysicalType(Enum):
    """Narrow storage model handed to DDL generators."""

    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


class ColumnMode(Enum):
    """
    Interpretation annotation on a physical column.

    - timestamp: integer column holding epoch time.
    - buffer: blob column holding raw bytes.
    - json: blob column holding one serialized structured value per row.
    """

    TIMESTAMP = "timestamp"
    BUFFER = "buffer"
    JSON = "json"


class Backend(Enum):
    """
    Storage backend family that default markers are resolved against.

    ``sql`` resolves markers to SQL expressions; ``generic`` to plain values.
    """

    SQL = "sql"
    GENERIC = "generic"


# ============================================================================
# Helpers (zero I/O)
# ============================================================================

_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Examples:
      >>> is_lower_snake("empty_array")
      True
      >>> is_lower_snake(".array()")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def kind_from_value(s: Kind | str) -> Kind:
    """
    Parse a kind string into a ``Kind``.

    Args:
      s (Kind | str): Kind enum or its serialized value (case-insensitive).

    Returns:
      Kind: Parsed kind.

    Raises:
      UnsupportedType: If s names no known kind.
    """
    if isinstance(s, Kind):
        return s
    try:
        return Kind((s or "").strip().lower())
    except ValueError as exc:
        raise UnsupportedType(f"unsupported kind: {s!r}") from exc


def backend_from_value(s: Backend | str) -> Backend:
    """
    Parse a backend string into a ``Backend``.

    Raises:
      ValueError: If s is not one of {"sql", "generic"}.
    """
    if isinstance(s, Backend):
        return s
    allowed = {b.value for b in Backend}
    s_l = (s or "").strip().lower()
    if s_l not in allowed:
        raise ValueError(f"backend must be one of {sorted(allowed)} (got {s!r})")
    return Backend(s_l)


def _assert_production_matches_enum(
    grammar: ParsedGrammar, rule_name: str, enum_cls: type[Enum]
) -> None:
    actual = list(grammar.lower_snake_terminals(rule_name))
    expected = [member.value for member in enum_cls]
    if actual != expected:
        actual_set = set(actual)
        expected_set = set(expected)
        issues: list[str] = []
        missing = expected_set - actual_set
        extra = actual_set - expected_set
        if missing:
            issues.append(f"missing {sorted(missing)}")
        if extra:
            issues.append(f"unexpected {sorted(extra)}")
        if not issues:
            issues.append("ordering differs")
        raise ValueError(
            f"Grammar production {rule_name!r} out of sync with {enum_cls.__name__}: "
            + "; ".join(issues)
        )


PARSED_GRAMMAR: Final[ParsedGrammar] = ParsedGrammar.from_text(EBNF_GRAMMAR)
_assert_production_matches_enum(PARSED_GRAMMAR, "kind", Kind)
_assert_production_matches_enum(PARSED_GRAMMAR, "physical_type", PhysicalType)
_assert_production_matches_enum(PARSED_GRAMMAR, "column_mode", ColumnMode)
