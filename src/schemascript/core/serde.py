"""
Canonical JSON serialization and fingerprint helpers.

Provides a single canonical JSON policy used by the schema text artifact (default
literals), the JSON schema document, structured column payloads, and the SHA-256
schema fingerprint. This module is zero-IO and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Non-JSON values are coerced by ``_json_default``: datetime/date -> ISO-8601
      string, bytes -> hex string, enums (including default markers) -> their value.
    - Fingerprints hash the UTF-8 encoded canonical JSON string.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from .constants import DefaultMarker

__all__ = [
    "json_dumps_canonical",
    "json_loads",
    "fingerprint",
    "render_literal",
]


def _json_default(o: Any) -> Any:
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    if isinstance(o, (bytes, bytearray, memoryview)):
        return bytes(o).hex()
    if isinstance(o, Enum):
        return o.value
    if isinstance(o, (set, frozenset)):
        return sorted(o, key=str)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object (datetime, bytes and enums are coerced).

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Raises:
        TypeError: If obj contains a value with no JSON form.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    )


def json_loads(s: str | bytes) -> Any:
    """Deserialize a JSON string (or UTF-8 bytes) with the stdlib json module."""
    return json.loads(s)


def fingerprint(obj: Any) -> str:
    """
    Compute a stable SHA-256 hex digest over the canonical JSON of obj.

    Examples:
        >>> from schemascript.core.serde import fingerprint
        >>> fingerprint({"a": 1, "b": 2}) == fingerprint({"b": 2, "a": 1})
        True
    """
    h = hashlib.sha256()
    h.update(json_dumps_canonical(obj).encode("utf-8"))
    return h.hexdigest()


def render_literal(v: Any) -> str:
    """
    Render a default value as it appears inside ``.default(...)``.

    Integers render as bare decimals (no width suffix), markers as ``value.<name>``,
    everything else as canonical JSON.

    Examples:
        >>> render_literal(1)
        '1'
        >>> render_literal("light")
        '"light"'
        >>> render_literal(True)
        'true'
    """
    if isinstance(v, DefaultMarker):
        return f"value.{v.value}"
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return json_dumps_canonical(v)
