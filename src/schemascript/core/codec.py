"""
Bidirectional enum codec.

Enum columns are stored as integer codes while callers read and write labels. The
codec is built from an enum's options:

- ordered label list -> label at position i gets code i;
- explicit label -> code mapping -> used as-is (codes need not be contiguous).

The reverse map is the exact inverse of the forward map; ``EnumConfig`` guarantees
codes are distinct, so the inversion never loses a label.

Examples:
    >>> from schemascript.core.codec import EnumCodec
    >>> codec = EnumCodec.from_options(["draft", "live"])
    >>> codec.encode("live")
    1
    >>> codec.decode(0)
    'draft'
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from .errors import CodecError

__all__ = ["EnumCodec"]


@dataclass(frozen=True)
class EnumCodec:
    """
    Frozen label <-> code mapping.

    Attributes:
        forward (Mapping[str, int]): label -> code, in declaration order.
        reverse (Mapping[int, str]): code -> label.
    """

    forward: Mapping[str, int]
    reverse: Mapping[int, str]

    @classmethod
    def from_options(cls, options: Sequence[str] | Mapping[str, int]) -> EnumCodec:
        """
        Build a codec from enum options.

        Args:
            options: Ordered labels, or an explicit label -> code mapping.

        Returns:
            EnumCodec: Codec with read-only forward/reverse maps.
        """
        if isinstance(options, Mapping):
            forward = {str(label): int(code) for label, code in options.items()}
        else:
            forward = {str(label): i for i, label in enumerate(options)}
        reverse = {code: label for label, code in forward.items()}
        return cls(forward=MappingProxyType(forward), reverse=MappingProxyType(reverse))

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(self.forward)

    def encode(self, label: str) -> int:
        """Translate a label into its stored code."""
        try:
            return self.forward[label]
        except (KeyError, TypeError) as exc:
            raise CodecError(
                f"unknown enum label {label!r} (expected one of {list(self.forward)!r})"
            ) from exc

    def decode(self, code: int) -> str:
        """
        Translate a stored code back into its label.

        Raises:
            CodecError: If code is not an integer or names no label.
        """
        if not isinstance(code, int) or isinstance(code, bool):
            raise CodecError(f"enum code must be an integer (got {code!r})")
        try:
            return self.reverse[code]
        except KeyError as exc:
            raise CodecError(
                f"unknown enum code {code!r} (expected one of {list(self.reverse)!r})"
            ) from exc
