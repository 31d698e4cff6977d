"""
Immutable field descriptors.

A ``Property`` describes one field: its logical ``Kind`` (fixed for the life of a
chain) and an option set (physical name, config, modifiers, default, deferred
reference). Every modifier returns a new ``Property`` built from a shallow merge of
the receiver's options; no method mutates the receiver.

Responsibilities
- Provide the chainable modifier API: init, config, default, identifier, optional,
  unique, array, references.
- Enforce the enum modifier rules at the call site (no identifier, no unique).
- Validate enum options through ``EnumConfig`` (pydantic).

Examples
--------
>>> from schemascript.core.property import Property
>>> from schemascript.core.grammar import Kind
>>> base = Property(Kind.TEXT).init("email")
>>> unique = base.unique()
>>> (base.is_unique, unique.is_unique)
(False, True)
>>> unique.name
'email'
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, ValidationError, field_validator

from .errors import ConstraintViolation
from .grammar import Kind

__all__ = [
    "MISSING",
    "EnumConfig",
    "PropertyOptions",
    "Property",
]


class _Missing:
    """Sentinel for "no default declared" (distinct from a falsy default)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final[_Missing] = _Missing()


class EnumConfig(BaseModel):
    """
    Enum option set.

    Attributes:
        options (list[str] | dict[str, int] | None): Either an ordered list of labels
            (codes assigned by position, 0..n-1) or an explicit label -> code mapping
            with non-negative, pairwise distinct codes. None means "not configured".

    Raises:
        pydantic.ValidationError: On duplicate labels, negative codes, or two labels
            sharing one code.

    Examples:
        >>> EnumConfig(options=["admin", "user"]).labels
        ('admin', 'user')
        >>> EnumConfig(options={"A": 1, "B": 2}).is_mapping
        True
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    options: list[StrictStr] | dict[StrictStr, StrictInt] | None = None

    @field_validator("options")
    @classmethod
    def _check_options(
        cls, v: list[str] | dict[str, int] | None
    ) -> list[str] | dict[str, int] | None:
        if v is None:
            return v
        if isinstance(v, list):
            if len(set(v)) != len(v):
                raise ValueError(f"enum labels must be unique (got {v!r})")
            return v
        negative = sorted(label for label, code in v.items() if code < 0)
        if negative:
            raise ValueError(f"enum codes must be non-negative (labels: {negative!r})")
        if len(set(v.values())) != len(v):
            raise ValueError(f"enum codes must be distinct (got {v!r})")
        return v

    @property
    def is_mapping(self) -> bool:
        return isinstance(self.options, dict)

    @property
    def labels(self) -> tuple[str, ...]:
        if self.options is None:
            return ()
        return tuple(self.options)


@dataclass(frozen=True, slots=True)
class PropertyOptions:
    """
    Option set carried by a ``Property``.

    Attributes:
        name (str | None): Physical column name (set by ``init``).
        config (Any): Kind-specific payload; ``EnumConfig`` for enums, verbatim otherwise.
        is_optional (bool): Column may hold null.
        is_identifier (bool): Column is (part of) the primary key.
        is_unique (bool): Column carries a uniqueness constraint.
        is_array (bool): Column holds a sequence of the kind.
        default_value (Any): Literal default, default marker, or ``MISSING``.
        references (Callable[[], Any] | None): Deferred foreign-key resolver.
    """

    name: str | None = None
    config: Any = None
    is_optional: bool = False
    is_identifier: bool = False
    is_unique: bool = False
    is_array: bool = False
    default_value: Any = MISSING
    references: Callable[[], Any] | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class Property:
    """
    Immutable descriptor for one field.

    Attributes:
        kind (Kind): Logical kind; never changes across a chain.
        options (PropertyOptions): Current option set.

    Notes:
        - Modifiers may be chained in any order; rendering and compilation apply them
          in a fixed order regardless.
        - ``array()`` does not nest: calling it twice is the same as calling it once.
    """

    kind: Kind
    options: PropertyOptions = field(default_factory=PropertyOptions)

    def _set_options(self, **updates: Any) -> Property:
        return Property(self.kind, replace(self.options, **updates))

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------

    def init(self, name: str) -> Property:
        """Return a copy bound to physical column ``name``."""
        if not isinstance(name, str) or not name:
            raise TypeError(f"column name must be a non-empty string (got {name!r})")
        return self._set_options(name=name)

    def config(self, cfg: Any) -> Property:
        """
        Return a copy carrying configuration ``cfg``.

        For enum descriptors ``cfg`` is validated as an ``EnumConfig`` (a mapping with
        an ``options`` key, or an ``EnumConfig`` instance).

        Raises:
            ConstraintViolation: If an enum config is malformed.
        """
        if self.kind is Kind.ENUM:
            cfg = _validate_enum_config(cfg)
        return self._set_options(config=cfg)

    def default(self, value: Any) -> Property:
        return self._set_options(default_value=value)

    def identifier(self) -> Property:
        """
        Mark the field as the identifier (primary key).

        Raises:
            ConstraintViolation: For enum descriptors.
        """
        if self.kind is Kind.ENUM:
            raise ConstraintViolation("Enums cannot be identifiers.")
        return self._set_options(is_identifier=True)

    def optional(self) -> Property:
        return self._set_options(is_optional=True)

    def unique(self) -> Property:
        """
        Add a uniqueness constraint.

        Raises:
            ConstraintViolation: For enum descriptors.
        """
        if self.kind is Kind.ENUM:
            raise ConstraintViolation("Enums cannot be unique.")
        return self._set_options(is_unique=True)

    def array(self) -> Property:
        return self._set_options(is_array=True)

    def references(self, resolver: Callable[[], Any]) -> Property:
        """
        Attach a deferred foreign-key resolver.

        Args:
            resolver: Zero-argument callable returning the referenced column. It is not
                invoked here; the table compiler hands it on unresolved.
        """
        if not callable(resolver):
            raise TypeError(f"references() expects a zero-argument callable (got {resolver!r})")
        return self._set_options(references=resolver)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str | None:
        return self.options.name

    @property
    def configs(self) -> Any:
        return self.options.config

    @property
    def is_optional(self) -> bool:
        return self.options.is_optional

    @property
    def is_identifier(self) -> bool:
        return self.options.is_identifier

    @property
    def is_unique(self) -> bool:
        return self.options.is_unique

    @property
    def is_array(self) -> bool:
        return self.options.is_array

    @property
    def has_default(self) -> bool:
        return self.options.default_value is not MISSING

    @property
    def default_value(self) -> Any:
        """Declared default, or None when ``has_default`` is False."""
        return self.options.default_value if self.has_default else None

    @property
    def reference(self) -> Callable[[], Any] | None:
        return self.options.references

    @property
    def enum_options(self) -> list[str] | dict[str, int] | None:
        """Enum options when this is a configured enum descriptor, else None."""
        cfg = self.options.config
        if self.kind is Kind.ENUM and isinstance(cfg, EnumConfig):
            return cfg.options
        return None


def _validate_enum_config(cfg: Any) -> EnumConfig:
    if isinstance(cfg, EnumConfig):
        return cfg
    if cfg is None:
        return EnumConfig()
    if not isinstance(cfg, Mapping):
        raise ConstraintViolation(
            f"enum config must be a mapping with an 'options' key (got {type(cfg).__name__})"
        )
    try:
        return EnumConfig.model_validate(dict(cfg))
    except ValidationError as exc:
        raise ConstraintViolation(f"invalid enum config: {exc}") from exc
