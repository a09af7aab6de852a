"""
Anonymizer catalog and canonical field references.

Every datum kind is registered once. Registration builds the kind's
catalog: the fields that are emitted on the wire, the read-only computed
properties that are never emitted, and for each anonymizable field the
ordered anonymizers a user may choose from.

Field references are canonical: a field is always identified by the
most-derived registered kind of the record carrying it, never by the class
that happens to declare it. Sibling kinds sharing a base field therefore
keep independent assignments.
"""

import dataclasses
import logging
import re
import typing
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from anonymization.anonymizers import Anonymizer
from anonymization.errors import UnknownFieldError, UnknownKindError

logger = logging.getLogger(__name__)

ANONYMIZABLE_METADATA_KEY = "anonymizable"

# The idempotence marker: set once a record has been through the serializer.
MARKER_FIELD = "anonymized"

_KINDS: Dict[str, type] = {}
_KIND_NAMES: Dict[type, str] = {}
_CATALOGS: Dict[str, "KindCatalog"] = {}


@dataclass(frozen=True, order=True)
class FieldRef:
    """Canonical identifier of one field on one datum kind."""

    kind: str
    field: str

    def __str__(self) -> str:
        return f"{self.kind}-{self.field}"


@dataclass(frozen=True)
class Anonymizable:
    """
    Anonymizers available for a field, in display order.

    Attributes:
        anonymizers: Anonymizer instances the user may select
        display_name: Human-readable field name for selection lists
    """

    anonymizers: Tuple[Anonymizer, ...]
    display_name: Optional[str] = None


def anonymizable(
    *anonymizer_types: Type[Anonymizer],
    display_name: Optional[str] = None,
    **field_kwargs: Any,
) -> Any:
    """
    Declare a dataclass field together with its available anonymizers.

    Example:
        >>> @register_kind
        ... @dataclass(kw_only=True)
        ... class SpeedDatum(Datum):
        ...     kph: Optional[float] = anonymizable(
        ...         DoubleRoundingOnesAnonymizer, display_name="Speed", default=None
        ...     )
    """
    declaration = Anonymizable(
        anonymizers=tuple(anonymizer_type() for anonymizer_type in anonymizer_types),
        display_name=display_name,
    )
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[ANONYMIZABLE_METADATA_KEY] = declaration
    return dataclasses.field(metadata=metadata, **field_kwargs)


@dataclass(frozen=True)
class KindCatalog:
    """Static description of one registered datum kind."""

    kind: str
    record_type: type
    fields: Tuple[str, ...]
    read_only: Tuple[str, ...]
    declarations: Mapping[str, Anonymizable]
    datetime_fields: Tuple[str, ...]
    property_fields: Tuple[str, ...]

    def declaration(self, field_name: str) -> Optional[Anonymizable]:
        """Get the anonymizer declaration for a field, if it has one."""
        return self.declarations.get(field_name)

    def anonymizable_fields(self) -> List[str]:
        """Get the emitted fields that declare anonymizers, in field order."""
        return [name for name in self.fields if name in self.declarations]

    def field_ref(self, field_name: str) -> FieldRef:
        """
        Get the canonical reference of an emitted field.

        Raises:
            UnknownFieldError: If the kind does not emit the field
        """
        if field_name not in self.fields:
            raise UnknownFieldError(f"{self.kind} has no emitted field {field_name!r}")
        return FieldRef(self.kind, field_name)

    def resolve_field(self, name: str) -> str:
        """
        Resolve an externally supplied field name to an emitted field.

        Accepts the field name itself or its CamelCase spelling, as used by
        registries written by older clients.

        Raises:
            UnknownFieldError: If no emitted field matches
        """
        if name in self.fields:
            return name
        snake = _to_snake_case(name)
        if snake in self.fields:
            return snake
        raise UnknownFieldError(f"{self.kind} has no emitted field {name!r}")


def _to_snake_case(name: str) -> str:
    name = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()


def _is_datetime_hint(hint: Any) -> bool:
    if hint is datetime:
        return True
    return datetime in typing.get_args(hint)


def build_catalog(record_type: type, kind: str) -> KindCatalog:
    """
    Build the catalog of a dataclass datum type.

    Public dataclass fields and properties with a setter are emitted.
    Properties without a setter are computed values and are excluded.

    Raises:
        ValueError: If the idempotence marker declares anonymizers
    """
    field_names: List[str] = []
    declarations: Dict[str, Anonymizable] = {}

    for dc_field in dataclasses.fields(record_type):
        # private fields back a settable property and are emitted through it
        if dc_field.name.startswith("_"):
            continue
        field_names.append(dc_field.name)
        declaration = dc_field.metadata.get(ANONYMIZABLE_METADATA_KEY)
        if declaration is not None:
            if dc_field.name == MARKER_FIELD:
                raise ValueError(f"{MARKER_FIELD!r} cannot be anonymizable")
            declarations[dc_field.name] = declaration

    # later classes in the MRO override earlier definitions
    properties: Dict[str, property] = {}
    for klass in reversed(record_type.__mro__):
        for attr_name, attr in vars(klass).items():
            if isinstance(attr, property):
                properties[attr_name] = attr

    writable_properties = []
    read_only = []
    for attr_name, prop in properties.items():
        if attr_name in field_names:
            continue
        if prop.fset is None:
            read_only.append(attr_name)
        else:
            writable_properties.append(attr_name)

    hints = typing.get_type_hints(record_type)
    datetime_fields = tuple(
        name for name in field_names if _is_datetime_hint(hints.get(name))
    )

    return KindCatalog(
        kind=kind,
        record_type=record_type,
        fields=tuple(field_names + writable_properties),
        read_only=tuple(read_only),
        declarations=declarations,
        datetime_fields=datetime_fields,
        property_fields=tuple(writable_properties),
    )


def register_kind(record_type: Optional[type] = None, *, name: Optional[str] = None):
    """
    Register a datum dataclass as a kind and build its catalog.

    Usable bare (``@register_kind``) or with an explicit kind name
    (``@register_kind(name="GpsDatum")``). Registering the same class twice
    is a no-op.

    Raises:
        ValueError: If the kind name is already taken by another class
    """

    def decorator(cls: type) -> type:
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls.__name__} must be a dataclass to be registered")

        kind = name or cls.__name__
        existing = _KINDS.get(kind)
        if existing is cls:
            return cls
        if existing is not None:
            raise ValueError(f"Datum kind already registered: {kind}")

        catalog = build_catalog(cls, kind)
        _KINDS[kind] = cls
        _KIND_NAMES[cls] = kind
        _CATALOGS[kind] = catalog

        logger.debug(
            f"Registered datum kind {kind} with {len(catalog.fields)} fields, "
            f"{len(catalog.declarations)} anonymizable"
        )
        return cls

    if record_type is not None:
        return decorator(record_type)
    return decorator


def kind_name(record_type: type) -> str:
    """
    Get the registered kind name of a datum type.

    Raises:
        UnknownKindError: If the type was never registered
    """
    try:
        return _KIND_NAMES[record_type]
    except KeyError:
        raise UnknownKindError(
            f"Datum type {record_type.__name__} is not registered"
        ) from None


def kind_type(kind: str) -> type:
    """
    Resolve a kind name to its datum type.

    Fully qualified names are resolved by their last dotted segment when no
    exact match exists.

    Raises:
        UnknownKindError: If no registered kind matches
    """
    record_type = _KINDS.get(kind)
    if record_type is None and "." in kind:
        record_type = _KINDS.get(kind.rsplit(".", 1)[1])
    if record_type is None:
        raise UnknownKindError(f"Unknown datum kind: {kind}")
    return record_type


def catalog_for(kind_or_type: Any) -> KindCatalog:
    """Get the catalog of a kind, given its name or its datum type."""
    if isinstance(kind_or_type, str):
        return _CATALOGS[kind_name(kind_type(kind_or_type))]
    return _CATALOGS[kind_name(kind_or_type)]


def registered_kinds() -> List[str]:
    """Get the sorted list of registered kind names."""
    return sorted(_KINDS)


@lru_cache(maxsize=None)
def canonical(record_type: type, field_name: str) -> FieldRef:
    """
    Get the canonical reference of a field as carried by record_type.

    The kind is always record_type's own registered kind, regardless of
    which base class declares the field.
    """
    return FieldRef(kind_name(record_type), field_name)
