"""
Anonymization-aware serialization of sensed data records.

Assign anonymizers to datum fields in an AnonymizerRegistry; the
AnonymizingSerializer applies them exactly once whenever a record is
converted to its wire form.
"""

__version__ = "1.0.0"

from anonymization.anonymizers import Anonymizer, get_anonymizer, register_anonymizer
from anonymization.catalog import (
    Anonymizable,
    FieldRef,
    anonymizable,
    canonical,
    catalog_for,
    register_kind,
)
from anonymization.config import SessionContext, load_session_context
from anonymization.errors import (
    AnonymizationError,
    ConfigurationError,
    LegacyEntryError,
    RegistryDocumentError,
    TransformExecutionError,
    UnknownAnonymizerError,
    UnknownFieldError,
    UnknownKindError,
)
from anonymization.interceptor import AnonymizingSerializer, FieldInterceptor, deserialize
from anonymization.migration import MigrationReport, migrate_legacy
from anonymization.persistence import dump_registry, dumps_registry, load_registry
from anonymization.records import Datum
from anonymization.registry import AnonymizerRegistry, SnapshotEntry
from anonymization.selection import (
    current_assignment_index,
    list_assignable_options,
    set_assignment,
)

__all__ = [
    "Anonymizer",
    "register_anonymizer",
    "get_anonymizer",
    "Anonymizable",
    "FieldRef",
    "anonymizable",
    "canonical",
    "catalog_for",
    "register_kind",
    "SessionContext",
    "load_session_context",
    "AnonymizationError",
    "ConfigurationError",
    "LegacyEntryError",
    "RegistryDocumentError",
    "TransformExecutionError",
    "UnknownAnonymizerError",
    "UnknownFieldError",
    "UnknownKindError",
    "AnonymizingSerializer",
    "FieldInterceptor",
    "deserialize",
    "MigrationReport",
    "migrate_legacy",
    "dump_registry",
    "dumps_registry",
    "load_registry",
    "Datum",
    "AnonymizerRegistry",
    "SnapshotEntry",
    "current_assignment_index",
    "list_assignable_options",
    "set_assignment",
]
