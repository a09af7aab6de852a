"""
Migration of the legacy string-encoded registry.

Older clients persisted the registry as a flat list of strings of the form
``Kind-Field:AnonymizerName`` (the anonymizer name omitted for "none").
Migration folds such a list into a registry without ever overwriting an
entry that already exists, so it can be run on every load.

Malformed entries are reported one by one and skipped.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from opentelemetry import trace

from anonymization.anonymizers import Anonymizer, get_anonymizer
from anonymization.catalog import FieldRef, catalog_for, kind_type
from anonymization.errors import AnonymizationError, LegacyEntryError
from anonymization.metrics import LEGACY_ENTRIES
from anonymization.registry import AnonymizerRegistry
from utils.tracing import add_span_event, trace_operation

logger = logging.getLogger(__name__)

LegacyInput = Union[bytes, str, Iterable[str]]


@dataclass
class MigrationReport:
    """
    Outcome of a legacy migration.

    Attributes:
        registry: Registry the entries were folded into
        applied: Fields that received an assignment
        skipped: Fields left alone because they already had an entry
        diagnostics: One message per rejected entry
    """

    registry: AnonymizerRegistry
    applied: List[FieldRef] = field(default_factory=list)
    skipped: List[FieldRef] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether every entry parsed."""
        return not self.diagnostics


def parse_legacy_entry(entry: str) -> Tuple[FieldRef, Optional[Anonymizer]]:
    """
    Parse one ``Kind-Field:AnonymizerName`` entry.

    Kind and anonymizer names may be fully qualified; the last dotted
    segment is used when the full name is not registered.

    Raises:
        LegacyEntryError: If the kind, field or anonymizer cannot be resolved
    """
    if not isinstance(entry, str):
        raise LegacyEntryError(repr(entry), "entry is not a string")

    parts = [part for part in entry.split(":") if part]
    if not parts or len(parts) > 2:
        raise LegacyEntryError(entry, "expected 'Kind-Field[:Anonymizer]'")

    property_part = parts[0]
    if "-" not in property_part:
        raise LegacyEntryError(entry, "missing '-' between kind and field")
    kind_part, field_part = property_part.rsplit("-", 1)
    if not kind_part or not field_part:
        raise LegacyEntryError(entry, "empty kind or field")

    try:
        catalog = catalog_for(kind_type(kind_part))
        field_name = catalog.resolve_field(field_part)
        anonymizer = get_anonymizer(parts[1]) if len(parts) > 1 else None
    except AnonymizationError as e:
        raise LegacyEntryError(entry, str(e)) from e

    return FieldRef(catalog.kind, field_name), anonymizer


def _decode(entries: LegacyInput) -> List[str]:
    if isinstance(entries, bytes):
        try:
            entries = entries.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LegacyEntryError(
                entries[:40].decode("utf-8", "replace"), f"not valid UTF-8 ({e.reason})"
            ) from e
    if isinstance(entries, str):
        try:
            decoded = json.loads(entries)
        except json.JSONDecodeError as e:
            raise LegacyEntryError(entries[:40], f"not valid JSON ({e.msg})") from e
        if not isinstance(decoded, list):
            raise LegacyEntryError(entries[:40], "legacy registry must be a JSON list")
        return decoded
    return list(entries)


def migrate_legacy(
    entries: LegacyInput,
    registry: Optional[AnonymizerRegistry] = None,
) -> MigrationReport:
    """
    Fold legacy entries into a registry.

    An entry is applied only if its field has no entry yet, so running the
    migration twice, or after the user changed an assignment, leaves the
    registry unchanged.

    Args:
        entries: JSON-encoded list (bytes or str) or an iterable of strings
        registry: Registry to fold into (default: a new empty registry)

    Returns:
        MigrationReport
    """
    registry = registry if registry is not None else AnonymizerRegistry()
    report = MigrationReport(registry=registry)

    with trace_operation("migrate_legacy_registry", kind=trace.SpanKind.INTERNAL):
        try:
            raw_entries = _decode(entries)
        except LegacyEntryError as e:
            report.diagnostics.append(str(e))
            logger.warning(str(e))
            raw_entries = []

        parsed: List[Tuple[FieldRef, Optional[Anonymizer]]] = []
        for entry in raw_entries:
            try:
                parsed.append(parse_legacy_entry(entry))
            except LegacyEntryError as e:
                report.diagnostics.append(str(e))
                LEGACY_ENTRIES.labels(outcome="rejected").inc()
                add_span_event("legacy_entry_rejected", reason=e.reason)
                logger.warning(str(e))

        applied_flags = registry.assign_missing(parsed)

    for (field_ref, _), applied in zip(parsed, applied_flags):
        if applied:
            report.applied.append(field_ref)
            LEGACY_ENTRIES.labels(outcome="applied").inc()
        else:
            report.skipped.append(field_ref)
            LEGACY_ENTRIES.labels(outcome="skipped").inc()

    logger.info(
        f"Legacy migration: {len(report.applied)} applied, "
        f"{len(report.skipped)} already present, {len(report.diagnostics)} rejected"
    )
    return report
