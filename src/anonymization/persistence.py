"""
Persisted form of the anonymizer registry.

Current documents are JSON objects::

    {
        "version": 2,
        "property_anonymizers": [
            {"type": "LocationDatum", "property": "latitude",
             "anonymizer": "DoubleRoundingTenthsAnonymizer"}
        ],
        "legacy": ["LocationDatum-Longitude:DoubleRoundingTenthsAnonymizer"]
    }

``legacy`` is read only; it is folded in after the current entries and
never written back. A bare JSON list is accepted as a legacy-only document.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import jsonschema

from anonymization.anonymizers import Anonymizer, get_anonymizer
from anonymization.catalog import FieldRef, catalog_for, kind_type
from anonymization.errors import AnonymizationError, RegistryDocumentError
from anonymization.migration import migrate_legacy
from anonymization.registry import AnonymizerRegistry

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 2

REGISTRY_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "version": {"type": "integer", "minimum": 1},
        "property_anonymizers": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"type": "string", "minLength": 1},
                    "property": {"type": "string", "minLength": 1},
                    "anonymizer": {"type": ["string", "null"]},
                },
                "required": ["type", "property"],
            },
        },
        "legacy": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["version"],
}


@dataclass
class LoadReport:
    """
    Outcome of loading a registry document.

    Attributes:
        registry: The populated registry
        restored: Fields restored from current entries
        migrated: Fields added from legacy entries
        diagnostics: Messages for entries treated as "none" or rejected
    """

    registry: AnonymizerRegistry
    restored: List[FieldRef] = field(default_factory=list)
    migrated: List[FieldRef] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)


def dump_registry(registry: AnonymizerRegistry) -> Dict[str, Any]:
    """Get the persisted document for a registry."""
    return {
        "version": DOCUMENT_VERSION,
        "property_anonymizers": [
            {"type": entry.kind, "property": entry.field, "anonymizer": entry.anonymizer}
            for entry in registry.snapshot()
        ],
    }


def dumps_registry(registry: AnonymizerRegistry) -> str:
    """Serialize a registry to a JSON string."""
    return json.dumps(dump_registry(registry), indent=2)


def _resolve_field(item: Dict[str, Any]) -> FieldRef:
    catalog = catalog_for(kind_type(item["type"]))
    return FieldRef(catalog.kind, catalog.resolve_field(item["property"]))


def _resolve_anonymizer(item: Dict[str, Any]) -> Optional[Anonymizer]:
    anonymizer_name = item.get("anonymizer")
    return get_anonymizer(anonymizer_name) if anonymizer_name else None


def load_registry(
    document: Union[str, bytes, Dict[str, Any], List[str]],
    registry: Optional[AnonymizerRegistry] = None,
) -> LoadReport:
    """
    Populate a registry from a persisted document.

    Current entries overwrite existing assignments. An entry whose
    anonymizer can no longer be resolved assigns "none" to its field; one
    whose kind or field is gone is skipped. Both are reported. Legacy
    entries are then migrated without overwriting.

    Raises:
        RegistryDocumentError: If the document is not valid JSON or does
            not match the schema
    """
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RegistryDocumentError(f"Registry document is not valid JSON: {e}") from e

    if isinstance(document, list):
        document = {"version": 1, "legacy": document}

    try:
        jsonschema.validate(instance=document, schema=REGISTRY_DOCUMENT_SCHEMA)
    except jsonschema.exceptions.ValidationError as e:
        raise RegistryDocumentError(f"Invalid registry document: {e.message}") from e

    registry = registry if registry is not None else AnonymizerRegistry()
    report = LoadReport(registry=registry)

    for item in document.get("property_anonymizers", []):
        try:
            field_ref = _resolve_field(item)
        except AnonymizationError as e:
            message = f"Skipping {item['type']}-{item['property']}: {e}"
            report.diagnostics.append(message)
            logger.warning(message)
            continue

        try:
            anonymizer = _resolve_anonymizer(item)
        except AnonymizationError as e:
            # an explicit none also keeps legacy entries off this field
            registry.assign(field_ref, None)
            message = f"Treating {field_ref} as not anonymized: {e}"
            report.diagnostics.append(message)
            logger.warning(message)
            continue

        registry.assign(field_ref, anonymizer)
        report.restored.append(field_ref)

    legacy = document.get("legacy")
    if legacy:
        migration = migrate_legacy(legacy, registry)
        report.migrated.extend(migration.applied)
        report.diagnostics.extend(migration.diagnostics)

    logger.info(
        f"Loaded registry document v{document['version']}: "
        f"{len(report.restored)} restored, {len(report.migrated)} migrated, "
        f"{len(report.diagnostics)} diagnostics"
    )
    return report
