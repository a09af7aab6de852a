"""
Anonymizing serialization of datum records.

FieldInterceptor decides, per field, what value is written out.
AnonymizingSerializer drives it over every emitted field of a record,
produces the wire form and marks the record as anonymized.

A record is anonymized at most once: a record whose ``anonymized`` marker is
already set (for example one reloaded from storage) is re-emitted with its
values untouched. The emitted marker is always true.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Union

from opentelemetry import trace

from anonymization.catalog import MARKER_FIELD, KindCatalog, canonical, catalog_for, kind_type
from anonymization.config import SessionContext
from anonymization.errors import TransformExecutionError
from anonymization.metrics import (
    ANONYMIZER_ERRORS,
    FIELDS_ANONYMIZED,
    RECORDS_SERIALIZED,
    SERIALIZATION_TIME,
)
from anonymization.records import Datum
from anonymization.registry import AnonymizerRegistry
from utils.tracing import trace_operation

logger = logging.getLogger(__name__)

TYPE_KEY = "$type"


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) == 0
    return False


def _to_wire(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): _to_wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_wire(item) for item in value]
    return value


@dataclass
class FieldInterceptor:
    """
    Per-field value substitution during serialization.

    Attributes:
        registry: Registry consulted for the field's anonymizer
        context: Session context handed to anonymizers
    """

    registry: AnonymizerRegistry
    context: SessionContext

    def intercept(self, record: Datum, field_name: str, raw_value: Any) -> Any:
        """
        Get the value to emit for one field of a record.

        Raises:
            TransformExecutionError: If the assigned anonymizer fails
        """
        if field_name == MARKER_FIELD:
            return True

        if _is_absent(raw_value) or record.anonymized:
            return raw_value

        field_ref = canonical(type(record), field_name)
        anonymizer = self.registry.lookup(field_ref)
        if anonymizer is None:
            return raw_value

        try:
            result = anonymizer.transform(raw_value, self.context)
        except Exception as e:
            ANONYMIZER_ERRORS.labels(
                anonymizer=anonymizer.get_type(),
                error_type=type(e).__name__,
            ).inc()
            # Field values are PII: log the reference only
            logger.error(
                f"Anonymizer {anonymizer.get_type()} failed on {field_ref}: "
                f"{type(e).__name__}"
            )
            raise TransformExecutionError(field_ref, anonymizer.get_type(), e) from e

        FIELDS_ANONYMIZED.labels(
            anonymizer=anonymizer.get_type(),
            kind=field_ref.kind,
        ).inc()
        return result


class AnonymizingSerializer:
    """
    Serialize datum records with their assigned anonymizers applied.

    Example:
        >>> serializer = AnonymizingSerializer(registry, context)
        >>> payload = serializer.serialize(datum)
        >>> datum.anonymized
        True
    """

    def __init__(self, registry: AnonymizerRegistry, context: SessionContext):
        self.registry = registry
        self.context = context
        self.interceptor = FieldInterceptor(registry, context)

    def serialize(self, record: Datum) -> Dict[str, Any]:
        """
        Get the wire form of a record.

        The record's marker is set after every field has been emitted. If an
        anonymizer fails nothing is returned and the marker is left as is.

        Raises:
            ValueError: If record is None
            UnknownKindError: If the record's type is not a registered kind
            TransformExecutionError: If an anonymizer fails
        """
        if record is None:
            raise ValueError("Attempted to serialize a null record")

        catalog = catalog_for(type(record))
        previously_anonymized = record.anonymized

        with SERIALIZATION_TIME.labels(kind=catalog.kind).time():
            with trace_operation(
                "serialize_datum",
                kind=trace.SpanKind.INTERNAL,
                datum_kind=catalog.kind,
                previously_anonymized=previously_anonymized,
            ):
                payload: Dict[str, Any] = {TYPE_KEY: catalog.kind}
                for field_name in catalog.fields:
                    raw_value = getattr(record, field_name)
                    value = self.interceptor.intercept(record, field_name, raw_value)
                    payload[field_name] = _to_wire(value)

        record.anonymized = True

        RECORDS_SERIALIZED.labels(
            kind=catalog.kind,
            previously_anonymized=str(previously_anonymized).lower(),
        ).inc()
        return payload

    def serialize_many(self, records: Iterable[Datum]) -> List[Dict[str, Any]]:
        """
        Serialize a batch of records.

        The batch fails as a whole on the first anonymizer failure; records
        serialized before the failure keep their marker.
        """
        return [self.serialize(record) for record in records]

    def to_json(self, record: Datum) -> str:
        """Serialize a record to a JSON string."""
        return json.dumps(self.serialize(record), default=str)


def deserialize(payload: Union[str, bytes, Dict[str, Any]]) -> Datum:
    """
    Restore a record from its wire form.

    The ``anonymized`` marker is restored from the payload, so a record that
    was emitted anonymized is never anonymized again when re-emitted.

    Raises:
        UnknownKindError: If the payload names an unregistered kind
        ValueError: If the payload has no kind
    """
    if isinstance(payload, (str, bytes)):
        payload = json.loads(payload)

    kind = payload.get(TYPE_KEY)
    if not kind:
        raise ValueError(f"Payload has no {TYPE_KEY} entry")

    catalog: KindCatalog = catalog_for(kind_type(kind))

    init_values = {}
    property_values = {}
    for field_name in catalog.fields:
        if field_name not in payload:
            continue
        value = payload[field_name]
        if field_name in catalog.datetime_fields and isinstance(value, str):
            try:
                value = datetime.fromisoformat(value)
            except ValueError:
                logger.debug(f"Keeping non-ISO value of {catalog.kind}.{field_name} as text")
        if field_name in catalog.property_fields:
            property_values[field_name] = value
        else:
            init_values[field_name] = value

    record = catalog.record_type(**init_values)
    for field_name, value in property_values.items():
        setattr(record, field_name, value)
    return record
