"""
Datum kinds produced by the sensing layer.

Every record derives from Datum, which carries the common identification
fields and the ``anonymized`` idempotence marker. The marker starts False
and is set by the anonymizing serializer; nothing in this package ever
clears it.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional

from anonymization.anonymizers import (
    DateTimeOffsetParticipantTimelineAnonymizer,
    DateTimeOffsetStudyTimelineAnonymizer,
    DoubleRoundingHundredsAnonymizer,
    DoubleRoundingHundredthsAnonymizer,
    DoubleRoundingOnesAnonymizer,
    DoubleRoundingTensAnonymizer,
    DoubleRoundingTenthsAnonymizer,
    DoubleRoundingThousandthsAnonymizer,
    LatitudeParticipantOffsetGpsAnonymizer,
    LatitudeStudyOffsetGpsAnonymizer,
    LongitudeParticipantOffsetGpsAnonymizer,
    LongitudeStudyOffsetGpsAnonymizer,
    StringHashAnonymizer,
    ValueOmittingAnonymizer,
)
from anonymization.catalog import anonymizable, register_kind

LATITUDE_ANONYMIZERS = (
    DoubleRoundingTenthsAnonymizer,
    DoubleRoundingHundredthsAnonymizer,
    DoubleRoundingThousandthsAnonymizer,
    LatitudeParticipantOffsetGpsAnonymizer,
    LatitudeStudyOffsetGpsAnonymizer,
)

LONGITUDE_ANONYMIZERS = (
    DoubleRoundingTenthsAnonymizer,
    DoubleRoundingHundredthsAnonymizer,
    DoubleRoundingThousandthsAnonymizer,
    LongitudeParticipantOffsetGpsAnonymizer,
    LongitudeStudyOffsetGpsAnonymizer,
)

TIMELINE_ANONYMIZERS = (
    DateTimeOffsetParticipantTimelineAnonymizer,
    DateTimeOffsetStudyTimelineAnonymizer,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


@register_kind
@dataclass(kw_only=True)
class Datum:
    """
    Base record of sensed data.

    Attributes:
        id: Unique record identifier
        device_id: Identifier of the collecting device
        timestamp: When the value was sensed
        protocol_id: Study/protocol the record was collected under
        participant_id: Participant the device is enrolled as
        anonymized: Set once the record has passed through the serializer
    """

    id: str = field(default_factory=_new_id)
    device_id: Optional[str] = anonymizable(
        StringHashAnonymizer, display_name="Device ID", default=None
    )
    timestamp: datetime = anonymizable(
        *TIMELINE_ANONYMIZERS, display_name="Timestamp", default_factory=_now
    )
    protocol_id: Optional[str] = None
    participant_id: Optional[str] = anonymizable(
        StringHashAnonymizer, display_name="Participant ID", default=None
    )
    anonymized: bool = False

    @property
    def display_detail(self) -> str:
        """Short human-readable summary; computed, never serialized."""
        return f"{type(self).__name__} at {self.timestamp.isoformat()}"


@register_kind
@dataclass(kw_only=True)
class LocationDatum(Datum):
    latitude: Optional[float] = anonymizable(
        *LATITUDE_ANONYMIZERS, display_name="Latitude", default=None
    )
    longitude: Optional[float] = anonymizable(
        *LONGITUDE_ANONYMIZERS, display_name="Longitude", default=None
    )
    accuracy: Optional[float] = anonymizable(
        DoubleRoundingOnesAnonymizer,
        DoubleRoundingTensAnonymizer,
        DoubleRoundingHundredsAnonymizer,
        display_name="Accuracy",
        default=None,
    )

    @property
    def display_detail(self) -> str:
        return f"{self.latitude}, {self.longitude}"


@register_kind
@dataclass(kw_only=True)
class AccelerometerDatum(Datum):
    x: Optional[float] = anonymizable(
        DoubleRoundingOnesAnonymizer, DoubleRoundingTenthsAnonymizer, default=None
    )
    y: Optional[float] = anonymizable(
        DoubleRoundingOnesAnonymizer, DoubleRoundingTenthsAnonymizer, default=None
    )
    z: Optional[float] = anonymizable(
        DoubleRoundingOnesAnonymizer, DoubleRoundingTenthsAnonymizer, default=None
    )


@register_kind
@dataclass(kw_only=True)
class CompassDatum(Datum):
    heading: Optional[float] = anonymizable(
        DoubleRoundingOnesAnonymizer,
        DoubleRoundingTensAnonymizer,
        display_name="Heading",
        default=None,
    )


@register_kind
@dataclass(kw_only=True)
class SpeedDatum(Datum):
    kph: Optional[float] = anonymizable(
        DoubleRoundingOnesAnonymizer,
        DoubleRoundingTensAnonymizer,
        display_name="Speed (KPH)",
        default=None,
    )


@register_kind
@dataclass(kw_only=True)
class ScriptDatum(Datum):
    """A participant's response to a survey script."""

    script_id: Optional[str] = None
    group_id: Optional[str] = None
    input_id: Optional[str] = None
    response: Any = anonymizable(
        StringHashAnonymizer,
        ValueOmittingAnonymizer,
        display_name="Response",
        default=None,
    )
    latitude: Optional[float] = anonymizable(
        *LATITUDE_ANONYMIZERS, display_name="Latitude", default=None
    )
    longitude: Optional[float] = anonymizable(
        *LONGITUDE_ANONYMIZERS, display_name="Longitude", default=None
    )
    location_timestamp: Optional[datetime] = anonymizable(
        *TIMELINE_ANONYMIZERS, display_name="Location Timestamp", default=None
    )
    run_timestamp: Optional[datetime] = anonymizable(
        *TIMELINE_ANONYMIZERS, display_name="Run Timestamp", default=None
    )
    completion_records: list = field(default_factory=list)
