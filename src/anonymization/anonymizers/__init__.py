"""
Field anonymizers.

Importing this package registers every built-in anonymizer by name so that
persisted and legacy registries can resolve them.
"""

from .base import Anonymizer, anonymizer_names, get_anonymizer, register_anonymizer
from .gps import (
    GpsOffsetAnonymizer,
    LatitudeParticipantOffsetGpsAnonymizer,
    LatitudeStudyOffsetGpsAnonymizer,
    LongitudeParticipantOffsetGpsAnonymizer,
    LongitudeStudyOffsetGpsAnonymizer,
)
from .hashing import StringHashAnonymizer, ValueOmittingAnonymizer
from .numeric import (
    DoubleRoundingAnonymizer,
    DoubleRoundingHundredsAnonymizer,
    DoubleRoundingHundredthsAnonymizer,
    DoubleRoundingOnesAnonymizer,
    DoubleRoundingTensAnonymizer,
    DoubleRoundingTenthsAnonymizer,
    DoubleRoundingThousandsAnonymizer,
    DoubleRoundingThousandthsAnonymizer,
)
from .timeline import (
    DateTimeOffsetParticipantTimelineAnonymizer,
    DateTimeOffsetStudyTimelineAnonymizer,
    TimelineAnonymizer,
)

__all__ = [
    "Anonymizer",
    "register_anonymizer",
    "get_anonymizer",
    "anonymizer_names",
    "DoubleRoundingAnonymizer",
    "DoubleRoundingThousandsAnonymizer",
    "DoubleRoundingHundredsAnonymizer",
    "DoubleRoundingTensAnonymizer",
    "DoubleRoundingOnesAnonymizer",
    "DoubleRoundingTenthsAnonymizer",
    "DoubleRoundingHundredthsAnonymizer",
    "DoubleRoundingThousandthsAnonymizer",
    "StringHashAnonymizer",
    "ValueOmittingAnonymizer",
    "GpsOffsetAnonymizer",
    "LatitudeParticipantOffsetGpsAnonymizer",
    "LatitudeStudyOffsetGpsAnonymizer",
    "LongitudeParticipantOffsetGpsAnonymizer",
    "LongitudeStudyOffsetGpsAnonymizer",
    "TimelineAnonymizer",
    "DateTimeOffsetParticipantTimelineAnonymizer",
    "DateTimeOffsetStudyTimelineAnonymizer",
]
