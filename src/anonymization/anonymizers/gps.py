"""
GPS offset anonymizers.

Shift a coordinate by an offset derived from the session, either shared by
the whole study or specific to the participant. Distances between points of
the same participant are preserved while absolute position is hidden.
"""

from typing import Any

from anonymization.config import SessionContext

from .base import Anonymizer, register_anonymizer

MAX_OFFSET_DEGREES = 1.0


class GpsOffsetAnonymizer(Anonymizer):
    """Add a session-derived offset to a latitude or longitude."""

    axis: str = "latitude"
    participant_level: bool = True

    def _offset(self, context: SessionContext) -> float:
        label = f"gps-{self.axis}"
        if self.participant_level:
            return context.participant_offset(label) * MAX_OFFSET_DEGREES
        return context.study_offset(label) * MAX_OFFSET_DEGREES

    def transform(self, value: Any, context: SessionContext) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(
                f"{self.get_type()} expects degrees, got {type(value).__name__}"
            )

        shifted = float(value) + self._offset(context)

        if self.axis == "latitude":
            # reflect off the pole so the point stays in its hemisphere
            if shifted > 90.0:
                return 180.0 - shifted
            if shifted < -90.0:
                return -180.0 - shifted
            return shifted
        # longitude wraps across the antimeridian
        return ((shifted + 180.0) % 360.0) - 180.0


@register_anonymizer(display_text="Participant offset")
class LatitudeParticipantOffsetGpsAnonymizer(GpsOffsetAnonymizer):
    axis = "latitude"
    participant_level = True


@register_anonymizer(display_text="Study offset")
class LatitudeStudyOffsetGpsAnonymizer(GpsOffsetAnonymizer):
    axis = "latitude"
    participant_level = False


@register_anonymizer(display_text="Participant offset")
class LongitudeParticipantOffsetGpsAnonymizer(GpsOffsetAnonymizer):
    axis = "longitude"
    participant_level = True


@register_anonymizer(display_text="Study offset")
class LongitudeStudyOffsetGpsAnonymizer(GpsOffsetAnonymizer):
    axis = "longitude"
    participant_level = False
