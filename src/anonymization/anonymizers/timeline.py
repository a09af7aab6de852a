"""
Timeline anonymizers for timestamps.

Move every timestamp of a study (or of a participant) by the same offset,
keeping intervals between events intact.
"""

from datetime import datetime, timedelta
from typing import Any

from anonymization.config import SessionContext

from .base import Anonymizer, register_anonymizer

MAX_SHIFT = timedelta(days=1000)


class TimelineAnonymizer(Anonymizer):
    """Shift a datetime by a session-derived offset."""

    participant_level: bool = True

    def transform(self, value: Any, context: SessionContext) -> Any:
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if not isinstance(value, datetime):
            raise TypeError(
                f"{self.get_type()} expects a datetime, got {type(value).__name__}"
            )

        if self.participant_level:
            fraction = context.participant_offset("timeline")
        else:
            fraction = context.study_offset("timeline")

        return value + MAX_SHIFT * fraction


@register_anonymizer(display_text="Participant timeline")
class DateTimeOffsetParticipantTimelineAnonymizer(TimelineAnonymizer):
    participant_level = True


@register_anonymizer(display_text="Study timeline")
class DateTimeOffsetStudyTimelineAnonymizer(TimelineAnonymizer):
    participant_level = False
