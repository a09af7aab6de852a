"""
Rounding anonymizers for numeric fields.

Each rounding precision is its own class so that a selection can be
persisted by name alone.
"""

from typing import Any

from anonymization.config import SessionContext

from .base import Anonymizer, register_anonymizer


class DoubleRoundingAnonymizer(Anonymizer):
    """Round a numeric value to a fixed number of decimal places."""

    places: int = 0

    def transform(self, value: Any, context: SessionContext) -> Any:
        # bool is an int subclass but never a measurement
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(
                f"{self.get_type()} expects a number, got {type(value).__name__}"
            )
        return round(float(value), self.places)


@register_anonymizer(display_text="Round to thousands")
class DoubleRoundingThousandsAnonymizer(DoubleRoundingAnonymizer):
    places = -3


@register_anonymizer(display_text="Round to hundreds")
class DoubleRoundingHundredsAnonymizer(DoubleRoundingAnonymizer):
    places = -2


@register_anonymizer(display_text="Round to tens")
class DoubleRoundingTensAnonymizer(DoubleRoundingAnonymizer):
    places = -1


@register_anonymizer(display_text="Round to ones")
class DoubleRoundingOnesAnonymizer(DoubleRoundingAnonymizer):
    places = 0


@register_anonymizer(display_text="Round to tenths")
class DoubleRoundingTenthsAnonymizer(DoubleRoundingAnonymizer):
    places = 1


@register_anonymizer(display_text="Round to hundredths")
class DoubleRoundingHundredthsAnonymizer(DoubleRoundingAnonymizer):
    places = 2


@register_anonymizer(display_text="Round to thousandths")
class DoubleRoundingThousandthsAnonymizer(DoubleRoundingAnonymizer):
    places = 3
