"""
Unit tests for the built-in anonymizers and the anonymizer name registry.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from anonymization.anonymizers import (
    Anonymizer,
    DateTimeOffsetParticipantTimelineAnonymizer,
    DateTimeOffsetStudyTimelineAnonymizer,
    DoubleRoundingHundredsAnonymizer,
    DoubleRoundingOnesAnonymizer,
    DoubleRoundingTensAnonymizer,
    DoubleRoundingTenthsAnonymizer,
    DoubleRoundingThousandthsAnonymizer,
    GpsOffsetAnonymizer,
    LatitudeParticipantOffsetGpsAnonymizer,
    LatitudeStudyOffsetGpsAnonymizer,
    LongitudeStudyOffsetGpsAnonymizer,
    StringHashAnonymizer,
    ValueOmittingAnonymizer,
    anonymizer_names,
    get_anonymizer,
    register_anonymizer,
)
from anonymization.config import SessionContext
from anonymization.errors import UnknownAnonymizerError


class TestDoubleRounding:
    """Test the rounding anonymizers"""

    @pytest.mark.parametrize(
        "anonymizer, value, expected",
        [
            (DoubleRoundingTenthsAnonymizer(), 38.0312, 38.0),
            (DoubleRoundingThousandthsAnonymizer(), -78.48123, -78.481),
            (DoubleRoundingOnesAnonymizer(), 3.7, 4.0),
            (DoubleRoundingTensAnonymizer(), 271.4, 270.0),
            (DoubleRoundingHundredsAnonymizer(), 1249, 1200.0),
        ],
    )
    def test_rounding(self, context, anonymizer, value, expected):
        assert anonymizer.transform(value, context) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["38.03", True, [1.0]])
    def test_non_numeric_raises(self, context, value):
        with pytest.raises(TypeError):
            DoubleRoundingOnesAnonymizer().transform(value, context)


class TestStringHash:
    """Test StringHashAnonymizer"""

    def test_hash_is_hex_sha256(self, context):
        result = StringHashAnonymizer().transform("phone-1", context)
        assert len(result) == 64
        assert all(c in "0123456789abcdef" for c in result)

    def test_deterministic_within_session(self, context):
        anonymizer = StringHashAnonymizer()
        assert anonymizer.transform("phone-1", context) == anonymizer.transform("phone-1", context)

    def test_salt_changes_digest(self, context):
        other = SessionContext(session_id="test-study", hash_salt="another-salt-123")
        anonymizer = StringHashAnonymizer()
        assert anonymizer.transform("phone-1", context) != anonymizer.transform("phone-1", other)

    def test_dict_hash_is_order_independent(self, context):
        anonymizer = StringHashAnonymizer()
        assert anonymizer.transform({"a": 1, "b": 2}, context) == anonymizer.transform(
            {"b": 2, "a": 1}, context
        )


class TestValueOmitting:
    def test_returns_none(self, context):
        assert ValueOmittingAnonymizer().transform("anything", context) is None


class TestGpsOffset:
    """Test the GPS offset anonymizers"""

    def test_offset_is_consistent_for_participant(self, context):
        anonymizer = LatitudeParticipantOffsetGpsAnonymizer()
        first = anonymizer.transform(38.0, context)
        second = anonymizer.transform(39.0, context)
        assert second - first == pytest.approx(1.0)

    def test_offset_is_bounded(self, context):
        shifted = LatitudeStudyOffsetGpsAnonymizer().transform(38.0, context)
        assert abs(shifted - 38.0) <= 1.0

    def test_study_offset_shared_across_participants(self, context):
        other = SessionContext(
            session_id=context.session_id,
            hash_salt=context.hash_salt,
            participant_id="participant-8",
        )
        anonymizer = LongitudeStudyOffsetGpsAnonymizer()
        assert anonymizer.transform(-78.5, context) == anonymizer.transform(-78.5, other)

    def test_latitude_stays_in_range(self, context):
        shifted = LatitudeStudyOffsetGpsAnonymizer().transform(89.99, context)
        assert -90.0 <= shifted <= 90.0

    @pytest.mark.parametrize(
        "value, offset, expected",
        [(89.8, 0.5, 89.7), (-89.8, -0.5, -89.7), (45.0, 0.5, 45.5)],
    )
    def test_latitude_reflects_at_poles(self, context, value, offset, expected):
        anonymizer = LatitudeStudyOffsetGpsAnonymizer()

        with patch.object(GpsOffsetAnonymizer, "_offset", return_value=offset):
            shifted = anonymizer.transform(value, context)

        assert shifted == pytest.approx(expected)

    def test_longitude_wraps_at_antimeridian(self, context):
        anonymizer = LongitudeStudyOffsetGpsAnonymizer()

        with patch.object(GpsOffsetAnonymizer, "_offset", return_value=0.5):
            shifted = anonymizer.transform(179.8, context)

        assert shifted == pytest.approx(-179.7)

    def test_longitude_stays_in_range(self, context):
        shifted = LongitudeStudyOffsetGpsAnonymizer().transform(179.99, context)
        assert -180.0 <= shifted < 180.0

    def test_non_numeric_raises(self, context):
        with pytest.raises(TypeError):
            LatitudeStudyOffsetGpsAnonymizer().transform("38.0", context)


class TestTimeline:
    """Test the timeline anonymizers"""

    def test_intervals_preserved(self, context):
        anonymizer = DateTimeOffsetParticipantTimelineAnonymizer()
        start = datetime(2024, 1, 1, tzinfo=UTC)
        end = start + timedelta(hours=3)

        assert anonymizer.transform(end, context) - anonymizer.transform(start, context) == (
            timedelta(hours=3)
        )

    def test_shift_is_bounded_and_nonzero(self, context):
        value = datetime(2024, 1, 1, tzinfo=UTC)
        shifted = DateTimeOffsetStudyTimelineAnonymizer().transform(value, context)

        assert shifted != value
        assert abs(shifted - value) <= timedelta(days=1000)

    def test_iso_text_accepted(self, context):
        anonymizer = DateTimeOffsetStudyTimelineAnonymizer()
        value = datetime(2024, 1, 1, tzinfo=UTC)
        assert anonymizer.transform(value.isoformat(), context) == anonymizer.transform(
            value, context
        )

    def test_non_datetime_raises(self, context):
        with pytest.raises(TypeError):
            DateTimeOffsetStudyTimelineAnonymizer().transform(12345, context)


class TestAnonymizerRegistration:
    """Test register_anonymizer() and get_anonymizer()"""

    def test_get_by_name(self):
        assert get_anonymizer("StringHashAnonymizer") == StringHashAnonymizer()

    def test_get_by_fully_qualified_name(self):
        assert get_anonymizer(
            "SensusService.Anonymization.Anonymizers.StringHashAnonymizer"
        ) == StringHashAnonymizer()

    def test_unknown_name_raises(self):
        with pytest.raises(UnknownAnonymizerError):
            get_anonymizer("NoSuchAnonymizer")

    def test_names_listed(self):
        names = anonymizer_names()
        assert "StringHashAnonymizer" in names
        assert names == sorted(names)

    def test_display_text(self):
        assert DoubleRoundingTenthsAnonymizer.display_text == "Round to tenths"

    def test_alias(self):
        @register_anonymizer(name="AliasedForTest", aliases=("Old.Name.ForTest",))
        class Aliased(Anonymizer):
            def transform(self, value, context):
                return value

        assert isinstance(get_anonymizer("Old.Name.ForTest"), Aliased)
        assert Aliased.display_text == "AliasedForTest"

    def test_name_collision_raises(self):
        with pytest.raises(ValueError, match="already registered"):
            @register_anonymizer(name="StringHashAnonymizer")
            class Collides(Anonymizer):
                def transform(self, value, context):
                    return value

    def test_equality_by_type(self):
        assert StringHashAnonymizer() == StringHashAnonymizer()
        assert StringHashAnonymizer() != ValueOmittingAnonymizer()
        assert len({StringHashAnonymizer(), StringHashAnonymizer()}) == 1
