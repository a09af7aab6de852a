"""
Unit tests for legacy registry migration.
"""

import json
from unittest.mock import patch

import pytest

from anonymization.anonymizers import (
    DoubleRoundingOnesAnonymizer,
    DoubleRoundingTenthsAnonymizer,
    StringHashAnonymizer,
)
from anonymization.catalog import FieldRef
from anonymization.errors import LegacyEntryError
from anonymization.migration import migrate_legacy, parse_legacy_entry
from anonymization.registry import AnonymizerRegistry


class TestParseLegacyEntry:
    """Test parse_legacy_entry()"""

    def test_entry_with_anonymizer(self):
        ref, anonymizer = parse_legacy_entry("GpsDatum-Location:RoundToNearestCity")

        assert ref == FieldRef("GpsDatum", "location")
        assert anonymizer.get_type() == "RoundToNearestCity"

    def test_entry_without_anonymizer_means_none(self):
        ref, anonymizer = parse_legacy_entry("LocationDatum-Latitude:")

        assert ref == FieldRef("LocationDatum", "latitude")
        assert anonymizer is None

    def test_entry_without_colon_means_none(self):
        _, anonymizer = parse_legacy_entry("LocationDatum-Latitude")
        assert anonymizer is None

    def test_fully_qualified_names(self):
        ref, anonymizer = parse_legacy_entry(
            "SensusService.Probes.Location.LocationDatum-Latitude:"
            "SensusService.Anonymization.Anonymizers.DoubleRoundingTenthsAnonymizer"
        )

        assert ref == FieldRef("LocationDatum", "latitude")
        assert anonymizer == DoubleRoundingTenthsAnonymizer()

    def test_inherited_field_keys_on_named_kind(self):
        ref, _ = parse_legacy_entry("LocationDatum-DeviceId:StringHashAnonymizer")
        assert ref == FieldRef("LocationDatum", "device_id")

    @pytest.mark.parametrize(
        "entry",
        [
            "",
            "NoDash:StringHashAnonymizer",
            "NoSuchDatum-Latitude:StringHashAnonymizer",
            "LocationDatum-NoSuchField:StringHashAnonymizer",
            "LocationDatum-Latitude:NoSuchAnonymizer",
            "LocationDatum-DisplayDetail:StringHashAnonymizer",
            "LocationDatum-Latitude:A:B",
            "-Latitude:StringHashAnonymizer",
        ],
    )
    def test_malformed_entries_rejected(self, entry):
        with pytest.raises(LegacyEntryError):
            parse_legacy_entry(entry)

    def test_non_string_rejected(self):
        with pytest.raises(LegacyEntryError):
            parse_legacy_entry(42)


class TestMigrateLegacy:
    """Test migrate_legacy()"""

    def test_scenario_into_empty_registry(self):
        report = migrate_legacy(["GpsDatum-Location:RoundToNearestCity"])

        anonymizer = report.registry.lookup(FieldRef("GpsDatum", "location"))
        assert anonymizer is not None
        assert anonymizer.get_type() == "RoundToNearestCity"
        assert report.applied == [FieldRef("GpsDatum", "location")]
        assert report.ok

    def test_accepts_json_bytes(self):
        data = json.dumps(["LocationDatum-Latitude:DoubleRoundingTenthsAnonymizer"]).encode()

        report = migrate_legacy(data)

        assert report.registry.lookup(FieldRef("LocationDatum", "latitude")) == (
            DoubleRoundingTenthsAnonymizer()
        )

    def test_accepts_json_text(self):
        report = migrate_legacy('["LocationDatum-Longitude:DoubleRoundingOnesAnonymizer"]')
        assert len(report.applied) == 1

    def test_invalid_json_reported_not_raised(self):
        report = migrate_legacy(b"{not json")

        assert not report.ok
        assert len(report.registry) == 0

    def test_invalid_utf8_reported_not_raised(self):
        report = migrate_legacy(b'["LocationDatum-Latitude:\xff"]')

        assert len(report.diagnostics) == 1
        assert "UTF-8" in report.diagnostics[0]
        assert len(report.registry) == 0

    def test_non_list_json_reported(self):
        report = migrate_legacy('{"a": 1}')
        assert len(report.diagnostics) == 1

    def test_never_overwrites_existing_assignment(self, registry):
        ref = FieldRef("LocationDatum", "latitude")
        registry.assign(ref, DoubleRoundingOnesAnonymizer())

        report = migrate_legacy(
            ["LocationDatum-Latitude:DoubleRoundingTenthsAnonymizer"], registry
        )

        assert registry.lookup(ref) == DoubleRoundingOnesAnonymizer()
        assert report.skipped == [ref]
        assert report.applied == []

    def test_never_overwrites_explicit_none(self, registry):
        ref = FieldRef("LocationDatum", "latitude")
        registry.assign(ref, None)

        migrate_legacy(["LocationDatum-Latitude:DoubleRoundingTenthsAnonymizer"], registry)

        assert registry.lookup(ref) is None

    def test_rerun_is_stable(self, registry):
        legacy = [
            "LocationDatum-Latitude:DoubleRoundingTenthsAnonymizer",
            "LocationDatum-DeviceId:StringHashAnonymizer",
            "CompassDatum-Heading:",
        ]

        migrate_legacy(legacy, registry)
        first = registry.snapshot()
        second_report = migrate_legacy(legacy, registry)

        assert registry.snapshot() == first
        assert second_report.applied == []
        assert len(second_report.skipped) == 3

    def test_bad_entries_reported_individually_and_rest_applied(self, registry):
        report = migrate_legacy(
            [
                "NoSuchDatum-Latitude:StringHashAnonymizer",
                "LocationDatum-Latitude:DoubleRoundingTenthsAnonymizer",
                "LocationDatum-Longitude:NoSuchAnonymizer",
                "LocationDatum-DeviceId:StringHashAnonymizer",
            ],
            registry,
        )

        assert len(report.diagnostics) == 2
        assert "NoSuchDatum" in report.diagnostics[0]
        assert "NoSuchAnonymizer" in report.diagnostics[1]
        assert registry.lookup(FieldRef("LocationDatum", "device_id")) == StringHashAnonymizer()
        assert len(report.applied) == 2

    def test_duplicate_entries_first_wins(self, registry):
        migrate_legacy(
            [
                "LocationDatum-Latitude:DoubleRoundingTenthsAnonymizer",
                "LocationDatum-Latitude:DoubleRoundingOnesAnonymizer",
            ],
            registry,
        )

        assert registry.lookup(FieldRef("LocationDatum", "latitude")) == (
            DoubleRoundingTenthsAnonymizer()
        )

    def test_none_entries_not_in_snapshot(self):
        report = migrate_legacy(["CompassDatum-Heading:"])

        assert report.registry.contains(FieldRef("CompassDatum", "heading"))
        assert report.registry.snapshot() == []

    @patch("anonymization.migration.logger")
    def test_rejections_logged_as_warnings(self, mock_logger):
        migrate_legacy(["NoSuchDatum-Latitude:StringHashAnonymizer"])

        mock_logger.warning.assert_called_once()
        assert "NoSuchDatum" in mock_logger.warning.call_args[0][0]

    def test_creates_registry_when_none_given(self):
        report = migrate_legacy([])
        assert isinstance(report.registry, AnonymizerRegistry)
        assert len(report.registry) == 0
