"""
Pytest configuration and fixtures for anonymization tests.

Registers a few datum kinds and anonymizers used only by the tests: a
GpsDatum with a city-rounding anonymizer, and two sibling kinds sharing a
base field.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from anonymization.anonymizers import (
    Anonymizer,
    DoubleRoundingOnesAnonymizer,
    DoubleRoundingTensAnonymizer,
    register_anonymizer,
)
from anonymization.catalog import anonymizable, register_kind
from anonymization.config import SessionContext
from anonymization.records import Datum
from anonymization.registry import AnonymizerRegistry

KNOWN_CITIES = {
    (38.0, -78.5): "Charlottesville, VA",
    (40.7, -74.0): "New York, NY",
}


@register_anonymizer(name="RoundToNearestCity", display_text="Nearest city")
class RoundToNearestCityAnonymizer(Anonymizer):
    """Replace a (lat, lon) pair with the closest known city."""

    def transform(self, value: Any, context: SessionContext) -> Any:
        lat, lon = value
        closest = min(
            KNOWN_CITIES,
            key=lambda city: (city[0] - lat) ** 2 + (city[1] - lon) ** 2,
        )
        return KNOWN_CITIES[closest]


@register_anonymizer(name="AlwaysFails", display_text="Always fails")
class AlwaysFailsAnonymizer(Anonymizer):
    def transform(self, value: Any, context: SessionContext) -> Any:
        raise RuntimeError("anonymizer exploded")


@register_kind
@dataclass(kw_only=True)
class GpsDatum(Datum):
    location: Optional[tuple] = anonymizable(
        RoundToNearestCityAnonymizer,
        AlwaysFailsAnonymizer,
        display_name="Location",
        default=None,
    )
    altitude: Optional[float] = None

    @property
    def summary(self) -> str:
        return f"{self.location} @ {self.altitude}"


@dataclass(kw_only=True)
class SharedBaseDatum(Datum):
    """Base of two sibling kinds; not registered itself."""

    value: Optional[float] = anonymizable(
        DoubleRoundingOnesAnonymizer, DoubleRoundingTensAnonymizer, default=None
    )


@register_kind
@dataclass(kw_only=True)
class LeftSiblingDatum(SharedBaseDatum):
    pass


@register_kind
@dataclass(kw_only=True)
class RightSiblingDatum(SharedBaseDatum):
    pass


@register_kind
@dataclass(kw_only=True)
class SettablePropertyDatum(Datum):
    _label: Optional[str] = field(default=None, repr=False)

    @property
    def label(self) -> Optional[str]:
        return self._label

    @label.setter
    def label(self, value: Optional[str]) -> None:
        self._label = value

    @property
    def computed(self) -> str:
        return "computed"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(autouse=True)
def set_test_env_vars() -> None:
    """Set default test environment variables if not already set."""
    defaults = {
        "ANON_SESSION_ID": "test-study",
        "ANON_HASH_SALT": "test-salt-0123456789",
    }

    for key, value in defaults.items():
        if key not in os.environ:
            os.environ[key] = value


@pytest.fixture
def registry() -> AnonymizerRegistry:
    """Fresh, empty registry."""
    return AnonymizerRegistry()


@pytest.fixture
def context() -> SessionContext:
    """Deterministic session context."""
    return SessionContext(
        session_id="test-study",
        hash_salt="test-salt-0123456789",
        participant_id="participant-7",
    )


@pytest.fixture
def gps_datum_type() -> type:
    return GpsDatum


@pytest.fixture
def sibling_types() -> tuple:
    return LeftSiblingDatum, RightSiblingDatum


@pytest.fixture
def settable_property_type() -> type:
    return SettablePropertyDatum
