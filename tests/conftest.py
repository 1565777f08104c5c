"""
Pytest configuration for Aura Quality tests.

Registers custom markers and provides shared fixtures.
"""

import pytest

from auraquality.aqi_categories import get_aqi_category
from auraquality.models import (
    CurrentConditions,
    ForecastDay,
    Phenomenon,
    PhenomenonKind,
    Reading,
)
from auraquality.reading_provider import PHENOMENA


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def build_reading(aqi, forecast=(), name="Testville", lat=10.0, lng=20.0):
    """Build a minimal Reading with the given current index and forecast."""
    category = get_aqi_category(aqi)
    return Reading(
        location_name=name,
        lat=lat,
        lng=lng,
        current=CurrentConditions(
            aqi=aqi,
            category=category.name,
            color=category.class_name,
            primary_pollutant="PM2.5",
        ),
        forecast=tuple(ForecastDay(day=day, aqi=value) for day, value in forecast),
        phenomenon=PHENOMENA[PhenomenonKind.SEASONAL],
    )


@pytest.fixture
def make_reading():
    """Fixture exposing the Reading builder."""
    return build_reading
