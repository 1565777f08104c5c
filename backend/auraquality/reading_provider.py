"""Reading provider backed by synthetic data.

Stands in for a real air quality feed: it simulates network latency and
returns a complete Reading or raises, never a partial one.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .aqi_categories import get_aqi_category
from .models import (
    Alert,
    AlertSeverity,
    AlertType,
    CurrentConditions,
    ForecastDay,
    HistoricalPoint,
    Phenomenon,
    PhenomenonKind,
    Pollutant,
    Reading,
)

logger = logging.getLogger(__name__)

FORECAST_DAYS = 7
HISTORY_DAYS = 30
MIN_SYNTHETIC_AQI = 10


class ReadingFetchError(Exception):
    """Raised when a reading could not be produced for a location."""
    pass


PHENOMENA = {
    PhenomenonKind.INVERSION: Phenomenon(
        key=PhenomenonKind.INVERSION,
        title="Atmospheric Inversion",
        explanation=(
            "A temperature inversion is occurring, trapping pollutants close to the ground and "
            "increasing concentrations. This typically happens in calm weather conditions, "
            "especially overnight and in the early morning."
        ),
    ),
    PhenomenonKind.STAGNANT: Phenomenon(
        key=PhenomenonKind.STAGNANT,
        title="Stagnant Air Mass",
        explanation=(
            "A slow-moving high-pressure system is causing the air to stagnate. This lack of wind "
            "prevents pollutants from dispersing, leading to a gradual buildup of poor air quality "
            "over the area."
        ),
    ),
    PhenomenonKind.WILDFIRE: Phenomenon(
        key=PhenomenonKind.WILDFIRE,
        title="Wildfire Smoke",
        explanation=(
            "Smoke from distant wildfires is being transported into the region. This smoke contains "
            "high levels of fine particulate matter (PM2.5), significantly impacting air quality."
        ),
    ),
    PhenomenonKind.SEASONAL: Phenomenon(
        key=PhenomenonKind.SEASONAL,
        title="Seasonal Ozone",
        explanation=(
            "Warm temperatures and sunlight are reacting with pollutants like NOx to form "
            "ground-level ozone, a common issue during summer months. Ozone levels are typically "
            "highest in the afternoon."
        ),
    ),
}

# Phenomena that can explain a poor-air day.
POOR_AIR_PHENOMENA = (PhenomenonKind.INVERSION, PhenomenonKind.STAGNANT, PhenomenonKind.WILDFIRE)

ALERTS = (
    Alert(
        type=AlertType.WILDFIRE_SMOKE,
        severity=AlertSeverity.HIGH,
        message=(
            "Air quality is heavily impacted by wildfire smoke. Sensitive groups and the general "
            "public should avoid outdoor activities."
        ),
    ),
    Alert(
        type=AlertType.OZONE_ACTION,
        severity=AlertSeverity.MODERATE,
        message="High ozone levels are expected. Limit strenuous outdoor activity, especially during the afternoon.",
    ),
    Alert(
        type=AlertType.PARTICLE_POLLUTION,
        severity=AlertSeverity.HIGH,
        message="High levels of particle pollution detected. All individuals should reduce exposure by staying indoors.",
    ),
)


def _random_between(rng: random.Random, a: float, b: float) -> int:
    lo, hi = sorted((int(a), int(b)))
    return rng.randint(lo, hi)


def _generate_pollutants(rng: random.Random, aqi: int) -> List[Pollutant]:
    return [
        Pollutant(
            name="PM2.5",
            value=_random_between(rng, 12 if aqi > 50 else 0, aqi / 4 if aqi > 50 else 12),
            unit="µg/m³",
        ),
        Pollutant(
            name="PM10",
            value=_random_between(rng, 55 if aqi > 50 else 0, aqi / 2 if aqi > 50 else 54),
            unit="µg/m³",
        ),
        Pollutant(
            name="O3",
            value=_random_between(rng, 71 if aqi > 100 else 0, aqi / 2.5 if aqi > 100 else 70),
            unit="ppb",
        ),
        Pollutant(name="NO2", value=_random_between(rng, 0, aqi / 5), unit="ppb"),
        Pollutant(name="SO2", value=_random_between(rng, 0, aqi / 8), unit="ppb"),
        Pollutant(name="CO", value=_random_between(rng, 0, aqi / 20), unit="ppm"),
    ]


def generate_mock_reading(
    lat: float,
    lng: float,
    location_name: str,
    *,
    rng: Optional[random.Random] = None,
    today: Optional[datetime] = None,
) -> Reading:
    """Generate a plausible synthetic reading for a location."""
    rng = rng or random.Random()
    today = today or datetime.now()

    aqi = rng.randint(MIN_SYNTHETIC_AQI, 350)
    category = get_aqi_category(aqi)

    forecast = []
    for i in range(FORECAST_DAYS):
        day = today + relativedelta(days=i + 1)
        forecast.append(
            ForecastDay(
                day=day.strftime("%a"),
                aqi=max(MIN_SYNTHETIC_AQI, aqi + rng.randint(-30, 30)),
            )
        )

    historical = []
    for i in range(HISTORY_DAYS):
        date = today - relativedelta(days=HISTORY_DAYS - i)
        historical.append(
            HistoricalPoint(
                date=f"{date:%b} {date.day}",
                aqi=max(MIN_SYNTHETIC_AQI, aqi + rng.randint(-50, 50)),
            )
        )

    phenomenon = PHENOMENA[PhenomenonKind.SEASONAL]
    if aqi > 150:
        phenomenon = PHENOMENA[rng.choice(POOR_AIR_PHENOMENA)]

    alerts = []
    if aqi > 150 and rng.random() > 0.3:
        alerts.append(rng.choice(ALERTS))

    return Reading(
        location_name=location_name,
        lat=lat,
        lng=lng,
        current=CurrentConditions(
            aqi=aqi,
            category=category.name,
            color=category.class_name,
            primary_pollutant="PM2.5",
            pollutants=tuple(_generate_pollutants(rng, aqi)),
        ),
        forecast=tuple(forecast),
        historical=tuple(historical),
        phenomenon=phenomenon,
        alerts=tuple(alerts),
    )


class MockReadingProvider:
    """Simulates a remote reading feed with a fixed latency."""

    def __init__(self, latency_seconds: float = 1.0, rng: Optional[random.Random] = None):
        self.latency_seconds = latency_seconds
        self._rng = rng or random.Random()

    async def fetch(self, lat: float, lng: float, name: str = "Selected Location") -> Reading:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)
        try:
            return generate_mock_reading(lat, lng, name, rng=self._rng)
        except ValueError as e:
            # Out-of-range coordinates or labels fail validation as a whole.
            raise ReadingFetchError(f"Failed to build reading for {name}: {e}") from e
