"""Data models for the Aura Quality API."""
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class AgeGroup(str, Enum):
    ALL = "All Ages"
    CHILDREN = "Children (0-17)"
    ADULTS = "Adults (18-64)"
    SENIORS = "Seniors (65+)"


class HealthCondition(str, Enum):
    NONE = "None"
    ASTHMA = "Asthma"
    COPD = "COPD"
    CARDIOVASCULAR = "Cardiovascular Disease"
    PREGNANCY = "Pregnancy"


class ActivityLevel(str, Enum):
    LOW = "Low (mostly indoors)"
    MODERATE = "Moderate (some outdoor activity)"
    HIGH = "High (regular outdoor exercise)"


class PhenomenonKind(str, Enum):
    INVERSION = "inversion"
    STAGNANT = "stagnant"
    WILDFIRE = "wildfire"
    SEASONAL = "seasonal"


class AlertType(str, Enum):
    WILDFIRE_SMOKE = "Wildfire Smoke"
    OZONE_ACTION = "Ozone Action Day"
    PARTICLE_POLLUTION = "Particle Pollution"


class AlertSeverity(str, Enum):
    HIGH = "High"
    MODERATE = "Moderate"


def normalize_health_conditions(conditions) -> Tuple[HealthCondition, ...]:
    """Deduplicate conditions and enforce the exclusive "None" placeholder.

    The result is never empty: "None" stands in when no real condition is
    held and is dropped as soon as one is.
    """
    seen: List[HealthCondition] = []
    for condition in conditions:
        condition = HealthCondition(condition)
        if condition not in seen:
            seen.append(condition)

    real = [c for c in seen if c is not HealthCondition.NONE]
    if real:
        return tuple(real)
    return (HealthCondition.NONE,)


class UserProfile(BaseModel):
    """Health profile used to personalise advice.

    Serialised as the flat record ``{ageGroup, healthConditions, activityLevel}``.
    """
    age_group: AgeGroup = Field(AgeGroup.ALL, alias="ageGroup")
    health_conditions: Tuple[HealthCondition, ...] = Field(
        (HealthCondition.NONE,), alias="healthConditions"
    )
    activity_level: ActivityLevel = Field(ActivityLevel.MODERATE, alias="activityLevel")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("health_conditions", mode="before")
    @classmethod
    def _normalize_conditions(cls, value):
        if value is None:
            return (HealthCondition.NONE,)
        if isinstance(value, str):
            # Legacy rows stored the set as a comma separated string.
            value = [part.strip() for part in value.split(",") if part.strip()]
        return normalize_health_conditions(value)


class Pollutant(BaseModel):
    """Single pollutant measurement."""
    name: str
    value: float
    unit: str

    class Config:
        frozen = True


class ForecastDay(BaseModel):
    day: str
    aqi: int = Field(ge=0)

    class Config:
        frozen = True


class HistoricalPoint(BaseModel):
    date: str
    aqi: int = Field(ge=0)

    class Config:
        frozen = True


class Phenomenon(BaseModel):
    """Atmospheric phenomenon explaining the current conditions."""
    key: PhenomenonKind
    title: str
    explanation: str

    class Config:
        frozen = True


class Alert(BaseModel):
    type: AlertType
    severity: AlertSeverity
    message: str

    class Config:
        frozen = True


class CurrentConditions(BaseModel):
    aqi: int = Field(ge=0)
    category: str
    color: str
    primary_pollutant: str = Field(alias="primaryPollutant")
    pollutants: Tuple[Pollutant, ...] = ()

    class Config:
        populate_by_name = True
        frozen = True


class Reading(BaseModel):
    """Snapshot of air quality at one location.

    Readings are never mutated; every fetch produces a new one.
    """
    location_name: str = Field(alias="locationName")
    lat: float
    lng: float
    current: CurrentConditions
    forecast: Tuple[ForecastDay, ...] = ()
    historical: Tuple[HistoricalPoint, ...] = ()
    phenomenon: Phenomenon
    alerts: Tuple[Alert, ...] = ()

    class Config:
        populate_by_name = True
        frozen = True


class LocationSuggestion(BaseModel):
    """Candidate location returned by the search provider."""
    id: str
    name: str
    lat: float
    lng: float

    class Config:
        frozen = True


class SavedLocationCreate(BaseModel):
    location_name: str = Field(min_length=1)
    latitude: float
    longitude: float


class SavedLocation(BaseModel):
    id: int
    user_id: str
    location_name: str
    latitude: float
    longitude: float
    created_at: Optional[str] = None


class HistoryRecordCreate(BaseModel):
    """Reading summary appended to the AQI history log."""
    location_name: str = Field(min_length=1)
    latitude: float
    longitude: float
    aqi: int = Field(ge=0)
    category: str
    primary_pollutant: str
    pollutants: List[Pollutant] = []


class HistoryRecord(HistoryRecordCreate):
    id: int
    timestamp: Optional[str] = None


class AdviceRequest(BaseModel):
    reading: Reading
    profile: UserProfile = UserProfile()


class AdviceResponse(BaseModel):
    tips: List[str]
    proactive_tip: Optional[str] = Field(None, alias="proactiveTip")

    class Config:
        populate_by_name = True


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    context: str = ""


class ChatReply(BaseModel):
    reply: str
