"""US EPA AQI category bands.

Six contiguous bands cover every non-negative index. The last band is
open-ended: readings above the nominal 500 ceiling are still Hazardous.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class CategoryKey(str, Enum):
    GOOD = "Good"
    MODERATE = "Moderate"
    UNHEALTHY_SENSITIVE = "UnhealthySensitive"
    UNHEALTHY = "Unhealthy"
    VERY_UNHEALTHY = "VeryUnhealthy"
    HAZARDOUS = "Hazardous"


@dataclass(frozen=True)
class AqiCategory:
    key: CategoryKey
    name: str
    lower: int
    upper: Optional[int]  # inclusive; None means unbounded
    class_name: str
    health_implications: str
    cautionary_statement: str

    @property
    def range(self) -> Tuple[int, Optional[int]]:
        return (self.lower, self.upper)

    def contains(self, aqi: int) -> bool:
        if aqi < self.lower:
            return False
        return self.upper is None or aqi <= self.upper

    def to_dict(self) -> Dict[str, object]:
        return {
            "key": self.key.value,
            "name": self.name,
            "range": [self.lower, self.upper],
            "className": self.class_name,
            "healthImplications": self.health_implications,
            "cautionaryStatement": self.cautionary_statement,
        }


AQI_CATEGORIES: Dict[CategoryKey, AqiCategory] = {
    CategoryKey.GOOD: AqiCategory(
        key=CategoryKey.GOOD,
        name="Good",
        lower=0,
        upper=50,
        class_name="bg-green-500",
        health_implications="Air quality is considered satisfactory, and air pollution poses little or no risk.",
        cautionary_statement="Enjoy your usual outdoor activities.",
    ),
    CategoryKey.MODERATE: AqiCategory(
        key=CategoryKey.MODERATE,
        name="Moderate",
        lower=51,
        upper=100,
        class_name="bg-yellow-500",
        health_implications=(
            "Air quality is acceptable; however, for some pollutants there may be a moderate health "
            "concern for a very small number of people who are unusually sensitive to air pollution."
        ),
        cautionary_statement="Unusually sensitive people should consider reducing prolonged or heavy exertion outdoors.",
    ),
    CategoryKey.UNHEALTHY_SENSITIVE: AqiCategory(
        key=CategoryKey.UNHEALTHY_SENSITIVE,
        name="Unhealthy for Sensitive Groups",
        lower=101,
        upper=150,
        class_name="bg-orange-500",
        health_implications=(
            "Members of sensitive groups may experience health effects. "
            "The general public is not likely to be affected."
        ),
        cautionary_statement=(
            "People with heart or lung disease, older adults, and children should reduce "
            "prolonged or heavy exertion."
        ),
    ),
    CategoryKey.UNHEALTHY: AqiCategory(
        key=CategoryKey.UNHEALTHY,
        name="Unhealthy",
        lower=151,
        upper=200,
        class_name="bg-red-500",
        health_implications=(
            "Everyone may begin to experience health effects; members of sensitive groups "
            "may experience more serious health effects."
        ),
        cautionary_statement=(
            "Everyone should reduce prolonged or heavy exertion. "
            "It's advisable to reschedule strenuous activities outdoors."
        ),
    ),
    CategoryKey.VERY_UNHEALTHY: AqiCategory(
        key=CategoryKey.VERY_UNHEALTHY,
        name="Very Unhealthy",
        lower=201,
        upper=300,
        class_name="bg-purple-500",
        health_implications="Health alert: everyone may experience more serious health effects.",
        cautionary_statement="Everyone should avoid all outdoor exertion.",
    ),
    CategoryKey.HAZARDOUS: AqiCategory(
        key=CategoryKey.HAZARDOUS,
        name="Hazardous",
        lower=301,
        upper=None,
        class_name="bg-maroon-700",
        health_implications=(
            "Health warnings of emergency conditions. "
            "The entire population is more likely to be affected."
        ),
        cautionary_statement="Everyone should remain indoors and keep activity levels low.",
    ),
}


def get_aqi_category(aqi: int) -> AqiCategory:
    """Map an index value onto its category band."""
    if aqi <= 50:
        return AQI_CATEGORIES[CategoryKey.GOOD]
    if aqi <= 100:
        return AQI_CATEGORIES[CategoryKey.MODERATE]
    if aqi <= 150:
        return AQI_CATEGORIES[CategoryKey.UNHEALTHY_SENSITIVE]
    if aqi <= 200:
        return AQI_CATEGORIES[CategoryKey.UNHEALTHY]
    if aqi <= 300:
        return AQI_CATEGORIES[CategoryKey.VERY_UNHEALTHY]
    return AQI_CATEGORIES[CategoryKey.HAZARDOUS]
