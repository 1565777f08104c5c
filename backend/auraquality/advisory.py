"""Personalized health advice derived from a reading and a user profile.

Rules cascade on the current index and are additive: every threshold that
applies contributes its tips, in a fixed order. A separate proactive tip
looks ahead at the forecast.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .models import ActivityLevel, AgeGroup, HealthCondition, Reading, UserProfile


SENSITIVE_THRESHOLD = 100
UNHEALTHY_THRESHOLD = 150
VERY_UNHEALTHY_THRESHOLD = 200

TIP_SENSITIVE_REDUCE_EXERTION = (
    "As a member of a sensitive group, you should reduce prolonged or heavy outdoor exertion."
)
TIP_WEAR_MASK = "Consider wearing a N95 mask if you must be outdoors for an extended period."
TIP_RESCHEDULE_EXERCISE = (
    "It's highly recommended to reschedule strenuous exercise to a time when air quality "
    "is better, or move it indoors."
)
TIP_CLOSE_WINDOWS = "Everyone should reduce heavy outdoor exertion. Keep windows and doors closed."
TIP_HEPA_PURIFIER = "Use air purifiers with HEPA filters if available to improve indoor air quality."
TIP_AVOID_OUTDOORS = (
    "Avoid all outdoor physical activity. Keep sensitive individuals indoors as much as possible."
)
TIP_GOOD_AIR = "Air quality is good. It's a great time for outdoor activities!"

PROACTIVE_SENSITIVE = "Plan to limit your time outdoors."
PROACTIVE_HIGH_ACTIVITY = "Consider planning your outdoor exercise for a different day."
PROACTIVE_GENERIC = "Be mindful of your outdoor activities."


@dataclass(frozen=True)
class Advisory:
    tips: Tuple[str, ...]
    proactive_tip: Optional[str] = None


def is_sensitive(profile: UserProfile) -> bool:
    """A profile is sensitive when it holds a real condition or is a child/senior."""
    has_condition = any(c is not HealthCondition.NONE for c in profile.health_conditions)
    return has_condition or profile.age_group in (AgeGroup.CHILDREN, AgeGroup.SENIORS)


def _current_tips(aqi: int, sensitive: bool, high_activity: bool) -> Tuple[str, ...]:
    tips = []

    if aqi > SENSITIVE_THRESHOLD:
        if sensitive:
            tips.append(TIP_SENSITIVE_REDUCE_EXERTION)
            if aqi > UNHEALTHY_THRESHOLD:
                tips.append(TIP_WEAR_MASK)
        if high_activity:
            tips.append(TIP_RESCHEDULE_EXERCISE)

    if aqi > UNHEALTHY_THRESHOLD:
        tips.append(TIP_CLOSE_WINDOWS)
        tips.append(TIP_HEPA_PURIFIER)

    if aqi > VERY_UNHEALTHY_THRESHOLD:
        tips.append(TIP_AVOID_OUTDOORS)

    if not tips:
        tips.append(TIP_GOOD_AIR)

    return tuple(tips)


def _proactive_tip(reading: Reading, sensitive: bool, high_activity: bool) -> Optional[str]:
    high_day = next((d for d in reading.forecast if d.aqi > SENSITIVE_THRESHOLD), None)
    if high_day is None:
        return None

    tip = f"High AQI of {high_day.aqi} is forecasted for {high_day.day}. "
    if sensitive:
        tip += PROACTIVE_SENSITIVE
    elif high_activity:
        tip += PROACTIVE_HIGH_ACTIVITY
    else:
        tip += PROACTIVE_GENERIC
    return tip


def get_personalized_tips(reading: Reading, profile: UserProfile) -> Advisory:
    """Build the ordered tip list and the optional forecast warning."""
    sensitive = is_sensitive(profile)
    high_activity = profile.activity_level is ActivityLevel.HIGH

    return Advisory(
        tips=_current_tips(reading.current.aqi, sensitive, high_activity),
        proactive_tip=_proactive_tip(reading, sensitive, high_activity),
    )
