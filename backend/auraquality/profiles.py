"""User profile helpers: defaults, condition toggling and the flat record."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Tuple

from .models import ActivityLevel, AgeGroup, HealthCondition, UserProfile


DEFAULT_USER_PROFILE = UserProfile(
    age_group=AgeGroup.ALL,
    health_conditions=(HealthCondition.NONE,),
    activity_level=ActivityLevel.MODERATE,
)


def toggle_condition(
    conditions: Iterable[HealthCondition],
    condition: HealthCondition,
) -> Tuple[HealthCondition, ...]:
    """Flip one condition in the set.

    Selecting a real condition drops "None"; deselecting the last real
    condition restores it. Toggling "None" itself clears every real
    condition.
    """
    current = list(conditions)

    if condition in current:
        remaining = [c for c in current if c != condition]
        if not remaining:
            remaining.append(HealthCondition.NONE)
        return tuple(remaining)

    if condition is HealthCondition.NONE:
        return (HealthCondition.NONE,)

    return tuple([c for c in current if c is not HealthCondition.NONE] + [condition])


def toggle_health_condition(profile: UserProfile, condition: HealthCondition) -> UserProfile:
    return UserProfile(
        age_group=profile.age_group,
        health_conditions=toggle_condition(profile.health_conditions, condition),
        activity_level=profile.activity_level,
    )


def profile_to_record(profile: UserProfile) -> Dict[str, Any]:
    """Flat record persisted for a profile."""
    return {
        "ageGroup": profile.age_group.value,
        "healthConditions": [c.value for c in profile.health_conditions],
        "activityLevel": profile.activity_level.value,
    }


def profile_from_record(record: Dict[str, Any]) -> UserProfile:
    return UserProfile.model_validate(record)
