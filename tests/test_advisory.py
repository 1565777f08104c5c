"""
Tests for the advisory engine.

Tests cover:
- Equivalence classes: good air, sensitive band, unhealthy, very unhealthy
- Boundary value analysis: thresholds at 100, 150 and 200
- Decision paths: sensitivity (condition / age), high activity
- Proactive tip: first forecast day above 100 and its clause
"""

import pytest

from auraquality.advisory import (
    PROACTIVE_GENERIC,
    PROACTIVE_HIGH_ACTIVITY,
    PROACTIVE_SENSITIVE,
    TIP_AVOID_OUTDOORS,
    TIP_CLOSE_WINDOWS,
    TIP_GOOD_AIR,
    TIP_HEPA_PURIFIER,
    TIP_RESCHEDULE_EXERCISE,
    TIP_SENSITIVE_REDUCE_EXERTION,
    TIP_WEAR_MASK,
    get_personalized_tips,
    is_sensitive,
)
from auraquality.models import ActivityLevel, AgeGroup, HealthCondition, UserProfile
from auraquality.profiles import DEFAULT_USER_PROFILE


SENSITIVE_ACTIVE = UserProfile(
    age_group=AgeGroup.ADULTS,
    health_conditions=(HealthCondition.ASTHMA,),
    activity_level=ActivityLevel.HIGH,
)
SENSITIVE_ONLY = UserProfile(
    age_group=AgeGroup.SENIORS,
    health_conditions=(HealthCondition.NONE,),
    activity_level=ActivityLevel.LOW,
)
ACTIVE_ONLY = UserProfile(
    age_group=AgeGroup.ADULTS,
    health_conditions=(HealthCondition.NONE,),
    activity_level=ActivityLevel.HIGH,
)


class TestIsSensitive:
    """Test suite for the sensitivity rule."""

    def test_default_profile_not_sensitive(self):
        assert is_sensitive(DEFAULT_USER_PROFILE) is False

    @pytest.mark.parametrize("age", [AgeGroup.CHILDREN, AgeGroup.SENIORS])
    def test_vulnerable_age_groups(self, age):
        assert is_sensitive(UserProfile(age_group=age)) is True

    def test_adult_without_condition(self):
        assert is_sensitive(UserProfile(age_group=AgeGroup.ADULTS)) is False

    @pytest.mark.parametrize("condition", [
        HealthCondition.ASTHMA,
        HealthCondition.COPD,
        HealthCondition.CARDIOVASCULAR,
        HealthCondition.PREGNANCY,
    ])
    def test_any_real_condition(self, condition):
        profile = UserProfile(age_group=AgeGroup.ADULTS, health_conditions=(condition,))
        assert is_sensitive(profile) is True


class TestCurrentTips:
    """Test suite for the tips derived from the current index."""

    # ==================== Equivalence Classes ====================

    def test_good_air_single_tip(self, make_reading):
        """Equivalence class: index 30 with a calm forecast."""
        advisory = get_personalized_tips(make_reading(30, [("Mon", 40), ("Tue", 60)]), SENSITIVE_ACTIVE)
        assert advisory.tips == (TIP_GOOD_AIR,)
        assert advisory.proactive_tip is None

    def test_sensitive_band_sensitive_and_active(self, make_reading):
        """Equivalence class: index 120, sensitive with high activity."""
        advisory = get_personalized_tips(make_reading(120), SENSITIVE_ACTIVE)
        assert advisory.tips == (TIP_SENSITIVE_REDUCE_EXERTION, TIP_RESCHEDULE_EXERCISE)

    def test_sensitive_band_general_public_gets_good_air(self, make_reading):
        """Index 120 has nothing for a non-sensitive, moderately active profile."""
        advisory = get_personalized_tips(make_reading(120), DEFAULT_USER_PROFILE)
        assert advisory.tips == (TIP_GOOD_AIR,)

    def test_unhealthy_sensitive_and_active(self, make_reading):
        advisory = get_personalized_tips(make_reading(175), SENSITIVE_ACTIVE)
        assert advisory.tips == (
            TIP_SENSITIVE_REDUCE_EXERTION,
            TIP_WEAR_MASK,
            TIP_RESCHEDULE_EXERCISE,
            TIP_CLOSE_WINDOWS,
            TIP_HEPA_PURIFIER,
        )

    def test_very_unhealthy_general_public(self, make_reading):
        advisory = get_personalized_tips(make_reading(250), DEFAULT_USER_PROFILE)
        assert advisory.tips == (TIP_CLOSE_WINDOWS, TIP_HEPA_PURIFIER, TIP_AVOID_OUTDOORS)

    def test_very_unhealthy_active_only(self, make_reading):
        advisory = get_personalized_tips(make_reading(250), ACTIVE_ONLY)
        assert advisory.tips == (
            TIP_RESCHEDULE_EXERCISE,
            TIP_CLOSE_WINDOWS,
            TIP_HEPA_PURIFIER,
            TIP_AVOID_OUTDOORS,
        )

    # ==================== Boundary Value Analysis ====================

    def test_boundary_100_is_not_elevated(self, make_reading):
        advisory = get_personalized_tips(make_reading(100), SENSITIVE_ACTIVE)
        assert advisory.tips == (TIP_GOOD_AIR,)

    def test_boundary_101_is_elevated(self, make_reading):
        advisory = get_personalized_tips(make_reading(101), SENSITIVE_ONLY)
        assert advisory.tips == (TIP_SENSITIVE_REDUCE_EXERTION,)

    def test_boundary_150_has_no_mask_tip(self, make_reading):
        advisory = get_personalized_tips(make_reading(150), SENSITIVE_ONLY)
        assert TIP_WEAR_MASK not in advisory.tips
        assert TIP_CLOSE_WINDOWS not in advisory.tips

    def test_boundary_151_adds_mask_and_windows(self, make_reading):
        advisory = get_personalized_tips(make_reading(151), SENSITIVE_ONLY)
        assert advisory.tips == (
            TIP_SENSITIVE_REDUCE_EXERTION,
            TIP_WEAR_MASK,
            TIP_CLOSE_WINDOWS,
            TIP_HEPA_PURIFIER,
        )

    def test_boundary_200_and_201(self, make_reading):
        assert TIP_AVOID_OUTDOORS not in get_personalized_tips(make_reading(200), DEFAULT_USER_PROFILE).tips
        assert get_personalized_tips(make_reading(201), DEFAULT_USER_PROFILE).tips[-1] == TIP_AVOID_OUTDOORS

    # ==================== Properties ====================

    def test_never_empty(self, make_reading):
        for aqi in range(0, 400, 7):
            for profile in (DEFAULT_USER_PROFILE, SENSITIVE_ACTIVE, SENSITIVE_ONLY, ACTIVE_ONLY):
                assert len(get_personalized_tips(make_reading(aqi), profile).tips) >= 1

    def test_same_inputs_same_output(self, make_reading):
        reading = make_reading(180, [("Wed", 160)])
        assert get_personalized_tips(reading, SENSITIVE_ACTIVE) == get_personalized_tips(reading, SENSITIVE_ACTIVE)


class TestProactiveTip:
    """Test suite for the forecast look-ahead."""

    def test_no_high_day_no_tip(self, make_reading):
        reading = make_reading(180, [("Mon", 100), ("Tue", 90)])
        assert get_personalized_tips(reading, SENSITIVE_ACTIVE).proactive_tip is None

    def test_first_high_day_is_used(self, make_reading):
        reading = make_reading(40, [("Mon", 80), ("Tue", 130), ("Wed", 220)])
        tip = get_personalized_tips(reading, DEFAULT_USER_PROFILE).proactive_tip
        assert tip == f"High AQI of 130 is forecasted for Tue. {PROACTIVE_GENERIC}"

    def test_sensitive_clause_wins_over_activity(self, make_reading):
        reading = make_reading(40, [("Fri", 101)])
        tip = get_personalized_tips(reading, SENSITIVE_ACTIVE).proactive_tip
        assert tip.endswith(PROACTIVE_SENSITIVE)

    def test_high_activity_clause(self, make_reading):
        reading = make_reading(40, [("Sat", 140)])
        tip = get_personalized_tips(reading, ACTIVE_ONLY).proactive_tip
        assert tip.endswith(PROACTIVE_HIGH_ACTIVITY)

    def test_good_current_with_bad_forecast_keeps_good_tip(self, make_reading):
        reading = make_reading(20, [("Sun", 180)])
        advisory = get_personalized_tips(reading, DEFAULT_USER_PROFILE)
        assert advisory.tips == (TIP_GOOD_AIR,)
        assert advisory.proactive_tip is not None
