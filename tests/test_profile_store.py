"""
Tests for ProfileStore on a temporary SQLite database.

Tests cover:
- Profiles: unknown user, upsert, legacy comma separated rows
- Saved locations: add, list order, delete scoping
- AQI history: record, substring match, look-back window
"""

import asyncio
import json

import aiosqlite
import pytest

from auraquality.models import (
    ActivityLevel,
    AgeGroup,
    HealthCondition,
    HistoryRecordCreate,
    Pollutant,
    SavedLocationCreate,
    UserProfile,
)
from auraquality.profile_store import ProfileStore


@pytest.fixture
def store(tmp_path):
    store = ProfileStore(tmp_path / "nested" / "aura.db")
    asyncio.run(store.initialize())
    return store


def history_record(name, aqi=80):
    return HistoryRecordCreate(
        location_name=name,
        latitude=1.0,
        longitude=2.0,
        aqi=aqi,
        category="Moderate",
        primary_pollutant="PM2.5",
        pollutants=[Pollutant(name="PM2.5", value=21.0, unit="µg/m³")],
    )


class TestProfiles:
    """Test suite for profile persistence."""

    def test_unknown_user(self, store):
        assert asyncio.run(store.get_profile("nobody")) is None

    def test_save_and_load(self, store):
        profile = UserProfile(
            age_group=AgeGroup.SENIORS,
            health_conditions=(HealthCondition.COPD, HealthCondition.CARDIOVASCULAR),
            activity_level=ActivityLevel.LOW,
        )
        asyncio.run(store.save_profile("u1", profile))
        assert asyncio.run(store.get_profile("u1")) == profile

    def test_save_replaces_existing(self, store):
        asyncio.run(store.save_profile("u1", UserProfile(age_group=AgeGroup.CHILDREN)))
        asyncio.run(store.save_profile("u1", UserProfile(age_group=AgeGroup.ADULTS)))
        assert asyncio.run(store.get_profile("u1")).age_group is AgeGroup.ADULTS

    def test_legacy_comma_separated_conditions(self, store):
        async def scenario():
            async with aiosqlite.connect(store.db_path) as db:
                await db.execute(
                    "INSERT INTO users (user_id, age_group, health_conditions, activity_level) VALUES (?, ?, ?, ?)",
                    ("legacy", "All Ages", "Asthma,COPD", "Low (mostly indoors)"),
                )
                await db.commit()
            return await store.get_profile("legacy")

        profile = asyncio.run(scenario())
        assert profile.health_conditions == (HealthCondition.ASTHMA, HealthCondition.COPD)

    def test_conditions_stored_as_json(self, store):
        async def scenario():
            await store.save_profile("u2", UserProfile())
            async with aiosqlite.connect(store.db_path) as db:
                cursor = await db.execute("SELECT health_conditions FROM users WHERE user_id = ?", ("u2",))
                return (await cursor.fetchone())[0]

        assert json.loads(asyncio.run(scenario())) == ["None"]


class TestSavedLocations:
    """Test suite for saved locations."""

    def test_add_and_list_newest_first(self, store):
        async def scenario():
            await store.add_location("u1", SavedLocationCreate(location_name="Home", latitude=1, longitude=2))
            await store.add_location("u1", SavedLocationCreate(location_name="Work", latitude=3, longitude=4))
            await store.add_location("u2", SavedLocationCreate(location_name="Other", latitude=5, longitude=6))
            return await store.list_locations("u1")

        rows = asyncio.run(scenario())
        assert [r["location_name"] for r in rows] == ["Work", "Home"]
        assert rows[0]["user_id"] == "u1"
        assert rows[0]["latitude"] == 3

    def test_delete_is_scoped_to_user(self, store):
        async def scenario():
            location_id = await store.add_location(
                "u1", SavedLocationCreate(location_name="Home", latitude=1, longitude=2)
            )
            wrong_user = await store.delete_location("u2", location_id)
            right_user = await store.delete_location("u1", location_id)
            again = await store.delete_location("u1", location_id)
            return wrong_user, right_user, again, await store.list_locations("u1")

        assert asyncio.run(scenario()) == (False, True, False, [])


class TestHistory:
    """Test suite for the AQI history log."""

    def test_record_and_query_by_substring(self, store):
        async def scenario():
            await store.record_reading(history_record("Los Angeles, CA", aqi=60))
            await store.record_reading(history_record("Las Vegas, NV", aqi=90))
            return await store.get_history("Angeles")

        rows = asyncio.run(scenario())
        assert len(rows) == 1
        assert rows[0]["aqi"] == 60
        assert rows[0]["pollutants"] == [{"name": "PM2.5", "value": 21.0, "unit": "µg/m³"}]

    def test_newest_first(self, store):
        async def scenario():
            first = await store.record_reading(history_record("Denver", aqi=10))
            second = await store.record_reading(history_record("Denver", aqi=20))
            return first, second, await store.get_history("Denver")

        first, second, rows = asyncio.run(scenario())
        assert [r["id"] for r in rows] == [second, first]

    def test_old_rows_outside_window(self, store):
        async def scenario():
            await store.record_reading(history_record("Boise"))
            async with aiosqlite.connect(store.db_path) as db:
                await db.execute(
                    "INSERT INTO aqi_history (location_name, aqi, timestamp) VALUES (?, ?, ?)",
                    ("Boise", 300, "2001-01-01 00:00:00"),
                )
                await db.commit()
            return await store.get_history("Boise", days=30)

        rows = asyncio.run(scenario())
        assert [r["aqi"] for r in rows] == [80]
