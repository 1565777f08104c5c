"""SQLite persistence for user profiles, saved locations and AQI history."""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiosqlite
from dateutil.relativedelta import relativedelta

from .models import HistoryRecordCreate, SavedLocationCreate, UserProfile
from .profiles import profile_from_record, profile_to_record

logger = logging.getLogger(__name__)

HISTORY_QUERY_LIMIT = 100


class ProfileStore:
    """Key-value store of user profiles plus the per-user location list."""

    def __init__(self, db_path: Union[str, Path], busy_timeout_ms: int = 5000):
        self.db_path = str(db_path)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.busy_timeout_ms = busy_timeout_ms

    async def _configure_connection(self, db: aiosqlite.Connection):
        """Apply connection-level SQLite settings."""
        await db.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
        await db.execute("PRAGMA foreign_keys = ON")

    async def initialize(self):
        """Initialize database schema."""
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure_connection(db)

            # DB-wide pragmas (persisted in the database)
            await db.execute("PRAGMA journal_mode = WAL")
            await db.execute("PRAGMA synchronous = NORMAL")

            await db.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    user_id TEXT PRIMARY KEY,
                    age_group TEXT NOT NULL,
                    health_conditions JSON NOT NULL,
                    activity_level TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS saved_locations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    location_name TEXT NOT NULL,
                    latitude REAL NOT NULL,
                    longitude REAL NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS aqi_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    location_name TEXT NOT NULL,
                    latitude REAL,
                    longitude REAL,
                    aqi INTEGER NOT NULL,
                    category TEXT,
                    primary_pollutant TEXT,
                    pollutants JSON,
                    timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_saved_locations_user
                ON saved_locations(user_id, created_at)
            """)

            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_aqi_history_timestamp
                ON aqi_history(timestamp)
            """)

            await db.commit()
        logger.info("[store] initialized %s", self.db_path)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Return the stored profile, or None for an unknown user."""
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure_connection(db)
            cursor = await db.execute(
                "SELECT age_group, health_conditions, activity_level FROM users WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()
            if not row:
                return None

            age_group, conditions_json, activity_level = row
            try:
                conditions = json.loads(conditions_json)
            except (TypeError, ValueError):
                # Older rows stored a comma separated string.
                conditions = conditions_json
            return profile_from_record({
                "ageGroup": age_group,
                "healthConditions": conditions,
                "activityLevel": activity_level,
            })

    async def save_profile(self, user_id: str, profile: UserProfile):
        """Insert or replace the profile for a user."""
        record = profile_to_record(profile)
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure_connection(db)
            await db.execute(
                """
                INSERT INTO users (user_id, age_group, health_conditions, activity_level, updated_at)
                VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(user_id) DO UPDATE SET
                    age_group = excluded.age_group,
                    health_conditions = excluded.health_conditions,
                    activity_level = excluded.activity_level,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (
                    user_id,
                    record["ageGroup"],
                    json.dumps(record["healthConditions"]),
                    record["activityLevel"],
                ),
            )
            await db.commit()

    # ------------------------------------------------------------------
    # Saved locations
    # ------------------------------------------------------------------

    async def list_locations(self, user_id: str) -> List[Dict[str, Any]]:
        """Saved locations for a user, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure_connection(db)
            cursor = await db.execute(
                """
                SELECT id, user_id, location_name, latitude, longitude, created_at
                FROM saved_locations
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (user_id,),
            )
            rows = await cursor.fetchall()
            return [
                {
                    "id": row[0],
                    "user_id": row[1],
                    "location_name": row[2],
                    "latitude": row[3],
                    "longitude": row[4],
                    "created_at": row[5],
                }
                for row in rows
            ]

    async def add_location(self, user_id: str, location: SavedLocationCreate) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure_connection(db)
            cursor = await db.execute(
                """
                INSERT INTO saved_locations (user_id, location_name, latitude, longitude)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, location.location_name, location.latitude, location.longitude),
            )
            await db.commit()
            return cursor.lastrowid

    async def delete_location(self, user_id: str, location_id: int) -> bool:
        """Delete one of the user's locations. Returns False if nothing matched."""
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure_connection(db)
            cursor = await db.execute(
                "DELETE FROM saved_locations WHERE id = ? AND user_id = ?",
                (location_id, user_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # AQI history
    # ------------------------------------------------------------------

    async def record_reading(self, record: HistoryRecordCreate) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure_connection(db)
            cursor = await db.execute(
                """
                INSERT INTO aqi_history
                (location_name, latitude, longitude, aqi, category, primary_pollutant, pollutants, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.location_name,
                    record.latitude,
                    record.longitude,
                    record.aqi,
                    record.category,
                    record.primary_pollutant,
                    json.dumps([p.model_dump() for p in record.pollutants]),
                    datetime.utcnow().isoformat(sep=" ", timespec="seconds"),
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def get_history(
        self,
        location: str,
        days: int = 30,
        limit: int = HISTORY_QUERY_LIMIT,
    ) -> List[Dict[str, Any]]:
        """History rows whose location name contains ``location``, newest first."""
        since = datetime.utcnow() - relativedelta(days=max(0, days))
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure_connection(db)
            cursor = await db.execute(
                """
                SELECT id, location_name, latitude, longitude, aqi, category,
                       primary_pollutant, pollutants, timestamp
                FROM aqi_history
                WHERE location_name LIKE ?
                  AND timestamp >= ?
                ORDER BY timestamp DESC, id DESC
                LIMIT ?
                """,
                (f"%{location}%", since.isoformat(sep=" ", timespec="seconds"), limit),
            )
            rows = await cursor.fetchall()
            return [
                {
                    "id": row[0],
                    "location_name": row[1],
                    "latitude": row[2],
                    "longitude": row[3],
                    "aqi": row[4],
                    "category": row[5],
                    "primary_pollutant": row[6],
                    "pollutants": json.loads(row[7]) if row[7] else [],
                    "timestamp": row[8],
                }
                for row in rows
            ]
