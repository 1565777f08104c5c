"""API routes for the Aura Quality application."""
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from .advisory import get_personalized_tips
from .aqi_categories import get_aqi_category
from .chat_service import ChatProviderError, ChatService
from .geocoding import GeocodingError, NominatimGeocoder
from .models import (
    AdviceRequest,
    AdviceResponse,
    ChatReply,
    ChatRequest,
    HealthCondition,
    HistoryRecord,
    HistoryRecordCreate,
    SavedLocation,
    SavedLocationCreate,
    UserProfile,
)
from .profile_store import ProfileStore
from .profiles import DEFAULT_USER_PROFILE, profile_to_record, toggle_health_condition
from .reading_provider import MockReadingProvider, ReadingFetchError
from .settings import load_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Initialize components
settings = load_settings()
store = ProfileStore(settings.database_path, busy_timeout_ms=settings.sqlite_busy_timeout_ms)
geocoder = NominatimGeocoder(
    base_url=settings.nominatim_base_url,
    timeout=settings.http_timeout_seconds,
)
reading_provider = MockReadingProvider(latency_seconds=settings.provider_latency_seconds)
chat_service = ChatService(settings.gemini_api_key, model=settings.gemini_model)


@router.on_event("startup")
async def startup_event():
    """Create the database schema."""
    await store.initialize()
    if not chat_service.available:
        logger.warning("[chat] GEMINI_API_KEY is not set; /api/chat will fail")


# ----------------------------------------------------------------------
# Profiles
# ----------------------------------------------------------------------

@router.get("/users/{user_id}/profile")
async def get_profile(user_id: str):
    profile = await store.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile_to_record(profile)


@router.post("/users/{user_id}/profile")
async def save_profile(user_id: str, profile: UserProfile):
    """Create or replace a user's health profile."""
    await store.save_profile(user_id, profile)
    return {"success": True, "profile": profile_to_record(profile)}


@router.post("/users/{user_id}/profile/conditions/{condition}")
async def toggle_profile_condition(user_id: str, condition: HealthCondition):
    """Toggle one health condition, keeping "None" exclusive."""
    profile = await store.get_profile(user_id) or DEFAULT_USER_PROFILE
    updated = toggle_health_condition(profile, condition)
    await store.save_profile(user_id, updated)
    return profile_to_record(updated)


# ----------------------------------------------------------------------
# Saved locations
# ----------------------------------------------------------------------

@router.get("/users/{user_id}/locations", response_model=List[SavedLocation])
async def get_locations(user_id: str):
    return await store.list_locations(user_id)


@router.post("/users/{user_id}/locations")
async def add_location(user_id: str, location: SavedLocationCreate):
    location_id = await store.add_location(user_id, location)
    return {"id": location_id, "success": True}


@router.delete("/users/{user_id}/locations/{location_id}")
async def delete_location(user_id: str, location_id: int):
    if not await store.delete_location(user_id, location_id):
        raise HTTPException(status_code=404, detail="Location not found")
    return {"success": True}


# ----------------------------------------------------------------------
# Air quality
# ----------------------------------------------------------------------

@router.post("/aqi/history")
async def record_history(record: HistoryRecordCreate):
    record_id = await store.record_reading(record)
    return {"id": record_id, "success": True}


@router.get("/aqi/history", response_model=List[HistoryRecord])
async def get_history(
    location: str = Query(..., min_length=1, description="Location name (substring match)"),
    days: int = Query(30, ge=0, le=3650, description="Look-back window in days"),
):
    return await store.get_history(location, days=days)


@router.get("/aqi/current")
async def get_current_reading(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    location: Optional[str] = Query(None, description="Display name for the reading"),
):
    """Current reading, forecast and history for a coordinate pair."""
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="Latitude and longitude required")

    try:
        reading = await reading_provider.fetch(lat, lng, location or "Selected Location")
    except ReadingFetchError as e:
        logger.error("[aqi] %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch air quality data.")
    return reading.model_dump(by_alias=True, mode="json")


@router.get("/aqi/category")
async def get_category(aqi: int = Query(..., ge=0, description="Air quality index value")):
    return get_aqi_category(aqi).to_dict()


@router.post("/advice")
async def get_advice(request: AdviceRequest):
    """Personalised tips for a reading and a health profile."""
    advisory = get_personalized_tips(request.reading, request.profile)
    response = AdviceResponse(tips=list(advisory.tips), proactive_tip=advisory.proactive_tip)
    return response.model_dump(by_alias=True)


# ----------------------------------------------------------------------
# Location search
# ----------------------------------------------------------------------

@router.get("/locations/search")
async def search_locations(
    q: str = Query(..., description="Free-text place name"),
    limit: int = Query(settings.max_suggestions, ge=1, le=10),
):
    try:
        suggestions = await geocoder.search(q, limit=limit)
    except GeocodingError as e:
        raise HTTPException(status_code=502, detail=f"Location search failed: {e}")
    return [s.model_dump() for s in suggestions]


@router.get("/locations/reverse")
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
):
    name = await geocoder.reverse_geocode(lat, lng)
    return {"name": name, "lat": lat, "lng": lng}


# ----------------------------------------------------------------------
# Chat
# ----------------------------------------------------------------------

@router.post("/chat")
async def chat(request: ChatRequest):
    try:
        reply = await chat_service.ask(request.message, request.context)
    except ChatProviderError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ChatReply(reply=reply)
