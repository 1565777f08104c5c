"""Dashboard session: the state one user is looking at.

The session owns the selected location, the current reading, the search box
and the profile, and is the only thing that mutates them. Reading fetches
carry a generation token; a fetch that completes after a newer location
change has started is discarded.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from .advisory import Advisory, get_personalized_tips
from .chat_service import ChatMessage, ChatPanel, ChatService
from .geocoding import GeocodingError, LocationNotFoundError, NominatimGeocoder
from .models import HealthCondition, LocationSuggestion, Reading, UserProfile
from .profile_store import ProfileStore
from .profiles import DEFAULT_USER_PROFILE, toggle_health_condition
from .reading_provider import MockReadingProvider, ReadingFetchError
from .refresh_jobs import ReadingRefreshController
from .search_controller import SearchSuggestionController
from .settings import DashboardSettings

logger = logging.getLogger(__name__)


FETCH_FAILED_MESSAGE = "Failed to fetch air quality data."
SEARCH_FAILED_MESSAGE = "Failed to search for location. Please check your network."


def not_found_message(query: str) -> str:
    return f'Could not find location: "{query}". Please try another search term.'


class DashboardSession:
    def __init__(
        self,
        *,
        settings: DashboardSettings,
        reading_provider: MockReadingProvider,
        geocoder: NominatimGeocoder,
        chat_service: Optional[ChatService] = None,
        store: Optional[ProfileStore] = None,
        user_id: Optional[str] = None,
    ):
        self.settings = settings
        self.reading_provider = reading_provider
        self.geocoder = geocoder
        self.store = store
        self.user_id = user_id

        self.location: Tuple[float, float] = (settings.default_latitude, settings.default_longitude)
        self.location_name = settings.default_location_name
        self.reading: Optional[Reading] = None
        self.loading = False
        self.error: Optional[str] = None
        self.profile: UserProfile = DEFAULT_USER_PROFILE

        self._generation = 0
        self._outstanding_fetches = 0

        self.search = SearchSuggestionController(
            geocoder.search,
            on_select=self._on_suggestion_selected,
            debounce_seconds=settings.debounce_seconds,
            blur_grace_seconds=settings.blur_grace_seconds,
            min_query_length=settings.min_query_length,
            max_suggestions=settings.max_suggestions,
        )
        # Pre-filled box text, not a user edit: no lookup.
        self.search.query = settings.default_location_name

        self.refresher = ReadingRefreshController(
            self, interval_seconds=settings.refresh_interval_seconds
        )
        self.chat = ChatPanel(chat_service) if chat_service is not None else None

    @property
    def fetch_in_flight(self) -> bool:
        return self._outstanding_fetches > 0

    @property
    def advice(self) -> Optional[Advisory]:
        if self.reading is None:
            return None
        return get_personalized_tips(self.reading, self.profile)

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, coords: Optional[Tuple[float, float]] = None):
        """Load the profile and the first reading, then start refreshing.

        ``coords`` is the device position when known; otherwise the default
        location is shown.
        """
        await self.load_profile()
        if coords is not None:
            await self.handle_map_click(*coords)
        else:
            lat, lng = self.location
            await self.load_reading(lat, lng, self.location_name)
        self.refresher.start()

    async def close(self):
        self._generation += 1
        await self.refresher.stop()
        await self.search.close()
        logger.info("[session] closed")

    # ------------------------------------------------------------------
    # Readings
    # ------------------------------------------------------------------

    async def load_reading(
        self,
        lat: float,
        lng: float,
        name: str,
        *,
        is_refresh: bool = False,
    ) -> Optional[Reading]:
        """Fetch a reading and display it unless a newer request superseded it.

        The currently displayed reading stays up while loading and on failure.
        A refresh shows no loading indicator and leaves the error banner alone.
        """
        generation = self._next_generation()
        self.location = (lat, lng)
        self.location_name = name
        if not is_refresh:
            self.loading = True
            self.error = None

        self._outstanding_fetches += 1
        try:
            reading = await self.reading_provider.fetch(lat, lng, name)
        except ReadingFetchError as e:
            logger.error("[session] reading fetch failed for %s: %s", name, e)
            if generation == self._generation:
                self.error = FETCH_FAILED_MESSAGE
            return None
        finally:
            self._outstanding_fetches -= 1
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.debug("[session] discarding superseded reading for %s", name)
            return None

        self.reading = reading
        return reading

    async def handle_map_click(self, lat: float, lng: float) -> Optional[Reading]:
        generation = self._next_generation()
        self.location = (lat, lng)

        # Counts as in flight so a refresh tick cannot supersede the click.
        self._outstanding_fetches += 1
        try:
            name = await self.geocoder.reverse_geocode(lat, lng)
        finally:
            self._outstanding_fetches -= 1
        if generation != self._generation:
            return None

        self.search.set_query_programmatically(name)
        return await self.load_reading(lat, lng, name)

    async def _on_suggestion_selected(self, suggestion: LocationSuggestion):
        await self.load_reading(suggestion.lat, suggestion.lng, suggestion.name)

    async def submit_search(self) -> Optional[LocationSuggestion]:
        """Submit the search box, surfacing lookup failures on the banner."""
        query = self.search.query.strip()
        if not query:
            return None

        self.error = None
        try:
            return await self.search.submit()
        except LocationNotFoundError:
            self.error = not_found_message(query)
        except GeocodingError as e:
            logger.error("[session] location search failed for %r: %s", query, e)
            self.error = SEARCH_FAILED_MESSAGE
        return None

    def dismiss_error(self):
        self.error = None

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def load_profile(self) -> UserProfile:
        if self.store is not None and self.user_id:
            stored = await self.store.get_profile(self.user_id)
            if stored is not None:
                self.profile = stored
        return self.profile

    async def update_profile(self, profile: UserProfile) -> UserProfile:
        self.profile = profile
        if self.store is not None and self.user_id:
            await self.store.save_profile(self.user_id, profile)
        return profile

    async def toggle_health_condition(self, condition: HealthCondition) -> UserProfile:
        return await self.update_profile(toggle_health_condition(self.profile, condition))

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def ask_chat(self, text: str) -> Optional[ChatMessage]:
        if self.chat is None:
            return None
        return await self.chat.send(text, self.reading)
