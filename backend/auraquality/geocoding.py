"""Location search and reverse geocoding via the Nominatim API.

Implements a small retry loop for transient upstream failures:
- 429 (rate limit) and 500/502/503/504 are retried with exponential backoff
- transport errors and timeouts are retried the same way
Anything else surfaces as GeocodingError.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from .models import LocationSuggestion

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Raised when the geocoding service could not be reached or answered badly."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class LocationNotFoundError(Exception):
    """Raised when a search completed but matched nothing."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(f'Could not find location: "{query}"')


def coordinate_label(lat: float, lng: float) -> str:
    """Fallback display name used when reverse geocoding is unavailable."""
    return f"Lat: {lat:.2f}, Lng: {lng:.2f}"


class NominatimGeocoder:
    """Search and reverse-geocode locations through Nominatim."""

    BASE_URL = "https://nominatim.openstreetmap.org"
    USER_AGENT = "aura-quality/1.0"
    RETRY_STATUSES = (429, 500, 502, 503, 504)

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._transport = transport

    async def _make_request(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        last_error: Optional[str] = None
        last_status: Optional[int] = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout,
                    transport=self._transport,
                    headers={"User-Agent": self.USER_AGENT},
                ) as client:
                    response = await client.get(url, params=params)

                    if response.status_code in self.RETRY_STATUSES:
                        last_status = response.status_code
                        last_error = f"HTTP {response.status_code}"
                        wait_time = self.retry_delay * (2 ** attempt)
                        logger.warning(
                            "[geocode] %s returned %s, waiting %.1fs (attempt %d/%d)",
                            path, response.status_code, wait_time, attempt + 1, self.max_retries,
                        )
                        if attempt < self.max_retries - 1:
                            await asyncio.sleep(wait_time)
                        continue

                    if response.is_error:
                        raise GeocodingError(
                            f"Geocoding API request failed: HTTP {response.status_code}",
                            status_code=response.status_code,
                        )
                    return response.json()

            except httpx.TimeoutException:
                last_error = "timeout"
                logger.warning("[geocode] %s timed out (attempt %d/%d)", path, attempt + 1, self.max_retries)
            except httpx.HTTPError as e:
                last_error = str(e)
                logger.warning("[geocode] %s failed: %s (attempt %d/%d)", path, e, attempt + 1, self.max_retries)
            except ValueError as e:
                raise GeocodingError(f"Geocoding API returned invalid JSON: {e}") from e

            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.retry_delay * (2 ** attempt))

        raise GeocodingError(
            f"Geocoding request failed after {self.max_retries} attempts: {last_error}",
            status_code=last_status,
        )

    @staticmethod
    def _to_suggestion(item: Dict[str, Any]) -> Optional[LocationSuggestion]:
        try:
            lat = float(item["lat"])
            lng = float(item["lon"])
        except (KeyError, TypeError, ValueError):
            return None

        name = item.get("display_name") or coordinate_label(lat, lng)
        place_id = item.get("place_id")
        if place_id is None:
            place_id = f"{item.get('osm_type', 'x')}{item.get('osm_id', '')}:{lat:.5f},{lng:.5f}"
        return LocationSuggestion(id=str(place_id), name=name, lat=lat, lng=lng)

    async def search(self, text: str, limit: int = 5) -> List[LocationSuggestion]:
        """Return candidate locations in provider order, at most ``limit``."""
        query = text.strip()
        if not query:
            return []

        data = await self._make_request(
            "/search",
            {"q": query, "format": "json", "limit": limit},
        )
        if not isinstance(data, list):
            return []

        suggestions = []
        for item in data:
            suggestion = self._to_suggestion(item)
            if suggestion is not None:
                suggestions.append(suggestion)
        return suggestions[:limit]

    async def reverse_geocode(self, lat: float, lng: float) -> str:
        """Return a display name for coordinates.

        Never raises: any failure degrades to a coordinate label.
        """
        try:
            data = await self._make_request(
                "/reverse",
                {"format": "json", "lat": lat, "lon": lng},
            )
        except GeocodingError as e:
            logger.info("[geocode] reverse lookup failed for %.4f,%.4f: %s", lat, lng, e)
            return coordinate_label(lat, lng)

        if isinstance(data, dict) and data.get("display_name"):
            return str(data["display_name"])
        return coordinate_label(lat, lng)
