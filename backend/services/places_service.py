import logging
from urllib.parse import urlencode

import httpx

from models.destination import Coordinate
from models.places import PlaceDetails, PlaceResult
from services.cache_service import TTLCache
from utils.errors import PlaceNotFoundError, PlacesAPIError

logger = logging.getLogger(__name__)

DETAIL_FIELDS = [
    "place_id",
    "name",
    "formatted_address",
    "geometry",
    "rating",
    "price_level",
    "photos",
    "types",
    "website",
    "formatted_phone_number",
    "opening_hours",
    "editorial_summary",
    "reviews",
]


class PlacesClient:
    """Google Places web service client (Text Search, Place Details, Photos)."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api/place",
        cache: TTLCache | None = None,
    ):
        self._http = http
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._cache = cache

    def _require_key(self) -> None:
        if not self._api_key:
            raise PlacesAPIError("GOOGLE_PLACES_API_KEY not configured")

    async def _get(self, endpoint: str, params: dict) -> dict:
        try:
            response = await self._http.get(
                f"{self._base_url}/{endpoint}/json",
                params={**params, "key": self._api_key},
            )
        except httpx.HTTPError as e:
            raise PlacesAPIError(f"Google Places request failed: {e}") from e

        if response.status_code != 200:
            logger.error("Google Places error %s: %s", response.status_code, response.text)
            raise PlacesAPIError(f"Google Places API error: HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise PlacesAPIError("Google Places returned a non-JSON body") from e
        if not isinstance(body, dict):
            raise PlacesAPIError("Google Places returned an unexpected payload")
        return body

    async def search_places(
        self,
        query: str,
        location: Coordinate | None = None,
        radius: int | None = None,
    ) -> list[PlaceResult]:
        """Text search. ZERO_RESULTS is a valid, empty answer."""
        self._require_key()

        params = {"query": query}
        # Location bias only applies when both a point and a radius are given
        if location is not None and radius:
            params["location"] = f"{location.latitude},{location.longitude}"
            params["radius"] = str(radius)

        cache_key = f"search:{urlencode(sorted(params.items()))}"
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        data = await self._get("textsearch", params)
        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise PlacesAPIError(f"Google Places API error: {status}")

        results = []
        for raw in data.get("results") or []:
            try:
                results.append(PlaceResult.from_api(raw))
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed place record: %.200s", raw)

        if self._cache is not None:
            self._cache.set(cache_key, results)
        return results

    async def get_place_details(self, place_id: str) -> PlaceDetails:
        self._require_key()

        data = await self._get("details", {"place_id": place_id, "fields": ",".join(DETAIL_FIELDS)})
        status = data.get("status")
        if status in ("NOT_FOUND", "INVALID_REQUEST", "ZERO_RESULTS"):
            raise PlaceNotFoundError(f"Place not found: {place_id}")
        if status != "OK":
            raise PlacesAPIError(f"Google Places API error: {status}")

        try:
            return PlaceDetails.from_api(data["result"])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise PlacesAPIError(f"Malformed place details for {place_id}") from e

    def cache_stats(self) -> dict | None:
        return self._cache.stats() if self._cache is not None else None

    def photo_url(self, photo_reference: str, max_width: int = 800) -> str:
        params = urlencode({
            "maxwidth": max_width,
            "photo_reference": photo_reference,
            "key": self._api_key,
        })
        return f"{self._base_url}/photo?{params}"
