"""Keeps one local Destination per external place and decides when to refresh it."""

import asyncio
import logging
from datetime import timedelta

from config import settings
from models.destination import Destination, utcnow
from models.places import PlaceDetails, PlaceResult
from services.places_service import PlacesClient
from services.store import Store
from utils.errors import ProviderError

logger = logging.getLogger(__name__)

# Provider type tag -> local category. Lookup order follows the provider's type list.
CATEGORY_BY_PLACE_TYPE = {
    "beach": "beaches",
    "natural_feature": "nature",
    "park": "parks",
    "tourist_attraction": "attractions",
    "place_of_worship": "temples",
    "waterfall": "waterfalls",
    "mountain": "hills",
    "hiking_area": "hills",
    "campground": "camping",
    "museum": "museums",
    "restaurant": "restaurants",
    "cafe": "cafes",
}


def map_place_types_to_category(types: list[str]) -> str:
    for place_type in types:
        if place_type in CATEGORY_BY_PLACE_TYPE:
            return CATEGORY_BY_PLACE_TYPE[place_type]
    return "other"


def _present(payload: dict) -> dict:
    """Drop keys whose value the provider did not send this time."""
    return {k: v for k, v in payload.items() if v is not None}


async def upsert_from_search_result(store: Store, place: PlaceResult) -> Destination:
    now = utcnow()
    fields = {
        "name": place.name,
        "address": place.formatted_address,
        "latitude": place.latitude,
        "longitude": place.longitude,
        "rating": place.rating,
        "price_level": place.price_level,
        "photos": place.photo_references,
        "category": map_place_types_to_category(place.types),
    }
    return await store.upsert(
        "destinations",
        where={"place_id": place.place_id},
        create={**_present(fields), "last_accessed_at": now, "created_at": now},
        update={**_present(fields), "last_accessed_at": now},
    )


async def upsert_search_results(store: Store, places: list[PlaceResult]) -> list[Destination]:
    """Upsert every search hit; hits are independent so they run concurrently."""
    return list(await asyncio.gather(*(upsert_from_search_result(store, p) for p in places)))


def is_stale(destination: Destination, max_age_seconds: int | None = None) -> bool:
    max_age = settings.detail_refresh_seconds if max_age_seconds is None else max_age_seconds
    if max_age <= 0 or not destination.description:
        return True
    return utcnow() - destination.last_accessed_at >= timedelta(seconds=max_age)


async def refresh_detail_if_stale(
    store: Store,
    places: PlacesClient,
    destination: Destination,
    max_age_seconds: int | None = None,
) -> tuple[Destination, PlaceDetails | None]:
    """Refresh extended details from the provider.

    Returns the (possibly updated) destination and the fetched details. Any
    provider failure is logged and the cached record is returned with None.
    """
    if not is_stale(destination, max_age_seconds):
        return destination, None

    try:
        details = await places.get_place_details(destination.place_id)
    except ProviderError:
        logger.warning(
            "Place details refresh failed for %s, serving cached data",
            destination.place_id, exc_info=True,
        )
        return destination, None

    if not details.overview:
        return destination, details

    return await _apply_details(store, destination, details), details


async def _apply_details(store: Store, destination: Destination, details: PlaceDetails) -> Destination:
    update = {
        "description": details.overview,
        **_present({
            "rating": details.rating,
            "price_level": details.price_level,
            "website": details.website,
            "phone_number": details.phone_number,
            "opening_hours": details.opening_hours,
        }),
        "last_accessed_at": utcnow(),
    }
    return await store.update("destinations", {"id": destination.id}, update)


async def import_place(store: Store, places: PlacesClient, place_id: str) -> Destination:
    """Fetch a place by external id and upsert it. PlaceNotFoundError propagates."""
    details = await places.get_place_details(place_id)
    destination = await upsert_from_search_result(store, details)
    if details.overview:
        destination = await _apply_details(store, destination, details)
    return destination
