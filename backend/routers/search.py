import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import settings
from models.destination import Coordinate, Destination, ScoredDestination
from services import place_cache
from services.places_service import PlacesClient
from services.geo import distance_km, sort_by_distance
from services.scoring_service import SEARCH_PROFILE, score_destination
from services.store import Store
from routers.dependencies import get_places_client, get_store
from utils.errors import PlacesAPIError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


class SearchItem(BaseModel):
    id: str
    name: str
    description: str | None = None
    category: str
    address: str | None = None
    rating: float | None = None
    distance: float | None = None
    score: float | None = None
    photo_url: str | None = None


class SearchResponse(BaseModel):
    destinations: list[SearchItem] = []
    cached: bool = False


def _local_matches(query: str):
    needle = query.lower()

    def predicate(d: Destination) -> bool:
        return any(needle in (v or "").lower() for v in (d.name, d.address, d.category))

    return predicate


def _to_item(scored: ScoredDestination, places: PlacesClient) -> SearchItem:
    d = scored.destination
    return SearchItem(
        id=d.id,
        name=d.name,
        description=d.description,
        category=d.category,
        address=d.address,
        rating=d.rating,
        distance=scored.distance,
        score=scored.score if scored.distance is not None else None,
        photo_url=places.photo_url(d.photos[0]) if d.photos else None,
    )


@router.get("/search", response_model=SearchResponse)
@limiter.limit("30/minute")
async def search(
    request: Request,
    q: str | None = None,
    lat: float | None = None,
    lng: float | None = None,
    store: Store = Depends(get_store),
    places: PlacesClient = Depends(get_places_client),
):
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Query parameter is required")

    origin = None
    if lat is not None and lng is not None:
        if not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
            raise HTTPException(status_code=400, detail="Invalid coordinates")
        origin = Coordinate(latitude=lat, longitude=lng)

    cached = False
    try:
        results = await places.search_places(
            q.strip(),
            location=origin,
            radius=settings.search_radius_meters if origin else None,
        )
        destinations = await place_cache.upsert_search_results(store, results)
    except PlacesAPIError:
        logger.exception("Place search failed, falling back to stored destinations")
        destinations = await store.find_many("destinations", predicate=_local_matches(q.strip()))
        if not destinations:
            raise HTTPException(status_code=502, detail="Failed to search destinations")
        cached = True

    if origin is None:
        scored = [ScoredDestination(destination=d) for d in destinations]
    else:
        scored = []
        for d in sort_by_distance(origin, destinations, lambda d: d.coordinate):
            distance = distance_km(origin, d.coordinate)
            scored.append(ScoredDestination(
                destination=d,
                distance=distance,
                score=score_destination(d, distance, None, SEARCH_PROFILE),
            ))

    return SearchResponse(destinations=[_to_item(s, places) for s in scored], cached=cached)
