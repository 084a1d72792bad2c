import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import settings
from models.destination import Destination, Hotel, Transport
from models.places import PlaceReview
from services import place_cache
from services.places_service import PlacesClient
from services.store import Store
from routers.dependencies import get_places_client, get_store
from utils.errors import PlaceNotFoundError, PlacesAPIError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/destinations", tags=["destinations"])

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

MAX_PHOTOS = 10
MAX_REVIEWS = 5
MAX_OPTIONS = 5


class PlaceDetailsOut(BaseModel):
    reviews: list[PlaceReview] = []
    opening_hours: list[str] = []


class DestinationDetail(Destination):
    photo_urls: list[str] = []
    hotels: list[Hotel] = []
    transports: list[Transport] = []
    place_details: PlaceDetailsOut | None = None


class ImportRequest(BaseModel):
    place_id: str


@router.get("/{destination_id}", response_model=DestinationDetail)
@limiter.limit("60/minute")
async def get_destination(
    request: Request,
    destination_id: str,
    store: Store = Depends(get_store),
    places: PlacesClient = Depends(get_places_client),
):
    destination = await store.find_unique("destinations", {"id": destination_id})
    if destination is None:
        raise HTTPException(status_code=404, detail="Destination not found")

    # Provider failures degrade to the stored record
    destination, details = await place_cache.refresh_detail_if_stale(store, places, destination)

    hotels = await store.find_many(
        "hotels", {"destination_id": destination.id}, order_by="price", limit=MAX_OPTIONS,
    )
    transports = await store.find_many(
        "transports", {"destination_id": destination.id}, order_by="price", limit=MAX_OPTIONS,
    )

    return DestinationDetail(
        **destination.model_dump(),
        photo_urls=[places.photo_url(ref) for ref in destination.photos[:MAX_PHOTOS]],
        hotels=hotels,
        transports=transports,
        place_details=(
            PlaceDetailsOut(
                reviews=details.reviews[:MAX_REVIEWS],
                opening_hours=details.opening_hours or [],
            )
            if details is not None else None
        ),
    )


@router.post("/import", response_model=Destination)
@limiter.limit("20/minute")
async def import_destination(
    request: Request,
    req: ImportRequest,
    store: Store = Depends(get_store),
    places: PlacesClient = Depends(get_places_client),
):
    if not req.place_id.strip():
        raise HTTPException(status_code=400, detail="place_id cannot be empty")
    try:
        return await place_cache.import_place(store, places, req.place_id.strip())
    except PlaceNotFoundError:
        raise HTTPException(status_code=404, detail="Place not found")
    except PlacesAPIError as e:
        logger.exception("Place import failed")
        raise HTTPException(status_code=502, detail=str(e))
