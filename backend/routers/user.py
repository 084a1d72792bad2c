from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from models.destination import Coordinate, Destination
from models.user import Budget, TravelStyle, User, UserSurvey
from services import user_service
from services.store import Store
from routers.dependencies import get_current_user, get_store
from utils.errors import ConflictError, NotFoundError

router = APIRouter(prefix="/user", tags=["user"])


class LocationRequest(BaseModel):
    location: Coordinate


class SurveyRequest(BaseModel):
    interests: list[str] = []
    budget: Budget
    travel_style: TravelStyle
    preferred_categories: list[str] = []


class DestinationRequest(BaseModel):
    destination_id: str = Field(..., min_length=1)


class VisitRequest(DestinationRequest):
    notes: str | None = None


class DestinationSummary(BaseModel):
    id: str
    name: str
    category: str
    address: str | None = None
    rating: float | None = None
    photos: list[str] = []


class FavoriteOut(BaseModel):
    id: str
    destination_id: str
    created_at: datetime
    destination: DestinationSummary | None = None


class VisitOut(BaseModel):
    id: str
    destination_id: str
    notes: str | None = None
    visited_at: datetime
    destination: DestinationSummary | None = None


def _summary(destination: Destination | None) -> DestinationSummary | None:
    if destination is None:
        return None
    return DestinationSummary(**destination.model_dump(
        include={"id", "name", "category", "address", "rating", "photos"},
    ))


@router.post("/location")
async def set_location(
    req: LocationRequest,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    lat, lng = req.location.latitude, req.location.longitude
    if not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
        raise HTTPException(status_code=400, detail="Invalid location data")
    await user_service.set_location(store, user, req.location)
    return {"success": True}


@router.get("/survey", response_model=UserSurvey | None)
async def get_survey(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    return await user_service.get_survey(store, user)


@router.post("/survey")
async def save_survey(
    req: SurveyRequest,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    await user_service.save_survey(store, user, req.model_dump())
    return {"success": True}


@router.get("/favorites")
async def list_favorites(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> dict[str, list[FavoriteOut]]:
    rows = await user_service.list_favorites(store, user)
    return {"favorites": [
        FavoriteOut(**f.model_dump(exclude={"user_id"}), destination=_summary(d))
        for f, d in rows
    ]}


@router.post("/favorites")
async def add_favorite(
    req: DestinationRequest,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    try:
        favorite = await user_service.add_favorite(store, user, req.destination_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"favorite": favorite}


@router.delete("/favorites")
async def remove_favorite(
    destination_id: str | None = None,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    if not destination_id:
        raise HTTPException(status_code=400, detail="destination_id is required")
    await user_service.remove_favorite(store, user, destination_id)
    return {"success": True}


@router.get("/visits")
async def list_visits(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> dict[str, list[VisitOut]]:
    rows = await user_service.list_visits(store, user)
    return {"visits": [
        VisitOut(**v.model_dump(exclude={"user_id"}), destination=_summary(d))
        for v, d in rows
    ]}


@router.post("/visits")
async def add_visit(
    req: VisitRequest,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    try:
        visit = await user_service.add_visit(store, user, req.destination_id, req.notes)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"visit": visit}


@router.get("/stats")
async def stats(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    return await user_service.user_stats(store, user)
