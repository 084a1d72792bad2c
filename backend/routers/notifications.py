from fastapi import APIRouter, Depends
from pydantic import BaseModel

from config import settings
from models.user import User
from services import user_service
from services.proximity import find_nearby
from services.scoring_service import NEARBY_PROFILE, rank_destinations
from services.store import Store
from routers.dependencies import get_current_user, get_store

router = APIRouter(tags=["notifications"])


class NotificationItem(BaseModel):
    id: str
    name: str
    category: str
    distance: float
    rating: float | None = None
    score: float


class NotificationsResponse(BaseModel):
    notifications: list[NotificationItem] = []


@router.get("/notifications", response_model=NotificationsResponse)
async def get_notifications(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    if user.location is None:
        return NotificationsResponse()

    survey = await user_service.get_survey(store, user)
    nearby = await find_nearby(store, user.location, settings.nearby_radius_km)
    ranked = rank_destinations(nearby, survey, NEARBY_PROFILE, settings.notification_limit)

    return NotificationsResponse(notifications=[
        NotificationItem(
            id=s.destination.id,
            name=s.destination.name,
            category=s.destination.category,
            distance=s.distance,
            rating=s.destination.rating,
            score=s.score,
        )
        for s in ranked
    ])
