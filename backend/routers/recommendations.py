import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import settings
from models.user import User
from services import user_service
from services.proximity import find_nearby
from services.recommendation_service import Candidate, recommend_destinations
from services.store import Store
from routers.dependencies import get_current_user, get_llm_client, get_store
from utils.llm_client import LLMClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


class RecommendationResponse(BaseModel):
    recommendations: list[str] = []
    source: str = "none"


@router.get("/recommendations", response_model=RecommendationResponse)
@limiter.limit("10/minute")
async def get_recommendations(
    request: Request,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
    llm: LLMClient = Depends(get_llm_client),
):
    survey = await user_service.get_survey(store, user)
    if survey is None or not survey.interests:
        raise HTTPException(status_code=400, detail="Complete the travel survey to get recommendations")
    if user.location is None:
        return RecommendationResponse()

    nearby = await find_nearby(store, user.location, settings.nearby_radius_km)
    if not nearby:
        return RecommendationResponse()

    result = await recommend_destinations(
        llm,
        interests=survey.interests,
        budget=survey.budget,
        origin=user.location,
        candidates=[
            Candidate(name=s.destination.name, category=s.destination.category, distance=s.distance)
            for s in nearby
        ],
        limit=settings.recommendation_limit,
    )
    logger.info("Recommendations for %s served from %s", user.id, result.source)
    return RecommendationResponse(recommendations=result.names, source=result.source)
