"""FastAPI dependencies handing out the collaborators built at startup."""

from fastapi import Depends, Header, HTTPException, Request

from models.user import User
from services import user_service
from services.places_service import PlacesClient
from services.store import Store
from utils.errors import NotFoundError
from utils.llm_client import LLMClient


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_places_client(request: Request) -> PlacesClient:
    return request.app.state.places


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm


async def get_current_user(
    x_user_email: str | None = Header(default=None),
    store: Store = Depends(get_store),
) -> User:
    """Resolve the caller from the identity header set by the auth gateway."""
    if not x_user_email:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return await user_service.get_user_by_email(store, x_user_email)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
