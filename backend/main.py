import logging

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from config import settings
from routers import chat, destinations, health, notifications, recommendations, search, user
from services.cache_service import TTLCache
from services.places_service import PlacesClient
from services.store import InMemoryStore
from utils.llm_client import LLMClient

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

app = FastAPI(title="WanderHub", version="0.1.0")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(search.router)
app.include_router(destinations.router)
app.include_router(notifications.router)
app.include_router(recommendations.router)
app.include_router(chat.router)
app.include_router(user.router)


@app.get("/")
async def root():
    return {
        "name": "WanderHub API",
        "version": "0.1.0",
        "endpoints": ["/health", "/search", "/destinations", "/notifications",
                      "/recommendations", "/chat", "/travel-guide", "/user"],
    }


@app.on_event("startup")
async def startup():
    http = httpx.AsyncClient(
        timeout=settings.llm_timeout,
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
    )
    app.state.http = http
    app.state.store = InMemoryStore()
    app.state.places = PlacesClient(
        http,
        api_key=settings.google_places_api_key,
        base_url=settings.places_base_url,
        cache=TTLCache(ttl=settings.cache_ttl_seconds),
    )
    app.state.llm = LLMClient(
        http,
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        model=settings.default_model,
        fallback_model=settings.fallback_model,
    )
    if not settings.google_places_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY not configured; search will fall back to stored data")
    logger.info("WanderHub API is running")


@app.on_event("shutdown")
async def shutdown():
    http = getattr(app.state, "http", None)
    if http is not None:
        await http.aclose()
