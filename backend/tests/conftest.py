import asyncio
import math
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from main import app
from models.destination import Coordinate
from models.places import PlaceDetails, PlaceResult
from routers.dependencies import get_llm_client, get_places_client, get_store
from services.store import InMemoryStore
from utils.errors import PlaceNotFoundError

DELHI = Coordinate(latitude=28.6139, longitude=77.2090)
KM_PER_DEGREE_LAT = 6371.0 * math.pi / 180


def north_of(origin: Coordinate, km: float) -> dict:
    """Latitude/longitude fields for a point `km` due north of origin."""
    return {"latitude": origin.latitude + km / KM_PER_DEGREE_LAT, "longitude": origin.longitude}


def make_place(place_id: str = "p1", **overrides) -> PlaceResult:
    fields = {
        "place_id": place_id,
        "name": f"Place {place_id}",
        "latitude": DELHI.latitude,
        "longitude": DELHI.longitude,
        "formatted_address": "Somewhere, Delhi",
        "rating": 4.2,
        "price_level": 2,
        "photo_references": ["ref-a", "ref-b"],
        "types": ["tourist_attraction", "point_of_interest"],
    }
    fields.update(overrides)
    return PlaceResult(**fields)


class FakePlacesClient:
    def __init__(self):
        self.results: list[PlaceResult] = []
        self.details: dict[str, PlaceDetails] = {}
        self.search_error: Exception | None = None
        self.details_error: Exception | None = None
        self.search_calls = []
        self.detail_calls = []

    async def search_places(self, query, location=None, radius=None):
        self.search_calls.append((query, location, radius))
        if self.search_error:
            raise self.search_error
        return list(self.results)

    async def get_place_details(self, place_id):
        self.detail_calls.append(place_id)
        if self.details_error:
            raise self.details_error
        if place_id not in self.details:
            raise PlaceNotFoundError(place_id)
        return self.details[place_id]

    def photo_url(self, photo_reference, max_width=800):
        return f"https://photos.test/{photo_reference}?w={max_width}"

    def cache_stats(self):
        return None


class FakeLLM:
    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def chat_completion_with_history(self, messages, temperature=0.7, max_tokens=1024, retry=True):
        self.calls.append({"messages": messages, "retry": retry})
        if self.error:
            raise self.error
        return self.reply

    async def chat_completion(self, prompt, system="", temperature=0.7, max_tokens=1024, retry=True):
        messages = ([{"role": "system", "content": system}] if system else [])
        messages.append({"role": "user", "content": prompt})
        return await self.chat_completion_with_history(messages, temperature, max_tokens, retry)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def places():
    return FakePlacesClient()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def client(store, places, llm):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_places_client] = lambda: places
    app.dependency_overrides[get_llm_client] = lambda: llm
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(store):
    return run(store.create("users", {"email": "traveler@example.com", "name": "Traveler"}))


@pytest.fixture
def auth_headers(user):
    return {"X-User-Email": user.email}


def seed_destination(store, place_id: str, **fields):
    data = {"place_id": place_id, "name": fields.pop("name", place_id), **fields}
    return run(store.create("destinations", data))
