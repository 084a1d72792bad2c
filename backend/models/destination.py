from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

CATEGORIES = (
    "beaches",
    "nature",
    "parks",
    "attractions",
    "temples",
    "waterfalls",
    "hills",
    "camping",
    "museums",
    "restaurants",
    "cafes",
    "other",
)


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class Destination(BaseModel):
    id: str = Field(default_factory=new_id)
    place_id: str
    name: str
    category: str = "other"
    description: str | None = None
    address: str | None = None
    website: str | None = None
    phone_number: str | None = None
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    price_level: int | None = None
    latitude: float
    longitude: float
    photos: list[str] = []
    opening_hours: list[str] = []
    amenities: list[str] = []
    popularity_score: float = 0.0
    last_accessed_at: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v):
        if v not in CATEGORIES:
            return "other"
        return v

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class ScoredDestination(BaseModel):
    destination: Destination
    distance: float | None = None
    score: float = 0.0


class Hotel(BaseModel):
    id: str = Field(default_factory=new_id)
    destination_id: str
    name: str
    price: float
    rating: float | None = None


class Transport(BaseModel):
    id: str = Field(default_factory=new_id)
    destination_id: str
    mode: str
    provider: str | None = None
    price: float
