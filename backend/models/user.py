from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from models.destination import Coordinate, new_id, utcnow

Budget = Literal["low", "medium", "high", "luxury"]
TravelStyle = Literal["solo", "couple", "family", "group"]


def _unique(values: list[str]) -> list[str]:
    seen = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


class User(BaseModel):
    id: str = Field(default_factory=new_id)
    email: str
    name: str | None = None
    location: Coordinate | None = None


class UserSurvey(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    interests: list[str] = []
    budget: Budget = "medium"
    travel_style: TravelStyle = "solo"
    preferred_categories: list[str] = []

    @field_validator("interests", mode="before")
    @classmethod
    def normalize_interests(cls, v):
        if isinstance(v, list):
            return _unique([str(i).strip().lower() for i in v])
        return v

    @field_validator("preferred_categories", mode="before")
    @classmethod
    def normalize_categories(cls, v):
        if isinstance(v, list):
            return _unique([str(c).strip() for c in v])
        return v


class Favorite(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    destination_id: str
    created_at: datetime = Field(default_factory=utcnow)


class Visit(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    destination_id: str
    notes: str | None = None
    visited_at: datetime = Field(default_factory=utcnow)
