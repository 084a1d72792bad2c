"""Records returned by the Google Places web service (legacy JSON API)."""

from pydantic import BaseModel


class PlaceResult(BaseModel):
    place_id: str
    name: str
    latitude: float
    longitude: float
    formatted_address: str | None = None
    rating: float | None = None
    price_level: int | None = None
    photo_references: list[str] | None = None
    types: list[str] = []

    @classmethod
    def from_api(cls, raw: dict) -> "PlaceResult":
        location = raw["geometry"]["location"]
        photos = raw.get("photos")
        return cls(
            place_id=raw["place_id"],
            name=raw["name"],
            latitude=location["lat"],
            longitude=location["lng"],
            formatted_address=raw.get("formatted_address"),
            rating=raw.get("rating"),
            price_level=raw.get("price_level"),
            photo_references=(
                [p["photo_reference"] for p in photos if p.get("photo_reference")]
                if photos is not None else None
            ),
            types=raw.get("types") or [],
        )


class PlaceReview(BaseModel):
    author_name: str = ""
    rating: float = 0
    text: str = ""
    time: int = 0


class PlaceDetails(PlaceResult):
    overview: str | None = None
    website: str | None = None
    phone_number: str | None = None
    opening_hours: list[str] | None = None
    reviews: list[PlaceReview] = []

    @classmethod
    def from_api(cls, raw: dict) -> "PlaceDetails":
        base = PlaceResult.from_api(raw)
        # Optional sections with an unexpected shape are dropped, not fatal
        summary = _section(raw, "editorial_summary")
        hours = _section(raw, "opening_hours")
        reviews = raw.get("reviews")
        return cls(
            **base.model_dump(),
            overview=summary.get("overview"),
            website=raw.get("website"),
            phone_number=raw.get("formatted_phone_number"),
            opening_hours=hours.get("weekday_text"),
            reviews=[
                PlaceReview(**r) for r in reviews if isinstance(r, dict)
            ] if isinstance(reviews, list) else [],
        )


def _section(raw: dict, key: str) -> dict:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}
