from models.destination import Coordinate, Destination
from models.user import Favorite, User, UserSurvey, Visit
from services.store import Store
from utils.errors import ConflictError, NotFoundError


async def get_user_by_email(store: Store, email: str) -> User:
    user = await store.find_unique("users", {"email": email})
    if user is None:
        raise NotFoundError("User not found")
    return user


async def set_location(store: Store, user: User, location: Coordinate) -> User:
    return await store.update("users", {"id": user.id}, {"location": location})


async def get_survey(store: Store, user: User) -> UserSurvey | None:
    return await store.find_unique("surveys", {"user_id": user.id})


async def save_survey(store: Store, user: User, answers: dict) -> UserSurvey:
    # Normalise through the model so stored values are lower-cased and de-duplicated
    survey = UserSurvey(user_id=user.id, **answers)
    fields = survey.model_dump(include={"interests", "budget", "travel_style", "preferred_categories"})
    return await store.upsert("surveys", {"user_id": user.id}, create=fields, update=fields)


async def _require_destination(store: Store, destination_id: str) -> Destination:
    destination = await store.find_unique("destinations", {"id": destination_id})
    if destination is None:
        raise NotFoundError("Destination not found")
    return destination


async def list_favorites(store: Store, user: User) -> list[tuple[Favorite, Destination | None]]:
    favorites = await store.find_many(
        "favorites", {"user_id": user.id}, order_by="created_at", descending=True,
    )
    return [
        (f, await store.find_unique("destinations", {"id": f.destination_id}))
        for f in favorites
    ]


async def add_favorite(store: Store, user: User, destination_id: str) -> Favorite:
    await _require_destination(store, destination_id)
    try:
        return await store.create("favorites", {"user_id": user.id, "destination_id": destination_id})
    except ConflictError as e:
        raise ConflictError("Already favorited") from e


async def remove_favorite(store: Store, user: User, destination_id: str) -> int:
    return await store.delete_many("favorites", {"user_id": user.id, "destination_id": destination_id})


async def list_visits(store: Store, user: User) -> list[tuple[Visit, Destination | None]]:
    visits = await store.find_many(
        "visits", {"user_id": user.id}, order_by="visited_at", descending=True,
    )
    return [
        (v, await store.find_unique("destinations", {"id": v.destination_id}))
        for v in visits
    ]


async def add_visit(store: Store, user: User, destination_id: str, notes: str | None = None) -> Visit:
    await _require_destination(store, destination_id)
    return await store.create(
        "visits", {"user_id": user.id, "destination_id": destination_id, "notes": notes},
    )


async def user_stats(store: Store, user: User) -> dict:
    favorites = await store.find_many("favorites", {"user_id": user.id})
    visits = await store.find_many("visits", {"user_id": user.id})
    return {"favorites": len(favorites), "visits": len(visits)}
