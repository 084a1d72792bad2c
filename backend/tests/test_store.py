import pytest

from conftest import run
from services.store import InMemoryStore
from utils.errors import ConflictError, NotFoundError


def test_create_and_find_unique(store):
    created = run(store.create("destinations", {"place_id": "p1", "name": "Fort", "latitude": 1, "longitude": 2}))
    found = run(store.find_unique("destinations", {"place_id": "p1"}))
    assert found == created
    assert run(store.find_unique("destinations", {"place_id": "missing"})) is None


def test_unique_constraint_raises_conflict(store):
    run(store.create("favorites", {"user_id": "u1", "destination_id": "d1"}))
    with pytest.raises(ConflictError):
        run(store.create("favorites", {"user_id": "u1", "destination_id": "d1"}))


def test_upsert_creates_then_updates(store):
    first = run(store.upsert("surveys", {"user_id": "u1"},
                             create={"interests": ["food"]}, update={"interests": ["food"]}))
    second = run(store.upsert("surveys", {"user_id": "u1"},
                              create={"interests": ["hiking"]}, update={"interests": ["hiking"]}))
    assert first.id == second.id
    assert second.interests == ["hiking"]
    assert len(run(store.find_many("surveys"))) == 1


def test_update_missing_raises_not_found(store):
    with pytest.raises(NotFoundError):
        run(store.update("users", {"id": "nope"}, {"name": "x"}))


def test_find_many_ordering_and_limit(store):
    for price in (30, 10, 20):
        run(store.create("hotels", {"destination_id": "d1", "name": f"H{price}", "price": price}))
    run(store.create("hotels", {"destination_id": "d2", "name": "Other", "price": 1}))

    cheapest = run(store.find_many("hotels", {"destination_id": "d1"}, order_by="price", limit=2))
    assert [h.price for h in cheapest] == [10, 20]


def test_returned_records_are_copies(store):
    created = run(store.create("destinations", {"place_id": "p1", "name": "Fort", "latitude": 1, "longitude": 2}))
    created.photos.append("mutated")
    stored = run(store.find_unique("destinations", {"id": created.id}))
    assert stored.photos == []


def test_delete_many_counts(store):
    run(store.create("visits", {"user_id": "u1", "destination_id": "d1"}))
    run(store.create("visits", {"user_id": "u1", "destination_id": "d1"}))
    assert run(store.delete_many("visits", {"user_id": "u1"})) == 2
    assert run(store.delete_many("visits", {"user_id": "u1"})) == 0


def test_unknown_table():
    with pytest.raises(KeyError):
        run(InMemoryStore().find_many("nope"))
