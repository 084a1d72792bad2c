"""Record store used by the service layer.

`Store` is the narrow CRUD surface the rest of the backend depends on:
keyed lookups, filtered scans, create, keyed upsert, keyed update and
delete. Each call is atomic. `InMemoryStore` is the bundled implementation;
a relational backend only has to provide the same six coroutines.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from models.destination import Destination, Hotel, Transport
from models.user import Favorite, User, UserSurvey, Visit
from utils.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]


@dataclass(frozen=True)
class TableSpec:
    model: type[BaseModel]
    unique: tuple[tuple[str, ...], ...] = (("id",),)


SCHEMA: dict[str, TableSpec] = {
    "destinations": TableSpec(Destination, (("id",), ("place_id",))),
    "users": TableSpec(User, (("id",), ("email",))),
    "surveys": TableSpec(UserSurvey, (("id",), ("user_id",))),
    "favorites": TableSpec(Favorite, (("id",), ("user_id", "destination_id"))),
    "visits": TableSpec(Visit),
    "hotels": TableSpec(Hotel),
    "transports": TableSpec(Transport),
}


class Store(ABC):
    @abstractmethod
    async def find_unique(self, table: str, where: dict) -> Any | None:
        raise NotImplementedError

    @abstractmethod
    async def find_many(
        self,
        table: str,
        where: dict | None = None,
        predicate: Predicate | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list:
        raise NotImplementedError

    @abstractmethod
    async def create(self, table: str, data: dict) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def upsert(self, table: str, where: dict, create: dict, update: dict) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def update(self, table: str, where: dict, data: dict) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def delete_many(self, table: str, where: dict) -> int:
        raise NotImplementedError


def _matches(record: BaseModel, where: dict | None) -> bool:
    if not where:
        return True
    return all(getattr(record, k) == v for k, v in where.items())


class InMemoryStore(Store):
    """Dict-backed store. Records are copied in and out so callers never share state."""

    def __init__(self, schema: dict[str, TableSpec] | None = None):
        self._schema = schema or SCHEMA
        self._rows: dict[str, dict[str, BaseModel]] = {name: {} for name in self._schema}

    def _table(self, table: str) -> dict[str, BaseModel]:
        if table not in self._rows:
            raise KeyError(f"Unknown table: {table}")
        return self._rows[table]

    def _first(self, table: str, where: dict) -> BaseModel | None:
        return next((r for r in self._table(table).values() if _matches(r, where)), None)

    def _check_unique(self, table: str, record: BaseModel) -> None:
        for key in self._schema[table].unique:
            values = {k: getattr(record, k) for k in key}
            clash = self._first(table, values)
            if clash is not None and clash.id != record.id:
                raise ConflictError(f"{table} already has a record with {values}")

    def _insert(self, table: str, data: dict) -> BaseModel:
        record = self._schema[table].model(**data)
        self._check_unique(table, record)
        self._table(table)[record.id] = record
        return record

    def _replace(self, table: str, current: BaseModel, data: dict) -> BaseModel:
        record = self._schema[table].model(**{**current.model_dump(), **data, "id": current.id})
        self._check_unique(table, record)
        self._table(table)[record.id] = record
        return record

    async def find_unique(self, table, where):
        record = self._first(table, where)
        return record.model_copy(deep=True) if record is not None else None

    async def find_many(self, table, where=None, predicate=None, order_by=None,
                        descending=False, limit=None):
        rows = [
            r for r in self._table(table).values()
            if _matches(r, where) and (predicate is None or predicate(r))
        ]
        if order_by:
            rows.sort(key=lambda r: getattr(r, order_by), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return [r.model_copy(deep=True) for r in rows]

    async def create(self, table, data):
        return self._insert(table, data).model_copy(deep=True)

    async def upsert(self, table, where, create, update):
        current = self._first(table, where)
        if current is None:
            record = self._insert(table, {**where, **create})
            logger.debug("Created %s record %s", table, record.id)
        else:
            record = self._replace(table, current, update)
        return record.model_copy(deep=True)

    async def update(self, table, where, data):
        current = self._first(table, where)
        if current is None:
            raise NotFoundError(f"No {table} record matches {where}")
        return self._replace(table, current, data).model_copy(deep=True)

    async def delete_many(self, table, where):
        rows = self._table(table)
        doomed = [rid for rid, r in rows.items() if _matches(r, where)]
        for rid in doomed:
            del rows[rid]
        return len(doomed)
