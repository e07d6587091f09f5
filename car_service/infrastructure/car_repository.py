"""Car Repository: persistence gateway between the car routes and the cars table.

Invariants:
    - create() stores the payload verbatim and returns the generated id as a string
    - find_by_id() returns a list of zero or one cars; unknown or malformed ids give []
    - delete_by_id() is idempotent: a missing id is not an error
    - update_field() overwrites exactly one top-level key of the stored document;
      a missing id gives matched_count == 0, not an error
    - Every store failure, SQLAlchemy error or unreachable store (OSError), is
      rolled back and re-raised as StorageError

Design Decisions:
    - update_field() takes field name and value verbatim unless allowed_fields is
      set: names outside the Car schema are written as-is in the default mode
    - The read-modify-write in update_field() selects the row FOR UPDATE; dialects
      without row locks (SQLite) ignore the clause
"""

import copy
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from car_service.core.errors import BadRequestError, ErrorContext
from car_service.infrastructure.database import to_storage_error
from car_service.models.car import Car as CarModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a single-field update."""
    acknowledged: bool
    matched_count: int
    modified_count: int

    def to_response(self) -> dict:
        return {
            "acknowledged": self.acknowledged,
            "matchedCount": self.matched_count,
            "modifiedCount": self.modified_count,
        }


def _same_value(old: Any, new: Any) -> bool:
    """JSON equality: 1, 1.0 and True are different values."""
    if type(old) is not type(new):
        return False
    if isinstance(old, dict):
        return old.keys() == new.keys() and all(
            _same_value(old[k], new[k]) for k in old
        )
    if isinstance(old, list):
        return len(old) == len(new) and all(
            _same_value(a, b) for a, b in zip(old, new)
        )
    return old == new


def _parse_id(car_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(car_id))
    except ValueError:
        return None


class CarRepository:
    """Create, read, delete and single-field update of stored cars."""

    def __init__(
        self, db: AsyncSession, allowed_fields: frozenset[str] | None = None,
    ):
        self._db = db
        self._allowed_fields = allowed_fields

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncGenerator[None, None]:
        try:
            yield
        except (SQLAlchemyError, OSError) as e:
            await self._db.rollback()
            raise to_storage_error(e, operation) from e

    async def create(self, payload: dict) -> str:
        car = CarModel(id=uuid.uuid4(), document=copy.deepcopy(payload))
        async with self._guard("create"):
            self._db.add(car)
            await self._db.commit()
        logger.info("Car created", extra={"car_id": str(car.id)})
        return str(car.id)

    async def find_all(self) -> list[dict]:
        async with self._guard("find_all"):
            result = await self._db.execute(
                select(CarModel).order_by(CarModel.created_at),
            )
            cars = result.scalars().all()
        return [car.to_api() for car in cars]

    async def find_by_id(self, car_id: str) -> list[dict]:
        key = _parse_id(car_id)
        if key is None:
            return []
        async with self._guard("find_by_id"):
            result = await self._db.execute(
                select(CarModel).where(CarModel.id == key),
            )
            cars = result.scalars().all()
        return [car.to_api() for car in cars]

    async def delete_by_id(self, car_id: str) -> None:
        key = _parse_id(car_id)
        if key is None:
            return
        async with self._guard("delete_by_id"):
            result = await self._db.execute(
                delete(CarModel).where(CarModel.id == key),
            )
            await self._db.commit()
        logger.info(
            "Car delete requested",
            extra={"car_id": car_id, "deleted_count": result.rowcount},
        )

    async def update_field(
        self, car_id: str, field_name: str, field_value: Any,
    ) -> UpdateResult:
        if self._allowed_fields is not None and field_name not in self._allowed_fields:
            raise BadRequestError(
                f'Property "{field_name}" is not an updatable Car property.',
                ErrorContext(car_id=car_id),
            )
        key = _parse_id(car_id)
        if key is None:
            return UpdateResult(acknowledged=True, matched_count=0, modified_count=0)
        async with self._guard("update_field"):
            result = await self._db.execute(
                select(CarModel).where(CarModel.id == key).with_for_update(),
            )
            car = result.scalar_one_or_none()
            if car is None:
                await self._db.rollback()
                return UpdateResult(acknowledged=True, matched_count=0, modified_count=0)
            modified = (
                field_name not in car.document
                or not _same_value(car.document[field_name], field_value)
            )
            if modified:
                # JSON columns only track reassignment, not in-place mutation
                car.document = {**car.document, field_name: field_value}
            await self._db.commit()
        logger.info(
            "Car field updated",
            extra={"car_id": car_id, "field": field_name, "modified": modified},
        )
        return UpdateResult(
            acknowledged=True, matched_count=1, modified_count=int(modified),
        )
