"""Car Routes: create, list, fetch, delete and single-field update of cars.

Invariants:
    - create validates the body before any write; invalid -> 400 with issue list
    - update checks propertyName/propertyValue before any write; missing -> 400
    - delete checks the id and stops with 400 when it is missing
    - find routes always answer {"cars": [...]}, possibly empty
    - StorageError propagates to the global handler (500, message kept)

Design Decisions:
    - Bodies are read raw and checked by the compiled SchemaValidator, not bound
      to a Pydantic parameter, so the 400 envelope carries our own issue list
    - Validator and update allow-list come from app.state (built once in create_app)
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from car_service.core.errors import BadRequestError, ErrorContext, ValidationError
from car_service.core.schema_validator import SchemaValidator
from car_service.infrastructure.car_repository import CarRepository
from car_service.infrastructure.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/car", tags=["cars"])

_CAR_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {"$ref": "#/components/schemas/Car"},
            },
        },
    },
}

_UPDATE_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": ["propertyName", "propertyValue"],
                    "properties": {
                        "propertyName": {"type": "string"},
                        "propertyValue": {},
                    },
                },
            },
        },
    },
}


def get_car_validator(request: Request) -> SchemaValidator:
    return request.app.state.car_validator


async def get_car_repository(
    request: Request, db: AsyncSession = Depends(get_db),
) -> CarRepository:
    return CarRepository(
        db, allowed_fields=request.app.state.update_allowed_fields,
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


async def _read_json(request: Request) -> Any:
    """Decoded JSON body, or None when the body is empty."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        raise BadRequestError(
            "Malformed JSON request body.", ErrorContext(path=request.url.path),
        )


def _require_id(car_id: str, path: str) -> None:
    if not car_id or not car_id.strip():
        raise BadRequestError(
            'Missing mandatory path parameter "id".', ErrorContext(path=path),
        )


def _parse_update_body(body: Any, car_id: str) -> tuple[str, Any]:
    """Extract (propertyName, propertyValue) or raise BadRequestError."""
    if body is None:
        raise BadRequestError(
            "Missing mandatory request body.", ErrorContext(car_id=car_id),
        )
    if not isinstance(body, dict):
        raise BadRequestError(
            "Invalid request Body, expected a JSON object.",
            ErrorContext(car_id=car_id),
        )
    prop_name = body.get("propertyName")
    prop_value = body.get("propertyValue")
    if not prop_name or prop_value is None:
        raise BadRequestError(
            "Invalid request Body, Missing mandatory properties "
            "[propertyName or propertyValue].",
            ErrorContext(car_id=car_id),
        )
    if not isinstance(prop_name, str):
        raise BadRequestError(
            "Invalid request Body, propertyName must be a string.",
            ErrorContext(car_id=car_id),
        )
    return prop_name, prop_value


@router.post(
    "/create",
    description="Create new car",
    openapi_extra=_CAR_BODY,
    responses={400: {"description": "Bad Request"}},
)
async def create_car(
    request: Request,
    validator: SchemaValidator = Depends(get_car_validator),
    repo: CarRepository = Depends(get_car_repository),
):
    """Validate the body against the Car schema, then store it."""
    car_data = await _read_json(request)
    result = validator.validate(car_data)
    if not result.valid:
        issues = [issue.to_dict() for issue in result.errors]
        logger.warning(
            "Car payload rejected", extra={"issues": issues},
        )
        raise ValidationError(issues, ErrorContext(path=request.url.path))
    car_id = await repo.create(car_data)
    return {"carId": car_id}


@router.get(
    "/all",
    description="Get all cars",
    responses={500: {"description": "Internal server error"}},
)
async def get_all_cars(repo: CarRepository = Depends(get_car_repository)):
    return {"cars": await repo.find_all()}


@router.get(
    "/{car_id}",
    description="Get car via its id",
    responses={500: {"description": "Internal server error"}},
)
async def get_car(
    car_id: str, request: Request,
    repo: CarRepository = Depends(get_car_repository),
):
    """Zero-or-one element list; an unknown id is not a 404."""
    _require_id(car_id, request.url.path)
    return {"cars": await repo.find_by_id(car_id)}


@router.delete(
    "/{car_id}/delete",
    description="Delete a car",
    responses={500: {"description": "Internal server error"}},
)
async def delete_car(
    car_id: str, request: Request,
    repo: CarRepository = Depends(get_car_repository),
):
    _require_id(car_id, request.url.path)
    await repo.delete_by_id(car_id)
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/{car_id}/update",
    description="Overwrite a single property of a car",
    openapi_extra=_UPDATE_BODY,
    responses={
        400: {"description": "Bad Request"},
        500: {"description": "Internal server error"},
    },
)
async def update_car(
    car_id: str, request: Request,
    repo: CarRepository = Depends(get_car_repository),
):
    _require_id(car_id, request.url.path)
    body = await _read_json(request)
    prop_name, prop_value = _parse_update_body(body, car_id)
    logger.info(
        "Updating car property",
        extra={"car_id": car_id, "property": prop_name},
    )
    result = await repo.update_field(car_id, prop_name, prop_value)
    return result.to_response()
