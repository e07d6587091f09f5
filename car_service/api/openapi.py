"""OpenAPI Document: Car/Manufacturer component schemas and the API key scheme.

Invariants:
    - Component schemas are generated from the same Pydantic models the
      validator compiles (schemas/car.py), under their wire (alias) names
    - ApiKeyAuth (header x-api-key) applies to every operation
    - The document is built once and cached on app.openapi_schema
"""

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic.json_schema import models_json_schema

from car_service.schemas.car import Car, Manufacturer

TITLE = "Car Management"
DESCRIPTION = "A Car Management system API"
VERSION = "1.0.0"


def component_schemas() -> dict:
    _, top = models_json_schema(
        [(Manufacturer, "validation"), (Car, "validation")],
        ref_template="#/components/schemas/{model}",
    )
    return top["$defs"]


def install_openapi(app: FastAPI) -> None:
    """Replace app.openapi with a generator that adds our components."""

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=TITLE,
            version=VERSION,
            description=DESCRIPTION,
            routes=app.routes,
        )
        components = schema.setdefault("components", {})
        components.setdefault("schemas", {}).update(component_schemas())
        components["securitySchemes"] = {
            "ApiKeyAuth": {"type": "apiKey", "in": "header", "name": "x-api-key"},
        }
        schema["security"] = [{"ApiKeyAuth": []}]
        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi
