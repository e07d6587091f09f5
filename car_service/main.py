"""Car Management API: FastAPI application factory.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Every non-docs route sits behind ApiKeyMiddleware
    - Compiled Car validator, API key set and update allow-list are built once
      per app from Settings and never mutated
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - create_app(settings) factory over a module-level app: configuration is
      passed in explicitly (run with `uvicorn car_service.main:create_app --factory`
      or `python -m car_service`)
    - Swagger UI at /docs and the OpenAPI JSON at /docs/openapi.json so both
      fall under the gate's docs bypass
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from car_service.api.error_handlers import register_error_handlers
from car_service.api.middleware.api_key import ApiKeyMiddleware
from car_service.api.openapi import DESCRIPTION, TITLE, VERSION, install_openapi
from car_service.api.routes import cars
from car_service.config import Settings, get_settings
from car_service.core.schema_validator import compile_schema
from car_service.infrastructure.database import init_db
from car_service.infrastructure.observability import setup_logging
from car_service.schemas.car import Car, top_level_fields

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        manager = init_db(
            settings.sqlalchemy_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        logger.info(
            f"Car Management API started on http://{settings.host}:{settings.port}",
        )
        yield
        await manager.dispose()
        logger.info("Car Management API shutting down")

    app = FastAPI(
        title=TITLE,
        description=DESCRIPTION,
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        openapi_url="/docs/openapi.json",
        redoc_url=None,
    )

    app.state.car_validator = compile_schema(Car)
    app.state.update_allowed_fields = (
        top_level_fields(Car) if settings.update_allowed_fields_only else None
    )

    # Last added runs first: CORS wraps the gate
    app.add_middleware(ApiKeyMiddleware, api_keys=settings.api_key_set)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(cars.router)
    register_error_handlers(app)
    install_openapi(app)
    return app
