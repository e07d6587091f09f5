"""API Key Gate: shared-secret header check in front of every non-docs route.

Invariants:
    - Paths containing a "docs" segment bypass the check (Swagger UI, OpenAPI JSON)
    - Missing x-api-key -> 403 "Missing header x-api-key."
    - x-api-key not in the configured key set -> 403 "Invalid API key."
    - The key set is a frozenset passed in at construction and never mutated

Design Decisions:
    - Responds directly from dispatch(): exceptions raised in BaseHTTPMiddleware
      never reach the app's exception handlers
"""

import logging
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from car_service.core.errors import AuthorizationError, ErrorContext

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
DOCS_SEGMENT = "docs"


def is_docs_path(path: str) -> bool:
    return DOCS_SEGMENT in path.split("/")


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Reject requests that do not carry one of the configured API keys."""

    def __init__(self, app: ASGIApp, api_keys: frozenset[str]):
        super().__init__(app)
        self.api_keys = frozenset(api_keys)

    def check(self, request: Request) -> None:
        """Raise AuthorizationError unless the request may proceed."""
        path = request.url.path
        if is_docs_path(path):
            return
        api_key = request.headers.get(API_KEY_HEADER)
        if not api_key:
            raise AuthorizationError(
                f"Missing header {API_KEY_HEADER}.", ErrorContext(path=path),
            )
        if api_key not in self.api_keys:
            raise AuthorizationError("Invalid API key.", ErrorContext(path=path))

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            self.check(request)
        except AuthorizationError as exc:
            logger.warning(
                f"Rejected request: {exc.message}",
                extra={"error_code": exc.code, "path": request.url.path},
            )
            return JSONResponse(
                status_code=exc.http_status, content=exc.to_response(),
            )
        return await call_next(request)
