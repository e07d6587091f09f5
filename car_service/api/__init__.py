"""API Layer: FastAPI routes, middleware, error handlers and OpenAPI document.

Invariants:
    - Routes registered explicitly in main.create_app (no auto-discovery)
    - All endpoints return structured JSON responses
"""
