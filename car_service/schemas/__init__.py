"""Pydantic Schemas: declarative entity structure checked at the API boundary.

Invariants:
    - Schemas describe payload shape only; persistence shape lives in models/
"""
