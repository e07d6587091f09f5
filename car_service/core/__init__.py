"""Core Layer: errors and schema validation, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from api/, infrastructure/, or db/
"""
