"""Infrastructure Layer: database access, persistence gateway, logging.

Invariants:
    - Infrastructure never imports from api/
    - All store failures surface as StorageError
"""
