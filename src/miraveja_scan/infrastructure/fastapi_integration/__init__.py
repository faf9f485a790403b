"""
FastAPI integration module.

Provides helpers for resolving scanned services inside FastAPI applications.
"""

from .integration import (
    ScopedContainerMiddleware,
    create_fastapi_collection_dependency,
    create_fastapi_dependency,
    create_scoped_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_fastapi_collection_dependency",
    "create_scoped_dependency",
    "ScopedContainerMiddleware",
]
