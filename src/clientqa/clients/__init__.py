"""External service clients."""

from .model_client import (
    GenerativeModelClient,
    ModelError,
    ModelResponseError,
    ModelTimeoutError,
)
from .sqlite_client import SQLiteClient

__all__ = [
    "GenerativeModelClient",
    "ModelError",
    "ModelResponseError",
    "ModelTimeoutError",
    "SQLiteClient",
]
