"""Repositories for the SQLite access store."""

from .access_repository import AccessRepository, UserNotFoundError

__all__ = ["AccessRepository", "UserNotFoundError"]
