"""Data models."""

from .client import AccessGrant, AccessLevel, Client, ClientStatus
from .rbac import ClientScope
from .result import INVALID_ANSWER, AnswerSource, QueryResult
from .user import User

__all__ = [
    "AccessGrant",
    "AccessLevel",
    "Client",
    "ClientStatus",
    "ClientScope",
    "INVALID_ANSWER",
    "AnswerSource",
    "QueryResult",
    "User",
]
