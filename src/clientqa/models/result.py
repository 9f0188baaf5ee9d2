"""
Result models for answered queries.

`QueryResult` is the envelope returned to callers. Its JSON form is
field-exact: query, user, clientCount, answer, modelUsed, error.
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


INVALID_ANSWER = "INVALID"


class AnswerSource(str, Enum):
    """Which path of the pipeline produced an answer."""

    FILTERED = "filtered"
    MODEL = "model"
    FALLBACK = "fallback"
    FREE_TIER = "free_tier"


class QueryResult(BaseModel):
    """Answer envelope, created once per query."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    query: str = Field(..., description="Original query text")
    user: str = Field(..., description="Resolved user display name")
    client_count: int = Field(..., alias="clientCount", ge=0, description="Clients in scope")
    answer: str = Field(..., min_length=1, description="Answer text")
    model_used: bool = Field(default=False, alias="modelUsed", description="Whether the model produced the answer")
    error: Optional[str] = Field(default=None, description="Failure detail when the model path failed")

    # Not part of the serialized envelope
    source: AnswerSource = Field(default=AnswerSource.FREE_TIER, exclude=True)

    def to_envelope(self) -> Dict[str, Any]:
        """Serialize with the public camelCase field names."""
        return self.model_dump(by_alias=True)
