"""
User model for identity selection.

Users are selected from a list, not authenticated; the model only carries
what the answer pipeline needs to personalise a response.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class User(BaseModel):
    """A known user of the bot."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="User ID")
    name: str = Field(..., description="User display name")
    email: EmailStr = Field(..., description="User email address")
    role: Optional[str] = Field(default="User", description="Role label shown in answers")
    created_at: Optional[datetime] = Field(default=None, description="User creation timestamp")
