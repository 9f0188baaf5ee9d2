"""
Client and access grant models.

This module defines the client records users ask about and the grants that
decide which user may see which client.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ClientStatus(str, Enum):
    """Client status enumeration."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class AccessLevel(str, Enum):
    """Access level attached to a user/client grant."""

    READ = "read"
    FULL = "full"


class Client(BaseModel):
    """Client record, optionally joined with the viewing user's grant."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: int = Field(..., description="Client ID")
    name: str = Field(..., description="Client name")
    email: Optional[str] = Field(default=None, description="Client email address")
    phone: Optional[str] = Field(default=None, description="Client phone number")
    company: Optional[str] = Field(default=None, description="Company name")
    industry: Optional[str] = Field(default=None, description="Industry")
    status: ClientStatus = Field(default=ClientStatus.ACTIVE, validate_default=True, description="Client status")
    value: Optional[int] = Field(default=0, ge=0, description="Client value in dollars")
    created_at: Optional[datetime] = Field(default=None, description="Client creation timestamp")
    last_contact: Optional[datetime] = Field(default=None, description="Last contact timestamp")

    # Grant information, present when loaded for a specific user
    access_level: Optional[AccessLevel] = Field(default=None, description="Viewing user's access level")
    assigned_at: Optional[datetime] = Field(default=None, description="When access was granted")

    @property
    def is_active(self) -> bool:
        return self.status == ClientStatus.ACTIVE.value


class AccessGrant(BaseModel):
    """Many-to-many grant between a user and a client."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    user_id: int = Field(..., description="User ID")
    client_id: int = Field(..., description="Client ID")
    access_level: AccessLevel = Field(default=AccessLevel.READ, validate_default=True, description="Access level")
    assigned_at: Optional[datetime] = Field(default=None, description="Grant timestamp")
