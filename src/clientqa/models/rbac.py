"""
Access scope models.

A `ClientScope` is the only client data the answer pipeline ever sees: the
ordered clients one user is granted, resolved for one query.
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, model_validator

from clientqa.models.client import AccessGrant, Client
from clientqa.models.user import User


class ClientScope(BaseModel):
    """Clients visible to one user for one query."""

    model_config = ConfigDict(frozen=True)

    user: User = Field(..., description="User the scope was resolved for")
    clients: List[Client] = Field(default_factory=list, description="Visible clients, ordered by name")
    grants: List[AccessGrant] = Field(default_factory=list, description="Grants backing the clients")

    @model_validator(mode="after")
    def check_grants(self) -> "ClientScope":
        """Every client in scope must be backed by a grant for this user."""
        if not self.grants:
            return self
        granted = {g.client_id for g in self.grants if g.user_id == self.user.id}
        missing = [c.id for c in self.clients if c.id not in granted]
        if missing:
            raise ValueError(f"Clients {missing} have no grant for user {self.user.id}")
        return self
