"""
Query routes.

Users pick an identity from the user list; each query is answered against the
clients that user is granted, and nothing else.
"""

from typing import Any, Dict, Optional
import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from clientqa.repositories.access_repository import AccessRepository, UserNotFoundError
from clientqa.routes.health import get_orchestrator
from clientqa.services.orchestrator_service import AnswerOrchestrator
from clientqa.services.privacy_service import redact_clients

logger = structlog.get_logger(__name__)

router = APIRouter()


class QueryRequest(BaseModel):
    """Body of a query request."""

    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = Field(default=None, description="Natural-language question")
    user_id: Optional[int] = Field(default=None, alias="userId", description="Selected user ID")


class ApiResponse(BaseModel):
    """Success envelope shared by all data routes."""

    success: bool = True
    data: Any = None


def get_access_repository() -> AccessRepository:
    """Get the access repository from application state."""
    from clientqa.app import app_state

    repository = getattr(app_state, "access_repository", None)
    if not repository:
        raise HTTPException(status_code=503, detail="Access store not available")
    return repository


@router.get("/users", response_model=ApiResponse)
async def list_users(repository: AccessRepository = Depends(get_access_repository)) -> ApiResponse:
    """List the users available for identity selection."""
    users = await repository.list_users()
    return ApiResponse(data=[u.model_dump(mode="json") for u in users])


@router.get("/clients/{user_id}", response_model=ApiResponse)
async def list_clients(
    user_id: int,
    repository: AccessRepository = Depends(get_access_repository),
) -> ApiResponse:
    """List the clients a user may see, with contact details masked."""
    try:
        clients = await repository.list_accessible_clients(user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")

    return ApiResponse(data=[c.model_dump(mode="json") for c in redact_clients(clients)])


@router.get("/clients/{user_id}/search", response_model=ApiResponse)
async def search_clients(
    user_id: int,
    term: str = "",
    repository: AccessRepository = Depends(get_access_repository),
) -> ApiResponse:
    """Search a user's clients by name, email or company."""
    try:
        clients = await repository.search_clients(user_id, term.strip())
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info("Client search completed", user_id=user_id, matches=len(clients))
    return ApiResponse(data=[c.model_dump(mode="json") for c in redact_clients(clients)])


@router.post("/query", response_model=ApiResponse)
async def answer_query(
    request_data: QueryRequest,
    repository: AccessRepository = Depends(get_access_repository),
    orchestrator: AnswerOrchestrator = Depends(get_orchestrator),
) -> ApiResponse:
    """Answer a natural-language question about the selected user's clients."""
    if not request_data.query or not request_data.query.strip():
        raise HTTPException(status_code=400, detail="Query is required and must be a string")
    if request_data.user_id is None:
        raise HTTPException(status_code=400, detail="User ID is required")

    try:
        scope = await repository.get_scope(request_data.user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(
        "Processing query",
        user_id=scope.user.id,
        client_count=len(scope.clients),
        query_length=len(request_data.query),
    )

    result = await orchestrator.answer(request_data.query, scope.user, scope.clients)
    envelope: Dict[str, Any] = result.to_envelope()
    return ApiResponse(data=envelope)
