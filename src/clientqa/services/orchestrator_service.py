"""
Answer orchestrator.

Runs one query through the pipeline in a single pass:

    input safety check -> model attempt (when configured) -> output safety check
                       -> heuristic fallback (free tier or model failure)

Every path ends in a `QueryResult` with a non-empty answer; failures are
reported through the envelope, never raised.
"""

from typing import Any, Dict, Optional, Sequence
import structlog

from clientqa.clients.model_client import ModelError
from clientqa.config.settings import AssistantConfig
from clientqa.models.client import Client
from clientqa.models.result import INVALID_ANSWER, AnswerSource, QueryResult
from clientqa.models.user import User
from clientqa.services.heuristic_service import HeuristicAnswerEngine
from clientqa.services.model_service import ModelService
from clientqa.services.safety_service import SafetyFilter

logger = structlog.get_logger(__name__)


class AnswerOrchestrator:
    """Chooses between the model path and the heuristic path for each query."""

    def __init__(
        self,
        config: AssistantConfig,
        safety_filter: SafetyFilter,
        heuristic_engine: HeuristicAnswerEngine,
        model_service: Optional[ModelService] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Immutable assistant configuration, fixed at startup
            safety_filter: Classifier for queries and model answers
            heuristic_engine: Rule-based fallback engine
            model_service: Model adapter; ignored in free-tier mode
        """
        self.config = config
        self.safety_filter = safety_filter
        self.heuristic_engine = heuristic_engine
        self.model_service = None if config.free_tier else model_service

        logger.info("Answer orchestrator initialized", mode=self.mode)

    @property
    def mode(self) -> str:
        return "free_tier" if self.model_service is None else "model"

    async def answer(self, query: str, user: User, clients: Sequence[Client]) -> QueryResult:
        """Answer one query for one user's scoped clients."""
        try:
            return await self._answer(query, user, clients)
        except Exception as e:
            logger.error("Answer pipeline failed", error=str(e), error_type=type(e).__name__)
            return self._result(
                query,
                user,
                clients,
                self.heuristic_engine.answer(query, user, clients),
                AnswerSource.FALLBACK,
                error=str(e) or type(e).__name__,
            )

    async def _answer(self, query: str, user: User, clients: Sequence[Client]) -> QueryResult:
        if self.safety_filter.is_threat(query):
            logger.info("Query rejected by safety filter", user=user.name)
            return self._result(query, user, clients, INVALID_ANSWER, AnswerSource.FILTERED)

        if self.model_service is None:
            answer = self.heuristic_engine.answer(query, user, clients)
            return self._result(query, user, clients, answer, AnswerSource.FREE_TIER)

        try:
            text = await self.model_service.invoke(query, user, clients)
        except ModelError as e:
            logger.warning("Model unavailable, using heuristic engine", error=str(e))
            answer = self.heuristic_engine.answer(query, user, clients)
            return self._result(query, user, clients, answer, AnswerSource.FALLBACK, error=str(e))

        if self.safety_filter.is_response_suspicious(text):
            logger.warning("Model answer rejected by safety filter", user=user.name)
            return self._result(query, user, clients, INVALID_ANSWER, AnswerSource.FILTERED)

        return self._result(query, user, clients, text, AnswerSource.MODEL)

    @staticmethod
    def _result(
        query: str,
        user: User,
        clients: Sequence[Client],
        answer: str,
        source: AnswerSource,
        error: Optional[str] = None,
    ) -> QueryResult:
        logger.info(
            "Query answered",
            source=source.value,
            client_count=len(clients),
            has_error=error is not None,
        )
        return QueryResult(
            query=query,
            user=user.name,
            client_count=len(clients),
            answer=answer,
            model_used=source is AnswerSource.MODEL,
            error=error,
            source=source,
        )

    async def test_connection(self) -> Dict[str, Any]:
        """Check the configured answer path."""
        if self.model_service is None:
            return {
                "success": True,
                "message": "Using heuristic free tier responses",
                "mode": "Free Tier",
            }

        try:
            text = await self.model_service.model_client.ping()
            return {
                "success": True,
                "message": "Model connection successful",
                "response": text,
            }
        except Exception as e:
            logger.error("Model connection test failed", error=str(e))
            return {
                "success": False,
                "error": str(e),
            }
