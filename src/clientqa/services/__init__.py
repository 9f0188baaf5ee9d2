"""Answer pipeline services."""

from .heuristic_service import HeuristicAnswerEngine, Intent
from .model_service import ModelService, clean_markdown
from .orchestrator_service import AnswerOrchestrator
from .privacy_service import mask_email, mask_phone, redact_client, redact_clients
from .safety_service import SafetyFilter, SafetyVerdict, ThreatCategory

__all__ = [
    "HeuristicAnswerEngine",
    "Intent",
    "ModelService",
    "clean_markdown",
    "AnswerOrchestrator",
    "mask_email",
    "mask_phone",
    "redact_client",
    "redact_clients",
    "SafetyFilter",
    "SafetyVerdict",
    "ThreatCategory",
]
