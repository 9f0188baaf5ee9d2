"""
Safety filter for inbound queries and outbound model answers.

Classification is a pure function of the text: case-insensitive substring
matching against curated pattern lists, plus length and character-set checks
for inbound queries. The only side effect is a structured log event when
something is flagged.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple
import structlog

logger = structlog.get_logger(__name__)


MAX_QUERY_LENGTH = 500

SQL_PATTERNS: Tuple[str, ...] = (
    "select ", "insert ", "update ", "delete ", "drop ", "create ", "alter ",
    "union ", "exec ", "execute ", "script ", "--", ";", "/*", "*/",
    "information_schema", "sys.", "master.", "msdb.",
)

INJECTION_PATTERNS: Tuple[str, ...] = (
    "ignore previous", "ignore all", "system prompt", "you are now",
    "new instructions", "override", "jailbreak", "role play",
    "pretend", "act as", "simulate", "base64", "encode", "decode",
    "api key", "secret", "password", "token", "credential",
    "tell me your", "what is your", "reveal your", "show me your",
    "forget everything", "disregard", "step 1:", "step one:",
)

SYSTEM_PATTERNS: Tuple[str, ...] = (
    "console.log", "eval(", "function(", "javascript:", "script>", "<script",
    "<iframe", "<img", "onerror=", "onclick=", "onload=",
    "prompt(", "alert(", "confirm(", "document.",
    "window.", "process.env", "require(", "import ",
)

RESPONSE_PATTERNS: Tuple[str, ...] = (
    "api key", "secret", "password", "token", "credential",
    "system prompt", "instruction", "gemini", "openai",
    "database schema", "table structure", "sql query",
    "step 1:", "step one:", "step 2:", "step two:",
)

# Anything outside printable ASCII and whitespace
_UNEXPECTED_CHARACTERS = re.compile(r"[^\x20-\x7E\s]")


class ThreatCategory(str, Enum):
    """Why a piece of text was flagged."""

    SQL = "sql_injection"
    PROMPT_INJECTION = "prompt_injection"
    SYSTEM = "system_query"
    LENGTH = "excessive_length"
    ENCODING = "non_ascii"
    LEAKAGE = "sensitive_leakage"
    QUERY_TEXT = "query_text"


@dataclass(frozen=True)
class SafetyVerdict:
    """Outcome of classifying one piece of text."""

    safe: bool
    category: Optional[ThreatCategory] = None
    pattern: Optional[str] = None

    @property
    def unsafe(self) -> bool:
        return not self.safe


SAFE = SafetyVerdict(safe=True)


def _first_match(lowered: str, patterns: Sequence[str]) -> Optional[str]:
    return next((p for p in patterns if p in lowered), None)


class SafetyFilter:
    """Stateless classifier for queries and model answers."""

    def __init__(self, max_query_length: int = MAX_QUERY_LENGTH):
        self.max_query_length = max_query_length
        self._query_checks = (
            (ThreatCategory.SQL, SQL_PATTERNS),
            (ThreatCategory.PROMPT_INJECTION, INJECTION_PATTERNS),
            (ThreatCategory.SYSTEM, SYSTEM_PATTERNS),
        )

    def classify_query(self, query: str) -> SafetyVerdict:
        """Classify inbound query text."""
        lowered = query.lower()

        for category, patterns in self._query_checks:
            pattern = _first_match(lowered, patterns)
            if pattern:
                return self._flag(category, pattern, source="query")

        if len(query) > self.max_query_length:
            return self._flag(ThreatCategory.LENGTH, str(len(query)), source="query")

        match = _UNEXPECTED_CHARACTERS.search(query)
        if match:
            return self._flag(ThreatCategory.ENCODING, repr(match.group()), source="query")

        return SAFE

    def classify_response(self, text: str) -> SafetyVerdict:
        """
        Classify outbound model text.

        The select+from rule also fires on harmless prose such as
        "selected from 5 industries"; it is kept as a known false-positive
        source.
        """
        lowered = text.lower()

        pattern = _first_match(lowered, RESPONSE_PATTERNS)
        if pattern:
            return self._flag(ThreatCategory.LEAKAGE, pattern, source="response")

        if "select" in lowered and "from" in lowered:
            return self._flag(ThreatCategory.QUERY_TEXT, "select+from", source="response")

        return SAFE

    def is_threat(self, query: str) -> bool:
        return self.classify_query(query).unsafe

    def is_response_suspicious(self, text: str) -> bool:
        return self.classify_response(text).unsafe

    @staticmethod
    def _flag(category: ThreatCategory, pattern: str, source: str) -> SafetyVerdict:
        logger.warning(
            "Unsafe text detected",
            source=source,
            category=category.value,
            pattern=pattern,
        )
        return SafetyVerdict(safe=False, category=category, pattern=pattern)
