"""
Heuristic answer engine.

Deterministic fallback used when no generative model is configured or the
model call fails. Queries are resolved against an ordered table of intent
rules; the first rule whose predicate matches produces the answer from the
user's scoped clients.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import structlog

from clientqa.models.client import Client
from clientqa.models.result import INVALID_ANSWER
from clientqa.models.user import User
from clientqa.services.privacy_service import mask_email, mask_phone, redact_clients
from clientqa.services.safety_service import SafetyFilter
from clientqa.utils.formatting import display, format_date, format_money

logger = structlog.get_logger(__name__)


CONTACT_PREVIEW_LIMIT = 5
PRIVACY_NOTICE = "*Contact details are masked for privacy protection."

_COMPANY_REF = re.compile(r"company\s*(\d+)", re.IGNORECASE)
_CLIENT_REF = re.compile(r"client\s*(\d+)", re.IGNORECASE)
_WORD_SPLIT = re.compile(r"[^\w&]+")


class Intent(str, Enum):
    """Query categories the engine recognizes, in resolution order."""

    SECURITY = "security"
    ASSISTANT_IDENTITY = "assistant_identity"
    USER_IDENTITY = "user_identity"
    CONTACT = "contact"
    INDUSTRY = "industry"
    VALUE = "value"
    COUNT = "count"
    RECENCY = "recency"
    LISTING = "listing"
    STATUS = "status"
    REFERENCES = "references"
    SEARCH = "search"


@dataclass(frozen=True)
class QueryContext:
    """Everything a rule may look at for one query."""

    query: str
    lowered: str
    user: Optional[User]
    clients: Tuple[Client, ...]

    @property
    def count(self) -> int:
        return len(self.clients)


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    matches: Callable[[QueryContext], bool]
    handle: Callable[[QueryContext], str]


def contains_any(*keywords: str) -> Callable[[QueryContext], bool]:
    """Predicate matching when any keyword occurs in the lowered query."""
    return lambda ctx: any(k in ctx.lowered for k in keywords)


def company_refs(query: str) -> List[str]:
    """Deduplicated company numbers mentioned in a query, in order."""
    return list(dict.fromkeys(_COMPANY_REF.findall(query)))


def client_refs(query: str) -> List[str]:
    """Deduplicated client numbers mentioned in a query, in order."""
    return list(dict.fromkeys(_CLIENT_REF.findall(query)))


def find_company(clients: Sequence[Client], number: str) -> Optional[Client]:
    # Relies on the "Company N" naming convention of the client data
    return next((c for c in clients if c.company == f"Company {number}"), None)


def find_client(clients: Sequence[Client], number: str) -> Optional[Client]:
    return next((c for c in clients if c.name == f"Client {number}"), None)


def _value(client: Client) -> int:
    return client.value or 0


class HeuristicAnswerEngine:
    """Rule-based answer synthesis over a scoped client list."""

    def __init__(self, safety_filter: Optional[SafetyFilter] = None):
        self.safety_filter = safety_filter or SafetyFilter()
        self.rules: List[IntentRule] = [
            IntentRule(Intent.SECURITY, self._is_unsafe, lambda ctx: INVALID_ANSWER),
            IntentRule(
                Intent.ASSISTANT_IDENTITY,
                contains_any("what are you", "who are you", "are you ai", "chatbot"),
                self._answer_assistant_identity,
            ),
            IntentRule(
                Intent.USER_IDENTITY,
                contains_any("which user", "who am i", "current user", "my user"),
                self._answer_user_identity,
            ),
            IntentRule(
                Intent.CONTACT,
                contains_any("contact", "phone", "email", "call", "reach"),
                self._answer_contact,
            ),
            IntentRule(Intent.INDUSTRY, contains_any("sector", "industry"), self._answer_industry),
            IntentRule(Intent.VALUE, contains_any("value", "worth", "money"), self._answer_value),
            IntentRule(Intent.COUNT, contains_any("how many", "count"), self._answer_count),
            IntentRule(Intent.RECENCY, contains_any("recent", "latest", "newest"), self._answer_recency),
            IntentRule(Intent.LISTING, contains_any("all", "list"), self._answer_listing),
            IntentRule(Intent.STATUS, contains_any("active", "inactive"), self._answer_status),
            IntentRule(Intent.REFERENCES, self._has_references, self._answer_references),
            IntentRule(Intent.SEARCH, lambda ctx: True, self._answer_search),
        ]

    def resolve_intent(self, query: str) -> Intent:
        """Return the intent the rule table picks for a query."""
        return self._match(self._context(query, None, ())).intent

    def answer(self, query: str, user: Optional[User], clients: Sequence[Client]) -> str:
        """Answer a query from the scoped clients. Never raises, never empty."""
        ctx = self._context(query, user, clients)
        rule = self._match(ctx)

        try:
            text = rule.handle(ctx)
        except Exception as e:
            logger.error(
                "Heuristic handler failed",
                intent=rule.intent.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            text = ""

        if not text:
            text = self._help_message(ctx)

        logger.debug("Heuristic answer produced", intent=rule.intent.value, client_count=ctx.count)
        return text

    @staticmethod
    def _context(query: str, user: Optional[User], clients: Sequence[Client]) -> QueryContext:
        return QueryContext(query=query, lowered=query.lower(), user=user, clients=tuple(clients))

    def _match(self, ctx: QueryContext) -> IntentRule:
        return next(rule for rule in self.rules if rule.matches(ctx))

    # Predicates

    def _is_unsafe(self, ctx: QueryContext) -> bool:
        return self.safety_filter.is_threat(ctx.query)

    @staticmethod
    def _has_references(ctx: QueryContext) -> bool:
        return bool(_COMPANY_REF.search(ctx.query) or _CLIENT_REF.search(ctx.query))

    # Handlers

    @staticmethod
    def _answer_assistant_identity(ctx: QueryContext) -> str:
        return (
            "I'm an AI assistant designed to help you analyze your client database. "
            f"I can answer questions about your {ctx.count} accessible clients, their industries, "
            "values, and contact information. What would you like to know about your clients?"
        )

    @staticmethod
    def _answer_user_identity(ctx: QueryContext) -> str:
        user = ctx.user
        if user is None:
            return ""
        return (
            f"You are currently logged in as {user.name} ({user.email}). "
            f"You have access to {ctx.count} clients with {user.role or 'standard'} access level."
        )

    def _answer_contact(self, ctx: QueryContext) -> str:
        company = _COMPANY_REF.search(ctx.query)
        if company:
            number = company.group(1)
            client = find_company(ctx.clients, number)
            if client is None:
                return f"Company {number} is not in your accessible clients list."
            return (
                f"Contact info for Company {number} ({client.name}):\n"
                f"Phone: {mask_phone(client.phone)}\n"
                f"Email: {mask_email(client.email)}\n\n"
                f"{PRIVACY_NOTICE}"
            )

        named = _CLIENT_REF.search(ctx.query)
        if named:
            number = named.group(1)
            client = find_client(ctx.clients, number)
            if client is None:
                return f"Client {number} is not in your accessible clients list."
            return (
                f"Contact info for {client.name} at {display(client.company)}:\n"
                f"Phone: {mask_phone(client.phone)}\n"
                f"Email: {mask_email(client.email)}\n\n"
                f"{PRIVACY_NOTICE}"
            )

        preview = redact_clients(ctx.clients[:CONTACT_PREVIEW_LIMIT])
        lines = "\n".join(
            f"{c.name} ({display(c.company)}): Phone: {c.phone}, Email: {c.email}" for c in preview
        )
        return (
            f"Contact information for your clients (first {CONTACT_PREVIEW_LIMIT} shown):\n{lines}\n\n"
            f"{PRIVACY_NOTICE} Total clients: {ctx.count}"
        )

    def _answer_industry(self, ctx: QueryContext) -> str:
        company = _COMPANY_REF.search(ctx.query)
        if company:
            number = company.group(1)
            client = find_company(ctx.clients, number)
            if client is None:
                companies = ", ".join(display(c.company) for c in ctx.clients)
                return (
                    f"Company {number} is not in your accessible clients list. "
                    f"You have access to: {companies}."
                )
            return (
                f"Company {number} ({client.name}) operates in the {display(client.industry)} sector "
                f"with a client value of {format_money(client.value)}."
            )

        named = _CLIENT_REF.search(ctx.query)
        if named:
            number = named.group(1)
            client = find_client(ctx.clients, number)
            if client is None:
                return f"Client {number} is not in your accessible clients list."
            return (
                f"Client {number} works at {display(client.company)} in the {display(client.industry)} industry "
                f"(Status: {client.status}, Value: {format_money(client.value)})."
            )

        breakdown: Dict[str, int] = {}
        for client in ctx.clients:
            industry = display(client.industry)
            breakdown[industry] = breakdown.get(industry, 0) + 1
        parts = ", ".join(f"{industry} ({count})" for industry, count in breakdown.items())
        return f"Your {ctx.count} clients span {len(breakdown)} industries: {parts}."

    @staticmethod
    def _answer_value(ctx: QueryContext) -> str:
        total = sum(_value(c) for c in ctx.clients)
        if not ctx.clients:
            return f"Your total portfolio value is {format_money(total)} across 0 clients."

        top = max(ctx.clients, key=_value)
        if any(word in ctx.lowered for word in ("highest", "most", "biggest")):
            return (
                f"Your highest value client is {top.name} ({display(top.company)}) "
                f"worth {format_money(_value(top))}."
            )
        return (
            f"Your total portfolio value is {format_money(total)} across {ctx.count} clients. "
            f"Highest value: {top.name} ({format_money(_value(top))})."
        )

    @staticmethod
    def _answer_count(ctx: QueryContext) -> str:
        if "active" in ctx.lowered:
            active = sum(1 for c in ctx.clients if c.is_active)
            return f"You have {active} active clients out of {ctx.count} total clients."
        names = ", ".join(c.name for c in ctx.clients)
        return f"You have access to {ctx.count} clients: {names}."

    @staticmethod
    def _answer_recency(ctx: QueryContext) -> str:
        dated = [c for c in ctx.clients if c.created_at is not None]
        if not dated:
            return "No clients found."
        recent = max(dated, key=lambda c: c.created_at)
        return (
            f"Your most recent client is {recent.name} from {display(recent.company)} "
            f"({display(recent.industry)}), added on {format_date(recent.created_at)}."
        )

    @staticmethod
    def _client_line(client: Client) -> str:
        return (
            f"{client.name} - {display(client.company)} "
            f"({display(client.industry)}, {format_money(client.value)})"
        )

    def _answer_listing(self, ctx: QueryContext) -> str:
        lines = "\n".join(self._client_line(c) for c in ctx.clients)
        return f"Your {ctx.count} accessible clients:\n{lines}"

    @staticmethod
    def _answer_status(ctx: QueryContext) -> str:
        active = sum(1 for c in ctx.clients if c.is_active)
        return f"You have {active} active clients and {ctx.count - active} inactive clients."

    @staticmethod
    def _answer_references(ctx: QueryContext) -> str:
        sections = []

        companies = company_refs(ctx.query)
        if companies:
            infos = []
            for number in companies:
                client = find_company(ctx.clients, number)
                if client is None:
                    infos.append(f"Company {number}: Not accessible to you")
                else:
                    infos.append(
                        f"Company {number}: {client.name} operates in {display(client.industry)} sector "
                        f"with {format_money(client.value)} value (Status: {client.status})"
                    )
            sections.append("Here's information about the requested companies:\n" + "\n".join(infos))

        clients = client_refs(ctx.query)
        if clients:
            infos = []
            for number in clients:
                client = find_client(ctx.clients, number)
                if client is None:
                    infos.append(f"Client {number}: Not accessible to you")
                else:
                    infos.append(
                        f"Client {number}: Works at {display(client.company)} in {display(client.industry)} "
                        f"industry (Value: {format_money(client.value)}, Status: {client.status})"
                    )
            header = "Client details:" if sections else "Here's information about the requested clients:"
            sections.append(header + "\n" + "\n".join(infos))

        return "\n\n".join(sections)

    def _answer_search(self, ctx: QueryContext) -> str:
        terms = [word.lower() for word in _WORD_SPLIT.split(ctx.query) if len(word) > 2]

        def matches(client: Client) -> bool:
            fields = (client.name, client.company or "", client.industry or "")
            return any(term in field.lower() for term in terms for field in fields)

        found = [c for c in ctx.clients if matches(c)]
        if not found:
            return self._help_message(ctx)

        lines = "\n".join(self._client_line(c) for c in found)
        return f"Found {len(found)} matching client(s):\n{lines}"

    @staticmethod
    def _help_message(ctx: QueryContext) -> str:
        names = ", ".join(display(c.name) for c in ctx.clients)
        return (
            f"I found {ctx.count} clients in your access list. You can ask about:\n"
            '- Industries/sectors: "what industry is company 10?"\n'
            '- Client values: "who is my highest value client?"\n'
            '- Client counts: "how many active clients do I have?"\n'
            '- Recent clients: "who is my newest client?"\n'
            '- Specific searches: "show me technology clients"\n\n'
            f"Your clients: {names}."
        )
