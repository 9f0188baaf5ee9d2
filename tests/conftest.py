"""
Shared fixtures for the Client Q&A Bot test suite.

Fixtures are built from the seeded demo dataset so tests see the same users,
clients and grants the application serves.
"""

import asyncio
import os
from datetime import datetime
from typing import List, Optional

# Settings are read at import time; point them at a throwaway store first.
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("MODEL_FORCE_FREE_TIER", "true")

import pytest

from clientqa.models.client import Client
from clientqa.models.user import User
from clientqa.repositories.seed_data import SEED_CLIENTS, SEED_GRANTS, SEED_TIMESTAMP, SEED_USERS
from clientqa.services.heuristic_service import HeuristicAnswerEngine
from clientqa.services.safety_service import SafetyFilter

SEEDED_AT = datetime.fromisoformat(SEED_TIMESTAMP)


def seeded_user(user_id: int) -> User:
    return User(id=user_id, created_at=SEEDED_AT, **SEED_USERS[user_id - 1])


def seeded_clients_for(user_id: int) -> List[Client]:
    """Clients granted to a user, ordered by name like the access store returns them."""
    clients = [
        Client(
            id=client_id,
            created_at=SEEDED_AT,
            last_contact=SEEDED_AT,
            access_level=level,
            assigned_at=SEEDED_AT,
            **SEED_CLIENTS[client_id - 1],
        )
        for grant_user, client_id, level in SEED_GRANTS
        if grant_user == user_id
    ]
    return sorted(clients, key=lambda c: c.name)


class StubModelClient:
    """Stands in for the generative model client."""

    def __init__(self, reply: str = "You have 6 clients.", delay: float = 0.0, error: Optional[Exception] = None):
        self.reply = reply
        self.delay = delay
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.reply

    async def ping(self) -> str:
        return await self.generate("Hi")


@pytest.fixture
def all_clients() -> List[Client]:
    """Every seeded client, without grant details."""
    return [Client(id=n, created_at=SEEDED_AT, **c) for n, c in enumerate(SEED_CLIENTS, start=1)]


@pytest.fixture
def user_one() -> User:
    return seeded_user(1)


@pytest.fixture
def user_one_clients() -> List[Client]:
    return seeded_clients_for(1)


@pytest.fixture
def user_four() -> User:
    return seeded_user(4)


@pytest.fixture
def user_four_clients() -> List[Client]:
    return seeded_clients_for(4)


@pytest.fixture
def safety_filter() -> SafetyFilter:
    return SafetyFilter()


@pytest.fixture
def engine(safety_filter) -> HeuristicAnswerEngine:
    return HeuristicAnswerEngine(safety_filter)
