"""
Tests for the SQLite access store.

Each test gets its own in-memory database seeded with the demo dataset.
"""

import pytest
import pytest_asyncio

from clientqa.clients.sqlite_client import SQLiteClient
from clientqa.config.settings import DatabaseSettings
from clientqa.models.client import AccessLevel
from clientqa.repositories.access_repository import AccessRepository, UserNotFoundError


@pytest_asyncio.fixture
async def repository():
    client = SQLiteClient(DatabaseSettings(path=":memory:"))
    repo = AccessRepository(client)
    await repo.initialize()
    yield repo
    await client.close()


class TestSeeding:
    """Schema creation and the demo dataset."""

    @pytest.mark.asyncio
    async def test_seeds_demo_dataset(self, repository):
        users = await repository.list_users()
        rows = await repository.sqlite_client.query("SELECT status, value FROM clients WHERE name = ?", ("Client 17",))
        counts = await repository.sqlite_client.query(
            "SELECT (SELECT COUNT(*) FROM clients) AS clients, (SELECT COUNT(*) FROM user_clients) AS grants"
        )

        assert len(users) == 5
        assert counts[0] == {"clients": 20, "grants": 29}
        assert rows == [{"status": "inactive", "value": 0}]

    @pytest.mark.asyncio
    async def test_seeding_runs_once(self, repository):
        await repository.initialize()

        assert len(await repository.list_users()) == 5

    @pytest.mark.asyncio
    async def test_skips_seeding_when_disabled(self):
        client = SQLiteClient(DatabaseSettings(path=":memory:"))
        repo = AccessRepository(client)

        await repo.initialize(seed_sample_data=False)

        assert await repo.list_users() == []
        await client.close()


class TestUsers:
    """User lookups."""

    @pytest.mark.asyncio
    async def test_users_ordered_by_name(self, repository):
        users = await repository.list_users()

        assert [u.name for u in users] == ["User 1", "User 2", "User 3", "User 4", "User 5"]
        assert users[0].role == "Manager"

    @pytest.mark.asyncio
    async def test_get_user(self, repository):
        user = await repository.get_user(3)

        assert user.name == "User 3"
        assert user.email == "user3@company.com"

    @pytest.mark.asyncio
    async def test_unknown_user(self, repository):
        with pytest.raises(UserNotFoundError):
            await repository.get_user(99)


class TestClientAccess:
    """Per-user client scoping."""

    @pytest.mark.asyncio
    async def test_accessible_clients(self, repository):
        clients = await repository.list_accessible_clients(1)

        assert [c.name for c in clients] == [
            "Client 1", "Client 13", "Client 16", "Client 19", "Client 3", "Client 5",
        ]
        levels = {c.name: c.access_level for c in clients}
        assert levels["Client 19"] == AccessLevel.READ
        assert levels["Client 1"] == AccessLevel.FULL

    @pytest.mark.asyncio
    async def test_accessible_clients_for_unknown_user(self, repository):
        with pytest.raises(UserNotFoundError):
            await repository.list_accessible_clients(99)

    @pytest.mark.asyncio
    async def test_scope(self, repository):
        scope = await repository.get_scope(4)

        assert scope.user.name == "User 4"
        assert len(scope.clients) == 5
        assert {g.client_id for g in scope.grants} == {3, 5, 11, 17, 20}

    @pytest.mark.asyncio
    async def test_search_is_scoped(self, repository):
        clients = await repository.search_clients(1, "Company 1")

        assert [c.name for c in clients] == ["Client 1", "Client 13", "Client 16", "Client 19"]
        assert await repository.search_clients(1, "Company 2") == []

    @pytest.mark.asyncio
    async def test_search_for_unknown_user(self, repository):
        with pytest.raises(UserNotFoundError):
            await repository.search_clients(99, "Company")
