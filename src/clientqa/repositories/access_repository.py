"""
Access repository for users, clients and access grants.

This repository owns the SQLite schema and answers the two questions the
answer pipeline depends on: which users exist, and which clients a given user
may see.
"""

from typing import List
import structlog

from clientqa.clients.sqlite_client import SQLiteClient
from clientqa.models.client import AccessGrant, Client
from clientqa.models.rbac import ClientScope
from clientqa.models.user import User
from clientqa.repositories.seed_data import SEED_CLIENTS, SEED_GRANTS, SEED_TIMESTAMP, SEED_USERS

logger = structlog.get_logger(__name__)


class UserNotFoundError(LookupError):
    """The requested user does not exist."""

    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        role TEXT DEFAULT 'User',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS clients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        phone TEXT,
        company TEXT,
        industry TEXT,
        status TEXT DEFAULT 'active',
        value INTEGER DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        last_contact DATETIME
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_clients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        client_id INTEGER NOT NULL,
        access_level TEXT DEFAULT 'read',
        assigned_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (user_id) REFERENCES users (id),
        FOREIGN KEY (client_id) REFERENCES clients (id),
        UNIQUE(user_id, client_id)
    )
    """,
]


class AccessRepository:
    """Repository for users and their client access grants."""

    def __init__(self, sqlite_client: SQLiteClient):
        """
        Initialize the access repository.

        Args:
            sqlite_client: SQLite client
        """
        self.sqlite_client = sqlite_client

    async def initialize(self, seed_sample_data: bool = True) -> None:
        """Create tables and, when empty, insert the demo dataset."""
        for statement in SCHEMA:
            await self.sqlite_client.execute(statement)

        if seed_sample_data:
            await self._seed()

        logger.info("Access repository initialized", seeded=seed_sample_data)

    async def _seed(self) -> None:
        rows = await self.sqlite_client.query("SELECT COUNT(*) AS count FROM users")
        if rows[0]["count"] > 0:
            logger.info("Sample data already exists")
            return

        await self.sqlite_client.executemany(
            "INSERT INTO users (name, email, role, created_at) VALUES (?, ?, ?, ?)",
            [(u["name"], u["email"], u["role"], SEED_TIMESTAMP) for u in SEED_USERS],
        )
        await self.sqlite_client.executemany(
            "INSERT INTO clients (name, email, phone, company, industry, status, value, last_contact, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (
                    c["name"], c["email"], c["phone"], c["company"], c["industry"],
                    c["status"], c["value"], SEED_TIMESTAMP, SEED_TIMESTAMP,
                )
                for c in SEED_CLIENTS
            ],
        )
        await self.sqlite_client.executemany(
            "INSERT INTO user_clients (user_id, client_id, access_level, assigned_at) VALUES (?, ?, ?, ?)",
            [(user_id, client_id, level, SEED_TIMESTAMP) for user_id, client_id, level in SEED_GRANTS],
        )

        logger.info(
            "Inserted sample data",
            users=len(SEED_USERS),
            clients=len(SEED_CLIENTS),
            grants=len(SEED_GRANTS),
        )

    async def list_users(self) -> List[User]:
        """All known users, ordered by name."""
        rows = await self.sqlite_client.query("SELECT * FROM users ORDER BY name")
        return [User(**row) for row in rows]

    async def get_user(self, user_id: int) -> User:
        rows = await self.sqlite_client.query("SELECT * FROM users WHERE id = ?", (user_id,))
        if not rows:
            raise UserNotFoundError(user_id)
        return User(**rows[0])

    async def list_accessible_clients(self, user_id: int) -> List[Client]:
        """
        Clients a user may see, ordered by name.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        await self.get_user(user_id)
        rows = await self.sqlite_client.query(
            """
            SELECT c.*, uc.access_level, uc.assigned_at
            FROM clients c
            JOIN user_clients uc ON c.id = uc.client_id
            WHERE uc.user_id = ?
            ORDER BY c.name
            """,
            (user_id,),
        )
        return [Client(**row) for row in rows]

    async def list_grants(self, user_id: int) -> List[AccessGrant]:
        rows = await self.sqlite_client.query(
            "SELECT user_id, client_id, access_level, assigned_at FROM user_clients WHERE user_id = ?",
            (user_id,),
        )
        return [AccessGrant(**row) for row in rows]

    async def get_scope(self, user_id: int) -> ClientScope:
        """Resolve the user and their visible clients for one query."""
        user = await self.get_user(user_id)
        clients = await self.list_accessible_clients(user_id)
        grants = await self.list_grants(user_id)
        logger.debug("Resolved client scope", user_id=user_id, client_count=len(clients))
        return ClientScope(user=user, clients=clients, grants=grants)

    async def search_clients(self, user_id: int, term: str = "") -> List[Client]:
        """Clients visible to a user whose name, email or company contains `term`."""
        await self.get_user(user_id)
        pattern = f"%{term}%"
        rows = await self.sqlite_client.query(
            """
            SELECT c.*, uc.access_level, uc.assigned_at
            FROM clients c
            JOIN user_clients uc ON c.id = uc.client_id
            WHERE uc.user_id = ?
            AND (c.name LIKE ? OR c.email LIKE ? OR c.company LIKE ?)
            ORDER BY c.name
            """,
            (user_id, pattern, pattern, pattern),
        )
        return [Client(**row) for row in rows]
