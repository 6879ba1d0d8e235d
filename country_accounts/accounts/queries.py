"""All queries related to user accounts and their favorites.

Using the AccountQueries class as a repository over a single aiosqlite
connection that is opened and closed with the application lifespan.
"""

import asyncio
import logging
import sqlite3
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any

import aiosqlite
from aiosqlite import Connection

from country_accounts.errors import EmailTakenError, InternalError

from .models import StoredUser

LOGGER = logging.getLogger(__name__)


class AccountQueries:
    """Repository for user accounts and favorites."""

    CREATE_USERS_TABLE = """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'user',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """

    CREATE_FAVORITES_TABLE = """
        CREATE TABLE IF NOT EXISTS favorites (
            user_id TEXT NOT NULL,
            country_id TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (user_id, country_id),
            FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
        );
        """

    ENABLE_FOREIGN_KEYS = """PRAGMA foreign_keys = ON;"""

    ADD_USER = """
        INSERT INTO users (id, name, email, password_hash, role)
        VALUES (?, ?, ?, ?, ?)
        """

    GET_USER_BY_ID = """
        SELECT id, name, email, password_hash, role, created_at, updated_at
        FROM users WHERE id = ?
        """

    GET_USER_BY_EMAIL = """
        SELECT id, name, email, password_hash, role, created_at, updated_at
        FROM users WHERE email = ?
        """

    USER_EXISTS = """SELECT 1 FROM users WHERE id = ?"""

    UPDATE_USER = """
        UPDATE users SET
            name = COALESCE(?, name),
            email = COALESCE(?, email),
            password_hash = COALESCE(?, password_hash),
            updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
        """

    DELETE_USER = """
        DELETE FROM users WHERE id = ?;
        """

    LIST_FAVORITES = """
        SELECT country_id FROM favorites WHERE user_id = ? ORDER BY rowid
        """

    # insert-if-absent in one statement, so concurrent adds cannot lose writes
    ADD_FAVORITE = """
        INSERT OR IGNORE INTO favorites (user_id, country_id)
        SELECT ?, ? WHERE EXISTS (SELECT 1 FROM users WHERE id = ?)
        """

    REMOVE_FAVORITE = """
        DELETE FROM favorites WHERE user_id = ? AND country_id = ?
        """

    TOUCH_USER = """
        UPDATE users SET updated_at = CURRENT_TIMESTAMP WHERE id = ?
        """

    def __init__(self, database_path: str) -> None:
        """Create a repository for the database at ``database_path``.

        :param database_path: Path to the SQLite database file
        """
        self.database_path = database_path
        self._connection: Connection | None = None
        # every request shares one connection and so one sqlite transaction
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "AccountQueries":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def connection(self) -> Connection:
        """The open database connection.

        :raises InternalError: If the repository has not been opened
        """
        if self._connection is None:
            msg = "Credential store is not connected"
            raise InternalError(msg)
        return self._connection

    async def open(self) -> None:
        """Connect to the database and create tables if they do not exist."""
        self._connection = await aiosqlite.connect(self.database_path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.execute(AccountQueries.ENABLE_FOREIGN_KEYS)
        await self.initialize_tables()
        LOGGER.info("Credential store opened at %s", self.database_path)

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None
        LOGGER.info("Credential store closed")

    async def initialize_tables(self) -> None:
        """Create users and favorites tables if they do not exist."""
        db = self.connection
        try:
            await db.execute(AccountQueries.CREATE_USERS_TABLE)
            await db.execute(AccountQueries.CREATE_FAVORITES_TABLE)
            await db.commit()
        except sqlite3.Error as e:
            await db.rollback()
            LOGGER.error("Error initializing tables: %s", e)
            msg = "Failed to initialize credential store"
            raise InternalError(msg) from e

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[Connection]:
        """Hold the store lock for one transaction, committing it on success.

        :raises EmailTakenError: If a write would duplicate an email
        :raises InternalError: On any other database failure
        """
        async with self._lock:
            db = self.connection
            try:
                yield db
                await db.commit()
            except sqlite3.IntegrityError as e:
                await db.rollback()
                if "users.email" in str(e):
                    raise EmailTakenError from e
                LOGGER.error("Integrity error in credential store: %s", e)
                raise InternalError from e
            except sqlite3.Error as e:
                await db.rollback()
                LOGGER.error("Error writing to credential store: %s", e)
                raise InternalError from e
            except BaseException:
                await db.rollback()
                raise

    @staticmethod
    async def _execute(db: Connection, query: str, params: tuple[Any, ...]) -> int:
        async with db.execute(query, params) as cursor:
            return cursor.rowcount

    async def _write(self, query: str, params: tuple[Any, ...]) -> int:
        """Run a single write statement in its own transaction.

        :return: Number of rows changed
        """
        async with self._transaction() as db:
            return await self._execute(db, query, params)

    async def _fetch_one(self, query: str, params: tuple[Any, ...]) -> Any:
        try:
            async with self._lock, self.connection.execute(query, params) as cursor:
                return await cursor.fetchone()
        except sqlite3.Error as e:
            LOGGER.error("Error reading from credential store: %s", e)
            raise InternalError from e

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str,
    ) -> str:
        """Insert a new user with an empty favorites list.

        :param name: Display name
        :param email: Unique email
        :param password_hash: Digest produced by the password hasher
        :param role: Role tag to store
        :return: The id assigned to the new user
        :raises EmailTakenError: If the email is already registered
        """
        user_id = uuid.uuid4().hex
        await self._write(
            AccountQueries.ADD_USER,
            (user_id, name, email, password_hash, role),
        )
        return user_id

    async def get_user(self, user_id: str) -> StoredUser | None:
        """Load a user and its favorites by id.

        :param user_id: The user id
        :return: The stored user, or None if absent
        """
        row = await self._fetch_one(AccountQueries.GET_USER_BY_ID, (user_id,))
        if row is None:
            return None
        return await self._to_stored_user(row)

    async def get_user_by_email(self, email: str) -> StoredUser | None:
        """Load a user and its favorites by email.

        :param email: The email to look up
        :return: The stored user, or None if absent
        """
        row = await self._fetch_one(AccountQueries.GET_USER_BY_EMAIL, (email,))
        if row is None:
            return None
        return await self._to_stored_user(row)

    async def user_exists(self, user_id: str) -> bool:
        """Return whether a user with ``user_id`` exists."""
        return await self._fetch_one(AccountQueries.USER_EXISTS, (user_id,)) is not None

    async def update_user(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        password_hash: str | None = None,
    ) -> bool:
        """Overwrite the given fields, leaving the None ones untouched.

        :return: True if the user exists and was updated
        :raises EmailTakenError: If ``email`` belongs to another user
        """
        rowcount = await self._write(
            AccountQueries.UPDATE_USER,
            (name, email, password_hash, user_id),
        )
        return rowcount > 0

    async def delete_user(self, user_id: str) -> bool:
        """Delete the user, cascading to its favorites.

        :return: True if a user was deleted
        """
        return await self._write(AccountQueries.DELETE_USER, (user_id,)) > 0

    async def list_favorites(self, user_id: str) -> list[str]:
        """Return the user's favorites in insertion order."""
        try:
            async with (
                self._lock,
                self.connection.execute(
                    AccountQueries.LIST_FAVORITES,
                    (user_id,),
                ) as cursor,
            ):
                rows = await cursor.fetchall()
        except sqlite3.Error as e:
            LOGGER.error("Error listing favorites for %s: %s", user_id, e)
            raise InternalError from e
        return [row["country_id"] for row in rows]

    async def add_favorite(self, user_id: str, country_id: str) -> bool:
        """Add ``country_id`` to the user's favorites if it is absent.

        :return: True if the favorite was added, False if it was already
            present or the user does not exist
        """
        async with self._transaction() as db:
            added = await self._execute(
                db,
                self.ADD_FAVORITE,
                (user_id, country_id, user_id),
            )
            if added:
                await self._execute(db, self.TOUCH_USER, (user_id,))
        return added > 0

    async def remove_favorite(self, user_id: str, country_id: str) -> bool:
        """Remove ``country_id`` from the user's favorites if it is present.

        :return: True if the favorite was removed
        """
        async with self._transaction() as db:
            removed = await self._execute(
                db,
                self.REMOVE_FAVORITE,
                (user_id, country_id),
            )
            if removed:
                await self._execute(db, self.TOUCH_USER, (user_id,))
        return removed > 0

    async def _to_stored_user(self, row: aiosqlite.Row) -> StoredUser:
        favorites = await self.list_favorites(row["id"])
        return StoredUser(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=row["role"],
            favorites=favorites,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
