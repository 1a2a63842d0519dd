"""User repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from cloudfire.database import run_in_store

logger = get_logger(__name__)

_USER_COLUMNS = """user_id, username, password_hash, email, role, plan, storage_used,
                   storage_limit, is_active, api_key, created_at"""


@dataclass
class User:
    user_id: str
    username: str
    password_hash: str
    email: str
    role: str
    plan: str
    storage_used: int
    storage_limit: int
    is_active: bool
    created_at: datetime
    api_key: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _row_to_user(row) -> User:
    return User(
        user_id=row["user_id"],
        username=row["username"],
        password_hash=row["password_hash"],
        email=row["email"],
        role=row["role"],
        plan=row["plan"],
        storage_used=row["storage_used"],
        storage_limit=row["storage_limit"],
        is_active=bool(row["is_active"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        api_key=row["api_key"],
    )


class UserRepository:
    @staticmethod
    async def create_user(user: User) -> User:
        logger.debug(f"Creating user: {user.username} [user_id={user.user_id}]")

        def _insert(conn):
            conn.execute(
                f"""
                INSERT INTO users ({_USER_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (user.user_id, user.username, user.password_hash, user.email, user.role,
                 user.plan, user.storage_used, user.storage_limit, int(user.is_active),
                 user.api_key, user.created_at.isoformat())
            )

        await run_in_store(_insert)
        logger.info(f"User created successfully: {user.username} [user_id={user.user_id}]")
        return user

    @staticmethod
    async def get_by_username(username: str) -> Optional[User]:
        logger.debug(f"Fetching user by username: {username}")

        def _select(conn):
            return conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?", (username,)
            ).fetchone()

        row = await run_in_store(_select)
        if row is None:
            logger.debug(f"User not found: {username}")
            return None
        return _row_to_user(row)

    @staticmethod
    async def get_by_user_id(user_id: str) -> Optional[User]:
        logger.debug(f"Fetching user by user_id: {user_id}")

        def _select(conn):
            return conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = ?", (user_id,)
            ).fetchone()

        row = await run_in_store(_select)
        if row is None:
            logger.debug(f"User not found: {user_id}")
            return None
        return _row_to_user(row)

    @staticmethod
    async def get_by_api_key(api_key: str) -> Optional[User]:
        logger.debug("Fetching user by API key")

        def _select(conn):
            return conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE api_key = ?", (api_key,)
            ).fetchone()

        row = await run_in_store(_select)
        if row is None:
            logger.debug("User not found for provided API key")
            return None
        return _row_to_user(row)

    @staticmethod
    async def get_all_users() -> List[User]:
        logger.debug("Fetching all users")

        def _select(conn):
            return conn.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY rowid").fetchall()

        rows = await run_in_store(_select)
        users = [_row_to_user(row) for row in rows]
        logger.debug(f"Fetched {len(users)} users")
        return users

    @staticmethod
    async def count_users() -> int:
        return await run_in_store(lambda conn: conn.execute("SELECT COUNT(*) FROM users").fetchone()[0])

    @staticmethod
    async def update_user(user: User) -> Optional[User]:
        """
        Write the profile fields of the record keyed by username.

        storage_used and api_key are left alone; they only change through
        increment_storage_used, set_storage_used and update_api_key.

        Returns:
            The stored record after the write, or None if no such user exists
        """
        def _update(conn):
            cursor = conn.execute(
                """
                UPDATE users
                SET password_hash = ?, email = ?, role = ?, plan = ?,
                    storage_limit = ?, is_active = ?
                WHERE username = ?
                """,
                (user.password_hash, user.email, user.role, user.plan,
                 user.storage_limit, int(user.is_active), user.username)
            )
            if cursor.rowcount == 0:
                return None
            return conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?", (user.username,)
            ).fetchone()

        row = await run_in_store(_update, immediate=True)
        if row is None:
            return None
        logger.info(f"User updated: {user.username} [user_id={user.user_id}]")
        return _row_to_user(row)

    @staticmethod
    async def update_api_key(user_id: str, api_key: str) -> None:
        logger.debug(f"Updating API key [user_id={user_id}]")

        def _update(conn):
            conn.execute("UPDATE users SET api_key = ? WHERE user_id = ?", (api_key, user_id))

        await run_in_store(_update)

    @staticmethod
    async def increment_storage_used(user_id: str, delta: int) -> Optional[int]:
        """
        Add delta to storage_used in one statement.

        Returns:
            The new storage_used, or None if the user does not exist
        """
        def _increment(conn):
            cursor = conn.execute(
                "UPDATE users SET storage_used = storage_used + ? WHERE user_id = ?",
                (delta, user_id)
            )
            if cursor.rowcount == 0:
                return None
            return conn.execute(
                "SELECT storage_used FROM users WHERE user_id = ?", (user_id,)
            ).fetchone()[0]

        return await run_in_store(_increment, immediate=True)

    @staticmethod
    async def set_storage_used(user_id: str, storage_used: int) -> bool:
        def _update(conn):
            cursor = conn.execute(
                "UPDATE users SET storage_used = ? WHERE user_id = ?", (storage_used, user_id)
            )
            return cursor.rowcount > 0

        return await run_in_store(_update)

    @staticmethod
    async def delete_by_username(username: str) -> bool:
        def _delete(conn):
            return conn.execute("DELETE FROM users WHERE username = ?", (username,)).rowcount > 0

        deleted = await run_in_store(_delete)
        if deleted:
            logger.info(f"User deleted: {username}")
        return deleted
